"""
Challenge session: camera on -> fetch challenge -> (load model) -> detect -> submit.

Phases:
  IDLE          camera off, no polling
  INITIALIZING  fetching a challenge, loading the detector for object challenges
  DETECTING     polling loop active (one tick per frame boundary)
  SUBMITTING    target found, reporting it to the backend
  ERROR         initialise failed; camera flag stays on, no loop. stop() then start() to retry

Every transition replaces `self.state` with a new frozen SessionState.
In-flight awaits are never aborted; a generation counter lets their results
be dropped once the session has moved on (stop, restart, close).
"""
from dataclasses import replace
from typing import Callable, Optional

from magic_lens import config
from magic_lens.adapters.vision.colors import is_color_match
from magic_lens.adapters.vision.object_detector import matches_target
from magic_lens.adapters.vision.sampler import average_color_from_frame
from magic_lens.orchestrator.contracts import (
    Challenge, SessionPhase, SessionState, Sticker,
)
from magic_lens.orchestrator.errors import GameError, ModelLoadError, NotFound
from magic_lens.orchestrator.scheduler import AsyncioFrameScheduler, FrameScheduler


class ChallengeSession:
    def __init__(self, client, camera, status_store, detector=None, user_id: str | None = None,
                 scheduler: FrameScheduler | None = None, audio=None,
                 on_sticker_unlocked: Callable[[Sticker], None] | None = None,
                 sample_size: int | None = None, confidence_threshold: float | None = None):
        self.client = client
        self.camera = camera
        self.status = status_store
        self.detector = detector
        self.user_id = user_id
        self.scheduler = scheduler or AsyncioFrameScheduler()
        self.audio = audio
        self.on_sticker_unlocked = on_sticker_unlocked
        self.sample_size = sample_size or config.CENTER_SAMPLE_SIZE
        self.confidence_threshold = (
            config.OBJECT_CONFIDENCE_THRESHOLD if confidence_threshold is None else confidence_threshold
        )

        self.state = SessionState()
        self._generation = 0
        self._frame_handle = None

    def snapshot(self) -> SessionState:
        return self.state

    def _set(self, **changes):
        self.state = replace(self.state, **changes)

    def _is_current(self, gen: int) -> bool:
        return gen == self._generation and self.state.camera_enabled

    # ── Public actions ──────────────────────────────────────────────────────

    async def start(self) -> bool:
        """Idle -> Initializing -> Detecting. Returns True once the loop is running."""
        if self.state.camera_enabled or self.state.is_submitting:
            self.status.log(f"session: start ignored (phase={self.state.phase.value})")
            return False

        self._generation += 1
        gen = self._generation
        self.state = SessionState(phase=SessionPhase.INITIALIZING, camera_enabled=True)
        self.status.success_message = ""
        self.status.last_error = None
        self.status.set_message("Starting game. Getting one challenge...")
        self.status.show_toast("Game started. Find this one target.")
        self.status.log("session: start")

        await self._initialize(gen)
        return self._is_current(gen) and self.state.loop_active

    def stop(self) -> bool:
        if self.state.is_submitting:
            self.status.log("session: stop ignored (submitting)")
            return False
        was_enabled = self.state.camera_enabled
        self._generation += 1
        self._stop_loop()
        self._set(phase=SessionPhase.IDLE, camera_enabled=False, is_loading_model=False)
        self.camera.release()
        if was_enabled:
            self.status.set_message("Game paused. Tap Start Game to continue.")
            self.status.show_toast("Game paused.")
            self.status.log("session: stop")
        return was_enabled

    async def new_challenge(self) -> Optional[Challenge]:
        if self.state.camera_enabled:
            self.status.show_toast("Finish this game first, or stop camera.")
            return None
        if self.state.is_submitting:
            return None
        try:
            return await self._fetch_challenge(for_active_game=False, gen=self._generation)
        except Exception as e:
            self.status.last_error = getattr(e, "code", type(e).__name__)
            self.status.log(f"session: new_challenge failed {type(e).__name__}: {e}")
            self.status.set_message("Could not load challenge.")
            return None

    def retry_detection(self) -> bool:
        """Resume a loop that a tick error paused."""
        st = self.state
        if st.phase is not SessionPhase.DETECTING or st.loop_active or not st.can_poll:
            return False
        self.status.set_message(st.challenge.prompt)
        self.status.log("session: retry detection")
        self._start_loop(self._generation)
        return True

    def close(self):
        """Component teardown: cancel the loop and drop any late results."""
        self._generation += 1
        self._stop_loop()
        if self.state.camera_enabled:
            self._set(phase=SessionPhase.IDLE, camera_enabled=False)
        self.camera.release()
        self.status.log("session: closed")

    async def submit_found(self) -> Optional[Sticker]:
        challenge = self.state.challenge
        if challenge is None or self.state.is_submitting:
            return None

        # optimistic: camera off and success shown before the server confirms
        self._stop_loop()
        self._set(phase=SessionPhase.SUBMITTING, is_submitting=True, camera_enabled=False)
        self.camera.release()
        target = challenge.target_value
        self.status.set_message(f"Success! You found {target}. Tap Start Game to play again.")
        self.status.show_toast("Success! Game finished.")
        self.status.success_message = f"Great job! You found {target}. Sticker unlocked."
        self.status.log(f"session: found challenge={challenge.id} target={target}")

        sticker = None
        try:
            if self.user_id:
                sticker = await self.client.submit_found(self.user_id, challenge.id)
                self.status.log(f"session: unlocked {sticker.animal_name}")
                self._notify_unlocked(sticker)
            if self.audio is not None:
                self.audio.play_success()
        except GameError as e:
            # server state is authoritative; the local success framing stays
            self.status.last_error = e.code
            self.status.log(f"session: submit failed {type(e).__name__}: {e} (unlock unconfirmed)")
        finally:
            self._set(phase=SessionPhase.IDLE, is_submitting=False)
        return sticker

    def _notify_unlocked(self, sticker: Sticker):
        if self.on_sticker_unlocked is None:
            return
        try:
            self.on_sticker_unlocked(sticker)
        except Exception as e:
            # the unlock is already confirmed server-side; the round still completes
            self.status.log(f"session: on_sticker_unlocked failed {type(e).__name__}: {e}")

    # ── Initialise ──────────────────────────────────────────────────────────

    async def _initialize(self, gen: int):
        try:
            challenge = await self._fetch_challenge(for_active_game=True, gen=gen)
            if challenge is None:
                return
            if challenge.type == "object":
                await self._ensure_model(gen)
        except Exception as e:
            if not self._is_current(gen):
                return
            self.status.last_error = getattr(e, "code", type(e).__name__)
            self.status.log(f"session: initialize failed {type(e).__name__}: {e}")
            self._set(phase=SessionPhase.ERROR, loop_active=False)
            if isinstance(e, NotFound):
                self.status.set_message("No new challenges left. Tap Stop, then Start Game to try again.")
            else:
                self.status.set_message("Could not initialize camera or model.")
            return

        if not self._is_current(gen):
            self.status.log("session: initialize finished after stop, discarded")
            return
        self._set(phase=SessionPhase.DETECTING)
        self._start_loop(gen)

    async def _fetch_challenge(self, for_active_game: bool, gen: int) -> Optional[Challenge]:
        challenge = await self.client.fetch_challenge(self.user_id)
        if gen != self._generation:
            self.status.log(f"session: stale challenge {challenge.id} discarded")
            return None

        self._set(challenge=challenge, last_sample=None)
        self.status.log(f"session: challenge id={challenge.id} type={challenge.type} target={challenge.target_value}")
        if for_active_game:
            self.status.set_message(challenge.prompt)
        else:
            self.status.set_message(f"Ready: {challenge.prompt} Tap Start Game.")
        if self.audio is not None:
            self.audio.play_prompt(challenge.audio_prompt_url)
        return challenge

    async def _ensure_model(self, gen: int):
        if self.detector is None:
            raise ModelLoadError("no object detector configured")
        self._set(is_loading_model=True)
        try:
            await self.detector.ensure_loaded()
        finally:
            if gen == self._generation:
                self._set(is_loading_model=False)

    # ── Detection loop ──────────────────────────────────────────────────────

    def _start_loop(self, gen: int):
        if self.state.loop_active:
            return
        self._set(loop_active=True)
        self._frame_handle = self.scheduler.schedule(lambda: self._tick(gen))
        self.status.log("session: detection loop started")

    def _stop_loop(self):
        if self._frame_handle is not None:
            self.scheduler.cancel(self._frame_handle)
            self._frame_handle = None
        if self.state.loop_active:
            self._set(loop_active=False)
            self.status.log("session: detection loop stopped")

    async def _tick(self, gen: int):
        self._frame_handle = None
        # cancellation: a cleared flag makes the tick exit without rescheduling
        if gen != self._generation or not self.state.loop_active or not self.state.can_poll:
            return

        challenge = self.state.challenge
        try:
            if challenge.type == "object":
                found = await self._run_object_check(challenge)
            else:
                found = self._run_color_check(challenge)

            if gen != self._generation or not self.state.loop_active:
                return
            if found:
                await self.submit_found()
                return
        except Exception as e:
            if gen != self._generation:
                return
            self.status.log(f"session: tick error {type(e).__name__}: {e}")
            self.status.set_message("Detection paused. Tap retry.")
            self._set(loop_active=False)
            return

        self._frame_handle = self.scheduler.schedule(lambda: self._tick(gen))

    def _run_color_check(self, challenge: Challenge) -> bool:
        frame = self.camera.read_frame()
        avg = average_color_from_frame(frame, self.sample_size)
        self._set(last_sample=avg)
        if avg is None:
            return False
        return is_color_match(avg, challenge.target_value)

    async def _run_object_check(self, challenge: Challenge) -> bool:
        if self.detector is None:
            raise ModelLoadError("no object detector configured")
        frame = self.camera.read_frame()
        if frame is None:
            return False
        detections = await self.detector.detect(frame)
        return matches_target(detections, challenge.target_value, self.confidence_threshold)
