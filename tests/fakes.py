import asyncio

from magic_lens.orchestrator.contracts import Challenge, Sticker
from magic_lens.orchestrator.scheduler import FrameScheduler

USER = "8f14e45f-ceea-467f-a0e6-f5c3d4b5a1b2"


class ManualFrameScheduler(FrameScheduler):
    """Frame clock the test advances by hand."""

    def __init__(self):
        self.pending = []

    def schedule(self, callback):
        handle = object()
        self.pending.append((handle, callback))
        return handle

    def cancel(self, handle):
        self.pending = [p for p in self.pending if p[0] is not handle]

    async def step(self) -> bool:
        if not self.pending:
            return False
        _, callback = self.pending.pop(0)
        await callback()
        return True

    async def run(self, max_ticks: int = 20) -> int:
        ticks = 0
        while self.pending and ticks < max_ticks:
            await self.step()
            ticks += 1
        return ticks


class FakeChallengeClient:
    def __init__(self, challenges=None, fetch_error=None, submit_error=None):
        self.challenges = list(challenges or [])
        self.fetch_error = fetch_error
        self.submit_error = submit_error
        self.fetch_gate: asyncio.Event | None = None
        self.submit_gate: asyncio.Event | None = None
        self.fetch_calls = []
        self.submit_calls = []

    async def fetch_challenge(self, user_id=None):
        self.fetch_calls.append(user_id)
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        if len(self.challenges) > 1:
            return self.challenges.pop(0)
        return self.challenges[0]

    async def submit_found(self, user_id, challenge_id):
        self.submit_calls.append((user_id, challenge_id))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_error is not None:
            raise self.submit_error
        c = next(c for c in self.challenges if c.id == challenge_id)
        return Sticker(
            challenge_id=c.id, animal_name=c.animal_name, animal_image_url=c.animal_image_url,
            type=c.type, target_value=c.target_value, unlocked_at="2026-10-19T08:00:00.000000+00:00",
        )


def make_challenge(id=7, type="color", target="red", animal="Fox", audio=None) -> Challenge:
    return Challenge(
        id=id, type=type, target_value=target, animal_name=animal,
        animal_image_url=f"/stickers/{animal.lower()}.png", audio_prompt_url=audio,
    )


