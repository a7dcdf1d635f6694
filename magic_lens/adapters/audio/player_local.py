"""
Audio player: fire-and-forget playback of prompt and success sounds.

Priority:
  1. ffplay (accepts both local paths and http URLs)
  2. mpv
  3. afplay (macOS, local files only)
  4. Silent log if no player is available

Playback never blocks the detection loop and never raises.
"""

import os
import shutil
import subprocess
import sys

from magic_lens import config


class LocalAudioPlayer:
    def __init__(self, status_store, success_path: str | None = None, enabled: bool | None = None):
        self.status = status_store
        self.success_path = success_path or config.SUCCESS_AUDIO_PATH
        self.enabled = config.AUDIO_ENABLED if enabled is None else enabled

    def play_prompt(self, url: str | None):
        if url:
            self.play(url)

    def play_success(self):
        if not os.path.isfile(self.success_path):
            self.status.log(f"audio: success sound missing ({self.success_path})")
            return
        self.play(self.success_path)

    def play(self, source: str):
        if not self.enabled:
            return
        cmd = self._command(source)
        if cmd is None:
            self.status.log(f"audio: no player found, skipping {source}")
            return
        self.status.log(f"audio: playing {os.path.basename(source)}")
        try:
            # Popen, not run(): the game keeps going while the clip plays
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            self.status.log(f"audio: playback failed {type(e).__name__}: {e}")

    def _command(self, source: str) -> list[str] | None:
        if shutil.which("ffplay"):
            return ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", source]
        if shutil.which("mpv"):
            return ["mpv", "--no-video", "--really-quiet", source]
        if sys.platform == "darwin" and os.path.isfile(source):
            return ["afplay", source]
        return None
