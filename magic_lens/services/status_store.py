import logging
import time
from dataclasses import dataclass, field
from typing import Optional, List

logger = logging.getLogger("magic_lens")

TOAST_DURATION_S = 2.2


@dataclass
class StatusStore:
    message: str = "Tap Start Game to begin"
    success_message: str = ""
    last_error: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    _toast: str = ""
    _toast_expires: float = 0.0

    def set_message(self, msg: str):
        self.message = msg

    def show_toast(self, msg: str, duration: float = TOAST_DURATION_S):
        self._toast = msg
        self._toast_expires = time.monotonic() + duration

    @property
    def toast(self) -> str:
        if self._toast and time.monotonic() >= self._toast_expires:
            self._toast = ""
        return self._toast

    def log(self, msg: str):
        logger.info(msg)
        self.logs.append(msg)
        if len(self.logs) > 200:
            self.logs = self.logs[-200:]
