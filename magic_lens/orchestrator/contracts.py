from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

ChallengeType = Literal["color", "object"]

CHALLENGE_TYPES = ("color", "object")


@dataclass(frozen=True)
class RGB:
    r: float
    g: float
    b: float


@dataclass(frozen=True)
class HSL:
    h: float   # degrees, [0, 360)
    s: float   # percent, [0, 100]
    l: float   # percent, [0, 100]


@dataclass(frozen=True)
class Detection:
    class_name: str
    score: float               # 0..1


@dataclass(frozen=True)
class Challenge:
    id: int
    type: ChallengeType
    target_value: str
    animal_name: str
    animal_image_url: str
    audio_prompt_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Challenge":
        challenge_id = int(data["id"])
        ctype = data["type"]
        if challenge_id <= 0 or ctype not in CHALLENGE_TYPES:
            raise ValueError(f"invalid challenge payload: id={challenge_id} type={ctype!r}")
        return cls(
            id=challenge_id,
            type=ctype,
            target_value=str(data["target_value"]),
            animal_name=str(data.get("animal_name") or ""),
            animal_image_url=str(data.get("animal_image_url") or ""),
            audio_prompt_url=data.get("audio_prompt_url") or None,
        )

    @property
    def prompt(self) -> str:
        if self.type == "color":
            return f"Find something {self.target_value}!"
        return f"Find a {self.target_value}!"


@dataclass(frozen=True)
class Sticker:
    challenge_id: int
    animal_name: str
    animal_image_url: str
    type: ChallengeType
    target_value: str
    unlocked_at: str           # ISO-8601

    @classmethod
    def from_dict(cls, data: dict) -> "Sticker":
        # /api/found may echo the challenge row: `id` instead of `challenge_id`, no timestamp
        challenge_id = data.get("challenge_id", data.get("id"))
        unlocked_at = data.get("unlocked_at") or datetime.now(timezone.utc).isoformat()
        return cls(
            challenge_id=int(challenge_id),
            animal_name=str(data.get("animal_name") or ""),
            animal_image_url=str(data.get("animal_image_url") or ""),
            type=data["type"],
            target_value=str(data["target_value"]),
            unlocked_at=str(unlocked_at),
        )


class SessionPhase(str, Enum):
    IDLE = "IDLE"
    INITIALIZING = "INITIALIZING"
    DETECTING = "DETECTING"
    SUBMITTING = "SUBMITTING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SessionState:
    phase: SessionPhase = SessionPhase.IDLE
    camera_enabled: bool = False
    challenge: Optional[Challenge] = None
    is_submitting: bool = False
    is_loading_model: bool = False
    last_sample: Optional[RGB] = None
    loop_active: bool = False

    @property
    def can_poll(self) -> bool:
        return self.camera_enabled and self.challenge is not None and not self.is_submitting
