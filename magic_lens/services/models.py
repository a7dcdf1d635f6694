from pydantic import BaseModel
from typing import Literal, Optional


class ChallengeOut(BaseModel):
    id: int
    type: Literal["color", "object"]
    target_value: str
    animal_name: str
    animal_image_url: str
    audio_prompt_url: Optional[str] = None

class StickerOut(BaseModel):
    challenge_id: int
    animal_name: str
    animal_image_url: str
    type: Literal["color", "object"]
    target_value: str
    unlocked_at: str

class ChallengeResponse(BaseModel):
    challenge: ChallengeOut

class FoundResponse(BaseModel):
    ok: bool = True
    unlocked: StickerOut

class ProgressResponse(BaseModel):
    stickers: list[StickerOut]

class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None   # only on unexpected (500) failures
