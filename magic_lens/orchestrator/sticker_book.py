from dataclasses import dataclass, field
from typing import List

from magic_lens.orchestrator.contracts import Sticker
from magic_lens.orchestrator.errors import GameError


@dataclass
class StickerBook:
    """Unlocked stickers for one player, most recently unlocked first."""

    status: object
    stickers: List[Sticker] = field(default_factory=list)
    loading: bool = False

    async def load(self, client, user_id: str) -> List[Sticker]:
        if not user_id:
            return self.stickers
        self.loading = True
        try:
            self.stickers = await client.fetch_progress(user_id)
            self.status.log(f"sticker_book: loaded {len(self.stickers)} stickers")
        except GameError as e:
            self.status.log(f"sticker_book: load failed {type(e).__name__}: {e}")
            self.stickers = []
        finally:
            self.loading = False
        return self.stickers

    def add_unlocked(self, sticker: Sticker | None) -> bool:
        if sticker is None:
            return False
        if any(s.challenge_id == sticker.challenge_id for s in self.stickers):
            return False
        self.stickers = [sticker, *self.stickers]
        self.status.log(f"sticker_book: unlocked {sticker.animal_name} (challenge {sticker.challenge_id})")
        return True
