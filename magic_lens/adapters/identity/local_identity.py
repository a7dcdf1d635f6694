"""Opaque per-install player id, generated once and reused across sessions."""
import uuid
from pathlib import Path

from magic_lens import config


def get_or_create_user_id(path: Path | None = None) -> str:
    path = Path(path or config.USER_ID_FILE)
    if path.is_file():
        existing = path.read_text(encoding="utf-8").strip()
        if existing:
            return existing
    user_id = str(uuid.uuid4())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(user_id, encoding="utf-8")
    return user_id
