"""
SQLite store: challenge catalogue + per-user unlock progress.

At most one progress row per (user_id, challenge_id); unlocking again only
refreshes unlocked_at. Timestamps are ISO-8601 UTC with microseconds so
"most recent first" ordering is a plain string sort.
"""
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

_SCHEMA = """
CREATE TABLE IF NOT EXISTS challenges (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type TEXT NOT NULL CHECK (type IN ('color', 'object')),
    target_value TEXT NOT NULL,
    animal_name TEXT NOT NULL,
    animal_image_url TEXT NOT NULL,
    audio_prompt_url TEXT
);
CREATE TABLE IF NOT EXISTS progress (
    user_id TEXT NOT NULL,
    challenge_id INTEGER NOT NULL REFERENCES challenges(id),
    is_unlocked INTEGER NOT NULL DEFAULT 1,
    unlocked_at TEXT NOT NULL,
    PRIMARY KEY (user_id, challenge_id)
);
"""

_CHALLENGE_COLS = "c.id, c.type, c.target_value, c.animal_name, c.animal_image_url, c.audio_prompt_url"

# (type, target_value, animal_name, animal_image_url, audio_prompt_url)
DEFAULT_CHALLENGES = [
    ("color", "red", "Fox", "/stickers/fox.png", "/audio/find-red.mp3"),
    ("color", "orange", "Tiger", "/stickers/tiger.png", "/audio/find-orange.mp3"),
    ("color", "yellow", "Duck", "/stickers/duck.png", "/audio/find-yellow.mp3"),
    ("color", "green", "Frog", "/stickers/frog.png", "/audio/find-green.mp3"),
    ("color", "blue", "Whale", "/stickers/whale.png", "/audio/find-blue.mp3"),
    ("color", "purple", "Octopus", "/stickers/octopus.png", None),
    ("color", "pink", "Flamingo", "/stickers/flamingo.png", None),
    ("color", "white", "Polar Bear", "/stickers/polar-bear.png", None),
    ("color", "black", "Panther", "/stickers/panther.png", None),
    ("object", "cup", "Owl", "/stickers/owl.png", "/audio/find-cup.mp3"),
    ("object", "book", "Elephant", "/stickers/elephant.png", "/audio/find-book.mp3"),
    ("object", "apple", "Hedgehog", "/stickers/hedgehog.png", None),
    ("object", "chair", "Giraffe", "/stickers/giraffe.png", None),
    ("object", "teddy bear", "Panda", "/stickers/panda.png", None),
]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ChallengeStore:
    def __init__(self, db_path: str | Path, clock: Callable[[], str] = utc_now):
        self.db_path = str(db_path)
        self._clock = clock
        self._lock = threading.Lock()
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _connect(self):
        # FastAPI runs sync routes on a threadpool: one connection per call
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def add_challenge(self, type: str, target_value: str, animal_name: str,
                      animal_image_url: str, audio_prompt_url: Optional[str] = None) -> int:
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT INTO challenges (type, target_value, animal_name, animal_image_url, audio_prompt_url) "
                "VALUES (?, ?, ?, ?, ?)",
                (type, target_value, animal_name, animal_image_url, audio_prompt_url),
            )
            return int(cur.lastrowid)

    def count_challenges(self) -> int:
        with self._connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM challenges").fetchone()[0])

    def seed_defaults(self) -> int:
        """Insert the default catalogue if the table is empty. Returns rows added."""
        if self.count_challenges():
            return 0
        for row in DEFAULT_CHALLENGES:
            self.add_challenge(*row)
        return len(DEFAULT_CHALLENGES)

    def random_challenge(self, user_id: Optional[str] = None) -> Optional[dict]:
        """Random challenge, excluding the ones `user_id` already unlocked."""
        with self._connect() as conn:
            if user_id:
                row = conn.execute(
                    f"""
                    SELECT {_CHALLENGE_COLS}
                    FROM challenges c
                    LEFT JOIN progress p
                      ON p.challenge_id = c.id
                     AND p.user_id = ?
                     AND p.is_unlocked = 1
                    WHERE p.challenge_id IS NULL
                    ORDER BY RANDOM()
                    LIMIT 1
                    """,
                    (user_id,),
                ).fetchone()
            else:
                row = conn.execute(
                    f"SELECT {_CHALLENGE_COLS} FROM challenges c ORDER BY RANDOM() LIMIT 1"
                ).fetchone()
        return dict(row) if row else None

    def save_found(self, user_id: str, challenge_id: int) -> Optional[dict]:
        """Upsert the unlock. Returns the sticker, or None for an unknown challenge."""
        with self._lock, self._connect() as conn:
            exists = conn.execute("SELECT 1 FROM challenges WHERE id = ?", (challenge_id,)).fetchone()
            if not exists:
                return None
            conn.execute(
                """
                INSERT INTO progress (user_id, challenge_id, is_unlocked, unlocked_at)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(user_id, challenge_id)
                DO UPDATE SET is_unlocked = 1, unlocked_at = excluded.unlocked_at
                """,
                (user_id, challenge_id, self._clock()),
            )
            row = conn.execute(
                """
                SELECT c.id AS challenge_id, c.animal_name, c.animal_image_url, c.type,
                       c.target_value, p.unlocked_at
                FROM progress p
                INNER JOIN challenges c ON c.id = p.challenge_id
                WHERE p.user_id = ? AND p.challenge_id = ?
                """,
                (user_id, challenge_id),
            ).fetchone()
        return dict(row)

    def unlocked_stickers(self, user_id: str) -> list[dict]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT c.id AS challenge_id, c.animal_name, c.animal_image_url, c.type,
                       c.target_value, p.unlocked_at
                FROM progress p
                INNER JOIN challenges c ON c.id = p.challenge_id
                WHERE p.user_id = ? AND p.is_unlocked = 1
                ORDER BY p.unlocked_at DESC
                """,
                (user_id,),
            ).fetchall()
        return [dict(r) for r in rows]
