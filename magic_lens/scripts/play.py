"""
Console game: point the webcam at the target until it is found.

Usage:
    python -m magic_lens.scripts.run_api       (terminal 1)
    python -m magic_lens.scripts.play          (terminal 2)

DETECTOR_ADAPTER=mock skips the DNN weights (object challenges never match).
Ctrl+C stops the game.
"""

import asyncio
import logging

from magic_lens import config
from magic_lens.adapters.api.http_challenge_client import HttpChallengeClient
from magic_lens.adapters.audio.player_local import LocalAudioPlayer
from magic_lens.adapters.camera.cv2_camera import CV2Camera
from magic_lens.adapters.identity.local_identity import get_or_create_user_id
from magic_lens.adapters.vision.object_detector import shared_detector
from magic_lens.orchestrator.contracts import SessionPhase
from magic_lens.orchestrator.state_machine import ChallengeSession
from magic_lens.orchestrator.sticker_book import StickerBook
from magic_lens.services.status_store import StatusStore

POLL_S = 0.5


def print_book(book: StickerBook):
    print(f"\n  Sticker Book ({len(book.stickers)})")
    if not book.stickers:
        print("    No stickers yet. Complete a challenge to unlock your first animal.")
    for s in book.stickers:
        print(f"    {s.animal_name:<14} {s.type}: {s.target_value}")
    print()


async def run():
    status = StatusStore()
    user_id = get_or_create_user_id()
    client = HttpChallengeClient(status)
    book = StickerBook(status)
    await book.load(client, user_id)
    print_book(book)

    camera = CV2Camera(status)
    session = ChallengeSession(
        client=client,
        camera=camera,
        status_store=status,
        detector=shared_detector(status),
        user_id=user_id,
        audio=LocalAudioPlayer(status),
        on_sticker_unlocked=book.add_unlocked,
    )

    last_message = None
    try:
        await session.start()
        while True:
            st = session.snapshot()
            if status.message != last_message:
                print(f"> {status.message}")
                last_message = status.message
            if st.phase in (SessionPhase.IDLE, SessionPhase.ERROR):
                break
            if st.phase is SessionPhase.DETECTING and not st.loop_active:
                # tick error paused the loop
                await asyncio.sleep(1.0)
                session.retry_detection()
            await asyncio.sleep(POLL_S)
    finally:
        session.close()
        await client.aclose()

    if status.success_message:
        print(f"\n  {status.success_message}")
    print_book(book)


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\nGame paused.")


if __name__ == "__main__":
    main()
