"""Session + real HTTP client + real API app, wired through httpx.ASGITransport."""
import httpx
import pytest

from magic_lens.adapters.api.http_challenge_client import HttpChallengeClient
from magic_lens.adapters.camera.mock_camera import MockCamera
from magic_lens.orchestrator.contracts import SessionPhase
from magic_lens.orchestrator.state_machine import ChallengeSession
from magic_lens.orchestrator.sticker_book import StickerBook
from magic_lens.services.api import create_app
from magic_lens.services.store import ChallengeStore
from tests.fakes import USER


@pytest.fixture
def store(tmp_path):
    return ChallengeStore(tmp_path / "e2e.db")


@pytest.fixture
async def api_client(status, store):
    transport = httpx.ASGITransport(app=create_app(store))
    client = HttpChallengeClient(status, base_url="http://api.test", transport=transport)
    yield client
    await client.aclose()


async def test_found_red_unlocks_sticker(status, scheduler, store, api_client):
    # six earlier challenges already unlocked, so id 7 is the only unseen one
    for i in range(1, 7):
        store.add_challenge("object", "cup", f"Animal {i}", f"/s/{i}.png")
        store.save_found(USER, i)
    assert store.add_challenge("color", "red", "Fox", "/stickers/fox.png") == 7

    book = StickerBook(status)
    session = ChallengeSession(
        client=api_client, camera=MockCamera(status, rgb=(200, 30, 30)), status_store=status,
        user_id=USER, scheduler=scheduler, on_sticker_unlocked=book.add_unlocked,
    )

    assert await session.start() is True
    assert session.snapshot().challenge.id == 7

    await scheduler.run()

    st = session.snapshot()
    assert st.phase is SessionPhase.IDLE and not st.camera_enabled
    assert book.stickers[0].challenge_id == 7

    progress = await api_client.fetch_progress(USER)
    assert progress[0].challenge_id == 7
    assert len(progress) == 7


async def test_no_unseen_challenge_surfaces_status(status, scheduler, api_client):
    session = ChallengeSession(
        client=api_client, camera=MockCamera(status), status_store=status,
        user_id=USER, scheduler=scheduler,
    )
    assert await session.start() is False
    st = session.snapshot()
    assert st.phase is SessionPhase.ERROR
    assert not st.loop_active
    assert scheduler.pending == []
    assert status.last_error == "ERR_NOT_FOUND"
    assert "No new challenges left" in status.message
