import httpx

from magic_lens.adapters.api.http_challenge_client import HttpChallengeClient
from magic_lens.orchestrator.contracts import Sticker
from magic_lens.orchestrator.errors import NetworkError
from magic_lens.orchestrator.sticker_book import StickerBook
from tests.fakes import USER


def sticker(cid, name="Fox"):
    return Sticker(challenge_id=cid, animal_name=name, animal_image_url=f"/{name}.png",
                   type="color", target_value="red", unlocked_at="2026-10-19T08:00:00+00:00")


class ProgressClient:
    def __init__(self, result=None, error=None):
        self.result = result or []
        self.error = error
        self.calls = []

    async def fetch_progress(self, user_id):
        self.calls.append(user_id)
        if self.error:
            raise self.error
        return list(self.result)


def test_add_unlocked_prepends_and_dedupes(status):
    book = StickerBook(status, stickers=[sticker(1)])
    assert book.add_unlocked(sticker(2, "Whale"))
    assert not book.add_unlocked(sticker(2, "Whale"))
    assert not book.add_unlocked(None)
    assert [s.challenge_id for s in book.stickers] == [2, 1]


async def test_load_replaces_list(status):
    book = StickerBook(status, stickers=[sticker(9)])
    client = ProgressClient([sticker(3), sticker(1)])
    await book.load(client, USER)
    assert [s.challenge_id for s in book.stickers] == [3, 1]
    assert not book.loading


async def test_load_failure_leaves_empty_book(status):
    book = StickerBook(status, stickers=[sticker(9)])
    await book.load(ProgressClient(error=NetworkError("offline")), USER)
    assert book.stickers == []
    assert not book.loading


async def test_load_without_user_is_noop(status):
    client = ProgressClient([sticker(3)])
    book = StickerBook(status)
    await book.load(client, "")
    assert client.calls == []


async def test_load_survives_non_object_progress_body(status):
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json=["not", "an", "object"]))
    client = HttpChallengeClient(status, base_url="http://api.test", transport=transport)
    book = StickerBook(status, stickers=[sticker(1)])

    await book.load(client, USER)

    assert book.stickers == []
    assert any("sticker_book: load failed InternalError" in line for line in status.logs)
    await client.aclose()
