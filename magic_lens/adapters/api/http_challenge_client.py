"""
HTTP client for the challenge backend.

Contract (see services/api.py):
  GET  /api/challenge?user_id=<uuid?>  -> {"challenge": {...}}
  POST /api/found {"user_id", "challenge_id"} -> {"ok": true, "unlocked": {...}}
  GET  /api/progress?user_id=<uuid>    -> {"stickers": [...]}
Errors come back as {"error": "...", "detail"?: "..."} and are mapped onto
the orchestrator error taxonomy.
"""

import httpx

from magic_lens import config
from magic_lens.orchestrator.contracts import Challenge, Sticker
from magic_lens.orchestrator.errors import (
    InternalError, NetworkError, NotFound, ValidationError,
)


class HttpChallengeClient:
    def __init__(self, status_store, base_url: str | None = None,
                 timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.status = status_store
        self.base_url = (config.API_BASE_URL if base_url is None else base_url).rstrip("/")
        self.timeout = config.HTTP_TIMEOUT_S if timeout is None else timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=transport
        )

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        self.status.log(f"http_client: {method} {path}")
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {path} failed: {type(e).__name__}: {e}") from e

        if resp.status_code >= 400:
            self._raise_for_error(resp)
        try:
            data = resp.json()
        except ValueError as e:
            raise InternalError(f"{method} {path}: response is not JSON") from e
        if not isinstance(data, dict):
            raise InternalError(f"{method} {path}: expected a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def _raise_for_error(resp: httpx.Response):
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("error") or f"HTTP {resp.status_code}"
        if resp.status_code == 400:
            raise ValidationError(message)
        if resp.status_code == 404:
            raise NotFound(message)
        if resp.status_code >= 500:
            raise InternalError(message, detail=body.get("detail"))
        raise NetworkError(f"unexpected HTTP {resp.status_code}: {message}")

    async def fetch_challenge(self, user_id: str | None = None) -> Challenge:
        params = {"user_id": user_id} if user_id else None
        data = await self._request("GET", "/api/challenge", params=params)
        try:
            return Challenge.from_dict(data["challenge"])
        except (KeyError, TypeError, ValueError) as e:
            raise InternalError(f"malformed challenge payload: {e}") from e

    async def submit_found(self, user_id: str, challenge_id: int) -> Sticker:
        data = await self._request(
            "POST", "/api/found", json={"user_id": user_id, "challenge_id": challenge_id}
        )
        try:
            return Sticker.from_dict(data["unlocked"])
        except (KeyError, TypeError, ValueError) as e:
            raise InternalError(f"malformed unlock payload: {e}") from e

    async def fetch_progress(self, user_id: str) -> list[Sticker]:
        data = await self._request("GET", "/api/progress", params={"user_id": user_id})
        try:
            return [Sticker.from_dict(row) for row in data.get("stickers") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise InternalError(f"malformed progress payload: {e}") from e
