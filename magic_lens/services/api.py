import logging
import math
import re
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from magic_lens import config
from magic_lens.services.models import (
    ChallengeOut, ChallengeResponse, FoundResponse, ProgressResponse, StickerOut, ErrorResponse,
)
from magic_lens.services.store import ChallengeStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?[0-9]+)")


def is_uuid(value) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.fullmatch(value))


def parse_int(value) -> Optional[int]:
    """Leading-integer parse: 7 -> 7, "7" -> 7, "7abc" -> 7, 7.9 -> 7, "x" -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        m = _INT_PREFIX_RE.match(value)
        return int(m.group(1)) if m else None
    return None


def error(message: str, status_code: int, detail: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=message, detail=detail).model_dump(exclude_none=True)
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


def create_app(store: Optional[ChallengeStore] = None) -> FastAPI:
    store = store or ChallengeStore(config.DB_PATH)
    app = FastAPI(title="magic-lens api")
    app.state.store = store

    @app.middleware("http")
    async def cors_and_fallback(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            return error("Internal server error", 500, detail=str(e))
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        # unmatched route or method: same 404 body either way
        if exc.status_code in (404, 405):
            return error("Not found", 404)
        return error(str(exc.detail), exc.status_code)

    @app.get("/api/challenge", response_model=ChallengeResponse,
             responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
    def get_challenge(user_id: Optional[str] = None):
        if user_id and not is_uuid(user_id):
            return error("user_id must be a UUID", 400)
        row = store.random_challenge(user_id or None)
        if row is None:
            return error("No available challenges found", 404)
        return ChallengeResponse(challenge=ChallengeOut(**row))

    @app.post("/api/found", response_model=FoundResponse,
              responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
    async def post_found(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return error("Request body must be JSON", 400)
        if not isinstance(body, dict):
            body = {}

        user_id = body.get("user_id")
        challenge_id = parse_int(body.get("challenge_id"))
        if not is_uuid(user_id):
            return error("user_id must be a UUID", 400)
        if challenge_id is None or challenge_id <= 0:
            return error("challenge_id must be a positive integer", 400)

        row = store.save_found(user_id, challenge_id)
        if row is None:
            return error("Challenge not found", 404)
        logger.info("unlock user=%s challenge=%s", user_id, challenge_id)
        return FoundResponse(ok=True, unlocked=StickerOut(**row))

    @app.get("/api/progress", response_model=ProgressResponse,
             responses={400: {"model": ErrorResponse}})
    def get_progress(user_id: Optional[str] = None):
        if not is_uuid(user_id):
            return error("user_id must be a UUID", 400)
        rows = store.unlocked_stickers(user_id)
        return ProgressResponse(stickers=[StickerOut(**r) for r in rows])

    return app
