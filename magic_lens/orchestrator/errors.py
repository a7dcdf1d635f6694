ERR_VALIDATION = "ERR_VALIDATION"
ERR_NOT_FOUND = "ERR_NOT_FOUND"
ERR_NETWORK = "ERR_NETWORK"
ERR_MODEL_LOAD = "ERR_MODEL_LOAD"
ERR_INTERNAL = "ERR_INTERNAL"


class GameError(Exception):
    code = ERR_INTERNAL


class ValidationError(GameError):
    """Malformed identifier (HTTP 400)."""
    code = ERR_VALIDATION


class NotFound(GameError):
    """No unseen challenge left, or unknown challenge id (HTTP 404)."""
    code = ERR_NOT_FOUND


class NetworkError(GameError):
    """Transport failure or timeout; there is no HTTP status."""
    code = ERR_NETWORK


class ModelLoadError(GameError):
    code = ERR_MODEL_LOAD


class InternalError(GameError):
    """Unexpected server-side fault (HTTP 500). `detail` is for diagnostics only."""
    code = ERR_INTERNAL

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.detail = detail
