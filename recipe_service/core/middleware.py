from __future__ import annotations

from fastapi import status
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from recipe_service.core.config import Settings


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, "code": code})


def build_limiter(config: Settings) -> Limiter:
    """Per-client limit applied to every route by ``SlowAPIMiddleware``.

    Clients are keyed on the socket peer address; forwarded headers are not trusted.
    """
    default_limit = f"{config.rate_limit_max_requests}/{config.rate_limit_window_seconds} seconds"
    return Limiter(key_func=get_remote_address, default_limits=[default_limit], storage_uri="memory://")


def rate_limit_exceeded(request: Request, exc: Exception) -> JSONResponse:
    return _error(status.HTTP_429_TOO_MANY_REQUESTS, "Too many requests", "RATE_LIMITED")


class MultipartBodyLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, config: Settings):
        super().__init__(app)
        self.max_body_bytes = config.max_multipart_body_bytes

    async def dispatch(self, request: Request, call_next):
        if request.method in {"POST", "PUT", "PATCH"}:
            content_type = request.headers.get("content-type", "")
            if "multipart/form-data" in content_type:
                content_length = request.headers.get("content-length")
                if content_length:
                    try:
                        size = int(content_length)
                    except ValueError:
                        size = 0
                    if size > self.max_body_bytes:
                        return _error(
                            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                            "Request body too large",
                            "PAYLOAD_TOO_LARGE",
                        )
        return await call_next(request)
