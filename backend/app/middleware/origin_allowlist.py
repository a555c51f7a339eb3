"""
Origin allowlist middleware.

Rejects requests whose Origin header is not in the configured list before
they reach any route. Requests without an Origin header (same-origin,
curl, server-to-server) pass through. CORSMiddleware still adds the
response headers for allowed origins.
"""
import logging
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.exceptions import OriginNotAllowedError

logger = logging.getLogger(__name__)


class OriginAllowlistMiddleware(BaseHTTPMiddleware):
    """403 for cross-origin requests from unlisted origins."""

    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        # Stored without trailing slashes, as browsers send them
        self.allowed_origins = frozenset(origin.rstrip("/") for origin in allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is None or origin in self.allowed_origins:
            return await call_next(request)

        logger.warning(
            f"Blocked CORS origin: {origin}",
            extra={"event": "origin_blocked", "origin": origin, "path": request.url.path}
        )
        error = OriginNotAllowedError()
        return JSONResponse(status_code=error.status_code, content={"error": error.message})
