from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware

from docscan.api.errors import http_context, problem_response

logger = logging.getLogger(__name__)


def declared_length(headers) -> int | None:
    raw = headers.get("content-length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse a request whose declared Content-Length is over ``max_bytes``, before the body is parsed."""

    def __init__(self, app, max_bytes: int = 25 * 1024 * 1024):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        size = declared_length(request.headers)
        if size is None or size <= self.max_bytes:
            return await call_next(request)

        logger.info(
            "Refused %d byte request (limit %d)", size, self.max_bytes, extra=http_context(request, 413)
        )
        limit_mb = self.max_bytes / (1024 * 1024)
        return problem_response(
            413,
            "Payload Too Large",
            f"Upload exceeds the {limit_mb:g} MB request limit.",
            "PAYLOAD_TOO_LARGE",
        )
