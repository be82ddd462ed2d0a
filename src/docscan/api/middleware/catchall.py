import logging

from starlette.middleware.base import BaseHTTPMiddleware

from docscan.api.errors import http_context, problem_response

logger = logging.getLogger(__name__)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    """Last line of defence: any exception that escaped the handlers becomes a logged 500."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(
                "%s on %s (500): %s",
                type(exc).__name__,
                request.url.path,
                exc,
                extra=http_context(request, 500),
            )
            return problem_response(
                500, "Error", "Something went wrong. Please try again.", "INTERNAL_ERROR"
            )
