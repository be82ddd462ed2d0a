from __future__ import annotations

import logging
from typing import Mapping

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docscan.exceptions import DocScanError

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def problem_response(
    status: int,
    title: str,
    detail: str,
    code: str,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """JSON problem body shared by the error handler and the middlewares."""
    return JSONResponse(
        status_code=status,
        content={"title": title, "status": status, "detail": detail, "code": code},
        headers=dict(headers) if headers else None,
        media_type=PROBLEM_MEDIA_TYPE,
    )


def http_context(request: Request, status: int) -> dict[str, object]:
    return {"http_method": request.method, "path": request.url.path, "status_code": status}


async def docscan_error_handler(request: Request, exc: DocScanError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        "%s on %s (%s): %s",
        type(exc).__name__,
        request.url.path,
        exc.status_code,
        exc.message,
        extra=http_context(request, exc.status_code),
    )
    return problem_response(
        exc.status_code,
        exc.title,
        exc.message,
        exc.code,
        headers={"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DocScanError, docscan_error_handler)  # type: ignore[arg-type]
