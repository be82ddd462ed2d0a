from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docscan.api.errors import register_error_handlers
from docscan.api.middleware import CatchAllExceptionMiddleware, RequestSizeLimitMiddleware
from docscan.api.routers import register_all_routers
from docscan.app.core.env import ENV
from docscan.app.settings import AppSettings, get_app_settings
from docscan.backend import BackendClient, easy_backend

logger = logging.getLogger(__name__)


def create_app(
        backend: BackendClient | None = None,
        settings: AppSettings | None = None,
) -> FastAPI:
    """Build the docscan API.

    ``backend`` defaults to one built from BACKEND_* env settings; tests pass
    an in-memory client.
    """
    settings = settings or get_app_settings()
    backend = backend or easy_backend()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"{settings.version} version of {settings.name} started [env: {ENV}]")
        try:
            yield
        finally:
            await backend.close()

    app = FastAPI(title=settings.name, version=settings.version, lifespan=lifespan)
    app.state.backend = backend
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_bytes)
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    register_all_routers(app, base_package="docscan.api.routers")
    return app


__all__ = ["create_app"]
