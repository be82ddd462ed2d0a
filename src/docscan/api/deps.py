from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from docscan.app.settings import AppSettings
from docscan.backend.base import BackendClient, Session
from docscan.exceptions import Unauthenticated

_bearer = HTTPBearer(auto_error=False)


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend  # type: ignore[attr-defined]


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings  # type: ignore[attr-defined]


async def get_session(
    backend: Annotated[BackendClient, Depends(get_backend)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
) -> Session | None:
    """Resolve the bearer token to a session; None when absent or rejected."""
    token = credentials.credentials if credentials else None
    return await backend.identity.get_current_user(token)


async def require_session(session: Annotated[Optional[Session], Depends(get_session)]) -> Session:
    if session is None:
        raise Unauthenticated("Please sign in to continue")
    return session


BackendDep = Annotated[BackendClient, Depends(get_backend)]
SettingsDep = Annotated[AppSettings, Depends(get_settings)]
SessionDep = Annotated[Optional[Session], Depends(get_session)]
RequiredSessionDep = Annotated[Session, Depends(require_session)]
