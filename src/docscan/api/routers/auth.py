from __future__ import annotations

from fastapi import APIRouter, Response
from pydantic import BaseModel

from docscan.api.deps import BackendDep, RequiredSessionDep

ROUTER_PREFIX = "/auth"
ROUTER_TAG = "auth"

router = APIRouter()


class SessionOut(BaseModel):
    user_id: str
    email: str | None = None
    display_name: str = "User"


@router.get("/me", response_model=SessionOut)
async def me(session: RequiredSessionDep) -> SessionOut:
    return SessionOut(user_id=session.user_id, email=session.email, display_name=session.display_name)


@router.post("/sign-out", status_code=204)
async def sign_out(session: RequiredSessionDep, backend: BackendDep) -> Response:
    if session.token:
        await backend.identity.sign_out(session.token)
    return Response(status_code=204)
