from __future__ import annotations

from fastapi import APIRouter

from docscan.api.deps import SettingsDep

ROUTER_TAG = "internal"

router = APIRouter()


@router.get("/health")
async def health(settings: SettingsDep) -> dict:
    return {"status": "ok", "name": settings.name, "version": settings.version}
