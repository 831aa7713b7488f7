# api/app/routes/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from api.app.config import Settings
from api.app.dependencies import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        "service": "thera-coach-api",
        "upstream_configured": settings.upstream_configured,
    }
