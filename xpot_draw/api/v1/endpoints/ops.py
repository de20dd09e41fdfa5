"""Liveness probe."""

from fastapi import APIRouter

from xpot_draw.config import settings
from xpot_draw.services.calendar import to_iso, utcnow

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ok": True, "app": settings.APP_NAME, "now": to_iso(utcnow())}
