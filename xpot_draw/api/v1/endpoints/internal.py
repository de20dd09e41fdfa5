"""Internal hooks for external cron runners."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db, require_internal_key
from xpot_draw.services import bonus_service
from xpot_draw.services.calendar import to_iso

router = APIRouter(dependencies=[Depends(require_internal_key)])


@router.post("/bonus-run")
async def bonus_run(db: AsyncSession = Depends(get_db)):
    """Fire every due bonus drop now."""
    result = await bonus_service.fire_due_bonuses(db)
    return {
        "ok": True,
        "now": to_iso(result["now"]),
        "fired": result["fired"],
        "failed": result["failed"],
        "cancelled": result["cancelled"],
    }
