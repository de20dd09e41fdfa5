"""Development-only endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db, require_dev
from xpot_draw.services import dev_service

router = APIRouter(dependencies=[Depends(require_dev)])


@router.post("/reset-db")
async def reset_db(db: AsyncSession = Depends(get_db)):
    """Wipe every table and seed an open draw with demo entries."""
    summary = await dev_service.reset_and_seed(db)
    return {"ok": True, "cleared": True, "seeded": True, **summary}
