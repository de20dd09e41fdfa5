"""Hub endpoints: mission of the day and streak."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import current_user_id, get_db
from xpot_draw.services import hub_service

router = APIRouter()


@router.get("/mission/today")
async def mission_today(seed: str = Query("", max_length=128)):
    return {"ok": True, "mission": hub_service.mission_of_the_day(seed=seed)}


@router.get("/streak")
async def get_streak(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return {"ok": True, "streak": await hub_service.get_streak(db, user_id)}


@router.post("/streak")
async def mark_streak(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return {"ok": True, "streak": await hub_service.mark_streak_done(db, user_id)}
