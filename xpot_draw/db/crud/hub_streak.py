"""CRUD operations for hub streaks."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.models.hub_streak import HubStreak


async def get_or_create(session: AsyncSession, user_id: int) -> HubStreak:
    result = await session.execute(
        select(HubStreak).where(HubStreak.user_id == user_id)
    )
    streak = result.scalar_one_or_none()
    if streak is None:
        streak = HubStreak(user_id=user_id, days=0)
        session.add(streak)
        await session.flush()
    return streak
