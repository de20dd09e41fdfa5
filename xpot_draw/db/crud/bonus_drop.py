"""CRUD operations for bonus drops."""

from datetime import datetime

from sqlalchemy import select, desc, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.models.bonus_drop import (
    BonusDrop,
    BONUS_CANCELLED,
    BONUS_SCHEDULED,
)


async def create(session: AsyncSession, **fields) -> BonusDrop:
    obj = BonusDrop(**fields)
    session.add(obj)
    await session.flush()
    return obj


async def list_due(session: AsyncSession, now: datetime) -> list[BonusDrop]:
    result = await session.execute(
        select(BonusDrop)
        .where(BonusDrop.status == BONUS_SCHEDULED, BonusDrop.scheduled_at <= now)
        .order_by(BonusDrop.scheduled_at, BonusDrop.id)
    )
    return list(result.scalars().all())


async def list_upcoming(
    session: AsyncSession, draw_id: int, now: datetime, *, limit: int = 50
) -> list[BonusDrop]:
    result = await session.execute(
        select(BonusDrop)
        .where(
            BonusDrop.draw_id == draw_id,
            BonusDrop.status == BONUS_SCHEDULED,
            BonusDrop.scheduled_at > now,
        )
        .order_by(BonusDrop.scheduled_at)
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_for_draw(
    session: AsyncSession, draw_id: int, statuses: tuple[str, ...]
) -> list[BonusDrop]:
    result = await session.execute(
        select(BonusDrop)
        .where(BonusDrop.draw_id == draw_id, BonusDrop.status.in_(statuses))
        .order_by(BonusDrop.scheduled_at)
    )
    return list(result.scalars().all())


async def count_for_draw(session: AsyncSession, draw_id: int) -> int:
    result = await session.execute(
        select(func.count(BonusDrop.id)).where(BonusDrop.draw_id == draw_id)
    )
    return result.scalar() or 0


async def get_latest_for_draw(session: AsyncSession, draw_id: int) -> BonusDrop | None:
    result = await session.execute(
        select(BonusDrop)
        .where(BonusDrop.draw_id == draw_id)
        .order_by(desc(BonusDrop.created_at), desc(BonusDrop.id))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def cancel_scheduled(session: AsyncSession, draw_id: int) -> int:
    result = await session.execute(
        update(BonusDrop)
        .where(BonusDrop.draw_id == draw_id, BonusDrop.status == BONUS_SCHEDULED)
        .values(status=BONUS_CANCELLED)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
