"""CRUD operations for draws."""

from datetime import datetime

from sqlalchemy import select, desc, update
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.models.draw import Draw


async def get_by_id(session: AsyncSession, draw_id: int) -> Draw | None:
    return await session.get(Draw, draw_id)


async def get_status(session: AsyncSession, draw_id: int) -> str | None:
    """Current stored status, bypassing any cached Draw instance."""
    result = await session.execute(select(Draw.status).where(Draw.id == draw_id))
    return result.scalar_one_or_none()


async def get_in_range(
    session: AsyncSession, start: datetime, end: datetime
) -> Draw | None:
    result = await session.execute(
        select(Draw)
        .where(Draw.draw_date >= start, Draw.draw_date < end)
        .order_by(Draw.draw_date, Draw.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest(session: AsyncSession) -> Draw | None:
    result = await session.execute(
        select(Draw).order_by(desc(Draw.draw_date), desc(Draw.id)).limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest_before(session: AsyncSession, before: datetime) -> Draw | None:
    result = await session.execute(
        select(Draw)
        .where(Draw.draw_date < before)
        .order_by(desc(Draw.draw_date), desc(Draw.id))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create(session: AsyncSession, **fields) -> Draw:
    obj = Draw(**fields)
    session.add(obj)
    await session.flush()
    return obj


async def transition_status(
    session: AsyncSession, draw_id: int, from_status: str, to_status: str
) -> bool:
    """Move a draw between statuses only if it is currently ``from_status``.

    Returns True when the row was updated.
    """
    result = await session.execute(
        update(Draw)
        .where(Draw.id == draw_id, Draw.status == from_status)
        .values(status=to_status)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount > 0


async def list_resolved(session: AsyncSession, *, limit: int = 20) -> list[Draw]:
    result = await session.execute(
        select(Draw)
        .where(Draw.winner_ticket_id.is_not(None))
        .order_by(desc(Draw.draw_date))
        .limit(limit)
    )
    return list(result.scalars().all())
