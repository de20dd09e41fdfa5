"""CRUD operations for winners."""

from datetime import datetime

from sqlalchemy import select, desc, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from xpot_draw.db.models.ticket import Ticket
from xpot_draw.db.models.user import Wallet
from xpot_draw.db.models.winner import Winner, WINNER_MAIN

_WITH_RELATIONS = (
    selectinload(Winner.draw),
    selectinload(Winner.ticket).selectinload(Ticket.wallet).selectinload(Wallet.user),
)


async def create(session: AsyncSession, **fields) -> Winner:
    obj = Winner(**fields)
    session.add(obj)
    await session.flush()
    return obj


async def get_by_id(session: AsyncSession, winner_id: int) -> Winner | None:
    return await session.get(Winner, winner_id)


async def get_active_main(session: AsyncSession, draw_id: int) -> Winner | None:
    """Non-voided MAIN winner of a draw, if one was already picked."""
    result = await session.execute(
        select(Winner)
        .where(
            Winner.draw_id == draw_id,
            Winner.kind == WINNER_MAIN,
            Winner.is_voided == False,  # noqa: E712
        )
        .order_by(desc(Winner.date), desc(Winner.id))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_recent(
    session: AsyncSession,
    *,
    limit: int = 20,
    kind: str | None = None,
    include_voided: bool = False,
) -> list[Winner]:
    query = (
        select(Winner)
        .options(*_WITH_RELATIONS)
        .order_by(desc(Winner.date), desc(Winner.id))
        .limit(limit)
    )
    if kind:
        query = query.where(Winner.kind == kind)
    if not include_voided:
        query = query.where(Winner.is_voided == False)  # noqa: E712
    result = await session.execute(query)
    return list(result.scalars().all())


async def count_for_draw(session: AsyncSession, draw_id: int) -> int:
    result = await session.execute(
        select(func.count(Winner.id)).where(
            Winner.draw_id == draw_id,
            Winner.is_voided == False,  # noqa: E712
        )
    )
    return result.scalar() or 0


async def void_main_for_draw(
    session: AsyncSession, draw_id: int, voided_at: datetime
) -> int:
    """Mark the draw's active MAIN winners as voided. Returns rows updated."""
    result = await session.execute(
        update(Winner)
        .where(
            Winner.draw_id == draw_id,
            Winner.kind == WINNER_MAIN,
            Winner.is_voided == False,  # noqa: E712
        )
        .values(is_voided=True, voided_at=voided_at)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
