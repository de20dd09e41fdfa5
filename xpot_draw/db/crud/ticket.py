"""CRUD operations for tickets."""

from sqlalchemy import select, desc, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from xpot_draw.db.models.ticket import Ticket, TICKET_IN_DRAW
from xpot_draw.db.models.user import Wallet


async def get_by_id(session: AsyncSession, ticket_id: int) -> Ticket | None:
    return await session.get(Ticket, ticket_id)


async def code_exists(session: AsyncSession, code: str) -> bool:
    result = await session.execute(select(Ticket.id).where(Ticket.code == code))
    return result.first() is not None


async def create(session: AsyncSession, **fields) -> Ticket:
    obj = Ticket(**fields)
    session.add(obj)
    await session.flush()
    return obj


async def list_eligible(session: AsyncSession, draw_id: int) -> list[Ticket]:
    """IN_DRAW tickets of a draw in insertion order."""
    result = await session.execute(
        select(Ticket)
        .where(Ticket.draw_id == draw_id, Ticket.status == TICKET_IN_DRAW)
        .order_by(Ticket.id)
    )
    return list(result.scalars().all())


async def get_in_draw_for_wallet(
    session: AsyncSession, draw_id: int, wallet_address: str
) -> Ticket | None:
    result = await session.execute(
        select(Ticket)
        .where(
            Ticket.draw_id == draw_id,
            Ticket.wallet_address == wallet_address,
            Ticket.status == TICKET_IN_DRAW,
        )
        .order_by(Ticket.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_for_draw(session: AsyncSession, draw_id: int) -> list[Ticket]:
    """Tickets of a draw, newest first, with wallet and user loaded."""
    result = await session.execute(
        select(Ticket)
        .where(Ticket.draw_id == draw_id)
        .options(selectinload(Ticket.wallet).selectinload(Wallet.user))
        .order_by(desc(Ticket.created_at), desc(Ticket.id))
    )
    return list(result.scalars().all())


async def list_for_wallet(
    session: AsyncSession, wallet_address: str, *, limit: int = 200
) -> list[Ticket]:
    result = await session.execute(
        select(Ticket)
        .where(Ticket.wallet_address == wallet_address)
        .options(selectinload(Ticket.draw))
        .order_by(desc(Ticket.created_at), desc(Ticket.id))
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_for_draw(session: AsyncSession, draw_id: int) -> int:
    result = await session.execute(
        select(func.count(Ticket.id)).where(Ticket.draw_id == draw_id)
    )
    return result.scalar() or 0


async def set_status(session: AsyncSession, ticket_id: int, status: str) -> None:
    await session.execute(
        update(Ticket)
        .where(Ticket.id == ticket_id)
        .values(status=status)
        .execution_options(synchronize_session="fetch")
    )


async def set_status_for_draw(
    session: AsyncSession,
    draw_id: int,
    *,
    from_statuses: tuple[str, ...],
    to_status: str,
) -> int:
    """Bulk status change for a draw's tickets. Returns rows updated."""
    result = await session.execute(
        update(Ticket)
        .where(Ticket.draw_id == draw_id, Ticket.status.in_(from_statuses))
        .values(status=to_status)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
