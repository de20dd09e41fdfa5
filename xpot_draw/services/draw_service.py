"""Draw lifecycle: daily creation, reopen and panic close."""

from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.config import settings
from xpot_draw.db.crud import draw as draw_crud
from xpot_draw.db.crud import ticket as ticket_crud
from xpot_draw.db.crud import winner as winner_crud
from xpot_draw.db.models import Draw
from xpot_draw.db.models.draw import DRAW_CLOSED, DRAW_COMPLETED, DRAW_OPEN
from xpot_draw.db.models.ticket import TICKET_IN_DRAW, TICKET_NOT_PICKED, TICKET_WON
from xpot_draw.errors import AlreadyExists, NotFound
from xpot_draw.services.calendar import as_utc, compute_closes_at, today_range, utcnow


async def get_today_draw(session: AsyncSession, now: datetime | None = None) -> Draw | None:
    start, end = today_range(now)
    return await draw_crud.get_in_range(session, start, end)


def default_jackpot() -> float:
    """Jackpot of a draw that does not inherit one from a previous round."""
    if settings.JACKPOT_USD_OVERRIDE is not None:
        return settings.JACKPOT_USD_OVERRIDE
    return settings.DEFAULT_JACKPOT_USD


async def ensure_today_draw(session: AsyncSession, now: datetime | None = None) -> Draw | None:
    """Return today's draw, creating it when the previous round allows it.

    A new draw is only created when there is no draw at all, or when the
    latest earlier draw is ``completed`` and its ``closes_at`` has passed.
    Otherwise ``None`` is returned: the previous round still awaits
    resolution and must not be overtaken.
    """
    now = as_utc(now)
    start, end = today_range(now)

    existing = await draw_crud.get_in_range(session, start, end)
    if existing is not None:
        if existing.closes_at is None:
            existing.closes_at = compute_closes_at(start, now)
            await session.flush()
        return existing

    previous = await draw_crud.get_latest_before(session, start)
    if previous is None:
        jackpot = default_jackpot()
        rollover = 0.0
    else:
        if previous.status != DRAW_COMPLETED:
            logger.debug("Draw {} is {}, not creating today's draw", previous.id, previous.status)
            return None
        if previous.closes_at is None or previous.closes_at > now:
            logger.debug("Draw {} closes at {}, not creating today's draw", previous.id, previous.closes_at)
            return None
        jackpot = settings.JACKPOT_USD_OVERRIDE
        if jackpot is None:
            jackpot = previous.jackpot_usd
        rollover = previous.rollover_usd

    draw = await draw_crud.create(
        session,
        draw_date=start,
        status=DRAW_OPEN,
        jackpot_usd=jackpot,
        rollover_usd=rollover,
        closes_at=compute_closes_at(start, now),
    )
    logger.info("Created draw {} for {} (closes {})", draw.id, start.date(), draw.closes_at)
    return draw


async def create_today_draw(session: AsyncSession, now: datetime | None = None) -> Draw:
    """Admin creation of today's draw regardless of the previous round."""
    now = as_utc(now)
    start, _ = today_range(now)
    if await get_today_draw(session, now) is not None:
        raise AlreadyExists("DRAW_ALREADY_EXISTS")

    draw = await draw_crud.create(
        session,
        draw_date=start,
        status=DRAW_OPEN,
        jackpot_usd=default_jackpot(),
        rollover_usd=0.0,
        closes_at=compute_closes_at(start, now),
    )
    logger.info("Admin created draw {} for {}", draw.id, start.date())
    return draw


async def reopen_draw(session: AsyncSession, draw_id: int | None = None) -> Draw:
    """Revert a resolved draw to ``open``.

    The winner ticket and the tickets marked NOT_PICKED return to IN_DRAW.
    Active MAIN winners of the draw are voided and kept for audit.
    """
    if draw_id is None:
        draw = await draw_crud.get_latest(session)
    else:
        draw = await draw_crud.get_by_id(session, draw_id)
    if draw is None:
        raise NotFound("NO_DRAW_FOUND")

    now = utcnow()
    if draw.winner_ticket_id is not None:
        await ticket_crud.set_status(session, draw.winner_ticket_id, TICKET_IN_DRAW)
    await ticket_crud.set_status_for_draw(
        session,
        draw.id,
        from_statuses=(TICKET_WON, TICKET_NOT_PICKED),
        to_status=TICKET_IN_DRAW,
    )
    voided = await winner_crud.void_main_for_draw(session, draw.id, now)

    draw.status = DRAW_OPEN
    draw.resolved_at = None
    draw.paid_at = None
    draw.winner_ticket_id = None
    await session.flush()

    logger.info("Reopened draw {} ({} winner rows voided)", draw.id, voided)
    return draw


async def close_today(session: AsyncSession, now: datetime | None = None) -> Draw:
    """Panic close: stop entries for today's draw immediately."""
    now = as_utc(now)
    draw = await get_today_draw(session, now)
    if draw is None:
        raise NotFound("NO_DRAW", "No draw found for today.")

    draw.status = DRAW_CLOSED
    draw.closes_at = now
    await session.flush()
    logger.warning("Panic close of draw {}", draw.id)
    return draw
