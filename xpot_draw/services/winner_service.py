"""Winner selection and payout bookkeeping."""

import secrets
from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.config import settings
from xpot_draw.db.crud import draw as draw_crud
from xpot_draw.db.crud import ticket as ticket_crud
from xpot_draw.db.crud import winner as winner_crud
from xpot_draw.db.models import Winner
from xpot_draw.db.models.draw import DRAW_COMPLETED, DRAW_DRAWING, DRAW_OPEN
from xpot_draw.db.models.ticket import (
    TICKET_CLAIMED,
    TICKET_IN_DRAW,
    TICKET_NOT_PICKED,
    TICKET_WON,
)
from xpot_draw.db.models.winner import WINNER_BONUS, WINNER_MAIN
from xpot_draw.errors import Conflict, NotFound, ValidationFailed
from xpot_draw.services import draw_service
from xpot_draw.services.calendar import utcnow

MAIN_LABEL = "Main XPOT winner"
BONUS_LABEL = "Bonus XPOT"
LABEL_MAX_LENGTH = 64

RandBelow = Callable[[int], int]


async def pick_winner(
    session: AsyncSession,
    draw_id: int,
    kind: str,
    label: str | None,
    amount: float,
    *,
    randbelow: RandBelow = secrets.randbelow,
) -> Winner:
    """Pick one IN_DRAW ticket of ``draw_id`` uniformly at random and record a winner.

    The draw is claimed with a conditional ``open -> drawing`` update that is
    committed before tickets are read, so a concurrent pick on the same draw
    fails with ``DRAW_NOT_OPEN`` instead of resolving it twice. On success a
    MAIN pick leaves the draw ``completed`` and a BONUS pick leaves it
    ``open``; on any failure the draw is put back to ``open``.
    """
    kind = (kind or "").upper()
    if kind not in (WINNER_MAIN, WINNER_BONUS):
        raise ValidationFailed("INVALID_KIND")

    claimed = await draw_crud.transition_status(session, draw_id, DRAW_OPEN, DRAW_DRAWING)
    if not claimed:
        draw = await draw_crud.get_by_id(session, draw_id)
        if draw is None:
            raise NotFound("DRAW_NOT_FOUND")
        logger.warning("Pick on draw {} rejected: status is {}", draw_id, draw.status)
        raise Conflict("DRAW_NOT_OPEN")
    await session.commit()

    try:
        winner = await _select_and_record(session, draw_id, kind, label, amount, randbelow)
        await session.commit()
    except Exception:
        await session.rollback()
        await draw_crud.transition_status(session, draw_id, DRAW_DRAWING, DRAW_OPEN)
        await session.commit()
        raise

    logger.info(
        "{} winner {} for draw {}: ticket {} ({})",
        kind, winner.id, draw_id, winner.ticket_code, winner.wallet_address,
    )
    return winner


async def _select_and_record(
    session: AsyncSession,
    draw_id: int,
    kind: str,
    label: str | None,
    amount: float,
    randbelow: RandBelow,
) -> Winner:
    tickets = await ticket_crud.list_eligible(session, draw_id)
    if not tickets:
        logger.warning("Draw {} has no eligible tickets", draw_id)
        raise Conflict("NO_TICKETS_IN_DRAW")

    picked = tickets[randbelow(len(tickets))]
    draw = await draw_crud.get_by_id(session, draw_id)
    now = utcnow()

    winner = await winner_crud.create(
        session,
        draw_id=draw_id,
        ticket_id=picked.id,
        kind=kind,
        label=label or (MAIN_LABEL if kind == WINNER_MAIN else BONUS_LABEL),
        ticket_code=picked.code,
        wallet_address=picked.wallet_address,
        jackpot_usd=draw.jackpot_usd if kind == WINNER_MAIN else 0,
        payout_usd=amount,
        is_paid_out=False,
        date=now,
    )

    if kind == WINNER_MAIN:
        picked.status = TICKET_WON
        await session.flush()
        await ticket_crud.set_status_for_draw(
            session,
            draw_id,
            from_statuses=(TICKET_IN_DRAW,),
            to_status=TICKET_NOT_PICKED,
        )
        draw.status = DRAW_COMPLETED
        draw.resolved_at = now
        draw.winner_ticket_id = picked.id
    else:
        draw.status = DRAW_OPEN

    await session.flush()
    return winner


async def pick_main_winner(
    session: AsyncSession,
    draw_id: int | None = None,
    now: datetime | None = None,
    *,
    randbelow: RandBelow = secrets.randbelow,
) -> Winner:
    """Resolve the main prize of a draw (today's when ``draw_id`` is omitted).

    An existing non-voided MAIN winner is returned as is.
    """
    if draw_id is None:
        draw = await draw_service.get_today_draw(session, now)
        if draw is None:
            raise Conflict("NO_OPEN_DRAW_FOR_TODAY")
        draw_id = draw.id

    existing = await winner_crud.get_active_main(session, draw_id)
    if existing is not None:
        return existing

    draw = await draw_crud.get_by_id(session, draw_id)
    if draw is None:
        raise NotFound("DRAW_NOT_FOUND")
    return await pick_winner(
        session, draw_id, WINNER_MAIN, MAIN_LABEL, draw.jackpot_usd, randbelow=randbelow,
    )


async def pick_bonus_winner(
    session: AsyncSession,
    draw_id: int | None,
    label: str | None,
    amount_xpot: float,
    now: datetime | None = None,
    *,
    randbelow: RandBelow = secrets.randbelow,
) -> Winner:
    if amount_xpot is None or amount_xpot < settings.BONUS_MIN_XPOT:
        raise ValidationFailed(
            "INVALID_AMOUNT",
            f"Invalid amountXpot (min {settings.BONUS_MIN_XPOT:,}).",
        )
    label = (label or "").strip()[:LABEL_MAX_LENGTH] or BONUS_LABEL

    if draw_id is None:
        draw = await draw_service.get_today_draw(session, now)
        if draw is None:
            raise NotFound("NO_DRAW_TODAY", "No draw found for today.")
        draw_id = draw.id

    return await pick_winner(
        session, draw_id, WINNER_BONUS, label, amount_xpot, randbelow=randbelow,
    )


async def mark_paid(
    session: AsyncSession,
    *,
    winner_id: int | None = None,
    ticket_id: int | None = None,
    tx_url: str | None = None,
) -> dict:
    """Record a payout by winner (preferred) or by ticket."""
    if winner_id is None and ticket_id is None:
        raise ValidationFailed("MISSING_ticketId_OR_winnerId")

    if winner_id is not None:
        winner = await winner_crud.get_by_id(session, winner_id)
        if winner is None:
            raise NotFound("WINNER_NOT_FOUND")

        winner.is_paid_out = True
        if tx_url:
            winner.tx_url = tx_url

        # A bonus ticket stays in the main pool
        if winner.kind == WINNER_MAIN:
            await ticket_crud.set_status(session, winner.ticket_id, TICKET_CLAIMED)
            draw = await draw_crud.get_by_id(session, winner.draw_id)
            if draw is not None:
                draw.paid_at = utcnow()
                if tx_url:
                    draw.payout_tx = tx_url
        await session.flush()
        logger.info("Winner {} marked paid", winner_id)
        return {"winnerId": winner_id}

    ticket = await ticket_crud.get_by_id(session, ticket_id)
    if ticket is None:
        raise NotFound("TICKET_NOT_FOUND")
    ticket.status = TICKET_CLAIMED
    await session.flush()
    logger.info("Ticket {} marked claimed", ticket_id)
    return {"ticketId": ticket_id}
