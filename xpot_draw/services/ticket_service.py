"""Ticket issuance and ticket read models."""

import secrets
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.crud import ticket as ticket_crud
from xpot_draw.db.crud import user as user_crud
from xpot_draw.db.models import Draw, Ticket
from xpot_draw.db.models.draw import DRAW_OPEN
from xpot_draw.db.models.ticket import TICKET_IN_DRAW
from xpot_draw.errors import Conflict, ValidationFailed
from xpot_draw.services import draw_service
from xpot_draw.services.calendar import as_utc

CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
CODE_ATTEMPTS = 5
WALLET_ADDRESS_MAX_LENGTH = 64


def make_ticket_code() -> str:
    """``XPOT-XXXX-XXXX`` from an alphabet without look-alike characters."""

    def chunk() -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(4))

    return f"XPOT-{chunk()}-{chunk()}"


async def _unique_code(session: AsyncSession) -> str:
    for _ in range(CODE_ATTEMPTS):
        code = make_ticket_code()
        if not await ticket_crud.code_exists(session, code):
            return code
    raise RuntimeError("Could not generate a unique ticket code")


async def claim_ticket(
    session: AsyncSession, wallet_address: str, now: datetime | None = None
) -> tuple[Draw, Ticket, bool]:
    """Issue today's ticket for a wallet.

    Returns ``(draw, ticket, created)``. A wallet that already holds an
    IN_DRAW ticket for today's draw gets that ticket back.
    """
    wallet_address = (wallet_address or "").strip()
    if not wallet_address:
        raise ValidationFailed("MISSING_WALLET_ADDRESS")
    if len(wallet_address) > WALLET_ADDRESS_MAX_LENGTH:
        raise ValidationFailed("INVALID_WALLET_ADDRESS")

    now = as_utc(now)
    draw = await draw_service.ensure_today_draw(session, now)
    if draw is None or draw.status != DRAW_OPEN:
        raise Conflict("NO_OPEN_DRAW")
    if draw.closes_at is not None and draw.closes_at <= now:
        raise Conflict("DRAW_CLOSED")

    wallet = await user_crud.get_or_create_wallet(session, wallet_address)

    existing = await ticket_crud.get_in_draw_for_wallet(session, draw.id, wallet_address)
    if existing is not None:
        return draw, existing, False

    ticket = await ticket_crud.create(
        session,
        code=await _unique_code(session),
        status=TICKET_IN_DRAW,
        draw_id=draw.id,
        wallet_id=wallet.id,
        wallet_address=wallet_address,
        user_id=wallet.user_id,
        created_at=now,
    )
    logger.info("Ticket {} issued to {} for draw {}", ticket.code, wallet_address, draw.id)
    return draw, ticket, True


async def list_today_tickets(
    session: AsyncSession, now: datetime | None = None
) -> tuple[Draw | None, list[Ticket]]:
    draw = await draw_service.get_today_draw(session, now)
    if draw is None:
        return None, []
    return draw, await ticket_crud.list_for_draw(session, draw.id)


async def ticket_history(
    session: AsyncSession, wallet_address: str, *, limit: int = 200
) -> list[Ticket]:
    wallet_address = (wallet_address or "").strip()
    if not wallet_address:
        raise ValidationFailed("MISSING_WALLET_ADDRESS")
    return await ticket_crud.list_for_wallet(session, wallet_address, limit=limit)
