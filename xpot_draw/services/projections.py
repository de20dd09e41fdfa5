"""Response projections for draws, tickets and winners.

Everything here is pure: rows in, JSON-ready dicts out.
"""

import math

from xpot_draw.config import settings
from xpot_draw.db.models import BonusDrop, Draw, Ticket, Winner
from xpot_draw.db.models.bonus_drop import BONUS_FIRED
from xpot_draw.services.calendar import to_iso

WALLET_MASK_MIN_LENGTH = 10


def mask_wallet(address: str | None) -> str:
    """Show the first 4 and last 4 characters of long wallet addresses."""
    if not address:
        return ""
    if len(address) > WALLET_MASK_MIN_LENGTH:
        return f"{address[:4]}...{address[-4:]}"
    return address


def ticket_status_slug(status: str) -> str:
    """``IN_DRAW`` -> ``in-draw``, ``NOT_PICKED`` -> ``not-picked``."""
    return status.lower().replace("_", "-")


def clamp_limit(raw: str | int | None, default: int, maximum: int) -> int:
    """Parse a ``limit`` query value into ``[1, maximum]``.

    Huge values such as ``1e400`` or ``inf`` clamp to ``maximum``; ``nan``
    falls back to ``default``.
    """
    try:
        value = float(raw) if raw is not None and raw != "" else default
    except (TypeError, ValueError):
        value = default
    if math.isnan(value):
        value = default
    # Clamp before int(): infinity has no integer form
    return int(max(1, min(maximum, value)))


def draw_payload(draw: Draw, *, tickets_count: int = 0) -> dict:
    return {
        "id": draw.id,
        "date": to_iso(draw.draw_date),
        "status": draw.status,
        "closesAt": to_iso(draw.closes_at),
        "jackpotUsd": draw.jackpot_usd or 0,
        "rolloverUsd": draw.rollover_usd or 0,
        "ticketsCount": tickets_count,
        "resolvedAt": to_iso(draw.resolved_at),
        "winnerTicketId": draw.winner_ticket_id,
    }


def ticket_payload(ticket: Ticket, *, mask: bool = False) -> dict:
    address = ticket.wallet_address
    return {
        "id": ticket.id,
        "code": ticket.code,
        "status": ticket_status_slug(ticket.status),
        "walletAddress": mask_wallet(address) if mask else address,
        "createdAt": to_iso(ticket.created_at),
    }


def winner_payload(winner: Winner) -> dict:
    """Full winner record for admin consumers."""
    return {
        "id": winner.id,
        "drawId": winner.draw_id,
        "ticketId": winner.ticket_id,
        "kind": winner.kind or "MAIN",
        "label": winner.label,
        "ticketCode": winner.ticket_code,
        "walletAddress": winner.wallet_address,
        "jackpotUsd": winner.jackpot_usd or 0,
        "payoutUsd": winner.payout_usd or 0,
        "isPaidOut": winner.is_paid_out,
        "txUrl": winner.tx_url,
        "date": to_iso(winner.date),
        "isVoided": winner.is_voided,
    }


def public_winner_payload(winner: Winner) -> dict:
    """Winner card for unauthenticated readers.

    Expects ``draw`` and ``ticket.wallet.user`` to be loaded.
    """
    wallet = winner.ticket.wallet if winner.ticket is not None else None
    user = wallet.user if wallet is not None else None
    address = (wallet.address if wallet is not None else None) or winner.wallet_address

    if winner.kind == "BONUS":
        amount = winner.payout_usd or 0
    else:
        amount = settings.DAILY_XPOT

    return {
        "id": winner.id,
        "drawId": winner.draw_id,
        "kind": winner.kind or "MAIN",
        "label": winner.label or "XPOT winner",
        "drawDate": to_iso(winner.draw.draw_date) if winner.draw is not None else None,
        "date": to_iso(winner.date),
        "ticketCode": winner.ticket_code,
        "walletAddress": mask_wallet(address),
        "amountXpot": amount,
        "handle": user.x_handle if user else None,
        "name": user.x_name if user else None,
        "avatarUrl": user.x_avatar_url if user else None,
        "isPaidOut": winner.is_paid_out,
        "txUrl": winner.tx_url,
    }


def bonus_payload(drop: BonusDrop) -> dict:
    return {
        "id": drop.id,
        "drawId": drop.draw_id,
        "label": drop.label,
        "amountXpot": drop.amount_xpot,
        "scheduledAt": to_iso(drop.scheduled_at),
        "status": drop.status,
        "firedAt": to_iso(drop.fired_at),
        "winnerId": drop.winner_id,
    }


def live_bonus_payload(drop: BonusDrop) -> dict:
    """Public bonus strip entry: SCHEDULED shows as UPCOMING, FIRED as CLAIMED."""
    return {
        "id": drop.id,
        "amountXpot": drop.amount_xpot,
        "scheduledAt": to_iso(drop.scheduled_at),
        "status": "CLAIMED" if drop.status == BONUS_FIRED else "UPCOMING",
        "label": drop.label,
    }
