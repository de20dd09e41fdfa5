"""Ticket claim and ticket listing endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db
from xpot_draw.schemas.ticket import ClaimTicketRequest
from xpot_draw.services import ticket_service
from xpot_draw.services.calendar import to_iso
from xpot_draw.services.projections import ticket_payload

router = APIRouter()


@router.post("/claim")
async def claim(request: ClaimTicketRequest, db: AsyncSession = Depends(get_db)):
    """Claim today's entry for a wallet (returns the existing one if already claimed)."""
    draw, ticket, created = await ticket_service.claim_ticket(db, request.wallet_address)
    return {
        "ok": True,
        "drawId": draw.id,
        "created": created,
        "ticket": ticket_payload(ticket),
    }


@router.get("/today")
async def today(db: AsyncSession = Depends(get_db)):
    draw, tickets = await ticket_service.list_today_tickets(db)
    return {
        "ok": True,
        "drawId": draw.id if draw else None,
        "tickets": [ticket_payload(t, mask=True) for t in tickets],
    }


@router.get("/history")
async def history(
    wallet_address: str | None = Query(None, alias="walletAddress"),
    db: AsyncSession = Depends(get_db),
):
    tickets = await ticket_service.ticket_history(db, wallet_address)
    items = []
    for t in tickets:
        item = ticket_payload(t)
        item["drawDate"] = to_iso(t.draw.draw_date) if t.draw else None
        item["jackpotUsd"] = t.draw.jackpot_usd if t.draw else 0
        items.append(item)
    return {"ok": True, "tickets": items}
