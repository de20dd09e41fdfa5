"""Operator endpoints. Every route requires the admin token."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db, require_admin
from xpot_draw.db.crud import bonus_drop as bonus_crud
from xpot_draw.db.crud import ticket as ticket_crud
from xpot_draw.db.crud import winner as winner_crud
from xpot_draw.scheduler import get_scheduler_status
from xpot_draw.schemas.draw import (
    BonusScheduleRequest,
    MarkPaidRequest,
    PickBonusWinnerRequest,
    PickWinnerRequest,
    ReopenDrawRequest,
)
from xpot_draw.services import bonus_service, draw_service, ticket_service, winner_service
from xpot_draw.services.calendar import to_iso, utcnow
from xpot_draw.services.projections import (
    bonus_payload,
    clamp_limit,
    draw_payload,
    ticket_payload,
    winner_payload,
)

router = APIRouter(dependencies=[Depends(require_admin)])

WINNERS_DEFAULT_LIMIT = 20
WINNERS_MAX_LIMIT = 80


@router.get("/health")
async def health():
    return {
        "ok": True,
        "ops": True,
        "mode": "available",
        "schedulerJobs": get_scheduler_status(),
    }


@router.get("/dashboard")
async def dashboard(db: AsyncSession = Depends(get_db)):
    """Summary of today's draw."""
    draw = await draw_service.get_today_draw(db)
    if draw is None:
        return {"ok": True, "today": None}

    tickets_count = await ticket_crud.count_for_draw(db, draw.id)
    summary = draw_payload(draw, tickets_count=tickets_count)
    summary["winnersCount"] = await winner_crud.count_for_draw(db, draw.id)
    summary["bonusDropsCount"] = await bonus_crud.count_for_draw(db, draw.id)
    return {"ok": True, "today": summary}


@router.get("/tickets")
async def today_tickets(db: AsyncSession = Depends(get_db)):
    draw, tickets = await ticket_service.list_today_tickets(db)
    jackpot = draw.jackpot_usd if draw else 0
    items = []
    for t in tickets:
        item = ticket_payload(t)
        item["jackpotUsd"] = jackpot
        user = t.wallet.user if t.wallet is not None else None
        item["handle"] = user.x_handle if user else None
        items.append(item)
    return {"ok": True, "drawId": draw.id if draw else None, "tickets": items}


@router.get("/winners")
async def winners(
    limit: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Every winner including voided ones. ``limit`` is clamped to ``[1, 80]``."""
    take = clamp_limit(limit, WINNERS_DEFAULT_LIMIT, WINNERS_MAX_LIMIT)
    rows = await winner_crud.list_recent(db, limit=take, include_voided=True)
    return {"ok": True, "limit": take, "winners": [winner_payload(w) for w in rows]}


@router.post("/create-today-draw")
async def create_today_draw(db: AsyncSession = Depends(get_db)):
    draw = await draw_service.create_today_draw(db)
    return {"ok": True, "drawId": draw.id, "drawDate": to_iso(draw.draw_date)}


@router.post("/pick-winner")
async def pick_winner(
    request: PickWinnerRequest | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Resolve the main prize (today's draw unless ``drawId`` is given)."""
    draw_id = request.draw_id if request else None
    winner = await winner_service.pick_main_winner(db, draw_id)
    return {"ok": True, "winner": winner_payload(winner)}


@router.post("/pick-bonus-winner")
async def pick_bonus_winner(
    request: PickBonusWinnerRequest,
    db: AsyncSession = Depends(get_db),
):
    winner = await winner_service.pick_bonus_winner(
        db, request.draw_id, request.label, request.amount_xpot,
    )
    return {"ok": True, "winner": winner_payload(winner)}


@router.post("/draw/reopen")
async def reopen_draw(
    request: ReopenDrawRequest | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Reopen a resolved draw (latest draw unless ``drawId`` is given)."""
    draw = await draw_service.reopen_draw(db, request.draw_id if request else None)
    return {"ok": True, "message": "DRAW_REOPENED", "drawId": draw.id}


@router.post("/mark-paid")
async def mark_paid(request: MarkPaidRequest, db: AsyncSession = Depends(get_db)):
    result = await winner_service.mark_paid(
        db,
        winner_id=request.winner_id,
        ticket_id=request.ticket_id,
        tx_url=request.tx_url,
    )
    return {"ok": True, **result}


@router.get("/bonus-schedule")
async def upcoming_bonuses(db: AsyncSession = Depends(get_db)):
    now = utcnow()
    draw, upcoming = await bonus_service.list_upcoming(db, now)
    return {
        "ok": True,
        "drawExists": draw is not None,
        "drawId": draw.id if draw else None,
        "upcoming": [bonus_payload(d) for d in upcoming],
        "now": to_iso(now),
    }


@router.post("/bonus-schedule")
async def schedule_bonus(
    request: BonusScheduleRequest,
    db: AsyncSession = Depends(get_db),
):
    delay = request.delay_minutes
    if delay is None:
        delay = request.minutes_from_now
    drop = await bonus_service.schedule_bonus(
        db,
        amount_xpot=request.amount_xpot,
        label=request.label,
        delay_minutes=delay,
        scheduled_at=request.scheduled_at,
    )
    return {"ok": True, "drop": bonus_payload(drop)}


@router.post("/panic/close-today")
async def panic_close_today(db: AsyncSession = Depends(get_db)):
    draw = await draw_service.close_today(db)
    return {
        "ok": True,
        "drawId": draw.id,
        "status": draw.status,
        "closesAt": to_iso(draw.closes_at),
    }


@router.post("/panic/cancel-bonuses")
async def panic_cancel_bonuses(db: AsyncSession = Depends(get_db)):
    draw, cancelled = await bonus_service.cancel_scheduled(db)
    return {"ok": True, "drawId": draw.id, "cancelled": cancelled}


@router.post("/panic/rollback-last-bonus")
async def panic_rollback_last_bonus(db: AsyncSession = Depends(get_db)):
    draw, drop_id = await bonus_service.rollback_last(db)
    return {"ok": True, "drawId": draw.id, "deletedBonusDropId": drop_id}
