"""Bonus drops: scheduling, firing due drops and panic controls."""

import secrets
from datetime import datetime, timedelta, timezone

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.crud import bonus_drop as bonus_crud
from xpot_draw.db.crud import draw as draw_crud
from xpot_draw.db.models import BonusDrop, Draw
from xpot_draw.db.models.bonus_drop import BONUS_CANCELLED, BONUS_FIRED, BONUS_SCHEDULED
from xpot_draw.db.models.draw import DRAW_CLOSED, DRAW_COMPLETED, DRAW_OPEN
from xpot_draw.db.models.winner import WINNER_BONUS
from xpot_draw.errors import NotFound, ValidationFailed, XpotError
from xpot_draw.services import draw_service, winner_service
from xpot_draw.services.calendar import as_utc, compute_closes_at, today_range

ALLOWED_DELAY_MINUTES = (5, 15, 30, 60)
DEFAULT_LABEL = "Bonus XPOT"
RESOLVED_DRAW_STATUSES = (DRAW_COMPLETED, DRAW_CLOSED)


def _parse_scheduled_at(raw: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailed("INVALID_SCHEDULED_AT") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


async def _ensure_draw_row(session: AsyncSession, now: datetime) -> Draw:
    """Today's draw, created open if missing."""
    draw = await draw_service.get_today_draw(session, now)
    if draw is not None:
        return draw
    start, _ = today_range(now)
    return await draw_crud.create(
        session,
        draw_date=start,
        status=DRAW_OPEN,
        jackpot_usd=draw_service.default_jackpot(),
        rollover_usd=0.0,
        closes_at=compute_closes_at(start, now),
    )


async def schedule_bonus(
    session: AsyncSession,
    *,
    amount_xpot: float | None,
    label: str | None = None,
    delay_minutes: float | None = None,
    scheduled_at: str | None = None,
    now: datetime | None = None,
) -> BonusDrop:
    now = as_utc(now)
    if amount_xpot is None or amount_xpot <= 0:
        raise ValidationFailed("INVALID_AMOUNT")
    label = (label or "").strip()[:64] or DEFAULT_LABEL

    # An explicit timestamp wins over a delay
    if scheduled_at:
        when = _parse_scheduled_at(scheduled_at)
    else:
        if delay_minutes is None:
            raise ValidationFailed("INVALID_DELAY_MINUTES")
        if delay_minutes not in ALLOWED_DELAY_MINUTES:
            allowed = "_".join(str(m) for m in ALLOWED_DELAY_MINUTES)
            raise ValidationFailed(f"INVALID_DELAY_MINUTES_ALLOWED_{allowed}")
        when = now + timedelta(minutes=delay_minutes)

    draw = await _ensure_draw_row(session, now)
    drop = await bonus_crud.create(
        session,
        draw_id=draw.id,
        label=label,
        amount_xpot=round(amount_xpot),
        scheduled_at=when,
        status=BONUS_SCHEDULED,
        created_at=now,
    )
    logger.info("Bonus {} scheduled for {}: {} XPOT", drop.id, when, drop.amount_xpot)
    return drop


async def list_upcoming(
    session: AsyncSession, now: datetime | None = None
) -> tuple[Draw | None, list[BonusDrop]]:
    now = as_utc(now)
    draw = await draw_service.get_today_draw(session, now)
    if draw is None:
        return None, []
    return draw, await bonus_crud.list_upcoming(session, draw.id, now)


async def list_live(session: AsyncSession, now: datetime | None = None) -> list[BonusDrop]:
    """Today's scheduled and fired drops; cancelled ones are hidden."""
    draw = await draw_service.get_today_draw(session, now)
    if draw is None:
        return []
    return await bonus_crud.list_for_draw(session, draw.id, (BONUS_SCHEDULED, BONUS_FIRED))


async def fire_due_bonuses(
    session: AsyncSession,
    now: datetime | None = None,
    *,
    randbelow=secrets.randbelow,
) -> dict:
    """Resolve every due SCHEDULED drop with a BONUS pick.

    A drop whose draw is already completed or closed can never fire and is
    CANCELLED. Any other failed pick leaves the drop SCHEDULED for the next run.
    """
    now = as_utc(now)
    due = await bonus_crud.list_due(session, now)
    due_ids = [(drop.id, drop.draw_id, drop.label, drop.amount_xpot) for drop in due]

    fired, failed, cancelled = [], [], []
    for drop_id, draw_id, label, amount in due_ids:
        try:
            winner = await winner_service.pick_winner(
                session, draw_id, WINNER_BONUS, label, amount, randbelow=randbelow,
            )
        except XpotError as e:
            status = await draw_crud.get_status(session, draw_id)
            if status is None or status in RESOLVED_DRAW_STATUSES:
                drop = await session.get(BonusDrop, drop_id)
                drop.status = BONUS_CANCELLED
                await session.commit()
                logger.warning("Bonus {} cancelled: draw {} is {}", drop_id, draw_id, status)
                cancelled.append({"id": drop_id, "error": e.code})
                continue
            logger.warning("Bonus {} not fired: {}", drop_id, e.code)
            failed.append({"id": drop_id, "error": e.code})
            continue

        drop = await session.get(BonusDrop, drop_id)
        drop.status = BONUS_FIRED
        drop.fired_at = now
        drop.winner_id = winner.id
        await session.commit()
        fired.append({"id": drop_id, "winnerId": winner.id})

    if due_ids:
        logger.info(
            "Bonus run: {} fired, {} failed, {} cancelled",
            len(fired), len(failed), len(cancelled),
        )
    return {"now": now, "fired": fired, "failed": failed, "cancelled": cancelled}


async def cancel_scheduled(session: AsyncSession, now: datetime | None = None) -> tuple[Draw, int]:
    draw = await draw_service.get_today_draw(session, now)
    if draw is None:
        raise NotFound("NO_DRAW", "No draw found for today.")
    cancelled = await bonus_crud.cancel_scheduled(session, draw.id)
    logger.warning("Panic: cancelled {} scheduled bonuses of draw {}", cancelled, draw.id)
    return draw, cancelled


async def rollback_last(session: AsyncSession, now: datetime | None = None) -> tuple[Draw, int]:
    """Delete the most recently created bonus drop of today's draw."""
    draw = await draw_service.get_today_draw(session, now)
    if draw is None:
        raise NotFound("NO_DRAW", "No draw found for today.")
    last = await bonus_crud.get_latest_for_draw(session, draw.id)
    if last is None:
        raise NotFound("NO_BONUS", "No bonus drops exist for today.")
    drop_id = last.id
    await session.delete(last)
    await session.flush()
    logger.warning("Panic: deleted bonus drop {} of draw {}", drop_id, draw.id)
    return draw, drop_id
