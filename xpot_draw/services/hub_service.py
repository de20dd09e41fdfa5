"""Hub extras: mission of the day and daily streak."""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.crud import hub_streak as streak_crud
from xpot_draw.db.crud import user as user_crud
from xpot_draw.errors import NotFound
from xpot_draw.services.calendar import as_utc, ymd

MISSIONS = [
    ("Lock your identity", "Make sure your X handle is linked and visible in the dashboard."),
    ("Verify eligibility", "Confirm your XPOT balance meets the minimum for today's entry."),
    ("Claim your entry", "Issue today's ticket and keep your code safe."),
    ("Proof mindset", "After draw time, verify the winner payout in an explorer."),
    ("Invite one holder", "Bring one new holder in - XPOT grows on reputation."),
    ("Stay consistent", "Show up daily. Streaks will matter after launch."),
]

_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619


def _fnv1a(text: str) -> int:
    h = _FNV_OFFSET
    for ch in text:
        h ^= ord(ch)
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return h


def mission_of_the_day(now: datetime | None = None, seed: str = "") -> dict:
    """Same mission for everyone sharing a UTC day and seed."""
    today = ymd(as_utc(now))
    title, desc = MISSIONS[_fnv1a(f"{today}|xpot-mission|{seed}") % len(MISSIONS)]
    return {"title": title, "desc": desc, "ymd": today, "source": "seeded"}


async def _user_id(session: AsyncSession, external_id: str) -> int:
    user = await user_crud.get_user_by_external_id(session, external_id)
    if user is None:
        raise NotFound("USER_NOT_FOUND")
    return user.id


def _streak_payload(streak, today) -> dict:
    return {
        "days": streak.days,
        "todayDone": streak.last_done_day == today,
        "lastDoneYmd": streak.last_done_day.isoformat() if streak.last_done_day else None,
    }


async def get_streak(
    session: AsyncSession, external_id: str, now: datetime | None = None
) -> dict:
    streak = await streak_crud.get_or_create(session, await _user_id(session, external_id))
    return _streak_payload(streak, as_utc(now).date())


async def mark_streak_done(
    session: AsyncSession, external_id: str, now: datetime | None = None
) -> dict:
    """Count today; a gap of more than one day restarts the streak at 1."""
    streak = await streak_crud.get_or_create(session, await _user_id(session, external_id))
    today = as_utc(now).date()

    if streak.last_done_day != today:
        if streak.last_done_day == today - timedelta(days=1):
            streak.days += 1
        else:
            streak.days = 1
        streak.last_done_day = today
        await session.flush()

    return _streak_payload(streak, today)
