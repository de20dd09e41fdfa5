"""Day boundaries and timestamp helpers shared by every draw endpoint.

Timestamps are stored as naive UTC. A draw's calendar day is defined in
``settings.DRAW_TIMEZONE`` and converted back to a UTC ``[start, end)`` range.
"""

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from xpot_draw.config import settings


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_aware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _to_naive_utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(now: datetime | None = None) -> datetime:
    """``now`` as naive UTC (aware values are converted); current time when omitted."""
    if now is None:
        return utcnow()
    return _to_naive_utc(_as_aware_utc(now))


def day_range(now: datetime, tz_name: str = "UTC") -> tuple[datetime, datetime]:
    """Return the naive-UTC ``[start, end)`` of the calendar day containing ``now``.

    ``now`` may be naive (taken as UTC) or aware. The day is the local day
    in ``tz_name``, so across a DST change it can be 23 or 25 hours long.
    """
    tz = ZoneInfo(tz_name)
    local_day = _as_aware_utc(now).astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    return _to_naive_utc(start), _to_naive_utc(end)


def today_range(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Day range for ``now`` in the configured draw timezone."""
    return day_range(now or utcnow(), settings.DRAW_TIMEZONE)


def compute_closes_at(day_start: datetime, now: datetime) -> datetime:
    """Closing time for the draw of the day starting at ``day_start``."""
    if settings.DRAW_CLOSE_HOUR is None:
        return now + timedelta(hours=24)

    tz = ZoneInfo(settings.DRAW_TIMEZONE)
    local_day = _as_aware_utc(day_start).astimezone(tz).date()
    local_close = datetime.combine(
        local_day,
        time(settings.DRAW_CLOSE_HOUR, settings.DRAW_CLOSE_MINUTE),
        tzinfo=tz,
    )
    return _to_naive_utc(local_close)


def to_iso(dt: datetime | None) -> str | None:
    """ISO-8601 UTC with millisecond precision, e.g. ``2025-01-02T21:00:00.000Z``."""
    if dt is None:
        return None
    return as_utc(dt).isoformat(timespec="milliseconds") + "Z"


def ymd(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d")
