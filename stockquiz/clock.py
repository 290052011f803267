from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from stockquiz.config import QUIZ_TIMEZONE


def now_utc():
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """SQLite hands datetimes back without tzinfo; stored values are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_schedule_time(now: datetime) -> datetime:
    """Express ``now`` in the schedule time zone.

    Naive values are assumed to already be schedule-local wall time.
    """
    if now.tzinfo is None:
        return now
    return now.astimezone(ZoneInfo(QUIZ_TIMEZONE))
