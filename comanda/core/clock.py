"""
Comanda — Time helpers

Timestamps are stored in UTC. "Today" and daily numbering follow the
restaurant's local timezone (settings.TIMEZONE).
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from comanda.core.config import get_settings

settings = get_settings()


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime) -> datetime:
    return as_utc(value).astimezone(local_tz())


def local_today() -> date:
    return utcnow().astimezone(local_tz()).date()


def local_day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC [start, end) covering one local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=local_tz())
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_range_bounds(start_day: date, end_day: date) -> tuple[datetime, datetime]:
    start, _ = local_day_bounds(start_day)
    _, end = local_day_bounds(end_day)
    return start, end
