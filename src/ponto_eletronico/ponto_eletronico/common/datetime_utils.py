from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError


@lru_cache(maxsize=32)
def get_zone(name: str | None = None) -> ZoneInfo:
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except ZoneInfoNotFoundError:
        raise ValidationError(f"Fuso horário inválido: {name}")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Data inválida: {value!r}")


def parse_iso_datetime(value: str, *, tz_name: str | None = None) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken as wall-clock time in ``tz_name`` (the employee's
    local zone), since that is what an admin types in a correction form.
    """
    try:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Data/hora inválida: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=get_zone(tz_name))
    return dt.astimezone(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a stored timestamp to aware UTC.

    MySQL DATETIME columns come back naive; they are always written in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz_name: str | None = None) -> datetime:
    return as_utc(value).astimezone(get_zone(tz_name))


def local_date(value: datetime, tz_name: str | None = None) -> date:
    """Calendar date of an instant as seen in the given zone."""
    return to_local(value, tz_name).date()


def local_range_bounds(start: date, end: date, tz_name: str | None = None) -> tuple[datetime, datetime]:
    """UTC half-open bounds [start 00:00 local, (end + 1) 00:00 local)."""
    zone = get_zone(tz_name)
    lower = datetime.combine(start, time.min, tzinfo=zone)
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=zone)
    return lower.astimezone(timezone.utc), upper.astimezone(timezone.utc)


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def today_local(tz_name: str | None = None) -> date:
    return now_utc().astimezone(get_zone(tz_name)).date()


def parse_local_day(value, *, tz_name: str | None = None) -> date:
    """Calendar date from ``YYYY-MM-DD`` or a full ISO timestamp.

    Browsers send date pickers as ``2025-01-06T03:00:00.000Z``; that is local
    midnight, so the day is taken in ``tz_name``.
    """
    if isinstance(value, datetime):
        return local_date(value, tz_name)
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if len(text) == 10:
        return parse_iso_date(text)
    return local_date(parse_iso_datetime(text, tz_name=tz_name), tz_name)
