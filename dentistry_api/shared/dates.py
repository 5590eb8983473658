"""Timestamp helpers for the dashboard's dd/mm/yyyy display format"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import DISPLAY_TIMEZONE

DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops the offset) and normalize aware ones"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_z(value: datetime) -> str:
    """UTC ISO-8601 with a trailing Z, the form Cal.com expects in query filters"""
    return as_utc(value).isoformat().replace("+00:00", "Z")


def format_date(value: Optional[datetime], tz_name: str = DISPLAY_TIMEZONE) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).astimezone(ZoneInfo(tz_name)).strftime(DATE_FORMAT)


def format_datetime(value: Optional[datetime], tz_name: str = DISPLAY_TIMEZONE) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).astimezone(ZoneInfo(tz_name)).strftime(DATETIME_FORMAT)
