"""Datetime helpers. Everything is persisted as naive UTC."""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value: Optional[datetime]) -> str:
    """RFC 3339 string with a trailing Z, as Google APIs expect"""
    if value is None:
        return ""
    value = to_naive_utc(value)
    return value.isoformat(timespec="seconds") + "Z"


def parse_google_datetime(payload: Optional[dict]) -> Optional[datetime]:
    """Parse a Calendar start/end object ({"dateTime": ...} or all-day {"date": ...})"""
    if not payload:
        return None
    raw = payload.get("dateTime") or payload.get("date")
    if not raw:
        return None
    return to_naive_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
