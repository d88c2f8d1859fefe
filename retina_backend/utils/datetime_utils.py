"""
Centralized DateTime Utilities
==============================

Timestamps in this service are either timezone-aware UTC datetimes (analysis
records) or epoch milliseconds (inference status checks).

Functions:
- utc_now(): Current UTC time as an aware datetime
- to_iso(): Convert a datetime to ISO 8601
- epoch_ms_to_iso(): Convert epoch milliseconds to ISO 8601
"""
from datetime import datetime, timezone as dt_timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as a timezone-aware datetime."""
    return datetime.now(dt_timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime into a timezone-aware UTC datetime.

    - If dt is None -> None
    - If dt is naive -> assume it represents UTC
    - If dt is aware -> convert to UTC
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert datetime object to ISO 8601 string ('Z' suffix for UTC).

    Naive datetimes are assumed to be UTC.
    """
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms_to_iso(epoch_ms: Optional[int]) -> Optional[str]:
    """Convert epoch milliseconds (as stored on EndpointStatus) to ISO 8601"""
    if epoch_ms is None:
        return None
    return to_iso(datetime.fromtimestamp(epoch_ms / 1000, tz=dt_timezone.utc))
