"""
Time utilities for dexwatch.

All timestamps are UTC. Persisted timestamps use RFC3339 (ISO-8601 with offset).
"""

from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC. Naive datetimes are assumed to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: Optional[datetime] = None, fmt: str = "rfc3339") -> str:
    """
    Format datetime to string.

    Args:
        dt: Datetime to format. Uses current UTC time if not provided.
        fmt: 'rfc3339' for storage, 'display' for console tables

    Returns:
        Formatted string
    """
    if dt is None:
        dt = now_utc()

    if fmt == "rfc3339":
        return to_utc(dt).isoformat()
    if fmt == "display":
        return to_utc(dt).strftime("%Y-%m-%d %H:%M:%S")
    raise ValueError(f"Unknown timestamp format: {fmt!r}")


def parse_timestamp(s: str) -> datetime:
    """Parse an RFC3339 string back to an aware UTC datetime."""
    return to_utc(datetime.fromisoformat(s))
