"""
src/adapters/formatting.py
──────────────────────────
Human-readable timestamps and coordinates.
"""
from __future__ import annotations

from datetime import UTC, datetime

_UNITS = (
    ("year", 31_536_000),
    ("month", 2_592_000),
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
)


def time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """'just now', '1 minute ago', '3 hours ago', ..."""
    now = now or datetime.now(tz=UTC)
    seconds = int((now - timestamp).total_seconds())
    for name, size in _UNITS:
        count = seconds // size
        if count > 1:
            return f"{count} {name}s ago"
        if count == 1:
            return f"1 {name} ago"
    return "just now"


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime("%d/%m/%Y %H:%M:%S")


def format_location(latitude: float, longitude: float, digits: int = 3) -> str:
    return f"[{latitude:.{digits}f}, {longitude:.{digits}f}]"
