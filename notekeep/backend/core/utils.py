"""
Core Utilities.

Shared utility functions used across the backend.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as a timezone-aware datetime.

    Timestamps coming back from the store carry an offset, so local
    values are kept aware as well to stay comparable with them.
    """
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way the note list shows it (e.g. Jan 05, 2025 14:30)."""
    return value.astimezone().strftime("%b %d, %Y %H:%M")
