"""Epoch-second timestamps as they appear on the wire."""

from datetime import datetime, timezone
from typing import Any, Optional

from src.core.exceptions import DecodeError


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a numeric epoch value into an aware UTC datetime.

    Reddit sends ``false`` for "edited" when a thing was never edited,
    so ``False`` (like ``None``) means unset. Fractional seconds are dropped.

    Raises:
        DecodeError: value is neither a number, null nor false
    """
    if value is None or value is False:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Invalid timestamp value: {value!r}")
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise DecodeError(f"Timestamp out of range: {value!r}") from e


def format_timestamp(value: Optional[datetime]) -> Optional[float]:
    """Inverse of parse_timestamp. Unset timestamps encode as null."""
    if value is None:
        return None
    return float(int(value.timestamp()))
