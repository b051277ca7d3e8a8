"""
Timestamp parsing and conversion utilities.

Provides utilities for parsing ISO8601 timestamps and Unix timestamps
(seconds and milliseconds), and for converting datetimes to the Unix seconds
the Prometheus HTTP API expects.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[Union[str, int, float]]) -> Optional[datetime]:
    """
    Parse a timestamp from various formats.

    Supports:
    - ISO8601 strings (with or without 'Z' suffix)
    - Unix timestamps in seconds (< 10000000000)
    - Unix timestamps in milliseconds (≥ 10000000000)

    Parameters
    ----------
    value : str, int, float, or None
        The timestamp to parse

    Returns
    -------
    datetime or None
        Parsed datetime in UTC, or None if parsing fails

    Examples
    --------
    >>> parse_timestamp("2025-10-15T12:00:00Z")
    datetime.datetime(2025, 10, 15, 12, 0, tzinfo=datetime.timezone.utc)
    >>> parse_timestamp(1697385600)  # Unix seconds
    datetime.datetime(2023, 10, 15, 16, 0, tzinfo=datetime.timezone.utc)
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, str):
        return _parse_iso8601(value)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _parse_unix_timestamp(value)

    return None


def _parse_iso8601(value: str) -> Optional[datetime]:
    """Parse an ISO8601 timestamp string, defaulting naive values to UTC."""
    if not value:
        return None

    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"

        dt = datetime.fromisoformat(value)

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)

        return dt
    except (ValueError, TypeError):
        logger.warning(
            "timestamps.parse_iso8601_failed",
            extra={"value": value, "error": "invalid format"},
        )
        return None


def _parse_unix_timestamp(value: Union[int, float]) -> Optional[datetime]:
    """
    Parse a Unix timestamp (seconds or milliseconds since epoch).

    Values ≥ 10000000000 are treated as milliseconds.
    """
    try:
        if value >= 10000000000:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (ValueError, TypeError, OSError, OverflowError):
        logger.warning(
            "timestamps.parse_unix_failed",
            extra={"value": value, "error": "invalid timestamp"},
        )
        return None


def to_unix_seconds(dt: datetime) -> float:
    """Convert a datetime to Unix seconds; naive values are taken as UTC.

    Examples
    --------
    >>> to_unix_seconds(datetime(2023, 10, 15, 16, 0, tzinfo=timezone.utc))
    1697385600.0
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()
