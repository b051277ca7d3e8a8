"""Time-range resolution and query step selection.

A render cycle turns the configured :class:`~promchart.config.models.TimeRange`
into absolute ``(start, end)`` instants and a sampling step in seconds. The
resulting ``(step, start, end)`` triple is what change detection compares
between cycles.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional, Tuple

from ..config.models import TimeRange

# Candidate steps in seconds, smallest first.
_STEP_LADDER: Tuple[int, ...] = (
    1,
    2,
    5,
    10,
    15,
    30,
    60,
    2 * 60,
    5 * 60,
    10 * 60,
    15 * 60,
    30 * 60,
    3600,
    2 * 3600,
    3 * 3600,
    6 * 3600,
    12 * 3600,
    86400,
)


class WindowKey(NamedTuple):
    """Last applied window, used to skip redundant refreshes."""

    step: int
    start: datetime
    end: datetime


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds.

    Prometheus works at second resolution; truncation also keeps redraws that
    happen within the same second on the same window.
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


def resolve(
    time_range: TimeRange, now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Return absolute ``(start, end)`` for a time range.

    Relative ranges are re-anchored on ``now`` at every call; absolute ranges
    are passed through unchanged.
    """
    if time_range.type == "relative":
        anchor = now if now is not None else utc_now()
        start = anchor + timedelta(seconds=float(time_range.start))  # type: ignore[arg-type]
        end = anchor + timedelta(seconds=float(time_range.end))  # type: ignore[arg-type]
        return start, end
    return time_range.start, time_range.end  # type: ignore[return-value]


def compute_step(start: datetime, end: datetime, pixel_width: float) -> int:
    """Return the automatic step: about one sample per pixel.

    The raw interval is rounded up to the next value of a fixed ladder
    (1s, 2s, 5s ... 12h, 1d) and to whole days beyond it, so a multi-day
    window never queries at sub-second resolution.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> end = datetime(2024, 1, 1, 1, tzinfo=timezone.utc)
    >>> compute_step(end.replace(hour=0), end, 600)
    10
    """
    duration = max(0.0, (end - start).total_seconds())
    width = max(1.0, float(pixel_width or 1))
    raw = duration / width
    for candidate in _STEP_LADDER:
        if candidate >= raw:
            return candidate
    return int(math.ceil(raw / 86400)) * 86400


def effective_step(
    time_range: TimeRange, start: datetime, end: datetime, pixel_width: float
) -> int:
    """Select the query step.

    An explicit ``step`` replaces the automatic one; ``min_step`` is a floor
    that wins whenever it is larger.
    """
    expected = time_range.step or compute_step(start, end, pixel_width)
    floor = time_range.min_step or expected
    return max(floor, expected)


def window_for(
    time_range: TimeRange, pixel_width: float, now: Optional[datetime] = None
) -> WindowKey:
    """Resolve a time range and its step in one call."""
    start, end = resolve(time_range, now=now)
    return WindowKey(effective_step(time_range, start, end, pixel_width), start, end)
