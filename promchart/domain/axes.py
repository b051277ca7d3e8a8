"""Time-axis presentation and gap filling.

Renderers draw a straight line between consecutive points. When the backend
skipped samples, :func:`fill_gaps` inserts a ``y=None`` point so the line is
broken instead of interpolated across missing data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Sequence

from .models import Dataset, Point

logger = logging.getLogger(__name__)

# (max span in seconds, display unit), first match wins
_UNIT_THRESHOLDS = (
    (120, "second"),
    (2 * 3600, "minute"),
    (2 * 86400, "hour"),
    (60 * 86400, "day"),
    (730 * 86400, "month"),
)


@dataclass(frozen=True)
class TimeAxis:
    """X axis settings handed to the host chart after each refresh."""

    min: datetime
    max: datetime
    unit: str
    stacked: bool = False


def display_unit(start: datetime, end: datetime) -> str:
    span = abs((end - start).total_seconds())
    for limit, unit in _UNIT_THRESHOLDS:
        if span <= limit:
            return unit
    return "year"


def time_axis_options(start: datetime, end: datetime, stacked: bool = False) -> TimeAxis:
    return TimeAxis(min=start, max=end, unit=display_unit(start, end), stacked=stacked)


def _fill_points(
    points: Sequence[Point], start: datetime, end: datetime, step: timedelta
) -> List[Point]:
    if not points:
        return []
    filled: List[Point] = []
    if points[0].x - start > step:
        filled.append(Point(x=start, y=None))
    previous = None
    for point in points:
        if previous is not None and point.x - previous.x > step:
            filled.append(Point(x=previous.x + step, y=None))
        filled.append(point)
        previous = point
    if end - points[-1].x > step:
        filled.append(Point(x=points[-1].x + step, y=None))
    return filled


def fill_gaps(
    datasets: Sequence[Dataset], start: datetime, end: datetime, step: int
) -> List[Dataset]:
    """Return copies of ``datasets`` with null points marking missing samples.

    A gap is any spacing strictly larger than ``step`` seconds between two
    consecutive points, or between ``start`` and the first point, or between
    the last point and ``end``.
    """
    delta = timedelta(seconds=step)
    out = []
    inserted = 0
    for dataset in datasets:
        points = _fill_points(dataset.data, start, end, delta)
        inserted += len(points) - len(dataset.data)
        out.append(dataset.model_copy(update={"data": points}))
    logger.debug("axes.fill_gaps", extra={"inserted": inserted, "step": step})
    return out
