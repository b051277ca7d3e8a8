"""Per-chart mutable state owned by the lifecycle plugin."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..domain.timerange import WindowKey
from ..utils.timer import IntervalTimer

FETCH_ERROR_MESSAGE = "Failed to fetch data"


class ChartPhase(Enum):
    """Lifecycle phase of one chart, orthogonal to its error flag."""

    IDLE = "idle"
    REFRESHING = "refreshing"  # a query dispatch is outstanding
    RENDERING = "rendering"  # the plugin's own render pass is running


@dataclass
class PerChartState:
    """State for one chart, created at init and dropped at teardown.

    Attributes
    ----------
    loading : bool
        A refresh is in flight.
    rendering : bool
        The plugin is inside its own ``chart.update()`` call; guards against
        the re-entrant ``before_update`` that call triggers.
    error : str, optional
        Failure message painted by the overlay.
    update_interval : IntervalTimer, optional
        Auto-refresh timer, when configured.
    step, start, end
        Last applied window, for change detection.
    pending : asyncio.Task, optional
        Most recent refresh task; awaiting it surfaces refresh failures.
    """

    loading: bool = False
    rendering: bool = False
    error: Optional[str] = None
    update_interval: Optional[IntervalTimer] = None
    step: Optional[int] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    pending: Optional["asyncio.Task[Any]"] = None

    @property
    def phase(self) -> ChartPhase:
        if self.rendering:
            return ChartPhase.RENDERING
        if self.loading:
            return ChartPhase.REFRESHING
        return ChartPhase.IDLE

    @property
    def window(self) -> Optional[WindowKey]:
        if self.step is None or self.start is None or self.end is None:
            return None
        return WindowKey(self.step, self.start, self.end)

    def apply_window(self, window: WindowKey) -> None:
        self.step, self.start, self.end = window
