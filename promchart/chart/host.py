"""Contracts the hosting chart must satisfy.

The plugin never renders series itself; it replaces the chart's datasets,
asks for render passes and paints overlay text through these protocols.
"""

from __future__ import annotations

from typing import List, Protocol

from ..domain.axes import TimeAxis
from ..domain.models import Dataset


class DrawingContext(Protocol):
    """Subset of a 2D canvas context used to paint overlay text."""

    font: str
    text_align: str
    text_baseline: str
    direction: str

    def save(self) -> None:
        """Push the current drawing state."""
        ...

    def restore(self) -> None:
        """Pop the last saved drawing state."""
        ...

    def fill_text(self, text: str, x: float, y: float) -> None:
        """Draw ``text`` anchored at ``(x, y)``."""
        ...


class ChartHost(Protocol):
    """Chart instance driving the plugin hooks.

    ``update()`` must call the plugin's ``before_update`` hook synchronously,
    skip drawing when it returns ``False``, and otherwise draw and call
    ``after_draw``.
    """

    chart_type: str
    width: float
    height: float
    datasets: List[Dataset]
    ctx: DrawingContext

    def is_dataset_visible(self, index: int) -> bool:
        ...

    def update(self) -> None:
        ...

    def clear(self) -> None:
        ...

    def set_time_axis(self, axis: TimeAxis) -> None:
        ...
