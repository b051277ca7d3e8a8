"""In-memory chart host.

``HeadlessChart`` implements :class:`~promchart.chart.host.ChartHost` without
any rendering backend. It drives plugin hooks in the same order an
interactive chart does and records what would have been drawn, which makes
it suitable for the command-line runner and for tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from ..domain.axes import TimeAxis
from ..domain.models import Dataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextCall:
    """One ``fill_text`` call with the styling active at that moment."""

    text: str
    x: float
    y: float
    font: str
    text_align: str
    text_baseline: str
    direction: str


class RecordingContext:
    """Drawing context recording text calls and save/restore balance."""

    def __init__(self) -> None:
        self.font = "10px sans-serif"
        self.text_align = "start"
        self.text_baseline = "alphabetic"
        self.direction = "inherit"
        self.calls: List[TextCall] = []
        self._stack: List[Tuple[str, str, str, str]] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def save(self) -> None:
        self._stack.append((self.font, self.text_align, self.text_baseline, self.direction))

    def restore(self) -> None:
        if self._stack:
            (
                self.font,
                self.text_align,
                self.text_baseline,
                self.direction,
            ) = self._stack.pop()

    def fill_text(self, text: str, x: float, y: float) -> None:
        self.calls.append(
            TextCall(
                text, x, y, self.font, self.text_align, self.text_baseline, self.direction
            )
        )


class HeadlessChart:
    """Minimal chart host.

    Parameters
    ----------
    chart_type : str
        "line" or "bar" for the datasource plugin to accept it.
    width, height : float
        Surface size in pixels; ``width`` drives the automatic step.
    options : Any
        Raw plugin options passed to every hook.
    plugins : Sequence[Any]
        Plugins exposing the lifecycle hooks.
    """

    def __init__(
        self,
        chart_type: str = "line",
        width: float = 800,
        height: float = 400,
        options: Any = None,
        plugins: Sequence[Any] = (),
    ) -> None:
        self.chart_type = chart_type
        self.width = width
        self.height = height
        self.options = options
        self.plugins = list(plugins)
        self.datasets: List[Dataset] = []
        self.ctx = RecordingContext()
        self.time_axis: Optional[TimeAxis] = None
        self.renders = 0
        self.clears = 0

    # ---------------- lifecycle ----------------

    def init(self) -> None:
        for plugin in self.plugins:
            plugin.before_init(self, self.options)
        for plugin in self.plugins:
            plugin.after_init(self, self.options)

    def update(self) -> None:
        """Run ``before_update`` hooks, then draw unless one deferred."""
        for plugin in self.plugins:
            if plugin.before_update(self, self.options) is False:
                logger.debug("headless.update.deferred", extra={"plugin": plugin.id})
                return
        self.draw()

    def draw(self) -> None:
        self.renders += 1
        for plugin in self.plugins:
            plugin.after_draw(self, self.options)

    def destroy(self) -> None:
        for plugin in self.plugins:
            plugin.destroy(self, self.options)

    # ---------------- ChartHost ----------------

    def is_dataset_visible(self, index: int) -> bool:
        return not self.datasets[index].hidden

    def set_dataset_visibility(self, index: int, visible: bool) -> None:
        self.datasets[index].hidden = not visible

    def clear(self) -> None:
        self.clears += 1

    def set_time_axis(self, axis: TimeAxis) -> None:
        self.time_axis = axis

    # ---------------- inspection ----------------

    @property
    def last_text(self) -> Optional[str]:
        return self.ctx.calls[-1].text if self.ctx.calls else None
