"""Lifecycle plugin keeping a chart in sync with Prometheus.

The hosting chart calls the hooks below at fixed points of its own
lifecycle:

====================  ==========================================================
Hook                  Responsibility
====================  ==========================================================
``before_init``       allocate the chart's :class:`PerChartState`
``after_init``        validate options; arm auto-refresh or request a first cycle
``before_update``     run a render cycle; return ``False`` to defer the render
``after_draw``        repaint the overlay message
``destroy``           cancel the auto-refresh timer
====================  ==========================================================

All hooks run on the asyncio event loop thread. The only suspension point is
the refresh task awaiting the backend, so no locking is needed. Render-cycle
requests that arrive while a refresh or the plugin's own render pass is in
progress are dropped; the next timer tick or redraw re-evaluates the window.
In-flight refreshes are never cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from datetime import datetime
from typing import Any, Callable, Optional

from ..adapters import QueryExecutor
from ..config.models import PluginOptions
from ..config.validation import validate_options
from ..domain.axes import time_axis_options
from ..domain.merge import VisibilityMap
from ..domain.pipeline import RefreshOutcome, run_refresh
from ..domain.timerange import WindowKey, utc_now, window_for
from ..errors import ConfigurationError, RefreshError
from ..utils.correlation import new_cycle_id
from ..utils.timer import IntervalTimer
from .host import ChartHost
from .overlay import paint_overlay, select_overlay
from .state import FETCH_ERROR_MESSAGE, PerChartState

logger = logging.getLogger(__name__)

SUPPORTED_CHART_TYPES = ("line", "bar")


def snapshot_visibility(chart: ChartHost) -> VisibilityMap:
    """Map each current dataset label to whether the user hid it."""
    return {
        dataset.label: not chart.is_dataset_visible(i)
        for i, dataset in enumerate(chart.datasets)
    }


class DatasourcePlugin:
    """Chart plugin fetching datasets from Prometheus.

    Parameters
    ----------
    executor : QueryExecutor, optional
        Backend used for PromQL string queries. Defaults to a cached
        :class:`~promchart.adapters.prometheus.PrometheusAdapter` built from
        ``options.prometheus``.
    clock : callable, optional
        Returns "now" for relative time ranges. Defaults to the current UTC
        time truncated to the second.
    """

    id = "datasource-prometheus"

    def __init__(
        self,
        executor: Optional[QueryExecutor] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._executor = executor
        self._clock = clock or utc_now
        self._states: "weakref.WeakKeyDictionary[ChartHost, PerChartState]" = (
            weakref.WeakKeyDictionary()
        )

    # ---------------- state ownership ----------------

    def state(self, chart: ChartHost) -> Optional[PerChartState]:
        """Return the state of ``chart``, or None before init / after destroy."""
        return self._states.get(chart)

    def pending(self, chart: ChartHost) -> Optional["asyncio.Task[RefreshOutcome]"]:
        """Return the most recent refresh task of ``chart``, if any."""
        state = self.state(chart)
        return state.pending if state is not None else None

    # ---------------- lifecycle hooks ----------------

    def before_init(self, chart: ChartHost, options: Any = None) -> None:
        self._states[chart] = PerChartState()

    def after_init(self, chart: ChartHost, options: Any) -> None:
        """Validate options, then arm auto-refresh or request a first cycle.

        Raises
        ------
        ConfigurationError
            Unsupported chart type, missing or malformed options. Raised
            before any timer or refresh is scheduled.
        """
        if chart.chart_type not in SUPPORTED_CHART_TYPES:
            raise ConfigurationError(
                f"{type(self).__name__} is only compatible with line and bar "
                f"charts, got {chart.chart_type!r}"
            )
        if options is None:
            raise ConfigurationError(f"{type(self).__name__}.options is undefined")
        opts = validate_options(options)

        state = self._require_state(chart)
        interval_ms = opts.time_range.ms_update_interval
        if interval_ms:
            state.update_interval = IntervalTimer(
                interval_ms / 1000.0, chart.update, name=f"{self.id}-autorefresh"
            )
            state.update_interval.start()
            logger.info("plugin.autorefresh.armed", extra={"interval_ms": interval_ms})
        else:
            chart.update()

    def before_update(self, chart: ChartHost, options: Any) -> Optional[bool]:
        """Run one render cycle.

        Returns ``False`` when a refresh was dispatched, telling the host to
        defer its draw until data arrives; ``None`` lets the draw proceed.
        """
        state = self.state(chart)
        if state is None or state.loading or state.rendering:
            return None

        opts = validate_options(options)
        window = window_for(opts.time_range, chart.width, now=self._clock())
        if state.window == window:
            return None

        # raises outside a running loop, before any state changes
        loop = asyncio.get_running_loop()

        state.apply_window(window)
        state.error = None
        hidden = snapshot_visibility(chart)

        state.loading = True
        self.update_message(chart, opts)

        task = loop.create_task(self._refresh(chart, opts, window, hidden))
        task.add_done_callback(self._report_failure)
        state.pending = task
        logger.debug(
            "plugin.refresh.scheduled",
            extra={"step": window.step, "start": window.start, "end": window.end},
        )
        return False

    def after_draw(self, chart: ChartHost, options: Any) -> None:
        if self.state(chart) is None:
            return
        self.update_message(chart, validate_options(options))

    def destroy(self, chart: ChartHost, options: Any = None) -> None:
        state = self._states.pop(chart, None)
        if state is not None and state.update_interval is not None:
            state.update_interval.cancel()
            state.update_interval = None

    # ---------------- refresh ----------------

    async def refresh(self, chart: ChartHost, options: Any) -> Optional[RefreshOutcome]:
        """Run a render cycle and wait for its refresh, if one was dispatched.

        Raises
        ------
        RefreshError
            The dispatched refresh failed; the chart already shows the error
            overlay.
        """
        if self.before_update(chart, options) is False:
            task = self.pending(chart)
            if task is not None:
                return await task
        return None

    async def _refresh(
        self,
        chart: ChartHost,
        options: PluginOptions,
        window: WindowKey,
        hidden: VisibilityMap,
    ) -> RefreshOutcome:
        cycle_id = new_cycle_id()
        outcome = await run_refresh(options, window, hidden, executor=self._executor)

        state = self.state(chart)
        if state is None:
            logger.debug("plugin.refresh.chart_destroyed", extra={"cycle_id": cycle_id})
        else:
            self._apply(chart, state, options, outcome)

        if not outcome.ok:
            raise RefreshError(FETCH_ERROR_MESSAGE) from outcome.failure
        logger.info(
            "plugin.refresh.done",
            extra={"cycle_id": cycle_id, "datasets": len(outcome.datasets)},
        )
        return outcome

    def _apply(
        self,
        chart: ChartHost,
        state: PerChartState,
        options: PluginOptions,
        outcome: RefreshOutcome,
    ) -> None:
        window = outcome.window
        if outcome.ok:
            chart.datasets = outcome.datasets
            if chart.datasets:
                chart.set_time_axis(
                    time_axis_options(window.start, window.end, options.stacked)
                )
        else:
            # reset data and axes
            chart.datasets = []
            state.error = FETCH_ERROR_MESSAGE
            chart.set_time_axis(
                time_axis_options(window.start, window.end, options.stacked)
            )
        self._resume_rendering(chart, state)

    # ---------------- overlay ----------------

    def update_message(self, chart: ChartHost, options: PluginOptions) -> None:
        state = self._require_state(chart)
        overlay = select_overlay(state, options, len(chart.datasets))
        if overlay is not None:
            paint_overlay(chart, overlay)

    # ---------------- helpers ----------------

    def _require_state(self, chart: ChartHost) -> PerChartState:
        state = self.state(chart)
        if state is None:
            raise RuntimeError(f"{self.id}: before_init was not called for this chart")
        return state

    @staticmethod
    def _resume_rendering(chart: ChartHost, state: PerChartState) -> None:
        state.loading = False
        state.rendering = True
        try:
            chart.update()
        finally:
            state.rendering = False

    @staticmethod
    def _report_failure(task: "asyncio.Task[Any]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "plugin.refresh.failed",
                exc_info=exc,
                extra={"cause": repr(exc.__cause__)},
            )
