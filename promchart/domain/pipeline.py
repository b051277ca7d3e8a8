"""One refresh cycle as a single awaited task.

:func:`run_refresh` dispatches the queries, merges results and applies the
post-processing steps. It never raises for backend failures: the outcome
carries either the new datasets or the failure, and the chart plugin decides
how to apply it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..adapters import QueryExecutor
from ..config.models import PluginOptions
from .axes import fill_gaps
from .dispatch import execute_queries
from .merge import VisibilityMap, build_datasets
from .models import Dataset
from .timerange import WindowKey

logger = logging.getLogger(__name__)


@dataclass
class RefreshOutcome:
    """Datasets of a successful cycle, or the exception that failed it."""

    window: WindowKey
    datasets: List[Dataset] = field(default_factory=list)
    failure: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


async def run_refresh(
    options: PluginOptions,
    window: WindowKey,
    hidden: VisibilityMap,
    *,
    executor: Optional[QueryExecutor] = None,
) -> RefreshOutcome:
    """Dispatch, merge, gap-fill and post-process one cycle.

    Gap filling and the dataset hook only run when the merged collection is
    non-empty.
    """
    try:
        results = await execute_queries(
            options.prometheus,
            options.get_queries(),
            window.start,
            window.end,
            window.step,
            executor=executor,
        )
        datasets = build_datasets(options, results, hidden)
        if datasets:
            if options.fill_gaps:
                datasets = fill_gaps(datasets, window.start, window.end, window.step)
            if options.data_set_hook is not None:
                datasets = list(options.data_set_hook(datasets))
    except Exception as exc:  # any query or hook failure fails the cycle
        logger.warning(
            "refresh.dispatch_failed",
            extra={"error": str(exc), "error_class": type(exc).__name__},
        )
        return RefreshOutcome(window=window, failure=exc)
    return RefreshOutcome(window=window, datasets=datasets)
