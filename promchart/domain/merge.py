"""Merge per-query results into one ordered dataset collection."""

from __future__ import annotations

import logging
from typing import List, Mapping, Sequence

from ..config.models import PluginOptions
from .models import Dataset, Point, QueryResult, Serie
from .series import select_background_color, select_border_color, select_label

logger = logging.getLogger(__name__)

VisibilityMap = Mapping[str, bool]


def serie_to_dataset(
    options: PluginOptions, serie: Serie, index: int, hidden: VisibilityMap
) -> Dataset:
    label = select_label(options, serie, index)
    return Dataset(
        label=label,
        data=[Point(x=s.time, y=s.value) for s in serie.values],
        tension=options.tension,
        cubic_interpolation_mode=options.cubic_interpolation_mode,
        stepped=options.stepped,
        fill=options.fill,
        background_color=select_background_color(options, serie, index),
        border_color=select_border_color(options, serie, index),
        border_width=options.border_width,
        hidden=hidden.get(label, False),
    )


def build_datasets(
    options: PluginOptions,
    results: Sequence[QueryResult],
    hidden: VisibilityMap,
) -> List[Dataset]:
    """Concatenate every series of every result into datasets.

    Order is query definition order, then backend series order. That order
    drives palette assignment, so it is part of the contract.

    Parameters
    ----------
    options: PluginOptions
        Styling and hooks for the current cycle.
    results: Sequence[QueryResult]
        One result per query, in query order.
    hidden: VisibilityMap
        Label -> hidden flag snapshotted from the chart before dispatch.
        Labels absent from the map produce visible datasets.
    """
    datasets: List[Dataset] = []
    for result in results:
        for serie in result.result:
            datasets.append(serie_to_dataset(options, serie, len(datasets), hidden))
    logger.debug(
        "merge.datasets",
        extra={"queries": len(results), "datasets": len(datasets)},
    )
    return datasets
