"""Per-series label and color selection.

Each visual channel follows the same rule: ask the caller's hook first, and
fall back to a positional default when the hook declines (returns ``None`` or
an empty string). The position is the cumulative series index across all
queries, so colors stay stable when more queries are appended.
"""

from __future__ import annotations

from ..config.models import PluginOptions
from .models import Serie


def default_label(serie: Serie, index: int) -> str:
    """Metric identity string, or ``"Serie N"`` for an anonymous series."""
    if serie.metric.is_empty:
        return f"Serie {index + 1}"
    return str(serie.metric)


def select_label(options: PluginOptions, serie: Serie, index: int) -> str:
    if options.find_in_label_map is not None:
        override = options.find_in_label_map(serie.metric)
        if override:
            return override
    return default_label(serie, index)


def select_border_color(options: PluginOptions, serie: Serie, index: int) -> str:
    if options.find_in_border_color_map is not None:
        override = options.find_in_border_color_map(serie.metric)
        if override:
            return override
    palette = options.border_color
    return palette[index % len(palette)]


def select_background_color(options: PluginOptions, serie: Serie, index: int) -> str:
    """Background is transparent unless the area under the line is filled."""
    if options.find_in_background_color_map is not None:
        override = options.find_in_background_color_map(serie.metric)
        if override:
            return override
    if not options.fill:
        return "transparent"
    palette = options.background_color
    return palette[index % len(palette)]
