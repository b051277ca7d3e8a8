"""Overlay state machine.

On every draw, at most one message is painted over the chart, chosen by
priority: error, then loading, then no-data. The choice is recomputed from
the current state each time and never cached.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from ..config.models import OverlayMessage, PluginOptions
from .host import ChartHost, DrawingContext
from .state import PerChartState


@dataclass(frozen=True)
class Overlay:
    """Message selected for the current draw."""

    kind: str  # "error" | "loading" | "no_data"
    text: str
    style: OverlayMessage


def select_overlay(
    state: PerChartState, options: PluginOptions, dataset_count: int
) -> Optional[Overlay]:
    """Pick the message to paint, or ``None`` when the chart shows data.

    The error template falls back to the state's own error text when it has
    no message. While loading, nothing is painted unless a loading message is
    configured.
    """
    if state.error is not None:
        return Overlay("error", options.error_msg.message or state.error, options.error_msg)
    if state.loading:
        loading = options.loading_msg
        if loading is not None and loading.message:
            return Overlay("loading", loading.message, loading)
        return None
    if dataset_count == 0 and options.no_data_msg.message:
        return Overlay("no_data", options.no_data_msg.message, options.no_data_msg)
    return None


@contextmanager
def styled_context(ctx: DrawingContext, style: OverlayMessage) -> Iterator[DrawingContext]:
    """Apply text styling for the duration of the block.

    The previous drawing state is restored on exit, including when drawing
    raises.
    """
    ctx.save()
    try:
        ctx.direction = style.direction
        ctx.text_align = style.text_align
        ctx.text_baseline = style.text_baseline
        ctx.font = style.font
        yield ctx
    finally:
        ctx.restore()


def paint_overlay(chart: ChartHost, overlay: Overlay) -> None:
    """Clear the chart and draw the message centered on its surface."""
    chart.clear()
    with styled_context(chart.ctx, overlay.style) as ctx:
        ctx.fill_text(overlay.text, chart.width / 2, chart.height / 2)
