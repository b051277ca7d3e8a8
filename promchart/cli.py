"""Command-line runner for the datasource plugin.

Loads a JSON config, attaches the plugin to a headless chart and performs one
refresh cycle, or keeps refreshing on the configured interval with
``--watch``. Dataset summaries are written to the log.

Usage
-----
    python -m promchart.cli --config chart.json [--watch]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from pathlib import Path
from typing import Tuple

from .adapters import close_adapters
from .chart import DatasourcePlugin
from .chart.headless import HeadlessChart
from .config.models import AppConfig, EnvSettings
from .errors import PromChartError
from .observability import setup_logging

logger = logging.getLogger(__name__)


def _init_from_config(config_path: Path) -> Tuple[HeadlessChart, DatasourcePlugin]:
    """Build a headless chart and plugin from a JSON config file.

    When the file has no ``prometheus`` connection, the endpoint from
    ``PROMCHART_PROMETHEUS_ENDPOINT`` is used if set.
    """
    cfg = AppConfig.load(config_path)
    settings = EnvSettings()
    options = dict(cfg.options)
    if options.get("prometheus") is None and settings.prometheus_endpoint:
        options["prometheus"] = {
            "endpoint": settings.prometheus_endpoint,
            "timeout_seconds": settings.timeout_seconds,
        }
    plugin = DatasourcePlugin()
    chart = HeadlessChart(
        chart_type=cfg.chart.type,
        width=cfg.chart.width,
        height=cfg.chart.height,
        options=options,
        plugins=[plugin],
    )
    return chart, plugin


def _log_datasets(chart: HeadlessChart) -> None:
    if not chart.datasets:
        logger.info("cli.datasets.empty", extra={"overlay": chart.last_text})
    for dataset in chart.datasets:
        logger.info(
            "cli.dataset %s: %d points%s",
            dataset.label,
            len(dataset.data),
            " (hidden)" if dataset.hidden else "",
        )


async def _run(config_path: Path, watch: bool = False) -> int:
    """Initialize the chart and refresh once, or until interrupted."""
    chart, plugin = _init_from_config(config_path)
    try:
        chart.init()
        if watch:
            reported = None
            while True:
                await asyncio.sleep(1)
                task = plugin.pending(chart)
                if task is None or task is reported or not task.done():
                    continue
                reported = task
                if not task.cancelled() and task.exception() is None:
                    _log_datasets(chart)
        task = plugin.pending(chart)
        if task is None:
            # auto-refresh configured: init only armed the timer
            await plugin.refresh(chart, chart.options)
        else:
            await task
        _log_datasets(chart)
        return 0
    except PromChartError as exc:
        logger.error("cli.refresh.failed: %s (cause: %r)", exc, exc.__cause__)
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        return 0
    finally:
        chart.destroy()
        await close_adapters()


def main() -> None:
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(description="promchart headless runner")
    parser.add_argument("--config", required=True, help="Path to JSON chart config")
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep refreshing on timeRange.msUpdateInterval until interrupted",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging level (overrides environment)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (once sets DEBUG)",
    )
    args = parser.parse_args()

    env_level = os.environ.get("PROMCHART_LOG_LEVEL", "INFO").upper()
    effective_level = args.log_level or ("DEBUG" if args.verbose > 0 else env_level)
    setup_logging(effective_level)

    raise SystemExit(asyncio.run(_run(Path(args.config), watch=args.watch)))


if __name__ == "__main__":
    main()
