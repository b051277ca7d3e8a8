"""Repeating asyncio timer used for chart auto-refresh."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalTimer:
    """Call ``callback`` every ``interval`` seconds until cancelled.

    The callback runs on the event loop thread, never concurrently with
    itself. An exception raised by one tick is logged and the timer keeps
    running.

    Parameters
    ----------
    interval : float
        Period in seconds.
    callback : callable
        Synchronous function invoked on each tick.
    name : str, optional
        Task name, useful in debug output.
    """

    def __init__(
        self, interval: float, callback: Callable[[], object], name: str = "interval"
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._callback = callback
        self._name = name
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the timer on the running event loop."""
        if self.active:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name=self._name)
        logger.debug("timer.started", extra={"name": self._name, "interval": self.interval})

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self._callback()
            except Exception:  # pylint: disable=broad-except
                logger.exception("timer.tick_failed", extra={"name": self._name})

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            logger.debug("timer.cancelled", extra={"name": self._name})
        self._task = None
