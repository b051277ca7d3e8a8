"""Tests for the auto-refresh interval timer."""

from __future__ import annotations

import asyncio
import logging

import pytest

from promchart.utils.timer import IntervalTimer


@pytest.mark.asyncio
async def test_timer_ticks_until_cancelled() -> None:
    ticks = []
    timer = IntervalTimer(0.01, lambda: ticks.append(1))
    timer.start()
    assert timer.active
    await asyncio.sleep(0.055)
    timer.cancel()
    assert not timer.active
    count = len(ticks)
    assert count >= 2

    await asyncio.sleep(0.03)
    assert len(ticks) == count


@pytest.mark.asyncio
async def test_failing_tick_is_logged_and_timer_survives(caplog) -> None:
    ticks = []

    def tick():
        ticks.append(1)
        if len(ticks) == 1:
            raise RuntimeError("first tick fails")

    caplog.set_level(logging.ERROR)
    timer = IntervalTimer(0.01, tick, name="flaky")
    timer.start()
    await asyncio.sleep(0.05)
    timer.cancel()

    assert len(ticks) >= 2
    assert any(r.getMessage() == "timer.tick_failed" for r in caplog.records)


@pytest.mark.asyncio
async def test_start_is_idempotent() -> None:
    timer = IntervalTimer(10, lambda: None)
    timer.start()
    task = timer._task  # pylint: disable=protected-access
    timer.start()
    assert timer._task is task  # pylint: disable=protected-access
    timer.cancel()


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        IntervalTimer(0, lambda: None)
