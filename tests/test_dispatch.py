"""Tests for concurrent query dispatch."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from promchart.adapters import get_adapter, register_adapter
from promchart.config.models import PrometheusConnection
from promchart.domain.dispatch import execute_queries
from promchart.domain.models import Metric, QueryResult, Serie
from promchart.errors import BackendError, ConfigurationError

END = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
START = END - timedelta(hours=1)


def _named(name: str) -> QueryResult:
    return QueryResult(result=[Serie(metric=Metric(name=name))])


class _SlowFirstExecutor:
    """Answers the first query last to prove results keep query order."""

    def __init__(self) -> None:
        self.calls = []

    async def range_query(self, query, start, end, step):
        self.calls.append(query)
        if query == "slow":
            await asyncio.sleep(0.01)
        return _named(query)


@pytest.mark.asyncio
async def test_results_follow_query_order() -> None:
    executor = _SlowFirstExecutor()
    results = await execute_queries(
        None, ["slow", "fast"], START, END, 15, executor=executor
    )
    assert [r.result[0].metric.name for r in results] == ["slow", "fast"]
    assert executor.calls == ["slow", "fast"]


@pytest.mark.asyncio
async def test_mixed_string_and_computed_queries() -> None:
    async def computed(start, end, step):
        assert (start, end, step) == (START, END, 30)
        return _named("computed")

    results = await execute_queries(
        None, [computed, "up"], START, END, 30, executor=_SlowFirstExecutor()
    )
    assert [r.result[0].metric.name for r in results] == ["computed", "up"]


@pytest.mark.asyncio
async def test_one_failure_fails_the_cycle() -> None:
    async def broken(start, end, step):
        raise BackendError("boom")

    with pytest.raises(BackendError, match="boom"):
        await execute_queries(
            None, ["up", broken], START, END, 15, executor=_SlowFirstExecutor()
        )


@pytest.mark.asyncio
async def test_empty_query_list_returns_no_results() -> None:
    assert await execute_queries(None, [], START, END, 15) == []


@pytest.mark.asyncio
async def test_string_query_needs_connection_or_executor() -> None:
    with pytest.raises(ConfigurationError, match="options.prometheus"):
        await execute_queries(None, ["up"], START, END, 15)


@pytest.mark.asyncio
async def test_connection_resolves_registered_adapter() -> None:
    connection = PrometheusConnection(endpoint="http://prom:9090")
    executor = _SlowFirstExecutor()
    register_adapter(connection, executor)

    results = await execute_queries(connection, ["up"], START, END, 15)
    assert executor.calls == ["up"]
    assert results[0].result[0].metric.name == "up"


def test_get_adapter_reuses_instance_per_connection() -> None:
    first = get_adapter(PrometheusConnection(endpoint="http://prom:9090"))
    again = get_adapter(PrometheusConnection(endpoint="http://prom:9090"))
    other = get_adapter(PrometheusConnection(endpoint="http://other:9090"))
    assert first is again
    assert other is not first
