"""Concurrent query dispatch.

Every query of a cycle runs as its own coroutine and all of them are awaited
together. A single failing query fails the whole cycle; the others are not
cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, List, Optional, Sequence, cast

from ..adapters import QueryExecutor, get_adapter
from ..config.models import PrometheusConnection, PrometheusQuery
from ..errors import ConfigurationError
from .models import QueryResult

logger = logging.getLogger(__name__)


def _run_query(
    query: PrometheusQuery,
    executor: Optional[QueryExecutor],
    start: datetime,
    end: datetime,
    step: int,
) -> Awaitable[QueryResult]:
    if isinstance(query, str):
        # execute_queries rejects string queries without an executor
        return cast(QueryExecutor, executor).range_query(query, start, end, step)
    # computed query: the callable produces the result itself
    return query(start, end, step)


async def execute_queries(
    connection: Optional[PrometheusConnection],
    queries: Sequence[PrometheusQuery],
    start: datetime,
    end: datetime,
    step: int,
    *,
    executor: Optional[QueryExecutor] = None,
) -> List[QueryResult]:
    """Run all queries concurrently and return results in query order.

    Parameters
    ----------
    connection: Optional[PrometheusConnection]
        Backend connection; may be None when every query is a callable.
    queries: Sequence[PrometheusQuery]
        PromQL strings and/or async callables ``(start, end, step)``.
    start, end: datetime
        Resolved window.
    step: int
        Effective step in seconds.
    executor: Optional[QueryExecutor]
        Executor override; defaults to the cached adapter for ``connection``.

    Raises
    ------
    ConfigurationError
        A PromQL string query was given without any way to execute it.
    Exception
        The first failure raised by any query.
    """
    if executor is None and connection is not None:
        executor = get_adapter(connection)
    if executor is None and any(isinstance(q, str) for q in queries):
        raise ConfigurationError(
            "options.prometheus is required for PromQL string queries"
        )
    logger.debug(
        "dispatch.start",
        extra={"queries": len(queries), "step": step},
    )
    awaitables = [_run_query(q, executor, start, end, step) for q in queries]
    if not awaitables:
        return []
    results = await asyncio.gather(*awaitables)
    return list(results)
