"""Query executor interface and per-connection adapter registry."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol

from ..config.models import PrometheusConnection
from ..domain.models import QueryResult
from ..utils.cache import Cache


class QueryExecutor(Protocol):
    """Protocol for metrics backends.

    Implementations run one range query and return the series in backend
    order, or raise on backend failure. Timeouts are the implementation's
    concern.
    """

    async def range_query(
        self, query: str, start: datetime, end: datetime, step: int
    ) -> QueryResult:
        """Evaluate ``query`` over ``[start, end]`` sampled every ``step`` s."""
        raise NotImplementedError


_adapters: Cache[str, QueryExecutor] = Cache(maxsize=64)


def get_adapter(connection: PrometheusConnection) -> QueryExecutor:
    """Return the adapter for ``connection``, creating it on first use.

    Adapters are reused across refresh cycles so their HTTP connection pool
    survives from one cycle to the next.
    """
    from .prometheus import PrometheusAdapter  # local import avoids a cycle

    key = connection.cache_key()
    adapter = _adapters.get(key)
    if adapter is None:
        adapter = PrometheusAdapter.from_connection(connection)
        _adapters.set(key, adapter)
        logging.getLogger(__name__).debug(
            "adapters.created", extra={"endpoint": connection.endpoint}
        )
    return adapter


def register_adapter(connection: PrometheusConnection, adapter: QueryExecutor) -> None:
    """Register an adapter instance for a connection (tests, custom backends)."""
    _adapters.set(connection.cache_key(), adapter)


async def close_adapters() -> None:
    """Close every cached adapter that owns network resources."""
    for adapter in _adapters.values():
        close = getattr(adapter, "aclose", None)
        if close is not None:
            await close()
    _adapters.clear()


def reset_adapters() -> None:
    """Test-only helper to clear cached adapters without closing them."""
    _adapters.clear()
