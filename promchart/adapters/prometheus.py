"""Prometheus HTTP API adapter.

This adapter issues ``query_range`` requests against a Prometheus-compatible
server and converts the ``matrix`` response into
:class:`~promchart.domain.models.QueryResult`. It encapsulates transport
concerns (base URL, headers, auth, timeouts); the chart plugin only sees the
:class:`~promchart.adapters.QueryExecutor` protocol.

Notes
-----
- No retry is performed here. A failed refresh waits for the next natural
  trigger (timer tick or redraw).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from ..config.models import PrometheusConnection
from ..domain.models import Metric, QueryResult, Sample, Serie
from ..errors import BackendError
from ..utils.correlation import get_cycle_id
from ..utils.timestamps import to_unix_seconds

logger = logging.getLogger(__name__)


class PrometheusAdapter:
    """Adapter for the Prometheus HTTP API.

    Parameters
    ----------
    endpoint: str
        Server root URL (e.g., "http://localhost:9090").
    base_url: str
        API prefix, "/api/v1" for Prometheus and most compatible backends.
    headers: Optional[Dict[str, str]]
        Extra headers sent with every request.
    auth: Optional[tuple[str, str]]
        Basic-auth credentials.
    timeout: int
        Request timeout in seconds for all HTTP operations.

    Attributes
    ----------
    _client: httpx.AsyncClient
        Shared async client configured with base URL, timeout, and headers.
    """

    def __init__(
        self,
        endpoint: str,
        base_url: str = "/api/v1",
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[tuple[str, str]] = None,
        timeout: int = 30,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=endpoint.rstrip("/") + "/" + base_url.strip("/"),
            timeout=timeout,
            headers=self._headers(headers),
            auth=auth,
        )
        self._timeout_seconds = timeout
        logger.info(
            "prometheus.adapter.init",
            extra={"endpoint": endpoint, "timeout_seconds": timeout},
        )

    @classmethod
    def from_connection(cls, connection: PrometheusConnection) -> "PrometheusAdapter":
        auth = None
        if connection.auth is not None:
            auth = (connection.auth.username, connection.auth.password)
        return cls(
            connection.endpoint,
            base_url=connection.base_url,
            headers=connection.headers,
            auth=auth,
            timeout=connection.timeout_seconds,
        )

    def inject_http_client_for_testing(self, client: Any) -> None:
        """Replace underlying HTTP client (testing only).

        This allows unit tests to provide a mock compatible with ``post()``.
        """
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _headers(extra: Optional[Dict[str, str]]) -> dict:
        headers = {"Accept": "application/json"}
        if extra:
            headers.update(extra)
        return headers

    async def _post_form(self, path: str, form: Dict[str, Any]) -> Dict[str, Any]:
        """POST a form-encoded request and return the ``data`` member.

        Raises
        ------
        BackendError
            On non-2xx responses or a ``status: error`` payload.
        httpx.HTTPError
            On transport errors (connection refused, timeouts).
        """
        logger.debug(
            "prometheus.http.post",
            extra={"cycle_id": get_cycle_id(), "path": path, "form_keys": list(form)},
        )
        resp = await self._client.post(path, data=form)
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            payload = _safe_json(exc.response)
            message = payload.get("error") or f"HTTP {exc.response.status_code}"
            logger.error(
                "prometheus.http.status_error",
                extra={
                    "cycle_id": get_cycle_id(),
                    "path": path,
                    "status": exc.response.status_code,
                    "error_type": payload.get("errorType"),
                },
            )
            raise BackendError(
                message,
                error_type=payload.get("errorType"),
                status_code=exc.response.status_code,
            ) from exc

        body = resp.json()
        if body.get("status") != "success":
            raise BackendError(
                body.get("error") or "unexpected response status",
                error_type=body.get("errorType"),
                status_code=resp.status_code,
            )
        for warning in body.get("warnings") or []:
            logger.warning(
                "prometheus.warning",
                extra={"cycle_id": get_cycle_id(), "warning": warning},
            )
        return body.get("data") or {}

    async def range_query(
        self, query: str, start: datetime, end: datetime, step: int
    ) -> QueryResult:
        """Evaluate a PromQL expression over a range.

        Parameters
        ----------
        query: str
            PromQL expression.
        start, end: datetime
            Window bounds; naive datetimes are taken as UTC.
        step: int
            Resolution in seconds.

        Returns
        -------
        QueryResult
            Series in backend order.
        """
        form = {
            "query": query,
            "start": to_unix_seconds(start),
            "end": to_unix_seconds(end),
            "step": step,
        }
        data = await self._post_form("/query_range", form)
        result = parse_matrix(data)
        logger.debug(
            "prometheus.range_query.done",
            extra={"cycle_id": get_cycle_id(), "series": len(result.result)},
        )
        return result


def _safe_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def parse_matrix(data: Dict[str, Any]) -> QueryResult:
    """Convert a Prometheus ``data`` object into a :class:`QueryResult`.

    Sample values arrive as strings; ``"NaN"`` and ``"+Inf"`` parse to their
    float counterparts.
    """
    series = []
    for item in data.get("result") or []:
        samples = [
            Sample(time=datetime.fromtimestamp(float(ts), tz=timezone.utc), value=float(v))
            for ts, v in item.get("values") or []
        ]
        series.append(
            Serie(metric=Metric.from_labels(item.get("metric") or {}), values=samples)
        )
    return QueryResult(result_type=data.get("resultType", "matrix"), result=series)
