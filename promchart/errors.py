"""Exception hierarchy for the chart datasource plugin.

Two failure families matter to callers:

- :class:`ConfigurationError` is raised synchronously while options are
  validated, before any refresh or timer is scheduled.
- :class:`RefreshError` is raised out of a refresh task after the chart has
  been reset into its error overlay state. The backend failure that caused it
  is kept as ``__cause__``.
"""

from __future__ import annotations


class PromChartError(Exception):
    """Base class for all promchart errors."""


class ConfigurationError(PromChartError, ValueError):
    """Plugin options are missing or malformed."""


class RefreshError(PromChartError):
    """A refresh cycle failed while executing its queries."""


class BackendError(PromChartError):
    """The metrics backend rejected a query or returned an error payload.

    Attributes
    ----------
    error_type: str | None
        Prometheus ``errorType`` field when the backend provided one.
    status_code: int | None
        HTTP status code of the failing response, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        error_type: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code
