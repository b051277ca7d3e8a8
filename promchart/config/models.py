"""Config models and loader.

This module defines the Pydantic models describing plugin options (what to
query, how to window time, how to render results) together with file- and
environment-based configuration for the command-line runner.

Plugin options are immutable: the plugin builds a fresh ``PluginOptions``
from the caller's raw mapping at every hook invocation and discards it at the
end of the cycle. Defaults live in the ``DEFAULT_OPTIONS`` table below.

JSON parsing prefers `orjson` when available for speed and lower memory
usage, but falls back to the Python standard library's `json` module.
"""

from __future__ import annotations

import json as _json
from datetime import datetime
from pathlib import Path
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Union,
)

try:
    import orjson as _orjson_mod  # type: ignore[assignment]
except ImportError:  # pragma: no cover - optional dependency
    _orjson_mod = None  # type: ignore[assignment]
    _loads_orjson: Optional[Callable[[bytes], Any]] = None
else:

    def _loads_orjson(buf: bytes) -> Any:
        loader = getattr(_orjson_mod, "loads")  # type: ignore[assignment]
        return loader(buf)


from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.models import Dataset, Metric, QueryResult
from ..utils.timestamps import parse_timestamp

# See https://learnui.design/tools/data-color-picker.html#palette
DEFAULT_COLORS: tuple[str, ...] = (
    "rgba(255, 99, 132, 1)",
    "rgba(54, 162, 235, 1)",
    "rgba(255, 206, 86, 1)",
    "rgba(75, 192, 192, 1)",
    "rgba(153, 102, 255, 1)",
    "rgba(255, 159, 64, 1)",
)

DEFAULT_FONT = "16px normal 'Helvetica Nueue'"

DEFAULT_OPTIONS: Dict[str, Any] = {
    "fill_gaps": False,
    "tension": 0.4,
    "cubic_interpolation_mode": "default",
    "stepped": False,
    "fill": False,
    "stacked": False,
    "border_width": 3,
    "border_color": list(DEFAULT_COLORS),
    "background_color": list(DEFAULT_COLORS),
    "no_data_message": "No data to display",
    "error_message": None,
    "loading_message": "Loading data...",
}

# A query is either PromQL text or an async callable computing the result
# itself from (start, end, step).
ComputedQuery = Callable[[datetime, datetime, int], Awaitable[QueryResult]]
PrometheusQuery = Union[str, ComputedQuery]
SerieHook = Callable[[Metric], Optional[str]]
DataSetHook = Callable[[List[Dataset]], List[Dataset]]


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, arbitrary_types_allowed=True
    )


class BasicAuth(_Frozen):
    """HTTP basic credentials for the Prometheus endpoint."""

    username: str
    password: str


class PrometheusConnection(_Frozen):
    """Connection parameters for a Prometheus HTTP API.

    Attributes
    ----------
    endpoint: str
        Server root URL (e.g., "https://prometheus.demo.do.prometheus.io").
    base_url: str
        API prefix appended to the endpoint. Defaults to "/api/v1".
    headers: Dict[str, str]
        Extra HTTP headers sent with every request.
    auth: Optional[BasicAuth]
        Optional basic authentication.
    timeout_seconds: int
        HTTP request timeout in seconds.
    """

    endpoint: str
    base_url: str = Field("/api/v1", alias="baseURL")
    headers: Dict[str, str] = Field(default_factory=dict)
    auth: Optional[BasicAuth] = None
    timeout_seconds: int = Field(30, ge=1, alias="timeoutSeconds")

    def cache_key(self) -> str:
        return self.model_dump_json()


class TimeRange(_Frozen):
    """Window to query.

    ``relative`` ranges carry signed offsets in seconds from "now";
    ``absolute`` ranges carry datetimes. ``end`` after ``start`` is not
    enforced.
    """

    type: Literal["relative", "absolute"]
    start: Union[float, datetime]
    end: Union[float, datetime]
    step: Optional[int] = Field(None, ge=1)
    min_step: Optional[int] = Field(None, ge=1, alias="minStep")
    ms_update_interval: Optional[float] = Field(
        None, ge=1000, alias="msUpdateInterval"
    )


class OverlayMessage(_Frozen):
    """Text painted over the chart, with its drawing-context styling."""

    message: Optional[str] = None
    font: str = DEFAULT_FONT
    text_align: str = Field("center", alias="textAlign")
    text_baseline: str = Field("middle", alias="textBaseline")
    direction: str = "ltr"


def _no_data_msg() -> OverlayMessage:
    return OverlayMessage(message=DEFAULT_OPTIONS["no_data_message"])


def _error_msg() -> OverlayMessage:
    return OverlayMessage(message=DEFAULT_OPTIONS["error_message"])


def _loading_msg() -> OverlayMessage:
    return OverlayMessage(message=DEFAULT_OPTIONS["loading_message"])


class PluginOptions(_Frozen):
    """Fully defaulted plugin options.

    Build instances through :func:`promchart.config.validation.validate_options`
    so that malformed input is rejected with a descriptive
    :class:`~promchart.errors.ConfigurationError`.
    """

    # Prometheus requests; None when every query is a computed callable
    prometheus: Optional[PrometheusConnection] = None
    query: Union[PrometheusQuery, List[PrometheusQuery]]
    time_range: TimeRange = Field(..., alias="timeRange")

    # Chart design
    fill_gaps: bool = Field(DEFAULT_OPTIONS["fill_gaps"], alias="fillGaps")
    tension: float = DEFAULT_OPTIONS["tension"]
    cubic_interpolation_mode: Literal["default", "monotone"] = Field(
        DEFAULT_OPTIONS["cubic_interpolation_mode"], alias="cubicInterpolationMode"
    )
    stepped: bool = DEFAULT_OPTIONS["stepped"]
    fill: bool = DEFAULT_OPTIONS["fill"]
    stacked: bool = DEFAULT_OPTIONS["stacked"]
    border_width: int = Field(DEFAULT_OPTIONS["border_width"], alias="borderWidth")
    border_color: List[str] = Field(
        default_factory=lambda: list(DEFAULT_OPTIONS["border_color"]),
        alias="borderColor",
        min_length=1,
    )
    background_color: List[str] = Field(
        default_factory=lambda: list(DEFAULT_OPTIONS["background_color"]),
        alias="backgroundColor",
        min_length=1,
    )

    # Overlay templates; a None loading template disables the loading overlay
    no_data_msg: OverlayMessage = Field(
        default_factory=_no_data_msg, alias="noDataMsg"
    )
    error_msg: OverlayMessage = Field(default_factory=_error_msg, alias="errorMsg")
    loading_msg: Optional[OverlayMessage] = Field(
        default_factory=_loading_msg, alias="loadingMsg"
    )

    # Hooks
    find_in_label_map: Optional[SerieHook] = Field(None, alias="findInLabelMap")
    find_in_border_color_map: Optional[SerieHook] = Field(
        None, alias="findInBorderColorMap"
    )
    find_in_background_color_map: Optional[SerieHook] = Field(
        None, alias="findInBackgroundColorMap"
    )
    data_set_hook: Optional[DataSetHook] = Field(None, alias="dataSetHook")

    def get_queries(self) -> List[PrometheusQuery]:
        """Return queries as a list, wrapping a single query."""
        if isinstance(self.query, list):
            return self.query
        return [self.query]


class ChartConfig(BaseModel):
    """Headless chart geometry used by the command-line runner."""

    type: str = "line"
    width: int = Field(800, ge=1)
    height: int = Field(400, ge=1)


class AppConfig(BaseModel):
    """Top-level configuration file for the command-line runner.

    Attributes
    ----------
    chart: ChartConfig
        Geometry and type of the headless chart.
    options: Dict[str, Any]
        Raw plugin options, validated when the plugin initializes.
    """

    chart: ChartConfig = Field(default_factory=ChartConfig)
    options: Dict[str, Any] = Field(default_factory=dict)

    @staticmethod
    def load(path: Path) -> "AppConfig":
        """Load runner config from a JSON file.

        Absolute time ranges are written as ISO8601 strings or Unix
        timestamps in JSON; they are converted to datetimes here so that
        option validation sees the same types as programmatic callers.
        """
        raw = path.read_bytes()
        if _loads_orjson is not None:
            data = _loads_orjson(raw)
        else:
            data = _json.loads(raw.decode("utf-8"))
        cfg = AppConfig.model_validate(data)
        time_range = cfg.options.get("timeRange", cfg.options.get("time_range"))
        if isinstance(time_range, dict) and time_range.get("type") == "absolute":
            for key in ("start", "end"):
                parsed = parse_timestamp(time_range.get(key))
                if parsed is not None:
                    time_range[key] = parsed
        return cfg


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    prometheus_endpoint: Optional[str]
        Prometheus endpoint used when a config file omits connection options.
    timeout_seconds: int
        HTTP timeout applied to that default connection.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PROMCHART_")

    log_level: str = Field("INFO")
    prometheus_endpoint: Optional[str] = None
    timeout_seconds: int = Field(30, ge=1)
