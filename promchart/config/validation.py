"""Plugin option validation.

Validation is synchronous and total: every check runs before the plugin
schedules any refresh or timer. The checks mirror the order in which a user
would fix a broken configuration, and each one fails with its own message.

Two entry points are provided:

- :func:`validate_options` raises :class:`~promchart.errors.ConfigurationError`.
- :func:`check_options` returns a :class:`ValidationResult` for callers that
  prefer branching on a value over catching an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ValidationError

from ..errors import ConfigurationError
from .models import PluginOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`check_options`.

    Exactly one of ``options`` and ``error`` is set.
    """

    options: Optional[PluginOptions] = None
    error: Optional[ConfigurationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _lookup(raw: Mapping[str, Any], name: str, alias: str) -> Any:
    if name in raw:
        return raw[name]
    return raw.get(alias)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_bound(kind: str, name: str, value: Any) -> None:
    if value is None:
        raise ConfigurationError(f"options.timeRange.{name} is undefined")
    if kind == "relative" and not _is_number(value):
        raise ConfigurationError(
            f"options.timeRange.{name} must be a number of seconds (relative)"
        )
    if kind == "absolute" and not isinstance(value, datetime):
        raise ConfigurationError(
            f"options.timeRange.{name} must be a datetime (absolute)"
        )


def _assert_raw_options(raw: Mapping[str, Any]) -> None:
    query = raw.get("query")
    if query is None or query == "":
        raise ConfigurationError("options.query is undefined")

    time_range = _lookup(raw, "time_range", "timeRange")
    if time_range is None:
        raise ConfigurationError("options.timeRange is undefined")
    if isinstance(time_range, BaseModel):
        time_range = time_range.model_dump()
    if not isinstance(time_range, Mapping):
        raise ConfigurationError("options.timeRange must be an object")

    kind = time_range.get("type")
    if kind not in ("relative", "absolute"):
        raise ConfigurationError(
            'options.timeRange.type must be either "relative" or "absolute"'
        )

    _check_bound(kind, "start", time_range.get("start"))
    _check_bound(kind, "end", time_range.get("end"))

    interval = _lookup(time_range, "ms_update_interval", "msUpdateInterval")
    if interval is not None:
        if not _is_number(interval):
            raise ConfigurationError(
                "options.timeRange.msUpdateInterval must be a number"
            )
        if interval < 1000:
            raise ConfigurationError(
                "options.timeRange.msUpdateInterval must be greater than 1s."
            )


def validate_options(raw: Any) -> PluginOptions:
    """Build fully defaulted options from a caller-supplied mapping.

    Parameters
    ----------
    raw: Mapping[str, Any] | PluginOptions
        Partial options, using either snake_case names or the camelCase
        aliases. Already validated options are returned unchanged.

    Returns
    -------
    PluginOptions
        Immutable options with every default filled in.

    Raises
    ------
    ConfigurationError
        On the first failed check, before any network activity.
    """
    if isinstance(raw, PluginOptions):
        return raw
    if raw is None:
        raise ConfigurationError("options are undefined")
    if not isinstance(raw, Mapping):
        raise ConfigurationError("options must be a mapping")

    _assert_raw_options(raw)
    try:
        return PluginOptions.model_validate(dict(raw))
    except ValidationError as exc:
        logger.debug(
            "options.validation_failed", extra={"errors": exc.error_count()}
        )
        raise ConfigurationError(f"invalid options: {exc}") from exc


def check_options(raw: Any) -> ValidationResult:
    """Validate options without raising."""
    try:
        return ValidationResult(options=validate_options(raw))
    except ConfigurationError as exc:
        return ValidationResult(error=exc)
