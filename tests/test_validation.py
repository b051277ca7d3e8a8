"""
Tests for plugin option validation.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from promchart.config.models import DEFAULT_COLORS, PluginOptions
from promchart.config.validation import check_options, validate_options
from promchart.errors import ConfigurationError


def _relative(**time_range):
    tr = {"type": "relative", "start": -3600, "end": 0}
    tr.update(time_range)
    return {"query": "up", "timeRange": tr}


def test_valid_relative_options_are_defaulted():
    """Test that a minimal relative config gets every default filled in."""
    opts = validate_options(_relative())
    assert opts.time_range.type == "relative"
    assert opts.time_range.start == -3600
    assert opts.prometheus is None
    assert opts.fill_gaps is False
    assert opts.tension == 0.4
    assert opts.border_width == 3
    assert opts.border_color == list(DEFAULT_COLORS)
    assert opts.no_data_msg.message == "No data to display"
    assert opts.error_msg.message is None
    assert opts.loading_msg is not None
    assert opts.loading_msg.message == "Loading data..."
    assert opts.loading_msg.text_align == "center"


def test_valid_absolute_options():
    """Test absolute ranges accept datetimes."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 1, 2, tzinfo=timezone.utc)
    opts = validate_options(
        {"query": "up", "time_range": {"type": "absolute", "start": start, "end": end}}
    )
    assert opts.time_range.start == start
    assert opts.time_range.end == end


def test_missing_query():
    with pytest.raises(ConfigurationError, match="options.query is undefined"):
        validate_options({"timeRange": {"type": "relative", "start": -60, "end": 0}})


def test_empty_query_string():
    options = _relative()
    options["query"] = ""
    with pytest.raises(ConfigurationError, match="options.query is undefined"):
        validate_options(options)


def test_empty_query_list_is_valid():
    """Test that zero queries is a valid (empty) configuration."""
    options = _relative()
    options["query"] = []
    assert validate_options(options).get_queries() == []


def test_missing_time_range():
    with pytest.raises(ConfigurationError, match="options.timeRange is undefined"):
        validate_options({"query": "up"})


def test_time_range_must_be_object():
    with pytest.raises(ConfigurationError, match="must be an object"):
        validate_options({"query": "up", "timeRange": "last hour"})


def test_time_range_type_must_be_known():
    with pytest.raises(ConfigurationError, match='either "relative" or "absolute"'):
        validate_options(_relative(type="rolling"))


def test_time_range_type_checked_before_bounds():
    """Test that a bad type is reported even when bounds are also missing."""
    with pytest.raises(ConfigurationError, match='either "relative" or "absolute"'):
        validate_options({"query": "up", "timeRange": {"type": None}})


def test_missing_start():
    with pytest.raises(ConfigurationError, match="timeRange.start is undefined"):
        validate_options({"query": "up", "timeRange": {"type": "relative", "end": 0}})


def test_missing_end():
    with pytest.raises(ConfigurationError, match="timeRange.end is undefined"):
        validate_options(
            {"query": "up", "timeRange": {"type": "relative", "start": -60}}
        )


def test_relative_bounds_must_be_numbers():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ConfigurationError, match="start must be a number"):
        validate_options(_relative(start=start))
    with pytest.raises(ConfigurationError, match="end must be a number"):
        validate_options(_relative(end=True))


def test_absolute_bounds_must_be_datetimes():
    with pytest.raises(ConfigurationError, match="start must be a datetime"):
        validate_options(
            {"query": "up", "timeRange": {"type": "absolute", "start": -60, "end": 0}}
        )


def test_update_interval_must_be_numeric():
    with pytest.raises(ConfigurationError, match="msUpdateInterval must be a number"):
        validate_options(_relative(msUpdateInterval="5s"))


def test_update_interval_below_one_second_rejected():
    """Test that a 500ms refresh interval is rejected with its own message."""
    with pytest.raises(ConfigurationError, match="greater than 1s"):
        validate_options(_relative(msUpdateInterval=500))


def test_update_interval_of_one_second_accepted():
    opts = validate_options(_relative(msUpdateInterval=1000))
    assert opts.time_range.ms_update_interval == 1000


def test_pydantic_errors_become_configuration_errors():
    options = _relative()
    options["cubicInterpolationMode"] = "bogus"
    with pytest.raises(ConfigurationError, match="invalid options") as info:
        validate_options(options)
    assert isinstance(info.value.__cause__, ValidationError)


def test_none_options_rejected():
    with pytest.raises(ConfigurationError):
        validate_options(None)


def test_validated_options_pass_through():
    opts = validate_options(_relative())
    assert validate_options(opts) is opts


def test_options_are_immutable():
    opts = validate_options(_relative())
    with pytest.raises(ValidationError):
        opts.tension = 0.1  # type: ignore[misc]


def test_single_query_is_wrapped():
    assert validate_options(_relative()).get_queries() == ["up"]


def test_query_list_passed_through_in_order():
    options = _relative()
    options["query"] = ["b", "a", "c"]
    assert validate_options(options).get_queries() == ["b", "a", "c"]


def test_check_options_reports_without_raising():
    result = check_options(_relative(msUpdateInterval=500))
    assert not result.ok
    assert result.options is None
    assert "greater than 1s" in str(result.error)

    result = check_options(_relative())
    assert result.ok
    assert isinstance(result.options, PluginOptions)
