"""
Tests for gap filling and time-axis presentation.
"""

from datetime import datetime, timedelta, timezone

from promchart.domain.axes import display_unit, fill_gaps, time_axis_options
from promchart.domain.models import Dataset, Point

T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _at(*offsets):
    return [Point(x=T0 + timedelta(seconds=s), y=float(s)) for s in offsets]


def _dataset(*offsets):
    return Dataset(label="up", data=_at(*offsets))


def test_no_gaps_leaves_points_untouched():
    ds = _dataset(0, 10, 20, 30)
    (filled,) = fill_gaps([ds], T0, T0 + timedelta(seconds=30), 10)
    assert filled.data == ds.data


def test_inner_gap_gets_null_point_one_step_after_previous():
    ds = _dataset(0, 10, 50, 60)
    (filled,) = fill_gaps([ds], T0, T0 + timedelta(seconds=60), 10)
    assert [p.y for p in filled.data] == [0.0, 10.0, None, 50.0, 60.0]
    assert filled.data[2].x == T0 + timedelta(seconds=20)


def test_leading_and_trailing_gaps():
    ds = _dataset(30, 40)
    (filled,) = fill_gaps([ds], T0, T0 + timedelta(seconds=90), 10)
    assert filled.data[0] == Point(x=T0, y=None)
    assert filled.data[-1] == Point(x=T0 + timedelta(seconds=50), y=None)
    assert [p.y for p in filled.data[1:-1]] == [30.0, 40.0]


def test_spacing_equal_to_step_is_not_a_gap():
    ds = _dataset(0, 15, 30)
    (filled,) = fill_gaps([ds], T0, T0 + timedelta(seconds=30), 15)
    assert len(filled.data) == 3


def test_fill_gaps_returns_copies():
    ds = _dataset(0, 100)
    (filled,) = fill_gaps([ds], T0, T0 + timedelta(seconds=100), 10)
    assert len(ds.data) == 2
    assert len(filled.data) == 3
    assert filled.label == ds.label


def test_empty_dataset_stays_empty():
    (filled,) = fill_gaps([Dataset(label="x")], T0, T0 + timedelta(hours=1), 10)
    assert filled.data == []


def test_display_unit_by_span():
    assert display_unit(T0, T0 + timedelta(seconds=60)) == "second"
    assert display_unit(T0, T0 + timedelta(hours=1)) == "minute"
    assert display_unit(T0, T0 + timedelta(days=1)) == "hour"
    assert display_unit(T0, T0 + timedelta(days=30)) == "day"
    assert display_unit(T0, T0 + timedelta(days=365)) == "month"
    assert display_unit(T0, T0 + timedelta(days=3650)) == "year"


def test_time_axis_options():
    axis = time_axis_options(T0, T0 + timedelta(hours=1), stacked=True)
    assert axis.min == T0
    assert axis.max == T0 + timedelta(hours=1)
    assert axis.unit == "minute"
    assert axis.stacked is True
