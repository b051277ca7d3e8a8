"""
Tests for time-range resolution and step selection.
"""

from datetime import datetime, timedelta, timezone

from promchart.config.models import TimeRange
from promchart.domain.timerange import (
    WindowKey,
    compute_step,
    effective_step,
    resolve,
    utc_now,
    window_for,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_resolve_relative_anchors_on_now():
    tr = TimeRange(type="relative", start=-3600, end=0)
    start, end = resolve(tr, now=NOW)
    assert start == NOW - timedelta(hours=1)
    assert end == NOW


def test_resolve_relative_reanchors_each_call():
    tr = TimeRange(type="relative", start=-60, end=-30)
    first = resolve(tr, now=NOW)
    later = resolve(tr, now=NOW + timedelta(seconds=5))
    assert later[0] - first[0] == timedelta(seconds=5)
    assert later[1] - first[1] == timedelta(seconds=5)


def test_resolve_absolute_passes_through():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 1, 2, tzinfo=timezone.utc)
    tr = TimeRange(type="absolute", start=start, end=end)
    assert resolve(tr) == (start, end)
    assert resolve(tr) == resolve(tr, now=NOW)


def test_utc_now_is_whole_seconds():
    now = utc_now()
    assert now.microsecond == 0
    assert now.tzinfo == timezone.utc


def test_compute_step_one_hour_600px():
    """Test 3600s over 600px gives 6s rounded up to 10s."""
    assert compute_step(NOW - timedelta(hours=1), NOW, 600) == 10


def test_compute_step_snaps_to_ladder():
    assert compute_step(NOW - timedelta(seconds=100), NOW, 100) == 1
    assert compute_step(NOW - timedelta(minutes=10), NOW, 100) == 10
    assert compute_step(NOW - timedelta(days=1), NOW, 800) == 120


def test_compute_step_never_below_one_second():
    assert compute_step(NOW, NOW, 800) == 1
    assert compute_step(NOW - timedelta(seconds=10), NOW, 4000) == 1


def test_compute_step_whole_days_for_huge_windows():
    step = compute_step(NOW - timedelta(days=3650), NOW, 100)
    assert step % 86400 == 0
    assert step >= 36 * 86400


def test_compute_step_handles_zero_width():
    assert compute_step(NOW - timedelta(hours=1), NOW, 0) == 3600


def test_compute_step_non_increasing_with_density():
    start = NOW - timedelta(days=7)
    steps = [compute_step(start, NOW, width) for width in (50, 100, 300, 600, 1200, 4000)]
    assert steps == sorted(steps, reverse=True)


def test_effective_step_min_step_floor_wins():
    tr = TimeRange(type="relative", start=-3600, end=0, minStep=60)
    start, end = resolve(tr, now=NOW)
    expected = compute_step(start, end, 600)
    assert effective_step(tr, start, end, 600) == max(60, expected) == 60


def test_effective_step_explicit_step_replaces_auto():
    tr = TimeRange(type="relative", start=-3600, end=0, step=45)
    start, end = resolve(tr, now=NOW)
    assert effective_step(tr, start, end, 600) == 45


def test_effective_step_explicit_step_below_floor():
    tr = TimeRange(type="relative", start=-3600, end=0, step=5, min_step=30)
    start, end = resolve(tr, now=NOW)
    assert effective_step(tr, start, end, 600) == 30


def test_effective_step_at_least_min_step_for_many_widths():
    tr = TimeRange(type="relative", start=-86400, end=0, min_step=15)
    start, end = resolve(tr, now=NOW)
    for width in (1, 10, 500, 5000, 100000):
        assert effective_step(tr, start, end, width) >= 15


def test_window_for_is_stable_within_same_instant():
    tr = TimeRange(type="relative", start=-3600, end=0)
    assert window_for(tr, 600, now=NOW) == window_for(tr, 600, now=NOW)
    assert window_for(tr, 600, now=NOW) == WindowKey(10, NOW - timedelta(hours=1), NOW)
