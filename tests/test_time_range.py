"""Tests for the pure time-range normalization helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from studio_calendar.core.time_range import (
    DEFAULT_DURATION,
    ONE_DAY,
    TimeRange,
    clamp_end,
    default_range,
    format_boundary,
    normalize,
    parse_boundary_input,
    toggle_all_day,
    with_end_input,
    with_start_input,
)

pytestmark = pytest.mark.unit


class TestClampEnd:
    def test_end_before_start_yields_default_duration(self, moment):
        start = moment(1, 9)
        assert clamp_end(start, moment(1, 8, 30)) == start + DEFAULT_DURATION

    def test_end_equal_to_start_yields_default_duration(self, moment):
        start = moment(1, 9)
        assert clamp_end(start, start) == start + timedelta(minutes=60)

    def test_end_just_short_of_minimum_is_extended(self, moment):
        start = moment(1, 9)
        assert clamp_end(start, start + timedelta(minutes=4)) == start + DEFAULT_DURATION

    def test_minimum_duration_is_kept(self, moment):
        start = moment(1, 9)
        assert clamp_end(start, start + timedelta(minutes=5)) == start + timedelta(minutes=5)

    def test_long_range_is_unchanged(self, moment):
        assert clamp_end(moment(1, 9), moment(2, 17)) == moment(2, 17)


class TestDefaultRange:
    def test_rounds_down_to_quarter_hour(self, moment):
        result = default_range(moment(4, 14, 37))
        assert result.start == moment(4, 14, 30)
        assert result.end == moment(4, 15, 30)
        assert result.all_day is False


class TestNormalize:
    def test_all_day_range_is_day_aligned(self, moment):
        result = normalize(TimeRange(start=moment(10, 10, 30), end=moment(10, 16), all_day=True))
        assert result.start == moment(10, 0)
        assert result.end == moment(11, 0)

    def test_multi_day_all_day_range_keeps_its_days(self, moment):
        result = normalize(TimeRange(start=moment(10, 0), end=moment(13, 0), all_day=True))
        assert result == TimeRange(start=moment(10, 0), end=moment(13, 0), all_day=True)

    def test_timed_range_gets_clamped(self, moment):
        result = normalize(TimeRange(start=moment(10, 9), end=moment(10, 9)))
        assert result.end == moment(10, 10)


class TestToggleAllDay:
    def test_to_all_day_collapses_to_whole_day(self, moment):
        result = toggle_all_day(TimeRange(start=moment(1, 9), end=moment(1, 10)), True)
        assert result == TimeRange(start=moment(1, 0), end=moment(2, 0), all_day=True)

    def test_back_to_timed_resets_to_nine_with_minimum_hour(self, moment):
        all_day = toggle_all_day(TimeRange(start=moment(1, 9), end=moment(1, 10)), True)
        result = toggle_all_day(all_day, False)
        assert result.start == moment(1, 9)
        assert result.end >= moment(1, 10)
        assert result.all_day is False

    def test_back_to_timed_preserves_longer_duration(self, moment):
        timed = toggle_all_day(TimeRange(start=moment(1, 0), end=moment(3, 0), all_day=True), False)
        assert timed.start == moment(1, 9)
        assert timed.duration == timedelta(days=2)

    def test_same_mode_is_a_no_op(self, moment):
        original = TimeRange(start=moment(1, 9), end=moment(1, 10))
        assert toggle_all_day(original, False) is original

    @pytest.mark.parametrize(
        ("start_hour", "minutes"),
        [(9, 60), (13, 15), (22, 300), (0, 24 * 60)],
    )
    def test_round_trip_never_shortens_or_inverts(self, moment, start_hour, minutes):
        start = moment(5, start_hour)
        original = TimeRange(start=start, end=start + timedelta(minutes=minutes))
        restored = toggle_all_day(toggle_all_day(original, True), False)
        assert restored.start < restored.end
        assert restored.duration >= original.duration
        assert restored.duration >= timedelta(minutes=60)


class TestParseBoundaryInput:
    def test_unparseable_input_returns_none(self):
        assert parse_boundary_input("next tuesday", False) is None
        assert parse_boundary_input("", True) is None

    def test_naive_input_is_placed_in_timezone(self, tz):
        parsed = parse_boundary_input("2025-03-10T14:30", False, tz=tz)
        assert parsed.tzinfo is tz
        assert (parsed.hour, parsed.minute) == (14, 30)

    def test_all_day_input_ignores_time_part(self, tz, moment):
        assert parse_boundary_input("2025-03-10T14:30", True, tz=tz) == moment(10, 0)


class TestFieldEdits:
    def test_start_edit_past_end_extends_end(self, moment):
        range_ = TimeRange(start=moment(1, 9), end=moment(1, 10))
        result = with_start_input(range_, "2025-03-01T11:00")
        assert result.start == moment(1, 11)
        assert result.end == moment(1, 12)

    def test_start_edit_keeps_valid_end(self, moment):
        range_ = TimeRange(start=moment(1, 9), end=moment(1, 17))
        assert with_start_input(range_, "2025-03-01T10:00").end == moment(1, 17)

    def test_short_end_edit_is_extended(self, moment):
        range_ = TimeRange(start=moment(1, 9), end=moment(1, 10))
        result = with_end_input(range_, "2025-03-01T09:02")
        assert result.end == moment(1, 10)

    def test_unparseable_edit_is_ignored(self, moment):
        range_ = TimeRange(start=moment(1, 9), end=moment(1, 10))
        assert with_end_input(range_, "soon") is None

    def test_all_day_end_input_is_inclusive(self, moment):
        range_ = TimeRange(start=moment(1, 0), end=moment(2, 0), all_day=True)
        result = with_end_input(range_, "2025-03-03")
        assert result.end == moment(4, 0)
        assert format_boundary(result.display_end, True) == "2025-03-03"

    def test_all_day_end_before_start_is_clamped(self, moment):
        range_ = TimeRange(start=moment(5, 0), end=moment(6, 0), all_day=True)
        result = with_end_input(range_, "2025-03-02")
        assert result.end == moment(5, 0) + ONE_DAY

    def test_all_day_start_past_end_pushes_end(self, moment):
        range_ = TimeRange(start=moment(1, 0), end=moment(2, 0), all_day=True)
        result = with_start_input(range_, "2025-03-07")
        assert result.start == moment(7, 0)
        assert result.end == moment(8, 0)
