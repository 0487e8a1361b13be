"""Tests for date/pixel mapping and tick generation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from planviz.timeline import (
    Tick,
    TickGranularity,
    compute_day_width,
    date_to_x,
    days_between,
    generate_ticks,
    select_granularity,
    total_days,
)


class TestDaysBetween:
    """Test calendar-day differences."""

    def test_simple_difference(self) -> None:
        """Days across a month."""
        assert days_between(date(2024, 1, 1), date(2024, 1, 31)) == 30

    def test_antisymmetric(self) -> None:
        """Swapping the arguments negates the result."""
        pairs = [
            (date(2024, 1, 1), date(2024, 1, 1)),
            (date(2024, 1, 1), date(2024, 3, 1)),
            (date(2023, 12, 31), date(2025, 1, 1)),
        ]
        for a, b in pairs:
            assert days_between(a, b) >= 0
            assert days_between(a, b) == -days_between(b, a)

    def test_leap_year(self) -> None:
        """February 29th is counted."""
        assert days_between(date(2024, 2, 28), date(2024, 3, 1)) == 2

    def test_time_of_day_ignored(self) -> None:
        """Datetimes are normalized to midnight before subtracting."""
        a = datetime(2024, 3, 9, 23, 30)
        b = datetime(2024, 3, 11, 0, 15)
        assert days_between(a, b) == 2

    def test_offset_change_rounds_to_whole_days(self) -> None:
        """A one-hour UTC offset change between the dates still yields whole days."""
        before = datetime(2024, 3, 9, tzinfo=timezone(timedelta(hours=-5)))
        after = datetime(2024, 3, 11, tzinfo=timezone(timedelta(hours=-4)))
        assert days_between(before, after) == 2


class TestDateToX:
    """Test date to x-coordinate mapping."""

    def test_project_start_is_origin(self) -> None:
        """The project start always maps to x=0."""
        start = date(2024, 1, 1)
        for width in (0.0, 0.5, 10.0, 123.4):
            assert date_to_x(start, start, width) == 0

    def test_scales_with_day_width(self) -> None:
        """X grows by day_width per day."""
        assert date_to_x(date(2024, 1, 5), date(2024, 1, 1), 10) == 40

    def test_before_start_is_negative(self) -> None:
        """Dates before the start are not clamped."""
        assert date_to_x(date(2023, 12, 30), date(2024, 1, 1), 10) == -20


class TestDayWidth:
    """Test day width derivation."""

    def test_fits_width_exactly(self) -> None:
        """31 days into 310px gives 10px per day."""
        days = total_days(date(2024, 1, 1), date(2024, 1, 31))
        assert days == 31
        assert compute_day_width(310, days) == 10

    def test_zero_length_project(self) -> None:
        """A single-day project uses the whole width for one day."""
        days = total_days(date(2024, 1, 1), date(2024, 1, 1))
        assert days == 1
        assert compute_day_width(300, days) == 300

    def test_inverted_span_treated_as_one_day(self) -> None:
        """End before start does not divide by zero or flip sign."""
        days = total_days(date(2024, 1, 10), date(2024, 1, 1))
        assert days == 1
        assert compute_day_width(200, 0) == 200

    def test_narrow_viewport_does_not_raise(self) -> None:
        """Zero and negative widths pass through."""
        assert compute_day_width(0, 31) == 0
        assert compute_day_width(-31, 31) == -1


class TestGranularity:
    """Test tick granularity selection."""

    @pytest.mark.parametrize(
        ("day_width", "expected"),
        [
            (10.0, TickGranularity.WEEKLY),
            (5.8, TickGranularity.WEEKLY),
            (5.0, TickGranularity.MONTHLY),
            (1.4, TickGranularity.MONTHLY),
            (1.0, TickGranularity.QUARTERLY),
            (0.0, TickGranularity.QUARTERLY),
            (-3.0, TickGranularity.QUARTERLY),
        ],
    )
    def test_thresholds(self, day_width: float, expected: TickGranularity) -> None:
        """Weekly needs 40px per week, monthly 40px per 30 days."""
        assert select_granularity(day_width) is expected


class TestGenerateTicks:
    """Test adaptive tick generation."""

    def test_weekly_ticks_from_monday(self) -> None:
        """2024-01-01 is a Monday; ticks every 7 days through the end."""
        ticks = generate_ticks(date(2024, 1, 1), date(2024, 1, 31), 10)
        assert [t.date for t in ticks] == [
            date(2024, 1, 1),
            date(2024, 1, 8),
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]
        assert [t.label for t in ticks] == ["Jan 1", "Jan 8", "Jan 15", "Jan 22", "Jan 29"]

    def test_weekly_aligns_to_previous_monday(self) -> None:
        """A Wednesday start gets its first tick on the Monday before."""
        ticks = generate_ticks(date(2024, 1, 3), date(2024, 1, 20), 10)
        assert ticks[0] == Tick(date(2024, 1, 1), "Jan 1")
        assert all(t.date.weekday() == 0 for t in ticks)

    def test_weekly_label_crosses_month(self) -> None:
        """Labels use the tick's own month."""
        ticks = generate_ticks(date(2024, 1, 29), date(2024, 2, 10), 10)
        assert [t.label for t in ticks] == ["Jan 29", "Feb 5"]

    def test_monthly_ticks(self) -> None:
        """Monthly ticks land on the 1st, starting with the start month."""
        ticks = generate_ticks(date(2024, 1, 15), date(2024, 3, 10), 2)
        assert ticks == [
            Tick(date(2024, 1, 1), "Jan 2024"),
            Tick(date(2024, 2, 1), "Feb 2024"),
            Tick(date(2024, 3, 1), "Mar 2024"),
        ]

    def test_monthly_ticks_cross_year(self) -> None:
        """December rolls over into January of the next year."""
        ticks = generate_ticks(date(2024, 11, 10), date(2025, 1, 5), 2)
        assert [t.label for t in ticks] == ["Nov 2024", "Dec 2024", "Jan 2025"]

    def test_quarterly_ticks(self) -> None:
        """Quarter boundaries inside the span only."""
        ticks = generate_ticks(date(2024, 2, 1), date(2025, 4, 1), 0.5)
        assert [t.label for t in ticks] == ["Q2 2024", "Q3 2024", "Q4 2024", "Q1 2025", "Q2 2025"]
        assert ticks[0].date == date(2024, 4, 1)

    def test_quarterly_includes_start_boundary(self) -> None:
        """A start exactly on a quarter boundary gets a tick."""
        ticks = generate_ticks(date(2024, 1, 1), date(2024, 12, 31), 1)
        assert [t.date for t in ticks] == [
            date(2024, 1, 1),
            date(2024, 4, 1),
            date(2024, 7, 1),
            date(2024, 10, 1),
        ]

    def test_quarterly_fallback_single_tick(self) -> None:
        """No quarter boundary in range yields one tick at the start."""
        ticks = generate_ticks(date(2024, 2, 1), date(2024, 3, 15), 1)
        assert ticks == [Tick(date(2024, 2, 1), "Feb 2024")]

    def test_zero_length_project_has_a_tick(self) -> None:
        """start == end still produces at least one tick."""
        start = date(2024, 5, 15)
        for width in (500.0, 5.0, 0.5, 0.0, -1.0):
            assert len(generate_ticks(start, start, width)) >= 1

    def test_inverted_span_has_a_tick(self) -> None:
        """A malformed span never produces an empty axis."""
        ticks = generate_ticks(date(2024, 6, 1), date(2024, 1, 1), 10)
        assert ticks == [Tick(date(2024, 6, 1), "Jun 2024")]

    def test_idempotent(self) -> None:
        """Same inputs, same ticks."""
        args = (date(2024, 1, 1), date(2026, 12, 31), 0.3)
        assert generate_ticks(*args) == generate_ticks(*args)

    def test_five_year_project_is_quarterly(self) -> None:
        """Long projects at typical widths stay legible."""
        start, end = date(2024, 1, 1), date(2028, 12, 31)
        day_width = compute_day_width(900, total_days(start, end))
        ticks = generate_ticks(start, end, day_width)
        assert len(ticks) == 20
        assert ticks[-1].label == "Q4 2028"

    def test_weekly_ticks_up_to_last_representable_date(self) -> None:
        """An open-ended project ending on date.max stops at the last Monday."""
        ticks = generate_ticks(date(9999, 12, 20), date.max, 75)
        assert [t.date for t in ticks] == [date(9999, 12, 20), date(9999, 12, 27)]

    def test_monthly_ticks_up_to_last_representable_date(self) -> None:
        """December of the last representable year is the final monthly tick."""
        ticks = generate_ticks(date(9999, 6, 1), date.max, 4)
        assert [t.label for t in ticks] == [
            "Jun 9999",
            "Jul 9999",
            "Aug 9999",
            "Sep 9999",
            "Oct 9999",
            "Nov 9999",
            "Dec 9999",
        ]

    def test_quarterly_ticks_up_to_last_representable_date(self) -> None:
        """Quarter boundaries in the last representable year are produced."""
        ticks = generate_ticks(date(9999, 1, 1), date.max, 0.5)
        assert ticks[-1] == Tick(date(9999, 10, 1), "Q4 9999")
