"""Tests for working-day calendar arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from schedline.workcalendar import Calendar, DurationUnit


class TestIsWorkingDay:
    """Test working day detection."""

    def test_weekdays_and_weekends(self) -> None:
        """Test the default Monday to Friday week."""
        cal = Calendar()

        assert cal.is_working_day(date(2025, 1, 20))  # Monday
        assert not cal.is_working_day(date(2025, 1, 25))  # Saturday
        assert not cal.is_working_day(date(2025, 1, 26))  # Sunday

    def test_holiday_is_not_working(self) -> None:
        """Test that a holiday is not a working day."""
        cal = Calendar(holidays=frozenset({date(2025, 2, 14)}))

        assert not cal.is_working_day(date(2025, 2, 14))
        assert cal.is_working_day(date(2025, 2, 13))

    def test_holidays_compare_by_calendar_day(self) -> None:
        """Timestamps are reduced to their date on both sides of the lookup."""
        cal = Calendar(holidays=frozenset({datetime(2025, 2, 14, 9, 30)}))

        assert not cal.is_working_day(date(2025, 2, 14))
        assert not cal.is_working_day(datetime(2025, 2, 14, 17, 0))

    def test_four_day_week(self) -> None:
        """Test a custom four-day week."""
        cal = Calendar(working_days=("Mon", "Tue", "Wed", "Thu"))

        assert cal.is_working_day(date(2025, 1, 16))  # Thursday
        assert not cal.is_working_day(date(2025, 1, 17))  # Friday


class TestAddWorkingDays:
    """Test moving forward and backward by working days."""

    def test_skips_weekend(self) -> None:
        """Five working days from a Wednesday is the next Wednesday."""
        cal = Calendar()
        assert cal.add_working_days(date(2025, 1, 15), 5) == date(2025, 1, 22)

    def test_skips_holidays(self) -> None:
        """Test that holidays are skipped."""
        cal = Calendar(holidays=frozenset({date(2025, 1, 17)}))
        assert cal.add_working_days(date(2025, 1, 15), 3) == date(2025, 1, 21)

    def test_zero_returns_start(self) -> None:
        """Test that adding zero returns the start, even on a weekend."""
        cal = Calendar()
        saturday = date(2025, 1, 18)
        assert cal.add_working_days(saturday, 0) == saturday

    def test_negative_walks_backward(self) -> None:
        """Test negative offsets."""
        cal = Calendar()
        assert cal.add_working_days(date(2025, 1, 22), -5) == date(2025, 1, 15)

    def test_four_day_week(self) -> None:
        """Test a custom four-day week."""
        cal = Calendar(working_days=("Mon", "Tue", "Wed", "Thu"))
        assert cal.add_working_days(date(2025, 1, 16), 1) == date(2025, 1, 20)

    def test_six_day_week(self) -> None:
        """Test a six-day week."""
        cal = Calendar(working_days=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat"))
        assert cal.add_working_days(date(2025, 1, 17), 1) == date(2025, 1, 18)

    def test_calendar_days_mode(self) -> None:
        """Test plain day arithmetic in calendar-day mode."""
        cal = Calendar(duration_unit=DurationUnit.CALENDAR_DAYS)

        assert cal.add_working_days(date(2025, 1, 15), 5) == date(2025, 1, 20)
        assert cal.add_working_days(date(2025, 1, 20), -5) == date(2025, 1, 15)


class TestWorkingDaysBetween:
    """Test counting working days in [start, end)."""

    def test_counts_half_open_interval(self) -> None:
        """Test that the end day is not counted."""
        cal = Calendar()
        assert cal.working_days_between(date(2025, 1, 15), date(2025, 1, 22)) == 5

    def test_same_day_is_zero(self) -> None:
        """Test an empty interval."""
        cal = Calendar()
        assert cal.working_days_between(date(2025, 1, 15), date(2025, 1, 15)) == 0

    def test_reversed_interval_is_negative(self) -> None:
        """Test that a reversed interval is negative."""
        cal = Calendar()
        assert cal.working_days_between(date(2025, 1, 22), date(2025, 1, 15)) == -5

    def test_excludes_holidays(self) -> None:
        """Test that holidays are not counted."""
        cal = Calendar(holidays=frozenset({date(2025, 2, 14), date(2025, 2, 17)}))
        # Feb 7 .. Mar 1: 16 weekdays minus 2 holidays
        assert cal.working_days_between(date(2025, 2, 7), date(2025, 3, 1)) == 14

    def test_calendar_days_mode(self) -> None:
        """Test plain day arithmetic in calendar-day mode."""
        cal = Calendar(duration_unit=DurationUnit.CALENDAR_DAYS)

        assert cal.working_days_between(date(2025, 1, 15), date(2025, 1, 20)) == 5
        assert cal.working_days_between(date(2025, 1, 20), date(2025, 1, 15)) == -5

    @pytest.mark.parametrize(
        "working_days",
        [("Mon", "Tue", "Wed", "Thu", "Fri"), ("Mon", "Tue", "Wed", "Thu")],
        ids=["five-day", "four-day"],
    )
    def test_round_trip_from_working_days(self, working_days: tuple[str, ...]) -> None:
        """Counting back the days added to a working day gives the same number."""
        cal = Calendar(working_days=working_days, holidays=frozenset({date(2025, 2, 17)}))
        start = date(2025, 1, 13)
        for offset in range(14):
            begin = start + timedelta(days=offset)
            if not cal.is_working_day(begin):
                continue
            for n in range(40):
                assert cal.working_days_between(begin, cal.add_working_days(begin, n)) == n

    def test_round_trip_from_weekend_start(self) -> None:
        """From a non-working day the count comes back one short."""
        cal = Calendar()
        saturday = date(2025, 1, 4)

        assert cal.add_working_days(saturday, 1) == date(2025, 1, 6)
        assert cal.working_days_between(saturday, date(2025, 1, 6)) == 0
        for n in range(1, 20):
            assert cal.working_days_between(saturday, cal.add_working_days(saturday, n)) == n - 1


class TestCalendarValidation:
    """Test calendar construction checks."""

    def test_empty_week_rejected(self) -> None:
        """Test that a calendar needs a working day."""
        with pytest.raises(ValueError, match="at least one working day"):
            Calendar(working_days=())

    def test_empty_week_allowed_in_calendar_days_mode(self) -> None:
        """Test that calendar-day mode ignores the working week."""
        cal = Calendar(working_days=(), duration_unit=DurationUnit.CALENDAR_DAYS)
        assert cal.add_working_days(date(2025, 1, 15), 2) == date(2025, 1, 17)

    def test_unknown_weekday_rejected(self) -> None:
        """Test that unknown weekday names are rejected."""
        with pytest.raises(ValueError, match="Unknown weekday"):
            Calendar(working_days=("Mon", "Funday"))
