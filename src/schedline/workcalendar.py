"""Working-day calendar arithmetic."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DEFAULT_WORKING_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri")


class DurationUnit(str, Enum):
    """How task durations and lags are counted."""

    WORKING_DAYS = "working_days"
    CALENDAR_DAYS = "calendar_days"


def as_day(value: date) -> date:
    """Drop the time-of-day part of a datetime, leaving plain dates untouched."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _default_holidays() -> frozenset[date]:
    return frozenset()


@dataclass(frozen=True)
class Calendar:
    """Working-day calendar shared by every task of a schedule.

    Weekdays are given as three-letter abbreviations (``Mon`` .. ``Sun``), so
    four- or six-day weeks only need a different ``working_days`` tuple.
    """

    working_days: tuple[str, ...] = DEFAULT_WORKING_DAYS
    holidays: frozenset[date] = field(default_factory=_default_holidays)
    duration_unit: DurationUnit = DurationUnit.WORKING_DAYS

    def __post_init__(self) -> None:
        object.__setattr__(self, "working_days", tuple(self.working_days))
        unknown = [day for day in self.working_days if day not in WEEKDAY_NAMES]
        if unknown:
            raise ValueError(
                f"Unknown weekday name(s) {', '.join(unknown)}; "
                f"expected one of {', '.join(WEEKDAY_NAMES)}"
            )
        if not self.working_days and self.duration_unit == DurationUnit.WORKING_DAYS:
            raise ValueError("Calendar must have at least one working day")
        # Normalize timestamps so holiday lookups compare calendar days only
        object.__setattr__(self, "holidays", frozenset(as_day(h) for h in self.holidays))

    def is_working_day(self, day: date) -> bool:
        """Return True if ``day`` is neither a holiday nor a non-working weekday."""
        day = as_day(day)
        if day in self.holidays:
            return False
        return WEEKDAY_NAMES[day.weekday()] in self.working_days

    def add_working_days(self, start: date, days: int) -> date:
        """Move ``days`` working days away from ``start``.

        Negative values walk backwards (used by the backward pass). In
        calendar-day mode this is plain day arithmetic.
        """
        start = as_day(start)
        if self.duration_unit == DurationUnit.CALENDAR_DAYS:
            return start + timedelta(days=days)
        if days == 0:
            return start

        step = timedelta(days=1 if days > 0 else -1)
        remaining = abs(days)
        current = start
        while remaining > 0:
            current += step
            if self.is_working_day(current):
                remaining -= 1
        return current

    def working_days_between(self, start: date, end: date) -> int:
        """Count working days in the half-open interval ``[start, end)``.

        The result is signed: when ``end`` precedes ``start`` the count of
        working days in ``[end, start)`` is returned negated, mirroring the
        calendar-day difference.
        """
        start = as_day(start)
        end = as_day(end)
        if self.duration_unit == DurationUnit.CALENDAR_DAYS:
            return (end - start).days
        if end < start:
            return -self.working_days_between(end, start)

        count = 0
        current = start
        one_day = timedelta(days=1)
        while current < end:
            if self.is_working_day(current):
                count += 1
            current += one_day
        return count
