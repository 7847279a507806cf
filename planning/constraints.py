"""
Constraint vocabulary for recurrence rules.

A Periodicity combines up to four independent filters (day, week, month,
year). Every filter is a small immutable value; all present filters must
accept a date for it to match (AND semantics).
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from django.db import models


class Weekday(models.IntegerChoices):
    """Day of week, numbered like ``date.weekday()`` (0=Monday, 6=Sunday)."""

    MONDAY = 0, 'Monday'
    TUESDAY = 1, 'Tuesday'
    WEDNESDAY = 2, 'Wednesday'
    THURSDAY = 3, 'Thursday'
    FRIDAY = 4, 'Friday'
    SATURDAY = 5, 'Saturday'
    SUNDAY = 6, 'Sunday'


class Month(models.IntegerChoices):
    """Calendar month, numbered like ``date.month``."""

    JANUARY = 1, 'January'
    FEBRUARY = 2, 'February'
    MARCH = 3, 'March'
    APRIL = 4, 'April'
    MAY = 5, 'May'
    JUNE = 6, 'June'
    JULY = 7, 'July'
    AUGUST = 8, 'August'
    SEPTEMBER = 9, 'September'
    OCTOBER = 10, 'October'
    NOVEMBER = 11, 'November'
    DECEMBER = 12, 'December'


class RepetitionUnit(models.TextChoices):
    """Time unit a recurrence repeats in."""

    DAY = 'day', 'Day'
    WEEK = 'week', 'Week'
    MONTH = 'month', 'Month'
    YEAR = 'year', 'Year'
    NONE = 'none', 'None'


# ========================================================================
# DAY CONSTRAINTS
# ========================================================================

@dataclass(frozen=True)
class MonthWeekPosition:
    """
    Position of a weekday inside a month.

    ``index`` is 0-based: FromFirst(0) is the first occurrence,
    FromLast(0) the last one.
    """

    index: int
    from_end: bool = False

    @classmethod
    def from_first(cls, index: int) -> 'MonthWeekPosition':
        return cls(index=index, from_end=False)

    @classmethod
    def from_last(cls, index: int) -> 'MonthWeekPosition':
        return cls(index=index, from_end=True)

    def __str__(self):
        anchor = 'FromLast' if self.from_end else 'FromFirst'
        return f"{anchor}({self.index})"


@dataclass(frozen=True)
class NthWeekdayOfMonth:
    """A weekday paired with its position in the month ("first Monday")."""

    weekday: int
    position: MonthWeekPosition

    @classmethod
    def first(cls, weekday: int) -> 'NthWeekdayOfMonth':
        return cls(weekday, MonthWeekPosition.from_first(0))

    @classmethod
    def second(cls, weekday: int) -> 'NthWeekdayOfMonth':
        return cls(weekday, MonthWeekPosition.from_first(1))

    @classmethod
    def third(cls, weekday: int) -> 'NthWeekdayOfMonth':
        return cls(weekday, MonthWeekPosition.from_first(2))

    @classmethod
    def fourth(cls, weekday: int) -> 'NthWeekdayOfMonth':
        return cls(weekday, MonthWeekPosition.from_first(3))

    @classmethod
    def last(cls, weekday: int) -> 'NthWeekdayOfMonth':
        return cls(weekday, MonthWeekPosition.from_last(0))

    @classmethod
    def second_last(cls, weekday: int) -> 'NthWeekdayOfMonth':
        return cls(weekday, MonthWeekPosition.from_last(1))


class DayConstraint:
    """Base class for filters on the day of a date."""

    name = 'DayConstraint'


@dataclass(frozen=True)
class EveryDay(DayConstraint):
    name = 'EveryDay'


@dataclass(frozen=True)
class EveryNDays(DayConstraint):
    """Rolling pattern counted from the effective reference date (1-366)."""

    n: int
    name = 'EveryNDays'


@dataclass(frozen=True)
class SpecificDaysWeek(DayConstraint):
    weekdays: Tuple[int, ...]
    name = 'SpecificDaysWeek'


@dataclass(frozen=True)
class SpecificDaysMonthFromFirst(DayConstraint):
    """0-indexed days of month: 0 is the 1st."""

    days: Tuple[int, ...]
    name = 'SpecificDaysMonthFromFirst'


@dataclass(frozen=True)
class SpecificDaysMonthFromLast(DayConstraint):
    """0-indexed days counted from month end: 0 is the last day."""

    days: Tuple[int, ...]
    name = 'SpecificDaysMonthFromLast'


@dataclass(frozen=True)
class SpecificNthWeekdaysMonth(DayConstraint):
    patterns: Tuple[NthWeekdayOfMonth, ...]
    name = 'SpecificNthWeekdaysMonth'


# ========================================================================
# WEEK CONSTRAINTS
# ========================================================================

class WeekConstraint:
    """Base class for filters on the week a date falls in."""

    name = 'WeekConstraint'


@dataclass(frozen=True)
class EveryWeek(WeekConstraint):
    name = 'EveryWeek'


@dataclass(frozen=True)
class EveryNWeeks(WeekConstraint):
    n: int
    name = 'EveryNWeeks'


@dataclass(frozen=True)
class SpecificWeeksOfMonthFromFirst(WeekConstraint):
    """0-indexed weeks, week 0 starting on the month's first week start."""

    weeks: Tuple[int, ...]
    name = 'SpecificWeeksOfMonthFromFirst'


@dataclass(frozen=True)
class SpecificWeeksOfMonthFromLast(WeekConstraint):
    """0-indexed weeks, week 0 being the last week ending in the month."""

    weeks: Tuple[int, ...]
    name = 'SpecificWeeksOfMonthFromLast'


# ========================================================================
# MONTH AND YEAR CONSTRAINTS
# ========================================================================

class MonthConstraint:
    name = 'MonthConstraint'


@dataclass(frozen=True)
class EveryMonth(MonthConstraint):
    name = 'EveryMonth'


@dataclass(frozen=True)
class EveryNMonths(MonthConstraint):
    n: int
    name = 'EveryNMonths'


@dataclass(frozen=True)
class SpecificMonths(MonthConstraint):
    months: Tuple[int, ...]
    name = 'SpecificMonths'


class YearConstraint:
    name = 'YearConstraint'


@dataclass(frozen=True)
class EveryYear(YearConstraint):
    name = 'EveryYear'


@dataclass(frozen=True)
class EveryNYears(YearConstraint):
    n: int
    name = 'EveryNYears'


@dataclass(frozen=True)
class SpecificYears(YearConstraint):
    years: Tuple[int, ...]
    name = 'SpecificYears'


@dataclass(frozen=True)
class PeriodicityConstraints:
    """All present constraints must be satisfied for a date to match."""

    day: Optional[DayConstraint] = None
    week: Optional[WeekConstraint] = None
    month: Optional[MonthConstraint] = None
    year: Optional[YearConstraint] = None

    def is_empty(self) -> bool:
        """True when no category is constrained."""
        return all(c is None for c in (self.day, self.week, self.month, self.year))

    def present(self):
        """Yield the constraints that are set, in day/week/month/year order."""
        for constraint in (self.day, self.week, self.month, self.year):
            if constraint is not None:
                yield constraint
