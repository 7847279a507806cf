"""
Fluent construction of Periodicity values.

Setters only record values (converting user-facing 1-indexed days and weeks
to the 0-indexed internal encoding); nothing is validated until ``build()``.
Each constraint setter replaces whatever was previously set for its
category.

Example:
    >>> periodicity = (
    ...     PeriodicityBuilder()
    ...     .daily(1)
    ...     .on_month_days([13, 24])
    ...     .in_months([Month.JANUARY, Month.FEBRUARY])
    ...     .build()
    ... )
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .constraints import (
    EveryDay,
    EveryMonth,
    EveryNDays,
    EveryNMonths,
    EveryNWeeks,
    EveryNYears,
    EveryWeek,
    EveryYear,
    NthWeekdayOfMonth,
    PeriodicityConstraints,
    RepetitionUnit,
    SpecificDaysMonthFromFirst,
    SpecificDaysMonthFromLast,
    SpecificDaysWeek,
    SpecificMonths,
    SpecificNthWeekdaysMonth,
    SpecificWeeksOfMonthFromFirst,
    SpecificWeeksOfMonthFromLast,
    SpecificYears,
)
from .periodicity import CustomDates, OccurrenceTimingSettings, Periodicity, UniqueDate

FAR_PAST = datetime(1900, 1, 1, tzinfo=timezone.utc)
FAR_FUTURE = datetime(2200, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def _zero_indexed(values: Iterable[int]) -> tuple:
    """1-indexed user input to 0-indexed storage; values below 1 become 0."""
    return tuple(max(value - 1, 0) for value in values)


class PeriodicityBuilder:
    """Mutable, chainable accumulator for a Periodicity."""

    def __init__(self):
        self._rep_unit: Optional[str] = None
        self._rep_per_unit: Optional[int] = None
        self._day = None
        self._week = None
        self._month = None
        self._year = None
        self._timeframe = None
        self._special_pattern = None
        self._reference_date: Optional[datetime] = None
        self._occurrence_settings: Optional[OccurrenceTimingSettings] = None

    # Repetition

    def _repeat(self, unit: str, count: int) -> 'PeriodicityBuilder':
        self._rep_unit = unit
        self._rep_per_unit = count
        return self

    def daily(self, count: int) -> 'PeriodicityBuilder':
        return self._repeat(RepetitionUnit.DAY, count)

    def weekly(self, count: int) -> 'PeriodicityBuilder':
        return self._repeat(RepetitionUnit.WEEK, count)

    def monthly(self, count: int) -> 'PeriodicityBuilder':
        return self._repeat(RepetitionUnit.MONTH, count)

    def yearly(self, count: int) -> 'PeriodicityBuilder':
        return self._repeat(RepetitionUnit.YEAR, count)

    # Day constraints

    def every_day(self) -> 'PeriodicityBuilder':
        self._day = EveryDay()
        return self

    def every_n_days(self, n: int) -> 'PeriodicityBuilder':
        self._day = EveryNDays(n)
        return self

    def on_weekdays(self, weekdays: Iterable[int]) -> 'PeriodicityBuilder':
        self._day = SpecificDaysWeek(tuple(weekdays))
        return self

    def on_month_days(self, days: Iterable[int]) -> 'PeriodicityBuilder':
        """Days of month, 1-indexed (13 means the 13th)."""
        self._day = SpecificDaysMonthFromFirst(_zero_indexed(days))
        return self

    def on_month_days_from_end(self, days: Iterable[int]) -> 'PeriodicityBuilder':
        """Days counted from month end, 1-indexed (1 means the last day)."""
        self._day = SpecificDaysMonthFromLast(_zero_indexed(days))
        return self

    def on_nth_weekdays(self, patterns: Iterable[NthWeekdayOfMonth]) -> 'PeriodicityBuilder':
        self._day = SpecificNthWeekdaysMonth(tuple(patterns))
        return self

    # Week constraints

    def every_week(self) -> 'PeriodicityBuilder':
        self._week = EveryWeek()
        return self

    def every_n_weeks(self, n: int) -> 'PeriodicityBuilder':
        self._week = EveryNWeeks(n)
        return self

    def on_weeks_of_month(self, weeks: Iterable[int]) -> 'PeriodicityBuilder':
        """Weeks of month, 1-indexed (1 means the first week)."""
        self._week = SpecificWeeksOfMonthFromFirst(_zero_indexed(weeks))
        return self

    def on_weeks_of_month_from_end(self, weeks: Iterable[int]) -> 'PeriodicityBuilder':
        """Weeks counted from month end, 1-indexed (1 means the last week)."""
        self._week = SpecificWeeksOfMonthFromLast(_zero_indexed(weeks))
        return self

    # Month and year constraints

    def every_month(self) -> 'PeriodicityBuilder':
        self._month = EveryMonth()
        return self

    def every_n_months(self, n: int) -> 'PeriodicityBuilder':
        self._month = EveryNMonths(n)
        return self

    def in_months(self, months: Iterable[int]) -> 'PeriodicityBuilder':
        self._month = SpecificMonths(tuple(months))
        return self

    def every_year(self) -> 'PeriodicityBuilder':
        self._year = EveryYear()
        return self

    def every_n_years(self, n: int) -> 'PeriodicityBuilder':
        self._year = EveryNYears(n)
        return self

    def in_years(self, years: Iterable[int]) -> 'PeriodicityBuilder':
        self._year = SpecificYears(tuple(years))
        return self

    # Special patterns

    def unique(self, when: datetime) -> 'PeriodicityBuilder':
        """One-off occurrence at ``when``."""
        self._rep_unit = RepetitionUnit.NONE
        self._special_pattern = UniqueDate(when)
        return self

    def custom_dates(self, dates: Iterable[datetime]) -> 'PeriodicityBuilder':
        """Explicit dates; stored sorted with duplicates removed."""
        self._rep_unit = RepetitionUnit.NONE
        self._special_pattern = CustomDates(tuple(sorted(set(dates))))
        return self

    # Timeframe

    def between(self, start: datetime, end: datetime) -> 'PeriodicityBuilder':
        self._timeframe = (start, end)
        return self

    def starting_from(self, start: datetime) -> 'PeriodicityBuilder':
        self._timeframe = (start, FAR_FUTURE)
        return self

    def until(self, end: datetime) -> 'PeriodicityBuilder':
        self._timeframe = (FAR_PAST, end)
        return self

    def with_reference_date(self, when: datetime) -> 'PeriodicityBuilder':
        """Anchor for the rolling EveryN* constraints."""
        self._reference_date = when
        return self

    def with_occurrence_settings(self, settings: OccurrenceTimingSettings) -> 'PeriodicityBuilder':
        self._occurrence_settings = settings
        return self

    def build(self) -> Periodicity:
        """
        Assemble and validate the Periodicity.

        Returns:
            The validated Periodicity

        Raises:
            PeriodicityValidationError: If the accumulated values are inconsistent
        """
        periodicity = Periodicity(
            rep_unit=self._rep_unit or RepetitionUnit.NONE,
            rep_per_unit=self._rep_per_unit,
            constraints=PeriodicityConstraints(
                day=self._day,
                week=self._week,
                month=self._month,
                year=self._year,
            ),
            timeframe=self._timeframe,
            special_pattern=self._special_pattern,
            reference_date=self._reference_date,
            occurrence_settings=self._occurrence_settings,
        )
        periodicity.validate()
        return periodicity


# ========================================================================
# PRESETS
# ========================================================================

def daily() -> Periodicity:
    """Once per day, every day."""
    return PeriodicityBuilder().daily(1).every_day().build()


def weekly() -> Periodicity:
    return PeriodicityBuilder().weekly(1).every_week().build()


def monthly() -> Periodicity:
    return PeriodicityBuilder().monthly(1).every_month().build()


def yearly() -> Periodicity:
    return PeriodicityBuilder().yearly(1).every_year().build()


def unique(when: datetime) -> Periodicity:
    """A single occurrence at ``when``."""
    return PeriodicityBuilder().unique(when).build()


def on_weekdays(weekdays: List[int]) -> Periodicity:
    """Once a day on the given weekdays."""
    return PeriodicityBuilder().daily(1).on_weekdays(weekdays).build()


def on_days_of_month(days: List[int]) -> Periodicity:
    """Once a day on the given 1-indexed days of the month."""
    return PeriodicityBuilder().daily(1).on_month_days(days).build()
