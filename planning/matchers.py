"""
Date matching for Periodicity values.

The matcher assumes its Periodicity has already been validated and never
re-checks invariants.
"""

from datetime import datetime, timezone

from .calendar_utils import (
    last_day_of_month,
    months_between,
    start_of_week,
    week_of_month_from_first,
    week_of_month_from_last,
)
from .constraints import (
    EveryDay,
    EveryMonth,
    EveryNDays,
    EveryNMonths,
    EveryNWeeks,
    EveryNYears,
    EveryWeek,
    EveryYear,
    SpecificDaysMonthFromFirst,
    SpecificDaysMonthFromLast,
    SpecificDaysWeek,
    SpecificMonths,
    SpecificNthWeekdaysMonth,
    SpecificWeeksOfMonthFromFirst,
    SpecificWeeksOfMonthFromLast,
    SpecificYears,
    Weekday,
)
from .periodicity import CustomDates, UniqueDate


class PeriodicityMatcher:
    """
    Answers "does this instant satisfy the recurrence?".

    Args:
        periodicity: A validated Periodicity
        week_start: Weekday that opens a week (0=Monday), used by the
            week-based constraints
    """

    def __init__(self, periodicity, week_start: int = Weekday.MONDAY):
        self.periodicity = periodicity
        self.week_start = int(week_start)

    def is_active(self, when: datetime) -> bool:
        """Matches the constraints and lies inside the timeframe."""
        return self.matches_constraints(when) and self.is_within_timeframe(when)

    def matches_constraints(self, when: datetime) -> bool:
        """
        Check the recurrence filters for ``when``.

        A special pattern, when present, decides alone by exact instant
        membership. Otherwise every present constraint category must accept
        the date; absent categories accept everything.
        """
        pattern = self.periodicity.special_pattern
        if isinstance(pattern, UniqueDate):
            return when == pattern.date
        if isinstance(pattern, CustomDates):
            return when in pattern.dates

        constraints = self.periodicity.constraints
        checks = (
            (constraints.day, self._matches_day),
            (constraints.week, self._matches_week),
            (constraints.month, self._matches_month),
            (constraints.year, self._matches_year),
        )
        return all(
            check(when, constraint)
            for constraint, check in checks
            if constraint is not None
        )

    def is_within_timeframe(self, when: datetime) -> bool:
        """Half-open check: start <= when < end. True without a timeframe."""
        timeframe = self.periodicity.timeframe
        if timeframe is None:
            return True
        start, end = timeframe
        return start <= when < end

    def effective_reference_date(self, when: datetime) -> datetime:
        """
        Anchor for rolling EveryN* constraints.

        Uses the explicit reference date, then the timeframe start, then
        ``when`` itself (which makes every date match).
        """
        if self.periodicity.reference_date is not None:
            return self.periodicity.reference_date
        if self.periodicity.timeframe is not None:
            return self.periodicity.timeframe[0]
        return when

    def _rolling_pair(self, when: datetime):
        """
        ``when`` and its reference date, both read in UTC.

        EveryN* distances are counted between UTC calendar dates so that one
        instant gets the same answer whatever offset it is written in.
        """
        return _as_utc(when), _as_utc(self.effective_reference_date(when))

    # ------------------------------------------------------------------
    # Per-category checks
    # ------------------------------------------------------------------

    def _matches_day(self, when: datetime, constraint) -> bool:
        day = when.date()

        if isinstance(constraint, EveryDay):
            return True
        if isinstance(constraint, EveryNDays):
            moment, reference = self._rolling_pair(when)
            return abs((moment.date() - reference.date()).days) % constraint.n == 0
        if isinstance(constraint, SpecificDaysWeek):
            return day.weekday() in constraint.weekdays
        if isinstance(constraint, SpecificDaysMonthFromFirst):
            return day.day - 1 in constraint.days
        if isinstance(constraint, SpecificDaysMonthFromLast):
            return last_day_of_month(day.year, day.month) - day.day in constraint.days
        if isinstance(constraint, SpecificNthWeekdaysMonth):
            return any(self._is_nth_weekday(day, p) for p in constraint.patterns)
        raise TypeError(f"Unknown day constraint: {constraint!r}")

    def _is_nth_weekday(self, day, pattern) -> bool:
        if day.weekday() != pattern.weekday:
            return False
        if pattern.position.from_end:
            offset = last_day_of_month(day.year, day.month) - day.day
        else:
            offset = day.day - 1
        return offset // 7 == pattern.position.index

    def _matches_week(self, when: datetime, constraint) -> bool:
        day = when.date()

        if isinstance(constraint, EveryWeek):
            return True
        if isinstance(constraint, EveryNWeeks):
            moment, reference = self._rolling_pair(when)
            days_apart = abs(
                (start_of_week(moment.date(), self.week_start)
                 - start_of_week(reference.date(), self.week_start)).days
            )
            return (days_apart // 7) % constraint.n == 0
        if isinstance(constraint, SpecificWeeksOfMonthFromFirst):
            week = week_of_month_from_first(day, self.week_start)
            return week is not None and week in constraint.weeks
        if isinstance(constraint, SpecificWeeksOfMonthFromLast):
            week = week_of_month_from_last(day, self.week_start)
            return week is not None and week in constraint.weeks
        raise TypeError(f"Unknown week constraint: {constraint!r}")

    def _matches_month(self, when: datetime, constraint) -> bool:
        if isinstance(constraint, EveryMonth):
            return True
        if isinstance(constraint, EveryNMonths):
            moment, reference = self._rolling_pair(when)
            return abs(months_between(reference, moment)) % constraint.n == 0
        if isinstance(constraint, SpecificMonths):
            return when.month in constraint.months
        raise TypeError(f"Unknown month constraint: {constraint!r}")

    def _matches_year(self, when: datetime, constraint) -> bool:
        if isinstance(constraint, EveryYear):
            return True
        if isinstance(constraint, EveryNYears):
            moment, reference = self._rolling_pair(when)
            return abs(moment.year - reference.year) % constraint.n == 0
        if isinstance(constraint, SpecificYears):
            return when.year in constraint.years
        raise TypeError(f"Unknown year constraint: {constraint!r}")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)
