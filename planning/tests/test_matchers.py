"""
Tests for periodicity date matching and the calendar helpers behind it.
"""

from datetime import date, datetime, timedelta

from django.test import SimpleTestCase

from planning.builders import PeriodicityBuilder
from planning.calendar_utils import (
    last_day_of_month,
    week_of_month_from_first,
    week_of_month_from_last,
)
from planning.constraints import Month, NthWeekdayOfMonth, Weekday
from planning.matchers import PeriodicityMatcher

from .factories import offset, utc


def days_of(year, month):
    """Every day of a month as UTC midnights."""
    return [utc(year, month, d) for d in range(1, last_day_of_month(year, month) + 1)]


class CalendarHelperTests(SimpleTestCase):
    """Test week-of-month arithmetic."""

    def test_week_of_month_from_first(self):
        """Test February 2026 (starts on a Sunday) with Monday weeks."""
        self.assertIsNone(week_of_month_from_first(date(2026, 2, 1), Weekday.MONDAY))
        self.assertEqual(week_of_month_from_first(date(2026, 2, 2), Weekday.MONDAY), 0)
        self.assertEqual(week_of_month_from_first(date(2026, 2, 8), Weekday.MONDAY), 0)
        self.assertEqual(week_of_month_from_first(date(2026, 2, 28), Weekday.MONDAY), 3)

    def test_week_of_month_from_last(self):
        self.assertEqual(week_of_month_from_last(date(2026, 2, 22), Weekday.MONDAY), 0)
        self.assertEqual(week_of_month_from_last(date(2026, 2, 9), Weekday.MONDAY), 1)
        self.assertIsNone(week_of_month_from_last(date(2026, 2, 23), Weekday.MONDAY))

    def test_week_start_changes_boundaries(self):
        """Test Sunday-started weeks make February 1st 2026 week 0."""
        self.assertEqual(week_of_month_from_first(date(2026, 2, 1), Weekday.SUNDAY), 0)


class ScenarioTests(SimpleTestCase):
    """Test concrete end-to-end matching scenarios."""

    def test_days_of_month_in_selected_months(self):
        """Test 13th and 24th of January and February."""
        periodicity = (
            PeriodicityBuilder()
            .daily(1)
            .on_month_days([13, 24])
            .in_months([Month.JANUARY, Month.FEBRUARY])
            .build()
        )
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 13)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 24)))
        self.assertFalse(periodicity.matches_constraints(utc(2026, 3, 13)))
        self.assertFalse(periodicity.matches_constraints(utc(2026, 1, 14)))

    def test_last_day_of_month(self):
        periodicity = PeriodicityBuilder().daily(1).on_month_days_from_end([1]).build()
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 31)))
        self.assertFalse(periodicity.matches_constraints(utc(2026, 1, 30)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 2, 28)))
        self.assertTrue(periodicity.matches_constraints(utc(2024, 2, 29)))
        self.assertFalse(periodicity.matches_constraints(utc(2024, 2, 28)))


class RollingConstraintTests(SimpleTestCase):
    """Test EveryN* patterns anchored on a reference date."""

    def test_every_three_days_around_reference(self):
        """Test R, R+-3, R+-6 match and dates in between do not."""
        reference = utc(2026, 1, 10)
        periodicity = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_days(3)
            .with_reference_date(reference)
            .build()
        )
        for delta in range(-9, 10):
            with self.subTest(delta=delta):
                when = reference + timedelta(days=delta)
                self.assertEqual(periodicity.matches_constraints(when), delta % 3 == 0)

    def test_timeframe_start_is_fallback_reference(self):
        periodicity = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_days(2)
            .between(utc(2026, 1, 1), utc(2026, 2, 1))
            .build()
        )
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 5)))
        self.assertFalse(periodicity.matches_constraints(utc(2026, 1, 6)))

    def test_without_reference_every_date_matches(self):
        periodicity = PeriodicityBuilder().daily(1).every_n_days(5).build()
        self.assertTrue(periodicity.matches_constraints(utc(2026, 7, 19)))

    def test_every_two_weeks_aligns_on_week_start(self):
        """Test any day of every other Monday-started week matches."""
        periodicity = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_weeks(2)
            .with_reference_date(utc(2026, 1, 7))  # Wednesday
            .build()
        )
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 5)))   # same week
        self.assertFalse(periodicity.matches_constraints(utc(2026, 1, 12)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 19)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 25)))  # Sunday, same week
        self.assertFalse(periodicity.matches_constraints(utc(2026, 1, 26)))

    def test_rolling_answer_does_not_depend_on_offset(self):
        """Test one instant written in two offsets gets the same answer."""
        every_three_days = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_days(3)
            .with_reference_date(utc(2026, 1, 10))
            .build()
        )
        same_instants = [
            (utc(2026, 1, 13, 1), datetime(2026, 1, 12, 20, 0, tzinfo=offset(-5)), True),
            (utc(2026, 1, 12, 23), datetime(2026, 1, 13, 1, 0, tzinfo=offset(2)), False),
        ]
        for in_utc, shifted, expected in same_instants:
            with self.subTest(instant=in_utc):
                self.assertEqual(shifted, in_utc)
                self.assertEqual(every_three_days.matches_constraints(in_utc), expected)
                self.assertEqual(every_three_days.matches_constraints(shifted), expected)

        every_two_months = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_months(2)
            .with_reference_date(utc(2026, 1, 15))
            .build()
        )
        # 2026-03-01 04:00 UTC
        self.assertTrue(every_two_months.matches_constraints(datetime(2026, 2, 28, 23, 0, tzinfo=offset(-5))))
        self.assertTrue(every_two_months.matches_constraints(utc(2026, 3, 1, 4)))

    def test_every_n_months_and_years(self):
        months = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_months(3)
            .with_reference_date(utc(2026, 1, 15))
            .build()
        )
        self.assertTrue(months.matches_constraints(utc(2026, 4, 2)))
        self.assertTrue(months.matches_constraints(utc(2025, 10, 30)))
        self.assertFalse(months.matches_constraints(utc(2026, 5, 15)))

        years = (
            PeriodicityBuilder()
            .daily(1)
            .every_n_years(2)
            .with_reference_date(utc(2026, 1, 1))
            .build()
        )
        self.assertTrue(years.matches_constraints(utc(2028, 6, 1)))
        self.assertFalse(years.matches_constraints(utc(2027, 6, 1)))


class NthWeekdayTests(SimpleTestCase):
    """Test "first Monday" / "last Friday" style patterns."""

    def test_first_monday_matches_once_per_month(self):
        periodicity = (
            PeriodicityBuilder()
            .monthly(1)
            .on_nth_weekdays([NthWeekdayOfMonth.first(Weekday.MONDAY)])
            .build()
        )
        expected = {(2026, 1): 5, (2026, 2): 2, (2026, 3): 2, (2026, 4): 6, (2024, 2): 5}
        for (year, month), day in expected.items():
            with self.subTest(year=year, month=month):
                matches = [d.day for d in days_of(year, month) if periodicity.matches_constraints(d)]
                self.assertEqual(matches, [day])

    def test_last_friday_matches_once_per_month(self):
        """Test months of 28, 29, 30 and 31 days."""
        periodicity = (
            PeriodicityBuilder()
            .monthly(1)
            .on_nth_weekdays([NthWeekdayOfMonth.last(Weekday.FRIDAY)])
            .build()
        )
        expected = {(2026, 1): 30, (2026, 2): 27, (2024, 2): 23, (2026, 4): 24}
        for (year, month), day in expected.items():
            with self.subTest(year=year, month=month):
                matches = [d.day for d in days_of(year, month) if periodicity.matches_constraints(d)]
                self.assertEqual(matches, [day])


class WeekOfMonthTests(SimpleTestCase):
    """Test week-of-month constraints."""

    def test_days_before_first_week_start_never_match(self):
        """Test Jan 1-4 2026 (before the first Monday) match no week index."""
        periodicity = PeriodicityBuilder().daily(1).on_weeks_of_month([1, 2, 3, 4, 5]).build()
        for day in range(1, 5):
            with self.subTest(day=day):
                self.assertFalse(periodicity.matches_constraints(utc(2026, 1, day)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 1, 5)))

    def test_last_week_of_month(self):
        periodicity = PeriodicityBuilder().daily(1).on_weeks_of_month_from_end([1]).build()
        self.assertTrue(periodicity.matches_constraints(utc(2026, 2, 16)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 2, 22)))
        self.assertFalse(periodicity.matches_constraints(utc(2026, 2, 23)))
        self.assertFalse(periodicity.matches_constraints(utc(2026, 2, 15)))

    def test_week_start_is_a_caller_preference(self):
        periodicity = PeriodicityBuilder().daily(1).on_weeks_of_month([1]).build()
        self.assertFalse(periodicity.matches_constraints(utc(2026, 2, 1)))
        self.assertTrue(periodicity.matches_constraints(utc(2026, 2, 1), week_start=Weekday.SUNDAY))


class TimeframeAndSpecialPatternTests(SimpleTestCase):
    """Test the timeframe predicate and special patterns."""

    def test_timeframe_is_half_open(self):
        start, end = utc(2026, 1, 1), utc(2026, 2, 1)
        periodicity = PeriodicityBuilder().daily(1).every_day().between(start, end).build()
        self.assertTrue(periodicity.is_within_timeframe(start))
        self.assertFalse(periodicity.is_within_timeframe(end))
        self.assertFalse(periodicity.is_within_timeframe(start - timedelta(seconds=1)))

    def test_no_timeframe_is_always_within(self):
        periodicity = PeriodicityBuilder().daily(1).every_day().build()
        self.assertTrue(periodicity.is_within_timeframe(utc(1950, 1, 1)))

    def test_is_active_requires_both_predicates(self):
        periodicity = (
            PeriodicityBuilder()
            .daily(1)
            .on_weekdays([Weekday.TUESDAY])
            .between(utc(2026, 1, 1), utc(2026, 2, 1))
            .build()
        )
        self.assertTrue(periodicity.is_active(utc(2026, 1, 13)))
        self.assertFalse(periodicity.is_active(utc(2026, 2, 3)))
        self.assertFalse(periodicity.is_active(utc(2026, 1, 14)))

    def test_special_patterns_match_exact_instants(self):
        unique = PeriodicityBuilder().unique(utc(2026, 3, 1, 9)).build()
        self.assertTrue(unique.matches_constraints(utc(2026, 3, 1, 9)))
        self.assertFalse(unique.matches_constraints(utc(2026, 3, 1, 10)))

        custom = PeriodicityBuilder().custom_dates([utc(2026, 3, 1), utc(2026, 4, 1)]).build()
        self.assertTrue(custom.matches_constraints(utc(2026, 4, 1)))
        self.assertFalse(custom.matches_constraints(utc(2026, 5, 1)))

    def test_dates_are_read_in_their_own_offset(self):
        """Test a late-evening UTC-5 instant is matched on its local weekday."""
        periodicity = PeriodicityBuilder().daily(1).on_weekdays([Weekday.TUESDAY]).build()
        matcher = PeriodicityMatcher(periodicity)
        tuesday_night = datetime(2026, 1, 13, 22, 0, tzinfo=offset(-5))
        self.assertTrue(matcher.matches_constraints(tuesday_night))
