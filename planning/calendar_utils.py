"""
Calendar arithmetic helpers shared by the recurrence matcher.

All helpers work on ``date`` values; callers pass ``dt.date()`` for
datetimes so that the date parts are read in the datetime's own offset.
"""

from calendar import monthrange
from datetime import date, timedelta
from typing import Optional


def last_day_of_month(year: int, month: int) -> int:
    """Number of the last day in the given month (28-31)."""
    return monthrange(year, month)[1]


def start_of_week(day: date, week_start: int) -> date:
    """Return the most recent ``week_start`` weekday on or before ``day``."""
    days_back = (day.weekday() - week_start) % 7
    return day - timedelta(days=days_back)


def first_week_start_day(year: int, month: int, week_start: int) -> int:
    """Day of month of the first ``week_start`` weekday in the month."""
    first_weekday = date(year, month, 1).weekday()
    return 1 + (week_start - first_weekday) % 7


def last_week_end_day(year: int, month: int, week_start: int) -> int:
    """Day of month of the last day that closes a week inside the month."""
    week_end = (week_start - 1) % 7
    last_day = last_day_of_month(year, month)
    last_weekday = date(year, month, last_day).weekday()
    return last_day - (last_weekday - week_end) % 7


def week_of_month_from_first(day: date, week_start: int) -> Optional[int]:
    """
    0-indexed week of the month, counted from the first ``week_start``.

    Week 0 begins on the first occurrence of ``week_start`` in the month and
    each later week starts 7 days after. Days before that first week start
    belong to the previous month's last week, so None is returned for them.
    A trailing week that overflows into the next month stays attached to
    this month.

    Example (February 2026, weeks starting Monday):
        Feb 1 (Sun)        -> None
        Feb 2 - Feb 8      -> 0
        Feb 23 - Feb 28    -> 3
    """
    first = first_week_start_day(day.year, day.month, week_start)
    if day.day < first:
        return None
    return (day.day - first) // 7


def week_of_month_from_last(day: date, week_start: int) -> Optional[int]:
    """
    0-indexed week of the month, counted backwards from the last week.

    Week 0 is the last complete week that ends inside the month (a week ends
    on the day before ``week_start``). Days after that week belong to the
    next month's first week, so None is returned for them.

    Example (February 2026, weeks starting Monday, ending Sunday):
        Feb 16 - Feb 22    -> 0
        Feb 9 - Feb 15     -> 1
        Feb 23 - Feb 28    -> None
    """
    last = last_week_end_day(day.year, day.month, week_start)
    if day.day > last:
        return None
    return (last - day.day) // 7


def months_between(earlier: date, later: date) -> int:
    """Signed number of calendar months from ``earlier`` to ``later``."""
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)
