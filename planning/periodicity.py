"""
The Periodicity aggregate: a complete recurrence rule.

A Periodicity is an immutable value. Build it with
``planning.builders.PeriodicityBuilder`` (which validates on ``build()``) or
construct it directly and call ``validate()`` yourself.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional, Tuple

from .constraints import PeriodicityConstraints, RepetitionUnit, Weekday


@dataclass(frozen=True)
class UniqueDate:
    """A one-off occurrence at a single instant."""

    date: datetime
    name = 'UniqueDate'


@dataclass(frozen=True)
class CustomDates:
    """An explicit, sorted and de-duplicated list of instants."""

    dates: Tuple[datetime, ...]
    name = 'CustomDates'


@dataclass(frozen=True)
class RepTimingSettings:
    """Time window for one repetition inside a unit (0-indexed)."""

    rep_index: int
    not_before: Optional[time] = None
    best_before: Optional[time] = None


@dataclass(frozen=True)
class OccurrenceTimingSettings:
    """
    Timing hints attached to every occurrence.

    ``duration`` is in minutes (1-1440). ``not_before``/``best_before`` bound
    the time of day the occurrence should happen in; ``rep_timing_settings``
    overrides the window per repetition when ``rep_per_unit`` > 1.
    """

    duration: Optional[int] = None
    not_before: Optional[time] = None
    best_before: Optional[time] = None
    rep_timing_settings: Optional[Tuple[RepTimingSettings, ...]] = None


@dataclass(frozen=True)
class Periodicity:
    rep_unit: str = RepetitionUnit.NONE
    rep_per_unit: Optional[int] = None
    constraints: PeriodicityConstraints = field(default_factory=PeriodicityConstraints)
    timeframe: Optional[Tuple[datetime, datetime]] = None
    special_pattern: Optional[object] = None
    reference_date: Optional[datetime] = None
    occurrence_settings: Optional[OccurrenceTimingSettings] = None

    def validate(self) -> None:
        """
        Check the periodicity for internal consistency.

        Raises:
            PeriodicityValidationError: On the first failed check
        """
        from .validators import PeriodicityValidator
        PeriodicityValidator().validate(self)

    def matches_constraints(self, when: datetime, week_start: int = Weekday.MONDAY) -> bool:
        """Whether ``when`` satisfies the recurrence filters."""
        from .matchers import PeriodicityMatcher
        return PeriodicityMatcher(self, week_start).matches_constraints(when)

    def is_within_timeframe(self, when: datetime) -> bool:
        """Whether ``when`` lies in the half-open validity window."""
        from .matchers import PeriodicityMatcher
        return PeriodicityMatcher(self).is_within_timeframe(when)

    def is_active(self, when: datetime, week_start: int = Weekday.MONDAY) -> bool:
        from .matchers import PeriodicityMatcher
        return PeriodicityMatcher(self, week_start).is_active(when)

    @property
    def is_special(self) -> bool:
        return self.special_pattern is not None
