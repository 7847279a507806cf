"""
Consistency checks for Periodicity values.

Checks run in a fixed order and the first failure is raised; nothing is
accumulated. The matcher relies on these checks and never re-validates.
"""

from .constraints import (
    EveryNDays,
    EveryNMonths,
    EveryNWeeks,
    EveryNYears,
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
from .exceptions import (
    ConflictingConstraints,
    DuplicateValues,
    EmptyCollection,
    IncompatibleConstraint,
    InvalidTimeframe,
    InvalidValue,
    MissingRequired,
    OutOfRange,
)
from .periodicity import CustomDates

# Practical ceilings for rep_per_unit.
MAX_REPS_PER_UNIT = {
    RepetitionUnit.DAY: 100,
    RepetitionUnit.WEEK: 50,
    RepetitionUnit.MONTH: 100,
    RepetitionUnit.YEAR: 255,
}

EVERY_N_BOUNDS = {
    EveryNDays: 366,
    EveryNWeeks: 52,
    EveryNMonths: 12,
    EveryNYears: 100,
}

# rep_unit -> the finer-grained rolling constraint it makes redundant.
INCOMPATIBLE_ROLLING = {
    RepetitionUnit.WEEK: (EveryNDays, 'Use Week repetition unit instead'),
    RepetitionUnit.MONTH: (EveryNWeeks, 'Use Month repetition unit instead'),
    RepetitionUnit.YEAR: (EveryNMonths, 'Use Year repetition unit instead'),
}

MIN_YEAR = 1900
MAX_YEAR = 2200
MAX_OCCURRENCE_MINUTES = 1440


class PeriodicityValidator:
    """Validates a fully constructed Periodicity."""

    def validate(self, periodicity) -> None:
        """
        Validate a periodicity.

        Args:
            periodicity: Periodicity instance

        Raises:
            PeriodicityValidationError: The first inconsistency found
        """
        if periodicity.special_pattern is not None:
            self._validate_special_pattern(periodicity)
            return

        self._validate_repetition(periodicity)
        for constraint in periodicity.constraints.present():
            self._validate_constraint(constraint)
        self._validate_compatibility(periodicity)
        self._validate_timeframe(periodicity.timeframe)
        self._validate_occurrence_settings(
            periodicity.occurrence_settings, periodicity.rep_per_unit
        )

    # ------------------------------------------------------------------
    # Special patterns
    # ------------------------------------------------------------------

    def _validate_special_pattern(self, periodicity) -> None:
        unit = self._repetition_unit(periodicity.rep_unit)
        if unit != RepetitionUnit.NONE:
            raise IncompatibleConstraint(
                unit,
                'special_pattern',
                'Special patterns require rep_unit to be None',
            )
        if periodicity.rep_per_unit is not None:
            raise InvalidValue(
                'rep_per_unit',
                periodicity.rep_per_unit,
                'Must be None for special patterns',
            )
        if not periodicity.constraints.is_empty():
            raise ConflictingConstraints(
                'special_pattern',
                'regular constraints',
                'Special patterns cannot be combined with regular constraints',
            )
        pattern = periodicity.special_pattern
        if isinstance(pattern, CustomDates) and not pattern.dates:
            raise EmptyCollection('CustomDates', 'Must contain at least one date')

    # ------------------------------------------------------------------
    # Repetition
    # ------------------------------------------------------------------

    @staticmethod
    def _repetition_unit(value) -> RepetitionUnit:
        try:
            return RepetitionUnit(value)
        except ValueError:
            raise InvalidValue('rep_unit', value, f"Must be one of {', '.join(RepetitionUnit.values)}")

    def _validate_repetition(self, periodicity) -> None:
        unit = self._repetition_unit(periodicity.rep_unit)
        count = periodicity.rep_per_unit

        if unit == RepetitionUnit.NONE:
            if count is not None:
                raise InvalidValue('rep_per_unit', count, 'Must be None when rep_unit is None')
            return

        if count is None:
            raise MissingRequired('rep_per_unit', f"Required when rep_unit is {unit.label}")
        if count < 1:
            raise InvalidValue('rep_per_unit', count, 'Must be at least 1')

        ceiling = MAX_REPS_PER_UNIT[unit]
        if count > ceiling:
            raise OutOfRange('rep_per_unit', count, 1, ceiling)

    # ------------------------------------------------------------------
    # Individual constraints
    # ------------------------------------------------------------------

    def _validate_constraint(self, constraint) -> None:
        kind = type(constraint)

        if kind in EVERY_N_BOUNDS:
            self._validate_every_n(constraint, EVERY_N_BOUNDS[kind])
        elif kind is SpecificDaysWeek:
            self._validate_collection(constraint.weekdays, constraint.name, 7, 'weekday', 'Weekdays')
            self._validate_members(constraint.weekdays, constraint.name, 0, 6)
        elif kind in (SpecificDaysMonthFromFirst, SpecificDaysMonthFromLast):
            self._validate_collection(constraint.days, constraint.name, 31, 'day', 'Days')
            self._validate_members(constraint.days, constraint.name, 0, 30)
        elif kind is SpecificNthWeekdaysMonth:
            self._validate_nth_weekdays(constraint)
        elif kind in (SpecificWeeksOfMonthFromFirst, SpecificWeeksOfMonthFromLast):
            self._validate_collection(constraint.weeks, constraint.name, 5, 'week', 'Weeks')
            self._validate_members(constraint.weeks, constraint.name, 0, 4)
        elif kind is SpecificMonths:
            self._validate_collection(constraint.months, constraint.name, 12, 'month', 'Months')
            self._validate_members(constraint.months, constraint.name, 1, 12)
        elif kind is SpecificYears:
            self._validate_collection(constraint.years, constraint.name, 100, 'year', 'Years')
            self._validate_members(constraint.years, constraint.name, MIN_YEAR, MAX_YEAR)

    def _validate_every_n(self, constraint, upper: int) -> None:
        if constraint.n < 1:
            raise InvalidValue(constraint.name, constraint.n, 'Must be at least 1')
        if constraint.n > upper:
            raise OutOfRange(constraint.name, constraint.n, 1, upper)

    def _validate_collection(self, values, field_name, max_len, noun, plural) -> None:
        """Non-empty, bounded in length, no duplicates."""
        if not values:
            raise EmptyCollection(field_name, f"Must contain at least one {noun}")
        if len(values) > max_len:
            raise OutOfRange(field_name, len(values), 1, max_len)
        if len(set(values)) != len(values):
            raise DuplicateValues(field_name, f"{plural} must be unique")

    def _validate_members(self, values, field_name, lower, upper) -> None:
        for value in values:
            if not lower <= value <= upper:
                raise OutOfRange(field_name, value, lower, upper)

    def _validate_nth_weekdays(self, constraint) -> None:
        patterns = constraint.patterns
        if not patterns:
            raise EmptyCollection(constraint.name, 'Must contain at least one pattern')
        if len(patterns) > 20:
            raise OutOfRange(constraint.name, len(patterns), 1, 20)
        for pattern in patterns:
            if not 0 <= pattern.weekday <= 6:
                raise OutOfRange(constraint.name, pattern.weekday, 0, 6)
            if not 0 <= pattern.position.index <= 4:
                raise InvalidValue(
                    'MonthWeekPosition', pattern.position, 'Week position must be 0-4'
                )
        if len(set(patterns)) != len(patterns):
            raise DuplicateValues(constraint.name, 'Patterns must be unique')

    # ------------------------------------------------------------------
    # Cross-field checks
    # ------------------------------------------------------------------

    def _validate_compatibility(self, periodicity) -> None:
        unit = self._repetition_unit(periodicity.rep_unit)

        if unit == RepetitionUnit.NONE:
            raise MissingRequired('special_pattern', 'Required when rep_unit is None')

        if unit not in INCOMPATIBLE_ROLLING:
            return

        forbidden, reason = INCOMPATIBLE_ROLLING[unit]
        for constraint in periodicity.constraints.present():
            if isinstance(constraint, forbidden):
                raise IncompatibleConstraint(unit, constraint.name, reason)

    def _validate_timeframe(self, timeframe) -> None:
        if timeframe is None:
            return
        start, end = timeframe
        if start >= end:
            raise InvalidTimeframe(f"Start ({start}) must be before end ({end})")

    def _validate_occurrence_settings(self, settings, rep_per_unit) -> None:
        if settings is None:
            return

        if settings.duration is not None:
            if settings.duration < 1:
                raise InvalidValue('duration', settings.duration, 'Duration must be at least 1 minute')
            if settings.duration > MAX_OCCURRENCE_MINUTES:
                raise OutOfRange('duration', settings.duration, 1, MAX_OCCURRENCE_MINUTES)

        if settings.not_before is not None and settings.best_before is not None:
            if settings.not_before >= settings.best_before:
                raise InvalidValue(
                    'not_before/best_before',
                    f"{settings.not_before}/{settings.best_before}",
                    'not_before must be earlier than best_before',
                )

        if settings.rep_timing_settings is not None:
            self._validate_rep_timing(settings.rep_timing_settings, rep_per_unit)

    def _validate_rep_timing(self, rep_settings, rep_per_unit) -> None:
        if not rep_settings:
            raise EmptyCollection(
                'rep_timing_settings',
                'If specified, must contain at least one RepTimingSettings',
            )

        seen = set()
        for rep in rep_settings:
            if rep.rep_index in seen:
                raise DuplicateValues(
                    'rep_timing_settings.rep_index', f"Duplicate rep_index: {rep.rep_index}"
                )
            seen.add(rep.rep_index)

        for rep in rep_settings:
            if rep_per_unit is not None and not 0 <= rep.rep_index < rep_per_unit:
                raise OutOfRange('rep_timing_settings.rep_index', rep.rep_index, 0, rep_per_unit - 1)
            if rep.not_before is not None and rep.best_before is not None:
                if rep.not_before >= rep.best_before:
                    raise InvalidValue(
                        f"rep_timing_settings[{rep.rep_index}]",
                        f"not_before={rep.not_before}, best_before={rep.best_before}",
                        'not_before must be earlier than best_before',
                    )
