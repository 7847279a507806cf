"""
Validation errors raised while checking a recurrence rule.

Each error kind carries its structured context as attributes (and as
``params``) so callers can build precise messages without parsing strings.
All of them are Django ``ValidationError`` subclasses, which lets the REST
layer turn them into 400 responses directly.
"""

from django.core.exceptions import ValidationError


class PeriodicityValidationError(ValidationError):
    """Base class for every periodicity validation failure."""

    code = 'invalid_periodicity'

    def __init__(self, message, **context):
        self.context = context
        super().__init__(message, code=self.code, params=context)


class InvalidValue(PeriodicityValidationError):
    code = 'invalid_value'

    def __init__(self, field, value, reason):
        self.field = field
        self.value = str(value)
        self.reason = reason
        super().__init__(
            f"Invalid value for {field}: '{self.value}' - {reason}",
            field=field, value=self.value, reason=reason,
        )


class MissingRequired(PeriodicityValidationError):
    code = 'missing_required'

    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(
            f"Missing required field {field}: {reason}",
            field=field, reason=reason,
        )


class IncompatibleConstraint(PeriodicityValidationError):
    code = 'incompatible_constraint'

    def __init__(self, rep_unit, constraint_type, reason):
        self.rep_unit = rep_unit
        self.constraint_type = constraint_type
        self.reason = reason
        unit_label = getattr(rep_unit, 'label', rep_unit)
        super().__init__(
            f"Constraint {constraint_type} incompatible with {unit_label} repetition: {reason}",
            rep_unit=unit_label, constraint_type=constraint_type, reason=reason,
        )


class ConflictingConstraints(PeriodicityValidationError):
    code = 'conflicting_constraints'

    def __init__(self, first, second, reason):
        self.first = first
        self.second = second
        self.reason = reason
        super().__init__(
            f"Constraints {first} and {second} conflict: {reason}",
            first=first, second=second, reason=reason,
        )


class DuplicateValues(PeriodicityValidationError):
    code = 'duplicate_values'

    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(
            f"Duplicate values in {field}: {reason}",
            field=field, reason=reason,
        )


class EmptyCollection(PeriodicityValidationError):
    code = 'empty_collection'

    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(
            f"Empty collection for {field}: {reason}",
            field=field, reason=reason,
        )


class OutOfRange(PeriodicityValidationError):
    code = 'out_of_range'

    def __init__(self, field, value, min_value, max_value):
        self.field = field
        self.value = value
        self.min_value = min_value
        self.max_value = max_value
        super().__init__(
            f"{field} value {value} out of range [{min_value}, {max_value}]",
            field=field, value=value, min=min_value, max=max_value,
        )


class InvalidTimeframe(PeriodicityValidationError):
    code = 'invalid_timeframe'

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Invalid timeframe: {reason}", reason=reason)
