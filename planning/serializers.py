"""
Serializers for the planning API.

Input serializers for value objects return the domain object from
``validate()``, so a nested field's validated value is already a
Periodicity, RecurringRule, Location, ... Domain validation failures are
re-raised as DRF validation errors and answered with HTTP 400.
"""

from dataclasses import fields as dataclass_fields

from django.utils import timezone
from rest_framework import serializers

from .capabilities import TaskRequirements
from .config import SchedulingConfig
from .constraints import (
    EveryDay,
    EveryMonth,
    EveryNDays,
    EveryNMonths,
    EveryNWeeks,
    EveryNYears,
    EveryWeek,
    EveryYear,
    MonthWeekPosition,
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
from .exceptions import PeriodicityValidationError
from .periodicity import (
    CustomDates,
    OccurrenceTimingSettings,
    Periodicity,
    RepTimingSettings,
    UniqueDate,
)
from .schedule import (
    Availability,
    AvailabilityKind,
    AvailabilityLevel,
    CapabilitySet,
    DeviceAccess,
    GeoCoordinates,
    Location,
    LocationConstraint,
    LocationRule,
    Mobility,
    RecurringRule,
    ScheduleTemplate,
    UnavailableReason,
)


class OffsetDateTimeField(serializers.DateTimeField):
    """DateTimeField that keeps the UTC offset it was given."""

    def enforce_timezone(self, value):
        if timezone.is_aware(value):
            return value
        return super().enforce_timezone(value)


class EnumNameField(serializers.Field):
    """Reads and writes an IntegerChoices member by its lower-case name."""

    default_error_messages = {
        'invalid_choice': '"{input}" is not a valid choice. Expected one of: {choices}.',
    }

    def __init__(self, choices_class, **kwargs):
        self.choices_class = choices_class
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        try:
            return self.choices_class[str(data).upper()]
        except KeyError:
            choices = ', '.join(m.name.lower() for m in self.choices_class)
            self.fail('invalid_choice', input=data, choices=choices)

    def to_representation(self, value):
        return self.choices_class(value).name.lower()


# ========================================================================
# PERIODICITY
# ========================================================================

class ConstraintSerializer(serializers.Serializer):
    """
    One constraint, e.g. ``{"type": "EveryNDays", "n": 3}`` or
    ``{"type": "SpecificDaysMonthFromFirst", "values": [12, 23]}``.

    List values use the internal 0-indexed encoding for days and weeks.
    """

    constraint_types = {}
    category = ''

    type = serializers.CharField()
    n = serializers.IntegerField(required=False)
    values = serializers.ListField(child=serializers.IntegerField(), required=False)
    patterns = serializers.ListField(child=serializers.DictField(), required=False)

    def validate_type(self, value):
        if value not in self.constraint_types:
            raise serializers.ValidationError(
                f'"{value}" is not a valid {self.category} constraint.'
            )
        return value

    def validate(self, data):
        """Build the constraint value object."""
        constraint_class = self.constraint_types[data['type']]
        field_names = [f.name for f in dataclass_fields(constraint_class)]

        if not field_names:
            return constraint_class()
        if field_names == ['n']:
            if 'n' not in data:
                raise serializers.ValidationError({'n': 'This field is required.'})
            return constraint_class(data['n'])
        if field_names == ['patterns']:
            patterns = NthWeekdaySerializer(data=data.get('patterns', []), many=True)
            patterns.is_valid(raise_exception=True)
            return constraint_class(tuple(patterns.validated_data))
        return constraint_class(tuple(data.get('values', [])))


class NthWeekdaySerializer(serializers.Serializer):
    weekday = serializers.IntegerField(min_value=0, max_value=6)
    position = serializers.IntegerField(min_value=0)
    from_end = serializers.BooleanField(default=False)

    def validate(self, data):
        position = MonthWeekPosition(index=data['position'], from_end=data['from_end'])
        return NthWeekdayOfMonth(data['weekday'], position)


def _types(*classes):
    return {c.name: c for c in classes}


class DayConstraintSerializer(ConstraintSerializer):
    category = 'day'
    constraint_types = _types(
        EveryDay, EveryNDays, SpecificDaysWeek, SpecificDaysMonthFromFirst,
        SpecificDaysMonthFromLast, SpecificNthWeekdaysMonth,
    )


class WeekConstraintSerializer(ConstraintSerializer):
    category = 'week'
    constraint_types = _types(
        EveryWeek, EveryNWeeks, SpecificWeeksOfMonthFromFirst, SpecificWeeksOfMonthFromLast,
    )


class MonthConstraintSerializer(ConstraintSerializer):
    category = 'month'
    constraint_types = _types(EveryMonth, EveryNMonths, SpecificMonths)


class YearConstraintSerializer(ConstraintSerializer):
    category = 'year'
    constraint_types = _types(EveryYear, EveryNYears, SpecificYears)


class PeriodicityConstraintsSerializer(serializers.Serializer):
    day = DayConstraintSerializer(required=False, allow_null=True)
    week = WeekConstraintSerializer(required=False, allow_null=True)
    month = MonthConstraintSerializer(required=False, allow_null=True)
    year = YearConstraintSerializer(required=False, allow_null=True)

    def validate(self, data):
        return PeriodicityConstraints(
            day=data.get('day'),
            week=data.get('week'),
            month=data.get('month'),
            year=data.get('year'),
        )


class TimeframeSerializer(serializers.Serializer):
    start = OffsetDateTimeField()
    end = OffsetDateTimeField()

    def validate(self, data):
        return (data['start'], data['end'])


class SpecialPatternSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=['unique', 'custom'])
    date = OffsetDateTimeField(required=False)
    dates = serializers.ListField(child=OffsetDateTimeField(), required=False)

    def validate(self, data):
        if data['type'] == 'unique':
            if 'date' not in data:
                raise serializers.ValidationError({'date': 'This field is required.'})
            return UniqueDate(data['date'])
        return CustomDates(tuple(sorted(set(data.get('dates', [])))))


class RepTimingSettingsSerializer(serializers.Serializer):
    rep_index = serializers.IntegerField(min_value=0)
    not_before = serializers.TimeField(required=False, allow_null=True)
    best_before = serializers.TimeField(required=False, allow_null=True)

    def validate(self, data):
        return RepTimingSettings(
            rep_index=data['rep_index'],
            not_before=data.get('not_before'),
            best_before=data.get('best_before'),
        )


class OccurrenceSettingsSerializer(serializers.Serializer):
    duration = serializers.IntegerField(required=False, allow_null=True)
    not_before = serializers.TimeField(required=False, allow_null=True)
    best_before = serializers.TimeField(required=False, allow_null=True)
    rep_timing_settings = RepTimingSettingsSerializer(many=True, required=False, allow_null=True)

    def validate(self, data):
        rep_settings = data.get('rep_timing_settings')
        return OccurrenceTimingSettings(
            duration=data.get('duration'),
            not_before=data.get('not_before'),
            best_before=data.get('best_before'),
            rep_timing_settings=tuple(rep_settings) if rep_settings is not None else None,
        )


class PeriodicitySerializer(serializers.Serializer):
    """Periodicity input; validates the assembled value like the builder does."""

    rep_unit = serializers.ChoiceField(choices=RepetitionUnit.choices, default=RepetitionUnit.NONE)
    rep_per_unit = serializers.IntegerField(required=False, allow_null=True)
    constraints = PeriodicityConstraintsSerializer(required=False)
    timeframe = TimeframeSerializer(required=False, allow_null=True)
    special_pattern = SpecialPatternSerializer(required=False, allow_null=True)
    reference_date = OffsetDateTimeField(required=False, allow_null=True)
    occurrence_settings = OccurrenceSettingsSerializer(required=False, allow_null=True)

    def validate(self, data):
        periodicity = Periodicity(
            rep_unit=RepetitionUnit(data['rep_unit']),
            rep_per_unit=data.get('rep_per_unit'),
            constraints=data.get('constraints') or PeriodicityConstraints(),
            timeframe=data.get('timeframe'),
            special_pattern=data.get('special_pattern'),
            reference_date=data.get('reference_date'),
            occurrence_settings=data.get('occurrence_settings'),
        )
        try:
            periodicity.validate()
        except PeriodicityValidationError as exc:
            raise serializers.ValidationError(
                {'non_field_errors': exc.messages, 'code': [exc.code]}
            )
        return periodicity


class PeriodicityMatchSerializer(serializers.Serializer):
    periodicity = PeriodicitySerializer()
    date = OffsetDateTimeField()
    week_start = serializers.IntegerField(min_value=0, max_value=6, default=0)


class OccurrenceQuerySerializer(serializers.Serializer):
    periodicity = PeriodicitySerializer()
    start = OffsetDateTimeField()
    end = OffsetDateTimeField()
    week_start = serializers.IntegerField(min_value=0, max_value=6, default=0)

    def validate(self, data):
        """Ensure start is before end."""
        if data['start'] >= data['end']:
            raise serializers.ValidationError(
                "Start datetime must be before end datetime."
            )
        return data


# ========================================================================
# SCHEDULE
# ========================================================================

CAPABILITY_PRESETS = {
    'free': CapabilitySet.free,
    'driving': CapabilitySet.driving,
    'in_transit': CapabilitySet.in_transit,
}


class CapabilitySetSerializer(serializers.Serializer):
    """
    Capabilities of a rule or block.

    Input may name a ``preset`` (free, driving, in_transit); explicit
    dimensions override it.
    """

    preset = serializers.ChoiceField(choices=list(CAPABILITY_PRESETS), required=False, write_only=True)
    hands = EnumNameField(AvailabilityLevel, required=False)
    eyes = EnumNameField(AvailabilityLevel, required=False)
    speech = EnumNameField(AvailabilityLevel, required=False)
    cognitive = EnumNameField(AvailabilityLevel, required=False)
    device = EnumNameField(DeviceAccess, required=False)
    mobility = serializers.ChoiceField(choices=Mobility.choices, required=False)

    def validate(self, data):
        base = CAPABILITY_PRESETS[data.pop('preset', 'free')]()
        values = {f.name: getattr(base, f.name) for f in dataclass_fields(CapabilitySet)}
        values.update(data)
        return CapabilitySet(**values)


class GeoCoordinatesSerializer(serializers.Serializer):
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()

    def validate(self, data):
        try:
            return GeoCoordinates(data['latitude'], data['longitude'])
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))


class LocationSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_null=True, trim_whitespace=False)
    city = serializers.CharField(trim_whitespace=False)
    country = serializers.CharField(trim_whitespace=False)
    geoloc = GeoCoordinatesSerializer()

    def validate(self, data):
        try:
            return Location(
                city=data['city'],
                country=data['country'],
                geoloc=data['geoloc'],
                name=data.get('name'),
            )
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))


class LocationConstraintSerializer(serializers.Serializer):
    rule = serializers.ChoiceField(choices=LocationRule.choices, default=LocationRule.ANY)
    locations = LocationSerializer(many=True, required=False)

    def validate(self, data):
        return LocationConstraint(LocationRule(data['rule']), tuple(data.get('locations', [])))


class AvailabilitySerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=AvailabilityKind.choices)
    reason = serializers.ChoiceField(choices=UnavailableReason.choices, required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, data):
        try:
            return Availability(
                kind=AvailabilityKind(data['kind']),
                reason=data.get('reason'),
                note=data.get('note', ''),
            )
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))


class RecurringRuleSerializer(serializers.Serializer):
    days = serializers.ListField(child=serializers.IntegerField(min_value=0, max_value=6))
    start = serializers.TimeField()
    end = serializers.TimeField()
    availability = AvailabilitySerializer()
    capabilities = CapabilitySetSerializer(required=False)
    location_constraint = LocationConstraintSerializer(required=False)
    label = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    priority = serializers.IntegerField(default=0)

    def validate(self, data):
        try:
            return RecurringRule(
                days=tuple(data['days']),
                start=data['start'],
                end=data['end'],
                availability=data['availability'],
                capabilities=data.get('capabilities') or CapabilitySet.free(),
                location_constraint=data.get('location_constraint') or LocationConstraint.any_location(),
                label=data.get('label') or None,
                priority=data['priority'],
            )
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))


class ScheduleTemplateSerializer(serializers.Serializer):
    name = serializers.CharField(trim_whitespace=False)
    timezone = serializers.CharField(trim_whitespace=False)
    rules = RecurringRuleSerializer(many=True)

    def validate(self, data):
        try:
            return ScheduleTemplate(data['name'], data['timezone'], tuple(data['rules']))
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))


class TaskRequirementsSerializer(serializers.Serializer):
    """
    A task's scheduling needs.

    Without ``duration_minutes`` the duration comes from the optional
    periodicity's occurrence settings, then from the configured default.
    """

    title = serializers.CharField(max_length=200)
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    periodicity = PeriodicitySerializer(required=False)
    requires_location = serializers.BooleanField(default=False)
    hands = EnumNameField(AvailabilityLevel, default=AvailabilityLevel.NONE)
    eyes = EnumNameField(AvailabilityLevel, default=AvailabilityLevel.NONE)
    speech = EnumNameField(AvailabilityLevel, default=AvailabilityLevel.NONE)
    cognitive = EnumNameField(AvailabilityLevel, default=AvailabilityLevel.NONE)
    device = EnumNameField(DeviceAccess, default=DeviceAccess.NONE)
    mobility = serializers.ListField(
        child=serializers.ChoiceField(choices=Mobility.choices), default=list
    )

    def validate(self, data):
        requirements = {
            'location_required': data['requires_location'],
            'hands': data['hands'],
            'eyes': data['eyes'],
            'speech': data['speech'],
            'cognitive': data['cognitive'],
            'device': data['device'],
            'mobility': frozenset(data['mobility']),
        }
        if 'duration_minutes' in data:
            return TaskRequirements(data['title'], data['duration_minutes'], **requirements)

        config = SchedulingConfig.from_settings()
        if 'periodicity' in data:
            return TaskRequirements.from_periodicity(
                data['title'], data['periodicity'], config, **requirements
            )
        return TaskRequirements(data['title'], config.task_default_duration_minutes, **requirements)


class ScheduleRangeSerializer(serializers.Serializer):
    template = ScheduleTemplateSerializer()
    start = OffsetDateTimeField()
    end = OffsetDateTimeField()

    def validate(self, data):
        """Ensure start is before end."""
        if data['start'] >= data['end']:
            raise serializers.ValidationError(
                "Start datetime must be before end datetime."
            )
        return data


class CandidateSlotsSerializer(ScheduleRangeSerializer):
    task = TaskRequirementsSerializer()
    current_location = LocationSerializer(required=False, allow_null=True)


class DayOverviewQuerySerializer(serializers.Serializer):
    template = ScheduleTemplateSerializer()
    date = OffsetDateTimeField()
    tasks = TaskRequirementsSerializer(many=True)
    current_location = LocationSerializer(required=False, allow_null=True)


# ========================================================================
# OUTPUT
# ========================================================================

class TimeBlockSerializer(serializers.Serializer):
    start = OffsetDateTimeField()
    end = OffsetDateTimeField()
    availability = AvailabilitySerializer()
    capabilities = CapabilitySetSerializer()
    location_constraint = LocationConstraintSerializer()
    label = serializers.CharField(allow_null=True)
    priority = serializers.IntegerField()
    duration_minutes = serializers.SerializerMethodField()

    def get_duration_minutes(self, block):
        return block.duration_minutes()


class SuggestedSlotSerializer(serializers.Serializer):
    time_block = TimeBlockSerializer()
    score = serializers.IntegerField()
    reason = serializers.CharField()


class TaskSuggestionsSerializer(serializers.Serializer):
    task_title = serializers.CharField()
    slots = SuggestedSlotSerializer(many=True)


class DayOverviewSerializer(serializers.Serializer):
    date = OffsetDateTimeField()
    time_blocks = TimeBlockSerializer(many=True)
    suggestions = TaskSuggestionsSerializer(many=True)
