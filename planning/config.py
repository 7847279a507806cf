"""
Scheduling configuration.

Values come from the ``SCHEDULING`` dict in Django settings. Callers take a
snapshot once with ``SchedulingConfig.from_settings()`` and pass it into the
matcher, expansion and services so a single pass never sees a mix of values.
"""

from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .expansion import GapPolicy
from .schedule import AvailabilityLevel, DeviceAccess

DEFAULTS = {
    'BUSY_FLEX_MAX_MINUTES': 15,
    'BUSY_FLEX_MAX_HANDS_LEVEL': 1,
    'BUSY_FLEX_MAX_EYES_LEVEL': 1,
    'BUSY_FLEX_MAX_DEVICE_LEVEL': 1,
    'TASK_DEFAULT_DURATION_MINUTES': 30,
    'MAX_SUGGESTIONS_PER_TASK': 5,
    'GAP_POLICY': GapPolicy.OMIT,
    'MAX_RANGE_DAYS': 366,
}


def _availability_level(value: int) -> AvailabilityLevel:
    """0 -> None, 1 -> Limited, anything else -> Full."""
    if value <= 0:
        return AvailabilityLevel.NONE
    if value == 1:
        return AvailabilityLevel.LIMITED
    return AvailabilityLevel.FULL


def _device_level(value: int) -> DeviceAccess:
    """0 -> None, 1 -> PhoneOnly, anything else -> Computer."""
    if value <= 0:
        return DeviceAccess.NONE
    if value == 1:
        return DeviceAccess.PHONE_ONLY
    return DeviceAccess.COMPUTER


@dataclass(frozen=True)
class SchedulingConfig:
    busy_flex_max_minutes: int = 15
    busy_flex_max_hands: int = AvailabilityLevel.LIMITED
    busy_flex_max_eyes: int = AvailabilityLevel.LIMITED
    busy_flex_max_device: int = DeviceAccess.PHONE_ONLY
    task_default_duration_minutes: int = 30
    max_suggestions_per_task: int = 5
    gap_policy: str = GapPolicy.OMIT
    max_range_days: int = 366

    @classmethod
    def from_settings(cls) -> 'SchedulingConfig':
        """
        Snapshot the current Django settings.

        Raises:
            ImproperlyConfigured: If a value cannot be used
        """
        values = {**DEFAULTS, **getattr(settings, 'SCHEDULING', {})}

        try:
            gap_policy = GapPolicy(values['GAP_POLICY'])
        except ValueError:
            raise ImproperlyConfigured(
                f"SCHEDULING['GAP_POLICY'] must be one of {GapPolicy.values}, "
                f"got {values['GAP_POLICY']!r}"
            )

        try:
            numbers = {
                key: int(values[key])
                for key in DEFAULTS
                if key != 'GAP_POLICY'
            }
        except (TypeError, ValueError) as exc:
            raise ImproperlyConfigured(f"SCHEDULING values must be integers: {exc}")

        for key in ('BUSY_FLEX_MAX_MINUTES', 'TASK_DEFAULT_DURATION_MINUTES',
                    'MAX_SUGGESTIONS_PER_TASK', 'MAX_RANGE_DAYS'):
            if numbers[key] < 1:
                raise ImproperlyConfigured(f"SCHEDULING['{key}'] must be at least 1")

        return cls(
            busy_flex_max_minutes=numbers['BUSY_FLEX_MAX_MINUTES'],
            busy_flex_max_hands=_availability_level(numbers['BUSY_FLEX_MAX_HANDS_LEVEL']),
            busy_flex_max_eyes=_availability_level(numbers['BUSY_FLEX_MAX_EYES_LEVEL']),
            busy_flex_max_device=_device_level(numbers['BUSY_FLEX_MAX_DEVICE_LEVEL']),
            task_default_duration_minutes=numbers['TASK_DEFAULT_DURATION_MINUTES'],
            max_suggestions_per_task=numbers['MAX_SUGGESTIONS_PER_TASK'],
            gap_policy=gap_policy,
            max_range_days=numbers['MAX_RANGE_DAYS'],
        )
