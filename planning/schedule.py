"""
Weekly availability vocabulary.

A ScheduleTemplate is a list of RecurringRules, each describing what the
user can do during a time-of-day window on some weekdays. The expansion
engine turns a template into concrete TimeBlocks for a date range.

Value objects reject invalid input with ValueError.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Iterable, Optional, Tuple

from django.db import models

PRIORITY_MIN = -32768
PRIORITY_MAX = 32767


class AvailabilityLevel(models.IntegerChoices):
    """Ordered availability of a body or mind resource."""

    NONE = 0, 'None'
    LIMITED = 1, 'Limited'
    FULL = 2, 'Full'


class DeviceAccess(models.IntegerChoices):
    """Ordered level of device access."""

    NONE = 0, 'None'
    PHONE_ONLY = 1, 'Phone only'
    COMPUTER = 2, 'Computer'


class Mobility(models.TextChoices):
    """Unordered movement state; compared by membership only."""

    STATIONARY = 'stationary', 'Stationary'
    IN_TRANSIT = 'in_transit', 'In transit'
    DRIVING = 'driving', 'Driving'


class AvailabilityKind(models.TextChoices):
    UNAVAILABLE = 'unavailable', 'Unavailable'
    BUSY_BUT_FLEXIBLE = 'busy_but_flexible', 'Busy but flexible'
    AVAILABLE = 'available', 'Available'


class UnavailableReason(models.TextChoices):
    SLEEP = 'sleep', 'Sleep'
    WORK = 'work', 'Work'
    APPOINTMENT = 'appointment', 'Appointment'
    FOCUS = 'focus', 'Focus'
    OTHER = 'other', 'Other'


# Used to break ties between rules of equal priority.
RESTRICTIVENESS = {
    AvailabilityKind.AVAILABLE: 0,
    AvailabilityKind.BUSY_BUT_FLEXIBLE: 1,
    AvailabilityKind.UNAVAILABLE: 2,
}


@dataclass(frozen=True)
class Availability:
    """
    Availability of a rule or block.

    ``reason`` is only meaningful for Unavailable; ``note`` carries free text
    for the Other reason.
    """

    kind: str
    reason: Optional[str] = None
    note: str = ''

    def __post_init__(self):
        if self.kind not in AvailabilityKind.values:
            raise ValueError(f"Unknown availability kind: {self.kind}")
        if self.kind == AvailabilityKind.UNAVAILABLE:
            if self.reason is None:
                object.__setattr__(self, 'reason', UnavailableReason.OTHER)
            elif self.reason not in UnavailableReason.values:
                raise ValueError(f"Unknown unavailable reason: {self.reason}")
        elif self.reason is not None:
            raise ValueError("Only Unavailable carries a reason")

    @classmethod
    def unavailable(cls, reason: str = UnavailableReason.OTHER, note: str = '') -> 'Availability':
        return cls(AvailabilityKind.UNAVAILABLE, reason, note)

    @classmethod
    def busy_but_flexible(cls) -> 'Availability':
        return cls(AvailabilityKind.BUSY_BUT_FLEXIBLE)

    @classmethod
    def available(cls) -> 'Availability':
        return cls(AvailabilityKind.AVAILABLE)

    @property
    def restrictiveness(self) -> int:
        return RESTRICTIVENESS[self.kind]

    def __str__(self):
        if self.kind == AvailabilityKind.UNAVAILABLE:
            detail = self.note or UnavailableReason(self.reason).label
            return f"Unavailable ({detail})"
        return AvailabilityKind(self.kind).label


@dataclass(frozen=True)
class CapabilitySet:
    hands: int = AvailabilityLevel.FULL
    eyes: int = AvailabilityLevel.FULL
    speech: int = AvailabilityLevel.FULL
    cognitive: int = AvailabilityLevel.FULL
    device: int = DeviceAccess.COMPUTER
    mobility: str = Mobility.STATIONARY

    @classmethod
    def free(cls) -> 'CapabilitySet':
        """Everything available, at a computer, not moving."""
        return cls()

    @classmethod
    def driving(cls) -> 'CapabilitySet':
        """Hands and eyes taken; only talking and light thinking."""
        return cls(
            hands=AvailabilityLevel.NONE,
            eyes=AvailabilityLevel.NONE,
            speech=AvailabilityLevel.FULL,
            cognitive=AvailabilityLevel.LIMITED,
            device=DeviceAccess.NONE,
            mobility=Mobility.DRIVING,
        )

    @classmethod
    def in_transit(cls) -> 'CapabilitySet':
        """Passenger on public transport with a phone."""
        return cls(
            hands=AvailabilityLevel.LIMITED,
            eyes=AvailabilityLevel.LIMITED,
            speech=AvailabilityLevel.FULL,
            cognitive=AvailabilityLevel.FULL,
            device=DeviceAccess.PHONE_ONLY,
            mobility=Mobility.IN_TRANSIT,
        )


# ========================================================================
# LOCATION
# ========================================================================

@dataclass(frozen=True)
class GeoCoordinates:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError("Coordinates must be finite numbers")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude must be between -180 and 180, got {self.longitude}")


@dataclass(frozen=True)
class Location:
    """A named place. Equality compares every field."""

    city: str
    country: str
    geoloc: GeoCoordinates
    name: Optional[str] = None

    def __post_init__(self):
        city = (self.city or '').strip()
        country = (self.country or '').strip()
        if not city:
            raise ValueError("City cannot be empty")
        if not country:
            raise ValueError("Country cannot be empty")
        object.__setattr__(self, 'city', city)
        object.__setattr__(self, 'country', country)

        if self.name is not None:
            name = self.name.strip()
            if not name:
                raise ValueError("Location name cannot be empty")
            object.__setattr__(self, 'name', name)

    def __str__(self):
        if self.name:
            return f"{self.name} ({self.city}, {self.country})"
        return f"{self.city}, {self.country}"


class LocationRule(models.TextChoices):
    ANY = 'any', 'Any'
    MUST_BE_KNOWN = 'must_be_known', 'Must be known'
    MUST_BE_UNKNOWN = 'must_be_unknown', 'Must be unknown'
    MUST_BE_ONE_OF = 'must_be_one_of', 'Must be one of'


@dataclass(frozen=True)
class LocationConstraint:
    rule: str = LocationRule.ANY
    locations: Tuple[Location, ...] = ()

    @classmethod
    def any_location(cls) -> 'LocationConstraint':
        return cls(LocationRule.ANY)

    @classmethod
    def must_be_known(cls) -> 'LocationConstraint':
        return cls(LocationRule.MUST_BE_KNOWN)

    @classmethod
    def must_be_unknown(cls) -> 'LocationConstraint':
        return cls(LocationRule.MUST_BE_UNKNOWN)

    @classmethod
    def must_be_one_of(cls, locations: Iterable[Location]) -> 'LocationConstraint':
        return cls(LocationRule.MUST_BE_ONE_OF, tuple(locations))

    def matches(self, current_location: Optional[Location]) -> bool:
        """Whether the user's current location (None if unknown) satisfies the rule."""
        if self.rule == LocationRule.ANY:
            return True
        if self.rule == LocationRule.MUST_BE_KNOWN:
            return current_location is not None
        if self.rule == LocationRule.MUST_BE_UNKNOWN:
            return current_location is None
        return current_location is not None and current_location in self.locations


# ========================================================================
# RULES AND TEMPLATES
# ========================================================================

@dataclass(frozen=True)
class RecurringRule:
    """
    One weekly availability rule.

    When ``end`` <= ``start`` the rule is overnight and runs into the next
    day; ``start == end`` therefore covers a full 24 hours. On overlap the
    higher ``priority`` wins.
    """

    days: Tuple[int, ...]
    start: time
    end: time
    availability: Availability = field(default_factory=Availability.available)
    capabilities: CapabilitySet = field(default_factory=CapabilitySet.free)
    location_constraint: LocationConstraint = field(default_factory=LocationConstraint.any_location)
    label: Optional[str] = None
    priority: int = 0

    def __post_init__(self):
        days = tuple(int(day) for day in self.days)
        if not days:
            raise ValueError("RecurringRule must have at least one day")
        for day in days:
            if not 0 <= day <= 6:
                raise ValueError(f"Weekday must be between 0 (Monday) and 6 (Sunday), got {day}")
        if not PRIORITY_MIN <= self.priority <= PRIORITY_MAX:
            raise ValueError(
                f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}, got {self.priority}"
            )
        object.__setattr__(self, 'days', days)

    def is_overnight(self) -> bool:
        return self.end <= self.start

    def applies_on(self, weekday: int) -> bool:
        return weekday in self.days


@dataclass(frozen=True)
class ScheduleTemplate:
    name: str
    timezone: str
    rules: Tuple[RecurringRule, ...] = ()

    def __post_init__(self):
        name = (self.name or '').strip()
        if not name:
            raise ValueError("Schedule template name cannot be empty")
        if not (self.timezone or '').strip():
            raise ValueError("Timezone cannot be empty")
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'rules', tuple(self.rules))


@dataclass(frozen=True)
class TimeBlock:
    """A concrete, conflict-resolved interval produced by expansion."""

    start: datetime
    end: datetime
    availability: Availability
    capabilities: CapabilitySet
    location_constraint: LocationConstraint
    label: Optional[str]
    priority: int

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)
