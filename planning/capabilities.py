"""
Matching tasks against time blocks.

The matcher only depends on the SchedulableTask protocol, so any task-like
object exposing those accessors can be scheduled.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Iterable, List, Optional, Protocol, Tuple

from .config import SchedulingConfig
from .schedule import (
    AvailabilityKind,
    AvailabilityLevel,
    DeviceAccess,
    Location,
    LocationRule,
    TimeBlock,
)


class SchedulableTask(Protocol):
    def estimated_duration_minutes(self) -> int: ...

    def requires_location(self) -> bool: ...

    def min_hands(self) -> int: ...

    def min_eyes(self) -> int: ...

    def min_speech(self) -> int: ...

    def min_cognitive(self) -> int: ...

    def min_device(self) -> int: ...

    def allowed_mobility(self) -> FrozenSet[str]: ...


@dataclass(frozen=True)
class TaskRequirements:
    """Plain SchedulableTask implementation used by services and the API."""

    title: str
    duration_minutes: int
    location_required: bool = False
    hands: int = AvailabilityLevel.NONE
    eyes: int = AvailabilityLevel.NONE
    speech: int = AvailabilityLevel.NONE
    cognitive: int = AvailabilityLevel.NONE
    device: int = DeviceAccess.NONE
    mobility: FrozenSet[str] = frozenset()

    @classmethod
    def from_periodicity(
        cls,
        title: str,
        periodicity,
        config: Optional[SchedulingConfig] = None,
        **requirements,
    ) -> 'TaskRequirements':
        """
        Build requirements whose duration comes from the periodicity.

        The occurrence settings' duration is used when present, otherwise
        the configured default task duration.
        """
        config = config or SchedulingConfig.from_settings()
        settings = periodicity.occurrence_settings
        if settings is not None and settings.duration is not None:
            duration = settings.duration
        else:
            duration = config.task_default_duration_minutes
        return cls(title=title, duration_minutes=duration, **requirements)

    def estimated_duration_minutes(self) -> int:
        return self.duration_minutes

    def requires_location(self) -> bool:
        return self.location_required

    def min_hands(self) -> int:
        return self.hands

    def min_eyes(self) -> int:
        return self.eyes

    def min_speech(self) -> int:
        return self.speech

    def min_cognitive(self) -> int:
        return self.cognitive

    def min_device(self) -> int:
        return self.device

    def allowed_mobility(self) -> FrozenSet[str]:
        return frozenset(self.mobility)


class CapabilityMatcher:
    """
    Decides whether a task fits a time block.

    Four gates run in order (availability, location, capabilities, duration)
    and the first failure rejects the block.

    Args:
        config: SchedulingConfig snapshot with the busy-but-flexible limits
    """

    def __init__(self, config: Optional[SchedulingConfig] = None):
        self.config = config or SchedulingConfig.from_settings()

    def can_schedule(
        self,
        task: SchedulableTask,
        block: TimeBlock,
        current_location: Optional[Location] = None,
    ) -> bool:
        return (
            self._passes_availability(task, block, current_location)
            and self._passes_location(task, block, current_location)
            and self._passes_capabilities(task, block)
            and self._passes_duration(task, block)
        )

    def find_candidate_slots(
        self,
        task: SchedulableTask,
        blocks: Iterable[TimeBlock],
        current_location: Optional[Location] = None,
    ) -> List[Tuple[datetime, datetime]]:
        """Start and end of every block the task fits, in block order."""
        return [
            (block.start, block.end)
            for block in blocks
            if self.can_schedule(task, block, current_location)
        ]

    def is_micro_task(self, task: SchedulableTask) -> bool:
        """Short enough and location-free: allowed in busy-but-flexible blocks."""
        return (
            task.estimated_duration_minutes() <= self.config.busy_flex_max_minutes
            and not task.requires_location()
        )

    def _passes_availability(self, task, block, current_location) -> bool:
        kind = block.availability.kind
        if kind == AvailabilityKind.UNAVAILABLE:
            return False
        if kind == AvailabilityKind.BUSY_BUT_FLEXIBLE:
            return self.is_micro_task(task) and self._passes_busy_flex(task, block, current_location)
        return True

    def _passes_busy_flex(self, task, block, current_location) -> bool:
        rule = block.location_constraint.rule
        location_ok = rule == LocationRule.ANY or (
            rule == LocationRule.MUST_BE_UNKNOWN and current_location is None
        )
        if not location_ok:
            return False

        device = task.min_device()
        if device == DeviceAccess.COMPUTER or device > self.config.busy_flex_max_device:
            return False
        return (
            task.min_hands() <= self.config.busy_flex_max_hands
            and task.min_eyes() <= self.config.busy_flex_max_eyes
        )

    def _passes_location(self, task, block, current_location) -> bool:
        if not block.location_constraint.matches(current_location):
            return False
        return not task.requires_location() or current_location is not None

    def _passes_capabilities(self, task, block) -> bool:
        capabilities = block.capabilities
        if capabilities.hands < task.min_hands():
            return False
        if capabilities.eyes < task.min_eyes():
            return False
        if capabilities.speech < task.min_speech():
            return False
        if capabilities.cognitive < task.min_cognitive():
            return False
        if capabilities.device < task.min_device():
            return False

        allowed = task.allowed_mobility()
        return not allowed or capabilities.mobility in allowed

    def _passes_duration(self, task, block) -> bool:
        return block.duration_minutes() >= task.estimated_duration_minutes()


def can_schedule_task_in_block(
    task: SchedulableTask,
    block: TimeBlock,
    current_location: Optional[Location] = None,
    config: Optional[SchedulingConfig] = None,
) -> bool:
    """Whether ``task`` can be scheduled in ``block``."""
    return CapabilityMatcher(config).can_schedule(task, block, current_location)


def find_candidate_slots(
    task: SchedulableTask,
    blocks: Iterable[TimeBlock],
    current_location: Optional[Location] = None,
    config: Optional[SchedulingConfig] = None,
) -> List[Tuple[datetime, datetime]]:
    """(start, end) of every block in ``blocks`` that ``task`` fits."""
    return CapabilityMatcher(config).find_candidate_slots(task, blocks, current_location)
