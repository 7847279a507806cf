"""
Service layer for planning operations.
Services are framework-agnostic and sit between callers (views, commands)
and the periodicity and schedule engines.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from django.utils import timezone

from .capabilities import CapabilityMatcher, SchedulableTask
from .config import SchedulingConfig
from .expansion import TemplateExpansionEngine
from .matchers import PeriodicityMatcher
from .periodicity import CustomDates, Periodicity, UniqueDate
from .schedule import Location, ScheduleTemplate, TimeBlock
from .types import (
    DEFAULT_WEEK_START,
    MAX_SUGGESTION_PENALTY,
    MAX_SUGGESTION_SCORE,
    SUGGESTION_SCORE_STEP,
    DayOverview,
    SuggestedSlot,
    TaskSuggestions,
)

logger = logging.getLogger(__name__)


def should_occur_on(
    periodicity: Periodicity,
    when: datetime,
    week_start: int = DEFAULT_WEEK_START
) -> bool:
    """
    Check whether a periodicity produces an occurrence at ``when``.

    Args:
        periodicity: Validated Periodicity
        when: Instant to test
        week_start: Weekday that opens a week (0=Monday)

    Returns:
        True if ``when`` matches the constraints and lies in the timeframe
    """
    return PeriodicityMatcher(periodicity, week_start).is_active(when)


def occurrence_dates_between(
    periodicity: Periodicity,
    start: datetime,
    end: datetime,
    week_start: int = DEFAULT_WEEK_START,
    config: Optional[SchedulingConfig] = None
) -> List[datetime]:
    """
    List the instants in ``[start, end)`` on which the periodicity is active.

    Regular periodicities are probed once per day at ``start``'s time of day.
    Special patterns return their own dates that fall inside the window.

    Args:
        periodicity: Validated Periodicity
        start: Window start (inclusive)
        end: Window end (exclusive)
        week_start: Weekday that opens a week (0=Monday)
        config: SchedulingConfig snapshot (read from settings if omitted)

    Returns:
        Sorted list of active instants

    Raises:
        ValueError: If the window is empty, unbounded or too long
    """
    config = config or SchedulingConfig.from_settings()
    _validate_range(start, end, config)
    matcher = PeriodicityMatcher(periodicity, week_start)

    pattern = periodicity.special_pattern
    if isinstance(pattern, (UniqueDate, CustomDates)):
        dates = (pattern.date,) if isinstance(pattern, UniqueDate) else pattern.dates
        return [
            d for d in dates
            if start <= d < end and matcher.is_within_timeframe(d)
        ]

    occurrences = []
    current = start
    while current < end:
        if matcher.is_active(current):
            occurrences.append(current)
        current += timedelta(days=1)

    logger.debug("Found %d occurrence(s) between %s and %s", len(occurrences), start, end)
    return occurrences


def expand_schedule(
    template: ScheduleTemplate,
    start: datetime,
    end: datetime,
    config: Optional[SchedulingConfig] = None
) -> List[TimeBlock]:
    """
    Expand a schedule template over a bounded datetime range.

    Args:
        template: ScheduleTemplate to expand
        start: Range start (inclusive, timezone-aware)
        end: Range end (exclusive, timezone-aware)
        config: SchedulingConfig snapshot (read from settings if omitted)

    Returns:
        Ordered list of TimeBlock instances

    Raises:
        ValueError: If the range is empty, naive or longer than MAX_RANGE_DAYS
    """
    config = config or SchedulingConfig.from_settings()
    _validate_range(start, end, config)

    blocks = TemplateExpansionEngine(config.gap_policy).expand(template, start, end)
    logger.info(
        "Expanded schedule %r into %d block(s) (gap policy: %s)",
        template.name, len(blocks), config.gap_policy,
    )
    return blocks


def find_slots(
    template: ScheduleTemplate,
    task: SchedulableTask,
    start: datetime,
    end: datetime,
    current_location: Optional[Location] = None,
    config: Optional[SchedulingConfig] = None
) -> List[TimeBlock]:
    """
    Expand a template and keep the blocks a task could be scheduled in.

    Args:
        template: ScheduleTemplate to expand
        task: Anything implementing the SchedulableTask protocol
        start: Range start (inclusive)
        end: Range end (exclusive)
        current_location: Where the user is, None if unknown
        config: SchedulingConfig snapshot (read from settings if omitted)

    Returns:
        TimeBlock instances suitable for the task, in order
    """
    config = config or SchedulingConfig.from_settings()
    blocks = expand_schedule(template, start, end, config)
    matcher = CapabilityMatcher(config)
    return [b for b in blocks if matcher.can_schedule(task, b, current_location)]


def get_day_overview(
    template: ScheduleTemplate,
    day_start: datetime,
    tasks: Iterable[SchedulableTask],
    current_location: Optional[Location] = None,
    config: Optional[SchedulingConfig] = None
) -> DayOverview:
    """
    Build the overview of one day: its blocks and slot suggestions per task.

    Each task gets at most MAX_SUGGESTIONS_PER_TASK suggestions, scored
    100 for the earliest slot and 10 less for each later one (never below 50).
    Tasks without any suitable slot are left out.

    Args:
        template: ScheduleTemplate to expand
        day_start: Start of the day (timezone-aware)
        tasks: Tasks to suggest slots for; ``title`` is used when present
        current_location: Where the user is, None if unknown
        config: SchedulingConfig snapshot (read from settings if omitted)

    Returns:
        DayOverview instance
    """
    config = config or SchedulingConfig.from_settings()
    blocks = expand_schedule(template, day_start, day_start + timedelta(days=1), config)
    matcher = CapabilityMatcher(config)

    suggestions = []
    for task in tasks:
        slots = matcher.find_candidate_slots(task, blocks, current_location)
        slots = slots[:config.max_suggestions_per_task]
        if not slots:
            continue

        suggested = [
            SuggestedSlot(
                time_block=_block_for_slot(blocks, slot_start, slot_end),
                score=_score_for_rank(index),
                reason=f"Available slot at {slot_start:%H:%M}",
            )
            for index, (slot_start, slot_end) in enumerate(slots)
        ]
        suggestions.append(TaskSuggestions(
            task_title=getattr(task, 'title', ''),
            slots=suggested
        ))

    return DayOverview(date=day_start, time_blocks=blocks, suggestions=suggestions)


def _score_for_rank(index: int) -> int:
    """Earlier slots score higher."""
    return MAX_SUGGESTION_SCORE - min(index * SUGGESTION_SCORE_STEP, MAX_SUGGESTION_PENALTY)


def _block_for_slot(blocks: List[TimeBlock], start: datetime, end: datetime) -> TimeBlock:
    """Find the block a candidate slot was taken from."""
    return next(b for b in blocks if b.start <= start and end <= b.end)


def _validate_range(start: datetime, end: datetime, config: SchedulingConfig) -> None:
    """Validate a datetime range before handing it to an engine."""
    if timezone.is_naive(start) or timezone.is_naive(end):
        raise ValueError("Start and end datetimes must be timezone-aware")

    if start >= end:
        raise ValueError("Start datetime must be before end datetime")

    if end - start > timedelta(days=config.max_range_days):
        raise ValueError(f"Range cannot be longer than {config.max_range_days} days")
