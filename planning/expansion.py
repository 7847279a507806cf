"""
Expansion of weekly schedule templates into concrete time blocks.

Every rule is materialized for each day touching the requested range
(including the day before, so overnight rules that started yesterday are
seen). Overlaps are resolved per elementary sub-interval: the highest
priority wins, equal priorities go to the more restrictive availability
(Unavailable > BusyButFlexible > Available), and remaining ties go to the
rule listed first in the template.
"""

import heapq
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List

from django.db import models

from .schedule import (
    PRIORITY_MIN,
    Availability,
    CapabilitySet,
    LocationConstraint,
    RecurringRule,
    ScheduleTemplate,
    TimeBlock,
)

logger = logging.getLogger(__name__)


class GapPolicy(models.TextChoices):
    """What to emit for time no rule covers."""

    OMIT = 'omit', 'Omit'
    AVAILABLE = 'available', 'Available'
    UNAVAILABLE = 'unavailable', 'Unavailable'


@dataclass(frozen=True)
class _Candidate:
    start: datetime
    end: datetime
    index: int
    rule: RecurringRule

    @property
    def heap_key(self):
        """Smallest for the strongest rule: priority, restrictiveness, then listing order."""
        return (-self.rule.priority, -self.rule.availability.restrictiveness, self.index)


class TemplateExpansionEngine:
    """
    Turns a ScheduleTemplate into an ordered list of non-overlapping blocks.

    Args:
        gap_policy: GapPolicy value deciding how uncovered time is reported
    """

    def __init__(self, gap_policy: str = GapPolicy.OMIT):
        self.gap_policy = GapPolicy(gap_policy)

    def expand(
        self,
        template: ScheduleTemplate,
        range_start: datetime,
        range_end: datetime,
    ) -> List[TimeBlock]:
        """
        Expand ``template`` over ``[range_start, range_end)``.

        Args:
            template: ScheduleTemplate to expand
            range_start: Inclusive, offset-aware range start
            range_end: Exclusive, offset-aware range end

        Returns:
            TimeBlocks ordered by start; they never overlap and never leave
            the requested range
        """
        if range_start >= range_end:
            return []

        candidates = self._collect_candidates(template, range_start, range_end)
        segments = self._resolve(candidates)
        blocks = self._merge(segments)
        if self.gap_policy != GapPolicy.OMIT:
            blocks = self._fill_gaps(blocks, range_start, range_end)

        logger.debug(
            "Expanded template %r over %s - %s: %d candidates, %d blocks",
            template.name, range_start, range_end, len(candidates), len(blocks),
        )
        return blocks

    def _collect_candidates(self, template, range_start, range_end) -> List[_Candidate]:
        """Materialize every rule on every relevant day, clipped to the range."""
        tz = range_start.tzinfo
        first_day = range_start.date() - timedelta(days=1)
        last_day = range_end.astimezone(tz).date() if tz else range_end.date()

        candidates = []
        day = first_day
        while day <= last_day:
            for index, rule in enumerate(template.rules):
                if not rule.applies_on(day.weekday()):
                    continue
                end_day = day + timedelta(days=1) if rule.is_overnight() else day
                start = max(datetime.combine(day, rule.start, tzinfo=tz), range_start)
                end = min(datetime.combine(end_day, rule.end, tzinfo=tz), range_end)
                if start < end:
                    candidates.append(_Candidate(start, end, index, rule))
            day += timedelta(days=1)
        return candidates

    def _resolve(self, candidates: List[_Candidate]) -> List[_Candidate]:
        """
        Pick a winner for every elementary interval between boundaries.

        Candidates are swept in start order; the ones already started sit in
        a heap ordered by rank, and finished ones are dropped lazily when
        they reach the top.
        """
        boundaries = sorted({c.start for c in candidates} | {c.end for c in candidates})
        pending = sorted(candidates, key=lambda c: c.start)
        active = []
        position = 0

        segments = []
        for seg_start, seg_end in zip(boundaries, boundaries[1:]):
            while position < len(pending) and pending[position].start <= seg_start:
                candidate = pending[position]
                heapq.heappush(active, (candidate.heap_key, position, candidate))
                position += 1
            while active and active[0][2].end <= seg_start:
                heapq.heappop(active)
            if not active:
                continue
            winner = active[0][2]
            segments.append(_Candidate(seg_start, seg_end, winner.index, winner.rule))
        return segments

    def _merge(self, segments: List[_Candidate]) -> List[TimeBlock]:
        """Join touching segments won by the same rule."""
        merged: List[_Candidate] = []
        for segment in segments:
            previous = merged[-1] if merged else None
            if previous and previous.end == segment.start and previous.index == segment.index:
                merged[-1] = _Candidate(previous.start, segment.end, previous.index, previous.rule)
            else:
                merged.append(segment)
        return [self._block_from_rule(s.start, s.end, s.rule) for s in merged]

    def _fill_gaps(self, blocks, range_start, range_end) -> List[TimeBlock]:
        filled = []
        cursor = range_start
        for block in blocks:
            if cursor < block.start:
                filled.append(self._gap_block(cursor, block.start))
            filled.append(block)
            cursor = block.end
        if cursor < range_end:
            filled.append(self._gap_block(cursor, range_end))
        return filled

    def _gap_block(self, start, end) -> TimeBlock:
        if self.gap_policy == GapPolicy.AVAILABLE:
            availability = Availability.available()
        else:
            availability = Availability.unavailable()
        return TimeBlock(
            start=start,
            end=end,
            availability=availability,
            capabilities=CapabilitySet.free(),
            location_constraint=LocationConstraint.any_location(),
            label=None,
            priority=PRIORITY_MIN,
        )

    @staticmethod
    def _block_from_rule(start, end, rule: RecurringRule) -> TimeBlock:
        return TimeBlock(
            start=start,
            end=end,
            availability=rule.availability,
            capabilities=rule.capabilities,
            location_constraint=rule.location_constraint,
            label=rule.label,
            priority=rule.priority,
        )


def expand_template(
    template: ScheduleTemplate,
    range_start: datetime,
    range_end: datetime,
    gap_policy: str = GapPolicy.OMIT,
) -> List[TimeBlock]:
    """Expand ``template`` over ``[range_start, range_end)``."""
    return TemplateExpansionEngine(gap_policy).expand(template, range_start, range_end)
