"""
Data types and constants for the planning app.

This module contains:
- DTOs (Data Transfer Objects) returned by the service layer
- Constants used across the application
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from .constraints import Weekday
from .schedule import TimeBlock


DEFAULT_WEEK_START = Weekday.MONDAY
MAX_SUGGESTION_SCORE = 100
SUGGESTION_SCORE_STEP = 10
MAX_SUGGESTION_PENALTY = 50


@dataclass
class SuggestedSlot:
    """DTO for one slot suggested for a task."""
    time_block: TimeBlock
    score: int
    reason: str


@dataclass
class TaskSuggestions:
    """DTO grouping the suggested slots of one task."""
    task_title: str
    slots: List[SuggestedSlot] = field(default_factory=list)


@dataclass
class DayOverview:
    """DTO for a day's expanded blocks and per-task suggestions."""
    date: datetime
    time_blocks: List[TimeBlock] = field(default_factory=list)
    suggestions: List[TaskSuggestions] = field(default_factory=list)
