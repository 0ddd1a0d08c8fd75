"""Functional core - pure business logic with no I/O."""

from .tasks import Task, TaskStatus, TaskStore, COLUMN_STATUSES, status_for_column
from .lifecycle import AdvanceResult, Outcome, next_action
from .spatial import Rect, SpatialIndex, card_height, hit_card, split_columns
from .calendar import Meeting, find_next_meeting, format_countdown

__all__ = [
    # Tasks
    "Task",
    "TaskStatus",
    "TaskStore",
    "COLUMN_STATUSES",
    "status_for_column",
    # Lifecycle
    "AdvanceResult",
    "Outcome",
    "next_action",
    # Geometry
    "Rect",
    "SpatialIndex",
    "card_height",
    "hit_card",
    "split_columns",
    # Calendar
    "Meeting",
    "find_next_meeting",
    "format_countdown",
]
