"""Ports - interfaces/protocols for external dependencies."""

from .task_storage import TaskStorage
from .notifier import CompletionNotifier
from .meeting_feed import MeetingFeed

__all__ = [
    "TaskStorage",
    "CompletionNotifier",
    "MeetingFeed",
]
