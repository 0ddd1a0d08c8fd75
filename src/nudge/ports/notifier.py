"""Completion notifier interface."""

from typing import Protocol


class CompletionNotifier(Protocol):
    """Interface for announcing that a task was completed."""

    def notify_complete(self) -> None:
        """Fire and forget. Must return immediately."""
        ...
