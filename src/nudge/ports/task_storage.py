"""Task storage interface."""

from typing import Protocol

from nudge.core.tasks import TaskStore


class TaskStorage(Protocol):
    """Interface for loading and saving the task list."""

    def load(self) -> TaskStore:
        """Load the store. Never raises; bad or missing data yields an empty store."""
        ...

    def save(self, store: TaskStore) -> None:
        """Persist the store. Best effort; I/O errors are not raised."""
        ...
