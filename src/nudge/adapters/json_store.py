"""JSON file task storage adapter."""

import json
import logging
from pathlib import Path

from nudge.core.tasks import TaskStore

logger = logging.getLogger(__name__)


class JsonTaskStorage:
    """
    Single-file JSON storage.

    Implements TaskStorage protocol. Writes overwrite the file in place, so a
    crash mid-write can leave it truncated; the next load then starts empty.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> TaskStore:
        """Load the store, falling back to an empty one on any problem."""
        if not self.path.exists():
            return TaskStore()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            logger.warning(f"Failed to read {self.path}: {e}")
            return TaskStore()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Discarding unparseable task file {self.path}: {e}")
            return TaskStore()

        try:
            return TaskStore.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Discarding malformed task file {self.path}: {e}")
            return TaskStore()

    def save(self, store: TaskStore) -> None:
        """Write the store as pretty-printed JSON. Errors are logged, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(store.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to save tasks to {self.path}: {e}")
