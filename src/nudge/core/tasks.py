"""Pure task domain model - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class TaskStatus(Enum):
    """Lifecycle status. Values are the persisted names."""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    BLOCKED = "Blocked"
    COMPLETE = "Complete"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


# Board column order; index <-> status is fixed.
COLUMN_STATUSES: tuple[TaskStatus, ...] = (
    TaskStatus.NOT_STARTED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.BLOCKED,
    TaskStatus.COMPLETE,
)

STATUS_LABELS = {
    TaskStatus.NOT_STARTED: "Not Started",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.BLOCKED: "Blocked",
    TaskStatus.COMPLETE: "Complete",
}


def status_for_column(column: int) -> TaskStatus:
    """Map a board column index to its status. Out-of-range clamps to the last lane."""
    if 0 <= column < len(COLUMN_STATUSES):
        return COLUMN_STATUSES[column]
    return COLUMN_STATUSES[-1]


def column_for_status(status: TaskStatus) -> int:
    return COLUMN_STATUSES.index(status)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Task:
    """A task broken down into tiny steps."""

    id: int
    description: str
    steps: list[str] = field(default_factory=list)
    current_step: int = 0
    status: TaskStatus = TaskStatus.NOT_STARTED
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def has_steps(self) -> bool:
        return bool(self.steps)

    @property
    def current_step_text(self) -> str | None:
        """Text of the step the user should do now, if any."""
        if 0 <= self.current_step < len(self.steps):
            return self.steps[self.current_step]
        return None

    def progress_label(self) -> str:
        """Human-readable step position, e.g. 'step 2/3'."""
        if not self.steps:
            return "not broken down"
        return f"step {self.current_step + 1}/{len(self.steps)}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "steps": list(self.steps),
            "current_step": self.current_step,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create a Task from its persisted form.

        Records written before statuses existed carry a boolean ``completed``
        flag instead; it is migrated here (true -> Complete, false -> NotStarted).
        Raises KeyError/TypeError/ValueError on structurally bad records.
        """
        if "completed" in data and data["completed"] is not None:
            status = TaskStatus.COMPLETE if data["completed"] else TaskStatus.NOT_STARTED
        else:
            status = TaskStatus(data.get("status", TaskStatus.NOT_STARTED.value))

        steps = data.get("steps") or []
        if not isinstance(steps, list):
            raise TypeError(f"steps must be a list, got {type(steps).__name__}")
        steps = [str(s) for s in steps]

        created_raw = data.get("created_at")
        created_at = datetime.fromisoformat(created_raw) if created_raw else _utcnow()
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return cls(
            id=int(data["id"]),
            description=str(data["description"]),
            steps=steps,
            current_step=clamp_step(int(data.get("current_step", 0)), steps),
            status=status,
            created_at=created_at,
        )


def clamp_step(current_step: int, steps: list[str]) -> int:
    """Force 0 <= current_step <= len(steps)."""
    return max(0, min(current_step, len(steps)))


@dataclass
class TaskStore:
    """Ordered task collection plus the id counter.

    Insertion order is significant: it breaks ties for next-action selection
    and decides display order within a column.
    """

    tasks: list[Task] = field(default_factory=list)
    next_id: int = 1

    def get(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def by_status(self, status: TaskStatus) -> list[Task]:
        return [t for t in self.tasks if t.status == status]

    def allocate_id(self) -> int:
        task_id = self.next_id
        self.next_id += 1
        return task_id

    def __len__(self) -> int:
        return len(self.tasks)

    def to_dict(self) -> dict:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "next_id": self.next_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskStore":
        """Rebuild a store from its persisted form.

        Raises on malformed documents; callers decide how to recover.
        """
        raw_tasks = data["tasks"]
        if not isinstance(raw_tasks, list):
            raise TypeError("tasks must be a list")
        tasks = [Task.from_dict(item) for item in raw_tasks]
        next_id = int(data.get("next_id", 1))
        # ids are never reused, even if the counter on disk fell behind
        if tasks:
            next_id = max(next_id, max(t.id for t in tasks) + 1)
        return cls(tasks=tasks, next_id=max(next_id, 1))
