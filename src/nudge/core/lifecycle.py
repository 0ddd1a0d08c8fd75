"""Task lifecycle transitions and next-action selection.

Pure functions over a TaskStore - no I/O. Persisting and notifying are the
caller's job. A missing task id is reported through the return value, never
raised.
"""

from enum import Enum

from .tasks import Task, TaskStatus, TaskStore

ACTIVE_STATUSES = (TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS)


class Outcome(Enum):
    """Result of a validated status transition."""

    OK = "ok"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"


class AdvanceResult(Enum):
    """Result of completing the current step."""

    STEP_ADVANCED = "step_advanced"
    TASK_COMPLETED = "task_completed"  # Only this one triggers the completion chime
    NOT_FOUND = "not_found"


def add(store: TaskStore, description: str, steps: list[str] | None = None) -> int:
    """Append a new NotStarted task and return its id."""
    task = Task(
        id=store.allocate_id(),
        description=description,
        steps=list(steps or []),
        current_step=0,
        status=TaskStatus.NOT_STARTED,
    )
    store.tasks.append(task)
    return task.id


def next_action(store: TaskStore) -> Task | None:
    """
    Pick the single task the user should work on now.

    Priority, first match wins:
      1. earliest active task that still has an unfinished step
      2. earliest active task that has not been broken down yet

    The chosen task is promoted from NotStarted to InProgress.
    """
    active = [t for t in store.tasks if t.status in ACTIVE_STATUSES]
    chosen = next(
        (t for t in active if t.steps and t.current_step < len(t.steps)),
        None,
    )
    if chosen is None:
        chosen = next((t for t in active if not t.steps), None)
    if chosen is None:
        return None

    if chosen.status == TaskStatus.NOT_STARTED:
        chosen.status = TaskStatus.IN_PROGRESS
    return chosen


def advance(store: TaskStore, task_id: int) -> AdvanceResult:
    """Mark the current step done, completing the task after its last step."""
    task = store.get(task_id)
    if task is None:
        return AdvanceResult.NOT_FOUND

    if task.steps and task.current_step < len(task.steps) - 1:
        task.current_step += 1
        return AdvanceResult.STEP_ADVANCED

    task.status = TaskStatus.COMPLETE
    return AdvanceResult.TASK_COMPLETED


def block(store: TaskStore, task_id: int) -> Outcome:
    task = store.get(task_id)
    if task is None:
        return Outcome.NOT_FOUND
    if task.status == TaskStatus.COMPLETE:
        return Outcome.REJECTED
    task.status = TaskStatus.BLOCKED
    return Outcome.OK


def unblock(store: TaskStore, task_id: int) -> Outcome:
    """Lift a block. Tasks with steps (or progress) resume as InProgress."""
    task = store.get(task_id)
    if task is None:
        return Outcome.NOT_FOUND
    if task.status != TaskStatus.BLOCKED:
        return Outcome.REJECTED
    if task.current_step > 0 or task.steps:
        task.status = TaskStatus.IN_PROGRESS
    else:
        task.status = TaskStatus.NOT_STARTED
    return Outcome.OK


def reset(store: TaskStore, task_id: int) -> Outcome:
    """Send a task back to NotStarted. Step progress is kept as-is."""
    task = store.get(task_id)
    if task is None:
        return Outcome.NOT_FOUND
    if task.status == TaskStatus.COMPLETE:
        return Outcome.REJECTED
    task.status = TaskStatus.NOT_STARTED
    return Outcome.OK


def remove(store: TaskStore, task_id: int) -> bool:
    before = len(store.tasks)
    store.tasks[:] = [t for t in store.tasks if t.id != task_id]
    return len(store.tasks) < before


def set_steps(store: TaskStore, task_id: int, steps: list[str]) -> bool:
    """Replace a task's breakdown and restart it at the first step."""
    task = store.get(task_id)
    if task is None:
        return False
    task.steps = list(steps)
    task.current_step = 0
    return True


def undo_step(store: TaskStore, task_id: int) -> bool:
    """Step back once. Returns True only if progress actually moved."""
    task = store.get(task_id)
    if task is None or task.current_step <= 0:
        return False
    task.current_step -= 1
    return True


def force_status(store: TaskStore, task_id: int, status: TaskStatus) -> bool:
    """Overwrite status without transition checks (drag-and-drop path)."""
    task = store.get(task_id)
    if task is None:
        return False
    task.status = status
    return True


def edit_current_step(store: TaskStore, task_id: int, text: str) -> bool:
    task = store.get(task_id)
    if task is None or not text or task.current_step_text is None:
        return False
    task.steps[task.current_step] = text
    return True


def rename(store: TaskStore, task_id: int, text: str) -> bool:
    task = store.get(task_id)
    if task is None or not text:
        return False
    task.description = text
    return True
