"""Board interaction controller.

A mode state machine that turns key presses and pointer events into task
lifecycle operations. It owns the transient UI state (selection, drag
session, form and edit buffers) and knows nothing about the terminal: the
TUI feeds it normalized events and the column rectangles of the last frame.

Key names are "left", "right", "up", "down", "enter", "esc", "tab",
"backspace", or a single printable character (space included).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .core import lifecycle
from .core.calendar import Meeting
from .core.lifecycle import AdvanceResult
from .core.spatial import Rect, SpatialIndex
from .core.tasks import COLUMN_STATUSES, Task, TaskStatus, TaskStore, status_for_column
from .ports import CompletionNotifier, TaskStorage

logger = logging.getLogger(__name__)


class Mode(Enum):
    NAVIGATE = "navigate"
    ADD_TASK = "add_task"
    EDIT_STEP = "edit_step"
    EDIT_TASK_NAME = "edit_task_name"
    CONFIRM_DELETE = "confirm_delete"


class PointerKind(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class PointerEvent:
    kind: PointerKind
    x: int
    y: int
    primary: bool = True  # only the primary button takes part in drag-and-drop


# Add-task form fields, cycled with tab
FIELD_DESCRIPTION = 0
FIELD_STEP = 1
FIELD_SUBMIT = 2
FIELD_COUNT = 3


@dataclass
class TaskForm:
    """Buffers of the add-task form. Discarded whole on cancel."""

    description: str = ""
    steps: list[str] = field(default_factory=list)
    step_input: str = ""
    active_field: int = FIELD_DESCRIPTION


@dataclass
class Selection:
    """Active column plus the selected task, tracked by id."""

    column: int = 0
    task_id: int | None = None


@dataclass
class DragState:
    task_id: int
    origin_column: int
    target_column: int | None


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only view of everything the renderer needs for one frame."""

    mode: Mode
    store: TaskStore
    selected_column: int
    selected_index: int | None
    selected_task: Task | None
    drag: DragState | None
    form: TaskForm
    edit_buffer: str
    editing_task: Task | None
    deleting_task: Task | None
    meeting: Meeting | None


def is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class InteractionController:
    """Dispatches board input to the lifecycle engine and spatial index."""

    def __init__(
        self,
        store: TaskStore,
        storage: TaskStorage,
        notifier: CompletionNotifier,
        meeting: Meeting | None = None,
    ):
        self.store = store
        self.storage = storage
        self.notifier = notifier
        self.meeting = meeting

        self.mode = Mode.NAVIGATE
        self.selection = Selection()
        self.drag: DragState | None = None
        self.form = TaskForm()
        self.edit_buffer = ""
        self.editing_task_id: int | None = None
        self.deleting_task_id: int | None = None
        self.spatial = SpatialIndex()
        self.should_quit = False

        self._navigate_keys = {
            "q": self.quit,
            "a": self.open_form,
            "left": self.select_previous_column,
            "right": self.select_next_column,
            "up": self.select_previous_task,
            "down": self.select_next_task,
            "n": self.move_to_not_started,
            "i": self.move_to_in_progress,
            "b": self.move_to_blocked,
            "d": self.complete_selected,
            " ": self.complete_selected,
            "u": self.undo_step,
            "e": self.start_edit_step,
            "E": self.start_edit_task_name,
            "r": self.start_delete,
        }

    # -------------------- queries --------------------
    def column_tasks(self, column: int | None = None) -> list[Task]:
        """Tasks shown in a column, in display (insertion) order."""
        if column is None:
            column = self.selection.column
        return self.store.by_status(status_for_column(column))

    @property
    def selected_index(self) -> int | None:
        """Position of the selected task in the active column's live list."""
        if self.selection.task_id is None:
            return None
        for index, task in enumerate(self.column_tasks()):
            if task.id == self.selection.task_id:
                return index
        return None

    def selected_task(self) -> Task | None:
        index = self.selected_index
        if index is None:
            return None
        return self.column_tasks()[index]

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            mode=self.mode,
            store=self.store,
            selected_column=self.selection.column,
            selected_index=self.selected_index,
            selected_task=self.selected_task(),
            drag=self.drag,
            form=self.form,
            edit_buffer=self.edit_buffer,
            editing_task=self._task(self.editing_task_id),
            deleting_task=self._task(self.deleting_task_id),
            meeting=self.meeting,
        )

    def set_column_rects(self, rects: Sequence[Rect]) -> None:
        """Record where the last frame drew the columns, for the next pointer event."""
        self.spatial.update(rects)

    def _task(self, task_id: int | None) -> Task | None:
        return self.store.get(task_id) if task_id is not None else None

    def _persist(self) -> None:
        self.storage.save(self.store)

    def _clear_task_selection(self) -> None:
        self.selection.task_id = None

    # -------------------- dispatch --------------------
    def handle_key(self, key: str) -> None:
        if self.mode != Mode.NAVIGATE and key == "esc":
            self.cancel()
            return

        match self.mode:
            case Mode.NAVIGATE:
                action = self._navigate_keys.get(key)
                if action:
                    action()
            case Mode.ADD_TASK:
                self._handle_form_key(key)
            case Mode.EDIT_STEP | Mode.EDIT_TASK_NAME:
                self._handle_edit_key(key)
            case Mode.CONFIRM_DELETE:
                self._handle_confirm_key(key)

        # A drag never survives into an input mode
        if self.mode != Mode.NAVIGATE:
            self.drag = None

    def handle_pointer(self, event: PointerEvent) -> None:
        if not event.primary:
            return
        if self.mode != Mode.NAVIGATE:
            if event.kind == PointerKind.UP:
                self.drag = None
            return

        match event.kind:
            case PointerKind.DOWN:
                self._pointer_down(event.x, event.y)
            case PointerKind.MOVE:
                self._pointer_move(event.x)
            case PointerKind.UP:
                self._pointer_up()

    def cancel(self) -> None:
        """Leave any input mode, dropping its buffers without applying them."""
        self.mode = Mode.NAVIGATE
        self.form = TaskForm()
        self.edit_buffer = ""
        self.editing_task_id = None
        self.deleting_task_id = None

    def quit(self) -> None:
        self.should_quit = True

    # -------------------- navigate mode --------------------
    def select_previous_column(self) -> None:
        if self.selection.column > 0:
            self.selection = Selection(column=self.selection.column - 1)

    def select_next_column(self) -> None:
        if self.selection.column < len(COLUMN_STATUSES) - 1:
            self.selection = Selection(column=self.selection.column + 1)

    def select_next_task(self) -> None:
        tasks = self.column_tasks()
        if not tasks:
            return
        index = self.selected_index
        index = 0 if index is None else min(index + 1, len(tasks) - 1)
        self.selection.task_id = tasks[index].id

    def select_previous_task(self) -> None:
        tasks = self.column_tasks()
        if not tasks:
            return
        index = self.selected_index
        index = 0 if index is None else max(index - 1, 0)
        self.selection.task_id = tasks[index].id

    def move_to_not_started(self) -> None:
        task = self.selected_task()
        if task is None:
            return
        lifecycle.reset(self.store, task.id)
        self._persist()
        self._clear_task_selection()

    def move_to_in_progress(self) -> None:
        task = self.selected_task()
        if task is None:
            return
        lifecycle.force_status(self.store, task.id, TaskStatus.IN_PROGRESS)
        self._persist()
        self._clear_task_selection()

    def move_to_blocked(self) -> None:
        task = self.selected_task()
        if task is None:
            return
        lifecycle.block(self.store, task.id)
        self._persist()
        self._clear_task_selection()

    def complete_selected(self) -> None:
        """Finish the current step; the task stays selected until it completes."""
        task = self.selected_task()
        if task is None:
            return
        result = lifecycle.advance(self.store, task.id)
        self._persist()
        if result == AdvanceResult.TASK_COMPLETED:
            self._clear_task_selection()
            self.notifier.notify_complete()

    def undo_step(self) -> None:
        task = self.selected_task()
        if task is not None and lifecycle.undo_step(self.store, task.id):
            self._persist()

    def open_form(self) -> None:
        self.form = TaskForm()
        self.mode = Mode.ADD_TASK

    def start_edit_step(self) -> None:
        task = self.selected_task()
        if task is None or task.current_step_text is None:
            return
        self.edit_buffer = task.current_step_text
        self.editing_task_id = task.id
        self.mode = Mode.EDIT_STEP

    def start_edit_task_name(self) -> None:
        task = self.selected_task()
        if task is None:
            return
        self.edit_buffer = task.description
        self.editing_task_id = task.id
        self.mode = Mode.EDIT_TASK_NAME

    def start_delete(self) -> None:
        task = self.selected_task()
        if task is None:
            return
        self.deleting_task_id = task.id
        self.mode = Mode.CONFIRM_DELETE

    # -------------------- add-task form --------------------
    def _handle_form_key(self, key: str) -> None:
        form = self.form
        if key == "tab":
            form.active_field = (form.active_field + 1) % FIELD_COUNT
        elif key == "enter":
            if form.active_field == FIELD_DESCRIPTION:
                form.active_field = FIELD_STEP
            elif form.active_field == FIELD_STEP:
                # Stay on the step field so steps can be entered one after another
                if form.step_input:
                    form.steps.append(form.step_input)
                    form.step_input = ""
            else:
                self.submit_form()
        elif key == "backspace":
            if form.active_field == FIELD_DESCRIPTION:
                form.description = form.description[:-1]
            elif form.active_field == FIELD_STEP:
                form.step_input = form.step_input[:-1]
        elif is_text_key(key):
            if form.active_field == FIELD_DESCRIPTION:
                form.description += key
            elif form.active_field == FIELD_STEP:
                form.step_input += key

    def submit_form(self) -> None:
        """Create the task from the form. An empty description keeps the form open."""
        if not self.form.description:
            return
        task_id = lifecycle.add(self.store, self.form.description, self.form.steps)
        logger.debug(f"Added task #{task_id} with {len(self.form.steps)} steps")
        self._persist()
        self.mode = Mode.NAVIGATE
        self.form = TaskForm()

    # -------------------- edit modes --------------------
    def _handle_edit_key(self, key: str) -> None:
        if key == "enter":
            self.commit_edit()
        elif key == "backspace":
            self.edit_buffer = self.edit_buffer[:-1]
        elif is_text_key(key):
            self.edit_buffer += key

    def commit_edit(self) -> None:
        """Write the buffer back to the edited field, unless it is empty."""
        if self.editing_task_id is not None:
            if self.mode == Mode.EDIT_STEP:
                changed = lifecycle.edit_current_step(self.store, self.editing_task_id, self.edit_buffer)
            else:
                changed = lifecycle.rename(self.store, self.editing_task_id, self.edit_buffer)
            if changed:
                self._persist()
        self.cancel()

    # -------------------- delete confirmation --------------------
    def _handle_confirm_key(self, key: str) -> None:
        if key in ("y", "Y"):
            if self.deleting_task_id is not None:
                lifecycle.remove(self.store, self.deleting_task_id)
                self._persist()
                self._clear_task_selection()
            self.cancel()
        elif key in ("n", "N"):
            self.cancel()

    # -------------------- pointer / drag-and-drop --------------------
    def _pointer_down(self, x: int, y: int) -> None:
        column = self.spatial.column_at(x, y)
        if column is None:
            return
        if column != self.selection.column:
            self.selection = Selection(column=column)

        tasks = self.column_tasks(column)
        index = self.spatial.card_at(column, y, tasks)
        if index is None:
            return

        task = tasks[index]
        self.selection.task_id = task.id
        self.drag = DragState(task_id=task.id, origin_column=column, target_column=column)

    def _pointer_move(self, x: int) -> None:
        if self.drag is None:
            return
        # Outside every column the last highlighted target is kept
        column = self.spatial.column_at_x(x)
        if column is not None:
            self.drag.target_column = column

    def _pointer_up(self) -> None:
        drag, self.drag = self.drag, None
        if drag is None or drag.target_column is None:
            return
        if drag.target_column == drag.origin_column:
            return

        # No transition checks: a drop may skip states, e.g. NotStarted -> Complete
        new_status = status_for_column(drag.target_column)
        if lifecycle.force_status(self.store, drag.task_id, new_status):
            self._persist()
            if new_status == TaskStatus.COMPLETE:
                self.notifier.notify_complete()
        self.selection = Selection(column=drag.target_column)
