"""Board frame layout and drawing.

Pure: a snapshot and a terminal size go in, styled text lines and the
column rectangles come out. The rectangles are handed back to the
controller so the next pointer event is resolved against what was drawn.

Styles are prompt_toolkit style strings.
"""

import textwrap
from dataclasses import dataclass
from datetime import datetime

from .controller import (
    FIELD_DESCRIPTION,
    FIELD_STEP,
    FIELD_SUBMIT,
    BoardSnapshot,
    Mode,
)
from .core.calendar import format_countdown
from .core.spatial import Rect, card_height, split_columns, visible_card_count
from .core.tasks import COLUMN_STATUSES, Task, TaskStatus

Fragment = tuple[str, str]
Line = list[Fragment]

DIM = "fg:ansibrightblack"
CURSOR = "█"

COLUMN_TITLES = {
    TaskStatus.NOT_STARTED: "Not Started (n)",
    TaskStatus.IN_PROGRESS: "In Progress (i)",
    TaskStatus.BLOCKED: "Blocked (b)",
    TaskStatus.COMPLETE: "Complete",
}

COLUMN_COLORS = {
    TaskStatus.NOT_STARTED: "ansigray",
    TaskStatus.IN_PROGRESS: "ansicyan",
    TaskStatus.BLOCKED: "ansiyellow",
    TaskStatus.COMPLETE: "ansigreen",
}

HELP_TEXT = {
    Mode.NAVIGATE: (
        "a: Add | SPACE/d: Done | u: Undo | e: Edit Step | E: Edit Name | "
        "←/→: Columns | ↑/↓: Tasks | r: Remove | Drag & Drop: Move Cards | q: Quit"
    ),
    Mode.ADD_TASK: "Tab: Next Field | Enter: Add Step/Submit | ESC: Cancel",
    Mode.EDIT_STEP: "Type to edit step | Enter: Save | ESC: Cancel",
    Mode.EDIT_TASK_NAME: "Type to edit task name | Enter: Save | ESC: Cancel",
    Mode.CONFIRM_DELETE: "y: Yes, delete | n: No, cancel | ESC: Cancel",
}

MESSAGES = (
    "You've got this!",
    "One small step at a time",
    "Progress over perfection",
    "Your brain is doing its best",
    "Take it easy on yourself",
    "Small wins count too",
    "You're showing up - that matters",
    "Breaking tasks down is smart",
    "It's okay to go slow",
    "Every step forward counts",
)
MESSAGE_ROTATION_SECONDS = 300

DIGITS = {
    "0": ("╔═══╗", "║   ║", "║   ║", "║   ║", "╚═══╝"),
    "1": ("  ╔═╗", "  ║ ║", "  ║ ║", "  ║ ║", "  ╚═╝"),
    "2": ("╔═══╗", "    ║", "╔═══╝", "║    ", "╚═══╗"),
    "3": ("╔═══╗", "    ║", " ═══╣", "    ║", "╚═══╝"),
    "4": ("╔   ║", "║   ║", "╚═══╣", "    ║", "    ╚"),
    "5": ("╔═══╗", "║    ", "╚═══╗", "    ║", "╚═══╝"),
    "6": ("╔═══╗", "║    ", "╠═══╗", "║   ║", "╚═══╝"),
    "7": ("╔═══╗", "    ║", "    ║", "    ║", "    ╚"),
    "8": ("╔═══╗", "║   ║", "╠═══╣", "║   ║", "╚═══╝"),
    "9": ("╔═══╗", "║   ║", "╚═══╣", "    ║", "╚═══╝"),
    ":": ("     ", "  ●  ", "     ", "  ●  ", "     "),
}


@dataclass
class Frame:
    lines: list[Line]
    column_rects: list[Rect]


def truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def line_length(line: Line) -> int:
    return sum(len(text) for _, text in line)


class Canvas:
    """A fixed-size grid of styled cells."""

    def __init__(self, width: int, height: int):
        self.width = max(width, 0)
        self.height = max(height, 0)
        self.cells: list[list[Fragment]] = [[("", " ")] * self.width for _ in range(self.height)]

    def put(self, x: int, y: int, text: str, style: str = "", limit: int | None = None) -> None:
        """Write text at (x, y), clipped to the canvas and to column `limit`."""
        if not 0 <= y < self.height:
            return
        right = self.width if limit is None else min(limit, self.width)
        for i, ch in enumerate(text):
            cx = x + i
            if cx >= right:
                break
            if cx >= 0:
                self.cells[y][cx] = (style, ch)

    def put_line(self, x: int, y: int, line: Line, limit: int) -> None:
        for style, text in line:
            self.put(x, y, text, style, limit)
            x += len(text)

    def box(self, rect: Rect, style: str = "", title: str = "") -> None:
        """Draw a single-line border around `rect`, with an optional title."""
        if rect.width < 2 or rect.height < 2:
            return
        horizontal = "─" * (rect.width - 2)
        self.put(rect.x, rect.y, f"┌{horizontal}┐", style)
        self.put(rect.x, rect.bottom - 1, f"└{horizontal}┘", style)
        for y in range(rect.y + 1, rect.bottom - 1):
            self.put(rect.x, y, "│", style)
            self.put(rect.right - 1, y, "│", style)
        if title:
            self.put(rect.x + 1, rect.y, truncate(title, rect.width - 2), style)

    def write_lines(self, area: Rect, lines: list[Line], center: bool = False) -> None:
        """Write lines top-down inside `area`, one per row, clipped at the edges."""
        for row, line in enumerate(lines[: area.height]):
            x = area.x
            if center:
                x += max((area.width - line_length(line)) // 2, 0)
            self.put_line(x, area.y + row, line, area.right)

    def to_lines(self) -> list[Line]:
        """Collapse each row into runs of equally styled text."""
        result = []
        for row in self.cells:
            line: Line = []
            for style, ch in row:
                if line and line[-1][0] == style:
                    line[-1] = (style, line[-1][1] + ch)
                else:
                    line.append((style, ch))
            result.append(line)
        return result


def layout(width: int, height: int) -> dict[str, Rect]:
    """
    Split the screen: left third for clock, meeting and details; right two
    thirds for the board above a three-line help bar.
    """
    left_width = width * 33 // 100
    left = Rect(0, 0, left_width, height)
    right = Rect(left_width, 0, width - left_width, height)

    clock_height = height * 30 // 100
    meeting_height = min(4, max(height - clock_height, 0))
    help_height = min(3, height)

    return {
        "clock": Rect(left.x, 0, left.width, clock_height),
        "meeting": Rect(left.x, clock_height, left.width, meeting_height),
        "details": Rect(left.x, clock_height + meeting_height, left.width,
                        max(height - clock_height - meeting_height, 0)),
        "board": Rect(right.x, 0, right.width, height - help_height),
        "help": Rect(right.x, height - help_height, right.width, help_height),
    }


def render_frame(snapshot: BoardSnapshot, width: int, height: int, now: datetime | None = None) -> Frame:
    """Draw one full frame and report where the four columns landed."""
    now = now or datetime.now().astimezone()
    canvas = Canvas(width, height)
    areas = layout(canvas.width, canvas.height)

    _draw_clock(canvas, areas["clock"], now)
    _draw_meeting(canvas, areas["meeting"], snapshot, now)

    match snapshot.mode:
        case Mode.NAVIGATE:
            _draw_details(canvas, areas["details"], snapshot)
        case Mode.ADD_TASK:
            _draw_form(canvas, areas["details"], snapshot)
        case Mode.EDIT_STEP:
            _draw_edit_step(canvas, areas["details"], snapshot)
        case Mode.EDIT_TASK_NAME:
            _draw_edit_task_name(canvas, areas["details"], snapshot)
        case Mode.CONFIRM_DELETE:
            _draw_confirm_delete(canvas, areas["details"], snapshot)

    column_rects = split_columns(areas["board"], len(COLUMN_STATUSES))
    for index, rect in enumerate(column_rects):
        _draw_column(canvas, rect, index, snapshot)

    canvas.box(areas["help"], DIM)
    canvas.write_lines(areas["help"].inner(), [[(DIM, HELP_TEXT[snapshot.mode])]], center=True)

    return Frame(lines=canvas.to_lines(), column_rects=column_rects)


# -------------------- left panel --------------------
def big_clock_lines(time_str: str) -> list[str]:
    """Five rows of box-drawing digits for an 'HH:MM' string."""
    rows = [""] * 5
    for ch in time_str:
        glyph = DIGITS.get(ch, ("     ",) * 5)
        for i in range(5):
            rows[i] += glyph[i] + " "
    return rows


def message_for(now: datetime) -> str:
    return MESSAGES[int(now.timestamp()) // MESSAGE_ROTATION_SECONDS % len(MESSAGES)]


def _draw_clock(canvas: Canvas, area: Rect, now: datetime) -> None:
    accent = "fg:ansicyan bold"
    canvas.box(area, accent)
    lines: list[Line] = [[]]
    lines += [[(accent, row)] for row in big_clock_lines(now.strftime("%I:%M"))]
    lines.append([(accent, now.strftime("%p"))])
    lines.append([])
    lines.append([("fg:ansiyellow bold italic", message_for(now))])
    canvas.write_lines(area.inner(), lines, center=True)


def _draw_meeting(canvas: Canvas, area: Rect, snapshot: BoardSnapshot, now: datetime) -> None:
    canvas.box(area, "fg:ansiyellow")
    meeting = snapshot.meeting
    if meeting:
        lines: list[Line] = [
            [("fg:ansiyellow", "Next: "), ("fg:ansiwhite bold", meeting.summary)],
            [
                ("fg:ansicyan", f"{meeting.format_time()} "),
                (DIM, f"({format_countdown(meeting.start, now)})"),
            ],
        ]
    else:
        lines = [[(f"{DIM} italic", "No upcoming meetings")]]
    canvas.write_lines(area.inner(), lines, center=True)


def _wrap(text: str, style: str, width: int, indent: str = "") -> list[Line]:
    width = max(width - len(indent), 1)
    return [[("", indent), (style, chunk)] for chunk in textwrap.wrap(text, width) or [""]]


def task_detail_lines(task: Task, width: int) -> list[Line]:
    """Body of the details panel for a selected task."""
    lines: list[Line] = [
        [
            (DIM, "Task #"),
            ("fg:ansiwhite bold", str(task.id)),
            ("", ": "),
            ("fg:ansicyan bold", task.description),
        ],
        [],
    ]

    if not task.steps:
        lines += _wrap(f"No steps defined. Use 'nudge break {task.id}' to break this down.",
                       f"{DIM} italic", width)
        return lines

    lines.append([("fg:ansicyan", f"Progress: {task.current_step}/{len(task.steps)} steps complete")])
    lines.append([])

    if task.current_step > 0:
        lines.append([("fg:ansigreen bold", "✓ Completed:")])
        for step in task.steps[: task.current_step]:
            lines.append([("", "  "), ("fg:ansigreen", "✓ "), (DIM, step)])
        lines.append([])

    current = task.current_step_text
    if current is not None:
        box_width = 26
        lines.append([("fg:ansiyellow bold", "▶ DO THIS NOW:")])
        lines.append([])
        lines.append([("fg:ansiyellow", "┌" + "─" * (box_width + 2) + "┐")])
        lines.append([
            ("fg:ansiyellow", "│ "),
            ("fg:ansiyellow bold", truncate(current, box_width).ljust(box_width)),
            ("fg:ansiyellow", " │"),
        ])
        lines.append([("fg:ansiyellow", "└" + "─" * (box_width + 2) + "┘")])
        lines.append([])
        lines.append([
            ("fg:ansiyellow bold", "SPACE"), (DIM, "/"), ("fg:ansiyellow bold", "d"),
            (DIM, ": Complete | "), ("fg:ansicyan bold", "u"), (DIM, ": Undo | "),
            ("fg:ansicyan bold", "e"), (DIM, ": Edit"),
        ])
        lines.append([])

    upcoming = task.steps[task.current_step + 1 :]
    if upcoming:
        lines.append([(DIM, "Next steps:")])
        for step in upcoming:
            lines.append([("", "  "), (DIM, "· " + step)])
    return lines


def _draw_details(canvas: Canvas, area: Rect, snapshot: BoardSnapshot) -> None:
    task = snapshot.selected_task
    inner = area.inner()
    if task:
        canvas.box(area, "fg:ansiyellow", " Task Details ")
        canvas.write_lines(inner, task_detail_lines(task, inner.width))
    else:
        canvas.box(area, DIM, " Task Details ")
        canvas.write_lines(inner, [
            [],
            [(f"{DIM} italic", "No task selected")],
            [],
            [(DIM, "Use ↑/↓ to select a task")],
            [(DIM, "Use ←/→ to switch columns")],
        ])


def form_lines(snapshot: BoardSnapshot) -> list[Line]:
    form = snapshot.form
    focus = "fg:ansiyellow bold"
    lines: list[Line] = [[("fg:ansicyan bold", "Add New Task")], [], [(DIM, "Task Description:")]]

    on_description = form.active_field == FIELD_DESCRIPTION
    lines.append([(focus if on_description else "fg:ansiwhite",
                   f"> {form.description}{CURSOR if on_description else ''}")])
    lines.append([])
    lines.append([(f"{DIM} italic", "Break it down into smaller steps:")])
    lines.append([(DIM, "(helps with executive dysfunction!)")])
    lines.append([])

    for number, step in enumerate(form.steps, start=1):
        lines.append([("fg:ansigreen", f"{number}. "), ("fg:ansiwhite", step)])

    on_step = form.active_field == FIELD_STEP
    lines.append([(focus if on_step else DIM, f"> {form.step_input}{CURSOR if on_step else ''}")])
    lines.append([(DIM, "(Press Enter to add step, Tab to submit)")])
    lines.append([])

    on_submit = form.active_field == FIELD_SUBMIT
    lines.append([("fg:ansiblack bg:ansigreen bold" if on_submit else "fg:ansigreen", "[ Create Task ]")])
    return lines


def _draw_form(canvas: Canvas, area: Rect, snapshot: BoardSnapshot) -> None:
    canvas.box(area, "fg:ansigreen", " New Task Form ")
    canvas.write_lines(area.inner(), form_lines(snapshot))


def _draw_edit_step(canvas: Canvas, area: Rect, snapshot: BoardSnapshot) -> None:
    accent = "fg:ansiyellow bold"
    canvas.box(area, accent, " Edit Step ")
    lines: list[Line] = [[(accent, "Edit Step")], []]
    task = snapshot.editing_task
    if task:
        lines.append([(DIM, "Task: "), ("fg:ansicyan", task.description)])
        lines.append([(DIM, f"Step {task.current_step + 1}/{len(task.steps)}")])
        lines += [[], []]
    lines += [
        [(DIM, "Edit step description:")],
        [],
        [(accent, f"> {snapshot.edit_buffer}{CURSOR}")],
        [],
        [],
        [("fg:ansigreen", "Press Enter to save")],
        [(DIM, "Press ESC to cancel")],
    ]
    canvas.write_lines(area.inner(), lines)


def _draw_edit_task_name(canvas: Canvas, area: Rect, snapshot: BoardSnapshot) -> None:
    accent = "fg:ansicyan bold"
    canvas.box(area, accent, " Edit Task Name ")
    canvas.write_lines(area.inner(), [
        [(accent, "Edit Task Name")],
        [],
        [],
        [(DIM, "Edit task description:")],
        [],
        [(accent, f"> {snapshot.edit_buffer}{CURSOR}")],
        [],
        [],
        [],
        [("fg:ansigreen", "Press Enter to save")],
        [(DIM, "Press ESC to cancel")],
    ])


def _draw_confirm_delete(canvas: Canvas, area: Rect, snapshot: BoardSnapshot) -> None:
    danger = "fg:ansired bold"
    canvas.box(area, danger, " ⚠ CONFIRM DELETE ")
    lines: list[Line] = [[], [], [(danger, "⚠ DELETE TASK?")], [], []]
    task = snapshot.deleting_task
    if task:
        lines += [
            [(DIM, "Are you sure you want to delete:")],
            [],
            [("fg:ansiwhite bold", f'"{task.description}"')],
            [],
            [],
        ]
    lines += [
        [("fg:ansired italic", "This cannot be undone!")],
        [],
        [],
        [],
        [
            (DIM, "["), (danger, " Y "), (DIM, "] Yes, delete    ["),
            ("fg:ansigreen bold", " N "), (DIM, "] No, keep it"),
        ],
    ]
    canvas.write_lines(area.inner(), lines, center=True)


# -------------------- board --------------------
def _draw_column(canvas: Canvas, rect: Rect, index: int, snapshot: BoardSnapshot) -> None:
    status = COLUMN_STATUSES[index]
    color = COLUMN_COLORS[status]
    tasks = snapshot.store.by_status(status)
    is_selected_column = snapshot.selected_column == index
    drag = snapshot.drag

    if drag is not None and drag.target_column == index:
        border = "fg:ansimagenta bold"
    elif is_selected_column:
        border = f"fg:{color} bold"
    else:
        border = DIM
    canvas.box(rect, border, f" {COLUMN_TITLES[status]} ({len(tasks)}) ")

    inner = rect.inner()
    shown = visible_card_count([card_height(t) for t in tasks], inner.height)
    y = inner.y
    for position, task in enumerate(tasks[:shown]):
        selected = is_selected_column and snapshot.selected_index == position
        dragged = drag is not None and drag.task_id == task.id
        card = Rect(inner.x, y, inner.width, card_height(task))
        _draw_card(canvas, card, task, "ansimagenta" if dragged else color, selected)
        y += card.height


def card_lines(task: Task, width: int, border_color: str, selected: bool) -> list[Line]:
    """A rounded card with a folded corner: 3 rows, or 4 when the task has steps."""
    border = f"fg:{border_color}"
    background = "bg:ansibrightblack" if selected else ""
    body = max(width - 2, 0)

    lines: list[Line] = [[(border, "╭" + "─" * body + "╮")]]
    title = truncate(f"#{task.id} {task.description}", body).ljust(body)
    lines.append([(border, "│"), (f"fg:ansiwhite {background}".strip(), title), (border, "│")])
    if task.steps:
        progress = truncate(f"  {task.progress_label()}", body).ljust(body)
        lines.append([(border, "│"), (f"{DIM} {background}".strip(), progress), (border, "│")])
    lines.append([(border, "╰" + "─" * max(width - 2, 0) + "◣")])
    return lines


def _draw_card(canvas: Canvas, rect: Rect, task: Task, border_color: str, selected: bool) -> None:
    if rect.width < 2:
        return
    canvas.write_lines(rect, card_lines(task, rect.width, border_color, selected))
