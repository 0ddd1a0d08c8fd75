"""Tests for board frame rendering."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from nudge.controller import InteractionController, PointerEvent, PointerKind
from nudge.core import lifecycle
from nudge.core.calendar import Meeting
from nudge.core.spatial import Rect
from nudge.core.tasks import TaskStore
from nudge.render import (
    Canvas,
    big_clock_lines,
    card_lines,
    layout,
    message_for,
    render_frame,
    truncate,
)

WIDTH, HEIGHT = 200, 40
NOW = datetime(2025, 1, 15, 14, 30, tzinfo=timezone.utc)


def text_of(line) -> str:
    return "".join(text for _, text in line)


def screen(frame) -> str:
    return "\n".join(text_of(line) for line in frame.lines)


@pytest.fixture
def controller():
    store = TaskStore()
    lifecycle.add(store, "Write report")
    lifecycle.add(store, "Ship feature", ["draft", "review", "send"])
    lifecycle.add(store, "Call plumber")
    lifecycle.block(store, 3)
    return InteractionController(store, MagicMock(), MagicMock())


def render(controller, width=WIDTH, height=HEIGHT):
    frame = render_frame(controller.snapshot(), width, height, now=NOW)
    controller.set_column_rects(frame.column_rects)
    return frame


class TestCanvas:
    def test_put_clips(self):
        canvas = Canvas(5, 1)
        canvas.put(3, 0, "abcdef")
        canvas.put(0, 4, "off screen")
        assert text_of(canvas.to_lines()[0]) == "   ab"

    def test_to_lines_merges_runs(self):
        canvas = Canvas(6, 1)
        canvas.put(0, 0, "abc", "bold")
        assert canvas.to_lines()[0] == [("bold", "abc"), ("", "   ")]

    def test_truncate(self):
        assert truncate("hello world", 6) == "hello…"
        assert truncate("hi", 6) == "hi"
        assert truncate("hi", 0) == ""


class TestLayout:
    """Tests for screen partitioning."""

    def test_frame_fills_screen(self, controller):
        frame = render(controller)
        assert len(frame.lines) == HEIGHT
        assert all(len(text_of(line)) == WIDTH for line in frame.lines)

    def test_board_takes_right_two_thirds(self):
        areas = layout(WIDTH, HEIGHT)
        assert areas["clock"].width == 66
        assert areas["board"] == Rect(66, 0, 134, 37)
        assert areas["help"] == Rect(66, 37, 134, 3)
        assert areas["meeting"].height == 4

    def test_column_rects_cover_board(self, controller):
        rects = render(controller).column_rects
        assert len(rects) == 4
        assert rects[0].x == 66
        assert rects[-1].right == WIDTH
        for left, right in zip(rects, rects[1:]):
            assert left.right == right.x

    @pytest.mark.parametrize("size", [(0, 0), (10, 5), (30, 8)])
    def test_tiny_terminals(self, controller, size):
        frame = render(controller, *size)
        assert len(frame.lines) == size[1]


class TestBoard:
    """Tests for columns and cards."""

    def test_column_titles_with_counts(self, controller):
        text = screen(render(controller))
        assert "Not Started (n) (2)" in text
        assert "In Progress (i) (0)" in text
        assert "Blocked (b) (1)" in text
        assert "Complete (0)" in text

    def test_cards_drawn(self, controller):
        text = screen(render(controller))
        assert "#1 Write report" in text
        assert "#2 Ship feature" in text
        assert "step 1/3" in text
        assert "#3 Call plumber" in text

    def test_card_heights(self, controller):
        store = controller.store
        assert len(card_lines(store.get(1), 20, "ansigray", False)) == 3
        assert len(card_lines(store.get(2), 20, "ansigray", False)) == 4

    def test_selected_card_is_highlighted(self, controller):
        controller.handle_key("down")
        lines = card_lines(controller.selected_task(), 20, "ansigray", True)
        assert "bg:ansibrightblack" in lines[1][1][0]

    def test_drawn_cards_match_hit_testing(self, controller):
        frame = render(controller)
        column = frame.column_rects[0]
        # Second card's title row sits one row below the first card's three rows
        title_row = frame.lines[column.y + 1 + 3 + 1]
        assert "#2 Ship feature" in text_of(title_row)
        controller.handle_pointer(PointerEvent(PointerKind.DOWN, column.x + 3, column.y + 1 + 3 + 1))
        assert controller.selected_task().id == 2

    def test_drag_target_column_is_highlighted(self, controller):
        frame = render(controller)
        first, third = frame.column_rects[0], frame.column_rects[2]
        controller.handle_pointer(PointerEvent(PointerKind.DOWN, first.x + 3, first.y + 2))
        controller.handle_pointer(PointerEvent(PointerKind.MOVE, third.x + 3, first.y + 2))
        frame = render(controller)
        top_row = frame.lines[third.y]
        styles = {style for style, text in top_row if "Blocked" in text}
        assert any("ansimagenta" in style for style in styles)


class TestLeftPanel:
    """Tests for clock, meeting and details panels."""

    def test_big_clock(self):
        rows = big_clock_lines("12:34")
        assert len(rows) == 5
        assert len({len(r) for r in rows}) == 1

    def test_message_rotates_every_five_minutes(self):
        assert message_for(NOW) == message_for(NOW + timedelta(seconds=1))
        assert message_for(NOW) != message_for(NOW + timedelta(minutes=5))

    def test_no_meeting(self, controller):
        assert "No upcoming meetings" in screen(render(controller))

    def test_meeting_countdown(self, controller):
        controller.meeting = Meeting(summary="Sync", start=NOW + timedelta(minutes=20))
        text = screen(render(controller))
        assert "Next: Sync" in text
        assert "(in 20 min)" in text

    def test_no_selection_hint(self, controller):
        assert "No task selected" in screen(render(controller))

    def test_selected_task_details(self, controller):
        controller.handle_key("down")
        controller.handle_key("down")
        text = screen(render(controller))
        assert "Task #2: Ship feature" in text
        assert "Progress: 0/3 steps complete" in text
        assert "DO THIS NOW" in text
        assert "draft" in text

    def test_add_form(self, controller):
        for key in ["a", "T", "a", "x"]:
            controller.handle_key(key)
        text = screen(render(controller))
        assert "Add New Task" in text
        assert "> Tax█" in text
        assert "Tab: Next Field" in text

    def test_edit_step(self, controller):
        for key in ["down", "down", "e"]:
            controller.handle_key(key)
        text = screen(render(controller))
        assert "Edit Step" in text
        assert "> draft█" in text

    def test_confirm_delete(self, controller):
        for key in ["down", "r"]:
            controller.handle_key(key)
        text = screen(render(controller))
        assert "DELETE TASK?" in text
        assert '"Write report"' in text
