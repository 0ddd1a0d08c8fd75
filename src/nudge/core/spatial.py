"""Board geometry and pointer hit-testing - no I/O dependencies.

Rectangles come from the last rendered frame. Nothing identifies a card
across frames, so a hit is re-derived from the live task list and the card
heights every time.
"""

from dataclasses import dataclass
from typing import Sequence

from .tasks import Task

CARD_HEIGHT = 3  # top border, description, bottom border
CARD_HEIGHT_WITH_STEPS = 4  # plus the "step i/n" line


@dataclass(frozen=True)
class Rect:
    """A screen region in terminal cells."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def contains_x(self, x: int) -> bool:
        return self.x <= x < self.right

    def inner(self) -> "Rect":
        """Area inside a one-cell border."""
        return Rect(
            x=self.x + 1,
            y=self.y + 1,
            width=max(self.width - 2, 0),
            height=max(self.height - 2, 0),
        )


def split_columns(area: Rect, count: int = 4) -> list[Rect]:
    """
    Split an area into contiguous, non-overlapping columns of equal width.

    Cells that don't divide evenly go to the last column.
    """
    base = area.width // count
    rects = []
    x = area.x
    for i in range(count):
        width = base if i < count - 1 else area.right - x
        rects.append(Rect(x=x, y=area.y, width=width, height=area.height))
        x += width
    return rects


def card_height(task: Task) -> int:
    return CARD_HEIGHT_WITH_STEPS if task.steps else CARD_HEIGHT


def visible_card_count(heights: Sequence[int], limit: int) -> int:
    """How many cards, stacked from the top, fit completely within `limit` lines."""
    used = 0
    for count, height in enumerate(heights):
        if used + height > limit:
            return count
        used += height
    return len(heights)


def hit_card(heights: Sequence[int], offset: int, limit: int | None = None) -> int | None:
    """
    Find which stacked card covers a vertical offset.

    Walks the cards in display order accumulating heights, so heights
    [3, 4, 3] cover offsets 0-2, 3-6 and 7-9. Offsets before the first card
    or past the last one hit nothing. With `limit`, cards that don't fully
    fit (and therefore are not drawn) can't be hit either.
    """
    if offset < 0:
        return None
    hittable = len(heights) if limit is None else visible_card_count(heights, limit)
    top = 0
    for index, height in enumerate(heights[:hittable]):
        if top <= offset < top + height:
            return index
        top += height
    return None


class SpatialIndex:
    """Maps pointer coordinates to board columns and cards."""

    def __init__(self, column_rects: Sequence[Rect] = ()):
        self.column_rects: list[Rect] = list(column_rects)

    def update(self, column_rects: Sequence[Rect]) -> None:
        """Take the rectangles produced by the latest render."""
        self.column_rects = list(column_rects)

    def column_at(self, x: int, y: int) -> int | None:
        """Index of the first column whose rectangle contains the point."""
        for index, rect in enumerate(self.column_rects):
            if rect.contains(x, y):
                return index
        return None

    def column_at_x(self, x: int) -> int | None:
        """Column under a horizontal position, ignoring y (used while dragging)."""
        for index, rect in enumerate(self.column_rects):
            if rect.contains_x(x):
                return index
        return None

    def card_at(self, column: int, y: int, tasks: Sequence[Task]) -> int | None:
        """Index into `tasks` (the column's display list) of the card at row y."""
        if not 0 <= column < len(self.column_rects):
            return None
        inner = self.column_rects[column].inner()
        heights = [card_height(t) for t in tasks]
        # The top border row counts as the first card
        return hit_card(heights, max(y - inner.y, 0), limit=inner.height)
