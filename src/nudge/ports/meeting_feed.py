"""Meeting feed interface."""

from typing import Protocol

from nudge.core.calendar import Meeting


class MeetingFeed(Protocol):
    """Interface for looking up the next calendar meeting."""

    def next_meeting(self) -> Meeting | None:
        """Best-effort lookup. Returns None on any failure."""
        ...
