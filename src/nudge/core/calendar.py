"""Pure calendar domain logic - no I/O dependencies."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Meeting:
    """The next upcoming calendar event."""

    summary: str
    start: datetime  # timezone-aware

    def format_time(self) -> str:
        """Local wall-clock start, e.g. '02:30 PM'."""
        return self.start.astimezone().strftime("%I:%M %p")


def unfold_lines(ics_text: str) -> list[str]:
    """Join RFC 5545 folded lines (continuations start with a space or tab)."""
    lines: list[str] = []
    for raw in ics_text.splitlines():
        if raw[:1] in (" ", "\t") and lines:
            lines[-1] += raw[1:]
        else:
            lines.append(raw)
    return lines


def parse_property(line: str) -> tuple[str, dict[str, str], str] | None:
    """
    Split a content line into (name, params, value).

    'DTSTART;TZID="America/Toronto":20250115T100000' ->
        ('DTSTART', {'TZID': 'America/Toronto'}, '20250115T100000')
    """
    in_quotes = False
    split_at = -1
    for i, ch in enumerate(line):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == ":" and not in_quotes:
            split_at = i
            break
    if split_at == -1:
        return None

    head, value = line[:split_at], line[split_at + 1 :]
    name, *raw_params = head.split(";")
    params = {}
    for raw in raw_params:
        key, _, val = raw.partition("=")
        params[key.strip().upper()] = val.strip().strip('"')
    return name.strip().upper(), params, value


def parse_ical_datetime(value: str, tzid: str | None = None) -> datetime | None:
    """
    Parse a DTSTART-style value into an aware UTC datetime.

    YYYYMMDDTHHMMSSZ is UTC, a TZID parameter names the zone, anything else is
    floating local time. Date-only values (all-day events) return None.
    """
    value = value.strip()
    if len(value) < 15:
        return None
    try:
        naive = datetime.strptime(value[:15], "%Y%m%dT%H%M%S")
    except ValueError:
        return None

    if value.endswith("Z"):
        return naive.replace(tzinfo=timezone.utc)
    if tzid:
        try:
            return naive.replace(tzinfo=ZoneInfo(tzid)).astimezone(timezone.utc)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug(f"Unknown TZID {tzid!r}, treating as local time")
    return naive.astimezone().astimezone(timezone.utc)


def iter_events(ics_text: str) -> Iterator[tuple[str | None, datetime | None]]:
    """Yield (summary, start) for every VEVENT in a calendar document."""
    in_event = False
    summary: str | None = None
    start: datetime | None = None

    for line in unfold_lines(ics_text):
        marker = line.strip().upper()
        if marker == "BEGIN:VEVENT":
            in_event, summary, start = True, None, None
            continue
        if marker == "END:VEVENT":
            if in_event:
                yield summary, start
            in_event = False
            continue
        if not in_event:
            continue

        prop = parse_property(line)
        if prop is None:
            continue
        name, params, value = prop
        if name == "SUMMARY":
            summary = unescape_text(value)
        elif name == "DTSTART":
            start = parse_ical_datetime(value, params.get("TZID"))


def unescape_text(value: str) -> str:
    return (
        value.replace("\\n", " ")
        .replace("\\N", " ")
        .replace("\\,", ",")
        .replace("\\;", ";")
        .replace("\\\\", "\\")
    )


def find_next_meeting(ics_text: str, now: datetime | None = None) -> Meeting | None:
    """
    Find the earliest event starting after `now`.

    Pure function - no I/O. Events without a summary or a timed start are skipped.
    """
    now = now or datetime.now(timezone.utc)
    best: Meeting | None = None
    for summary, start in iter_events(ics_text):
        if summary is None or start is None or start <= now:
            continue
        if best is None or start < best.start:
            best = Meeting(summary=summary, start=start)
    return best


def format_countdown(start: datetime, now: datetime | None = None) -> str:
    """Relative time until a meeting: 'Now', 'in 12 min', 'in 2h 5m', 'in 3 days'."""
    now = now or datetime.now(timezone.utc)
    seconds = (start - now).total_seconds()
    minutes = int(seconds / 60)
    hours = int(seconds / 3600)

    if minutes < 0:
        return "Now"
    if hours < 1:
        return f"in {minutes} min"
    if hours < 24:
        return f"in {hours}h {minutes % 60}m"
    return f"in {int(seconds / 86400)} days"
