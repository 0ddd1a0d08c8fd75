"""Tests for core calendar logic."""

from datetime import datetime, timedelta, timezone

import pytest

from nudge.core.calendar import (
    Meeting,
    find_next_meeting,
    format_countdown,
    iter_events,
    parse_ical_datetime,
    parse_property,
    unescape_text,
    unfold_lines,
)

UTC = timezone.utc


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def vevent(summary: str | None, dtstart: str) -> str:
    lines = ["BEGIN:VEVENT", f"DTSTART{dtstart}"]
    if summary is not None:
        lines.append(f"SUMMARY:{summary}")
    lines.append("END:VEVENT")
    return "\r\n".join(lines)


def calendar(*events: str) -> str:
    return "\r\n".join(["BEGIN:VCALENDAR", "VERSION:2.0", *events, "END:VCALENDAR"])


class TestParsing:
    """Tests for content-line helpers."""

    def test_unfold_lines(self):
        text = "SUMMARY:Quarterly plan\r\n ning session\r\nDTSTART:20250115T100000Z"
        assert unfold_lines(text) == ["SUMMARY:Quarterly planning session", "DTSTART:20250115T100000Z"]

    def test_parse_property_with_params(self):
        assert parse_property('DTSTART;TZID="America/Toronto":20250115T100000') == (
            "DTSTART",
            {"TZID": "America/Toronto"},
            "20250115T100000",
        )

    def test_parse_property_colon_in_value(self):
        name, params, value = parse_property("SUMMARY:Sync: design review")
        assert name == "SUMMARY"
        assert params == {}
        assert value == "Sync: design review"

    def test_parse_property_without_colon(self):
        assert parse_property("garbage") is None

    def test_unescape_text(self):
        assert unescape_text(r"Lunch\, then walk\; maybe") == "Lunch, then walk; maybe"


class TestParseIcalDatetime:
    """Tests for parse_ical_datetime()."""

    def test_utc(self):
        assert parse_ical_datetime("20250115T143000Z") == datetime(2025, 1, 15, 14, 30, tzinfo=UTC)

    def test_tzid(self):
        # Toronto is UTC-5 in January
        result = parse_ical_datetime("20250115T100000", "America/Toronto")
        assert result == datetime(2025, 1, 15, 15, 0, tzinfo=UTC)

    def test_floating_time_is_aware(self):
        result = parse_ical_datetime("20250115T100000")
        assert result.tzinfo is not None
        assert result == datetime(2025, 1, 15, 10, 0).astimezone()

    def test_unknown_tzid_falls_back_to_local(self):
        result = parse_ical_datetime("20250115T100000", "Nowhere/Atlantis")
        assert result == datetime(2025, 1, 15, 10, 0).astimezone()

    def test_date_only_is_ignored(self):
        assert parse_ical_datetime("20250115") is None

    def test_garbage(self):
        assert parse_ical_datetime("not-a-date-value") is None


class TestFindNextMeeting:
    """Tests for find_next_meeting()."""

    def test_earliest_future_event_wins(self, now):
        ics = calendar(
            vevent("Later", ":20250115T170000Z"),
            vevent("Past", ":20250115T090000Z"),
            vevent("Soon", ":20250115T123000Z"),
        )
        meeting = find_next_meeting(ics, now)
        assert meeting == Meeting(summary="Soon", start=datetime(2025, 1, 15, 12, 30, tzinfo=UTC))

    def test_no_future_events(self, now):
        assert find_next_meeting(calendar(vevent("Past", ":20250114T090000Z")), now) is None

    def test_skips_all_day_and_untitled(self, now):
        ics = calendar(
            vevent("Holiday", ";VALUE=DATE:20250116"),
            vevent(None, ":20250115T130000Z"),
            vevent("Standup", ":20250116T140000Z"),
        )
        assert find_next_meeting(ics, now).summary == "Standup"

    def test_event_starting_now_is_not_next(self, now):
        assert find_next_meeting(calendar(vevent("Now", ":20250115T120000Z")), now) is None

    def test_empty_document(self, now):
        assert find_next_meeting("", now) is None

    def test_properties_outside_events_ignored(self, now):
        ics = "BEGIN:VCALENDAR\r\nSUMMARY:Calendar name\r\nDTSTART:20250116T100000Z\r\nEND:VCALENDAR"
        assert list(iter_events(ics)) == []
        assert find_next_meeting(ics, now) is None


class TestFormatCountdown:
    """Tests for format_countdown()."""

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(minutes=30), "in 30 min"),
            (timedelta(minutes=59, seconds=59), "in 59 min"),
            (timedelta(hours=2, minutes=5), "in 2h 5m"),
            (timedelta(hours=23, minutes=59), "in 23h 59m"),
            (timedelta(days=3, hours=4), "in 3 days"),
            (timedelta(minutes=-5), "Now"),
        ],
    )
    def test_formats(self, now, delta, expected):
        assert format_countdown(now + delta, now) == expected


class TestMeeting:
    def test_format_time_uses_local_clock(self):
        start = datetime(2025, 1, 15, 14, 30, tzinfo=UTC)
        meeting = Meeting(summary="Sync", start=start)
        assert meeting.format_time() == start.astimezone().strftime("%I:%M %p")
