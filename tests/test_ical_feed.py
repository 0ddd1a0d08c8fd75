"""Tests for the iCal meeting feed adapter."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from nudge.adapters.ical_feed import IcalMeetingFeed

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

ICS = "\r\n".join([
    "BEGIN:VCALENDAR",
    "BEGIN:VEVENT",
    "DTSTART:20250115T150000Z",
    "SUMMARY:Design review",
    "END:VEVENT",
    "END:VCALENDAR",
])


def response(text: str = ICS, status_error: Exception | None = None) -> MagicMock:
    resp = MagicMock(text=text)
    if status_error:
        resp.raise_for_status.side_effect = status_error
    return resp


class TestIcalMeetingFeed:
    """Tests for IcalMeetingFeed."""

    def test_no_url(self):
        feed = IcalMeetingFeed(None)
        with patch.object(feed._session, "get") as mock_get:
            assert feed.next_meeting(NOW) is None
        mock_get.assert_not_called()

    def test_next_meeting(self):
        feed = IcalMeetingFeed("https://calendar.example.com/secret.ics", timeout=4)
        with patch.object(feed._session, "get", return_value=response()) as mock_get:
            meeting = feed.next_meeting(NOW)

        assert meeting.summary == "Design review"
        assert meeting.start == datetime(2025, 1, 15, 15, 0, tzinfo=timezone.utc)
        mock_get.assert_called_once_with("https://calendar.example.com/secret.ics", timeout=4)

    def test_webcal_scheme_is_fetched_over_https(self):
        feed = IcalMeetingFeed("webcal://calendar.example.com/secret.ics")
        with patch.object(feed._session, "get", return_value=response()) as mock_get:
            feed.next_meeting(NOW)
        assert mock_get.call_args[0][0] == "https://calendar.example.com/secret.ics"

    @pytest.mark.parametrize(
        "error",
        [requests.ConnectionError("offline"), requests.Timeout("slow")],
    )
    def test_network_errors_degrade(self, error, caplog):
        feed = IcalMeetingFeed("https://calendar.example.com/secret.ics")
        with patch.object(feed._session, "get", side_effect=error):
            assert feed.next_meeting(NOW) is None
        assert "Calendar fetch failed" in caplog.text

    def test_http_error_degrades(self):
        feed = IcalMeetingFeed("https://calendar.example.com/secret.ics")
        resp = response(status_error=requests.HTTPError("404 Not Found"))
        with patch.object(feed._session, "get", return_value=resp):
            assert feed.next_meeting(NOW) is None

    def test_garbage_body_gives_no_meeting(self):
        feed = IcalMeetingFeed("https://calendar.example.com/secret.ics")
        with patch.object(feed._session, "get", return_value=response("<html>nope</html>")):
            assert feed.next_meeting(NOW) is None
