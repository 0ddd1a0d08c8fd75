"""iCal feed adapter - HTTP fetch of a published calendar."""

import logging
from datetime import datetime, timezone

import requests

from nudge.core.calendar import Meeting, find_next_meeting

logger = logging.getLogger(__name__)


class IcalMeetingFeed:
    """
    Looks up the next meeting from a secret iCal address.

    Implements MeetingFeed protocol. Any failure degrades to "no meeting".
    """

    def __init__(self, url: str | None, timeout: int = 10):
        self.url = url
        self.timeout = timeout
        self._session = requests.Session()

    def fetch_ics(self) -> str:
        """Download the raw calendar document. Raises on HTTP/network errors."""
        url = self.url
        # Calendar apps hand out webcal:// links for the same https resource
        if url and url.startswith("webcal://"):
            url = "https://" + url[len("webcal://") :]
        resp = self._session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.text

    def next_meeting(self, now: datetime | None = None) -> Meeting | None:
        if not self.url:
            return None

        try:
            ics_text = self.fetch_ics()
        except requests.RequestException as e:
            logger.warning(f"Calendar fetch failed: {e}")
            return None

        try:
            return find_next_meeting(ics_text, now or datetime.now(timezone.utc))
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse calendar feed: {e}")
            return None
