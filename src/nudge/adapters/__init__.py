"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskStorage
from .chime import ChimeNotifier, SilentNotifier
from .ical_feed import IcalMeetingFeed

__all__ = [
    "JsonTaskStorage",
    "ChimeNotifier",
    "SilentNotifier",
    "IcalMeetingFeed",
]
