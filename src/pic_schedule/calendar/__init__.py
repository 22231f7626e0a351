"""Google Calendar storage and login for pic-schedule."""

from __future__ import annotations

from pic_schedule.calendar.auth import get_calendar_credentials
from pic_schedule.calendar.client import GoogleCalendarClient
from pic_schedule.calendar.event_mapper import map_to_google_event
from pic_schedule.calendar.store import save_events

__all__ = [
    "GoogleCalendarClient",
    "get_calendar_credentials",
    "map_to_google_event",
    "save_events",
]
