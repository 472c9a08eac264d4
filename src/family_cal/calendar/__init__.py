"""Device-calendar (Google Calendar) integration for family-cal."""

from __future__ import annotations

from family_cal.calendar.auth import get_calendar_credentials, load_calendar_credentials
from family_cal.calendar.client import GoogleCalendarClient
from family_cal.calendar.event_mapper import map_to_google_event, to_device_event
from family_cal.calendar.sync import CalendarSyncAdapter

__all__ = [
    "CalendarSyncAdapter",
    "GoogleCalendarClient",
    "get_calendar_credentials",
    "load_calendar_credentials",
    "map_to_google_event",
    "to_device_event",
]
