"""Google Calendar client used as the household's device calendar.

Provides :class:`GoogleCalendarClient`, which mirrors created events into
a dedicated calendar (``"Family Calendar"`` by default) so they sit apart
from the user's personal entries.  The calendar is looked up by name on
first use and created if missing.

Calls are blocking and are not retried.  ``HttpError`` is translated into
the :mod:`family_cal.calendar.exceptions` hierarchy.
"""

from __future__ import annotations

import logging
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from family_cal.calendar.event_mapper import map_to_google_event
from family_cal.calendar.exceptions import classify_http_error
from family_cal.models.calendar import DeviceCalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_NAME = "Family Calendar"


class GoogleCalendarClient:
    """Creates events in a dedicated Google calendar.

    Args:
        credentials: Valid Google OAuth 2.0 credentials.
        timezone: IANA timezone string (e.g. ``"America/Vancouver"``).
        calendar_name: Summary of the dedicated calendar.
        service: Optional pre-built ``googleapiclient`` service resource.
            If ``None``, one is built from *credentials*.  Pass a mock here
            in tests.
    """

    def __init__(
        self,
        credentials: Credentials | None,
        timezone: str,
        calendar_name: str = DEFAULT_CALENDAR_NAME,
        service: Any | None = None,
    ) -> None:
        self._timezone = timezone
        self._calendar_name = calendar_name
        self._service = service or build("calendar", "v3", credentials=credentials)
        self._calendar_id: str | None = None

    # ------------------------------------------------------------------
    # Calendar lookup
    # ------------------------------------------------------------------

    def ensure_calendar(self) -> str:
        """Return the id of the dedicated calendar, creating it if needed.

        The id is cached for the lifetime of the client.
        """
        if self._calendar_id is not None:
            return self._calendar_id

        existing = self._find_calendar()
        if existing is not None:
            self._calendar_id = existing
            logger.info("Using existing calendar '%s' (id=%s)", self._calendar_name, existing)
            return existing

        created = self._execute(
            self._service.calendars().insert(
                body={"summary": self._calendar_name, "timeZone": self._timezone}
            )
        )
        self._calendar_id = created["id"]
        logger.info("Created calendar '%s' (id=%s)", self._calendar_name, self._calendar_id)
        return self._calendar_id

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_event(self, event: DeviceCalendarEvent) -> str | None:
        """Insert *event* into the dedicated calendar.

        Returns:
            The new Google Calendar event id, or ``None`` if the API
            response carried no id.

        Raises:
            CalendarAPIError: On any API failure.
            ValueError: If the payload's time range is empty or inverted.
        """
        body = map_to_google_event(event, self._timezone)
        calendar_id = self.ensure_calendar()

        result = self._execute(self._service.events().insert(calendarId=calendar_id, body=body))
        event_id = result.get("id")
        logger.info("Created calendar event '%s' (id=%s)", event.title, event_id or "?")
        return event_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_calendar(self) -> str | None:
        """Search the user's calendar list (all pages) by summary."""
        page_token: str | None = None
        while True:
            response = self._execute(self._service.calendarList().list(pageToken=page_token))
            for entry in response.get("items", []):
                if entry.get("summary") == self._calendar_name:
                    return entry["id"]
            page_token = response.get("nextPageToken")
            if page_token is None:
                return None

    @staticmethod
    def _execute(request: Any) -> dict:
        try:
            return request.execute()
        except HttpError as exc:
            error = classify_http_error(exc)
            logger.error("Calendar API error (HTTP %s): %s", error.status_code, exc)
            raise error from exc
