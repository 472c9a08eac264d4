"""Map created events onto device-calendar payloads.

Two steps:

- :func:`to_device_event` turns a :class:`ParsedEvent` into a
  :class:`DeviceCalendarEvent`. A missing end time, or one not after the
  start (a point event), becomes a one-hour default.
- :func:`map_to_google_event` turns that payload into a Google Calendar
  ``events().insert()`` body.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from family_cal.models.calendar import DeviceCalendarEvent
from family_cal.models.extraction import ParsedEvent

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(hours=1)


def to_device_event(event: ParsedEvent) -> DeviceCalendarEvent:
    """Build the device-calendar payload for a created event."""
    end = event.end_time
    # Google Calendar rejects zero-length timed events.
    if end is None or end <= event.start_time:
        end = event.start_time + DEFAULT_DURATION
    return DeviceCalendarEvent(
        title=event.title,
        description=event.description,
        start_date=event.start_time,
        end_date=end,
        location=event.location,
        all_day=False,
    )


def map_to_google_event(event: DeviceCalendarEvent, timezone: str) -> dict:
    """Convert a device payload into a Google Calendar API event body.

    Args:
        event: The payload to convert.
        timezone: IANA timezone string attached to timed start/end values.

    Returns:
        A ``dict`` conforming to the Google Calendar Event resource schema.

    Raises:
        ValueError: If ``end_date`` is not after ``start_date``.
    """
    if event.end_date <= event.start_date:
        raise ValueError(
            f"end_date ({event.end_date.isoformat()}) must be after "
            f"start_date ({event.start_date.isoformat()})"
        )

    body: dict = {
        "summary": event.title,
        "start": _format_point(event.start_date, timezone, event.all_day),
        "end": _format_point(event.end_date, timezone, event.all_day),
    }
    if event.description:
        body["description"] = event.description
    if event.location:
        body["location"] = event.location

    logger.debug(
        "Mapped event '%s' (%s -> %s) to Google Calendar body",
        event.title,
        event.start_date.isoformat(),
        event.end_date.isoformat(),
    )
    return body


def _format_point(dt: datetime, timezone: str, all_day: bool) -> dict:
    """All-day events use ``date``; timed events use ``dateTime`` + zone."""
    if all_day:
        return {"date": dt.date().isoformat()}
    return {"dateTime": dt.isoformat(), "timeZone": timezone}
