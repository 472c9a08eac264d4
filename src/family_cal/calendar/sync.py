"""Best-effort mirroring of created events into the device calendar.

:class:`CalendarSyncAdapter` is only ever called for events that were
already persisted.  It never raises: a missing calendar (access not
granted), a ``None`` id, and any exception all count as "not synced",
are logged, and are not retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from family_cal.calendar.event_mapper import to_device_event
from family_cal.models.calendar import DeviceCalendarEvent
from family_cal.models.extraction import ParsedEvent

logger = logging.getLogger(__name__)


class DeviceCalendar(Protocol):
    """Blocking device-calendar API, e.g. :class:`GoogleCalendarClient`."""

    def create_event(self, event: DeviceCalendarEvent) -> str | None: ...


class CalendarSyncAdapter:
    """Mirrors a created event into the device calendar, if available.

    Args:
        calendar: The device calendar, or ``None`` when calendar access is
            not granted (every sync is then skipped).
    """

    def __init__(self, calendar: DeviceCalendar | None) -> None:
        self._calendar = calendar

    @property
    def available(self) -> bool:
        return self._calendar is not None

    async def sync(self, event: ParsedEvent) -> bool:
        """Create a device-calendar copy of *event*.

        Returns:
            ``True`` if the device calendar returned an id, else ``False``.
        """
        if self._calendar is None:
            logger.debug("No device calendar access; skipping sync of '%s'", event.title)
            return False

        payload = to_device_event(event)
        try:
            # The Google client blocks; keep it off the event loop.
            system_id = await asyncio.to_thread(self._calendar.create_event, payload)
        except Exception as exc:
            logger.warning("Calendar sync failed for '%s': %s", event.title, exc)
            return False

        if not system_id:
            logger.warning("Calendar sync returned no id for '%s'", event.title)
            return False

        logger.info("Synced '%s' to device calendar (id=%s)", event.title, system_id)
        return True
