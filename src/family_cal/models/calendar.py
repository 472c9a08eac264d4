"""Payload sent to the device calendar when mirroring a created event."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DeviceCalendarEvent:
    """An event in the shape the device calendar accepts.

    Unlike :class:`~family_cal.models.extraction.ParsedEvent`, ``end_date``
    is always set, because calendar backends reject open-ended timed events.

    Attributes:
        title: Event title.
        start_date: Start instant.
        end_date: End instant.
        description: Notes attached to the event, or ``None``.
        location: Location string, or ``None``.
        all_day: Whether the event spans whole days.
    """

    title: str
    start_date: datetime
    end_date: datetime
    description: str | None = None
    location: str | None = None
    all_day: bool = False
