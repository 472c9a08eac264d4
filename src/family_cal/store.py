"""Persistence capability for confirmed events.

:class:`EventStore` is the contract the batch creator depends on.
:class:`SupabaseEventStore` implements it against the household's
Supabase tables: ``events`` for the event itself, plus ``event_attendees``
and ``event_shares`` rows that are written best-effort once the event
exists.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from family_cal.exceptions import EventCreationError
from family_cal.models.extraction import ParsedEvent
from family_cal.models.household import HouseholdContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventRecord:
    """What the store is asked to persist for one confirmed event.

    Attributes:
        title: Event title.
        start_time: Start instant.
        end_time: End instant, or ``None`` for a point event.
        description: Optional description.
        location: Optional location.
        creator_id: Member creating the event.
        share_targets: Households the event is shared with.
        participant_ids: Members attending the event.
    """

    title: str
    start_time: datetime
    creator_id: str
    end_time: datetime | None = None
    description: str | None = None
    location: str | None = None
    share_targets: tuple[str, ...] = field(default_factory=tuple)
    participant_ids: tuple[str, ...] = field(default_factory=tuple)


class EventStore(Protocol):
    """Anything that can durably create an event and return its id."""

    async def create(self, record: EventRecord) -> str:
        """Persist *record*; raise on failure with a readable message."""
        ...


def build_event_record(event: ParsedEvent, household: HouseholdContext) -> EventRecord:
    """Map a parsed event onto a store record for *household*.

    Events are shared with the active household (if any) and list the
    creator as the only participant.
    """
    return EventRecord(
        title=event.title,
        start_time=event.start_time,
        end_time=event.end_time,
        description=event.description,
        location=event.location,
        creator_id=household.user_id,
        share_targets=(household.household_id,) if household.household_id else (),
        participant_ids=(household.user_id,),
    )


class SupabaseEventStore:
    """Event store backed by an async Supabase client.

    Args:
        client: A ``supabase.AsyncClient`` (from ``acreate_client``).
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def create(self, record: EventRecord) -> str:
        """Insert the event row, then its attendee and share rows.

        Returns:
            The id of the new ``events`` row.

        Raises:
            EventCreationError: If the time range is inverted or the
                insert returns no row.
            Exception: Any client error from the ``events`` insert.
        """
        if record.end_time is not None and record.end_time < record.start_time:
            raise EventCreationError(
                f"End time ({record.end_time.isoformat()}) is before "
                f"start time ({record.start_time.isoformat()})"
            )

        start_ts = int(record.start_time.timestamp())
        end_ts = int(record.end_time.timestamp()) if record.end_time else start_ts

        response = await (
            self._client.table("events")
            .insert(
                {
                    "creator_id": record.creator_id,
                    "title": record.title,
                    "description": record.description,
                    "start_ts": start_ts,
                    "end_ts": end_ts,
                    "location": record.location,
                }
            )
            .execute()
        )
        rows = getattr(response, "data", None) or []
        if not rows or rows[0].get("id") is None:
            raise EventCreationError(f"Store returned no row for event '{record.title}'")

        event_id = str(rows[0]["id"])
        logger.info("Stored event '%s' (id=%s)", record.title, event_id)

        await self._add_attendees(event_id, record)
        await self._add_shares(event_id, record)
        return event_id

    async def _add_attendees(self, event_id: str, record: EventRecord) -> None:
        if not record.participant_ids:
            return
        rows = [
            {"event_id": event_id, "user_id": user_id, "status": "accepted"}
            for user_id in record.participant_ids
        ]
        try:
            await self._client.table("event_attendees").insert(rows).execute()
        except Exception as exc:
            # The event exists; a missing attendee row is recoverable.
            logger.error("Failed to add attendees to event %s: %s", event_id, exc)

    async def _add_shares(self, event_id: str, record: EventRecord) -> None:
        family_ids = [fid for fid in record.share_targets if _is_uuid(fid)]
        skipped = set(record.share_targets) - set(family_ids)
        if skipped:
            logger.warning("Not sharing event %s with invalid household ids: %s", event_id, sorted(skipped))
        if not family_ids:
            return
        rows = [
            {"event_id": event_id, "family_id": family_id, "shared_by": record.creator_id}
            for family_id in family_ids
        ]
        try:
            await self._client.table("event_shares").insert(rows).execute()
        except Exception as exc:
            logger.error("Failed to share event %s: %s", event_id, exc)


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True
