"""Batch creation of confirmed events.

Provides :func:`create_events`, which persists a confirmed list of parsed
events one at a time, in order.  A failed creation is recorded and the
loop moves on, so the caller always learns how many of N events were
created.

For every event that is created, calendar sync and the household
notification are started as independent background tasks.  They may
still be running while the next event is being created, their failures
are logged and swallowed, and they never change the
:class:`~family_cal.models.batch.BatchResult`.  All of them are awaited
before :func:`create_events` returns.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from family_cal.models.batch import BatchResult, CreationOutcome
from family_cal.models.extraction import ParsedEvent
from family_cal.models.household import HouseholdContext
from family_cal.notifications import Notifier
from family_cal.store import EventStore, build_event_record

logger = logging.getLogger(__name__)


class CalendarSync(Protocol):
    """Anything with the :class:`CalendarSyncAdapter` ``sync`` contract."""

    async def sync(self, event: ParsedEvent) -> bool: ...


async def create_events(
    events: Sequence[ParsedEvent],
    store: EventStore,
    household: HouseholdContext,
    *,
    calendar_sync: CalendarSync | None = None,
    notifier: Notifier | None = None,
) -> BatchResult:
    """Persist *events* sequentially and report how many succeeded.

    Args:
        events: Confirmed events, in the order they should be created.
        store: Persistence capability; ``create`` returns the new id or
            raises.
        household: Creator and household the events belong to.
        calendar_sync: Optional device-calendar mirror.
        notifier: Optional household notifier.  Skipped when there is no
            active household.

    Returns:
        A :class:`BatchResult`.  ``attempted`` always equals
        ``len(events)``; ``created_ids`` keeps the input order.
    """
    result = BatchResult()

    if not events:
        logger.info("No events to create")
        return result

    logger.info("Creating %d event(s)", len(events))

    side_effects: list[asyncio.Task[None]] = []

    for event in events:
        result.attempted += 1
        try:
            created_id = await store.create(build_event_record(event, household))
            if not created_id:
                raise ValueError("store returned no identifier")
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            logger.error("Failed to create event '%s': %s", event.title, reason)
            result.outcomes.append(CreationOutcome(event=event, failure_reason=reason))
            continue

        result.succeeded += 1
        result.created_ids.append(created_id)
        result.outcomes.append(CreationOutcome(event=event, created_id=created_id))
        logger.info("Event '%s' created (id=%s)", event.title, created_id)

        side_effects.extend(
            _start_side_effects(event, created_id, household, calendar_sync, notifier)
        )

    if side_effects:
        await asyncio.gather(*side_effects)

    logger.info(
        "Batch complete: %d of %d event(s) created",
        result.succeeded,
        result.attempted,
    )
    return result


def _start_side_effects(
    event: ParsedEvent,
    created_id: str,
    household: HouseholdContext,
    calendar_sync: CalendarSync | None,
    notifier: Notifier | None,
) -> list[asyncio.Task[None]]:
    """Start sync and notification for one created event as tasks."""
    tasks: list[asyncio.Task[None]] = []

    if calendar_sync is not None:
        tasks.append(
            asyncio.create_task(
                _best_effort("calendar sync", event, functools.partial(calendar_sync.sync, event))
            )
        )

    if notifier is not None and household.household_id:
        notify = functools.partial(
            notifier.notify_event_created,
            household.household_id,
            event.title,
            created_id,
            list(household.member_ids),
            household.display_name,
        )
        tasks.append(asyncio.create_task(_best_effort("notification", event, notify)))

    return tasks


async def _best_effort(
    label: str,
    event: ParsedEvent,
    call: Callable[[], Awaitable[object]],
) -> None:
    try:
        await call()
    except Exception as exc:
        logger.warning("%s failed for '%s': %s", label.capitalize(), event.title, exc)
