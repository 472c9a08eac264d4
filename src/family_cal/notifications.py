"""Household notifications for newly created events.

The batch creator calls :meth:`Notifier.notify_event_created` once per
created event and ignores whatever happens next.  Who actually receives
the notification (for instance, whether the creator is excluded) is
decided here, not by the pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_NOTIFICATIONS_TABLE = "family_notifications"


class Notifier(Protocol):
    """Broadcasts "event created" to household members."""

    async def notify_event_created(
        self,
        group_id: str,
        event_title: str,
        event_id: str,
        recipient_ids: Sequence[str],
        actor_display_name: str,
    ) -> None: ...


class NullNotifier:
    """Notifier that sends nothing."""

    async def notify_event_created(
        self,
        group_id: str,
        event_title: str,
        event_id: str,
        recipient_ids: Sequence[str],
        actor_display_name: str,
    ) -> None:
        logger.debug("Notifications disabled; not announcing '%s'", event_title)


class SupabaseNotifier:
    """Writes one ``family_notifications`` row per recipient.

    The sender never notifies themselves.  Push delivery of the stored
    rows happens elsewhere.

    Args:
        client: A ``supabase.AsyncClient``.
        sender_id: Id of the member on whose behalf notifications are sent.
    """

    def __init__(self, client: Any, sender_id: str) -> None:
        self._client = client
        self._sender_id = sender_id

    async def notify_event_created(
        self,
        group_id: str,
        event_title: str,
        event_id: str,
        recipient_ids: Sequence[str],
        actor_display_name: str,
    ) -> None:
        recipients = [rid for rid in dict.fromkeys(recipient_ids) if rid != self._sender_id]
        if not recipients:
            logger.debug("No one to notify about '%s'", event_title)
            return

        rows = [
            {
                "family_id": group_id,
                "sender_id": self._sender_id,
                "recipient_id": recipient_id,
                "type": "event_created",
                "title": "New event",
                "message": f'{actor_display_name} created a new event "{event_title}"',
                "related_id": event_id,
                "related_type": "event",
                "metadata": {"eventTitle": event_title, "creatorName": actor_display_name},
            }
            for recipient_id in recipients
        ]
        await self._client.table(_NOTIFICATIONS_TABLE).insert(rows).execute()
        logger.info("Notified %d member(s) about '%s'", len(recipients), event_title)
