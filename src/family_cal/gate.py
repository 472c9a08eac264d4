"""Human-in-the-loop confirmation between parsing and persistence.

The gate is either closed or open with exactly one
:class:`PendingConfirmation`.  A newer parse result replaces the pending
one outright (last write wins); there is no queue and no merge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from family_cal.exceptions import NothingPendingError
from family_cal.models.extraction import ParsedEvent, ParseResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingConfirmation:
    """A parse result awaiting the user's commit or cancel."""

    parse_result: ParseResult

    @property
    def summary(self) -> str | None:
        return self.parse_result.summary

    @property
    def events(self) -> list[ParsedEvent]:
        return self.parse_result.events

    @property
    def raw_user_input(self) -> str | None:
        return self.parse_result.raw_user_input


class ConfirmationGate:
    """Holds at most one pending parse result for review."""

    def __init__(self) -> None:
        self._pending: PendingConfirmation | None = None

    @property
    def is_open(self) -> bool:
        return self._pending is not None

    @property
    def pending(self) -> PendingConfirmation | None:
        return self._pending

    def offer(self, result: ParseResult) -> bool:
        """Open the gate with *result* if it contains any events.

        Replaces whatever was pending before.  A result with no events
        leaves the gate untouched.

        Returns:
            ``True`` if the gate is now open with *result*.
        """
        if result.is_empty:
            return False
        if self._pending is not None:
            logger.info(
                "Replacing pending confirmation (%d event(s)) with a newer one (%d event(s))",
                len(self._pending.events),
                len(result.events),
            )
        self._pending = PendingConfirmation(parse_result=result)
        return True

    def commit(self) -> ParseResult:
        """Close the gate and hand back the pending result for creation.

        Raises:
            NothingPendingError: If the gate is closed.
        """
        if self._pending is None:
            raise NothingPendingError("There is no pending confirmation to commit")
        pending, self._pending = self._pending, None
        logger.info("Confirmation committed: %d event(s)", len(pending.events))
        return pending.parse_result

    def cancel(self) -> None:
        """Discard the pending result.  Does nothing if the gate is closed."""
        if self._pending is None:
            return
        logger.info("Confirmation cancelled: %d event(s) discarded", len(self._pending.events))
        self._pending = None
