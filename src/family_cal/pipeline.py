"""Pipeline orchestrator for the input-to-calendar workflow.

Wires the components together: parsing a submission, holding the result
for confirmation, creating the confirmed events in a batch, and picking
the single outcome notice.  The UI is a pure renderer of
:attr:`PipelineOrchestrator.state`, one of::

    Idle
    Processing(label)
    AwaitingConfirmation(pending)
    NothingRecognized(notice)
    Completed(result, notice)
    Failed(reason, notice)

User and household identity is passed into :meth:`~PipelineOrchestrator.confirm`
explicitly rather than read from ambient state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from family_cal.batch import CalendarSync, create_events
from family_cal.exceptions import ParsingError, PipelineBusyError
from family_cal.gate import ConfirmationGate, PendingConfirmation
from family_cal.models.batch import BatchResult
from family_cal.models.extraction import ParseResult
from family_cal.models.household import HouseholdContext
from family_cal.models.requests import DEFAULT_AUDIO_MIME, DEFAULT_IMAGE_MIME, ParseRequest
from family_cal.notices import (
    Notice,
    batch_notice,
    creating_label,
    loading_label,
    nothing_recognized_notice,
    parse_failure_notice,
)
from family_cal.notifications import Notifier
from family_cal.store import EventStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    """Nothing happening; ready for a new submission."""


@dataclass(frozen=True)
class Processing:
    """A parse or a batch commit is running."""

    label: str


@dataclass(frozen=True)
class AwaitingConfirmation:
    """Parsed events are waiting for the user to commit or cancel."""

    pending: PendingConfirmation


@dataclass(frozen=True)
class NothingRecognized:
    """The parse succeeded but found no events."""

    notice: Notice


@dataclass(frozen=True)
class Completed:
    """A batch commit finished (fully, partly, or with every event failing)."""

    result: BatchResult
    notice: Notice


@dataclass(frozen=True)
class Failed:
    """The parsing step failed."""

    reason: str
    notice: Notice


PipelineState = Idle | Processing | AwaitingConfirmation | NothingRecognized | Completed | Failed


class Parser(Protocol):
    async def parse(self, request: ParseRequest) -> ParseResult: ...


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class PipelineOrchestrator:
    """Runs submissions through parse, confirm and create.

    Args:
        parser: The parsing adapter (e.g. :class:`~family_cal.llm.GeminiParser`).
        store: Where confirmed events are persisted.
        calendar_sync: Optional best-effort device-calendar mirror.
        notifier: Optional best-effort household notifier.
        parse_timeout: Seconds before a parse counts as failed.  ``None``
            waits indefinitely.
        on_change: Called with the new state after every transition.
    """

    def __init__(
        self,
        parser: Parser,
        store: EventStore,
        *,
        calendar_sync: CalendarSync | None = None,
        notifier: Notifier | None = None,
        parse_timeout: float | None = None,
        on_change: Callable[[PipelineState], None] | None = None,
    ) -> None:
        self._parser = parser
        self._store = store
        self._calendar_sync = calendar_sync
        self._notifier = notifier
        self._parse_timeout = parse_timeout
        self._on_change = on_change
        self._gate = ConfirmationGate()
        self._state: PipelineState = Idle()
        self._inflight = 0
        self._committing = False
        self._commits = 0

    # ------------------------------------------------------------------
    # Read-only view for renderers
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return isinstance(self._state, Processing)

    @property
    def loading_label(self) -> str:
        return self._state.label if isinstance(self._state, Processing) else ""

    @property
    def pending(self) -> PendingConfirmation | None:
        return self._gate.pending

    @property
    def notice(self) -> Notice | None:
        return getattr(self._state, "notice", None)

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    async def submit(self, request: ParseRequest) -> PipelineState:
        """Parse *request* and move to the matching state.

        Ends in :class:`AwaitingConfirmation` when events were found,
        :class:`NothingRecognized` when none were, or :class:`Failed` when
        the parsing service failed.  A newer result replaces any pending
        confirmation; a newer notice discards it.  A parse that was still
        running when :meth:`confirm` started is discarded without touching
        the gate or the state.

        Raises:
            PipelineBusyError: If a batch commit is currently running.
        """
        if self._committing:
            raise PipelineBusyError("Events are still being created; try again when done")

        commits_at_start = self._commits
        self._inflight += 1
        self._set_state(Processing(label=loading_label(request.kind)))
        try:
            result = await self._parse(request)
        except Exception as exc:
            if self._commits != commits_at_start:
                logger.info("Discarding failed %s parse overtaken by a commit: %s", request.kind, exc)
                return self._state
            reason = str(exc) or type(exc).__name__
            logger.error("Parsing %s input failed: %s", request.kind, reason)
            self._gate.cancel()
            self._set_state(Failed(reason=reason, notice=parse_failure_notice(request.kind)))
        else:
            if self._commits != commits_at_start:
                logger.info("Discarding %s parse overtaken by a commit", request.kind)
                return self._state
            if self._gate.offer(result):
                self._set_state(AwaitingConfirmation(pending=self._gate.pending))
            else:
                logger.info("Nothing recognized in %s input", request.kind)
                self._gate.cancel()
                self._set_state(NothingRecognized(notice=nothing_recognized_notice()))
        finally:
            self._inflight -= 1
            if self._inflight == 0 and not self._committing and isinstance(self._state, Processing):
                self._set_state(Idle())

        return self._state

    async def submit_text(self, text: str) -> PipelineState:
        return await self.submit(ParseRequest.from_text(text))

    async def submit_voice(self, audio: bytes, mime_type: str = DEFAULT_AUDIO_MIME) -> PipelineState:
        return await self.submit(ParseRequest.from_voice(audio, mime_type))

    async def submit_image(self, image: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> PipelineState:
        return await self.submit(ParseRequest.from_image(image, mime_type))

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def confirm(self, household: HouseholdContext) -> BatchResult:
        """Commit the pending confirmation and create its events.

        Args:
            household: Creator and household for the new events.

        Returns:
            The :class:`BatchResult`; the state becomes :class:`Completed`.

        Raises:
            NothingPendingError: If nothing is awaiting confirmation.
        """
        parse_result = self._gate.commit()
        events = parse_result.events

        self._commits += 1
        self._committing = True
        self._set_state(Processing(label=creating_label(len(events))))
        try:
            result = await create_events(
                events,
                self._store,
                household,
                calendar_sync=self._calendar_sync,
                notifier=self._notifier,
            )
        except BaseException:
            self._set_state(Idle())
            raise
        finally:
            self._committing = False

        self._set_state(Completed(result=result, notice=batch_notice(result)))
        return result

    def cancel(self) -> None:
        """Discard the pending confirmation.  A no-op if there is none."""
        self._gate.cancel()
        if isinstance(self._state, AwaitingConfirmation):
            self._set_state(Idle())

    def dismiss(self) -> None:
        """Acknowledge the current notice and return to :class:`Idle`."""
        if isinstance(self._state, (NothingRecognized, Completed, Failed)):
            self._set_state(Idle())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _parse(self, request: ParseRequest) -> ParseResult:
        if self._parse_timeout is None:
            return await self._parser.parse(request)
        try:
            return await asyncio.wait_for(self._parser.parse(request), self._parse_timeout)
        except TimeoutError as exc:
            raise ParsingError(
                f"Parsing service did not answer within {self._parse_timeout:g}s"
            ) from exc

    def _set_state(self, state: PipelineState) -> None:
        self._state = state
        logger.debug("Pipeline state -> %s", type(state).__name__)
        if self._on_change is not None:
            self._on_change(state)
