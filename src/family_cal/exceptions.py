"""Custom exceptions for the input-to-calendar pipeline."""

from __future__ import annotations


class ParsingError(Exception):
    """Raised when the parsing service cannot produce a result.

    Covers network and API failures as well as timeouts.  The orchestrator
    surfaces every :class:`ParsingError` as one generic failure notice.
    """


class MalformedResponseError(ParsingError):
    """Raised when the parsing service answers with an unusable payload.

    Treated exactly like a service failure by callers; kept as a subclass
    so logs can tell the two apart.

    Attributes:
        raw_response: The raw model output that failed to parse.
    """

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class InvalidInputError(ValueError):
    """Raised when a submission is empty (blank text, zero-byte audio/image)."""


class EventCreationError(Exception):
    """Raised by an event store when a single event cannot be persisted.

    The message is human-readable and ends up in the per-event
    :class:`~family_cal.models.batch.CreationOutcome`.
    """


class NothingPendingError(Exception):
    """Raised when committing a confirmation gate that holds nothing."""


class PipelineBusyError(Exception):
    """Raised when a new submission arrives while a batch commit is running."""
