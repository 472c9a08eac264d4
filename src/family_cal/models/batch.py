"""Result models for batch event creation.

- :class:`CreationOutcome` -- what happened to one parsed event.
- :class:`BatchResult` -- aggregate counts for one confirmed commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from family_cal.models.extraction import ParsedEvent


@dataclass(frozen=True)
class CreationOutcome:
    """Result of attempting to persist a single parsed event.

    Exactly one of ``created_id`` and ``failure_reason`` is set.

    Attributes:
        event: The event that was attempted.
        created_id: Store identifier of the new event on success.
        failure_reason: Human-readable error message on failure.
    """

    event: ParsedEvent
    created_id: str | None = None
    failure_reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.created_id is not None


@dataclass
class BatchResult:
    """Aggregated result of committing a batch of parsed events.

    ``attempted == 0`` means there was nothing to create, which is
    distinct from ``attempted > 0`` with ``succeeded == 0`` (every
    creation failed).

    Attributes:
        attempted: Number of events a creation was attempted for.
        succeeded: Number of events that were persisted.
        created_ids: Identifiers of persisted events, in input order.
        outcomes: One :class:`CreationOutcome` per attempted event, in
            input order.
    """

    attempted: int = 0
    succeeded: int = 0
    created_ids: list[str] = field(default_factory=list)
    outcomes: list[CreationOutcome] = field(default_factory=list)

    @property
    def failed(self) -> int:
        """Number of events whose creation failed."""
        return self.attempted - self.succeeded

    @property
    def is_empty(self) -> bool:
        """Whether there was nothing to create."""
        return self.attempted == 0

    @property
    def all_succeeded(self) -> bool:
        return self.attempted > 0 and self.succeeded == self.attempted

    @property
    def all_failed(self) -> bool:
        return self.attempted > 0 and self.succeeded == 0

    @property
    def failures(self) -> list[CreationOutcome]:
        """Outcomes of the events that could not be created."""
        return [outcome for outcome in self.outcomes if not outcome.succeeded]
