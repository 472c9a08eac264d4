"""family-cal: AI-assisted family calendar input.

Turns free-form text, voice notes and photos into structured calendar
events, holds them for the user's confirmation, and creates them for the
household.
"""

from __future__ import annotations

from family_cal.batch import create_events
from family_cal.exceptions import (
    EventCreationError,
    InvalidInputError,
    MalformedResponseError,
    NothingPendingError,
    ParsingError,
    PipelineBusyError,
)
from family_cal.gate import ConfirmationGate, PendingConfirmation
from family_cal.models import (
    BatchResult,
    CreationOutcome,
    HouseholdContext,
    ParsedEvent,
    ParseRequest,
    ParseResult,
)
from family_cal.pipeline import PipelineOrchestrator

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "ConfirmationGate",
    "CreationOutcome",
    "EventCreationError",
    "HouseholdContext",
    "InvalidInputError",
    "MalformedResponseError",
    "NothingPendingError",
    "ParseRequest",
    "ParseResult",
    "ParsedEvent",
    "ParsingError",
    "PendingConfirmation",
    "PipelineBusyError",
    "PipelineOrchestrator",
    "create_events",
]
