"""Data models for family-cal."""

from __future__ import annotations

from family_cal.models.batch import BatchResult, CreationOutcome
from family_cal.models.calendar import DeviceCalendarEvent
from family_cal.models.extraction import (
    LLMResponseEvent,
    LLMResponseSchema,
    ParsedEvent,
    ParseResult,
)
from family_cal.models.household import HouseholdContext
from family_cal.models.requests import ParseRequest

__all__ = [
    "BatchResult",
    "CreationOutcome",
    "DeviceCalendarEvent",
    "HouseholdContext",
    "LLMResponseEvent",
    "LLMResponseSchema",
    "ParseRequest",
    "ParseResult",
    "ParsedEvent",
]
