"""Pydantic models for parsed calendar input.

- :class:`ParsedEvent` -- one candidate event with absolute datetimes.
- :class:`ParseResult` -- everything the parsing service understood from
  one submission.
- :class:`LLMResponseSchema` -- schema for Gemini's ``response_schema``
  parameter (datetimes as strings, converted by the parser).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# ParsedEvent / ParseResult
# ---------------------------------------------------------------------------


class ParsedEvent(BaseModel):
    """A single calendar-event candidate extracted from user input.

    ``end_time`` may be ``None`` (a point event) and is *not* checked
    against ``start_time`` here; the event store rejects inverted ranges
    at persistence time.

    Attributes:
        title: Event title, stripped and non-empty.
        description: Longer description, or ``None``.
        start_time: Absolute start instant.
        end_time: Absolute end instant, or ``None``.
        location: Free-text location, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    location: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    @field_validator("description", "location")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class ParseResult(BaseModel):
    """Output of the parsing service for one submission.

    Attributes:
        events: Candidate events in the order the service returned them.
            An empty list means nothing was recognised; it is not an error.
        summary: Human-readable gloss shown before the user confirms.
        raw_user_input: The submitted text, or the transcript of a voice
            note.  ``None`` for images.
    """

    model_config = ConfigDict(frozen=True)

    events: list[ParsedEvent] = Field(default_factory=list)
    summary: str | None = None
    raw_user_input: str | None = None

    @property
    def is_empty(self) -> bool:
        """Whether the service recognised no events at all."""
        return not self.events


# ---------------------------------------------------------------------------
# LLMResponseSchema -- schema for Gemini response_schema
# ---------------------------------------------------------------------------


class LLMResponseEvent(BaseModel):
    """Single-event schema for Gemini's ``response_schema`` parameter.

    Times are ``"YYYY-MM-DD HH:MM:SS"`` strings in the household timezone.
    """

    title: str
    description: str | None = None
    start_time: str
    end_time: str | None = None
    location: str | None = None


class LLMResponseSchema(BaseModel):
    """Top-level schema passed to Gemini's ``response_schema`` parameter.

    Attributes:
        events: Event objects, empty when nothing was found.
        summary: Short summary of what was understood.
        transcript: Verbatim transcript for audio input, else ``None``.
    """

    events: list[LLMResponseEvent]
    summary: str
    transcript: str | None = None
