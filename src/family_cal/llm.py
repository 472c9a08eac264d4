"""Gemini client that parses user input into calendar events.

Wraps the Google ``google-genai`` SDK.  One submission (text, voice note
or photo) becomes exactly one asynchronous ``generate_content`` call with
structured JSON output; the response is normalised into a
:class:`~family_cal.models.extraction.ParseResult`.  There is no retry:
API failures and unusable responses both raise
:class:`~family_cal.exceptions.ParsingError` to the caller.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic import ValidationError

from family_cal.exceptions import MalformedResponseError, ParsingError
from family_cal.models.extraction import LLMResponseSchema, ParsedEvent, ParseResult
from family_cal.models.requests import ParseRequest
from family_cal.prompts import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)

# Field names models sometimes use instead of the schema's.
_KEY_ALIASES: dict[str, str] = {
    "event": "title",
    "event_name": "title",
    "name": "title",
    "summary": "title",
    "starttime": "start_time",
    "start": "start_time",
    "endtime": "end_time",
    "end": "end_time",
    "desc": "description",
    "details": "description",
    "place": "location",
}


class GeminiParser:
    """Parsing adapter backed by Google Gemini.

    Args:
        api_key: Google Gemini API key.
        model: Model identifier.  Defaults to ``"gemini-2.0-flash"``.
        timezone: IANA timezone applied to the naive times the model
            returns, and used to tell the model what "now" is.
        clock: Returns the current time; override in tests.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timezone: str = "America/Vancouver",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._timezone = timezone
        self._tz = ZoneInfo(timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def parse(self, request: ParseRequest) -> ParseResult:
        """Turn one submission into a :class:`ParseResult`.

        Args:
            request: A validated text, voice or image submission.

        Returns:
            The parsed events (possibly none) plus a summary.

        Raises:
            ParsingError: If the Gemini API call fails.
            MalformedResponseError: If the response is not usable JSON or
                an event lacks a title or a parseable start time.
        """
        now = self._clock()
        config = genai_types.GenerateContentConfig(
            system_instruction=build_system_prompt(now, self._timezone),
            response_mime_type="application/json",
            response_schema=LLMResponseSchema,
        )
        contents = self._build_contents(request)

        logger.debug("Parsing %s input with model %s", request.kind, self._model)

        raw_text = await self._call_api(contents, config)
        logger.debug("Raw parser response:\n%s", raw_text)

        result = self._parse_response(raw_text, request)
        self._log_result(request, result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_contents(self, request: ParseRequest) -> list:
        prompt = build_user_prompt(request.kind, request.text)
        if request.kind == "text":
            return [prompt]
        media = genai_types.Part.from_bytes(data=request.data, mime_type=request.mime_type)
        return [media, prompt]

    async def _call_api(
        self,
        contents: list,
        config: genai_types.GenerateContentConfig,
    ) -> str:
        """Call the Gemini API once and return the raw response text.

        Raises:
            ParsingError: On API-level failures (auth, quota, server errors)
                and transport failures (connection refused, timeouts).
        """
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            logger.error("Gemini API error: %s", exc)
            raise ParsingError(f"Gemini API call failed: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("Could not reach Gemini: %s", exc)
            raise ParsingError(f"Could not reach the parsing service: {exc}") from exc

        return response.text or ""

    def _parse_response(self, raw_text: str, request: ParseRequest) -> ParseResult:
        """Parse raw response text into a :class:`ParseResult`.

        Raises:
            MalformedResponseError: If the payload cannot be used.
        """
        data = _load_json_object(raw_text)

        # Some answers wrap a single event as {"event": {...}}.
        if isinstance(data.get("event"), dict) and "events" not in data:
            data["events"] = [data.pop("event")]

        events_raw = data.get("events") or []
        if not isinstance(events_raw, list):
            raise MalformedResponseError("'events' is not a list", raw_response=raw_text)

        events: list[ParsedEvent] = []
        for index, event_raw in enumerate(events_raw):
            if not isinstance(event_raw, dict):
                raise MalformedResponseError(
                    f"Event #{index + 1} is not an object", raw_response=raw_text
                )
            try:
                events.append(self._convert_event(event_raw))
            except (ValidationError, ValueError, TypeError) as exc:
                raise MalformedResponseError(
                    f"Event #{index + 1} is invalid: {exc}", raw_response=raw_text
                ) from exc

        summary = data.get("summary")
        return ParseResult(
            events=events,
            summary=summary.strip() if isinstance(summary, str) and summary.strip() else None,
            raw_user_input=self._raw_user_input(request, data),
        )

    def _convert_event(self, event_data: dict) -> ParsedEvent:
        """Normalise key aliases and times, then validate one event."""
        lowered = {key.lower(): value for key, value in event_data.items()}
        # Canonical keys win over aliases.
        normalized = {k: v for k, v in lowered.items() if k not in _KEY_ALIASES}
        for alias, canonical in _KEY_ALIASES.items():
            if alias in lowered:
                normalized.setdefault(canonical, lowered[alias])

        start_raw = normalized.get("start_time")
        if not start_raw:
            raise ValueError("missing start_time")

        return ParsedEvent(
            title=normalized.get("title") or "",
            description=normalized.get("description"),
            start_time=self._parse_time(start_raw),
            end_time=self._parse_time(normalized["end_time"]) if normalized.get("end_time") else None,
            location=normalized.get("location"),
        )

    def _parse_time(self, value: object) -> datetime:
        """Parse ``YYYY-MM-DD HH:MM:SS`` or ISO 8601 into an aware datetime."""
        if not isinstance(value, str):
            raise TypeError(f"time must be a string, got {type(value).__name__}")
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self._tz)
        return parsed

    @staticmethod
    def _raw_user_input(request: ParseRequest, data: dict) -> str | None:
        if request.kind == "text":
            return request.text
        if request.kind == "voice":
            transcript = data.get("transcript")
            if isinstance(transcript, str) and transcript.strip():
                return transcript.strip()
        return None

    @staticmethod
    def _log_result(request: ParseRequest, result: ParseResult) -> None:
        for event in result.events:
            logger.info(
                "Parsed event: '%s' | start=%s | end=%s",
                event.title,
                event.start_time.isoformat(),
                event.end_time.isoformat() if event.end_time else "-",
            )
        logger.info(
            "Parsed %d event(s) from %s input. Summary: %s",
            len(result.events),
            request.kind,
            result.summary or "-",
        )


def _load_json_object(raw_text: str) -> dict:
    """Extract and decode the JSON object in a model response.

    Accepts bare JSON, JSON inside a Markdown code fence, or JSON surrounded
    by stray prose.

    Raises:
        MalformedResponseError: If no JSON object can be decoded.
    """
    if not raw_text or not raw_text.strip():
        raise MalformedResponseError("Empty response from parsing service", raw_response=raw_text or "")

    fenced = _FENCED_JSON.search(raw_text)
    candidate = fenced.group(1) if fenced else raw_text.strip()
    if not fenced and not candidate.startswith("{"):
        start, end = candidate.find("{"), candidate.rfind("}")
        if start != -1 and end > start:
            candidate = candidate[start : end + 1]

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Invalid JSON: {exc}", raw_response=raw_text) from exc

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_response=raw_text
        )
    return data
