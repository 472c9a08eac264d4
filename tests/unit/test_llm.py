"""Unit tests for GeminiParser.

All tests use mocks -- no real Gemini API calls are made.  The tests cover
text, voice and image submissions, response normalisation (code fences,
key aliases, wrapped single events, naive times), malformed responses and
API failures.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest
from google.genai import errors as genai_errors

from family_cal.exceptions import MalformedResponseError, ParsingError
from family_cal.llm import GeminiParser
from family_cal.models.requests import ParseRequest

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_TZ = ZoneInfo("America/Vancouver")
_NOW = datetime(2026, 2, 18, 10, 0, 0, tzinfo=_TZ)


def _response_json(events: list[dict], summary: str = "One event found.", **extra: object) -> str:
    return json.dumps({"events": events, "summary": summary, **extra})


def _lunch_event() -> dict:
    return {
        "title": "Lunch with Sam",
        "description": None,
        "start_time": "2026-02-19 12:00:00",
        "end_time": "2026-02-19 13:30:00",
        "location": "Cafe Roma",
    }


def _mock_parser(response_text: str | None) -> GeminiParser:
    """Create a ``GeminiParser`` whose async ``generate_content`` returns
    *response_text*.
    """
    with patch("family_cal.llm.genai.Client"):
        parser = GeminiParser(api_key="fake-key", clock=lambda: _NOW)

    mock_response = MagicMock()
    mock_response.text = response_text
    parser._client.aio.models.generate_content = AsyncMock(return_value=mock_response)
    return parser


def _parse(parser: GeminiParser, request: ParseRequest):
    return asyncio.run(parser.parse(request))


_TEXT = ParseRequest.from_text("Lunch with Sam tomorrow at noon at Cafe Roma")


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestHappyPath:
    """Well-formed responses."""

    def test_single_text_event(self) -> None:
        parser = _mock_parser(_response_json([_lunch_event()]))

        result = _parse(parser, _TEXT)

        assert len(result.events) == 1
        event = result.events[0]
        assert event.title == "Lunch with Sam"
        assert event.start_time == datetime(2026, 2, 19, 12, 0, tzinfo=_TZ)
        assert event.end_time == datetime(2026, 2, 19, 13, 30, tzinfo=_TZ)
        assert event.location == "Cafe Roma"
        assert event.description is None
        assert result.summary == "One event found."

    def test_text_raw_user_input_is_submitted_text(self) -> None:
        parser = _mock_parser(_response_json([_lunch_event()]))

        result = _parse(parser, _TEXT)

        assert result.raw_user_input == "Lunch with Sam tomorrow at noon at Cafe Roma"

    def test_multiple_events_keep_order(self) -> None:
        second = {**_lunch_event(), "title": "Piano lesson", "start_time": "2026-02-20 16:00:00"}
        parser = _mock_parser(_response_json([_lunch_event(), second]))

        result = _parse(parser, _TEXT)

        assert [e.title for e in result.events] == ["Lunch with Sam", "Piano lesson"]

    def test_empty_events_is_not_an_error(self) -> None:
        parser = _mock_parser(_response_json([], summary="No events mentioned."))

        result = _parse(parser, _TEXT)

        assert result.is_empty
        assert result.summary == "No events mentioned."

    def test_missing_end_time_is_none(self) -> None:
        event = {**_lunch_event(), "end_time": None}
        parser = _mock_parser(_response_json([event]))

        result = _parse(parser, _TEXT)

        assert result.events[0].end_time is None

    def test_offset_times_are_kept(self) -> None:
        event = {**_lunch_event(), "start_time": "2026-02-19T12:00:00+00:00", "end_time": None}
        parser = _mock_parser(_response_json([event]))

        result = _parse(parser, _TEXT)

        assert result.events[0].start_time.utcoffset().total_seconds() == 0


class TestVoiceAndImage:
    """Media submissions."""

    def test_voice_raw_user_input_is_transcript(self) -> None:
        parser = _mock_parser(
            _response_json([_lunch_event()], transcript="  Lunch with Sam tomorrow at noon  ")
        )

        result = _parse(parser, ParseRequest.from_voice(b"RIFF....", "audio/wav"))

        assert result.raw_user_input == "Lunch with Sam tomorrow at noon"

    def test_voice_without_transcript(self) -> None:
        parser = _mock_parser(_response_json([_lunch_event()]))

        result = _parse(parser, ParseRequest.from_voice(b"RIFF....", "audio/wav"))

        assert result.raw_user_input is None

    def test_image_raw_user_input_is_none(self) -> None:
        parser = _mock_parser(_response_json([_lunch_event()], transcript="ignored"))

        result = _parse(parser, ParseRequest.from_image(b"\xff\xd8\xff", "image/jpeg"))

        assert result.raw_user_input is None

    def test_media_part_sent_before_prompt(self) -> None:
        parser = _mock_parser(_response_json([]))

        with patch("family_cal.llm.genai_types.Part.from_bytes") as from_bytes:
            from_bytes.return_value = "MEDIA"
            _parse(parser, ParseRequest.from_image(b"\xff\xd8\xff", "image/png"))

        from_bytes.assert_called_once_with(data=b"\xff\xd8\xff", mime_type="image/png")
        contents = parser._client.aio.models.generate_content.call_args.kwargs["contents"]
        assert contents[0] == "MEDIA"
        assert isinstance(contents[1], str)


class TestNormalisation:
    """Tolerated deviations from the response schema."""

    def test_code_fenced_json(self) -> None:
        raw = "```json\n" + _response_json([_lunch_event()]) + "\n```"
        parser = _mock_parser(raw)

        assert len(_parse(parser, _TEXT).events) == 1

    def test_json_surrounded_by_prose(self) -> None:
        raw = "Here you go: " + _response_json([_lunch_event()]) + " Thanks!"
        parser = _mock_parser(raw)

        assert len(_parse(parser, _TEXT).events) == 1

    def test_wrapped_single_event(self) -> None:
        parser = _mock_parser(json.dumps({"event": _lunch_event(), "summary": "One."}))

        result = _parse(parser, _TEXT)

        assert [e.title for e in result.events] == ["Lunch with Sam"]

    def test_key_aliases(self) -> None:
        event = {
            "Event_Name": "Dentist",
            "start": "2026-02-19 15:00:00",
            "end": "2026-02-19 16:00:00",
            "place": "Main St Clinic",
            "details": "Bring insurance card",
        }
        parser = _mock_parser(_response_json([event]))

        parsed = _parse(parser, _TEXT).events[0]

        assert parsed.title == "Dentist"
        assert parsed.start_time == datetime(2026, 2, 19, 15, 0, tzinfo=_TZ)
        assert parsed.location == "Main St Clinic"
        assert parsed.description == "Bring insurance card"

    def test_canonical_key_wins_over_alias(self) -> None:
        event = {**_lunch_event(), "summary": "A lunch"}
        parser = _mock_parser(_response_json([event]))

        assert _parse(parser, _TEXT).events[0].title == "Lunch with Sam"

    def test_blank_optional_strings_become_none(self) -> None:
        event = {**_lunch_event(), "location": "  ", "description": ""}
        parser = _mock_parser(_response_json([event]))

        parsed = _parse(parser, _TEXT).events[0]

        assert parsed.location is None
        assert parsed.description is None


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestMalformedResponses:
    """Unusable payloads raise MalformedResponseError (a ParsingError)."""

    @pytest.mark.parametrize("raw", ["", None, "not json at all", "[1, 2, 3]"])
    def test_unusable_payload(self, raw: str | None) -> None:
        parser = _mock_parser(raw)

        with pytest.raises(MalformedResponseError):
            _parse(parser, _TEXT)

    def test_events_not_a_list(self) -> None:
        parser = _mock_parser(json.dumps({"events": "lunch", "summary": "?"}))

        with pytest.raises(MalformedResponseError, match="not a list"):
            _parse(parser, _TEXT)

    def test_missing_start_time(self) -> None:
        event = {**_lunch_event(), "start_time": None}
        parser = _mock_parser(_response_json([event]))

        with pytest.raises(MalformedResponseError, match="Event #1"):
            _parse(parser, _TEXT)

    def test_blank_title(self) -> None:
        event = {**_lunch_event(), "title": "   "}
        parser = _mock_parser(_response_json([event]))

        with pytest.raises(MalformedResponseError):
            _parse(parser, _TEXT)

    def test_unparseable_time(self) -> None:
        event = {**_lunch_event(), "start_time": "tomorrow-ish"}
        parser = _mock_parser(_response_json([event]))

        with pytest.raises(MalformedResponseError):
            _parse(parser, _TEXT)

    def test_raw_response_is_kept(self) -> None:
        parser = _mock_parser("garbage")

        with pytest.raises(MalformedResponseError) as exc_info:
            _parse(parser, _TEXT)

        assert exc_info.value.raw_response == "garbage"

    def test_malformed_is_a_parsing_error(self) -> None:
        assert issubclass(MalformedResponseError, ParsingError)


class TestApiIntegration:
    """How the SDK is called."""

    def test_api_error_becomes_parsing_error(self) -> None:
        parser = _mock_parser("")
        parser._client.aio.models.generate_content = AsyncMock(
            side_effect=genai_errors.APIError(code=503, response_json={"error": "Service unavailable"})
        )

        with pytest.raises(ParsingError, match="Gemini API call failed"):
            _parse(parser, _TEXT)

    def test_transport_error_becomes_parsing_error(self) -> None:
        parser = _mock_parser("")
        parser._client.aio.models.generate_content = AsyncMock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(ParsingError, match="connection refused") as exc_info:
            _parse(parser, _TEXT)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_single_call_no_retry(self) -> None:
        parser = _mock_parser("garbage")

        with pytest.raises(MalformedResponseError):
            _parse(parser, _TEXT)

        assert parser._client.aio.models.generate_content.await_count == 1

    def test_call_uses_model_and_structured_config(self) -> None:
        parser = _mock_parser(_response_json([]))

        _parse(parser, _TEXT)

        kwargs = parser._client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        config = kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.response_schema is not None
        assert "2026-02-18 10:00:00" in config.system_instruction
        assert "America/Vancouver" in config.system_instruction

    def test_text_is_sent_inline(self) -> None:
        parser = _mock_parser(_response_json([]))

        _parse(parser, _TEXT)

        contents = parser._client.aio.models.generate_content.call_args.kwargs["contents"]
        assert len(contents) == 1
        assert "Lunch with Sam tomorrow at noon" in contents[0]

    def test_client_created_with_api_key(self) -> None:
        with patch("family_cal.llm.genai.Client") as client_cls:
            GeminiParser(api_key="secret-key")

        client_cls.assert_called_once_with(api_key="secret-key")
