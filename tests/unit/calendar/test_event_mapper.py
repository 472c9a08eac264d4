"""Tests for mapping parsed events onto device-calendar payloads."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from family_cal.calendar.event_mapper import DEFAULT_DURATION, map_to_google_event, to_device_event
from family_cal.models.calendar import DeviceCalendarEvent
from family_cal.models.extraction import ParsedEvent

TIMEZONE = "America/Vancouver"
_START = datetime(2026, 3, 10, 9, 0)


class TestToDeviceEvent:
    def test_copies_fields(self) -> None:
        event = ParsedEvent(
            title="Dentist",
            start_time=_START,
            end_time=_START + timedelta(minutes=30),
            description="Checkup",
            location="Main St",
        )

        payload = to_device_event(event)

        assert payload == DeviceCalendarEvent(
            title="Dentist",
            start_date=_START,
            end_date=_START + timedelta(minutes=30),
            description="Checkup",
            location="Main St",
            all_day=False,
        )

    def test_missing_end_defaults_to_one_hour(self) -> None:
        payload = to_device_event(ParsedEvent(title="Dentist", start_time=_START))

        assert DEFAULT_DURATION == timedelta(hours=1)
        assert payload.end_date == _START + timedelta(hours=1)

    def test_point_event_gets_default_duration(self) -> None:
        payload = to_device_event(ParsedEvent(title="Lunch", start_time=_START, end_time=_START))

        assert payload.end_date == _START + DEFAULT_DURATION
        map_to_google_event(payload, "UTC")


class TestMapToGoogleEvent:
    def test_timed_event(self) -> None:
        payload = DeviceCalendarEvent(
            title="Dentist", start_date=_START, end_date=_START + timedelta(hours=1)
        )

        body = map_to_google_event(payload, TIMEZONE)

        assert body == {
            "summary": "Dentist",
            "start": {"dateTime": "2026-03-10T09:00:00", "timeZone": TIMEZONE},
            "end": {"dateTime": "2026-03-10T10:00:00", "timeZone": TIMEZONE},
        }

    def test_optional_fields(self) -> None:
        payload = DeviceCalendarEvent(
            title="Dentist",
            start_date=_START,
            end_date=_START + timedelta(hours=1),
            description="Checkup",
            location="Main St",
        )

        body = map_to_google_event(payload, TIMEZONE)

        assert body["description"] == "Checkup"
        assert body["location"] == "Main St"

    def test_all_day_uses_dates(self) -> None:
        payload = DeviceCalendarEvent(
            title="Field trip",
            start_date=datetime(2026, 3, 10),
            end_date=datetime(2026, 3, 11),
            all_day=True,
        )

        body = map_to_google_event(payload, TIMEZONE)

        assert body["start"] == {"date": "2026-03-10"}
        assert body["end"] == {"date": "2026-03-11"}

    @pytest.mark.parametrize("delta", [timedelta(0), timedelta(hours=-1)])
    def test_empty_or_inverted_range_rejected(self, delta: timedelta) -> None:
        payload = DeviceCalendarEvent(title="Bad", start_date=_START, end_date=_START + delta)

        with pytest.raises(ValueError):
            map_to_google_event(payload, TIMEZONE)
