"""Tests for Google Calendar OAuth 2.0 credentials.

Covers :func:`load_calendar_credentials` (never prompts; ``None`` when
access has not been granted) and :func:`get_calendar_credentials` (falls
back to the browser flow).
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, create_autospec, patch

import pytest
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from family_cal.calendar.auth import SCOPES, get_calendar_credentials, load_calendar_credentials
from family_cal.calendar.exceptions import CalendarAuthError


class TestLoadCalendarCredentials:
    """Non-interactive loading."""

    def test_no_token_returns_none(self, tmp_token_file: Path) -> None:
        assert load_calendar_credentials(tmp_token_file) is None

    def test_valid_cached_token(self, tmp_token_file: Path, mock_credentials: MagicMock) -> None:
        with patch(
            "family_cal.calendar.auth._load_cached_token", return_value=mock_credentials
        ) as mock_load:
            result = load_calendar_credentials(tmp_token_file)

        mock_load.assert_called_once_with(tmp_token_file)
        assert result is mock_credentials

    def test_expired_token_is_refreshed_and_saved(
        self, tmp_token_file: Path, mock_expired_credentials: MagicMock
    ) -> None:
        with patch(
            "family_cal.calendar.auth._load_cached_token", return_value=mock_expired_credentials
        ):
            result = load_calendar_credentials(tmp_token_file)

        mock_expired_credentials.refresh.assert_called_once()
        assert result is mock_expired_credentials
        assert tmp_token_file.read_text() == '{"token": "refreshed"}'

    def test_refresh_failure_returns_none(
        self, tmp_token_file: Path, mock_expired_credentials: MagicMock
    ) -> None:
        mock_expired_credentials.refresh.side_effect = RefreshError("revoked")

        with patch(
            "family_cal.calendar.auth._load_cached_token", return_value=mock_expired_credentials
        ):
            assert load_calendar_credentials(tmp_token_file) is None

    def test_corrupt_token_returns_none(self, tmp_token_file: Path) -> None:
        tmp_token_file.write_text("not json")

        assert load_calendar_credentials(tmp_token_file) is None

    def test_accepts_string_path(self, tmp_path: Path) -> None:
        assert load_calendar_credentials(str(tmp_path / "token.json")) is None


class TestGetCalendarCredentials:
    """Interactive flow."""

    def test_usable_token_skips_flow(
        self, tmp_credentials_file: Path, tmp_token_file: Path, mock_credentials: MagicMock
    ) -> None:
        with (
            patch("family_cal.calendar.auth._load_cached_token", return_value=mock_credentials),
            patch("family_cal.calendar.auth.InstalledAppFlow") as mock_flow,
        ):
            result = get_calendar_credentials(tmp_credentials_file, tmp_token_file)

        mock_flow.from_client_secrets_file.assert_not_called()
        assert result is mock_credentials

    def test_no_token_launches_browser_flow(
        self, tmp_credentials_file: Path, tmp_token_file: Path
    ) -> None:
        new_creds = create_autospec(Credentials, instance=True)
        new_creds.to_json.return_value = '{"token": "new"}'

        with patch("family_cal.calendar.auth.InstalledAppFlow") as mock_flow:
            mock_flow.from_client_secrets_file.return_value.run_local_server.return_value = new_creds
            result = get_calendar_credentials(tmp_credentials_file, tmp_token_file)

        mock_flow.from_client_secrets_file.assert_called_once_with(
            str(tmp_credentials_file), scopes=SCOPES
        )
        assert result is new_creds
        assert tmp_token_file.read_text() == '{"token": "new"}'

    def test_missing_client_secrets_raises(self, tmp_path: Path, tmp_token_file: Path) -> None:
        with pytest.raises(CalendarAuthError, match="not found"):
            get_calendar_credentials(tmp_path / "missing.json", tmp_token_file)

    def test_calendar_scope(self) -> None:
        assert SCOPES == ["https://www.googleapis.com/auth/calendar"]
