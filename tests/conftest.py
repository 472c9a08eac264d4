"""Shared fixtures for family-cal tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

from family_cal.models.household import HouseholdContext

_ALL_ENV_VARS = (
    "GEMINI_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "FAMILY_USER_ID",
    "FAMILY_HOUSEHOLD_ID",
    "FAMILY_DISPLAY_NAME",
    "FAMILY_MEMBER_IDS",
    "GEMINI_MODEL",
    "LOG_LEVEL",
    "TIMEZONE",
    "PARSE_TIMEOUT_SECONDS",
    "CALENDAR_SYNC",
    "GOOGLE_CREDENTIALS_PATH",
    "GOOGLE_TOKEN_PATH",
)


@pytest.fixture()
def monkeypatch_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set all required environment variables to valid defaults.

    Optional variables are removed, and ``load_dotenv`` is patched so that
    a real ``.env`` file on disk does not override the test values.

    Returns the dict of variables so tests can inspect or override values.
    """
    monkeypatch.setattr("family_cal.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ALL_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    env_vars = {
        "GEMINI_API_KEY": "test-gemini-key-12345",
        "SUPABASE_URL": "https://example.supabase.co",
        "SUPABASE_KEY": "test-supabase-key",
        "FAMILY_USER_ID": "user-1",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all family-cal-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("family_cal.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ALL_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def household() -> HouseholdContext:
    """A signed-in user with an active three-member household."""
    return HouseholdContext(
        user_id="user-1",
        household_id="house-1",
        display_name="Alice",
        member_ids=("user-1", "user-2", "user-3"),
    )


@pytest.fixture()
def solo_user() -> HouseholdContext:
    """A signed-in user with no active household."""
    return HouseholdContext(user_id="user-1")


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
