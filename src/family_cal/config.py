"""Configuration loading for family-cal.

Reads settings from environment variables (with .env support via python-dotenv)
and validates that all required values are present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from family_cal.models.household import HouseholdContext

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        gemini_api_key: API key for Google Gemini.
        supabase_url: Base URL of the Supabase project.
        supabase_key: Supabase API key used for table writes.
        user_id: Id of the signed-in household member.
        household_id: Id of the active household, or ``None``.
        display_name: Name shown to other members in notifications.
        member_ids: Ids of every member of the active household.
        gemini_model: Gemini model identifier.
        log_level: Logging level (default ``"INFO"``).
        timezone: IANA timezone string used for naive model output.
        parse_timeout: Seconds to wait for the parsing service, or ``None``
            to wait indefinitely.
        calendar_sync: Whether created events are mirrored to Google Calendar.
        google_credentials_path: OAuth client secrets file.
        google_token_path: Cached OAuth token file.
    """

    gemini_api_key: str
    supabase_url: str
    supabase_key: str
    user_id: str
    household_id: str | None = None
    display_name: str = "User"
    member_ids: tuple[str, ...] = field(default_factory=tuple)
    gemini_model: str = "gemini-2.0-flash"
    log_level: str = "INFO"
    timezone: str = "America/Vancouver"
    parse_timeout: float | None = None
    calendar_sync: bool = False
    google_credentials_path: Path = Path("credentials.json")
    google_token_path: Path = Path("token.json")

    def __repr__(self) -> str:
        return (
            f"Settings(gemini_api_key='***', "
            f"supabase_url={self.supabase_url!r}, "
            f"supabase_key='***', "
            f"user_id={self.user_id!r}, "
            f"household_id={self.household_id!r}, "
            f"gemini_model={self.gemini_model!r}, "
            f"log_level={self.log_level!r}, "
            f"timezone={self.timezone!r}, "
            f"parse_timeout={self.parse_timeout!r}, "
            f"calendar_sync={self.calendar_sync!r})"
        )

    def household_context(self) -> HouseholdContext:
        """Build the explicit user/household value threaded into a commit."""
        return HouseholdContext(
            user_id=self.user_id,
            household_id=self.household_id,
            display_name=self.display_name,
            member_ids=self.member_ids,
        )


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any required environment variable is missing,
            empty, or whitespace-only (the message names **all** of them),
            or if an optional value cannot be interpreted.
    """
    load_dotenv()

    required = {
        "GEMINI_API_KEY": "gemini_api_key",
        "SUPABASE_URL": "supabase_url",
        "SUPABASE_KEY": "supabase_key",
        "FAMILY_USER_ID": "user_id",
    }

    values: dict[str, object] = {}
    missing: list[str] = []

    for env_var, field_name in required.items():
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            missing.append(env_var)
        else:
            values[field_name] = raw.strip()

    if missing:
        names = ", ".join(missing)
        raise ConfigError(f"Missing required environment variables: {names}")

    optional_strings = {
        "FAMILY_HOUSEHOLD_ID": "household_id",
        "FAMILY_DISPLAY_NAME": "display_name",
        "GEMINI_MODEL": "gemini_model",
        "LOG_LEVEL": "log_level",
        "TIMEZONE": "timezone",
    }
    for env_var, field_name in optional_strings.items():
        raw = _optional(env_var)
        if raw:
            values[field_name] = raw

    member_ids = _optional("FAMILY_MEMBER_IDS")
    if member_ids:
        values["member_ids"] = tuple(
            member.strip() for member in member_ids.split(",") if member.strip()
        )

    timeout = _optional("PARSE_TIMEOUT_SECONDS")
    if timeout:
        values["parse_timeout"] = _parse_timeout(timeout)

    values["calendar_sync"] = _optional("CALENDAR_SYNC").lower() in _TRUTHY

    credentials_path = _optional("GOOGLE_CREDENTIALS_PATH")
    if credentials_path:
        values["google_credentials_path"] = Path(credentials_path)
    token_path = _optional("GOOGLE_TOKEN_PATH")
    if token_path:
        values["google_token_path"] = Path(token_path)

    return Settings(**values)  # type: ignore[arg-type]


def _optional(env_var: str) -> str:
    return os.environ.get(env_var, "").strip()


def _parse_timeout(raw: str) -> float:
    try:
        seconds = float(raw)
    except ValueError as exc:
        raise ConfigError(f"PARSE_TIMEOUT_SECONDS must be a number, got {raw!r}") from exc
    if seconds <= 0:
        raise ConfigError(f"PARSE_TIMEOUT_SECONDS must be positive, got {raw!r}")
    return seconds
