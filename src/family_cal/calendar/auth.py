"""OAuth 2.0 credentials for the Google Calendar mirror.

Two entry points:

- :func:`load_calendar_credentials` never prompts.  It returns cached (or
  refreshed) credentials, or ``None`` when calendar access has not been
  granted; the pipeline then skips calendar sync.
- :func:`get_calendar_credentials` runs the browser consent flow when no
  usable token exists.  The CLI calls it for ``--authorize-calendar``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from family_cal.calendar.exceptions import CalendarAuthError

logger = logging.getLogger(__name__)

SCOPES: list[str] = ["https://www.googleapis.com/auth/calendar"]
"""Scopes needed to create a calendar and insert events into it."""


def load_calendar_credentials(token_path: Path | str) -> Credentials | None:
    """Return usable credentials from the token cache, without prompting.

    An expired token with a refresh token is refreshed and saved back.

    Args:
        token_path: Path of the cached ``token.json``.

    Returns:
        Valid :class:`Credentials`, or ``None`` if there is no token, it
        cannot be parsed, or it cannot be refreshed.
    """
    token_path = Path(token_path)
    creds = _load_cached_token(token_path)
    if creds is None:
        return None
    if creds.valid:
        return creds
    if creds.expired and creds.refresh_token and _refresh(creds):
        _save_token(creds, token_path)
        return creds
    logger.info("Calendar token at %s is not usable; calendar sync disabled", token_path)
    return None


def get_calendar_credentials(
    credentials_path: Path | str,
    token_path: Path | str,
) -> Credentials:
    """Return valid credentials, running the browser flow if needed.

    Args:
        credentials_path: OAuth client secrets file from Google Cloud Console.
        token_path: Where the user token is cached.

    Returns:
        Valid :class:`Credentials` with the calendar scope.

    Raises:
        CalendarAuthError: If the client secrets file does not exist.
    """
    token_path = Path(token_path)
    creds = load_calendar_credentials(token_path)
    if creds is not None:
        return creds

    credentials_path = Path(credentials_path)
    if not credentials_path.exists():
        msg = f"OAuth client secrets file not found: {credentials_path}"
        logger.error(msg)
        raise CalendarAuthError(msg)

    logger.info("Starting browser-based OAuth flow")
    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes=SCOPES)
    creds = flow.run_local_server(port=0)
    _save_token(creds, token_path)
    return creds


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_cached_token(token_path: Path) -> Credentials | None:
    if not token_path.exists():
        logger.info("No cached calendar token at %s", token_path)
        return None
    try:
        return Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except (json.JSONDecodeError, ValueError, KeyError) as exc:
        logger.warning("Failed to parse cached token at %s: %s", token_path, exc)
        return None


def _refresh(creds: Credentials) -> bool:
    try:
        creds.refresh(Request())
    except GoogleAuthError as exc:
        logger.warning("Calendar token refresh failed: %s", exc)
        return False
    logger.info("Calendar token refreshed")
    return True


def _save_token(creds: Credentials, token_path: Path) -> None:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    logger.info("Calendar token saved to %s", token_path)
