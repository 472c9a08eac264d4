"""Entry point for ``python -m family_cal``.

Provides a CLI that submits one piece of input (text, a voice recording
or a photo) to the pipeline, shows what was understood, asks for
confirmation and creates the events.  Uses stdlib :mod:`argparse` for
argument parsing.

Subcommands:
    text  -- Parse a sentence such as "Dentist tomorrow at 3pm".
    voice -- Parse an audio recording.
    image -- Parse a photo of a flyer, invitation or schedule.

Exit codes:
    0 -- The run completed (including nothing recognized or cancelled).
    1 -- An error occurred (config error, unreadable file, bad Supabase
         settings, parse failure).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

from supabase import ASupabaseException, AsyncClient, acreate_client

from family_cal.calendar import (
    CalendarSyncAdapter,
    GoogleCalendarClient,
    get_calendar_credentials,
    load_calendar_credentials,
)
from family_cal.calendar.exceptions import CalendarAPIError
from family_cal.config import ConfigError, Settings, load_settings
from family_cal.exceptions import InvalidInputError
from family_cal.llm import GeminiParser
from family_cal.log import setup_logging
from family_cal.models.requests import DEFAULT_AUDIO_MIME, DEFAULT_IMAGE_MIME, ParseRequest
from family_cal.notifications import Notifier, NullNotifier, SupabaseNotifier
from family_cal.pipeline import AwaitingConfirmation, Failed, PipelineOrchestrator
from family_cal.render import print_state
from family_cal.store import SupabaseEventStore


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands.

    Returns:
        Configured :class:`argparse.ArgumentParser` with ``text``,
        ``voice`` and ``image`` subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="family-cal",
        description="Turn text, voice notes and photos into family calendar events.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    text_parser = subparsers.add_parser("text", help="Parse a piece of text.")
    text_parser.add_argument("text", type=str, help="The text to parse (quote it).")

    voice_parser = subparsers.add_parser("voice", help="Parse an audio recording.")
    voice_parser.add_argument("path", type=str, help="Path to the audio file.")

    image_parser = subparsers.add_parser("image", help="Parse a photo.")
    image_parser.add_argument("path", type=str, help="Path to the image file.")

    for sub in (voice_parser, image_parser):
        sub.add_argument(
            "--mime-type",
            type=str,
            default=None,
            help="MIME type of the file (guessed from the extension by default).",
        )

    for sub in (text_parser, voice_parser, image_parser):
        sub.add_argument(
            "-y",
            "--yes",
            action="store_true",
            default=False,
            help="Create the events without asking for confirmation.",
        )
        sub.add_argument(
            "--authorize-calendar",
            action="store_true",
            default=False,
            help="Run the Google Calendar authorization flow before syncing.",
        )
        sub.add_argument(
            "--no-notify",
            action="store_true",
            default=False,
            help="Do not notify the rest of the household.",
        )
        sub.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            default=False,
            help="Enable debug-level logging.",
        )

    return parser


def _build_request(args: argparse.Namespace) -> ParseRequest:
    """Turn parsed arguments into a :class:`ParseRequest`.

    Raises:
        OSError: If the input file cannot be read.
        InvalidInputError: If the input is empty.
    """
    if args.command == "text":
        return ParseRequest.from_text(args.text)

    path = Path(args.path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    data = path.read_bytes()

    default = DEFAULT_AUDIO_MIME if args.command == "voice" else DEFAULT_IMAGE_MIME
    mime_type = args.mime_type or mimetypes.guess_type(path.name)[0] or default

    if args.command == "voice":
        return ParseRequest.from_voice(data, mime_type)
    return ParseRequest.from_image(data, mime_type)


def _build_calendar_sync(settings: Settings, authorize: bool) -> CalendarSyncAdapter | None:
    """Set up device-calendar sync, or ``None`` when it is switched off.

    Without a usable token (and without ``authorize``) the adapter is
    created with no calendar, so every sync is skipped.

    Raises:
        CalendarAuthError: If ``authorize`` is set but the OAuth client
            secrets file is missing.
    """
    if not (settings.calendar_sync or authorize):
        return None

    if authorize:
        creds = get_calendar_credentials(
            settings.google_credentials_path, settings.google_token_path
        )
    else:
        creds = load_calendar_credentials(settings.google_token_path)

    if creds is None:
        return CalendarSyncAdapter(None)
    return CalendarSyncAdapter(GoogleCalendarClient(creds, settings.timezone))


def _ask_confirmation() -> bool:
    try:
        answer = input("Create these events? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


async def _run(
    request: ParseRequest,
    settings: Settings,
    calendar_sync: CalendarSyncAdapter | None,
    auto_confirm: bool,
    notify: bool = True,
) -> int:
    """Submit *request*, confirm, and create events.

    The Supabase connection is closed before returning.

    Returns:
        Exit code: ``1`` if parsing failed, otherwise ``0``.

    Raises:
        ASupabaseException: If the Supabase URL or key is unusable.
    """
    supabase = await acreate_client(settings.supabase_url, settings.supabase_key)
    try:
        notifier: Notifier = (
            SupabaseNotifier(supabase, sender_id=settings.user_id) if notify else NullNotifier()
        )
        return await _run_pipeline(request, settings, supabase, calendar_sync, notifier, auto_confirm)
    finally:
        await supabase.postgrest.aclose()


async def _run_pipeline(
    request: ParseRequest,
    settings: Settings,
    supabase: AsyncClient,
    calendar_sync: CalendarSyncAdapter | None,
    notifier: Notifier,
    auto_confirm: bool,
) -> int:
    orchestrator = PipelineOrchestrator(
        GeminiParser(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timezone=settings.timezone,
        ),
        SupabaseEventStore(supabase),
        calendar_sync=calendar_sync,
        notifier=notifier,
        parse_timeout=settings.parse_timeout,
    )

    state = await orchestrator.submit(request)
    print_state(state)

    if isinstance(state, Failed):
        return 1
    if not isinstance(state, AwaitingConfirmation):
        return 0

    if not (auto_confirm or _ask_confirmation()):
        orchestrator.cancel()
        print("Cancelled; no events were created.")
        return 0

    await orchestrator.confirm(settings.household_context())
    print_state(orchestrator.state)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the family-cal CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``
            when ``None`` (the normal case).

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    # --- Load configuration -------------------------------------------
    try:
        settings = load_settings()
    except ConfigError as exc:
        setup_logging("DEBUG" if args.verbose else "INFO")
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Configure logging --------------------------------------------
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    # --- Read input -----------------------------------------------------
    try:
        request = _build_request(args)
    except (OSError, InvalidInputError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Calendar access ----------------------------------------------
    try:
        calendar_sync = _build_calendar_sync(settings, args.authorize_calendar)
    except CalendarAPIError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Run pipeline -------------------------------------------------
    try:
        return asyncio.run(_run(request, settings, calendar_sync, args.yes, not args.no_notify))
    except ASupabaseException as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
