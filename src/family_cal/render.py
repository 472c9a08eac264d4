"""Console rendering of pipeline states.

The terminal is one possible UI for the orchestrator: it only ever reads
the current :data:`~family_cal.pipeline.PipelineState` and turns it into
text.  :func:`format_pending` draws the confirmation preview and
:func:`format_notice` the final outcome message.
"""

from __future__ import annotations

import sys
from datetime import datetime

from family_cal.gate import PendingConfirmation
from family_cal.models.batch import BatchResult
from family_cal.notices import Notice
from family_cal.pipeline import (
    AwaitingConfirmation,
    Completed,
    Failed,
    NothingRecognized,
    PipelineState,
    Processing,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH

_LEVEL_TAGS = {
    "success": "OK",
    "partial": "PARTIAL",
    "info": "INFO",
    "error": "ERROR",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_state(state: PipelineState) -> str:
    """Render any pipeline state as console text.

    ``Idle`` renders as an empty string.
    """
    if isinstance(state, Processing):
        return f"... {state.label}"
    if isinstance(state, AwaitingConfirmation):
        return format_pending(state.pending)
    if isinstance(state, Completed):
        return format_notice(state.notice, state.result)
    if isinstance(state, (NothingRecognized, Failed)):
        return format_notice(state.notice)
    return ""


def format_pending(pending: PendingConfirmation) -> str:
    """Render a pending confirmation: summary, then one block per event.

    Args:
        pending: The confirmation awaiting the user's decision.

    Returns:
        A multi-line string ready for console display.
    """
    lines: list[str] = [_SEPARATOR, "  FAMILY CALENDAR", _SEPARATOR]

    if pending.raw_user_input:
        lines.append(f"  You said: {pending.raw_user_input}")
    if pending.summary:
        lines.append(f"  {pending.summary}")

    lines.append("")
    lines.append(f"  Found {len(pending.events)} event(s)")

    for idx, event in enumerate(pending.events, start=1):
        lines.append("")
        lines.append(f"  Event {idx}: {event.title}")
        lines.append(f"    When: {_format_event_time(event.start_time, event.end_time)}")
        if event.location:
            lines.append(f"    Where: {event.location}")
        if event.description:
            lines.append(f"    Notes: {event.description}")

    lines.append(_SEPARATOR)
    return "\n".join(lines)


def format_notice(notice: Notice, result: BatchResult | None = None) -> str:
    """Render an outcome notice, plus per-event failures when given a batch."""
    tag = _LEVEL_TAGS.get(notice.level, notice.level.upper())
    lines = [f"[{tag}] {notice.title}", f"  {notice.body}"]

    if result is not None:
        for failure in result.failures:
            lines.append(f'  [FAILED] "{failure.event.title}" -> Error: {failure.failure_reason}')

    return "\n".join(lines)


def print_state(state: PipelineState) -> None:
    """Format and print *state* to stdout, skipping empty renders."""
    text = format_state(state)
    if text:
        sys.stdout.write(text + "\n")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _format_event_time(start: datetime, end: datetime | None) -> str:
    """Format an event's time range for display.

    Same-day ranges show only the time for the end.
    """
    start_str = start.strftime("%A %Y-%m-%d, %I:%M %p")
    if end is None:
        return start_str
    if end.date() == start.date():
        return f"{start_str} - {end.strftime('%I:%M %p')}"
    return f"{start_str} - {end.strftime('%A %Y-%m-%d, %I:%M %p')}"
