"""User-facing wording for pipeline progress and outcomes.

Every pipeline run ends in exactly one :class:`Notice`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from family_cal.models.batch import BatchResult
from family_cal.models.requests import InputKind

NoticeLevel = Literal["success", "partial", "info", "error"]

_LOADING_LABELS: dict[str, str] = {
    "text": "Analyzing text...",
    "voice": "Processing voice note...",
    "image": "Analyzing image...",
}

_PARSE_FAILURES: dict[str, str] = {
    "text": "Text processing failed. Please try again.",
    "voice": "Voice processing failed. Please try again.",
    "image": "Image processing failed. Please try again.",
}


@dataclass(frozen=True)
class Notice:
    """A modal/alert message: a level, a title and a body."""

    level: NoticeLevel
    title: str
    body: str


def loading_label(kind: InputKind) -> str:
    return _LOADING_LABELS[kind]


def creating_label(count: int) -> str:
    return f"Creating {count} {_events(count)}..."


def parse_failure_notice(kind: InputKind) -> Notice:
    return Notice(level="error", title="Error", body=_PARSE_FAILURES[kind])


def nothing_recognized_notice() -> Notice:
    return Notice(
        level="info",
        title="Nothing recognized",
        body="No event information could be found. Try adding a date, a time or a place.",
    )


def batch_notice(result: BatchResult) -> Notice:
    """Pick the single outcome notice for a committed batch.

    All created, some created, or none created; each has distinct wording.
    """
    n, m = result.attempted, result.succeeded

    if result.is_empty:
        return Notice(level="info", title="Nothing to create", body="There were no events to create.")

    if result.all_succeeded:
        if n == 1:
            title = result.outcomes[0].event.title if result.outcomes else "Event"
            return Notice(level="success", title="Event created", body=f'"{title}" was added to the calendar.')
        return Notice(level="success", title="Events created", body=f"All {n} events were created.")

    if result.all_failed:
        return Notice(level="error", title="Event creation failed", body=f"0 of {n} {_events(n)} created.")

    return Notice(level="partial", title="Some events not created", body=f"{m} of {n} {_events(n)} created.")


def _events(count: int) -> str:
    return "event" if count == 1 else "events"
