"""Explicit user and household identity for a pipeline commit."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HouseholdContext:
    """Who is creating events, and which household they are shared with.

    Passed into every commit instead of being read from ambient state.

    Attributes:
        user_id: Id of the member creating the events.
        household_id: Id of the active household, or ``None`` when the
            member has no household selected.  Without one, events are
            private and no notifications go out.
        display_name: Name used in notification messages.
        member_ids: Every member of the household, possibly including the
            creator.  Filtering is up to the notifier.
    """

    user_id: str
    household_id: str | None = None
    display_name: str = "User"
    member_ids: tuple[str, ...] = field(default_factory=tuple)
