"""Prompt builders for the Gemini event-parsing call.

The system prompt carries the current date and timezone so the model can
resolve relative references ("tomorrow noon", "next Friday").  The user
prompt depends on the input modality: text is sent inline, while voice
notes and photos are sent as media parts next to a short instruction.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from family_cal.models.requests import InputKind

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_system_prompt(current_datetime: datetime, timezone: str) -> str:
    """Build the system prompt for the parsing call.

    Args:
        current_datetime: "Now" in the household timezone.
        timezone: IANA timezone name the returned times are expressed in.

    Returns:
        The complete system prompt string.
    """
    today = current_datetime.strftime("%Y-%m-%d")
    tomorrow = (current_datetime + timedelta(days=1)).strftime("%Y-%m-%d")
    weekday = current_datetime.strftime("%A")

    return f"""\
You are a family calendar assistant. Read the user's input and extract every
calendar event it describes, returning structured JSON.

## Current Date and Time

The current date and time is {current_datetime.strftime(TIME_FORMAT)} ({weekday}),
timezone {timezone}. Today is {today}; tomorrow is {tomorrow}.
Resolve every relative time reference against this moment.

## Output Rules

1. Return one object per event in the "events" array, in the order the
   events appear in the input. If the input describes several events,
   return all of them.
2. "start_time" and "end_time" use the format YYYY-MM-DD HH:MM:SS, local to
   {timezone}. Never include a UTC offset.
3. If only a time is given, assume today ({today}) unless that time has
   already passed, in which case assume tomorrow.
4. If only a day is given, start at 09:00.
5. If no end time is stated, estimate one from the kind of event (a meeting
   lasts about 1 hour, a meal about 1.5 hours). Use null only if you cannot
   estimate at all.
6. "title" is short and capitalised, e.g. "Lunch with Sam".
7. "description" and "location" are null when not mentioned. Do NOT use the
   string "none" as a placeholder.
8. "summary" is one sentence describing what you understood, written for
   the user who will confirm the events.

## Empty Results

If the input contains no calendar-relevant information, return an empty
"events" array and explain briefly in "summary".
"""


def build_user_prompt(kind: InputKind, text: str | None = None) -> str:
    """Build the user prompt for one submission.

    Args:
        kind: Input modality.
        text: The submitted text; required when *kind* is ``"text"``.

    Returns:
        The user prompt string.  For voice and image input this is the
        instruction that accompanies the media part.
    """
    if kind == "text":
        return f"Extract calendar events from the following message:\n\n{text}"
    if kind == "voice":
        return (
            "The attached audio is a voice note. Transcribe it verbatim into "
            '"transcript", then extract calendar events from what was said.'
        )
    return (
        "The attached image may show a schedule, invitation, flyer, ticket or "
        "handwritten note. Extract every calendar event it contains. "
        'Set "transcript" to null.'
    )
