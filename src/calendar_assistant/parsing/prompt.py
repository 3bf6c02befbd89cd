"""Prompt contracts for parsing event details and time ranges."""

from __future__ import annotations

from datetime import datetime

PROMPT_VERSION = "calendar-parse-v1"

# Keep the user text bounded; chat messages are short but nothing enforces it.
MAX_INPUT_CHARS = 2_000


def _bounded(text: str) -> str:
    text = (text or "").strip()
    return text[:MAX_INPUT_CHARS]


def format_current_datetime(now: datetime) -> str:
    """Render ``now`` the way the prompts present it, e.g. ``2025-03-10 09:00 PDT``."""
    return now.strftime("%Y-%m-%d %H:%M %Z").strip()


def build_event_details_prompt(*, text: str, timezone: str, now: datetime) -> str:
    """Build a prompt that turns an event description into strict JSON.

    Args:
        text: The user's message describing the event.
        timezone: IANA timezone name of the user.
        now: Current local date/time in that timezone.

    Returns:
        Prompt string.
    """

    return (
        "You are a calendar assistant. Parse the following message into a structured calendar event.\n\n"
        f"User's timezone: {timezone}\n"
        f"Current date/time: {format_current_datetime(now)}\n\n"
        f"User's message: {_bounded(text)!r}\n\n"
        "Extract the event details and return a JSON object with these fields:\n"
        "{\n"
        '  "summary": "Brief event title (max 10 words)",\n'
        '  "description": "Longer summary of the purpose (1-2 sentences, summarize the user\'s intent)",\n'
        '  "date": "YYYY-MM-DD (the event date)",\n'
        '  "startTime": "HH:MM (24-hour format)",\n'
        '  "endTime": "HH:MM (24-hour format, estimate 1 hour if not specified)",\n'
        '  "confidence": "high|medium|low (how confident you are in the parsing)",\n'
        '  "ambiguities": ["list any unclear aspects or assumptions made"]\n'
        "}\n\n"
        "Rules:\n"
        "- If no specific time is mentioned, use a reasonable default "
        "(09:00 for morning, 14:00 for afternoon, 19:00 for evening)\n"
        "- If duration is not specified, default to 1 hour\n"
        "- For relative dates (tomorrow, next Monday, etc.), calculate the actual date\n"
        "- Summarize long descriptions into concise text\n"
        '- Be conservative with confidence: mark as "low" if anything is unclear\n'
        "- Include any assumptions in the ambiguities array"
    )


def build_time_range_prompt(*, expression: str, timezone: str, now: datetime) -> str:
    """Build a prompt that turns a time expression into a date range.

    Args:
        expression: Natural language time expression or schedule question.
        timezone: IANA timezone name of the user.
        now: Current local date/time in that timezone.

    Returns:
        Prompt string.
    """

    return (
        "You are a date range parser. Convert the time expression into a date range.\n\n"
        f"User's timezone: {timezone}\n"
        f"Current date/time: {format_current_datetime(now)}\n\n"
        f"Time expression: {_bounded(expression)!r}\n\n"
        "Return a JSON object with:\n"
        "{\n"
        '  "startDate": "YYYY-MM-DD (start of the range)",\n'
        '  "endDate": "YYYY-MM-DD (end of the range, inclusive)",\n'
        '  "startTime": "00:00 (start of day unless specific time mentioned)",\n'
        '  "endTime": "23:59 (end of day unless specific time mentioned)",\n'
        '  "confidence": "high|medium|low",\n'
        '  "description": "human-readable description of the range (e.g., \'tomorrow\', \'next week\')"\n'
        "}\n\n"
        "Examples:\n"
        '- "tomorrow" -> next day from 00:00 to 23:59\n'
        '- "next week" -> upcoming Monday through Sunday\n'
        '- "this weekend" -> upcoming Saturday and Sunday\n'
        '- "next Monday" -> the next occurrence of Monday'
    )
