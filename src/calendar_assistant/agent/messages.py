"""Plain-text replies sent back to the chat user."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from itertools import groupby

from calendar_assistant.models import CalendarEvent, CommittedEvent, Confidence, EventDraft

WELCOME_MESSAGE = """Welcome to your Google Calendar assistant!

I can help you:
- Create calendar events from natural language
- Check your upcoming schedule

Commands:
/today - Show today's events
/tomorrow - Show tomorrow's events
/week - Show this week's events
/help - Show this help message

Creating events - just tell me about it:
"Meeting with John tomorrow at 3pm to discuss budget"

Checking your schedule - just ask:
"What's on my calendar tomorrow?\""""

HELP_MESSAGE = """How to use

Create an event: send a message describing it with a date and time, e.g.
- "Team meeting tomorrow at 2pm"
- "Lunch with Sarah on Friday at noon"
- "Doctor appointment next Monday at 9am for 1 hour"
I'll show you what I understood and ask for confirmation (/confirm or /cancel)
before creating anything.

Check your schedule with /today, /tomorrow, /week, or ask naturally:
- "What are my plans for next Tuesday?"
- "Show me this weekend\""""

UNAUTHORIZED_MESSAGE = "Sorry, this bot is for private use only."
EXPIRED_MESSAGE = "Sorry, this confirmation has expired. Please try again."
CANCELLED_MESSAGE = "Event cancelled."
GENERIC_ERROR_MESSAGE = "Sorry, something went wrong. Please try again."
QUERY_FAILED_MESSAGE = "Sorry, I couldn't retrieve your events right now. Please try again."
COMMIT_FAILED_MESSAGE = (
    "Sorry, I couldn't create the event. Please check your Google Calendar connection and try again."
)
PARSE_FAILED_MESSAGE = (
    "Sorry, I had trouble understanding that. Please try again with a date and time.\n\n"
    'Example: "Meeting tomorrow at 3pm to discuss project"'
)
UNKNOWN_COMMAND_MESSAGE = "Sorry, I don't know that command. Send /help to see what I can do."


def truncate(text: str, max_length: int) -> str:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_day(day: date) -> str:
    """E.g. ``Tuesday, March 11, 2025``."""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def _format_clock(moment: datetime) -> str:
    return f"{moment:%I:%M %p}".lstrip("0")


def format_confirmation(draft: EventDraft) -> str:
    lines = [
        "Event details",
        "",
        f"Date: {format_day(date.fromisoformat(draft.date))}",
        f"Time: {draft.start_time} - {draft.end_time}",
        f"Title: {draft.summary}",
    ]
    if draft.description and draft.description != draft.summary:
        lines.append(f"Description: {draft.description}")

    if draft.confidence is Confidence.LOW or draft.ambiguities:
        lines += ["", "Please verify:"]
        lines += [f"- {note}" for note in draft.ambiguities]

    lines += ["", "Shall I create this event?"]
    return "\n".join(lines)


def format_clarification(problems: list[str], subject: str = "a valid event") -> str:
    lines = [f"I couldn't turn that into {subject}:"]
    lines += [f"- {p}" for p in problems]
    lines += ["", "Please try again with a date and time."]
    return "\n".join(lines)


def _event_day(event: CalendarEvent) -> str:
    if event.is_all_day:
        return event.start.split("T")[0]
    return datetime.fromisoformat(event.start).date().isoformat()


def _day_header(day: date, today: date | None) -> str:
    if today is not None and day == today:
        return f"Today, {format_day(day)}"
    if today is not None and day == today + timedelta(days=1):
        return f"Tomorrow, {format_day(day)}"
    return format_day(day)


def _format_event(event: CalendarEvent) -> list[str]:
    if event.is_all_day:
        lines = [f"  All day  {event.summary}"]
    else:
        start = _format_clock(datetime.fromisoformat(event.start))
        end = _format_clock(datetime.fromisoformat(event.end))
        lines = [f"  {start} - {end}  {event.summary}"]

    if event.description:
        lines.append(f"    {truncate(event.description, 60)}")
    if event.location and not event.is_all_day:
        lines.append(f"    at {event.location}")
    if event.html_link:
        lines.append(f"    {event.html_link}")
    return lines


def format_events(
    events: list[CalendarEvent],
    description: str = "the requested period",
    *,
    limit: int | None = None,
    today: date | None = None,
) -> str:
    """Render a listing grouped by day, in the order the calendar returned it."""
    if not events:
        return f"No events scheduled for {description}."

    lines = [f"Events for {description}", ""]
    for day_key, day_events in groupby(events, key=_event_day):
        lines.append(_day_header(date.fromisoformat(day_key), today))
        for event in day_events:
            lines += _format_event(event)
        lines.append("")

    if limit is not None and len(events) >= limit:
        lines.append(f"Showing first {len(events)} events. Use a more specific time range for complete results.")

    return "\n".join(lines).strip()


def format_created(event: CommittedEvent) -> str:
    lines = ["Event created!", "", event.summary]
    try:
        start = datetime.fromisoformat(event.start)
    except ValueError:
        start = None
    if start is not None:
        lines += [format_day(start.date()), _format_clock(start)]
    if event.description and event.description != event.summary:
        lines.append(truncate(event.description, 100))
    if event.html_link:
        lines += ["", f"View in Google Calendar: {event.html_link}"]
    return "\n".join(lines)


def format_superseded(draft: EventDraft) -> str:
    return f'Your previous unconfirmed event "{draft.summary}" was discarded in favour of this one.'
