"""Helpers for parsing Google Calendar API resources into internal models."""

from __future__ import annotations

from typing import Any

from calendar_assistant.models import CalendarEvent, CommittedEvent


def _time_value(node: Any) -> tuple[str, bool]:
    """Return (value, is_all_day) for an event ``start``/``end`` node."""
    if not isinstance(node, dict):
        return "", False
    date_time = node.get("dateTime")
    if isinstance(date_time, str) and date_time:
        return date_time, False
    day = node.get("date")
    return (str(day), True) if day else ("", False)


def item_to_calendar_event(item: dict[str, Any]) -> CalendarEvent:
    """Convert an ``events.list`` item to CalendarEvent.

    Args:
        item: Google Calendar event resource.

    Returns:
        CalendarEvent: Simplified event.
    """
    start, all_day = _time_value(item.get("start"))
    end, _ = _time_value(item.get("end"))

    return CalendarEvent(
        id=str(item.get("id") or ""),
        summary=item.get("summary") or "(No title)",
        description=item.get("description") or "",
        start=start,
        end=end,
        is_all_day=all_day,
        html_link=item.get("htmlLink"),
        location=item.get("location") or None,
    )


def item_to_committed_event(item: dict[str, Any]) -> CommittedEvent:
    """Convert an ``events.insert`` response to CommittedEvent."""
    start, _ = _time_value(item.get("start"))
    end, _ = _time_value(item.get("end"))

    return CommittedEvent(
        id=str(item.get("id") or ""),
        html_link=item.get("htmlLink"),
        summary=item.get("summary") or "",
        start=start,
        end=end,
        description=item.get("description"),
    )


def build_event_body(
    *,
    summary: str,
    description: str,
    date: str,
    start_time: str,
    end_time: str,
    timezone: str,
) -> dict[str, Any]:
    """Build an ``events.insert`` request body for a timed event."""
    return {
        "summary": summary,
        "description": description or summary,
        "start": {"dateTime": f"{date}T{start_time}:00", "timeZone": timezone},
        "end": {"dateTime": f"{date}T{end_time}:00", "timeZone": timezone},
        # Use the calendar's default reminder settings.
        "reminders": {"useDefault": True},
    }
