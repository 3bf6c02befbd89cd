"""Consistency checks for event drafts and time ranges.

Pure functions: they never raise and never do I/O. Each returns a list of
human-readable problems; an empty list means the value is usable.
"""

from __future__ import annotations

import re
from datetime import date, time

from calendar_assistant.models import EventDraft, TimeRange

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")

# Lenient on purpose: timezone boundaries can put "today" one day behind.
MAX_DAYS_IN_PAST = 1


def _parse_hhmm(value: str) -> time | None:
    if not _TIME_RE.match(value or ""):
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        return None


def validate_event_draft(draft: EventDraft, *, today: date | None = None) -> list[str]:
    """Check a draft for internal consistency.

    Args:
        draft: The draft to check.
        today: Reference date for the "too far in the past" check. Defaults
            to the system's local date.

    Returns:
        Problems found, in a stable order.
    """
    problems: list[str] = []

    if not (draft.summary or "").strip():
        problems.append("Event must have a title")

    event_date: date | None = None
    if not draft.date:
        problems.append("Event must have a date")
    elif not _DATE_RE.match(draft.date):
        problems.append("Date must be in YYYY-MM-DD format")
    else:
        try:
            event_date = date.fromisoformat(draft.date)
        except ValueError:
            problems.append("Date is not a real calendar date")

    if not draft.start_time or not draft.end_time:
        problems.append("Event must have start and end times")

    start = _parse_hhmm(draft.start_time)
    end = _parse_hhmm(draft.end_time)
    if draft.start_time and start is None:
        problems.append("Start time must be in HH:MM format")
    if draft.end_time and end is None:
        problems.append("End time must be in HH:MM format")

    if start is not None and end is not None and end <= start:
        problems.append("Event end time must be after start time")

    if event_date is not None:
        reference = today or date.today()
        if (reference - event_date).days > MAX_DAYS_IN_PAST:
            problems.append(f"Event date is more than {MAX_DAYS_IN_PAST} day in the past")

    return problems


def validate_time_range(time_range: TimeRange) -> list[str]:
    """Check a resolved time range for internal consistency."""
    problems: list[str] = []

    if time_range.start.tzinfo is None or time_range.end.tzinfo is None:
        problems.append("Time range bounds must be timezone-aware")
    elif time_range.start > time_range.end:
        problems.append("Time range must not end before it starts")

    if not (time_range.description or "").strip():
        problems.append("Time range must have a description")

    return problems
