"""Data models for Calendar Assistant.

This package contains Pydantic models for data validation and serialization.
"""

from calendar_assistant.models.event import CalendarEvent, CommittedEvent, Confidence, EventDraft
from calendar_assistant.models.time_range import TimeRange

__all__ = [
    "CalendarEvent",
    "CommittedEvent",
    "Confidence",
    "EventDraft",
    "TimeRange",
]
