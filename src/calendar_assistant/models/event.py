"""Event models.

``EventDraft`` is the unconfirmed event produced from free text. Dates and
times stay as the strings the text generator returned so the validator can
report malformed values instead of failing at construction time.
"""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Confidence(str, Enum):
    """How confident the parser is in its interpretation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def coerce(cls, value: object, default: "Confidence | None" = None) -> "Confidence":
        """Map a loosely formatted value (e.g. ``"High "``) onto the enum."""
        fallback = default or cls.MEDIUM
        if isinstance(value, cls):
            return value
        if value is None:
            return fallback
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


class EventDraft(BaseModel):
    """A structured, not yet confirmed calendar event."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(description="Short event title")
    description: str = Field(default="", description="Longer description; defaults to summary")
    date: str = Field(description="Event date as YYYY-MM-DD")
    start_time: str = Field(alias="startTime", description="Start time as HH:MM (24h)")
    end_time: str = Field(alias="endTime", description="End time as HH:MM (24h)")
    confidence: Confidence = Field(default=Confidence.MEDIUM)
    ambiguities: list[str] = Field(
        default_factory=list,
        description="Unclear aspects or assumptions made while parsing",
    )

    @model_validator(mode="after")
    def _default_description(self) -> "EventDraft":
        if not self.description.strip():
            self.description = self.summary
        return self

    def start_at(self, zone: tzinfo) -> datetime:
        """Timezone-aware start instant.

        Raises:
            ValueError: If date or start time is malformed.
        """
        return datetime.combine(date.fromisoformat(self.date), time.fromisoformat(self.start_time), zone)

    def end_at(self, zone: tzinfo) -> datetime:
        """Timezone-aware end instant.

        Raises:
            ValueError: If date or end time is malformed.
        """
        return datetime.combine(date.fromisoformat(self.date), time.fromisoformat(self.end_time), zone)

    def add_ambiguity(self, note: str) -> None:
        if note not in self.ambiguities:
            self.ambiguities.append(note)


class CalendarEvent(BaseModel):
    """An event as listed by the calendar service."""

    id: str = Field(description="Calendar event ID")
    summary: str = Field(default="(No title)", description="Event title")
    description: str = Field(default="", description="Event description")
    start: str = Field(description="Start as ISO datetime, or ISO date for all-day events")
    end: str = Field(description="End as ISO datetime, or ISO date for all-day events")
    is_all_day: bool = Field(default=False, description="Whether the event spans whole days")
    html_link: str | None = Field(default=None, description="Link to the event in the calendar UI")
    location: str | None = Field(default=None, description="Event location")


class CommittedEvent(BaseModel):
    """Read-only projection of an event created in the calendar."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Calendar event ID")
    html_link: str | None = Field(default=None, description="Link to the event in the calendar UI")
    summary: str = Field(description="Echoed event title")
    start: str = Field(description="Echoed start as ISO datetime")
    end: str = Field(description="Echoed end as ISO datetime")
    description: str | None = Field(default=None, description="Echoed description")
