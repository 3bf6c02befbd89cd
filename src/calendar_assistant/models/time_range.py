"""Resolved bounds for a schedule query."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from calendar_assistant.models.event import Confidence


class TimeRange(BaseModel):
    """A concrete query window.

    Both bounds are timezone-aware; ``end`` is inclusive at second precision
    (a whole day ends at 23:59:59).
    """

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="Start instant (inclusive)")
    end: datetime = Field(description="End instant (inclusive)")
    description: str = Field(description="Human label, e.g. 'next week'")
    confidence: Confidence = Field(default=Confidence.MEDIUM)
