"""Unit tests for data models."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from calendar_assistant.models import CalendarEvent, CommittedEvent, Confidence, EventDraft, TimeRange


class TestEventDraft:
    """Test suite for EventDraft model."""

    def test_event_draft_from_generator_aliases(self) -> None:
        """Test creating an EventDraft from camelCase generator keys."""
        draft = EventDraft.model_validate(
            {"summary": "Gym", "date": "2025-03-11", "startTime": "18:00", "endTime": "19:00"}
        )

        assert draft.start_time == "18:00"
        assert draft.end_time == "19:00"
        assert draft.description == "Gym"
        assert draft.confidence is Confidence.MEDIUM
        assert draft.ambiguities == []

    def test_instants_use_zone(self) -> None:
        zone = ZoneInfo("America/Los_Angeles")
        draft = EventDraft(summary="Gym", date="2025-03-11", start_time="18:00", end_time="19:00")

        assert draft.start_at(zone) == datetime(2025, 3, 11, 18, 0, tzinfo=zone)
        assert draft.end_at(zone).utcoffset().total_seconds() == -7 * 3600

    def test_invalid_date_raises_value_error(self) -> None:
        draft = EventDraft(summary="Gym", date="2025-02-30", start_time="18:00", end_time="19:00")

        with pytest.raises(ValueError):
            draft.start_at(ZoneInfo("UTC"))

    def test_add_ambiguity_is_idempotent(self) -> None:
        draft = EventDraft(summary="Gym", date="2025-03-11", start_time="18:00", end_time="19:00")

        draft.add_ambiguity("Assumed 1 hour")
        draft.add_ambiguity("Assumed 1 hour")

        assert draft.ambiguities == ["Assumed 1 hour"]


class TestConfidence:
    """Test suite for Confidence coercion."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("high", Confidence.HIGH), (" Low ", Confidence.LOW), (None, Confidence.MEDIUM), ("maybe", Confidence.MEDIUM)],
    )
    def test_coerce(self, value, expected) -> None:
        assert Confidence.coerce(value) is expected

    def test_coerce_custom_default(self) -> None:
        assert Confidence.coerce("??", default=Confidence.LOW) is Confidence.LOW


class TestReadModels:
    """Test suite for calendar-facing models."""

    def test_calendar_event_defaults(self) -> None:
        event = CalendarEvent(id="evt1", start="2025-03-12", end="2025-03-13", is_all_day=True)

        assert event.summary == "(No title)"
        assert event.location is None

    def test_committed_event_is_frozen(self) -> None:
        event = CommittedEvent(id="evt1", summary="Gym", start="2025-03-11T18:00:00-07:00", end="2025-03-11T19:00:00-07:00")

        with pytest.raises(Exception):  # Pydantic ValidationError
            event.summary = "Other"

    def test_time_range_defaults(self) -> None:
        zone = ZoneInfo("UTC")
        tr = TimeRange(start=datetime(2025, 3, 10, tzinfo=zone), end=datetime(2025, 3, 10, 23, 59, 59, tzinfo=zone), description="today")

        assert tr.confidence is Confidence.MEDIUM
