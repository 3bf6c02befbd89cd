"""Unit tests for event-detail extraction."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from calendar_assistant.exceptions import ParseError, ValidationError
from calendar_assistant.models import Confidence
from calendar_assistant.parsing.event_details import PAST_DATE_NOTE, EventDetailExtractor, build_draft

TZ = "America/Los_Angeles"


class TestExtract:
    """Test suite for EventDetailExtractor."""

    @pytest.mark.asyncio
    async def test_team_meeting_tomorrow(self, fake_generator_factory, team_meeting_response, monday_morning) -> None:
        generator = fake_generator_factory(team_meeting_response)
        extractor = EventDetailExtractor(generator)

        draft = await extractor.extract("Team meeting tomorrow at 2pm", TZ, monday_morning)

        assert draft.summary == "Team meeting"
        assert draft.date == "2025-03-11"
        assert draft.start_time == "14:00"
        assert draft.end_time == "15:00"
        assert draft.confidence is Confidence.HIGH
        assert draft.ambiguities == []

        prompt = generator.prompts[0]
        assert "Team meeting tomorrow at 2pm" in prompt
        assert "2025-03-10 09:00" in prompt
        assert "default to 1 hour" in prompt

    @pytest.mark.asyncio
    async def test_past_date_forces_low_confidence(self, fake_generator_factory) -> None:
        """A draft before now is flagged even when the generator was confident."""
        now = datetime(2025, 6, 10, 9, 0, tzinfo=ZoneInfo(TZ))
        generator = fake_generator_factory(
            {
                "summary": "Dentist",
                "date": "2025-06-01",
                "startTime": "10:00",
                "endTime": "11:00",
                "confidence": "high",
                "ambiguities": [],
            }
        )

        draft = await EventDetailExtractor(generator).extract("Dentist on June 1st at 10", TZ, now)

        assert draft.confidence is Confidence.LOW
        assert draft.ambiguities
        assert PAST_DATE_NOTE in draft.ambiguities

    @pytest.mark.asyncio
    async def test_same_day_later_is_not_flagged(self, fake_generator_factory, monday_morning) -> None:
        generator = fake_generator_factory(
            {"summary": "Gym", "date": "2025-03-10", "startTime": "18:00", "endTime": "19:00", "confidence": "medium"}
        )

        draft = await EventDetailExtractor(generator).extract("Gym tonight at 6", TZ, monday_morning)

        assert draft.confidence is Confidence.MEDIUM
        assert PAST_DATE_NOTE not in draft.ambiguities

    @pytest.mark.asyncio
    async def test_equal_start_and_end_fails(self, fake_generator_factory, monday_morning) -> None:
        generator = fake_generator_factory(
            {"summary": "Call", "date": "2025-03-11", "startTime": "14:00", "endTime": "14:00"}
        )

        with pytest.raises(ValidationError):
            await EventDetailExtractor(generator).extract("Call tomorrow at 2", TZ, monday_morning)

    @pytest.mark.asyncio
    async def test_end_before_start_is_not_corrected(self, fake_generator_factory, monday_morning) -> None:
        generator = fake_generator_factory(
            {"summary": "Late show", "date": "2025-03-11", "startTime": "23:00", "endTime": "01:00"}
        )

        with pytest.raises(ValidationError):
            await EventDetailExtractor(generator).extract("Late show tomorrow 11pm", TZ, monday_morning)

    @pytest.mark.asyncio
    async def test_malformed_json_is_a_parse_error(self, fake_generator_factory, monday_morning) -> None:
        generator = fake_generator_factory(ParseError("model response did not contain a JSON object"))

        with pytest.raises(ParseError):
            await EventDetailExtractor(generator).extract("???", TZ, monday_morning)

    @pytest.mark.asyncio
    async def test_impossible_date_fails(self, fake_generator_factory, monday_morning) -> None:
        generator = fake_generator_factory(
            {"summary": "Party", "date": "2025-02-30", "startTime": "19:00", "endTime": "20:00"}
        )

        with pytest.raises(ValidationError):
            await EventDetailExtractor(generator).extract("Party Feb 30", TZ, monday_morning)


class TestBuildDraft:
    """Test suite for converting generator output into drafts."""

    @pytest.mark.parametrize("missing", ["summary", "date", "startTime", "endTime"])
    def test_missing_required_field(self, missing, team_meeting_response) -> None:
        raw = dict(team_meeting_response)
        raw[missing] = None

        with pytest.raises(ValidationError, match=missing):
            build_draft(raw)

    def test_normalizes_loose_values(self) -> None:
        draft = build_draft(
            {
                "summary": "  Lunch with Sam ",
                "description": "",
                "date": "2025-03-14",
                "startTime": "9:30",
                "endTime": "10:30:00",
                "confidence": "HIGH",
                "ambiguities": "Assumed 1 hour",
            }
        )

        assert draft.summary == "Lunch with Sam"
        assert draft.description == "Lunch with Sam"
        assert draft.start_time == "09:30"
        assert draft.end_time == "10:30"
        assert draft.confidence is Confidence.HIGH
        assert draft.ambiguities == ["Assumed 1 hour"]

    def test_unknown_confidence_defaults_to_medium(self, team_meeting_response) -> None:
        raw = dict(team_meeting_response, confidence="very sure")

        assert build_draft(raw).confidence is Confidence.MEDIUM

    def test_unparseable_time(self, team_meeting_response) -> None:
        raw = dict(team_meeting_response, startTime="2pm")

        with pytest.raises(ValidationError):
            build_draft(raw)
