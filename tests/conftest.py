"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import itertools
from datetime import datetime
from typing import Any, Hashable
from zoneinfo import ZoneInfo

import pytest

from calendar_assistant.models import CalendarEvent, CommittedEvent

TIMEZONE = "America/Los_Angeles"
ZONE = ZoneInfo(TIMEZONE)


class FakeGenerator:
    """Text generator that replays canned JSON objects (or raises canned errors)."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def generate_structured(self, prompt: str) -> dict[str, Any]:
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("FakeGenerator has no response left")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class ForbiddenGenerator:
    """Text generator that fails the test if it is ever called."""

    async def generate_structured(self, prompt: str) -> dict[str, Any]:
        pytest.fail(f"text generator must not be called (prompt: {prompt[:60]!r})")


class FakeCalendar:
    """In-memory calendar reader/writer that records every call."""

    def __init__(
        self,
        events: list[CalendarEvent] | None = None,
        create_error: Exception | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self.events = events or []
        self.create_error = create_error
        self.list_error = list_error
        self.list_calls: list[tuple[datetime, datetime, int]] = []
        self.create_calls: list[dict[str, str]] = []

    async def list_events(self, start: datetime, end: datetime, max_results: int = 10) -> list[CalendarEvent]:
        self.list_calls.append((start, end, max_results))
        if self.list_error is not None:
            raise self.list_error
        return self.events[:max_results]

    async def create_event(
        self,
        summary: str,
        description: str,
        date: str,
        start_time: str,
        end_time: str,
        timezone: str,
    ) -> CommittedEvent:
        self.create_calls.append(
            {
                "summary": summary,
                "description": description,
                "date": date,
                "start_time": start_time,
                "end_time": end_time,
                "timezone": timezone,
            }
        )
        if self.create_error is not None:
            raise self.create_error
        return CommittedEvent(
            id=f"evt{len(self.create_calls)}",
            html_link=f"https://calendar.google.com/event?eid=evt{len(self.create_calls)}",
            summary=summary,
            start=f"{date}T{start_time}:00-07:00",
            end=f"{date}T{end_time}:00-07:00",
            description=description,
        )


class FakeTransport:
    """Chat transport that records outbound messages."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.messages: list[tuple[str, str]] = []
        self.confirmations: list[tuple[str, str, Hashable]] = []
        self.closed: list[Hashable] = []

    async def send_message(self, user_id: str, text: str) -> Hashable:
        self.messages.append((user_id, text))
        return next(self._ids)

    async def send_confirmation(self, user_id: str, text: str) -> Hashable:
        handle = next(self._ids)
        self.confirmations.append((user_id, text, handle))
        return handle

    async def close_confirmation(self, handle: Hashable) -> None:
        self.closed.append(handle)

    def texts_for(self, user_id: str) -> list[str]:
        return [text for uid, text in self.messages if uid == user_id]


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from calendar_assistant.config import Settings

    return Settings(
        ollama_host="http://test:11434",
        ollama_model="test-model",
        timezone=TIMEZONE,
        log_level="DEBUG",
        debug=True,
        _env_file=None,
    )


@pytest.fixture
def timezone_name() -> str:
    return TIMEZONE


@pytest.fixture
def monday_morning() -> datetime:
    """Monday 2025-03-10 09:00 in the test timezone."""
    return datetime(2025, 3, 10, 9, 0, tzinfo=ZONE)


@pytest.fixture
def fake_generator_factory():
    return FakeGenerator


@pytest.fixture
def forbidden_generator() -> ForbiddenGenerator:
    return ForbiddenGenerator()


@pytest.fixture
def fake_calendar_factory():
    return FakeCalendar


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def team_meeting_response() -> dict[str, Any]:
    """Generator output for "Team meeting tomorrow at 2pm" on Monday 2025-03-10."""
    return {
        "summary": "Team meeting",
        "description": "Team meeting",
        "date": "2025-03-11",
        "startTime": "14:00",
        "endTime": "15:00",
        "confidence": "high",
        "ambiguities": [],
    }


@pytest.fixture
def sample_calendar_items() -> list[dict[str, Any]]:
    """Provide Google Calendar ``events.list`` items."""
    return [
        {
            "id": "evt1",
            "summary": "Standup",
            "description": "Daily sync",
            "start": {"dateTime": "2025-03-11T09:00:00-07:00"},
            "end": {"dateTime": "2025-03-11T09:15:00-07:00"},
            "htmlLink": "https://calendar.google.com/event?eid=evt1",
            "location": "Room 4",
        },
        {
            "id": "evt2",
            "start": {"date": "2025-03-12"},
            "end": {"date": "2025-03-13"},
        },
    ]
