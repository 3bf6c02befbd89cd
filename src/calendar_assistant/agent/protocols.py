"""Contracts for the services the assistant talks to.

The concrete implementations live in ``calendar_assistant.ollama`` and
``calendar_assistant.gcal``; tests substitute in-memory fakes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Hashable, Protocol

from calendar_assistant.models import CalendarEvent, CommittedEvent


class TextGenerator(Protocol):
    async def generate_structured(self, prompt: str) -> dict[str, Any]:
        """Return the JSON object the model produced for ``prompt``.

        Raises GeneratorError once its own retry policy is exhausted and
        ParseError when the model output is not a JSON object.
        """
        ...


class CalendarReader(Protocol):
    async def list_events(
        self,
        start: datetime,
        end: datetime,
        max_results: int = 10,
    ) -> list[CalendarEvent]:
        """Events in ``[start, end]`` sorted by start, recurring instances expanded."""
        ...


class CalendarWriter(Protocol):
    async def create_event(
        self,
        summary: str,
        description: str,
        date: str,
        start_time: str,
        end_time: str,
        timezone: str,
    ) -> CommittedEvent: ...


class CalendarService(CalendarReader, CalendarWriter, Protocol):
    """A calendar that can be both read and written."""


class ChatTransport(Protocol):
    """Outbound side of the chat channel."""

    async def send_message(self, user_id: str, text: str) -> Hashable:
        """Send a plain message and return a handle to it."""
        ...

    async def send_confirmation(self, user_id: str, text: str) -> Hashable:
        """Send a message with approve/reject affordances and return a handle to it."""
        ...

    async def close_confirmation(self, handle: Hashable) -> None:
        """Edit a confirmation message in place so its affordances disappear."""
        ...
