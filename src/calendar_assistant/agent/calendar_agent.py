"""Calendar assistant agent implementation.

This module provides the main agent that routes chat input to schedule
queries or to the event creation and confirmation flow.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Hashable, Optional

import structlog

from calendar_assistant.agent import messages
from calendar_assistant.agent.confirmation import (
    ConfirmationResult,
    ConfirmationState,
    ConfirmationStateMachine,
    Decision,
)
from calendar_assistant.agent.intent import Intent, IntentClassifier
from calendar_assistant.agent.pending import PendingConfirmationStore
from calendar_assistant.agent.protocols import CalendarService, ChatTransport, TextGenerator
from calendar_assistant.config import Settings
from calendar_assistant.exceptions import (
    CalendarAPIError,
    ExpiredConfirmationError,
    GeneratorError,
    ParseError,
    ValidationError,
)
from calendar_assistant.models import TimeRange
from calendar_assistant.parsing.event_details import EventDetailExtractor
from calendar_assistant.parsing.time_range import TimeRangeResolver, resolve_shortcut
from calendar_assistant.parsing.validation import validate_event_draft, validate_time_range
from calendar_assistant.utils import get_zone

logger = structlog.get_logger()

# Errors that end the current interaction with a clarification request.
PARSING_ERRORS = (ParseError, ValidationError, GeneratorError)


class CalendarAgent:
    """Main calendar assistant agent.

    This agent coordinates text parsing, calendar reads and writes, and the
    per-user confirmation flow. It only talks to the chat channel through
    ``ChatTransport``.
    """

    def __init__(
        self,
        transport: ChatTransport,
        generator: TextGenerator | None = None,
        calendar: CalendarService | None = None,
        settings: Settings | None = None,
        store: PendingConfirmationStore | None = None,
        classifier: IntentClassifier | None = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the calendar agent.

        Args:
            transport: Outbound chat channel.
            generator: Text generator. If None, creates an Ollama client.
            calendar: Calendar reader/writer. If None, creates a Google Calendar client.
            settings: Application settings. If None, uses default settings.
            store: Pending confirmation store. If None, creates one using the configured TTL.
            classifier: Intent classifier. If None, uses the default keyword rules.
            clock: Returns the current time. If None, uses the wall clock.
        """
        from calendar_assistant.config import get_settings

        self.settings = settings or get_settings()
        self.transport = transport

        if generator is None:
            from calendar_assistant.ollama.client import OllamaClient

            generator = OllamaClient(self.settings)
        if calendar is None:
            from calendar_assistant.gcal.client import GoogleCalendarClient

            calendar = GoogleCalendarClient(self.settings)

        self.generator = generator
        self.calendar = calendar
        self.store = store or PendingConfirmationStore(ttl=timedelta(seconds=self.settings.pending_ttl_seconds))
        self.classifier = classifier or IntentClassifier()
        self.resolver = TimeRangeResolver(self.generator)
        self.extractor = EventDetailExtractor(self.generator)
        self.confirmations = ConfirmationStateMachine(self.store, self.calendar, self.settings.timezone)

        self._zone = get_zone(self.settings.timezone)
        self._clock = clock or (lambda: datetime.now(self._zone))
        logger.info("calendar_agent_initialized", timezone=self.settings.timezone)

    def is_authorized(self, user_id: str) -> bool:
        allowed = self.settings.allowed_user_id
        return not allowed or str(user_id) == str(allowed)

    async def handle_message(self, user_id: str, text: str) -> None:
        """Handle one inbound text message.

        Args:
            user_id: Chat identity of the sender.
            text: Raw message text; messages starting with "/" are commands.
        """
        user_id = str(user_id)
        if not self.is_authorized(user_id):
            logger.warning("unauthorized_message", user_id=user_id)
            await self.transport.send_message(user_id, messages.UNAUTHORIZED_MESSAGE)
            return

        text = (text or "").strip()
        if not text:
            return

        logger.info("message_received", user_id=user_id, text_length=len(text))
        try:
            if text.startswith("/"):
                await self.handle_command(user_id, text)
            elif self.classifier.classify(text) is Intent.QUERY:
                logger.debug("intent_classified", intent=Intent.QUERY.value)
                await self._answer_query(user_id, text)
            else:
                logger.debug("intent_classified", intent=Intent.ADD_EVENT.value)
                await self._start_event_creation(user_id, text)
        except Exception as exc:  # noqa: BLE001
            logger.exception("message_processing_failed", user_id=user_id, error=str(exc))
            await self.transport.send_message(user_id, messages.GENERIC_ERROR_MESSAGE)

    async def handle_command(self, user_id: str, text: str) -> None:
        # Telegram-style "/today@my_bot" suffixes are tolerated.
        command = text.split()[0].split("@")[0].lower()

        if command == "/start":
            await self.transport.send_message(user_id, messages.WELCOME_MESSAGE)
        elif command == "/help":
            await self.transport.send_message(user_id, messages.HELP_MESSAGE)
        elif command == "/today":
            await self._answer_shortcut(user_id, "today", self.settings.query_max_results)
        elif command == "/tomorrow":
            await self._answer_shortcut(user_id, "tomorrow", self.settings.query_max_results)
        elif command == "/week":
            await self._answer_shortcut(user_id, "this week", self.settings.week_max_results)
        elif command == "/confirm":
            await self.handle_decision(user_id, Decision.APPROVE)
        elif command == "/cancel":
            await self.handle_decision(user_id, Decision.REJECT)
        else:
            logger.info("unknown_command", user_id=user_id, command=command)
            await self.transport.send_message(user_id, messages.UNKNOWN_COMMAND_MESSAGE)

    async def handle_decision(self, user_id: str, decision: Decision) -> ConfirmationResult | None:
        """Handle an approve/reject signal for the user's pending draft.

        Returns:
            The resolution, or None if nothing was pending.
        """
        user_id = str(user_id)
        if not self.is_authorized(user_id):
            logger.warning("unauthorized_decision", user_id=user_id)
            return None

        try:
            result = await self.confirmations.resolve(user_id, decision)
        except ExpiredConfirmationError:
            logger.info("confirmation_expired", user_id=user_id, decision=decision.value)
            await self.transport.send_message(user_id, messages.EXPIRED_MESSAGE)
            return None

        if result.state is ConfirmationState.COMMITTED and result.event is not None:
            reply = messages.format_created(result.event)
        elif result.state is ConfirmationState.FAILED:
            reply = messages.COMMIT_FAILED_MESSAGE
        else:
            reply = messages.CANCELLED_MESSAGE

        try:
            await self.transport.send_message(user_id, reply)
        except Exception as exc:  # noqa: BLE001
            logger.exception("decision_reply_failed", user_id=user_id, state=result.state.value, error=str(exc))

        await self._close_confirmation(user_id, result.message_handle)
        return result

    def shutdown(self) -> None:
        """Drop every pending confirmation."""
        self.store.clear()
        logger.info("calendar_agent_shutdown")

    async def _start_event_creation(self, user_id: str, text: str) -> None:
        now = self._clock()
        try:
            draft = await self.extractor.extract(text, self.settings.timezone, now)
        except PARSING_ERRORS as exc:
            logger.warning("event_parse_failed", user_id=user_id, error_type=type(exc).__name__, error=str(exc))
            await self.transport.send_message(user_id, messages.PARSE_FAILED_MESSAGE)
            return

        problems = validate_event_draft(draft, today=now.astimezone(self._zone).date())
        if problems:
            logger.info("event_draft_rejected", user_id=user_id, problems=problems)
            await self.transport.send_message(user_id, messages.format_clarification(problems))
            return

        handle = await self.transport.send_confirmation(user_id, messages.format_confirmation(draft))
        replaced = self.confirmations.begin(user_id, draft, handle)
        if replaced is not None:
            await self.transport.send_message(user_id, messages.format_superseded(replaced.draft))
            await self._close_confirmation(user_id, replaced.message_handle)

    async def _close_confirmation(self, user_id: str, handle: Hashable | None) -> None:
        """Remove the approve/reject affordances of a confirmation message."""
        if handle is None:
            return
        try:
            await self.transport.close_confirmation(handle)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "confirmation_close_failed",
                user_id=user_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def _answer_shortcut(self, user_id: str, expression: str, max_results: int) -> None:
        time_range = resolve_shortcut(expression, self._zone, self._clock())
        if time_range is None:
            raise ParseError(f"Not a shortcut time expression: {expression!r}")
        await self._send_events(user_id, time_range, max_results)

    async def _answer_query(self, user_id: str, text: str) -> None:
        try:
            time_range = await self.resolver.resolve(text, self.settings.timezone, self._clock())
        except PARSING_ERRORS as exc:
            logger.warning("time_range_parse_failed", user_id=user_id, error_type=type(exc).__name__, error=str(exc))
            await self.transport.send_message(user_id, messages.QUERY_FAILED_MESSAGE)
            return

        problems = validate_time_range(time_range)
        if problems:
            logger.info("time_range_rejected", user_id=user_id, problems=problems)
            await self.transport.send_message(user_id, messages.format_clarification(problems, "a time range"))
            return

        await self._send_events(user_id, time_range, self.settings.query_max_results)

    async def _send_events(self, user_id: str, time_range: TimeRange, max_results: int) -> None:
        try:
            events = await self.calendar.list_events(time_range.start, time_range.end, max_results)
        except CalendarAPIError as exc:
            logger.error("calendar_query_failed", user_id=user_id, error_type=type(exc).__name__, error=str(exc))
            await self.transport.send_message(user_id, messages.QUERY_FAILED_MESSAGE)
            return

        today = self._clock().astimezone(self._zone).date()
        text = messages.format_events(events, time_range.description, limit=max_results, today=today)
        await self.transport.send_message(user_id, text)
        logger.info("events_displayed", user_id=user_id, count=len(events), description=time_range.description)
