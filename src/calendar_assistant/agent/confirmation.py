"""Confirmation state machine for event drafts.

NONE -> AWAITING_CONFIRMATION -> COMMITTED | CANCELLED | FAILED

A draft only reaches the calendar through ``resolve`` with an approve
decision from the user who owns it. The pending entry is removed before the
calendar is called, so duplicate approvals cannot create duplicate events,
and a failed write is never retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional

import structlog

from calendar_assistant.agent.pending import PendingConfirmation, PendingConfirmationStore
from calendar_assistant.agent.protocols import CalendarWriter
from calendar_assistant.exceptions import CalendarAPIError, ExpiredConfirmationError
from calendar_assistant.models import CommittedEvent, EventDraft

logger = structlog.get_logger()


class ConfirmationState(str, Enum):
    NONE = "none"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COMMITTED = "committed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


@dataclass(frozen=True)
class ConfirmationResult:
    """Outcome of resolving a pending confirmation."""

    user_id: str
    state: ConfirmationState
    draft: EventDraft
    message_handle: Optional[Hashable] = None
    event: Optional[CommittedEvent] = None
    error: Optional[CalendarAPIError] = None


class ConfirmationStateMachine:
    """Drives drafts from awaiting confirmation to a terminal state."""

    def __init__(self, store: PendingConfirmationStore, writer: CalendarWriter, timezone: str) -> None:
        self.store = store
        self.writer = writer
        self.timezone = timezone

    def begin(
        self,
        user_id: str,
        draft: EventDraft,
        message_handle: Optional[Hashable] = None,
    ) -> Optional[PendingConfirmation]:
        """Move ``user_id`` to AWAITING_CONFIRMATION with ``draft``.

        Returns:
            The pending confirmation this one superseded, if any.
        """
        replaced = self.store.put(user_id, draft, message_handle)
        logger.debug("awaiting_confirmation", user_id=user_id, summary=draft.summary)
        return replaced

    def state_of(self, user_id: str) -> ConfirmationState:
        if user_id in self.store:
            return ConfirmationState.AWAITING_CONFIRMATION
        return ConfirmationState.NONE

    async def resolve(self, user_id: str, decision: Decision) -> ConfirmationResult:
        """Apply an approve/reject decision for ``user_id``.

        Raises:
            ExpiredConfirmationError: If nothing is pending for the user
                (never created, already resolved, superseded or expired).
        """
        pending = self.store.take(user_id)
        if pending is None:
            raise ExpiredConfirmationError(f"No pending confirmation for user {user_id}")

        if decision is Decision.REJECT:
            logger.info("event_cancelled", user_id=user_id, summary=pending.draft.summary)
            return self._result(pending, ConfirmationState.CANCELLED)

        draft = pending.draft
        try:
            event = await self.writer.create_event(
                draft.summary,
                draft.description,
                draft.date,
                draft.start_time,
                draft.end_time,
                self.timezone,
            )
        except CalendarAPIError as exc:
            logger.error(
                "event_commit_failed",
                user_id=user_id,
                summary=draft.summary,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return self._result(pending, ConfirmationState.FAILED, error=exc)

        logger.info("event_committed", user_id=user_id, event_id=event.id, summary=event.summary)
        return self._result(pending, ConfirmationState.COMMITTED, event=event)

    @staticmethod
    def _result(
        pending: PendingConfirmation,
        state: ConfirmationState,
        *,
        event: Optional[CommittedEvent] = None,
        error: Optional[CalendarAPIError] = None,
    ) -> ConfirmationResult:
        return ConfirmationResult(
            user_id=pending.user_id,
            state=state,
            draft=pending.draft,
            message_handle=pending.message_handle,
            event=event,
            error=error,
        )
