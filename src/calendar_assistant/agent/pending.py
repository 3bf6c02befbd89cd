"""In-memory store of event drafts awaiting confirmation.

One slot per user. The store is constructed once at startup and injected
into the agent; it lives as long as the process and is cleared on shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Hashable, Optional

import structlog

from calendar_assistant.models import EventDraft

logger = structlog.get_logger()

DEFAULT_TTL = timedelta(minutes=10)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PendingConfirmation:
    user_id: str
    draft: EventDraft
    message_handle: Optional[Hashable] = None
    created_at: datetime = field(default_factory=_utcnow)


class PendingConfirmationStore:
    """Maps a user to the single draft they have not yet approved or rejected.

    ``take`` is the only way to read an entry and it always removes it, so a
    given confirmation can be resolved at most once.
    """

    def __init__(
        self,
        ttl: Optional[timedelta] = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, PendingConfirmation] = {}

    def put(
        self,
        user_id: str,
        draft: EventDraft,
        message_handle: Optional[Hashable] = None,
    ) -> Optional[PendingConfirmation]:
        """Store a draft for ``user_id``, replacing any existing one.

        Expired entries of every user are dropped first.

        Returns:
            The unexpired entry that was replaced, if any.
        """
        self.purge_expired()
        entry = PendingConfirmation(
            user_id=user_id,
            draft=draft,
            message_handle=message_handle,
            created_at=self._clock(),
        )
        previous = self._entries.get(user_id)
        self._entries[user_id] = entry

        if previous is not None and self._is_expired(previous):
            previous = None
        if previous is not None:
            logger.info("pending_confirmation_replaced", user_id=user_id, summary=previous.draft.summary)
        return previous

    def take(self, user_id: str) -> Optional[PendingConfirmation]:
        """Remove and return the entry for ``user_id``; expired entries count as absent."""
        entry = self._entries.pop(user_id, None)
        if entry is not None and self._is_expired(entry):
            logger.info("pending_confirmation_expired", user_id=user_id, summary=entry.draft.summary)
            return None
        return entry

    def purge_expired(self) -> list[PendingConfirmation]:
        """Drop every expired entry and return them."""
        expired = [e for e in self._entries.values() if self._is_expired(e)]
        for entry in expired:
            del self._entries[entry.user_id]
        if expired:
            logger.debug("pending_confirmations_purged", count=len(expired))
        return expired

    def clear(self) -> None:
        if self._entries:
            logger.info("pending_confirmations_cleared", count=len(self._entries))
        self._entries.clear()

    def _is_expired(self, entry: PendingConfirmation) -> bool:
        if self.ttl is None:
            return False
        return self._clock() - entry.created_at >= self.ttl

    def __contains__(self, user_id: object) -> bool:
        entry = self._entries.get(user_id)  # type: ignore[arg-type]
        return entry is not None and not self._is_expired(entry)

    def __len__(self) -> int:
        return sum(1 for e in self._entries.values() if not self._is_expired(e))
