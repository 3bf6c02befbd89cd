"""Unit tests for the pending confirmation store."""

from datetime import datetime, timedelta, timezone

import pytest

from calendar_assistant.agent.pending import PendingConfirmationStore
from calendar_assistant.models import EventDraft


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 3, 10, 17, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def draft(summary: str) -> EventDraft:
    return EventDraft(summary=summary, date="2025-03-11", start_time="14:00", end_time="15:00")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> PendingConfirmationStore:
    return PendingConfirmationStore(ttl=timedelta(minutes=10), clock=clock)


class TestPendingConfirmationStore:
    """Test suite for PendingConfirmationStore."""

    def test_take_returns_entry_once(self, store) -> None:
        store.put("u1", draft("A"), message_handle=7)

        first = store.take("u1")
        second = store.take("u1")

        assert first is not None
        assert first.draft.summary == "A"
        assert first.message_handle == 7
        assert second is None

    def test_put_replaces_previous_draft(self, store) -> None:
        assert store.put("u1", draft("A")) is None
        replaced = store.put("u1", draft("B"))

        assert replaced is not None
        assert replaced.draft.summary == "A"
        assert store.take("u1").draft.summary == "B"
        assert store.take("u1") is None

    def test_users_are_isolated(self, store) -> None:
        store.put("u1", draft("A"))
        store.put("u2", draft("B"))

        assert store.take("u2").draft.summary == "B"
        assert "u1" in store
        assert "u2" not in store
        assert len(store) == 1

    def test_expired_entry_is_absent(self, store, clock) -> None:
        store.put("u1", draft("A"))
        clock.advance(minutes=10)

        assert "u1" not in store
        assert len(store) == 0
        assert store.take("u1") is None

    def test_entry_within_ttl_survives(self, store, clock) -> None:
        store.put("u1", draft("A"))
        clock.advance(minutes=9, seconds=59)

        assert store.take("u1") is not None

    def test_replacing_expired_entry_reports_nothing(self, store, clock) -> None:
        store.put("u1", draft("A"))
        clock.advance(minutes=11)

        assert store.put("u1", draft("B")) is None

    def test_purge_expired(self, store, clock) -> None:
        store.put("u1", draft("A"))
        clock.advance(minutes=5)
        store.put("u2", draft("B"))
        clock.advance(minutes=6)

        purged = store.purge_expired()

        assert [p.user_id for p in purged] == ["u1"]
        assert "u2" in store

    def test_put_reclaims_other_users_expired_entries(self, store, clock) -> None:
        for i in range(100):
            store.put(f"user{i}", draft(f"E{i}"))
        clock.advance(hours=1)

        store.put("fresh", draft("Now"))

        assert store.take("fresh").draft.summary == "Now"
        assert store._entries == {}

    def test_no_ttl_never_expires(self, clock) -> None:
        store = PendingConfirmationStore(ttl=None, clock=clock)
        store.put("u1", draft("A"))
        clock.advance(days=30)

        assert store.take("u1") is not None

    def test_clear(self, store) -> None:
        store.put("u1", draft("A"))
        store.put("u2", draft("B"))

        store.clear()

        assert len(store) == 0
        assert store.take("u1") is None
