"""Tests for the in-memory session store contract."""

import asyncio

import pytest

from src.shared.session_store import (
    InMemorySessionStore,
    SessionNotFoundError,
    SessionRecord,
)
from src.shared.transcript import TranscriptEntry
from src.shared.types import AgentName, MessageRole


def _exchange(index: int) -> list[TranscriptEntry]:
    return [
        TranscriptEntry(role=MessageRole.USER, content=f"question {index}"),
        TranscriptEntry(role=MessageRole.ASSISTANT, content=f"answer {index}"),
    ]


class TestGetOrCreateActiveSession:
    """At most one active session per user."""

    async def test_idempotent_while_active(self, store: InMemorySessionStore) -> None:
        """Repeated calls return the same id."""
        first = await store.get_or_create_active_session("user-1")
        second = await store.get_or_create_active_session("user-1")
        assert first == second

    async def test_new_id_after_end(self, store: InMemorySessionStore) -> None:
        """Ending a session makes the next call allocate a fresh one."""
        first = await store.get_or_create_active_session("user-1")
        await store.end_session(first)
        second = await store.get_or_create_active_session("user-1")
        assert second != first
        ended = await store.get_session(first)
        assert ended is not None
        assert ended.active is False

    async def test_users_are_isolated(self, store: InMemorySessionStore) -> None:
        """Different users never share a session."""
        first = await store.get_or_create_active_session("user-1")
        second = await store.get_or_create_active_session("user-2")
        assert first != second

    async def test_concurrent_creates_yield_one_session(
        self,
        store: InMemorySessionStore,
    ) -> None:
        """Racing creates for the same user converge on one id."""
        ids = await asyncio.gather(
            *(store.get_or_create_active_session("user-1") for _ in range(10))
        )
        assert len(set(ids)) == 1


class TestAppendAndTrim:
    """Appends keep the transcript bounded and bump counters."""

    async def test_history_is_capped(self, store: InMemorySessionStore) -> None:
        """Persisted history never exceeds fifty entries."""
        session_id = await store.get_or_create_active_session("user-1")
        for index in range(40):
            await store.append_and_trim(
                session_id, _exchange(index), AgentName.TRIAGE.value
            )
            assert len(await store.load_history(session_id)) <= 50

        history = await store.load_history(session_id)
        assert len(history) == 50
        assert history[0].content == "question 15"
        assert history[-1].content == "answer 39"

    async def test_updates_metadata(self, store: InMemorySessionStore) -> None:
        """Last agent, counter, and timestamp are updated per call."""
        session_id = await store.get_or_create_active_session("user-1")
        before = await store.get_session(session_id)
        await store.append_and_trim(
            session_id, _exchange(0), AgentName.RESOURCE_FINDER.value
        )
        await store.append_and_trim(
            session_id, _exchange(1), AgentName.RECOVERY_GUIDE.value
        )
        record = await store.get_session(session_id)
        assert record.message_count == 2
        assert record.last_agent_name == "Recovery Guide"
        assert record.updated_at >= before.updated_at

    async def test_custom_cap(self) -> None:
        """The cap is configurable per store."""
        store = InMemorySessionStore(history_cap=4)
        session_id = await store.get_or_create_active_session("user-1")
        for index in range(3):
            await store.append_and_trim(session_id, _exchange(index), "Triage Agent")
        history = await store.load_history(session_id)
        assert [e.content for e in history] == [
            "question 1",
            "answer 1",
            "question 2",
            "answer 2",
        ]

    async def test_unknown_session_raises(self, store: InMemorySessionStore) -> None:
        """Appending to an unknown id is an error."""
        with pytest.raises(SessionNotFoundError) as exc_info:
            await store.append_and_trim("missing", _exchange(0), "Triage Agent")
        assert exc_info.value.session_id == "missing"

    async def test_concurrent_appends_are_not_lost(
        self,
        store: InMemorySessionStore,
    ) -> None:
        """Overlapping appends all land."""
        session_id = await store.get_or_create_active_session("user-1")
        await asyncio.gather(
            *(
                store.append_and_trim(session_id, _exchange(i), "Triage Agent")
                for i in range(5)
            )
        )
        record = await store.get_session(session_id)
        assert record.message_count == 5
        assert len(record.history) == 10


class TestReads:
    """Reads never expose internal state."""

    async def test_load_history_missing_is_empty(
        self,
        store: InMemorySessionStore,
    ) -> None:
        """Unknown sessions read as an empty transcript."""
        assert await store.load_history("missing") == []

    async def test_get_session_missing_is_none(
        self,
        store: InMemorySessionStore,
    ) -> None:
        """Unknown sessions read as None."""
        assert await store.get_session("missing") is None

    async def test_returned_record_is_a_copy(self, store: InMemorySessionStore) -> None:
        """Mutating a returned record does not change the store."""
        session_id = await store.get_or_create_active_session("user-1")
        record = await store.get_session(session_id)
        record.active = False
        assert (await store.get_session(session_id)).active is True

    async def test_end_unknown_session_raises(self, store: InMemorySessionStore) -> None:
        """Ending an unknown id is an error."""
        with pytest.raises(SessionNotFoundError):
            await store.end_session("missing")


class TestSessionRecord:
    """The record serializes with the documented camelCase shape."""

    def test_camel_case_dump(self) -> None:
        """Wire keys are camelCase."""
        record = SessionRecord(id="s-1", user_id="u-1")
        dumped = record.model_dump(by_alias=True, mode="json")
        assert set(dumped) == {
            "id",
            "userId",
            "history",
            "lastAgentName",
            "createdAt",
            "updatedAt",
            "messageCount",
            "active",
        }
        assert dumped["lastAgentName"] == "Triage Agent"
        assert dumped["messageCount"] == 0
