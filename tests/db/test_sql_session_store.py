"""Tests for the Postgres-backed session store with a mocked AsyncSession."""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from src.db.models import AgentSession
from src.db.session_store import SqlSessionStore
from src.shared.session_store import SessionNotFoundError
from src.shared.transcript import TranscriptEntry
from src.shared.types import MessageRole


def _row(session_id: str = "s-1", history: list | None = None, **overrides) -> AgentSession:
    now = datetime(2026, 10, 1, tzinfo=UTC)
    values = {
        "id": session_id,
        "user_id": "user-1",
        "history": history if history is not None else [],
        "last_agent_name": "Triage Agent",
        "message_count": 0,
        "active": True,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return AgentSession(**values)


def _result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _store(mock_session: AsyncMock, history_cap: int = 50) -> SqlSessionStore:
    @asynccontextmanager
    async def scope():
        yield mock_session

    return SqlSessionStore(scope=scope, history_cap=history_cap)


def _mock_session(*results: MagicMock) -> AsyncMock:
    mock_session = AsyncMock()
    mock_session.add = MagicMock()
    mock_session.execute.side_effect = list(results)
    return mock_session


def _sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestGetOrCreateActiveSession:
    """One active session per user, even under a create race."""

    async def test_returns_existing_active_session(self) -> None:
        """An active row is reused without inserting."""
        mock_session = _mock_session(_result(_row("existing")))
        session_id = await _store(mock_session).get_or_create_active_session("user-1")
        assert session_id == "existing"
        mock_session.add.assert_not_called()

    async def test_creates_when_none_active(self) -> None:
        """A new row is inserted and flushed."""
        mock_session = _mock_session(_result(None))
        session_id = await _store(mock_session).get_or_create_active_session("user-1")

        row = mock_session.add.call_args.args[0]
        assert isinstance(row, AgentSession)
        assert row.id == session_id
        assert row.user_id == "user-1"
        assert row.active is True
        assert row.history == []
        mock_session.flush.assert_awaited_once()

    async def test_recovers_from_create_race(self) -> None:
        """A unique-index conflict returns the winner's session."""
        mock_session = _mock_session(_result(None), _result(_row("winner")))
        mock_session.flush.side_effect = IntegrityError(
            "INSERT", {}, Exception("duplicate key")
        )

        session_id = await _store(mock_session).get_or_create_active_session("user-1")

        assert session_id == "winner"
        mock_session.rollback.assert_awaited_once()

    async def test_reraises_unexplained_conflict(self) -> None:
        """A conflict with no active row afterwards is not swallowed."""
        mock_session = _mock_session(_result(None), _result(None))
        mock_session.flush.side_effect = IntegrityError(
            "INSERT", {}, Exception("duplicate key")
        )
        with pytest.raises(IntegrityError):
            await _store(mock_session).get_or_create_active_session("user-1")


class TestAppendAndTrim:
    """Appends merge under a row lock and respect the cap."""

    async def test_appends_and_trims(self) -> None:
        """The stored history is capped after the merge."""
        history = [
            {"role": "user" if i % 2 == 0 else "assistant", "content": f"m{i}"}
            for i in range(49)
        ]
        row = _row(history=history, message_count=24)
        mock_session = _mock_session(_result(row))

        await _store(mock_session).append_and_trim(
            "s-1",
            [
                TranscriptEntry(role=MessageRole.USER, content="new question"),
                TranscriptEntry(role=MessageRole.ASSISTANT, content="new answer"),
            ],
            "Resource Finder",
        )

        assert len(row.history) == 50
        assert row.history[0] == {"role": "assistant", "content": "m1"}
        assert row.history[-1] == {"role": "assistant", "content": "new answer"}
        assert row.message_count == 25
        assert row.last_agent_name == "Resource Finder"
        assert row.updated_at > datetime(2026, 10, 1, tzinfo=UTC)

    async def test_locks_the_row(self) -> None:
        """The read that precedes the write is SELECT ... FOR UPDATE."""
        mock_session = _mock_session(_result(_row()))
        await _store(mock_session).append_and_trim("s-1", [], "Triage Agent")
        statement = mock_session.execute.call_args.args[0]
        assert "FOR UPDATE" in _sql(statement)

    async def test_unknown_session_raises(self) -> None:
        """A missing row is a SessionNotFoundError."""
        mock_session = _mock_session(_result(None))
        with pytest.raises(SessionNotFoundError):
            await _store(mock_session).append_and_trim("missing", [], "Triage Agent")


class TestReadsAndEnd:
    """Reads map rows to records; end flips the active flag."""

    async def test_get_session_maps_row(self) -> None:
        """Rows become SessionRecords with typed history."""
        row = _row(history=[{"role": "user", "content": "hi"}], message_count=1)
        record = await _store(_mock_session(_result(row))).get_session("s-1")
        assert record.id == "s-1"
        assert record.user_id == "user-1"
        assert record.history[0].role == MessageRole.USER
        assert record.message_count == 1

    async def test_get_session_unknown(self) -> None:
        """Unknown ids read as None."""
        assert await _store(_mock_session(_result(None))).get_session("x") is None

    async def test_load_history_unknown_is_empty(self) -> None:
        """Unknown ids read as an empty transcript."""
        assert await _store(_mock_session(_result(None))).load_history("x") == []

    async def test_load_history_applies_cap(self) -> None:
        """Over-long stored history is trimmed on read."""
        history = [{"role": "user", "content": f"m{i}"} for i in range(6)]
        store = _store(_mock_session(_result(_row(history=history))), history_cap=4)
        entries = await store.load_history("s-1")
        assert [entry.content for entry in entries] == ["m2", "m3", "m4", "m5"]

    async def test_end_session(self) -> None:
        """Ending marks the row inactive."""
        row = _row()
        await _store(_mock_session(_result(row))).end_session("s-1")
        assert row.active is False

    async def test_end_unknown_session(self) -> None:
        """Ending an unknown id raises."""
        with pytest.raises(SessionNotFoundError):
            await _store(_mock_session(_result(None))).end_session("x")
