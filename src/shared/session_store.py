"""Session store contract and in-memory implementation.

A session is one user's bounded conversational memory. At most one
session per user is active; it stays active until end_session is
called explicitly. The Postgres-backed store lives in
src/db/session_store.py and honours the same contract.
"""

import asyncio
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.shared.transcript import HISTORY_CAP, Transcript, TranscriptEntry
from src.shared.types import AgentName


class SessionNotFoundError(LookupError):
    """Raised when a session id does not exist in the store."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id!r} not found")
        self.session_id = session_id


class SessionRecord(BaseModel):
    """Persisted session document.

    Dumps with camelCase keys via model_dump(by_alias=True):
    {id, userId, history, lastAgentName, createdAt, updatedAt,
    messageCount, active}.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    history: list[TranscriptEntry] = []
    last_agent_name: str = AgentName.TRIAGE.value
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    message_count: int = 0
    active: bool = True


class SessionStore(Protocol):
    """Operations the turn orchestrator needs from session storage."""

    async def get_or_create_active_session(self, user_id: str) -> str:
        """Return the user's active session id, creating one if needed."""
        ...

    async def get_session(self, session_id: str) -> SessionRecord | None:
        """Return the session record, or None if unknown."""
        ...

    async def load_history(self, session_id: str) -> list[TranscriptEntry]:
        """Return the stored transcript, oldest first ([] if unknown)."""
        ...

    async def append_and_trim(
        self,
        session_id: str,
        new_entries: Sequence[TranscriptEntry],
        last_agent_name: str,
    ) -> None:
        """Append entries, trim to the cap, and bump the message counter."""
        ...

    async def end_session(self, session_id: str) -> None:
        """Mark the session inactive."""
        ...


class InMemorySessionStore:
    """Process-local SessionStore used for tests and local development.

    Args:
        history_cap: Maximum persisted transcript length.
    """

    def __init__(self, history_cap: int = HISTORY_CAP) -> None:
        self._history_cap = history_cap
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = asyncio.Lock()

    async def get_or_create_active_session(self, user_id: str) -> str:
        async with self._lock:
            active = [
                record
                for record in self._sessions.values()
                if record.user_id == user_id and record.active
            ]
            if active:
                return max(active, key=lambda r: r.updated_at).id
            session_id = str(uuid.uuid4())
            self._sessions[session_id] = SessionRecord(id=session_id, user_id=user_id)
            return session_id

    async def get_session(self, session_id: str) -> SessionRecord | None:
        record = self._sessions.get(session_id)
        return record.model_copy(deep=True) if record else None

    async def load_history(self, session_id: str) -> list[TranscriptEntry]:
        record = self._sessions.get(session_id)
        if record is None:
            return []
        return [entry.model_copy() for entry in record.history]

    async def append_and_trim(
        self,
        session_id: str,
        new_entries: Sequence[TranscriptEntry],
        last_agent_name: str,
    ) -> None:
        async with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                raise SessionNotFoundError(session_id)
            transcript = Transcript(record.history, cap=self._history_cap)
            transcript.extend(new_entries)
            record.history = transcript.entries()
            record.last_agent_name = last_agent_name
            record.message_count += 1
            record.updated_at = datetime.now(UTC)

    async def end_session(self, session_id: str) -> None:
        async with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                raise SessionNotFoundError(session_id)
            record.active = False
            record.updated_at = datetime.now(UTC)
