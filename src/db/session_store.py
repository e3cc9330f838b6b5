"""Postgres-backed SessionStore.

Reads and writes the agent_sessions table. Appends happen under a row
lock (SELECT ... FOR UPDATE) and merge into the stored transcript
rather than overwriting it, so two overlapping turns for the same
session both land. A partial unique index keeps one active session
per user even when two requests race to create it.
"""

import logging
import uuid
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import AgentSession
from src.db.session import session_scope
from src.shared.session_store import SessionNotFoundError, SessionRecord
from src.shared.transcript import HISTORY_CAP, Transcript, TranscriptEntry
from src.shared.types import AgentName

logger = logging.getLogger(__name__)

ScopeFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class SqlSessionStore:
    """SessionStore implementation over async SQLAlchemy.

    Args:
        scope: Factory for a committing session context manager.
        history_cap: Maximum persisted transcript length.
    """

    def __init__(
        self,
        scope: ScopeFactory | None = None,
        history_cap: int = HISTORY_CAP,
    ) -> None:
        self._scope = scope or session_scope
        self._history_cap = history_cap

    async def get_or_create_active_session(self, user_id: str) -> str:
        """Return the user's active session id, creating one if none exists.

        Args:
            user_id: Owning user id.

        Returns:
            Active session id.
        """
        async with self._scope() as session:
            existing = await _find_active(session, user_id)
            if existing is not None:
                return existing.id

            now = datetime.now(UTC)
            row = AgentSession(
                id=str(uuid.uuid4()),
                user_id=user_id,
                history=[],
                last_agent_name=AgentName.TRIAGE.value,
                message_count=0,
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            try:
                await session.flush()
            except IntegrityError:
                # Another request created the active session first.
                await session.rollback()
                existing = await _find_active(session, user_id)
                if existing is None:
                    raise
                logger.info("session_create_race", extra={"user_id": user_id})
                return existing.id

            logger.info("session_created", extra={"session_id": row.id})
            return row.id

    async def get_session(self, session_id: str) -> SessionRecord | None:
        """Load a session record.

        Args:
            session_id: Session id.

        Returns:
            SessionRecord, or None if unknown.
        """
        async with self._scope() as session:
            row = await _get_row(session, session_id)
            return _to_record(row) if row is not None else None

    async def load_history(self, session_id: str) -> list[TranscriptEntry]:
        """Load the stored transcript, oldest first.

        Args:
            session_id: Session id.

        Returns:
            Transcript entries ([] for an unknown session).
        """
        async with self._scope() as session:
            row = await _get_row(session, session_id)
            if row is None:
                return []
            return Transcript(row.history or [], cap=self._history_cap).entries()

    async def append_and_trim(
        self,
        session_id: str,
        new_entries: Sequence[TranscriptEntry],
        last_agent_name: str,
    ) -> None:
        """Append entries, trim to the cap, and bump the message counter.

        Args:
            session_id: Session id.
            new_entries: Entries to append, oldest first.
            last_agent_name: Agent that produced the reply.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        async with self._scope() as session:
            row = await _get_row(session, session_id, for_update=True)
            if row is None:
                raise SessionNotFoundError(session_id)
            transcript = Transcript(row.history or [], cap=self._history_cap)
            transcript.extend(new_entries)
            row.history = transcript.to_documents()
            row.last_agent_name = last_agent_name
            row.message_count = (row.message_count or 0) + 1
            row.updated_at = datetime.now(UTC)

    async def end_session(self, session_id: str) -> None:
        """Mark a session inactive.

        Args:
            session_id: Session id.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        async with self._scope() as session:
            row = await _get_row(session, session_id, for_update=True)
            if row is None:
                raise SessionNotFoundError(session_id)
            row.active = False
            row.updated_at = datetime.now(UTC)
        logger.info("session_ended", extra={"session_id": session_id})


async def _find_active(session: AsyncSession, user_id: str) -> AgentSession | None:
    result = await session.execute(
        select(AgentSession)
        .where(AgentSession.user_id == user_id, AgentSession.active.is_(True))
        .order_by(AgentSession.updated_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _get_row(
    session: AsyncSession,
    session_id: str,
    *,
    for_update: bool = False,
) -> AgentSession | None:
    stmt = select(AgentSession).where(AgentSession.id == session_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def _to_record(row: AgentSession) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        user_id=row.user_id,
        history=[TranscriptEntry.model_validate(entry) for entry in row.history or []],
        last_agent_name=row.last_agent_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
        message_count=row.message_count or 0,
        active=row.active,
    )
