"""Fixtures for tool tests: a mocked database session scope."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from src.shared.context import ConversationContext, create_initial_context


@pytest.fixture
def db_session() -> AsyncMock:
    """Mock AsyncSession handed out by the fake scope."""
    return AsyncMock()


@pytest.fixture
def fake_scope(db_session: AsyncMock):
    """Drop-in replacement for src.db.session.session_scope."""

    @asynccontextmanager
    async def _scope():
        yield db_session

    return _scope


@pytest.fixture
def anonymous_context() -> ConversationContext:
    """Context with no authenticated user."""
    return create_initial_context("", "session-1")
