"""Shared test fixtures for the recovery chat test suite."""

from unittest.mock import AsyncMock

import pytest

from src.agents.catalog import Catalog, build_catalog
from src.agents.runner import RunOutcome
from src.config.settings import Settings
from src.services.turn_orchestrator import TurnOrchestrator
from src.shared.context import ConversationContext, create_initial_context
from src.shared.session_store import InMemorySessionStore
from src.shared.types import AgentName


@pytest.fixture
def settings() -> Settings:
    """Provide test settings with safe defaults.

    Returns:
        Settings configured for testing (no real API calls).
    """
    return Settings(
        database_name="new_freedom_test",
        database_password="test-password",
        openai_api_key="sk-test-fake-key",
        session_backend="memory",
    )


@pytest.fixture
def catalog() -> Catalog:
    """Default seven-agent catalog."""
    return build_catalog()


@pytest.fixture
def store() -> InMemorySessionStore:
    """Empty in-memory session store."""
    return InMemorySessionStore()


@pytest.fixture
def runner() -> AsyncMock:
    """Agent runner stub that answers from triage by default."""
    mock_runner = AsyncMock()
    mock_runner.run.return_value = RunOutcome(
        final_output="Hi, I'm glad you reached out. What can I help with today?",
        last_agent_name=AgentName.TRIAGE.value,
        agent_path=(AgentName.TRIAGE.value,),
    )
    return mock_runner


@pytest.fixture
def orchestrator(
    catalog: Catalog,
    runner: AsyncMock,
    store: InMemorySessionStore,
) -> TurnOrchestrator:
    """Orchestrator wired to the stub runner and in-memory store."""
    return TurnOrchestrator(catalog, runner, store)


@pytest.fixture
def context() -> ConversationContext:
    """Authenticated turn context."""
    return create_initial_context("user-1", "session-1", user_name="Alex")
