"""Tests for the chat endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.agents.runner import RunOutcome
from src.api.app import create_app
from src.safety.triggers import CRISIS_FALLBACK_MESSAGE
from src.services.turn_orchestrator import TurnOrchestrator
from src.shared.types import AgentName

USER_HEADERS = {"X-User-Id": "user-1", "X-User-Name": "Alex"}


@pytest.fixture
def client(orchestrator: TurnOrchestrator) -> TestClient:
    """Test client over an app wired to the stub orchestrator."""
    return TestClient(create_app(orchestrator))


class TestChat:
    """POST /chat runs one turn for the caller."""

    def test_requires_user_header(self, client: TestClient) -> None:
        """Missing identity is a 401."""
        response = client.post("/chat", json={"message": "hello"})
        assert response.status_code == 401
        assert response.json()["detail"] == "User must be authenticated."

    def test_reply_uses_camel_case(self, client: TestClient) -> None:
        """Replies serialize with camelCase keys."""
        response = client.post("/chat", json={"message": "hello"}, headers=USER_HEADERS)
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {
            "reply",
            "agentName",
            "sessionId",
            "handoffOccurred",
            "crisisDetected",
        }
        assert body["agentName"] == AgentName.TRIAGE.value
        assert body["handoffOccurred"] is False
        assert body["crisisDetected"] is False

    def test_session_id_is_reused(self, client: TestClient) -> None:
        """A returned sessionId continues the same conversation."""
        first = client.post("/chat", json={"message": "hello"}, headers=USER_HEADERS)
        session_id = first.json()["sessionId"]
        second = client.post(
            "/chat",
            json={"message": "I need a job", "sessionId": session_id},
            headers=USER_HEADERS,
        )
        assert second.json()["sessionId"] == session_id

    def test_passes_identity_to_turn(
        self,
        client: TestClient,
        runner: AsyncMock,
    ) -> None:
        """Header identity reaches the agent context."""
        client.post("/chat", json={"message": "hello"}, headers=USER_HEADERS)
        context = runner.run.await_args.args[2]
        assert context.user_id == "user-1"
        assert context.user_name == "Alex"

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message_rejected(self, client: TestClient, message: str) -> None:
        """Empty or whitespace-only messages are a 422."""
        response = client.post("/chat", json={"message": message}, headers=USER_HEADERS)
        assert response.status_code == 422

    def test_crisis_message(self, client: TestClient, runner: AsyncMock) -> None:
        """Crisis turns report crisisDetected and the crisis agent."""
        runner.run.return_value = RunOutcome(
            final_output="",
            last_agent_name=AgentName.CRISIS.value,
            agent_path=(AgentName.CRISIS.value,),
        )
        response = client.post(
            "/chat",
            json={"message": "I want to kill myself"},
            headers=USER_HEADERS,
        )
        body = response.json()
        assert body["crisisDetected"] is True
        assert body["agentName"] == AgentName.CRISIS.value
        assert body["reply"] == CRISIS_FALLBACK_MESSAGE


class TestEndSession:
    """POST /chat/sessions/{id}/end closes the caller's session."""

    def test_ends_own_session(self, client: TestClient) -> None:
        """The owner can end their session."""
        session_id = client.post(
            "/chat", json={"message": "hello"}, headers=USER_HEADERS
        ).json()["sessionId"]
        response = client.post(f"/chat/sessions/{session_id}/end", headers=USER_HEADERS)
        assert response.status_code == 200
        assert response.json() == {"sessionId": session_id, "active": False}

        next_turn = client.post("/chat", json={"message": "hi again"}, headers=USER_HEADERS)
        assert next_turn.json()["sessionId"] != session_id

    def test_unknown_session(self, client: TestClient) -> None:
        """Unknown ids are a 404."""
        response = client.post("/chat/sessions/nope/end", headers=USER_HEADERS)
        assert response.status_code == 404

    def test_other_users_session(self, client: TestClient) -> None:
        """Another user's session is reported as not found."""
        session_id = client.post(
            "/chat", json={"message": "hello"}, headers=USER_HEADERS
        ).json()["sessionId"]
        response = client.post(
            f"/chat/sessions/{session_id}/end",
            headers={"X-User-Id": "user-2"},
        )
        assert response.status_code == 404
