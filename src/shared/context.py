"""Per-turn conversation context threaded through agents and tools.

The same instance is handed to the agent runner (as the SDK run
context) and from there to every tool, so tools read the user
identity from a typed field rather than from an untyped bag.
"""

from typing import Any

from pydantic import BaseModel

from src.shared.types import AgentName, Lane


class ConversationContext(BaseModel):
    """Typed context for one conversational turn.

    Attributes:
        user_id: Authenticated user id ("" when unauthenticated).
        session_id: Active session id.
        active_lane: Lane used to bias routing.
        user_name: Display name used in agent instructions.
        user_role: Caller role, "member" by default.
        crisis_detected: Set once crisis language is seen; never cleared.
        handoff_occurred: Whether a specialist answered instead of triage.
        last_agent_name: Name of the last agent to respond.
        case_manager_id: Optional assigned case manager.
    """

    user_id: str
    session_id: str
    active_lane: Lane = Lane.ALL
    user_name: str = ""
    user_role: str = "member"
    crisis_detected: bool = False
    handoff_occurred: bool = False
    last_agent_name: str = AgentName.TRIAGE.value
    case_manager_id: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "crisis_detected" and self.crisis_detected and not value:
            raise ValueError("crisis_detected cannot be cleared within a turn")
        super().__setattr__(name, value)

    def mark_crisis_detected(self) -> None:
        """Flag the turn as a crisis turn."""
        self.crisis_detected = True

    @property
    def is_authenticated(self) -> bool:
        """Whether a user id is present."""
        return bool(self.user_id)


def create_initial_context(
    user_id: str,
    session_id: str,
    *,
    user_name: str = "",
    user_role: str = "member",
    active_lane: Lane = Lane.ALL,
    case_manager_id: str | None = None,
) -> ConversationContext:
    """Build the context for a fresh turn.

    Args:
        user_id: Authenticated user id.
        session_id: Resolved session id.
        user_name: Display name.
        user_role: Caller role.
        active_lane: Lane used to bias routing.
        case_manager_id: Optional case manager id.

    Returns:
        ConversationContext with crisis and handoff flags cleared.
    """
    return ConversationContext(
        user_id=user_id,
        session_id=session_id,
        active_lane=active_lane,
        user_name=user_name,
        user_role=user_role or "member",
        case_manager_id=case_manager_id,
    )
