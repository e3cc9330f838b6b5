"""Tests for the typed conversation context."""

import pytest

from src.shared.context import ConversationContext, create_initial_context
from src.shared.types import AgentName, Lane


def test_initial_context_defaults() -> None:
    """A fresh context has cleared flags and triage as last agent."""
    context = create_initial_context("user-1", "session-1")
    assert context.user_id == "user-1"
    assert context.session_id == "session-1"
    assert context.active_lane == Lane.ALL
    assert context.user_role == "member"
    assert context.crisis_detected is False
    assert context.handoff_occurred is False
    assert context.last_agent_name == AgentName.TRIAGE.value
    assert context.case_manager_id is None


def test_blank_role_defaults_to_member() -> None:
    """An empty role from the caller falls back to member."""
    context = create_initial_context("user-1", "session-1", user_role="")
    assert context.user_role == "member"


def test_crisis_flag_is_monotonic() -> None:
    """Once set, crisis_detected cannot be cleared."""
    context = create_initial_context("user-1", "session-1")
    context.mark_crisis_detected()
    assert context.crisis_detected is True
    context.mark_crisis_detected()
    assert context.crisis_detected is True
    with pytest.raises(ValueError):
        context.crisis_detected = False


def test_other_fields_stay_mutable() -> None:
    """Hand-off bookkeeping can be updated during a turn."""
    context = create_initial_context("user-1", "session-1")
    context.handoff_occurred = True
    context.last_agent_name = AgentName.RESOURCE_FINDER.value
    assert context.handoff_occurred is True
    assert context.last_agent_name == "Resource Finder"


def test_is_authenticated() -> None:
    """An empty user id means unauthenticated."""
    assert ConversationContext(user_id="u", session_id="s").is_authenticated
    assert not ConversationContext(user_id="", session_id="s").is_authenticated


def test_lane_is_validated() -> None:
    """Lanes are limited to the known values."""
    context = create_initial_context("user-1", "session-1", active_lane=Lane.RECOVERY)
    assert context.active_lane.value == "lane2"
    with pytest.raises(ValueError):
        ConversationContext(user_id="u", session_id="s", active_lane="lane9")
