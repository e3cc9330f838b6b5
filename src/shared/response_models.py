"""Pydantic result models for tools, guardrails, and chat turns.

Each model defines the typed contract for a function return value,
replacing raw dict returns with validated Pydantic models.

All models support dict-style access (result["key"] and "key" in result)
so tool payloads read the same whether callers hold a model or the
JSON the model saw.
"""

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.shared.types import GuardrailStatus


class AgentResult(BaseModel):
    """Base model with dict-compatible access.

    Supports: result["key"], "key" in result, result.get("key"),
    {**result}, and dict(result).
    """

    def __getitem__(self, key: str) -> Any:
        """Support dict-style subscript access.

        Args:
            key: Field name to retrieve.

        Returns:
            Field value.

        Raises:
            AttributeError: If key is not a valid field name.
        """
        return getattr(self, key)

    def __contains__(self, key: str) -> bool:
        """Support 'key in result' membership test.

        Args:
            key: Field name to check.

        Returns:
            True if key is a model field with a non-None value.
        """
        if key not in type(self).model_fields:
            return False
        return getattr(self, key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a field value by name with an optional default.

        Args:
            key: Field name to look up.
            default: Value to return if key is not a model field.

        Returns:
            Field value if key exists, otherwise default.
        """
        if key in type(self).model_fields:
            return getattr(self, key)
        return default

    def keys(self) -> list[str]:
        """Return all field names for dict unpacking support."""
        return list(type(self).model_fields.keys())

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        """Iterate over field names for dict() and {**} unpacking."""
        return iter(type(self).model_fields.keys())


# --- Tool results ---


class ToolResult(AgentResult):
    """Tagged tool payload: success with fields, or failure with an error.

    Tools never raise for expected conditions such as a missing
    authenticated user or an unknown record id.
    """

    success: bool
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> "ToolResult":
        """Build a failure payload.

        Args:
            error: Human-readable error the agent can relay.

        Returns:
            ToolResult with success=False.
        """
        return cls(success=False, error=error)


NOT_AUTHENTICATED = "User not authenticated."


class ResourceSearchResult(ToolResult):
    """Result of a community resource search."""

    category: str | None = None
    count: int = 0
    resources: list[dict[str, Any]] = []


class ResourceDetailResult(ToolResult):
    """Result of fetching one community resource."""

    resource: dict[str, Any] | None = None


class GoalListResult(ToolResult):
    """Result of listing a user's goals."""

    count: int = 0
    goals: list[dict[str, Any]] = []


class GoalCreateResult(ToolResult):
    """Result of creating a goal."""

    goal_id: str | None = None
    message: str | None = None


class JournalEntryResult(ToolResult):
    """Result of writing a journal entry."""

    entry_id: str | None = None
    message: str | None = None


class JournalListResult(ToolResult):
    """Result of listing recent journal entries."""

    count: int = 0
    entries: list[dict[str, Any]] = []


class ResumeResult(ToolResult):
    """Result of fetching a user's resume sections."""

    sections: dict[str, str] = {}


class ResumeSectionResult(ToolResult):
    """Result of saving one resume section."""

    section: str | None = None
    message: str | None = None


class UserProfileResult(ToolResult):
    """Result of reading the user's profile."""

    profile: dict[str, Any] | None = None


# --- Guardrails ---


class GuardrailOutcome(AgentResult):
    """Tagged guardrail result: clear, or tripped with a reason.

    Attributes:
        status: CLEAR or TRIPPED.
        reason: Why the guardrail tripped.
        info: Structured detail for the caller (resources, violations).
        elapsed_ms: Scan duration.
    """

    status: GuardrailStatus
    reason: str | None = None
    info: dict[str, Any] | None = None
    elapsed_ms: float = 0.0

    @classmethod
    def clear(cls) -> "GuardrailOutcome":
        """Build a clear outcome."""
        return cls(status=GuardrailStatus.CLEAR)

    @classmethod
    def tripped(cls, reason: str, info: dict[str, Any]) -> "GuardrailOutcome":
        """Build a tripped outcome.

        Args:
            reason: Summary of the trip.
            info: Structured detail.

        Returns:
            GuardrailOutcome with status TRIPPED.
        """
        return cls(status=GuardrailStatus.TRIPPED, reason=reason, info=info)

    @property
    def is_tripped(self) -> bool:
        """Whether the guardrail matched."""
        return self.status == GuardrailStatus.TRIPPED


class GuardrailExecution(AgentResult):
    """Stable guardrail contract payload."""

    tripwire_triggered: bool
    output_info: dict[str, Any] | None = None


# --- Chat turn ---


class ChatReply(AgentResult):
    """Structured reply for one conversational turn.

    Serializes with camelCase keys (agentName, sessionId, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reply: str
    agent_name: str
    session_id: str
    handoff_occurred: bool = False
    crisis_detected: bool = False


class ChatRequest(BaseModel):
    """Incoming chat message body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = Field(min_length=1)
    session_id: str | None = None
