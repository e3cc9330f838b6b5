"""Agent runner seam between the turn orchestrator and the Agents SDK.

The orchestrator only depends on the AgentRunner protocol, so tests can
drive whole turns with a stub runner instead of a live model.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import (
    Agent,
    HandoffOutputItem,
    ItemHelpers,
    MaxTurnsExceeded,
    MessageOutputItem,
    Runner,
    set_default_openai_key,
)
from src.agents.catalog import Catalog
from src.agents.pipeline import build_isolated_agent, build_sdk_agents
from src.config.settings import Settings, get_settings
from src.shared.context import ConversationContext

logger = logging.getLogger(__name__)


class MissingApiKeyError(RuntimeError):
    """Raised when the model API key is not configured."""


class HandoffViolationError(RuntimeError):
    """Raised when a run hands off along an edge the catalog forbids."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Hand-off {source!r} -> {target!r} is not allowed")
        self.source = source
        self.target = target


@dataclass(frozen=True)
class RunOutcome:
    """Result of one bounded agent run.

    Attributes:
        final_output: Reply text, or None when the run produced none.
        last_agent_name: Agent that produced the reply (or was active
            when the budget ran out).
        agent_path: Starting agent followed by every hand-off target,
            in order.
        budget_exhausted: True when the turn budget stopped the run.
    """

    final_output: str | None
    last_agent_name: str
    agent_path: tuple[str, ...]
    budget_exhausted: bool = False


class AgentRunner(Protocol):
    """Runs an agent graph for one turn."""

    async def run(
        self,
        agent_name: str,
        input_items: Sequence[Mapping[str, Any]],
        context: ConversationContext,
        *,
        max_turns: int,
        allow_handoffs: bool = True,
    ) -> RunOutcome: ...


def _agent_path(start: str, items: Sequence[Any]) -> tuple[str, ...]:
    path = [start]
    for item in items:
        if isinstance(item, HandoffOutputItem):
            path.append(item.target_agent.name)
    return tuple(path)


def _last_message_text(items: Sequence[Any]) -> str | None:
    for item in reversed(items):
        if isinstance(item, MessageOutputItem):
            text = ItemHelpers.text_message_output(item).strip()
            if text:
                return text
    return None


def _as_text(final_output: Any) -> str | None:
    if final_output is None:
        return None
    text = final_output if isinstance(final_output, str) else str(final_output)
    return text.strip() or None


class SdkAgentRunner:
    """AgentRunner backed by the OpenAI Agents SDK ``Runner``.

    SDK agents are built lazily on the first run so constructing the
    runner never needs an API key.
    """

    def __init__(
        self,
        catalog: Catalog,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._catalog = catalog
        self._model = settings.agent_model
        self._api_key = settings.openai_api_key
        self._agents: Mapping[str, Agent] | None = None
        self._isolated: dict[str, Agent] = {}

    def _agent_for(self, agent_name: str, allow_handoffs: bool) -> Agent:
        if not self._api_key:
            raise MissingApiKeyError("OPENAI_API_KEY is not configured")
        if self._agents is None:
            set_default_openai_key(self._api_key)
            self._agents = build_sdk_agents(self._catalog, self._model)

        spec = self._catalog.get(agent_name)
        agent = self._agents[spec.name]
        if allow_handoffs:
            return agent
        if agent_name not in self._isolated:
            self._isolated[agent_name] = build_isolated_agent(agent, spec)
        return self._isolated[agent_name]

    async def run(
        self,
        agent_name: str,
        input_items: Sequence[Mapping[str, Any]],
        context: ConversationContext,
        *,
        max_turns: int,
        allow_handoffs: bool = True,
    ) -> RunOutcome:
        """Run ``agent_name`` on the given input within ``max_turns`` steps.

        Args:
            agent_name: Catalog name of the starting agent.
            input_items: Role/content messages, oldest first.
            context: Turn context handed to instructions and tools.
            max_turns: Step budget for the run.
            allow_handoffs: When False the agent runs with no hand-offs.

        Returns:
            RunOutcome. Budget exhaustion is reported, not raised.

        Raises:
            MissingApiKeyError: If no API key is configured.
        """
        agent = self._agent_for(agent_name, allow_handoffs)
        try:
            result = await Runner.run(
                agent,
                [dict(item) for item in input_items],
                context=context,
                max_turns=max_turns,
            )
        except MaxTurnsExceeded as exc:
            run_data = getattr(exc, "run_data", None)
            items = list(run_data.new_items) if run_data is not None else []
            last_agent = (
                run_data.last_agent.name if run_data is not None else agent_name
            )
            logger.warning(
                "agent_budget_exhausted",
                extra={
                    "start_agent": agent_name,
                    "last_agent": last_agent,
                    "max_turns": max_turns,
                },
            )
            return RunOutcome(
                final_output=_last_message_text(items),
                last_agent_name=last_agent,
                agent_path=_agent_path(agent_name, items),
                budget_exhausted=True,
            )

        return RunOutcome(
            final_output=_as_text(result.final_output),
            last_agent_name=result.last_agent.name,
            agent_path=_agent_path(agent_name, result.new_items),
        )
