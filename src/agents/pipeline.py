"""Agent pipeline assembly: wires SDK agents and hand-offs from the catalog.

This is the only module that turns AgentSpecs into OpenAI Agents SDK
objects. No agent module imports another agent; the hand-off topology
comes entirely from the validated Catalog.

Guardrails are not attached as SDK guardrails here. The turn
orchestrator runs them around the runner so a tripped crisis check can
reroute the turn instead of aborting it.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import Agent, RunContextWrapper
from agents.extensions.handoff_prompt import RECOMMENDED_PROMPT_PREFIX
from src.agents.base import AgentSpec
from src.agents.catalog import Catalog
from src.shared.context import ConversationContext


def _dynamic_instructions(
    spec: AgentSpec,
    *,
    with_handoff_prefix: bool,
) -> Callable[[RunContextWrapper[ConversationContext], Agent], str]:
    """Adapt context-only instructions to the SDK signature."""

    def instructions(
        wrapper: RunContextWrapper[ConversationContext],
        agent: Agent,
    ) -> str:
        prompt = spec.instructions(wrapper.context)
        if with_handoff_prefix:
            return f"{RECOMMENDED_PROMPT_PREFIX}\n\n{prompt}"
        return prompt

    return instructions


def build_sdk_agents(catalog: Catalog, model: str) -> Mapping[str, Agent]:
    """Build one SDK Agent per catalog entry with hand-offs wired.

    Hand-offs are assigned after every agent exists, since the graph
    contains edges in both directions (triage to specialist and back).

    Args:
        catalog: Validated agent catalog.
        model: Model name passed to every agent.

    Returns:
        Read-only mapping of agent name to configured SDK Agent.
    """
    sdk_agents: dict[str, Agent] = {}
    for spec in catalog.agents.values():
        targets = catalog.allowed_targets(spec.name)
        sdk_agents[spec.name] = Agent[ConversationContext](
            name=spec.name,
            handoff_description=spec.summary,
            instructions=_dynamic_instructions(
                spec, with_handoff_prefix=bool(targets)
            ),
            tools=list(spec.tools),
            model=model,
        )

    for name, agent in sdk_agents.items():
        # Sorted so the hand-off tool order is stable between builds.
        agent.handoffs = [
            sdk_agents[target] for target in sorted(catalog.allowed_targets(name))
        ]

    return MappingProxyType(sdk_agents)


def build_isolated_agent(agent: Agent, spec: AgentSpec) -> Agent:
    """Clone an SDK agent with hand-offs removed.

    The clone's instructions drop the hand-off prompt prefix, since it
    has nothing to hand off to.

    Args:
        agent: Wired SDK agent from build_sdk_agents.
        spec: The catalog entry the agent was built from.

    Returns:
        A new Agent with no hand-offs.
    """
    return agent.clone(
        handoffs=[],
        instructions=_dynamic_instructions(spec, with_handoff_prefix=False),
    )
