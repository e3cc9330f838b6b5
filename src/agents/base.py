"""Immutable agent description shared by the catalog and SDK wiring."""

from collections.abc import Callable
from dataclasses import dataclass

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import FunctionTool
from src.shared.context import ConversationContext
from src.shared.types import Lane


@dataclass(frozen=True)
class AgentSpec:
    """Static description of one conversational agent.

    Hand-off edges live in the catalog graph, not here.

    Attributes:
        name: Unique display name.
        summary: One-line capability, shown to other agents as the
            hand-off description.
        instructions: Builds the system prompt from the turn context.
        tools: Function tools bound to this agent.
        lane: Lane this agent primarily serves.
        input_guardrail: Whether crisis detection runs before this agent.
        output_guardrail: Whether replies are scanned for prohibited content.
    """

    name: str
    summary: str
    instructions: Callable[[ConversationContext], str]
    tools: tuple[FunctionTool, ...] = ()
    lane: Lane = Lane.ALL
    input_guardrail: bool = False
    output_guardrail: bool = True
