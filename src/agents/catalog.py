"""Agent catalog and hand-off graph.

The catalog is built once by a pure function and never mutated. SDK
agent objects are wired from it in src/agents/pipeline.py; no agent
module imports another agent.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from src.agents.base import AgentSpec
from src.agents.crisis import crisis_agent
from src.agents.life_navigator import life_navigator_agent
from src.agents.peer_mentor import peer_mentor_agent
from src.agents.recovery_guide import recovery_guide_agent
from src.agents.resource_finder import resource_finder_agent
from src.agents.resume_coach import resume_coach_agent
from src.agents.triage import triage_agent
from src.shared.types import AgentName

logger = logging.getLogger(__name__)

TRIAGE = AgentName.TRIAGE.value
CRISIS = AgentName.CRISIS.value

DEFAULT_AGENTS: tuple[AgentSpec, ...] = (
    triage_agent,
    crisis_agent,
    life_navigator_agent,
    recovery_guide_agent,
    resource_finder_agent,
    resume_coach_agent,
    peer_mentor_agent,
)

# Resume Coach does not hand back to Life Navigator: the pair would form
# a loop that never passes through triage.
HANDOFF_EDGES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        TRIAGE: (
            CRISIS,
            AgentName.LIFE_NAVIGATOR.value,
            AgentName.RECOVERY_GUIDE.value,
            AgentName.RESOURCE_FINDER.value,
            AgentName.RESUME_COACH.value,
            AgentName.PEER_MENTOR.value,
        ),
        CRISIS: (TRIAGE,),
        AgentName.LIFE_NAVIGATOR.value: (
            TRIAGE,
            AgentName.RESUME_COACH.value,
            AgentName.RESOURCE_FINDER.value,
        ),
        AgentName.RECOVERY_GUIDE.value: (TRIAGE, CRISIS),
        AgentName.RESOURCE_FINDER.value: (TRIAGE,),
        AgentName.RESUME_COACH.value: (TRIAGE,),
        AgentName.PEER_MENTOR.value: (TRIAGE, AgentName.RECOVERY_GUIDE.value),
    }
)


class CatalogError(ValueError):
    """Raised when the agent catalog or hand-off graph is malformed."""


@dataclass(frozen=True)
class Catalog:
    """Validated, read-only set of agents and their hand-off edges.

    Attributes:
        agents: Agent specs keyed by name.
        edges: Allowed hand-off targets keyed by source agent name.
    """

    agents: Mapping[str, AgentSpec]
    edges: Mapping[str, frozenset[str]]

    @property
    def names(self) -> tuple[str, ...]:
        """Agent names in declaration order."""
        return tuple(self.agents)

    @property
    def triage(self) -> AgentSpec:
        """The entry-point agent."""
        return self.agents[TRIAGE]

    @property
    def crisis(self) -> AgentSpec:
        """The crisis agent used for direct escalation."""
        return self.agents[CRISIS]

    def get(self, name: str) -> AgentSpec:
        """Look up an agent spec by name.

        Raises:
            CatalogError: If no agent has this name.
        """
        try:
            return self.agents[name]
        except KeyError:
            raise CatalogError(f"Unknown agent: {name!r}") from None

    def allowed_targets(self, agent_name: str) -> frozenset[str]:
        """Return the agents ``agent_name`` may hand off to.

        Raises:
            CatalogError: If ``agent_name`` is not in the catalog.
        """
        if agent_name not in self.agents:
            raise CatalogError(f"Unknown agent: {agent_name!r}")
        return self.edges.get(agent_name, frozenset())


def build_catalog(
    agents: Iterable[AgentSpec] | None = None,
    edges: Mapping[str, Iterable[str]] | None = None,
) -> Catalog:
    """Build and validate the agent catalog.

    Args:
        agents: Agent specs; defaults to the seven platform agents.
        edges: Hand-off adjacency keyed by source name; defaults to
            HANDOFF_EDGES.

    Returns:
        A frozen Catalog.

    Raises:
        CatalogError: If any agent or graph invariant is violated.
    """
    specs = tuple(DEFAULT_AGENTS if agents is None else agents)
    raw_edges = HANDOFF_EDGES if edges is None else edges

    by_name: dict[str, AgentSpec] = {}
    for spec in specs:
        if spec.name in by_name:
            raise CatalogError(f"Duplicate agent name: {spec.name!r}")
        by_name[spec.name] = spec

    for required in (TRIAGE, CRISIS):
        if required not in by_name:
            raise CatalogError(f"Catalog is missing required agent {required!r}")

    graph: dict[str, frozenset[str]] = {}
    for source, targets in raw_edges.items():
        if source not in by_name:
            raise CatalogError(f"Edge source {source!r} is not a known agent")
        target_set = frozenset(targets)
        for target in target_set:
            if target not in by_name:
                raise CatalogError(
                    f"Edge {source!r} -> {target!r} targets an unknown agent"
                )
            if target == source:
                raise CatalogError(f"Agent {source!r} cannot hand off to itself")
        graph[source] = target_set

    _validate_graph(by_name, graph)

    catalog = Catalog(
        agents=MappingProxyType(by_name),
        edges=MappingProxyType(graph),
    )
    logger.info(
        "catalog_built",
        extra={
            "agent_count": len(by_name),
            "edge_count": sum(len(t) for t in graph.values()),
        },
    )
    return catalog


def _validate_graph(
    by_name: Mapping[str, AgentSpec],
    graph: Mapping[str, frozenset[str]],
) -> None:
    """Check the hand-off invariants on a resolved graph.

    Raises:
        CatalogError: On the first violated invariant.
    """
    triage_targets = graph.get(TRIAGE, frozenset())
    unreachable = sorted(set(by_name) - {TRIAGE} - triage_targets)
    if unreachable:
        raise CatalogError(
            f"Triage cannot reach {unreachable} in one hop"
        )

    crisis_targets = graph.get(CRISIS, frozenset())
    if crisis_targets != frozenset({TRIAGE}):
        raise CatalogError(
            f"Crisis agent must hand off only to triage, got {sorted(crisis_targets)}"
        )

    for name in by_name:
        if name == TRIAGE:
            continue
        if TRIAGE not in graph.get(name, frozenset()):
            raise CatalogError(f"Agent {name!r} has no hand-off back to triage")

    cycle = _find_cycle_without(graph, TRIAGE)
    if cycle:
        raise CatalogError(
            "Hand-off cycle does not pass through triage: " + " -> ".join(cycle)
        )


def _find_cycle_without(
    graph: Mapping[str, frozenset[str]],
    excluded: str,
) -> list[str] | None:
    """Return one cycle in ``graph`` with ``excluded`` removed, if any.

    Iterative three-colour depth-first search.

    Returns:
        The cycle as a node list closing on its first node, or None.
    """
    white, grey, black = 0, 1, 2
    colour = {node: white for node in graph if node != excluded}

    for root in sorted(colour):
        if colour[root] != white:
            continue
        path = [root]
        stack = [iter(sorted(graph.get(root, frozenset()) - {excluded}))]
        colour[root] = grey
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                colour[path.pop()] = black
                continue
            state = colour.get(nxt, white)
            if state == grey:
                return path[path.index(nxt):] + [nxt]
            if state == white:
                colour[nxt] = grey
                path.append(nxt)
                stack.append(iter(sorted(graph.get(nxt, frozenset()) - {excluded})))
    return None
