"""Turn orchestrator: one user message in, one safe reply out.

Each turn walks Idle -> InputCheck -> (Routing | CrisisDirect) ->
OutputCheck -> Persisted -> Done. Any unexpected failure lands in
Errored, which still produces a benign reply; nothing is re-raised to
the request handler.

Lives in services/ because it ties agents/, shared/ and db/ together.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass, field

from src.agents.catalog import Catalog, build_catalog
from src.agents.runner import (
    AgentRunner,
    HandoffViolationError,
    MissingApiKeyError,
    SdkAgentRunner,
)
from src.config.settings import Settings, get_settings
from src.db.session_store import SqlSessionStore
from src.safety.triggers import CRISIS_FALLBACK_MESSAGE, ensure_crisis_resources
from src.shared.context import ConversationContext, create_initial_context
from src.shared.guardrails import scan_for_crisis, scan_output
from src.shared.response_models import ChatReply
from src.shared.session_store import (
    InMemorySessionStore,
    SessionNotFoundError,
    SessionStore,
)
from src.shared.transcript import TranscriptEntry
from src.shared.types import SYSTEM_AGENT_NAME, MessageRole, TurnState

logger = logging.getLogger(__name__)

SAFE_CONTINUATION_MESSAGE = (
    "I want to make sure I give you information that is helpful and safe. "
    "Could you tell me a little more about what you need? "
    "I can also connect you with your case manager."
)

GENERIC_PROMPT = "I'm here to help. Could you tell me more about what you need?"

ERROR_MESSAGE = (
    "I'm sorry, I'm having trouble right now. Please try again in a moment."
)

UNAVAILABLE_MESSAGE = (
    "I'm sorry, the AI assistant is temporarily unavailable. "
    "If you need immediate help, please contact:\n"
    "- **988 Suicide & Crisis Lifeline:** Call or text 988\n"
    "- **SAMHSA Helpline:** 1-800-662-4357\n\n"
    "Please try again later or reach out to your case manager."
)


@dataclass(frozen=True)
class TurnRequest:
    """One incoming user message plus caller identity.

    Attributes:
        user_id: Authenticated user id.
        message: Non-empty message text.
        session_id: Session to continue, if the client has one.
        user_name: Display name for agent instructions.
        user_role: Caller role.
    """

    user_id: str
    message: str
    session_id: str | None = None
    user_name: str = ""
    user_role: str = "member"


@dataclass
class TurnTrace:
    """States visited by one turn, in order."""

    states: list[TurnState] = field(default_factory=lambda: [TurnState.IDLE])

    def advance(self, state: TurnState) -> None:
        """Record a transition into ``state``."""
        self.states.append(state)

    @property
    def path(self) -> str:
        """States joined for logging, e.g. ``idle>input_check>routing``."""
        return ">".join(state.value for state in self.states)


class TurnOrchestrator:
    """Runs conversational turns against the agent graph.

    Args:
        catalog: Validated agent catalog.
        runner: Agent runner used for both routing and crisis runs.
        store: Session store holding transcripts between turns.
        routing_budget: Step budget for the triage graph run.
        crisis_budget: Step budget for the direct crisis run.
    """

    def __init__(
        self,
        catalog: Catalog,
        runner: AgentRunner,
        store: SessionStore,
        *,
        routing_budget: int = 10,
        crisis_budget: int = 3,
    ) -> None:
        self._catalog = catalog
        self._runner = runner
        self._store = store
        self._routing_budget = routing_budget
        self._crisis_budget = crisis_budget
        # Entries disappear once no turn for that user holds the lock.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def store(self) -> SessionStore:
        """Session store backing this orchestrator."""
        return self._store

    def _user_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def handle_turn(
        self,
        request: TurnRequest,
        trace: TurnTrace | None = None,
    ) -> ChatReply:
        """Process one user message and return the reply.

        Turns for the same user are serialized so a transcript is never
        read while another turn is still writing it.

        Args:
            request: Incoming message and caller identity.
            trace: Optional trace that collects the visited states.

        Returns:
            ChatReply. Never raises.
        """
        trace = trace if trace is not None else TurnTrace()
        async with self._user_lock(request.user_id):
            return await self._run_turn(request, trace)

    async def _run_turn(self, request: TurnRequest, trace: TurnTrace) -> ChatReply:
        session_id: str | None = None
        try:
            session_id = await self._resolve_session(request)
            history = await self._store.load_history(session_id)
            context = create_initial_context(
                request.user_id,
                session_id,
                user_name=request.user_name,
                user_role=request.user_role,
            )

            trace.advance(TurnState.INPUT_CHECK)
            crisis_outcome = scan_for_crisis(request.message)

            if crisis_outcome.is_tripped:
                trace.advance(TurnState.CRISIS_DIRECT)
                context.mark_crisis_detected()
                logger.warning(
                    "crisis_detected",
                    extra={
                        "session_id": session_id,
                        "matched_phrase": (crisis_outcome.info or {}).get(
                            "matched_phrase"
                        ),
                    },
                )
                reply = await self._run_crisis(
                    request.message,
                    context,
                    (crisis_outcome.info or {}).get("resources"),
                )
                agent_name = self._catalog.crisis.name
            else:
                trace.advance(TurnState.ROUTING)
                reply, agent_name = await self._run_routing(
                    history, request.message, context
                )
                context.handoff_occurred = agent_name != self._catalog.triage.name

            trace.advance(TurnState.OUTPUT_CHECK)
            reply = self._check_output(reply, context, session_id)
            context.last_agent_name = agent_name

            persisted = await self._persist(
                session_id, request.message, reply, agent_name
            )
            if persisted:
                trace.advance(TurnState.PERSISTED)

            trace.advance(TurnState.DONE)
            logger.info(
                "turn_completed",
                extra={
                    "session_id": session_id,
                    "agent_name": agent_name,
                    "handoff_occurred": context.handoff_occurred,
                    "crisis_detected": context.crisis_detected,
                    "persisted": persisted,
                    "reply_length": len(reply),
                    "states": trace.path,
                },
            )
            return ChatReply(
                reply=reply,
                agent_name=agent_name,
                session_id=session_id,
                handoff_occurred=context.handoff_occurred,
                crisis_detected=context.crisis_detected,
            )
        except Exception as exc:
            trace.advance(TurnState.ERRORED)
            return self._errored_reply(request, session_id, exc, trace)

    async def _resolve_session(self, request: TurnRequest) -> str:
        """Use the requested session when it is active and owned, else get-or-create."""
        if request.session_id:
            record = await self._store.get_session(request.session_id)
            if record is not None and record.active and record.user_id == request.user_id:
                return record.id
            logger.info(
                "session_id_rejected",
                extra={
                    "requested_session_id": request.session_id,
                    "found": record is not None,
                },
            )
        return await self._store.get_or_create_active_session(request.user_id)

    async def _run_routing(
        self,
        history: list[TranscriptEntry],
        message: str,
        context: ConversationContext,
    ) -> tuple[str, str]:
        """Run the graph from triage and return (reply, responding agent)."""
        input_items = [entry.to_input_item() for entry in history]
        input_items.append({"role": MessageRole.USER.value, "content": message})

        outcome = await self._runner.run(
            self._catalog.triage.name,
            input_items,
            context,
            max_turns=self._routing_budget,
        )
        self._check_agent_path(outcome.agent_path)

        if outcome.budget_exhausted:
            logger.info(
                "routing_budget_exhausted",
                extra={
                    "session_id": context.session_id,
                    "last_agent": outcome.last_agent_name,
                    "has_output": outcome.final_output is not None,
                },
            )
        return outcome.final_output or GENERIC_PROMPT, outcome.last_agent_name

    async def _run_crisis(
        self,
        message: str,
        context: ConversationContext,
        resources: dict[str, str] | None = None,
    ) -> str:
        """Run only the crisis agent and make sure the reply lists hotlines.

        Any failure or empty output yields the fixed crisis message. A
        reply missing the required numbers gets ``resources`` appended.
        """
        try:
            outcome = await self._runner.run(
                self._catalog.crisis.name,
                [{"role": MessageRole.USER.value, "content": message}],
                context,
                max_turns=self._crisis_budget,
                allow_handoffs=False,
            )
        except Exception:
            logger.exception(
                "crisis_run_failed", extra={"session_id": context.session_id}
            )
            return CRISIS_FALLBACK_MESSAGE
        if not outcome.final_output:
            return CRISIS_FALLBACK_MESSAGE
        return ensure_crisis_resources(outcome.final_output, resources)

    def _check_agent_path(self, path: tuple[str, ...]) -> None:
        """Verify every hop in ``path`` is an allowed hand-off.

        Raises:
            HandoffViolationError: On the first disallowed hop.
        """
        for source, target in zip(path, path[1:]):
            if target not in self._catalog.allowed_targets(source):
                raise HandoffViolationError(source, target)

    def _check_output(
        self,
        reply: str,
        context: ConversationContext,
        session_id: str,
    ) -> str:
        outcome = scan_output(reply)
        if not outcome.is_tripped:
            return reply
        logger.warning(
            "output_replaced",
            extra={
                "session_id": session_id,
                "categories": (outcome.info or {}).get("categories", []),
                "crisis": context.crisis_detected,
            },
        )
        if context.crisis_detected:
            return CRISIS_FALLBACK_MESSAGE
        return SAFE_CONTINUATION_MESSAGE

    async def _persist(
        self,
        session_id: str,
        message: str,
        reply: str,
        agent_name: str,
    ) -> bool:
        """Append the exchange to the transcript; failures are logged only."""
        try:
            await self._store.append_and_trim(
                session_id,
                [
                    TranscriptEntry(role=MessageRole.USER, content=message),
                    TranscriptEntry(role=MessageRole.ASSISTANT, content=reply),
                ],
                agent_name,
            )
        except Exception:
            logger.exception(
                "session_persist_failed", extra={"session_id": session_id}
            )
            return False
        return True

    def _errored_reply(
        self,
        request: TurnRequest,
        session_id: str | None,
        exc: Exception,
        trace: TurnTrace,
    ) -> ChatReply:
        resolved_session = session_id or request.session_id or ""
        logger.exception(
            "turn_errored",
            extra={
                "session_id": resolved_session,
                "error_type": type(exc).__name__,
                "states": trace.path,
            },
        )

        if scan_for_crisis(request.message).is_tripped:
            return ChatReply(
                reply=CRISIS_FALLBACK_MESSAGE,
                agent_name=self._catalog.crisis.name,
                session_id=resolved_session,
                crisis_detected=True,
            )
        if isinstance(exc, MissingApiKeyError):
            reply = UNAVAILABLE_MESSAGE
        else:
            reply = ERROR_MESSAGE
        return ChatReply(
            reply=reply,
            agent_name=SYSTEM_AGENT_NAME,
            session_id=resolved_session,
        )

    async def end_session(self, user_id: str, session_id: str) -> None:
        """End a session owned by ``user_id``.

        Raises:
            SessionNotFoundError: If the session does not exist or
                belongs to another user.
        """
        record = await self._store.get_session(session_id)
        if record is None or record.user_id != user_id:
            raise SessionNotFoundError(session_id)
        await self._store.end_session(session_id)
        logger.info("session_closed", extra={"session_id": session_id})


def build_orchestrator(settings: Settings | None = None) -> TurnOrchestrator:
    """Assemble the orchestrator from settings.

    Args:
        settings: Application settings; loaded from env when omitted.

    Returns:
        TurnOrchestrator wired to the SDK runner and configured store.
    """
    settings = settings or get_settings()
    catalog = build_catalog()

    store: SessionStore
    if settings.session_backend == "memory":
        store = InMemorySessionStore(history_cap=settings.history_cap)
    else:
        store = SqlSessionStore(history_cap=settings.history_cap)

    return TurnOrchestrator(
        catalog,
        SdkAgentRunner(catalog, settings),
        store,
        routing_budget=settings.routing_turn_budget,
        crisis_budget=settings.crisis_turn_budget,
    )
