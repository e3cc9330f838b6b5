"""Guardrail pipeline: crisis detection on input, safety scan on output.

Both checks are inline functions, not agents. They return a tagged
GuardrailOutcome instead of raising, so the orchestrator branches on
the tag. Every scan is instrumented with timing for observability.

The input guardrail sees only the newest user utterance. Crisis
language from an earlier, already handled turn must not divert a later
unrelated message to the crisis path.
"""

import logging
import re
import time
from typing import Any

from src.safety.triggers import (
    CRISIS_RESOURCES,
    ProhibitedPattern,
    build_crisis_pattern,
    load_prohibited_patterns,
)
from src.shared.response_models import GuardrailExecution, GuardrailOutcome

logger = logging.getLogger(__name__)

CRISIS_PATTERN: re.Pattern[str] = build_crisis_pattern()

_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})


def _normalize(text: str) -> str:
    return text.translate(_APOSTROPHES)


def scan_for_crisis(latest_user_turn: str) -> GuardrailOutcome:
    """Scan the newest user utterance for crisis language.

    Args:
        latest_user_turn: The single newest user message.

    Returns:
        Tripped outcome carrying crisis resources, or clear.
    """
    start = time.perf_counter()
    match = CRISIS_PATTERN.search(_normalize(latest_user_turn or ""))
    if match:
        outcome = GuardrailOutcome.tripped(
            "Crisis language detected in user message.",
            {
                "action": "Routing to crisis response protocol.",
                "matched_phrase": match.group(0).lower(),
                "resources": dict(CRISIS_RESOURCES),
            },
        )
    else:
        outcome = GuardrailOutcome.clear()
    elapsed_ms = (time.perf_counter() - start) * 1000
    outcome = outcome.model_copy(update={"elapsed_ms": elapsed_ms})

    logger.info(
        "crisis_scan",
        extra={
            "elapsed_ms": elapsed_ms,
            "tripped": outcome.is_tripped,
            "message_length": len(latest_user_turn or ""),
        },
    )
    return outcome


def scan_output(
    agent_reply_text: str,
    patterns: list[ProhibitedPattern] | None = None,
) -> GuardrailOutcome:
    """Scan an agent reply against every prohibited pattern.

    Reports all matches, not just the first, so the caller can log the
    full set of violated categories. The text itself is not rewritten.

    Args:
        agent_reply_text: Final reply produced by an agent.
        patterns: Pattern table to evaluate (defaults to the active table).

    Returns:
        Tripped outcome listing violations, or clear.
    """
    start = time.perf_counter()
    text = _normalize(agent_reply_text or "")
    violations = [
        {
            "category": entry.category.value,
            "pattern": entry.pattern.pattern,
            "reason": entry.reason,
        }
        for entry in (patterns if patterns is not None else load_prohibited_patterns())
        if entry.pattern.search(text)
    ]

    if violations:
        categories = sorted({violation["category"] for violation in violations})
        outcome = GuardrailOutcome.tripped(
            "Agent output contains prohibited content.",
            {
                "violation_count": len(violations),
                "violations": violations,
                "categories": categories,
                "action": "The response has been blocked. A safe response must be substituted.",
            },
        )
    else:
        outcome = GuardrailOutcome.clear()
    elapsed_ms = (time.perf_counter() - start) * 1000
    outcome = outcome.model_copy(update={"elapsed_ms": elapsed_ms})

    logger.info(
        "output_scan",
        extra={
            "elapsed_ms": elapsed_ms,
            "tripped": outcome.is_tripped,
            "violation_count": len(violations),
        },
    )
    return outcome


def _input_text(value: Any) -> str:
    """Reduce a guardrail input (string or message list) to the newest user text."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in reversed(value):
            if isinstance(item, dict) and item.get("role") == "user":
                return str(item.get("content") or "")
        return ""
    return str(value or "")


class CrisisDetectionGuardrail:
    """Input guardrail applied at the triage entry point."""

    name = "crisis_detection"

    def execute(self, value: str | list[dict[str, Any]]) -> GuardrailExecution:
        """Run the crisis scan under the stable guardrail contract.

        Args:
            value: A message string, or a message list whose newest
                user entry is scanned.

        Returns:
            GuardrailExecution with tripwire flag and crisis info.
        """
        outcome = scan_for_crisis(_input_text(value))
        return _to_execution(outcome)


class SafetyOutputGuardrail:
    """Output guardrail applied to every agent's final reply."""

    name = "safety_output"

    def execute(self, value: str) -> GuardrailExecution:
        """Run the output scan under the stable guardrail contract.

        Args:
            value: Agent reply text.

        Returns:
            GuardrailExecution with tripwire flag and violation info.
        """
        return _to_execution(scan_output(value))


def _to_execution(outcome: GuardrailOutcome) -> GuardrailExecution:
    if not outcome.is_tripped:
        return GuardrailExecution(tripwire_triggered=False, output_info=None)
    return GuardrailExecution(
        tripwire_triggered=True,
        output_info={"reason": outcome.reason, **(outcome.info or {})},
    )
