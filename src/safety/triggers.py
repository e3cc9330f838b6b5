"""Safety trigger definitions: crisis phrases and prohibited output patterns.

Crisis phrases drive the input guardrail; they are combined into a
single precompiled pattern. Prohibited patterns drive the output
guardrail; each carries the category and reason reported on a match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.shared.types import ViolationCategory

CRISIS_PHRASES: tuple[str, ...] = (
    "kill myself",
    "suicide",
    "suicidal",
    "end my life",
    "want to die",
    "self-harm",
    "self harm",
    "cutting myself",
    "overdose",
    "od'd",
    "oded",
    "relapsed",
    "not safe",
    "being hurt",
    "domestic violence",
    "going to hurt",
    "no reason to live",
    "better off dead",
    "hurt myself",
    "don't want to be here",
    "can't go on",
    "end it all",
    "take my own life",
    "wanna die",
    "want to disappear",
    "abuse",
    "being abused",
)

CRISIS_RESOURCES: dict[str, str] = {
    "988_suicide_lifeline": "Call or text 988",
    "crisis_text_line": "Text HOME to 741741",
    "samhsa_helpline": "1-800-662-4357",
    "emergency": "Call 911",
}

CRISIS_RESOURCE_LABELS: dict[str, str] = {
    "988_suicide_lifeline": "988 Suicide & Crisis Lifeline",
    "crisis_text_line": "Crisis Text Line",
    "samhsa_helpline": "SAMHSA Helpline",
    "emergency": "Emergency",
}

# Every crisis reply must carry at least these numbers.
REQUIRED_CRISIS_NUMBERS: tuple[str, ...] = ("988", "741741")

# Returned verbatim whenever the crisis sub-run cannot produce a usable
# reply. Must stay a literal: no runtime call may be needed to build it.
CRISIS_FALLBACK_MESSAGE = "\n".join(
    [
        "I want you to know that you matter and help is available right now.",
        "",
        "Please contact one of these resources immediately:",
        "- **988 Suicide & Crisis Lifeline:** Call or text 988",
        "- **Crisis Text Line:** Text HOME to 741741",
        "- **SAMHSA Helpline:** 1-800-662-4357",
        "- **Arizona Crisis Line:** 1-844-534-4673",
        "- **Emergency:** Call 911",
    ]
)


def build_crisis_pattern(phrases: tuple[str, ...] = CRISIS_PHRASES) -> re.Pattern[str]:
    """Compile crisis phrases into one case-insensitive alternation.

    Each phrase is anchored at a word start so short tokens such as
    "oded" do not fire inside unrelated words ("decoded"), while
    inflections ("overdosed", "abused") still match.

    Args:
        phrases: Literal phrases to match.

    Returns:
        Compiled pattern.
    """
    alternation = "|".join(re.escape(phrase) for phrase in phrases)
    return re.compile(rf"\b(?:{alternation})", re.IGNORECASE)


@dataclass(frozen=True)
class ProhibitedPattern:
    """A single prohibited-output pattern.

    Attributes:
        category: Violation category reported on match.
        pattern: Compiled, case-insensitive regex.
        reason: Human-readable explanation for logs.
    """

    category: ViolationCategory
    pattern: re.Pattern[str]
    reason: str


def _pattern(category: ViolationCategory, regex: str, reason: str) -> ProhibitedPattern:
    return ProhibitedPattern(category, re.compile(regex, re.IGNORECASE), reason)


_MEDICATION = "Medication advice is outside the scope of this platform."
_DIAGNOSIS = "AI agents must not provide medical or psychological diagnoses."

DEFAULT_PROHIBITED_PATTERNS: tuple[ProhibitedPattern, ...] = (
    # Medication advice
    _pattern(
        ViolationCategory.MEDICATION_ADVICE,
        r"you should (take|stop taking|start taking|increase|decrease|quit) (your )?medication",
        _MEDICATION,
    ),
    _pattern(
        ViolationCategory.MEDICATION_ADVICE,
        r"you (need to|must|have to) (take|stop|start|switch) (your )?(meds|medication|prescription)",
        _MEDICATION,
    ),
    _pattern(
        ViolationCategory.MEDICATION_ADVICE,
        r"I (recommend|suggest|advise) (you )?(take|stop|start|try) (the |this |a )?"
        r"(drug|medication|medicine|pill)",
        _MEDICATION,
    ),
    # Diagnostic statements
    _pattern(ViolationCategory.DIAGNOSIS, r"I diagnose you with", _DIAGNOSIS),
    _pattern(
        ViolationCategory.DIAGNOSIS,
        r"you (have|suffer from|are diagnosed with) (depression|bipolar|schizophrenia|"
        r"anxiety disorder|PTSD|borderline|BPD|ADHD|OCD|antisocial personality)",
        _DIAGNOSIS,
    ),
    _pattern(
        ViolationCategory.DIAGNOSIS,
        r"based on (what you('ve| have) (said|told me)|your symptoms),? (I (think|believe) )?"
        r"you (have|may have|probably have|likely have|might have) (a |an )?"
        r"(mental|personality|mood|anxiety)",
        _DIAGNOSIS,
    ),
    # Harmful suggestions
    _pattern(
        ViolationCategory.HARMFUL_SUGGESTION,
        r"you (should|could|might want to) (use|try|drink|smoke|take) (alcohol|drugs|substances|"
        r"meth|heroin|cocaine|fentanyl|pills)",
        "Substance use suggestions are strictly prohibited.",
    ),
    _pattern(
        ViolationCategory.HARMFUL_SUGGESTION,
        r"one (drink|hit|dose) (won't|wouldn't|will not) hurt",
        "Minimizing substance use risks is prohibited.",
    ),
    _pattern(
        ViolationCategory.HARMFUL_SUGGESTION,
        r"maybe (you|it) (should|could) (just|try to) (give up|stop trying|quit recovery)",
        "Discouraging recovery is prohibited.",
    ),
    # Judgmental or hopeless language
    _pattern(
        ViolationCategory.JUDGMENTAL_LANGUAGE,
        r"you('re| are) (hopeless|worthless|a failure|pathetic|lazy|weak|stupid|useless|"
        r"a lost cause)",
        "Judgmental or demeaning language is prohibited.",
    ),
    _pattern(
        ViolationCategory.JUDGMENTAL_LANGUAGE,
        r"you (will never|can't ever|won't ever) (recover|get better|change|succeed|be normal)",
        "Hopeless or defeatist language directed at the user is prohibited.",
    ),
    _pattern(
        ViolationCategory.JUDGMENTAL_LANGUAGE,
        r"it('s| is) your (own )?fault (that |you )",
        "Blaming the user for their circumstances is prohibited.",
    ),
    _pattern(
        ViolationCategory.JUDGMENTAL_LANGUAGE,
        r"you (deserve|earned|asked for) (this|what happened|your (situation|addiction|problems))",
        "Suggesting the user deserves their hardship is prohibited.",
    ),
    # Religious coercion (12-step is spiritual but must remain inclusive)
    _pattern(
        ViolationCategory.RELIGIOUS_COERCION,
        r"you (must|have to|need to) (believe in|accept|find) (God|Jesus|Christ|Allah|"
        r"a higher power) or (you('ll| will)|else)",
        "Religious coercion violates the platform's inclusive approach.",
    ),
    # Legal outcomes
    _pattern(
        ViolationCategory.LEGAL_GUARANTEE,
        r"I (can )?(guarantee|promise) (you('ll| will)|that) (win|get off|"
        r"beat (the|your) (case|charge|sentence))",
        "Guaranteeing legal outcomes is prohibited.",
    ),
)


def load_prohibited_patterns() -> list[ProhibitedPattern]:
    """Load the active prohibited-output patterns.

    Returns:
        List of ProhibitedPattern definitions in table order.
    """
    return list(DEFAULT_PROHIBITED_PATTERNS)


def ensure_crisis_resources(
    reply: str,
    resources: dict[str, str] | None = None,
) -> str:
    """Append a hotline block to a crisis reply that omits required numbers.

    Args:
        reply: Text produced by the crisis agent.
        resources: Resource map from the crisis scan; defaults to
            CRISIS_RESOURCES.

    Returns:
        ``reply`` unchanged when it already lists every required number,
        otherwise ``reply`` followed by the resource list.
    """
    if all(number in reply for number in REQUIRED_CRISIS_NUMBERS):
        return reply
    resources = resources or CRISIS_RESOURCES
    lines = [
        f"- **{CRISIS_RESOURCE_LABELS.get(key, key)}:** {value}"
        for key, value in resources.items()
    ]
    block = "\n".join(["Please contact one of these resources right now:", *lines])
    if not all(number in block for number in REQUIRED_CRISIS_NUMBERS):
        return CRISIS_FALLBACK_MESSAGE
    return f"{reply.rstrip()}\n\n{block}"
