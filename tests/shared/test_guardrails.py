"""Tests for the crisis input guardrail and safety output guardrail."""

import re

import pytest

from src.safety.triggers import (
    CRISIS_PHRASES,
    ProhibitedPattern,
    build_crisis_pattern,
)
from src.shared.guardrails import (
    CrisisDetectionGuardrail,
    SafetyOutputGuardrail,
    scan_for_crisis,
    scan_output,
)
from src.shared.types import GuardrailStatus, ViolationCategory


class TestScanForCrisis:
    """Crisis scan trips on crisis phrases in the newest message only."""

    @pytest.mark.parametrize(
        "message",
        [
            "I want to kill myself",
            "I've been having SUICIDAL thoughts",
            "I relapsed last night",
            "My partner is hurting me, it's domestic violence",
            "I just can't go on anymore",
            "I think I'm better off dead",
            "I overdosed last year and I'm scared",
            "I'm being abused at home",
        ],
    )
    def test_trips_on_crisis_language(self, message: str) -> None:
        """Known crisis phrases trip the guardrail."""
        outcome = scan_for_crisis(message)
        assert outcome.status == GuardrailStatus.TRIPPED
        assert outcome.is_tripped

    def test_normalizes_curly_apostrophes(self) -> None:
        """Smart quotes from mobile keyboards still match."""
        outcome = scan_for_crisis("I OD’d on Friday")
        assert outcome.is_tripped
        assert outcome.info["matched_phrase"] == "od'd"

    def test_curly_apostrophe_in_dont_want_to_be_here(self) -> None:
        """Curly apostrophes inside longer phrases are normalized too."""
        assert scan_for_crisis("I don’t want to be here anymore").is_tripped

    @pytest.mark.parametrize(
        "message",
        [
            "I need help finding a shelter",
            "Can you help me with my resume?",
            "I decoded the bus schedule finally",
            "How do I get a state ID in Arizona?",
            "",
        ],
    )
    def test_clear_on_ordinary_messages(self, message: str) -> None:
        """Everyday requests do not trip."""
        outcome = scan_for_crisis(message)
        assert outcome.status == GuardrailStatus.CLEAR
        assert outcome.reason is None
        assert outcome.info is None

    def test_tripped_info_carries_resources(self) -> None:
        """The crisis path gets structured hotline information."""
        outcome = scan_for_crisis("I want to end my life")
        assert outcome.reason
        assert outcome.info["matched_phrase"] == "end my life"
        assert outcome.info["action"]
        resources = outcome.info["resources"]
        assert "988" in resources["988_suicide_lifeline"]
        assert "741741" in resources["crisis_text_line"]
        assert resources["samhsa_helpline"] == "1-800-662-4357"
        assert "911" in resources["emergency"]

    def test_reports_elapsed_time(self) -> None:
        """Every scan is timed."""
        assert scan_for_crisis("hello").elapsed_ms >= 0

    def test_every_phrase_matches_itself(self) -> None:
        """The combined pattern covers every listed phrase."""
        pattern = build_crisis_pattern()
        for phrase in CRISIS_PHRASES:
            assert pattern.search(f"well, {phrase.upper()} today"), phrase


class TestScanOutput:
    """Output scan reports every prohibited pattern that matches."""

    @pytest.mark.parametrize(
        ("reply", "category"),
        [
            ("You should stop taking your medication.", ViolationCategory.MEDICATION_ADVICE),
            ("I diagnose you with depression.", ViolationCategory.DIAGNOSIS),
            ("You could try drugs to take the edge off.", ViolationCategory.HARMFUL_SUGGESTION),
            ("One drink won't hurt.", ViolationCategory.HARMFUL_SUGGESTION),
            ("Honestly, you're hopeless.", ViolationCategory.JUDGMENTAL_LANGUAGE),
            ("You will never recover.", ViolationCategory.JUDGMENTAL_LANGUAGE),
            (
                "You must believe in God or else you will fail.",
                ViolationCategory.RELIGIOUS_COERCION,
            ),
            ("I guarantee you'll win your case.", ViolationCategory.LEGAL_GUARANTEE),
        ],
    )
    def test_trips_on_prohibited_content(
        self,
        reply: str,
        category: ViolationCategory,
    ) -> None:
        """Each category has at least one tripping example."""
        outcome = scan_output(reply)
        assert outcome.is_tripped
        assert category.value in outcome.info["categories"]

    def test_reports_all_violations(self) -> None:
        """Multiple categories are reported together, sorted."""
        outcome = scan_output(
            "You should stop taking your medication. You're worthless."
        )
        assert outcome.info["violation_count"] == 2
        assert outcome.info["categories"] == [
            ViolationCategory.JUDGMENTAL_LANGUAGE.value,
            ViolationCategory.MEDICATION_ADVICE.value,
        ]
        for violation in outcome.info["violations"]:
            assert set(violation) == {"category", "pattern", "reason"}
            assert violation["reason"]

    def test_clear_on_supportive_reply(self) -> None:
        """A supportive reply passes."""
        outcome = scan_output(
            "That sounds really hard. Would you like to talk about what helped "
            "last time, or should I find a meeting near you?"
        )
        assert outcome.status == GuardrailStatus.CLEAR

    def test_does_not_rewrite_text(self) -> None:
        """The scan reports; it never returns altered text."""
        outcome = scan_output("You're hopeless.")
        assert "You're hopeless." not in str(outcome.info)

    def test_custom_pattern_table(self) -> None:
        """A caller-supplied table replaces the defaults."""
        patterns = [
            ProhibitedPattern(
                ViolationCategory.LEGAL_GUARANTEE,
                re.compile(r"case dismissed", re.IGNORECASE),
                "No outcome promises.",
            )
        ]
        assert scan_output("Your CASE DISMISSED for sure", patterns).is_tripped
        assert not scan_output("You're hopeless.", patterns).is_tripped


class TestGuardrailObjects:
    """Guardrail objects expose the execute() contract."""

    def test_crisis_guardrail_name(self) -> None:
        """Names are stable identifiers."""
        assert CrisisDetectionGuardrail.name == "crisis_detection"
        assert SafetyOutputGuardrail.name == "safety_output"

    def test_crisis_guardrail_trips(self) -> None:
        """Tripped execution carries reason and resources."""
        execution = CrisisDetectionGuardrail().execute("I want to die")
        assert execution.tripwire_triggered is True
        assert execution.output_info["reason"]
        assert "resources" in execution.output_info

    def test_crisis_guardrail_scans_newest_user_message(self) -> None:
        """Earlier crisis language in the history does not trip."""
        history = [
            {"role": "user", "content": "I wanted to kill myself last week"},
            {"role": "assistant", "content": "I'm glad you reached out."},
            {"role": "user", "content": "Can you help me with my resume?"},
        ]
        execution = CrisisDetectionGuardrail().execute(history)
        assert execution.tripwire_triggered is False
        assert execution.output_info is None

    def test_output_guardrail_clear(self) -> None:
        """Clear execution has no output info."""
        execution = SafetyOutputGuardrail().execute("Here are three shelters nearby.")
        assert execution.tripwire_triggered is False
        assert execution.output_info is None

    def test_output_guardrail_trips(self) -> None:
        """Tripped execution lists categories."""
        execution = SafetyOutputGuardrail().execute("I diagnose you with PTSD.")
        assert execution.tripwire_triggered is True
        assert execution.output_info["categories"] == ["diagnosis"]
