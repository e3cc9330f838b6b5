"""Shared types, enums, and constants used across the application."""

import enum


class AgentName(str, enum.Enum):
    """Display names of the conversational agents."""

    TRIAGE = "Triage Agent"
    CRISIS = "Crisis Agent"
    LIFE_NAVIGATOR = "Life Navigator"
    RECOVERY_GUIDE = "Recovery Guide"
    RESOURCE_FINDER = "Resource Finder"
    RESUME_COACH = "Resume Coach"
    PEER_MENTOR = "Peer Mentor"


# Reported as the responding agent when a turn fails outside any agent.
SYSTEM_AGENT_NAME = "System"


class Lane(str, enum.Enum):
    """Coarse category of user need used to bias routing."""

    LIFE_TASKS = "lane1"
    RECOVERY = "lane2"
    COMMUNITY = "lane3"
    ALL = "all"


class MessageRole(str, enum.Enum):
    """Speaker of a transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"


class GuardrailStatus(str, enum.Enum):
    """Tag of a guardrail outcome."""

    CLEAR = "clear"
    TRIPPED = "tripped"


class ViolationCategory(str, enum.Enum):
    """Prohibited-content category for agent output."""

    MEDICATION_ADVICE = "medication_advice"
    DIAGNOSIS = "diagnosis"
    HARMFUL_SUGGESTION = "harmful_suggestion"
    JUDGMENTAL_LANGUAGE = "judgmental_language"
    RELIGIOUS_COERCION = "religious_coercion"
    LEGAL_GUARANTEE = "legal_guarantee"


class TurnState(str, enum.Enum):
    """States of a single conversational turn."""

    IDLE = "idle"
    INPUT_CHECK = "input_check"
    ROUTING = "routing"
    CRISIS_DIRECT = "crisis_direct"
    OUTPUT_CHECK = "output_check"
    PERSISTED = "persisted"
    DONE = "done"
    ERRORED = "errored"


class ResourceCategory(str, enum.Enum):
    """Community resource category."""

    SHELTER = "shelter"
    FOOD = "food"
    MEDICAL = "medical"
    MENTAL_HEALTH = "mental_health"
    LEGAL = "legal"
    EMPLOYMENT = "employment"
    TRANSPORTATION = "transportation"
    HYGIENE = "hygiene"


class GoalCategory(str, enum.Enum):
    """Recovery goal category."""

    EMPLOYMENT = "employment"
    HOUSING = "housing"
    EDUCATION = "education"
    HEALTH = "health"
    LEGAL = "legal"
    FINANCIAL = "financial"
    PERSONAL = "personal"


class GoalStatus(str, enum.Enum):
    """Recovery goal lifecycle."""

    ACTIVE = "active"
    COMPLETED = "completed"


class GoalFilter(str, enum.Enum):
    """Status filter accepted by the goal listing tool."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ALL = "all"


class ResumeSectionName(str, enum.Enum):
    """Named section of a user's resume."""

    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    CERTIFICATIONS = "certifications"
    REFERENCES = "references"
