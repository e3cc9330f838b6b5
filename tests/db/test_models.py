"""Tests for SQLAlchemy ORM models."""

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex

from src.db.models import (
    AgentSession,
    Base,
    Goal,
    JournalEntry,
    Resource,
    ResumeSection,
    User,
)

EXPECTED_TABLES = {
    "agent_sessions",
    "users",
    "resources",
    "goals",
    "journal_entries",
    "resume_sections",
}


def test_all_tables_defined() -> None:
    """All operational tables are defined in metadata."""
    assert set(Base.metadata.tables.keys()) == EXPECTED_TABLES


def test_table_names() -> None:
    """Models map to the expected tables."""
    assert AgentSession.__tablename__ == "agent_sessions"
    assert User.__tablename__ == "users"
    assert Resource.__tablename__ == "resources"
    assert Goal.__tablename__ == "goals"
    assert JournalEntry.__tablename__ == "journal_entries"
    assert ResumeSection.__tablename__ == "resume_sections"


def test_one_active_session_per_user_index() -> None:
    """A partial unique index covers only active sessions."""
    table = Base.metadata.tables["agent_sessions"]
    index = next(i for i in table.indexes if i.name == "uq_agent_sessions_active_user")
    assert index.unique is True
    assert [column.name for column in index.columns] == ["user_id"]
    ddl = str(CreateIndex(index).compile(dialect=postgresql.dialect()))
    assert "WHERE active" in ddl


def test_history_is_jsonb() -> None:
    """Transcripts are stored as a JSONB document."""
    column = Base.metadata.tables["agent_sessions"].c.history
    assert isinstance(column.type, postgresql.JSONB)


def test_resume_section_unique_per_user() -> None:
    """Each user has at most one row per resume section."""
    table = Base.metadata.tables["resume_sections"]
    constraint_names = {c.name for c in table.constraints}
    assert "uq_resume_user_section" in constraint_names
