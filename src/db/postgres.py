"""Operational database CRUD used by the agent tools."""

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Goal, JournalEntry, Resource, ResumeSection, User
from src.shared.types import GoalStatus


async def list_resources_by_category(
    session: AsyncSession,
    category: str,
) -> list[Resource]:
    """List active resources in a category, ordered by name.

    Args:
        session: Active database session.
        category: Resource category value.

    Returns:
        Matching Resource rows.
    """
    result = await session.execute(
        select(Resource)
        .where(Resource.category == category, Resource.active.is_(True))
        .order_by(Resource.name.asc())
    )
    return list(result.scalars().all())


async def get_resource(
    session: AsyncSession,
    resource_id: uuid.UUID,
) -> Resource | None:
    """Look up a resource by id.

    Args:
        session: Active database session.
        resource_id: Resource UUID.

    Returns:
        Resource if found, else None.
    """
    result = await session.execute(
        select(Resource).where(Resource.resource_id == resource_id)
    )
    return result.scalar_one_or_none()


async def list_goals_for_user(
    session: AsyncSession,
    user_id: str,
    status: str | None = None,
) -> list[Goal]:
    """List a user's goals, newest first.

    Args:
        session: Active database session.
        user_id: Owning user id.
        status: Optional status filter.

    Returns:
        Goal rows.
    """
    stmt = select(Goal).where(Goal.user_id == user_id)
    if status:
        stmt = stmt.where(Goal.status == status)
    result = await session.execute(stmt.order_by(Goal.created_at.desc()))
    return list(result.scalars().all())


async def insert_goal(
    session: AsyncSession,
    *,
    user_id: str,
    title: str,
    category: str,
    description: str,
    target_date: date | None = None,
) -> Goal:
    """Create an active goal for a user.

    Args:
        session: Active database session.
        user_id: Owning user id.
        title: Short goal title.
        category: Goal category value.
        description: Goal description.
        target_date: Optional target completion date.

    Returns:
        Created Goal row.
    """
    now = datetime.now(UTC)
    goal = Goal(
        goal_id=uuid.uuid4(),
        user_id=user_id,
        title=title,
        category=category,
        description=description,
        status=GoalStatus.ACTIVE.value,
        target_date=target_date,
        created_at=now,
        updated_at=now,
    )
    session.add(goal)
    await session.flush()
    return goal


async def insert_journal_entry(
    session: AsyncSession,
    *,
    user_id: str,
    content: str,
    mood: str | None = None,
) -> JournalEntry:
    """Write a journal entry for a user.

    Args:
        session: Active database session.
        user_id: Owning user id.
        content: Entry text.
        mood: Optional self-reported mood.

    Returns:
        Created JournalEntry row.
    """
    entry = JournalEntry(
        entry_id=uuid.uuid4(),
        user_id=user_id,
        content=content,
        mood=mood,
        created_at=datetime.now(UTC),
    )
    session.add(entry)
    await session.flush()
    return entry


async def list_recent_journal_entries(
    session: AsyncSession,
    user_id: str,
    limit: int,
) -> list[JournalEntry]:
    """List a user's most recent journal entries.

    Args:
        session: Active database session.
        user_id: Owning user id.
        limit: Maximum rows to return.

    Returns:
        JournalEntry rows, newest first.
    """
    result = await session.execute(
        select(JournalEntry)
        .where(JournalEntry.user_id == user_id)
        .order_by(JournalEntry.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_resume_sections(
    session: AsyncSession,
    user_id: str,
) -> list[ResumeSection]:
    """List every saved resume section for a user."""
    result = await session.execute(
        select(ResumeSection).where(ResumeSection.user_id == user_id)
    )
    return list(result.scalars().all())


async def upsert_resume_section(
    session: AsyncSession,
    *,
    user_id: str,
    section: str,
    content: str,
) -> ResumeSection:
    """Create or replace one resume section.

    Args:
        session: Active database session.
        user_id: Owning user id.
        section: Section name.
        content: Section text.

    Returns:
        The stored ResumeSection row.
    """
    result = await session.execute(
        select(ResumeSection).where(
            ResumeSection.user_id == user_id,
            ResumeSection.section == section,
        )
    )
    row = result.scalar_one_or_none()
    now = datetime.now(UTC)
    if row is None:
        row = ResumeSection(
            section_id=uuid.uuid4(),
            user_id=user_id,
            section=section,
            content=content,
            updated_at=now,
        )
        session.add(row)
    else:
        row.content = content
        row.updated_at = now
    await session.flush()
    return row


async def get_user(
    session: AsyncSession,
    user_id: str,
) -> User | None:
    """Look up a user profile by id.

    Args:
        session: Active database session.
        user_id: User id.

    Returns:
        User if found, else None.
    """
    result = await session.execute(select(User).where(User.user_id == user_id))
    return result.scalar_one_or_none()
