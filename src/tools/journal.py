"""Journal tools: private recovery journaling for the Recovery Guide."""

from sqlalchemy.ext.asyncio import AsyncSession

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import RunContextWrapper, function_tool
from src.db.postgres import insert_journal_entry, list_recent_journal_entries
from src.db.session import session_scope
from src.shared.context import ConversationContext
from src.shared.response_models import (
    NOT_AUTHENTICATED,
    JournalEntryResult,
    JournalListResult,
)

MAX_JOURNAL_ENTRIES = 20


async def create_journal_entry(
    session: AsyncSession,
    user_id: str,
    content: str,
    mood: str | None = None,
) -> JournalEntryResult:
    """Write a journal entry.

    Args:
        session: Active database session.
        user_id: Owning user id.
        content: Entry text.
        mood: Optional self-reported mood.

    Returns:
        JournalEntryResult, failure for an empty entry.
    """
    if not content.strip():
        return JournalEntryResult(success=False, error="Journal entry is empty.")
    entry = await insert_journal_entry(
        session, user_id=user_id, content=content.strip(), mood=mood,
    )
    return JournalEntryResult(
        success=True,
        entry_id=str(entry.entry_id),
        message="Journal entry saved.",
    )


async def list_journal_entries(
    session: AsyncSession,
    user_id: str,
    limit: int = 5,
) -> JournalListResult:
    """List the user's most recent journal entries.

    Args:
        session: Active database session.
        user_id: Owning user id.
        limit: Number of entries, clamped to 1..MAX_JOURNAL_ENTRIES.

    Returns:
        JournalListResult, newest first.
    """
    limit = max(1, min(limit, MAX_JOURNAL_ENTRIES))
    rows = await list_recent_journal_entries(session, user_id, limit)
    return JournalListResult(
        success=True,
        count=len(rows),
        entries=[
            {
                "id": str(row.entry_id),
                "content": row.content,
                "mood": row.mood,
                "created_at": row.created_at.isoformat() if row.created_at else None,
            }
            for row in rows
        ],
    )


async def handle_create_journal_entry(
    context: ConversationContext,
    content: str,
    mood: str | None = None,
) -> JournalEntryResult:
    """Tool entry point for create_journal_entry."""
    if not context.is_authenticated:
        return JournalEntryResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await create_journal_entry(session, context.user_id, content, mood)


async def handle_list_journal_entries(
    context: ConversationContext,
    limit: int = 5,
) -> JournalListResult:
    """Tool entry point for list_journal_entries."""
    if not context.is_authenticated:
        return JournalListResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await list_journal_entries(session, context.user_id, limit)


# --- Agent SDK function tools ---


@function_tool(name_override="create_journal_entry")
async def tool_create_journal_entry(
    ctx: RunContextWrapper[ConversationContext],
    content: str,
    mood: str | None = None,
) -> str:
    """Save a private journal entry for the user.

    Args:
        content: The journal text, in the user's own words.
        mood: Optional one-word mood the user reported.
    """
    result = await handle_create_journal_entry(ctx.context, content, mood)
    return result.model_dump_json()


@function_tool(name_override="list_journal_entries")
async def tool_list_journal_entries(
    ctx: RunContextWrapper[ConversationContext],
    limit: int = 5,
) -> str:
    """List the user's most recent journal entries.

    Args:
        limit: How many entries to return (1-20).
    """
    result = await handle_list_journal_entries(ctx.context, limit)
    return result.model_dump_json()
