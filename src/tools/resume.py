"""Resume tools: read and save resume sections for the Resume Coach."""

from sqlalchemy.ext.asyncio import AsyncSession

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import RunContextWrapper, function_tool
from src.db.postgres import list_resume_sections, upsert_resume_section
from src.db.session import session_scope
from src.shared.context import ConversationContext
from src.shared.response_models import (
    NOT_AUTHENTICATED,
    ResumeResult,
    ResumeSectionResult,
)
from src.shared.types import ResumeSectionName


async def get_resume(session: AsyncSession, user_id: str) -> ResumeResult:
    """Return every saved resume section keyed by section name."""
    rows = await list_resume_sections(session, user_id)
    return ResumeResult(
        success=True,
        sections={row.section: row.content for row in rows},
    )


async def save_resume_section(
    session: AsyncSession,
    user_id: str,
    section: ResumeSectionName,
    content: str,
) -> ResumeSectionResult:
    """Create or replace one resume section.

    Args:
        session: Active database session.
        user_id: Owning user id.
        section: Section name.
        content: Section text.

    Returns:
        ResumeSectionResult, failure for empty content.
    """
    name = ResumeSectionName(section).value
    if not content.strip():
        return ResumeSectionResult(success=False, error=f'Section "{name}" is empty.')
    await upsert_resume_section(
        session, user_id=user_id, section=name, content=content.strip(),
    )
    return ResumeSectionResult(
        success=True,
        section=name,
        message=f'Resume section "{name}" saved.',
    )


async def handle_get_resume(context: ConversationContext) -> ResumeResult:
    """Tool entry point for get_resume."""
    if not context.is_authenticated:
        return ResumeResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await get_resume(session, context.user_id)


async def handle_save_resume_section(
    context: ConversationContext,
    section: ResumeSectionName,
    content: str,
) -> ResumeSectionResult:
    """Tool entry point for save_resume_section."""
    if not context.is_authenticated:
        return ResumeSectionResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await save_resume_section(session, context.user_id, section, content)


# --- Agent SDK function tools ---


@function_tool(name_override="get_resume")
async def tool_get_resume(ctx: RunContextWrapper[ConversationContext]) -> str:
    """Get the user's saved resume sections."""
    result = await handle_get_resume(ctx.context)
    return result.model_dump_json()


@function_tool(name_override="save_resume_section")
async def tool_save_resume_section(
    ctx: RunContextWrapper[ConversationContext],
    section: ResumeSectionName,
    content: str,
) -> str:
    """Save or replace one section of the user's resume.

    Args:
        section: Which resume section to save.
        content: Full text of the section.
    """
    result = await handle_save_resume_section(ctx.context, section, content)
    return result.model_dump_json()
