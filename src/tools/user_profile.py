"""User profile tool shared by the specialist agents."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import RunContextWrapper, function_tool
from src.db.postgres import get_user
from src.db.session import session_scope
from src.shared.context import ConversationContext
from src.shared.response_models import NOT_AUTHENTICATED, UserProfileResult


async def get_user_profile(session: AsyncSession, user_id: str) -> UserProfileResult:
    """Read the user's profile, including sobriety date and current step.

    Args:
        session: Active database session.
        user_id: User id.

    Returns:
        UserProfileResult, failure when no profile exists.
    """
    user = await get_user(session, user_id)
    if user is None:
        return UserProfileResult(success=False, error="User profile not found.")

    days_sober = None
    if user.sobriety_date:
        days_sober = (datetime.now(UTC).date() - user.sobriety_date).days

    return UserProfileResult(
        success=True,
        profile={
            "id": user.user_id,
            "name": user.display_name,
            "role": user.role or "member",
            "lanes": user.lanes or [],
            "sobriety_date": user.sobriety_date.isoformat() if user.sobriety_date else None,
            "days_sober": days_sober,
            "current_step": user.current_step,
        },
    )


async def handle_get_user_profile(context: ConversationContext) -> UserProfileResult:
    """Tool entry point for get_user_profile."""
    if not context.is_authenticated:
        return UserProfileResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await get_user_profile(session, context.user_id)


@function_tool(name_override="get_user_profile")
async def tool_get_user_profile(ctx: RunContextWrapper[ConversationContext]) -> str:
    """Get the user's profile: name, role, lanes, sobriety date, and current step."""
    result = await handle_get_user_profile(ctx.context)
    return result.model_dump_json()
