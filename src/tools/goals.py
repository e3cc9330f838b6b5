"""Goal tools: list and create a user's recovery goals."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import RunContextWrapper, function_tool
from src.db.models import Goal
from src.db.postgres import insert_goal, list_goals_for_user
from src.db.session import session_scope
from src.shared.context import ConversationContext
from src.shared.response_models import (
    NOT_AUTHENTICATED,
    GoalCreateResult,
    GoalListResult,
)
from src.shared.types import GoalCategory, GoalFilter


def _goal_to_dict(goal: Goal) -> dict:
    return {
        "id": str(goal.goal_id),
        "title": goal.title,
        "category": goal.category,
        "description": goal.description,
        "status": goal.status,
        "target_date": goal.target_date.isoformat() if goal.target_date else None,
    }


async def list_goals(
    session: AsyncSession,
    user_id: str,
    status: GoalFilter = GoalFilter.ALL,
) -> GoalListResult:
    """List a user's goals, optionally filtered by status.

    Args:
        session: Active database session.
        user_id: Owning user id.
        status: active, completed, or all.

    Returns:
        GoalListResult with the user's goals, newest first.
    """
    status_filter = None if GoalFilter(status) == GoalFilter.ALL else GoalFilter(status).value
    rows = await list_goals_for_user(session, user_id, status_filter)
    return GoalListResult(
        success=True,
        count=len(rows),
        goals=[_goal_to_dict(row) for row in rows],
    )


async def create_goal(
    session: AsyncSession,
    user_id: str,
    *,
    title: str,
    category: GoalCategory,
    description: str,
    target_date: str | None = None,
) -> GoalCreateResult:
    """Create an active goal for a user.

    Args:
        session: Active database session.
        user_id: Owning user id.
        title: Short goal title.
        category: Goal category.
        description: Goal description.
        target_date: Optional ISO-8601 date (YYYY-MM-DD).

    Returns:
        GoalCreateResult, failure when the target date is malformed.
    """
    parsed_date = None
    if target_date:
        try:
            parsed_date = date.fromisoformat(target_date)
        except ValueError:
            return GoalCreateResult(
                success=False,
                error=f'Invalid target date "{target_date}". Use YYYY-MM-DD.',
            )
    goal = await insert_goal(
        session,
        user_id=user_id,
        title=title,
        category=GoalCategory(category).value,
        description=description,
        target_date=parsed_date,
    )
    return GoalCreateResult(
        success=True,
        goal_id=str(goal.goal_id),
        message=f'Goal "{title}" created successfully.',
    )


async def handle_list_goals(
    context: ConversationContext,
    status: GoalFilter = GoalFilter.ALL,
) -> GoalListResult:
    """Tool entry point for list_goals."""
    if not context.is_authenticated:
        return GoalListResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await list_goals(session, context.user_id, status)


async def handle_create_goal(
    context: ConversationContext,
    *,
    title: str,
    category: GoalCategory,
    description: str,
    target_date: str | None = None,
) -> GoalCreateResult:
    """Tool entry point for create_goal."""
    if not context.is_authenticated:
        return GoalCreateResult(success=False, error=NOT_AUTHENTICATED)
    async with session_scope() as session:
        return await create_goal(
            session,
            context.user_id,
            title=title,
            category=category,
            description=description,
            target_date=target_date,
        )


# --- Agent SDK function tools ---


@function_tool(name_override="list_goals")
async def tool_list_goals(
    ctx: RunContextWrapper[ConversationContext],
    status: GoalFilter = GoalFilter.ALL,
) -> str:
    """List the current user's recovery goals.

    Args:
        status: Filter goals by status: active, completed, or all.
    """
    result = await handle_list_goals(ctx.context, status)
    return result.model_dump_json()


@function_tool(name_override="create_goal")
async def tool_create_goal(
    ctx: RunContextWrapper[ConversationContext],
    title: str,
    category: GoalCategory,
    description: str,
    target_date: str | None = None,
) -> str:
    """Create a new recovery goal for the user.

    Args:
        title: Short title for the goal.
        category: Category the goal falls under.
        description: Detailed description of the goal.
        target_date: Optional target completion date (YYYY-MM-DD).
    """
    result = await handle_create_goal(
        ctx.context,
        title=title,
        category=category,
        description=description,
        target_date=target_date,
    )
    return result.model_dump_json()
