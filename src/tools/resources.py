"""Resource lookup tools: shelters, food, clinics, legal aid.

Resource search does not require an authenticated user; the directory
is public. Not-found conditions come back as failure payloads.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

# agents is the OpenAI Agents SDK package (openai-agents), NOT src/agents/
from agents import RunContextWrapper, function_tool
from src.db.models import Resource
from src.db.postgres import get_resource, list_resources_by_category
from src.db.session import session_scope
from src.shared.context import ConversationContext
from src.shared.response_models import ResourceDetailResult, ResourceSearchResult
from src.shared.types import ResourceCategory


def _resource_to_dict(resource: Resource) -> dict:
    return {
        "id": str(resource.resource_id),
        "name": resource.name,
        "category": resource.category,
        "description": resource.description,
        "address": resource.address,
        "phone": resource.phone,
        "hours": resource.hours,
        "website": resource.website,
    }


async def search_resources(
    session: AsyncSession,
    category: ResourceCategory,
    query: str | None = None,
) -> ResourceSearchResult:
    """Search active resources by category with an optional text filter.

    The text filter matches name and description case-insensitively.

    Args:
        session: Active database session.
        category: Resource category.
        query: Optional text filter.

    Returns:
        ResourceSearchResult listing matching resources.
    """
    rows = await list_resources_by_category(session, ResourceCategory(category).value)
    if query:
        needle = query.lower()
        rows = [
            row
            for row in rows
            if needle in (row.name or "").lower() or needle in (row.description or "").lower()
        ]
    return ResourceSearchResult(
        success=True,
        category=ResourceCategory(category).value,
        count=len(rows),
        resources=[_resource_to_dict(row) for row in rows],
    )


async def get_resource_details(
    session: AsyncSession,
    resource_id: str,
) -> ResourceDetailResult:
    """Fetch the full record of one resource.

    Args:
        session: Active database session.
        resource_id: Resource UUID string.

    Returns:
        ResourceDetailResult, failure when the id is unknown or malformed.
    """
    not_found = f'Resource with ID "{resource_id}" not found.'
    try:
        parsed = uuid.UUID(resource_id)
    except ValueError:
        return ResourceDetailResult(success=False, error=not_found)
    resource = await get_resource(session, parsed)
    if resource is None:
        return ResourceDetailResult(success=False, error=not_found)
    return ResourceDetailResult(success=True, resource=_resource_to_dict(resource))


async def handle_search_resources(
    context: ConversationContext,
    category: ResourceCategory,
    query: str | None = None,
) -> ResourceSearchResult:
    """Tool entry point for search_resources."""
    async with session_scope() as session:
        return await search_resources(session, category, query)


async def handle_get_resource_details(
    context: ConversationContext,
    resource_id: str,
) -> ResourceDetailResult:
    """Tool entry point for get_resource_details."""
    async with session_scope() as session:
        return await get_resource_details(session, resource_id)


# --- Agent SDK function tools ---


@function_tool(name_override="search_resources")
async def tool_search_resources(
    ctx: RunContextWrapper[ConversationContext],
    category: ResourceCategory,
    query: str | None = None,
) -> str:
    """Search community resources by category, optionally filtered by text.

    Args:
        category: The category of resource to search for.
        query: Optional text matched against resource name and description.
    """
    result = await handle_search_resources(ctx.context, category, query)
    return result.model_dump_json()


@function_tool(name_override="get_resource_details")
async def tool_get_resource_details(
    ctx: RunContextWrapper[ConversationContext],
    resource_id: str,
) -> str:
    """Get full details of a specific community resource.

    Args:
        resource_id: The resource id returned by search_resources.
    """
    result = await handle_get_resource_details(ctx.context, resource_id)
    return result.model_dump_json()
