"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import APIRouter

    from src.services.turn_orchestrator import TurnOrchestrator
from fastapi.middleware.cors import CORSMiddleware

from src.api.chat import router as chat_router
from src.config.settings import get_settings
from src.db.session import dispose_engine
from src.services.turn_orchestrator import build_orchestrator


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Releases pooled Postgres connections on shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        Control to the running application.
    """
    yield
    await dispose_engine()


def create_app(orchestrator: TurnOrchestrator | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        orchestrator: Turn orchestrator to serve; built from settings
            when omitted.

    Returns:
        Configured FastAPI instance.
    """
    app = FastAPI(
        title="New Freedom Chat",
        description="Multi-agent recovery support chat",
        version="0.1.0",
        lifespan=_lifespan,
    )

    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.orchestrator = orchestrator or build_orchestrator(settings)

    app.include_router(_health_router())
    app.include_router(chat_router)

    return app


def _health_router() -> APIRouter:
    """Create health check router.

    Returns:
        Router with health endpoints.
    """
    from fastapi import APIRouter

    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def health() -> dict[str, str]:
        """Return application health status.

        Returns:
            Dict with status key.
        """
        return {"status": "ok"}

    return router


app = create_app()
