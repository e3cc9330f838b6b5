"""Chat API: one endpoint per conversational operation.

Caller identity comes from headers set by the upstream auth gateway.
Turn failures never surface here; the orchestrator always returns a
reply.
"""

from dataclasses import dataclass

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from src.services.turn_orchestrator import TurnOrchestrator, TurnRequest
from src.shared.response_models import ChatReply, ChatRequest
from src.shared.session_store import SessionNotFoundError

router = APIRouter(prefix="/chat", tags=["chat"])


@dataclass(frozen=True)
class AuthUser:
    """Authenticated caller identity."""

    user_id: str
    display_name: str = ""
    role: str = "member"


def get_auth_user(
    x_user_id: str | None = Header(default=None),
    x_user_name: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> AuthUser:
    """Read caller identity from gateway headers.

    Raises:
        HTTPException: 401 when no user id is present.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="User must be authenticated.")
    return AuthUser(
        user_id=x_user_id.strip(),
        display_name=(x_user_name or "").strip(),
        role=(x_user_role or "member").strip() or "member",
    )


def get_orchestrator(request: Request) -> TurnOrchestrator:
    """Return the orchestrator attached to the running app."""
    return request.app.state.orchestrator


@router.post("", response_model=ChatReply, response_model_by_alias=True)
async def chat(
    body: ChatRequest,
    user: AuthUser = Depends(get_auth_user),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ChatReply:
    """Send one message and receive the agent reply.

    Args:
        body: Message text and optional session id.
        user: Authenticated caller.
        orchestrator: Turn orchestrator.

    Returns:
        ChatReply serialized with camelCase keys.
    """
    message = body.message.strip()
    if not message:
        raise HTTPException(status_code=422, detail="Message must not be blank.")

    return await orchestrator.handle_turn(
        TurnRequest(
            user_id=user.user_id,
            message=message,
            session_id=body.session_id,
            user_name=user.display_name,
            user_role=user.role,
        )
    )


@router.post("/sessions/{session_id}/end")
async def end_session(
    session_id: str,
    user: AuthUser = Depends(get_auth_user),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> dict:
    """End the caller's session so the next message starts a new one.

    Raises:
        HTTPException: 404 if the session is unknown or not the caller's.
    """
    try:
        await orchestrator.end_session(user.user_id, session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found") from None
    return {"sessionId": session_id, "active": False}
