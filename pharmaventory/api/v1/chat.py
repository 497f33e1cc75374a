"""Chat API endpoints for the dashboard assistant widget."""

from fastapi import APIRouter, Request, Response, status

from pharmaventory.core.deps import ChatServiceDep, CurrentUser
from pharmaventory.core.rate_limit import CHAT_RATE_LIMIT, limiter
from pharmaventory.schemas.chat import ChatRequest, ChatResponse

router = APIRouter()


@router.post(
    "",
    response_model=ChatResponse,
    summary="Send a chat message",
    description="""
    Send a message to the pharmacy assistant and get a reply.

    The assistant answers from live inventory data. When a remote model is
    configured it is tried first; otherwise (or when it fails) the reply comes
    from the rule-based handlers.

    Provide session_id to continue a conversation; a new one is generated
    and returned when it is omitted.
    """,
)
@limiter.limit(CHAT_RATE_LIMIT)
async def send_message(
    request: Request,  # noqa: ARG001 - required by slowapi
    payload: ChatRequest,
    service: ChatServiceDep,
    user: CurrentUser,
) -> ChatResponse:
    """Send a message and get the assistant's reply."""
    return await service.process_message(
        payload.message,
        session_id=payload.session_id,
        user_id=str(user.get("sub")),
    )


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear a chat session",
)
async def clear_session(
    session_id: str,
    service: ChatServiceDep,
    _user: CurrentUser,
) -> Response:
    """Forget the conversation history of one session."""
    await service.clear_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
