"""
Chat Endpoint

Streams one guided MPT turn as Server-Sent Events.
Main interaction point for client conversations.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from mpt.api.dependencies import get_orchestrator
from mpt.api.v1.schemas import ChatRequest
from mpt.config.logging_config import get_logger
from mpt.services.orchestration import SessionOrchestrator

logger = get_logger(__name__)
router = APIRouter()

# Disable caching and proxy buffering so frames reach the client immediately
SSE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post(
    "/chat",
    summary="Send a message and stream the therapist's reply",
    response_class=StreamingResponse,
)
async def chat(
    request: ChatRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """
    Send a client message and stream the reply.

    Frames: ``meta``, ``chunk``*, optional ``info``/``provider_switch``,
    then ``done`` or ``error``. Unknown or missing session ids start a
    new session; its id is reported in the ``meta`` frame.
    """
    session = await orchestrator.resolve_session(
        request.session_id,
        request.scenario_id,
        request.message,
    )

    logger.info(
        "Chat turn received",
        session_id=session.id,
        message_length=len(request.message),
    )

    return StreamingResponse(
        orchestrator.stream_turn(session, request.message),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
