"""
Session Endpoints

Session creation and inspection.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from mpt.api.dependencies import get_orchestrator
from mpt.api.v1.schemas import NewSessionRequest, SessionCreatedResponse
from mpt.services.orchestration import SessionOrchestrator

router = APIRouter()


@router.post(
    "/new",
    response_model=SessionCreatedResponse,
    summary="Start a new session",
)
async def create_session(
    request: Optional[NewSessionRequest] = None,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> SessionCreatedResponse:
    """
    Start an empty session, optionally bound to a scenario.

    Unknown scenario ids are ignored.
    """
    scenario_id = request.scenario_id if request else None
    session = await orchestrator.create_session(scenario_id=scenario_id)
    return SessionCreatedResponse.model_validate(orchestrator.session_summary(session))


@router.get(
    "/{session_id}",
    summary="Get a session with its transcript and state",
)
async def get_session(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> dict:
    """Full session snapshot, including messages and stage state."""
    session = await orchestrator.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return session.to_dict()
