"""
API Dependencies

FastAPI dependency providers shared by the endpoint modules.
"""

from fastapi import Request

from mpt.services.orchestration import SessionOrchestrator


def get_orchestrator(request: Request) -> SessionOrchestrator:
    """Get the orchestrator created during application startup."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise RuntimeError("Orchestrator not initialized")
    return orchestrator
