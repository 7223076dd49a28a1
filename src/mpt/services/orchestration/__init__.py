"""Chat turn orchestration."""

from mpt.services.orchestration.session_orchestrator import PreparedTurn, SessionOrchestrator

__all__ = ["PreparedTurn", "SessionOrchestrator"]
