"""Domain models package."""

from mpt.domain.models.session import ProviderFallbackState, Session, SessionMessage
from mpt.domain.models.session_state import (
    REQUEST_CRITERIA,
    SOMATIC_DESCRIPTORS,
    SessionState,
    TherapyContext,
    create_initial_session_state,
)

__all__ = [
    # Session
    "Session",
    "SessionMessage",
    "ProviderFallbackState",
    # State
    "SessionState",
    "TherapyContext",
    "create_initial_session_state",
    "REQUEST_CRITERIA",
    "SOMATIC_DESCRIPTORS",
]
