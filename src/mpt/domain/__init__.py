"""
MPT Guide Domain Layer

Core entities and enumerations, independent of infrastructure.
"""

from mpt.domain.enums import MessageRole, MPTStage, ProviderRole, RequestType, STAGE_ORDER
from mpt.domain.models import (
    ProviderFallbackState,
    Session,
    SessionMessage,
    SessionState,
    TherapyContext,
)

__all__ = [
    # Enums
    "MessageRole",
    "MPTStage",
    "ProviderRole",
    "RequestType",
    "STAGE_ORDER",
    # Models
    "ProviderFallbackState",
    "Session",
    "SessionMessage",
    "SessionState",
    "TherapyContext",
]
