"""Domain enums package."""

from mpt.domain.enums.session_enums import (
    MessageRole,
    MPTStage,
    ProviderRole,
    RequestType,
    STAGE_ORDER,
)

__all__ = ["MessageRole", "MPTStage", "ProviderRole", "RequestType", "STAGE_ORDER"]
