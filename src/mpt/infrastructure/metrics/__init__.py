"""Metrics infrastructure package."""

from mpt.infrastructure.metrics.prometheus_metrics import (
    # Session metrics
    ACTIVE_SESSIONS,
    CHAT_TURNS_TOTAL,
    STAGE_TRANSITIONS_TOTAL,
    # LLM metrics
    LLM_REQUESTS_TOTAL,
    LLM_STREAM_DURATION,
    PROVIDER_SWITCHES_TOTAL,
    # Helpers
    track_chat_turn,
    track_llm_request,
    track_provider_switch,
    track_stage_transition,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "ACTIVE_SESSIONS",
    "CHAT_TURNS_TOTAL",
    "STAGE_TRANSITIONS_TOTAL",
    "LLM_REQUESTS_TOTAL",
    "LLM_STREAM_DURATION",
    "PROVIDER_SWITCHES_TOTAL",
    "track_chat_turn",
    "track_llm_request",
    "track_provider_switch",
    "track_stage_transition",
    "update_system_info",
    "metrics_router",
]
