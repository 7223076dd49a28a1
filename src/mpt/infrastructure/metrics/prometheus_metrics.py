"""
Prometheus Metrics

Operational metrics for the MPT guide service.
Exposes metrics at /metrics endpoint for Prometheus scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)
from fastapi import APIRouter, Response

from mpt import __version__

# =============================================================================
# SESSION METRICS
# =============================================================================

ACTIVE_SESSIONS = Gauge(
    "mpt_active_sessions",
    "Number of sessions held by the session store",
)

CHAT_TURNS_TOTAL = Counter(
    "mpt_chat_turns_total",
    "Chat turns by outcome",
    ["outcome"],  # completed, failed, cancelled
)

STAGE_TRANSITIONS_TOTAL = Counter(
    "mpt_stage_transitions_total",
    "Stage transitions",
    ["from_stage", "to_stage"],
)

# =============================================================================
# LLM METRICS
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    "mpt_llm_requests_total",
    "Total streaming LLM requests by provider",
    ["provider", "status"],  # success, error, rate_limited, cancelled
)

LLM_STREAM_DURATION = Histogram(
    "mpt_llm_stream_duration_seconds",
    "Wall time from opening a model stream to its end",
    ["provider"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0],
)

PROVIDER_SWITCHES_TOTAL = Counter(
    "mpt_provider_switches_total",
    "Sessions moved from the primary to the secondary provider",
    ["from_provider", "to_provider"],
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "mpt_system",
    "MPT guide service information",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_llm_request(provider: str, status: str, duration_seconds: float) -> None:
    """Record one finished model stream."""
    LLM_REQUESTS_TOTAL.labels(provider=provider, status=status).inc()
    LLM_STREAM_DURATION.labels(provider=provider).observe(duration_seconds)


def track_provider_switch(from_provider: str, to_provider: str) -> None:
    """Record a failover to the secondary provider."""
    PROVIDER_SWITCHES_TOTAL.labels(from_provider=from_provider, to_provider=to_provider).inc()


def track_stage_transition(from_stage: str, to_stage: str) -> None:
    """Record a stage machine transition."""
    STAGE_TRANSITIONS_TOTAL.labels(from_stage=from_stage, to_stage=to_stage).inc()


def track_chat_turn(outcome: str) -> None:
    """Record the outcome of a chat turn."""
    CHAT_TURNS_TOTAL.labels(outcome=outcome).inc()


def update_system_info(environment: str, version: str = __version__) -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )
