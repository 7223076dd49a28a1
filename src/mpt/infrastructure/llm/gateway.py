"""
Provider Gateway

One streaming call abstraction over two interchangeable backends
with per-session failover.

Per-session state machine (stored on ``Session.fallback``):

    Normal   --primary rate limit, secondary configured-->  Fallback
    Fallback --retry interval elapsed, primary succeeds-->  Normal
    Fallback --secondary no longer configured----------->  Normal

While in Fallback, calls inside the retry interval go straight to the
secondary. Time is compared on each call; there is no background timer.
A non-rate-limit failure never triggers failover.
"""

import asyncio
import time
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Iterable, Optional, Union

from mpt.config.logging_config import get_logger
from mpt.domain.enums import ProviderRole
from mpt.domain.models import ProviderFallbackState, Session
from mpt.infrastructure.llm.provider import (
    CompletionRequest,
    LLMProvider,
    LLMProviderError,
    ProviderUnavailableError,
    RateLimitError,
)
from mpt.infrastructure.metrics import track_llm_request, track_provider_switch

logger = get_logger(__name__)

DEFAULT_RETRY_INTERVAL_SECONDS = 300.0
DEFAULT_RATE_LIMIT_MARKERS: tuple[str, ...] = ("429", "rate limit", "tokens per day limit")


@dataclass(frozen=True)
class TextDelta:
    """Raw text increment from whichever backend serves the call."""

    content: str


@dataclass(frozen=True)
class ProviderSwitch:
    """The call moved to another backend mid-flight."""

    role: ProviderRole
    provider: str


GatewayEvent = Union[TextDelta, ProviderSwitch]


def is_rate_limit_error(error: BaseException, markers: Iterable[str] = DEFAULT_RATE_LIMIT_MARKERS) -> bool:
    """Classify a backend failure as capacity exhaustion."""
    if isinstance(error, RateLimitError):
        return True
    text = str(error).lower()
    return any(marker in text for marker in markers)


class ProviderGateway:
    """
    Streams completions with automatic primary/secondary failover.

    Usage:
        gateway = ProviderGateway(primary, secondary)
        async for event in gateway.stream(session, request):
            if isinstance(event, TextDelta):
                ...
    """

    def __init__(
        self,
        primary: LLMProvider,
        secondary: Optional[LLMProvider] = None,
        retry_interval_seconds: float = DEFAULT_RETRY_INTERVAL_SECONDS,
        rate_limit_markers: Iterable[str] = DEFAULT_RATE_LIMIT_MARKERS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.primary = primary
        self.secondary = secondary
        self.retry_interval_seconds = retry_interval_seconds
        self.rate_limit_markers = tuple(m.lower() for m in rate_limit_markers)
        self._clock = clock

    @property
    def has_secondary(self) -> bool:
        return self.secondary is not None and self.secondary.is_configured()

    def provider_for(self, role: ProviderRole) -> LLMProvider:
        if role == ProviderRole.SECONDARY and self.secondary is not None:
            return self.secondary
        return self.primary

    async def health_check(self) -> dict[str, bool]:
        """Availability of each configured backend."""
        components = {"primary": await self.primary.health_check()}
        if self.secondary is not None:
            components["secondary"] = await self.secondary.health_check()
        return components

    def route(self, session: Session) -> ProviderRole:
        """
        Backend the next call for this session starts on.

        Does not change session state.
        """
        fallback = session.fallback
        if fallback is None or not fallback.use_fallback or not self.has_secondary:
            return ProviderRole.PRIMARY
        if fallback.retry_due(self._clock(), self.retry_interval_seconds):
            return ProviderRole.PRIMARY
        return ProviderRole.SECONDARY

    async def stream(self, session: Session, request: CompletionRequest) -> AsyncIterator[GatewayEvent]:
        """
        Stream one completion for a session.

        Args:
            session: Session whose failover record is consulted and updated
            request: Prompt and conversation

        Yields:
            TextDelta for each increment, ProviderSwitch on failover

        Raises:
            ProviderUnavailableError: Primary rate limited with no secondary
            LLMProviderError: Any non-rate-limit backend failure
        """
        if session.fallback is not None and not self.has_secondary:
            logger.info("Secondary provider gone, leaving fallback", session_id=session.id)
            session.fallback = None

        if self.route(session) == ProviderRole.SECONDARY:
            async with aclosing(self._stream_from(self.secondary, request)) as deltas:
                async for delta in deltas:
                    yield delta
            return

        if session.fallback is not None:
            logger.info("Retrying primary provider", session_id=session.id, provider=self.primary.provider_name)

        try:
            async with aclosing(self._stream_from(self.primary, request)) as deltas:
                async for delta in deltas:
                    yield delta
        except LLMProviderError as e:
            if not is_rate_limit_error(e, self.rate_limit_markers):
                raise
            if not self.has_secondary:
                session.fallback = None
                raise ProviderUnavailableError(self.primary.provider_name) from e

            session.fallback = ProviderFallbackState(fallback_time=self._clock())
            track_provider_switch(self.primary.provider_name, self.secondary.provider_name)
            logger.warning(
                "Primary provider rate limited, switching to secondary",
                session_id=session.id,
                primary=self.primary.provider_name,
                secondary=self.secondary.provider_name,
            )
            yield ProviderSwitch(role=ProviderRole.SECONDARY, provider=self.secondary.provider_name)

            async with aclosing(self._stream_from(self.secondary, request)) as deltas:
                async for delta in deltas:
                    yield delta
            return

        if session.fallback is not None:
            logger.info("Primary provider recovered", session_id=session.id)
        session.fallback = None

    async def _stream_from(self, provider: LLMProvider, request: CompletionRequest) -> AsyncIterator[TextDelta]:
        """Stream from one backend, recording metrics."""
        start_time = time.monotonic()
        status = "success"
        stream = provider.stream(request)
        try:
            async for delta in stream:
                yield TextDelta(delta)
        except (asyncio.CancelledError, GeneratorExit):
            status = "cancelled"
            raise
        except LLMProviderError as e:
            status = "rate_limited" if is_rate_limit_error(e, self.rate_limit_markers) else "error"
            raise
        finally:
            await stream.aclose()
            track_llm_request(provider.provider_name, status, time.monotonic() - start_time)
