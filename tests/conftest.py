"""Tests configuration and fixtures."""

from typing import AsyncIterator, Optional, Sequence

import pytest

from mpt.config import Settings
from mpt.domain.models import Session
from mpt.infrastructure.llm import (
    CompletionRequest,
    LLMProvider,
    ProviderGateway,
)
from mpt.infrastructure.storage import InMemorySessionStore
from mpt.services.orchestration import SessionOrchestrator


class FakeClock:
    """Manually advanced clock for time-dependent components."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedProvider(LLMProvider):
    """
    Provider that replays scripted chunks.

    ``error`` is raised after the chunks are yielded. Every request is
    recorded; ``closed`` counts streams released by the consumer.
    """

    def __init__(
        self,
        name: str = "fake-primary",
        chunks: Sequence[str] = ("Hello", " there"),
        error: Optional[Exception] = None,
        configured: bool = True,
    ) -> None:
        self.name = name
        self.chunks = list(chunks)
        self.error = error
        self.configured = configured
        self.requests: list[CompletionRequest] = []
        self.closed = 0

    @property
    def provider_name(self) -> str:
        return self.name

    @property
    def default_model(self) -> str:
        return "fake-model"

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        self.requests.append(request)
        try:
            for chunk in self.chunks:
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed += 1

    async def health_check(self) -> bool:
        return self.configured

    def is_configured(self) -> bool:
        return self.configured

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings without provider credentials."""
    return Settings(
        env="test",
        debug=True,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def primary() -> ScriptedProvider:
    return ScriptedProvider(name="fake-primary", chunks=("Hello", " there"))


@pytest.fixture
def secondary() -> ScriptedProvider:
    return ScriptedProvider(name="fake-secondary", chunks=("Backup", " reply"))


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def store(clock: FakeClock) -> InMemorySessionStore:
    return InMemorySessionStore(ttl_seconds=3600, max_sessions=100, clock=clock)


@pytest.fixture
def gateway(primary: ScriptedProvider, secondary: ScriptedProvider, clock: FakeClock) -> ProviderGateway:
    return ProviderGateway(primary, secondary, retry_interval_seconds=300, clock=clock)


@pytest.fixture
def orchestrator(store: InMemorySessionStore, gateway: ProviderGateway) -> SessionOrchestrator:
    return SessionOrchestrator(store, gateway)


@pytest.fixture
def make_provider() -> type[ScriptedProvider]:
    """Factory for extra scripted providers."""
    return ScriptedProvider
