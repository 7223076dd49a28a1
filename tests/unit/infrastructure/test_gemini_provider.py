"""
Unit Tests for the Gemini Provider

Tests text extraction, safety blocks and error mapping against a stub
model, plus the factory's single-key constraint.
"""

from types import SimpleNamespace

import pytest
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import BlockedPromptException

from mpt.config.settings import PrimaryProviderSettings, SecondaryProviderSettings, Settings
from mpt.infrastructure.llm import (
    CompletionRequest,
    ContentFilterError,
    LLMProviderError,
    ProviderGateway,
    RateLimitError,
    build_providers,
)
from mpt.infrastructure.llm.gemini_provider import GeminiProvider


def make_chunk(text=None, finish_reason="STOP", block_reason=None):
    parts = [SimpleNamespace(text=text)] if text is not None else []
    return SimpleNamespace(
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        candidates=[SimpleNamespace(finish_reason=finish_reason, content=SimpleNamespace(parts=parts))],
    )


class StubResponse:
    def __init__(self, chunks):
        self._chunks = list(chunks)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk


class StubModelFactory:
    """Stands in for ``genai.GenerativeModel``; records constructor and call arguments."""

    def __init__(self, chunks=(), error=None):
        self.chunks = chunks
        self.error = error
        self.init_kwargs = []
        self.calls = []

    def __call__(self, **kwargs):
        self.init_kwargs.append(kwargs)
        return SimpleNamespace(generate_content_async=self._generate)

    async def _generate(self, contents, generation_config=None, stream=False):
        self.calls.append({"contents": contents, "stream": stream})
        if self.error is not None:
            raise self.error
        return StubResponse(self.chunks)


@pytest.fixture
def gemini_settings():
    return PrimaryProviderSettings(
        provider_type="gemini", name="gemini", api_key="test-key", model="gemini-1.5-flash"
    )


@pytest.fixture
def request_():
    return CompletionRequest(
        system_prompt="SYSTEM",
        messages=[
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "I feel anxious"},
        ],
    )


async def collect(provider, request):
    return [delta async for delta in provider.stream(request)]


class TestGeminiStreaming:
    """Tests for streamed text extraction."""

    @pytest.mark.asyncio
    async def test_streams_text(self, gemini_settings, request_):
        factory = StubModelFactory(chunks=[make_chunk("Hel"), make_chunk(None), make_chunk("lo")])
        provider = GeminiProvider(gemini_settings, model_factory=factory)

        assert await collect(provider, request_) == ["Hel", "lo"]
        assert factory.init_kwargs[0]["system_instruction"] == "SYSTEM"
        assert factory.init_kwargs[0]["model_name"] == "gemini-1.5-flash"
        call = factory.calls[0]
        assert call["stream"] is True
        assert [c["role"] for c in call["contents"]] == ["user", "model", "user"]

    @pytest.mark.asyncio
    async def test_safety_finish_is_content_filter(self, gemini_settings, request_):
        factory = StubModelFactory(chunks=[make_chunk("a"), make_chunk(None, finish_reason="SAFETY")])
        provider = GeminiProvider(gemini_settings, model_factory=factory)

        with pytest.raises(ContentFilterError):
            await collect(provider, request_)

    @pytest.mark.asyncio
    async def test_blocked_prompt_is_content_filter(self, gemini_settings, request_):
        factory = StubModelFactory(chunks=[make_chunk(None, block_reason="SAFETY")])
        provider = GeminiProvider(gemini_settings, model_factory=factory)

        with pytest.raises(ContentFilterError):
            await collect(provider, request_)

    @pytest.mark.asyncio
    async def test_unconfigured(self, request_):
        provider = GeminiProvider(PrimaryProviderSettings(provider_type="gemini", api_key=""))

        assert provider.is_configured() is False
        with pytest.raises(LLMProviderError):
            await collect(provider, request_)


class TestGeminiErrorMapping:
    """Tests for mapping client exceptions onto the provider taxonomy."""

    @pytest.fixture
    def provider(self, gemini_settings):
        return GeminiProvider(gemini_settings, model_factory=StubModelFactory())

    @pytest.mark.parametrize("error", [
        google_exceptions.ResourceExhausted("Quota exceeded for requests per minute"),
        google_exceptions.TooManyRequests("Too many requests"),
        Exception("429 Resource has been exhausted"),
    ])
    def test_capacity_errors_are_rate_limits(self, provider, error):
        mapped = provider._handle_error(error)

        assert isinstance(mapped, RateLimitError)
        assert mapped.provider == "gemini"

    @pytest.mark.parametrize("error", [
        google_exceptions.InvalidArgument(
            "Request contains an invalid argument: GenerateContentRequest.contents is empty"
        ),
        Exception("400 Request contains an invalid argument: GenerateContentRequest.contents is empty"),
        google_exceptions.InternalServerError("Failed to generate a response"),
    ])
    def test_words_containing_rate_are_not_rate_limits(self, provider, error):
        mapped = provider._handle_error(error)

        assert not isinstance(mapped, RateLimitError)
        assert isinstance(mapped, LLMProviderError)

    def test_client_errors_are_not_retryable(self, provider):
        assert provider._handle_error(google_exceptions.InvalidArgument("bad")).is_retryable is False
        assert provider._handle_error(google_exceptions.ServiceUnavailable("down")).is_retryable is True

    def test_blocked_prompt_exception(self, provider):
        assert isinstance(provider._handle_error(BlockedPromptException("blocked")), ContentFilterError)

    @pytest.mark.asyncio
    async def test_invalid_argument_does_not_fail_over(self, gemini_settings, session, secondary, clock, request_):
        error = google_exceptions.InvalidArgument("GenerateContentRequest.contents is empty")
        primary = GeminiProvider(gemini_settings, model_factory=StubModelFactory(error=error))
        gateway = ProviderGateway(primary, secondary, clock=clock)

        with pytest.raises(LLMProviderError) as exc_info:
            [event async for event in gateway.stream(session, request_)]

        assert not isinstance(exc_info.value, RateLimitError)
        assert secondary.calls == 0
        assert session.fallback is None


class TestGeminiKeyConstraint:
    """Tests for the factory's single Gemini key rule."""

    def test_two_gemini_keys_rejected(self):
        settings = Settings(
            primary=PrimaryProviderSettings(provider_type="gemini", api_key="key-a"),
            secondary=SecondaryProviderSettings(provider_type="gemini", api_key="key-b"),
        )

        with pytest.raises(ValueError, match="share one API key"):
            build_providers(settings)

    def test_shared_gemini_key_allowed(self):
        settings = Settings(
            primary=PrimaryProviderSettings(provider_type="gemini", name="flash", api_key="key-a"),
            secondary=SecondaryProviderSettings(provider_type="gemini", name="pro", api_key="key-a"),
        )

        primary, secondary = build_providers(settings)

        assert primary.provider_name == "flash"
        assert secondary.provider_name == "pro"
