"""
OpenAI-Compatible LLM Provider

Streaming chat completions against any endpoint that speaks the
OpenAI API (Cerebras, Algion, OpenAI itself).
Includes connection retries and error mapping.
"""

from typing import AsyncIterator, Optional

from openai import (
    AsyncOpenAI,
    APIConnectionError,
    APIError,
    APIStatusError,
    RateLimitError as OpenAIRateLimitError,
)
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from mpt.config.logging_config import get_logger
from mpt.config.settings import PrimaryProviderSettings
from mpt.infrastructure.llm.provider import (
    CompletionRequest,
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    RateLimitError,
)

logger = get_logger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """
    OpenAI-compatible streaming provider.

    Supports:
    - Async streaming with ``stream=True``
    - Retries with exponential backoff while opening the stream
    - Rate limit and content filter detection

    Usage:
        provider = OpenAICompatibleProvider(settings.primary)
        async for delta in provider.stream(request):
            ...
    """

    def __init__(
        self,
        settings: PrimaryProviderSettings,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            settings: Backend settings (primary or secondary)
            client: Preconfigured client, mainly for tests
        """
        self._name = settings.name
        self._api_key = settings.api_key.get_secret_value()
        self._base_url = settings.base_url
        self._default_model = settings.model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._top_p = settings.top_p
        self._client = client

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        """Get or create async client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(APIConnectionError),
        reraise=True,
    )
    async def _open_stream(self, messages: list[dict]):
        return await self._get_client().chat.completions.create(
            model=self._default_model,
            messages=messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            top_p=self._top_p,
            stream=True,
        )

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """
        Stream a completion.

        Args:
            request: Prompt and conversation

        Yields:
            Text increments as they arrive
        """
        if not self.is_configured():
            raise LLMProviderError(
                f"{self._name} API key not configured",
                provider=self.provider_name,
            )

        try:
            response = await self._open_stream(request.to_messages())
        except APIError as e:
            raise self._map_error(e) from e

        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                if choice.finish_reason == "content_filter":
                    raise ContentFilterError(
                        provider=self.provider_name,
                        filter_reason="Content was filtered by provider safety systems",
                    )
                content = choice.delta.content if choice.delta else None
                if content:
                    yield content
        except APIError as e:
            raise self._map_error(e) from e
        finally:
            await response.close()

    def _map_error(self, error: APIError) -> LLMProviderError:
        """Translate a client error into the provider taxonomy."""
        if isinstance(error, OpenAIRateLimitError):
            logger.warning("Provider rate limit hit", provider=self.provider_name, error=str(error))
            return RateLimitError(
                provider=self.provider_name,
                retry_after_seconds=60,
                detail=str(error),
            )

        status = error.status_code if isinstance(error, APIStatusError) else None
        logger.error(
            "Provider API error",
            provider=self.provider_name,
            status_code=status,
            error=str(error),
        )
        return LLMProviderError(
            f"{self.provider_name} API error ({status}): {error}",
            provider=self.provider_name,
            is_retryable=isinstance(error, APIConnectionError),
            original_error=error,
        )

    async def health_check(self) -> bool:
        """Check API availability."""
        if not self.is_configured():
            return False

        try:
            await self._get_client().models.list()
            return True
        except APIError as e:
            logger.warning("Provider health check failed", provider=self.provider_name, error=str(e))
            return False
