"""LLM provider abstraction package."""

from mpt.infrastructure.llm.provider import (
    CompletionRequest,
    LLMProvider,
    LLMProviderError,
    RateLimitError,
    ContentFilterError,
    ProviderUnavailableError,
)
from mpt.infrastructure.llm.openai_provider import OpenAICompatibleProvider
from mpt.infrastructure.llm.gemini_provider import GeminiProvider
from mpt.infrastructure.llm.provider_factory import build_providers, create_provider
from mpt.infrastructure.llm.gateway import (
    GatewayEvent,
    ProviderGateway,
    ProviderSwitch,
    TextDelta,
    is_rate_limit_error,
)

__all__ = [
    # Base types
    "CompletionRequest",
    "LLMProvider",
    "LLMProviderError",
    "RateLimitError",
    "ContentFilterError",
    "ProviderUnavailableError",
    # Providers
    "OpenAICompatibleProvider",
    "GeminiProvider",
    # Factory
    "build_providers",
    "create_provider",
    # Gateway
    "GatewayEvent",
    "ProviderGateway",
    "ProviderSwitch",
    "TextDelta",
    "is_rate_limit_error",
]
