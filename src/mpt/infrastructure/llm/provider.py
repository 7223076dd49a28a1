"""
LLM Provider Abstract Interface

Defines the contract for all streaming model backends.
The gateway treats every backend through this interface, so primary
and secondary can be any mix of implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional


@dataclass
class CompletionRequest:
    """
    One streaming chat completion call.

    Attributes:
        system_prompt: Composed system instruction
        messages: Conversation as {"role", "content"} dicts, oldest first
    """

    system_prompt: str
    messages: list[dict] = field(default_factory=list)

    def to_messages(self) -> list[dict]:
        """
        Convert to OpenAI-style message format.

        Returns:
            System message followed by the conversation
        """
        return [{"role": "system", "content": self.system_prompt}, *self.messages]


class LLMProvider(ABC):
    """
    Abstract streaming provider interface.

    Implementations yield visible text increments in arrival order
    and release the underlying network stream when the consumer
    stops iterating.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Backend label used in logs and stream frames."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model id sent with every request."""

    @abstractmethod
    def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """
        Stream a completion.

        Args:
            request: Prompt and conversation

        Yields:
            Raw text increments

        Raises:
            RateLimitError: Backend reported capacity exhaustion
            LLMProviderError: Any other backend failure
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether the backend answers a minimal request."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present; no network call."""


class LLMProviderError(Exception):
    """
    Failure reported by a model backend.

    ``provider`` is the backend label; ``is_retryable`` marks errors
    worth another attempt against the same backend.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.is_retryable = is_retryable
        self.original_error = original_error


class RateLimitError(LLMProviderError):
    """Backend refused the call for capacity reasons (HTTP 429, quota, overload)."""

    def __init__(
        self,
        provider: str,
        retry_after_seconds: Optional[int] = None,
        detail: str = "",
    ) -> None:
        message = f"Rate limit exceeded for {provider}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(
            message,
            provider=provider,
            is_retryable=True,
        )
        self.retry_after_seconds = retry_after_seconds


class ContentFilterError(LLMProviderError):
    """Backend stopped the completion with a content-filter finish."""

    def __init__(self, provider: str, filter_reason: str = "") -> None:
        super().__init__(
            f"Content filtered by {provider}: {filter_reason}",
            provider=provider,
            is_retryable=False,
        )
        self.filter_reason = filter_reason


class ProviderUnavailableError(LLMProviderError):
    """Primary is rate limited and no secondary backend is configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"{provider} is rate limited and no secondary provider is configured",
            provider=provider,
            is_retryable=False,
        )
