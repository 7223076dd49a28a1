"""
Google Gemini LLM Provider

Streaming implementation of the provider interface for the Gemini
API. Selected per backend with ``provider_type="gemini"``.

ARCHITECTURE: Implements the same LLMProvider interface.
Swap between providers via configuration only. The google-generativeai
client holds one API key per process, so the factory refuses two Gemini
backends with different keys.
"""

import re
from typing import Any, AsyncIterator, Callable, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import (
    BlockedPromptException,
    GenerationConfig,
    HarmBlockThreshold,
    HarmCategory,
    StopCandidateException,
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

# Fallback for errors that arrive without a google-api-core type
RATE_LIMIT_TEXT = re.compile(r"\b429\b|rate limit|resource(?: has been)? exhausted|quota exceeded", re.I)


class GeminiProvider(LLMProvider):
    """
    Google Gemini streaming provider.

    The composed system prompt is passed as the model's system
    instruction; the conversation maps to Gemini "user"/"model" turns.
    """

    # Therapy conversations discuss distress; only block clearly dangerous content
    SAFETY_SETTINGS = {
        HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
        HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
        HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
        HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_ONLY_HIGH,
    }

    def __init__(
        self,
        settings: PrimaryProviderSettings,
        model_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        """
        Initialize Gemini provider.

        Args:
            settings: Backend settings (primary or secondary)
            model_factory: Builds the model object; defaults to ``genai.GenerativeModel``
        """
        self._name = settings.name
        self._api_key = settings.api_key.get_secret_value()
        self._default_model = settings.model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._top_p = settings.top_p
        self._model_factory = model_factory or genai.GenerativeModel
        self._configured = False

        if self._api_key:
            genai.configure(api_key=self._api_key)
            self._configured = True

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return self._configured

    @staticmethod
    def _to_contents(messages: list[dict]) -> list[dict]:
        """Map chat messages to Gemini content turns."""
        return [
            {
                "role": "model" if m["role"] == "assistant" else "user",
                "parts": [m["content"]],
            }
            for m in messages
        ]

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """
        Stream a completion using generate_content_async(stream=True).

        Args:
            request: Prompt and conversation

        Yields:
            Text increments as they arrive
        """
        if not self.is_configured():
            raise LLMProviderError(
                "Gemini API key not configured",
                provider=self.provider_name,
            )

        model = self._model_factory(
            model_name=self._default_model,
            safety_settings=self.SAFETY_SETTINGS,
            system_instruction=request.system_prompt,
        )
        generation_config = GenerationConfig(
            max_output_tokens=self._max_tokens,
            temperature=self._temperature,
            top_p=self._top_p,
        )

        try:
            response = await model.generate_content_async(
                self._to_contents(request.messages),
                generation_config=generation_config,
                stream=True,
            )
            async for chunk in response:
                text = self._chunk_text(chunk)
                if text:
                    yield text
        except LLMProviderError:
            raise
        except Exception as e:
            raise self._handle_error(e) from e

    def _chunk_text(self, chunk) -> Optional[str]:
        """Extract text from a streamed chunk, raising on safety blocks."""
        feedback = getattr(chunk, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            logger.warning("Gemini content blocked", reason=str(block_reason))
            raise ContentFilterError(provider=self.provider_name, filter_reason=str(block_reason))

        if not chunk.candidates:
            return None
        candidate = chunk.candidates[0]
        if "SAFETY" in str(getattr(candidate, "finish_reason", "")):
            raise ContentFilterError(
                provider=self.provider_name,
                filter_reason="Response blocked by safety filters",
            )
        if not candidate.content or not candidate.content.parts:
            return None
        return "".join(part.text for part in candidate.content.parts if getattr(part, "text", None))

    def _handle_error(self, error: Exception) -> LLMProviderError:
        """Map a client exception to the provider taxonomy."""
        if isinstance(error, (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests)) or (
            not isinstance(error, google_exceptions.GoogleAPICallError) and RATE_LIMIT_TEXT.search(str(error))
        ):
            logger.warning("Gemini rate limit", provider=self.provider_name, error=str(error))
            return RateLimitError(
                provider=self.provider_name,
                retry_after_seconds=30,
                detail=str(error),
            )

        if isinstance(error, (BlockedPromptException, StopCandidateException)):
            return ContentFilterError(
                provider=self.provider_name,
                filter_reason=str(error),
            )

        logger.error("Gemini API error", provider=self.provider_name, error=str(error))
        return LLMProviderError(
            f"Gemini error: {error}",
            provider=self.provider_name,
            is_retryable=not isinstance(error, google_exceptions.ClientError),
            original_error=error,
        )

    async def health_check(self) -> bool:
        """Check Gemini availability by listing models."""
        if not self.is_configured():
            return False

        try:
            models = list(genai.list_models())
            return any(self._default_model in m.name for m in models)
        except Exception as e:
            logger.warning("Gemini health check failed", error=str(e))
            return False
