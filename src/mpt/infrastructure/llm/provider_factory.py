"""
LLM Provider Factory

Builds the primary and secondary backends from configuration.

CONFIGURATION:
    MPT_PRIMARY_PROVIDER_TYPE=openai_compatible   # or: gemini
    MPT_SECONDARY_API_KEY=...                     # empty disables failover
"""

from typing import Optional

from mpt.config.logging_config import get_logger
from mpt.config.settings import PrimaryProviderSettings, Settings
from mpt.infrastructure.llm.provider import LLMProvider

logger = get_logger(__name__)


def create_provider(settings: PrimaryProviderSettings) -> LLMProvider:
    """
    Create a provider instance for one backend.

    Args:
        settings: Backend settings

    Returns:
        Provider implementation for ``settings.provider_type``

    Raises:
        ValueError: If unknown provider type
    """
    if settings.provider_type == "openai_compatible":
        from mpt.infrastructure.llm.openai_provider import OpenAICompatibleProvider
        return OpenAICompatibleProvider(settings)

    elif settings.provider_type == "gemini":
        from mpt.infrastructure.llm.gemini_provider import GeminiProvider
        return GeminiProvider(settings)

    else:
        raise ValueError(f"Unknown provider type: {settings.provider_type}")


def build_providers(settings: Settings) -> tuple[LLMProvider, Optional[LLMProvider]]:
    """
    Build the primary backend and, if configured, the secondary.

    Returns:
        (primary, secondary or None)

    Raises:
        ValueError: If both backends are Gemini with different API keys
    """
    _check_gemini_keys(settings)
    primary = create_provider(settings.primary)
    secondary = create_provider(settings.secondary) if settings.secondary.is_configured() else None

    logger.info(
        "LLM providers initialized",
        primary=primary.provider_name,
        primary_configured=primary.is_configured(),
        secondary=secondary.provider_name if secondary else None,
    )
    return primary, secondary


def _check_gemini_keys(settings: Settings) -> None:
    """google-generativeai keeps a single process-wide API key."""
    primary, secondary = settings.primary, settings.secondary
    if (
        secondary.is_configured()
        and primary.provider_type == secondary.provider_type == "gemini"
        and primary.api_key.get_secret_value() != secondary.api_key.get_secret_value()
    ):
        raise ValueError(
            "Primary and secondary Gemini backends must share one API key; "
            "use an openai_compatible backend for one of them"
        )
