"""System instruction composition."""

from mpt.services.prompt.prompt_composer import (
    IMPORTANCE_THRESHOLD,
    NO_THINK_DIRECTIVE,
    PromptComposer,
    compose_system_prompt,
)

__all__ = [
    "IMPORTANCE_THRESHOLD",
    "NO_THINK_DIRECTIVE",
    "PromptComposer",
    "compose_system_prompt",
]
