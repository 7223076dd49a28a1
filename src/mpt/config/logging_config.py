"""
MPT Guide Logging Configuration

structlog on top of stdlib logging. Every entry carries the service
name and version plus whatever request context is bound (correlation
id, session id).

PRIVACY: Client and model text must not reach the log sink. Keys that
look like credentials are masked, and keys that usually carry
conversation text are reduced to their length.
"""

import logging
import sys
from typing import Any

import structlog

from mpt import __version__
from mpt.config.settings import Settings

SERVICE_NAME = "mpt-guide"

CREDENTIAL_MARKERS: tuple[str, ...] = (
    "api_key",
    "apikey",
    "authorization",
    "bearer",
    "password",
    "secret",
    "token",
)

# Values under these keys are replaced by "<N chars>"
TEXT_KEYS: frozenset[str] = frozenset({
    "content",
    "message_text",
    "prompt",
    "reply",
    "system_prompt",
})

NOISY_LOGGERS: tuple[str, ...] = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai",
    "google",
)


def _mask(key: str, value: Any) -> Any:
    lowered = key.lower()
    if any(marker in lowered for marker in CREDENTIAL_MARKERS):
        return "[REDACTED]"
    if lowered in TEXT_KEYS and isinstance(value, str):
        return f"<{len(value)} chars>"
    if isinstance(value, dict):
        return {k: _mask(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_mask(key, item) for item in value]
    return value


def _scrub_event(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask credentials and conversation text, recursively."""
    return {key: _mask(key, value) for key, value in event_dict.items()}


def _stamp_service(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def build_processors(console: bool) -> list[Any]:
    """
    Processor chain for the given output mode.

    Args:
        console: Colored key/value lines instead of JSON
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _scrub_event,
        _stamp_service,
    ]
    if console:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return processors


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib root logger.

    Called once at application import. Development gets console output;
    every other environment emits one JSON object per line.
    """
    level = logging.getLevelName(settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=build_processors(console=settings.env == "development"),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Attach the request correlation id to every entry in this context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def bind_session_id(session_id: str) -> None:
    structlog.contextvars.bind_contextvars(session_id=session_id)


def clear_context() -> None:
    """Drop all bound request context."""
    structlog.contextvars.clear_contextvars()
