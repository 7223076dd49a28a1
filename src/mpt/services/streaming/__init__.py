"""Model output stream processing."""

from mpt.services.streaming.stream_filter import (
    CLOSE_MARKER,
    OPEN_MARKER,
    StreamFilter,
    strip_markers,
)

__all__ = [
    "CLOSE_MARKER",
    "OPEN_MARKER",
    "StreamFilter",
    "strip_markers",
]
