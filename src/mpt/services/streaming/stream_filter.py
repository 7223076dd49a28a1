"""
Stream Filter

Removes internal reasoning blocks (``<think>...</think>``) from an
incrementally arriving model stream.

State is carried across ``feed`` calls so that a marker split over
several increments is still recognized: feeding any split of an input
yields the same visible text as feeding it whole.
"""

from dataclasses import dataclass, field

OPEN_MARKER = "<think>"
CLOSE_MARKER = "</think>"


def _partial_suffix(text: str, marker: str) -> int:
    """Length of the longest suffix of text that is a proper prefix of marker."""
    for size in range(min(len(text), len(marker) - 1), 0, -1):
        if marker.startswith(text[-size:]):
            return size
    return 0


@dataclass
class StreamFilter:
    """
    Two-state filter: outside or inside a reasoning marker.

    Attributes:
        open_marker: Token that starts a hidden region
        close_marker: Token that ends it
        raw: Full unfiltered stream, for diagnostics
        visible: Everything forwarded so far
        inside_marker: Currently inside a hidden region
    """

    open_marker: str = OPEN_MARKER
    close_marker: str = CLOSE_MARKER
    raw: str = ""
    visible: str = ""
    inside_marker: bool = False
    _pending: str = field(default="", repr=False)

    def feed(self, chunk: str) -> str:
        """
        Consume one increment.

        Args:
            chunk: Next piece of raw model output

        Returns:
            Text that can be forwarded now (may be empty)
        """
        if not chunk:
            return ""

        self.raw += chunk
        buffer = self._pending + chunk
        self._pending = ""
        output = []

        while buffer:
            if self.inside_marker:
                end = buffer.find(self.close_marker)
                if end == -1:
                    # Keep only what could still start the closing marker
                    keep = _partial_suffix(buffer, self.close_marker)
                    self._pending = buffer[len(buffer) - keep:] if keep else ""
                    break
                buffer = buffer[end + len(self.close_marker):]
                self.inside_marker = False
            else:
                start = buffer.find(self.open_marker)
                if start == -1:
                    keep = _partial_suffix(buffer, self.open_marker)
                    output.append(buffer[:len(buffer) - keep])
                    self._pending = buffer[len(buffer) - keep:] if keep else ""
                    break
                output.append(buffer[:start])
                buffer = buffer[start + len(self.open_marker):]
                self.inside_marker = True

        text = "".join(output)
        self.visible += text
        return text

    def flush(self) -> str:
        """
        End of stream: release held-back text.

        Text held back as a possible marker start is forwarded when
        outside a marker. Everything after an unterminated opening
        marker is discarded.
        """
        pending, self._pending = self._pending, ""
        if self.inside_marker:
            return ""
        self.visible += pending
        return pending


def strip_markers(text: str) -> str:
    """Filter a complete text in one pass."""
    stream_filter = StreamFilter()
    return stream_filter.feed(text) + stream_filter.flush()
