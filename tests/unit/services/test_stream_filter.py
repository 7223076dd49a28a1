"""
Unit Tests for the Stream Filter

Tests reasoning-marker removal across arbitrary chunk boundaries.
"""

import pytest

from mpt.services.streaming import StreamFilter, strip_markers


def run(chunks):
    stream_filter = StreamFilter()
    out = [stream_filter.feed(chunk) for chunk in chunks]
    out.append(stream_filter.flush())
    return "".join(out), stream_filter


class TestStripMarkers:
    """Tests for whole-text filtering."""

    def test_plain_text_untouched(self):
        assert strip_markers("Hello there") == "Hello there"

    def test_block_removed(self):
        assert strip_markers("<think>plan</think>Hello") == "Hello"

    def test_multiple_blocks(self):
        assert strip_markers("a<think>x</think>b<think>y</think>c") == "abc"

    def test_unterminated_block_discarded(self):
        assert strip_markers("Hi <think>never closed") == "Hi "

    def test_lone_close_marker_kept(self):
        assert strip_markers("a</think>b") == "a</think>b"


class TestChunkBoundaries:
    """Feeding any split of the input yields the same visible text."""

    def test_marker_split_across_chunks(self):
        text, _ = run(["hi <think>x", "y</think> there"])
        assert text == "hi  there"

    def test_open_marker_split_in_pieces(self):
        text, _ = run(["Hel", "lo <th", "in", "k>secret</th", "ink>!"])
        assert text == "Hello !"

    def test_false_marker_start_released(self):
        text, _ = run(["a <th", "ere"])
        assert text == "a <there"

    def test_partial_marker_at_end_flushed(self):
        text, _ = run(["value <thi"])
        assert text == "value <thi"

    @pytest.mark.parametrize("source", [
        "<think>reasoning</think>Answer",
        "Before<think>a</think>middle<think>b</think>after",
        "x < y and <think> hidden </think>visible <thin",
    ])
    def test_every_two_way_split(self, source):
        expected = strip_markers(source)
        for cut in range(len(source) + 1):
            text, _ = run([source[:cut], source[cut:]])
            assert text == expected

    def test_character_by_character(self):
        source = "One<think>two</think>three"
        text, _ = run(list(source))
        assert text == "Onethree"


class TestBookkeeping:
    """Tests for raw and visible accumulation."""

    def test_raw_and_visible(self):
        text, stream_filter = run(["<think>x</think>", "Hi"])
        assert stream_filter.raw == "<think>x</think>Hi"
        assert stream_filter.visible == text == "Hi"

    def test_empty_chunk(self):
        stream_filter = StreamFilter()
        assert stream_filter.feed("") == ""
        assert stream_filter.flush() == ""
