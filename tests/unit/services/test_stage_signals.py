"""
Unit Tests for Stage Signals

Tests the detectors that fill the structured session context.
"""

import pytest

from mpt.services.detection import (
    detect_body_location,
    detect_chosen_practice,
    detect_deep_need,
    detect_integration_shift,
    detect_metaphor,
    detect_movement,
    detect_next_step,
    detect_request_criteria,
    detect_somatic_descriptors,
    detect_strategy,
)


class TestRequestCriteria:
    """Tests for request validation criteria."""

    def test_all_criteria(self):
        text = (
            "I want to feel calm at work, it depends on me, "
            "I'll notice it when I stop checking email, it's realistic"
        )
        assert detect_request_criteria(text) == {
            "positivity", "ownership", "specificity", "realism", "motivation",
        }

    def test_negative_wish_is_not_positivity(self):
        assert "positivity" not in detect_request_criteria("не хочу больше тревожиться")

    def test_empty(self):
        assert detect_request_criteria("") == set()


class TestStrategyAndNeed:
    """Tests for strategy and deep need detection."""

    def test_strategy(self):
        assert detect_strategy("I always check my phone at night") == "I always check my phone at night"

    def test_no_strategy(self):
        assert detect_strategy("It is hard") is None

    def test_deep_need(self):
        need = detect_deep_need("I think I want to feel safe. That's it.")
        assert need == "I want to feel safe"

    def test_russian_deep_need(self):
        assert detect_deep_need("Хочу чувствовать себя свободной") == "Хочу чувствовать себя свободной"

    def test_no_deep_need(self):
        assert detect_deep_need("I want a new job") is None


class TestSomatic:
    """Tests for body location and sensation descriptors."""

    @pytest.mark.parametrize("text,expected", [
        ("In my chest", "chest"),
        ("где-то в груди", "chest"),
        ("a knot in my stomach", "stomach"),
        ("в солнечном сплетении", "solar plexus"),
        ("my shoulders", "shoulders"),
    ])
    def test_body_location(self, text, expected):
        assert detect_body_location(text) == expected

    def test_no_location(self):
        assert detect_body_location("everywhere and nowhere") is None

    def test_all_descriptors(self):
        text = "Big, round, dense, warm and pulsing"
        assert detect_somatic_descriptors(text) == {"size", "shape", "density", "temperature", "movement"}

    def test_partial_descriptors(self):
        assert detect_somatic_descriptors("тёплый и тяжёлый") == {"temperature", "density"}


class TestImageMovementIntegration:
    """Tests for imagery, movement and integration signals."""

    def test_metaphor(self):
        assert detect_metaphor("It's like a warm sun, shining") == "a warm sun"

    def test_russian_metaphor(self):
        assert detect_metaphor("Похоже на тёплое солнце") == "тёплое солнце"

    def test_no_metaphor(self):
        assert detect_metaphor("I don't see anything") is None

    def test_movement(self):
        assert detect_movement("I want to stretch my arms") is True
        assert detect_movement("I just sit") is False

    def test_integration_shift(self):
        assert detect_integration_shift("I feel lighter and calmer") is True

    def test_nothing_changed(self):
        assert detect_integration_shift("Nothing changed, it's not better") is False

    def test_negated_integration_is_not_a_shift(self):
        assert detect_integration_shift("No, I don't feel any better.") is False
        assert detect_integration_shift("Ничего не изменилось, не легче") is False

    def test_negated_movement_is_not_a_movement(self):
        assert detect_movement("I can't move, nothing comes.") is False
        assert detect_movement("Тело не двигается") is False

    def test_negation_in_earlier_sentence_does_not_block(self):
        assert detect_integration_shift("I couldn't sleep. Now I feel lighter") is True
        assert detect_movement("Not sure. I want to stretch") is True
        assert detect_integration_shift("Мне стало легче") is True


class TestNewActions:
    """Tests for next step and practice choice."""

    def test_next_step_needs_action_and_time(self):
        assert detect_next_step("I will call my sister tomorrow") == "I will call my sister tomorrow"
        assert detect_next_step("I will call my sister") is None
        assert detect_next_step("tomorrow maybe") is None

    def test_russian_next_step(self):
        assert detect_next_step("Я позвоню маме завтра утром") is not None

    @pytest.mark.parametrize("text,expected", [
        ("The morning practice", "morning-practice"),
        ("быстрое переключение", "quick-switch"),
        ("3", "moment-switch"),
        ("4.", "action-check"),
    ])
    def test_chosen_practice(self, text, expected):
        assert detect_chosen_practice(text) == expected

    def test_no_practice(self):
        assert detect_chosen_practice("none of them") is None
