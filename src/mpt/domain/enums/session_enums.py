"""
Session Stage and Request Type Enumerations

Defines the ordered stages of an MPT session and the kinds of
client goals the request-type detector distinguishes.

ORDERING: Declaration order of MPTStage IS the canonical stage
sequence. Stages are never skipped or reordered.
"""

from enum import StrEnum


class MPTStage(StrEnum):
    """
    Stages of a guided MPT session, in canonical order.

    Every session starts at CONTEXT_GATHERING and moves forward one
    stage at a time until FINISH, which is terminal.
    """

    CONTEXT_GATHERING = "context_gathering"
    """Understand the situation and how important it is (1-10)."""

    REQUEST_VALIDATION = "request_validation"
    """Check the request against the five criteria."""

    STRATEGY_EXPLORATION = "strategy_exploration"
    """What the client DOES to create the situation, and why."""

    NEED_DISCOVERY = "need_discovery"
    """Circular questions down to "I want to feel myself..."."""

    SOMATIC_EXPLORATION = "somatic_exploration"
    """Locate the need in the body and describe the sensation fully."""

    IMAGERY_CREATION = "imagery_creation"
    """Turn the sensation into an image or metaphor."""

    EMBODIMENT_MOVEMENT = "embodiment_movement"
    """Become the image and let a movement emerge."""

    META_PERSPECTIVE = "meta_perspective"
    """Look at the client through the eyes of the image."""

    INTEGRATION = "integration"
    """Integrate the image's energy through the body."""

    NEW_ACTIONS = "new_actions"
    """One concrete SMART step for the next 24 hours."""

    IMPLEMENTATION_PRACTICES = "implementation_practices"
    """Choose a practice to anchor the result."""

    FINISH = "finish"
    """
    Terminal stage.

    The state machine never transitions past it; the closing
    practice note is only composed here.
    """


STAGE_ORDER: tuple[MPTStage, ...] = tuple(MPTStage)


class RequestType(StrEnum):
    """
    Kind of goal the client brings, detected from the first message.

    GENERAL is the fallback when no cue matches; it adds no extra
    guidance to the composed prompt.
    """

    EMOTIONAL_STATE = "emotional_state"
    DECISION = "decision"
    RELATIONSHIP = "relationship"
    BEHAVIOR_CHANGE = "behavior_change"
    GOAL_ACHIEVEMENT = "goal_achievement"
    GENERAL = "general"


class ProviderRole(StrEnum):
    """Which of the two interchangeable backends served a request."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class MessageRole(StrEnum):
    """Author of a transcript message."""

    USER = "user"
    ASSISTANT = "assistant"
