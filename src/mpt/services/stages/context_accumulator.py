"""
Context Accumulator

Folds one client turn into the session's working memory: per-turn
fields, classifier results and the structured facts that gate the
stage machine.

Context fields are only ever set or refined; a detector that finds
nothing leaves the stored value alone.
"""

from typing import Iterable, Optional

from mpt.config.logging_config import get_logger
from mpt.domain.enums import MPTStage
from mpt.domain.models import SessionState
from mpt.services.detection import (
    TurnClassification,
    classify_turn,
    detect_body_location,
    detect_chosen_practice,
    detect_deep_need,
    detect_integration_shift,
    detect_metaphor,
    detect_movement,
    detect_next_step,
    detect_request_criteria,
    detect_request_type,
    detect_somatic_descriptors,
    detect_strategy,
)
from mpt.services.detection.text_classifiers import HistoryItem

logger = get_logger(__name__)


class ContextAccumulator:
    """
    Applies classifier output to a SessionState in place.

    The caller owns the state for the duration of the turn
    (the session lock is held).
    """

    def accumulate(
        self,
        state: SessionState,
        message: str,
        history: Iterable[HistoryItem],
    ) -> TurnClassification:
        """
        Update state from a client message.

        Args:
            state: State of the session handling this turn
            message: Client message of this turn
            history: Full transcript including this message

        Returns:
            Per-turn classifier results for prompt composition
        """
        classification = classify_turn(
            message,
            history,
            expecting_rating=state.current_stage == MPTStage.CONTEXT_GATHERING,
        )

        state.last_client_response = message
        state.client_says_i_dont_know = classification.says_i_dont_know
        state.stage_response_count += 1

        if classification.client_name and not state.context.client_name:
            state.context.client_name = classification.client_name

        if classification.importance_rating is not None:
            state.importance_rating = classification.importance_rating

        if state.request_type is None:
            state.request_type = detect_request_type(message)
        if state.context.original_request is None:
            state.context.original_request = message.strip()

        self._apply_stage_signals(state, message)

        # A "don't know" answer keeps the same question for the helping question
        if not classification.says_i_dont_know:
            state.current_question_index += 1

        logger.debug(
            "Turn accumulated",
            stage=state.current_stage.value,
            response_count=state.stage_response_count,
            question_index=state.current_question_index,
            says_i_dont_know=classification.says_i_dont_know,
        )
        return classification

    def _apply_stage_signals(self, state: SessionState, message: str) -> None:
        """Extract the facts the current stage is looking for."""
        stage = state.current_stage
        context = state.context

        if stage == MPTStage.REQUEST_VALIDATION:
            criteria = detect_request_criteria(message)
            context.request_criteria |= criteria
            if "positivity" in criteria:
                context.clarified_request = message.strip()

        elif stage == MPTStage.STRATEGY_EXPLORATION:
            context.current_strategy = _refine(context.current_strategy, detect_strategy(message))

        elif stage == MPTStage.NEED_DISCOVERY:
            context.deep_need = _refine(context.deep_need, detect_deep_need(message))

        elif stage == MPTStage.SOMATIC_EXPLORATION:
            context.body_location = _refine(context.body_location, detect_body_location(message))
            context.body_descriptors |= detect_somatic_descriptors(message)

        elif stage == MPTStage.IMAGERY_CREATION:
            context.metaphor = _refine(context.metaphor, detect_metaphor(message))

        elif stage == MPTStage.EMBODIMENT_MOVEMENT:
            if detect_movement(message):
                state.movement_offered = True

        elif stage == MPTStage.INTEGRATION:
            if detect_integration_shift(message):
                state.integration_complete = True

        elif stage == MPTStage.NEW_ACTIONS:
            context.next_step = _refine(context.next_step, detect_next_step(message))

        elif stage == MPTStage.IMPLEMENTATION_PRACTICES:
            context.chosen_practice = _refine(context.chosen_practice, detect_chosen_practice(message))


def _refine(current: Optional[str], found: Optional[str]) -> Optional[str]:
    return found if found else current
