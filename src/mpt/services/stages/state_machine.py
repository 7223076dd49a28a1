"""
Stage State Machine

Decides when the current MPT stage is complete and moves the
session to the next one. Stages are strictly ordered; none may
be skipped or revisited.

Both operations are pure: ``should_advance`` only reads the state
and ``advance`` returns a new state.
"""

from typing import Callable

from mpt.domain.enums import MPTStage
from mpt.domain.models import SessionState
from mpt.services.catalog.stage_catalog import get_stage_info, next_stage


StageCriterion = Callable[[SessionState], bool]


def _has_min_responses(state: SessionState) -> bool:
    return state.stage_response_count >= get_stage_info(state.current_stage).min_responses


def _meta_questions_answered(state: SessionState) -> bool:
    questions = get_stage_info(MPTStage.META_PERSPECTIVE).questions
    return state.current_question_index >= len(questions)


STAGE_CRITERIA: dict[MPTStage, StageCriterion] = {
    MPTStage.CONTEXT_GATHERING: lambda s: s.importance_rating is not None,
    MPTStage.REQUEST_VALIDATION: lambda s: s.context.request_validated,
    MPTStage.STRATEGY_EXPLORATION: lambda s: bool(s.context.current_strategy) and _has_min_responses(s),
    MPTStage.NEED_DISCOVERY: lambda s: bool(s.context.deep_need),
    MPTStage.SOMATIC_EXPLORATION: lambda s: s.context.sensation_described,
    MPTStage.IMAGERY_CREATION: lambda s: bool(s.context.metaphor),
    MPTStage.EMBODIMENT_MOVEMENT: lambda s: s.movement_offered,
    MPTStage.META_PERSPECTIVE: _meta_questions_answered,
    MPTStage.INTEGRATION: lambda s: s.integration_complete,
    MPTStage.NEW_ACTIONS: lambda s: bool(s.context.next_step),
    MPTStage.FINISH: lambda s: False,
}


def should_advance(state: SessionState) -> bool:
    """
    Check whether the current stage's completion criterion is met.

    Stages without an explicit criterion advance after their
    minimum response count.

    Args:
        state: Session state after the current turn was accumulated

    Returns:
        True if the session should move to the next stage
    """
    criterion = STAGE_CRITERIA.get(state.current_stage, _has_min_responses)
    return criterion(state)


def advance(state: SessionState) -> SessionState:
    """
    Move to the next stage in canonical order.

    The terminal stage maps to itself and is never recorded in the
    history. The input state is not modified.

    Args:
        state: Current state

    Returns:
        New state positioned at the next stage with counters reset
    """
    new_state = state.copy()
    target = next_stage(state.current_stage)
    if target == state.current_stage:
        return new_state

    new_state.stage_history.append(state.current_stage)
    new_state.current_stage = target
    new_state.stage_response_count = 0
    new_state.current_question_index = 0
    return new_state
