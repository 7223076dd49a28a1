"""
Session State Domain Model

The working memory of the stage machine. One SessionState belongs
to exactly one Session and is only mutated while that session's
request is being handled.

INVARIANT: stage_history is a strict prefix of the canonical stage
order with no duplicates, and current_stage is never in it.
"""

import copy
from dataclasses import dataclass, field
from typing import Optional

from mpt.domain.enums import MPTStage, RequestType


# Signals required before request validation is complete
REQUEST_CRITERIA: tuple[str, ...] = (
    "positivity",
    "ownership",
    "specificity",
    "realism",
    "motivation",
)

# Descriptors required before somatic exploration is complete
SOMATIC_DESCRIPTORS: tuple[str, ...] = (
    "size",
    "shape",
    "density",
    "temperature",
    "movement",
)


@dataclass
class TherapyContext:
    """
    Structured facts gathered during the conversation.

    Fields are only ever added to or refined, never cleared.

    Attributes:
        original_request: First thing the client asked for
        clarified_request: Request restated positively during validation
        current_strategy: What the client does to create the situation
        deep_need: "I want to feel myself..." formulation
        body_location: Where the need is felt in the body
        metaphor: Image created from the body sensation
        client_name: Name the client introduced themselves with
        next_step: Concrete SMART step
        chosen_practice: Implementation practice the client picked
        request_criteria: Validation criteria already confirmed
        body_descriptors: Somatic descriptors already given
    """

    original_request: Optional[str] = None
    clarified_request: Optional[str] = None
    current_strategy: Optional[str] = None
    deep_need: Optional[str] = None
    body_location: Optional[str] = None
    metaphor: Optional[str] = None
    client_name: Optional[str] = None
    next_step: Optional[str] = None
    chosen_practice: Optional[str] = None
    request_criteria: set[str] = field(default_factory=set)
    body_descriptors: set[str] = field(default_factory=set)

    @property
    def request_validated(self) -> bool:
        """All five request criteria confirmed."""
        return all(c in self.request_criteria for c in REQUEST_CRITERIA)

    @property
    def sensation_described(self) -> bool:
        """Body location and all five descriptors known."""
        return bool(self.body_location) and all(
            d in self.body_descriptors for d in SOMATIC_DESCRIPTORS
        )

    def to_dict(self) -> dict:
        """Serialize with deterministic ordering of set fields."""
        return {
            "originalRequest": self.original_request,
            "clarifiedRequest": self.clarified_request,
            "currentStrategy": self.current_strategy,
            "deepNeed": self.deep_need,
            "bodyLocation": self.body_location,
            "metaphor": self.metaphor,
            "clientName": self.client_name,
            "nextStep": self.next_step,
            "chosenPractice": self.chosen_practice,
            "requestCriteria": [c for c in REQUEST_CRITERIA if c in self.request_criteria],
            "bodyDescriptors": [d for d in SOMATIC_DESCRIPTORS if d in self.body_descriptors],
        }


@dataclass
class SessionState:
    """
    Progression state of one session.

    Attributes:
        current_stage: Single source of truth for progression
        current_question_index: Position within the stage's question list
        stage_history: Completed stages, append-only, display/audit only
        stage_response_count: Client turns received in the current stage
        context: Accumulated structured memory
        request_type: Kind of client goal, set once from the first message
        importance_rating: 1-10, last stated value wins
        last_client_response: Overwritten every turn
        client_says_i_dont_know: Overwritten every turn
        movement_offered: Embodiment movement already done
        integration_complete: Integration shift already reported
    """

    current_stage: MPTStage = MPTStage.CONTEXT_GATHERING
    current_question_index: int = 0
    stage_history: list[MPTStage] = field(default_factory=list)
    stage_response_count: int = 0
    context: TherapyContext = field(default_factory=TherapyContext)
    request_type: Optional[RequestType] = None
    importance_rating: Optional[int] = None
    last_client_response: Optional[str] = None
    client_says_i_dont_know: bool = False
    movement_offered: bool = False
    integration_complete: bool = False

    def copy(self) -> "SessionState":
        """Return an independent deep copy."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Serialize state snapshot for API responses."""
        return {
            "currentStage": self.current_stage.value,
            "currentQuestionIndex": self.current_question_index,
            "stageHistory": [s.value for s in self.stage_history],
            "stageResponseCount": self.stage_response_count,
            "context": self.context.to_dict(),
            "requestType": self.request_type.value if self.request_type else None,
            "importanceRating": self.importance_rating,
            "lastClientResponse": self.last_client_response,
            "clientSaysIDontKnow": self.client_says_i_dont_know,
            "movementOffered": self.movement_offered,
            "integrationComplete": self.integration_complete,
        }


def create_initial_session_state() -> SessionState:
    """Fresh state positioned at the first stage."""
    return SessionState()
