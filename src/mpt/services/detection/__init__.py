"""Rule-based classifiers over client turns."""

from mpt.services.detection.stage_signals import (
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
from mpt.services.detection.text_classifiers import (
    TurnClassification,
    classify_turn,
    detect_i_dont_know,
    detect_request_type,
    detect_scenario,
    extract_client_name,
    extract_importance_rating,
    transform_to_authorship,
)

__all__ = [
    "TurnClassification",
    "classify_turn",
    "detect_i_dont_know",
    "detect_request_type",
    "detect_scenario",
    "extract_client_name",
    "extract_importance_rating",
    "transform_to_authorship",
    "detect_body_location",
    "detect_chosen_practice",
    "detect_deep_need",
    "detect_integration_shift",
    "detect_metaphor",
    "detect_movement",
    "detect_next_step",
    "detect_request_criteria",
    "detect_somatic_descriptors",
    "detect_strategy",
]
