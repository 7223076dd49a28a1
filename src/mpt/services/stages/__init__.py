"""Stage progression: completion criteria, transitions and context accumulation."""

from mpt.services.stages.context_accumulator import ContextAccumulator
from mpt.services.stages.state_machine import STAGE_CRITERIA, advance, should_advance

__all__ = [
    "ContextAccumulator",
    "STAGE_CRITERIA",
    "advance",
    "should_advance",
]
