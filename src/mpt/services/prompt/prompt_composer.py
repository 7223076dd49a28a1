"""
Prompt Composer

Turns session state into the single system instruction sent with
every model call.

Sections are concatenated in a fixed order, and the same state
always yields a byte-identical prompt. Nothing here reads clocks,
randomness or mutable globals.

CLINICAL_REVIEW_REQUIRED: Section wording lives in the catalogs.
"""

from typing import Optional

from mpt.domain.enums import MPTStage, RequestType, STAGE_ORDER
from mpt.domain.models import SessionState, TherapyContext
from mpt.services.catalog import MPTScript, Scenario, ScriptCatalog, describe_practice, get_stage_info

# Appended last to disable reasoning output on models that support the switch
NO_THINK_DIRECTIVE = "/no_think"

# Ratings below this suggest looking for a more meaningful context
IMPORTANCE_THRESHOLD = 8

SECTION_SEPARATOR = "\n\n"

_CONTEXT_LABELS: tuple[tuple[str, str], ...] = (
    ("original_request", "Original request"),
    ("clarified_request", "Clarified request"),
    ("current_strategy", "Strategy"),
    ("deep_need", "Deep need"),
    ("body_location", "Body location"),
    ("metaphor", "Image"),
    ("next_step", "Next step"),
    ("chosen_practice", "Chosen practice"),
)


class PromptComposer:
    """
    Builds the system instruction for a turn.

    Section order:
    1. Base behavioral rules
    2. Stage guidance and current question
    3. Authorship reframing note
    4. Client name
    5. Importance rating (with caution below 8)
    6. "Don't know" helping question
    7. Active scenario and script
    8. Request-type guidance
    9. Closing practice (terminal stage only)
    10. Progress summary
    """

    def __init__(self, catalog: Optional[ScriptCatalog] = None) -> None:
        self.catalog = catalog or ScriptCatalog()

    def compose(
        self,
        state: SessionState,
        scenario: Optional[Scenario] = None,
        script: Optional[MPTScript] = None,
        authorship_note: Optional[str] = None,
        base_template: Optional[str] = None,
    ) -> str:
        """
        Compose the system instruction.

        Args:
            state: Session state after this turn's transition
            scenario: Active scenario, if detected
            script: Guidance script of the session
            authorship_note: Reframing note for this turn
            base_template: Override for the catalog's base instructions

        Returns:
            System instruction text
        """
        sections = [
            base_template if base_template is not None else self.catalog.base_instructions,
            self._stage_section(state),
            self._authorship_section(authorship_note),
            self._name_section(state.context),
            self._importance_section(state.importance_rating),
            self._dont_know_section(state),
            self._scenario_section(scenario, script),
            self._request_type_section(state.request_type),
            self._homework_section(state),
            self._progress_section(state),
            NO_THINK_DIRECTIVE,
        ]
        return SECTION_SEPARATOR.join(s for s in sections if s)

    def _stage_section(self, state: SessionState) -> str:
        info = get_stage_info(state.current_stage)
        lines = [
            f"## CURRENT STAGE: {info.name} ({info.display_name})",
            info.description,
            info.guidance,
        ]
        question = info.question_at(state.current_question_index)
        if question:
            lines.append(f'Current question of this stage: "{question}"')
        return "\n".join(lines)

    @staticmethod
    def _authorship_section(note: Optional[str]) -> str:
        if not note:
            return ""
        return f"## AUTHORSHIP\n{note}"

    @staticmethod
    def _name_section(context: TherapyContext) -> str:
        if not context.client_name:
            return ""
        return f"The client's name is {context.client_name}. Use it occasionally."

    @staticmethod
    def _importance_section(rating: Optional[int]) -> str:
        if rating is None:
            return ""
        text = f"The client rated the importance of the topic as {rating}/10."
        if rating < IMPORTANCE_THRESHOLD:
            text += (
                f" The rating is below {IMPORTANCE_THRESHOLD}: gently explore whether there is "
                "a deeper, more meaningful context behind the request before going further."
            )
        return text

    def _dont_know_section(self, state: SessionState) -> str:
        if not state.client_says_i_dont_know:
            return ""
        return (
            "## THE CLIENT SAYS \"I DON'T KNOW\"\n"
            "Accept it warmly and use the \"what if\" technique, for example: "
            f"\"{self.catalog.helping_question(state.current_stage)}\""
        )

    @staticmethod
    def _scenario_section(scenario: Optional[Scenario], script: Optional[MPTScript]) -> str:
        lines = []
        if scenario:
            lines.append(f"## SCENARIO: {scenario.name}")
            lines.append(scenario.description)
            lines.append("Keywords: " + ", ".join(scenario.keywords))
        if script:
            lines.append(f"Script: {script.name}. {script.focus}")
        return "\n".join(lines)

    def _request_type_section(self, request_type: Optional[RequestType]) -> str:
        if request_type is None or request_type == RequestType.GENERAL:
            return ""
        guidance = self.catalog.request_type_guidance(request_type)
        return f"## REQUEST TYPE: {request_type.value}\n{guidance}" if guidance else ""

    def _homework_section(self, state: SessionState) -> str:
        if state.current_stage != MPTStage.FINISH:
            return ""
        practice = self.catalog.select_homework(state.context)
        return (
            f"## CLOSING PRACTICE: {practice.name}\n"
            f"Offer this practice as homework: {describe_practice(practice, state.context)}"
        )

    @staticmethod
    def _progress_section(state: SessionState) -> str:
        info = get_stage_info(state.current_stage)
        position = STAGE_ORDER.index(state.current_stage) + 1
        history = " → ".join(get_stage_info(s).name for s in state.stage_history)

        lines = [
            "## SESSION PROGRESS",
            f"Stage {position}/{len(STAGE_ORDER)}: {info.name}",
            f"Completed: {history or 'session start'}",
        ]
        context = state.context
        for attr, label in _CONTEXT_LABELS:
            value = getattr(context, attr)
            if value:
                lines.append(f"- {label}: {value}")
        if context.request_criteria:
            lines.append("- Request criteria confirmed: " + ", ".join(context.to_dict()["requestCriteria"]))
        if context.body_descriptors:
            lines.append("- Sensation described: " + ", ".join(context.to_dict()["bodyDescriptors"]))
        return "\n".join(lines)


def compose_system_prompt(
    state: SessionState,
    scenario: Optional[Scenario] = None,
    script: Optional[MPTScript] = None,
    authorship_note: Optional[str] = None,
    catalog: Optional[ScriptCatalog] = None,
) -> str:
    """Convenience wrapper around PromptComposer.compose."""
    return PromptComposer(catalog).compose(
        state,
        scenario=scenario,
        script=script,
        authorship_note=authorship_note,
    )
