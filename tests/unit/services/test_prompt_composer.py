"""
Unit Tests for the Prompt Composer

Tests section content, order and determinism of the system instruction.
"""

import pytest

from mpt.domain.enums import MPTStage, RequestType
from mpt.domain.models import SessionState
from mpt.services.catalog import ScriptCatalog, get_scenario, get_stage_info
from mpt.services.prompt import NO_THINK_DIRECTIVE, PromptComposer, compose_system_prompt


@pytest.fixture
def composer():
    return PromptComposer(ScriptCatalog(base_instructions="BASE RULES"))


@pytest.fixture
def state():
    return SessionState()


class TestSections:
    """Tests for individual prompt sections."""

    def test_base_first_directive_last(self, composer, state):
        prompt = composer.compose(state)
        assert prompt.startswith("BASE RULES")
        assert prompt.endswith(NO_THINK_DIRECTIVE)

    def test_base_template_override(self, composer, state):
        prompt = composer.compose(state, base_template="OTHER RULES")
        assert prompt.startswith("OTHER RULES")
        assert "BASE RULES" not in prompt

    def test_stage_section(self, composer, state):
        info = get_stage_info(MPTStage.CONTEXT_GATHERING)
        prompt = composer.compose(state)

        assert info.name in prompt
        assert info.guidance in prompt
        assert info.questions[0] in prompt

    def test_current_question_follows_index(self, composer, state):
        state.current_question_index = 1
        info = get_stage_info(MPTStage.CONTEXT_GATHERING)
        assert info.questions[1] in composer.compose(state)

    def test_low_rating_caution(self, composer, state):
        state.importance_rating = 5
        prompt = composer.compose(state)
        assert "5/10" in prompt
        assert "The rating is below 8" in prompt

    def test_high_rating_no_caution(self, composer, state):
        state.importance_rating = 9
        prompt = composer.compose(state)
        assert "9/10" in prompt
        assert "The rating is below 8" not in prompt

    def test_client_name(self, composer, state):
        state.context.client_name = "Anna"
        assert "The client's name is Anna" in composer.compose(state)

    def test_dont_know_uses_helping_question(self, composer, state):
        state.client_says_i_dont_know = True
        catalog = ScriptCatalog()
        prompt = composer.compose(state)
        assert catalog.helping_question(MPTStage.CONTEXT_GATHERING) in prompt

    def test_authorship_note(self, composer, state):
        prompt = composer.compose(state, authorship_note="Return authorship gently")
        assert "## AUTHORSHIP\nReturn authorship gently" in prompt

    def test_scenario_and_script(self, composer, state):
        scenario = get_scenario("anxiety")
        script = composer.catalog.select_best_script("", "anxiety")

        prompt = composer.compose(state, scenario=scenario, script=script)

        assert f"## SCENARIO: {scenario.name}" in prompt
        assert script.name in prompt

    def test_general_request_type_adds_nothing(self, composer, state):
        state.request_type = RequestType.GENERAL
        assert "REQUEST TYPE" not in composer.compose(state)

    def test_request_type_guidance(self, composer, state):
        state.request_type = RequestType.EMOTIONAL_STATE
        assert "## REQUEST TYPE: emotional_state" in composer.compose(state)

    def test_homework_only_in_finish(self, composer, state):
        assert "CLOSING PRACTICE" not in composer.compose(state)

        state.current_stage = MPTStage.FINISH
        state.context.metaphor = "warm sun"
        prompt = composer.compose(state)
        assert "CLOSING PRACTICE" in prompt

    def test_progress_summary(self, composer):
        state = SessionState(
            current_stage=MPTStage.STRATEGY_EXPLORATION,
            stage_history=[MPTStage.CONTEXT_GATHERING, MPTStage.REQUEST_VALIDATION],
        )
        state.context.original_request = "I feel anxious"

        prompt = composer.compose(state)

        assert "Stage 3/12" in prompt
        assert "Context → " in prompt
        assert "- Original request: I feel anxious" in prompt

    def test_progress_at_session_start(self, composer, state):
        assert "Completed: session start" in composer.compose(state)


class TestComposition:
    """Tests for ordering and determinism."""

    def test_section_order(self, composer, state):
        state.context.client_name = "Anna"
        state.importance_rating = 5
        state.client_says_i_dont_know = True

        prompt = composer.compose(
            state,
            scenario=get_scenario("anxiety"),
            authorship_note="NOTE",
        )

        positions = [
            prompt.index("BASE RULES"),
            prompt.index("## CURRENT STAGE"),
            prompt.index("## AUTHORSHIP"),
            prompt.index("The client's name is"),
            prompt.index("rated the importance"),
            prompt.index("I DON'T KNOW"),
            prompt.index("## SCENARIO"),
            prompt.index("## SESSION PROGRESS"),
            prompt.index(NO_THINK_DIRECTIVE),
        ]
        assert positions == sorted(positions)

    def test_deterministic(self, composer, state):
        state.context.request_criteria = {"realism", "positivity", "ownership"}
        first = composer.compose(state)
        second = composer.compose(state.copy())
        assert first == second

    def test_wrapper_matches_composer(self, state):
        assert compose_system_prompt(state) == PromptComposer().compose(state)
