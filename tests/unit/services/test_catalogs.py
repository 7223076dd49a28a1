"""
Unit Tests for the Static Catalogs

Tests stage metadata, scenario lookup and script selection.
"""

from mpt.domain.enums import MPTStage, STAGE_ORDER
from mpt.domain.models import TherapyContext
from mpt.services.catalog import (
    SCENARIOS,
    ScriptCatalog,
    get_phase_from_stage,
    get_scenario,
    get_stage_info,
    next_stage,
    scenario_catalog_list,
    stage_catalog_dict,
)


class TestStageCatalog:
    """Tests for stage metadata."""

    def test_every_stage_has_metadata(self):
        for stage in STAGE_ORDER:
            info = get_stage_info(stage)
            assert info.stage == stage
            assert info.display_name

    def test_catalog_in_canonical_order(self):
        assert list(stage_catalog_dict()) == [s.value for s in STAGE_ORDER]
        assert len(STAGE_ORDER) == 12

    def test_next_stage(self):
        assert next_stage(MPTStage.CONTEXT_GATHERING) == MPTStage.REQUEST_VALIDATION
        assert next_stage(MPTStage.FINISH) == MPTStage.FINISH

    def test_phase_label(self):
        assert get_phase_from_stage(MPTStage.FINISH) == get_stage_info(MPTStage.FINISH).display_name

    def test_question_index_is_clamped(self):
        info = get_stage_info(MPTStage.CONTEXT_GATHERING)
        assert info.question_at(99) == info.questions[-1]
        assert get_stage_info(MPTStage.FINISH).question_at(0) == ""


class TestScenarioCatalog:
    """Tests for scenario lookup."""

    def test_lookup(self):
        assert get_scenario("anxiety").id == "anxiety"
        assert get_scenario("missing") is None
        assert get_scenario(None) is None

    def test_list_preserves_declaration_order(self):
        assert [s["id"] for s in scenario_catalog_list()] == [s.id for s in SCENARIOS]

    def test_ids_unique(self):
        ids = [s.id for s in SCENARIOS]
        assert len(ids) == len(set(ids))


class TestScriptCatalog:
    """Tests for script and homework selection."""

    def test_scenario_match_wins(self):
        assert ScriptCatalog().select_best_script("", "anxiety").id == "fear-to-support"

    def test_keyword_score(self):
        script = ScriptCatalog().select_best_script("I have to choose, I can't decide", None)
        assert script.id == "choice-point"

    def test_universal_fallback(self):
        assert ScriptCatalog().select_best_script("hello", None).id == "universal"

    def test_lookup_by_id(self):
        catalog = ScriptCatalog()
        assert catalog.get_script_by_id("universal").id == "universal"
        assert catalog.get_script_by_id("missing") is None

    def test_homework_prefers_chosen_practice(self):
        context = TherapyContext(chosen_practice="moment-switch", next_step="call mom tomorrow")
        assert ScriptCatalog().select_homework(context).id == "moment-switch"

    def test_homework_from_next_step(self):
        context = TherapyContext(next_step="call mom tomorrow")
        assert ScriptCatalog().select_homework(context).id == "action-check"

    def test_homework_default(self):
        assert ScriptCatalog().select_homework(TherapyContext()).id == "morning-practice"
