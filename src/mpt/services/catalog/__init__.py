"""Static catalogs package: stages, scenarios and guidance scripts."""

from mpt.services.catalog.scenario_catalog import (
    SCENARIOS,
    Scenario,
    get_scenario,
    scenario_catalog_list,
)
from mpt.services.catalog.script_catalog import (
    IMPLEMENTATION_PRACTICES,
    ImplementationPractice,
    MPTScript,
    ScriptCatalog,
    describe_practice,
)
from mpt.services.catalog.stage_catalog import (
    STAGE_CONFIG,
    StageInfo,
    get_phase_from_stage,
    get_stage_info,
    next_stage,
    stage_catalog_dict,
)

__all__ = [
    # Stages
    "STAGE_CONFIG",
    "StageInfo",
    "get_phase_from_stage",
    "get_stage_info",
    "next_stage",
    "stage_catalog_dict",
    # Scenarios
    "SCENARIOS",
    "Scenario",
    "get_scenario",
    "scenario_catalog_list",
    # Scripts
    "IMPLEMENTATION_PRACTICES",
    "ImplementationPractice",
    "MPTScript",
    "ScriptCatalog",
    "describe_practice",
]
