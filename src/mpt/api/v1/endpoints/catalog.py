"""
Catalog Endpoints

Read-only scenario and stage catalogs for the client UI.
"""

from fastapi import APIRouter

from mpt.services.catalog import scenario_catalog_list, stage_catalog_dict

router = APIRouter()


@router.get("/scenarios", summary="List scenarios")
async def list_scenarios() -> list[dict]:
    """Scenario catalog in declaration order."""
    return scenario_catalog_list()


@router.get("/stages", summary="List stages")
async def list_stages() -> dict[str, dict]:
    """Stage catalog keyed by stage id, in canonical order."""
    return stage_catalog_dict()
