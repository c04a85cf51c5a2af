"""API routes for scenario input/output snapshots."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...persistence.scenarios import load_scenario_input, load_scenario_output, save_scenario_input
from ...schemas.scenarios import ScenarioInputPayload, ScenarioSnapshot

router = APIRouter(prefix="/scenarios", tags=["scenarios"])


@router.get("/{scenario_id}/input", response_model=ScenarioSnapshot)
def get_input(scenario_id: str) -> ScenarioSnapshot:
    data, source = load_scenario_input(scenario_id)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No input saved for scenario '{scenario_id}'.")
    return ScenarioSnapshot(scenario_id=scenario_id, kind="input", data=data, source=source)


@router.put("/{scenario_id}/input", response_model=ScenarioSnapshot)
def put_input(scenario_id: str, payload: ScenarioInputPayload) -> ScenarioSnapshot:
    data = payload.model_dump()
    source = save_scenario_input(scenario_id, data)
    return ScenarioSnapshot(scenario_id=scenario_id, kind="input", data=data, source=source)


@router.get("/{scenario_id}/output", response_model=ScenarioSnapshot)
def get_output(scenario_id: str) -> ScenarioSnapshot:
    data, source = load_scenario_output(scenario_id)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No output saved for scenario '{scenario_id}'.")
    return ScenarioSnapshot(scenario_id=scenario_id, kind="output", data=data, source=source)
