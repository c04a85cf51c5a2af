"""High-level orchestration for optimization requests."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Sequence

from shapely.geometry import MultiPoint

from ...models.domain import Customer, DistributionCenter
from ...persistence.filesystem import FileStorage
from ...persistence.scenarios import save_scenario_input, save_scenario_output, update_scenario_status
from ...schemas.optimization import (
    AnalysisRequest,
    AnalysisResponse,
    CostBreakdownModel,
    DistributionCenterModel,
    OptimizationRequest,
    OptimizationResponse,
    ProductModel,
)
from ..analysis import distance_analysis, distance_bands, profitability_analysis, summarize_run
from ..outputs.formatter import optimization_response_to_csv, optimization_response_to_json
from ..products import derive_products
from .optimizer import optimize_with_constraints


def process_optimization_request(payload: OptimizationRequest, *, persist: bool = True) -> OptimizationResponse:
    customers = [model.to_domain() for model in payload.customers]
    products = derive_products(customers, [model.to_domain() for model in payload.products])
    constraints = payload.constraints.to_domain()
    cost_params = payload.costParams.to_domain() if payload.costParams else None
    scenario_id = payload.scenarioId if persist else None

    if scenario_id:
        update_scenario_status(scenario_id, "running")
        try:
            save_scenario_input(
                scenario_id,
                {
                    "customers": [model.model_dump() for model in payload.customers],
                    "products": [ProductModel.from_domain(p).model_dump() for p in products],
                    "settings": {
                        "mode": payload.mode,
                        "targetSiteCount": payload.targetSiteCount,
                        **payload.constraints.model_dump(),
                        **(payload.costParams.model_dump() if payload.costParams else {}),
                    },
                },
            )
        except Exception as exc:
            logging.warning(f"Failed to save input for scenario {scenario_id}: {exc}")

    try:
        result = optimize_with_constraints(
            customers,
            payload.targetSiteCount,
            constraints,
            payload.mode,
            cost_params,
            products,
        )
    except Exception:
        if scenario_id:
            update_scenario_status(scenario_id, "failed")
        raise

    metadata = {
        "mode": payload.mode,
        "summary": summarize_run(customers, products, result.dcs, constraints),
        "site_selection": result.metadata,
    }
    overlays = _service_area_overlays(result.dcs)
    if overlays:
        metadata["map_overlays"] = {"service_areas": overlays}
    if scenario_id:
        metadata["scenario_id"] = scenario_id

    response = OptimizationResponse(
        dcs=[DistributionCenterModel.from_domain(dc) for dc in result.dcs],
        feasible=result.feasible,
        warnings=result.warnings,
        costBreakdown=CostBreakdownModel.from_domain(result.cost_breakdown) if result.cost_breakdown else None,
        metadata=metadata,
    )

    if persist:
        _persist_outputs(response, customers, scenario_id)
    return response


def _persist_outputs(response: OptimizationResponse, customers: Sequence[Customer], scenario_id: str | None) -> None:
    if scenario_id:
        try:
            save_scenario_output(
                scenario_id,
                response.model_dump(include={"dcs", "feasible", "warnings", "costBreakdown"}),
            )
            update_scenario_status(scenario_id, "completed")
        except Exception as exc:
            logging.warning(f"Failed to save output for scenario {scenario_id}: {exc}")

    try:
        storage = FileStorage()
        run_dir = storage.make_run_directory(prefix=f"gfa_{response.metadata.get('mode', 'run')}")
        storage.write_json(run_dir / "summary.json", optimization_response_to_json(response))
        storage.write_csv(run_dir / "assignments.csv", optimization_response_to_csv(response, customers))
    except Exception as exc:
        logging.warning(f"Failed to write optimization output files: {exc}")
        return
    logging.info(f"Wrote optimization outputs to {run_dir}")


def _service_area_overlays(dcs: Sequence[DistributionCenter]) -> list[dict]:
    """Convex hull around each site and its customers, as [lat, lon] rings."""
    overlays: list[dict] = []
    for index, dc in enumerate(dcs):
        points = [(dc.longitude, dc.latitude)] + [(c.longitude, c.latitude) for c in dc.assigned_customers]
        hull = MultiPoint(points).convex_hull
        if hull.is_empty or hull.geom_type != "Polygon":
            continue
        overlays.append(
            {
                "dc_id": f"DC {index + 1}",
                "coordinates": [[lat, lon] for lon, lat in hull.exterior.coords],
                "customer_count": len(dc.assigned_customers),
            }
        )
    return overlays


def process_analysis_request(payload: AnalysisRequest) -> AnalysisResponse:
    customers = [model.to_domain() for model in payload.customers]
    products = derive_products(customers, [model.to_domain() for model in payload.products])
    dcs = [model.to_domain() for model in payload.dcs]
    cost_params = payload.costParams.to_domain() if payload.costParams else None

    rows = distance_analysis(customers, dcs)
    return AnalysisResponse(
        summary=summarize_run(customers, products, dcs, payload.constraints.to_domain()),
        distances=[asdict(row) for row in rows],
        distanceBands=[asdict(band) for band in distance_bands(rows, payload.distanceStepKm)],
        profitability=[asdict(row) for row in profitability_analysis(customers, products, dcs, cost_params)],
    )
