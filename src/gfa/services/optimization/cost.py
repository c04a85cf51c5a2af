"""Total-cost evaluation for cost-minimizing runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from ...models.domain import CostBreakdown, CostParameters, DistributionCenter, OptimizationResult, Product
from ..geospatial import distance_in_unit
from ..products import convert_demand


def transportation_cost(
    dcs: Sequence[DistributionCenter],
    cost_params: CostParameters,
    products_by_name: Mapping[str, Product] | None = None,
) -> float:
    """Sum of rate x distance x demand over every assignment.

    Distance is in ``cost_params.distance_unit``; demand in ``cost_params.cost_unit``.
    """
    total = 0.0
    for dc in dcs:
        for customer in dc.assigned_customers:
            distance = distance_in_unit(
                customer.latitude,
                customer.longitude,
                dc.latitude,
                dc.longitude,
                cost_params.distance_unit,
            )
            demand = convert_demand(customer, cost_params.cost_unit, products_by_name)
            total += cost_params.transportation_cost_per_unit * distance * demand
    return total


def compute_cost_breakdown(
    dcs: Sequence[DistributionCenter],
    cost_params: CostParameters,
    products_by_name: Mapping[str, Product] | None = None,
) -> CostBreakdown:
    transport = transportation_cost(dcs, cost_params, products_by_name)
    facility = cost_params.facility_cost * len(dcs)
    return CostBreakdown(
        total_cost=transport + facility,
        transportation_cost=transport,
        facility_cost=facility,
        num_sites=len(dcs),
    )


@dataclass(slots=True)
class CostCandidate:
    site_count: int
    result: OptimizationResult


def pick_cheapest(candidates: Sequence[CostCandidate], *, epsilon: float = 1e-6) -> CostCandidate:
    """Cheapest feasible candidate, or the cheapest overall when none is feasible.

    Candidates are expected in ascending site count; an equal cost keeps the
    earlier (smaller) configuration.
    """
    if not candidates:
        raise ValueError("At least one cost candidate is required.")
    feasible = [candidate for candidate in candidates if candidate.result.feasible]
    pool = feasible or list(candidates)
    best = pool[0]
    for candidate in pool[1:]:
        if candidate.result.cost_breakdown.total_cost < best.result.cost_breakdown.total_cost - epsilon:
            best = candidate
    return best
