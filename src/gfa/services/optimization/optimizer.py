"""Facility-location optimizer for Green Field Analysis."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

import numpy as np

from ...config import settings
from ...models.domain import (
    CostParameters,
    Customer,
    OptimizationConstraints,
    OptimizationResult,
    Product,
)
from ..products import convert_demand
from .assignment import assign_customers, evaluate_assignment
from .base import SiteSelection, distinct_locations
from .cost import CostCandidate, compute_cost_breakdown, pick_cheapest
from .dispatcher import get_strategy

logger = logging.getLogger(__name__)

MODES = ("sites", "distance", "cost")


class OptimizationInputError(ValueError):
    """Raised when the optimizer receives input it cannot work with."""


def validate_inputs(
    customers: Sequence[Customer],
    target_site_count: int,
    mode: str,
    cost_params: CostParameters | None,
) -> None:
    if not customers:
        raise OptimizationInputError("At least one customer is required to optimize.")
    if mode not in MODES:
        raise OptimizationInputError(f"Unknown optimization mode '{mode}'.")
    if mode == "sites" and target_site_count < 1:
        raise OptimizationInputError("targetSiteCount must be >= 1")
    if mode == "cost" and cost_params is None:
        raise OptimizationInputError("Cost parameters are required in cost mode.")
    for customer in customers:
        values = (customer.latitude, customer.longitude, customer.demand)
        if not all(math.isfinite(value) for value in values):
            raise OptimizationInputError(
                f"Customer '{customer.customer_id}' has non-finite coordinates or demand."
            )


def optimize_with_constraints(
    customers: Sequence[Customer],
    target_site_count: int,
    constraints: OptimizationConstraints,
    mode: str = "sites",
    cost_params: CostParameters | None = None,
    products: Iterable[Product] = (),
) -> OptimizationResult:
    """Choose site locations and assign customers to them.

    The computation is pure: identical inputs, including their order, give
    identical output. Constraint violations come back as ``feasible=False``
    with warnings; only malformed input raises ``OptimizationInputError``.
    """
    validate_inputs(customers, target_site_count, mode, cost_params)
    products_by_name = {product.name: product for product in products}
    demands = np.array(
        [convert_demand(customer, constraints.capacity_unit, products_by_name) for customer in customers],
        dtype=float,
    )

    if mode == "cost":
        result = _optimize_cost(customers, demands, constraints, cost_params, products_by_name)
    else:
        strategy = get_strategy(mode)
        selection = strategy.select_sites(
            customers=customers,
            demands=demands,
            target_sites=target_site_count,
            constraints=constraints,
        )
        result = _assign_and_evaluate(customers, demands, selection, constraints, mode=mode)

    logger.info(
        "Optimized %s customers in '%s' mode: %s sites, feasible=%s, %s warnings",
        len(customers),
        mode,
        len(result.dcs),
        result.feasible,
        len(result.warnings),
    )
    return result


def _assign_and_evaluate(
    customers: Sequence[Customer],
    demands: np.ndarray,
    selection: SiteSelection,
    constraints: OptimizationConstraints,
    *,
    mode: str,
) -> OptimizationResult:
    eps = settings.capacity_epsilon
    partial = mode == "distance"
    outcome = assign_customers(
        customers,
        demands,
        selection.sites,
        constraints,
        radius_limits_reach=partial,
        preassigned=selection.assignments if partial else None,
        epsilon=eps,
    )
    evaluation = evaluate_assignment(
        outcome,
        customers,
        demands,
        constraints,
        partial_coverage=partial,
        epsilon=eps,
    )
    return OptimizationResult(
        dcs=outcome.dcs,
        feasible=evaluation.feasible,
        warnings=[*selection.warnings, *evaluation.warnings],
        metadata={**selection.metadata, "coverage_percentage": evaluation.coverage_percentage},
    )


def _optimize_cost(
    customers: Sequence[Customer],
    demands: np.ndarray,
    constraints: OptimizationConstraints,
    cost_params: CostParameters,
    products_by_name: dict[str, Product],
) -> OptimizationResult:
    strategy = get_strategy("cost")
    max_sites = min(len(distinct_locations(customers)), settings.cost_search_max_sites)

    candidates: list[CostCandidate] = []
    for site_count in range(1, max_sites + 1):
        selection = strategy.select_sites(
            customers=customers,
            demands=demands,
            target_sites=site_count,
            constraints=constraints,
        )
        result = _assign_and_evaluate(customers, demands, selection, constraints, mode="cost")
        result.cost_breakdown = compute_cost_breakdown(result.dcs, cost_params, products_by_name)
        logger.debug(
            "Cost candidate with %s sites: total=%.2f feasible=%s",
            site_count,
            result.cost_breakdown.total_cost,
            result.feasible,
        )
        candidates.append(CostCandidate(site_count=site_count, result=result))

    best = pick_cheapest(candidates, epsilon=settings.capacity_epsilon).result
    best.metadata["evaluated_site_counts"] = [candidate.site_count for candidate in candidates]
    return best
