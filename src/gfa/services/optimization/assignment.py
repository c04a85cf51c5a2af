"""Capacity-aware nearest-site assignment and constraint checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Sequence

import numpy as np

from ...models.domain import Customer, DistributionCenter, OptimizationConstraints
from ..geospatial import haversine_matrix_km

UnassignedReason = Literal["capacity", "radius", "no_site"]


@dataclass(slots=True)
class AssignmentOutcome:
    dcs: list[DistributionCenter]
    site_for_customer: list[int | None]
    distance_km: list[float | None]
    unassigned: dict[int, UnassignedReason] = field(default_factory=dict)


@dataclass(slots=True)
class AssignmentEvaluation:
    feasible: bool
    warnings: list[str]
    total_demand: float
    covered_demand: float

    @property
    def coverage_percentage(self) -> float:
        if self.total_demand <= 0:
            return 100.0
        return self.covered_demand / self.total_demand * 100.0


def assign_customers(
    customers: Sequence[Customer],
    demands: np.ndarray,
    sites: Sequence[tuple[float, float]],
    constraints: OptimizationConstraints,
    *,
    radius_limits_reach: bool = False,
    preassigned: Sequence[int | None] | None = None,
    epsilon: float = 1e-6,
) -> AssignmentOutcome:
    """Assign each customer, in input order, to its nearest site with room left.

    Sites are tried by ascending distance; equal distances keep site order.
    With ``radius_limits_reach`` a site only accepts customers within
    ``max_radius``. Customers with a site in ``preassigned`` keep it, and
    their demand is reserved on that site before anyone else is placed.
    """
    dcs = [DistributionCenter(latitude=lat, longitude=lon) for lat, lon in sites]
    site_for_customer: list[int | None] = [None] * len(customers)
    distance_km: list[float | None] = [None] * len(customers)
    unassigned: dict[int, UnassignedReason] = {}
    if not dcs:
        for index in range(len(customers)):
            unassigned[index] = "no_site"
        return AssignmentOutcome(dcs, site_for_customer, distance_km, unassigned)

    coordinates = [(c.latitude, c.longitude) for c in customers]
    distances = haversine_matrix_km(coordinates, list(sites))
    limit_radius = radius_limits_reach and constraints.has_radius_limit

    fixed = list(preassigned) if preassigned is not None else [None] * len(customers)
    reserved = np.zeros(len(dcs))
    for index, site in enumerate(fixed):
        if site is not None:
            reserved[site] += float(demands[index])

    for index, customer in enumerate(customers):
        demand = float(demands[index])
        if fixed[index] is not None:
            site = fixed[index]
            reserved[site] -= demand
            dcs[site].assigned_customers.append(customer)
            dcs[site].total_demand += demand
            site_for_customer[index] = site
            distance_km[index] = float(distances[index, site])
            continue

        blocked_by_capacity = False
        for site in np.argsort(distances[index], kind="stable"):
            distance = float(distances[index, site])
            if limit_radius and distance > constraints.max_radius + epsilon:
                break
            dc = dcs[site]
            load = dc.total_demand + reserved[site] + demand
            if constraints.has_capacity_limit and load > constraints.dc_capacity + epsilon:
                blocked_by_capacity = True
                continue
            dc.assigned_customers.append(customer)
            dc.total_demand += demand
            site_for_customer[index] = int(site)
            distance_km[index] = distance
            break
        else:
            unassigned[index] = "capacity"
            continue
        if site_for_customer[index] is None:
            unassigned[index] = "capacity" if blocked_by_capacity else "radius"

    return AssignmentOutcome(dcs, site_for_customer, distance_km, unassigned)


def evaluate_assignment(
    outcome: AssignmentOutcome,
    customers: Sequence[Customer],
    demands: np.ndarray,
    constraints: OptimizationConstraints,
    *,
    partial_coverage: bool = False,
    epsilon: float = 1e-6,
) -> AssignmentEvaluation:
    """Check capacity, radius and coverage; infeasibility is reported, never raised.

    With ``partial_coverage`` customers left out of every site only count
    against the coverage target; otherwise a customer rejected for capacity
    makes the run infeasible on its own.
    """
    warnings: list[str] = []
    feasible = True
    unit = constraints.capacity_unit

    if constraints.has_capacity_limit:
        for number, dc in enumerate(outcome.dcs, start=1):
            if dc.total_demand > constraints.dc_capacity + epsilon:
                feasible = False
                warnings.append(
                    f"Site {number} exceeds capacity: {dc.total_demand:.2f} > {constraints.dc_capacity:g} {unit}"
                )

    for index, reason in outcome.unassigned.items():
        name = customers[index].name
        if reason == "capacity":
            warnings.append(
                f"Customer {name} could not be assigned: no site has remaining capacity "
                f"({constraints.dc_capacity:g} {unit})"
            )
            if not partial_coverage:
                feasible = False
        elif reason == "no_site":
            warnings.append(f"Customer {name} could not be assigned: no site was opened")
        else:
            warnings.append(f"Customer {name} is outside the {constraints.max_radius:g} km radius of every site")

    if constraints.has_radius_limit:
        for index, site in enumerate(outcome.site_for_customer):
            distance = outcome.distance_km[index]
            if site is None or distance is None:
                continue
            if distance > constraints.max_radius + epsilon:
                feasible = False
                warnings.append(
                    f"Customer {customers[index].name} is {distance:.1f} km from site {site + 1}, "
                    f"exceeding max radius {constraints.max_radius:g} km"
                )

    total_demand = float(np.sum(demands))
    covered_demand = sum(dc.total_demand for dc in outcome.dcs)
    required = total_demand * constraints.demand_percentage / 100.0
    if covered_demand < required - epsilon:
        feasible = False
        uncovered_pct = (1 - covered_demand / total_demand) * 100.0 if total_demand else 0.0
        warnings.append(
            f"{uncovered_pct:.1f}% of demand uncovered, required {constraints.demand_percentage:g}%"
        )

    return AssignmentEvaluation(
        feasible=feasible,
        warnings=warnings,
        total_demand=total_demand,
        covered_demand=covered_demand,
    )
