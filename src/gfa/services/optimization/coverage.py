"""Greedy radius-coverage site selection."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ...models.domain import Customer, OptimizationConstraints
from ..geospatial import haversine_matrix_km
from .base import SiteSelection, SiteSelectionStrategy


class GreedyCoverageSiteSelection(SiteSelectionStrategy):
    """Open sites at uncovered customer locations until enough demand is covered.

    Each round evaluates every still-uncovered customer location as a seed and
    opens the one covering the most uncovered demand within ``max_radius``
    (capped at the site capacity). Ties go to the first seed in input order.
    """

    def __init__(self, *, epsilon: float = 1e-6) -> None:
        self.epsilon = epsilon

    def select_sites(
        self,
        *,
        customers: Sequence[Customer],
        demands: np.ndarray,
        target_sites: int,
        constraints: OptimizationConstraints,
    ) -> SiteSelection:
        eps = self.epsilon
        demands = np.asarray(demands, dtype=float)
        coordinates = [(c.latitude, c.longitude) for c in customers]
        distances = haversine_matrix_km(coordinates, coordinates)

        radius = constraints.max_radius if constraints.has_radius_limit else math.inf
        capacity = constraints.dc_capacity if constraints.has_capacity_limit else math.inf
        reach = distances <= radius + eps

        total_demand = float(demands.sum())
        required = total_demand * constraints.demand_percentage / 100.0

        covered = np.zeros(len(customers), dtype=bool)
        site_for_customer: list[int | None] = [None] * len(customers)
        exhausted: set[int] = set()
        covered_demand = 0.0
        sites: list[tuple[float, float]] = []
        rounds = 0

        while not sites or covered_demand < required - eps:
            rounds += 1
            best_index: int | None = None
            best_gain = 0.0
            for index in range(len(customers)):
                if covered[index] or index in exhausted:
                    continue
                gain = min(float(demands[reach[index] & ~covered].sum()), capacity)
                if gain > best_gain + eps:
                    best_index, best_gain = index, gain
            if best_index is None:
                break

            load = 0.0
            members: list[int] = []
            for member in np.argsort(distances[best_index], kind="stable"):
                if covered[member] or not reach[best_index, member]:
                    continue
                if load + demands[member] > capacity + eps:
                    continue
                members.append(int(member))
                load += float(demands[member])

            if load <= eps:
                # Seed cannot serve anything on its own, e.g. its demand exceeds capacity.
                exhausted.add(best_index)
                continue

            for member in members:
                covered[member] = True
                site_for_customer[member] = len(sites)
            sites.append(coordinates[best_index])
            covered_demand += load

        return SiteSelection(
            sites,
            assignments=site_for_customer,
            metadata={
                "strategy": "greedy_coverage",
                "rounds": rounds,
                "estimated_coverage": covered_demand / total_demand if total_demand else 0.0,
            },
        )
