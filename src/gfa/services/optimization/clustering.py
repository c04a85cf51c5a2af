"""Demand-weighted clustering site selection."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from sklearn.cluster import KMeans

from ...models.domain import Customer, OptimizationConstraints
from .base import SiteSelection, SiteSelectionStrategy, distinct_locations

logger = logging.getLogger(__name__)


class ClusteringSiteSelection(SiteSelectionStrategy):
    """Place sites at demand-weighted K-Means centroids of customer coordinates.

    Raw latitude/longitude serve as a Euclidean proxy, which is adequate for
    the short distances between customers of one cluster. The loop stops at
    ``max_iter``; a run that has not converged by then keeps its last
    centroids.
    """

    def __init__(self, *, random_state: int = 42, n_init: int = 10, max_iter: int = 100) -> None:
        self.random_state = random_state
        self.n_init = n_init
        self.max_iter = max_iter

    def select_sites(
        self,
        *,
        customers: Sequence[Customer],
        demands: np.ndarray,
        target_sites: int,
        constraints: OptimizationConstraints,
    ) -> SiteSelection:
        if target_sites < 1:
            raise ValueError("target_sites must be >= 1")

        locations = distinct_locations(customers)
        n_sites = min(target_sites, len(locations))
        warnings: list[str] = []
        if n_sites < target_sites:
            warnings.append(
                f"Requested {target_sites} sites but only {len(locations)} distinct customer locations; using {n_sites}"
            )

        if n_sites == len(locations):
            # Every location becomes its own site.
            return SiteSelection(
                list(locations),
                warnings=warnings,
                metadata={"strategy": "clustering", "iterations": 0, "converged": True},
            )

        coordinates = np.array([[c.latitude, c.longitude] for c in customers], dtype=float)
        weights = np.asarray(demands, dtype=float)
        if weights.sum() <= 0:
            weights = np.ones(len(customers))

        kmeans = KMeans(
            n_clusters=n_sites,
            random_state=self.random_state,
            n_init=self.n_init,
            max_iter=self.max_iter,
        )
        labels = kmeans.fit_predict(coordinates, sample_weight=weights)

        # Order sites by the first customer that falls in each cluster.
        order: list[int] = []
        for label in labels:
            if int(label) not in order:
                order.append(int(label))
        order.extend(label for label in range(n_sites) if label not in order)

        centers = kmeans.cluster_centers_
        sites = [(float(centers[label][0]), float(centers[label][1])) for label in order]
        converged = kmeans.n_iter_ < self.max_iter
        if not converged:
            logger.debug("Clustering hit the iteration cap (%s); using last centroids", self.max_iter)

        return SiteSelection(
            sites,
            warnings=warnings,
            metadata={
                "strategy": "clustering",
                "iterations": int(kmeans.n_iter_),
                "converged": converged,
            },
        )
