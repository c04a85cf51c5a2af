"""Factory for site selection strategies based on optimization mode."""

from __future__ import annotations

from ...config import settings
from .base import SiteSelectionStrategy
from .clustering import ClusteringSiteSelection
from .coverage import GreedyCoverageSiteSelection


def get_strategy(mode: str) -> SiteSelectionStrategy:
    match mode:
        case "sites" | "cost":
            return ClusteringSiteSelection(
                random_state=settings.random_state,
                n_init=settings.kmeans_n_init,
                max_iter=settings.max_iterations,
            )
        case "distance":
            return GreedyCoverageSiteSelection(epsilon=settings.capacity_epsilon)
        case _:
            raise ValueError(f"Unknown optimization mode '{mode}'.")
