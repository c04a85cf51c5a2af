"""Base classes for site selection strategy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from ...models.domain import Customer, OptimizationConstraints


class SiteSelection:
    """Container for candidate site coordinates chosen by a strategy."""

    def __init__(
        self,
        sites: list[tuple[float, float]],
        warnings: list[str] | None = None,
        metadata: dict | None = None,
        assignments: list[int | None] | None = None,
    ):
        self.sites = sites
        self.warnings = warnings or []
        self.metadata = metadata or {}
        # Customer index -> site index, when the strategy already partitioned demand.
        self.assignments = assignments

    def __len__(self) -> int:
        return len(self.sites)


class SiteSelectionStrategy(ABC):
    """Contract for site selection strategy implementations."""

    @abstractmethod
    def select_sites(
        self,
        *,
        customers: Sequence[Customer],
        demands: np.ndarray,
        target_sites: int,
        constraints: OptimizationConstraints,
    ) -> SiteSelection:
        raise NotImplementedError


def distinct_locations(customers: Sequence[Customer]) -> list[tuple[float, float]]:
    """Unique customer coordinates in first-appearance order."""
    seen: dict[tuple[float, float], None] = {}
    for customer in customers:
        seen.setdefault((customer.latitude, customer.longitude), None)
    return list(seen)
