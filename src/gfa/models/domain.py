"""Domain models for customers, products and optimization results."""

from dataclasses import dataclass, field
from typing import Literal, Optional

OptimizationMode = Literal["sites", "distance", "cost"]
DistanceUnit = Literal["km", "mile"]


@dataclass(slots=True, frozen=True)
class Customer:
    """A geocoded demand point for one product."""

    customer_id: str
    product: str
    name: str
    city: str
    country: str
    latitude: float
    longitude: float
    demand: float
    unit_of_measure: str = "m3"
    conversion_factor: float = 1.0


@dataclass(slots=True, frozen=True)
class UnitConversion:
    from_unit: str
    to_unit: str
    factor: float


@dataclass(slots=True)
class Product:
    """Product catalogue entry derived from customer rows plus user overlays."""

    name: str
    base_unit: str
    conversion_to_standard: float = 1.0
    unit_conversions: list[UnitConversion] = field(default_factory=list)
    selling_price: Optional[float] = None


@dataclass(slots=True)
class OptimizationConstraints:
    """Hard constraints; non-positive radius or capacity means unlimited."""

    max_radius: float = 0.0
    demand_percentage: float = 100.0
    dc_capacity: float = 0.0
    capacity_unit: str = "m3"

    @property
    def has_radius_limit(self) -> bool:
        return self.max_radius > 0

    @property
    def has_capacity_limit(self) -> bool:
        return self.dc_capacity > 0


@dataclass(slots=True)
class CostParameters:
    transportation_cost_per_unit: float
    facility_cost: float
    distance_unit: DistanceUnit = "km"
    cost_unit: str = "m3"


@dataclass(slots=True)
class DistributionCenter:
    """An open site with its assigned customers; demand is in the capacity unit."""

    latitude: float
    longitude: float
    assigned_customers: list[Customer] = field(default_factory=list)
    total_demand: float = 0.0


@dataclass(slots=True)
class CostBreakdown:
    total_cost: float
    transportation_cost: float
    facility_cost: float
    num_sites: int


@dataclass(slots=True)
class OptimizationResult:
    dcs: list[DistributionCenter]
    feasible: bool
    warnings: list[str]
    cost_breakdown: Optional[CostBreakdown] = None
    metadata: dict = field(default_factory=dict)
