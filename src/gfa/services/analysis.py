"""Post-run analysis of optimizer output: distances, profitability, coverage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from ..models.domain import CostParameters, Customer, DistributionCenter, OptimizationConstraints, Product
from .geospatial import distance_in_unit, haversine_km
from .products import convert_demand


@dataclass(slots=True)
class DistanceRow:
    customer_id: str
    customer_name: str
    dc_label: str
    distance_km: float
    product: str
    demand: float
    unit: str


@dataclass(slots=True)
class DistanceBand:
    lower_km: float
    upper_km: float
    customers: int
    demand: float


@dataclass(slots=True)
class ProfitRow:
    customer_id: str
    customer_name: str
    product: str
    demand: float
    unit: str
    revenue: float
    transport_cost: float
    profit: float
    margin_percentage: float


def dc_label(index: int) -> str:
    return f"DC {index + 1}"


def assignment_lookup(dcs: Sequence[DistributionCenter]) -> dict[str, int]:
    """Map customer id to the index of the site serving it."""
    lookup: dict[str, int] = {}
    for index, dc in enumerate(dcs):
        for customer in dc.assigned_customers:
            lookup[customer.customer_id] = index
    return lookup


def distance_analysis(customers: Sequence[Customer], dcs: Sequence[DistributionCenter]) -> list[DistanceRow]:
    lookup = assignment_lookup(dcs)
    rows: list[DistanceRow] = []
    for customer in customers:
        index = lookup.get(customer.customer_id)
        if index is None:
            continue
        dc = dcs[index]
        rows.append(
            DistanceRow(
                customer_id=customer.customer_id,
                customer_name=customer.name,
                dc_label=dc_label(index),
                distance_km=haversine_km(customer.latitude, customer.longitude, dc.latitude, dc.longitude),
                product=customer.product,
                demand=customer.demand,
                unit=customer.unit_of_measure,
            )
        )
    return rows


def distance_bands(rows: Iterable[DistanceRow], step_km: float = 100.0) -> list[DistanceBand]:
    """Bucket assignment distances into consecutive ``step_km`` bands."""
    if step_km <= 0:
        raise ValueError("step_km must be > 0")
    buckets: dict[int, DistanceBand] = {}
    for row in rows:
        bucket = int(row.distance_km // step_km)
        band = buckets.setdefault(
            bucket,
            DistanceBand(lower_km=bucket * step_km, upper_km=(bucket + 1) * step_km, customers=0, demand=0.0),
        )
        band.customers += 1
        band.demand += row.demand
    return [buckets[key] for key in sorted(buckets)]


def profitability_analysis(
    customers: Sequence[Customer],
    products: Sequence[Product],
    dcs: Sequence[DistributionCenter],
    cost_params: Optional[CostParameters],
) -> list[ProfitRow]:
    products_by_name = {product.name: product for product in products}
    lookup = assignment_lookup(dcs)
    rows: list[ProfitRow] = []
    for customer in customers:
        product = products_by_name.get(customer.product)
        price = product.selling_price if product and product.selling_price else 0.0
        revenue = customer.demand * price

        transport = 0.0
        index = lookup.get(customer.customer_id)
        if index is not None and cost_params is not None:
            dc = dcs[index]
            distance = distance_in_unit(
                customer.latitude, customer.longitude, dc.latitude, dc.longitude, cost_params.distance_unit
            )
            demand = convert_demand(customer, cost_params.cost_unit, products_by_name)
            transport = distance * demand * cost_params.transportation_cost_per_unit

        profit = revenue - transport
        rows.append(
            ProfitRow(
                customer_id=customer.customer_id,
                customer_name=customer.name,
                product=customer.product,
                demand=customer.demand,
                unit=customer.unit_of_measure,
                revenue=revenue,
                transport_cost=transport,
                profit=profit,
                margin_percentage=(profit / revenue * 100.0) if revenue > 0 else 0.0,
            )
        )
    return rows


def summarize_run(
    customers: Sequence[Customer],
    products: Sequence[Product],
    dcs: Sequence[DistributionCenter],
    constraints: OptimizationConstraints,
) -> dict:
    products_by_name: Mapping[str, Product] = {product.name: product for product in products}
    total_demand = sum(convert_demand(c, constraints.capacity_unit, products_by_name) for c in customers)
    covered_demand = sum(dc.total_demand for dc in dcs)
    distances = [row.distance_km for row in distance_analysis(customers, dcs)]
    assigned = sum(len(dc.assigned_customers) for dc in dcs)
    return {
        "total_customers": len(customers),
        "total_products": len(products),
        "distribution_centers": len(dcs),
        "assigned_customers": assigned,
        "unassigned_customers": len(customers) - assigned,
        "total_demand": total_demand,
        "covered_demand": covered_demand,
        "coverage_percentage": (covered_demand / total_demand * 100.0) if total_demand else 0.0,
        "capacity_unit": constraints.capacity_unit,
        "average_distance_km": (sum(distances) / len(distances)) if distances else 0.0,
        "max_distance_km": max(distances) if distances else 0.0,
    }
