import math

import numpy as np
import pytest

from src.gfa.models.domain import (
    CostParameters,
    Customer,
    OptimizationConstraints,
    Product,
    UnitConversion,
)
from src.gfa.services.geospatial import KM_TO_MILES, haversine_km
from src.gfa.services.optimization import OptimizationInputError, optimize_with_constraints


def _customer(
    cid: str,
    lat: float,
    lon: float,
    demand: float = 100.0,
    *,
    product: str = "Widgets",
    unit: str = "m3",
    conversion_factor: float = 1.0,
) -> Customer:
    return Customer(
        customer_id=cid,
        product=product,
        name=f"Customer {cid}",
        city="City",
        country="Country",
        latitude=lat,
        longitude=lon,
        demand=demand,
        unit_of_measure=unit,
        conversion_factor=conversion_factor,
    )


def _far_apart_customers() -> list[Customer]:
    return [
        _customer("NY", 40.7128, -74.0060),
        _customer("LA", 34.0522, -118.2437),
        _customer("CHI", 41.8781, -87.6298),
    ]


def _random_customers(count: int = 40, seed: int = 7) -> list[Customer]:
    rng = np.random.RandomState(seed)
    return [
        _customer(
            f"R{i}",
            float(rng.uniform(30.0, 45.0)),
            float(rng.uniform(-120.0, -75.0)),
            float(rng.uniform(10.0, 200.0)),
        )
        for i in range(count)
    ]


def test_fixed_sites_one_site_per_far_apart_customer():
    result = optimize_with_constraints(_far_apart_customers(), 3, OptimizationConstraints(), "sites")

    assert len(result.dcs) == 3
    assert [len(dc.assigned_customers) for dc in result.dcs] == [1, 1, 1]
    assert [dc.assigned_customers[0].customer_id for dc in result.dcs] == ["NY", "LA", "CHI"]
    assert result.feasible is True
    assert result.warnings == []
    assert result.cost_breakdown is None


def test_capacity_shortfall_is_reported_not_raised():
    customers = [
        _customer("C1", 40.70, -74.00),
        _customer("C2", 40.72, -74.02),
        _customer("C3", 40.74, -74.01),
    ]
    constraints = OptimizationConstraints(dc_capacity=150, capacity_unit="m3")

    result = optimize_with_constraints(customers, 1, constraints, "sites")

    assert result.feasible is False
    assert any("capacity" in warning.lower() for warning in result.warnings)
    assert len(result.dcs) == 1
    site = result.dcs[0]
    assert [c.customer_id for c in site.assigned_customers] == ["C1"]
    assert site.total_demand <= 150


def test_cost_mode_trades_facility_cost_against_transport():
    customers = [
        _customer("E1", 40.00, -75.00),
        _customer("E2", 40.01, -75.01),
        _customer("W1", 34.05, -118.24),
    ]
    cost_params = CostParameters(
        transportation_cost_per_unit=0.5,
        facility_cost=100000,
        distance_unit="mile",
        cost_unit="m3",
    )

    result = optimize_with_constraints(customers, 1, OptimizationConstraints(), "cost", cost_params)

    breakdown = result.cost_breakdown
    assert breakdown is not None
    assert breakdown.num_sites == 2
    assert breakdown.num_sites == len(result.dcs)
    assert breakdown.facility_cost == pytest.approx(100000 * breakdown.num_sites)

    expected_transport = sum(
        0.5 * haversine_km(c.latitude, c.longitude, dc.latitude, dc.longitude) * KM_TO_MILES * c.demand
        for dc in result.dcs
        for c in dc.assigned_customers
    )
    assert breakdown.transportation_cost == pytest.approx(expected_transport)
    assert breakdown.total_cost == pytest.approx(expected_transport + 100000 * breakdown.num_sites)


def test_cost_mode_prefers_single_site_when_facilities_are_expensive():
    customers = [
        _customer("C1", 40.00, -75.00),
        _customer("C2", 40.05, -75.05),
        _customer("C3", 40.10, -75.00),
    ]
    cost_params = CostParameters(transportation_cost_per_unit=0.01, facility_cost=1_000_000)

    result = optimize_with_constraints(customers, 1, OptimizationConstraints(), "cost", cost_params)

    assert result.cost_breakdown.num_sites == 1
    assert result.feasible is True


def test_distance_mode_covers_both_clusters_within_radius():
    customers = [
        _customer("NY1", 40.70, -74.00),
        _customer("NY2", 40.75, -74.05),
        _customer("NY3", 40.72, -73.95),
        _customer("LA1", 34.05, -118.24),
        _customer("LA2", 34.10, -118.30),
    ]
    constraints = OptimizationConstraints(max_radius=50, demand_percentage=100)

    result = optimize_with_constraints(customers, 1, constraints, "distance")

    assert result.feasible is True
    assert len(result.dcs) == 2
    for dc in result.dcs:
        for c in dc.assigned_customers:
            assert haversine_km(c.latitude, c.longitude, dc.latitude, dc.longitude) <= 50


def test_distance_mode_stops_once_required_demand_is_covered():
    customers = [
        _customer("NY1", 40.70, -74.00),
        _customer("NY2", 40.75, -74.05),
        _customer("NY3", 40.72, -73.95),
        _customer("LA1", 34.05, -118.24),
        _customer("LA2", 34.10, -118.30),
    ]
    constraints = OptimizationConstraints(max_radius=50, demand_percentage=60)

    result = optimize_with_constraints(customers, 1, constraints, "distance")

    assert len(result.dcs) == 1
    assert (result.dcs[0].latitude, result.dcs[0].longitude) == (40.70, -74.00)
    assert result.dcs[0].total_demand == pytest.approx(300)
    assert result.feasible is True
    assert any("outside the 50 km radius" in warning for warning in result.warnings)


def test_distance_mode_reports_coverage_shortfall():
    customers = [_customer("A", 40.0, -75.0, demand=50), _customer("B", 34.0, -118.0, demand=200)]
    constraints = OptimizationConstraints(max_radius=10, demand_percentage=100, dc_capacity=100)

    result = optimize_with_constraints(customers, 1, constraints, "distance")

    assert result.feasible is False
    assert len(result.dcs) == 1
    assert [c.customer_id for c in result.dcs[0].assigned_customers] == ["A"]
    assert "80.0% of demand uncovered, required 100%" in result.warnings


def test_distance_mode_keeps_greedy_partition_under_capacity():
    # Y is nearer to A's site, but only fits on B's site once X takes A's capacity.
    customers = [
        _customer("A", 0.0, 0.0, demand=50),
        _customer("B", 0.0, 1.2, demand=50),
        _customer("Y", 0.0, 0.5, demand=50),
        _customer("X", 0.0, -0.4, demand=50),
    ]
    constraints = OptimizationConstraints(max_radius=80, demand_percentage=100, dc_capacity=100)

    result = optimize_with_constraints(customers, 1, constraints, "distance")

    assert result.feasible is True
    assert result.warnings == []
    assert [(dc.latitude, dc.longitude) for dc in result.dcs] == [(0.0, 0.0), (0.0, 1.2)]
    assert [[c.customer_id for c in dc.assigned_customers] for dc in result.dcs] == [["A", "X"], ["B", "Y"]]
    assert [dc.total_demand for dc in result.dcs] == [pytest.approx(100), pytest.approx(100)]
    assert result.metadata["strategy"] == "greedy_coverage"
    assert result.metadata["estimated_coverage"] == pytest.approx(1.0)
    assert result.metadata["coverage_percentage"] == pytest.approx(100.0)


def test_radius_violation_in_fixed_sites_mode():
    customers = [_customer("A", 40.0, -75.0), _customer("B", 34.0, -118.0)]
    constraints = OptimizationConstraints(max_radius=100)

    result = optimize_with_constraints(customers, 1, constraints, "sites")

    assert result.feasible is False
    assert any("exceeding max radius 100 km" in warning for warning in result.warnings)
    assert sum(len(dc.assigned_customers) for dc in result.dcs) == 2


def test_more_sites_requested_than_distinct_locations():
    customers = [
        _customer("A", 40.0, -75.0),
        _customer("B", 40.0, -75.0),
        _customer("C", 34.0, -118.0),
    ]

    result = optimize_with_constraints(customers, 5, OptimizationConstraints(), "sites")

    assert len(result.dcs) == 2
    assert result.warnings == [
        "Requested 5 sites but only 2 distinct customer locations; using 2"
    ]
    assert result.feasible is True


def test_demand_is_converted_to_capacity_unit():
    customers = [
        _customer("A", 40.0, -75.0, demand=10, unit="pallets", product="Chairs", conversion_factor=1.5),
        _customer("B", 40.0, -75.0, demand=10, unit="pallets", product="Tables", conversion_factor=1.5),
    ]
    products = [Product(name="Chairs", base_unit="pallets", unit_conversions=[UnitConversion("pallets", "m3", 2.0)])]

    result = optimize_with_constraints(
        customers,
        1,
        OptimizationConstraints(capacity_unit="m3"),
        "sites",
        products=products,
    )

    assert result.dcs[0].total_demand == pytest.approx(20.0 + 15.0)


def test_empty_customer_list_is_rejected():
    with pytest.raises(OptimizationInputError):
        optimize_with_constraints([], 1, OptimizationConstraints(), "sites")


@pytest.mark.parametrize("field", ["latitude", "longitude", "demand"])
def test_non_finite_values_are_rejected(field):
    values = {"latitude": 40.0, "longitude": -75.0, "demand": 10.0}
    values[field] = math.nan
    customer = _customer("A", values["latitude"], values["longitude"], values["demand"])

    with pytest.raises(OptimizationInputError):
        optimize_with_constraints([customer], 1, OptimizationConstraints(), "sites")


def test_invalid_site_count_and_missing_cost_parameters_are_rejected():
    customers = _far_apart_customers()

    with pytest.raises(ValueError):
        optimize_with_constraints(customers, 0, OptimizationConstraints(), "sites")
    with pytest.raises(OptimizationInputError):
        optimize_with_constraints(customers, 1, OptimizationConstraints(), "cost")
    with pytest.raises(OptimizationInputError):
        optimize_with_constraints(customers, 1, OptimizationConstraints(), "nearest")


RUN_CONFIGS = [
    ("sites", 4, OptimizationConstraints()),
    ("sites", 3, OptimizationConstraints(dc_capacity=1500)),
    ("sites", 6, OptimizationConstraints(max_radius=800, dc_capacity=2500)),
    ("distance", 1, OptimizationConstraints(max_radius=500, demand_percentage=80)),
    ("distance", 1, OptimizationConstraints(max_radius=300, demand_percentage=90, dc_capacity=900)),
    ("cost", 1, OptimizationConstraints(dc_capacity=3000)),
]


def _run(mode, target, constraints, customers):
    cost_params = CostParameters(transportation_cost_per_unit=0.05, facility_cost=5000) if mode == "cost" else None
    return optimize_with_constraints(customers, target, constraints, mode, cost_params)


@pytest.mark.parametrize("mode,target,constraints", RUN_CONFIGS)
def test_assignments_are_exclusive(mode, target, constraints):
    customers = _random_customers()
    result = _run(mode, target, constraints, customers)

    assigned = [c.customer_id for dc in result.dcs for c in dc.assigned_customers]
    assert len(assigned) == len(set(assigned))


@pytest.mark.parametrize("mode,target,constraints", RUN_CONFIGS)
def test_runs_are_deterministic(mode, target, constraints):
    customers = _random_customers()

    first = _run(mode, target, constraints, customers)
    second = _run(mode, target, constraints, customers)

    assert first == second


@pytest.mark.parametrize("mode,target,constraints", RUN_CONFIGS)
def test_feasible_runs_respect_every_constraint(mode, target, constraints):
    customers = _random_customers()
    result = _run(mode, target, constraints, customers)
    if not result.feasible:
        assert result.warnings
        return

    total_demand = sum(c.demand for c in customers)
    covered = sum(c.demand for dc in result.dcs for c in dc.assigned_customers)
    assert covered >= total_demand * constraints.demand_percentage / 100 - 1e-6
    for dc in result.dcs:
        if constraints.has_capacity_limit:
            assert dc.total_demand <= constraints.dc_capacity + 1e-6
        if constraints.has_radius_limit:
            for c in dc.assigned_customers:
                assert haversine_km(c.latitude, c.longitude, dc.latitude, dc.longitude) <= constraints.max_radius + 1e-6
