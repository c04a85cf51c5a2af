"""Utilities to serialize optimization results into JSON/CSV artifacts."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ...models.domain import Customer
from ...schemas.optimization import OptimizationResponse
from ..geospatial import haversine_km


def optimization_response_to_json(response: OptimizationResponse) -> dict:
    return response.model_dump()


def optimization_response_to_csv(response: OptimizationResponse, customers: Sequence[Customer]) -> str:
    buffer = io.StringIO()
    fieldnames = ["customer_id", "customer_name", "product", "demand", "unit", "assigned_dc", "distance_km"]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()

    sites: dict[str, tuple[int, float, float]] = {}
    for index, dc in enumerate(response.dcs):
        for assigned in dc.assignedCustomers:
            sites[assigned.id] = (index, dc.latitude, dc.longitude)

    for customer in customers:
        site = sites.get(customer.customer_id)
        if site is None:
            assigned_dc, distance = "Not Assigned", ""
        else:
            index, lat, lon = site
            assigned_dc = f"DC {index + 1}"
            distance = f"{haversine_km(customer.latitude, customer.longitude, lat, lon):.2f}"
        writer.writerow(
            {
                "customer_id": customer.customer_id,
                "customer_name": customer.name,
                "product": customer.product,
                "demand": customer.demand,
                "unit": customer.unit_of_measure,
                "assigned_dc": assigned_dc,
                "distance_km": distance,
            }
        )
    return buffer.getvalue()
