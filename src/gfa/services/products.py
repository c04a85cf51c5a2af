"""Product catalogue derivation and unit conversion."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..config import settings
from ..models.domain import Customer, Product, UnitConversion

# Factor from a unit to cubic metres.
CUBIC_METRE_FACTORS: dict[str, float] = {
    "m3": 1.0,
    "cbm": 1.0,
    "ft3": 0.0283168,
    "cft": 0.0283168,
    "liters": 0.001,
    "litres": 0.001,
    "l": 0.001,
    "gallons": 0.00378541,
    "pallets": 1.5,
    "cases": 0.05,
    "units": 1.0,
}


def get_conversion_factor(unit: str) -> float:
    """Factor that converts one ``unit`` into ``settings.standard_unit``.

    Unknown units, on either side, count as one cubic metre.
    """

    unit_factor = CUBIC_METRE_FACTORS.get(unit.strip().lower(), 1.0)
    standard_factor = CUBIC_METRE_FACTORS.get(settings.standard_unit.strip().lower(), 1.0)
    return unit_factor / standard_factor


def derive_products(customers: Sequence[Customer], existing: Iterable[Product] = ()) -> list[Product]:
    """Build one product per distinct customer product name.

    Unit conversions and selling price are user overlays and survive as long
    as the product name is unchanged.
    """
    previous = {product.name: product for product in existing}
    products: dict[str, Product] = {}
    for customer in customers:
        if customer.product in products:
            continue
        overlay = previous.get(customer.product)
        products[customer.product] = Product(
            name=customer.product,
            base_unit=customer.unit_of_measure,
            conversion_to_standard=customer.conversion_factor,
            unit_conversions=list(overlay.unit_conversions) if overlay else [],
            selling_price=overlay.selling_price if overlay else None,
        )
    return list(products.values())


def update_product(
    products: Sequence[Product],
    name: str,
    *,
    conversion_factor: float,
    unit_conversions: Optional[Sequence[UnitConversion]] = None,
    selling_price: Optional[float] = None,
) -> list[Product]:
    if not any(product.name == name for product in products):
        raise ValueError(f"Unknown product '{name}'.")
    return [
        Product(
            name=product.name,
            base_unit=product.base_unit,
            conversion_to_standard=conversion_factor,
            unit_conversions=list(unit_conversions or []),
            selling_price=selling_price,
        )
        if product.name == name
        else product
        for product in products
    ]


def convert_demand(
    customer: Customer,
    target_unit: str,
    products_by_name: Mapping[str, Product] | None = None,
) -> float:
    """Express a customer's demand in ``target_unit``."""

    source_unit = customer.unit_of_measure
    if source_unit.strip().lower() == target_unit.strip().lower():
        return customer.demand

    product = (products_by_name or {}).get(customer.product)
    if product is not None:
        for conversion in product.unit_conversions:
            if conversion.from_unit == source_unit and conversion.to_unit == target_unit:
                return customer.demand * conversion.factor
            if conversion.from_unit == target_unit and conversion.to_unit == source_unit and conversion.factor:
                return customer.demand / conversion.factor

    standard_demand = customer.demand * customer.conversion_factor
    return standard_demand / get_conversion_factor(target_unit)
