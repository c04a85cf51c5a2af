import pytest

from src.gfa.config import settings
from src.gfa.models.domain import Customer, Product, UnitConversion
from src.gfa.services.products import convert_demand, derive_products, get_conversion_factor, update_product


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


def test_get_conversion_factor_known_and_unknown_units():
    assert get_conversion_factor("m3") == 1.0
    assert get_conversion_factor("Pallets") == 1.5
    assert get_conversion_factor("crates") == 1.0


def test_derive_products_keeps_first_appearance_order_and_overlays():
    customers = [
        _customer("C1", 1.0, 1.0, product="Chairs", unit="pallets", conversion_factor=1.5),
        _customer("C2", 1.0, 1.0, product="Tables"),
        _customer("C3", 1.0, 1.0, product="Chairs", unit="m3"),
    ]
    existing = [
        Product(
            name="Chairs",
            base_unit="m3",
            unit_conversions=[UnitConversion("pallets", "m3", 2.0)],
            selling_price=12.5,
        ),
        Product(name="Lamps", base_unit="m3", selling_price=3.0),
    ]

    products = derive_products(customers, existing)

    assert [p.name for p in products] == ["Chairs", "Tables"]
    chairs = products[0]
    assert chairs.base_unit == "pallets"
    assert chairs.conversion_to_standard == 1.5
    assert chairs.selling_price == 12.5
    assert chairs.unit_conversions == [UnitConversion("pallets", "m3", 2.0)]
    assert products[1].selling_price is None


def test_update_product_replaces_overlay_of_one_product():
    products = [Product(name="Chairs", base_unit="m3"), Product(name="Tables", base_unit="m3")]

    updated = update_product(products, "Tables", conversion_factor=2.0, selling_price=9.0)

    assert updated[0] is products[0]
    assert updated[1].selling_price == 9.0
    assert updated[1].conversion_to_standard == 2.0


def test_update_product_unknown_name_raises():
    with pytest.raises(ValueError):
        update_product([], "Ghost", conversion_factor=1.0)


def test_convert_demand_same_unit_is_identity():
    customer = _customer("C1", 0, 0, demand=40, unit="m3")

    assert convert_demand(customer, "M3") == 40


def test_convert_demand_uses_product_conversion_both_directions():
    customer = _customer("C1", 0, 0, demand=10, unit="pallets", product="Chairs", conversion_factor=1.5)
    products = {"Chairs": Product(name="Chairs", base_unit="pallets", unit_conversions=[UnitConversion("m3", "pallets", 0.5)])}

    assert convert_demand(customer, "m3", products) == pytest.approx(20.0)


def test_convert_demand_falls_back_to_standard_unit():
    customer = _customer("C1", 0, 0, demand=10, unit="pallets", conversion_factor=1.5)

    assert convert_demand(customer, "m3") == pytest.approx(15.0)
    assert convert_demand(customer, "liters") == pytest.approx(15000.0)


def test_conversion_factor_follows_configured_standard_unit(monkeypatch):
    monkeypatch.setattr(settings, "standard_unit", "liters")
    # conversion factor 1500 expresses one pallet in litres
    customer = _customer("C1", 1.0, 1.0, demand=2.0, unit="pallets", conversion_factor=1500.0)

    assert get_conversion_factor("m3") == pytest.approx(1000.0)
    assert get_conversion_factor("liters") == pytest.approx(1.0)
    assert convert_demand(customer, "m3") == pytest.approx(3.0)
