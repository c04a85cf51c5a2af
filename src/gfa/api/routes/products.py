"""API routes for the product catalogue."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...models.domain import UnitConversion
from ...schemas.optimization import ProductDeriveRequest, ProductModel, ProductUpdateRequest
from ...services.products import derive_products, update_product

router = APIRouter(prefix="/products", tags=["products"])


@router.post("/derive", response_model=list[ProductModel], status_code=status.HTTP_200_OK)
def derive(payload: ProductDeriveRequest) -> list[ProductModel]:
    """Merge the products named by customers with existing price/conversion overlays."""
    customers = [model.to_domain() for model in payload.customers]
    existing = [model.to_domain() for model in payload.products]
    return [ProductModel.from_domain(product) for product in derive_products(customers, existing)]


@router.put("/{name}", response_model=list[ProductModel], status_code=status.HTTP_200_OK)
def update(name: str, payload: ProductUpdateRequest) -> list[ProductModel]:
    """Replace the conversion, unit conversions and price of one product."""
    try:
        updated = update_product(
            [model.to_domain() for model in payload.products],
            name,
            conversion_factor=payload.conversionToStandard,
            unit_conversions=[
                UnitConversion(from_unit=c.fromUnit, to_unit=c.toUnit, factor=c.factor)
                for c in payload.unitConversions
            ],
            selling_price=payload.sellingPrice,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [ProductModel.from_domain(product) for product in updated]
