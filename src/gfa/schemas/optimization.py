"""Pydantic request/response models for optimization endpoints."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import (
    CostBreakdown,
    CostParameters,
    Customer,
    DistributionCenter,
    OptimizationConstraints,
    Product,
    UnitConversion,
)


class CustomerModel(BaseModel):
    id: str
    product: str
    name: str
    city: str = ""
    country: str = ""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    demand: float = Field(..., gt=0)
    unitOfMeasure: str = "m3"
    conversionFactor: float = Field(default=1.0, gt=0)

    def to_domain(self) -> Customer:
        return Customer(
            customer_id=self.id,
            product=self.product,
            name=self.name,
            city=self.city,
            country=self.country,
            latitude=self.latitude,
            longitude=self.longitude,
            demand=self.demand,
            unit_of_measure=self.unitOfMeasure,
            conversion_factor=self.conversionFactor,
        )

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerModel":
        return cls(
            id=customer.customer_id,
            product=customer.product,
            name=customer.name,
            city=customer.city,
            country=customer.country,
            latitude=customer.latitude,
            longitude=customer.longitude,
            demand=customer.demand,
            unitOfMeasure=customer.unit_of_measure,
            conversionFactor=customer.conversion_factor,
        )


class UnitConversionModel(BaseModel):
    fromUnit: str
    toUnit: str
    factor: float = Field(..., gt=0)


class ProductModel(BaseModel):
    name: str
    baseUnit: str
    conversionToStandard: float = Field(default=1.0, gt=0)
    unitConversions: List[UnitConversionModel] = Field(default_factory=list)
    sellingPrice: Optional[float] = Field(default=None, ge=0)

    def to_domain(self) -> Product:
        return Product(
            name=self.name,
            base_unit=self.baseUnit,
            conversion_to_standard=self.conversionToStandard,
            unit_conversions=[
                UnitConversion(from_unit=c.fromUnit, to_unit=c.toUnit, factor=c.factor)
                for c in self.unitConversions
            ],
            selling_price=self.sellingPrice,
        )

    @classmethod
    def from_domain(cls, product: Product) -> "ProductModel":
        return cls(
            name=product.name,
            baseUnit=product.base_unit,
            conversionToStandard=product.conversion_to_standard,
            unitConversions=[
                UnitConversionModel(fromUnit=c.from_unit, toUnit=c.to_unit, factor=c.factor)
                for c in product.unit_conversions
            ],
            sellingPrice=product.selling_price,
        )


class ConstraintsModel(BaseModel):
    maxRadius: float = Field(default=0.0, ge=0, description="Kilometres; 0 disables the radius limit.")
    demandPercentage: float = Field(default=100.0, ge=0, le=100)
    dcCapacity: float = Field(default=0.0, ge=0, description="Per-site capacity; 0 means unlimited.")
    capacityUnit: str = "m3"

    def to_domain(self) -> OptimizationConstraints:
        return OptimizationConstraints(
            max_radius=self.maxRadius,
            demand_percentage=self.demandPercentage,
            dc_capacity=self.dcCapacity,
            capacity_unit=self.capacityUnit,
        )


class CostParamsModel(BaseModel):
    transportationCostPerMilePerUnit: float = Field(..., ge=0)
    facilityCost: float = Field(..., ge=0)
    distanceUnit: Literal["km", "mile"] = "km"
    costUnit: str = "m3"

    def to_domain(self) -> CostParameters:
        return CostParameters(
            transportation_cost_per_unit=self.transportationCostPerMilePerUnit,
            facility_cost=self.facilityCost,
            distance_unit=self.distanceUnit,
            cost_unit=self.costUnit,
        )


class OptimizationRequest(BaseModel):
    customers: List[CustomerModel] = Field(..., description="Geocoded demand points.")
    targetSiteCount: int = Field(default=1, description="Number of sites in fixed-site-count mode.")
    constraints: ConstraintsModel = Field(default_factory=ConstraintsModel)
    mode: Literal["sites", "distance", "cost"] = "sites"
    costParams: Optional[CostParamsModel] = None
    products: List[ProductModel] = Field(default_factory=list)
    scenarioId: Optional[str] = Field(default=None, description="Scenario to store input/output snapshots under.")
    persist: bool = Field(default=True, description="Whether to persist snapshots and run files.")


class DistributionCenterModel(BaseModel):
    latitude: float
    longitude: float
    assignedCustomers: List[CustomerModel]
    totalDemand: float

    @classmethod
    def from_domain(cls, dc: DistributionCenter) -> "DistributionCenterModel":
        return cls(
            latitude=dc.latitude,
            longitude=dc.longitude,
            assignedCustomers=[CustomerModel.from_domain(c) for c in dc.assigned_customers],
            totalDemand=dc.total_demand,
        )

    def to_domain(self) -> DistributionCenter:
        return DistributionCenter(
            latitude=self.latitude,
            longitude=self.longitude,
            assigned_customers=[c.to_domain() for c in self.assignedCustomers],
            total_demand=self.totalDemand,
        )


class CostBreakdownModel(BaseModel):
    totalCost: float
    transportationCost: float
    facilityCost: float
    numSites: int

    @classmethod
    def from_domain(cls, breakdown: CostBreakdown) -> "CostBreakdownModel":
        return cls(
            totalCost=breakdown.total_cost,
            transportationCost=breakdown.transportation_cost,
            facilityCost=breakdown.facility_cost,
            numSites=breakdown.num_sites,
        )


class OptimizationResponse(BaseModel):
    dcs: List[DistributionCenterModel]
    feasible: bool
    warnings: List[str]
    costBreakdown: Optional[CostBreakdownModel] = None
    metadata: dict = Field(default_factory=dict)


class AnalysisRequest(BaseModel):
    customers: List[CustomerModel]
    products: List[ProductModel] = Field(default_factory=list)
    dcs: List[DistributionCenterModel]
    constraints: ConstraintsModel = Field(default_factory=ConstraintsModel)
    costParams: Optional[CostParamsModel] = None
    distanceStepKm: float = Field(default=100.0, gt=0)


class AnalysisResponse(BaseModel):
    summary: dict
    distances: List[dict]
    distanceBands: List[dict]
    profitability: List[dict]


class ProductDeriveRequest(BaseModel):
    customers: List[CustomerModel]
    products: List[ProductModel] = Field(default_factory=list)


class ProductUpdateRequest(BaseModel):
    products: List[ProductModel]
    conversionToStandard: float = Field(..., gt=0)
    unitConversions: List[UnitConversionModel] = Field(default_factory=list)
    sellingPrice: Optional[float] = Field(default=None, ge=0)
