"""
Data models for oil & gas revenue statements.

RevenueRecord is the canonical output of the extraction pipeline. It is
immutable once the parser has applied its defaults; everything derived from
it (production rows, accounting documents) is recomputed on each export.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ProductProfile:
    """Fixed accounting attributes of a product type."""
    unit: str
    btu_factor: float
    base_owner_interest: float


class ProductType(Enum):
    """Product categories found on revenue statements."""
    GAS = "GAS"
    OIL = "OIL"
    NGL = "NGL"
    WATER = "WATER"

    @property
    def profile(self) -> ProductProfile:
        return PRODUCT_PROFILES[self]


PRODUCT_PROFILES = {
    ProductType.GAS: ProductProfile(unit="MCF", btu_factor=1.035, base_owner_interest=0.1875),
    ProductType.OIL: ProductProfile(unit="BBL", btu_factor=1.000, base_owner_interest=0.125),
    ProductType.NGL: ProductProfile(unit="GAL", btu_factor=1.000, base_owner_interest=0.15625),
    ProductType.WATER: ProductProfile(unit="BBL", btu_factor=1.000, base_owner_interest=0.100),
}


class LineItem(BaseModel):
    """A single property/product row of a revenue statement."""

    model_config = ConfigDict(frozen=True)

    description: str
    quantity: float = 1.0
    rate: float = 0.0
    amount: float = 0.0

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class RevenueRecord(BaseModel):
    """Validated revenue statement data."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    company: str
    period: str
    total_revenue: float = Field(alias="totalRevenue")
    line_items: tuple[LineItem, ...] = Field(default=(), alias="lineItems")
    taxes: float = 0.0
    net_revenue: float = Field(default=0.0, alias="netRevenue")

    @property
    def other_deductions(self) -> float:
        """Non-tax deductions implied by the totals, never negative."""
        return max(0.0, self.total_revenue - self.net_revenue - abs(self.taxes))

    def to_dict(self) -> dict:
        """Render with the camelCase field names used by the model prompt."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class DerivedPropertyInfo:
    """Property metadata inferred from a line item description."""
    property_name: str
    property_number: str
    product_type: ProductType
    unit: str
    owner_interest: str  # 9 decimal places, always < 1
    btu_factor: str


@dataclass(frozen=True)
class ProductionRow:
    """One row of the derived production sheet."""
    info: DerivedPropertyInfo
    production_date: date
    volume: float
    price: float
    gross_value: float
    deductions: float
    taxes: float
    net_value: float
    operator: str


class ExtractionResult(BaseModel):
    """Result of running the pipeline over one document."""

    record: RevenueRecord
    raw_response: str
    page_count: int
    model: Optional[str] = None
    processing_time_seconds: float = 0.0
    warnings: list[str] = Field(default_factory=list)
