"""Typed records produced and consumed by the pipeline."""

from .revenue import (
    DerivedPropertyInfo,
    ExtractionResult,
    LineItem,
    ProductionRow,
    ProductProfile,
    ProductType,
    RevenueRecord,
)

__all__ = [
    "DerivedPropertyInfo",
    "ExtractionResult",
    "LineItem",
    "ProductionRow",
    "ProductProfile",
    "ProductType",
    "RevenueRecord",
]
