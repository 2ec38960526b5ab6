"""
Derived fields for the production sheet.

Given a RevenueRecord this module infers property metadata from each line
item description and apportions the statement's tax and deduction totals
across the line items by their share of gross revenue.

Everything here is an estimate. Apportioned taxes/deductions and owner
interest are not read from the document, and owner interest carries a
random jitter. The jitter source is injectable so exports can be made
reproducible.
"""

import logging
import random
from dataclasses import dataclass
from datetime import date
from typing import Optional

from revenue_parser.derived.matchers import (
    detect_product_type,
    extract_property_name,
    extract_property_number,
)
from revenue_parser.models.revenue import (
    DerivedPropertyInfo,
    LineItem,
    ProductionRow,
    RevenueRecord,
)
from revenue_parser.periods import production_date

logger = logging.getLogger(__name__)

# Owner interest moves at most this far from the product's base value
OWNER_INTEREST_JITTER = 0.025
OWNER_INTEREST_MIN = 0.001
OWNER_INTEREST_MAX = 0.999

UNKNOWN_OPERATOR = "Unknown Operator"


@dataclass(frozen=True)
class Apportionment:
    """A line item's share of the statement totals."""
    proportion: float
    gross_value: float
    deductions: float
    taxes: float
    net_value: float


def apportion_item(item: LineItem, record: RevenueRecord) -> Apportionment:
    """
    Split the record's taxes and other deductions onto one line item.

    The share is ``|amount| / total_revenue``, or 0 when the total is 0.
    """
    gross_value = abs(item.amount)
    proportion = gross_value / record.total_revenue if record.total_revenue > 0 else 0.0
    deductions = record.other_deductions * proportion
    taxes = abs(record.taxes) * proportion
    return Apportionment(
        proportion=proportion,
        gross_value=gross_value,
        deductions=deductions,
        taxes=taxes,
        net_value=gross_value - deductions - taxes,
    )


class DerivedFieldCalculator:
    """
    Computes the derived production view of a revenue record.

    Args:
        rng: Random source for the owner interest jitter
        seed: Seed for a new random source when ``rng`` is not given
        today: Reference date for periods that cannot be recognized
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        today: Optional[date] = None,
    ):
        self.rng = rng or random.Random(seed)
        self.today = today

    def owner_interest(self, base: float) -> str:
        """Base interest plus bounded jitter, as a 9 decimal string in (0, 1)."""
        variation = (self.rng.random() - 0.5) * 2 * OWNER_INTEREST_JITTER
        value = min(OWNER_INTEREST_MAX, max(OWNER_INTEREST_MIN, base + variation))
        return f"{value:.9f}"

    def property_info(self, description: str) -> DerivedPropertyInfo:
        """Infer property metadata from a line item description."""
        text = (description or "").strip()
        property_name = extract_property_name(text)
        product_type = detect_product_type(text)
        profile = product_type.profile

        return DerivedPropertyInfo(
            property_name=property_name,
            property_number=extract_property_number(text, property_name),
            product_type=product_type,
            unit=profile.unit,
            owner_interest=self.owner_interest(profile.base_owner_interest),
            btu_factor=f"{profile.btu_factor:.3f}",
        )

    def apportion(self, record: RevenueRecord) -> list[Apportionment]:
        """Apportion taxes and deductions across every line item, in order."""
        return [apportion_item(item, record) for item in record.line_items]

    def production_rows(self, record: RevenueRecord) -> list[ProductionRow]:
        """
        Build one production row per line item.

        Money values are rounded to cents; volume and price come straight
        from the line item.
        """
        produced_on = production_date(record.period, today=self.today)
        operator = record.company or UNKNOWN_OPERATOR

        rows = []
        for item, share in zip(record.line_items, self.apportion(record)):
            rows.append(ProductionRow(
                info=self.property_info(item.description),
                production_date=produced_on,
                volume=item.quantity or 0.0,
                price=item.rate or 0.0,
                gross_value=round(share.gross_value, 2),
                deductions=round(share.deductions, 2),
                taxes=round(share.taxes, 2),
                net_value=round(share.net_value, 2),
                operator=operator,
            ))

        logger.debug(f"Derived {len(rows)} production row(s) for {record.company}")
        return rows
