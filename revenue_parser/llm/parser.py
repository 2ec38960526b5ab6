"""
LLM response parser for revenue statement extraction.

Handles:
- JSON extraction from model responses (code fences, surrounding text)
- Required field checks
- Field-level defaulting of malformed line items and totals
- Advisory balance checks
"""

import json
import logging
import math
import re
from typing import Any, Optional

from revenue_parser.exceptions import IncompleteExtractionError, MalformedResponseError
from revenue_parser.models.revenue import LineItem, RevenueRecord

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?|\n?\s*```", re.IGNORECASE)

# Allowed difference between reported and recomputed totals
BALANCE_TOLERANCE = 1.0


class RevenueParser:
    """
    Parses model responses into RevenueRecord instances.

    A malformed line item degrades that item, never the whole record: missing
    or non-numeric fields fall back to defaults and a warning is returned
    alongside the record. The parser keeps no state between calls.
    """

    def parse(self, response: str) -> RevenueRecord:
        """Parse a raw model response, dropping the warnings."""
        record, _ = self.parse_with_warnings(response)
        return record

    def parse_with_warnings(self, response: str) -> tuple[RevenueRecord, list[str]]:
        """
        Parse a raw model response.

        Args:
            response: Raw text returned by the model

        Returns:
            Tuple of (validated RevenueRecord, warnings about defaulted fields)

        Raises:
            MalformedResponseError: If no JSON object can be parsed
            IncompleteExtractionError: If company, period or totalRevenue is missing
        """
        warnings: list[str] = []
        data = self._load_json(response)

        missing = []
        company = self._parse_text(data.get("company"))
        if not company:
            missing.append("company")
        period = self._parse_text(data.get("period"))
        if not period:
            missing.append("period")
        total_revenue = self._parse_number(data.get("totalRevenue"))
        if total_revenue is None:
            missing.append("totalRevenue")

        if missing:
            logger.error(f"Extraction missing required fields {missing}. Raw response: {response!r}")
            raise IncompleteExtractionError(
                f"Invalid data structure returned from AI: missing {', '.join(missing)}",
                missing_fields=missing,
                stage="normalize",
                detail=response,
            )

        raw_items = data.get("lineItems")
        if not isinstance(raw_items, list):
            if raw_items is not None:
                warnings.append("lineItems is not a list; no line items were kept")
            raw_items = []
        line_items = tuple(
            self._parse_line_item(item, index, warnings)
            for index, item in enumerate(raw_items, start=1)
        )

        taxes = self._parse_number(data.get("taxes"))
        if taxes is None:
            if data.get("taxes") is not None:
                warnings.append("taxes is not numeric; using 0")
            taxes = 0.0

        net_revenue = self._parse_number(data.get("netRevenue"))
        if net_revenue is None:
            net_revenue = total_revenue - taxes
            warnings.append("netRevenue missing; computed as totalRevenue - taxes")

        record = RevenueRecord(
            company=company,
            period=period,
            total_revenue=total_revenue,
            line_items=line_items,
            taxes=taxes,
            net_revenue=net_revenue,
        )
        return record, warnings

    def _load_json(self, response: str) -> dict:
        """Strip code fences and parse the JSON object."""
        if not isinstance(response, str) or not response.strip():
            raise MalformedResponseError(
                "Failed to parse AI response as JSON: response is empty",
                stage="normalize",
                detail=response if isinstance(response, str) else repr(response),
            )

        cleaned = CODE_FENCE_PATTERN.sub("", response.strip()).strip()
        candidates = [cleaned]

        # Fall back to the outermost object if the model wrapped it in prose
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start != -1 and end > start and (start, end) != (0, len(cleaned) - 1):
            candidates.append(cleaned[start:end + 1])

        error = None
        for candidate in candidates:
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError as e:
                error = e
                continue
            if isinstance(data, dict):
                return data
            error = None

        logger.error(f"JSON parsing error: {error}. Raw response: {response!r}")
        reason = f"JSON parse error: {error}" if error else "response is not a JSON object"
        raise MalformedResponseError(
            f"Failed to parse AI response as JSON ({reason})",
            stage="normalize",
            detail=response,
        )

    def _parse_line_item(self, item_data: Any, index: int, warnings: list[str]) -> LineItem:
        """Convert one raw line item, defaulting bad fields."""
        if not isinstance(item_data, dict):
            warnings.append(f"Line item {index}: not an object; using defaults")
            item_data = {}

        description = self._parse_text(item_data.get("description"))
        if not description:
            warnings.append(f"Line item {index}: missing description")
            description = "Unknown Item"

        quantity = self._parse_number(item_data.get("quantity"))
        if quantity is None:
            quantity = 1.0

        amount = self._parse_number(item_data.get("amount"))
        if amount is None:
            warnings.append(f"Line item {index}: missing amount; using 0")
            amount = 0.0

        rate = self._parse_number(item_data.get("rate"))
        if rate is None:
            rate = amount

        return LineItem(description=description, quantity=quantity, rate=rate, amount=amount)

    @staticmethod
    def _parse_text(value: Any) -> str:
        if value is None or isinstance(value, (dict, list)):
            return ""
        return str(value).strip()

    @staticmethod
    def _parse_number(value: Any) -> Optional[float]:
        """Parse a number, accepting currency formatted strings."""
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            number = float(value)
            return number if math.isfinite(number) else None

        if isinstance(value, str):
            cleaned = re.sub(r"[$€£,\s]", "", value)
            # Accounting negatives: (1,234.56)
            if cleaned.startswith("(") and cleaned.endswith(")"):
                cleaned = "-" + cleaned[1:-1]
            try:
                number = float(cleaned)
            except ValueError:
                return None
            return number if math.isfinite(number) else None

        return None

    def check_balance(self, record: RevenueRecord) -> list[str]:
        """
        Compare the reported totals and return advisory warnings.

        The model is asked to balance net = gross - taxes - deductions, but
        nothing here corrects the record.
        """
        warnings = []

        if not record.line_items:
            warnings.append("No line items extracted")
        else:
            items_sum = sum(item.amount for item in record.line_items)
            if abs(items_sum - record.total_revenue) > BALANCE_TOLERANCE:
                warnings.append(
                    f"Line items sum ({items_sum:.2f}) doesn't match "
                    f"total revenue ({record.total_revenue:.2f})"
                )

        if record.net_revenue > record.total_revenue + BALANCE_TOLERANCE:
            warnings.append(
                f"Net revenue ({record.net_revenue:.2f}) exceeds "
                f"gross revenue ({record.total_revenue:.2f})"
            )

        if record.total_revenue < 0:
            warnings.append(f"Total revenue is negative ({record.total_revenue:.2f})")

        return warnings


def parse_llm_response(response: str) -> RevenueRecord:
    """
    Convenience function to parse a model response.

    Args:
        response: Raw model response

    Returns:
        Validated RevenueRecord
    """
    parser = RevenueParser()
    return parser.parse(response)
