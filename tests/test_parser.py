"""
Unit tests for the model response parser.
"""
import json

import pytest

from revenue_parser.exceptions import IncompleteExtractionError, MalformedResponseError
from revenue_parser.llm.parser import RevenueParser, parse_llm_response
from revenue_parser.models.revenue import LineItem, RevenueRecord


class TestRevenueParser:
    """Tests for RevenueParser.parse."""

    @pytest.fixture
    def parser(self) -> RevenueParser:
        return RevenueParser()

    def test_minimal_record_gets_defaults(self, parser: RevenueParser):
        """Missing lineItems, taxes and netRevenue are filled in."""
        record = parser.parse('{"company":"Acme","period":"Q4 2023","totalRevenue":1000}')

        assert record.to_dict() == {
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 1000,
            "lineItems": [],
            "taxes": 0,
            "netRevenue": 1000,
        }

    def test_line_item_defaults(self, parser: RevenueParser):
        """A line item with only a description degrades, it is not rejected."""
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 1000,
            "lineItems": [{"description": "Well A"}],
        })
        record, warnings = parser.parse_with_warnings(raw)

        assert record.line_items == (
            LineItem(description="Well A", quantity=1, rate=0, amount=0),
        )
        assert any("Line item 1" in w for w in warnings)

    def test_warnings_are_per_call(self, parser: RevenueParser):
        """Warnings from one parse do not leak into or get erased by the next."""
        bad = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 1000,
            "lineItems": [{}],
        })
        _, first = parser.parse_with_warnings(bad)
        _, second = parser.parse_with_warnings(
            '{"company":"Acme","period":"Q4 2023","totalRevenue":1000,"netRevenue":1000}'
        )

        assert len(first) == 3
        assert second == []
        assert not hasattr(parser, "warnings")

    def test_rate_defaults_to_amount(self, parser: RevenueParser):
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 250,
            "lineItems": [{"description": "Gas sales", "quantity": "n/a", "amount": 250}],
        })
        item = parser.parse(raw).line_items[0]

        assert item.quantity == 1
        assert item.rate == 250
        assert item.amount == 250

    def test_non_object_line_item_uses_defaults(self, parser: RevenueParser):
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 10,
            "lineItems": ["garbage", {"description": "Oil", "amount": 10}],
        })
        record = parser.parse(raw)

        assert len(record.line_items) == 2
        assert record.line_items[0].description == "Unknown Item"
        assert record.line_items[1].amount == 10

    def test_line_items_not_a_list(self, parser: RevenueParser):
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 10,
            "lineItems": {"description": "Oil"},
        })
        assert parser.parse(raw).line_items == ()

    def test_non_numeric_taxes_and_net(self, parser: RevenueParser):
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 1000,
            "taxes": "unknown",
            "netRevenue": None,
        })
        record = parser.parse(raw)

        assert record.taxes == 0
        assert record.net_revenue == 1000

    def test_net_computed_from_taxes(self, parser: RevenueParser):
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": 1000,
            "taxes": 75.5,
        })
        assert parser.parse(raw).net_revenue == pytest.approx(924.5)

    def test_currency_strings(self, parser: RevenueParser):
        raw = json.dumps({
            "company": "Acme",
            "period": "Q4 2023",
            "totalRevenue": "$1,234.56",
            "taxes": "(14.25)",
        })
        record = parser.parse(raw)

        assert record.total_revenue == pytest.approx(1234.56)
        assert record.taxes == pytest.approx(-14.25)

    def test_strips_code_fences(self, parser: RevenueParser, sample_response, sample_record):
        assert parser.parse(sample_response) == sample_record

    def test_json_surrounded_by_prose(self, parser: RevenueParser):
        raw = 'Here is the data:\n{"company":"Acme","period":"May 2022","totalRevenue":5}\nDone.'
        record = parser.parse(raw)

        assert record.company == "Acme"
        assert record.total_revenue == 5

    def test_unparsable_text(self, parser: RevenueParser):
        with pytest.raises(MalformedResponseError) as exc_info:
            parser.parse("I could not read this statement.")

        assert exc_info.value.detail == "I could not read this statement."
        assert exc_info.value.stage == "normalize"

    def test_empty_text(self, parser: RevenueParser):
        with pytest.raises(MalformedResponseError):
            parser.parse("   ")

    def test_json_array_is_malformed(self, parser: RevenueParser):
        with pytest.raises(MalformedResponseError):
            parser.parse("[1, 2, 3]")

    def test_missing_company(self, parser: RevenueParser):
        with pytest.raises(IncompleteExtractionError) as exc_info:
            parser.parse('{"period":"Q4 2023","totalRevenue":1000}')

        assert exc_info.value.missing_fields == ["company"]

    def test_missing_all_required(self, parser: RevenueParser):
        with pytest.raises(IncompleteExtractionError) as exc_info:
            parser.parse('{"company":"  ","totalRevenue":true}')

        assert exc_info.value.missing_fields == ["company", "period", "totalRevenue"]

    def test_convenience_function(self):
        record = parse_llm_response('{"company":"Acme","period":"Q4 2023","totalRevenue":1}')
        assert isinstance(record, RevenueRecord)


class TestBalanceCheck:
    """Tests for the advisory balance warnings."""

    def test_balanced_record(self, sample_record):
        assert RevenueParser().check_balance(sample_record) == []

    def test_no_line_items(self):
        record = RevenueRecord(company="Acme", period="Q4 2023", total_revenue=100, net_revenue=100)
        assert RevenueParser().check_balance(record) == ["No line items extracted"]

    def test_mismatched_sum_and_net(self):
        record = RevenueRecord(
            company="Acme",
            period="Q4 2023",
            total_revenue=100,
            line_items=(LineItem(description="Oil", amount=60),),
            net_revenue=150,
        )
        warnings = RevenueParser().check_balance(record)

        assert len(warnings) == 2
        assert "Line items sum (60.00)" in warnings[0]
        assert "exceeds" in warnings[1]
