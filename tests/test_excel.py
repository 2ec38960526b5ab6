"""
Unit tests for the Excel exporter.
"""
import copy
from io import BytesIO

import pytest
from openpyxl import load_workbook

from revenue_parser.derived.calculator import DerivedFieldCalculator
from revenue_parser.export.excel import ExcelExporter, export_revenue_statement


@pytest.fixture
def exporter(today) -> ExcelExporter:
    return ExcelExporter(calculator=DerivedFieldCalculator(seed=5, today=today), today=today)


class TestExcelExporter:
    """Tests for ExcelExporter."""

    def test_sheet_names(self, exporter, sample_record):
        wb = exporter.build_workbook(sample_record)
        assert wb.sheetnames == ["Revenue Analysis", "Summary", "Oil & Gas Production"]

    def test_analysis_sheet(self, exporter, sample_record):
        ws = exporter.build_workbook(sample_record)["Revenue Analysis"]

        assert ws["A1"].value == "Revenue Statement Analysis"
        assert (ws["A3"].value, ws["B3"].value) == ("Company:", "Devon Energy")
        assert (ws["A4"].value, ws["B4"].value) == ("Period:", "December 2021")
        assert ws["B5"].value == "2024-01-15"
        assert ws["A7"].value == "LINE ITEMS"
        assert [c.value for c in ws[8]] == ["Description", "Quantity", "Rate", "Amount"]
        assert [c.value for c in ws[9]] == ["Verde 13-2HZ NBRR 138366-1 GAS", 150, 4, 600]
        assert [c.value for c in ws[10]] == ["Smith Lease Oil", 5, 80, 400]

        labels = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=4).value for r in range(12, ws.max_row + 1)}
        assert labels["Gross Revenue"] == 1000
        assert labels["Taxes"] == 50
        assert labels["Other Deductions"] == 150
        assert labels["Net Revenue"] == 800

    def test_summary_sheet(self, exporter, sample_record):
        ws = exporter.build_workbook(sample_record)["Summary"]
        values = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value for r in range(1, ws.max_row + 1)}

        assert values["Company"] == "Devon Energy"
        assert values["Total Revenue Items"] == 2
        assert values["Gross Revenue"] == 1000
        assert values["Net Revenue"] == 800
        assert values["Smith Lease Oil"] == 400

    def test_production_sheet(self, exporter, sample_record):
        ws = exporter.build_workbook(sample_record)["Oil & Gas Production"]

        assert [c.value for c in ws[1]] == ExcelExporter.PRODUCTION_HEADERS

        gas = [c.value for c in ws[2]]
        assert gas[0:4] == ["Verde 13-2HZ NBRR", "138366-1", "12/01/2021", "GAS"]
        assert gas[4:11] == [150, "MCF", 4, 600, 90, 30, 480]
        assert gas[12] == "1.035"
        assert gas[13] == "2024-01-15"
        assert gas[14] == "Devon Energy"

        oil = [c.value for c in ws[3]]
        assert oil[0] == "Smith"
        assert oil[3] == "OIL"
        assert oil[5] == "BBL"

    def test_totals_row_from_record(self, exporter, sample_record):
        ws = exporter.build_workbook(sample_record)["Oil & Gas Production"]
        total = [c.value for c in ws[4]]

        assert total[0] == "TOTAL"
        assert total[4] == 155
        assert total[7] == sample_record.total_revenue
        assert total[8] == 150
        assert total[9] == 50
        assert total[10] == sample_record.net_revenue

    def test_derived_note(self, exporter, sample_record):
        ws = exporter.build_workbook(sample_record)["Oil & Gas Production"]
        assert "estimated" in ws.cell(row=ws.max_row, column=1).value

    def test_empty_line_items(self, exporter, sample_record):
        wb = exporter.build_workbook(sample_record.model_copy(update={"line_items": ()}))
        ws = wb["Oil & Gas Production"]

        assert ws["A2"].value == "TOTAL"
        assert ws["E2"].value == 0

    def test_seeded_exports_match(self, today, sample_record):
        first = ExcelExporter(calculator=DerivedFieldCalculator(seed=9), today=today)
        second = ExcelExporter(calculator=DerivedFieldCalculator(seed=9), today=today)

        rows_a = [c.value for c in first.build_workbook(sample_record)["Oil & Gas Production"][2]]
        rows_b = [c.value for c in second.build_workbook(sample_record)["Oil & Gas Production"][2]]
        assert rows_a == rows_b

    def test_record_not_mutated(self, exporter, sample_record):
        before = copy.deepcopy(sample_record)
        exporter.to_bytes(sample_record)
        assert sample_record == before

    def test_to_bytes_round_trips(self, exporter, sample_record):
        wb = load_workbook(BytesIO(exporter.to_bytes(sample_record)))
        assert wb.sheetnames == ["Revenue Analysis", "Summary", "Oil & Gas Production"]

    def test_export_adds_extension(self, exporter, sample_record, tmp_path):
        path = exporter.export(sample_record, tmp_path / "statement")

        assert path.suffix == ".xlsx"
        assert path.exists()

    def test_build_filename(self, exporter):
        assert exporter.build_filename("Devon Dec 2021.pdf") == "Devon Dec 2021_parsed_2024-01-15.xlsx"


def test_export_revenue_statement(sample_record, tmp_path):
    path = export_revenue_statement(sample_record, tmp_path / "out.xlsx", seed=1)
    assert load_workbook(path)["Summary"]["A1"].value == "Revenue Summary"
