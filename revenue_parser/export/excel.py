"""
Excel export module for revenue statement data.

Handles:
- Revenue analysis sheet (line items + summary)
- Summary sheet (metrics + breakdown by line item)
- Oil & gas production sheet with derived property data and a totals row
- Download filenames
"""

import logging
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from revenue_parser.derived.calculator import DerivedFieldCalculator
from revenue_parser.models.revenue import ProductionRow, RevenueRecord

logger = logging.getLogger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DERIVED_NOTE = (
    "Deductions, Taxes, Net Value and Owner Interest are estimated from the "
    "statement totals, not read from the document."
)


class ExcelExporter:
    """
    Exports revenue statement data to Excel workbooks.

    Features:
    - Three sheets: Revenue Analysis, Summary, Oil & Gas Production
    - USD currency formatting
    - Derived production rows from DerivedFieldCalculator
    """

    PRODUCTION_HEADERS = [
        "Property Name",
        "Property Number",
        "Production Date",
        "Product Type",
        "Volume",
        "Unit",
        "Price",
        "Gross Value",
        "Deductions",
        "Taxes",
        "Net Value",
        "Owner Interest",
        "BTU Factor",
        "Check Date",
        "Operator",
    ]

    # Column widths per sheet
    ANALYSIS_WIDTHS = {"A": 30, "B": 12, "C": 12, "D": 15}
    SUMMARY_WIDTHS = {"A": 25, "B": 20}
    PRODUCTION_WIDTHS = [25, 15, 15, 15, 12, 8, 12, 15, 12, 10, 15, 15, 12, 12, 20]

    # Production columns holding money values (1-based)
    PRODUCTION_MONEY_COLUMNS = (7, 8, 9, 10, 11)

    def __init__(
        self,
        calculator: Optional[DerivedFieldCalculator] = None,
        currency_format: str = '"$"#,##0.00',
        today: Optional[date] = None,
    ):
        """
        Initialize the Excel exporter.

        Args:
            calculator: Derived field calculator (a fresh one by default)
            currency_format: Number format for money cells
            today: Date used for the "Generated" and "Check Date" cells
        """
        self.calculator = calculator or DerivedFieldCalculator()
        self.currency_format = currency_format
        self.today = today
        self._setup_styles()

    def _setup_styles(self):
        """Set up Excel styles for formatting."""
        self.title_font = Font(bold=True, size=16)
        self.section_font = Font(bold=True, size=12)
        self.label_font = Font(bold=True)

        # Header style
        self.header_font = Font(bold=True)
        self.header_fill = PatternFill(start_color="E6F3FF", end_color="E6F3FF", fill_type="solid")
        self.header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

        thin_border = Side(style="thin", color="CCCCCC")
        self.cell_border = Border(
            left=thin_border,
            right=thin_border,
            top=thin_border,
            bottom=thin_border,
        )

        self.total_font = Font(bold=True)
        self.total_fill = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
        self.note_font = Font(italic=True, color="808080")

    def _today(self) -> date:
        return self.today or date.today()

    def build_workbook(
        self,
        record: RevenueRecord,
        rows: Optional[Sequence[ProductionRow]] = None,
    ) -> Workbook:
        """
        Build the three-sheet workbook for a record.

        Args:
            record: Validated revenue record (not modified)
            rows: Precomputed production rows; derived from the record if omitted

        Returns:
            An unsaved openpyxl Workbook
        """
        if rows is None:
            rows = self.calculator.production_rows(record)

        wb = Workbook()
        analysis = wb.active
        analysis.title = "Revenue Analysis"
        self._write_analysis_sheet(analysis, record)
        self._write_summary_sheet(wb.create_sheet("Summary"), record)
        self._write_production_sheet(wb.create_sheet("Oil & Gas Production"), record, rows)
        return wb

    def _write_analysis_sheet(self, ws: Worksheet, record: RevenueRecord):
        """Line items followed by gross/taxes/net."""
        ws["A1"] = "Revenue Statement Analysis"
        ws["A1"].font = self.title_font
        ws["A1"].alignment = Alignment(horizontal="center")

        ws.append([])
        ws.append(["Company:", record.company])
        ws.append(["Period:", record.period])
        ws.append(["Generated:", self._today().isoformat()])
        ws.append([])
        ws.append(["LINE ITEMS"])
        ws.cell(row=ws.max_row, column=1).font = self.section_font

        ws.append(["Description", "Quantity", "Rate", "Amount"])
        self._style_header_row(ws, ws.max_row, 4)

        for item in record.line_items:
            ws.append([item.description, item.quantity, item.rate, item.amount])
            row = ws.max_row
            ws.cell(row=row, column=3).number_format = self.currency_format
            ws.cell(row=row, column=4).number_format = self.currency_format

        ws.append([])
        ws.append(["SUMMARY"])
        ws.cell(row=ws.max_row, column=1).font = self.section_font

        for label, value in (
            ("Gross Revenue", record.total_revenue),
            ("Taxes", record.taxes),
            ("Other Deductions", record.other_deductions),
            ("Net Revenue", record.net_revenue),
        ):
            ws.append([label, None, None, value])
            row = ws.max_row
            ws.cell(row=row, column=1).font = self.label_font
            ws.cell(row=row, column=4).number_format = self.currency_format

        for col_letter, width in self.ANALYSIS_WIDTHS.items():
            ws.column_dimensions[col_letter].width = width

    def _write_summary_sheet(self, ws: Worksheet, record: RevenueRecord):
        """Headline metrics and the amount of each line item."""
        ws["A1"] = "Revenue Summary"
        ws["A1"].font = self.title_font

        ws.append([])
        ws.append(["Company", record.company])
        ws.append(["Period", record.period])
        ws.append([])
        ws.append(["Financial Summary"])
        ws.cell(row=ws.max_row, column=1).font = self.section_font

        ws.append(["Metric", "Amount"])
        self._style_header_row(ws, ws.max_row, 2)

        ws.append(["Total Revenue Items", len(record.line_items)])
        for label, value in (
            ("Gross Revenue", record.total_revenue),
            ("Total Taxes", record.taxes),
            ("Other Deductions", record.other_deductions),
            ("Net Revenue", record.net_revenue),
        ):
            ws.append([label, value])
            ws.cell(row=ws.max_row, column=2).number_format = self.currency_format

        ws.append([])
        ws.append(["Revenue Breakdown by Type"])
        ws.cell(row=ws.max_row, column=1).font = self.section_font
        for item in record.line_items:
            ws.append([item.description, item.amount])
            ws.cell(row=ws.max_row, column=2).number_format = self.currency_format

        for col_letter, width in self.SUMMARY_WIDTHS.items():
            ws.column_dimensions[col_letter].width = width

    def _write_production_sheet(
        self,
        ws: Worksheet,
        record: RevenueRecord,
        rows: Sequence[ProductionRow],
    ):
        """Derived production rows plus a totals row taken from the record."""
        for col, header in enumerate(self.PRODUCTION_HEADERS, start=1):
            ws.cell(row=1, column=col, value=header)
        self._style_header_row(ws, 1, len(self.PRODUCTION_HEADERS))
        ws.freeze_panes = "A2"

        check_date = self._today().isoformat()
        for row in rows:
            info = row.info
            ws.append([
                info.property_name,
                info.property_number,
                row.production_date.strftime("%m/%d/%Y"),
                info.product_type.value,
                row.volume,
                info.unit,
                row.price,
                row.gross_value,
                row.deductions,
                row.taxes,
                row.net_value,
                info.owner_interest,
                info.btu_factor,
                check_date,
                row.operator,
            ])
            self._format_money(ws, ws.max_row)

        # Totals come from the record so they match the statement exactly
        ws.append([
            "TOTAL",
            "",
            "",
            "",
            sum(item.quantity or 0 for item in record.line_items),
            "",
            "",
            record.total_revenue,
            round(record.other_deductions, 2),
            round(abs(record.taxes), 2),
            record.net_revenue,
            "",
            "",
            "",
            "",
        ])
        total_row = ws.max_row
        self._format_money(ws, total_row)
        for col in range(1, len(self.PRODUCTION_HEADERS) + 1):
            cell = ws.cell(row=total_row, column=col)
            cell.font = self.total_font
            cell.fill = self.total_fill

        ws.append([])
        ws.append([DERIVED_NOTE])
        ws.cell(row=ws.max_row, column=1).font = self.note_font

        for col, width in enumerate(self.PRODUCTION_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _style_header_row(self, ws: Worksheet, row: int, columns: int):
        for col in range(1, columns + 1):
            cell = ws.cell(row=row, column=col)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.header_alignment
            cell.border = self.cell_border

    def _format_money(self, ws: Worksheet, row: int):
        for col in self.PRODUCTION_MONEY_COLUMNS:
            ws.cell(row=row, column=col).number_format = self.currency_format

    def export(self, record: RevenueRecord, file_path: Union[str, Path]) -> Path:
        """
        Export a record to an Excel file.

        Args:
            record: Validated revenue record
            file_path: Path to Excel file

        Returns:
            Path to the exported file
        """
        file_path = Path(file_path)

        # Ensure .xlsx extension
        if file_path.suffix.lower() != ".xlsx":
            file_path = file_path.with_suffix(".xlsx")

        wb = self.build_workbook(record)
        wb.save(file_path)
        logger.info(f"Exported {len(record.line_items)} line items to {file_path}")

        return file_path

    def to_bytes(self, record: RevenueRecord) -> bytes:
        """Render the workbook in memory, for downloads."""
        buffer = BytesIO()
        self.build_workbook(record).save(buffer)
        return buffer.getvalue()

    def build_filename(self, original_filename: str) -> str:
        """``<name>_parsed_<YYYY-MM-DD>.xlsx``"""
        stem = Path(original_filename).stem if original_filename else "revenue_statement"
        return f"{stem}_parsed_{self._today().isoformat()}.xlsx"


def export_revenue_statement(
    record: RevenueRecord,
    file_path: Union[str, Path],
    seed: Optional[int] = None,
) -> Path:
    """
    Convenience function to export a record.

    Args:
        record: Validated revenue record
        file_path: Path to Excel file
        seed: Seed for the owner interest jitter

    Returns:
        Path to exported file
    """
    exporter = ExcelExporter(calculator=DerivedFieldCalculator(seed=seed))
    return exporter.export(record, file_path)
