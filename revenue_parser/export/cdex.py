"""
CDEX-style accounting XML export.

Handles:
- Validation of a revenue record before export
- Conversion to double-entry ledger transactions
- XML rendering under the CDEX namespace
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Union
from xml.sax.saxutils import escape

from revenue_parser.exceptions import ExportValidationError
from revenue_parser.models.revenue import RevenueRecord
from revenue_parser.periods import period_end_date

logger = logging.getLogger(__name__)

CDEX_NAMESPACE = "http://cdex.org/schema/v1.0"
CDEX_VERSION = "1.0"
DOCUMENT_TYPE = "Revenue Statement"

# Account codes used for revenue statements
ACCOUNT_REVENUE = "4000"
ACCOUNT_TAX_LIABILITY = "2200"
ACCOUNT_RECEIVABLES = "1200"

XML_ENTITIES = {'"': "&quot;", "'": "&#39;"}


@dataclass(frozen=True)
class CdexHeader:
    company_name: str
    reporting_period: str
    generated_date: date
    document_type: str = DOCUMENT_TYPE
    version: str = CDEX_VERSION


@dataclass(frozen=True)
class CdexTransaction:
    """A single ledger entry; exactly one of debit/credit is non-zero."""
    transaction_id: str
    account_code: str
    transaction_date: date
    debit_amount: float
    credit_amount: float
    description: str
    document_reference: str


@dataclass(frozen=True)
class CdexSummary:
    total_debits: float
    total_credits: float
    transaction_count: int


@dataclass(frozen=True)
class AccountingDocument:
    """A CDEX accounting document built from one revenue record."""
    header: CdexHeader
    transactions: tuple[CdexTransaction, ...]
    summary: CdexSummary


def validate_cdex_data(record: RevenueRecord) -> list[str]:
    """
    Check a record can be exported.

    Returns:
        Human-readable errors; empty when the record is valid
    """
    errors = []

    if not record.company or not record.company.strip():
        errors.append("Company name is required")

    if not record.period or not record.period.strip():
        errors.append("Reporting period is required")

    if not isinstance(record.total_revenue, (int, float)) or record.total_revenue < 0:
        errors.append("Valid total revenue amount is required")

    if not record.line_items:
        errors.append("At least one revenue line item is required")

    for index, item in enumerate(record.line_items, start=1):
        if not item.description or not item.description.strip():
            errors.append(f"Line item {index}: Description is required")
        if not isinstance(item.amount, (int, float)) or item.amount < 0:
            errors.append(f"Line item {index}: Valid amount is required")

    return errors


def document_reference(original_filename: str) -> str:
    """The uploaded file's name without its extension."""
    return Path(original_filename).stem if original_filename else ""


def transaction_id(sequence: int, transaction_date: date) -> str:
    """``TXN-<epoch ms of the date at UTC midnight>-<4 digit sequence>``."""
    midnight = datetime(
        transaction_date.year, transaction_date.month, transaction_date.day,
        tzinfo=timezone.utc,
    )
    timestamp = int(midnight.timestamp() * 1000)
    return f"TXN-{timestamp}-{sequence:04d}"


def convert_to_cdex(
    record: RevenueRecord,
    original_filename: str,
    today: Optional[date] = None,
) -> AccountingDocument:
    """
    Convert a revenue record to a CDEX accounting document.

    Each line item becomes a revenue credit, total revenue becomes a
    receivables debit and taxes, when positive, a tax liability credit.
    Debits and credits are not forced to balance.

    Raises:
        ExportValidationError: If ``validate_cdex_data`` reports any error
    """
    errors = validate_cdex_data(record)
    if errors:
        raise ExportValidationError(errors, stage="export")

    today = today or date.today()
    transaction_date = period_end_date(record.period, today=today)
    reference = document_reference(original_filename)

    entries = []

    def add(account_code: str, debit: float, credit: float, description: str):
        entries.append(CdexTransaction(
            transaction_id=transaction_id(len(entries) + 1, transaction_date),
            account_code=account_code,
            transaction_date=transaction_date,
            debit_amount=debit,
            credit_amount=credit,
            description=description,
            document_reference=reference,
        ))

    for item in record.line_items:
        add(ACCOUNT_REVENUE, 0.0, item.amount, item.description)

    add(
        ACCOUNT_RECEIVABLES,
        record.total_revenue,
        0.0,
        f"Accounts Receivable - {record.company} Revenue",
    )

    if record.taxes > 0:
        add(ACCOUNT_TAX_LIABILITY, 0.0, record.taxes, "Tax Liability")

    summary = CdexSummary(
        total_debits=round(sum(t.debit_amount for t in entries), 2),
        total_credits=round(sum(t.credit_amount for t in entries), 2),
        transaction_count=len(entries),
    )
    logger.info(
        f"Built CDEX document with {summary.transaction_count} transactions "
        f"(debits {summary.total_debits:.2f}, credits {summary.total_credits:.2f})"
    )

    return AccountingDocument(
        header=CdexHeader(
            company_name=record.company,
            reporting_period=record.period,
            generated_date=today,
        ),
        transactions=tuple(entries),
        summary=summary,
    )


def escape_xml(text: str) -> str:
    """Escape ``& < > " '`` for element content."""
    return escape(str(text), XML_ENTITIES)


def generate_cdex_xml(document: AccountingDocument) -> str:
    """Render an accounting document as CDEX XML."""
    header = document.header
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<cdex:AccountingDocument xmlns:cdex="{CDEX_NAMESPACE}" version="{CDEX_VERSION}">',
        "  <cdex:Header>",
        f"    <cdex:CompanyName>{escape_xml(header.company_name)}</cdex:CompanyName>",
        f"    <cdex:ReportingPeriod>{escape_xml(header.reporting_period)}</cdex:ReportingPeriod>",
        f"    <cdex:GeneratedDate>{header.generated_date.isoformat()}</cdex:GeneratedDate>",
        f"    <cdex:DocumentType>{escape_xml(header.document_type)}</cdex:DocumentType>",
        f"    <cdex:Version>{escape_xml(header.version)}</cdex:Version>",
        "  </cdex:Header>",
        "  <cdex:Transactions>",
    ]

    for txn in document.transactions:
        lines.extend([
            "    <cdex:Transaction>",
            f"      <cdex:TransactionId>{txn.transaction_id}</cdex:TransactionId>",
            f"      <cdex:AccountCode>{txn.account_code}</cdex:AccountCode>",
            f"      <cdex:TransactionDate>{txn.transaction_date.isoformat()}</cdex:TransactionDate>",
            f"      <cdex:DebitAmount>{txn.debit_amount:.2f}</cdex:DebitAmount>",
            f"      <cdex:CreditAmount>{txn.credit_amount:.2f}</cdex:CreditAmount>",
            f"      <cdex:Description>{escape_xml(txn.description)}</cdex:Description>",
            f"      <cdex:DocumentReference>{escape_xml(txn.document_reference)}</cdex:DocumentReference>",
            "    </cdex:Transaction>",
        ])

    summary = document.summary
    lines.extend([
        "  </cdex:Transactions>",
        "  <cdex:Summary>",
        f"    <cdex:TotalDebits>{summary.total_debits:.2f}</cdex:TotalDebits>",
        f"    <cdex:TotalCredits>{summary.total_credits:.2f}</cdex:TotalCredits>",
        f"    <cdex:TransactionCount>{summary.transaction_count}</cdex:TransactionCount>",
        "  </cdex:Summary>",
        "</cdex:AccountingDocument>",
    ])
    return "\n".join(lines) + "\n"


def build_filename(original_filename: str, today: Optional[date] = None) -> str:
    """``<name>_cdex_<YYYY-MM-DD>.xml``"""
    today = today or date.today()
    return f"{document_reference(original_filename)}_cdex_{today.isoformat()}.xml"


def export_cdex(
    record: RevenueRecord,
    original_filename: str,
    file_path: Optional[Union[str, Path]] = None,
    today: Optional[date] = None,
) -> str:
    """
    Validate, convert and render a record as CDEX XML.

    Args:
        record: Validated revenue record
        original_filename: Name of the uploaded PDF, used as document reference
        file_path: If given, the XML is also written there
        today: Generation date (defaults to today)

    Returns:
        The XML text

    Raises:
        ExportValidationError: If the record fails validation
    """
    xml = generate_cdex_xml(convert_to_cdex(record, original_filename, today=today))
    if file_path is not None:
        file_path = Path(file_path)
        file_path.write_text(xml, encoding="utf-8")
        logger.info(f"Wrote CDEX export to {file_path}")
    return xml
