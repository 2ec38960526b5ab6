"""Export module for writing extracted data to Excel and CDEX XML."""

from .cdex import convert_to_cdex, export_cdex, generate_cdex_xml, validate_cdex_data
from .excel import ExcelExporter

__all__ = [
    "ExcelExporter",
    "convert_to_cdex",
    "export_cdex",
    "generate_cdex_xml",
    "validate_cdex_data",
]
