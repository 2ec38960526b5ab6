"""
Revenue Statement Parser - oil & gas revenue statement extraction.

This package provides functionality for:
- Rendering statement PDFs to page images
- Vision model extraction of company, period, line items and totals
- Excel export with a derived production sheet
- CDEX accounting XML export
"""

__version__ = "0.1.0"
__author__ = "Revenue Statement Parser"
