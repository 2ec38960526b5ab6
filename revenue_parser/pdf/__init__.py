"""PDF module for turning statements into page images."""

from .rasterizer import PdfRasterizer, encode_page

__all__ = ["PdfRasterizer", "encode_page"]
