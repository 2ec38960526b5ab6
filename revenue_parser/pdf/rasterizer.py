"""
PDF page rasterization for vision extraction.

Handles:
- Upload validation (type, signature, size)
- Page-by-page PDF to image conversion with progress
- Image preparation (RGB, downscale, PNG, base64) for the model API
"""

import base64
import logging
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional

from PIL import Image
from pdf2image import convert_from_bytes, pdfinfo_from_bytes

from revenue_parser.config import RasterConfig
from revenue_parser.exceptions import InvalidInputError, RasterizationError

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"
PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def encode_page(image: Image.Image, max_size: int = 2048) -> str:
    """
    Prepare a page image for the vision API: convert, resize, encode.

    Returns:
        Base64 encoded PNG (no data URL prefix)
    """
    if image.mode != "RGB":
        image = image.convert("RGB")

    w, h = image.size
    if max(w, h) > max_size:
        scale = max_size / max(w, h)
        new_w, new_h = int(w * scale), int(h * scale)
        image = image.resize((new_w, new_h), Image.LANCZOS)
        logger.debug(f"Resized page from {w}x{h} to {new_w}x{new_h}")

    buffer = BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


class PdfRasterizer:
    """
    Converts a PDF document into one image per page.

    Pages are rendered one at a time so progress can be reported per page
    and a large document never holds every rendering call open at once.
    """

    def __init__(
        self,
        config: Optional[RasterConfig] = None,
        max_file_size_mb: int = 20,
    ):
        self.config = config or RasterConfig()
        self.max_file_size_mb = max_file_size_mb

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    def validate(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> None:
        """
        Check that the upload is a PDF within the size limit.

        Raises:
            InvalidInputError: If the file is rejected
        """
        if not data:
            raise InvalidInputError("No file provided", stage="validate")

        if content_type and content_type.lower() not in PDF_CONTENT_TYPES:
            raise InvalidInputError("File must be a PDF", stage="validate")

        if Path(filename).suffix.lower() != ".pdf":
            raise InvalidInputError("File must be a PDF", stage="validate")

        if len(data) > self.max_file_size_bytes:
            raise InvalidInputError(
                f"PDF file is too large. Maximum size is {self.max_file_size_mb}MB.",
                stage="validate",
            )

        if not data.lstrip().startswith(PDF_SIGNATURE):
            raise InvalidInputError(
                "File does not look like a PDF document",
                stage="validate",
            )

    def page_count(self, data: bytes) -> int:
        """Read the number of pages from the PDF metadata."""
        try:
            info = pdfinfo_from_bytes(data, poppler_path=self.config.poppler_path)
        except Exception as e:
            raise RasterizationError(f"Failed to read PDF info: {e}", stage="rasterize") from e
        return int(info.get("Pages", 0))

    def rasterize(
        self,
        data: bytes,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> list[Image.Image]:
        """
        Render every page of the PDF.

        Args:
            data: PDF file content
            on_progress: Called with a percentage (0-100) after each page

        Returns:
            Page images in document order
        """
        pages = self.page_count(data)
        if pages == 0:
            raise RasterizationError("PDF contains no pages", stage="rasterize")

        images = []
        for page_num in range(1, pages + 1):
            try:
                rendered = convert_from_bytes(
                    data,
                    dpi=self.config.dpi,
                    fmt="png",
                    first_page=page_num,
                    last_page=page_num,
                    poppler_path=self.config.poppler_path,
                )
            except Exception as e:
                raise RasterizationError(
                    f"Failed to convert PDF page {page_num} to image: {e}",
                    stage="rasterize",
                ) from e

            images.extend(rendered)
            if on_progress:
                on_progress(page_num / pages * 100)

        logger.info(f"Rendered {len(images)} page(s) at {self.config.dpi} dpi")
        return images

    def encode_pages(self, images: list[Image.Image]) -> list[str]:
        """Encode rendered pages as base64 PNG strings."""
        return [encode_page(image, self.config.max_image_size) for image in images]
