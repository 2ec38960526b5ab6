"""
Revenue statement extraction pipeline.

Runs one uploaded PDF through validation, rasterization, model extraction
and normalization, reporting progress along the way. The extraction client
is passed in by the caller; nothing here reads the environment.
"""

import logging
import time
from typing import Callable, Optional

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from revenue_parser.config import AppConfig
from revenue_parser.exceptions import (
    RasterizationError,
    RevenueParserError,
    TransientUnavailableError,
    TransportError,
)
from revenue_parser.llm.client import VisionExtractionClient
from revenue_parser.llm.parser import RevenueParser
from revenue_parser.llm.prompts import get_extraction_prompt
from revenue_parser.models.revenue import ExtractionResult
from revenue_parser.pdf.rasterizer import PdfRasterizer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# Error raised for unexpected failures, per stage
STAGE_ERRORS = {
    "rasterize": RasterizationError,
    "extract": TransportError,
}

# Progress checkpoints (percent) for each stage
PROGRESS_VALIDATED = 5
PROGRESS_RASTER_START = 10
PROGRESS_RASTER_END = 40
PROGRESS_EXTRACT_START = 55
PROGRESS_EXTRACT_END = 85
PROGRESS_DONE = 100


class ProgressReporter:
    """Forwards progress to a callback, never going backwards or past 100."""

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.current = 0.0

    def report(self, percent: float):
        percent = min(100.0, max(self.current, float(percent)))
        self.current = percent
        if self.callback:
            self.callback(percent)

    def span(self, start: float, end: float) -> ProgressCallback:
        """Callback mapping a sub-stage's 0-100 onto ``start``-``end``."""
        def report_sub(percent: float):
            self.report(start + (end - start) * min(100.0, max(0.0, percent)) / 100)
        return report_sub


class RevenueStatementPipeline:
    """
    Extracts a RevenueRecord from a revenue statement PDF.

    Each call to ``run`` is independent; the pipeline holds no per-document
    state.
    """

    def __init__(
        self,
        client: VisionExtractionClient,
        rasterizer: Optional[PdfRasterizer] = None,
        parser: Optional[RevenueParser] = None,
        config: Optional[AppConfig] = None,
    ):
        self.config = config or AppConfig()
        self.client = client
        self.rasterizer = rasterizer or PdfRasterizer(
            config=self.config.raster,
            max_file_size_mb=self.config.max_file_size_mb,
        )
        self.parser = parser or RevenueParser()

    def run(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ExtractionResult:
        """
        Process one document.

        Args:
            data: PDF file content
            filename: Original file name
            content_type: Declared MIME type, if known
            on_progress: Optional callback receiving a non-decreasing percentage

        Returns:
            ExtractionResult with the validated record

        Raises:
            RevenueParserError: Any failure, with ``stage`` set
        """
        start_time = time.time()
        progress = ProgressReporter(on_progress)
        stage = "validate"

        try:
            logger.info(f"Processing {filename} ({len(data or b'')} bytes)")
            self.rasterizer.validate(data, filename, content_type)
            progress.report(PROGRESS_VALIDATED)

            stage = "rasterize"
            progress.report(PROGRESS_RASTER_START)
            images = self.rasterizer.rasterize(
                data,
                on_progress=progress.span(PROGRESS_RASTER_START, PROGRESS_RASTER_END),
            )
            pages = self.rasterizer.encode_pages(images)
            progress.report(PROGRESS_RASTER_END)

            stage = "extract"
            progress.report(PROGRESS_EXTRACT_START)
            raw_response = self._extract(pages, get_extraction_prompt())
            progress.report(PROGRESS_EXTRACT_END)

            stage = "normalize"
            record, warnings = self.parser.parse_with_warnings(raw_response)
            warnings += self.parser.check_balance(record)
            progress.report(PROGRESS_DONE)
        except RevenueParserError as e:
            if e.stage is None:
                e.stage = stage
            logger.error(f"Pipeline failed during {e.stage}: {e.message}")
            if e.detail:
                logger.debug(f"Diagnostic detail: {e.detail}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error during {stage}")
            error_cls = STAGE_ERRORS.get(stage, RevenueParserError)
            raise error_cls(
                f"Unexpected error during {stage}: {e}", stage=stage, detail=repr(e)
            ) from e

        for warning in warnings:
            logger.warning(warning)

        processing_time = time.time() - start_time
        logger.info(
            f"Extracted {len(record.line_items)} line items from {len(pages)} page(s) "
            f"in {processing_time:.2f}s"
        )

        return ExtractionResult(
            record=record,
            raw_response=raw_response,
            page_count=len(pages),
            model=getattr(self.client, "model", None),
            processing_time_seconds=processing_time,
            warnings=warnings,
        )

    def _extract(self, pages: list[str], prompt: str) -> str:
        """Call the model, retrying transient failures when configured."""
        attempts = max(1, self.config.retry_attempts)
        if attempts == 1:
            return self.client.extract(pages, prompt)

        call = retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self.config.retry_backoff_seconds, max=30),
            retry=retry_if_exception_type(TransientUnavailableError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )(self.client.extract)
        return call(pages, prompt)
