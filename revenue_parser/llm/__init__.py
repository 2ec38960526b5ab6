"""LLM module for revenue statement extraction with a vision model."""

from .client import VisionExtractionClient, classify_status
from .parser import RevenueParser, parse_llm_response

__all__ = ["VisionExtractionClient", "classify_status", "RevenueParser", "parse_llm_response"]
