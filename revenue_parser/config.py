"""
Configuration module for the Revenue Statement Parser.

Handles settings for the OpenAI vision model, PDF rendering and
application-wide limits. The environment is only read by ``load_config``,
which the entry point calls once; core components receive their config
explicitly.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from revenue_parser.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class OpenAIConfig:
    """Configuration for the OpenAI-compatible vision API."""
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o"
    api_key: str = ""
    temperature: float = 0.01  # Near-deterministic extraction
    max_tokens: int = 2000
    timeout: int = 120  # Seconds
    image_detail: str = "high"

    def validate_api_key(self) -> tuple[bool, str]:
        """Validate the OpenAI API key is set."""
        if not self.api_key:
            return False, (
                "OpenAI API key not set.\n"
                "Set it via environment variable: OPENAI_API_KEY=your_key\n"
                "Or add it to a .env file in the project directory."
            )
        if len(self.api_key) < 20:
            return False, "OpenAI API key appears to be invalid (too short)"
        return True, "OpenAI API key is configured"


@dataclass
class RasterConfig:
    """Configuration for rendering PDF pages to images."""
    dpi: int = 144  # 2x the PDF's 72 dpi user space
    max_image_size: int = 2048  # Longest side sent to the model
    poppler_path: Optional[str] = None

    @staticmethod
    def find_poppler() -> Optional[str]:
        """Return the directory holding poppler's pdftoppm, if on PATH."""
        pdftoppm = shutil.which("pdftoppm")
        if pdftoppm:
            return os.path.dirname(pdftoppm)
        return None


@dataclass
class AppConfig:
    """Main application configuration."""
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    raster: RasterConfig = field(default_factory=RasterConfig)

    # Processing settings
    max_file_size_mb: int = 20

    # Caller-level retry of transient model failures; 1 means no retry
    retry_attempts: int = 1
    retry_backoff_seconds: float = 2.0

    # Seed for the owner interest jitter; None uses a fresh random source
    jitter_seed: Optional[int] = None

    # Excel export settings
    excel_currency_format: str = '"$"#,##0.00'

    log_level: str = "INFO"

    def require_api_key(self) -> str:
        """Return the API key or raise before any network call is made."""
        is_valid, message = self.openai.validate_api_key()
        if not self.openai.api_key:
            raise ConfigurationError(message, stage="configuration")
        if not is_valid:
            logger.warning(message)
        return self.openai.api_key


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", stage="configuration")


def load_config(dotenv: bool = True, **overrides) -> AppConfig:
    """
    Build the application configuration from the environment.

    Args:
        dotenv: Whether to load a ``.env`` file first
        **overrides: AppConfig attributes to set after loading

    Returns:
        A new AppConfig instance
    """
    if dotenv:
        load_dotenv()

    openai_config = OpenAIConfig(
        api_key=os.getenv("OPENAI_API_KEY", ""),
        base_url=os.getenv("OPENAI_BASE_URL", OpenAIConfig.base_url),
        model=os.getenv("OPENAI_MODEL", OpenAIConfig.model),
    )
    raster_config = RasterConfig(poppler_path=RasterConfig.find_poppler())

    config = AppConfig(
        openai=openai_config,
        raster=raster_config,
        max_file_size_mb=_int_env("REVENUE_PARSER_MAX_FILE_MB", AppConfig.max_file_size_mb),
        retry_attempts=max(1, _int_env("REVENUE_PARSER_RETRY_ATTEMPTS", AppConfig.retry_attempts)),
        log_level=os.getenv("REVENUE_PARSER_LOG_LEVEL", AppConfig.log_level).upper(),
    )

    for key, value in overrides.items():
        if not hasattr(config, key):
            raise ValueError(f"Unknown config option: {key}")
        setattr(config, key, value)
    return config
