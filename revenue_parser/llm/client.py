"""
OpenAI vision client for revenue statement extraction.

Sends page images plus the extraction prompt to an OpenAI-compatible
chat completions endpoint and returns the raw text answer. Parsing is left
to ``revenue_parser.llm.parser``.

Failures are classified from the HTTP status code. No retries happen here;
retrying transient failures is the caller's decision.
"""

import logging
from typing import Optional, Sequence

import requests

from revenue_parser.config import OpenAIConfig
from revenue_parser.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    EmptyResponseError,
    QuotaExceededError,
    TransientUnavailableError,
    TransportError,
)
from revenue_parser.llm.prompts import get_system_prompt

logger = logging.getLogger(__name__)


def classify_status(status_code: int, message: str = "") -> TransportError:
    """
    Map a non-200 HTTP status to the matching transport error.

    Args:
        status_code: HTTP status returned by the API
        message: Error text from the response body, kept for diagnostics

    Returns:
        The exception instance to raise
    """
    detail = f"OpenAI returned status {status_code}: {message}".rstrip(": ")
    if status_code == 429:
        error_cls = QuotaExceededError
    elif status_code == 401:
        error_cls = AuthenticationError
    elif status_code == 403:
        error_cls = AuthorizationError
    elif status_code >= 500:
        error_cls = TransientUnavailableError
    else:
        error_cls = TransportError
    return error_cls(detail, status_code=status_code, stage="extract")


def _error_message(response: requests.Response) -> str:
    """Pull the API error message out of a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500]
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message", ""))
    return str(error or "")


class VisionExtractionClient:
    """Client for the OpenAI chat completions API with image input."""

    def __init__(
        self,
        config: OpenAIConfig,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            config: OpenAI settings, including the API key
            session: HTTP session to use (a new one by default)

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not config.api_key:
            raise ConfigurationError(
                "OpenAI API key is not configured. Please set up your API key first.",
                stage="configuration",
            )
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.session = session or requests.Session()

    @property
    def model(self) -> str:
        return self.config.model

    def _get_headers(self) -> dict:
        """Get request headers with authentication."""
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _build_messages(self, images: Sequence[str], prompt: str) -> list[dict]:
        content = [{"type": "text", "text": prompt}]
        for image_base64 in images:
            content.append({
                "type": "image_url",
                "image_url": {
                    "url": f"data:image/png;base64,{image_base64}",
                    "detail": self.config.image_detail,
                },
            })
        return [
            {"role": "system", "content": get_system_prompt()},
            {"role": "user", "content": content},
        ]

    def extract(self, images: Sequence[str], prompt: str) -> str:
        """
        Send page images and prompt to the model.

        Args:
            images: Base64 encoded PNG pages in document order
            prompt: Extraction instructions

        Returns:
            The model's raw text answer

        Raises:
            TransportError: On a failed request (see ``classify_status``)
            EmptyResponseError: If the response carries no content
        """
        logger.info(f"Sending {len(images)} page(s) to {self.config.model}")

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json={
                    "model": self.config.model,
                    "messages": self._build_messages(images, prompt),
                    "temperature": self.config.temperature,
                    "max_tokens": self.config.max_tokens,
                },
                timeout=self.config.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransientUnavailableError("OpenAI request timed out", stage="extract") from e
        except requests.exceptions.ConnectionError as e:
            raise TransientUnavailableError(
                f"Failed to connect to OpenAI: {e}", stage="extract"
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"OpenAI request failed: {e}", stage="extract") from e

        if response.status_code != 200:
            raise classify_status(response.status_code, _error_message(response))

        if not response.content:
            raise EmptyResponseError("No response from OpenAI", stage="extract")

        try:
            result = response.json()
        except ValueError as e:
            raise EmptyResponseError(
                "OpenAI response body is not JSON", stage="extract", detail=response.text[:500]
            ) from e

        choices = result.get("choices") if isinstance(result, dict) else None
        if not choices:
            raise EmptyResponseError("No response from OpenAI", stage="extract")

        content = (choices[0].get("message") or {}).get("content")
        if not content or not str(content).strip():
            raise EmptyResponseError("No response from OpenAI", stage="extract")

        usage = result.get("usage") or {}
        if usage:
            logger.info(
                f"OpenAI usage: {usage.get('prompt_tokens')} prompt tokens, "
                f"{usage.get('completion_tokens')} completion tokens"
            )
        return str(content)

    def check_connection(self) -> tuple[bool, str]:
        """
        Verify the API key works by listing models.

        Returns:
            Tuple of (is_valid, message)
        """
        try:
            response = self.session.get(
                f"{self.base_url}/models",
                headers=self._get_headers(),
                timeout=10,
            )
        except requests.exceptions.RequestException as e:
            return False, f"Cannot connect to OpenAI: {e}"

        if response.status_code == 200:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            data = payload.get("data") if isinstance(payload, dict) else None
            if not isinstance(data, list):
                return False, f"Unexpected response from {self.base_url}/models"
            models = [m.get("id", "") for m in data if isinstance(m, dict)]
            if self.config.model in models:
                return True, f"OpenAI connected. Model {self.config.model} is available."
            return True, (
                f"OpenAI connected, but model {self.config.model} was not listed "
                f"({len(models)} models available)."
            )

        error = classify_status(response.status_code, _error_message(response))
        return False, error.user_message
