"""
Error taxonomy for the revenue statement pipeline.

Every error carries the pipeline stage it was raised in (filled in by the
pipeline when the raising component does not know it) and a user-facing
message that is safe to show in the UI. Raw diagnostic detail such as the
model's unparsable output lives in ``detail`` and is only logged.
"""

from typing import Optional, Sequence


class RevenueParserError(Exception):
    """Base exception for all revenue parser errors."""

    user_message = "Failed to process the revenue statement."

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.detail = detail

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class InvalidInputError(RevenueParserError):
    """The uploaded document is not an acceptable PDF."""

    @property
    def user_message(self) -> str:
        return self.message


class ConfigurationError(RevenueParserError):
    """A required setting (usually the API key) is missing."""

    user_message = (
        "OpenAI API key is not configured. Set OPENAI_API_KEY in your "
        "environment or .env file and restart the app."
    )


class RasterizationError(RevenueParserError):
    """The PDF could not be rendered to page images."""

    user_message = (
        "Could not read the pages of this PDF. Make sure the file is not "
        "corrupted or password protected."
    )


class TransportError(RevenueParserError):
    """The model API request failed at the HTTP level."""

    user_message = "The AI service request failed. Please try again."

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class QuotaExceededError(TransportError):
    """Rate limit or billing quota exceeded (HTTP 429)."""

    user_message = (
        "OpenAI API quota exceeded. Please check your OpenAI account billing "
        "and usage limits at platform.openai.com, then try again."
    )


class AuthenticationError(TransportError):
    """The API key was rejected (HTTP 401)."""

    user_message = "Invalid OpenAI API key. Please check your API key configuration."


class AuthorizationError(TransportError):
    """The API key lacks permission for the request (HTTP 403)."""

    user_message = "OpenAI API access forbidden. Please verify your API key permissions."


class TransientUnavailableError(TransportError):
    """The upstream service is unavailable (5xx, connection error, timeout)."""

    user_message = (
        "OpenAI service is temporarily unavailable. Please try again in a few minutes."
    )


class EmptyResponseError(RevenueParserError):
    """The model returned no usable content."""

    user_message = "The AI service returned an empty response. Please try again."


class MalformedResponseError(RevenueParserError):
    """The model output could not be parsed as a JSON object."""

    user_message = "Failed to parse the AI response. The statement could not be read."


class IncompleteExtractionError(RevenueParserError):
    """The model output parsed but required fields are missing."""

    user_message = (
        "The AI response is missing required fields (company, period or total "
        "revenue). Try a clearer scan of the statement."
    )

    def __init__(self, message: str, *, missing_fields: Sequence[str] = (), **kwargs):
        super().__init__(message, **kwargs)
        self.missing_fields = list(missing_fields)


class ExportValidationError(RevenueParserError):
    """The record does not pass the accounting export checks."""

    def __init__(self, errors: Sequence[str], **kwargs):
        self.errors = list(errors)
        super().__init__("CDEX Export Error:\n" + "\n".join(self.errors), **kwargs)

    @property
    def user_message(self) -> str:
        return self.message
