"""
Typed errors raised by the analysis service.

Each error knows the HTTP status and the machine-readable code it maps to, and
carries a message that is safe to show to the caller. Diagnostic detail stays
in the server logs.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, Optional


class ProposalServiceError(Exception):
    """Base class for errors that are reported to the caller as JSON."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code: str = "ANALYSIS_FAILED"
    default_message: str = "Failed to process proposal."

    def __init__(self, message: Optional[str] = None, *, error_code: Optional[str] = None) -> None:
        self.message = message or self.default_message
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.error_code, "message": self.message}


class UserInputError(ProposalServiceError):
    """The upload itself is unacceptable (missing, wrong type, too large)."""

    status_code = HTTPStatus.BAD_REQUEST
    error_code = "INVALID_UPLOAD"
    default_message = "The uploaded file was rejected."


class UnsupportedFileTypeError(UserInputError):
    status_code = HTTPStatus.UNSUPPORTED_MEDIA_TYPE
    error_code = "UNSUPPORTED_FILE_TYPE"
    default_message = "Only PDF files are allowed."


class FileTooLargeError(UserInputError):
    error_code = "FILE_TOO_LARGE"
    default_message = "File too large. Maximum size is 10MB."


class ExtractionError(ProposalServiceError):
    """No usable text could be extracted from the PDF."""

    status_code = HTTPStatus.BAD_REQUEST
    error_code = "EMPTY_OR_IMAGE_ONLY_PDF"
    default_message = "Could not extract text from PDF."


class ServiceUnavailableError(ProposalServiceError):
    """The language model is not configured on this deployment."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    error_code = "AI_NOT_CONFIGURED"
    default_message = (
        "Gemini API key not configured. Set GEMINI_API_KEY in the environment."
    )
    suggestion = "Try the demo mode in the frontend for a sample analysis."

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["suggestion"] = self.suggestion
        return payload


class UpstreamFormatError(ProposalServiceError):
    """The model answered with something that is not a valid analysis."""

    error_code = "AI_RESPONSE_UNPARSEABLE"
    default_message = "Failed to process AI response."


class AnalysisFailedError(ProposalServiceError):
    """The model call failed or another unexpected error occurred."""


class RateLimitExceededError(Exception):
    """A client address sent too many requests within the rolling window.

    Answered with a plain-text body rather than the JSON error envelope.
    """

    message = "Too many requests from this IP, please try again later."

    def __init__(self, *, retry_after_seconds: int) -> None:
        super().__init__(self.message)
        self.retry_after_seconds = retry_after_seconds


__all__ = [
    "AnalysisFailedError",
    "ExtractionError",
    "FileTooLargeError",
    "ProposalServiceError",
    "RateLimitExceededError",
    "ServiceUnavailableError",
    "UnsupportedFileTypeError",
    "UpstreamFormatError",
    "UserInputError",
]
