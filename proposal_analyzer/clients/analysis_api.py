"""HTTP client for the proposal analysis service."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError

from proposal_analyzer.schemas import AnalysisResult

logger = logging.getLogger(__name__)

# Codes the service uses for problems with the file itself; retrying or
# substituting a demo result would not help the user.
USER_INPUT_ERROR_CODES = frozenset(
    {
        "NO_FILE_UPLOADED",
        "TOO_MANY_FILES",
        "UNSUPPORTED_FILE_TYPE",
        "FILE_TOO_LARGE",
        "UNREADABLE_PDF",
        "EMPTY_OR_IMAGE_ONLY_PDF",
    }
)


class UploadPayload(Protocol):
    name: str
    data: bytes
    media_type: str


class AnalysisApiError(RuntimeError):
    """Raised when the analysis service cannot deliver a valid result."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.suggestion = suggestion

    @property
    def is_transport_error(self) -> bool:
        """True when the service was never reached or never answered."""
        return self.status_code is None

    @property
    def is_user_input_error(self) -> bool:
        """True when the service rejected the file itself."""
        return (
            self.status_code
            in (HTTPStatus.BAD_REQUEST, HTTPStatus.UNSUPPORTED_MEDIA_TYPE)
            and self.error_code in USER_INPUT_ERROR_CODES
        )


class AnalysisApiClient:
    """Submit proposals to ``POST /analyze-proposal`` and decode the result."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def analyze(self, upload: UploadPayload) -> AnalysisResult:
        """Upload one PDF and return the parsed analysis."""
        files = {"pdf": (upload.name, upload.data, upload.media_type)}
        try:
            async with self._client() as client:
                response = await client.post("/analyze-proposal", files=files)
        except httpx.HTTPError as exc:
            logger.info("Analysis service unreachable: %s", exc)
            raise AnalysisApiError(f"Analysis service unreachable: {exc}") from exc
        except Exception as exc:
            # InvalidURL, StreamError and custom transports raise outside HTTPError.
            logger.warning("Request to the analysis service failed: %r", exc)
            raise AnalysisApiError(f"Analysis request failed: {exc}") from exc

        if response.is_error:
            raise _error_from_response(response)

        try:
            return AnalysisResult.model_validate_json(response.content)
        except ValidationError as exc:
            raise AnalysisApiError(
                "Analysis service returned an invalid result.",
                status_code=response.status_code,
                error_code="INVALID_RESULT",
            ) from exc

    async def health(self) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.get("/health")
        response.raise_for_status()
        return response.json()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )


def _error_from_response(response: httpx.Response) -> AnalysisApiError:
    error_code: Optional[str] = None
    message = response.text.strip() or response.reason_phrase
    suggestion: Optional[str] = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error_code = body.get("error")
        message = body.get("message") or error_code or message
        suggestion = body.get("suggestion")
    return AnalysisApiError(
        message,
        status_code=response.status_code,
        error_code=error_code,
        suggestion=suggestion,
    )


__all__ = ["AnalysisApiClient", "AnalysisApiError", "USER_INPUT_ERROR_CODES"]
