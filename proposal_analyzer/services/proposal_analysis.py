"""Service that turns an uploaded PDF proposal into a structured analysis."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from proposal_analyzer.clients.gemini import GeminiModelError
from proposal_analyzer.core.errors import (
    AnalysisFailedError,
    ExtractionError,
    FileTooLargeError,
    ServiceUnavailableError,
    UnsupportedFileTypeError,
    UpstreamFormatError,
)
from proposal_analyzer.schemas import AnalysisMetadata, AnalysisResult, ProposalAnalysis
from proposal_analyzer.services.pdf_text import (
    PdfTextExtractionError,
    PdfTextExtractor,
    looks_like_pdf,
)

PDF_MEDIA_TYPE = "application/pdf"

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

logger = logging.getLogger(__name__)


class ProposalModel(Protocol):
    async def analyze_proposal(self, text: str) -> str: ...


@dataclass(slots=True)
class ProposalUpload:
    """A single uploaded file held in request memory only."""

    file_name: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ProposalAnalysisService:
    """Validate an upload, extract its text and obtain a model analysis."""

    def __init__(
        self,
        *,
        extractor: PdfTextExtractor,
        model: Optional[ProposalModel],
        max_upload_bytes: int,
    ) -> None:
        self._extractor = extractor
        self._model = model
        self._max_upload_bytes = max_upload_bytes

    @property
    def ai_configured(self) -> bool:
        return self._model is not None

    async def analyze(self, upload: ProposalUpload) -> AnalysisResult:
        self.validate(upload)

        try:
            text = await self._extractor.extract_text_async(upload.data)
        except PdfTextExtractionError as exc:
            logger.warning(
                "Unreadable PDF '%s' (%d bytes): %s", upload.file_name, upload.size, exc
            )
            raise ExtractionError(
                "The uploaded file could not be read as a PDF.",
                error_code="UNREADABLE_PDF",
            ) from exc

        if not text.strip():
            logger.info(
                "No extractable text in '%s' (%d bytes); skipping model analysis.",
                upload.file_name,
                upload.size,
            )
            raise ExtractionError(
                "Could not extract text from PDF. Scanned or image-only documents "
                "are not supported."
            )

        if self._model is None:
            logger.warning(
                "Analysis requested for '%s' but no Gemini API key is configured.",
                upload.file_name,
            )
            raise ServiceUnavailableError()

        try:
            raw = await self._model.analyze_proposal(text)
        except GeminiModelError as exc:
            logger.error(
                "Gemini analysis failed for '%s' (%d bytes): %s",
                upload.file_name,
                upload.size,
                exc,
            )
            raise AnalysisFailedError() from exc
        except Exception as exc:
            logger.exception(
                "Unexpected Gemini failure for '%s' (%d bytes): %r",
                upload.file_name,
                upload.size,
                exc,
            )
            raise AnalysisFailedError() from exc

        analysis = parse_model_analysis(raw, file_name=upload.file_name)
        metadata = AnalysisMetadata(
            file_name=upload.file_name,
            file_size=upload.size,
            processed_at=datetime.now(timezone.utc),
            text_length=len(text),
        )
        logger.info(
            "Analyzed '%s' (%d bytes, %d characters of text).",
            upload.file_name,
            upload.size,
            len(text),
        )
        return AnalysisResult(**analysis.model_dump(), metadata=metadata)

    def validate(self, upload: ProposalUpload) -> None:
        """Reject uploads before any extraction work is done."""
        if (upload.content_type or "").split(";")[0].strip().lower() != PDF_MEDIA_TYPE:
            logger.info(
                "Rejected '%s': declared type %r is not a PDF.",
                upload.file_name,
                upload.content_type,
            )
            raise UnsupportedFileTypeError()

        if upload.size > self._max_upload_bytes:
            logger.info(
                "Rejected '%s': %d bytes exceeds the %d byte limit.",
                upload.file_name,
                upload.size,
                self._max_upload_bytes,
            )
            raise FileTooLargeError(
                f"File too large. Maximum size is {_format_limit(self._max_upload_bytes)}."
            )

        if not looks_like_pdf(upload.data):
            logger.info("Rejected '%s': missing PDF header.", upload.file_name)
            raise ExtractionError(
                "The uploaded file is not a valid PDF document.",
                error_code="UNREADABLE_PDF",
            )


def parse_model_analysis(raw: str, *, file_name: str = "") -> ProposalAnalysis:
    """Parse the model answer, refusing anything that is not a full analysis."""
    payload = raw.strip()
    fenced = _CODE_FENCE.match(payload)
    if fenced:
        payload = fenced.group(1)

    try:
        decoded: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.error(
            "Gemini returned non-JSON output for '%s' (%d characters).",
            file_name,
            len(raw),
        )
        raise UpstreamFormatError() from exc

    if not isinstance(decoded, dict):
        logger.error("Gemini returned a JSON %s for '%s'.", type(decoded).__name__, file_name)
        raise UpstreamFormatError()

    try:
        return ProposalAnalysis.model_validate(decoded)
    except ValidationError as exc:
        logger.error(
            "Gemini output for '%s' does not match the analysis shape: %s",
            file_name,
            exc.errors(include_input=False),
        )
        raise UpstreamFormatError() from exc


def _format_limit(num_bytes: int) -> str:
    megabytes = num_bytes / (1024 * 1024)
    if megabytes.is_integer():
        return f"{int(megabytes)}MB"
    return f"{megabytes:.1f}MB"


__all__ = [
    "PDF_MEDIA_TYPE",
    "ProposalAnalysisService",
    "ProposalModel",
    "ProposalUpload",
    "parse_model_analysis",
]
