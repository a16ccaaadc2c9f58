"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Optional

from proposal_analyzer.clients import GeminiClient
from proposal_analyzer.core.config import get_settings
from proposal_analyzer.services import (
    PdfTextExtractor,
    ProposalAnalysisService,
    SlidingWindowRateLimiter,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_gemini_client() -> Optional[GeminiClient]:
    """Provide a Gemini client, or None when no API key is configured."""
    settings = _settings()
    if not settings.gemini.is_configured:
        return None
    return GeminiClient(settings.gemini)


@lru_cache()
def get_pdf_text_extractor() -> PdfTextExtractor:
    return PdfTextExtractor()


@lru_cache()
def get_rate_limiter() -> SlidingWindowRateLimiter:
    """Provide the process-wide limiter shared by every request."""
    settings = _settings()
    return SlidingWindowRateLimiter(
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
    )


def get_proposal_analysis_service() -> ProposalAnalysisService:
    """Build a proposal analysis service using configured clients."""
    settings = _settings()
    return ProposalAnalysisService(
        extractor=get_pdf_text_extractor(),
        model=get_gemini_client(),
        max_upload_bytes=settings.upload.max_upload_bytes,
    )


__all__ = [
    "get_gemini_client",
    "get_pdf_text_extractor",
    "get_proposal_analysis_service",
    "get_rate_limiter",
]
