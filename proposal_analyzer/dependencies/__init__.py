"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_gemini_client,
    get_pdf_text_extractor,
    get_proposal_analysis_service,
    get_rate_limiter,
)
from .rate_limit import enforce_rate_limit

__all__ = [
    "enforce_rate_limit",
    "get_gemini_client",
    "get_pdf_text_extractor",
    "get_proposal_analysis_service",
    "get_rate_limiter",
]
