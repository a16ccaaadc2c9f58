"""Service layer exports."""

from .pdf_text import PdfTextExtractionError, PdfTextExtractor
from .proposal_analysis import ProposalAnalysisService, ProposalUpload
from .rate_limiter import RateLimitDecision, SlidingWindowRateLimiter

__all__ = [
    "PdfTextExtractionError",
    "PdfTextExtractor",
    "ProposalAnalysisService",
    "ProposalUpload",
    "RateLimitDecision",
    "SlidingWindowRateLimiter",
]
