"""Public schema exports."""

from .analysis import (
    AnalysisMetadata,
    AnalysisResult,
    ErrorResponse,
    HealthResponse,
    PricingOverview,
    ProposalAnalysis,
)

__all__ = [
    "AnalysisMetadata",
    "AnalysisResult",
    "ErrorResponse",
    "HealthResponse",
    "PricingOverview",
    "ProposalAnalysis",
]
