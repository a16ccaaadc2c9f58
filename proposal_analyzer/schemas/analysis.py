"""
Pydantic models for proposal analysis requests and responses.

Attributes are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PricingOverview(_CamelModel):
    """Pricing information exactly as stated in the proposal."""

    total_amount: str = Field(
        ..., description="Total amount with currency, kept as the document states it."
    )
    breakdown: list[str] = Field(
        default_factory=list, description="Itemized pricing components."
    )
    payment_terms: str = Field(..., description="Payment terms as stated.")


class ProposalAnalysis(_CamelModel):
    """Structured analysis the language model must return."""

    executive_summary: str = Field(..., description="Three to five sentence summary.")
    key_requirements: list[str] = Field(
        ..., description="Major requirements and asks from the document."
    )
    pricing_overview: PricingOverview
    recommended_next_steps: list[str] = Field(
        ..., description="Next steps in execution order."
    )


class AnalysisMetadata(_CamelModel):
    """Provenance of an analysis; not derivable from the result alone."""

    file_name: str
    file_size: int = Field(..., ge=0, description="Size of the uploaded file in bytes.")
    processed_at: datetime
    text_length: int = Field(..., ge=0, description="Characters of extracted text.")


class AnalysisResult(ProposalAnalysis):
    """Full analysis returned to the caller."""

    metadata: AnalysisMetadata


class ErrorResponse(_CamelModel):
    """Error envelope returned for rejected or failed analyses."""

    error: str
    message: Optional[str] = None
    suggestion: Optional[str] = None


class HealthResponse(_CamelModel):
    status: str = "OK"
    message: str = "Server is running"
    ai_configured: bool = False


__all__ = [
    "AnalysisMetadata",
    "AnalysisResult",
    "ErrorResponse",
    "HealthResponse",
    "PricingOverview",
    "ProposalAnalysis",
]
