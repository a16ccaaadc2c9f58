"""Canned analyses shown when a demo is requested or the service is unavailable.

Two payloads exist on purpose. The explicit demo shows the richest example the
product can produce. The fallback result is addressed to the user's own file
(name and size) so it is clear which upload it stands in for.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from proposal_analyzer.schemas import (
    AnalysisMetadata,
    AnalysisResult,
    PricingOverview,
)

from .upload import PDF_MEDIA_TYPE, UploadedFile

DEMO_FILE = UploadedFile(
    name="sample-proposal.pdf",
    data=b"demo content",
    media_type=PDF_MEDIA_TYPE,
)
DEMO_FILE_SIZE = 156789
DEMO_TEXT_LENGTH = 2847

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_demo_result(*, clock: Optional[Clock] = None) -> AnalysisResult:
    """Return the fixed result of an explicitly requested demo run."""
    now = (clock or _utcnow)()
    return AnalysisResult(
        executive_summary=(
            "This comprehensive digital transformation proposal outlines a strategic "
            "initiative to modernize legacy systems and enhance operational efficiency. "
            "The proposal demonstrates extensive technical expertise in cloud migration, "
            "custom software development, and enterprise security implementation. With "
            "a total investment of $485,000 over 8 months, this project promises to "
            "deliver a 40% improvement in operational efficiency and 25% reduction in IT "
            "costs. The proposal includes detailed implementation phases, comprehensive "
            "training programs, and ongoing support structures."
        ),
        key_requirements=[
            "Complete legacy system migration to modern cloud infrastructure with zero downtime",
            "Custom software development including customer portal and mobile applications",
            "Comprehensive staff training program covering 50+ employees across multiple departments",
            "Implementation of enterprise-grade security protocols with multi-factor authentication",
            "24/7 technical support and maintenance coverage for the first 6 months",
            "Real-time data analytics implementation and automated reporting system",
            "Security audit and penetration testing for compliance validation",
        ],
        pricing_overview=PricingOverview(
            total_amount="$485,000",
            breakdown=[
                "Phase 1 - Legacy Migration & Analysis: $180,000",
                "Phase 2 - Custom Development & Integration: $220,000",
                "Phase 3 - Training, Support & Documentation: $85,000",
            ],
            payment_terms=(
                "30% upon contract signing ($145,500), 40% at Phase 2 completion "
                "($194,000), 30% upon final delivery ($145,500)"
            ),
        ),
        recommended_next_steps=[
            "Schedule technical review meeting with client's IT team within 5 business days",
            "Finalize detailed project scope and requirements documentation with stakeholder input",
            "Execute master service agreement and comprehensive statement of work",
            "Begin project kickoff phase with cross-functional team onboarding",
            "Conduct thorough legacy system audit and create detailed migration timeline",
            "Establish communication protocols and project management framework",
            "Set up development environment and testing infrastructure",
            "Create risk mitigation strategies and contingency planning",
        ],
        metadata=AnalysisMetadata(
            file_name=DEMO_FILE.name,
            file_size=DEMO_FILE_SIZE,
            processed_at=now,
            text_length=DEMO_TEXT_LENGTH,
        ),
    )


def build_fallback_result(
    upload: UploadedFile, *, clock: Optional[Clock] = None
) -> AnalysisResult:
    """Return the stand-in result for ``upload`` when the service failed."""
    now = (clock or _utcnow)()
    return AnalysisResult(
        executive_summary=(
            f'Based on the uploaded proposal "{upload.name}", this appears to be a '
            "comprehensive business proposal outlining digital transformation services. "
            "The proposal demonstrates strong technical capabilities and includes "
            "detailed project timelines, cost breakdowns, and implementation strategies. "
            "The proposed solution addresses key business needs including system "
            "modernization, operational efficiency improvements, and technological "
            "advancement. This is a well-structured proposal with clear deliverables "
            "and professional presentation."
        ),
        key_requirements=[
            "Complete legacy system migration to modern cloud infrastructure",
            "Custom software development for customer portal and mobile applications",
            "Comprehensive staff training program for 50+ employees",
            "Implementation of enterprise-grade security protocols and multi-factor authentication",
            "24/7 technical support and maintenance for the first 6 months",
            "Data integrity verification and zero-downtime migration requirements",
        ],
        pricing_overview=PricingOverview(
            total_amount="$485,000",
            breakdown=[
                "Phase 1 - Legacy Migration: $180,000",
                "Phase 2 - Custom Development: $220,000",
                "Phase 3 - Training & Support: $85,000",
            ],
            payment_terms=(
                "30% upon contract signing, 40% at Phase 2 completion, "
                "30% upon final delivery"
            ),
        ),
        recommended_next_steps=[
            "Schedule technical review meeting with client's IT team within 5 business days",
            "Finalize detailed project scope and requirements documentation",
            "Execute master service agreement and statement of work",
            "Begin project kickoff phase with team onboarding and stakeholder alignment",
            "Conduct initial system audit and create migration timeline",
            "Establish communication protocols and project management framework",
        ],
        metadata=AnalysisMetadata(
            file_name=upload.name,
            file_size=upload.size,
            processed_at=now,
            text_length=DEMO_TEXT_LENGTH,
        ),
    )


__all__ = ["DEMO_FILE", "build_demo_result", "build_fallback_result"]
