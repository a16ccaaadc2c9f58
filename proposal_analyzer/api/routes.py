"""
FastAPI routes for the proposal analysis service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from proposal_analyzer.core.errors import UserInputError
from proposal_analyzer.dependencies import (
    enforce_rate_limit,
    get_proposal_analysis_service,
)
from proposal_analyzer.schemas import AnalysisResult, ErrorResponse, HealthResponse
from proposal_analyzer.services import ProposalAnalysisService, ProposalUpload

router = APIRouter()
logger = logging.getLogger(__name__)

UPLOAD_FIELD = "pdf"


@router.get("/health", status_code=HTTPStatus.OK, response_model=HealthResponse)
async def healthcheck(
    service: Annotated[ProposalAnalysisService, Depends(get_proposal_analysis_service)],
) -> HealthResponse:
    """Simple health endpoint for monitoring."""
    return HealthResponse(ai_configured=service.ai_configured)


@router.post(
    "/analyze-proposal",
    status_code=HTTPStatus.OK,
    response_model=AnalysisResult,
    dependencies=[Depends(enforce_rate_limit)],
    responses={
        HTTPStatus.BAD_REQUEST: {"model": ErrorResponse},
        HTTPStatus.UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
        HTTPStatus.TOO_MANY_REQUESTS: {"description": "Rate limit exceeded."},
        HTTPStatus.INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
        HTTPStatus.SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
)
async def analyze_proposal(
    request: Request,
    service: Annotated[ProposalAnalysisService, Depends(get_proposal_analysis_service)],
) -> AnalysisResult:
    """Extract the text of one uploaded PDF and return its structured analysis."""
    async with request.form() as form:
        uploads = [
            item for item in form.getlist(UPLOAD_FIELD) if isinstance(item, UploadFile)
        ]
        if not uploads:
            raise UserInputError("No PDF file uploaded.", error_code="NO_FILE_UPLOADED")
        if len(uploads) > 1:
            raise UserInputError(
                "Only one PDF file may be uploaded per request.",
                error_code="TOO_MANY_FILES",
            )

        upload = uploads[0]
        data = await upload.read()
        proposal = ProposalUpload(
            file_name=upload.filename or "proposal.pdf",
            content_type=upload.content_type,
            data=data,
        )

    logger.info(
        "Received proposal '%s' (%d bytes, %s).",
        proposal.file_name,
        proposal.size,
        proposal.content_type,
    )
    return await service.analyze(proposal)


__all__ = ["router"]
