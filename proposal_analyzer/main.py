"""
FastAPI application entrypoint for the proposal analysis service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from proposal_analyzer.api.routes import router as api_router
from proposal_analyzer.core.config import AppSettings, get_settings
from proposal_analyzer.core.errors import (
    FileTooLargeError,
    ProposalServiceError,
    RateLimitExceededError,
)
from proposal_analyzer.core.logging import configure_logging

logger = logging.getLogger(__name__)

# Allowance for multipart boundaries and part headers around the file bytes.
_MULTIPART_OVERHEAD_BYTES = 64 * 1024


async def _handle_service_error(_: Request, exc: ProposalServiceError) -> JSONResponse:
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_payload())


async def _handle_rate_limit(_: Request, exc: RateLimitExceededError) -> PlainTextResponse:
    return PlainTextResponse(
        exc.message,
        status_code=HTTPStatus.TOO_MANY_REQUESTS,
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


async def _handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        code = HTTPStatus(exc.status_code).name
    except ValueError:
        code = "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": code, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error processing %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content={"error": "ANALYSIS_FAILED", "message": "Internal server error."},
    )


def _install_upload_guard(app: FastAPI, settings: AppSettings) -> None:
    """Refuse oversized uploads from their headers, before the body is read."""
    limit = settings.upload.max_upload_bytes

    @app.middleware("http")
    async def reject_oversized_uploads(request: Request, call_next) -> Response:
        if request.method == "POST" and request.url.path.endswith("/analyze-proposal"):
            declared = request.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > limit + _MULTIPART_OVERHEAD_BYTES:
                logger.info(
                    "Rejected upload of %s bytes from its Content-Length header.", declared
                )
                error = FileTooLargeError()
                return JSONResponse(
                    status_code=int(error.status_code), content=error.to_payload()
                )
        return await call_next(request)


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Proposal Analyzer",
        version="0.1.0",
        description="Upload a PDF proposal and receive a structured AI analysis.",
    )
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.frontend_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    _install_upload_guard(app, settings)

    app.add_exception_handler(ProposalServiceError, _handle_service_error)
    app.add_exception_handler(RateLimitExceededError, _handle_rate_limit)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(Exception, _handle_unexpected)

    app.include_router(api_router, prefix="/api")

    if settings.gemini.is_configured:
        logger.info("Gemini API configured with model %s.", settings.gemini.model_name)
    else:
        logger.warning("Gemini API key not provided; running in demo mode only.")
    return app


app = create_app()

__all__ = ["app", "create_app"]
