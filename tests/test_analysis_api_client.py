try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from proposal_analyzer.clients import AnalysisApiClient, AnalysisApiError
from proposal_analyzer.session import UploadedFile, build_demo_result

UPLOAD = UploadedFile(name="rfp-response.pdf", data=b"%PDF-1.4 body")

pytestmark = pytest.mark.anyio


def _client(handler) -> AnalysisApiClient:
    return AnalysisApiClient(
        base_url="http://analysis.test/api/",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


async def test_analyze_posts_pdf_field_and_decodes_result():
    expected = build_demo_result()
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=expected.model_dump(mode="json", by_alias=True))

    result = await _client(handler).analyze(UPLOAD)

    assert result == expected
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/api/analyze-proposal"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="pdf"; filename="rfp-response.pdf"' in body
    assert b"%PDF-1.4 body" in body


async def test_user_input_rejection_is_flagged():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "error": "EMPTY_OR_IMAGE_ONLY_PDF",
                "message": "No text could be extracted from the PDF.",
            },
        )

    with pytest.raises(AnalysisApiError) as exc_info:
        await _client(handler).analyze(UPLOAD)

    error = exc_info.value
    assert error.status_code == 400
    assert error.error_code == "EMPTY_OR_IMAGE_ONLY_PDF"
    assert error.message == "No text could be extracted from the PDF."
    assert error.is_user_input_error
    assert not error.is_transport_error


async def test_unconfigured_service_is_not_a_user_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            503,
            json={
                "error": "AI_NOT_CONFIGURED",
                "message": "AI service not configured",
                "suggestion": "Try the demo mode in the frontend for a sample analysis.",
            },
        )

    with pytest.raises(AnalysisApiError) as exc_info:
        await _client(handler).analyze(UPLOAD)

    assert exc_info.value.suggestion.startswith("Try the demo mode")
    assert not exc_info.value.is_user_input_error


async def test_rate_limited_plain_text_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429, text="Too many requests from this IP, please try again later."
        )

    with pytest.raises(AnalysisApiError) as exc_info:
        await _client(handler).analyze(UPLOAD)

    assert exc_info.value.status_code == 429
    assert exc_info.value.error_code is None
    assert "Too many requests" in exc_info.value.message


async def test_transport_failure_is_reported_without_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AnalysisApiError) as exc_info:
        await _client(handler).analyze(UPLOAD)

    assert exc_info.value.is_transport_error
    assert not exc_info.value.is_user_input_error


async def test_malformed_success_body_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"executiveSummary": "partial"})

    with pytest.raises(AnalysisApiError) as exc_info:
        await _client(handler).analyze(UPLOAD)

    assert exc_info.value.error_code == "INVALID_RESULT"


async def test_health_returns_payload():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/health"
        return httpx.Response(
            200, json={"status": "OK", "message": "Server is running", "aiConfigured": False}
        )

    assert (await _client(handler).health())["aiConfigured"] is False


async def test_non_httpx_transport_failure_is_reported_as_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise ValueError("malformed transport state")

    with pytest.raises(AnalysisApiError) as exc_info:
        await _client(handler).analyze(UPLOAD)

    assert exc_info.value.is_transport_error
    assert isinstance(exc_info.value.__cause__, ValueError)
