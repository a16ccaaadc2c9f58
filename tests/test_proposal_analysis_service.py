try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import pytest

from proposal_analyzer.clients.gemini import GeminiModelError, build_analysis_prompt
from proposal_analyzer.core.errors import (
    AnalysisFailedError,
    ExtractionError,
    ServiceUnavailableError,
    UpstreamFormatError,
)
from proposal_analyzer.services import PdfTextExtractionError, ProposalAnalysisService, ProposalUpload
from proposal_analyzer.services.proposal_analysis import parse_model_analysis

ANALYSIS = {
    "executiveSummary": "A proposal. It has a scope. It has a price.",
    "keyRequirements": [],
    "pricingOverview": {
        "totalAmount": "EUR 9,500",
        "breakdown": ["Design: EUR 9,500"],
        "paymentTerms": "Net 30",
    },
    "recommendedNextSteps": ["Approve the budget"],
}


class StubExtractor:
    def __init__(self, text: str = "Proposal text", error: Exception | None = None) -> None:
        self.text = text
        self.error = error

    async def extract_text_async(self, data: bytes) -> str:
        if self.error is not None:
            raise self.error
        return self.text


class StubModel:
    def __init__(self, answer: str = "", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.calls = 0

    async def analyze_proposal(self, text: str) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.answer


def _upload(data: bytes = b"%PDF-1.4\nbody") -> ProposalUpload:
    return ProposalUpload(file_name="quote.pdf", content_type="application/pdf", data=data)


def _service(extractor=None, model=None, max_upload_bytes: int = 1024) -> ProposalAnalysisService:
    return ProposalAnalysisService(
        extractor=extractor or StubExtractor(),
        model=model,
        max_upload_bytes=max_upload_bytes,
    )


def test_parse_model_analysis_accepts_fenced_json():
    raw = "```json\n" + json.dumps(ANALYSIS) + "\n```"

    analysis = parse_model_analysis(raw)

    assert analysis.key_requirements == []
    assert analysis.pricing_overview.total_amount == "EUR 9,500"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not json at all",
        json.dumps([ANALYSIS]),
        json.dumps({**ANALYSIS, "pricingOverview": {"totalAmount": 9500}}),
        json.dumps({key: value for key, value in ANALYSIS.items() if key != "executiveSummary"}),
    ],
)
def test_parse_model_analysis_rejects_malformed_output(raw):
    with pytest.raises(UpstreamFormatError):
        parse_model_analysis(raw)


def test_analysis_prompt_embeds_text_and_expected_keys():
    prompt = build_analysis_prompt("  Total: $1 {not a placeholder}  ")

    assert "Total: $1 {not a placeholder}" in prompt
    for key in ("executiveSummary", "keyRequirements", "totalAmount", "recommendedNextSteps"):
        assert key in prompt


@pytest.mark.asyncio
async def test_analyze_attaches_metadata():
    model = StubModel(answer=json.dumps(ANALYSIS))
    service = _service(extractor=StubExtractor(text="x" * 42), model=model)

    result = await service.analyze(_upload())

    assert result.metadata.file_name == "quote.pdf"
    assert result.metadata.file_size == len(b"%PDF-1.4\nbody")
    assert result.metadata.text_length == 42
    assert result.metadata.processed_at.tzinfo is not None
    assert model.calls == 1


@pytest.mark.asyncio
async def test_unreadable_pdf_is_an_extraction_error():
    service = _service(extractor=StubExtractor(error=PdfTextExtractionError("broken xref")))

    with pytest.raises(ExtractionError) as exc_info:
        await service.analyze(_upload())

    assert exc_info.value.error_code == "UNREADABLE_PDF"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_missing_model_is_reported_after_extraction():
    service = _service(model=None)

    with pytest.raises(ServiceUnavailableError) as exc_info:
        await service.analyze(_upload())

    payload = exc_info.value.to_payload()
    assert payload["error"] == "AI_NOT_CONFIGURED"
    assert "suggestion" in payload


@pytest.mark.asyncio
async def test_model_failure_becomes_analysis_failed():
    service = _service(model=StubModel(error=GeminiModelError("quota exceeded")))

    with pytest.raises(AnalysisFailedError) as exc_info:
        await service.analyze(_upload())

    assert "quota" not in exc_info.value.message


def test_declared_type_parameters_are_ignored():
    upload = ProposalUpload(
        file_name="quote.pdf",
        content_type="application/pdf; charset=binary",
        data=b"%PDF-1.4\n",
    )

    _service().validate(upload)
