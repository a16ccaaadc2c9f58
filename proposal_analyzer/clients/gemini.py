"""Client wrapper for interacting with Google Gemini models."""

from __future__ import annotations

import asyncio
import logging
from textwrap import dedent
from typing import Any, Callable, Iterable

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPICallError, NotFound

from proposal_analyzer.core.config import GeminiSettings


_TEXT_FALLBACKS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-1.5-flash",
)

_SYSTEM_INSTRUCTION = (
    "You are a professional business analyst. Always respond with valid JSON "
    "only, no additional text."
)

_ANALYSIS_TEMPLATE = dedent(
    """\
    Analyze the following client proposal and extract information EXACTLY as it
    appears in the document. Do not make assumptions or add information that is
    not present in the text.

    Proposal Text:
    {text}

    INSTRUCTIONS:
    1. Executive Summary: write exactly 3-5 sentences summarizing the proposal.
    2. Key Requirements: list ALL major requirements and asks from the document.
    3. Pricing Overview: extract EXACT pricing information, amounts and terms.
    4. Recommended Next Steps: list the next steps mentioned in the proposal,
       in the order they should be executed.

    Respond with a single JSON object in exactly this format:
    {{
      "executiveSummary": string,
      "keyRequirements": [string],
      "pricingOverview": {{
        "totalAmount": string,
        "breakdown": [string],
        "paymentTerms": string
      }},
      "recommendedNextSteps": [string]
    }}
    """
)

logger = logging.getLogger(__name__)


class GeminiModelError(RuntimeError):
    """Raised when Gemini cannot fulfill a request due to configuration issues."""


class GeminiClient:
    """Ask Gemini for structured proposal analyses."""

    def __init__(self, settings: GeminiSettings) -> None:
        self._settings = settings
        # Configure the global client once per process.
        genai.configure(api_key=settings.api_key)

    async def analyze_proposal(self, text: str) -> str:
        """Return the raw model answer for the analysis prompt built from ``text``."""

        prompt = build_analysis_prompt(text)
        generation_config = {
            "temperature": self._settings.temperature,
            "max_output_tokens": self._settings.max_output_tokens,
            "response_mime_type": "application/json",
        }

        def _invoke() -> str:
            response = self._invoke_with_models(
                models=self._text_model_candidates(),
                env_var="GEMINI_MODEL_NAME",
                error_prefix="Gemini generate_content failed",
                call=lambda model: model.generate_content(
                    prompt,
                    generation_config=generation_config,
                ),
            )
            try:
                return response.text or ""
            except ValueError as exc:
                # Raised by the SDK when the candidate was blocked or has no parts.
                raise GeminiModelError(f"Gemini returned no text: {exc}") from exc

        return await asyncio.to_thread(_invoke)

    def _invoke_with_models(
        self,
        *,
        models: Iterable[str],
        env_var: str,
        error_prefix: str,
        call: Callable[[genai.GenerativeModel], Any],
    ) -> Any:
        """Try the configured model followed by fallbacks when available."""

        model_sequence = list(models)
        last_not_found: NotFound | None = None
        for index, model_name in enumerate(model_sequence):
            generative_model = genai.GenerativeModel(
                model_name,
                system_instruction=_SYSTEM_INSTRUCTION,
            )
            try:
                return call(generative_model)
            except NotFound as exc:  # pragma: no cover - network call
                last_not_found = exc
                logger.warning(
                    "Gemini model '%s' not found (attempt %d/%d); trying fallback.",
                    model_name,
                    index + 1,
                    len(model_sequence),
                )
                continue
            except GoogleAPICallError as exc:  # pragma: no cover - network call
                raise GeminiModelError(f"{error_prefix}: {exc.message}") from exc

        if last_not_found is not None:
            primary = model_sequence[0] if model_sequence else "unknown"
            raise GeminiModelError(
                "Gemini model '"
                f"{primary}"
                "' is not available. Update "
                f"{env_var} to a supported value."
            ) from last_not_found

        raise GeminiModelError(f"{error_prefix}: Unknown error invoking Gemini.")

    def _text_model_candidates(self) -> list[str]:
        return self._collect_candidates(
            self._settings.model_name,
            _TEXT_FALLBACKS,
        )

    @staticmethod
    def _collect_candidates(
        configured: str | None,
        fallbacks: tuple[str, ...],
    ) -> list[str]:
        """Return distinct model names prioritizing the configured value."""
        seen: set[str] = set()
        candidates: list[str] = []
        for name in (configured, *fallbacks):
            if not name:
                continue
            cleaned = name.strip()
            if not cleaned or cleaned in seen:
                continue
            seen.add(cleaned)
            candidates.append(cleaned)
        return candidates


def build_analysis_prompt(text: str) -> str:
    """Fill the fixed analysis instructions with the extracted proposal text."""
    return _ANALYSIS_TEMPLATE.format(text=text.strip())


__all__ = ["GeminiClient", "GeminiModelError", "build_analysis_prompt"]
