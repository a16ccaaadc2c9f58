"""Expose constructed client wrappers."""

from .analysis_api import AnalysisApiClient, AnalysisApiError
from .gemini import GeminiClient, GeminiModelError

__all__ = [
    "AnalysisApiClient",
    "AnalysisApiError",
    "GeminiClient",
    "GeminiModelError",
]
