"""Rendering and export of analysis results.

Everything here is derived from in-memory state; nothing talks to the network.
"""

from __future__ import annotations

import json
import logging
import webbrowser
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from textwrap import indent
from typing import Callable, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from proposal_analyzer.schemas import AnalysisResult

from .state import LifecycleState, LifecycleStatus

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
REPORT_TEMPLATE = "analysis_report.html"

# Receives the saved report file and reports whether it could be shown to the user.
DocumentViewer = Callable[[Path], bool]

logger = logging.getLogger(__name__)


def format_file_size(num_bytes: int) -> str:
    """Human readable size, e.g. ``1.5 MB``."""
    if num_bytes <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(num_bytes)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def export_basename(result: AnalysisResult) -> str:
    """File stem for exports; only the last component of the source name is used."""
    # The name comes from the service, so directory parts of either flavour are dropped.
    name = PurePosixPath(result.metadata.file_name.replace("\\", "/")).name
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    if name in {"", ".", ".."}:
        name = "proposal"
    return f"analysis-{name}"


def open_in_browser(report: Path) -> bool:
    """Open the saved ``report`` in a new browser tab."""
    try:
        return webbrowser.open_new_tab(Path(report).resolve().as_uri())
    except webbrowser.Error:
        logger.info("No browser available to open the analysis report.")
        return False


@dataclass(frozen=True, slots=True)
class DocumentExport:
    """Where the printable report was written and whether it was shown."""

    opened: bool
    path: Path


class ResultPresenter:
    """Render the session state and export analyses to files."""

    def __init__(self, *, viewer: Optional[DocumentViewer] = None) -> None:
        self._viewer = viewer or open_in_browser
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["filesize"] = format_file_size

    def render(self, state: LifecycleState) -> str:
        """Plain-text view of the current state."""
        if state.status is LifecycleStatus.IDLE:
            return "No proposal selected."
        if state.status is LifecycleStatus.UPLOADING and state.file is not None:
            return f"Ready to analyze {state.file.name} ({format_file_size(state.file.size)})."
        if state.loading:
            name = state.file.name if state.file else "proposal"
            return f"Analyzing {name}..."
        if state.error is not None:
            return f"Error: {state.error}"
        if state.result is None:
            return "No analysis available."

        header = "Analysis Results"
        if state.status is LifecycleStatus.FAILED_OVER_TO_DEMO:
            header += " (demo mode: the analysis service was unavailable)"
        return "\n".join([header, "", self.render_result(state.result)])

    def render_result(self, result: AnalysisResult) -> str:
        pricing = result.pricing_overview
        lines = [
            "Executive Summary",
            indent(result.executive_summary, "  "),
            "",
            "Key Requirements",
            *(f"  - {item}" for item in result.key_requirements),
            "",
            f"Pricing Overview: {pricing.total_amount}",
            *(f"  - {item}" for item in pricing.breakdown),
            f"  Payment terms: {pricing.payment_terms}",
            "",
            "Recommended Next Steps",
            *(
                f"  {index}. {step}"
                for index, step in enumerate(result.recommended_next_steps, start=1)
            ),
            "",
            (
                f"Source: {result.metadata.file_name} "
                f"({format_file_size(result.metadata.file_size)}, "
                f"{result.metadata.text_length} characters, "
                f"processed {result.metadata.processed_at.isoformat()})"
            ),
        ]
        return "\n".join(lines)

    @staticmethod
    def to_json(result: AnalysisResult) -> str:
        """Serialize ``result`` exactly as the service returns it."""
        return json.dumps(result.model_dump(mode="json", by_alias=True), indent=2)

    def export_as_json(self, result: AnalysisResult, directory: Path) -> Path:
        target = Path(directory) / f"{export_basename(result)}.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_json(result), encoding="utf-8")
        logger.info("Analysis exported as JSON to %s", target)
        return target

    def render_document(self, result: AnalysisResult) -> str:
        """Fill the printable HTML report template."""
        return self._env.get_template(REPORT_TEMPLATE).render(result=result)

    def export_as_document(self, result: AnalysisResult, directory: Path) -> DocumentExport:
        """Save the report with the other exports and try to open it for printing."""
        target = Path(directory) / f"{export_basename(result)}.html"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.render_document(result), encoding="utf-8")
        if self._viewer(target):
            logger.info("Analysis report %s opened; print it to save as PDF.", target)
            return DocumentExport(opened=True, path=target)

        logger.info("Analysis report saved to %s; open it and print to save as PDF.", target)
        return DocumentExport(opened=False, path=target)


__all__ = [
    "DocumentExport",
    "DocumentViewer",
    "ResultPresenter",
    "export_basename",
    "format_file_size",
    "open_in_browser",
]
