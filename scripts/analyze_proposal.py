#!/usr/bin/env python
"""Command-line client that analyzes a proposal through the analysis service."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from proposal_analyzer.clients import AnalysisApiClient  # noqa: E402
from proposal_analyzer.core.config import get_settings  # noqa: E402
from proposal_analyzer.core.logging import configure_logging  # noqa: E402
from proposal_analyzer.session import (  # noqa: E402
    AnalysisRequestManager,
    LifecycleStatus,
    ResultPresenter,
    UploadController,
    UploadedFile,
)

EXIT_OK = 0
EXIT_ANALYSIS_ERROR = 1
EXIT_REJECTED = 2


def _print_notification(level: str, message: str) -> None:
    print(f"[{level}] {message}")


def _build_session(api_url: str | None) -> tuple[UploadController, AnalysisRequestManager]:
    settings = get_settings()
    backend = AnalysisApiClient(
        base_url=api_url or settings.client.analysis_api_url,
        timeout=settings.client.request_timeout_seconds,
    )
    manager = AnalysisRequestManager(
        backend,
        fallback_delay=settings.client.fallback_delay_seconds,
        demo_delay=settings.client.demo_delay_seconds,
        notifier=_print_notification,
    )
    controller = UploadController(
        manager,
        max_upload_bytes=settings.upload.max_upload_bytes,
    )
    return controller, manager


async def run(args: argparse.Namespace) -> int:
    controller, manager = _build_session(args.api_url)
    presenter = ResultPresenter()

    if args.demo:
        event = await controller.run_demo()
    else:
        selection = controller.select_file(UploadedFile.from_path(args.pdf))
        if not selection.accepted:
            return EXIT_REJECTED
        print(presenter.render(manager.state))
        event = await controller.analyze()

    print()
    print(presenter.render(manager.state))
    if event.status is LifecycleStatus.ERRORED or event.result is None:
        return EXIT_ANALYSIS_ERROR

    export_dir = args.output_dir or get_settings().client.export_dir
    if args.export_json:
        path = presenter.export_as_json(event.result, export_dir)
        print(f"\nAnalysis exported as JSON to {path}")
    if args.export_document:
        export = presenter.export_as_document(event.result, export_dir)
        if export.opened:
            print(
                f"\nReport saved to {export.path} and opened in your browser. "
                "Use Ctrl+P (Cmd+P on Mac) to save as PDF."
            )
        else:
            print(f"\nReport saved to {export.path}. Open it and print to save as PDF.")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Upload a PDF proposal for AI analysis, or run the demo analysis."
    )
    parser.add_argument(
        "pdf",
        nargs="?",
        type=Path,
        help="Proposal PDF to analyze. Required unless --demo is given.",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Show the canned demo analysis without contacting the service.",
    )
    parser.add_argument(
        "--api-url",
        dest="api_url",
        default=None,
        help="Override the analysis service base URL (ANALYSIS_API_URL).",
    )
    parser.add_argument(
        "--json",
        dest="export_json",
        action="store_true",
        help="Export the analysis as JSON.",
    )
    parser.add_argument(
        "--report",
        dest="export_document",
        action="store_true",
        help="Open the printable HTML report, or save it when no browser is available.",
    )
    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        type=Path,
        default=None,
        help="Directory for exported files (EXPORT_DIR).",
    )

    args = parser.parse_args(argv)
    if not args.demo and args.pdf is None:
        parser.error("a PDF path is required unless --demo is given")
    if args.pdf is not None and not args.pdf.is_file():
        parser.error(f"{args.pdf} does not exist")

    configure_logging(get_settings().log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
