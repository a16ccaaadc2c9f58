"""Client-side upload and analysis session."""

from .demo import DEMO_FILE, build_demo_result, build_fallback_result
from .manager import (
    AnalysisRequestManager,
    NoFileSelectedError,
    OperationCancelled,
    OperationToken,
)
from .presenter import DocumentExport, ResultPresenter, export_basename, format_file_size
from .state import LifecycleState, LifecycleStatus, TerminalEvent
from .upload import RejectionReason, SelectionResult, UploadController, UploadedFile

__all__ = [
    "DEMO_FILE",
    "AnalysisRequestManager",
    "DocumentExport",
    "LifecycleState",
    "LifecycleStatus",
    "NoFileSelectedError",
    "OperationCancelled",
    "OperationToken",
    "RejectionReason",
    "ResultPresenter",
    "SelectionResult",
    "TerminalEvent",
    "UploadController",
    "UploadedFile",
    "build_demo_result",
    "build_fallback_result",
    "export_basename",
    "format_file_size",
]
