"""Selection of the single PDF a session works on."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .manager import AnalysisRequestManager, Notifier
    from .state import TerminalEvent

PDF_MEDIA_TYPE = "application/pdf"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """A selected file: immutable bytes plus the name and declared type."""

    name: str
    data: bytes
    media_type: str = PDF_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadedFile":
        """Read a file from disk, declaring the type its extension suggests."""
        file_path = Path(path)
        media_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            data=file_path.read_bytes(),
            media_type=media_type or "application/octet-stream",
        )

    def __repr__(self) -> str:
        return f"UploadedFile(name={self.name!r}, size={self.size}, media_type={self.media_type!r})"


class RejectionReason(str, Enum):
    NO_FILE = "no_file"
    TOO_MANY_FILES = "too_many_files"
    WRONG_TYPE = "wrong_type"
    TOO_LARGE = "too_large"


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """Outcome of offering one or more files to the controller."""

    accepted: bool
    file: Optional[UploadedFile] = None
    reason: Optional[RejectionReason] = None


_REJECTION_MESSAGES = {
    RejectionReason.NO_FILE: "Please upload a PDF file",
    RejectionReason.TOO_MANY_FILES: "Please upload a single PDF file",
    RejectionReason.WRONG_TYPE: "Please upload a PDF file",
    RejectionReason.TOO_LARGE: "File too large. Maximum size is {limit_mb:g}MB.",
}


class UploadController:
    """Own the selected file and hand it to the request manager.

    Only one PDF of at most ``max_upload_bytes`` is accepted at a time. This
    is a convenience check for the user; the service validates again.
    """

    def __init__(
        self,
        manager: "AnalysisRequestManager",
        *,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        notifier: Optional["Notifier"] = None,
    ) -> None:
        self._manager = manager
        self._max_upload_bytes = max_upload_bytes
        self._notify = notifier or manager.notify

    @property
    def selected_file(self) -> Optional[UploadedFile]:
        return self._manager.state.file

    def select_files(self, candidates: Sequence[UploadedFile]) -> SelectionResult:
        """Accept a drop of files; anything but exactly one PDF is refused."""
        if not candidates:
            return self._reject(RejectionReason.NO_FILE, None)
        if len(candidates) > 1:
            return self._reject(RejectionReason.TOO_MANY_FILES, None)
        return self.select_file(candidates[0])

    def select_file(self, candidate: Optional[UploadedFile]) -> SelectionResult:
        if candidate is None:
            return self._reject(RejectionReason.NO_FILE, None)
        if candidate.media_type.split(";")[0].strip().lower() != PDF_MEDIA_TYPE:
            return self._reject(RejectionReason.WRONG_TYPE, candidate)
        if candidate.size > self._max_upload_bytes:
            return self._reject(RejectionReason.TOO_LARGE, candidate)

        # A new file supersedes whatever was running or shown before.
        self._manager.reset_analysis()
        self._manager.begin_upload(candidate)
        return SelectionResult(accepted=True, file=candidate)

    async def analyze(self) -> "TerminalEvent":
        return await self._manager.analyze()

    async def run_demo(self) -> "TerminalEvent":
        return await self._manager.run_demo()

    def start_over(self) -> None:
        self._manager.reset_analysis()

    def _reject(
        self, reason: RejectionReason, candidate: Optional[UploadedFile]
    ) -> SelectionResult:
        logger.info("Rejected selection %r: %s", candidate, reason.value)
        message = _REJECTION_MESSAGES[reason].format(
            limit_mb=self._max_upload_bytes / (1024 * 1024)
        )
        self._notify("warning", message)
        return SelectionResult(accepted=False, file=candidate, reason=reason)


__all__ = [
    "DEFAULT_MAX_UPLOAD_BYTES",
    "PDF_MEDIA_TYPE",
    "RejectionReason",
    "SelectionResult",
    "UploadController",
    "UploadedFile",
]
