"""Lifecycle states and events of a client analysis session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from proposal_analyzer.schemas import AnalysisResult

from .upload import UploadedFile


class LifecycleStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    SUCCEEDED = "succeeded"
    FAILED_OVER_TO_DEMO = "failed_over_to_demo"
    CANCELLED = "cancelled"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset(
    {
        LifecycleStatus.SUCCEEDED,
        LifecycleStatus.FAILED_OVER_TO_DEMO,
        LifecycleStatus.CANCELLED,
        LifecycleStatus.ERRORED,
    }
)


@dataclass(frozen=True, slots=True)
class LifecycleState:
    """Immutable snapshot of what the session currently shows."""

    status: LifecycleStatus = LifecycleStatus.IDLE
    file: Optional[UploadedFile] = None
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    generation: int = 0

    @property
    def loading(self) -> bool:
        return self.status is LifecycleStatus.ANALYZING


@dataclass(frozen=True, slots=True)
class TerminalEvent:
    """The single outcome reported for one analysis or demo operation."""

    status: LifecycleStatus
    generation: int
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.status.is_terminal:
            raise ValueError(f"{self.status} is not a terminal status")


__all__ = ["LifecycleState", "LifecycleStatus", "TerminalEvent"]
