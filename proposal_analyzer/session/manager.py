"""Request lifecycle of a client analysis session.

At most one operation (an analysis or a demo run) is live per manager. Every
operation owns an :class:`OperationToken`; starting a new one, or resetting,
cancels the previous token synchronously. All awaits inside an operation go
through its token, and every state change checks that the token is still the
current one, so a late callback from a superseded operation is a no-op.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar

from proposal_analyzer.clients.analysis_api import AnalysisApiError
from proposal_analyzer.schemas import AnalysisResult

from .demo import DEMO_FILE, build_demo_result, build_fallback_result
from .state import LifecycleState, LifecycleStatus, TerminalEvent
from .upload import UploadedFile

T = TypeVar("T")

Notifier = Callable[[str, str], None]
StateListener = Callable[[LifecycleState], None]
Sleep = Callable[[float], Awaitable[None]]

logger = logging.getLogger(__name__)


class AnalysisBackend(Protocol):
    async def analyze(self, upload: UploadedFile) -> AnalysisResult: ...


class OperationCancelled(Exception):
    """The operation was superseded or reset; not a failure."""

    def __init__(self, generation: int) -> None:
        super().__init__(f"operation {generation} was cancelled")
        self.generation = generation


class NoFileSelectedError(RuntimeError):
    """Raised when an analysis is requested before a file was selected."""


class OperationToken:
    """Cancellation handle for one analysis or demo operation.

    It holds whatever the operation is currently waiting on (the network
    request or the pacing delay) so cancelling the token aborts that wait.
    """

    __slots__ = ("generation", "file", "_cancelled", "_pending")

    def __init__(self, generation: int, file: UploadedFile) -> None:
        self.generation = generation
        self.file = file
        self._cancelled = False
        self._pending: Optional[asyncio.Future] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless, or until, this token is cancelled."""
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled(self.generation)

        pending = asyncio.ensure_future(awaitable)
        self._pending = pending
        try:
            return await pending
        except asyncio.CancelledError:
            if self._cancelled:
                raise OperationCancelled(self.generation) from None
            raise
        finally:
            self._pending = None


def _log_notification(level: str, message: str) -> None:
    logger.log(logging.WARNING if level in {"warning", "error"} else logging.INFO, message)


class AnalysisRequestManager:
    """Run analyses against the service, falling back to demo results."""

    def __init__(
        self,
        backend: AnalysisBackend,
        *,
        fallback_delay: float = 2.0,
        demo_delay: float = 3.0,
        notifier: Optional[Notifier] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._backend = backend
        self._fallback_delay = fallback_delay
        self._demo_delay = demo_delay
        self._notifier = notifier or _log_notification
        self._sleep = sleep
        self._clock = clock
        self._generation = 0
        self._current: Optional[OperationToken] = None
        self._state = LifecycleState()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._current is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` on every state change; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def notify(self, level: str, message: str) -> None:
        self._notifier(level, message)

    def reset_analysis(self, *, notify: bool = True) -> None:
        """Abort any live operation and return to an empty, idle session."""
        had_work = (
            self._current is not None
            or self._state.result is not None
            or self._state.error is not None
        )
        self._cancel_current()
        self._generation += 1
        self._set_state(LifecycleState(generation=self._generation))
        if notify and had_work:
            self.notify("success", "Analysis stopped and reset successfully")

    def begin_upload(self, file: UploadedFile) -> None:
        """Hold ``file`` as the selection without submitting it yet."""
        self._cancel_current()
        self._set_state(
            LifecycleState(
                status=LifecycleStatus.UPLOADING,
                file=file,
                generation=self._generation,
            )
        )

    async def analyze(self, file: Optional[UploadedFile] = None) -> TerminalEvent:
        """Analyze ``file`` (or the selected file) and report exactly one outcome."""
        target = file or self._state.file
        if target is None:
            raise NoFileSelectedError("Select a PDF before starting an analysis.")

        token = self._start(target)
        try:
            try:
                result = await token.run(self._backend.analyze(target))
            except AnalysisApiError as exc:
                if exc.is_user_input_error:
                    logger.info(
                        "Service rejected '%s' (%s): %s",
                        target.name,
                        exc.error_code,
                        exc.message,
                    )
                    return self._finish(
                        token, LifecycleStatus.ERRORED, error=exc.message
                    )
                logger.info(
                    "Analysis service failed for '%s' (status=%s, error=%s); "
                    "showing demo result.",
                    target.name,
                    exc.status_code,
                    exc.error_code,
                )
                return await self._fall_back(token)
            except OperationCancelled:
                raise
            except Exception:
                logger.exception(
                    "Analysis of '%s' failed unexpectedly; showing demo result.",
                    target.name,
                )
                return await self._fall_back(token)
            return self._finish(
                token,
                LifecycleStatus.SUCCEEDED,
                result=result,
                message="Proposal analyzed successfully!",
            )
        except OperationCancelled:
            return self._cancelled(token)
        except asyncio.CancelledError:
            self._abandon(token)
            raise

    async def run_demo(self) -> TerminalEvent:
        """Show the canned demo analysis after the pacing delay."""
        self.reset_analysis()
        token = self._start(DEMO_FILE)
        try:
            await token.run(self._sleep(self._demo_delay))
        except OperationCancelled:
            return self._cancelled(token)
        except asyncio.CancelledError:
            self._abandon(token)
            raise
        return self._finish(
            token,
            LifecycleStatus.SUCCEEDED,
            result=build_demo_result(clock=self._clock),
            message="Demo analysis complete! This is how real AI analysis works.",
        )

    async def _fall_back(self, token: OperationToken) -> TerminalEvent:
        await token.run(self._sleep(self._fallback_delay))
        return self._finish(
            token,
            LifecycleStatus.FAILED_OVER_TO_DEMO,
            result=build_fallback_result(token.file, clock=self._clock),
            message="Proposal analyzed successfully! (Demo mode)",
        )

    def _start(self, file: UploadedFile) -> OperationToken:
        if self._cancel_current():
            self.notify("success", "Previous analysis stopped")
        self._generation += 1
        token = OperationToken(self._generation, file)
        self._current = token
        self._set_state(
            LifecycleState(
                status=LifecycleStatus.ANALYZING,
                file=file,
                generation=token.generation,
            )
        )
        logger.debug("Started operation %d for '%s'.", token.generation, file.name)
        return token

    def _cancel_current(self) -> bool:
        token, self._current = self._current, None
        if token is None:
            return False
        token.cancel()
        logger.debug("Cancelled operation %d.", token.generation)
        return True

    def _is_current(self, token: OperationToken) -> bool:
        return token is self._current and not token.cancelled

    def _finish(
        self,
        token: OperationToken,
        status: LifecycleStatus,
        *,
        result: Optional[AnalysisResult] = None,
        error: Optional[str] = None,
        message: Optional[str] = None,
    ) -> TerminalEvent:
        if not self._is_current(token):
            return self._cancelled(token)

        self._current = None
        self._set_state(
            LifecycleState(
                status=status,
                file=token.file,
                result=result,
                error=error,
                generation=token.generation,
            )
        )
        if error is not None:
            self.notify("error", error)
        elif message:
            self.notify("success", message)
        return TerminalEvent(
            status=status, generation=token.generation, result=result, error=error
        )

    def _cancelled(self, token: OperationToken) -> TerminalEvent:
        logger.debug("Operation %d was superseded; dropping its outcome.", token.generation)
        return TerminalEvent(status=LifecycleStatus.CANCELLED, generation=token.generation)

    def _abandon(self, token: OperationToken) -> None:
        """The awaiting task itself was cancelled; keep the file, drop the work."""
        token.cancel()
        if token is self._current:
            self._current = None
            self._set_state(
                LifecycleState(
                    status=LifecycleStatus.UPLOADING,
                    file=token.file,
                    generation=token.generation,
                )
            )

    def _set_state(self, state: LifecycleState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)


__all__ = [
    "AnalysisBackend",
    "AnalysisRequestManager",
    "NoFileSelectedError",
    "Notifier",
    "OperationCancelled",
    "OperationToken",
]
