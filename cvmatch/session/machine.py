"""
Analysis session state machine.

:class:`AnalysisSession` owns everything a single upload-to-report
cycle needs and drives it through a fixed transition table::

    Idle -> Extracting -> AwaitingGate -> Analyzing -> Success
                 |                            |
                 +----------> Error <---------+

Success and Error are left only through :meth:`AnalysisSession.reset`.
The session runs on one asyncio event loop.  Extraction and analysis
are each a single outstanding task, and the gate countdown is a
cancellable task owned by :class:`~cvmatch.session.gate.GateTimer`.

Every outstanding task is tagged with the cycle generation it was
started for.  A reset bumps the generation, so results that arrive
afterwards are discarded instead of leaking into the next cycle.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, Set

from ..analyze.client import AnalysisProvider
from ..analyze.schema import AnalysisReport
from ..errors import (
    AnalysisError,
    ExtractionError,
    UnknownAnalysisError,
    UnreadableDocument,
)
from ..extract.pdf_text import SelectedFile, extract_text_async
from .gate import DEFAULT_DURATION, GateTimer
from .state import (
    Analyzing,
    AwaitingGate,
    Error,
    Extracting,
    Idle,
    SessionState,
    Status,
    Success,
)

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please upload your résumé and paste the job description."
NOT_A_PDF_MESSAGE = "Only PDF files are accepted."

_TRANSITIONS: Dict[Status, FrozenSet[Status]] = {
    Status.IDLE: frozenset({Status.EXTRACTING}),
    Status.EXTRACTING: frozenset({Status.AWAITING_GATE, Status.ERROR}),
    Status.AWAITING_GATE: frozenset({Status.AWAITING_GATE, Status.ANALYZING}),
    Status.ANALYZING: frozenset({Status.SUCCESS, Status.ERROR}),
    Status.SUCCESS: frozenset(),
    Status.ERROR: frozenset(),
}


class AnalysisSession:
    """A single user's résumé screening session.

    Args:
        client: Analysis backend whose ``analyze_async(resume_text,
            job_description)`` returns an
            :class:`~cvmatch.analyze.schema.AnalysisReport`.
        extractor: Coroutine function turning a
            :class:`~cvmatch.extract.pdf_text.SelectedFile` into text.
        gate_seconds: Length of the countdown between extraction and
            analysis.
        gate_interval: Seconds per countdown tick.
        sleep: Sleep coroutine handed to the gate timer.
        on_change: Called with the session after every transition and
            every countdown tick.
        max_upload_mb: Size above which a selected file triggers a
            warning.  The file is still accepted.
    """

    def __init__(
        self,
        client: AnalysisProvider,
        extractor: Callable[[SelectedFile], Awaitable[str]] = extract_text_async,
        gate_seconds: int = DEFAULT_DURATION,
        gate_interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_change: Optional[Callable[["AnalysisSession"], None]] = None,
        max_upload_mb: float = 5,
    ) -> None:
        self.client = client
        self._extract = extractor
        self.on_change = on_change
        self.max_upload_mb = max_upload_mb
        self.selected_file: Optional[SelectedFile] = None
        self.job_description = ""
        self.validation_message: Optional[str] = None
        self.upload_warning: Optional[str] = None
        self.state: SessionState = Idle()
        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._settled: Optional[asyncio.Event] = None
        self._gate = GateTimer(
            duration=gate_seconds,
            interval=gate_interval,
            on_tick=self._on_gate_tick,
            on_complete=self._on_gate_complete,
            sleep=sleep,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def status(self) -> Status:
        return self.state.status

    @property
    def status_message(self) -> Optional[str]:
        return self.state.message

    @property
    def extracted_text(self) -> Optional[str]:
        return getattr(self.state, "extracted_text", None)

    @property
    def report(self) -> Optional[AnalysisReport]:
        return self.state.report if isinstance(self.state, Success) else None

    @property
    def gate_active(self) -> bool:
        return self._gate.active

    @property
    def gate_duration(self) -> int:
        return self._gate.duration

    @property
    def generation(self) -> int:
        return self._generation

    def missing_inputs(self) -> List[str]:
        """Names of the inputs a cycle still needs, in form order."""
        missing = []
        if self.selected_file is None:
            missing.append("résumé")
        if not self.job_description.strip():
            missing.append("job description")
        return missing

    def can_start(self) -> bool:
        return self.status is Status.IDLE and not self.missing_inputs()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def select_file(self, file: SelectedFile) -> bool:
        """Store the résumé to analyse.  Only honoured while idle."""
        if self.status is not Status.IDLE:
            logger.debug("Ignoring file selection while %s", self.status.value)
            return False
        if not file.looks_like_pdf():
            self.validation_message = NOT_A_PDF_MESSAGE
            self._notify()
            return False
        self.selected_file = file
        self.validation_message = None
        if file.size_mb > self.max_upload_mb:
            self.upload_warning = (
                f"{file.name} is {file.size_mb:.1f} MB; files up to "
                f"{self.max_upload_mb:g} MB are recommended."
            )
        else:
            self.upload_warning = None
        logger.debug("Selected file %s (%d bytes)", file.name, len(file.data))
        self._notify()
        return True

    def clear_file(self) -> bool:
        """Forget the selected résumé.  Only honoured while idle."""
        if self.status is not Status.IDLE:
            logger.debug("Ignoring file removal while %s", self.status.value)
            return False
        if self.selected_file is None:
            return True
        logger.debug("Cleared file %s", self.selected_file.name)
        self.selected_file = None
        self.upload_warning = None
        self._notify()
        return True

    def set_job_description(self, text: str) -> bool:
        """Store the job description.  Only honoured while idle."""
        if self.status is not Status.IDLE:
            return False
        self.job_description = text or ""
        return True

    def start(self) -> bool:
        """Begin a cycle if the session is idle and both inputs are present.

        Must be called from a running event loop.  Returns ``False``
        without changing state when the session is busy (a duplicate
        trigger) or when an input is missing, in which case
        :attr:`validation_message` explains why.
        """
        if self.status is not Status.IDLE:
            logger.debug("Ignoring start request while %s", self.status.value)
            return False
        if self.missing_inputs():
            self.validation_message = MISSING_INPUT_MESSAGE
            self._notify()
            return False
        self.validation_message = None
        self._generation += 1
        self._settled = asyncio.Event()
        self._transition(Extracting())
        self._spawn(self._extraction_phase(self._generation, self.selected_file))
        return True

    async def wait_settled(self) -> SessionState:
        """Wait until the current cycle reaches Success or Error (or is reset)."""
        if self._settled is not None and self.status not in (Status.IDLE, Status.SUCCESS, Status.ERROR):
            await self._settled.wait()
        return self.state

    async def run_cycle(self) -> SessionState:
        """Start a cycle and wait for it to finish.

        Returns the resulting state; if the cycle could not start the
        current (unchanged) state is returned.
        """
        if not self.start():
            return self.state
        return await self.wait_settled()

    def reset(self) -> None:
        """Abandon the current cycle and clear every input and result."""
        self._gate.deactivate()
        self._generation += 1
        self.selected_file = None
        self.job_description = ""
        self.validation_message = None
        self.upload_warning = None
        previous = self.state
        self.state = Idle()
        logger.debug("%s -> Idle (reset)", previous.status.value)
        if self._settled is not None:
            self._settled.set()
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, new_state: SessionState) -> None:
        allowed = _TRANSITIONS[self.status]
        if new_state.status not in allowed:
            raise RuntimeError(
                f"Illegal session transition {self.status.value} -> {new_state.status.value}"
            )
        if new_state.status is not self.status:
            logger.debug("%s -> %s", self.status.value, new_state.status.value)
        self.state = new_state
        if new_state.status in (Status.SUCCESS, Status.ERROR) and self._settled is not None:
            self._settled.set()
        self._notify()

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self)
        except Exception:  # noqa: BLE001
            logger.exception("Session change listener failed")

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)  # type: ignore[arg-type]
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_stale(self, generation: int, step: str) -> bool:
        if generation != self._generation:
            logger.info("Discarding %s result from an abandoned cycle", step)
            return True
        return False

    async def _extraction_phase(self, generation: int, file: SelectedFile) -> None:
        try:
            text = await self._extract(file)
        except ExtractionError as exc:
            if not self._is_stale(generation, "extraction"):
                logger.warning("Extraction failed for %s: %s", file.name, exc.kind)
                self._transition(Error(message=exc.user_message, kind=exc.kind))
            return
        except Exception:  # noqa: BLE001
            if not self._is_stale(generation, "extraction"):
                logger.exception("Unexpected extraction failure for %s", file.name)
                self._transition(
                    Error(message=UnreadableDocument.user_message, kind=UnreadableDocument.kind)
                )
            return
        if self._is_stale(generation, "extraction"):
            return
        self._transition(AwaitingGate(extracted_text=text, remaining=self._gate.duration))
        self._gate.activate()

    def _on_gate_tick(self, remaining: int) -> None:
        if isinstance(self.state, AwaitingGate):
            self._transition(AwaitingGate(extracted_text=self.state.extracted_text, remaining=remaining))

    def _on_gate_complete(self) -> None:
        if not isinstance(self.state, AwaitingGate):
            return
        text = self.state.extracted_text
        self._transition(Analyzing(extracted_text=text))
        self._spawn(self._analysis_phase(self._generation, text, self.job_description))

    async def _analysis_phase(self, generation: int, text: str, job_description: str) -> None:
        try:
            report = await self.client.analyze_async(text, job_description)
        except AnalysisError as exc:
            if not self._is_stale(generation, "analysis"):
                self._transition(Error(message=exc.user_message, kind=exc.kind))
            return
        except Exception:  # noqa: BLE001
            if not self._is_stale(generation, "analysis"):
                logger.exception("Unexpected analysis failure")
                self._transition(
                    Error(message=UnknownAnalysisError.user_message, kind=UnknownAnalysisError.kind)
                )
            return
        if self._is_stale(generation, "analysis"):
            return
        self._transition(Success(extracted_text=text, report=report))
