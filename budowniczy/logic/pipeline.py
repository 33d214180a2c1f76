"""Pipeline State Machine: Draft → Submitted → Analyzing → Completed | Failed.

Each questionnaire run is an explicit PipelineRun carried from submission to
analysis to report; nothing is kept in module-level "current" pointers.

Store-layer faults move a run to Failed. Generation problems never do,
because the gateway always returns a document. Any other exception also
moves the run to Failed before it propagates.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .gateway import GenerationGateway
from .renderer import Block, render_document
from .store import (
    Analysis,
    AnalysisStatus,
    CompletionPayload,
    StoreError,
    Survey,
    SurveyStore,
)
from .survey import SurveyAnswers, validate_answers

logger = logging.getLogger(__name__)

PROGRESS_CHECKPOINTS = (25, 50, 75, 100)
ANALYSIS_ERROR_MESSAGE = "Wystąpił błąd podczas analizy. Spróbuj ponownie."


class PipelineState(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class InvalidTransitionError(Exception):
    """Raised when an operation is not allowed from the run's current state."""


@dataclass
class PipelineRun:
    """Context for one questionnaire, from form to report."""
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: PipelineState = PipelineState.DRAFT
    answers: Optional[SurveyAnswers] = None
    survey: Optional[Survey] = None
    analysis: Optional[Analysis] = None
    progress: int = 0
    validation_errors: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize run for API response."""
        return {
            "run_id": self.run_id,
            "state": self.state.value,
            "progress": self.progress,
            "validation_errors": self.validation_errors,
            "error": self.error,
            "source": self.source,
            "survey": self.survey.to_dict() if self.survey else None,
            "analysis": self.analysis.to_dict() if self.analysis else None,
        }


class Pipeline:
    """Drives PipelineRuns through the store and the generation gateway."""

    def __init__(
        self,
        store: SurveyStore,
        gateway: Optional[GenerationGateway] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ):
        self.store = store
        self.gateway = gateway or GenerationGateway()
        self.on_progress = on_progress

    # --- transitions -------------------------------------------------------

    def submit(self, form: Mapping[str, Any], run: Optional[PipelineRun] = None) -> PipelineRun:
        """Draft → Submitted on a valid form; otherwise stay in Draft with field errors."""
        run = run or PipelineRun()
        if run.state != PipelineState.DRAFT:
            raise InvalidTransitionError(f"Cannot submit a form from state '{run.state.value}'")

        errors = validate_answers(form)
        if errors:
            run.validation_errors = errors
            logger.info(f"Run {run.run_id}: form rejected ({', '.join(errors)})")
            return run

        run.validation_errors = {}
        run.answers = SurveyAnswers.from_dict(form)
        run.state = PipelineState.SUBMITTED
        return run

    async def analyze(self, run: PipelineRun) -> PipelineRun:
        """Submitted (or Failed) → Analyzing → Completed, or Failed on a store fault."""
        if run.state not in (PipelineState.SUBMITTED, PipelineState.FAILED):
            raise InvalidTransitionError(f"Cannot analyze from state '{run.state.value}'")

        run.state = PipelineState.ANALYZING
        run.error = None
        run.progress = 0
        t0 = time.time()

        try:
            if run.survey is None:
                run.survey = self.store.create_survey(run.answers)
            run.analysis = self._pending_analysis(run)
            self._advance(run, 25)
            self._advance(run, 50)

            result = await self.gateway.generate_with_details(run.survey.answers)
            run.source = result.source
            self._advance(run, 75)

            run.analysis = self.store.complete_analysis(
                CompletionPayload(analysis_id=run.analysis.id, ai_response=result.text)
            )
            self._advance(run, 100)
        except StoreError as e:
            logger.error(f"Run {run.run_id}: store fault during analysis: {e}")
            self._fail(run)
            return run
        except BaseException:
            # no exception may leave a run in ANALYZING
            logger.exception(f"Run {run.run_id}: unexpected error during analysis")
            self._fail(run)
            raise

        run.state = PipelineState.COMPLETED
        logger.info(
            f"Run {run.run_id}: analysis {run.analysis.id} completed "
            f"({run.source}, {time.time() - t0:.1f}s)"
        )
        return run

    async def retry(self, run: PipelineRun) -> PipelineRun:
        """Failed → Analyzing for the same survey."""
        if run.state != PipelineState.FAILED:
            raise InvalidTransitionError(f"Only failed runs can be retried (state '{run.state.value}')")
        return await self.analyze(run)

    def abandon(self, run: PipelineRun) -> PipelineRun:
        """Leave the run and start a fresh Draft for a new survey."""
        if run.state == PipelineState.ANALYZING:
            raise InvalidTransitionError("Cannot abandon a run while it is analyzing")
        return PipelineRun()

    async def run(self, form: Mapping[str, Any]) -> PipelineRun:
        """Submit a form and, when valid, analyze it."""
        run = self.submit(form)
        if run.state == PipelineState.SUBMITTED:
            await self.analyze(run)
        return run

    def report(self, run: PipelineRun) -> list[Block]:
        if run.state != PipelineState.COMPLETED or run.analysis is None:
            raise InvalidTransitionError(f"No report for a run in state '{run.state.value}'")
        return render_document(run.analysis.ai_response)

    # --- internals ---------------------------------------------------------

    def _pending_analysis(self, run: PipelineRun) -> Analysis:
        # A retry after a failed write may find its own analysis still pending
        if run.analysis is not None:
            current = self.store.get_analysis(run.analysis.id)
            if current.status == AnalysisStatus.PENDING:
                return current
        return self.store.create_analysis(run.survey.id)

    def _advance(self, run: PipelineRun, value: int) -> None:
        run.progress = max(run.progress, value)
        if self.on_progress is not None:
            self.on_progress(run.progress)

    def _fail(self, run: PipelineRun) -> None:
        run.state = PipelineState.FAILED
        run.error = ANALYSIS_ERROR_MESSAGE
        if run.analysis is None or run.analysis.status != AnalysisStatus.PENDING:
            return
        try:
            run.analysis = self.store.fail_analysis(run.analysis.id)
        except StoreError as e:
            logger.warning(f"Run {run.run_id}: could not mark analysis {run.analysis.id} failed: {e}")


class RunManager:
    """Keeps PipelineRuns by run_id for the HTTP layer."""

    def __init__(self):
        self._runs: dict[str, PipelineRun] = {}
        self._last_activity: dict[str, float] = {}
        self._lock = threading.Lock()

    def put(self, run: PipelineRun) -> PipelineRun:
        with self._lock:
            self._runs[run.run_id] = run
            self._last_activity[run.run_id] = time.time()
        return run

    def get(self, run_id: str) -> Optional[PipelineRun]:
        with self._lock:
            run = self._runs.get(run_id)
            if run is not None:
                self._last_activity[run_id] = time.time()
            return run

    def cleanup_stale(self, max_age_seconds: int = 7200):
        """Forget runs inactive for more than max_age_seconds (default 2h)."""
        cutoff = time.time() - max_age_seconds
        with self._lock:
            stale = [rid for rid, t in self._last_activity.items() if t < cutoff]
            for rid in stale:
                self._runs.pop(rid, None)
                self._last_activity.pop(rid, None)
            if stale:
                logger.info(f"Cleaned up {len(stale)} stale run(s)")
