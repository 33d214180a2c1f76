"""Survey/Analysis Store.

Append-and-update record store with two keyed collections, `surveys` and
`analyses`. Records are never deleted; an Analysis is updated exactly once,
by whole-record replacement, from pending to completed or failed.

Persistence is optional: with a path, every write rewrites a JSON file of the
form {"surveys": [...], "analyses": [...]}.
"""

import json
import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from .survey import SurveyAnswers

logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================

class StoreError(Exception):
    """Base class for store-layer faults. Only these fail a pipeline run."""


class NotFoundError(StoreError):
    pass


class DuplicateIdError(StoreError):
    pass


class ActiveAnalysisError(StoreError):
    """The survey already has a pending or completed analysis."""


class StorageUnavailableError(StoreError):
    pass


# =============================================================================
# RECORDS
# =============================================================================

class AnalysisStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Survey:
    id: str
    what_looking_for: str
    room_type: str
    budget_range: str
    quality_level: str
    additional_info: str
    created_date: datetime

    @property
    def answers(self) -> SurveyAnswers:
        return SurveyAnswers(
            what_looking_for=self.what_looking_for,
            room_type=self.room_type,
            budget_range=self.budget_range,
            quality_level=self.quality_level,
            additional_info=self.additional_info,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            **self.answers.to_dict(),
            "created_date": self.created_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Survey":
        answers = SurveyAnswers.from_dict(data)
        return cls(
            id=str(data["id"]),
            created_date=datetime.fromisoformat(data["created_date"]),
            **answers.to_dict(),
        )


@dataclass(frozen=True)
class Analysis:
    id: str
    survey_id: str
    ai_response: str
    status: AnalysisStatus
    created_date: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "survey_id": self.survey_id,
            "ai_response": self.ai_response,
            "status": self.status.value,
            "created_date": self.created_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Analysis":
        return cls(
            id=str(data["id"]),
            survey_id=str(data["survey_id"]),
            ai_response=data.get("ai_response", ""),
            status=AnalysisStatus(data.get("status", "pending")),
            created_date=datetime.fromisoformat(data["created_date"]),
        )


@dataclass(frozen=True)
class CompletionPayload:
    """Whole-record completion update for one Analysis."""
    analysis_id: str
    ai_response: str


# =============================================================================
# STORE
# =============================================================================

def _new_id() -> str:
    return uuid.uuid4().hex


class SurveyStore:
    """Keyed collections of Survey and Analysis records.

    Thread-safe: all reads and writes go through a single lock.
    """

    def __init__(self, path: Optional[str] = None, id_factory: Callable[[], str] = _new_id):
        self._surveys: dict[str, Survey] = {}
        self._analyses: dict[str, Analysis] = {}
        self._lock = threading.Lock()
        self._id_factory = id_factory
        self._path = Path(path) if path else None
        if self._path is not None:
            self._load()

    # --- persistence -------------------------------------------------------

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(f"Cannot read store file {self._path}: {e}") from e
        try:
            surveys = [Survey.from_dict(item) for item in raw.get("surveys", [])]
            analyses = [Analysis.from_dict(item) for item in raw.get("analyses", [])]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StorageUnavailableError(f"Malformed record in store file {self._path}: {e!r}") from e
        self._surveys = {s.id: s for s in surveys}
        self._analyses = {a.id: a for a in analyses}
        logger.info(f"Loaded {len(self._surveys)} survey(s), {len(self._analyses)} analysis record(s) from {self._path}")

    def _flush(self) -> None:
        if self._path is None:
            return
        payload = {
            "surveys": [s.to_dict() for s in self._surveys.values()],
            "analyses": [a.to_dict() for a in self._analyses.values()],
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as e:
            logger.error(f"Store write failed: {e}")
            raise StorageUnavailableError(f"Cannot write store file {self._path}: {e}") from e

    def _next_id(self, existing: Mapping[str, Any], kind: str) -> str:
        new_id = self._id_factory()
        if new_id in existing:
            raise DuplicateIdError(f"{kind} id '{new_id}' already exists")
        return new_id

    # --- surveys -----------------------------------------------------------

    def create_survey(self, fields: Mapping[str, Any]) -> Survey:
        answers = fields if isinstance(fields, SurveyAnswers) else SurveyAnswers.from_dict(fields)
        with self._lock:
            survey = Survey(
                id=self._next_id(self._surveys, "Survey"),
                created_date=_now(),
                **answers.to_dict(),
            )
            self._surveys[survey.id] = survey
            try:
                self._flush()
            except StorageUnavailableError:
                del self._surveys[survey.id]
                raise
        return survey

    def get_survey(self, survey_id: str) -> Survey:
        with self._lock:
            survey = self._surveys.get(survey_id)
        if survey is None:
            raise NotFoundError(f"Survey '{survey_id}' not found")
        return survey

    def list_surveys(self) -> list[Survey]:
        with self._lock:
            return list(self._surveys.values())

    # --- analyses ----------------------------------------------------------

    def create_analysis(self, survey_id: str) -> Analysis:
        """Create a pending Analysis; a survey may hold one non-failed analysis."""
        with self._lock:
            if survey_id not in self._surveys:
                raise NotFoundError(f"Survey '{survey_id}' not found")
            active = [
                a for a in self._analyses.values()
                if a.survey_id == survey_id and a.status != AnalysisStatus.FAILED
            ]
            if active:
                raise ActiveAnalysisError(
                    f"Survey '{survey_id}' already has analysis '{active[0].id}' ({active[0].status.value})"
                )
            analysis = Analysis(
                id=self._next_id(self._analyses, "Analysis"),
                survey_id=survey_id,
                ai_response="",
                status=AnalysisStatus.PENDING,
                created_date=_now(),
            )
            self._analyses[analysis.id] = analysis
            try:
                self._flush()
            except StorageUnavailableError:
                del self._analyses[analysis.id]
                raise
        return analysis

    def complete_analysis(self, payload: CompletionPayload) -> Analysis:
        """Mark an analysis completed. No-op if it is no longer pending."""
        return self._finish(payload.analysis_id, AnalysisStatus.COMPLETED, payload.ai_response)

    def fail_analysis(self, analysis_id: str) -> Analysis:
        """Mark an analysis failed. No-op if it is no longer pending."""
        return self._finish(analysis_id, AnalysisStatus.FAILED, "")

    def _finish(self, analysis_id: str, status: AnalysisStatus, ai_response: str) -> Analysis:
        with self._lock:
            current = self._analyses.get(analysis_id)
            if current is None:
                raise NotFoundError(f"Analysis '{analysis_id}' not found")
            if current.status != AnalysisStatus.PENDING:
                logger.info(f"Ignoring late {status.value} update for analysis {analysis_id} ({current.status.value})")
                return current
            updated = replace(current, status=status, ai_response=ai_response)
            self._analyses[analysis_id] = updated
            try:
                self._flush()
            except StorageUnavailableError:
                self._analyses[analysis_id] = current
                raise
        return updated

    def get_analysis(self, analysis_id: str) -> Analysis:
        with self._lock:
            analysis = self._analyses.get(analysis_id)
        if analysis is None:
            raise NotFoundError(f"Analysis '{analysis_id}' not found")
        return analysis

    def list_analyses(self) -> list[Analysis]:
        with self._lock:
            return list(self._analyses.values())

    def find_analysis_by_survey_id(self, survey_id: str) -> Optional[Analysis]:
        """Current analysis for a survey: latest non-failed, else latest."""
        with self._lock:
            owned = [a for a in self._analyses.values() if a.survey_id == survey_id]
        if not owned:
            return None
        active = [a for a in owned if a.status != AnalysisStatus.FAILED]
        return (active or owned)[-1]
