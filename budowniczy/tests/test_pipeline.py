"""Pipeline state machine: Draft → Submitted → Analyzing → Completed | Failed."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from budowniczy.logic.gateway import GenerationGateway
from budowniczy.logic.offline import generate_offline_document
from budowniczy.logic.pipeline import (
    ANALYSIS_ERROR_MESSAGE,
    InvalidTransitionError,
    Pipeline,
    PipelineRun,
    PipelineState,
    RunManager,
)
from budowniczy.logic.renderer import Heading
from budowniczy.logic.store import AnalysisStatus, StorageUnavailableError


@pytest.fixture
def pipeline(store):
    return Pipeline(store)


# =============================================================================
# SUBMISSION
# =============================================================================

class TestSubmit:
    def test_valid_form_moves_to_submitted(self, pipeline, valid_form, answers):
        run = pipeline.submit(valid_form)
        assert run.state == PipelineState.SUBMITTED
        assert run.answers == answers
        assert run.validation_errors == {}

    def test_empty_query_stays_in_draft(self, pipeline, store, valid_form):
        valid_form["what_looking_for"] = ""
        run = pipeline.submit(valid_form)
        assert run.state == PipelineState.DRAFT
        assert list(run.validation_errors) == ["what_looking_for"]
        assert store.list_surveys() == []

    def test_corrected_form_can_be_resubmitted(self, pipeline, valid_form):
        run = pipeline.submit({**valid_form, "room_type": ""})
        assert run.state == PipelineState.DRAFT
        pipeline.submit(valid_form, run)
        assert run.state == PipelineState.SUBMITTED
        assert run.validation_errors == {}

    def test_submit_only_from_draft(self, pipeline, valid_form):
        run = pipeline.submit(valid_form)
        with pytest.raises(InvalidTransitionError):
            pipeline.submit(valid_form, run)


# =============================================================================
# ANALYSIS
# =============================================================================

class TestAnalyze:
    def test_offline_end_to_end(self, pipeline, store, valid_form):
        run = asyncio.run(pipeline.run(valid_form))

        assert run.state == PipelineState.COMPLETED
        assert run.progress == 100
        assert run.source == "offline"
        stored = store.get_analysis(run.analysis.id)
        assert stored.status == AnalysisStatus.COMPLETED
        assert "ANALIZA POTRZEB (TRYB OFFLINE)" in stored.ai_response
        assert "50-70" in stored.ai_response
        assert "hydroizolacj" in stored.ai_response

    def test_two_runs_are_independent(self, pipeline, store, valid_form):
        first = asyncio.run(pipeline.run(valid_form))
        second = asyncio.run(pipeline.run(valid_form))

        assert first.survey.id != second.survey.id
        assert first.analysis.id != second.analysis.id
        assert store.get_analysis(first.analysis.id).survey_id == first.survey.id
        assert store.get_analysis(second.analysis.id).survey_id == second.survey.id

    def test_remote_404_stores_offline_document(self, store, mock_gateway, valid_form, answers):
        gateway = mock_gateway(lambda request: httpx.Response(404, text="Not Found"))
        run = asyncio.run(Pipeline(store, gateway=gateway).run(valid_form))

        assert run.state == PipelineState.COMPLETED
        assert store.get_analysis(run.analysis.id).ai_response == generate_offline_document(answers)

    def test_remote_document_stored(self, store, mock_gateway, valid_form):
        gateway = mock_gateway(lambda request: httpx.Response(200, json={"response": "## Raport AI"}))
        run = asyncio.run(Pipeline(store, gateway=gateway).run(valid_form))

        assert run.source == "online"
        assert store.get_analysis(run.analysis.id).ai_response == "## Raport AI"

    def test_progress_checkpoints(self, store, valid_form):
        seen = []
        asyncio.run(Pipeline(store, on_progress=seen.append).run(valid_form))
        assert seen == [25, 50, 75, 100]

    def test_invalid_form_is_not_analyzed(self, pipeline, store):
        run = asyncio.run(pipeline.run({}))
        assert run.state == PipelineState.DRAFT
        assert store.list_analyses() == []

    def test_analyze_requires_submitted(self, pipeline):
        with pytest.raises(InvalidTransitionError):
            asyncio.run(pipeline.analyze(PipelineRun()))

    def test_completed_is_terminal(self, pipeline, valid_form):
        run = asyncio.run(pipeline.run(valid_form))
        with pytest.raises(InvalidTransitionError):
            asyncio.run(pipeline.analyze(run))
        with pytest.raises(InvalidTransitionError):
            asyncio.run(pipeline.retry(run))

    def test_report_blocks(self, pipeline, valid_form):
        run = asyncio.run(pipeline.run(valid_form))
        blocks = pipeline.report(run)
        assert blocks[0] == Heading(2, "ANALIZA POTRZEB (TRYB OFFLINE)")

    def test_report_requires_completed(self, pipeline, valid_form):
        with pytest.raises(InvalidTransitionError):
            pipeline.report(pipeline.submit(valid_form))


# =============================================================================
# STORE FAULTS, RETRY, ABANDON
# =============================================================================

class TestFailures:
    def test_store_fault_fails_run(self, pipeline, store, valid_form):
        with patch.object(store, "complete_analysis", side_effect=StorageUnavailableError("disk full")):
            run = asyncio.run(pipeline.run(valid_form))

        assert run.state == PipelineState.FAILED
        assert run.error == ANALYSIS_ERROR_MESSAGE
        assert store.get_analysis(run.analysis.id).status == AnalysisStatus.FAILED

    def test_survey_write_fault(self, pipeline, store, valid_form):
        with patch.object(store, "create_survey", side_effect=StorageUnavailableError("read-only")):
            run = asyncio.run(pipeline.run(valid_form))

        assert run.state == PipelineState.FAILED
        assert run.survey is None
        assert store.list_analyses() == []

    def test_retry_completes_same_survey(self, pipeline, store, valid_form):
        with patch.object(store, "complete_analysis", side_effect=StorageUnavailableError("disk full")):
            run = asyncio.run(pipeline.run(valid_form))
        survey_id = run.survey.id
        failed_id = run.analysis.id

        asyncio.run(pipeline.retry(run))

        assert run.state == PipelineState.COMPLETED
        assert run.error is None
        assert run.survey.id == survey_id
        assert run.analysis.id != failed_id
        assert store.find_analysis_by_survey_id(survey_id).status == AnalysisStatus.COMPLETED
        assert len(store.list_surveys()) == 1

    def test_retry_reuses_pending_analysis(self, pipeline, store, valid_form):
        # both the completion and the failure mark are lost
        with patch.object(store, "complete_analysis", side_effect=StorageUnavailableError("disk full")), \
             patch.object(store, "fail_analysis", side_effect=StorageUnavailableError("disk full")):
            run = asyncio.run(pipeline.run(valid_form))
        pending_id = run.analysis.id
        assert store.get_analysis(pending_id).status == AnalysisStatus.PENDING

        asyncio.run(pipeline.retry(run))

        assert run.state == PipelineState.COMPLETED
        assert run.analysis.id == pending_id
        assert len(store.list_analyses()) == 1

    def test_unexpected_error_fails_run_and_propagates(self, store, valid_form):
        gateway = MagicMock()
        gateway.generate_with_details = AsyncMock(side_effect=RuntimeError("catalog unreadable"))
        pipeline = Pipeline(store, gateway=gateway)
        run = pipeline.submit(valid_form)

        with pytest.raises(RuntimeError):
            asyncio.run(pipeline.analyze(run))

        assert run.state == PipelineState.FAILED
        assert run.error == ANALYSIS_ERROR_MESSAGE
        assert store.get_analysis(run.analysis.id).status == AnalysisStatus.FAILED

        pipeline.gateway = GenerationGateway()
        asyncio.run(pipeline.retry(run))
        assert run.state == PipelineState.COMPLETED

    def test_retry_only_from_failed(self, pipeline, valid_form):
        with pytest.raises(InvalidTransitionError):
            asyncio.run(pipeline.retry(pipeline.submit(valid_form)))

    def test_abandon_returns_fresh_draft(self, pipeline, valid_form):
        run = asyncio.run(pipeline.run(valid_form))
        fresh = pipeline.abandon(run)
        assert fresh.state == PipelineState.DRAFT
        assert fresh.run_id != run.run_id
        assert fresh.survey is None

    def test_cannot_abandon_while_analyzing(self, pipeline):
        with pytest.raises(InvalidTransitionError):
            pipeline.abandon(PipelineRun(state=PipelineState.ANALYZING))


# =============================================================================
# RUN MANAGER
# =============================================================================

class TestRunManager:
    def test_put_and_get(self):
        manager = RunManager()
        run = manager.put(PipelineRun())
        assert manager.get(run.run_id) is run
        assert manager.get("missing") is None

    def test_cleanup_stale(self):
        manager = RunManager()
        run = manager.put(PipelineRun())
        manager.cleanup_stale(max_age_seconds=-1)
        assert manager.get(run.run_id) is None
