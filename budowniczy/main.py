import asyncio
import logging
import os

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from budowniczy.api_keys import api_keys_manager
from budowniczy.llm_router import is_configured as llm_configured, llm_call, get_model, provider_for
from budowniczy.logic.catalog import BudgetRange, QualityLevel, RoomType, get_catalog
from budowniczy.logic.offline import generate_offline_document
from budowniczy.logic.pipeline import InvalidTransitionError, Pipeline, PipelineRun, PipelineState, RunManager
from budowniczy.logic.renderer import blocks_to_dict, detect_source, render_document
from budowniczy.logic.store import AnalysisStatus, NotFoundError, StorageUnavailableError, SurveyStore
from budowniczy.logic.survey import SurveyAnswers
from budowniczy.models import (
    AnalyzeNeedsRequest,
    AnalyzeNeedsResponse,
    FormOptions,
    ReportResponse,
    ValidationErrorResponse,
    RunResponse,
    SurveyForm,
)
from budowniczy.prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)

app = FastAPI(title="Bot Budowniczy API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _open_store() -> SurveyStore:
    """Open the configured store; an unusable file leaves it untouched and falls back to memory."""
    path = os.getenv("BUDOWNICZY_STORE_PATH") or None
    try:
        return SurveyStore(path=path)
    except StorageUnavailableError as e:
        logger.error(f"{e}; continuing with an in-memory store")
        return SurveyStore()


pipeline = Pipeline(_open_store())
run_manager = RunManager()


def get_pipeline() -> Pipeline:
    return pipeline


def get_run_manager() -> RunManager:
    return run_manager


async def _cleanup_runs_periodically():
    """Background task to forget stale pipeline runs every 30 minutes."""
    while True:
        await asyncio.sleep(1800)
        run_manager.cleanup_stale()


@app.on_event("startup")
async def startup_event():
    """Configure logging and load the catalog on server start."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    catalog = get_catalog()
    configured = api_keys_manager.get_configured_providers()
    logger.info(
        f"Catalog ready ({len(catalog.products)} categories); "
        f"configured providers: {', '.join(configured) or 'none (offline mode)'}"
    )
    asyncio.create_task(_cleanup_runs_periodically())


def _run_or_404(run_id: str, runs: RunManager) -> PipelineRun:
    run = runs.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    return run


@app.get("/")
async def root():
    return {"message": "Bot Budowniczy API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/config/keys")
async def get_key_status():
    """Masked credential status for the generation endpoint and LLM providers."""
    return [s.model_dump() for s in api_keys_manager.get_status()]


@app.get("/catalog/options", response_model=FormOptions)
async def get_form_options():
    """Enumerations accepted by the survey form."""
    return FormOptions(
        room_types=[r.value for r in RoomType],
        budget_ranges=[b.value for b in BudgetRange],
        quality_levels=[q.value for q in QualityLevel],
    )


# =============================================================================
# Pipeline
# =============================================================================

@app.post("/surveys", response_model=RunResponse, status_code=201)
async def submit_survey(
    form: SurveyForm,
    pipe: Pipeline = Depends(get_pipeline),
    runs: RunManager = Depends(get_run_manager),
):
    """Submit the questionnaire. Invalid forms stay in draft and return 422 with field errors."""
    run = runs.put(pipe.submit(form.model_dump()))
    if run.state == PipelineState.DRAFT:
        return JSONResponse(
            status_code=422,
            content=ValidationErrorResponse(
                run_id=run.run_id, state=run.state.value, errors=run.validation_errors
            ).model_dump(),
        )
    return RunResponse(**run.to_dict())


@app.get("/runs/{run_id}", response_model=RunResponse)
async def get_run(run_id: str, runs: RunManager = Depends(get_run_manager)):
    return RunResponse(**_run_or_404(run_id, runs).to_dict())


@app.post("/runs/{run_id}/analyze", response_model=RunResponse)
async def analyze_run(
    run_id: str,
    pipe: Pipeline = Depends(get_pipeline),
    runs: RunManager = Depends(get_run_manager),
):
    """Drive a submitted run to completed (or failed on a store fault)."""
    run = _run_or_404(run_id, runs)
    try:
        await pipe.analyze(run)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return RunResponse(**run.to_dict())


@app.post("/runs/{run_id}/retry", response_model=RunResponse)
async def retry_run(
    run_id: str,
    pipe: Pipeline = Depends(get_pipeline),
    runs: RunManager = Depends(get_run_manager),
):
    run = _run_or_404(run_id, runs)
    try:
        await pipe.retry(run)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return RunResponse(**run.to_dict())


@app.post("/runs/{run_id}/abandon", response_model=RunResponse)
async def abandon_run(
    run_id: str,
    pipe: Pipeline = Depends(get_pipeline),
    runs: RunManager = Depends(get_run_manager),
):
    """Drop the run and return a fresh draft for a new survey."""
    run = _run_or_404(run_id, runs)
    try:
        fresh = runs.put(pipe.abandon(run))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return RunResponse(**fresh.to_dict())


# =============================================================================
# Analyses and reports
# =============================================================================

@app.get("/analyses")
async def list_analyses(pipe: Pipeline = Depends(get_pipeline)):
    return [a.to_dict() for a in pipe.store.list_analyses()]


@app.get("/analyses/{analysis_id}")
async def get_analysis(analysis_id: str, pipe: Pipeline = Depends(get_pipeline)):
    try:
        return pipe.store.get_analysis(analysis_id).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/analyses/{analysis_id}/report", response_model=ReportResponse)
async def get_report(analysis_id: str, pipe: Pipeline = Depends(get_pipeline)):
    """Rendered report blocks for a completed analysis."""
    try:
        analysis = pipe.store.get_analysis(analysis_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if analysis.status != AnalysisStatus.COMPLETED:
        raise HTTPException(status_code=409, detail=f"Analysis {analysis_id} is {analysis.status.value}")
    return ReportResponse(
        analysis_id=analysis.id,
        survey_id=analysis.survey_id,
        source=detect_source(analysis.ai_response),
        created_date=analysis.created_date.isoformat(),
        blocks=blocks_to_dict(render_document(analysis.ai_response)),
    )


# =============================================================================
# Generation service
# =============================================================================

@app.post("/functions/v1/analyze-needs", response_model=AnalyzeNeedsResponse, response_model_exclude_none=True)
def analyze_needs(request: AnalyzeNeedsRequest):
    """LLM-backed document generation; serves the offline document when no model is usable."""
    answers = SurveyAnswers.from_dict(request.surveyData.model_dump())

    if not llm_configured():
        logger.info("LLM key not configured, using fallback response")
        return AnalyzeNeedsResponse(response=generate_offline_document(answers), source="fallback")

    model = get_model()
    result = llm_call(build_user_prompt(answers), system_prompt=SYSTEM_PROMPT, model=model)
    if result.error or not result.text.strip():
        logger.error(f"analyze-needs generation failed ({model}): {result.error or 'empty response'}")
        return AnalyzeNeedsResponse(
            response=generate_offline_document(answers),
            source="fallback",
            error="API temporarily unavailable",
        )

    logger.info(f"analyze-needs generated {len(result.text)} chars with {model} in {result.duration_s}s")
    return AnalyzeNeedsResponse(response=result.text, source=provider_for(model))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
