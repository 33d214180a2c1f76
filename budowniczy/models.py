"""Pydantic schemas for the Bot Budowniczy API."""

from typing import Optional

from pydantic import BaseModel, Field


# ========================================
# Survey form
# ========================================

class SurveyForm(BaseModel):
    """Questionnaire as submitted by the form. Missing fields are validation errors, not 422s from pydantic."""
    what_looking_for: str = Field("", description="Free text, e.g. 'płytki łazienkowe'")
    room_type: str = Field("", description="Łazienka | Kuchnia | Salon | Sypialnia | Inne")
    budget_range: str = Field("", description="do 1000zł | 1000-5000zł | 5000-10000zł | powyżej 10000zł | nie wiem")
    quality_level: str = Field("", description="Podstawowa | Dobra | Premium")
    additional_info: str = Field("", description="Optional notes")


class FormOptions(BaseModel):
    room_types: list[str]
    budget_ranges: list[str]
    quality_levels: list[str]


# ========================================
# Pipeline runs and reports
# ========================================

class ValidationErrorResponse(BaseModel):
    run_id: str
    state: str
    errors: dict[str, str] = Field(default_factory=dict)


class RunResponse(BaseModel):
    run_id: str
    state: str
    progress: int = 0
    validation_errors: dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None
    source: Optional[str] = None
    survey: Optional[dict] = None
    analysis: Optional[dict] = None


class ReportResponse(BaseModel):
    analysis_id: str
    survey_id: str
    source: str = Field(..., description="offline or online")
    created_date: str
    blocks: list[dict] = Field(default_factory=list)


# ========================================
# Generation service (analyze-needs)
# ========================================

class AnalyzeNeedsRequest(BaseModel):
    """Wire format expected by the analyze-needs endpoint."""
    surveyData: SurveyForm


class AnalyzeNeedsResponse(BaseModel):
    response: str
    source: str = Field(..., description="Provider name (openai, gemini) or fallback")
    error: Optional[str] = None
