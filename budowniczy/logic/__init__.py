"""Logic module for the needs-to-recommendation pipeline."""

from .catalog import (
    Catalog,
    Tier,
    RoomType,
    BudgetRange,
    QualityLevel,
    Phase,
    resolve_product,
    resolve_price_range,
    resolve_total_cost,
    resolve_advice,
)
from .survey import SurveyAnswers, validate_answers
from .offline import generate_offline_document
from .gateway import GenerationGateway, GenerationResult, generate_document
from .store import (
    SurveyStore,
    Survey,
    Analysis,
    AnalysisStatus,
    CompletionPayload,
    StoreError,
    NotFoundError,
    DuplicateIdError,
    ActiveAnalysisError,
    StorageUnavailableError,
)
from .pipeline import Pipeline, PipelineRun, PipelineState, InvalidTransitionError, RunManager
from .renderer import render_document, detect_source, blocks_to_dict

__all__ = [
    'Catalog',
    'Tier',
    'RoomType',
    'BudgetRange',
    'QualityLevel',
    'Phase',
    'resolve_product',
    'resolve_price_range',
    'resolve_total_cost',
    'resolve_advice',
    'SurveyAnswers',
    'validate_answers',
    'generate_offline_document',
    'GenerationGateway',
    'GenerationResult',
    'generate_document',
    'SurveyStore',
    'Survey',
    'Analysis',
    'AnalysisStatus',
    'CompletionPayload',
    'StoreError',
    'NotFoundError',
    'DuplicateIdError',
    'ActiveAnalysisError',
    'StorageUnavailableError',
    'Pipeline',
    'PipelineRun',
    'PipelineState',
    'InvalidTransitionError',
    'RunManager',
    'render_document',
    'detect_source',
    'blocks_to_dict',
]
