"""
Health Scoring Router
API endpoints for health score calculation, benchmarking and history.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bizhealth.config import settings
from bizhealth.core.errors import ErrorCode, create_error_response
from bizhealth.core.rate_limit import limiter
from bizhealth.database.connection import get_async_session
from bizhealth.scoring.benchmark import compute_benchmark_percentile
from bizhealth.scoring.exceptions import HealthScoreNotFoundError
from bizhealth.scoring.health_score_calculator import HealthScoreCalculator
from bizhealth.scoring.repository import HealthScoreRepository
from bizhealth.scoring.schemas import (
    BenchmarkRequest,
    BenchmarkResponse,
    HealthScoreRecordsResponse,
    HealthScoreResponse,
    HealthScoringRequest,
    HealthScoringResponse,
    RawMetricsRequest,
    TrendSeriesResponse,
)
from bizhealth.scoring.service import HealthScoringService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health-scoring", tags=["Health Scoring"])

_calculator = HealthScoreCalculator()


def get_calculator() -> HealthScoreCalculator:
    """Dependency providing the shared, stateless calculator."""
    return _calculator


def get_scoring_service(
    db: AsyncSession = Depends(get_async_session),
    calculator: HealthScoreCalculator = Depends(get_calculator),
) -> HealthScoringService:
    """Dependency providing a scoring service bound to the request session."""
    return HealthScoringService(HealthScoreRepository(db), calculator=calculator)


@router.post(
    "/preview",
    response_model=HealthScoreResponse,
    summary="Preview a health score",
    description="Calculate a health score from raw metrics without storing it.",
)
async def preview_health_score(
    payload: RawMetricsRequest,
    calculator: HealthScoreCalculator = Depends(get_calculator),
) -> HealthScoreResponse:
    """
    Calculate a health score without persistence.

    Always returns a well-formed score: calculation failures come back as
    a critical score with the issue "Calculation error".
    """
    result = calculator.calculate(payload.raw_metrics)
    return HealthScoreResponse(**result.to_dict())


@router.post(
    "/benchmark",
    response_model=BenchmarkResponse,
    summary="Rank a score against a population",
)
async def benchmark_score(payload: BenchmarkRequest) -> BenchmarkResponse:
    """Percentile of a score within a supplied population (50 if empty)."""
    population = [score for score in payload.population if score is not None]
    return BenchmarkResponse(
        score=payload.score,
        population_size=len(population),
        percentile=compute_benchmark_percentile(payload.score, population),
    )


@router.post(
    "/",
    response_model=HealthScoringResponse,
    status_code=status.HTTP_200_OK,
    summary="Calculate and store health scores",
    description="Score a batch of entities, benchmark each against recent scores and store the results.",
)
@limiter.limit(settings.scoring_rate_limit)
async def calculate_health_scores(
    request: Request,
    payload: HealthScoringRequest,
    service: HealthScoringService = Depends(get_scoring_service),
) -> HealthScoringResponse:
    """
    Calculate health scores for a batch of entities.

    Entities scored within the recalculation window are skipped unless
    force_recalculate is set. Per-entity failures are reported in errors.
    """
    try:
        outcome = await service.score_entities(
            [entity.model_dump() for entity in payload.entities],
            force_recalculate=payload.force_recalculate,
        )
    except SQLAlchemyError:
        raise
    except Exception as e:
        logger.error("Error in health scoring batch: %s", e, exc_info=True)
        raise create_error_response(ErrorCode.CALCULATION_FAILED)

    return HealthScoringResponse(**outcome)


@router.get(
    "/",
    response_model=HealthScoreRecordsResponse,
    summary="Get latest health scores",
)
async def list_health_scores(
    entity_ids: Optional[str] = Query(None, description="Comma-separated entity ids"),
    limit: int = Query(50, ge=1, le=500),
    service: HealthScoringService = Depends(get_scoring_service),
) -> HealthScoreRecordsResponse:
    """Latest stored score for each entity."""
    ids = [entity_id.strip() for entity_id in entity_ids.split(",") if entity_id.strip()] if entity_ids else []
    data = await service.latest_scores(ids, limit=limit)
    return HealthScoreRecordsResponse(data=data, count=len(data))


@router.get(
    "/{entity_id}",
    summary="Get the latest health score for an entity",
)
async def get_health_score(
    entity_id: str,
    service: HealthScoringService = Depends(get_scoring_service),
) -> dict:
    try:
        return await service.latest_score(entity_id)
    except HealthScoreNotFoundError as e:
        raise create_error_response(ErrorCode.SCORE_NOT_FOUND, message=e.message)


@router.get(
    "/{entity_id}/trends",
    response_model=TrendSeriesResponse,
    summary="Get trend series for an entity",
    description="Daily revenue, lead and conversion series from stored score history. Days without data are null.",
)
async def get_trend_series(
    entity_id: str,
    days: int = Query(settings.trend_days_default, ge=1, le=settings.trend_days_max),
    service: HealthScoringService = Depends(get_scoring_service),
) -> TrendSeriesResponse:
    trend = await service.trend_series(entity_id, days)
    return TrendSeriesResponse(
        entity_id=entity_id,
        days=days,
        dates=trend.dates,
        revenue=trend.revenue,
        leads=trend.leads,
        conversion=trend.conversion,
    )
