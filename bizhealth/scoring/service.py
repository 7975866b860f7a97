"""
Health Scoring Service
Orchestrates scoring, benchmarking and persistence of health scores.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Sequence

from bizhealth.config import Settings, get_settings
from bizhealth.models.health_score_record import HealthScoreRecord
from bizhealth.scoring.benchmark import compute_benchmark_percentile
from bizhealth.scoring.exceptions import HealthScoreNotFoundError
from bizhealth.scoring.health_score_calculator import HealthScoreCalculator, HealthScoreResult
from bizhealth.scoring.history import (
    calculate_score_change,
    calculate_score_change_velocity,
    critical_flags,
    score_data_freshness,
    secondary_issues,
)
from bizhealth.scoring.repository import HealthScoreRepository
from bizhealth.scoring.trend_series import TrendSeries, TrendSeriesGenerator
from bizhealth.scoring.utils import to_metric_value

logger = logging.getLogger(__name__)


def snapshot_metrics(raw_metrics: Mapping[str, Any]) -> dict[str, float]:
    """Numeric-only copy of the raw metrics, safe to store as JSON."""
    snapshot = {}
    for name, value in raw_metrics.items():
        number = to_metric_value(value)
        if number is not None:
            snapshot[str(name)] = number
    return snapshot


class HealthScoringService:
    """
    Service for scoring entities and managing their score history.

    The pure engine (calculator, benchmark) runs only after all I/O for an
    entity has completed: the previous score and the benchmark population
    are fetched first, the score is computed, then the record is saved.
    """

    def __init__(
        self,
        repository: HealthScoreRepository,
        calculator: Optional[HealthScoreCalculator] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.calculator = calculator or HealthScoreCalculator()
        self.settings = settings or get_settings()
        self.trend_generator = TrendSeriesGenerator(repository)

    def build_record(
        self,
        entity_id: str,
        raw_metrics: Mapping[str, Any],
        result: HealthScoreResult,
        calculated_at: datetime,
        benchmark_percentile: int,
        previous: Optional[HealthScoreRecord] = None,
        data_age_hours: Optional[float] = None,
    ) -> HealthScoreRecord:
        """Build the persisted record for one calculation."""
        previous_score = float(previous.overall_score) if previous is not None else None
        score_change = calculate_score_change(result.overall_score, previous_score)
        score_change_velocity = calculate_score_change_velocity(
            score_change,
            previous.calculated_at if previous is not None else None,
            calculated_at,
        )
        components = result.component_scores

        return HealthScoreRecord(
            entity_id=entity_id,
            calculated_at=calculated_at,
            overall_score=result.overall_score,
            health_status=result.health_status.value,
            previous_score=previous_score,
            score_change=score_change,
            score_change_velocity=score_change_velocity,
            confidence=result.confidence,
            benchmark_percentile=benchmark_percentile,
            financial_score=components.get("financial"),
            operational_score=components.get("operational"),
            team_score=components.get("team"),
            customer_score=components.get("customer"),
            market_score=components.get("market"),
            technology_score=components.get("technology"),
            primary_issue=result.primary_issue.message if result.primary_issue else None,
            issues=list(result.issues),
            critical_flags=critical_flags(result, self.settings.critical_flag_threshold),
            risk_assessment_score=result.risk_assessment,
            growth_opportunity_index=result.growth_opportunity_index,
            raw_metrics=snapshot_metrics(raw_metrics),
            data_freshness_score=score_data_freshness(data_age_hours),
            calculation_duration_ms=round(result.calculation_time_ms, 3),
            calculation_version=self.settings.calculation_version,
        )

    async def score_entity(
        self,
        entity_id: str,
        raw_metrics: Mapping[str, Any],
        data_age_hours: Optional[float] = None,
        force_recalculate: bool = False,
    ) -> dict[str, Any]:
        """
        Score one entity and persist the result.

        Skips entities scored within the recalculation window unless forced.

        Args:
            entity_id: Scored entity identifier
            raw_metrics: Raw metric values keyed by metric name
            data_age_hours: Age of the input metrics, for the freshness score
            force_recalculate: Score even if a recent record exists

        Returns:
            Outcome dictionary for the batch response
        """
        now = datetime.now(timezone.utc)

        if not force_recalculate:
            window_start = now - timedelta(hours=self.settings.recalculation_window_hours)
            if await self.repository.has_recent(entity_id, window_start):
                logger.info("Skipping %s: scored within the last %s hours", entity_id, self.settings.recalculation_window_hours)
                return {"entity_id": entity_id, "success": True, "skipped": True}

        previous = await self.repository.get_latest(entity_id)
        population = await self.repository.get_recent_scores(
            now - timedelta(hours=self.settings.benchmark_window_hours)
        )

        result = self.calculator.calculate(raw_metrics)
        percentile = compute_benchmark_percentile(result.overall_score, population)

        record = self.build_record(
            entity_id=entity_id,
            raw_metrics=raw_metrics,
            result=result,
            calculated_at=now,
            benchmark_percentile=percentile,
            previous=previous,
            data_age_hours=data_age_hours,
        )
        await self.repository.save(record)

        logger.info(
            "Scored %s: %.2f (%s), percentile=%d, confidence=%.2f",
            entity_id,
            result.overall_score,
            result.health_status.value,
            percentile,
            result.confidence,
        )

        return {
            "entity_id": entity_id,
            "success": True,
            "skipped": False,
            "record_id": str(record.id) if record.id is not None else None,
            "health_score": result.overall_score,
            "health_status": result.health_status.value,
            "score_change": float(record.score_change),
            "confidence": result.confidence,
            "benchmark_percentile": percentile,
            "primary_issue": record.primary_issue,
            "secondary_issues": secondary_issues(result),
        }

    async def score_entities(
        self,
        entities: Sequence[Mapping[str, Any]],
        force_recalculate: bool = False,
    ) -> dict[str, Any]:
        """
        Score a batch of entities.

        Entities share one session, so they are scored one after another,
        each inside its own savepoint. A failure for one entity is logged
        and reported without aborting the rest of the batch.

        Args:
            entities: Items with entity_id, raw_metrics and optional data_age_hours
            force_recalculate: Score even if recent records exist

        Returns:
            Dictionary with summary counts, results and errors
        """
        results: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []

        logger.info("Health scoring: starting calculation for %d entities", len(entities))

        for item in entities:
            entity_id = item["entity_id"]
            try:
                async with self.repository.savepoint():
                    outcome = await self.score_entity(
                        entity_id=entity_id,
                        raw_metrics=item.get("raw_metrics") or {},
                        data_age_hours=item.get("data_age_hours"),
                        force_recalculate=force_recalculate,
                    )
                results.append(outcome)
            except Exception as e:
                logger.error("Error calculating health score for entity %s: %s", entity_id, e, exc_info=True)
                errors.append({"entity_id": entity_id, "success": False, "error": str(e)})

        skipped = [r for r in results if r.get("skipped")]

        return {
            "summary": {
                "total": len(entities),
                "successful": len(results) - len(skipped),
                "skipped": len(skipped),
                "errors": len(errors),
            },
            "results": results,
            "errors": errors,
        }

    async def latest_scores(
        self,
        entity_ids: Optional[Sequence[str]] = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Latest persisted score per entity."""
        records = await self.repository.get_latest_per_entity(entity_ids, limit=limit)
        return [record.to_dict() for record in records]

    async def latest_score(self, entity_id: str) -> dict[str, Any]:
        """
        Latest persisted score for one entity.

        Raises:
            HealthScoreNotFoundError: if the entity was never scored
        """
        record = await self.repository.get_latest(entity_id)
        if record is None:
            raise HealthScoreNotFoundError(entity_id)
        return record.to_dict()

    async def trend_series(self, entity_id: str, days: Optional[int] = None) -> TrendSeries:
        """Trend series from the entity's persisted history."""
        return await self.trend_generator.generate(entity_id, days or self.settings.trend_days_default)
