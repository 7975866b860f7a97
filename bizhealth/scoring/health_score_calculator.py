"""
Business Health Score Calculator

Converts a sparse mapping of raw business metrics into:
- an overall health score (0-100), weighted across six categories
  (financial, operational, team, customer, market, technology)
- a three-tier health status (healthy >= 70, warning >= 40, critical)
- per-category scores and a data-availability confidence (0-1)
- flagged issues (metrics scoring below 40) and the single worst one
- risk assessment and growth opportunity indices

The calculator never raises: any failure during computation produces a
worst-case "critical" result so that consumers never see a falsely
healthy signal.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from bizhealth.scoring.aggregator import CategoryResult, Issue, aggregate_category
from bizhealth.scoring.registry import DEFAULT_CONFIG, ScoringConfig
from bizhealth.scoring.utils import clamp, get_metric, round_half_up

logger = logging.getLogger(__name__)

CALCULATION_ERROR_ISSUE = "Calculation error"

# Post-hoc adjustments layered over the inverse of the health score.
# Placeholder heuristics: not calibrated against outcome data.
RISK_VOLATILITY_FACTOR = 0.2
GROWTH_HEALTH_GAP_FACTOR = 0.7
GROWTH_MARKET_POTENTIAL_FACTOR = 0.3
DEFAULT_MARKET_POTENTIAL = 50.0


class HealthStatus(str, Enum):
    """Health status tiers."""
    HEALTHY = "healthy"    # >= 70
    WARNING = "warning"    # 40-69
    CRITICAL = "critical"  # < 40


@dataclass(frozen=True)
class HealthScoreResult:
    """Immutable result of one health score calculation. `degraded` marks the fail-safe result."""
    overall_score: float
    health_status: HealthStatus
    component_scores: Mapping[str, float]
    confidence: float
    issues: tuple[str, ...]
    risk_assessment: float
    growth_opportunity_index: float
    calculation_time_ms: float
    primary_issue: Optional[Issue] = None
    flagged_metrics: tuple[Issue, ...] = ()
    component_confidence: Mapping[str, float] = field(default_factory=dict)
    degraded: bool = False

    def __post_init__(self) -> None:
        # Containers are stored as read-only views
        object.__setattr__(self, "component_scores", MappingProxyType(dict(self.component_scores)))
        object.__setattr__(self, "component_confidence", MappingProxyType(dict(self.component_confidence)))
        object.__setattr__(self, "issues", tuple(self.issues))
        object.__setattr__(self, "flagged_metrics", tuple(self.flagged_metrics))

    def to_dict(self) -> dict[str, Any]:
        """Serialise for API responses and persistence."""
        return {
            "overall_score": self.overall_score,
            "health_status": self.health_status.value,
            "component_scores": {
                category: round_half_up(score, 2) for category, score in self.component_scores.items()
            },
            "component_confidence": dict(self.component_confidence),
            "confidence": self.confidence,
            "issues": list(self.issues),
            "flagged_metrics": [issue.to_dict() for issue in self.flagged_metrics],
            "primary_issue": self.primary_issue.message if self.primary_issue else None,
            "risk_assessment": self.risk_assessment,
            "growth_opportunity_index": self.growth_opportunity_index,
            "calculation_time_ms": round(self.calculation_time_ms, 3),
            "degraded": self.degraded,
        }


def classify_health_status(
    score: float,
    healthy_threshold: float = 70.0,
    warning_threshold: float = 40.0,
) -> HealthStatus:
    """Get health status from score. Lower edge of each tier is inclusive."""
    if score >= healthy_threshold:
        return HealthStatus.HEALTHY
    elif score >= warning_threshold:
        return HealthStatus.WARNING
    else:
        return HealthStatus.CRITICAL


def calculate_risk_assessment(overall_score: float, revenue_volatility: float = 0.0) -> float:
    """Inverse of health, nudged up by revenue volatility. Clamped to [0, 100]."""
    return clamp(100 - overall_score + revenue_volatility * RISK_VOLATILITY_FACTOR)


def calculate_growth_opportunity(
    overall_score: float,
    market_potential: float = DEFAULT_MARKET_POTENTIAL,
) -> float:
    """Low current health plus high market potential means high opportunity."""
    return clamp(
        (100 - overall_score) * GROWTH_HEALTH_GAP_FACTOR
        + market_potential * GROWTH_MARKET_POTENTIAL_FACTOR
    )


def degraded_result(calculation_time_ms: float = 0.0) -> HealthScoreResult:
    """Worst-case result returned when a calculation fails."""
    return HealthScoreResult(
        overall_score=0.0,
        health_status=HealthStatus.CRITICAL,
        component_scores={},
        confidence=0.0,
        issues=[CALCULATION_ERROR_ISSUE],
        risk_assessment=100.0,
        growth_opportunity_index=0.0,
        calculation_time_ms=calculation_time_ms,
        degraded=True,
    )


class HealthScoreCalculator:
    """
    Calculates the Business Health Score (0-100).

    The weighting table is injected as a ScoringConfig; by default the
    production six-category table is used. Calculations share no mutable
    state, so one calculator can serve concurrent callers.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def calculate(self, raw_metrics: Mapping[str, Any]) -> HealthScoreResult:
        """
        Calculate the health score for one entity.

        Accepts partial maps; unknown keys are ignored and missing or
        malformed values count as "no data".

        Args:
            raw_metrics: Raw metric values keyed by metric name

        Returns:
            HealthScoreResult, or the degraded critical result on failure
        """
        start = time.perf_counter()
        try:
            return self._calculate(raw_metrics, start)
        except Exception:
            logger.exception("Error calculating health score")
            return degraded_result(self._elapsed_ms(start))

    def _calculate(self, raw_metrics: Mapping[str, Any], start: float) -> HealthScoreResult:
        if not isinstance(raw_metrics, Mapping):
            raise TypeError(f"raw_metrics must be a mapping, got {type(raw_metrics).__name__}")

        config = self.config
        category_results: list[tuple[float, CategoryResult]] = [
            (category.weight, aggregate_category(category, raw_metrics, config.issue_threshold))
            for category in config.categories
        ]

        overall_score = 0.0
        total_confidence = 0.0
        component_scores: dict[str, float] = {}
        component_confidence: dict[str, float] = {}
        all_issues: list[Issue] = []

        for weight, result in category_results:
            overall_score += result.score * weight
            total_confidence += result.confidence * weight
            component_scores[result.category] = result.score
            component_confidence[result.category] = round_half_up(result.confidence, 2)
            all_issues.extend(result.issues)

        if not math.isfinite(overall_score):
            raise ArithmeticError(f"Non-finite overall score: {overall_score}")

        overall_score = clamp(overall_score)
        total_confidence = clamp(total_confidence, 0.0, 1.0)

        health_status = classify_health_status(
            overall_score,
            healthy_threshold=config.healthy_threshold,
            warning_threshold=config.warning_threshold,
        )

        # Worst-scoring flagged metric first; sort is stable so ties keep
        # category and metric declaration order
        all_issues.sort(key=lambda issue: issue.score)
        primary_issue = all_issues[0] if all_issues else None

        revenue_volatility = get_metric(raw_metrics, "revenue_volatility", default=0.0)
        market_potential = get_metric(raw_metrics, "market_potential", default=DEFAULT_MARKET_POTENTIAL)

        risk_assessment = calculate_risk_assessment(overall_score, revenue_volatility)
        growth_opportunity_index = calculate_growth_opportunity(overall_score, market_potential)

        result = HealthScoreResult(
            overall_score=round_half_up(overall_score, 2),
            health_status=health_status,
            component_scores=component_scores,
            confidence=round_half_up(total_confidence, 2),
            issues=[issue.message for issue in all_issues],
            risk_assessment=round_half_up(risk_assessment, 2),
            growth_opportunity_index=round_half_up(growth_opportunity_index, 2),
            calculation_time_ms=self._elapsed_ms(start),
            primary_issue=primary_issue,
            flagged_metrics=all_issues,
            component_confidence=component_confidence,
        )

        logger.debug(
            "Health score calculated: score=%.2f, status=%s, confidence=%.2f, issues=%d",
            result.overall_score,
            result.health_status.value,
            result.confidence,
            len(result.issues),
        )
        return result

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000


def compute_health_score(
    raw_metrics: Mapping[str, Any],
    config: Optional[ScoringConfig] = None,
) -> HealthScoreResult:
    """Score one entity's raw metrics. Never raises."""
    return HealthScoreCalculator(config).calculate(raw_metrics)
