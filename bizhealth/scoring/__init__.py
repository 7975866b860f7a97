"""
Health Scoring Module
Scores business health from raw metrics, ranks scores against recent
peers and tracks score history.
"""

from bizhealth.scoring.benchmark import compute_benchmark_percentile
from bizhealth.scoring.exceptions import HealthScoreNotFoundError, ScoringConfigError
from bizhealth.scoring.health_score_calculator import (
    HealthScoreCalculator,
    HealthScoreResult,
    HealthStatus,
    compute_health_score,
)
from bizhealth.scoring.registry import DEFAULT_CONFIG, ScoringConfig
from bizhealth.scoring.service import HealthScoringService

__all__ = [
    "compute_benchmark_percentile",
    "HealthScoreNotFoundError",
    "ScoringConfigError",
    "HealthScoreCalculator",
    "HealthScoreResult",
    "HealthStatus",
    "compute_health_score",
    "DEFAULT_CONFIG",
    "ScoringConfig",
    "HealthScoringService",
]
