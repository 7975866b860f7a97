"""
Category aggregation for health scoring.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from bizhealth.scoring.registry import CategoryDefinition
from bizhealth.scoring.utils import clamp, get_metric, round_half_up

logger = logging.getLogger(__name__)

ISSUE_THRESHOLD = 40.0


@dataclass(frozen=True)
class Issue:
    """A metric that scored below the issue threshold."""
    metric_name: str
    score: float
    category: str = ""

    @property
    def label(self) -> str:
        return self.metric_name.replace("_", " ")

    @property
    def message(self) -> str:
        """Display form, e.g. 'response time performance: 35%'."""
        return f"{self.label}: {round_half_up(self.score, 0):.0f}%"

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric_name": self.metric_name,
            "category": self.category,
            "score": round_half_up(self.score, 2),
            "message": self.message,
        }


@dataclass(frozen=True)
class CategoryResult:
    """Aggregated score for one category."""
    category: str
    score: float
    confidence: float
    issues: list[Issue] = field(default_factory=list)
    data_points: int = 0
    metric_count: int = 0


def aggregate_category(
    category: CategoryDefinition,
    raw_metrics: Mapping[str, Any],
    issue_threshold: float = ISSUE_THRESHOLD,
) -> CategoryResult:
    """
    Combine a category's metric scores into one weighted category score.

    Missing or malformed metrics are skipped entirely: they add nothing to
    the weighted sum or to the weight denominator, and only lower the
    confidence, which is the plain fraction of defined metrics that had data.
    Each metric score is clamped to [0, 100], whichever scorer produced it.

    Args:
        category: Category definition (metrics, weights, scorers)
        raw_metrics: Raw metric values keyed by metric name
        issue_threshold: Scores strictly below this are flagged

    Returns:
        CategoryResult; score is 0 when no metric in the category had data

    Raises:
        ArithmeticError: if a scorer returns NaN or an infinity
    """
    weighted_sum = 0.0
    weight_seen = 0.0
    data_points = 0
    issues: list[Issue] = []

    for metric in category.metrics:
        value = get_metric(raw_metrics, metric.name)
        if value is None:
            continue

        score = float(metric.resolve_scorer()(value))
        if not math.isfinite(score):
            raise ArithmeticError(f"Scorer for {metric.name} returned {score}")
        score = clamp(score)
        weighted_sum += score * metric.weight
        weight_seen += metric.weight
        data_points += 1

        if score < issue_threshold:
            issues.append(Issue(metric_name=metric.name, score=score, category=category.name))

    score = weighted_sum / weight_seen if weight_seen > 0 else 0.0
    metric_count = len(category.metrics)
    confidence = data_points / metric_count if metric_count else 0.0

    logger.debug(
        "Category %s: score=%.2f, data_points=%d/%d, issues=%d",
        category.name,
        score,
        data_points,
        metric_count,
        len(issues),
    )

    return CategoryResult(
        category=category.name,
        score=score,
        confidence=confidence,
        issues=issues,
        data_points=data_points,
        metric_count=metric_count,
    )
