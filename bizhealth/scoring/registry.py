"""
Scoring Configuration Registry

Explicit, injectable table of categories, their metrics, weights and
scorers. The calculator receives a ScoringConfig at construction time,
so alternate weightings can be tested without touching engine internals.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from bizhealth.scoring.exceptions import ScoringConfigError
from bizhealth.scoring.scorers import MetricScorer, default_scorer, get_scorer

WEIGHT_TOLERANCE = 1e-9

# Category contribution to the overall score (must sum to 1.0)
CATEGORY_WEIGHTS = {
    "financial": 0.35,
    "operational": 0.35,
    "team": 0.15,
    "customer": 0.10,
    "market": 0.03,
    "technology": 0.02,
}

# Per-category metric weights. Within a category the weights are normalised
# by the total weight actually observed, so they need not sum to 1.
CATEGORY_METRICS = {
    "financial": (
        ("revenue_achievement_rate", 0.4),
        ("profit_margin_health", 0.3),
        ("commission_velocity_days", 0.15),
        ("cash_flow_predictability", 0.15),
    ),
    "operational": (
        ("lead_to_deal_conversion", 0.3),
        ("response_time_performance", 0.25),
        ("appointment_show_rate", 0.2),
        ("pipeline_health_score", 0.15),
        ("follow_up_completion_rate", 0.1),
    ),
    "team": (
        ("agent_utilization_rate", 0.35),
        ("agent_productivity_index", 0.25),
        ("training_completion_rate", 0.2),
        ("team_collaboration_score", 0.15),
        ("performance_consistency", 0.05),
    ),
    "customer": (
        ("client_satisfaction_score", 0.4),
        ("net_promoter_score", 0.3),
        ("client_retention_rate", 0.2),
        ("communication_quality", 0.1),
    ),
    "market": (
        ("market_absorption_rate", 0.4),
        ("days_on_market_avg", 0.3),
        ("inventory_health_score", 0.2),
        ("competitive_position", 0.1),
    ),
    "technology": (
        ("system_adoption_rate", 0.4),
        ("data_quality_score", 0.3),
        ("integration_health_score", 0.2),
        ("automation_effectiveness", 0.1),
    ),
}


@dataclass(frozen=True)
class MetricDefinition:
    """One metric within a category."""
    name: str
    weight: float
    scorer: Optional[MetricScorer] = None

    def resolve_scorer(self) -> MetricScorer:
        """Registered scorer, or the neutral default when none is set."""
        return self.scorer if self.scorer is not None else default_scorer


@dataclass(frozen=True)
class CategoryDefinition:
    """A named group of metrics with a fixed contribution weight."""
    name: str
    weight: float
    metrics: tuple[MetricDefinition, ...] = field(default_factory=tuple)

    @property
    def metric_names(self) -> list[str]:
        return [metric.name for metric in self.metrics]


@dataclass(frozen=True)
class ScoringConfig:
    """
    Complete weighting configuration for the Health Score Calculator.

    Validated on construction:
    - at least one category, names unique
    - every category and metric weight positive
    - category weights sum to 1.0, which keeps the overall score in [0, 100]
    - health status thresholds ordered (warning <= healthy)
    """
    categories: tuple[CategoryDefinition, ...]
    issue_threshold: float = 40.0
    healthy_threshold: float = 70.0
    warning_threshold: float = 40.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", tuple(self.categories))

        if not self.categories:
            raise ScoringConfigError("Scoring config needs at least one category")

        names = [category.name for category in self.categories]
        if len(set(names)) != len(names):
            raise ScoringConfigError(f"Duplicate category names: {names}")

        for category in self.categories:
            if category.weight <= 0:
                raise ScoringConfigError(
                    f"Category weight must be positive, got {category.weight}",
                    category=category.name,
                )
            if not category.metrics:
                raise ScoringConfigError("Category has no metrics", category=category.name)
            for metric in category.metrics:
                if metric.weight <= 0:
                    raise ScoringConfigError(
                        f"Metric {metric.name} weight must be positive, got {metric.weight}",
                        category=category.name,
                    )

        total = self.total_category_weight
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=WEIGHT_TOLERANCE):
            raise ScoringConfigError(f"Category weights must sum to 1.0, got {total}")

        if self.warning_threshold > self.healthy_threshold:
            raise ScoringConfigError(
                f"Warning threshold {self.warning_threshold} above healthy threshold {self.healthy_threshold}"
            )

    @property
    def total_category_weight(self) -> float:
        return math.fsum(category.weight for category in self.categories)

    @property
    def category_names(self) -> list[str]:
        return [category.name for category in self.categories]

    def get_category(self, name: str) -> CategoryDefinition:
        for category in self.categories:
            if category.name == name:
                return category
        raise KeyError(name)

    def with_category_weights(self, weights: dict[str, float]) -> "ScoringConfig":
        """
        Copy of this config with some category weights replaced.

        Raises:
            ScoringConfigError: if the resulting weights are invalid
        """
        unknown = set(weights) - set(self.category_names)
        if unknown:
            raise ScoringConfigError(f"Unknown categories: {sorted(unknown)}")

        categories = tuple(
            CategoryDefinition(
                name=category.name,
                weight=weights.get(category.name, category.weight),
                metrics=category.metrics,
            )
            for category in self.categories
        )
        return ScoringConfig(
            categories=categories,
            issue_threshold=self.issue_threshold,
            healthy_threshold=self.healthy_threshold,
            warning_threshold=self.warning_threshold,
        )


def build_category(
    name: str,
    weight: float,
    metrics: Sequence[tuple[str, float]],
) -> CategoryDefinition:
    """Build a category, attaching registered scorers (or the default) by metric name."""
    return CategoryDefinition(
        name=name,
        weight=weight,
        metrics=tuple(
            MetricDefinition(name=metric_name, weight=metric_weight, scorer=get_scorer(metric_name))
            for metric_name, metric_weight in metrics
        ),
    )


def build_default_config() -> ScoringConfig:
    """The six-category production weighting."""
    return ScoringConfig(
        categories=tuple(
            build_category(name, weight, CATEGORY_METRICS[name])
            for name, weight in CATEGORY_WEIGHTS.items()
        )
    )


DEFAULT_CONFIG = build_default_config()
