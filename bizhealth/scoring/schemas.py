"""
Health Scoring Schemas
Pydantic models for health scoring API requests and responses.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawMetricsRequest(BaseModel):
    """Raw metrics for a single preview calculation."""

    raw_metrics: dict[str, Any] = Field(
        default_factory=dict,
        description="Metric name -> raw value. Missing, null or non-numeric values count as no data.",
    )


class EntityMetrics(BaseModel):
    """Raw metrics for one scored entity."""

    entity_id: str = Field(..., min_length=1, max_length=255, description="Scored entity identifier")
    raw_metrics: dict[str, Any] = Field(default_factory=dict, description="Metric name -> raw value")
    data_age_hours: Optional[float] = Field(None, ge=0, description="Age of the metrics in hours")


class HealthScoringRequest(BaseModel):
    """Batch scoring request."""

    entities: list[EntityMetrics] = Field(..., min_length=1, description="Entities to score")
    force_recalculate: bool = Field(False, description="Score even if scored within the recalculation window")


class IssueSchema(BaseModel):
    """A metric flagged below the issue threshold."""

    metric_name: str
    category: str
    score: float
    message: str


class HealthScoreResponse(BaseModel):
    """Computed health score."""

    overall_score: float = Field(..., ge=0, le=100, description="Overall health score (0-100)")
    health_status: str = Field(..., description="healthy, warning or critical")
    component_scores: dict[str, float] = Field(..., description="Category scores (0-100)")
    component_confidence: dict[str, float] = Field(default_factory=dict, description="Per-category data availability")
    confidence: float = Field(..., ge=0, le=1, description="Weighted data availability (0-1)")
    issues: list[str] = Field(..., description="Flagged metrics, worst first")
    flagged_metrics: list[IssueSchema] = Field(default_factory=list)
    primary_issue: Optional[str] = Field(None, description="Worst flagged metric")
    risk_assessment: float = Field(..., ge=0, le=100)
    growth_opportunity_index: float = Field(..., ge=0, le=100)
    calculation_time_ms: float
    degraded: bool = Field(False, description="True when the calculation failed and the fail-safe result was returned")


class BenchmarkRequest(BaseModel):
    """Percentile ranking request."""

    score: float = Field(..., description="Score to rank")
    population: list[Optional[float]] = Field(default_factory=list, description="Previously computed scores")


class BenchmarkResponse(BaseModel):
    """Percentile ranking result."""

    score: float
    population_size: int
    percentile: int = Field(..., ge=0, le=100)


class EntityScoringResult(BaseModel):
    """Outcome for one entity in a batch."""

    model_config = ConfigDict(extra="allow")

    entity_id: str
    success: bool
    skipped: bool = False
    record_id: Optional[str] = None
    health_score: Optional[float] = None
    health_status: Optional[str] = None
    score_change: Optional[float] = None
    confidence: Optional[float] = None
    benchmark_percentile: Optional[int] = None
    primary_issue: Optional[str] = None
    secondary_issues: list[str] = Field(default_factory=list)


class EntityScoringError(BaseModel):
    """Failure for one entity in a batch."""

    entity_id: str
    success: bool = False
    error: str


class ScoringSummary(BaseModel):
    total: int
    successful: int
    skipped: int
    errors: int


class HealthScoringResponse(BaseModel):
    """Batch scoring response."""

    success: bool = True
    summary: ScoringSummary
    results: list[EntityScoringResult]
    errors: list[EntityScoringError] = Field(default_factory=list)


class HealthScoreRecordsResponse(BaseModel):
    """Latest persisted scores."""

    success: bool = True
    data: list[dict[str, Any]]
    count: int


class TrendSeriesResponse(BaseModel):
    """Day-aligned trend series, oldest first. Gaps are null."""

    entity_id: str
    days: int
    dates: list[str]
    revenue: list[Optional[float]]
    leads: list[Optional[float]]
    conversion: list[Optional[float]]
