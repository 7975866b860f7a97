"""
Health Score Record Model
Stores every computed Business Health Score for history, trends and
benchmark percentiles.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from bizhealth.database.base import Base, TimestampMixin, UUIDMixin


class HealthScoreRecord(Base, UUIDMixin, TimestampMixin):
    """
    One persisted health score calculation for a scored entity.

    Records are append-only: a new row per calculation. The latest row per
    entity is the current score; rows from the trailing benchmark window form
    the population for percentile ranking; raw_metrics snapshots back the
    trend series.

    Attributes:
        entity_id: Identifier of the scored entity (location, business unit)
        calculated_at: When the score was calculated

        Score:
            overall_score, health_status, confidence, benchmark_percentile
            previous_score, score_change (%), score_change_velocity (%/day)
            financial_score ... technology_score: category scores

        Issues:
            primary_issue: Worst flagged metric
            issues: All flagged metric messages, worst first
            critical_flags: Messages for metrics scoring below 30

        Indices:
            risk_assessment_score, growth_opportunity_index

        Metadata:
            raw_metrics: Numeric input snapshot used for trend series
            data_freshness_score, calculation_duration_ms, calculation_version
    """

    entity_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Identifier of the scored entity",
    )

    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the score was calculated",
    )

    # ========================================
    # Core Score
    # ========================================
    overall_score: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        comment="Overall health score (0-100)",
    )

    health_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="healthy, warning or critical",
    )

    previous_score: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2),
        nullable=True,
    )

    score_change: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        nullable=True,
        comment="Percentage change from previous score",
    )

    score_change_velocity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        nullable=True,
        comment="Score change percentage per day",
    )

    confidence: Mapped[Decimal] = mapped_column(
        Numeric(3, 2),
        nullable=False,
        comment="Data availability confidence (0-1)",
    )

    benchmark_percentile: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Percentile rank against recently scored entities",
    )

    # ========================================
    # Category Scores
    # ========================================
    financial_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    operational_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    team_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    customer_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    market_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    technology_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)

    # ========================================
    # Issue Intelligence
    # ========================================
    primary_issue: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    issues: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        comment="Flagged metric messages, worst first",
    )

    critical_flags: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        comment="Flagged metrics scoring below the critical threshold",
    )

    risk_assessment_score: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
    )

    growth_opportunity_index: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
    )

    # ========================================
    # Metadata
    # ========================================
    raw_metrics: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment="Numeric metric snapshot used for trend series",
    )

    data_freshness_score: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2),
        nullable=True,
    )

    calculation_duration_ms: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 3),
        nullable=True,
    )

    calculation_version: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="2.0",
    )

    __table_args__ = (
        UniqueConstraint("entity_id", "calculated_at", name="uq_health_score_records_entity_calculated"),
        Index("ix_health_score_records_entity_calculated", "entity_id", "calculated_at"),
        Index("ix_health_score_records_status_score", "health_status", "overall_score"),
        Index("ix_health_score_records_calculated_at", "calculated_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<HealthScoreRecord(id={self.id}, entity={self.entity_id}, "
            f"score={self.overall_score}, status={self.health_status})>"
        )

    @property
    def component_scores(self) -> dict[str, Optional[float]]:
        """Category scores keyed by category name."""
        return {
            "financial": _to_float(self.financial_score),
            "operational": _to_float(self.operational_score),
            "team": _to_float(self.team_score),
            "customer": _to_float(self.customer_score),
            "market": _to_float(self.market_score),
            "technology": _to_float(self.technology_score),
        }

    @property
    def is_critical(self) -> bool:
        return self.health_status == "critical"


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None
