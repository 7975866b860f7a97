"""
Metric Scorers

Each scorer maps one raw metric value, in its native unit, onto a 0-100
score using a piecewise-linear curve calibrated against an industry
benchmark. Scorers are kept as separate named functions so each
calibration can be tuned and tested on its own.

Curve shape (higher-is-better):
- at or above "excellent" -> 100
- "good" to "excellent"   -> steep ramp
- "poor" to "good"        -> shallower ramp
- below "poor"            -> ramp toward 0, floored at 0

Inverse metrics (response time, days on market, absorption months) mirror
the same shape. Raw input is never clamped before scoring so curves defined
over negative domains (NPS) work as calibrated; the output always is.
"""

from functools import wraps
from typing import Callable

from bizhealth.scoring.utils import clamp

MetricScorer = Callable[[float], float]

DEFAULT_SCORE = 50.0


def _bounded(scorer: MetricScorer) -> MetricScorer:
    """Clamp a scorer's output to [0, 100] regardless of curve overshoot."""

    @wraps(scorer)
    def wrapper(value: float) -> float:
        return clamp(float(scorer(value)))

    return wrapper


def default_scorer(value: float) -> float:
    """Fallback for metrics with no registered curve: neutral 50."""
    return DEFAULT_SCORE


# =====================
# Financial
# =====================

@_bounded
def revenue_achievement_rate(value: float) -> float:
    """Percentage of revenue target achieved (target 100%)."""
    if value >= 100:
        return 100
    if value >= 80:
        return 80 + (value - 80) * 0.5
    if value >= 60:
        return 60 + (value - 60) * 0.33
    return max(0, value * 0.5)


@_bounded
def profit_margin_health(value: float) -> float:
    """Profit margin %, healthy band 15-25%."""
    if value >= 20:
        return 100
    if value >= 15:
        return 75 + (value - 15) * 10
    if value >= 10:
        return 50 + (value - 10) * 5
    return max(0, value * 2.5)


# =====================
# Operational
# =====================

@_bounded
def lead_to_deal_conversion(value: float) -> float:
    """Lead to deal conversion %, industry average ~3-5%."""
    if value >= 5:
        return 100
    if value >= 3:
        return 60 + (value - 3) * 10
    if value >= 1:
        return 20 + (value - 1) * 16.67
    return max(0, value * 20)


@_bounded
def response_time_performance(value: float) -> float:
    """Average lead response time in minutes, target under 60."""
    if value <= 60:
        return 100
    if value <= 120:
        return 75 - (value - 60) * 0.25
    if value <= 240:
        return 50 - (value - 120) * 0.125
    return max(0, 25 - (value - 240) * 0.05)


@_bounded
def appointment_show_rate(value: float) -> float:
    """Appointment show rate %, standard 70%+."""
    if value >= 80:
        return 100
    if value >= 70:
        return 75 + (value - 70) * 2.5
    if value >= 50:
        return 50 + (value - 50) * 0.5
    return max(0, value * 0.5)


# =====================
# Team
# =====================

@_bounded
def agent_utilization_rate(value: float) -> float:
    """Agent utilization %, target 70-85%."""
    if value >= 80:
        return 100
    if value >= 70:
        return 80 + (value - 70) * 2
    if value >= 50:
        return 50 + (value - 50) * 0.6
    return max(0, value * 0.5)


@_bounded
def training_completion_rate(value: float) -> float:
    """Training completion %, target 90%+."""
    if value >= 95:
        return 100
    if value >= 90:
        return 80 + (value - 90) * 4
    if value >= 75:
        return 50 + (value - 75) * 0.8
    return max(0, value * 0.5)


# =====================
# Customer
# =====================

@_bounded
def client_satisfaction_score(value: float) -> float:
    """Client satisfaction on a 1-5 scale, target 4.2+."""
    if value >= 4.5:
        return 100
    if value >= 4.0:
        return 70 + (value - 4.0) * 60
    if value >= 3.5:
        return 40 + (value - 3.5) * 60
    return max(0, (value - 1) * 22.22)


@_bounded
def net_promoter_score(value: float) -> float:
    """Net promoter score on a -100..100 scale, target 30+."""
    if value >= 50:
        return 100
    if value >= 30:
        return 70 + (value - 30) * 1.5
    if value >= 0:
        return 40 + value * 1.0
    return max(0, 40 + value * 0.5)


# =====================
# Market (lower is better)
# =====================

@_bounded
def market_absorption_rate(value: float) -> float:
    """Months of inventory absorption, 1-12; lower is a hotter market."""
    if value <= 2:
        return 100
    if value <= 4:
        return 80 - (value - 2) * 10
    if value <= 8:
        return 50 - (value - 4) * 3.75
    return max(0, 25 - (value - 8) * 2.5)


@_bounded
def days_on_market_avg(value: float) -> float:
    """Average days on market; lower is better."""
    if value <= 30:
        return 100
    if value <= 60:
        return 80 - (value - 30) * 0.67
    if value <= 120:
        return 40 - (value - 60) * 0.25
    return max(0, 15 - (value - 120) * 0.083)


# =====================
# Technology
# =====================

@_bounded
def system_adoption_rate(value: float) -> float:
    """System adoption %, target 80%+."""
    if value >= 90:
        return 100
    if value >= 80:
        return 75 + (value - 80) * 2.5
    if value >= 60:
        return 50 + (value - 60) * 0.625
    return max(0, value * 0.5)


@_bounded
def data_quality_score(value: float) -> float:
    """Data quality %, target 95%+."""
    if value >= 98:
        return 100
    if value >= 95:
        return 80 + (value - 95) * 4
    if value >= 90:
        return 60 + (value - 90) * 2
    return max(0, value * 0.5)


SCORERS: dict[str, MetricScorer] = {
    scorer.__name__: scorer
    for scorer in (
        revenue_achievement_rate,
        profit_margin_health,
        lead_to_deal_conversion,
        response_time_performance,
        appointment_show_rate,
        agent_utilization_rate,
        training_completion_rate,
        client_satisfaction_score,
        net_promoter_score,
        market_absorption_rate,
        days_on_market_avg,
        system_adoption_rate,
        data_quality_score,
    )
}


def get_scorer(metric_name: str) -> MetricScorer:
    """Get the registered scorer for a metric, or the default scorer."""
    return SCORERS.get(metric_name, default_scorer)
