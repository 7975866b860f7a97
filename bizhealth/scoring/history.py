"""
Score history helpers: change since the previous score, change velocity,
data freshness, and issue triage.
"""

from datetime import datetime
from typing import Optional

from bizhealth.scoring.health_score_calculator import HealthScoreResult
from bizhealth.scoring.utils import round_half_up

SECONDS_PER_DAY = 60 * 60 * 24
CRITICAL_FLAG_THRESHOLD = 30.0


def calculate_score_change(current: float, previous: Optional[float]) -> float:
    """
    Percentage change from the previous score.

    Returns:
        Rounded percentage change, or 0 when there is no usable previous score
    """
    if previous is None or previous == 0:
        return 0.0

    change = ((current - previous) / previous) * 100
    return round_half_up(change, 2)


def calculate_score_change_velocity(
    score_change: float,
    previous_calculated_at: Optional[datetime],
    now: datetime,
) -> float:
    """
    Score change per day since the previous calculation.

    Elapsed time below one day counts as one day.
    """
    if previous_calculated_at is None:
        return 0.0

    elapsed_days = (now - previous_calculated_at).total_seconds() / SECONDS_PER_DAY
    return round_half_up(score_change / max(1.0, elapsed_days), 2)


def score_data_freshness(data_age_hours: Optional[float]) -> float:
    """
    Score how fresh the input metrics were (0-100).

    Freshness decays in bands: 1h, 4h, 1 day, 3 days, then slowly to 0.
    Unknown age counts as fresh.
    """
    age = data_age_hours or 0.0

    if age <= 1:
        return 100.0
    if age <= 4:
        return 90 - (age - 1) * 5
    if age <= 24:
        return 80 - (age - 4) * 2
    if age <= 72:
        return 50 - (age - 24) * 0.5
    return max(0.0, 25 - (age - 72) * 0.1)


def critical_flags(
    result: HealthScoreResult,
    threshold: float = CRITICAL_FLAG_THRESHOLD,
) -> list[str]:
    """Issue messages for metrics scoring below the critical threshold."""
    return [issue.message for issue in result.flagged_metrics if issue.score < threshold]


def secondary_issues(result: HealthScoreResult) -> list[str]:
    """All issue messages except the primary one."""
    return list(result.issues[1:])
