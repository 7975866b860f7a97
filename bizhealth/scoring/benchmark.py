"""
Benchmark percentile ranking against recently computed scores.
"""

import logging
from bisect import bisect_right
from typing import Any, Iterable, Optional

from bizhealth.scoring.utils import round_half_up, to_metric_value

logger = logging.getLogger(__name__)

NEUTRAL_PERCENTILE = 50


def compute_benchmark_percentile(score: Any, population: Optional[Iterable[Any]]) -> int:
    """
    Rank a score against a population of previously computed scores.

    The percentile is the share of population members the score meets or
    exceeds, times 100, rounded to the nearest integer. An empty or
    unavailable population is treated as "typical" and returns 50.

    Args:
        score: Freshly computed overall score
        population: Previously computed overall scores (left untouched)

    Returns:
        Integer percentile in [0, 100]
    """
    value = to_metric_value(score)
    if value is None or population is None:
        return NEUTRAL_PERCENTILE

    scores = sorted(
        member for member in (to_metric_value(item) for item in population) if member is not None
    )
    if not scores:
        return NEUTRAL_PERCENTILE

    rank = bisect_right(scores, value)
    percentile = int(round_half_up(rank / len(scores) * 100, 0))

    logger.debug("Benchmark percentile: score=%.2f rank=%d/%d -> %d", value, rank, len(scores), percentile)
    return percentile
