"""
Trend series for dashboard mini-charts.

Series are built only from persisted health score snapshots. Days with no
snapshot are reported as gaps (None) rather than filled with invented
values.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from bizhealth.scoring.utils import get_metric

if TYPE_CHECKING:
    from bizhealth.scoring.repository import HealthScoreRepository

logger = logging.getLogger(__name__)

# Series name -> raw metric key in the stored snapshot
TRACKED_METRICS = {
    "revenue": "current_revenue",
    "leads": "total_leads",
    "conversion": "conversion_rate",
}


@dataclass
class TrendSeries:
    """Aligned value series plus a parallel date series, oldest first."""
    dates: list[str] = field(default_factory=list)
    series: dict[str, list[Optional[float]]] = field(default_factory=dict)

    @property
    def revenue(self) -> list[Optional[float]]:
        return self.series.get("revenue", [])

    @property
    def leads(self) -> list[Optional[float]]:
        return self.series.get("leads", [])

    @property
    def conversion(self) -> list[Optional[float]]:
        return self.series.get("conversion", [])

    @property
    def points_with_data(self) -> int:
        """Number of days with at least one tracked value."""
        return sum(
            1 for index in range(len(self.dates))
            if any(values[index] is not None for values in self.series.values())
        )

    def to_dict(self) -> dict[str, Any]:
        return {"dates": list(self.dates), **{name: list(values) for name, values in self.series.items()}}


def _snapshot_day(calculated_at: datetime) -> date:
    if calculated_at.tzinfo is not None:
        calculated_at = calculated_at.astimezone(timezone.utc)
    return calculated_at.date()


def build_trend_series(
    snapshots: Iterable[tuple[datetime, Mapping[str, Any]]],
    days: int,
    end_date: Optional[date] = None,
    tracked_metrics: Optional[Mapping[str, str]] = None,
) -> TrendSeries:
    """
    Build day-aligned series from (calculated_at, raw_metrics) snapshots.

    Each of the `days` calendar days ending at `end_date` (UTC today by
    default) gets one slot. A slot takes the latest snapshot of that day;
    days without a snapshot, and metrics missing from a snapshot, are None.

    Args:
        snapshots: (calculated_at, raw_metrics) pairs in any order
        days: Number of days in the window
        end_date: Last day of the window (inclusive)
        tracked_metrics: Series name -> metric key mapping

    Returns:
        TrendSeries ordered oldest to newest
    """
    tracked = dict(tracked_metrics or TRACKED_METRICS)
    if days <= 0:
        return TrendSeries(dates=[], series={name: [] for name in tracked})

    end = end_date or datetime.now(timezone.utc).date()
    window = [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    latest_by_day: dict[date, tuple[datetime, Mapping[str, Any]]] = {}
    for calculated_at, raw_metrics in snapshots:
        day = _snapshot_day(calculated_at)
        existing = latest_by_day.get(day)
        if existing is None or calculated_at > existing[0]:
            latest_by_day[day] = (calculated_at, raw_metrics or {})

    series: dict[str, list[Optional[float]]] = {name: [] for name in tracked}
    for day in window:
        snapshot = latest_by_day.get(day)
        for name, metric_key in tracked.items():
            series[name].append(get_metric(snapshot[1], metric_key) if snapshot else None)

    return TrendSeries(dates=[day.isoformat() for day in window], series=series)


class TrendSeriesGenerator:
    """Builds trend series for an entity from its persisted score history."""

    def __init__(self, repository: "HealthScoreRepository"):
        self.repository = repository

    async def generate(
        self,
        entity_id: str,
        days: int = 30,
        end_date: Optional[date] = None,
    ) -> TrendSeries:
        """
        Generate trend series for the trailing `days` days.

        Args:
            entity_id: Scored entity identifier
            days: Window length in days
            end_date: Last day of the window (defaults to UTC today)

        Returns:
            TrendSeries with gaps where no score was recorded
        """
        end = end_date or datetime.now(timezone.utc).date()
        since = datetime.combine(end - timedelta(days=max(days, 1) - 1), datetime.min.time(), tzinfo=timezone.utc)

        records = await self.repository.get_history(entity_id, since)
        trend = build_trend_series(
            ((record.calculated_at, record.raw_metrics) for record in records),
            days=days,
            end_date=end,
        )

        logger.debug(
            "Trend series for %s: %d days, %d with data",
            entity_id,
            len(trend.dates),
            trend.points_with_data,
        )
        return trend
