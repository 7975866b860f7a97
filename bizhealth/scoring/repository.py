"""
Health Score Repository
Database access for persisted health score records.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizhealth.models.health_score_record import HealthScoreRecord

logger = logging.getLogger(__name__)


class HealthScoreRepository:
    """
    Repository for HealthScoreRecord rows.

    Handles:
    - Benchmark population (scores computed since a cutoff)
    - Latest record per entity and recent-record checks
    - Score history for trend series
    - Saving new records
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_recent_scores(self, since: datetime) -> list[float]:
        """
        Get overall scores of all records calculated since a cutoff.

        Args:
            since: Inclusive lower bound on calculated_at

        Returns:
            List of overall scores (benchmark population)
        """
        stmt = select(HealthScoreRecord.overall_score).where(HealthScoreRecord.calculated_at >= since)
        result = await self.db.execute(stmt)
        return [float(score) for score in result.scalars().all() if score is not None]

    async def get_latest(self, entity_id: str) -> Optional[HealthScoreRecord]:
        """Get the most recent record for an entity."""
        stmt = (
            select(HealthScoreRecord)
            .where(HealthScoreRecord.entity_id == entity_id)
            .order_by(HealthScoreRecord.calculated_at.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def has_recent(self, entity_id: str, since: datetime) -> bool:
        """Check whether an entity was scored since a cutoff."""
        stmt = (
            select(HealthScoreRecord.id)
            .where(HealthScoreRecord.entity_id == entity_id)
            .where(HealthScoreRecord.calculated_at >= since)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_latest_per_entity(
        self,
        entity_ids: Optional[Sequence[str]] = None,
        limit: int = 50,
    ) -> list[HealthScoreRecord]:
        """
        Get the latest record for each entity.

        Args:
            entity_ids: Restrict to these entities (all entities if empty)
            limit: Maximum number of entities returned

        Returns:
            Latest records, most recently calculated first
        """
        latest = (
            select(
                HealthScoreRecord.entity_id,
                func.max(HealthScoreRecord.calculated_at).label("latest_at"),
            )
            .group_by(HealthScoreRecord.entity_id)
        )
        if entity_ids:
            latest = latest.where(HealthScoreRecord.entity_id.in_(list(entity_ids)))
        latest = latest.subquery()

        stmt = (
            select(HealthScoreRecord)
            .join(
                latest,
                (HealthScoreRecord.entity_id == latest.c.entity_id)
                & (HealthScoreRecord.calculated_at == latest.c.latest_at),
            )
            .order_by(HealthScoreRecord.calculated_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_history(self, entity_id: str, since: datetime) -> list[HealthScoreRecord]:
        """Get an entity's records since a cutoff, oldest first."""
        stmt = (
            select(HealthScoreRecord)
            .where(HealthScoreRecord.entity_id == entity_id)
            .where(HealthScoreRecord.calculated_at >= since)
            .order_by(HealthScoreRecord.calculated_at.asc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def save(self, record: HealthScoreRecord) -> HealthScoreRecord:
        """Add a record and flush so database defaults are populated."""
        self.db.add(record)
        await self.db.flush()
        logger.debug("Saved health score %s for entity %s", record.id, record.entity_id)
        return record

    def savepoint(self):
        """Nested transaction so one failed entity does not poison the session."""
        return self.db.begin_nested()
