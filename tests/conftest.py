"""Shared test fixtures for the health scoring test suite."""
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from bizhealth.config import Settings
from bizhealth.models.health_score_record import HealthScoreRecord
from bizhealth.scoring.health_score_calculator import HealthScoreCalculator
from bizhealth.scoring.service import HealthScoringService


# ── Metric fixtures ──────────────────────────────────────────────────


@pytest.fixture
def good_threshold_metrics():
    """Every metric populated; scored metrics sit exactly on their "good" threshold."""
    return {
        # Financial
        "revenue_achievement_rate": 80,
        "profit_margin_health": 15,
        "commission_velocity_days": 21,
        "cash_flow_predictability": 70,
        # Operational
        "lead_to_deal_conversion": 3,
        "response_time_performance": 120,
        "appointment_show_rate": 70,
        "pipeline_health_score": 65,
        "follow_up_completion_rate": 85,
        # Team
        "agent_utilization_rate": 70,
        "agent_productivity_index": 1.1,
        "training_completion_rate": 90,
        "team_collaboration_score": 4,
        "performance_consistency": 0.8,
        # Customer
        "client_satisfaction_score": 4.0,
        "net_promoter_score": 30,
        "client_retention_rate": 75,
        "communication_quality": 4.1,
        # Market
        "market_absorption_rate": 4,
        "days_on_market_avg": 60,
        "inventory_health_score": 55,
        "competitive_position": 3,
        # Technology
        "system_adoption_rate": 80,
        "data_quality_score": 95,
        "integration_health_score": 90,
        "automation_effectiveness": 60,
    }


@pytest.fixture
def calculator():
    return HealthScoreCalculator()


# ── Persistence fakes ────────────────────────────────────────────────


def make_record(
    entity_id: str,
    overall_score: float,
    calculated_at: datetime,
    raw_metrics: Optional[dict] = None,
    health_status: str = "warning",
) -> HealthScoreRecord:
    """Persisted-looking record without a database."""
    return HealthScoreRecord(
        id=uuid.uuid4(),
        entity_id=entity_id,
        calculated_at=calculated_at,
        overall_score=overall_score,
        health_status=health_status,
        confidence=1.0,
        issues=[],
        critical_flags=[],
        risk_assessment_score=100 - overall_score,
        growth_opportunity_index=50.0,
        raw_metrics=raw_metrics or {},
        calculation_version="2.0",
    )


class FakeHealthScoreRepository:
    """In-memory stand-in for HealthScoreRepository."""

    def __init__(self, records=None, fail_on_save=None):
        self.records: list[HealthScoreRecord] = list(records or [])
        self.fail_on_save = set(fail_on_save or [])
        self.savepoints = 0

    async def get_recent_scores(self, since):
        return [float(r.overall_score) for r in self.records if r.calculated_at >= since]

    async def get_latest(self, entity_id):
        history = [r for r in self.records if r.entity_id == entity_id]
        return max(history, key=lambda r: r.calculated_at) if history else None

    async def has_recent(self, entity_id, since):
        return any(r.entity_id == entity_id and r.calculated_at >= since for r in self.records)

    async def get_latest_per_entity(self, entity_ids=None, limit=50):
        latest = {}
        for record in self.records:
            if entity_ids and record.entity_id not in entity_ids:
                continue
            current = latest.get(record.entity_id)
            if current is None or record.calculated_at > current.calculated_at:
                latest[record.entity_id] = record
        ordered = sorted(latest.values(), key=lambda r: r.calculated_at, reverse=True)
        return ordered[:limit]

    async def get_history(self, entity_id, since):
        history = [r for r in self.records if r.entity_id == entity_id and r.calculated_at >= since]
        return sorted(history, key=lambda r: r.calculated_at)

    async def save(self, record):
        if record.entity_id in self.fail_on_save:
            raise RuntimeError(f"write failed for {record.entity_id}")
        if record.id is None:
            record.id = uuid.uuid4()
        self.records.append(record)
        return record

    @asynccontextmanager
    async def savepoint(self):
        self.savepoints += 1
        yield


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def fake_repository():
    return FakeHealthScoreRepository()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None)


@pytest.fixture
def scoring_service(fake_repository, test_settings):
    return HealthScoringService(fake_repository, settings=test_settings)


# ── API fixtures ─────────────────────────────────────────────────────


@pytest.fixture
def app(scoring_service):
    """FastAPI app with the scoring service bound to the in-memory repository."""
    from bizhealth.main import app as fastapi_app
    from bizhealth.scoring.router import get_scoring_service

    fastapi_app.dependency_overrides[get_scoring_service] = lambda: scoring_service
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac


def days_ago(reference: datetime, days: float) -> datetime:
    return reference - timedelta(days=days)
