"""API tests for the health scoring endpoints."""
from datetime import timedelta

import pytest

from tests.conftest import make_record


@pytest.mark.asyncio
async def test_health_check(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_preview(client, good_threshold_metrics):
    resp = await client.post("/api/health-scoring/preview", json={"raw_metrics": good_threshold_metrics})
    assert resp.status_code == 200
    body = resp.json()
    assert body["overall_score"] == pytest.approx(64.96)
    assert body["health_status"] == "warning"
    assert body["confidence"] == 1.0
    assert body["component_scores"]["market"] == pytest.approx(56.97)
    assert body["issues"] == []
    assert body["primary_issue"] is None


@pytest.mark.asyncio
async def test_preview_flags_issues(client):
    resp = await client.post(
        "/api/health-scoring/preview",
        json={"raw_metrics": {"response_time_performance": 300, "net_promoter_score": "n/a"}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["health_status"] == "critical"
    assert body["primary_issue"] == "response time performance: 22%"
    assert body["flagged_metrics"][0]["category"] == "operational"


@pytest.mark.asyncio
async def test_preview_rejects_non_object_metrics(client):
    resp = await client.post("/api/health-scoring/preview", json={"raw_metrics": [1, 2, 3]})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_benchmark(client):
    resp = await client.post(
        "/api/health-scoring/benchmark",
        json={"score": 85, "population": [50, 60, 70, 80, 90]},
    )
    assert resp.status_code == 200
    assert resp.json() == {"score": 85.0, "population_size": 5, "percentile": 80}


@pytest.mark.asyncio
async def test_benchmark_empty_population(client):
    resp = await client.post("/api/health-scoring/benchmark", json={"score": 85})
    assert resp.json()["percentile"] == 50


@pytest.mark.asyncio
async def test_batch_scoring(client, fake_repository, good_threshold_metrics):
    resp = await client.post(
        "/api/health-scoring/",
        json={
            "entities": [
                {"entity_id": "loc-1", "raw_metrics": good_threshold_metrics, "data_age_hours": 3},
                {"entity_id": "loc-2", "raw_metrics": {"revenue_achievement_rate": 100}},
            ]
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["summary"] == {"total": 2, "successful": 2, "skipped": 0, "errors": 0}
    assert body["results"][0]["health_score"] == pytest.approx(64.96)
    assert len(fake_repository.records) == 2


@pytest.mark.asyncio
async def test_batch_requires_entities(client):
    resp = await client.post("/api/health-scoring/", json={"entities": []})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_latest_scores(client, fake_repository, now):
    fake_repository.records.extend([
        make_record("loc-1", 58, now - timedelta(hours=3)),
        make_record("loc-2", 71, now - timedelta(hours=5), health_status="healthy"),
    ])
    resp = await client.get("/api/health-scoring/", params={"entity_ids": "loc-2, loc-9"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["data"][0]["entity_id"] == "loc-2"


@pytest.mark.asyncio
async def test_get_latest_score(client, fake_repository, now):
    fake_repository.records.append(make_record("loc-1", 58, now - timedelta(hours=3)))
    resp = await client.get("/api/health-scoring/loc-1")
    assert resp.status_code == 200
    assert resp.json()["overall_score"] == 58


@pytest.mark.asyncio
async def test_get_latest_score_not_found(client):
    resp = await client.get("/api/health-scoring/nobody")
    assert resp.status_code == 404
    assert resp.json()["detail"]["error_code"] == "score_not_found"


@pytest.mark.asyncio
async def test_trends(client, fake_repository, now):
    fake_repository.records.append(
        make_record("loc-1", 58, now, {"current_revenue": 4200, "total_leads": 18})
    )
    resp = await client.get("/api/health-scoring/loc-1/trends", params={"days": 7})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["dates"]) == 7
    assert body["revenue"][-1] == 4200
    assert body["revenue"][:-1] == [None] * 6
    assert body["conversion"] == [None] * 7


@pytest.mark.asyncio
async def test_trends_days_bounded(client):
    resp = await client.get("/api/health-scoring/loc-1/trends", params={"days": 0})
    assert resp.status_code == 422
