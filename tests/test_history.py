"""Unit tests for score history helpers."""
from datetime import datetime, timedelta, timezone

import pytest

from bizhealth.scoring.health_score_calculator import HealthScoreCalculator
from bizhealth.scoring.history import (
    calculate_score_change,
    calculate_score_change_velocity,
    critical_flags,
    score_data_freshness,
    secondary_issues,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestScoreChange:

    def test_percentage_change(self):
        assert calculate_score_change(55, 50) == pytest.approx(10.0)
        assert calculate_score_change(45, 60) == pytest.approx(-25.0)

    @pytest.mark.parametrize("previous", [None, 0])
    def test_no_usable_previous(self, previous):
        assert calculate_score_change(70, previous) == 0

    def test_rounded_to_two_places(self):
        assert calculate_score_change(64.96, 50) == pytest.approx(29.92)


class TestVelocity:

    def test_change_per_day(self):
        assert calculate_score_change_velocity(10.0, NOW - timedelta(days=4), NOW) == pytest.approx(2.5)

    def test_under_a_day_counts_as_one_day(self):
        assert calculate_score_change_velocity(10.0, NOW - timedelta(hours=5), NOW) == pytest.approx(10.0)

    def test_first_score_has_no_velocity(self):
        assert calculate_score_change_velocity(10.0, None, NOW) == 0


class TestDataFreshness:

    @pytest.mark.parametrize("age,expected", [
        (None, 100),
        (0, 100),
        (1, 100),
        (2, 85),
        (4, 75),
        (24, 40),
        (72, 26),
        (100, 22.2),
        (1000, 0),
    ])
    def test_decay_curve(self, age, expected):
        assert score_data_freshness(age) == pytest.approx(expected)

    @pytest.mark.parametrize("low,high", [(1, 4), (4, 24), (24, 72), (72, 400)])
    def test_decays_within_each_band(self, low, high):
        ages = [low + (high - low) * step / 20 for step in range(1, 21)]
        scores = [score_data_freshness(age) for age in ages]
        assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))


class TestIssueTriage:

    @pytest.fixture
    def result(self):
        return HealthScoreCalculator().calculate({
            "days_on_market_avg": 200,  # 8.36
            "response_time_performance": 300,  # 22
            "client_satisfaction_score": 3.0,  # 44.44, not flagged
            "appointment_show_rate": 60,  # 55
            "lead_to_deal_conversion": 2.0,  # 36.67
        })

    def test_critical_flags_below_thirty(self, result):
        assert critical_flags(result) == [
            "days on market avg: 8%",
            "response time performance: 22%",
        ]

    def test_critical_flag_threshold_is_configurable(self, result):
        assert len(critical_flags(result, threshold=40)) == 3
        assert critical_flags(result, threshold=5) == []

    def test_secondary_issues_exclude_primary(self, result):
        assert secondary_issues(result) == [
            "response time performance: 22%",
            "lead to deal conversion: 37%",
        ]
