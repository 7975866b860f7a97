"""Unit tests for benchmark percentile ranking."""
import pytest

from bizhealth.scoring.benchmark import NEUTRAL_PERCENTILE, compute_benchmark_percentile


def test_rank_within_population():
    # 4 of 5 members are at or below 85
    assert compute_benchmark_percentile(85, [50, 60, 70, 80, 90]) == 80


def test_ties_count_as_met():
    assert compute_benchmark_percentile(70, [50, 60, 70, 80, 90]) == 60


@pytest.mark.parametrize("population", [[], None])
def test_empty_population_is_neutral(population):
    assert compute_benchmark_percentile(85, population) == NEUTRAL_PERCENTILE == 50


def test_extremes():
    population = [40, 55, 70]
    assert compute_benchmark_percentile(10, population) == 0
    assert compute_benchmark_percentile(99, population) == 100


def test_unsorted_population_is_not_mutated():
    population = [90, 50, 80, 60, 70]
    assert compute_benchmark_percentile(65, population) == 40
    assert population == [90, 50, 80, 60, 70]


def test_rounds_half_up():
    # 1 of 8 -> 12.5 -> 13
    assert compute_benchmark_percentile(10, [10, 20, 30, 40, 50, 60, 70, 80]) == 13
    # 1 of 3 -> 33.33 -> 33
    assert compute_benchmark_percentile(10, [10, 20, 30]) == 33


def test_unusable_members_are_ignored():
    assert compute_benchmark_percentile(85, [50, None, 60, "n/a", 70, 80, 90]) == 80
    assert compute_benchmark_percentile(85, [None, float("nan")]) == NEUTRAL_PERCENTILE


def test_unusable_score_is_neutral():
    assert compute_benchmark_percentile(None, [50, 60]) == NEUTRAL_PERCENTILE
