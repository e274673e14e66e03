"""Tests for aerobic-base enforcement."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tests.factories import START, easy_run, planned, workout
from trainplan.services.aerobic_base import AerobicBaseCalculator, effort_description
from trainplan.services.plan_model import IntensityDistribution


@pytest.fixture
def calc():
    return AerobicBaseCalculator()


def _week(hard_intensity: float = 90):
    runs = [easy_run(f"e{i}", START + timedelta(days=i)) for i in range(3)]
    runs.append(planned("hard", workout("vo2max", (60, hard_intensity)), START + timedelta(days=3)))
    return runs


def test_distribution_uses_planned_intensity(calc):
    runs = [easy_run("e"), planned("t", workout("tempo", (60, 80)))]
    assert calc.distribution(runs) == IntensityDistribution(50, 50, 0)


def test_distribution_empty_is_all_easy(calc):
    assert calc.distribution([]) == IntensityDistribution(100, 0, 0)


def test_enforce_converts_hardest_workouts(calc):
    out = calc.enforce_aerobic_base(_week())
    hard = out[3]
    assert hard.type == "easy"
    assert hard.target_metrics.intensity == 70
    assert hard.target_metrics.tss == 35
    assert all(s.intensity == 70 for s in hard.workout.segments)
    assert "converted for aerobic base" in hard.workout.segments[0].description
    assert calc.distribution(out).easy == 100


def test_enforce_leaves_compliant_plan(calc):
    runs = [easy_run(f"e{i}") for i in range(4)]
    assert calc.enforce_aerobic_base(runs) == runs


def test_enforce_empty(calc):
    assert calc.enforce_aerobic_base([]) == []


def test_convert_to_time_based(calc):
    out = calc.convert_to_time_based(workout("easy", (60, 65)))
    assert out.segments[0].description.endswith("at " + effort_description(65))
    assert out.adaptation_target == "Aerobic development through effort-based training"


@pytest.mark.parametrize("intensity, prefix", [
    (70, "Very easy"), (75, "Easy effort"), (80, "Steady"), (87, "Moderate"), (90, "Hard"),
])
def test_effort_description(intensity, prefix):
    assert effort_description(intensity).startswith(prefix)


def test_long_run_distance_builds_linearly(calc):
    assert calc.long_run_distance(1, 10, 10) == pytest.approx(10 + 12 / 7)


def test_long_run_distance_holds_every_third_week(calc):
    rate = 12 / 7
    assert calc.long_run_distance(6, 10, 10) == pytest.approx(10 + 5 * rate)


def test_long_run_distance_ceiling(calc):
    assert calc.long_run_distance(20, 10, 10) == 22
    assert calc.long_run_distance(1, 0, 30) == 22


def test_validate_non_compliant(calc):
    report = calc.validate_aerobic_base(_week())
    assert not report.is_compliant
    assert report.distribution == IntensityDistribution(75, 0, 25)
    assert len(report.violations) == 2
    assert "Focus on time on feet rather than pace" in report.recommendations


def test_validate_compliant(calc):
    report = calc.validate_aerobic_base([easy_run("e")])
    assert report.is_compliant
    assert report.violations == []
