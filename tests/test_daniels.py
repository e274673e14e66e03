"""Tests for the VDOT methodology."""

from __future__ import annotations

import pytest

from tests.factories import easy_run, make_plan, planned, workout
from trainplan.errors import FoundationValueError, TemplateNotFoundError
from trainplan.services.daniels import (
    DanielsStrategy,
    estimate_vdot_from_plan,
    estimate_vdot_from_template,
    estimated_heart_rate_zones,
    estimated_max_hr,
    heart_rate_for_zone,
    pace_for_zone,
    zone_intensity,
)
from trainplan.services.distribution import EnforcementSettings
from trainplan.services.paces import calculate_training_paces, format_pace_range
from trainplan.services.plan_model import HeartRateRange, iter_block_workouts
from trainplan.services.strategy_base import instantiate


@pytest.fixture
def daniels():
    return DanielsStrategy(enforcement=EnforcementSettings())


# --- variant selection ---

def test_threshold_in_base_unlocks_after_week_four(daniels):
    assert daniels.select_workout_variant("threshold", "base", 1) == "TEMPO_CONTINUOUS"
    assert daniels.select_workout_variant("threshold", "base", 4) == "TEMPO_CONTINUOUS"
    assert daniels.select_workout_variant("threshold", "base", 5) == "LACTATE_THRESHOLD_2X20"
    assert daniels.select_workout_variant("threshold", "base", 6) == "THRESHOLD_PROGRESSION"


def test_tempo_in_base_starts_easy(daniels):
    assert daniels.select_workout_variant("tempo", "base", 2) == "EASY_AEROBIC"
    assert daniels.select_workout_variant("tempo", "base", 3) == "TEMPO_CONTINUOUS"


def test_vo2max_in_build_alternates(daniels):
    assert daniels.select_workout_variant("vo2max", "build", 1) == "VO2MAX_5X3"
    assert daniels.select_workout_variant("vo2max", "build", 3) == "VO2MAX_5X3"
    assert daniels.select_workout_variant("vo2max", "build", 4) == "VO2MAX_4X4"


def test_no_speed_work_in_base(daniels):
    assert daniels.select_workout_variant("speed", "base", 3) == "EASY_AEROBIC"
    assert daniels.select_workout_variant("speed", "peak", 1) == "SPEED_200M_REPS"


def test_recovery_phase_is_all_easy(daniels):
    for workout_type in ("tempo", "threshold", "vo2max", "speed", "long_run"):
        assert daniels.select_workout_variant(workout_type, "recovery", 1) == "EASY_AEROBIC"


def test_uncovered_type_raises(daniels):
    with pytest.raises(TemplateNotFoundError):
        daniels.select_workout_variant("steady", "build", 1)


# --- paces ---

def test_pace_table_memoized_by_rounded_vdot(daniels):
    first = daniels.training_paces(50.2)
    second = daniels.training_paces(49.8)
    assert first is second
    assert daniels.pace_cache.counter.misses == 1
    assert daniels.pace_cache.counter.hits == 1


def test_update_vdot_recomputes(daniels):
    daniels.training_paces(50)
    daniels.update_vdot(50)
    assert daniels.pace_cache.counter.misses == 2


@pytest.mark.parametrize("vdot", [29, 86])
def test_training_paces_rejects_out_of_range(daniels, vdot):
    with pytest.raises(FoundationValueError):
        daniels.training_paces(vdot)


def test_zone_intensity_phase_adjusted():
    assert zone_intensity("threshold", "build") == 88
    assert zone_intensity("threshold", "base") == 83
    assert zone_intensity("repetition", "build") == 100
    assert zone_intensity("interval", "recovery") == 78


def test_pace_for_zone_maps_segment_zones():
    paces = calculate_training_paces(50)
    assert pace_for_zone("EASY", paces) == paces.easy
    assert pace_for_zone("THRESHOLD", paces) == paces.threshold
    assert pace_for_zone("VO2_MAX", paces) == paces.interval
    assert pace_for_zone("RECOVERY", paces).min > paces.easy.max


def test_pace_for_unknown_zone_uses_marathon(caplog):
    paces = calculate_training_paces(50)
    assert pace_for_zone("MYSTERY", paces) == paces.marathon
    assert "MYSTERY" in caplog.text


def test_heart_rate_estimates():
    assert estimated_max_hr(40) == 185
    assert estimated_max_hr(50) == 190
    assert estimated_max_hr(60) == 195
    zones = estimated_heart_rate_zones(40)
    assert zones["EASY"] == HeartRateRange(120, 139)
    assert len(zones) == 7


# --- customization ---

def test_customize_tempo_work_segment_gets_threshold_pace(daniels):
    out = daniels.customize_workout(instantiate("TEMPO_CONTINUOUS"), "build", 3, vdot=50)
    paces = calculate_training_paces(50)
    assert [s.intensity for s in out.segments] == [70, 88, 70]
    assert out.segments[1].pace_target == paces.threshold
    assert out.segments[0].pace_target == paces.easy
    assert "T - Threshold/Tempo" in out.segments[1].description
    assert out.metadata["vdot"] == 50
    assert out.adaptation_target == "Improve tempo pace, aerobic strength"


def test_customize_base_threshold_is_shortened(daniels):
    out = daniels.customize_workout(instantiate("LACTATE_THRESHOLD_2X20"), "base", 5, vdot=50)
    assert out.segments[1].intensity == 78
    assert out.segments[1].duration == 16


def test_customize_taper_cuts_duration(daniels):
    out = daniels.customize_workout(instantiate("EASY_AEROBIC"), "taper", 1, vdot=50)
    assert out.segments[0].duration == pytest.approx(42)


def test_customize_without_vdot_estimates_from_template(daniels):
    out = daniels.customize_workout(workout("vo2max", (20, 95)), "peak", 1)
    assert out.metadata["vdot"] == 50


def test_estimate_vdot_from_template():
    assert estimate_vdot_from_template(workout("vo2max", (20, 95))) == 50
    assert estimate_vdot_from_template(workout("tempo", (20, 85))) == 45
    assert estimate_vdot_from_template(workout("easy", (20, 65))) == 40
    assert estimate_vdot_from_template(workout("easy")) == 45


def test_apply_vdot_pacing(daniels):
    paced = daniels.apply_vdot_pacing(easy_run("e"), 40)
    seg = paced.workout.segments[0]
    assert seg.pace_target == calculate_training_paces(40).easy
    assert seg.heart_rate_target == HeartRateRange(120, 139)
    assert paced.workout.metadata["vdot_used"] == 40
    assert set(paced.workout.metadata["pace_recommendations"]) == {
        "easy", "marathon", "threshold", "interval", "repetition"
    }


def test_vdot_pacing_keeps_customized_pace_targets(daniels):
    customized = daniels.customize_workout(instantiate("TEMPO_CONTINUOUS"), "build", 2, vdot=50)
    paced = daniels.apply_vdot_pacing(planned("t", customized), 50)
    for before, after in zip(customized.segments, paced.workout.segments):
        assert after.pace_target == before.pace_target
        assert format_pace_range(after.pace_target) in after.description
        assert after.heart_rate_target == heart_rate_for_zone(after.zone, 50)


# --- plan enhancement ---

def test_enhance_plan_metadata(daniels):
    out = daniels.enhance_plan(make_plan())
    assert out.metadata["methodology"] == "daniels"
    assert out.metadata["vdot"] == 50
    assert out.metadata["training_paces"] == calculate_training_paces(50)
    assert 0 <= out.metadata["compliance_score"] <= 100
    assert out.metadata["intensity_report"].methodology == "daniels"
    for planned in out.workouts:
        assert planned.workout.metadata["vdot_used"] == 50


def test_enhance_plan_blocks_match_flat_list(daniels):
    out = daniels.enhance_plan(make_plan())
    flat = {w.id: w for w in out.workouts}
    for _b, _m, pw in iter_block_workouts(out):
        assert flat[pw.id] == pw


def test_enhance_plan_estimates_missing_vdot(daniels):
    plan = make_plan(vdot=None)
    assert estimate_vdot_from_plan(plan) == 35
    assert daniels.enhance_plan(plan).metadata["vdot"] == 35


def test_enhance_plan_rejects_bad_vdot(daniels):
    with pytest.raises(FoundationValueError):
        daniels.enhance_plan(make_plan(vdot=90))
