"""Tests for the aerobic-base methodology."""

from __future__ import annotations

import pytest

from tests.factories import make_plan, workout
from trainplan.errors import TemplateNotFoundError
from trainplan.services.distribution import EnforcementSettings
from trainplan.services.lydiard import (
    ADAPTATIONS,
    PHASE_FOCUS,
    TERMS,
    LydiardStrategy,
    apply_effort_zones,
    convert_to_steady,
    effort_label,
    intensity_factor,
)
from trainplan.services.lydiard_periodization import BlockPlan
from trainplan.services.plan_model import iter_block_workouts


@pytest.fixture
def lydiard():
    return LydiardStrategy(enforcement=EnforcementSettings())


# --- selection ---

def test_no_anaerobic_intervals_before_peak(lydiard):
    assert lydiard.select_workout_variant("vo2max", "base", 1) == "LYDIARD_HILL_BASE"
    assert lydiard.select_workout_variant("speed", "build", 2) == "LYDIARD_HILL_BUILD"
    assert lydiard.select_workout_variant("vo2max", "peak", 1) == "VO2MAX_4X4"


def test_hill_sessions_follow_phase(lydiard):
    assert lydiard.select_workout_variant("hill_repeats", "taper", 1) == "LYDIARD_HILL_TAPER"
    assert lydiard.select_workout_variant("hill_repeats", "recovery", 1) == "EASY_AEROBIC"


def test_steady_has_no_template(lydiard):
    with pytest.raises(TemplateNotFoundError):
        lydiard.select_workout_variant("steady", "base", 1)


# --- helpers ---

def test_intensity_factor():
    assert intensity_factor("easy", "base", 0) == pytest.approx(0.85)
    assert intensity_factor("vo2max", "build", 2) == pytest.approx(0.8 * 1.032)
    assert intensity_factor("vo2max", "peak", 0) == 1.0
    assert intensity_factor("fartlek", "taper", 3) == pytest.approx(0.95)


@pytest.mark.parametrize("intensity, label", [
    (55, "Very easy effort"), (65, "Easy conversational effort"), (75, "Steady aerobic effort"),
    (82, "Strong aerobic effort"), (88, "Threshold effort"), (92, "Hard anaerobic effort"),
    (98, "Maximum effort"),
])
def test_effort_label(intensity, label):
    assert effort_label(intensity) == label


def test_convert_to_steady_caps_intensity():
    out = convert_to_steady(workout("vo2max", (10, 65), (20, 95)))
    assert [s.intensity for s in out.segments] == [65, 75]
    assert [s.zone for s in out.segments] == ["EASY", "STEADY"]
    assert out.type == "steady"
    assert out.estimated_tss == 35
    assert out.recovery_time == 10


def test_apply_effort_zones():
    out = apply_effort_zones(workout("easy", (60, 65)))
    seg = out.segments[0]
    assert seg.effort_based is True
    assert seg.perceived_effort == 3
    assert seg.description.startswith("Easy conversational effort - ")


# --- customization ---

def test_customize_workout_uses_lydiard_terms(lydiard):
    out = lydiard.customize_workout(workout("easy", (60, 65)), "base", 1)
    assert out.segments[0].description.startswith(TERMS["easy"]["base"])
    assert out.adaptation_target == ADAPTATIONS["easy"]["base"]
    assert 45 <= out.segments[0].intensity <= 100
    assert out.recovery_time == 12


def test_customize_workout_clamps_floor(lydiard):
    out = lydiard.customize_workout(workout("speed", (10, 20)), "base", 0)
    assert out.segments[0].intensity == 45


def test_customize_unknown_type_gets_generic_adaptation(lydiard):
    out = lydiard.customize_workout(workout("fartlek", (30, 80)), "peak", 1)
    assert out.adaptation_target == "fartlek adaptation for peak phase in Lydiard system"


def test_customize_hill_workout(lydiard):
    hill = lydiard.customize_hill_workout("build", 2)
    assert hill.metadata["hill_type"] == "anaerobic_power"
    assert lydiard.hill_guidance("peak").frequency == "1-2 times per week"


def test_long_run_progression(lydiard):
    plan = make_plan("lydiard")
    weeks = lydiard.long_run_progression(plan)
    assert len(weeks) == plan.summary.total_weeks
    assert [w.distance for w in weeks if w.phase == "base"] == [19.4, 20.9, 22.0, 22.0]
    assert all(w.distance <= 22 for w in weeks)
    assert [w.distance for w in weeks if w.phase == "build"] == [16.2, 16.2, 16.2]
    assert [w.distance for w in weeks if w.phase == "peak"] == [14.4, 14.4]
    assert [w.distance for w in weeks if w.phase == "taper"] == [10.8]


def test_long_run_progression_is_linear_from_starting_distance(lydiard):
    plan = make_plan("lydiard", phases=(("base", 10), ("build", 2)))
    weeks = lydiard.long_run_progression(plan)
    assert [w.distance for w in weeks[:6]] == [18.6, 19.1, 19.7, 20.3, 20.9, 20.9]
    assert [w.distance for w in weeks[6:10]] == [22.0, 22.0, 22.0, 22.0]
    assert [w.distance for w in weeks[10:]] == [16.2, 16.2]


# --- plan enhancement ---

def test_enhance_plan_has_no_base_intervals(lydiard):
    out = lydiard.enhance_plan(make_plan("lydiard"))
    for block, _micro, planned in iter_block_workouts(out):
        if block.phase == "base":
            assert planned.workout.type not in ("vo2max", "speed", "threshold")
            assert all(s.effort_based for s in planned.workout.segments)


def test_enhance_plan_recovery_week_is_easy(lydiard):
    out = lydiard.enhance_plan(make_plan("lydiard"))
    week = {p.id: p for p in out.blocks[0].microcycles[3].workouts}
    for workout_id in ("w4-0", "w4-2", "w4-6"):
        segments = week[workout_id].workout.segments
        assert all(s.intensity <= 60 for s in segments)
        assert "Complete recovery focus" in segments[0].description


def test_enhance_plan_metadata(lydiard):
    plan = make_plan("lydiard", race_distance="marathon")
    out = lydiard.enhance_plan(plan)
    meta = out.metadata
    assert meta["methodology"] == "lydiard"
    assert meta["aerobic_base_report"].methodology == "lydiard"
    assert meta["lydiard_features"]["time_based_training"] is True
    assert meta["lydiard_features"]["easy_percentage"] == meta["aerobic_base_report"].distribution.easy
    assert all(isinstance(b, BlockPlan) for b in meta["periodization"])
    assert meta["intensity_report"].target == lydiard.base.profile.intensity_distribution
    assert [p.focus for p in out.summary.phases] == [PHASE_FOCUS[p.phase] for p in out.summary.phases]


def test_enhance_plan_keeps_flat_list_in_sync(lydiard):
    out = lydiard.enhance_plan(make_plan("lydiard"))
    flat = {w.id: w for w in out.workouts}
    for _b, _m, pw in iter_block_workouts(out):
        assert flat[pw.id] == pw
