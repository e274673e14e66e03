"""Tests for the threshold methodology's weekly structure."""

from __future__ import annotations

import pytest

from trainplan.services.weekly_structure import (
    STRUCTURES,
    WeeklyStructureGenerator,
    base_structure,
    distribute_threshold_volume,
    estimate_weeks_to_race,
    is_tune_up_week,
    marathon_pace_volume,
    plan_threshold_progression,
    race_integration,
    race_simulation_frequency,
    recovery_requirements,
    taper_integration,
    threshold_progression,
    tune_up_race_workout,
    tune_up_schedule,
    weekly_variation,
)


def test_every_structure_has_seven_days():
    for phase, structure in STRUCTURES.items():
        assert len(structure.days) == 7, phase


def test_unknown_phase_uses_base():
    assert base_structure("offseason") is STRUCTURES["base"]


def test_distribute_threshold_volume():
    assert distribute_threshold_volume(40, "build") == {"tuesday": 24, "thursday": 16}
    assert distribute_threshold_volume(0, "build") == {}


def test_recovery_requirements():
    req = recovery_requirements(40)
    assert req.hours_after_lt == 36
    assert req.hours_before_lt == 24
    assert req.easy_day_intensity == 62
    assert req.recovery_days == 2


def test_threshold_progression_by_phase():
    assert threshold_progression("base", 0).weekly_minutes == 20
    assert threshold_progression("base", 3).weekly_minutes == 26
    assert threshold_progression("build", 30).weekly_minutes == 50
    assert threshold_progression("peak", 5).weekly_minutes == 25
    assert threshold_progression("taper", 1).weekly_minutes == 11


def test_estimate_weeks_to_race_floor():
    assert estimate_weeks_to_race("build", 2) == 6
    assert estimate_weeks_to_race("peak", 5) == 1


@pytest.mark.parametrize("phase, weeks, minutes", [
    ("build", 14, 0), ("build", 10, 10), ("build", 6, 15), ("build", 3, 20),
    ("peak", 7, 25), ("peak", 4, 30), ("peak", 1, 20), ("taper", 2, 11), ("base", 10, 0),
])
def test_marathon_pace_volume(phase, weeks, minutes):
    assert marathon_pace_volume(phase, weeks) == minutes


def test_race_simulation_frequency():
    assert race_simulation_frequency("peak", 3) == 2
    assert race_simulation_frequency("peak", 6) == 1
    assert race_simulation_frequency("build", 10) == 0.5
    assert race_simulation_frequency("base", 3) == 0


def test_taper_integration():
    taper = taper_integration("taper", 2)
    assert taper.volume_reduction == pytest.approx(0.3)
    assert taper.sharpening is True
    assert taper_integration("build", 2).volume_reduction == 0


def test_tune_up_schedule():
    assert [r.distance for r in tune_up_schedule("build", 10)] == ["10K"]
    assert [r.distance for r in tune_up_schedule("peak", 4)] == ["half_marathon"]
    assert tune_up_schedule("base", 10) == []


def test_race_integration():
    race = race_integration("peak", 4)
    assert race.marathon_pace_volume == 30
    assert race.race_simulation_frequency == 2
    assert len(race.tune_ups) == 1


def test_weekly_variation_cycles():
    assert [weekly_variation(i).name for i in range(5)] == [
        "standard", "volume_emphasis", "intensity_emphasis", "recovery", "standard",
    ]


def test_plan_threshold_progression():
    weeks = plan_threshold_progression(12)
    assert len(weeks) == 12
    assert weeks[0] == 20
    assert weeks[-1] == 50
    assert max(weeks) <= 60
    assert weeks[3] == 28
    assert plan_threshold_progression(1) == [20]


@pytest.mark.parametrize("weeks, expected", [(3, False), (4, True), (5, True), (6, False), (8, True), (9, True)])
def test_is_tune_up_week(weeks, expected):
    assert is_tune_up_week(weeks) is expected


def test_tune_up_race_workout():
    far = tune_up_race_workout(8)
    near = tune_up_race_workout(4)
    assert far.name == "15k Tune-up Race"
    assert far.segments[1].duration == 50
    assert near.name == "10k Tune-up Race"
    assert near.type == "race_pace"
    assert near.metadata == {"tune_up": True, "weeks_to_goal": 4}


def test_generator_fills_threshold_and_marathon_minutes():
    structure = WeeklyStructureGenerator().generate("build", 0)
    assert structure.days["tuesday"].threshold_minutes == 21
    assert structure.days["thursday"].threshold_minutes == 14
    assert structure.days["wednesday"].marathon_pace_minutes == 9
    assert structure.days["saturday"].marathon_pace_minutes == 9
    assert structure.variation.name == "standard"


def test_generator_base_has_no_marathon_pace():
    structure = WeeklyStructureGenerator().generate("base", 0)
    assert all(d.marathon_pace_minutes == 0 for d in structure.days.values())
    assert structure.days["thursday"].threshold_minutes == 20


def test_generator_pattern():
    assert WeeklyStructureGenerator().pattern("peak", 0) == STRUCTURES["peak"].pattern
