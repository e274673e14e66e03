"""Tests for the workout template catalog."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from trainplan.errors import TemplateNotFoundError
from trainplan.services.plan_model import WORKOUT_TYPES
from trainplan.services.workout_catalog import (
    CATALOG,
    create_custom_workout,
    estimate_recovery_hours,
    estimate_tss,
    get_template,
    lookup,
    template_ids,
)
from trainplan.services.zones import TRAINING_ZONES


def test_catalog_has_core_templates():
    expected = [
        "RECOVERY_JOG", "EASY_AEROBIC", "LONG_RUN", "TEMPO_CONTINUOUS",
        "LACTATE_THRESHOLD_2X20", "THRESHOLD_PROGRESSION", "VO2MAX_4X4", "VO2MAX_5X3",
        "SPEED_200M_REPS", "HILL_REPEATS_6X2", "FARTLEK_VARIED", "PROGRESSION_3_STAGE",
    ]
    for template_id in expected:
        assert template_id in CATALOG, f"Missing template: {template_id}"


def test_catalog_includes_phase_hill_sessions():
    for template_id in ("LYDIARD_HILL_BASE", "LYDIARD_HILL_BUILD", "LYDIARD_HILL_PEAK",
                        "LYDIARD_HILL_TAPER", "LYDIARD_HILL_RECOVERY"):
        assert get_template(template_id).type == "hill_repeats"


def test_all_templates_are_well_formed():
    for template_id, t in CATALOG.items():
        assert t.type in WORKOUT_TYPES, template_id
        assert t.workout.segments, template_id
        for seg in t.workout.segments:
            assert seg.zone in TRAINING_ZONES, f"{template_id}: {seg.zone}"
            assert 0 <= seg.intensity <= 100
            assert seg.duration > 0


def test_lookup_preserves_registration_order():
    assert lookup("hill_repeats")[0].id == "HILL_REPEATS_6X2"
    assert [t.id for t in lookup("vo2max")] == ["VO2MAX_4X4", "VO2MAX_5X3"]


def test_lookup_missing_type_raises():
    with pytest.raises(TemplateNotFoundError, match="steady"):
        lookup("steady")


def test_get_template_unknown_raises():
    with pytest.raises(TemplateNotFoundError):
        get_template("MYSTERY_RUN")


def test_repeats_have_no_trailing_rest():
    segments = get_template("VO2MAX_4X4").workout.segments
    assert len(segments) == 9
    assert segments[-2].zone == "VO2_MAX"


def test_template_ids_matches_catalog():
    assert template_ids() == list(CATALOG)


def test_estimate_tss():
    assert estimate_tss(60, 100) == 100
    assert estimate_tss(60, 65) == 42


def test_estimate_recovery_hours():
    assert estimate_recovery_hours("easy", 60, 80) == 12
    assert estimate_recovery_hours("unknown", 60, 80) == 24


def test_create_custom_workout():
    w = create_custom_workout("tempo", 40, 85)
    assert w.primary_zone == "TEMPO"
    assert len(w.segments) == 1
    assert w.total_duration == 40
    assert w.estimated_tss == estimate_tss(40, 85)


def test_create_custom_workout_from_segment_payloads():
    w = create_custom_workout("fartlek", 40, 80, segments=[
        {"duration": 15, "intensity": 65, "zone": "EASY"},
        {"duration": 10, "intensity": 90, "zone": "THRESHOLD", "description": "Surges"},
    ])
    assert [s.zone for s in w.segments] == ["EASY", "THRESHOLD"]
    assert w.segments[1].description == "Surges"
    assert w.total_duration == 25


def test_create_custom_workout_rejects_bad_segment():
    with pytest.raises(ValidationError, match="zone must be one of"):
        create_custom_workout("fartlek", 40, 80, segments=[{"duration": 15, "intensity": 65, "zone": "Z2"}])
