"""Tests for VDOT and lactate threshold pace calculation."""

from __future__ import annotations

import pytest

from trainplan.errors import FoundationValueError
from trainplan.services.paces import (
    LT_PACE_MAX,
    LT_PACE_MIN,
    VDOT_MAX,
    VDOT_MIN,
    TrainingPaces,
    calculate_training_paces,
    format_pace,
    format_pace_range,
    lactate_threshold_pace,
    lactate_threshold_velocity,
    validate_lt_pace,
    validate_vdot,
)


def test_vdot_bounds():
    assert VDOT_MIN == 30
    assert VDOT_MAX == 85


def test_paces_known_vdot():
    p = calculate_training_paces(50)
    assert isinstance(p, TrainingPaces)
    assert p.vdot == 50
    assert p.easy.target == round(316 / 60, 3)
    assert p.marathon.target == round(287 / 60, 3)
    assert p.threshold.target == round(269 / 60, 3)
    assert p.interval.target == round(248 / 60, 3)
    assert p.repetition.target == round(230 / 60, 3)


def test_paces_bands_surround_target():
    for band in calculate_training_paces(50).as_dict().values():
        assert band.min < band.target < band.max


def test_paces_faster_for_higher_vdot():
    slow = calculate_training_paces(40)
    fast = calculate_training_paces(60)
    assert fast.threshold.target < slow.threshold.target


def test_paces_interpolate_between_rows():
    p = calculate_training_paces(50.5)
    assert p.easy.target == round(314 / 60, 3)


def test_paces_zone_order():
    p = calculate_training_paces(55)
    targets = [b.target for b in p.as_dict().values()]
    assert targets == sorted(targets, reverse=True)


@pytest.mark.parametrize("vdot", [29.9, 85.1, None])
def test_vdot_out_of_range(vdot):
    with pytest.raises(FoundationValueError):
        calculate_training_paces(vdot)


def test_validate_vdot_edges():
    assert validate_vdot(30) == 30
    assert validate_vdot(85) == 85


def test_validate_lt_pace():
    assert validate_lt_pace(LT_PACE_MIN) == LT_PACE_MIN
    assert validate_lt_pace(LT_PACE_MAX) == LT_PACE_MAX
    with pytest.raises(FoundationValueError, match="Lactate threshold pace"):
        validate_lt_pace(2.0)
    with pytest.raises(FoundationValueError):
        validate_lt_pace(10.0)


def test_lactate_threshold_from_vdot():
    assert lactate_threshold_velocity(50) == pytest.approx(12.571, abs=1e-3)
    assert lactate_threshold_pace(50) == pytest.approx(4.773, abs=1e-3)


def test_lactate_threshold_rejects_bad_vdot():
    with pytest.raises(FoundationValueError):
        lactate_threshold_pace(20)


def test_format_pace():
    assert format_pace(5.0) == "5:00"
    assert format_pace(4.5) == "4:30"
    assert format_pace(4.999) == "5:00"
    assert format_pace(0) == "n/a"


def test_format_pace_range():
    p = calculate_training_paces(50)
    assert format_pace_range(p.threshold).count(":") == 2
