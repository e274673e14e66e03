"""Tests for generic training zones."""

from __future__ import annotations

import logging

import pytest

from trainplan.services.zones import (
    TRAINING_ZONES,
    get_zone,
    personalized_heart_rates,
    zone_for_intensity,
    zone_pace_range,
)


def test_seven_zones_with_increasing_rpe():
    rpes = [z.rpe for z in TRAINING_ZONES.values()]
    assert len(rpes) == 7
    assert rpes == sorted(rpes)


@pytest.mark.parametrize("intensity, zone", [
    (45, "RECOVERY"), (59.9, "RECOVERY"), (60, "EASY"), (70, "STEADY"),
    (80, "TEMPO"), (87, "THRESHOLD"), (92, "VO2_MAX"), (97, "NEUROMUSCULAR"),
])
def test_zone_for_intensity(intensity, zone):
    assert zone_for_intensity(intensity) == zone


def test_get_zone_unknown_falls_back_to_easy(caplog):
    with caplog.at_level(logging.WARNING):
        zone = get_zone("Z2")
    assert zone.key == "EASY"
    assert "Unknown zone" in caplog.text


def test_zone_pace_range_threshold():
    band = zone_pace_range("THRESHOLD", 5.0)
    assert band.min == 5.0
    assert band.max == pytest.approx(5.263, abs=1e-3)


def test_zone_pace_range_faster_zone_is_quicker():
    easy = zone_pace_range("EASY", 5.0)
    vo2 = zone_pace_range("VO2_MAX", 5.0)
    assert vo2.max < easy.min


def test_recovery_pace_range_has_open_lower_bound():
    band = zone_pace_range("RECOVERY", 5.0)
    assert band.min == pytest.approx(6.667, abs=1e-3)
    assert band.max == pytest.approx(7.692, abs=1e-3)


def test_personalized_heart_rates():
    assert personalized_heart_rates("EASY", 190) == (114, 133)
