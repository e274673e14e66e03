"""Tests for medium-long and quality long runs."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from tests.factories import START, easy_run, from_catalog
from trainplan.services.medium_long import PATTERNS, MediumLongRunGenerator
from trainplan.services.plan_model import Segment

WEDNESDAY = START + timedelta(days=2)


@pytest.fixture
def gen():
    return MediumLongRunGenerator()


@pytest.mark.parametrize("phase, week, key", [
    ("build", 0, "tempo"), ("build", 1, "marathon_pace"), ("build", 2, "progressive"),
    ("build", 3, "tempo"), ("peak", 2, "race_specific"), ("peak", 1, "tempo"), ("base", 4, "aerobic"),
])
def test_select_pattern(gen, phase, week, key):
    assert gen.select_pattern(phase, week).key == key


def test_patterns_are_medium_long_length():
    for pattern in PATTERNS.values():
        assert 85 <= pattern.total_duration <= 100, pattern.key


def test_scale_build_grows_week_on_week(gen):
    early = gen.scale(PATTERNS["tempo"], 0, "build")
    later = gen.scale(PATTERNS["tempo"], 4, "build")
    assert early.total_duration < later.total_duration
    assert later.total_duration == PATTERNS["tempo"].total_duration


def test_scale_peak(gen):
    scaled = gen.scale(PATTERNS["tempo"], 1, "peak")
    assert [s.duration for s in scaled.segments] == [28, 33, 44]
    assert scaled.segments[1].intensity == 88


def test_scale_caps_intensity(gen):
    hot = replace(PATTERNS["tempo"], segments=(Segment(30, 94, "THRESHOLD"),))
    assert gen.scale(hot, 1, "peak").segments[0].intensity == 95


def test_generate(gen):
    w = gen.generate("build", 1)
    assert w.type == "long_run"
    assert w.name == "Medium-Long Run with Marathon Pace"
    assert w.metadata["medium_long"] is True
    assert w.metadata["pattern"] == "marathon_pace"


def test_should_be_medium_long(gen):
    assert gen.should_be_medium_long(easy_run("e", WEDNESDAY), "build")
    assert gen.should_be_medium_long(easy_run("e", WEDNESDAY), "peak")
    assert not gen.should_be_medium_long(easy_run("e", WEDNESDAY), "base")
    assert not gen.should_be_medium_long(easy_run("e", START), "build")
    assert not gen.should_be_medium_long(from_catalog("t", "tempo", WEDNESDAY), "build")


def test_convert(gen):
    out = gen.convert(easy_run("e", WEDNESDAY), "peak", 2)
    assert out.id == "e"
    assert out.type == "long_run"
    assert out.name == "Race-Specific Medium-Long Run"
    assert out.description == PATTERNS["race_specific"].description


@pytest.mark.parametrize("phase, week, expected", [
    ("build", 0, True), ("build", 1, False), ("peak", 3, True), ("base", 0, False),
])
def test_should_add_quality(gen, phase, week, expected):
    assert gen.should_add_quality(phase, week) is expected


def test_add_quality(gen):
    out = gen.add_quality(from_catalog("l", "long_run", START))
    assert [s.duration for s in out.workout.segments] == [48, 36, 36]
    assert out.workout.segments[1].zone == "TEMPO"
    assert out.workout.estimated_tss == 144
    assert out.name == "Long Run with Quality"
