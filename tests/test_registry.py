"""Tests for the methodology registry and plan enhancement entry point."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from tests.factories import START, make_plan
from trainplan.config import Settings
from trainplan.errors import UnknownMethodologyError
from trainplan.services.daniels import DanielsStrategy
from trainplan.services.general import GeneralStrategy
from trainplan.services.lydiard import LydiardStrategy
from trainplan.services.methodology_tables import METHODOLOGIES
from trainplan.services.pfitzinger import PfitzingerStrategy
from trainplan.services.plan_model import IntensityDistribution
from trainplan.services.registry import MethodologyRegistry, distribution_report, enhance_plan


@pytest.fixture
def registry():
    return MethodologyRegistry()


def test_resolve_builds_expected_strategies(registry):
    assert isinstance(registry.resolve("daniels"), DanielsStrategy)
    assert isinstance(registry.resolve("lydiard"), LydiardStrategy)
    assert isinstance(registry.resolve("pfitzinger"), PfitzingerStrategy)
    hudson = registry.resolve("hudson")
    assert isinstance(hudson, GeneralStrategy)
    assert hudson.methodology == "hudson"


def test_resolve_returns_cached_instance(registry):
    assert not registry.is_loaded("daniels")
    first = registry.resolve("daniels")
    assert registry.is_loaded("daniels")
    assert registry.resolve("daniels") is first


def test_reset_discards_instances(registry):
    first = registry.resolve("lydiard")
    registry.reset()
    assert not registry.is_loaded("lydiard")
    assert registry.resolve("lydiard") is not first


def test_unknown_methodology(registry):
    with pytest.raises(UnknownMethodologyError, match="hanson"):
        registry.resolve("hanson")


def test_list_available(registry):
    assert registry.list_available() == list(METHODOLOGIES)


def test_custom_factories_are_lazy():
    built = []

    def factory():
        built.append(1)
        return GeneralStrategy("custom")

    registry = MethodologyRegistry({"custom": factory})
    assert built == []
    registry.resolve("custom")
    registry.resolve("custom")
    assert built == [1]
    assert registry.list_available() == ["custom"]


def test_default_uses_settings(registry):
    assert isinstance(registry.default(Settings(default_methodology="pfitzinger")), PfitzingerStrategy)


def test_default_reads_environment(registry, monkeypatch):
    monkeypatch.setenv("DEFAULT_METHODOLOGY", "lydiard")
    assert isinstance(registry.default(), LydiardStrategy)


def test_enhance_plan_dispatches_on_config(registry):
    plan = make_plan("hudson")
    enhanced = enhance_plan(plan, registry)
    assert enhanced.metadata["methodology"] == "hudson"
    assert registry.is_loaded("hudson")


def test_enhance_plan_unknown_methodology():
    with pytest.raises(UnknownMethodologyError):
        enhance_plan(make_plan("hanson"))


def test_enhance_plan_validates_config(registry):
    with pytest.raises(ValidationError, match="vdot"):
        enhance_plan(make_plan("hudson", vdot=95), registry)


def test_enhance_plan_rejects_target_before_start(registry):
    plan = make_plan("hudson", target_date=START - timedelta(days=1))
    with pytest.raises(ValidationError, match="target_date must not be before start_date"):
        enhance_plan(plan, registry)


def test_distribution_report_uses_methodology_target(registry):
    report = distribution_report(make_plan("lydiard"), registry=registry)
    assert report.methodology == "lydiard"
    assert report.target == IntensityDistribution(85, 10, 5)


def test_distribution_report_accepts_caller_target(registry):
    report = distribution_report(
        make_plan(), {"easy": 70, "moderate": 20, "hard": 10}, registry
    )
    assert report.target == IntensityDistribution(70, 20, 10)


def test_distribution_report_rejects_bad_target(registry):
    with pytest.raises(ValidationError, match="sum to 100"):
        distribution_report(make_plan(), {"easy": 70, "moderate": 20, "hard": 20}, registry)
