"""Methodology id -> strategy instance, constructed lazily and cached.

The registry is a value owned by the caller: build one at startup and pass
it where strategies are needed.  ``reset`` exists for test isolation.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable, Mapping, Optional

from trainplan.config import Settings, get_settings
from trainplan.errors import UnknownMethodologyError
from trainplan.services.daniels import DanielsStrategy
from trainplan.services.distribution import DistributionReport, generate_report
from trainplan.services.general import GeneralStrategy
from trainplan.services.lydiard import LydiardStrategy
from trainplan.services.methodology_tables import INTENSITY_MODELS, METHODOLOGY_PROFILES
from trainplan.services.pfitzinger import PfitzingerStrategy
from trainplan.services.plan_model import Plan
from trainplan.services.strategy_base import MethodologyStrategy
from trainplan.validators import DistributionInput, PlanConfigInput

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[], MethodologyStrategy]

DEFAULT_FACTORIES: dict[str, StrategyFactory] = {
    "daniels": DanielsStrategy,
    "lydiard": LydiardStrategy,
    "pfitzinger": PfitzingerStrategy,
    "hudson": lambda: GeneralStrategy("hudson"),
    "custom": lambda: GeneralStrategy("custom"),
}


class MethodologyRegistry:
    def __init__(self, factories: dict[str, StrategyFactory] | None = None) -> None:
        self._factories = dict(factories if factories is not None else DEFAULT_FACTORIES)
        self._instances: dict[str, MethodologyStrategy] = {}

    def resolve(self, methodology_id: str) -> MethodologyStrategy:
        """Cached strategy for an id; UnknownMethodologyError for unregistered ids."""
        strategy = self._instances.get(methodology_id)
        if strategy is not None:
            return strategy
        factory = self._factories.get(methodology_id)
        if factory is None:
            raise UnknownMethodologyError(
                f"Unknown methodology: {methodology_id}. Use one of {self.list_available()}"
            )
        strategy = factory()
        self._instances[methodology_id] = strategy
        logger.debug("Constructed %s strategy", methodology_id)
        return strategy

    def list_available(self) -> list[str]:
        return list(self._factories)

    def is_loaded(self, methodology_id: str) -> bool:
        return methodology_id in self._instances

    def reset(self) -> None:
        self._instances.clear()

    def default(self, settings: Settings | None = None) -> MethodologyStrategy:
        """Strategy for the configured default methodology."""
        return self.resolve((settings or get_settings()).default_methodology)


def enhance_plan(plan: Plan, registry: MethodologyRegistry | None = None) -> Plan:
    """Resolve the plan's methodology and return the customized copy.

    The plan config is checked with ``PlanConfigInput`` before any strategy
    runs, so a bad VDOT or date order fails as a ``ValidationError``.
    """
    registry = registry or MethodologyRegistry()
    strategy = registry.resolve(plan.config.methodology)
    PlanConfigInput(**asdict(plan.config))
    return strategy.enhance_plan(plan)


def distribution_report(
    plan: Plan,
    target: Optional[Mapping[str, float]] = None,
    registry: MethodologyRegistry | None = None,
) -> DistributionReport:
    """Report a plan's distribution against the methodology's targets.

    ``target`` overrides the overall easy/moderate/hard split and must sum to 100.
    """
    registry = registry or MethodologyRegistry()
    strategy = registry.resolve(plan.config.methodology)
    if target is not None:
        overall = DistributionInput(**target).to_distribution()
    elif plan.config.methodology in METHODOLOGY_PROFILES:
        overall = METHODOLOGY_PROFILES[plan.config.methodology].intensity_distribution
    else:
        overall = INTENSITY_MODELS["polarized"]
    return generate_report(plan, strategy.phase_distribution, plan.config.methodology, overall)
