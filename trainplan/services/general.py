"""Methodologies without bespoke rules (hudson, custom).

They run the shared customization with their own emphasis table and phase
targets, select through a variant table that follows the cross-methodology
rules, and pass the result through the distribution enforcer.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from trainplan.logging_config import plan_log_context
from trainplan.services.distribution import EnforcementSettings, enforce_plan, generate_report
from trainplan.services.plan_model import IntensityDistribution, Plan, Workout, with_metadata
from trainplan.services.strategy_base import (
    BaseCustomizer,
    MethodologyStrategy,
    UnlockRule,
    VariantTable,
    phase_row,
)

logger = logging.getLogger(__name__)

EASY = "EASY_AEROBIC"

VARIANTS = VariantTable("general", {
    "easy": phase_row(EASY, EASY, EASY, EASY, EASY),
    "recovery": phase_row("RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG"),
    "long_run": phase_row("LONG_RUN", "LONG_RUN", "LONG_RUN", "LONG_RUN", EASY),
    "tempo": phase_row("TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", EASY),
    "threshold": phase_row(
        UnlockRule("TEMPO_CONTINUOUS", "LACTATE_THRESHOLD_2X20", unlock_week=4),
        "LACTATE_THRESHOLD_2X20", "THRESHOLD_PROGRESSION", "THRESHOLD_PROGRESSION", EASY,
    ),
    "vo2max": phase_row("TEMPO_CONTINUOUS", "VO2MAX_4X4", "VO2MAX_5X3", "VO2MAX_4X4", EASY),
    "speed": phase_row("FARTLEK_VARIED", "SPEED_200M_REPS", "SPEED_200M_REPS", "SPEED_200M_REPS", EASY),
    "fartlek": phase_row("FARTLEK_VARIED", "FARTLEK_VARIED", "FARTLEK_VARIED", "FARTLEK_VARIED", EASY),
    "hill_repeats": phase_row("HILL_REPEATS_6X2", "HILL_REPEATS_6X2", "HILL_REPEATS_6X2", "HILL_REPEATS_6X2", EASY),
    "progression": phase_row(
        "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", EASY,
    ),
})


class GeneralStrategy(MethodologyStrategy):
    def __init__(
        self,
        methodology: str,
        base: Optional[BaseCustomizer] = None,
        enforcement: Optional[EnforcementSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.methodology = methodology
        self.base = base or BaseCustomizer(methodology)
        self.enforcement = enforcement
        self.rng = rng
        self.variants = VARIANTS

    def phase_distribution(self, phase: str) -> IntensityDistribution:
        return self.base.phase_distribution(phase)

    def workout_emphasis(self, workout_type: str) -> float:
        return self.base.workout_emphasis(workout_type)

    def select_workout_variant(self, workout_type: str, phase: str, week_in_phase: int) -> str:
        variant = self.variants.resolve(workout_type, phase, week_in_phase)
        if variant is None:
            return self.base.select_workout_variant(workout_type)
        return variant

    def customize_workout(self, workout: Workout, phase: str, week_number: int) -> Workout:
        return self.base.customize_workout(workout, phase)

    def enhance_plan(self, plan: Plan) -> Plan:
        enhanced = self.base.enhance_plan(plan, self.customize_workout)
        overall_target = self.base.profile.intensity_distribution
        enforcement = enforce_plan(
            enhanced, self.phase_distribution, overall_target, self.enforcement, self.rng
        )
        tolerance = self.enforcement.tolerance if self.enforcement else 5.0
        report = generate_report(
            enforcement.plan, self.phase_distribution, self.methodology, overall_target, tolerance
        )
        logger.info(
            "%s plan enhanced", self.methodology, extra=plan_log_context(plan, compliance=report.compliance)
        )
        return with_metadata(
            enforcement.plan,
            methodology=self.methodology,
            intensity_distribution=report.overall,
            intensity_report=report,
            compliance_score=report.compliance,
            enforcement_history={k: r.history for k, r in enforcement.results.items()},
        )
