"""Aerobic-base methodology: long easy volume, hills, then sharpening.

Workouts are prescribed by effort rather than pace.  Base-phase quality
sessions become steady aerobic running, the whole plan must keep 85% of
its time easy, and every fourth week of a block is a recovery week.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from trainplan.logging_config import plan_log_context
from trainplan.services.aerobic_base import AerobicBaseCalculator
from trainplan.services.distribution import (
    EnforcementSettings,
    enforce_plan,
    generate_report,
)
from trainplan.services.lydiard_hills import HillGuidance, generate_hill_workout
from trainplan.services.lydiard_hills import hill_guidance as _hill_guidance
from trainplan.services.lydiard_periodization import (
    apply_recovery_emphasis,
    build_blocks,
    is_recovery_week,
)
from trainplan.services.plan_model import (
    Block,
    IntensityDistribution,
    Microcycle,
    Plan,
    PlannedWorkout,
    Workout,
    map_scheduled,
    replace_workouts,
    with_metadata,
    with_segments,
    with_workout,
)
from trainplan.services.strategy_base import (
    BaseCustomizer,
    MethodologyStrategy,
    VariantTable,
    phase_row,
)

logger = logging.getLogger(__name__)

EASY = "EASY_AEROBIC"

VARIANTS = VariantTable("lydiard", {
    "easy": phase_row(EASY, EASY, EASY, EASY, EASY),
    "recovery": phase_row("RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG"),
    "long_run": phase_row("LONG_RUN", "LONG_RUN", "LONG_RUN", "LONG_RUN", EASY),
    "hill_repeats": phase_row(
        "LYDIARD_HILL_BASE", "LYDIARD_HILL_BUILD", "LYDIARD_HILL_PEAK", "LYDIARD_HILL_TAPER", EASY,
    ),
    "tempo": phase_row("TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", EASY),
    "threshold": phase_row(
        "TEMPO_CONTINUOUS", "THRESHOLD_PROGRESSION", "THRESHOLD_PROGRESSION", "THRESHOLD_PROGRESSION", EASY,
    ),
    # No anaerobic intervals until the hill phase is done
    "vo2max": phase_row("LYDIARD_HILL_BASE", "LYDIARD_HILL_BUILD", "VO2MAX_4X4", "VO2MAX_4X4", EASY),
    "speed": phase_row("LYDIARD_HILL_BASE", "LYDIARD_HILL_BUILD", "SPEED_200M_REPS", "SPEED_200M_REPS", EASY),
})

# type -> phase -> segment intensity factor; "*" covers the remaining phases
_TYPE_ADJUSTMENT: dict[str, dict[str, float]] = {
    "easy": {"*": 0.85},
    "steady": {"*": 0.95},
    "long_run": {"*": 0.90},
    "hill_repeats": {"base": 0.90, "*": 0.95},
    "tempo": {"*": 0.95},
    "threshold": {"base": 0.85, "*": 0.98},
    "vo2max": {"base": 0.80, "build": 0.80, "*": 1.0},
    "speed": {"base": 0.75, "build": 0.75, "*": 0.98},
}

_WEEKLY_GROWTH = {"base": 0.01, "build": 0.016, "peak": 0.02}

TERMS: dict[str, dict[str, str]] = {
    "easy": {
        "base": "Aerobic base building - foundation mileage",
        "build": "Aerobic maintenance - recovery between harder efforts",
        "peak": "Active recovery - maintain aerobic base",
        "taper": "Easy aerobic - maintain fitness with minimal stress",
        "recovery": "Gentle jogging - promote recovery",
    },
    "steady": {
        "base": "Steady state aerobic - key Lydiard development pace",
        "build": "Sustained aerobic effort - lactate clearance",
        "peak": "Aerobic power - controlled sustained effort",
        "taper": "Steady maintenance - keep aerobic systems active",
        "recovery": "Easy steady - very light aerobic work",
    },
    "hill_repeats": {
        "base": "Hill strength - build power and economy",
        "build": "Hill power - anaerobic strength development",
        "peak": "Speed hill work - final power development",
        "taper": "Light hill work - maintain strength",
        "recovery": "Easy hill walking - gentle strength work",
    },
    "tempo": {
        "base": "Aerobic tempo - controlled aerobic effort",
        "build": "Tempo development - lactate threshold preparation",
        "peak": "Race pace tempo - specific pace practice",
        "taper": "Light tempo - maintain pace feel",
        "recovery": "Easy tempo - very light sustained work",
    },
}

ADAPTATIONS: dict[str, dict[str, str]] = {
    "easy": {
        "base": "Aerobic enzyme development, mitochondrial biogenesis, capillary density",
        "build": "Maintain aerobic base while building anaerobic capacity",
        "peak": "Recovery facilitation, maintain aerobic fitness",
        "taper": "Fitness maintenance with minimal fatigue",
        "recovery": "Complete physiological restoration",
    },
    "steady": {
        "base": "Aerobic power development, fat oxidation, cardiac output",
        "build": "Lactate clearance, aerobic-anaerobic transition",
        "peak": "Race pace conditioning, metabolic efficiency",
        "taper": "Maintain aerobic power with reduced volume",
        "recovery": "Light aerobic maintenance",
    },
    "hill_repeats": {
        "base": "Leg strength, running economy, biomechanical efficiency",
        "build": "Anaerobic power, lactate tolerance, neuromuscular coordination",
        "peak": "Maximum power output, race-specific strength",
        "taper": "Maintain strength with reduced stress",
        "recovery": "Gentle strength maintenance",
    },
    "long_run": {
        "base": "Aerobic base, glycogen storage, mental resilience, fat adaptation",
        "build": "Sustained aerobic power, pace judgment, endurance",
        "peak": "Race-specific endurance, pacing practice",
        "taper": "Maintain endurance base with reduced distance",
        "recovery": "Light endurance maintenance",
    },
}

PHASE_FOCUS = {
    "base": ["Aerobic base development", "Mitochondrial adaptation", "Capillarization", "Hill strength"],
    "build": ["Aerobic power", "Lactate clearance", "Time trials", "Coordination"],
    "peak": ["Race sharpening", "Speed development", "Race tactics", "Final conditioning"],
    "taper": ["Maintain fitness", "Recovery", "Race preparation", "Mental readiness"],
    "recovery": ["Full recovery", "Base maintenance", "Form work", "Preparation for next cycle"],
}

_BASE_CONVERTED_TYPES = ("vo2max", "speed", "threshold")
_LONG_RUN_PHASE_FACTOR = {"peak": 0.8, "taper": 0.6}


@dataclass(frozen=True)
class LongRunWeek:
    week: int
    phase: str
    distance: float


def intensity_factor(workout_type: str, phase: str, week_number: int) -> float:
    row = _TYPE_ADJUSTMENT.get(workout_type, {})
    adjustment = row.get(phase, row.get("*", 0.95))
    return adjustment * (1 + week_number * _WEEKLY_GROWTH.get(phase, 0))


def effort_label(intensity: float) -> str:
    if intensity < 60:
        return "Very easy effort"
    if intensity < 70:
        return "Easy conversational effort"
    if intensity < 80:
        return "Steady aerobic effort"
    if intensity < 85:
        return "Strong aerobic effort"
    if intensity < 90:
        return "Threshold effort"
    if intensity < 95:
        return "Hard anaerobic effort"
    return "Maximum effort"


def convert_to_steady(workout: Workout) -> Workout:
    """Base-phase replacement for interval and threshold sessions."""
    segments = [
        replace(
            seg,
            intensity=min(seg.intensity, 75),
            zone="STEADY" if seg.intensity > 80 else seg.zone,
            description=f"Aerobic {seg.description.lower()}",
        )
        for seg in workout.segments
    ]
    return with_segments(
        workout,
        segments,
        type="steady",
        primary_zone="STEADY",
        adaptation_target="Aerobic base development, mitochondrial adaptation",
        estimated_tss=round(workout.estimated_tss * 0.7),
        recovery_time=round(workout.recovery_time * 0.8),
    )


def apply_effort_zones(workout: Workout) -> Workout:
    segments = [
        replace(
            seg,
            description=f"{effort_label(seg.intensity)} - {seg.description}",
            effort_based=True,
            perceived_effort=round((seg.intensity - 50) / 5),
        )
        for seg in workout.segments
    ]
    return with_segments(workout, segments)


class LydiardStrategy(MethodologyStrategy):
    methodology = "lydiard"

    def __init__(
        self,
        base: Optional[BaseCustomizer] = None,
        calculator: Optional[AerobicBaseCalculator] = None,
        enforcement: Optional[EnforcementSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.base = base or BaseCustomizer(self.methodology)
        self.calculator = calculator or AerobicBaseCalculator()
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
        customized = self.base.customize_workout(workout, phase)
        factor = intensity_factor(workout.type, phase, week_number)
        term = TERMS.get(workout.type, {}).get(phase)

        segments = []
        for seg in customized.segments:
            description = f"{term} - {seg.description}" if term else seg.description
            segments.append(replace(
                seg,
                intensity=round(max(45, min(100, seg.intensity * factor))),
                description=description,
            ))

        adaptation = ADAPTATIONS.get(workout.type, {}).get(
            phase, f"{workout.type} adaptation for {phase} phase in Lydiard system"
        )
        return with_segments(
            customized,
            segments,
            adaptation_target=adaptation,
            recovery_time=round(customized.recovery_time * 1.1),
        )

    def customize_hill_workout(self, phase: str, week_in_phase: int, duration: float = 45) -> Workout:
        return generate_hill_workout(phase, week_in_phase, duration)

    def hill_guidance(self, phase: str) -> HillGuidance:
        return _hill_guidance(phase)

    def long_run_progression(self, plan: Plan) -> list[LongRunWeek]:
        """Weekly long-run distance (km): linear build through base, then held back."""
        distances = [
            w.target_metrics.distance for w in plan.workouts
            if w.type == "long_run" and w.target_metrics.distance
        ]
        longest_run = max(distances) if distances else 10.0
        base_weeks = sum(b.weeks for b in plan.blocks if b.phase == "base")

        out: list[LongRunWeek] = []
        week = 0
        for block in plan.blocks:
            for _ in range(block.weeks):
                week += 1
                if block.phase == "base":
                    distance = self.calculator.long_run_distance(week, base_weeks, longest_run)
                else:
                    distance = longest_run * _LONG_RUN_PHASE_FACTOR.get(block.phase, 0.9)
                out.append(LongRunWeek(week=week, phase=block.phase, distance=round(distance, 1)))
        return out

    def _schedule_adjust(
        self, block: Block, index: int, micro: Microcycle, planned: PlannedWorkout
    ) -> PlannedWorkout:
        workout = planned.workout
        if block.phase == "base" and workout.type in _BASE_CONVERTED_TYPES:
            workout = convert_to_steady(workout)
        workout = apply_recovery_emphasis(workout, block.phase, is_recovery_week(index))
        if workout is planned.workout:
            return planned
        return with_workout(planned, workout)

    def enhance_plan(self, plan: Plan) -> Plan:
        enhanced = self.base.enhance_plan(plan, self.customize_workout)
        enhanced = map_scheduled(enhanced, self._schedule_adjust)
        enhanced = replace_workouts(enhanced, self.calculator.enforce_aerobic_base(enhanced.workouts))
        enhanced = replace_workouts(enhanced, [
            with_workout(p, apply_effort_zones(self.calculator.convert_to_time_based(p.workout)))
            for p in enhanced.workouts
        ])

        overall_target = self.base.profile.intensity_distribution
        enforcement = enforce_plan(
            enhanced, self.phase_distribution, overall_target, self.enforcement, self.rng
        )
        enhanced = enforcement.plan
        tolerance = self.enforcement.tolerance if self.enforcement else 5.0
        report = generate_report(
            enhanced, self.phase_distribution, self.methodology, overall_target, tolerance
        )
        aerobic = self.calculator.validate_aerobic_base(enhanced.workouts)

        phases = [
            replace(ps, focus=list(PHASE_FOCUS.get(ps.phase, ps.focus)))
            for ps in enhanced.summary.phases
        ]
        enhanced = replace(enhanced, summary=replace(enhanced.summary, phases=phases))

        if not aerobic.is_compliant:
            logger.warning(
                "Lydiard plan below aerobic base target",
                extra=plan_log_context(
                    plan, easy=aerobic.distribution.easy, target=self.calculator.easy_target
                ),
            )
        logger.info("Lydiard plan enhanced", extra=plan_log_context(plan, compliance=report.compliance))
        return with_metadata(
            enhanced,
            methodology=self.methodology,
            aerobic_base_report=aerobic,
            intensity_report=report,
            compliance_score=report.compliance,
            enforcement_history={k: r.history for k, r in enforcement.results.items()},
            lydiard_features={
                "aerobic_base_compliance": aerobic.is_compliant,
                "easy_percentage": aerobic.distribution.easy,
                "time_based_training": True,
                "long_run_progression": self.long_run_progression(enhanced),
                "periodization_model": "lydiard_classic",
                "recovery_philosophy": "complete_rest",
            },
            periodization=build_blocks(enhanced.summary.total_weeks, plan.config.race_distance),
        )
