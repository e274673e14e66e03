"""Fitness-score (VDOT) methodology with strict 80/20 enforcement.

Every pace target derives from one VDOT value.  Work segments take the
intensity anchor of the workout type's Daniels zone (E/M/T/I/R) plus a
phase adjustment; warm-ups, cool-downs and recoveries run at E.  After
customization the plan is validated against per-phase targets and the
polarized overall model, auto-corrected, and a distribution report is
attached to the plan metadata.

Reference: Daniels' Running Formula, 3rd Edition (2013).
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Optional

from trainplan.cache_utils import MemoTable
from trainplan.logging_config import plan_log_context
from trainplan.services.distribution import (
    EnforcementSettings,
    enforce_plan,
    generate_report,
)
from trainplan.services.methodology_tables import INTENSITY_MODELS
from trainplan.services.paces import (
    TrainingPaces,
    calculate_training_paces,
    format_pace,
    format_pace_range,
    validate_vdot,
)
from trainplan.services.plan_model import (
    EASY_CEILING,
    HeartRateRange,
    IntensityDistribution,
    PaceRange,
    Plan,
    PlannedWorkout,
    Segment,
    Workout,
    replace_workouts,
    with_metadata,
    with_segments,
    with_workout,
)
from trainplan.services.strategy_base import (
    AlternatingRule,
    BaseCustomizer,
    MethodologyStrategy,
    UnlockRule,
    VariantTable,
    phase_row,
)

logger = logging.getLogger(__name__)

THRESHOLD_UNLOCK_WEEK = 4

# Workout type -> Daniels pace zone for its work segments
TYPE_PACE_ZONE = {
    "easy": "easy",
    "recovery": "easy",
    "long_run": "easy",
    "progression": "easy",
    "tempo": "threshold",
    "threshold": "threshold",
    "fartlek": "threshold",
    "steady": "marathon",
    "race_pace": "marathon",
    "vo2max": "interval",
    "speed": "repetition",
}

# Intensity anchors (% effort) per Daniels zone
ZONE_INTENSITY = {"easy": 70, "marathon": 84, "threshold": 88, "interval": 98, "repetition": 105}

PHASE_ZONE_ADJUSTMENT: dict[str, dict[str, int]] = {
    "base": {"easy": -2, "marathon": -3, "threshold": -5, "interval": -10, "repetition": -15},
    "build": {"easy": 0, "marathon": 0, "threshold": 0, "interval": -2, "repetition": -5},
    "peak": {"easy": 0, "marathon": 2, "threshold": 2, "interval": 0, "repetition": 0},
    "taper": {"easy": -2, "marathon": 0, "threshold": -3, "interval": -2, "repetition": -5},
    "recovery": {"easy": -5, "marathon": -10, "threshold": -15, "interval": -20, "repetition": -25},
}

ZONE_DESCRIPTIONS = {
    "easy": "E - Easy/Aerobic",
    "marathon": "M - Marathon",
    "threshold": "T - Threshold/Tempo",
    "interval": "I - Interval/VO2max",
    "repetition": "R - Repetition/Speed",
}

ADAPTATION_TARGETS: dict[str, dict[str, str]] = {
    "easy": {
        "base": "Build aerobic base, improve fat oxidation",
        "build": "Maintain aerobic fitness, aid recovery",
        "peak": "Active recovery between hard sessions",
        "taper": "Maintain fitness, promote recovery",
        "recovery": "Full recovery, blood flow maintenance",
    },
    "tempo": {
        "base": "Develop aerobic power, lactate clearance",
        "build": "Improve tempo pace, aerobic strength",
        "peak": "Race pace practice, lactate management",
        "taper": "Maintain tempo fitness, race prep",
        "recovery": "Light tempo work for fitness maintenance",
    },
    "threshold": {
        "base": "Develop lactate threshold, aerobic power",
        "build": "Improve threshold pace, lactate tolerance",
        "peak": "Race-specific threshold work",
        "taper": "Maintain threshold fitness",
        "recovery": "Easy threshold maintenance",
    },
    "vo2max": {
        "base": "Develop VO2max, running economy",
        "build": "Improve VO2max, neuromuscular power",
        "peak": "Peak VO2max fitness, race sharpening",
        "taper": "Maintain VO2max, race readiness",
        "recovery": "Light VO2max maintenance",
    },
}

# % of estimated max HR per segment zone
_HR_PCT = {
    "RECOVERY": (0.50, 0.60),
    "EASY": (0.65, 0.75),
    "STEADY": (0.75, 0.82),
    "TEMPO": (0.82, 0.87),
    "THRESHOLD": (0.87, 0.92),
    "VO2_MAX": (0.92, 0.97),
    "NEUROMUSCULAR": (0.95, 1.00),
}

_THRESHOLD_VARIANTS = AlternatingRule(("LACTATE_THRESHOLD_2X20", "THRESHOLD_PROGRESSION"), start_week=1)
_VO2_ALTERNATION = AlternatingRule(("VO2MAX_4X4", "VO2MAX_5X3"), start_week=2)

VARIANTS = VariantTable("daniels", {
    "easy": phase_row("EASY_AEROBIC", "EASY_AEROBIC", "EASY_AEROBIC", "EASY_AEROBIC", "EASY_AEROBIC"),
    "recovery": phase_row("RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG"),
    "long_run": phase_row("LONG_RUN", "LONG_RUN", "LONG_RUN", "LONG_RUN", "EASY_AEROBIC"),
    "tempo": phase_row(
        UnlockRule("EASY_AEROBIC", "TEMPO_CONTINUOUS", unlock_week=2),
        "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "EASY_AEROBIC",
    ),
    "threshold": phase_row(
        UnlockRule(
            "TEMPO_CONTINUOUS",
            AlternatingRule(
                ("LACTATE_THRESHOLD_2X20", "THRESHOLD_PROGRESSION"),
                start_week=THRESHOLD_UNLOCK_WEEK + 1,
            ),
            unlock_week=THRESHOLD_UNLOCK_WEEK,
        ),
        _THRESHOLD_VARIANTS, "THRESHOLD_PROGRESSION", "THRESHOLD_PROGRESSION", "EASY_AEROBIC",
    ),
    "vo2max": phase_row(
        "TEMPO_CONTINUOUS",
        UnlockRule("VO2MAX_5X3", _VO2_ALTERNATION, unlock_week=2),
        _VO2_ALTERNATION, "VO2MAX_5X3", "EASY_AEROBIC",
    ),
    "speed": phase_row("EASY_AEROBIC", "SPEED_200M_REPS", "SPEED_200M_REPS", "SPEED_200M_REPS", "EASY_AEROBIC"),
    "fartlek": phase_row("FARTLEK_VARIED", "FARTLEK_VARIED", "FARTLEK_VARIED", "FARTLEK_VARIED", "EASY_AEROBIC"),
    "progression": phase_row(
        "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "EASY_AEROBIC",
    ),
    "race_pace": phase_row("TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "EASY_AEROBIC"),
})


def zone_intensity(pace_zone: str, phase: str) -> int:
    adjustment = PHASE_ZONE_ADJUSTMENT.get(phase, {}).get(pace_zone, 0)
    return min(100, max(50, ZONE_INTENSITY[pace_zone] + adjustment))


def adaptation_target(workout_type: str, phase: str) -> str:
    targets = ADAPTATION_TARGETS.get(workout_type)
    if targets and phase in targets:
        return targets[phase]
    return f"{workout_type} training adaptation for {phase} phase"


def pace_description(description: str, pace: PaceRange, pace_zone: str) -> str:
    target = format_pace(pace.centre)
    return (
        f"{description} at {target}/km ({format_pace_range(pace)}/km {pace_zone.upper()} pace) "
        f"({ZONE_DESCRIPTIONS[pace_zone]})"
    )


def pace_for_zone(zone: str, paces: TrainingPaces) -> PaceRange:
    """Daniels pace band for a segment zone key."""
    if zone == "RECOVERY":
        slow = paces.easy.max
        return PaceRange(min=round(slow * 1.1, 3), max=round(slow * 1.25, 3), target=round(slow * 1.15, 3))
    if zone == "EASY":
        return paces.easy
    if zone == "STEADY":
        return PaceRange(
            min=paces.easy.min,
            max=paces.marathon.max,
            target=round((paces.easy.centre + paces.marathon.centre) / 2, 3),
        )
    if zone == "TEMPO":
        m = paces.marathon.max
        return PaceRange(min=m, max=round(m * 1.05, 3), target=round(m * 1.02, 3))
    if zone == "THRESHOLD":
        return paces.threshold
    if zone == "VO2_MAX":
        return paces.interval
    if zone == "NEUROMUSCULAR":
        return paces.repetition
    logger.warning("No Daniels pace for zone %r, using marathon pace", zone)
    return paces.marathon


def estimated_max_hr(vdot: float) -> int:
    return 220 - (35 if vdot < 45 else 30 if vdot < 55 else 25)


def heart_rate_for_zone(zone: str, vdot: float) -> HeartRateRange:
    max_hr = estimated_max_hr(vdot)
    lo, hi = _HR_PCT.get(zone, (0.70, 0.80))
    return HeartRateRange(min=round(max_hr * lo), max=round(max_hr * hi))


def estimated_heart_rate_zones(vdot: float) -> dict[str, HeartRateRange]:
    return {zone: heart_rate_for_zone(zone, vdot) for zone in _HR_PCT}


def pace_recommendations(paces: TrainingPaces) -> dict[str, str]:
    return {
        "easy": f"E: {format_pace_range(paces.easy)} - Conversational pace, aerobic base",
        "marathon": f"M: {format_pace_range(paces.marathon)} - Goal marathon pace",
        "threshold": f"T: {format_pace_range(paces.threshold)} - Comfortably hard, 1-hour effort",
        "interval": f"I: {format_pace_range(paces.interval)} - Hard intervals, VO2max",
        "repetition": f"R: {format_pace_range(paces.repetition)} - Short, fast repeats",
    }


def estimate_vdot_from_plan(plan: Plan) -> int:
    """Rough VDOT from weekly volume and hard share when the config has none."""
    summary = plan.summary
    weekly = summary.total_distance / summary.total_weeks if summary.total_weeks else 0
    phases = summary.phases
    hard = sum(p.intensity_distribution.hard for p in phases) / len(phases) if phases else 0

    vdot = 35
    if weekly > 80:
        vdot += 15
    elif weekly > 60:
        vdot += 10
    elif weekly > 40:
        vdot += 5
    if hard > 20:
        vdot += 10
    elif hard > 15:
        vdot += 5
    return min(65, vdot)


def estimate_vdot_from_template(workout: Workout) -> int:
    if not workout.segments:
        return 45
    avg = sum(s.intensity for s in workout.segments) / len(workout.segments)
    if avg > 90:
        return 50
    if avg > 80:
        return 45
    return 40


class DanielsStrategy(MethodologyStrategy):
    methodology = "daniels"

    def __init__(
        self,
        base: Optional[BaseCustomizer] = None,
        enforcement: Optional[EnforcementSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.base = base or BaseCustomizer(self.methodology)
        self.enforcement = enforcement
        self.rng = rng
        self.variants = VARIANTS
        self._paces = MemoTable()

    # -- paces --

    def training_paces(self, vdot: float) -> TrainingPaces:
        """Memoized pace table; keyed by the rounded VDOT."""
        validate_vdot(vdot)
        key = round(vdot)
        return self._paces.get_or_compute(key, lambda: calculate_training_paces(key))

    def update_vdot(self, vdot: float) -> TrainingPaces:
        validate_vdot(vdot)
        self._paces.discard(round(vdot))
        return self.training_paces(vdot)

    @property
    def pace_cache(self) -> MemoTable:
        return self._paces

    # -- interface --

    def phase_distribution(self, phase: str) -> IntensityDistribution:
        return self.base.phase_distribution(phase)

    def workout_emphasis(self, workout_type: str) -> float:
        return self.base.workout_emphasis(workout_type)

    def select_workout_variant(self, workout_type: str, phase: str, week_in_phase: int) -> str:
        variant = self.variants.resolve(workout_type, phase, week_in_phase)
        if variant is None:
            return self.base.select_workout_variant(workout_type)
        return variant

    def customize_workout(
        self, workout: Workout, phase: str, week_number: int, vdot: Optional[float] = None
    ) -> Workout:
        customized = self.base.customize_workout(workout, phase)
        current = vdot if vdot is not None else estimate_vdot_from_template(workout)
        paces = self.training_paces(current)
        work_zone = TYPE_PACE_ZONE.get(workout.type, "easy")

        segments = []
        for original, seg in zip(workout.segments, customized.segments):
            # Warm-ups, cool-downs and recoveries stay at E regardless of workout type
            pace_zone = work_zone if workout_segment_is_work(workout, original) else "easy"
            pace = paces.as_dict()[pace_zone]
            updated = replace(
                seg,
                intensity=zone_intensity(pace_zone, phase),
                pace_target=PaceRange(min=pace.min, max=pace.max, target=pace.target),
                description=pace_description(seg.description, pace, pace_zone),
            )
            segments.append(_phase_tweak(updated, phase, workout.type))

        metadata = dict(customized.metadata)
        metadata.update({"vdot": current, "methodology": self.methodology})
        return with_segments(
            customized,
            segments,
            adaptation_target=adaptation_target(workout.type, phase),
            metadata=metadata,
        )

    def apply_vdot_pacing(self, planned: PlannedWorkout, vdot: float) -> PlannedWorkout:
        """Heart-rate targets per segment zone; pace targets only where customization set none."""
        workout = planned.workout
        if not workout.segments:
            return planned
        paces = self.training_paces(vdot)
        segments = [
            replace(
                seg,
                pace_target=seg.pace_target or pace_for_zone(seg.zone, paces),
                heart_rate_target=heart_rate_for_zone(seg.zone, vdot),
            )
            for seg in workout.segments
        ]
        metadata = dict(workout.metadata)
        metadata.update({"vdot_used": vdot, "pace_recommendations": pace_recommendations(paces)})
        return with_workout(planned, with_segments(workout, segments, metadata=metadata))

    def enhance_plan(self, plan: Plan) -> Plan:
        vdot = plan.config.vdot if plan.config.vdot is not None else estimate_vdot_from_plan(plan)
        validate_vdot(vdot)

        enhanced = self.base.enhance_plan(
            plan, lambda w, phase, week: self.customize_workout(w, phase, week, vdot)
        )
        paced = {w.id: self.apply_vdot_pacing(w, vdot) for w in enhanced.workouts}
        enhanced = replace_workouts(enhanced, paced.values())

        overall_target = INTENSITY_MODELS["polarized"]
        enforcement = enforce_plan(
            enhanced, self.phase_distribution, overall_target, self.enforcement, self.rng
        )
        report = generate_report(
            enforcement.plan, self.phase_distribution, self.methodology, overall_target,
            self.enforcement.tolerance if self.enforcement else 5.0,
        )
        logger.info(
            "Daniels plan enhanced",
            extra=plan_log_context(plan, vdot=vdot, compliance=report.compliance),
        )
        return with_metadata(
            enforcement.plan,
            methodology=self.methodology,
            vdot=vdot,
            training_paces=self.training_paces(vdot),
            intensity_distribution=report.overall,
            intensity_report=report,
            compliance_score=report.compliance,
            enforcement_history={k: r.history for k, r in enforcement.results.items()},
        )


def workout_segment_is_work(workout: Workout, segment: Segment) -> bool:
    """Work segments sit above the easy ceiling; easy-typed workouts are all work."""
    if TYPE_PACE_ZONE.get(workout.type, "easy") == "easy":
        return True
    return segment.intensity > EASY_CEILING


def _phase_tweak(segment: Segment, phase: str, workout_type: str) -> Segment:
    if phase == "base" and workout_type in ("threshold", "vo2max"):
        return replace(
            segment,
            duration=max(segment.duration * 0.8, 15),
            intensity=max(segment.intensity - 5, 70),
        )
    if phase == "peak" and workout_type in ("vo2max", "speed"):
        return replace(segment, intensity=min(segment.intensity + 2, 100))
    if phase == "taper":
        return replace(segment, duration=max(segment.duration * 0.7, 10))
    return segment
