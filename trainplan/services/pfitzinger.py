"""Lactate-threshold methodology.

Every pace is a fixed offset from the runner's lactate threshold pace.
Build and peak blocks swap midweek easy runs for medium-long runs, add a
marathon-pace block to every third long run, and turn long runs four to
five and eight to nine weeks before the goal into tune-up races.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from trainplan.cache_utils import MemoTable
from trainplan.logging_config import plan_log_context
from trainplan.services.distribution import (
    EnforcementSettings,
    enforce_plan,
    generate_report,
)
from trainplan.services.medium_long import MediumLongRunGenerator
from trainplan.services.paces import (
    format_pace,
    format_pace_range,
    lactate_threshold_pace,
    validate_lt_pace,
    validate_vdot,
)
from trainplan.services.plan_model import (
    Block,
    IntensityDistribution,
    Microcycle,
    PaceRange,
    Plan,
    PlanConfig,
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
from trainplan.services.weekly_structure import (
    WeeklyStructureGenerator,
    is_tune_up_week,
    plan_threshold_progression,
    tune_up_race_workout,
)

logger = logging.getLogger(__name__)

DEFAULT_LT_PACE = 5.0   # min/km

# pace key -> (min, max, target) offsets from LT pace in min/km
LT_OFFSETS: dict[str, tuple[float, float, float]] = {
    "recovery": (0.5, 0.75, 0.625),
    "general_aerobic": (0.25, 0.5, 0.375),
    "marathon": (0.167, 0.25, 0.208),
    "lactate_threshold": (-0.05, 0.05, 0.0),
    "vo2max": (-0.25, -0.167, -0.208),
    "neuromuscular": (-0.5, -0.333, -0.417),
}

ZONE_PACE_KEY = {
    "RECOVERY": "recovery",
    "EASY": "general_aerobic",
    "STEADY": "marathon",
    "TEMPO": "lactate_threshold",
    "THRESHOLD": "lactate_threshold",
    "VO2_MAX": "vo2max",
    "NEUROMUSCULAR": "neuromuscular",
}

_ZONE_LABELS = {
    "recovery": "Recovery pace",
    "general_aerobic": "General aerobic pace",
    "marathon": "Marathon pace",
    "lactate_threshold": "Lactate threshold pace",
    "vo2max": "VO2max pace",
    "neuromuscular": "Neuromuscular pace",
}

EASY = "EASY_AEROBIC"

VARIANTS = VariantTable("pfitzinger", {
    "easy": phase_row(EASY, EASY, EASY, EASY, EASY),
    "recovery": phase_row("RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG", "RECOVERY_JOG"),
    "long_run": phase_row("LONG_RUN", "LONG_RUN", "LONG_RUN", "LONG_RUN", EASY),
    "tempo": phase_row("TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", "TEMPO_CONTINUOUS", EASY),
    "threshold": phase_row(
        "THRESHOLD_PROGRESSION", "LACTATE_THRESHOLD_2X20", "LACTATE_THRESHOLD_2X20", "THRESHOLD_PROGRESSION", EASY,
    ),
    "progression": phase_row(
        "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", "PROGRESSION_3_STAGE", EASY,
    ),
    # VO2max work only in peak; threshold work stands in elsewhere
    "vo2max": phase_row(
        "THRESHOLD_PROGRESSION", "THRESHOLD_PROGRESSION", "VO2MAX_5X3", "THRESHOLD_PROGRESSION", EASY,
    ),
    "speed": phase_row("TEMPO_CONTINUOUS", "SPEED_200M_REPS", "SPEED_200M_REPS", "SPEED_200M_REPS", EASY),
})

_TYPE_INTENSITY: dict[str, dict[str, float]] = {
    "easy": {"*": 0.95},
    "steady": {"*": 1.0},
    "tempo": {"peak": 1.05, "*": 1.02},
    "threshold": {"build": 1.08, "peak": 1.08, "*": 1.05},
    "progression": {"*": 1.05},
    "vo2max": {"peak": 1.10, "*": 1.0},
    "long_run": {"*": 0.98},
}

TSS_MULTIPLIERS = {
    "threshold": 1.15,
    "tempo": 1.10,
    "progression": 1.12,
    "steady": 1.05,
    "long_run": 1.08,
    "easy": 1.00,
    "recovery": 0.90,
    "vo2max": 1.20,
    "race_pace": 1.25,
}

TERMS = {
    "easy": "General aerobic run - comfortable effort",
    "steady": "Medium-long run - sustained aerobic development",
    "tempo": "Marathon pace run - race rhythm development",
    "threshold": "Lactate threshold run - push the red line",
    "progression": "Progressive long run - negative split practice",
    "vo2max": "VO2max intervals - top-end speed",
    "long_run": "Endurance long run - time on feet",
    "recovery": "Recovery run - easy regeneration",
    "race_pace": "Tune-up race - competitive sharpening",
    "hill_repeats": "Hill workout - strength and power",
    "fartlek": "Fartlek - varied pace training",
    "time_trial": "Time trial - fitness assessment",
    "cross_training": "Cross-training - active recovery",
    "strength": "Strength training - injury prevention",
}

ADAPTATIONS: dict[str, dict[str, str]] = {
    "threshold": {
        "base": "Lactate threshold introduction, aerobic power development",
        "build": "Lactate threshold improvement, marathon pace efficiency",
        "peak": "Peak lactate clearance, race-specific endurance",
        "taper": "Maintain threshold fitness with reduced volume",
        "recovery": "Light threshold maintenance",
    },
    "tempo": {
        "base": "Marathon pace introduction, rhythm development",
        "build": "Marathon pace efficiency, glycogen utilization",
        "peak": "Race pace lock-in, mental preparation",
        "taper": "Race pace feel, confidence building",
        "recovery": "Easy tempo for base maintenance",
    },
    "progression": {
        "base": "Negative split practice, fatigue resistance",
        "build": "Late-race strength, glycogen depletion training",
        "peak": "Race simulation, pacing discipline",
        "taper": "Pace control, race strategy",
        "recovery": "Light progression for maintenance",
    },
    "long_run": {
        "base": "Aerobic base, time on feet, mental toughness",
        "build": "Endurance with quality, marathon simulation",
        "peak": "Race-specific endurance, fuel utilization",
        "taper": "Maintain endurance, reduce fatigue",
        "recovery": "Easy long run for base maintenance",
    },
}

PHASE_FOCUS = {
    "base": ["Aerobic base", "Lactate threshold introduction", "Running economy", "Mileage buildup"],
    "build": ["Lactate threshold development", "Marathon pace work", "Medium-long runs", "Endurance"],
    "peak": ["Race-specific fitness", "Tune-up races", "VO2max touches", "Peak mileage"],
    "taper": ["Maintain fitness", "Reduce fatigue", "Race preparation", "Sharpening"],
    "recovery": ["Active recovery", "Base maintenance", "Preparation for next cycle"],
}

_THRESHOLD_TYPES = ("threshold", "tempo", "progression", "race_pace")
_MARATHON_SPECIFIC_TYPES = ("tempo", "threshold", "progression")
# segments in this intensity band count toward weekly threshold volume
_THRESHOLD_BAND = (84, 92)


@dataclass(frozen=True)
class LTZone:
    key: str
    pace: PaceRange
    description: str


def lt_paces(lt_pace: float) -> dict[str, PaceRange]:
    return {
        key: PaceRange(
            min=round(lt_pace + lo, 3), max=round(lt_pace + hi, 3), target=round(lt_pace + target, 3)
        )
        for key, (lo, hi, target) in LT_OFFSETS.items()
    }


def pace_key_for_zone(zone: str) -> str:
    key = ZONE_PACE_KEY.get(zone)
    if key is None:
        logger.warning("No LT pace mapping for zone %r, using general aerobic", zone)
        return "general_aerobic"
    return key


def lt_based_zones(lt_pace: float) -> dict[str, LTZone]:
    paces = lt_paces(lt_pace)
    zones = {}
    for key, pace in paces.items():
        description = f"{_ZONE_LABELS[key]} ({format_pace_range(pace)})"
        if key == "lactate_threshold":
            description += f" - Foundation pace ({format_pace(lt_pace)})"
        zones[key] = LTZone(key=key, pace=pace, description=description)
    return zones


def intensity_adjustment(workout_type: str, phase: str, week_number: int) -> float:
    row = _TYPE_INTENSITY.get(workout_type, {})
    adjustment = row.get(phase, row.get("*", 1.0))
    if phase == "build":
        adjustment *= 1.0 + week_number * 0.01
    return adjustment


def adjust_for_threshold_volume(planned: PlannedWorkout, target_minutes: float) -> PlannedWorkout:
    """Scale threshold-band segments toward the week's target, by a factor within [0.5, 2.0]."""
    lo, hi = _THRESHOLD_BAND
    workout = planned.workout
    current = sum(s.duration for s in workout.segments if lo <= s.intensity <= hi)
    if current == 0:
        return planned
    factor = max(0.5, min(2.0, target_minutes / current))
    segments = [
        replace(seg, duration=round(seg.duration * factor)) if lo <= seg.intensity <= hi else seg
        for seg in workout.segments
    ]
    return with_workout(
        planned,
        with_segments(workout, segments, estimated_tss=round(workout.estimated_tss * factor)),
    )


class PfitzingerStrategy(MethodologyStrategy):
    methodology = "pfitzinger"

    def __init__(
        self,
        base: Optional[BaseCustomizer] = None,
        medium_long: Optional[MediumLongRunGenerator] = None,
        weekly: Optional[WeeklyStructureGenerator] = None,
        enforcement: Optional[EnforcementSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.base = base or BaseCustomizer(self.methodology)
        self.medium_long = medium_long or MediumLongRunGenerator()
        self.weekly = weekly or WeeklyStructureGenerator()
        self.enforcement = enforcement
        self.rng = rng
        self.variants = VARIANTS
        self._paces = MemoTable()

    # -- paces --

    def lactate_threshold_pace(self, config: PlanConfig) -> float:
        """Configured LT pace, else one derived from VDOT, else 5:00/km."""
        if config.lactate_threshold_pace is not None:
            return validate_lt_pace(config.lactate_threshold_pace)
        if config.vdot is not None:
            validate_vdot(config.vdot)
            return validate_lt_pace(lactate_threshold_pace(config.vdot))
        return DEFAULT_LT_PACE

    def training_paces(self, lt_pace: float) -> dict[str, PaceRange]:
        validate_lt_pace(lt_pace)
        key = round(lt_pace, 3)
        return self._paces.get_or_compute(key, lambda: lt_paces(key))

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
        self, workout: Workout, phase: str, week_number: int, lt_pace: Optional[float] = None
    ) -> Workout:
        customized = self.base.customize_workout(workout, phase)
        factor = intensity_adjustment(workout.type, phase, week_number)
        term = TERMS.get(workout.type)
        marathon_specific = workout.type in _MARATHON_SPECIFIC_TYPES and phase in ("build", "peak")
        paces = self.training_paces(lt_pace if lt_pace is not None else DEFAULT_LT_PACE)

        segments = []
        for seg in customized.segments:
            updated = replace(
                seg,
                intensity=max(50, min(100, round(seg.intensity * factor))),
                description=f"{term} - {seg.description}" if term else seg.description,
            )
            if marathon_specific and seg.zone == "TEMPO":
                updated = replace(updated, pace_target=paces["marathon"])
            elif marathon_specific and seg.zone == "THRESHOLD":
                updated = replace(updated, pace_target=paces["lactate_threshold"])
            segments.append(updated)

        return with_segments(
            customized,
            segments,
            adaptation_target=ADAPTATIONS.get(workout.type, {}).get(
                phase, f"{workout.type} adaptation for {phase} phase in Pfitzinger system"
            ),
            estimated_tss=round(customized.estimated_tss * TSS_MULTIPLIERS.get(workout.type, 1.0)),
        )

    def apply_lt_pacing(self, planned: PlannedWorkout, lt_pace: float) -> PlannedWorkout:
        paces = self.training_paces(lt_pace)
        workout = planned.workout
        segments = []
        for seg in workout.segments:
            key = pace_key_for_zone(seg.zone)
            pace = paces[key]
            label = key.replace("_", " ")
            segments.append(replace(
                seg,
                pace_target=pace,
                description=f"{seg.description} ({format_pace_range(pace)} - LT-derived {label} pace)",
            ))
        metadata = dict(workout.metadata)
        metadata.update({"lactate_threshold_based": True, "foundation_pace": lt_pace})
        return with_workout(planned, with_segments(workout, segments, metadata=metadata))

    # -- plan structure --

    def _structure_week(
        self, block: Block, index: int, micro: Microcycle, planned: PlannedWorkout
    ) -> PlannedWorkout:
        if self.medium_long.should_be_medium_long(planned, block.phase):
            return self.medium_long.convert(planned, block.phase, index + 1)
        if planned.workout.type == "long_run" and self.medium_long.should_add_quality(block.phase, index):
            return self.medium_long.add_quality(planned)
        return planned

    def apply_weekly_structure(self, plan: Plan) -> Plan:
        """Medium-long and quality long runs, plus each block's weekly pattern and focus."""
        structured = map_scheduled(plan, self._structure_week)
        blocks = [
            replace(
                block,
                focus_areas=list(PHASE_FOCUS.get(block.phase, block.focus_areas)),
                microcycles=[
                    replace(micro, pattern=self.weekly.pattern(block.phase, index))
                    for index, micro in enumerate(block.microcycles)
                ],
            )
            for block in structured.blocks
        ]
        return replace(structured, blocks=blocks)

    def apply_threshold_volume(self, plan: Plan) -> Plan:
        """Scale threshold sessions to the plan-wide weekly threshold minutes."""
        progression = plan_threshold_progression(plan.summary.total_weeks or 12)
        updated = []
        week = 0
        for block in plan.blocks:
            for micro in block.microcycles:
                target = progression[min(week, len(progression) - 1)]
                for planned in micro.workouts:
                    if planned.workout.type in _THRESHOLD_TYPES:
                        updated.append(adjust_for_threshold_volume(planned, target))
                week += 1
        return replace_workouts(plan, updated)

    def schedule_tune_up_races(self, plan: Plan) -> Plan:
        goal = plan.config.target_date or plan.config.end_date
        if goal is None:
            return plan
        races = []
        for planned in plan.workouts:
            weeks_to_goal = (goal - planned.date).days // 7
            if planned.workout.metadata.get("medium_long"):
                continue
            if planned.workout.type == "long_run" and is_tune_up_week(weeks_to_goal):
                race = tune_up_race_workout(weeks_to_goal)
                races.append(with_workout(
                    planned, race,
                    name=race.name,
                    description=f"Race simulation {weeks_to_goal} weeks before goal",
                ))
        return replace_workouts(plan, races)

    def enhance_plan(self, plan: Plan) -> Plan:
        lt_pace = self.lactate_threshold_pace(plan.config)

        enhanced = self.base.enhance_plan(
            plan, lambda w, phase, week: self.customize_workout(w, phase, week, lt_pace)
        )
        enhanced = self.apply_threshold_volume(enhanced)
        enhanced = self.apply_weekly_structure(enhanced)
        enhanced = self.schedule_tune_up_races(enhanced)
        enhanced = replace_workouts(
            enhanced, [self.apply_lt_pacing(p, lt_pace) for p in enhanced.workouts]
        )

        overall_target = self.base.profile.intensity_distribution
        enforcement = enforce_plan(
            enhanced, self.phase_distribution, overall_target, self.enforcement, self.rng
        )
        tolerance = self.enforcement.tolerance if self.enforcement else 5.0
        report = generate_report(
            enforcement.plan, self.phase_distribution, self.methodology, overall_target, tolerance
        )
        logger.info(
            "Pfitzinger plan enhanced",
            extra=plan_log_context(plan, lt_pace=lt_pace, compliance=report.compliance),
        )
        return with_metadata(
            enforcement.plan,
            methodology=self.methodology,
            lactate_threshold_pace=lt_pace,
            pfitzinger_paces=self.training_paces(lt_pace),
            threshold_volume_progression=plan_threshold_progression(plan.summary.total_weeks or 12),
            lt_based_zones=lt_based_zones(lt_pace),
            intensity_distribution=report.overall,
            intensity_report=report,
            compliance_score=report.compliance,
            enforcement_history={k: r.history for k, r in enforcement.results.items()},
        )
