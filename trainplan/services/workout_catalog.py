"""Named workout blueprints keyed by semantic type.

This module is the single source of truth for the template ids the
methodology strategies select between.  Templates are plain ``Workout``
values; strategies copy them with ``dataclasses.replace`` before editing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from trainplan.errors import TemplateNotFoundError
from trainplan.services.lydiard_hills import hill_template_workouts
from trainplan.services.plan_model import Segment, Workout
from trainplan.services.zones import zone_for_intensity
from trainplan.validators import SegmentInput


@dataclass(frozen=True)
class WorkoutTemplate:
    id: str
    workout: Workout

    @property
    def type(self) -> str:
        return self.workout.type


# ── Catalog ──────────────────────────────────────────────────────────────

CATALOG: dict[str, WorkoutTemplate] = {}


def _reg(template_id: str, workout: Workout) -> WorkoutTemplate:
    t = WorkoutTemplate(id=template_id, workout=workout)
    CATALOG[template_id] = t
    return t


def _warmup(duration: float = 15, description: str = "Warm-up") -> Segment:
    return Segment(duration, 65, "EASY", description)


def _cooldown(duration: float = 10) -> Segment:
    return Segment(duration, 60, "RECOVERY", "Cool-down")


def _repeats(
    reps: int,
    work: float,
    intensity: float,
    zone: str,
    rest: float,
    rest_intensity: float,
    work_desc: str,
    rest_desc: str,
) -> list[Segment]:
    """Work bouts with a rest jog between them (none after the last)."""
    out: list[Segment] = []
    for i in range(reps):
        out.append(Segment(work, intensity, zone, work_desc))
        if i < reps - 1:
            out.append(Segment(rest, rest_intensity, "RECOVERY", rest_desc))
    return out


# --- Easy / Recovery / Long ---

_reg("RECOVERY_JOG", Workout(
    type="recovery",
    primary_zone="RECOVERY",
    segments=[Segment(30, 50, "RECOVERY", "Very easy jog, focus on form")],
    adaptation_target="Active recovery and blood flow",
    estimated_tss=20,
    recovery_time=8,
    name="Recovery Jog",
))

_reg("EASY_AEROBIC", Workout(
    type="easy",
    primary_zone="EASY",
    segments=[Segment(60, 65, "EASY", "Conversational pace, nose breathing")],
    adaptation_target="Aerobic base, fat oxidation, capillarization",
    estimated_tss=50,
    recovery_time=12,
    name="Easy Aerobic Run",
))

_reg("LONG_RUN", Workout(
    type="long_run",
    primary_zone="EASY",
    segments=[Segment(120, 65, "EASY", "Steady aerobic effort, maintain form")],
    adaptation_target="Aerobic endurance, glycogen storage, mental resilience",
    estimated_tss=120,
    recovery_time=24,
    name="Long Run",
))

# --- Tempo / Threshold ---

_reg("TEMPO_CONTINUOUS", Workout(
    type="tempo",
    primary_zone="TEMPO",
    segments=[
        _warmup(10),
        Segment(30, 84, "TEMPO", "Steady tempo effort"),
        _cooldown(10),
    ],
    adaptation_target="Lactate clearance, aerobic power",
    estimated_tss=65,
    recovery_time=24,
    name="Continuous Tempo",
))

_reg("LACTATE_THRESHOLD_2X20", Workout(
    type="threshold",
    primary_zone="THRESHOLD",
    segments=[
        _warmup(10),
        Segment(20, 88, "THRESHOLD", "Threshold pace"),
        Segment(5, 60, "RECOVERY", "Recovery"),
        Segment(20, 88, "THRESHOLD", "Threshold pace"),
        _cooldown(10),
    ],
    adaptation_target="Lactate threshold improvement",
    estimated_tss=90,
    recovery_time=36,
    name="Lactate Threshold 2x20",
))

_reg("THRESHOLD_PROGRESSION", Workout(
    type="threshold",
    primary_zone="THRESHOLD",
    segments=[
        _warmup(10),
        Segment(10, 80, "STEADY", "Build"),
        Segment(10, 85, "TEMPO", "Tempo"),
        Segment(10, 90, "THRESHOLD", "Threshold"),
        _cooldown(10),
    ],
    adaptation_target="Progressive lactate tolerance",
    estimated_tss=75,
    recovery_time=24,
    name="Threshold Progression",
))

# --- VO2max / Speed / Hills ---

_reg("VO2MAX_4X4", Workout(
    type="vo2max",
    primary_zone="VO2_MAX",
    segments=[
        _warmup(),
        *_repeats(4, 4, 95, "VO2_MAX", 3, 60, "VO2max interval", "Recovery jog"),
        _cooldown(),
    ],
    adaptation_target="VO2max improvement, aerobic power",
    estimated_tss=100,
    recovery_time=48,
    name="VO2max 4x4min",
))

_reg("VO2MAX_5X3", Workout(
    type="vo2max",
    primary_zone="VO2_MAX",
    segments=[
        _warmup(),
        *_repeats(5, 3, 96, "VO2_MAX", 2, 60, "VO2max interval", "Recovery jog"),
        _cooldown(),
    ],
    adaptation_target="VO2max and running economy",
    estimated_tss=95,
    recovery_time=48,
    name="VO2max 5x3min",
))

_reg("SPEED_200M_REPS", Workout(
    type="speed",
    primary_zone="NEUROMUSCULAR",
    segments=[
        _warmup(),
        *_repeats(6, 0.5, 98, "NEUROMUSCULAR", 2, 50, "200m rep", "Walk recovery"),
        _cooldown(),
    ],
    adaptation_target="Neuromuscular power, running economy",
    estimated_tss=70,
    recovery_time=36,
    name="Speed 200m Repeats",
))

_reg("HILL_REPEATS_6X2", Workout(
    type="hill_repeats",
    primary_zone="VO2_MAX",
    segments=[
        _warmup(15, "Warm-up to hills"),
        *_repeats(6, 2, 92, "VO2_MAX", 3, 50, "Hill repeat", "Jog down"),
        _cooldown(),
    ],
    adaptation_target="Power, strength, VO2max",
    estimated_tss=85,
    recovery_time=36,
    name="Hill Repeats 6x2min",
))

# --- Mixed ---

_reg("FARTLEK_VARIED", Workout(
    type="fartlek",
    primary_zone="TEMPO",
    segments=[
        _warmup(10),
        Segment(2, 90, "THRESHOLD", "Hard surge"),
        Segment(3, 65, "EASY", "Easy recovery"),
        Segment(1, 95, "VO2_MAX", "Sprint"),
        Segment(4, 65, "EASY", "Easy recovery"),
        Segment(3, 85, "TEMPO", "Tempo surge"),
        Segment(2, 65, "EASY", "Easy recovery"),
        Segment(0.5, 98, "NEUROMUSCULAR", "Sprint"),
        Segment(4.5, 65, "EASY", "Easy recovery"),
        _cooldown(10),
    ],
    adaptation_target="Speed variation, mental adaptation",
    estimated_tss=65,
    recovery_time=24,
    name="Varied Fartlek",
))

_reg("PROGRESSION_3_STAGE", Workout(
    type="progression",
    primary_zone="TEMPO",
    segments=[
        Segment(20, 65, "EASY", "Easy start"),
        Segment(20, 78, "STEADY", "Steady pace"),
        Segment(20, 85, "TEMPO", "Tempo finish"),
        _cooldown(5),
    ],
    adaptation_target="Pacing, fatigue resistance",
    estimated_tss=75,
    recovery_time=24,
    name="3-Stage Progression",
))

for _tid, _workout in hill_template_workouts().items():
    _reg(_tid, _workout)


# ── Lookup ───────────────────────────────────────────────────────────────


def lookup(workout_type: str) -> list[WorkoutTemplate]:
    """All templates of a semantic type, in registration order.

    Raises TemplateNotFoundError when the catalog has none.
    """
    found = [t for t in CATALOG.values() if t.type == workout_type]
    if not found:
        raise TemplateNotFoundError(f"No workout template for type '{workout_type}'")
    return found


def get_template(template_id: str) -> WorkoutTemplate:
    template = CATALOG.get(template_id)
    if template is None:
        raise TemplateNotFoundError(f"Unknown workout template: {template_id}")
    return template


def template_ids() -> list[str]:
    return list(CATALOG)


# ── Custom workouts ──────────────────────────────────────────────────────

_BASE_RECOVERY_HOURS = {
    "recovery": 8,
    "easy": 12,
    "steady": 18,
    "tempo": 24,
    "threshold": 36,
    "vo2max": 48,
    "speed": 36,
    "hill_repeats": 36,
    "fartlek": 24,
    "progression": 24,
    "long_run": 24,
    "race_pace": 36,
    "time_trial": 48,
    "cross_training": 12,
    "strength": 24,
}


def estimate_tss(duration: float, intensity: float) -> int:
    """Simplified training stress: minutes x IF^2 x 100 / 60."""
    factor = intensity / 100
    return round(duration * factor ** 2 * 100 / 60)


def estimate_recovery_hours(workout_type: str, duration: float, intensity: float) -> int:
    base = _BASE_RECOVERY_HOURS.get(workout_type, 24)
    return round(base * (intensity / 80) * (duration / 60))


def create_custom_workout(
    workout_type: str,
    duration: float,
    intensity: float,
    segments: list[Segment | Mapping[str, Any]] | None = None,
) -> Workout:
    """Single-segment workout, or one built from caller segments (mappings are validated)."""
    zone = zone_for_intensity(intensity)
    parsed = [
        seg if isinstance(seg, Segment) else SegmentInput(**seg).to_segment()
        for seg in segments or ()
    ]
    return Workout(
        type=workout_type,
        primary_zone=zone,
        segments=parsed or [
            Segment(duration, intensity, zone, f"Custom {workout_type} workout")
        ],
        adaptation_target=f"Custom {workout_type} adaptations",
        estimated_tss=estimate_tss(duration, intensity),
        recovery_time=estimate_recovery_hours(workout_type, duration, intensity),
    )
