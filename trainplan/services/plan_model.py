"""Value types for training plans flowing through the methodology engine.

Every type here is a frozen dataclass.  Transformations build new values
with ``dataclasses.replace`` and fresh lists; nothing in the engine mutates
a plan handed to it by a caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Iterable, Optional

PHASES: tuple[str, ...] = ("base", "build", "peak", "taper", "recovery")

WORKOUT_TYPES: tuple[str, ...] = (
    "recovery",
    "easy",
    "steady",
    "tempo",
    "threshold",
    "vo2max",
    "speed",
    "hill_repeats",
    "fartlek",
    "progression",
    "long_run",
    "race_pace",
    "time_trial",
    "cross_training",
    "strength",
)

# Intensity bucket ceilings (inclusive): easy <= 75 < moderate <= 85 < hard
EASY_CEILING = 75
MODERATE_CEILING = 85


@dataclass(frozen=True)
class PaceRange:
    """Pace band in minutes per kilometre; ``min`` is the faster end."""
    min: float
    max: float
    target: Optional[float] = None

    @property
    def centre(self) -> float:
        return self.target if self.target is not None else (self.min + self.max) / 2


@dataclass(frozen=True)
class HeartRateRange:
    min: int
    max: int


@dataclass(frozen=True)
class Segment:
    duration: float         # minutes
    intensity: float        # 0-100, percent of effort ceiling
    zone: str               # key into zones.TRAINING_ZONES
    description: str = ""
    distance: Optional[float] = None
    pace_target: Optional[PaceRange] = None
    heart_rate_target: Optional[HeartRateRange] = None
    effort_based: bool = False
    perceived_effort: Optional[int] = None

    @property
    def bucket(self) -> str:
        return intensity_bucket(self.intensity)


@dataclass(frozen=True)
class Workout:
    type: str
    primary_zone: str
    segments: list[Segment]
    adaptation_target: str = ""
    estimated_tss: float = 0
    recovery_time: float = 0    # hours
    name: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.segments)


@dataclass(frozen=True)
class TargetMetrics:
    duration: float
    tss: float = 0
    load: float = 0
    intensity: float = 0
    distance: Optional[float] = None


@dataclass(frozen=True)
class PlannedWorkout:
    id: str
    date: date
    type: str
    name: str
    workout: Workout
    target_metrics: TargetMetrics
    description: str = ""


@dataclass(frozen=True)
class Microcycle:
    week_number: int
    workouts: list[PlannedWorkout]
    pattern: str = ""
    volume_modifier: float = 1.0
    intensity_modifier: float = 1.0
    total_load: float = 0
    total_distance: float = 0
    recovery_ratio: float = 0
    emphasis: str = ""
    key_focus: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class IntensityDistribution:
    easy: float
    moderate: float
    hard: float

    @property
    def total(self) -> float:
        return self.easy + self.moderate + self.hard

    def as_dict(self) -> dict[str, float]:
        return {"easy": self.easy, "moderate": self.moderate, "hard": self.hard}


@dataclass(frozen=True)
class Block:
    id: str
    phase: str
    start_date: date
    end_date: date
    weeks: int
    microcycles: list[Microcycle]
    focus_areas: list[str] = field(default_factory=list)
    target_distribution: Optional[IntensityDistribution] = None
    name: str = ""


@dataclass(frozen=True)
class PhaseSummary:
    phase: str
    weeks: int
    intensity_distribution: IntensityDistribution
    focus: list[str] = field(default_factory=list)
    volume_progression: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class PlanSummary:
    total_weeks: int
    total_workouts: int = 0
    total_distance: float = 0
    total_time: float = 0
    peak_weekly_distance: float = 0
    average_weekly_distance: float = 0
    key_workouts: int = 0
    recovery_days: int = 0
    phases: list[PhaseSummary] = field(default_factory=list)


@dataclass(frozen=True)
class PlanConfig:
    name: str
    goal: str
    start_date: date
    methodology: str = "daniels"
    target_date: Optional[date] = None
    end_date: Optional[date] = None
    race_distance: Optional[str] = None     # "5k", "10k", "half_marathon", "marathon"
    vdot: Optional[float] = None
    lactate_threshold_pace: Optional[float] = None  # min/km
    weekly_mileage: float = 0
    longest_recent_run: float = 0


@dataclass(frozen=True)
class Plan:
    config: PlanConfig
    blocks: list[Block]
    workouts: list[PlannedWorkout]
    summary: PlanSummary
    metadata: dict[str, Any] = field(default_factory=dict)


def intensity_bucket(intensity: float) -> str:
    if intensity <= EASY_CEILING:
        return "easy"
    if intensity <= MODERATE_CEILING:
        return "moderate"
    return "hard"


def with_segments(workout: Workout, segments: list[Segment], **changes: Any) -> Workout:
    return replace(workout, segments=list(segments), **changes)


def with_workout(planned: PlannedWorkout, workout: Workout, **changes: Any) -> PlannedWorkout:
    """Swap the embedded workout, keeping the planned type in step with it."""
    return replace(planned, workout=workout, type=workout.type, **changes)


def with_metadata(plan: Plan, **entries: Any) -> Plan:
    merged = dict(plan.metadata)
    merged.update(entries)
    return replace(plan, metadata=merged)


def iter_block_workouts(plan: Plan):
    """Yield ``(block, microcycle, planned_workout)`` for every scheduled workout."""
    for block in plan.blocks:
        for micro in block.microcycles:
            for planned in micro.workouts:
                yield block, micro, planned


def replace_workouts(plan: Plan, updated: Iterable[PlannedWorkout]) -> Plan:
    """Swap in updated workouts by id, in both the flat list and the blocks."""
    by_id = {w.id: w for w in updated}
    blocks = [
        replace(block, microcycles=[
            replace(micro, workouts=[by_id.get(w.id, w) for w in micro.workouts])
            for micro in block.microcycles
        ])
        for block in plan.blocks
    ]
    return replace(plan, blocks=blocks, workouts=[by_id.get(w.id, w) for w in plan.workouts])


def map_scheduled(
    plan: Plan,
    fn: Callable[[Block, int, Microcycle, PlannedWorkout], PlannedWorkout],
) -> Plan:
    """Rewrite every block workout with ``fn(block, week_index, micro, planned)``.

    ``week_index`` is zero-based within the block.  Changes are mirrored
    into the flat workout list.
    """
    updated: list[PlannedWorkout] = []
    for block in plan.blocks:
        for index, micro in enumerate(block.microcycles):
            for planned in micro.workouts:
                updated.append(fn(block, index, micro, planned))
    return replace_workouts(plan, updated)


def phase_for_date(plan: Plan, day: date) -> Optional[str]:
    for block in plan.blocks:
        if block.start_date <= day <= block.end_date:
            return block.phase
    return None
