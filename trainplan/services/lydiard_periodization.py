"""Lydiard periodization: phase lengths, block blueprints, weekly microcycles.

The aerobic base (including the hill phase) takes over half the plan.
Every fourth week inside a block is a recovery week at 70% volume.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from trainplan.services.plan_model import IntensityDistribution, Workout, with_segments

NEXT_PHASE = {"base": "build", "build": "peak", "peak": "taper", "taper": "recovery", "recovery": "base"}

WEEKLY_FOCUS = {
    "base": ["Aerobic development", "Running form", "Consistency"],
    "build": ["Lactate threshold", "Tempo endurance", "Mental toughness"],
    "peak": ["Race pace", "Speed coordination", "Race tactics"],
    "taper": ["Recovery", "Race visualization", "Maintain sharpness"],
    "recovery": ["Complete rest", "Regeneration", "Mental refresh"],
}


@dataclass(frozen=True)
class PhaseDurations:
    aerobic_base: int
    hill_phase: int
    anaerobic: int
    coordination: int
    taper: int

    @property
    def total_weeks(self) -> int:
        return self.aerobic_base + self.hill_phase + self.anaerobic + self.coordination + self.taper


@dataclass(frozen=True)
class MicrocyclePlan:
    week_number: int
    phase: str
    emphasis: str
    workout_types: list[str]
    volume_modifier: float
    intensity_modifier: float
    key_focus: list[str]
    recovery_week: bool = False


@dataclass(frozen=True)
class BlockPlan:
    phase: str
    name: str
    description: str
    week_start: int
    week_end: int
    microcycles: list[MicrocyclePlan]
    focus: list[str] = field(default_factory=list)
    key_workouts: list[str] = field(default_factory=list)
    intensity_distribution: Optional[IntensityDistribution] = None

    @property
    def duration(self) -> int:
        return self.week_end - self.week_start + 1


def phase_durations(total_weeks: int, race_distance: Optional[str] = "half_marathon") -> PhaseDurations:
    base = max(8, round(total_weeks * 0.55))
    anaerobic = max(3, round(total_weeks * 0.20))
    coordination = max(2, round(total_weeks * 0.15))
    taper = max(2, min(3, round(total_weeks * 0.10)))

    if race_distance == "marathon":
        base += 2
        coordination = max(2, coordination - 1)
    elif race_distance in ("5k", "10k"):
        anaerobic += 1
        coordination += 1

    hills = max(4, round(base * 0.3))
    return PhaseDurations(
        aerobic_base=base - hills,
        hill_phase=hills,
        anaerobic=anaerobic,
        coordination=coordination,
        taper=taper,
    )


def is_recovery_week(week_in_phase: int) -> bool:
    """``week_in_phase`` is zero-based; every fourth week recovers."""
    return (week_in_phase + 1) % 4 == 0


def week_emphasis(phase: str, week_in_phase: int, phase_weeks: int) -> str:
    progression = week_in_phase / phase_weeks if phase_weeks else 0
    if phase == "base":
        if progression < 0.3:
            return "Volume building"
        if progression < 0.6:
            return "Aerobic development"
        return "Strength building"
    if phase == "build":
        return "Anaerobic introduction" if progression < 0.5 else "Lactate tolerance"
    if phase == "peak":
        return "Speed coordination" if progression < 0.5 else "Race simulation"
    if phase == "taper":
        return "Recovery and sharpening"
    return "Recovery"


def weekly_workout_types(phase: str, week_in_phase: int, recovery_week: bool) -> list[str]:
    if recovery_week:
        return ["easy", "easy", "steady", "easy", "long_run", "easy", "recovery"]
    if phase == "base":
        if week_in_phase < 4:
            return ["easy", "steady", "easy", "steady", "long_run", "easy", "recovery"]
        return ["easy", "hill_repeats", "easy", "steady", "long_run", "hill_repeats", "recovery"]
    if phase == "build":
        return ["easy", "tempo", "easy", "threshold", "long_run", "time_trial", "recovery"]
    if phase == "peak":
        return ["easy", "speed", "easy", "race_pace", "tempo", "vo2max", "recovery"]
    if phase == "taper":
        return ["easy", "race_pace", "easy", "tempo", "easy", "race_pace", "recovery"]
    return ["recovery", "easy", "recovery", "easy", "recovery", "easy", "recovery"]


def intensity_modifier(phase: str, week_in_phase: int, phase_weeks: int) -> float:
    progression = week_in_phase / phase_weeks if phase_weeks else 0
    if phase == "base":
        return 1.0
    if phase == "build":
        return 1.0 + progression * 0.1
    if phase == "peak":
        return 1.1 + progression * 0.05
    if phase == "taper":
        return 1.0 - progression * 0.2
    return 0.8


def microcycles(phase: str, weeks: int, start_week: int) -> list[MicrocyclePlan]:
    out = []
    for week in range(weeks):
        recovery = is_recovery_week(week)
        out.append(MicrocyclePlan(
            week_number=start_week + week,
            phase=phase,
            emphasis=week_emphasis(phase, week, weeks),
            workout_types=weekly_workout_types(phase, week, recovery),
            volume_modifier=0.7 if recovery else round(1.0 + week * 0.05, 3),
            intensity_modifier=round(intensity_modifier(phase, week, weeks), 4),
            key_focus=list(WEEKLY_FOCUS.get(phase, ["General fitness"])),
            recovery_week=recovery,
        ))
    return out


def build_blocks(total_weeks: int, race_distance: Optional[str] = "half_marathon") -> list[BlockPlan]:
    d = phase_durations(total_weeks, race_distance)
    layout = [
        ("base", d.aerobic_base, "Aerobic Base Building",
         "Build maximum aerobic capacity through volume and easy running",
         ["Aerobic capacity", "Volume building", "Easy running", "Long runs"],
         ["long_run", "easy", "steady"], IntensityDistribution(95, 4, 1)),
        ("base", d.hill_phase, "Hill Strength Development",
         "Build leg strength and power through systematic hill training",
         ["Hill strength", "Running economy", "Power development", "Form improvement"],
         ["hill_repeats", "long_run", "easy"], IntensityDistribution(85, 10, 5)),
        ("build", d.anaerobic, "Anaerobic Development",
         "Develop anaerobic capacity and lactate tolerance",
         ["Anaerobic power", "Lactate tolerance", "Tempo running", "Time trials"],
         ["tempo", "threshold", "time_trial", "long_run"], IntensityDistribution(80, 15, 5)),
        ("peak", d.coordination, "Coordination & Sharpening",
         "Develop speed coordination and race-specific fitness",
         ["Speed coordination", "Race pace", "Neuromuscular power", "Final sharpening"],
         ["speed", "race_pace", "vo2max", "fartlek"], IntensityDistribution(75, 15, 10)),
        ("taper", d.taper, "Race Taper",
         "Reduce volume while maintaining fitness for peak performance",
         ["Recovery", "Race preparation", "Maintain fitness", "Mental preparation"],
         ["race_pace", "easy", "tempo"], IntensityDistribution(85, 10, 5)),
    ]

    blocks = []
    week = 1
    for phase, weeks, name, description, focus, key_workouts, dist in layout:
        blocks.append(BlockPlan(
            phase=phase,
            name=name,
            description=description,
            week_start=week,
            week_end=week + weeks - 1,
            microcycles=microcycles(phase, weeks, week),
            focus=focus,
            key_workouts=key_workouts,
            intensity_distribution=dist,
        ))
        week += weeks
    return blocks


def next_phase(phase: str) -> str:
    return NEXT_PHASE.get(phase, "base")


def apply_recovery_emphasis(workout: Workout, phase: str, recovery_week: bool) -> Workout:
    """Recovery weeks and the recovery phase turn easy running into complete rest."""
    if not recovery_week and phase != "recovery":
        return workout
    if workout.type not in ("recovery", "easy"):
        return workout
    segments = [
        replace(
            seg,
            intensity=min(seg.intensity, 60),
            description=f"{seg.description} - Complete recovery focus",
        )
        for seg in workout.segments
    ]
    return with_segments(
        workout,
        segments,
        adaptation_target="Complete physiological and mental recovery",
        estimated_tss=round(workout.estimated_tss * 0.5),
        recovery_time=8,
    )
