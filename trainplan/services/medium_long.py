"""Medium-long runs and quality long runs for the threshold methodology.

A medium-long run replaces a midweek easy run in build and peak blocks:
85-100 minutes, either purely aerobic or carrying tempo or marathon-pace
work.  Every third week of those blocks the long run carries a
marathon-pace segment as well.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from trainplan.services.plan_model import PlannedWorkout, Segment, Workout, with_segments, with_workout

MEDIUM_LONG_WEEKDAY = 2     # Wednesday


@dataclass(frozen=True)
class MediumLongPattern:
    key: str
    name: str
    description: str
    segments: tuple[Segment, ...]
    adaptation_target: str
    estimated_tss: float
    recovery_time: float

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.segments)


def _easy(duration: float, description: str) -> Segment:
    return Segment(duration, 68, "EASY", description)


PATTERNS: dict[str, MediumLongPattern] = {
    "aerobic": MediumLongPattern(
        key="aerobic",
        name="Aerobic Medium-Long Run",
        description="12-14 mile steady aerobic run building endurance base",
        segments=(_easy(85, "Steady aerobic effort, conversational throughout"),),
        adaptation_target="Aerobic capacity, mitochondrial density, fat oxidation",
        estimated_tss=75,
        recovery_time=18,
    ),
    "tempo": MediumLongPattern(
        key="tempo",
        name="Medium-Long Run with Tempo",
        description="14-15 mile run with 4-6 mile tempo segment",
        segments=(
            _easy(25, "Easy warm-up, prepare for tempo effort"),
            Segment(30, 84, "TEMPO", "Lactate threshold pace, controlled discomfort"),
            _easy(40, "Easy cool-down, maintain form despite fatigue"),
        ),
        adaptation_target="Lactate threshold, marathon-specific endurance",
        estimated_tss=105,
        recovery_time=24,
    ),
    "marathon_pace": MediumLongPattern(
        key="marathon_pace",
        name="Medium-Long Run with Marathon Pace",
        description="13-15 mile run with marathon pace segments for race simulation",
        segments=(
            _easy(20, "Easy warm-up"),
            Segment(12, 82, "STEADY", "Marathon race pace - practice goal pace"),
            _easy(10, "Easy recovery"),
            Segment(15, 82, "STEADY", "Second marathon pace segment"),
            _easy(33, "Easy finish, practice running easy when tired"),
        ),
        adaptation_target="Marathon pace practice, pacing discipline, fatigue resistance",
        estimated_tss=95,
        recovery_time=20,
    ),
    "progressive": MediumLongPattern(
        key="progressive",
        name="Progressive Medium-Long Run",
        description="13-16 mile progressive run finishing at marathon pace or faster",
        segments=(
            _easy(35, "Easy start, very comfortable"),
            Segment(30, 76, "STEADY", "Moderate progression, steady effort"),
            Segment(20, 82, "STEADY", "Marathon pace progression"),
            Segment(15, 84, "TEMPO", "Strong finish at lactate threshold pace"),
        ),
        adaptation_target="Progressive fatigue resistance, mental toughness, pace judgment",
        estimated_tss=110,
        recovery_time=26,
    ),
    "race_specific": MediumLongPattern(
        key="race_specific",
        name="Race-Specific Medium-Long Run",
        description="12-14 mile run with race pace segments and surges",
        segments=(
            _easy(20, "Easy warm-up"),
            Segment(8, 82, "STEADY", "Marathon pace segment"),
            _easy(5, "Easy recovery"),
            Segment(3, 87, "THRESHOLD", "Race surge simulation"),
            _easy(7, "Recovery from surge"),
            Segment(12, 82, "STEADY", "Final marathon pace segment"),
            _easy(30, "Easy finish"),
        ),
        adaptation_target="Race simulation, surge response, competitive fitness",
        estimated_tss=100,
        recovery_time=22,
    ),
}

_BUILD_ROTATION = ("tempo", "marathon_pace", "progressive")


class MediumLongRunGenerator:
    def select_pattern(self, phase: str, week_number: int) -> MediumLongPattern:
        if phase == "build":
            return PATTERNS[_BUILD_ROTATION[week_number % len(_BUILD_ROTATION)]]
        if phase == "peak":
            return PATTERNS["race_specific" if week_number % 2 == 0 else "tempo"]
        return PATTERNS["aerobic"]

    def scale(self, pattern: MediumLongPattern, week_number: int, phase: str) -> MediumLongPattern:
        """Build blocks grow volume and intensity week on week; peak holds them high."""
        duration_scale, intensity_scale = 1.0, 1.0
        if phase == "build":
            duration_scale = 0.9 + week_number * 0.025
            intensity_scale = 0.95 + week_number * 0.0125
        elif phase == "peak":
            duration_scale, intensity_scale = 1.1, 1.05

        segments = tuple(
            replace(
                seg,
                duration=round(seg.duration * duration_scale),
                intensity=min(95, round(seg.intensity * intensity_scale)),
            )
            for seg in pattern.segments
        )
        return replace(
            pattern,
            segments=segments,
            estimated_tss=round(pattern.estimated_tss * duration_scale * intensity_scale),
            recovery_time=round(pattern.recovery_time * duration_scale),
        )

    def generate(self, phase: str, week_number: int = 1) -> Workout:
        pattern = self.scale(self.select_pattern(phase, week_number), week_number, phase)
        return Workout(
            type="long_run",
            primary_zone=pattern.segments[0].zone,
            segments=list(pattern.segments),
            adaptation_target=pattern.adaptation_target,
            estimated_tss=pattern.estimated_tss,
            recovery_time=pattern.recovery_time,
            name=pattern.name,
            metadata={"medium_long": True, "pattern": pattern.key, "description": pattern.description},
        )

    def should_be_medium_long(self, planned: PlannedWorkout, phase: str) -> bool:
        """Midweek easy runs in build and peak blocks."""
        return (
            planned.workout.type == "easy"
            and planned.date.weekday() == MEDIUM_LONG_WEEKDAY
            and phase in ("build", "peak")
        )

    def convert(self, planned: PlannedWorkout, phase: str, week_number: int = 1) -> PlannedWorkout:
        workout = self.generate(phase, week_number)
        return with_workout(
            planned, workout, name=workout.name, description=workout.metadata["description"]
        )

    def should_add_quality(self, phase: str, week_index: int) -> bool:
        return phase in ("build", "peak") and week_index % 3 == 0

    def add_quality(self, planned: PlannedWorkout) -> PlannedWorkout:
        """Long run with a marathon-pace block in the middle 30%."""
        workout = planned.workout
        total = workout.total_duration
        segments = [
            Segment(round(total * 0.4, 1), 65, "EASY", "Easy pace warm-up"),
            Segment(round(total * 0.3, 1), 84, "TEMPO", "Marathon pace segment"),
            Segment(round(total * 0.3, 1), 65, "EASY", "Easy pace cool-down"),
        ]
        quality = with_segments(
            workout,
            segments,
            adaptation_target="Marathon-specific endurance with pace practice",
            estimated_tss=round(workout.estimated_tss * 1.2),
        )
        return with_workout(
            planned, quality,
            name="Long Run with Quality",
            description="Long run with marathon pace segment",
        )
