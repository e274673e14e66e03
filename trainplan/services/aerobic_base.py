"""Aerobic-base enforcement for the Lydiard methodology.

Lydiard plans are judged on whole workouts rather than segments: a
workout's planned duration counts toward the bucket of its planned
intensity.  At least 85% of planned time must be easy and no more than 15%
hard.  A plan below the easy floor has its hardest workouts converted to
easy aerobic running until the deficit is covered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from trainplan.services.plan_model import (
    EASY_CEILING,
    IntensityDistribution,
    PlannedWorkout,
    Workout,
    intensity_bucket,
    with_segments,
    with_workout,
)

logger = logging.getLogger(__name__)

EASY_TARGET = 85
MAX_HARD = 15
LONG_RUN_CEILING = 22

DEFAULT_DURATION = 60
DEFAULT_INTENSITY = 70


@dataclass(frozen=True)
class AerobicBaseReport:
    distribution: IntensityDistribution
    is_compliant: bool
    violations: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    methodology: str = "lydiard"


def _duration(planned: PlannedWorkout) -> float:
    return planned.target_metrics.duration or DEFAULT_DURATION


def _intensity(planned: PlannedWorkout) -> float:
    return planned.target_metrics.intensity or DEFAULT_INTENSITY


def effort_description(intensity: float) -> str:
    if intensity <= 70:
        return "Very easy effort - conversational, nose breathing only"
    if intensity <= 75:
        return "Easy effort - comfortable, can talk in full sentences"
    if intensity <= 80:
        return "Steady effort - comfortably hard, some breathing effort"
    if intensity <= 87:
        return "Moderate effort - controlled discomfort, rhythmic breathing"
    return "Hard effort - significant breathing, focused effort"


class AerobicBaseCalculator:
    def __init__(self, easy_target: float = EASY_TARGET, max_hard: float = MAX_HARD) -> None:
        self.easy_target = easy_target
        self.max_hard = max_hard

    def distribution(self, workouts: list[PlannedWorkout]) -> IntensityDistribution:
        """Workout-level split by planned duration; empty input counts as all easy."""
        if not workouts:
            return IntensityDistribution(100, 0, 0)
        totals = {"easy": 0.0, "moderate": 0.0, "hard": 0.0}
        for planned in workouts:
            totals[intensity_bucket(_intensity(planned))] += _duration(planned)
        total = sum(totals.values())
        easy = round(totals["easy"] / total * 100, 1)
        moderate = round(totals["moderate"] / total * 100, 1)
        return IntensityDistribution(easy, moderate, round(100 - easy - moderate, 1))

    def enforce_aerobic_base(self, workouts: list[PlannedWorkout]) -> list[PlannedWorkout]:
        """Convert the hardest workouts to easy running until the easy floor is met."""
        if not workouts:
            return list(workouts)
        current = self.distribution(workouts)
        if current.easy >= self.easy_target:
            return list(workouts)

        total = sum(_duration(p) for p in workouts)
        remaining = (self.easy_target - current.easy) / 100 * total

        order = sorted(range(len(workouts)), key=lambda i: _intensity(workouts[i]), reverse=True)
        converted = list(workouts)
        for index in order:
            if remaining <= 0:
                break
            planned = workouts[index]
            if _intensity(planned) <= EASY_CEILING:
                continue
            converted[index] = replace(
                with_workout(planned, self.convert_to_easy(planned.workout)),
                target_metrics=replace(
                    planned.target_metrics,
                    intensity=DEFAULT_INTENSITY,
                    tss=round((planned.target_metrics.tss or 50) * 0.7),
                ),
            )
            remaining = max(0.0, remaining - _duration(planned))

        logger.debug(
            "Aerobic base conversion: easy %.1f%% -> %.1f%%",
            current.easy, self.distribution(converted).easy,
        )
        return converted

    def convert_to_easy(self, workout: Workout) -> Workout:
        segments = [
            replace(
                seg,
                intensity=70,
                description=f"Easy aerobic - {seg.description} (converted for aerobic base)",
            )
            for seg in workout.segments
        ]
        return with_segments(
            workout,
            segments,
            type="easy",
            adaptation_target="Aerobic base development, mitochondrial adaptation",
            estimated_tss=round(workout.estimated_tss * 0.7),
        )

    def convert_to_time_based(self, workout: Workout) -> Workout:
        """Replace pace language with effort language."""
        segments = [
            replace(seg, description=f"{seg.description} at {effort_description(seg.intensity)}")
            for seg in workout.segments
        ]
        return with_segments(
            workout,
            segments,
            adaptation_target="Aerobic development through effort-based training",
        )

    def long_run_distance(self, week: int, total_weeks: int, base_distance: float = 10) -> float:
        """Linear build toward the ceiling over 70% of the weeks, holding every third week."""
        if total_weeks <= 0:
            return min(base_distance, LONG_RUN_CEILING)
        rate = (LONG_RUN_CEILING - base_distance) / (total_weeks * 0.7)
        distance = base_distance + week * rate
        if week % 3 == 0 and week > 3:
            distance = max(base_distance, distance - rate)
        return min(distance, LONG_RUN_CEILING)

    def validate_aerobic_base(self, workouts: list[PlannedWorkout]) -> AerobicBaseReport:
        dist = self.distribution(workouts)
        compliant = dist.easy >= self.easy_target
        violations: list[str] = []
        recommendations: list[str] = []

        if not compliant:
            violations.append(f"Easy running: {dist.easy}% (target: {self.easy_target}%+)")
            recommendations.append(f"Increase easy running by {round(self.easy_target - dist.easy, 1)}%")
            recommendations.append("Convert some tempo/threshold workouts to easy aerobic runs")
            recommendations.append("Focus on time on feet rather than pace")
        if dist.hard > self.max_hard:
            violations.append(f"Hard running: {dist.hard}% (maximum: {self.max_hard}%)")
            recommendations.append("Reduce intensity of hard workouts")
            recommendations.append("Replace some intervals with steady state runs")

        return AerobicBaseReport(
            distribution=dist,
            is_compliant=compliant,
            violations=violations,
            recommendations=recommendations,
        )
