"""Weekly structure for the threshold methodology.

Each phase has a fixed day-of-week pattern.  On top of it sit the weekly
threshold volume, marathon-pace volume by weeks to race, tune-up races,
and a four-week variation cycle (standard, volume, intensity, recovery).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from trainplan.services.plan_model import Segment, Workout

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

TUNE_UP_WEEKS = (4, 5, 8, 9)


@dataclass(frozen=True)
class DayPlan:
    type: str
    purpose: str
    intensity: int
    threshold_minutes: int = 0
    marathon_pace_minutes: int = 0


@dataclass(frozen=True)
class ThresholdVolume:
    weekly_minutes: float
    progression_rate: float
    max_volume: float


@dataclass(frozen=True)
class RecoveryRequirements:
    hours_after_lt: float
    hours_before_lt: float
    easy_day_intensity: float
    recovery_days: int


@dataclass(frozen=True)
class ThresholdProgression:
    weekly_minutes: int
    sessions: dict[str, int]
    intensity_targets: dict[str, int]
    recovery: RecoveryRequirements


@dataclass(frozen=True)
class TuneUpRace:
    distance: str
    weeks_out: int
    purpose: str
    intensity: int


@dataclass(frozen=True)
class TaperIntegration:
    volume_reduction: float = 0
    intensity_maintenance: float = 1.0
    sharpening: bool = False


@dataclass(frozen=True)
class RaceIntegration:
    marathon_pace_volume: int
    race_simulation_frequency: float
    taper: TaperIntegration
    tune_ups: list[TuneUpRace] = field(default_factory=list)


@dataclass(frozen=True)
class WeeklyVariation:
    name: str
    volume_multiplier: float
    intensity_multiplier: float


@dataclass(frozen=True)
class WeeklyStructure:
    pattern: str
    days: dict[str, DayPlan]
    hard_day_spacing: int          # hours between quality sessions
    recovery_ratio: float
    quality_days: tuple[str, ...]
    threshold_volume: ThresholdVolume
    focus_areas: list[str]
    variation: Optional[WeeklyVariation] = None


def _days(*plans: tuple[str, str, int]) -> dict[str, DayPlan]:
    return {day: DayPlan(*plan) for day, plan in zip(DAYS, plans)}


STRUCTURES: dict[str, WeeklyStructure] = {
    "base": WeeklyStructure(
        pattern="Easy-GA-Easy-LT-Recovery-Long-Recovery",
        days=_days(
            ("easy", "recovery_from_weekend", 65),
            ("general_aerobic", "aerobic_development", 72),
            ("easy", "active_recovery", 65),
            ("lactate_threshold", "lt_development", 85),
            ("recovery", "preparation_for_long", 60),
            ("long_run", "endurance_development", 70),
            ("recovery", "complete_rest_or_easy", 60),
        ),
        hard_day_spacing=48,
        recovery_ratio=0.4,
        quality_days=("tuesday", "thursday", "saturday"),
        threshold_volume=ThresholdVolume(20, 1.15, 45),
        focus_areas=["Aerobic base building", "LT introduction", "Mileage progression"],
    ),
    "build": WeeklyStructure(
        pattern="Easy-LT-MLR-Tempo-Recovery-LongQuality-Easy",
        days=_days(
            ("easy", "recovery_from_weekend", 65),
            ("lactate_threshold", "lt_maintenance", 87),
            ("medium_long", "endurance_with_quality", 75),
            ("tempo", "threshold_development", 84),
            ("recovery", "preparation_for_long", 60),
            ("long_quality", "marathon_simulation", 73),
            ("easy", "active_recovery", 65),
        ),
        hard_day_spacing=48,
        recovery_ratio=0.35,
        quality_days=("tuesday", "wednesday", "thursday", "saturday"),
        threshold_volume=ThresholdVolume(35, 1.05, 50),
        focus_areas=["Threshold progression", "Medium-long runs", "Marathon pace work"],
    ),
    "peak": WeeklyStructure(
        pattern="Easy-VO2-MLR-LT-Recovery-RaceSimulation-Recovery",
        days=_days(
            ("easy", "recovery_from_weekend", 65),
            ("vo2max", "peak_power_development", 95),
            ("medium_long", "race_specific_endurance", 78),
            ("lactate_threshold", "race_pace_preparation", 87),
            ("recovery", "preparation_for_race_simulation", 60),
            ("race_simulation", "competitive_preparation", 82),
            ("recovery", "complete_recovery", 60),
        ),
        hard_day_spacing=48,
        recovery_ratio=0.30,
        quality_days=("tuesday", "wednesday", "thursday", "saturday"),
        threshold_volume=ThresholdVolume(25, 1.0, 30),
        focus_areas=["Race simulation", "Peak power", "Competitive readiness"],
    ),
    "taper": WeeklyStructure(
        pattern="Easy-Tempo-Easy-LT-Recovery-RaceTune-Recovery",
        days=_days(
            ("easy", "gentle_recovery", 65),
            ("tempo", "sharpening", 84),
            ("easy", "maintenance", 65),
            ("lactate_threshold", "race_feel", 87),
            ("recovery", "complete_rest", 55),
            ("race_tune", "race_readiness", 85),
            ("recovery", "pre_race_rest", 55),
        ),
        hard_day_spacing=72,
        recovery_ratio=0.50,
        quality_days=("tuesday", "thursday", "saturday"),
        threshold_volume=ThresholdVolume(15, 0.90, 20),
        focus_areas=["Race sharpening", "Recovery optimization", "Mental preparation"],
    ),
    "recovery": WeeklyStructure(
        pattern="Recovery-Easy-Recovery-Easy-Recovery-Easy-Recovery",
        days=_days(
            ("recovery", "complete_rest", 55),
            ("easy", "gentle_movement", 62),
            ("recovery", "active_recovery", 55),
            ("easy", "gentle_movement", 62),
            ("recovery", "complete_rest", 55),
            ("easy", "optional_easy_run", 62),
            ("recovery", "complete_rest", 55),
        ),
        hard_day_spacing=168,
        recovery_ratio=0.70,
        quality_days=(),
        threshold_volume=ThresholdVolume(0, 1.0, 0),
        focus_areas=["Complete recovery", "Injury prevention", "Adaptation integration"],
    ),
}

# share of weekly threshold minutes per day
_THRESHOLD_SPLIT = {
    "base": {"thursday": 1.0},
    "build": {"tuesday": 0.6, "thursday": 0.4},
    "peak": {"tuesday": 0.5, "thursday": 0.5},
    "taper": {"thursday": 1.0},
    "recovery": {},
}

_THRESHOLD_INTENSITY = {
    "base": {"lactate_threshold": 85, "tempo": 84},
    "build": {"lactate_threshold": 87, "tempo": 84, "medium_long_quality": 75},
    "peak": {"lactate_threshold": 87, "vo2max": 95, "race_pace": 82},
    "taper": {"lactate_threshold": 87, "tempo": 84},
    "recovery": {},
}

# rough weeks to race at the start of each phase
_PHASE_WEEKS_TO_RACE = {"base": 16, "build": 8, "peak": 4, "taper": 2, "recovery": 20}

VARIATIONS = (
    WeeklyVariation("standard", 1.0, 1.0),
    WeeklyVariation("volume_emphasis", 1.15, 0.95),
    WeeklyVariation("intensity_emphasis", 0.90, 1.10),
    WeeklyVariation("recovery", 0.80, 0.90),
)


def base_structure(phase: str) -> WeeklyStructure:
    return STRUCTURES.get(phase, STRUCTURES["base"])


def distribute_threshold_volume(total_minutes: float, phase: str) -> dict[str, int]:
    if not total_minutes:
        return {}
    split = _THRESHOLD_SPLIT.get(phase, _THRESHOLD_SPLIT["base"])
    return {day: round(total_minutes * share) for day, share in split.items()}


def recovery_requirements(weekly_volume: float) -> RecoveryRequirements:
    return RecoveryRequirements(
        hours_after_lt=max(36, weekly_volume * 0.8),
        hours_before_lt=max(24, weekly_volume * 0.6),
        easy_day_intensity=max(60, 70 - weekly_volume * 0.2),
        recovery_days=2 if weekly_volume > 30 else 1,
    )


def threshold_progression(phase: str, week_index: int) -> ThresholdProgression:
    """Weekly threshold minutes: compounding every second week in base and build, held in peak, shrinking in taper."""
    volume = base_structure(phase).threshold_volume
    week = week_index + 1
    minutes = volume.weekly_minutes
    if phase in ("base", "build"):
        minutes = min(volume.weekly_minutes * volume.progression_rate ** (week // 2), volume.max_volume)
    elif phase == "taper":
        minutes = volume.weekly_minutes * 0.85 ** week

    return ThresholdProgression(
        weekly_minutes=round(minutes),
        sessions=distribute_threshold_volume(minutes, phase),
        intensity_targets=dict(_THRESHOLD_INTENSITY.get(phase, _THRESHOLD_INTENSITY["base"])),
        recovery=recovery_requirements(minutes),
    )


def estimate_weeks_to_race(phase: str, week_index: int) -> int:
    return max(1, _PHASE_WEEKS_TO_RACE.get(phase, 8) - week_index)


def marathon_pace_volume(phase: str, weeks_to_race: float) -> int:
    """Weekly marathon-pace minutes."""
    if phase == "build":
        if weeks_to_race > 12:
            return 0
        if weeks_to_race > 8:
            return 10
        if weeks_to_race > 4:
            return 15
        return 20
    if phase == "peak":
        if weeks_to_race > 6:
            return 25
        if weeks_to_race > 2:
            return 30
        return 20
    if phase == "taper":
        return max(5, round(15 - weeks_to_race * 2))
    return 0


def race_simulation_frequency(phase: str, weeks_to_race: float) -> float:
    """Race simulations per week."""
    if phase == "peak" and weeks_to_race <= 8:
        return 2 if weeks_to_race <= 4 else 1
    if phase == "build" and weeks_to_race <= 12:
        return 0.5
    return 0


def taper_integration(phase: str, weeks_to_race: float) -> TaperIntegration:
    if phase != "taper":
        return TaperIntegration()
    return TaperIntegration(
        volume_reduction=min(0.6, 0.15 * (4 - weeks_to_race)),
        intensity_maintenance=1.0,
        sharpening=weeks_to_race <= 2,
    )


def tune_up_schedule(phase: str, weeks_to_race: float) -> list[TuneUpRace]:
    races = []
    if phase == "build" and 8 <= weeks_to_race <= 12:
        races.append(TuneUpRace("10K", int(weeks_to_race), "fitness_assessment", 95))
    if phase == "peak" and 3 <= weeks_to_race <= 6:
        races.append(TuneUpRace("half_marathon", int(weeks_to_race), "race_simulation", 90))
    return races


def race_integration(phase: str, weeks_to_race: float) -> RaceIntegration:
    return RaceIntegration(
        marathon_pace_volume=marathon_pace_volume(phase, weeks_to_race),
        race_simulation_frequency=race_simulation_frequency(phase, weeks_to_race),
        taper=taper_integration(phase, weeks_to_race),
        tune_ups=tune_up_schedule(phase, weeks_to_race),
    )


def weekly_variation(week_index: int) -> WeeklyVariation:
    return VARIATIONS[week_index % len(VARIATIONS)]


def plan_threshold_progression(total_weeks: int) -> list[int]:
    """Weekly threshold minutes across a plan: 20 rising to 60, every fourth week eased back."""
    start, peak = 20, 60
    out = []
    for week in range(total_weeks):
        ratio = week / (total_weeks - 1) if total_weeks > 1 else 0
        gain = (peak - start) * ratio
        if week % 4 == 3:
            gain *= 0.75
        out.append(round(start + gain))
    return out


def is_tune_up_week(weeks_to_goal: int) -> bool:
    return weeks_to_goal in TUNE_UP_WEEKS


def tune_up_race_workout(weeks_to_goal: int) -> Workout:
    """15K eight or nine weeks out, 10K four or five weeks out."""
    distance = "15k" if weeks_to_goal > 6 else "10k"
    return Workout(
        type="race_pace",
        primary_zone="THRESHOLD",
        segments=[
            Segment(15, 65, "EASY", "Pre-race warm-up"),
            Segment(50 if weeks_to_goal > 6 else 35, 92, "THRESHOLD", f"{distance} race effort"),
            Segment(10, 60, "RECOVERY", "Cool-down jog"),
        ],
        adaptation_target="Race practice, pace judgment, mental preparation",
        estimated_tss=110,
        recovery_time=48,
        name=f"{distance} Tune-up Race",
        metadata={"tune_up": True, "weeks_to_goal": weeks_to_goal},
    )


class WeeklyStructureGenerator:
    def generate(self, phase: str, week_index: int, weeks_to_race: Optional[float] = None) -> WeeklyStructure:
        """Phase structure with threshold minutes, marathon-pace minutes and this week's variation filled in."""
        structure = base_structure(phase)
        progression = threshold_progression(phase, week_index)
        if weeks_to_race is None:
            weeks_to_race = estimate_weeks_to_race(phase, week_index)
        race = race_integration(phase, weeks_to_race)

        days = dict(structure.days)
        for day, minutes in progression.sessions.items():
            days[day] = replace(days[day], threshold_minutes=minutes)
        if race.marathon_pace_volume > 0:
            for day in ("wednesday", "saturday"):
                if days[day].type in ("medium_long", "long_quality"):
                    days[day] = replace(
                        days[day], marathon_pace_minutes=round(race.marathon_pace_volume * 0.6)
                    )

        return replace(structure, days=days, variation=weekly_variation(week_index))

    def pattern(self, phase: str, week_index: int) -> str:
        return self.generate(phase, week_index).pattern
