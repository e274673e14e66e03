"""Methodology constants: profiles, workout emphasis, phase intensity targets.

The phase-target table must cover every phase for every methodology; it is
checked when this module is imported so a gap fails loudly at startup
rather than silently defaulting at plan time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from trainplan.errors import ConfigurationError
from trainplan.services.plan_model import PHASES, IntensityDistribution

METHODOLOGIES: tuple[str, ...] = ("daniels", "lydiard", "pfitzinger", "hudson", "custom")


@dataclass(frozen=True)
class MethodologyProfile:
    name: str
    intensity_distribution: IntensityDistribution
    recovery_emphasis: float
    workout_priorities: list[str]
    key_principles: list[str] = field(default_factory=list)


METHODOLOGY_PROFILES: dict[str, MethodologyProfile] = {
    "daniels": MethodologyProfile(
        name="Jack Daniels",
        intensity_distribution=IntensityDistribution(80, 10, 10),
        recovery_emphasis=0.7,
        workout_priorities=["tempo", "vo2max", "threshold", "easy", "long_run"],
        key_principles=[
            "Training paces derived from VDOT",
            "80/20 easy to hard balance",
            "Every workout has a physiological purpose",
        ],
    ),
    "lydiard": MethodologyProfile(
        name="Arthur Lydiard",
        intensity_distribution=IntensityDistribution(85, 10, 5),
        recovery_emphasis=0.9,
        workout_priorities=["easy", "long_run", "hill_repeats", "tempo", "speed"],
        key_principles=[
            "Extended aerobic base before any anaerobic work",
            "Hill phase bridges strength and speed",
            "Time on feet over pace",
        ],
    ),
    "pfitzinger": MethodologyProfile(
        name="Pete Pfitzinger",
        intensity_distribution=IntensityDistribution(75, 15, 10),
        recovery_emphasis=0.8,
        workout_priorities=["threshold", "long_run", "tempo", "vo2max", "easy"],
        key_principles=[
            "Lactate threshold is the key marathon determinant",
            "Medium-long runs build endurance midweek",
            "Tune-up races sharpen race fitness",
        ],
    ),
    "hudson": MethodologyProfile(
        name="Brad Hudson",
        intensity_distribution=IntensityDistribution(70, 20, 10),
        recovery_emphasis=0.75,
        workout_priorities=["tempo", "fartlek", "long_run", "vo2max", "easy"],
        key_principles=[
            "Adaptive training based on response",
            "Race-specific fitness throughout",
        ],
    ),
    "custom": MethodologyProfile(
        name="Custom",
        intensity_distribution=IntensityDistribution(75, 15, 10),
        recovery_emphasis=0.8,
        workout_priorities=["easy", "tempo", "long_run", "vo2max", "threshold"],
    ),
}

WORKOUT_EMPHASIS: dict[str, dict[str, float]] = {
    "daniels": {
        "recovery": 1.0, "easy": 1.2, "tempo": 1.5, "threshold": 1.4,
        "vo2max": 1.3, "speed": 1.1, "long_run": 1.2,
    },
    "lydiard": {
        "recovery": 1.0, "easy": 1.5, "tempo": 1.1, "threshold": 1.0,
        "vo2max": 0.8, "speed": 0.9, "long_run": 1.4, "hill_repeats": 1.3,
    },
    "pfitzinger": {
        "recovery": 1.0, "easy": 1.3, "tempo": 1.2, "threshold": 1.5,
        "vo2max": 1.1, "speed": 1.0, "long_run": 1.3,
    },
    "hudson": {
        "recovery": 1.0, "easy": 1.2, "tempo": 1.4, "threshold": 1.2,
        "vo2max": 1.1, "speed": 1.0, "long_run": 1.2, "fartlek": 1.3,
    },
    "custom": {
        "recovery": 1.0, "easy": 1.2, "tempo": 1.2, "threshold": 1.2,
        "vo2max": 1.1, "speed": 1.0, "long_run": 1.2,
    },
}

INTENSITY_MODELS: dict[str, IntensityDistribution] = {
    "polarized": IntensityDistribution(80, 5, 15),
    "pyramidal": IntensityDistribution(70, 20, 10),
    "threshold": IntensityDistribution(60, 30, 10),
}

_D = IntensityDistribution

PHASE_TARGETS: dict[str, dict[str, IntensityDistribution]] = {
    "daniels": {
        "base": _D(85, 5, 10),
        "build": _D(80, 5, 15),
        "peak": _D(75, 10, 15),
        "taper": _D(85, 5, 10),
        "recovery": _D(95, 5, 0),
    },
    "lydiard": {
        "base": _D(95, 4, 1),
        "build": _D(90, 8, 2),
        "peak": _D(85, 10, 5),
        "taper": _D(92, 5, 3),
        "recovery": _D(98, 2, 0),
    },
    "pfitzinger": {
        "base": _D(80, 15, 5),
        "build": _D(75, 15, 10),
        "peak": _D(72, 15, 13),
        "taper": _D(80, 12, 8),
        "recovery": _D(95, 5, 0),
    },
    "hudson": {
        "base": _D(80, 15, 5),
        "build": _D(70, 20, 10),
        "peak": _D(68, 20, 12),
        "taper": _D(78, 15, 7),
        "recovery": _D(95, 5, 0),
    },
    "custom": {
        "base": _D(80, 12, 8),
        "build": _D(75, 15, 10),
        "peak": _D(72, 15, 13),
        "taper": _D(80, 12, 8),
        "recovery": _D(95, 5, 0),
    },
}


def validate_phase_targets(table: dict[str, dict[str, IntensityDistribution]]) -> None:
    """Raise ConfigurationError unless every methodology row covers every phase and sums to 100."""
    for methodology in METHODOLOGIES:
        row = table.get(methodology)
        if row is None:
            raise ConfigurationError(f"Phase targets missing for methodology '{methodology}'")
        for phase in PHASES:
            dist = row.get(phase)
            if dist is None:
                raise ConfigurationError(f"Phase target missing: {methodology}/{phase}")
            if abs(dist.total - 100) > 1e-9:
                raise ConfigurationError(
                    f"Phase target {methodology}/{phase} sums to {dist.total}, expected 100"
                )


def emphasis_for(methodology: str, workout_type: str) -> float:
    return WORKOUT_EMPHASIS.get(methodology, {}).get(workout_type, 1.0)


validate_phase_targets(PHASE_TARGETS)
