"""Generic physiological training zones.

These are the fallback definitions used when a methodology has no explicit
pace or effort mapping for a zone.  Heart-rate bands are % of max HR; pace
bands are % of threshold pace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from trainplan.services.plan_model import PaceRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingZone:
    key: str
    name: str
    rpe: int
    heart_rate_pct: tuple[int, int]
    pace_pct: tuple[int, int]
    description: str
    purpose: str


TRAINING_ZONES: dict[str, TrainingZone] = {
    "RECOVERY": TrainingZone(
        "RECOVERY", "Recovery", 1, (50, 60), (0, 75),
        "Very easy effort, conversational",
        "Active recovery, promote blood flow",
    ),
    "EASY": TrainingZone(
        "EASY", "Easy", 2, (60, 70), (75, 85),
        "Comfortable, conversational pace",
        "Build aerobic base, improve fat oxidation",
    ),
    "STEADY": TrainingZone(
        "STEADY", "Steady", 3, (70, 80), (85, 90),
        "Moderate effort, slightly harder breathing",
        "Aerobic development, mitochondrial density",
    ),
    "TEMPO": TrainingZone(
        "TEMPO", "Tempo", 4, (80, 87), (90, 95),
        "Comfortably hard, controlled discomfort",
        "Improve lactate clearance, mental toughness",
    ),
    "THRESHOLD": TrainingZone(
        "THRESHOLD", "Threshold", 5, (87, 92), (95, 100),
        "Hard effort, sustainable for ~1 hour",
        "Increase lactate threshold, improve efficiency",
    ),
    "VO2_MAX": TrainingZone(
        "VO2_MAX", "VO2 Max", 6, (92, 97), (105, 115),
        "Very hard, heavy breathing",
        "Maximize oxygen uptake, increase power",
    ),
    "NEUROMUSCULAR": TrainingZone(
        "NEUROMUSCULAR", "Neuromuscular", 7, (97, 100), (115, 130),
        "Maximum effort, short duration",
        "Improve speed, power, and running economy",
    ),
}


def zone_for_intensity(intensity: float) -> str:
    """Map an intensity percentage to a zone key."""
    if intensity < 60:
        return "RECOVERY"
    if intensity < 70:
        return "EASY"
    if intensity < 80:
        return "STEADY"
    if intensity < 87:
        return "TEMPO"
    if intensity < 92:
        return "THRESHOLD"
    if intensity < 97:
        return "VO2_MAX"
    return "NEUROMUSCULAR"


def get_zone(key: str) -> TrainingZone:
    zone = TRAINING_ZONES.get(key)
    if zone is None:
        logger.warning("Unknown zone %r, falling back to EASY", key)
        return TRAINING_ZONES["EASY"]
    return zone


def zone_pace_range(key: str, threshold_pace: float) -> PaceRange:
    """Generic pace band for a zone, derived from threshold pace (min/km).

    Pace percentages describe speed relative to threshold, so a higher
    percentage means a faster (smaller) min/km value.
    """
    zone = get_zone(key)
    lo_pct, hi_pct = zone.pace_pct
    fastest = threshold_pace * 100 / hi_pct
    slowest = threshold_pace * 100 / lo_pct if lo_pct > 0 else threshold_pace * 100 / 65
    return PaceRange(min=round(fastest, 3), max=round(slowest, 3))


def personalized_heart_rates(key: str, max_hr: int) -> tuple[int, int]:
    lo, hi = get_zone(key).heart_rate_pct
    return round(lo / 100 * max_hr), round(hi / 100 * max_hr)
