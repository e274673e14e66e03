"""Pace calculator for the fitness-score and threshold methodologies.

VDOT is a measure of running ability derived from race performances.  This
module maps a VDOT score to the five Daniels training paces (E, M, T, I, R)
as ``PaceRange`` bands in minutes per kilometre, and derives lactate
threshold velocity/pace from the same score.

Reference: Daniels' Running Formula, 3rd Edition (2013).
Pace tables are simplified approximations of the published tables.
"""

from __future__ import annotations

from dataclasses import dataclass

from trainplan.errors import FoundationValueError
from trainplan.services.plan_model import PaceRange

# Daniels pace table: VDOT -> (E, M, T, I, R) in sec/km
_PACE_TABLE: dict[int, tuple[int, int, int, int, int]] = {
    30: (447, 404, 379, 351, 327),
    31: (438, 396, 372, 344, 321),
    32: (429, 388, 364, 337, 314),
    33: (421, 381, 357, 331, 308),
    34: (413, 374, 350, 324, 302),
    35: (405, 367, 344, 318, 296),
    36: (398, 360, 337, 312, 291),
    37: (390, 354, 331, 307, 286),
    38: (383, 347, 325, 301, 280),
    39: (377, 341, 320, 296, 275),
    40: (370, 335, 314, 291, 270),
    41: (364, 330, 309, 286, 266),
    42: (358, 324, 304, 281, 261),
    43: (352, 319, 299, 277, 257),
    44: (346, 314, 294, 272, 253),
    45: (341, 309, 289, 268, 249),
    46: (336, 304, 285, 264, 245),
    47: (330, 300, 281, 260, 241),
    48: (326, 295, 277, 256, 237),
    49: (321, 291, 273, 252, 234),
    50: (316, 287, 269, 248, 230),
    51: (312, 283, 265, 245, 227),
    52: (307, 279, 261, 241, 224),
    53: (303, 275, 258, 238, 221),
    54: (299, 271, 254, 235, 218),
    55: (295, 268, 251, 232, 215),
    56: (291, 264, 248, 229, 212),
    57: (287, 261, 245, 226, 210),
    58: (284, 258, 242, 223, 207),
    59: (280, 255, 239, 220, 205),
    60: (277, 252, 236, 218, 202),
    61: (274, 249, 233, 215, 200),
    62: (270, 246, 231, 213, 198),
    63: (267, 243, 228, 210, 195),
    64: (264, 241, 226, 208, 193),
    65: (261, 238, 223, 206, 191),
    66: (258, 235, 221, 204, 189),
    67: (256, 233, 219, 201, 187),
    68: (253, 231, 216, 199, 185),
    69: (250, 228, 214, 197, 183),
    70: (248, 226, 212, 195, 181),
    71: (245, 224, 210, 193, 179),
    72: (243, 222, 208, 191, 178),
    73: (241, 220, 206, 190, 176),
    74: (238, 218, 204, 188, 174),
    75: (236, 216, 202, 186, 173),
    76: (234, 214, 200, 184, 171),
    77: (232, 212, 198, 183, 170),
    78: (230, 210, 196, 181, 168),
    79: (228, 208, 195, 179, 167),
    80: (226, 206, 193, 178, 165),
    81: (224, 205, 191, 176, 164),
    82: (222, 203, 190, 175, 162),
    83: (220, 201, 188, 173, 161),
    84: (218, 200, 187, 172, 160),
    85: (217, 198, 185, 170, 158),
}

VDOT_MIN = min(_PACE_TABLE)
VDOT_MAX = max(_PACE_TABLE)

LT_PACE_MIN = 2.5   # min/km
LT_PACE_MAX = 9.0

# Band half-widths as a fraction of the centre pace
_BAND = {"easy": 0.03, "marathon": 0.03, "threshold": 0.02, "interval": 0.02, "repetition": 0.02}


@dataclass(frozen=True)
class TrainingPaces:
    """Five Daniels training paces as min/km bands."""
    vdot: float
    easy: PaceRange         # E pace: aerobic development
    marathon: PaceRange     # M pace: marathon-specific endurance
    threshold: PaceRange    # T pace: lactate clearance (cruise/tempo)
    interval: PaceRange     # I pace: VO2max stimulus
    repetition: PaceRange   # R pace: speed/economy

    def as_dict(self) -> dict[str, PaceRange]:
        return {
            "easy": self.easy,
            "marathon": self.marathon,
            "threshold": self.threshold,
            "interval": self.interval,
            "repetition": self.repetition,
        }


def validate_vdot(vdot: float) -> float:
    if vdot is None or not VDOT_MIN <= vdot <= VDOT_MAX:
        raise FoundationValueError(f"VDOT must be between {VDOT_MIN} and {VDOT_MAX}, got {vdot}")
    return vdot


def validate_lt_pace(pace: float) -> float:
    if pace is None or not LT_PACE_MIN <= pace <= LT_PACE_MAX:
        raise FoundationValueError(
            f"Lactate threshold pace must be between {LT_PACE_MIN} and {LT_PACE_MAX} min/km, got {pace}"
        )
    return pace


def _table_row(vdot: float) -> tuple[float, ...]:
    """Sec/km row for a VDOT, interpolating linearly between table entries."""
    lo = max(k for k in _PACE_TABLE if k <= vdot)
    hi = min(k for k in _PACE_TABLE if k >= vdot)
    if lo == hi:
        return tuple(float(v) for v in _PACE_TABLE[lo])
    frac = (vdot - lo) / (hi - lo)
    lo_p, hi_p = _PACE_TABLE[lo], _PACE_TABLE[hi]
    return tuple(a + frac * (b - a) for a, b in zip(lo_p, hi_p))


def _band(label: str, sec_per_km: float) -> PaceRange:
    centre = sec_per_km / 60
    margin = centre * _BAND[label]
    return PaceRange(
        min=round(centre - margin, 3),
        max=round(centre + margin, 3),
        target=round(centre, 3),
    )


def calculate_training_paces(vdot: float) -> TrainingPaces:
    """Pace bands for a VDOT in [30, 85]; raises FoundationValueError otherwise."""
    validate_vdot(vdot)
    e, m, t, i, r = _table_row(vdot)
    return TrainingPaces(
        vdot=vdot,
        easy=_band("easy", e),
        marathon=_band("marathon", m),
        threshold=_band("threshold", t),
        interval=_band("interval", i),
        repetition=_band("repetition", r),
    )


def lactate_threshold_velocity(vdot: float) -> float:
    """Lactate threshold velocity in km/h (~88% of VDOT velocity)."""
    validate_vdot(vdot)
    return vdot * 0.88 / 3.5


def lactate_threshold_pace(vdot: float) -> float:
    """LT pace in min/km derived from VDOT."""
    return 60 / lactate_threshold_velocity(vdot)


def format_pace(min_per_km: float) -> str:
    """Format min/km as 'M:SS'."""
    if min_per_km <= 0:
        return "n/a"
    total_seconds = round(min_per_km * 60)
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def format_pace_range(pace: PaceRange) -> str:
    return f"{format_pace(pace.min)}-{format_pace(pace.max)}"
