"""Intensity distribution validation and auto-adjustment.

Methodology-agnostic: operates on any list of planned workouts plus a
target easy/moderate/hard split.

- measure: duration-weighted split of segments into easy (<=75),
  moderate (76-85) and hard (>85)
- detect: ``insufficient_easy`` / ``excessive_hard`` outside a tolerance
- correct: down-convert moderate or cap hard segments on eligible workouts,
  and optionally upgrade long easy runs when a plan is too easy
- enforce: bounded validate/correct/revalidate loop that stops as soon
  as the violation count stops falling

Violations are data, never exceptions: a plan that cannot be fully
corrected is returned with its remaining violations.
"""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Mapping, Optional, Union

from trainplan.config import Settings, get_settings
from trainplan.services.methodology_tables import INTENSITY_MODELS
from trainplan.services.plan_model import (
    EASY_CEILING,
    MODERATE_CEILING,
    Block,
    IntensityDistribution,
    Plan,
    PlannedWorkout,
    Segment,
    Workout,
    replace_workouts,
    with_segments,
    with_workout,
)

logger = logging.getLogger(__name__)

DEFAULT_DISTRIBUTION = IntensityDistribution(80, 5, 15)

SEVERITY_ORDER = {"low": 1, "medium": 2, "high": 3, "critical": 4}
SEVERITY_PENALTY = {"low": 2, "medium": 5, "high": 10, "critical": 20}

_PROTECTED_TYPES = ("race_pace", "time_trial")
_LOW_STRESS_TYPES = ("easy", "steady", "recovery")

PhaseTargets = Union[Mapping[str, IntensityDistribution], Callable[[str], IntensityDistribution]]


@dataclass(frozen=True)
class Violation:
    kind: str               # "insufficient_easy" | "excessive_hard"
    phase: str              # phase key or "overall"
    actual: float
    target: float
    difference: float
    severity: str


@dataclass(frozen=True)
class EnforcementSettings:
    tolerance: float = 5.0
    max_iterations: int = 5
    max_upgrades_per_week: int = 2
    upgrade_every_nth: int = 1
    upgrade_min_duration: float = 45.0
    allow_upgrades: bool = True
    upgrade_seed: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EnforcementSettings":
        return cls(
            tolerance=settings.distribution_tolerance,
            max_iterations=settings.max_adjustment_iterations,
            max_upgrades_per_week=settings.max_upgrades_per_week,
            upgrade_every_nth=settings.upgrade_every_nth,
            upgrade_min_duration=settings.upgrade_min_duration,
            upgrade_seed=settings.upgrade_seed,
        )


@dataclass(frozen=True)
class EnforcementResult:
    workouts: list[PlannedWorkout]
    violations: list[Violation]
    history: list[int]          # violation count before the loop, then after each accepted pass
    iterations: int
    distribution: IntensityDistribution
    upgraded: int = 0

    @property
    def converged(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class PlanValidation:
    is_valid: bool
    violations: list[Violation]
    overall: IntensityDistribution
    phases: dict[str, IntensityDistribution]


@dataclass(frozen=True)
class DistributionReport:
    overall: IntensityDistribution
    target: IntensityDistribution
    phases: dict[str, IntensityDistribution]
    violations: list[Violation]
    recommendations: list[str]
    compliance: int
    methodology: str = ""


# ── Measurement ──────────────────────────────────────────────────────────


def _workout_of(item: Union[PlannedWorkout, Workout]) -> Workout:
    return item.workout if isinstance(item, PlannedWorkout) else item


def measure_distribution(workouts: Iterable[Union[PlannedWorkout, Workout]]) -> IntensityDistribution:
    """Duration-weighted easy/moderate/hard percentages.

    Values are rounded to one decimal and the hard bucket takes the rounding
    remainder, so the three always sum to exactly 100.  Zero total duration
    returns the polarized default 80/5/15.
    """
    totals = {"easy": 0.0, "moderate": 0.0, "hard": 0.0}
    for item in workouts:
        for seg in _workout_of(item).segments:
            totals[seg.bucket] += seg.duration

    total = sum(totals.values())
    if total <= 0:
        return DEFAULT_DISTRIBUTION

    easy = round(totals["easy"] / total * 100, 1)
    moderate = round(totals["moderate"] / total * 100, 1)
    hard = round(100 - easy - moderate, 1)
    return IntensityDistribution(easy, moderate, hard)


# ── Detection ────────────────────────────────────────────────────────────


def classify_severity(difference: float) -> str:
    d = abs(difference)
    if d <= 5:
        return "low"
    if d <= 10:
        return "medium"
    if d <= 15:
        return "high"
    return "critical"


def detect_violations(
    actual: IntensityDistribution,
    target: IntensityDistribution,
    phase: str = "overall",
    tolerance: float = 5.0,
) -> list[Violation]:
    """Violations sorted most severe first.

    Comparisons are strict: a deviation of exactly ``tolerance`` is compliant.
    """
    violations: list[Violation] = []
    if actual.easy < target.easy - tolerance:
        diff = round(target.easy - actual.easy, 1)
        violations.append(Violation(
            "insufficient_easy", phase, actual.easy, target.easy, diff, classify_severity(diff)
        ))
    if actual.hard > target.hard + tolerance:
        diff = round(actual.hard - target.hard, 1)
        violations.append(Violation(
            "excessive_hard", phase, actual.hard, target.hard, diff, classify_severity(diff)
        ))
    return sort_by_severity(violations)


def sort_by_severity(violations: Iterable[Violation]) -> list[Violation]:
    return sorted(violations, key=lambda v: SEVERITY_ORDER[v.severity], reverse=True)


def is_too_easy(actual: IntensityDistribution, target: IntensityDistribution, tolerance: float = 5.0) -> bool:
    return actual.easy > target.easy + tolerance


# ── Correction ───────────────────────────────────────────────────────────


def should_adjust(workout: Workout, severity: str, low_stress_only: bool = True) -> bool:
    """Race efforts move only for critical violations; below critical, only low-stress runs do."""
    if workout.type in _PROTECTED_TYPES:
        return severity == "critical"
    if severity == "critical" or not low_stress_only:
        return True
    return workout.type in _LOW_STRESS_TYPES


def _compliance_description(description: str, prefix: str) -> str:
    return f"{prefix}{description.lower()} (80/20 compliance)"


def convert_to_easier(planned: PlannedWorkout, violation: Violation) -> PlannedWorkout:
    """Down-convert moderate segments (76-85) to easy running at 70%."""
    workout = planned.workout
    if not should_adjust(workout, violation.severity):
        return planned

    changed = False
    segments: list[Segment] = []
    for seg in workout.segments:
        if EASY_CEILING < seg.intensity <= MODERATE_CEILING:
            segments.append(replace(
                seg,
                intensity=70,
                zone="EASY",
                description=_compliance_description(seg.description, "Easy "),
            ))
            changed = True
        else:
            segments.append(seg)
    if not changed:
        return planned

    updated = with_segments(
        workout,
        segments,
        type="easy",
        adaptation_target="Aerobic base building, 80/20 compliance",
    )
    return with_workout(planned, updated)


def reduce_intensity(planned: PlannedWorkout, violation: Violation) -> PlannedWorkout:
    """Cap hard segments at 70 (critical) or 80 (medium/high); low severity is left alone."""
    workout = planned.workout
    if violation.severity == "low" or not should_adjust(workout, violation.severity, low_stress_only=False):
        return planned

    ceiling = 70 if violation.severity == "critical" else 80
    changed = False
    segments: list[Segment] = []
    for seg in workout.segments:
        if seg.intensity > MODERATE_CEILING:
            segments.append(replace(
                seg,
                intensity=ceiling,
                zone="EASY" if ceiling <= EASY_CEILING else "STEADY",
                description=_compliance_description(seg.description, "Reduced intensity "),
            ))
            changed = True
        else:
            segments.append(seg)
    if not changed:
        return planned

    updated = with_segments(
        workout,
        segments,
        adaptation_target=f"{workout.adaptation_target} (intensity reduced for 80/20 compliance)",
    )
    return with_workout(planned, updated)


def is_upgrade_candidate(planned: PlannedWorkout, min_duration: float = 45.0) -> bool:
    workout = planned.workout
    return workout.type == "easy" and bool(workout.segments) and workout.total_duration >= min_duration


def upgrade_to_tempo(planned: PlannedWorkout) -> PlannedWorkout:
    """Insert a tempo block at the midpoint of an easy run (40/20/40 split)."""
    workout = planned.workout
    total = workout.total_duration
    first = workout.segments[0]
    segments = [
        replace(first, duration=total * 0.4, description="Easy warm-up"),
        Segment(duration=total * 0.2, intensity=85, zone="TEMPO", description="Tempo segment"),
        replace(first, duration=total * 0.4, description="Easy cool-down"),
    ]
    metadata = dict(workout.metadata)
    metadata["upgraded"] = True
    updated = with_segments(workout, segments, type="tempo", metadata=metadata)
    return with_workout(planned, updated)


def _week_key(planned: PlannedWorkout) -> tuple[int, int]:
    iso = planned.date.isocalendar()
    return iso[0], iso[1]


class UpgradeSelector:
    """Chooses which eligible easy runs get a tempo block.

    Deterministic by default: every ``every_nth`` eligible workout, in date
    order, subject to ``max_per_week``.  Passing a seeded ``random.Random``
    switches to a probabilistic draw (30% per eligible workout) that is
    still reproducible.
    """

    def __init__(
        self,
        every_nth: int = 1,
        max_per_week: int = 2,
        rng: Optional[random.Random] = None,
        probability: float = 0.3,
    ) -> None:
        self.every_nth = max(1, every_nth)
        self.max_per_week = max_per_week
        self.rng = rng
        self.probability = probability

    def _draw(self, position: int) -> bool:
        if self.rng is not None:
            return self.rng.random() < self.probability
        return (position + 1) % self.every_nth == 0

    def select(self, workouts: list[PlannedWorkout], min_duration: float) -> set[str]:
        """Ids of workouts to upgrade.

        Workouts already upgraded count against their week's allowance, so
        running the selection again on its own output picks nothing new.
        """
        per_week: dict[tuple[int, int], int] = defaultdict(int)
        for planned in workouts:
            if planned.workout.metadata.get("upgraded"):
                per_week[_week_key(planned)] += 1

        chosen: set[str] = set()
        position = 0
        for planned in sorted(workouts, key=lambda p: (p.date, p.id)):
            if not is_upgrade_candidate(planned, min_duration):
                continue
            week = _week_key(planned)
            picked = self._draw(position)
            position += 1
            if picked and per_week[week] < self.max_per_week:
                chosen.add(planned.id)
                per_week[week] += 1
        return chosen


def apply_corrections(
    workouts: list[PlannedWorkout],
    violations: list[Violation],
) -> list[PlannedWorkout]:
    """Apply one correction pass for every violation, most severe first."""
    current = list(workouts)
    for violation in sort_by_severity(violations):
        if violation.kind == "insufficient_easy":
            current = [convert_to_easier(p, violation) for p in current]
        elif violation.kind == "excessive_hard":
            current = [reduce_intensity(p, violation) for p in current]
    return current


def apply_upgrades(
    workouts: list[PlannedWorkout],
    selector: UpgradeSelector,
    min_duration: float = 45.0,
) -> list[PlannedWorkout]:
    chosen = selector.select(workouts, min_duration)
    return [upgrade_to_tempo(p) if p.id in chosen else p for p in workouts]


# ── Enforcement loop ─────────────────────────────────────────────────────


def enforce_distribution(
    workouts: list[PlannedWorkout],
    target: IntensityDistribution,
    phase: str = "overall",
    settings: Optional[EnforcementSettings] = None,
    rng: Optional[random.Random] = None,
) -> EnforcementResult:
    """Correct ``workouts`` toward ``target`` until no violation remains.

    Each pass corrects every current violation and re-measures.  A pass is
    kept when the violation count does not rise; the loop continues only
    while the count strictly falls and stops at ``max_iterations``.
    """
    cfg = settings or EnforcementSettings.from_settings(get_settings())
    current = list(workouts)
    if rng is None and cfg.upgrade_seed is not None:
        rng = random.Random(cfg.upgrade_seed)
    actual = measure_distribution(current)
    violations = detect_violations(actual, target, phase, cfg.tolerance)
    history = [len(violations)]
    iterations = 0

    while violations and iterations < cfg.max_iterations:
        iterations += 1
        candidate = apply_corrections(current, violations)
        cand_actual = measure_distribution(candidate)
        cand_violations = detect_violations(cand_actual, target, phase, cfg.tolerance)
        logger.debug(
            "Enforcement pass %d for %s: %d -> %d violations (easy %.1f%%)",
            iterations, phase, len(violations), len(cand_violations), cand_actual.easy,
        )
        if len(cand_violations) > len(violations):
            break
        improved = len(cand_violations) < len(violations)
        current, actual, violations = candidate, cand_actual, cand_violations
        history.append(len(violations))
        if not improved:
            break

    upgraded = 0
    if cfg.allow_upgrades and not violations and is_too_easy(actual, target, cfg.tolerance):
        selector = UpgradeSelector(
            every_nth=cfg.upgrade_every_nth,
            max_per_week=cfg.max_upgrades_per_week,
            rng=rng,
        )
        candidate = apply_upgrades(current, selector, cfg.upgrade_min_duration)
        cand_actual = measure_distribution(candidate)
        if not detect_violations(cand_actual, target, phase, cfg.tolerance):
            upgraded = sum(1 for a, b in zip(current, candidate) if a is not b)
            current, actual = candidate, cand_actual

    logger.info(
        "Intensity enforcement for %s finished",
        phase,
        extra={
            "ctx_iterations": iterations,
            "ctx_history": history,
            "ctx_remaining": len(violations),
            "ctx_upgraded": upgraded,
        },
    )
    return EnforcementResult(
        workouts=current,
        violations=violations,
        history=history,
        iterations=iterations,
        distribution=actual,
        upgraded=upgraded,
    )


# ── Scoring and reporting ────────────────────────────────────────────────


def compliance_score(
    actual: IntensityDistribution,
    target: IntensityDistribution,
    violations: Iterable[Violation] = (),
) -> int:
    easy_score = max(0.0, 100 - abs(actual.easy - target.easy) * 2)
    hard_score = max(0.0, 100 - abs(actual.hard - target.hard) * 3)
    penalty = sum(SEVERITY_PENALTY[v.severity] for v in violations)
    return max(0, round((easy_score + hard_score) / 2 - penalty))


def build_recommendations(overall: IntensityDistribution, violations: Iterable[Violation]) -> list[str]:
    recs: list[str] = []
    if overall.easy < 75:
        recs.append("Increase easy running volume to build aerobic base")
        recs.append("Convert some moderate workouts to easy runs")
    if overall.hard > 20:
        recs.append("Reduce high-intensity work to prevent overtraining")
        recs.append("Focus on quality over quantity for hard workouts")
    for v in violations:
        if v.severity in ("high", "critical"):
            recs.append(f"Critical: {v.kind} in {v.phase} phase - adjust immediately")
    if not recs:
        recs.append("Intensity distribution looks good - maintain current balance")
    return recs


def _target_for(targets: PhaseTargets, phase: str) -> IntensityDistribution:
    if callable(targets):
        return targets(phase)
    dist = targets.get(phase)
    if dist is None:
        logger.warning("No intensity target for phase %r, using polarized default", phase)
        return INTENSITY_MODELS["polarized"]
    return dist


def block_workouts(plan: Plan, block: Block) -> list[PlannedWorkout]:
    return [w for w in plan.workouts if block.start_date <= w.date <= block.end_date]


def validate_plan(
    plan: Plan,
    phase_targets: PhaseTargets,
    overall_target: IntensityDistribution = INTENSITY_MODELS["polarized"],
    tolerance: float = 5.0,
) -> PlanValidation:
    """Per-block and overall measurement against the targets.

    Block distributions are keyed ``"<phase>-<start_date>"``.
    """
    violations: list[Violation] = []
    phases: dict[str, IntensityDistribution] = {}
    for block in plan.blocks:
        scoped = block_workouts(plan, block)
        dist = measure_distribution(scoped)
        phases[f"{block.phase}-{block.start_date.isoformat()}"] = dist
        if not scoped:
            continue
        violations.extend(
            detect_violations(dist, _target_for(phase_targets, block.phase), block.phase, tolerance)
        )

    overall = measure_distribution(plan.workouts)
    violations.extend(detect_violations(overall, overall_target, "overall", tolerance))
    return PlanValidation(
        is_valid=not violations,
        violations=sort_by_severity(violations),
        overall=overall,
        phases=phases,
    )


def generate_report(
    plan: Plan,
    phase_targets: PhaseTargets,
    methodology: str = "",
    overall_target: IntensityDistribution = INTENSITY_MODELS["polarized"],
    tolerance: float = 5.0,
) -> DistributionReport:
    validation = validate_plan(plan, phase_targets, overall_target, tolerance)
    return DistributionReport(
        overall=validation.overall,
        target=overall_target,
        phases=validation.phases,
        violations=validation.violations,
        recommendations=build_recommendations(validation.overall, validation.violations),
        compliance=compliance_score(validation.overall, overall_target, validation.violations),
        methodology=methodology,
    )


# ── Plan-level enforcement ───────────────────────────────────────────────


@dataclass(frozen=True)
class PlanEnforcement:
    plan: Plan
    results: dict[str, EnforcementResult] = field(default_factory=dict)


def enforce_plan(
    plan: Plan,
    phase_targets: PhaseTargets,
    overall_target: IntensityDistribution = INTENSITY_MODELS["polarized"],
    settings: Optional[EnforcementSettings] = None,
    rng: Optional[random.Random] = None,
) -> PlanEnforcement:
    """Enforce each block against its phase target, then the whole plan.

    Returns a new plan whose flat workout list and block microcycles hold
    the same corrected workouts.  Easy-run upgrades only happen against
    phase targets; the overall pass never adds intensity.
    """
    cfg = settings or EnforcementSettings.from_settings(get_settings())
    by_id = {w.id: w for w in plan.workouts}
    results: dict[str, EnforcementResult] = {}

    for block in plan.blocks:
        scoped = [by_id[w.id] for w in block_workouts(plan, block)]
        if not scoped:
            continue
        key = f"{block.phase}-{block.start_date.isoformat()}"
        result = enforce_distribution(
            scoped, _target_for(phase_targets, block.phase), block.phase, cfg, rng
        )
        results[key] = result
        by_id.update({w.id: w for w in result.workouts})

    flat = [by_id[w.id] for w in plan.workouts]
    overall = enforce_distribution(
        flat, overall_target, "overall", replace(cfg, allow_upgrades=False), rng
    )
    results["overall"] = overall
    by_id.update({w.id: w for w in overall.workouts})

    enforced = replace_workouts(plan, by_id.values())
    return PlanEnforcement(plan=enforced, results=results)
