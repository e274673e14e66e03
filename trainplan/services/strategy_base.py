"""Strategy interface, shared default behaviour, and phase-aware variant tables.

Every methodology implements ``MethodologyStrategy``.  Default behaviour
(plan walking, generic workout customization, phase-target lookup) lives in
``BaseCustomizer``, which each strategy receives at construction and calls
where it has nothing more specific to do.

Workout selection is driven by a ``VariantTable``: a (workout type, phase)
matrix whose cells are a template id or a week-dependent rule.  Tables are
checked for completeness when built, so a missing cell is a startup error
rather than a silent default.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable, Mapping, Union

from trainplan.errors import ConfigurationError, TemplateNotFoundError
from trainplan.services.methodology_tables import (
    METHODOLOGY_PROFILES,
    PHASE_TARGETS,
    emphasis_for,
)
from trainplan.services.plan_model import (
    PHASES,
    IntensityDistribution,
    Plan,
    PlannedWorkout,
    Workout,
    phase_for_date,
    with_segments,
    with_workout,
)
from trainplan.services.workout_catalog import get_template, lookup

logger = logging.getLogger(__name__)

PHASE_MULTIPLIERS = {"base": 0.95, "build": 1.0, "peak": 1.05, "taper": 0.90, "recovery": 0.85}

CustomizeFn = Callable[[Workout, str, int], Workout]


class MethodologyStrategy(ABC):
    """Capability interface shared by every methodology."""

    methodology: str

    @abstractmethod
    def enhance_plan(self, plan: Plan) -> Plan:
        """Return a copy of ``plan`` customized for this methodology."""

    @abstractmethod
    def customize_workout(self, workout: Workout, phase: str, week_number: int) -> Workout:
        """Rewrite one workout's segments for the phase and week."""

    @abstractmethod
    def select_workout_variant(self, workout_type: str, phase: str, week_in_phase: int) -> str:
        """Template id for a requested type in a phase/week."""

    @abstractmethod
    def phase_distribution(self, phase: str) -> IntensityDistribution:
        """Target easy/moderate/hard split for a phase."""

    @abstractmethod
    def workout_emphasis(self, workout_type: str) -> float:
        """Relative emphasis multiplier for a workout type."""


# ── Variant rules ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AlternatingRule:
    """Cycle through ``variants`` one per week, starting at ``start_week``."""
    variants: tuple[str, ...]
    start_week: int = 1

    def resolve(self, week: int) -> str:
        return self.variants[(week - self.start_week) % len(self.variants)]


@dataclass(frozen=True)
class UnlockRule:
    """``before`` up to and including ``unlock_week``, ``after`` from then on."""
    before: str
    after: "Rule"
    unlock_week: int

    def resolve(self, week: int) -> str:
        if week <= self.unlock_week:
            return self.before
        return resolve_rule(self.after, week)


Rule = Union[str, AlternatingRule, UnlockRule]


def resolve_rule(rule: Rule, week: int) -> str:
    if isinstance(rule, str):
        return rule
    return rule.resolve(week)


def rule_template_ids(rule: Rule) -> list[str]:
    if isinstance(rule, str):
        return [rule]
    if isinstance(rule, AlternatingRule):
        return list(rule.variants)
    return [rule.before, *rule_template_ids(rule.after)]


def phase_row(base: Rule, build: Rule, peak: Rule, taper: Rule, recovery: Rule) -> dict[str, Rule]:
    return dict(zip(PHASES, (base, build, peak, taper, recovery)))


class VariantTable:
    """Validated (workout type x phase) -> rule matrix."""

    def __init__(
        self,
        name: str,
        rows: Mapping[str, Mapping[str, Rule]],
        template_lookup: Callable[[str], object] = get_template,
    ) -> None:
        self.name = name
        self._rows = {t: dict(r) for t, r in rows.items()}
        self._validate(template_lookup)

    def _validate(self, template_lookup: Callable[[str], object]) -> None:
        for workout_type, row in self._rows.items():
            missing = [p for p in PHASES if p not in row]
            if missing:
                raise ConfigurationError(
                    f"{self.name}: no variant rule for '{workout_type}' in phase(s) {', '.join(missing)}"
                )
            for phase, rule in row.items():
                for template_id in rule_template_ids(rule):
                    try:
                        template_lookup(template_id)
                    except TemplateNotFoundError as exc:
                        raise ConfigurationError(
                            f"{self.name}: '{workout_type}'/{phase} references unknown template {template_id}"
                        ) from exc

    @property
    def workout_types(self) -> list[str]:
        return list(self._rows)

    def covers(self, workout_type: str) -> bool:
        return workout_type in self._rows

    def resolve(self, workout_type: str, phase: str, week_in_phase: int) -> str | None:
        row = self._rows.get(workout_type)
        if row is None or phase not in row:
            return None
        return resolve_rule(row[phase], week_in_phase)


# ── Shared default behaviour ─────────────────────────────────────────────


class BaseCustomizer:
    """Default customization shared by all methodologies."""

    def __init__(self, methodology: str) -> None:
        if methodology not in METHODOLOGY_PROFILES:
            raise ConfigurationError(f"No profile for methodology '{methodology}'")
        targets = PHASE_TARGETS.get(methodology, {})
        missing = [p for p in PHASES if p not in targets]
        if missing:
            raise ConfigurationError(
                f"Phase targets for '{methodology}' missing phase(s) {', '.join(missing)}"
            )
        self.methodology = methodology
        self.profile = METHODOLOGY_PROFILES[methodology]
        self._targets = targets

    @property
    def recovery_emphasis(self) -> float:
        return self.profile.recovery_emphasis

    def workout_emphasis(self, workout_type: str) -> float:
        return emphasis_for(self.methodology, workout_type)

    def phase_distribution(self, phase: str) -> IntensityDistribution:
        dist = self._targets.get(phase)
        if dist is None:
            logger.warning(
                "No %s phase target for %r, using methodology base distribution",
                self.methodology, phase,
            )
            return self.profile.intensity_distribution
        return dist

    def customize_workout(self, workout: Workout, phase: str) -> Workout:
        multiplier = PHASE_MULTIPLIERS.get(phase, 1.0)
        emphasis = self.workout_emphasis(workout.type)
        segments = [
            replace(seg, intensity=max(40, min(100, round(seg.intensity * multiplier * emphasis))))
            for seg in workout.segments
        ]
        return with_segments(
            workout,
            segments,
            estimated_tss=round(workout.estimated_tss * emphasis),
            recovery_time=round(workout.recovery_time * self.recovery_emphasis),
        )

    def select_workout_variant(self, workout_type: str) -> str:
        """First catalog template of the type; TemplateNotFoundError when none."""
        return lookup(workout_type)[0].id

    def enhance_plan(self, plan: Plan, customize: CustomizeFn) -> Plan:
        """Customize every scheduled workout and refresh phase summaries.

        Workouts in the flat list that no block schedules are customized
        with the phase their date falls in (base when none matches).
        """
        by_id: dict[str, PlannedWorkout] = {}
        blocks = []
        for block in plan.blocks:
            micros = []
            for micro in block.microcycles:
                workouts = []
                for planned in micro.workouts:
                    updated = with_workout(
                        planned, customize(planned.workout, block.phase, micro.week_number)
                    )
                    by_id[planned.id] = updated
                    workouts.append(updated)
                micros.append(replace(micro, workouts=workouts))
            blocks.append(replace(block, microcycles=micros))

        flat: list[PlannedWorkout] = []
        for planned in plan.workouts:
            if planned.id in by_id:
                flat.append(by_id[planned.id])
                continue
            phase = phase_for_date(plan, planned.date) or "base"
            flat.append(with_workout(planned, customize(planned.workout, phase, 1)))

        phases = [
            replace(ps, intensity_distribution=self.phase_distribution(ps.phase))
            for ps in plan.summary.phases
        ]
        return replace(
            plan,
            blocks=blocks,
            workouts=flat,
            summary=replace(plan.summary, phases=phases),
        )


def instantiate(template_id: str) -> Workout:
    """Fresh copy of a catalog workout."""
    template = get_template(template_id).workout
    return replace(template, segments=list(template.segments), metadata=dict(template.metadata))
