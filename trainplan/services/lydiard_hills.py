"""Phase-specific hill sessions for the aerobic-base methodology.

Hills are the bridge between the aerobic base and speed work: gentle
strength circuits in base, power repeats in build, short fast hills in
peak.  Each phase has a profile describing effort length, recovery jog,
repeat count and gradient; ``generate_hill_workout`` turns a profile into a
full session with warm-up and cool-down.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from trainplan.services.plan_model import Segment, Workout


@dataclass(frozen=True)
class HillProfile:
    type: str
    name: str
    primary_zone: str
    intensity: float
    duration: float          # minutes per repeat
    recovery: int            # seconds between repeats
    repeats: int
    gradient: str
    effort: str
    adaptation_target: str
    principles: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class HillGuidance:
    frequency: str
    duration: str
    focus: str
    effort: str
    progression: str
    cautions: list[str]
    benefits: list[str]


_PHASE_RECOVERY_HOURS = {"base": 24, "build": 36, "peak": 48, "taper": 18, "recovery": 12}

# phase -> (generated week, template id)
HILL_TEMPLATE_WEEKS = {
    "base": (4, "LYDIARD_HILL_BASE"),
    "build": (3, "LYDIARD_HILL_BUILD"),
    "peak": (2, "LYDIARD_HILL_PEAK"),
    "taper": (1, "LYDIARD_HILL_TAPER"),
    "recovery": (1, "LYDIARD_HILL_RECOVERY"),
}


def hill_profile(phase: str, week_in_phase: int) -> HillProfile:
    """Profile for a phase; unknown phases use the base profile."""
    w = week_in_phase
    if phase == "build":
        return HillProfile(
            type="anaerobic_power",
            name="Hill Power Development",
            primary_zone="VO2_MAX",
            intensity=min(88 + w, 100),
            duration=2 + w // 3,
            recovery=120,
            repeats=min(6 + w, 10),
            gradient="8-12%",
            effort="Hard uphill drive with controlled form",
            adaptation_target="Anaerobic power, lactate tolerance, neuromuscular coordination",
            principles=[
                "Develop anaerobic power through hill efforts",
                "Maintain strong uphill drive technique",
                "Build lactate tolerance progressively",
                "Prepare for speed development phase",
            ],
        )
    if phase == "peak":
        return HillProfile(
            type="speed_hills",
            name="Hill Speed Coordination",
            primary_zone="VO2_MAX",
            intensity=min(92 + w, 100),
            duration=1 + w * 0.5,
            recovery=180,
            repeats=min(8 + w, 12),
            gradient="10-15%",
            effort="Fast uphill running with coordination focus",
            adaptation_target="Speed coordination, neuromuscular power, race preparation",
            principles=[
                "Fast hill running for speed development",
                "Coordination and economy at speed",
                "Race-specific power development",
                "Final sharpening of leg speed",
            ],
        )
    if phase == "taper":
        return HillProfile(
            type="maintenance",
            name="Hill Maintenance",
            primary_zone="TEMPO",
            intensity=80,
            duration=2,
            recovery=120,
            repeats=4,
            gradient="6-8%",
            effort="Moderate hill effort to maintain feel",
            adaptation_target="Maintain hill strength and coordination",
            principles=[
                "Maintain hill strength without fatigue",
                "Keep neuromuscular patterns sharp",
                "Minimal stress with maximum maintenance",
                "Focus on race readiness",
            ],
        )
    if phase == "recovery":
        return HillProfile(
            type="gentle_hills",
            name="Gentle Hill Walking/Jogging",
            primary_zone="EASY",
            intensity=60,
            duration=1,
            recovery=180,
            repeats=3,
            gradient="4-6%",
            effort="Very easy hill walking or gentle jogging",
            adaptation_target="Active recovery with gentle strength maintenance",
            principles=[
                "Gentle movement for recovery",
                "Maintain basic hill mechanics",
                "No stress on anaerobic systems",
                "Promote blood flow and healing",
            ],
        )
    return HillProfile(
        type="aerobic_strength",
        name="Aerobic Hill Strengthening",
        primary_zone="STEADY",
        intensity=min(75 + w * 2, 100),
        duration=3 + w // 2,
        recovery=90,
        repeats=min(4 + w, 8),
        gradient="6-8%",
        effort="Strong but controlled aerobic effort",
        adaptation_target="Leg strength, running economy, aerobic power development",
        principles=[
            "Build strength through sustained hill efforts",
            "Focus on form and biomechanical efficiency",
            "Aerobic emphasis - not anaerobic stress",
            "Progressive volume and intensity over weeks",
        ],
    )


def hill_segments(profile: HillProfile, total_duration: float) -> list[Segment]:
    segments = [
        Segment(
            duration=min(20, total_duration * 0.3),
            intensity=65,
            zone="EASY",
            description=f"Warm-up jog to hills - easy pace, prepare for {profile.effort.lower()}",
        )
    ]
    for i in range(1, profile.repeats + 1):
        segments.append(Segment(
            duration=profile.duration,
            intensity=profile.intensity,
            zone=profile.primary_zone,
            description=f"Hill repeat {i}/{profile.repeats} - {profile.effort} on {profile.gradient} gradient",
        ))
        if i < profile.repeats:
            segments.append(Segment(
                duration=profile.recovery / 60,
                intensity=50,
                zone="RECOVERY",
                description="Recovery jog/walk down hill - full recovery before next effort",
            ))
    segments.append(Segment(
        duration=max(10, total_duration * 0.2),
        intensity=60,
        zone="RECOVERY",
        description="Cool-down jog on flat terrain - easy pace to finish",
    ))
    return segments


def hill_tss(segments: list[Segment]) -> int:
    """TSS with a 1.2 neuromuscular multiplier on efforts above 80%."""
    total = 0.0
    for seg in segments:
        factor = seg.intensity / 100
        seg_tss = seg.duration * factor ** 2 * 100 / 60
        total += seg_tss * (1.2 if seg.intensity > 80 else 1.0)
    return round(total)


def hill_recovery_hours(phase: str, repeats: int) -> int:
    base = _PHASE_RECOVERY_HOURS.get(phase, 24)
    return round(base * (1 + (repeats - 4) * 0.1))


def generate_hill_workout(phase: str, week_in_phase: int, duration: float = 45) -> Workout:
    profile = hill_profile(phase, week_in_phase)
    segments = hill_segments(profile, duration)
    return Workout(
        type="hill_repeats",
        primary_zone=profile.primary_zone,
        segments=segments,
        adaptation_target=profile.adaptation_target,
        estimated_tss=hill_tss(segments),
        recovery_time=hill_recovery_hours(phase, profile.repeats),
        name=f"Lydiard {profile.name}",
        metadata={
            "methodology": "lydiard",
            "hill_type": profile.type,
            "phase": phase,
            "week_in_phase": week_in_phase,
            "principles": list(profile.principles),
        },
    )


def hill_template_workouts() -> dict[str, Workout]:
    """One reference hill session per phase, keyed by template id."""
    return {
        template_id: generate_hill_workout(phase, week)
        for phase, (week, template_id) in HILL_TEMPLATE_WEEKS.items()
    }


def hill_guidance(phase: str) -> HillGuidance:
    if phase == "base":
        return HillGuidance(
            frequency="2-3 times per week",
            duration="4-8 weeks continuous",
            focus="Leg strength and running economy",
            effort="Strong but comfortable aerobic effort",
            progression="Increase duration and repeats gradually",
            cautions=[
                "Never run hills at anaerobic intensity",
                "Focus on form and rhythm over speed",
                "Build volume before intensity",
                "Allow adequate recovery between sessions",
            ],
            benefits=[
                "Increased leg strength and power",
                "Improved running economy",
                "Enhanced biomechanical efficiency",
                "Foundation for later speed development",
            ],
        )
    if phase == "build":
        return HillGuidance(
            frequency="2 times per week",
            duration="3-4 weeks",
            focus="Anaerobic power development",
            effort="Hard uphill drive with control",
            progression="Increase intensity while maintaining form",
            cautions=[
                "Maintain strong uphill drive technique",
                "Do not overstride or lose form",
                "Monitor recovery between sessions",
                "Reduce if signs of overreaching appear",
            ],
            benefits=[
                "Anaerobic power development",
                "Lactate tolerance improvement",
                "Neuromuscular coordination",
                "Preparation for speed phase",
            ],
        )
    if phase == "peak":
        return HillGuidance(
            frequency="1-2 times per week",
            duration="2-3 weeks",
            focus="Speed coordination and final sharpening",
            effort="Fast controlled hill running",
            progression="Emphasize speed and coordination",
            cautions=[
                "Focus on coordination over raw speed",
                "Maintain excellent form at all times",
                "Use sparingly - quality over quantity",
                "Ensure full recovery between efforts",
            ],
            benefits=[
                "Speed coordination development",
                "Neuromuscular power enhancement",
                "Race-specific preparation",
                "Final leg speed sharpening",
            ],
        )
    return HillGuidance(
        frequency="1 time per week",
        duration="1-2 weeks",
        focus="Maintenance or recovery",
        effort="Easy to moderate",
        progression="Maintain without stress",
        cautions=["Keep efforts easy", "Focus on recovery"],
        benefits=["Strength maintenance", "Active recovery"],
    )
