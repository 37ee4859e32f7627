"""
Tonight's highlights for the Skywatch application.
Author: Oliver Ernster

This module derives a ranked list of noteworthy conditions from an
astronomy snapshot. The rules are an ordered list of functions, each
returning a Highlight or None; the result is stably sorted by priority so
ties keep rule order. Derivation is pure and performs no I/O.
"""

from typing import Callable, List, Optional

from ..models.astronomy_data import AstronomyData, Highlight

NO_HIGHLIGHTS_MESSAGE = (
    "No special astronomical events tonight. "
    "Check the detailed sections below for regular observations."
)

AURORA_MIN_PROBABILITY = 0.3
METEOR_MIN_VISIBILITY = 0.4
NOTABLE_PLANETS = ("Jupiter", "Saturn")

# (minimum KP, absolute latitude strictly above)
AURORA_VISIBILITY_STEPS = [
    (9.0, 40.0),
    (7.0, 45.0),
    (5.0, 55.0),
    (3.0, 65.0),
]

HighlightRule = Callable[[AstronomyData], Optional[Highlight]]


def is_aurora_visible(kp_index: float, latitude: float) -> bool:
    """Check the KP/latitude step table for aurora visibility."""
    abs_latitude = abs(latitude)
    return any(
        kp_index >= min_kp and abs_latitude > min_latitude
        for min_kp, min_latitude in AURORA_VISIBILITY_STEPS
    )


def _format_time(value) -> str:
    fmt = "%I:%M %p %Z" if value.tzinfo is not None else "%I:%M %p"
    return value.strftime(fmt).strip()


def aurora_rule(data: AstronomyData) -> Optional[Highlight]:
    aurora = data.aurora
    if aurora is None:
        return None
    if not is_aurora_visible(aurora.kp_index, data.coordinates.latitude):
        return None
    if aurora.probability <= AURORA_MIN_PROBABILITY:
        return None
    return Highlight(
        title="Aurora Possible Tonight",
        description=(
            f"With a KP index of {aurora.kp_index:.1f}, aurora activity might be visible "
            "from your latitude under dark sky conditions."
        ),
        icon="✨",
        priority=0,
    )


def full_moon_rule(data: AstronomyData) -> Optional[Highlight]:
    if data.moon_phase is None or "full" not in data.moon_phase.phase_name.lower():
        return None
    return Highlight(
        title="Full Moon Tonight",
        description="The moon is full tonight, providing excellent illumination for nighttime activities.",
        icon="🌕",
        priority=1,
    )


def new_moon_rule(data: AstronomyData) -> Optional[Highlight]:
    if data.moon_phase is None or "new" not in data.moon_phase.phase_name.lower():
        return None
    return Highlight(
        title="New Moon Tonight",
        description=(
            "The new moon provides dark skies, perfect for observing faint objects "
            "like galaxies and nebulae."
        ),
        icon="🌑",
        priority=1,
    )


def iss_pass_rule(data: AstronomyData) -> Optional[Highlight]:
    iss_pass = next(
        (sat for sat in data.visible_satellite_passes if "ISS" in sat.name),
        None,
    )
    if iss_pass is None:
        return None
    return Highlight(
        title="ISS Visible Tonight",
        description=(
            f"The International Space Station will be visible at {_format_time(iss_pass.start_time)} "
            f"with a maximum elevation of {iss_pass.max_elevation_deg:.1f}°."
        ),
        icon="🛰️",
        priority=1,
    )


def meteor_shower_rule(data: AstronomyData) -> Optional[Highlight]:
    if not data.meteor_showers:
        return None
    # First qualifying shower in feed order
    shower = next(
        (s for s in data.meteor_showers if s.active and s.visibility > METEOR_MIN_VISIBILITY),
        None,
    )
    if shower is None:
        return None
    return Highlight(
        title=f"{shower.name} Meteor Shower Active",
        description=(
            f"The {shower.name} meteor shower is active with an expected rate of "
            f"{shower.rate} meteors per hour."
        ),
        icon="☄️",
        priority=1,
    )


def many_planets_rule(data: AstronomyData) -> Optional[Highlight]:
    visible = data.visible_planets
    if len(visible) < 3:
        return None
    names = ", ".join(planet.name for planet in visible)
    return Highlight(
        title=f"{len(visible)} Planets Visible Tonight",
        description=f"Look for {names} in the night sky.",
        icon="🪐",
        priority=2,
    )


def notable_planet_rule(data: AstronomyData) -> Optional[Highlight]:
    visible = data.visible_planets
    if not 1 <= len(visible) <= 2:
        return None
    planet = next((p for p in visible if p.name in NOTABLE_PLANETS), None)
    if planet is None:
        return None
    return Highlight(
        title=f"{planet.name} Visible Tonight",
        description=f"Look for {planet.name} in the night sky.",
        icon="🪐",
        priority=3,
    )


HIGHLIGHT_RULES: List[HighlightRule] = [
    aurora_rule,
    full_moon_rule,
    new_moon_rule,
    iss_pass_rule,
    meteor_shower_rule,
    many_planets_rule,
    notable_planet_rule,
]


def derive_highlights(data: AstronomyData, rules: Optional[List[HighlightRule]] = None) -> List[Highlight]:
    """
    Derive tonight's highlights from an astronomy snapshot.

    Args:
        data: Astronomy snapshot
        rules: Ordered rules to evaluate (defaults to HIGHLIGHT_RULES)

    Returns:
        Highlights sorted by ascending priority; empty when nothing matched
    """
    highlights = []
    for rule in rules if rules is not None else HIGHLIGHT_RULES:
        highlight = rule(data)
        if highlight is not None:
            highlights.append(highlight)

    # sorted() is stable, so equal priorities keep rule order
    return sorted(highlights, key=lambda h: h.priority)
