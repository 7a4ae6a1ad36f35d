from __future__ import annotations

from enum import Enum
from typing import Sequence

from ..errors import InvalidInputError
from ..geometry import angle_between
from ..models import AspectDefinition, AspectHit
from ..orbs import TRANSIT_ORBS, OrbPolicy

# Enumeration order matters for MatchStrategy.FIRST.
ASPECT_CATALOG = (
    AspectDefinition("conjunction", 0.0),
    AspectDefinition("opposition", 180.0),
    AspectDefinition("trine", 120.0),
    AspectDefinition("square", 90.0),
    AspectDefinition("sextile", 60.0),
)

MINOR_ASPECT_CATALOG = (
    AspectDefinition("semisextile", 30.0, major=False),
    AspectDefinition("semisquare", 45.0, major=False),
    AspectDefinition("sesquiquadrate", 135.0, major=False),
    AspectDefinition("quincunx", 150.0, major=False),
)


class MatchStrategy(str, Enum):
    """FIRST returns the first catalog entry within orb; CLOSEST the tightest one."""

    FIRST = "first"
    CLOSEST = "closest"


def match_strategy(value: MatchStrategy | str) -> MatchStrategy:
    try:
        return MatchStrategy(value)
    except ValueError:
        raise InvalidInputError(f"unknown match strategy: {value!r}") from None


def find_aspect(
    lon_a: float,
    lon_b: float,
    owner: str,
    orbs: OrbPolicy = TRANSIT_ORBS,
    strategy: MatchStrategy | str = MatchStrategy.FIRST,
    catalog: Sequence[AspectDefinition] = ASPECT_CATALOG,
) -> AspectHit | None:
    """
    Return the catalog aspect formed by two longitudes, or None.

    ``owner`` names the body whose orb table applies. With overlapping
    tolerance windows FIRST can return a looser entry than CLOSEST would.
    """

    strategy = match_strategy(strategy)
    angle = angle_between(lon_a, lon_b)
    best: AspectHit | None = None
    for definition in catalog:
        allowed = orbs.orb_for(owner, definition.name)
        diff = abs(angle - definition.angle)
        if diff > allowed:
            continue
        hit = AspectHit(definition=definition, angle=angle, orb=diff, allowed_orb=allowed)
        if strategy is MatchStrategy.FIRST:
            return hit
        if best is None or diff < best.orb:
            best = hit
    return best
