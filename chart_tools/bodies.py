"""Names of the bodies and chart points understood across the package."""

from __future__ import annotations

PLANETS = [
    "Sun",
    "Moon",
    "Mercury",
    "Venus",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
    "Pluto",
]

# Default batch requested from a provider. SNode is derived from NNode, Juno is opt-in.
DEFAULT_BODIES = PLANETS + ["NNode", "Chiron", "Lilith"]

OUTER_PLANETS = frozenset({"Jupiter", "Saturn", "Uranus", "Neptune", "Pluto"})

# Bodies that can station; Sun and Moon never turn retrograde, the nodes are not tracked.
STATION_BODIES = PLANETS[2:]

NODE_NAMES = frozenset({"NNode", "SNode"})

ANGLE_NAMES = frozenset({"AS", "MC", "DS", "IC"})
