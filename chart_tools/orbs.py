"""Orb tables: how far from exact an angle may drift and still count as an aspect."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .models import BodyOrbs

MAJOR_ASPECTS = frozenset({"conjunction", "opposition", "trine", "square", "sextile"})

DEFAULT_BODY_ORBS = BodyOrbs(major=1.0, minor=0.5)


@dataclass(frozen=True)
class OrbPolicy:
    """
    Tolerance lookup keyed by the body that owns the aspect.

    ``aspect_orbs`` overrides the body table for the aspect names it lists,
    which is how natal and progressed charts apply one orb per aspect.
    """

    body_orbs: Mapping[str, BodyOrbs] = field(default_factory=dict)
    default: BodyOrbs = DEFAULT_BODY_ORBS
    aspect_orbs: Mapping[str, float] = field(default_factory=dict)

    def orb_for(self, body: str, aspect: str) -> float:
        if aspect in self.aspect_orbs:
            return self.aspect_orbs[aspect]
        orbs = self.body_orbs.get(body, self.default)
        return orbs.major if aspect in MAJOR_ASPECTS else orbs.minor


_PERSONAL = BodyOrbs(major=1.0, minor=0.5)
_SLOW = BodyOrbs(major=2.0, minor=1.0)

# Slow bodies hold an aspect for longer and get the wider orb.
TRANSIT_ORBS = OrbPolicy(
    body_orbs={
        "Sun": _PERSONAL,
        "Moon": _PERSONAL,
        "Mercury": _PERSONAL,
        "Venus": _PERSONAL,
        "Mars": _PERSONAL,
        "Jupiter": BodyOrbs(major=1.5, minor=0.5),
        "Saturn": _SLOW,
        "Uranus": _SLOW,
        "Neptune": _SLOW,
        "Pluto": _SLOW,
        "NNode": _PERSONAL,
        "SNode": _PERSONAL,
        "Chiron": _PERSONAL,
        "Lilith": _PERSONAL,
    }
)

NATAL_ORBS = OrbPolicy(
    aspect_orbs={
        "conjunction": 8.0,
        "opposition": 8.0,
        "trine": 8.0,
        "square": 8.0,
        "sextile": 6.0,
    }
)

PROGRESSED_ORBS = OrbPolicy(aspect_orbs={name: 1.0 for name in MAJOR_ASPECTS})


def orb_for(body: str, aspect: str, policy: OrbPolicy = TRANSIT_ORBS) -> float:
    return policy.orb_for(body, aspect)
