"""House placement on an arbitrary set of twelve cusps."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Mapping, Sequence

from ..errors import InvalidInputError
from ..geometry import normalize_longitude
from ..models import HouseCusps, Position


def house_of(longitude: float, cusps: HouseCusps | Sequence[float]) -> int:
    """
    Return the house (1-12) containing ``longitude``.

    House i runs from cusps[i-1] forward to the next cusp; a house whose
    end cusp is smaller than its start crosses 0° Aries.
    """

    if isinstance(cusps, HouseCusps):
        bounds = cusps.cusps
    else:
        if len(cusps) != 12:
            raise InvalidInputError(f"expected 12 house cusps, got {len(cusps)}")
        bounds = tuple(normalize_longitude(c) for c in cusps)

    lon = normalize_longitude(longitude)
    for idx in range(12):
        start = bounds[idx]
        end = bounds[(idx + 1) % 12]
        if end < start:
            if lon >= start or lon < end:
                return idx + 1
        elif start <= lon < end:
            return idx + 1
    return 1


def annotate_houses(positions: Mapping[str, Position], cusps: HouseCusps) -> Dict[str, Position]:
    return {name: replace(pos, house=house_of(pos.longitude, cusps)) for name, pos in positions.items()}


def whole_sign_cusps(ascendant: float) -> list[float]:
    """Cusps at 0° of each sign, starting from the rising sign."""

    asc_sign = int(normalize_longitude(ascendant) // 30)
    return [(asc_sign * 30.0 + house * 30.0) % 360.0 for house in range(12)]


def equal_cusps(ascendant: float) -> list[float]:
    asc = normalize_longitude(ascendant)
    return [(asc + house * 30.0) % 360.0 for house in range(12)]


def rotate_cusps(houses: HouseCusps, arc: float) -> HouseCusps:
    """Shift every cusp and angle forward by ``arc`` degrees (solar-arc directions)."""

    return HouseCusps(
        cusps=tuple(c + arc for c in houses.cusps),
        ascendant=houses.ascendant + arc,
        midheaven=houses.midheaven + arc,
    )
