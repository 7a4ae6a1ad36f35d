"""Angles on the ecliptic circle.

Every function here validates its inputs: a NaN, None or infinite value
raises :class:`InvalidInputError` instead of leaking into later comparisons.
"""

from __future__ import annotations

import math

from .errors import InvalidInputError
from .zodiac import SIGNS


def ensure_finite(*values: float) -> None:
    """Raise InvalidInputError unless every value is a finite real number."""

    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(f"expected a number, got {value!r}")
        if not math.isfinite(value):
            raise InvalidInputError(f"expected a finite number, got {value!r}")


def normalize_longitude(longitude: float) -> float:
    """Normalize to [0, 360)."""

    ensure_finite(longitude)
    lon = float(longitude) % 360.0
    # -1e-15 % 360 rounds up to 360.0
    return 0.0 if lon >= 360.0 else lon


def angle_between(lon_a: float, lon_b: float) -> float:
    """Shorter arc between two longitudes, in [0, 180].

    Symmetric and without direction; see ``analysis.motion`` for applying/separating.
    """

    ensure_finite(lon_a, lon_b)
    diff = abs(float(lon_a) - float(lon_b)) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def signed_difference(target: float, current: float) -> float:
    """Signed shortest rotation taking ``current`` onto ``target``, in (-180, 180]."""

    ensure_finite(target, current)
    diff = (float(target) - float(current)) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff


def sign_index(longitude: float) -> int:
    return int(normalize_longitude(longitude) // 30)


def sign_name(longitude: float) -> str:
    return SIGNS[sign_index(longitude)]


def degree_in_sign(longitude: float) -> float:
    return normalize_longitude(longitude) % 30.0


def format_degree(longitude: float) -> str:
    """Return degrees and arcminutes within the sign, e.g. ``14°05'``."""

    deg_in_sign = degree_in_sign(longitude)
    deg = int(deg_in_sign)
    minutes = int(round((deg_in_sign - deg) * 60))
    if minutes == 60:
        deg, minutes = deg + 1, 0
    return f"{deg}°{minutes:02d}'"
