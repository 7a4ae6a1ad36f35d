"""Swiss Ephemeris wrapper implementing the ephemeris provider interface."""

from __future__ import annotations

import logging
import os
from datetime import datetime

import swisseph as swe

from .errors import EphemerisError, InvalidInputError
from .models import HouseCusps, Position, to_utc

logger = logging.getLogger(__name__)

EPHE_PATH = os.environ.get("SWISSEPH_EPHE")
BODY_IDS: dict[str, int] = {
    "Sun": swe.SUN,
    "Moon": swe.MOON,
    "Mercury": swe.MERCURY,
    "Venus": swe.VENUS,
    "Mars": swe.MARS,
    "Jupiter": swe.JUPITER,
    "Saturn": swe.SATURN,
    "Uranus": swe.URANUS,
    "Neptune": swe.NEPTUNE,
    "Pluto": swe.PLUTO,
    "NNode": swe.TRUE_NODE,
    "Chiron": swe.CHIRON,
    "Lilith": swe.MEAN_APOG,
    "Juno": swe.JUNO,
}
FLAGS = swe.FLG_SWIEPH | swe.FLG_SPEED

HOUSE_SYSTEMS = {
    "placidus": "P",
    "koch": "K",
    "whole_sign": "W",
    "equal": "E",
    "regiomontanus": "R",
    "campanus": "C",
    "porphyry": "O",
}


def set_ephe_path(path: str) -> None:
    """Override the ephemeris directory used for all Swiss Ephemeris calls."""

    global EPHE_PATH
    EPHE_PATH = path


def ensure_ephe_path() -> str | None:
    """
    Resolve the ephemeris path from the global setting or env var.

    Without one, pyswisseph falls back to its built-in Moshier ephemeris;
    bodies that need data files (Chiron, asteroids) then fail per body.
    """

    path = EPHE_PATH or os.environ.get("SWISSEPH_EPHE")
    if not path:
        logger.debug("Swiss Ephemeris path not set; using the built-in Moshier ephemeris")
        return None
    swe.set_ephe_path(path)
    return path


def house_system_code(house_system: str) -> bytes:
    """Accept a one-letter Swiss Ephemeris code or a name such as ``placidus``."""

    raw = house_system.strip()
    code = HOUSE_SYSTEMS.get(raw.lower().replace("-", "_").replace(" ", "_"), raw)
    if len(code) != 1:
        raise InvalidInputError(f"unknown house system: {house_system!r}")
    return code.upper().encode("ascii")


def julian_day(instant: datetime) -> float:
    """Convert an instant into a Julian day (UT frame)."""

    dt_utc = to_utc(instant).replace(tzinfo=None)
    ut_hour = (
        dt_utc.hour
        + dt_utc.minute / 60.0
        + dt_utc.second / 3600.0
        + dt_utc.microsecond / 3_600_000_000.0
    )
    return swe.julday(dt_utc.year, dt_utc.month, dt_utc.day, ut_hour, swe.GREG_CAL)


def _split_result(result) -> tuple[tuple, int | None]:
    # pyswisseph returns either a flat tuple of floats or (position_tuple, retflag).
    if len(result) == 2 and isinstance(result[0], (tuple, list)):
        return tuple(result[0]), int(result[1])
    return tuple(result), None


class SwissEphemeris:
    """Ephemeris provider backed by pyswisseph."""

    def __init__(self, ephe_path: str | None = None, flags: int = FLAGS) -> None:
        if ephe_path:
            set_ephe_path(ephe_path)
        self.ephe_path = ensure_ephe_path()
        self.flags = flags

    def position(self, instant: datetime, body: str) -> Position:
        body_id = BODY_IDS.get(body)
        if body_id is None:
            raise EphemerisError(f"no Swiss Ephemeris id for body {body!r}")
        jd_ut = julian_day(instant)
        try:
            result = swe.calc_ut(jd_ut, body_id, self.flags)
        except swe.Error as exc:
            raise EphemerisError(f"{body} at JD {jd_ut:.5f}: {exc}") from exc
        values, retflag = _split_result(result)
        if retflag is not None and retflag < 0:
            raise EphemerisError(f"{body} at JD {jd_ut:.5f}: invalid result flag {retflag}")
        return Position(name=body, longitude=float(values[0]), speed=float(values[3]))

    def house_cusps(
        self, instant: datetime, latitude: float, longitude: float, house_system: str = "P"
    ) -> HouseCusps:
        jd_ut = julian_day(instant)
        try:
            cusps, ascmc = swe.houses_ex(jd_ut, latitude, longitude, house_system_code(house_system))
        except swe.Error as exc:
            raise EphemerisError(f"house cusps at JD {jd_ut:.5f}: {exc}") from exc
        # Older builds prepend an unused slot 0.
        cusps = tuple(cusps)[-12:]
        return HouseCusps(cusps=cusps, ascendant=float(ascmc[0]), midheaven=float(ascmc[1]))
