"""Mean lunar phase from the time elapsed since a reference new moon."""

from __future__ import annotations

from datetime import datetime

from .models import MoonPhase, to_utc

SYNODIC_MONTH = 29.53058867
# New moon of 6 January 2000, 18:14 UT (rounded to 0h).
NEW_MOON_EPOCH_JD = 2451549.5
UNIX_EPOCH_JD = 2440587.5

# Upper age bound (days) of each named phase, in order.
PHASE_BOUNDARIES = (
    (1.84566, "New Moon"),
    (5.53699, "Waxing Crescent"),
    (9.22831, "First Quarter"),
    (12.91963, "Waxing Gibbous"),
    (16.61096, "Full Moon"),
    (20.30228, "Waning Gibbous"),
    (23.99361, "Last Quarter"),
)
LAST_PHASE = "Waning Crescent"

PHASE_NAMES = [name for _, name in PHASE_BOUNDARIES] + [LAST_PHASE]


def julian_day_from_unix(instant: datetime) -> float:
    return to_utc(instant).timestamp() / 86400.0 + UNIX_EPOCH_JD


def moon_age(instant: datetime) -> float:
    """Days since the last mean new moon, in [0, SYNODIC_MONTH)."""

    return (julian_day_from_unix(instant) - NEW_MOON_EPOCH_JD) % SYNODIC_MONTH


def phase_for_age(age_days: float) -> str:
    for bound, name in PHASE_BOUNDARIES:
        if age_days < bound:
            return name
    return LAST_PHASE


def moon_phase(instant: datetime) -> MoonPhase:
    age = moon_age(instant)
    return MoonPhase(name=phase_for_age(age), age_days=age)
