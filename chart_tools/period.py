"""Day-by-day transit sweeps over a date range."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Sequence

from .analysis import EXACT_ORB, tight_aspects
from .analysis.houses import annotate_houses
from .bodies import DEFAULT_BODIES
from .charts import compute_positions, transits_to_natal
from .errors import InvalidInputError
from .events import find_significant_events
from .lunar import moon_phase
from .models import Chart, EphemerisProvider, PeriodDay, to_utc
from .orbs import TRANSIT_ORBS, OrbPolicy

DEFAULT_STEP = timedelta(days=1)


def daterange(start: datetime, end: datetime, step: timedelta = DEFAULT_STEP):
    current = start
    while current <= end:
        yield current
        current += step


def scan_period(
    provider: EphemerisProvider,
    natal: Chart,
    start: datetime,
    end: datetime,
    step: timedelta = DEFAULT_STEP,
    max_orb: float = 1.0,
    strict: bool = False,
    bodies: Sequence[str] = DEFAULT_BODIES,
    orbs: OrbPolicy = TRANSIT_ORBS,
    with_events: bool = True,
) -> List[PeriodDay]:
    """
    Sample the sky every ``step`` from start to end (inclusive).

    Each day keeps the transit aspects to ``natal`` within ``max_orb``, the
    lunar phase, and the events found between that sample and the next.
    Days share no state.
    """

    start, end = to_utc(start), to_utc(end)
    if end < start:
        raise InvalidInputError("end must not be before start")
    if step <= timedelta(0):
        raise InvalidInputError("step must be positive")

    days: List[PeriodDay] = []
    for instant in daterange(start, end, step):
        positions = annotate_houses(compute_positions(provider, instant, bodies), natal.houses)
        aspects = tight_aspects(transits_to_natal(natal, positions, instant, orbs), max_orb, strict)
        events = find_significant_events(provider, instant, instant + step, bodies) if with_events else None
        days.append(
            PeriodDay(
                instant=instant,
                positions=positions,
                aspects=aspects,
                moon_phase=moon_phase(instant),
                events=events,
            )
        )
    return days


def upcoming_transits(
    provider: EphemerisProvider,
    natal: Chart,
    as_of: datetime,
    days: int = 30,
    bodies: Sequence[str] = DEFAULT_BODIES,
) -> List[PeriodDay]:
    """Near-exact transits (orb below 0.5°) and events for the next ``days`` days."""

    if days < 1:
        raise InvalidInputError("days must be at least 1")
    start = to_utc(as_of)
    end = start + timedelta(days=days - 1)
    return scan_period(provider, natal, start, end, max_orb=EXACT_ORB, strict=True, bodies=bodies)
