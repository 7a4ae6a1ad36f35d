"""Sign ingresses, lunar phase changes and retrograde stations inside a time window."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Sequence

from .bodies import DEFAULT_BODIES, STATION_BODIES
from .errors import EphemerisError
from .lunar import moon_phase
from .models import EphemerisProvider, EventKind, EventRecord, SignificantEvents, to_utc
from .timing import DEFAULT_PRECISION, find_exact_moment, find_solar_return

logger = logging.getLogger(__name__)

# Lilith's mean apogee is a point, not a body worth reporting ingresses for.
SIGN_CHANGE_EXCLUDED = frozenset({"Lilith"})


def _direction(speed: float) -> str:
    return "retrograde" if speed < 0 else "direct"


def check_sign_change(
    provider: EphemerisProvider,
    body: str,
    start: datetime,
    end: datetime,
    precision: timedelta = DEFAULT_PRECISION,
) -> EventRecord | None:
    """Return the ingress of ``body`` between start and end, if its sign differs at the two ends."""

    start_sign = provider.position(start, body).sign
    end_sign = provider.position(end, body).sign
    if start_sign == end_sign:
        return None
    moment = find_exact_moment(
        start, end, lambda t: provider.position(t, body).sign == end_sign, precision
    )
    return EventRecord(EventKind.SIGN_CHANGE, body, start_sign, end_sign, moment)


def check_moon_phase_change(
    start: datetime,
    end: datetime,
    precision: timedelta = DEFAULT_PRECISION,
) -> EventRecord | None:
    start_phase = moon_phase(start).name
    end_phase = moon_phase(end).name
    if start_phase == end_phase:
        return None
    moment = find_exact_moment(start, end, lambda t: moon_phase(t).name == end_phase, precision)
    return EventRecord(EventKind.PHASE_CHANGE, "Moon", start_phase, end_phase, moment)


def check_retrograde_change(
    provider: EphemerisProvider,
    body: str,
    start: datetime,
    end: datetime,
    precision: timedelta = DEFAULT_PRECISION,
) -> EventRecord | None:
    """Return the station of ``body`` between start and end; to_state is ``retrograde`` or ``direct``."""

    start_state = _direction(provider.position(start, body).speed)
    end_state = _direction(provider.position(end, body).speed)
    if start_state == end_state:
        return None
    moment = find_exact_moment(
        start, end, lambda t: _direction(provider.position(t, body).speed) == end_state, precision
    )
    return EventRecord(EventKind.RETROGRADE_STATION, body, start_state, end_state, moment)


def find_significant_events(
    provider: EphemerisProvider,
    start: datetime,
    end: datetime,
    bodies: Sequence[str] = DEFAULT_BODIES,
    precision: timedelta = DEFAULT_PRECISION,
) -> SignificantEvents:
    """
    Collect ingresses, the lunar phase change and stations between two instants.

    A body whose positions cannot be fetched is logged, listed in
    ``failed_bodies`` and skipped; the other bodies are still searched.
    """

    start, end = to_utc(start), to_utc(end)
    events = SignificantEvents()

    for body in bodies:
        if body in SIGN_CHANGE_EXCLUDED:
            continue
        try:
            record = check_sign_change(provider, body, start, end, precision)
        except EphemerisError as exc:
            logger.warning("Skipping ingress search for %s: %s", body, exc)
            events.failed_bodies.append(body)
            continue
        if record is not None:
            events.sign_changes.append(record)

    phase = check_moon_phase_change(start, end, precision)
    if phase is not None:
        events.phase_changes.append(phase)

    for body in STATION_BODIES:
        if body not in bodies or body in events.failed_bodies:
            continue
        try:
            record = check_retrograde_change(provider, body, start, end, precision)
        except EphemerisError as exc:
            logger.warning("Skipping station search for %s: %s", body, exc)
            events.failed_bodies.append(body)
            continue
        if record is not None:
            events.retrograde_changes.append(record)

    return events


def solar_return_event(
    provider: EphemerisProvider,
    natal_longitude: float,
    birth: datetime,
    year: int,
) -> EventRecord:
    solution = find_solar_return(provider, natal_longitude, birth, year)
    return EventRecord(
        EventKind.SOLAR_RETURN,
        "Sun",
        f"{to_utc(birth).year}",
        f"{year}",
        solution.moment,
    )
