"""Locating when things happen: peak estimates, bisection and return solving."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Tuple

from .errors import InvalidInputError
from .geometry import ensure_finite, signed_difference
from .models import EphemerisProvider, Position, ReturnSolution, to_utc

logger = logging.getLogger(__name__)

# Below this daily speed a body is treated as stationary: no ETA, no Newton step.
STATIONARY_SPEED = 0.001

PEAK_HORIZON_DAYS = 365.0
LONG_PEAK_HORIZON_DAYS = 365.0 * 5

DEFAULT_PRECISION = timedelta(minutes=1)
MAX_BISECTIONS = 64

RETURN_TOLERANCE = 1e-5
MAX_RETURN_ITERATIONS = 20


def estimate_peak(
    moving: Position,
    fixed: Position | float,
    target_angle: float,
    as_of: datetime,
    horizon_days: float = PEAK_HORIZON_DAYS,
) -> datetime | None:
    """
    Linear estimate of when ``moving`` perfects ``target_angle`` to ``fixed``.

    One extrapolation from the current signed separation and speed, not a
    solve. Returns None for a stationary body or an ETA beyond
    ``horizon_days`` in either direction. Past estimates are allowed.
    """

    if abs(moving.speed) < STATIONARY_SPEED:
        return None
    fixed_lon = fixed.longitude if isinstance(fixed, Position) else fixed
    separation = signed_difference(moving.longitude, fixed_lon)
    # Aim for the side of the partner the body is already on.
    target = target_angle if separation >= 0 else -target_angle
    days_to_exact = signed_difference(target, separation) / moving.speed
    if abs(days_to_exact) > horizon_days:
        return None
    return to_utc(as_of) + timedelta(days=days_to_exact)


def find_exact_moment(
    start: datetime,
    end: datetime,
    predicate: Callable[[datetime], bool],
    precision: timedelta = DEFAULT_PRECISION,
) -> datetime | None:
    """
    Bisect [start, end] for the instant ``predicate`` turns true.

    The predicate is expected to be false at ``start`` and to switch to true
    once before ``end``. Returns ``start`` if it already holds there and None
    if it does not hold at ``end``; nothing past ``end`` is searched. Otherwise
    the first sampled instant where it holds, within ``precision`` of the crossing.
    """

    start, end = to_utc(start), to_utc(end)
    if end < start:
        raise InvalidInputError("end must not be before start")
    if precision <= timedelta(0):
        raise InvalidInputError("precision must be positive")

    if predicate(start):
        return start
    if not predicate(end):
        return None

    lo, hi = start, end
    for _ in range(MAX_BISECTIONS):
        if hi - lo <= precision:
            break
        mid = lo + (hi - lo) / 2
        if predicate(mid):
            hi = mid
        else:
            lo = mid
    return hi


def solve_return(
    sample: Callable[[datetime], Tuple[float, float]],
    target_longitude: float,
    initial_guess: datetime,
    tolerance: float = RETURN_TOLERANCE,
    max_iterations: int = MAX_RETURN_ITERATIONS,
) -> ReturnSolution:
    """
    Newton iteration for the moment a body comes back to ``target_longitude``.

    ``sample`` returns (longitude, speed in °/day) at an instant; the speed is
    the local derivative. On hitting the iteration cap the last sampled estimate
    is returned with ``converged=False`` and its residual.
    """

    ensure_finite(target_longitude)
    estimate = to_utc(initial_guess)
    residual = float("inf")
    for iteration in range(1, max_iterations + 1):
        longitude, speed = sample(estimate)
        diff = signed_difference(target_longitude, longitude)
        residual = abs(diff)
        if residual < tolerance:
            return ReturnSolution(moment=estimate, residual=residual, iterations=iteration, converged=True)
        if abs(speed) < STATIONARY_SPEED:
            logger.debug("Return solve stopped at %s: body stationary (speed %.6f)", estimate.isoformat(), speed)
            return ReturnSolution(moment=None, residual=residual, iterations=iteration, converged=False)
        if iteration == max_iterations:
            break
        estimate = estimate + timedelta(days=diff / speed)

    logger.debug(
        "Return solve did not converge after %d iterations (residual %.2e°)", max_iterations, residual
    )
    return ReturnSolution(moment=estimate, residual=residual, iterations=max_iterations, converged=False)


def solar_return_guess(birth: datetime, year: int) -> datetime:
    """Birth's UTC month, day and time moved to ``year``; 29 February falls back to the 28th."""

    birth = to_utc(birth)
    try:
        return birth.replace(year=year)
    except ValueError:
        return birth.replace(year=year, day=28)


def find_solar_return(
    provider: EphemerisProvider,
    natal_longitude: float,
    birth: datetime,
    year: int,
    body: str = "Sun",
) -> ReturnSolution:
    def sample(instant: datetime) -> Tuple[float, float]:
        pos = provider.position(instant, body)
        return pos.longitude, pos.speed

    return solve_return(sample, natal_longitude, solar_return_guess(birth, year))


def find_solar_return_moment(
    provider: EphemerisProvider,
    natal_longitude: float,
    birth: datetime,
    year: int,
    body: str = "Sun",
) -> datetime | None:
    return find_solar_return(provider, natal_longitude, birth, year, body).moment
