from __future__ import annotations

from ..geometry import angle_between, normalize_longitude
from ..models import Position

DAILY_STEP = 1.0
HOURLY_STEP = 1.0 / 24.0

# Threshold for considering a body stationary by daily speed in longitude.
STATION_THRESHOLD = 0.02


def project(position: Position, step_days: float) -> float:
    """Longitude after ``step_days`` at the body's current signed speed."""

    return normalize_longitude(position.longitude + position.speed * step_days)


def is_applying(
    moving: Position,
    fixed: Position | float,
    target_angle: float,
    step_days: float = DAILY_STEP,
) -> bool:
    """
    True when moving ``moving`` forward brings the pair closer to ``target_angle``.

    The partner is held at its current longitude. A retrograde body projects
    backwards through its negative speed, so the answer reverses by itself.
    """

    fixed_lon = fixed.longitude if isinstance(fixed, Position) else fixed
    current = angle_between(moving.longitude, fixed_lon)
    future = angle_between(project(moving, step_days), fixed_lon)
    return abs(future - target_angle) < abs(current - target_angle)


def is_mutually_applying(
    pos_a: Position,
    pos_b: Position,
    target_angle: float,
    step_days: float = HOURLY_STEP,
) -> bool:
    """Variant for two bodies of the same chart: both advance by their own speeds."""

    current = angle_between(pos_a.longitude, pos_b.longitude)
    future = angle_between(project(pos_a, step_days), project(pos_b, step_days))
    return abs(future - target_angle) < abs(current - target_angle)


def motion_flags(speed_long: float) -> tuple[bool, bool, bool]:
    is_direct = speed_long > 0
    is_retro = speed_long < 0
    is_station = abs(speed_long) < STATION_THRESHOLD
    return is_direct, is_retro, is_station


def motion_label(speed_long: float) -> str:
    _, is_retro, is_station = motion_flags(speed_long)
    if is_station:
        return "stationary"
    return "retrograde" if is_retro else "direct"
