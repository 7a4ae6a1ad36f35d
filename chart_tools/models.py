"""Dataclasses shared by the aspect, house and event computations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from .errors import InvalidInputError
from .geometry import degree_in_sign, ensure_finite, normalize_longitude, sign_index, sign_name


def to_utc(instant: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""

    if not isinstance(instant, datetime):
        raise InvalidInputError(f"expected a datetime, got {instant!r}")
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


@dataclass(frozen=True)
class Position:
    """Longitude and signed daily speed of one body at one instant."""

    name: str
    longitude: float
    speed: float = 0.0
    house: int | None = None

    def __post_init__(self) -> None:
        ensure_finite(self.longitude, self.speed)
        object.__setattr__(self, "longitude", normalize_longitude(self.longitude))
        object.__setattr__(self, "speed", float(self.speed))

    @property
    def sign(self) -> str:
        return sign_name(self.longitude)

    @property
    def sign_index(self) -> int:
        return sign_index(self.longitude)

    @property
    def degree_in_sign(self) -> float:
        return degree_in_sign(self.longitude)

    @property
    def retrograde(self) -> bool:
        return self.speed < 0


@dataclass(frozen=True)
class HouseCusps:
    """Twelve cusp longitudes (index = house - 1) with Ascendant and Midheaven."""

    cusps: Tuple[float, ...]
    ascendant: float
    midheaven: float

    def __post_init__(self) -> None:
        cusps = tuple(self.cusps)
        if len(cusps) != 12:
            raise InvalidInputError(f"expected 12 house cusps, got {len(cusps)}")
        object.__setattr__(self, "cusps", tuple(normalize_longitude(c) for c in cusps))
        object.__setattr__(self, "ascendant", normalize_longitude(self.ascendant))
        object.__setattr__(self, "midheaven", normalize_longitude(self.midheaven))

    @property
    def descendant(self) -> float:
        return (self.ascendant + 180.0) % 360.0

    @property
    def imum_coeli(self) -> float:
        return (self.midheaven + 180.0) % 360.0

    def angles(self) -> Dict[str, float]:
        return {
            "AS": self.ascendant,
            "MC": self.midheaven,
            "DS": self.descendant,
            "IC": self.imum_coeli,
        }


class EphemerisProvider(Protocol):
    """Source of positions and house cusps; ``astro_engine.SwissEphemeris`` is the stock one."""

    def position(self, instant: datetime, body: str) -> Position:
        ...

    def house_cusps(
        self, instant: datetime, latitude: float, longitude: float, house_system: str = "P"
    ) -> HouseCusps:
        ...


@dataclass(frozen=True)
class BodyOrbs:
    major: float
    minor: float


@dataclass(frozen=True)
class AspectDefinition:
    name: str
    angle: float
    major: bool = True


@dataclass(frozen=True)
class AspectHit:
    """Catalog entry matched by two longitudes, before any pair context is attached."""

    definition: AspectDefinition
    angle: float  # actual separation, 0-180
    orb: float  # |angle - definition.angle|
    allowed_orb: float


@dataclass(frozen=True)
class AspectMatch:
    """Aspect from body_a to body_b."""

    body_a: str
    body_b: str
    aspect: str
    target_angle: float
    orb: float
    allowed_orb: float
    applying: bool
    peak_moment: datetime | None = None

    @property
    def separating(self) -> bool:
        return not self.applying

    @property
    def exactness(self) -> float:
        """Percentage of the allowed orb still unused (100 = exact)."""

        if self.allowed_orb <= 0:
            return 100.0
        return (self.allowed_orb - self.orb) / self.allowed_orb * 100.0


@dataclass
class AspectSummary:
    total: int = 0
    applying: int = 0
    separating: int = 0
    exact: int = 0
    by_aspect: Dict[str, int] = field(default_factory=dict)
    by_body_a: Dict[str, int] = field(default_factory=dict)
    by_body_b: Dict[str, int] = field(default_factory=dict)


@dataclass
class AspectSet:
    """Aspects sorted tightest first, with their summary counts."""

    aspects: List[AspectMatch]
    summary: AspectSummary


class EventKind(str, Enum):
    SIGN_CHANGE = "sign-change"
    PHASE_CHANGE = "phase-change"
    RETROGRADE_STATION = "retrograde-station"
    SOLAR_RETURN = "solar-return"


@dataclass(frozen=True)
class EventRecord:
    """A change of state located in time; exact_moment is None when no root was bracketed."""

    kind: EventKind
    body: str
    from_state: str
    to_state: str
    exact_moment: datetime | None


@dataclass
class SignificantEvents:
    sign_changes: List[EventRecord] = field(default_factory=list)
    phase_changes: List[EventRecord] = field(default_factory=list)
    retrograde_changes: List[EventRecord] = field(default_factory=list)
    failed_bodies: List[str] = field(default_factory=list)

    def all(self) -> List[EventRecord]:
        return [*self.sign_changes, *self.phase_changes, *self.retrograde_changes]


@dataclass(frozen=True)
class MoonPhase:
    name: str
    age_days: float


@dataclass(frozen=True)
class ReturnSolution:
    """Outcome of a return-to-longitude solve.

    ``moment`` is None only when the body was stationary and no step could be taken.
    ``residual`` is the remaining |longitude - target| at ``moment`` in degrees.
    """

    moment: datetime | None
    residual: float
    iterations: int
    converged: bool


@dataclass
class ChartInput:
    """Birth (or event) data for one chart."""

    name: str
    datetime_utc: datetime
    latitude: float
    longitude: float
    house_system: str = "P"

    def __post_init__(self) -> None:
        self.datetime_utc = to_utc(self.datetime_utc)
        ensure_finite(self.latitude, self.longitude)


def angle_points(houses: HouseCusps) -> List[Position]:
    """Ascendant and Midheaven as aspectable points (speed 0)."""

    return [Position("AS", houses.ascendant), Position("MC", houses.midheaven)]


@dataclass
class Chart:
    input: ChartInput
    positions: Dict[str, Position]
    houses: HouseCusps
    aspects: AspectSet

    @property
    def points(self) -> List[Position]:
        """Bodies followed by the Ascendant and Midheaven, as aspectable points."""

        return [*self.positions.values(), *angle_points(self.houses)]


class HouseMethod(str, Enum):
    NATAL = "natal"
    SECONDARY = "secondary"
    SOLAR_ARC = "solar_arc"


@dataclass
class ProgressedChart:
    age_years: float
    progressed_instant: datetime
    house_method: HouseMethod
    positions: Dict[str, Position]
    houses: HouseCusps
    to_natal: AspectSet
    to_progressed: AspectSet


@dataclass
class SolarReturnChart:
    year: int
    natal_sun_longitude: float
    solution: ReturnSolution
    chart: Chart


@dataclass
class PeriodDay:
    """One step of a transit sweep."""

    instant: datetime
    positions: Dict[str, Position]
    aspects: AspectSet
    moon_phase: MoonPhase
    events: Optional[SignificantEvents] = None
