"""Assemble natal, transit, synastry, progressed and solar-return charts from a provider."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, Iterable, Mapping, Sequence, Tuple

from .analysis import build_aspects
from .analysis.aspects import MatchStrategy
from .analysis.houses import annotate_houses, rotate_cusps
from .bodies import DEFAULT_BODIES
from .errors import ChartToolsError, EphemerisError, InvalidInputError
from .geometry import normalize_longitude
from .models import (
    AspectSet,
    Chart,
    ChartInput,
    EphemerisProvider,
    HouseCusps,
    HouseMethod,
    Position,
    ProgressedChart,
    SolarReturnChart,
    angle_points,
    to_utc,
)
from .orbs import NATAL_ORBS, PROGRESSED_ORBS, TRANSIT_ORBS, OrbPolicy
from .timing import PEAK_HORIZON_DAYS, find_solar_return

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25


def south_node(north_node: Position) -> Position:
    return Position("SNode", (north_node.longitude + 180.0) % 360.0, north_node.speed)


def compute_positions(
    provider: EphemerisProvider,
    instant: datetime,
    bodies: Iterable[str] = DEFAULT_BODIES,
    include_south_node: bool = True,
) -> Dict[str, Position]:
    """
    Fetch one position per body; a body the provider cannot compute is skipped.

    The South Node is derived from the North Node rather than requested.
    """

    instant = to_utc(instant)
    positions: Dict[str, Position] = {}
    for body in bodies:
        if body == "SNode":
            continue
        try:
            positions[body] = provider.position(instant, body)
        except EphemerisError as exc:
            logger.warning("Skipping %s at %s: %s", body, instant.isoformat(), exc)
    if include_south_node and "NNode" in positions:
        positions["SNode"] = south_node(positions["NNode"])
    return positions


def compute_house_cusps(
    provider: EphemerisProvider,
    instant: datetime,
    latitude: float,
    longitude: float,
    house_system: str = "P",
) -> HouseCusps:
    return provider.house_cusps(to_utc(instant), latitude, longitude, house_system)


def _chart_points(
    provider: EphemerisProvider, chart: ChartInput, bodies: Iterable[str]
) -> Tuple[Dict[str, Position], HouseCusps]:
    houses = compute_house_cusps(
        provider, chart.datetime_utc, chart.latitude, chart.longitude, chart.house_system
    )
    positions = annotate_houses(compute_positions(provider, chart.datetime_utc, bodies), houses)
    return positions, houses


def natal_chart(
    provider: EphemerisProvider,
    chart: ChartInput,
    bodies: Sequence[str] = DEFAULT_BODIES,
    orbs: OrbPolicy = NATAL_ORBS,
    strategy: MatchStrategy | str = MatchStrategy.FIRST,
    compatibility: bool = False,
) -> Chart:
    positions, houses = _chart_points(provider, chart, bodies)
    aspects = build_aspects(
        [*positions.values(), *angle_points(houses)],
        orbs=orbs,
        strategy=strategy,
        compatibility=compatibility,
    )
    return Chart(input=chart, positions=positions, houses=houses, aspects=aspects)


def transits_to_natal(
    natal: Chart,
    transit_positions: Mapping[str, Position],
    as_of: datetime,
    orbs: OrbPolicy = TRANSIT_ORBS,
    peak_horizon_days: float = PEAK_HORIZON_DAYS,
) -> AspectSet:
    return build_aspects(
        transit_positions,
        natal.points,
        transit_like=True,
        orbs=orbs,
        as_of=as_of,
        peak_horizon_days=peak_horizon_days,
    )


def transit_aspects(
    provider: EphemerisProvider,
    natal: Chart,
    instant: datetime,
    bodies: Sequence[str] = DEFAULT_BODIES,
    orbs: OrbPolicy = TRANSIT_ORBS,
    peak_horizon_days: float = PEAK_HORIZON_DAYS,
) -> AspectSet:
    """Aspects from the sky at ``instant`` to a natal chart, with peak estimates."""

    positions = annotate_houses(compute_positions(provider, instant, bodies), natal.houses)
    return transits_to_natal(natal, positions, to_utc(instant), orbs, peak_horizon_days)


def synastry_aspects(chart_a: Chart, chart_b: Chart, orbs: OrbPolicy = TRANSIT_ORBS) -> AspectSet:
    return build_aspects(chart_a.points, chart_b.points, transit_like=True, orbs=orbs)


def progression_age(birth: datetime, target: datetime) -> float:
    """Age in years at ``target``; one year of life maps to one day after birth."""

    return (to_utc(target) - to_utc(birth)) / timedelta(days=1) / DAYS_PER_YEAR


def progressed_moment(birth: datetime, target: datetime) -> datetime:
    return to_utc(birth) + timedelta(days=progression_age(birth, target))


def _house_method(value: HouseMethod | str) -> HouseMethod:
    try:
        return HouseMethod(value)
    except ValueError:
        raise InvalidInputError(f"unknown house method: {value!r}") from None


def progressed_chart(
    provider: EphemerisProvider,
    natal_input: ChartInput,
    target: datetime,
    house_method: HouseMethod | str = HouseMethod.SECONDARY,
    bodies: Sequence[str] = DEFAULT_BODIES,
    orbs: OrbPolicy = PROGRESSED_ORBS,
) -> ProgressedChart:
    """
    Secondary progression of ``natal_input`` for the date ``target``.

    House methods:
      - natal: keep the birth cusps
      - secondary: cusps cast for the progressed instant at the birth place
      - solar_arc: birth cusps advanced by the progressed Sun's arc
    """

    method = _house_method(house_method)
    age = progression_age(natal_input.datetime_utc, target)
    moment = progressed_moment(natal_input.datetime_utc, target)

    natal_positions, natal_houses = _chart_points(provider, natal_input, bodies)
    progressed = compute_positions(provider, moment, bodies)

    if method is HouseMethod.NATAL:
        houses = natal_houses
    elif method is HouseMethod.SECONDARY:
        houses = compute_house_cusps(
            provider, moment, natal_input.latitude, natal_input.longitude, natal_input.house_system
        )
    else:
        if "Sun" not in progressed or "Sun" not in natal_positions:
            raise EphemerisError("solar arc needs both the natal and the progressed Sun")
        arc = normalize_longitude(progressed["Sun"].longitude - natal_positions["Sun"].longitude)
        houses = rotate_cusps(natal_houses, arc)

    progressed = annotate_houses(progressed, houses)
    # Progressed planets never pair with their own natal place; natal angles still count.
    to_natal = build_aspects(
        progressed,
        [*natal_positions.values(), *angle_points(natal_houses)],
        transit_like=True,
        orbs=orbs,
        skip_same_name=True,
    )
    to_progressed = build_aspects(progressed, orbs=orbs)
    return ProgressedChart(
        age_years=age,
        progressed_instant=moment,
        house_method=method,
        positions=progressed,
        houses=houses,
        to_natal=to_natal,
        to_progressed=to_progressed,
    )


def solar_return_chart(
    provider: EphemerisProvider,
    natal_input: ChartInput,
    year: int,
    latitude: float | None = None,
    longitude: float | None = None,
    bodies: Sequence[str] = DEFAULT_BODIES,
) -> SolarReturnChart:
    """Chart cast for the moment the Sun returns to its birth longitude in ``year``.

    The location defaults to the birth place.
    """

    natal_sun = provider.position(natal_input.datetime_utc, "Sun").longitude
    solution = find_solar_return(provider, natal_sun, natal_input.datetime_utc, year)
    if solution.moment is None:
        raise ChartToolsError(f"solar return for {year} could not be solved")
    if not solution.converged:
        logger.warning(
            "Solar return for %d did not converge; residual %.2e°", year, solution.residual
        )

    chart_input = replace(
        natal_input,
        name=f"{natal_input.name} solar return {year}",
        datetime_utc=solution.moment,
        latitude=natal_input.latitude if latitude is None else latitude,
        longitude=natal_input.longitude if longitude is None else longitude,
    )
    return SolarReturnChart(
        year=year,
        natal_sun_longitude=natal_sun,
        solution=solution,
        chart=natal_chart(provider, chart_input, bodies),
    )
