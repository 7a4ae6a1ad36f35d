"""Aspects, house placements and timed events for natal, transit, progressed and paired charts."""

from .analysis import build_aspects, major_transits, tight_aspects
from .analysis.aspects import ASPECT_CATALOG, MatchStrategy, find_aspect
from .analysis.houses import house_of
from .analysis.motion import is_applying
from .astro_engine import SwissEphemeris, set_ephe_path
from .charts import natal_chart, progressed_chart, solar_return_chart, synastry_aspects, transit_aspects
from .errors import ChartToolsError, EphemerisError, InvalidInputError
from .events import find_significant_events
from .geometry import angle_between, normalize_longitude
from .lunar import moon_phase
from .models import AspectMatch, AspectSet, ChartInput, EventRecord, HouseCusps, Position
from .orbs import NATAL_ORBS, PROGRESSED_ORBS, TRANSIT_ORBS, OrbPolicy
from .period import scan_period, upcoming_transits
from .timing import estimate_peak, find_exact_moment, find_solar_return_moment, solve_return

__all__ = [
    "ASPECT_CATALOG",
    "AspectMatch",
    "AspectSet",
    "ChartInput",
    "ChartToolsError",
    "EphemerisError",
    "EventRecord",
    "HouseCusps",
    "InvalidInputError",
    "MatchStrategy",
    "NATAL_ORBS",
    "OrbPolicy",
    "PROGRESSED_ORBS",
    "Position",
    "SwissEphemeris",
    "TRANSIT_ORBS",
    "angle_between",
    "build_aspects",
    "estimate_peak",
    "find_aspect",
    "find_exact_moment",
    "find_significant_events",
    "find_solar_return_moment",
    "house_of",
    "is_applying",
    "major_transits",
    "moon_phase",
    "natal_chart",
    "normalize_longitude",
    "progressed_chart",
    "scan_period",
    "set_ephe_path",
    "solar_return_chart",
    "solve_return",
    "synastry_aspects",
    "tight_aspects",
    "transit_aspects",
    "upcoming_transits",
]
