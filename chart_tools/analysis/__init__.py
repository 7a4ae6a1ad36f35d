from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, Iterator, List, Mapping, Sequence, Tuple, Union

from ..bodies import ANGLE_NAMES, OUTER_PLANETS
from ..models import AspectDefinition, AspectMatch, AspectSet, AspectSummary, Position
from ..orbs import TRANSIT_ORBS, OrbPolicy
from ..timing import PEAK_HORIZON_DAYS, estimate_peak
from .aspects import ASPECT_CATALOG, MatchStrategy, find_aspect, match_strategy
from .filters import filter_stages, passes
from .motion import DAILY_STEP, HOURLY_STEP, is_applying, is_mutually_applying

# Orbs below this count as exact in summaries.
EXACT_ORB = 0.5

PositionSet = Union[Mapping[str, Position], Sequence[Position]]


def _as_list(positions: PositionSet) -> List[Position]:
    if isinstance(positions, Mapping):
        return list(positions.values())
    return list(positions)


def _pairs(
    set_a: List[Position], set_b: List[Position] | None, skip_same_name: bool
) -> Iterator[Tuple[Position, Position]]:
    if set_b is None:
        # One chart: each unordered pair once; angles only pair with bodies.
        for idx, pos_a in enumerate(set_a):
            for pos_b in set_a[idx + 1 :]:
                if pos_a.name in ANGLE_NAMES and pos_b.name in ANGLE_NAMES:
                    continue
                yield pos_a, pos_b
        return

    for pos_a in set_a:
        for pos_b in set_b:
            if skip_same_name and pos_a.name == pos_b.name and pos_b.name not in ANGLE_NAMES:
                continue
            yield pos_a, pos_b


def summarize(aspects: Iterable[AspectMatch]) -> AspectSummary:
    aspects = list(aspects)
    applying = sum(1 for a in aspects if a.applying)
    return AspectSummary(
        total=len(aspects),
        applying=applying,
        separating=len(aspects) - applying,
        exact=sum(1 for a in aspects if a.orb < EXACT_ORB),
        by_aspect=dict(Counter(a.aspect for a in aspects)),
        by_body_a=dict(Counter(a.body_a for a in aspects)),
        by_body_b=dict(Counter(a.body_b for a in aspects)),
    )


def build_aspects(
    set_a: PositionSet,
    set_b: PositionSet | None = None,
    *,
    transit_like: bool = False,
    orbs: OrbPolicy = TRANSIT_ORBS,
    strategy: MatchStrategy | str = MatchStrategy.FIRST,
    catalog: Sequence[AspectDefinition] = ASPECT_CATALOG,
    as_of: datetime | None = None,
    step_days: float | None = None,
    skip_same_name: bool = False,
    suppress_node_opposition: bool = True,
    compatibility: bool = False,
    peak_horizon_days: float = PEAK_HORIZON_DAYS,
) -> AspectSet:
    """
    Match every body pair between two position sets.

    - ``set_b`` None (or the same object as ``set_a``) means aspects within one chart.
    - Orbs come from the table entry of the set-A body.
    - Transit-like sets move body A against a fixed body B, one day ahead by
      default, and carry a peak estimate when ``as_of`` is given. Otherwise
      both bodies advance by an hour.
    - Filters run after matching: the North Node opposition rule, then the
      sign compatibility rule when ``compatibility`` is set.
    - Aspects are returned tightest first; equal orbs keep their pair order.
    """

    strategy = match_strategy(strategy)
    list_a = _as_list(set_a)
    list_b = None if set_b is None or set_b is set_a else _as_list(set_b)
    if step_days is None:
        step_days = DAILY_STEP if transit_like else HOURLY_STEP
    stages = filter_stages(suppress_node_opposition, compatibility)

    matches: List[AspectMatch] = []
    for pos_a, pos_b in _pairs(list_a, list_b, skip_same_name):
        hit = find_aspect(pos_a.longitude, pos_b.longitude, pos_a.name, orbs, strategy, catalog)
        if hit is None:
            continue
        target = hit.definition.angle
        if transit_like:
            applying = is_applying(pos_a, pos_b, target, step_days)
        else:
            applying = is_mutually_applying(pos_a, pos_b, target, step_days)
        peak = None
        if transit_like and as_of is not None:
            peak = estimate_peak(pos_a, pos_b, target, as_of, peak_horizon_days)

        match = AspectMatch(
            body_a=pos_a.name,
            body_b=pos_b.name,
            aspect=hit.definition.name,
            target_angle=target,
            orb=hit.orb,
            allowed_orb=hit.allowed_orb,
            applying=applying,
            peak_moment=peak,
        )
        if passes(match, pos_a, pos_b, stages):
            matches.append(match)

    matches.sort(key=lambda m: m.orb)
    return AspectSet(aspects=matches, summary=summarize(matches))


def tight_aspects(aspect_set: AspectSet, max_orb: float, strict: bool = False) -> AspectSet:
    """Keep aspects within ``max_orb`` (below it when ``strict``)."""

    if strict:
        kept = [a for a in aspect_set.aspects if a.orb < max_orb]
    else:
        kept = [a for a in aspect_set.aspects if a.orb <= max_orb]
    return AspectSet(aspects=kept, summary=summarize(kept))


def major_transits(aspect_set: AspectSet, max_orb: float = 2.0) -> AspectSet:
    """Aspects from the slow outer planets, within ``max_orb``."""

    major = {d.name for d in ASPECT_CATALOG}
    kept = [
        a
        for a in aspect_set.aspects
        if a.body_a in OUTER_PLANETS and a.aspect in major and a.orb <= max_orb
    ]
    return AspectSet(aspects=kept, summary=summarize(kept))


__all__ = [
    "EXACT_ORB",
    "build_aspects",
    "major_transits",
    "summarize",
    "tight_aspects",
]
