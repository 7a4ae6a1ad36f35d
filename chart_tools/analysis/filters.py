"""Post-match filter stages.

A stage takes a match plus the two positions it was built from and returns
True to keep the match. Stages never change orbs or names.
"""

from __future__ import annotations

from typing import Callable, Iterable, List

from ..models import AspectMatch, Position
from ..zodiac import same_element, same_polarity

AspectFilter = Callable[[AspectMatch, Position, Position], bool]


def node_opposition_filter(match: AspectMatch, pos_a: Position, pos_b: Position) -> bool:
    """Drop oppositions to the North Node; the South Node conjunction covers them."""

    if match.aspect != "opposition":
        return True
    return "NNode" not in (match.body_a, match.body_b)


def compatibility_filter(match: AspectMatch, pos_a: Position, pos_b: Position) -> bool:
    """Keep only aspects whose signs agree with the aspect's nature."""

    sign_a = pos_a.sign_index
    sign_b = pos_b.sign_index
    if match.aspect == "square":
        return not same_element(sign_a, sign_b)
    if match.aspect == "trine":
        return same_element(sign_a, sign_b)
    if match.aspect == "sextile":
        return same_polarity(sign_a, sign_b)
    if match.aspect == "conjunction":
        return sign_a == sign_b
    return True


def filter_stages(suppress_node_opposition: bool = True, compatibility: bool = False) -> List[AspectFilter]:
    stages: List[AspectFilter] = []
    if suppress_node_opposition:
        stages.append(node_opposition_filter)
    if compatibility:
        stages.append(compatibility_filter)
    return stages


def passes(match: AspectMatch, pos_a: Position, pos_b: Position, stages: Iterable[AspectFilter]) -> bool:
    return all(stage(match, pos_a, pos_b) for stage in stages)
