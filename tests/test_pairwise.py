import unittest
from datetime import datetime, timedelta, timezone

from chart_tools.analysis import build_aspects, major_transits, tight_aspects
from chart_tools.analysis.filters import compatibility_filter, node_opposition_filter
from chart_tools.errors import InvalidInputError
from chart_tools.models import AspectMatch, Position
from chart_tools.orbs import NATAL_ORBS

AS_OF = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _make_pos(name: str, lon: float, speed: float = 0.0) -> Position:
    return Position(name=name, longitude=lon, speed=speed)


def _pair(aspects, body_a, body_b):
    return next(a for a in aspects if a.body_a == body_a and a.body_b == body_b)


def _match(aspect: str, body_a: str = "Sun", body_b: str = "Moon") -> AspectMatch:
    return AspectMatch(body_a, body_b, aspect, 0.0, 1.0, 8.0, applying=True)


class TransitSetTest(unittest.TestCase):
    def setUp(self) -> None:
        self.transits = [
            _make_pos("Saturn", 91.0, 0.05),
            _make_pos("Sun", 179.6, 0.2),
            _make_pos("Mars", 60.9, 0.5),
        ]
        self.natal = [_make_pos("Venus", 0.0)]

    def test_sorted_by_orb_with_summary(self) -> None:
        result = build_aspects(self.transits, self.natal, transit_like=True)

        self.assertEqual(["Sun", "Mars", "Saturn"], [a.body_a for a in result.aspects])
        self.assertEqual(["opposition", "sextile", "square"], [a.aspect for a in result.aspects])
        self.assertAlmostEqual(0.4, result.aspects[0].orb)

        summary = result.summary
        self.assertEqual(3, summary.total)
        self.assertEqual(1, summary.applying)
        self.assertEqual(2, summary.separating)
        self.assertEqual(1, summary.exact)
        self.assertEqual({"opposition": 1, "sextile": 1, "square": 1}, summary.by_aspect)
        self.assertEqual({"Venus": 3}, summary.by_body_b)
        self.assertEqual(1, summary.by_body_a["Saturn"])

    def test_peak_estimates_only_with_as_of(self) -> None:
        without = build_aspects(self.transits, self.natal, transit_like=True)
        self.assertTrue(all(a.peak_moment is None for a in without.aspects))

        result = build_aspects(self.transits, self.natal, transit_like=True, as_of=AS_OF)
        sun = _pair(result.aspects, "Sun", "Venus")
        saturn = _pair(result.aspects, "Saturn", "Venus")
        self.assertAlmostEqual(0.0, (sun.peak_moment - (AS_OF + timedelta(days=2))).total_seconds(), delta=1)
        self.assertAlmostEqual(0.0, (saturn.peak_moment - (AS_OF - timedelta(days=20))).total_seconds(), delta=1)

    def test_ties_keep_insertion_order(self) -> None:
        natal = [_make_pos("Sun", 0.0)]
        forward = build_aspects([_make_pos("Mars", 90.0, 0.5), _make_pos("Venus", 90.0, 1.0)], natal)
        backward = build_aspects([_make_pos("Venus", 90.0, 1.0), _make_pos("Mars", 90.0, 0.5)], natal)
        self.assertEqual(["Mars", "Venus"], [a.body_a for a in forward.aspects])
        self.assertEqual(["Venus", "Mars"], [a.body_a for a in backward.aspects])

    def test_cross_sets_keep_same_name_pairs_unless_asked(self) -> None:
        moving = [_make_pos("Sun", 10.0, 1.0)]
        natal = [_make_pos("Sun", 10.0), _make_pos("AS", 10.3)]

        transit = build_aspects(moving, natal, transit_like=True)
        self.assertEqual(["Sun", "AS"], [a.body_b for a in transit.aspects])

        progressed = build_aspects(moving, natal, transit_like=True, skip_same_name=True)
        self.assertEqual(["AS"], [a.body_b for a in progressed.aspects])

    def test_outer_and_tight_selections(self) -> None:
        result = build_aspects(self.transits, self.natal, transit_like=True)
        self.assertEqual(["Saturn"], [a.body_a for a in major_transits(result).aspects])
        tight = tight_aspects(result, 0.5)
        self.assertEqual(["Sun"], [a.body_a for a in tight.aspects])
        self.assertEqual(1, tight.summary.total)


class SameChartTest(unittest.TestCase):
    def test_unique_pairs_and_no_angle_pairs(self) -> None:
        points = [
            _make_pos("Sun", 0.0, 1.0),
            _make_pos("Moon", 120.0, 13.0),
            _make_pos("AS", 240.0),
            _make_pos("MC", 150.0),
        ]
        result = build_aspects(points, orbs=NATAL_ORBS)

        pairs = {(a.body_a, a.body_b) for a in result.aspects}
        self.assertEqual({("Sun", "Moon"), ("Sun", "AS"), ("Moon", "AS")}, pairs)
        self.assertEqual(3, result.summary.total)
        self.assertTrue(all(a.aspect == "trine" for a in result.aspects))

    def test_identical_object_counts_as_one_chart(self) -> None:
        points = [_make_pos("Sun", 0.0, 1.0), _make_pos("Moon", 90.0, 13.0)]
        self.assertEqual(1, build_aspects(points, points, orbs=NATAL_ORBS).summary.total)

    def test_mapping_input(self) -> None:
        points = {"Sun": _make_pos("Sun", 0.0, 1.0), "Mars": _make_pos("Mars", 183.0, 0.5)}
        result = build_aspects(points, orbs=NATAL_ORBS)
        self.assertEqual("opposition", result.aspects[0].aspect)
        self.assertAlmostEqual(3.0, result.aspects[0].orb)

    def test_bad_strategy_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            build_aspects([_make_pos("Sun", 0.0)], strategy="widest")


class FilterStageTest(unittest.TestCase):
    def test_north_node_opposition_suppressed(self) -> None:
        node = [_make_pos("NNode", 0.0, -0.05)]
        others = [_make_pos("Mars", 180.0, 0.5), _make_pos("Venus", 90.0, 1.0)]

        default = build_aspects(node, others, transit_like=True)
        self.assertEqual(["square"], [a.aspect for a in default.aspects])

        kept = build_aspects(node, others, transit_like=True, suppress_node_opposition=False)
        self.assertEqual({"square", "opposition"}, {a.aspect for a in kept.aspects})

    def test_node_rule_checks_either_side(self) -> None:
        self.assertFalse(node_opposition_filter(_match("opposition", "Mars", "NNode"), None, None))
        self.assertTrue(node_opposition_filter(_match("opposition", "Mars", "SNode"), None, None))
        self.assertTrue(node_opposition_filter(_match("conjunction", "NNode", "Mars"), None, None))

    def test_compatibility_rules(self) -> None:
        cases = [
            # aspect, lon_a, lon_b, kept
            ("square", 5.0, 95.0, True),  # Aries / Cancer
            ("square", 28.0, 120.5, False),  # Aries / Leo share fire
            ("trine", 10.0, 130.0, True),  # Aries / Leo
            ("trine", 29.0, 151.0, False),  # Aries / Virgo
            ("sextile", 10.0, 70.0, True),  # Aries / Gemini, both yang
            ("sextile", 29.0, 91.0, False),  # Aries / Cancer
            ("conjunction", 10.0, 15.0, True),
            ("conjunction", 29.0, 31.0, False),  # Aries / Taurus
            ("opposition", 29.0, 211.0, True),
        ]
        for aspect, lon_a, lon_b, kept in cases:
            with self.subTest(aspect=aspect, lon_a=lon_a, lon_b=lon_b):
                result = compatibility_filter(
                    _match(aspect), _make_pos("Sun", lon_a), _make_pos("Moon", lon_b)
                )
                self.assertEqual(kept, result)

    def test_compatibility_is_opt_in(self) -> None:
        points = [_make_pos("Sun", 29.0, 1.0), _make_pos("Mars", 31.0, 0.5)]
        self.assertEqual(1, build_aspects(points, orbs=NATAL_ORBS).summary.total)
        self.assertEqual(0, build_aspects(points, orbs=NATAL_ORBS, compatibility=True).summary.total)


if __name__ == "__main__":
    unittest.main()
