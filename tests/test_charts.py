import unittest
from datetime import timedelta

from fakes import EPOCH, LinearEphemeris

from chart_tools.charts import (
    compute_positions,
    natal_chart,
    progressed_chart,
    progression_age,
    solar_return_chart,
    synastry_aspects,
    transit_aspects,
)
from chart_tools.errors import InvalidInputError
from chart_tools.models import ChartInput, HouseMethod

BODIES = {
    "Sun": (10.0, 1.0),
    "Moon": (100.0, 13.0),
    "Mercury": (12.0, 1.5),
    "Mars": (190.0, 0.5),
    "NNode": (200.0, -0.05),
}


def _provider() -> LinearEphemeris:
    return LinearEphemeris(BODIES, ascendant=0.0)


def _chart_input(house_system: str = "P") -> ChartInput:
    return ChartInput(name="synthetic", datetime_utc=EPOCH, latitude=45.0, longitude=10.0, house_system=house_system)


class PositionBatchTest(unittest.TestCase):
    def test_failed_bodies_are_skipped(self) -> None:
        with self.assertLogs("chart_tools.charts", level="WARNING") as logs:
            positions = compute_positions(_provider(), EPOCH)

        self.assertEqual(["Sun", "Moon", "Mercury", "Mars", "NNode", "SNode"], list(positions))
        self.assertTrue(any("Venus" in line for line in logs.output))

    def test_south_node_mirrors_north_node(self) -> None:
        positions = compute_positions(_provider(), EPOCH, ["NNode"])
        self.assertAlmostEqual(20.0, positions["SNode"].longitude)
        self.assertAlmostEqual(-0.05, positions["SNode"].speed)
        self.assertNotIn("SNode", compute_positions(_provider(), EPOCH, ["NNode"], include_south_node=False))


class NatalChartTest(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = _provider()
        with self.assertLogs("chart_tools.charts", level="WARNING"):
            self.chart = natal_chart(self.provider, _chart_input())

    def test_houses_and_placements(self) -> None:
        houses = {name: pos.house for name, pos in self.chart.positions.items()}
        self.assertEqual({"Sun": 1, "Moon": 4, "Mercury": 1, "Mars": 7, "NNode": 7, "SNode": 1}, houses)
        self.assertEqual("P", self.provider.house_requests[-1][3])

    def test_aspects(self) -> None:
        found = {(a.body_a, a.body_b, a.aspect) for a in self.chart.aspects.aspects}
        self.assertEqual(
            {
                ("Sun", "Moon", "square"),
                ("Sun", "Mars", "opposition"),
                ("Moon", "Mars", "square"),
                ("Sun", "Mercury", "conjunction"),
                ("Moon", "Mercury", "square"),
                ("Mercury", "Mars", "opposition"),
                ("Mercury", "SNode", "conjunction"),
            },
            found,
        )
        orbs = [a.orb for a in self.chart.aspects.aspects]
        self.assertEqual(sorted(orbs), orbs)
        self.assertFalse(any("NNode" in (a.body_a, a.body_b) for a in self.chart.aspects.aspects))

    def test_house_system_is_passed_through(self) -> None:
        with self.assertLogs("chart_tools.charts", level="WARNING"):
            natal_chart(self.provider, _chart_input("W"))
        self.assertEqual("W", self.provider.house_requests[-1][3])

    def test_transits_carry_peaks(self) -> None:
        with self.assertLogs("chart_tools.charts", level="WARNING"):
            aspects = transit_aspects(self.provider, self.chart, EPOCH)
        sun_return = next(a for a in aspects.aspects if a.body_a == "Sun" and a.body_b == "Sun")
        self.assertEqual("conjunction", sun_return.aspect)
        self.assertEqual(EPOCH, sun_return.peak_moment)
        self.assertEqual(len(aspects.aspects), aspects.summary.total)

    def test_synastry_has_no_peaks(self) -> None:
        other_input = ChartInput("other", EPOCH + timedelta(days=30), 0.0, 0.0)
        with self.assertLogs("chart_tools.charts", level="WARNING"):
            other = natal_chart(self.provider, other_input)
        aspects = synastry_aspects(self.chart, other)
        self.assertTrue(aspects.aspects)
        self.assertTrue(all(a.peak_moment is None for a in aspects.aspects))


class ProgressedChartTest(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = _provider()
        self.target = EPOCH + timedelta(days=365.25 * 10)

    def _progress(self, method):
        with self.assertLogs("chart_tools.charts", level="WARNING"):
            return progressed_chart(self.provider, _chart_input(), self.target, method)

    def test_age_and_moment(self) -> None:
        self.assertAlmostEqual(10.0, progression_age(EPOCH, self.target))
        prog = self._progress("secondary")
        self.assertEqual(EPOCH + timedelta(days=10), prog.progressed_instant)
        self.assertAlmostEqual(20.0, prog.positions["Sun"].longitude)
        self.assertIn(prog.progressed_instant, [req[0] for req in self.provider.house_requests])

    def test_no_planet_pairs_with_itself(self) -> None:
        prog = self._progress(HouseMethod.NATAL)
        self.assertFalse(any(a.body_a == a.body_b for a in prog.to_natal.aspects))
        self.assertTrue(all(a.orb <= 1.0 for a in prog.to_natal.aspects))

    def test_house_methods(self) -> None:
        natal = self._progress("natal")
        self.assertAlmostEqual(0.0, natal.houses.cusps[0])
        arc = self._progress("solar_arc")
        self.assertEqual(HouseMethod.SOLAR_ARC, arc.house_method)
        self.assertAlmostEqual(10.0, arc.houses.cusps[0])
        self.assertAlmostEqual(10.0, arc.houses.ascendant)

    def test_unknown_method(self) -> None:
        with self.assertRaises(InvalidInputError):
            progressed_chart(self.provider, _chart_input(), self.target, "tertiary")


class SolarReturnChartTest(unittest.TestCase):
    def test_return_chart(self) -> None:
        provider = _provider()
        with self.assertLogs("chart_tools.charts", level="WARNING"):
            sr = solar_return_chart(provider, _chart_input(), 2025, latitude=-33.9)

        self.assertTrue(sr.solution.converged)
        self.assertLess(sr.solution.residual, 1e-5)
        self.assertEqual(EPOCH + timedelta(days=360), sr.solution.moment)
        self.assertEqual(sr.solution.moment, sr.chart.input.datetime_utc)
        self.assertEqual("synthetic solar return 2025", sr.chart.input.name)
        self.assertEqual(-33.9, sr.chart.input.latitude)
        self.assertEqual(10.0, sr.chart.input.longitude)
        self.assertAlmostEqual(10.0, sr.chart.positions["Sun"].longitude)


if __name__ == "__main__":
    unittest.main()
