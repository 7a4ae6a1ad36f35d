import unittest

from chart_tools.analysis.motion import (
    HOURLY_STEP,
    is_applying,
    is_mutually_applying,
    motion_flags,
    motion_label,
    project,
)
from chart_tools.geometry import angle_between
from chart_tools.models import Position


def _pos(name: str, lon: float, speed: float) -> Position:
    return Position(name=name, longitude=lon, speed=speed)


class ApplyingTest(unittest.TestCase):
    def test_exact_square_moving_on_is_separating(self) -> None:
        mars = _pos("Mars", 15.0, 1.0)
        self.assertAlmostEqual(90.0, angle_between(mars.longitude, 105.0))
        self.assertFalse(is_applying(mars, 105.0, 90.0))

    def test_closing_in_is_applying(self) -> None:
        self.assertTrue(is_applying(_pos("Mars", 10.0, 1.0), _pos("Sun", 105.0, 0.0), 90.0))

    def test_retrograde_reverses(self) -> None:
        self.assertFalse(is_applying(_pos("Mars", 10.0, -1.0), 105.0, 90.0))
        self.assertTrue(is_applying(_pos("Mars", 20.0, -1.0), 105.0, 90.0))

    def test_conjunction_across_zero_aries(self) -> None:
        self.assertTrue(is_applying(_pos("Moon", 355.0, 1.0), 2.0, 0.0))

    def test_hourly_step(self) -> None:
        moon = _pos("Moon", 89.5, 13.0)
        # A full day overshoots the square, one hour does not.
        self.assertFalse(is_applying(moon, 0.0, 90.0))
        self.assertTrue(is_applying(moon, 0.0, 90.0, step_days=HOURLY_STEP))

    def test_mutual_projection_moves_both(self) -> None:
        fast = _pos("Venus", 10.0, 1.0)
        slow = _pos("Mars", 20.0, 0.5)
        self.assertTrue(is_mutually_applying(fast, slow, 0.0))
        self.assertTrue(is_mutually_applying(slow, fast, 0.0))
        self.assertFalse(is_mutually_applying(_pos("Venus", 25.0, 1.0), slow, 0.0))

    def test_matches_manual_projection(self) -> None:
        for lon in range(0, 360, 15):
            for speed in (-1.2, -0.3, 0.4, 1.1):
                body = _pos("Mars", float(lon), speed)
                current = angle_between(body.longitude, 200.0)
                future = angle_between(project(body, 1.0), 200.0)
                expected = abs(future - 120.0) < abs(current - 120.0)
                self.assertEqual(expected, is_applying(body, 200.0, 120.0))


class MotionFlagsTest(unittest.TestCase):
    def test_flags(self) -> None:
        self.assertEqual((True, False, True), motion_flags(0.01))
        self.assertEqual((False, True, False), motion_flags(-0.5))
        self.assertEqual("retrograde", motion_label(-0.5))
        self.assertEqual("stationary", motion_label(0.0))
        self.assertEqual("direct", motion_label(1.0))
        self.assertTrue(_pos("Mercury", 1.0, -0.1).retrograde)


if __name__ == "__main__":
    unittest.main()
