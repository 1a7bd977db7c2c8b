#!/usr/bin/env python3
"""
Unit tests for great-circle distance and numeric helpers
"""

import math
import unittest
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from ga_common_imports import EARTH_RADIUS_KM, calculate_distance, clamp, round_half_up


class TestCalculateDistance(unittest.TestCase):
    """Test haversine distance"""

    def test_same_point_is_zero(self):
        self.assertEqual(calculate_distance((23.7465, 90.3760), (23.7465, 90.3760)), 0.0)

    def test_symmetric(self):
        a = (23.7465, 90.3760)
        b = (23.7925, 90.3037)
        self.assertAlmostEqual(calculate_distance(a, b), calculate_distance(b, a), places=9)

    def test_one_degree_of_longitude_on_equator(self):
        expected = EARTH_RADIUS_KM * math.pi / 180
        self.assertAlmostEqual(calculate_distance((0.0, 0.0), (0.0, 1.0)), expected, places=6)

    def test_antipodal_points(self):
        self.assertAlmostEqual(calculate_distance((0.0, 0.0), (0.0, 180.0)),
                               EARTH_RADIUS_KM * math.pi, places=6)

    def test_non_negative(self):
        points = [(-33.9, 151.2), (51.5, -0.1), (40.7, -74.0), (23.7, 90.4)]
        for a in points:
            for b in points:
                self.assertGreaterEqual(calculate_distance(a, b), 0.0)

    def test_short_distance_in_kilometers(self):
        # Roughly 8 km across Dhaka
        distance = calculate_distance((23.7465, 90.3760), (23.7925, 90.3037))
        self.assertGreater(distance, 7.0)
        self.assertLess(distance, 10.0)


class TestNumericHelpers(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(1.5), 2)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)
        self.assertEqual(round_half_up(0.0), 0)

    def test_clamp(self):
        self.assertEqual(clamp(5, 0, 3), 3)
        self.assertEqual(clamp(-1, 0, 3), 0)
        self.assertEqual(clamp(2, 0, 3), 2)


if __name__ == '__main__':
    unittest.main()
