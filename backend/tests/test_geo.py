"""
DiveLog Backend: Geo Helper Tests
=================================

What we test:
    ✅ Known city-to-city distance
    ✅ Symmetry and zero distance
    ✅ The 100 m same-site threshold on both sides
"""

import pytest

from app.utils.geo import SITE_MATCH_RADIUS_KM, haversine_km, is_same_site


class TestHaversine:

    def test_paris_to_london(self):
        assert haversine_km(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(343.5, rel=0.01)

    def test_identical_points_are_zero(self):
        assert haversine_km(24.4037, -87.5340, 24.4037, -87.5340) == 0.0

    def test_symmetric(self):
        a = (24.4037, -87.5340)
        b = (-8.34, 115.5)
        assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))

    def test_antipodal_points_do_not_raise(self):
        assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(20015.1, rel=0.001)


class TestSameSiteThreshold:

    def test_radius_is_100_metres(self):
        assert SITE_MATCH_RADIUS_KM == 0.1

    def test_50_metres_apart_is_same_site(self):
        # 0.00045 degrees of latitude ~ 50 m
        assert is_same_site(10.0, 20.0, 10.00045, 20.0)

    def test_just_under_100_metres_is_same_site(self):
        assert is_same_site(0.0, 0.0, 0.00089, 0.0)

    def test_just_over_100_metres_is_different_site(self):
        assert not is_same_site(0.0, 0.0, 0.0009, 0.0)

    def test_100_km_apart_is_different_site(self):
        assert haversine_km(0.0, 0.0, 0.8993, 0.0) == pytest.approx(100.0, rel=0.001)
        assert not is_same_site(0.0, 0.0, 0.8993, 0.0)

    def test_blue_hole_offset_is_same_site(self):
        assert is_same_site(24.4037, -87.5340, 24.4038, -87.5341)
