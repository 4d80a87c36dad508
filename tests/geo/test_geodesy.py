import math

import pytest

from geoasistencia.core.constants import EARTH_RADIUS_M
from geoasistencia.geo.geodesy import distance_meters, haversine_m
from geoasistencia.geo.model import Coordinate


def test_same_point_is_zero():
    p = Coordinate(-2.2038, -79.8819)
    assert distance_meters(p, p) == 0.0


def test_one_degree_of_latitude():
    # 2 * pi * R / 360
    expected = 2 * math.pi * EARTH_RADIUS_M / 360
    assert distance_meters(Coordinate(0.0, 0.0), Coordinate(1.0, 0.0)) == pytest.approx(expected, abs=0.01)


def test_short_distance_matches_local_approximation():
    # 0.0005 deg of latitude ~ 55.6 m, well inside typical geofence radii
    d = haversine_m(-2.2038, -79.8819, -2.2033, -79.8819)
    assert d == pytest.approx(0.0005 * 2 * math.pi * EARTH_RADIUS_M / 360, abs=0.01)


def test_symmetric_and_non_negative():
    a = Coordinate(40.4168, -3.7038)
    b = Coordinate(-34.6037, -58.3816)
    assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))
    assert distance_meters(a, b) > 0


def test_antipodal_points_are_half_circumference():
    d = distance_meters(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
    assert d == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-9)
