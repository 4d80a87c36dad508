from dataclasses import replace

from geoasistencia.geo.geodesy import distance_meters
from geoasistencia.geo.geofence import evaluate
from geoasistencia.geo.model import Coordinate

from tests.fakes import OUTSIDE, SITE_CENTER, make_fix


def test_missing_fix_or_site_is_undefined_and_outside(site):
    fix = make_fix(SITE_CENTER, 0)

    for status in (evaluate(None, site), evaluate(fix, None), evaluate(None, None)):
        assert status.inside is False
        assert status.distance_meters is None


def test_center_is_inside(site):
    status = evaluate(make_fix(SITE_CENTER, 0), site)
    assert status.inside is True
    assert status.distance_meters == 0.0


def test_far_point_is_outside(site):
    status = evaluate(make_fix(OUTSIDE, 0), site)
    assert status.inside is False
    assert status.distance_meters > site.radius_meters


def test_distance_equal_to_radius_counts_as_inside(site):
    point = Coordinate(-2.2034, -79.8816)
    boundary = replace(site, radius_meters=distance_meters(point, site.coord))

    assert evaluate(make_fix(point, 0), boundary).inside is True


def test_just_beyond_radius_is_outside(site):
    point = Coordinate(-2.2034, -79.8816)
    tight = replace(site, radius_meters=distance_meters(point, site.coord) - 0.01)

    assert evaluate(make_fix(point, 0), tight).inside is False


def test_zero_radius_only_contains_the_center(site):
    pinpoint = replace(site, radius_meters=0.0)
    assert evaluate(make_fix(SITE_CENTER, 0), pinpoint).inside is True
    assert evaluate(make_fix(Coordinate(-2.20381, -79.8819), 0), pinpoint).inside is False


def test_evaluate_is_pure(site):
    fix = make_fix(Coordinate(-2.2035, -79.8817), 0)
    assert evaluate(fix, site) == evaluate(fix, site)
