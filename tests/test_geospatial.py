import itertools
import math

import pytest

from src.geodist.services.geospatial import (
    EARTH_RADIUS_KM,
    bearing_degrees,
    flight_time_hours,
    haversine_km,
    km_to_miles,
)

POINTS = [
    (28.6139, 77.2090),
    (15.2993, 74.1240),
    (51.5074, -0.1278),
    (-33.8688, 151.2093),
    (90.0, 0.0),
    (-90.0, 45.0),
    (0.0, 180.0),
    (0.0, -180.0),
]


@pytest.mark.parametrize("point", POINTS)
def test_haversine_same_point_is_zero(point):
    assert haversine_km(*point, *point) == pytest.approx(0.0, abs=1e-9)


def test_haversine_is_symmetric_and_bounded():
    half_circumference = math.pi * EARTH_RADIUS_KM
    for a, b in itertools.combinations(POINTS, 2):
        forward = haversine_km(*a, *b)
        backward = haversine_km(*b, *a)
        assert forward == pytest.approx(backward)
        assert 0.0 <= forward <= half_circumference + 1e-6


def test_haversine_antipodal_points_reach_half_circumference():
    assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(20015.09, abs=0.1)


def test_delhi_to_goa():
    distance = haversine_km(28.6139, 77.2090, 15.2993, 74.1240)

    assert distance == pytest.approx(1514.1, abs=1.0)
    assert f"{flight_time_hours(distance):.1f}" == "1.9"
    assert km_to_miles(distance) == pytest.approx(distance * 0.621371)


def test_bearing_due_east_and_north():
    assert bearing_degrees(0.0, 0.0, 0.0, 10.0) == pytest.approx(90.0)
    assert bearing_degrees(0.0, 0.0, 10.0, 0.0) == pytest.approx(0.0)
