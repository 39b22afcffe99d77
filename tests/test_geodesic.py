import math

import pytest

from tourtrack.analyze.geodesic import EARTH_RADIUS_M, distance


@pytest.mark.parametrize(
    "lat, lon",
    [(0.0, 0.0), (51.5074, -0.1278), (-33.8688, 151.2093), (89.9, 179.9)],
)
def test_distance_to_self_is_zero(lat, lon):
    assert distance(lat, lon, lat, lon) == 0.0


@pytest.mark.parametrize(
    "a, b",
    [
        ((0.0, 0.0), (0.0, 0.001)),
        ((48.8566, 2.3522), (51.5074, -0.1278)),
        ((-33.8688, 151.2093), (40.7128, -74.0060)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert distance(*a, *b) == pytest.approx(distance(*b, *a), rel=1e-12)


def test_one_thousandth_degree_on_equator():
    expected = EARTH_RADIUS_M * math.radians(0.001)
    assert distance(0.0, 0.0, 0.0, 0.001) == pytest.approx(expected, rel=1e-9)
    assert distance(0.0, 0.0, 0.0, 0.001) == pytest.approx(111.195, abs=0.01)


def test_uses_fixed_earth_radius():
    # a quarter of a great circle
    assert distance(0.0, 0.0, 90.0, 0.0) == pytest.approx(math.pi / 2 * 6_371_000, rel=1e-9)


def test_paris_to_london():
    assert distance(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(343_500, rel=0.01)
