import pytest

from ridematch.models.route import GeoPoint
from ridematch.services.geospatial import haversine_km, min_distance_km, point_to_segment_km

BERLIN = GeoPoint(52.52, 13.405)
MUNICH = GeoPoint(48.137, 11.575)
HAMBURG = GeoPoint(53.551, 9.993)

KM_PER_DEGREE = 111.195


def test_haversine_is_symmetric_and_zero_on_identity():
    for a, b in [(BERLIN, MUNICH), (MUNICH, HAMBURG), (HAMBURG, BERLIN)]:
        assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))
        assert haversine_km(a, a) == 0
        assert haversine_km(a, b) > 0


def test_haversine_known_distances():
    assert haversine_km(BERLIN, MUNICH) == pytest.approx(504, abs=3)
    assert haversine_km(MUNICH, HAMBURG) == pytest.approx(612, abs=4)
    assert haversine_km(GeoPoint(0, 0), GeoPoint(0, 1)) == pytest.approx(KM_PER_DEGREE, rel=1e-3)


def test_point_to_segment_uses_perpendicular_distance_inside_segment():
    a, b = GeoPoint(0, 0), GeoPoint(0, 2)
    distance = point_to_segment_km(GeoPoint(0.1, 1), a, b)

    assert distance == pytest.approx(0.1 * KM_PER_DEGREE, rel=1e-2)
    assert distance < haversine_km(GeoPoint(0.1, 1), a)


def test_point_to_segment_falls_back_to_nearest_endpoint_outside_segment():
    a, b = GeoPoint(0, 0), GeoPoint(0, 2)

    beyond_end = point_to_segment_km(GeoPoint(0, 3), a, b)
    behind_start = point_to_segment_km(GeoPoint(0, -1), a, b)

    assert beyond_end == pytest.approx(KM_PER_DEGREE, rel=1e-3)
    assert behind_start == pytest.approx(KM_PER_DEGREE, rel=1e-3)


def test_point_to_segment_degenerate_segment_is_distance_to_start():
    p = GeoPoint(52.0, 13.0)

    assert point_to_segment_km(p, BERLIN, BERLIN) == pytest.approx(haversine_km(p, BERLIN))


def test_min_distance_km():
    assert min_distance_km(BERLIN, []) is None
    assert min_distance_km(BERLIN, [MUNICH, BERLIN, HAMBURG]) == 0
    assert min_distance_km(HAMBURG, [MUNICH, BERLIN]) == pytest.approx(haversine_km(HAMBURG, BERLIN))


def test_geopoint_rejects_out_of_range_coordinates():
    with pytest.raises(ValueError):
        GeoPoint(91.0, 0.0)
    with pytest.raises(ValueError):
        GeoPoint(0.0, -181.0)
