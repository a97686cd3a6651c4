from datetime import date

import pytest

from conftest import BERLIN, HAMBURG, LEIPZIG, MUNICH, make_ride, make_route
from ridematch.models.domain import DetourTier, MatchResult
from ridematch.models.route import GeoPoint
from ridematch.services.matching import DetourThresholds, MatchScorer, ranking_key

# Roughly 50 km and 10 km of latitude.
FIFTY_KM_LAT = 0.4497
TEN_KM_LAT = 0.0899


def _shift(coord, dlat):
    return (coord[0] + dlat, coord[1])


def test_identical_routes_score_100():
    scorer = MatchScorer()
    route = make_route(BERLIN, LEIPZIG, MUNICH)

    assert scorer.route_similarity(route, route) == 100


def test_similarity_ignores_stops_and_is_symmetric():
    scorer = MatchScorer()
    direct = make_route(BERLIN, MUNICH)
    via_leipzig = make_route(BERLIN, LEIPZIG, MUNICH)
    shifted = make_route(_shift(BERLIN, TEN_KM_LAT), MUNICH)

    assert scorer.route_similarity(direct, via_leipzig) == 100
    assert scorer.route_similarity(direct, shifted) == scorer.route_similarity(shifted, direct)
    assert scorer.route_similarity(direct, shifted) == 90


def test_endpoints_fifty_km_apart_score_zero():
    scorer = MatchScorer()
    route = make_route(BERLIN, MUNICH)
    shifted = make_route(_shift(BERLIN, FIFTY_KM_LAT), _shift(MUNICH, FIFTY_KM_LAT))

    assert scorer.route_similarity(route, shifted) == 0


def test_same_start_different_destination_scores_half():
    scorer = MatchScorer()

    assert scorer.route_similarity(make_route(BERLIN, HAMBURG), make_route(BERLIN, MUNICH)) == 50


def test_missing_endpoint_coordinate_scores_zero():
    scorer = MatchScorer()

    assert scorer.route_similarity(make_route(None, MUNICH), make_route(BERLIN, MUNICH)) == 0
    assert scorer.route_similarity(make_route(BERLIN, MUNICH), make_route(BERLIN, None)) == 0


def test_on_route_endpoint_only_misses_mid_segment_point():
    scorer = MatchScorer()
    route = make_route((0.0, 0.0), (0.0, 2.0))

    check = scorer.on_route(GeoPoint(0.05, 1.0), route, 25)

    assert check.on_route is False
    assert check.min_distance_km == pytest.approx(111.3, abs=0.5)


def test_on_route_precise_segments_finds_mid_segment_point():
    scorer = MatchScorer(precise_segments=True)
    route = make_route((0.0, 0.0), (0.0, 2.0))

    check = scorer.on_route(GeoPoint(0.05, 1.0), route, 25)

    assert check.on_route is True
    assert check.min_distance_km == pytest.approx(5.56, abs=0.1)


def test_on_route_reports_minimum_over_all_segments():
    scorer = MatchScorer()
    route = make_route(BERLIN, LEIPZIG, MUNICH)

    check = scorer.on_route(GeoPoint(*MUNICH), route, 25)

    assert check.on_route is True
    assert check.min_distance_km == 0


def test_on_route_needs_two_resolved_points():
    scorer = MatchScorer()
    route = make_route(BERLIN, None)

    check = scorer.on_route(GeoPoint(*BERLIN), route, 25)

    assert check.on_route is False
    assert check.min_distance_km is None


@pytest.mark.parametrize(
    "distance, tier",
    [
        (None, DetourTier.NONE),
        (0.0, DetourTier.DIRECT),
        (2.0, DetourTier.DIRECT),
        (2.1, DetourTier.SMALL_DETOUR),
        (20.0, DetourTier.SMALL_DETOUR),
        (24.9, DetourTier.DETOUR),
        (25.0, DetourTier.DETOUR),
        (25.1, DetourTier.NONE),
    ],
)
def test_classify_detour(distance, tier):
    assert MatchScorer().classify_detour(distance) is tier


def test_classify_detour_respects_custom_thresholds():
    scorer = MatchScorer(DetourThresholds(direct_km=1, small_detour_km=5, detour_km=10))

    assert scorer.classify_detour(3) is DetourTier.SMALL_DETOUR
    assert scorer.classify_detour(11) is DetourTier.NONE


def test_thresholds_must_be_ordered():
    with pytest.raises(ValueError):
        DetourThresholds(direct_km=5, small_detour_km=3, detour_km=25)


def test_thresholds_default_from_settings(monkeypatch):
    from ridematch.config import settings

    monkeypatch.setattr(settings, "direct_threshold_km", 1.0)

    assert DetourThresholds.from_settings().direct_km == 1.0


def _result(ride_id, score, on_route, departure=None):
    ride = make_ride(ride_id, BERLIN, MUNICH, departure_date=departure)
    return MatchResult(
        ride_id=ride_id,
        score=score,
        on_route=on_route,
        tier=DetourTier.NONE,
        min_distance_km=None,
        ride=ride,
    )


def test_ranking_orders_score_then_on_route_then_date_then_id():
    reference = date(2026, 5, 10)
    results = [
        _result("e", 80, False, date(2026, 5, 10)),
        _result("d", 90, False, date(2026, 5, 12)),
        _result("c", 90, False, date(2026, 5, 11)),
        _result("b", 90, True, date(2026, 5, 13)),
        _result("a", 90, False, date(2026, 5, 11)),
        _result("f", 90, False),
    ]

    ordered = sorted(results, key=lambda result: ranking_key(result, reference))

    assert [result.ride_id for result in ordered] == ["b", "a", "c", "d", "f", "e"]


def test_classify_detour_widens_outer_cut_to_query_threshold():
    scorer = MatchScorer()

    assert scorer.classify_detour(40.0) is DetourTier.NONE
    assert scorer.classify_detour(40.0, detour_km=50) is DetourTier.DETOUR
    assert scorer.classify_detour(60.0, detour_km=50) is DetourTier.NONE
    assert scorer.classify_detour(10.0, detour_km=50) is DetourTier.SMALL_DETOUR
    # A narrower query threshold never shrinks the configured cut.
    assert scorer.classify_detour(24.0, detour_km=5) is DetourTier.DETOUR
