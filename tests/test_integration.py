from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import (
    BERLIN,
    HAMBURG,
    LEIPZIG,
    MUNICH,
    FakePushEndpointStore,
    FakePushGateway,
    FakeRideStore,
    FakeWatchStore,
    make_ride,
)
from ridematch.api import dependencies
from ridematch.errors import StoreError
from ridematch.main import create_app
from ridematch.models.domain import LocationWatch, RideKind
from ridematch.models.route import GeoPoint
from ridematch.services.matching import RideMatchService
from ridematch.services.notifications import NotificationDispatcher, RouteWatchTrigger
from ridematch.services.routing.osrm_client import OSRMClient
from ridematch.services.watches import WatchMatcher

HEADERS = {"X-User-Id": "rider"}


def _route_payload(*coords):
    points = []
    for index, coord in enumerate(coords):
        role = "start" if index == 0 else "end" if index == len(coords) - 1 else "stop"
        point = {"type": role, "address": f"Point {index}", "order": index}
        if coord is not None:
            point.update(lat=coord[0], lng=coord[1])
        points.append(point)
    return points


@pytest.fixture
def ride_store() -> FakeRideStore:
    return FakeRideStore(
        [
            make_ride("same", BERLIN, MUNICH, kind=RideKind.OFFER),
            make_ride("hamburg", BERLIN, HAMBURG, kind=RideKind.OFFER),
            make_ride("leipzig", LEIPZIG, MUNICH, kind=RideKind.OFFER),
            make_ride("own", BERLIN, MUNICH, kind=RideKind.OFFER, owner_id="rider"),
        ]
    )


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def api_client(ride_store, notification_store, executor) -> TestClient:
    watch_store = FakeWatchStore(
        [
            LocationWatch(
                id="w1",
                owner_id="alice",
                name="Leipzig",
                center=GeoPoint(*LEIPZIG),
                radius_km=10,
            )
        ]
    )
    trigger = RouteWatchTrigger(
        WatchMatcher(watch_store),
        NotificationDispatcher(notification_store, FakePushEndpointStore(), FakePushGateway()),
        executor=executor,
    )

    app = create_app()
    app.dependency_overrides[dependencies.get_ride_match_service] = lambda: RideMatchService(ride_store)
    app.dependency_overrides[dependencies.get_route_watch_trigger] = lambda: trigger
    return TestClient(app)


def test_health(api_client):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_match_route_ranks_rides_of_other_users(api_client, ride_store):
    response = api_client.post(
        "/api/match/route",
        json={"route": _route_payload(BERLIN, LEIPZIG, MUNICH), "kind": "request", "departure_date": "2026-05-10"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    ids = [item["ride_id"] for item in body["data"]]
    assert ids[0] == "same"
    assert "own" not in ids
    assert body["count"] == len(ids)
    top = body["data"][0]
    assert top["score"] == 100
    assert top["on_route"] is True
    assert top["tier"] == "direct"
    assert top["ride"]["route"][0]["type"] == "start"
    assert ride_store.queries[0].kind is RideKind.OFFER


def test_match_route_requires_caller_identity(api_client):
    response = api_client.post("/api/match/route", json={"route": _route_payload(BERLIN, MUNICH), "kind": "request"})

    assert response.status_code == 401


def test_match_route_with_malformed_route_returns_empty_list(api_client):
    route = _route_payload(BERLIN, MUNICH)
    route[1]["type"] = "stop"

    response = api_client.post("/api/match/route", json={"route": route, "kind": "request"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"data": [], "count": 0}


def test_match_route_store_failure_is_bad_gateway(api_client):
    api_client.app.dependency_overrides[dependencies.get_ride_match_service] = lambda: RideMatchService(
        FakeRideStore(error=StoreError("boom"))
    )

    response = api_client.post(
        "/api/match/route", json={"route": _route_payload(BERLIN, MUNICH), "kind": "request"}, headers=HEADERS
    )

    assert response.status_code == 502


def test_match_nearby(api_client):
    response = api_client.get(
        "/api/match/nearby",
        params={"lat": LEIPZIG[0], "lng": LEIPZIG[1], "radius": 10, "kind": "offer", "from_date": "2026-01-01"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["ride_id"] for item in body["data"]] == ["leipzig"]
    assert body["data"][0]["min_distance_km"] == 0


def test_trigger_watches_runs_inline(api_client, notification_store):
    payload = {
        "ride_id": "ride-9",
        "route": _route_payload(BERLIN, LEIPZIG, MUNICH),
        "kind": "offer",
        "owner_id": "rider",
    }

    response = api_client.post("/api/trigger-watches", json=payload, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"matched_count": 1, "notifications_sent": 1, "push_sent": 0}
    assert notification_store.batches[0][0].user_id == "alice"


def test_trigger_watches_in_background(api_client, notification_store, executor):
    payload = {
        "ride_id": "ride-9",
        "route": _route_payload(BERLIN, LEIPZIG, MUNICH),
        "kind": "offer",
        "owner_id": "rider",
    }

    response = api_client.post("/api/trigger-watches", params={"background": "true"}, json=payload, headers=HEADERS)

    assert response.status_code == 202
    assert response.json() == {"scheduled": True, "ride_id": "ride-9"}
    executor.shutdown(wait=True)
    assert len(notification_store.batches) == 1


def test_trigger_watches_only_for_own_rides(api_client):
    payload = {"ride_id": "ride-9", "route": _route_payload(BERLIN, MUNICH), "kind": "offer", "owner_id": "someone"}

    response = api_client.post("/api/trigger-watches", json=payload, headers=HEADERS)

    assert response.status_code == 403


def test_trigger_watches_rejects_malformed_route(api_client):
    route = _route_payload(BERLIN, MUNICH)
    route[0]["type"] = "end"
    payload = {"ride_id": "ride-9", "route": route, "kind": "offer", "owner_id": "rider"}

    response = api_client.post("/api/trigger-watches", json=payload, headers=HEADERS)

    assert response.status_code == 400


def test_routing_errors_carry_code_and_retry_hint(api_client):
    client = OSRMClient(
        base_url="http://osrm.test",
        max_retries=0,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"code": "NoRoute", "routes": []})),
    )
    api_client.app.dependency_overrides[dependencies.get_osrm_client] = lambda: client

    response = api_client.post(
        "/api/routing/route",
        json={"points": [{"lat": BERLIN[0], "lng": BERLIN[1]}, {"lat": MUNICH[0], "lng": MUNICH[1]}]},
        headers=HEADERS,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == {
        "code": "NO_ROUTE_FOUND",
        "message": "No route found between these points.",
        "retryable": False,
    }


def test_routing_rate_limit_is_429(api_client):
    client = OSRMClient(
        base_url="http://osrm.test",
        max_retries=0,
        transport=httpx.MockTransport(lambda request: httpx.Response(429)),
    )
    api_client.app.dependency_overrides[dependencies.get_osrm_client] = lambda: client

    response = api_client.post(
        "/api/routing/route",
        json={"points": [{"lat": BERLIN[0], "lng": BERLIN[1]}, {"lat": MUNICH[0], "lng": MUNICH[1]}]},
        headers=HEADERS,
    )

    assert response.status_code == 429
    assert response.json()["detail"]["retryable"] is True


def test_vapid_public_key_for_browser_subscriptions(api_client, monkeypatch):
    from ridematch.config import settings

    monkeypatch.setattr(settings, "vapid_public_key", None)
    assert api_client.get("/api/push/vapid-public-key").status_code == 503

    monkeypatch.setattr(settings, "vapid_public_key", "BPublicKey")
    response = api_client.get("/api/push/vapid-public-key")

    assert response.status_code == 200
    assert response.json() == {"public_key": "BPublicKey"}
