import asyncio

import pytest

from api_adapters import ProviderError
from api_structures import GeoPoint, TransportType
from transport_resolver import calculate_optimal_transport, ensure_optimal_transport

ORIGIN = GeoPoint(50.4501, 30.5234)
DESTINATION = GeoPoint(50.4620, 30.4820)


@pytest.mark.parametrize("transit, ride_hail, expected", [
    (1200, None, TransportType.TRANSIT),
    (None, 900, TransportType.RIDE_HAIL),
    (None, None, None),
    (600, 600, TransportType.TRANSIT),
    (1200, 1199, TransportType.RIDE_HAIL),
    (1200, 1500, TransportType.TRANSIT),
    (0, None, TransportType.TRANSIT),
    (None, 0, TransportType.RIDE_HAIL),
])
def test_calculate_optimal_transport(transit, ride_hail, expected):
    assert calculate_optimal_transport(transit, ride_hail) is expected


def test_ties_always_go_to_transit():
    for duration in (1, 59.5, 600, 7200):
        assert calculate_optimal_transport(duration, duration) is TransportType.TRANSIT


def test_ensure_optimal_transport_picks_winner_route(stub_estimator):
    transit = stub_estimator(TransportType.TRANSIT, duration=1200, payload="subway-route")
    ride_hail = stub_estimator(TransportType.RIDE_HAIL, duration=1500, payload="driving-route")

    verdict = asyncio.run(ensure_optimal_transport(ORIGIN, DESTINATION, transit, ride_hail))

    assert verdict.transit_duration == 1200
    assert verdict.ride_hail_duration == 1500
    assert verdict.winner is TransportType.TRANSIT
    assert verdict.route == "subway-route"
    assert transit.calls == [(ORIGIN, DESTINATION)]
    assert ride_hail.calls == [(ORIGIN, DESTINATION)]


def test_ensure_optimal_transport_without_any_duration(stub_estimator):
    transit = stub_estimator(TransportType.TRANSIT, payload="subway-route")
    ride_hail = stub_estimator(TransportType.RIDE_HAIL, payload="driving-route")

    verdict = asyncio.run(ensure_optimal_transport(ORIGIN, DESTINATION, transit, ride_hail))

    assert verdict.winner is None
    assert verdict.route is None


def test_transit_failure_aborts_even_if_ride_hail_succeeds(stub_estimator):
    transit = stub_estimator(TransportType.TRANSIT, error=ProviderError("REQUEST_DENIED"))
    ride_hail = stub_estimator(TransportType.RIDE_HAIL, duration=900)

    with pytest.raises(ProviderError):
        asyncio.run(ensure_optimal_transport(ORIGIN, DESTINATION, transit, ride_hail))
    assert ride_hail.calls == [(ORIGIN, DESTINATION)]
