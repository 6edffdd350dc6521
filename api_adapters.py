# Contains the adapter classes for communicating with the routing and ride-hail APIs.

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Iterable

import requests
from dotenv import load_dotenv

from api_structures import GeoPoint, RouteEstimate, TransportType

logger = logging.getLogger(__name__)

# --- API Configuration ---
# Keys are read from environment variables for security.
load_dotenv()
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
UBER_SERVER_TOKEN = os.getenv("UBER_SERVER_TOKEN")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))


class ProviderError(Exception):
    """A provider could not be reached or answered with something unusable."""
    pass


def running_average(values: Iterable[float]) -> float | None:
    """
    Folds the values pairwise: each new value is averaged with the running estimate.
    Later values weigh more, so this is not the arithmetic mean.
    [10, 20, 30] -> ((10 + 20) / 2 + 30) / 2 = 22.5
    """
    estimate = None
    for value in values:
        estimate = value if estimate is None else (estimate + value) / 2
    return estimate


def calculate_uber_route_duration(prices: list[dict], times: list[dict]) -> float:
    """Expected trip time plus expected wait for the car, both in seconds."""
    avg_route_duration = running_average(price["duration"] for price in prices)
    avg_arrival_duration = running_average(time["estimate"] for time in times)
    return avg_route_duration + avg_arrival_duration


class GoogleMapsAdapter:
    """The adapter for the Google Maps Directions API."""
    DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

    def __init__(self, api_key: str | None = None, session=None, timeout: float = REQUEST_TIMEOUT):
        self.api_key = api_key or GOOGLE_API_KEY
        if not self.api_key:
            raise ValueError(
                "FATAL ERROR: The GOOGLE_API_KEY environment variable is not set.")
        # Plain requests.get per call; the estimators call this from several threads.
        self.session = session if session is not None else requests
        self.timeout = timeout

    def get_directions(self, origin: GeoPoint, destination: GeoPoint, mode: str,
                       transit_mode: str | None = None) -> dict:
        """
        Requests a route and returns the raw Directions response.
        Any status other than OK is treated as a failed request.
        """
        params = {
            'origin': origin.as_param(),
            'destination': destination.as_param(),
            'mode': mode,
            'key': self.api_key
        }
        if transit_mode:
            params['transit_mode'] = transit_mode

        logger.debug("[Google] Requesting %s directions %s -> %s",
                     transit_mode or mode, params['origin'], params['destination'])
        try:
            response = self.session.get(
                self.DIRECTIONS_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise ProviderError(
                f"[Google] A network error occurred for the {mode} route: {e}") from e
        except ValueError as e:
            raise ProviderError(
                f"[Google] Could not parse the {mode} route response.") from e

        if not isinstance(data, dict):
            raise ProviderError(f"[Google] Unexpected {mode} route response.")
        status = data.get('status')
        if status != 'OK':
            raise ProviderError(
                f"[Google] Directions request for the {mode} route failed. Status: {status}")
        return data


class DurationEstimator(ABC):
    """
    Abstract Base Class for everything that can predict how long the trip takes.
    Estimators resolve to a RouteEstimate whose duration is None when the
    provider has nothing for this trip, and raise ProviderError on failure.
    """
    provider: TransportType

    @abstractmethod
    async def estimate(self, origin: GeoPoint, destination: GeoPoint) -> RouteEstimate:
        pass


class SubwayEstimator(DurationEstimator):
    """Asks Google for a subway-only transit route."""
    provider = TransportType.TRANSIT

    def __init__(self, maps_adapter: GoogleMapsAdapter):
        self.maps_adapter = maps_adapter

    async def estimate(self, origin: GeoPoint, destination: GeoPoint) -> RouteEstimate:
        data = await asyncio.to_thread(
            self.maps_adapter.get_directions, origin, destination, 'transit', 'subway')

        routes = data.get('routes') or []
        if not routes:
            logger.info("[Google] No subway route between %s and %s.",
                        origin.as_param(), destination.as_param())
            return RouteEstimate(self.provider, None, data)

        try:
            duration = routes[0]['legs'][0]['duration']['value']
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("[Google] Subway route has no leg duration.") from e
        return RouteEstimate(self.provider, duration, data)


class UberEstimator(DurationEstimator):
    """
    The adapter for the Uber estimates API.

    The price and pickup-time estimates are requested together. When a maps
    adapter is given, the driving route is fetched alongside them so the map
    has something to draw if Uber wins.
    """
    provider = TransportType.RIDE_HAIL
    API_URL = "https://api.uber.com/v1/estimates"

    def __init__(self, server_token: str | None = None, maps_adapter: GoogleMapsAdapter | None = None,
                 session=None, timeout: float = REQUEST_TIMEOUT):
        self.server_token = server_token or UBER_SERVER_TOKEN
        if not self.server_token:
            raise ValueError(
                "FATAL ERROR: The UBER_SERVER_TOKEN environment variable is not set.")
        self.maps_adapter = maps_adapter
        # Plain requests.get per call; the estimators call this from several threads.
        self.session = session if session is not None else requests
        self.timeout = timeout

    def _get(self, endpoint: str, params: dict) -> dict:
        url = f"{self.API_URL}/{endpoint}"
        headers = {'Authorization': f"Token {self.server_token}"}
        logger.debug("[Uber] Requesting %s estimates with %s", endpoint, params)
        try:
            response = self.session.get(
                url, params=params, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ProviderError(
                f"[Uber] A network error occurred for {endpoint} estimates: {e}") from e

        if response.status_code != 200:
            raise ProviderError(
                f"[Uber] {endpoint} estimates failed: {response.status_code} {response.reason}")
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"[Uber] Could not parse {endpoint} estimates.") from e

    async def estimate(self, origin: GeoPoint, destination: GeoPoint) -> RouteEstimate:
        price_query = {
            'start_latitude': origin.lat,
            'start_longitude': origin.lng,
            'end_latitude': destination.lat,
            'end_longitude': destination.lng
        }
        # The pickup wait only depends on where the car has to come to.
        time_query = {
            'start_latitude': origin.lat,
            'start_longitude': origin.lng
        }
        pending = [
            asyncio.to_thread(self._get, 'price', price_query),
            asyncio.to_thread(self._get, 'time', time_query),
        ]
        if self.maps_adapter is not None:
            pending.append(asyncio.to_thread(
                self.maps_adapter.get_directions, origin, destination, 'driving'))

        results = await asyncio.gather(*pending)
        price_data, time_data = results[0], results[1]
        route = results[2] if len(results) > 2 else None

        try:
            prices = price_data['prices']
            times = time_data['times']
        except (KeyError, TypeError) as e:
            raise ProviderError("[Uber] Estimates response is missing prices or times.") from e

        if not prices or not times:
            logger.info("[Uber] No cars or prices available at %s.", origin.as_param())
            return RouteEstimate(self.provider, None, route)

        try:
            duration = calculate_uber_route_duration(prices, times)
        except (KeyError, TypeError) as e:
            raise ProviderError("[Uber] Estimates are missing durations.") from e
        return RouteEstimate(self.provider, duration, route)
