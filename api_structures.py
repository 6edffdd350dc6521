# Defines the standardized, internal data structures for the application.

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TransportType(Enum):
    """The two ways of getting somewhere that we compare."""
    TRANSIT = "subway"
    RIDE_HAIL = "uber"

    @property
    def display_name(self) -> str:
        return TRANSPORT_NAMES[self]


TRANSPORT_NAMES = {
    TransportType.TRANSIT: "Subway",
    TransportType.RIDE_HAIL: "Uber",
}


@dataclass(frozen=True)
class GeoPoint:
    """A standardized representation of geographic coordinates."""
    lat: float
    lng: float

    @classmethod
    def parse(cls, text: str) -> "GeoPoint":
        """Builds a point from a 'lat,lng' string. Raises ValueError on bad input."""
        parts = [part.strip() for part in text.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'lat,lng', got: {text!r}")
        lat, lng = float(parts[0]), float(parts[1])
        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValueError(f"Coordinates out of range: {text!r}")
        return cls(lat=lat, lng=lng)

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass
class RouteEstimate:
    """
    What one provider told us about the trip.
    A duration of None means the provider has no usable estimate here,
    which is a normal outcome and not an error.
    """
    provider: TransportType
    duration_sec: float | None
    payload: Any = None


@dataclass
class Verdict:
    """The final recommendation plus both raw durations shown to the user."""
    transit_duration: float | None
    ride_hail_duration: float | None
    winner: TransportType | None
    # Provider payload of the winning route, handed to the map for drawing.
    route: Any = None
