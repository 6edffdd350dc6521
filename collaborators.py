# Contracts for the pieces the workflow talks to but does not own: the map,
# the device position and whatever shows things to the user.

from abc import ABC, abstractmethod
from typing import Any, Callable

from api_structures import GeoPoint, TransportType

PointCallback = Callable[[GeoPoint], None]


class ListenerHandle:
    """A registered callback that can be switched off exactly once."""

    def __init__(self, on_cancel: Callable[[], None] | None = None):
        self._on_cancel = on_cancel
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        if self._on_cancel is not None:
            self._on_cancel()


class MapView(ABC):
    """The map the user looks at and clicks on."""

    @abstractmethod
    def add_click_listener(self, callback: PointCallback) -> ListenerHandle:
        """Calls back with the clicked point until the handle is cancelled."""
        pass

    @abstractmethod
    def render_origin_marker(self, point: GeoPoint) -> None:
        """Marks the user's starting point and centres the map on it."""
        pass

    @abstractmethod
    def render_route(self, route: Any) -> None:
        """Draws a route from a provider's raw response."""
        pass

    @abstractmethod
    def clear_route(self) -> None:
        """Removes whatever route is currently drawn."""
        pass


class DeviceLocation(ABC):
    """Whatever knows where the device is."""

    @abstractmethod
    def get_current_position(self, callback: PointCallback) -> ListenerHandle | None:
        """
        Asks for a single position fix. Returns None if the host has no
        geolocation at all. The callback may never fire (no permission, no
        hardware); that is not an error.
        """
        pass


class Presenter(ABC):
    """Shows messages, results and errors to the user."""

    @abstractmethod
    def show_message(self, text: str) -> None:
        """Replaces the current prompt or status text."""
        pass

    @abstractmethod
    def show_verdict(self, transit_duration: float | None, ride_hail_duration: float | None,
                     winner: TransportType | None) -> None:
        """Shows both durations and which one won; None means unknown."""
        pass

    @abstractmethod
    def show_error(self) -> None:
        """Tells the user something went wrong, without details."""
        pass

    @abstractmethod
    def show_spinner(self) -> None:
        """Signals that an answer is on its way."""
        pass

    @abstractmethod
    def hide_spinner(self) -> None:
        """Stops signalling that an answer is on its way."""
        pass
