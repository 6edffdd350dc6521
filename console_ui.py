# Terminal versions of the map, the device position and the result display.

import asyncio
import logging
import math
import sys
from typing import Any, Callable

from api_structures import GeoPoint, TransportType
from collaborators import DeviceLocation, ListenerHandle, MapView, PointCallback, Presenter

logger = logging.getLogger(__name__)

DEFAULT_CENTER = GeoPoint(lat=50.4501, lng=30.5234)  # Kyiv
NO_WINNER_MESSAGE = "You are on your own, buddy :("
ERROR_MESSAGE = "Oops, something went wrong..."


def format_duration(seconds: float) -> str:
    """Converts seconds into a readable 'XX min' format, rounding half minutes up."""
    return f"{math.floor(seconds / 60 + 0.5)} min"


def format_verdict(transit_duration: float | None, ride_hail_duration: float | None,
                   winner: TransportType | None) -> list[str]:
    transit_str = "unknown" if transit_duration is None else format_duration(transit_duration)
    ride_hail_str = "no cars nearby" if ride_hail_duration is None else format_duration(ride_hail_duration)
    winner_str = f"{winner.display_name} is faster!" if winner else NO_WINNER_MESSAGE
    return [
        f"{TransportType.TRANSIT.display_name} - {transit_str}",
        f"{TransportType.RIDE_HAIL.display_name} - {ride_hail_str}",
        winner_str,
    ]


class ConsoleMap(MapView):
    """
    A map you "click" by typing coordinates.

    Every input line is either a command (e.g. 'reset') or a 'lat,lng' pair,
    which is delivered to the click listeners registered at that moment.
    Lines typed while nobody is listening are dropped, like clicks on an idle map.
    """

    def __init__(self, stream=None, out=None, center: GeoPoint = DEFAULT_CENTER):
        self.stream = stream if stream is not None else sys.stdin
        self.out = out if out is not None else sys.stdout
        self.center = center
        self.route: Any = None
        self._click_listeners: list[PointCallback] = []
        self._commands: dict[str, list[Callable[[], Any]]] = {}

    @property
    def listening(self) -> bool:
        """True while someone is waiting for a click."""
        return bool(self._click_listeners)

    def add_click_listener(self, callback: PointCallback) -> ListenerHandle:
        self._click_listeners.append(callback)
        return ListenerHandle(lambda: self._click_listeners.remove(callback))

    def add_command_listener(self, command: str, callback: Callable[[], Any]) -> ListenerHandle:
        listeners = self._commands.setdefault(command.lower(), [])
        listeners.append(callback)
        return ListenerHandle(lambda: listeners.remove(callback))

    def handle_line(self, line: str) -> None:
        text = line.strip()
        if not text:
            return
        if text.lower() in self._commands:
            for callback in list(self._commands[text.lower()]):
                callback()
            return
        try:
            point = GeoPoint.parse(text)
        except ValueError:
            print(f"   > Could not read '{text}'. Type a point as 'lat,lng', e.g. "
                  f"{self.center.as_param()}", file=self.out)
            return
        for callback in list(self._click_listeners):
            callback(point)

    async def read_input(self) -> None:
        """Feeds stdin lines to the map until EOF or 'quit'."""
        while True:
            line = await asyncio.to_thread(self.stream.readline)
            if not line or line.strip().lower() == "quit":
                logger.debug("Input closed.")
                return
            self.handle_line(line)

    def render_origin_marker(self, point: GeoPoint) -> None:
        self.center = point
        print(f"   > [Map] Marker A (You) at {point.lat:.5f}, {point.lng:.5f}", file=self.out)

    def render_route(self, route: Any) -> None:
        self.route = route
        try:
            leg = route['routes'][0]['legs'][0]
        except (KeyError, IndexError, TypeError):
            logger.debug("Route has nothing to draw: %r", route)
            return
        start = leg.get('start_address', 'start')
        end = leg.get('end_address', 'end')
        steps = len(leg.get('steps', []))
        print(f"   > [Map] Route from {start} to {end} ({steps} steps)", file=self.out)

    def clear_route(self) -> None:
        self.route = None


class FixedDeviceLocation(DeviceLocation):
    """
    Pretends the device knows where it is. Without a configured point it
    behaves like a host with no geolocation at all.
    """

    def __init__(self, point: GeoPoint | None, delay: float = 0.0):
        self.point = point
        self.delay = delay

    def get_current_position(self, callback: PointCallback) -> ListenerHandle | None:
        if self.point is None:
            return None

        point = self.point

        def fire():
            if handle.active:
                callback(point)

        timer = asyncio.get_running_loop().call_later(self.delay, fire)
        handle = ListenerHandle(timer.cancel)
        return handle


class ConsolePresenter(Presenter):
    """Prints everything to the terminal."""

    def __init__(self, out=None):
        self.out = out if out is not None else sys.stdout
        self.spinning = False

    def show_message(self, text: str) -> None:
        print(f"\n{text}", file=self.out)

    def show_verdict(self, transit_duration: float | None, ride_hail_duration: float | None,
                     winner: TransportType | None) -> None:
        lines = format_verdict(transit_duration, ride_hail_duration, winner)
        print("", file=self.out)
        for line in lines[:-1]:
            print(line, file=self.out)
        print(f"✨ {lines[-1]} ✨", file=self.out)
        print("Type 'reset' to choose another destination or 'quit' to leave.", file=self.out)

    def show_error(self) -> None:
        print(f"\n{ERROR_MESSAGE}", file=self.out)

    def show_spinner(self) -> None:
        self.spinning = True
        print("   ...", file=self.out)

    def hide_spinner(self) -> None:
        self.spinning = False
