# Figures out where the trip starts and where it ends.

import asyncio
import logging
from typing import Callable

from api_structures import GeoPoint
from collaborators import DeviceLocation, ListenerHandle, MapView, PointCallback

logger = logging.getLogger(__name__)


class LocationRace:
    """
    Settles with the first point any of its sources reports.

    Once a winner is in, every other source is cancelled and anything they
    still deliver is dropped, so a late fix can never replace the result.
    """

    def __init__(self):
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._handles: list[ListenerHandle] = []

    def add_source(self, name: str, subscribe: Callable[[PointCallback], ListenerHandle | None]) -> None:
        handle = subscribe(lambda point: self._settle(name, point))
        if handle is None:
            logger.debug("Location source '%s' is not available.", name)
            return
        if self._future.done():
            # The source answered while it was still being registered.
            handle.cancel()
            return
        self._handles.append(handle)

    def _settle(self, name: str, point: GeoPoint) -> None:
        if self._future.done():
            logger.debug("Ignoring late location from '%s': %s", name, point)
            return
        logger.debug("Location from '%s' won: %s", name, point)
        self._future.set_result(point)
        self._cancel_all()

    def _cancel_all(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    async def wait(self) -> GeoPoint:
        try:
            return await self._future
        finally:
            self._cancel_all()


class LocationAcquisition:
    """Gets the origin and the destination out of the map and the device."""

    def __init__(self, map_view: MapView, device_location: DeviceLocation | None = None):
        self.map_view = map_view
        self.device_location = device_location

    async def acquire_origin(self) -> GeoPoint:
        """Whichever comes first: the device's own position or a click on the map."""
        race = LocationRace()
        race.add_source("map", self.map_view.add_click_listener)
        if self.device_location is not None:
            race.add_source("device", self.device_location.get_current_position)
        return await race.wait()

    async def acquire_destination(self) -> GeoPoint:
        """The next map click. The device position is never a destination."""
        race = LocationRace()
        race.add_source("map", self.map_view.add_click_listener)
        return await race.wait()
