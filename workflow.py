# The whole app is a small state machine that walks through a few steps:
# find the origin, find the destination, ask both providers, show the verdict.

import asyncio
import logging
from enum import Enum

from api_adapters import DurationEstimator
from api_structures import GeoPoint, Verdict
from collaborators import DeviceLocation, MapView, Presenter
from location import LocationAcquisition
from transport_resolver import ensure_optimal_transport

logger = logging.getLogger(__name__)

ORIGIN_PROMPT = "Please allow us to access your location or choose it manually by clicking on the map"
DESTINATION_PROMPT = "Please click on where you want to go"
THINKING_MESSAGE = "Thinking..."


class WorkflowState(Enum):
    ACQUIRE_ORIGIN = "acquire_origin"
    ACQUIRE_DESTINATION = "acquire_destination"
    RESOLVE = "resolve"
    DONE = "done"
    FAILED = "failed"


class WorkflowController:
    """
    Drives one user session from the first prompt to the verdict.

    Each step is a coroutine that returns the next state. The driver loop
    keeps going until a step returns DONE or raises; any exception ends the
    run in FAILED with a generic error shown to the user. Nothing is retried
    automatically, the user has to reset.
    """

    def __init__(self, map_view: MapView, presenter: Presenter,
                 transit: DurationEstimator, ride_hail: DurationEstimator,
                 device_location: DeviceLocation | None = None):
        self.map_view = map_view
        self.presenter = presenter
        self.transit = transit
        self.ride_hail = ride_hail
        self.locations = LocationAcquisition(map_view, device_location)

        self.state: WorkflowState | None = None
        self.origin: GeoPoint | None = None
        self.destination: GeoPoint | None = None
        self.verdict: Verdict | None = None

        self._steps = {
            WorkflowState.ACQUIRE_ORIGIN: self._acquire_origin,
            WorkflowState.ACQUIRE_DESTINATION: self._acquire_destination,
            WorkflowState.RESOLVE: self._resolve,
        }

    async def run(self, start: WorkflowState = WorkflowState.ACQUIRE_ORIGIN) -> WorkflowState:
        self.state = start
        return await self._drive()

    def reset(self) -> asyncio.Task | None:
        """
        Lets the user pick a new destination once a run has finished.
        The origin is kept; if there never was one, the run starts over.
        """
        if self.state not in (WorkflowState.DONE, WorkflowState.FAILED):
            logger.debug("Ignoring reset while in state %s.", self.state)
            return None

        self.state = (WorkflowState.ACQUIRE_DESTINATION if self.origin is not None
                      else WorkflowState.ACQUIRE_ORIGIN)
        logger.info("Reset requested, restarting at %s.", self.state.name)
        return asyncio.get_running_loop().create_task(self._drive())

    async def _drive(self) -> WorkflowState:
        while self.state in self._steps:
            step = self._steps[self.state]
            try:
                self.state = await step()
            except Exception:
                logger.exception("Step %s failed.", self.state.name)
                self.state = WorkflowState.FAILED
                self.presenter.show_error()
        return self.state

    # --- Steps ---

    async def _acquire_origin(self) -> WorkflowState:
        self.presenter.show_message(ORIGIN_PROMPT)
        self.origin = await self.locations.acquire_origin()
        logger.info("Origin set to %s.", self.origin.as_param())
        self.map_view.render_origin_marker(self.origin)
        return WorkflowState.ACQUIRE_DESTINATION

    async def _acquire_destination(self) -> WorkflowState:
        self.map_view.clear_route()
        self.presenter.show_message(DESTINATION_PROMPT)
        self.destination = await self.locations.acquire_destination()
        logger.info("Destination set to %s.", self.destination.as_param())
        return WorkflowState.RESOLVE

    async def _resolve(self) -> WorkflowState:
        self.verdict = None
        self.presenter.show_message(THINKING_MESSAGE)
        self.presenter.show_spinner()
        try:
            self.verdict = await ensure_optimal_transport(
                self.origin, self.destination, self.transit, self.ride_hail)
        finally:
            self.presenter.hide_spinner()

        if self.verdict.route is not None:
            self.map_view.render_route(self.verdict.route)
        self.presenter.show_verdict(
            self.verdict.transit_duration, self.verdict.ride_hail_duration, self.verdict.winner)
        return WorkflowState.DONE
