# Main script: subway or Uber, which one gets you there faster?

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from api_adapters import GoogleMapsAdapter, SubwayEstimator, UberEstimator
from api_structures import GeoPoint
from console_ui import ConsoleMap, ConsolePresenter, FixedDeviceLocation
from workflow import WorkflowController

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_point(value: str | None) -> GeoPoint | None:
    if not value:
        return None
    try:
        return GeoPoint.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_controller(map_view: ConsoleMap, presenter: ConsolePresenter,
                     here: GeoPoint | None) -> WorkflowController:
    """Wires the real providers into a workflow. Raises ValueError if keys are missing."""
    maps_adapter = GoogleMapsAdapter()
    return WorkflowController(
        map_view=map_view,
        presenter=presenter,
        transit=SubwayEstimator(maps_adapter),
        ride_hail=UberEstimator(maps_adapter=maps_adapter),
        device_location=FixedDeviceLocation(here),
    )


async def run_session(controller: WorkflowController, map_view: ConsoleMap) -> None:
    """Runs the workflow while the map listens to the keyboard, until the user quits."""
    map_view.add_command_listener("reset", controller.reset)
    workflow = asyncio.create_task(controller.run())
    await map_view.read_input()
    if not workflow.done():
        workflow.cancel()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Subway or Uber: find out which one is faster for your trip.")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose mode to see the exact API calls being made.")
    parser.add_argument('--here', type=parse_point, default=None, metavar="LAT,LNG",
                        help="Where you are right now (defaults to HOME_LOCATION).")
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    here = args.here
    if here is None:
        try:
            here = parse_point(os.getenv("HOME_LOCATION"))
        except argparse.ArgumentTypeError as e:
            print(f"FATAL ERROR: HOME_LOCATION is invalid: {e}")
            return 1

    print("Welcome to Subway or Uber.")
    print("Click on the map by typing a point as 'lat,lng'. Type 'quit' to leave.")

    presenter = ConsolePresenter()
    presenter.show_spinner()
    map_view = ConsoleMap()
    try:
        controller = build_controller(map_view, presenter, here)
    except ValueError as e:
        print(e)
        return 1
    finally:
        presenter.hide_spinner()

    asyncio.run(run_session(controller, map_view))
    return 0


if __name__ == '__main__':
    sys.exit(main())
