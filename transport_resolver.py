# Decides which way of travelling is faster.

import asyncio
import logging

from api_adapters import DurationEstimator
from api_structures import GeoPoint, TransportType, Verdict

logger = logging.getLogger(__name__)


def calculate_optimal_transport(transit_duration: float | None,
                                ride_hail_duration: float | None) -> TransportType | None:
    """
    Picks the faster option. Ties, and cases where only transit has data,
    go to transit; the ride-hail time has to be strictly lower to win.
    Returns None when neither provider produced a duration.
    """
    if transit_duration is not None:
        if ride_hail_duration is None or transit_duration <= ride_hail_duration:
            return TransportType.TRANSIT
        return TransportType.RIDE_HAIL
    elif ride_hail_duration is not None:
        # transit_duration is always None here; the fallback is kept as is.
        if transit_duration is None or ride_hail_duration < transit_duration:
            return TransportType.RIDE_HAIL
        return TransportType.TRANSIT

    return None


async def ensure_optimal_transport(origin: GeoPoint, destination: GeoPoint,
                                   transit: DurationEstimator,
                                   ride_hail: DurationEstimator) -> Verdict:
    """
    Queries both estimators at the same time, waits for both and resolves the winner.
    A failure from either estimator propagates and no verdict is produced.
    """
    transit_estimate, ride_hail_estimate = await asyncio.gather(
        transit.estimate(origin, destination),
        ride_hail.estimate(origin, destination),
    )

    winner = calculate_optimal_transport(
        transit_estimate.duration_sec, ride_hail_estimate.duration_sec)
    logger.info("Transit: %s s, ride-hail: %s s, winner: %s",
                transit_estimate.duration_sec, ride_hail_estimate.duration_sec,
                winner.value if winner else None)

    route = None
    if winner is TransportType.TRANSIT:
        route = transit_estimate.payload
    elif winner is TransportType.RIDE_HAIL:
        route = ride_hail_estimate.payload

    return Verdict(
        transit_duration=transit_estimate.duration_sec,
        ride_hail_duration=ride_hail_estimate.duration_sec,
        winner=winner,
        route=route,
    )
