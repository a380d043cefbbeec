# dynurg_gen/policies/time_window.py
from __future__ import annotations
import logging
from typing import NamedTuple, Protocol
import numpy as np

from ..data.scenario import TimeWindow, Point
from ..errors import TimeWindowInvariantError
from ..utils.timing import round_half_up, round_half_down

logger = logging.getLogger(__name__)

MINUTE = 60 * 1000
MINIMAL_PICKUP_TW_LENGTH = 10 * MINUTE
MINIMAL_DELIVERY_TW_LENGTH = 10 * MINUTE


class TravelTimeOracle(Protocol):
    def shortest_travel_time(self, a: Point, b: Point) -> int:
        ...

    def travel_time_to_nearest_depot(self, p: Point) -> int:
        ...


class WindowPair(NamedTuple):
    pickup: TimeWindow
    delivery: TimeWindow
    # delivery range collapsed: window is shorter than the nominal minimum
    collapsed: bool = False


def assign_time_windows(
    seed: int,
    announce_time: int,
    pickup: Point,
    delivery: Point,
    travel_times: TravelTimeOracle,
    end_time: int,
    urgency: int,
    pickup_duration: int,
    delivery_duration: int,
    min_pickup_length: int = MINIMAL_PICKUP_TW_LENGTH,
    min_delivery_length: int = MINIMAL_DELIVERY_TW_LENGTH,
) -> WindowPair:
    """
    Draw the pickup and delivery time windows of one parcel.

    The pickup window always closes at ``announce_time + urgency``; its opening
    is sampled such that its length lies in [min_pickup_length, urgency] (or is
    exactly ``urgency`` when urgency <= min_pickup_length). The delivery window
    is sampled inside the feasible range: it can be reached from a pickup
    served at the last possible moment, and a vehicle serving the delivery
    can still return to the nearest depot before ``end_time``.

    When the feasible delivery range collapses (tight horizon) the bounds are
    clamped instead of failing, which may yield a delivery window shorter than
    ``min_delivery_length``; such pairs are returned with ``collapsed=True``.

    All randomness comes from ``np.random.default_rng(seed)``: three uniform
    draws in the order pickup opening, delivery opening, delivery closing.

    Raises
    ------
    TimeWindowInvariantError
        If a post-condition does not hold. This signals a logic or
        configuration error, not bad input.
    """
    rng = np.random.default_rng(seed)
    u_pickup, u_opening, u_closing = rng.random(3)

    pickup_to_delivery_tt = int(travel_times.shortest_travel_time(pickup, delivery))
    delivery_to_depot_tt = int(travel_times.travel_time_to_nearest_depot(delivery))

    # pickup: opening offset ranges over 0 .. urgency - min_pickup_length
    if urgency > min_pickup_length:
        pickup_opening = announce_time + round_half_up(u_pickup * (urgency - min_pickup_length))
    else:
        pickup_opening = announce_time
    pickup_tw = TimeWindow(pickup_opening, announce_time + urgency)

    # delivery boundaries
    min_delivery_opening = pickup_tw.end + pickup_duration + pickup_to_delivery_tt
    max_delivery_closing = end_time - delivery_to_depot_tt - delivery_duration
    max_delivery_opening = max(min_delivery_opening, max_delivery_closing - min_delivery_length)

    opening_range = max_delivery_opening - min_delivery_opening
    delivery_opening = min_delivery_opening + round_half_down(u_opening * opening_range)

    latest_pickup_departure = pickup_tw.end + pickup_duration + pickup_to_delivery_tt
    min_delivery_closing = min(
        max(latest_pickup_departure, delivery_opening + min_delivery_length),
        max_delivery_closing,
    )
    closing_range = max_delivery_closing - min_delivery_closing
    delivery_closing = min_delivery_closing + round_half_down(u_closing * closing_range)

    delivery_length = delivery_closing - delivery_opening
    if delivery_opening < min_delivery_opening:
        raise TimeWindowInvariantError(
            f"delivery opens at {delivery_opening}, before the earliest arrival {min_delivery_opening}"
        )
    if delivery_opening + delivery_length > max_delivery_closing:
        raise TimeWindowInvariantError(
            f"delivery closes at {delivery_closing}, after the latest feasible closing {max_delivery_closing}"
        )
    if latest_pickup_departure > delivery_opening + delivery_length:
        raise TimeWindowInvariantError(
            f"delivery window [{delivery_opening}, {delivery_closing}) cannot be reached after "
            f"a pickup at the end of {pickup_tw}"
        )
    if delivery_length < 0:
        raise TimeWindowInvariantError(
            f"inverted delivery window [{delivery_opening}, {delivery_closing})"
        )

    collapsed = delivery_length < min_delivery_length
    if collapsed:
        logger.debug(
            "Collapsed delivery range for parcel announced at %d: window length %d < %d",
            announce_time, delivery_length, min_delivery_length,
        )
    return WindowPair(pickup_tw, TimeWindow(delivery_opening, delivery_closing), collapsed)
