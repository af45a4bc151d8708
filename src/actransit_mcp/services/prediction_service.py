"""Derived fields, ordering and deduplication for AC Transit predictions.

Everything here is pure: no network access, no shared state. Functions that
depend on the current time take an optional `now` so callers (and tests) can
evaluate a whole batch against one instant.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from actransit_mcp.data.errors import TransitTimeParseError
from actransit_mcp.models.responses import PredictionResult
from actransit_mcp.models.transit import Prediction
from actransit_mcp.services.transit_time import (
    TRANSIT_TIMEZONE,
    parse_transit_time,
    truncate_to_seconds,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(TRANSIT_TIMEZONE)


def time_until_departure(prediction: Prediction, now: datetime | None = None) -> timedelta:
    """Time from `now` until the predicted departure, truncated to seconds.

    Args:
        prediction: Prediction to evaluate.
        now: Reference time (default: current time). Naive values are taken
            as Pacific wall time.

    Returns:
        Duration until departure (negative if it already left).

    Raises:
        TransitTimeParseError: If PredictedDeparture is malformed.
    """
    departure = parse_transit_time(prediction.predicted_departure)

    if now is None:
        now = _now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=TRANSIT_TIMEZONE)
    else:
        now = now.astimezone(TRANSIT_TIMEZONE)

    # same-tzinfo subtraction ignores DST offset changes, compare instants
    difference = departure.astimezone(UTC) - now.astimezone(UTC)
    return truncate_to_seconds(difference)


def delay_seconds(prediction: Prediction) -> int:
    """Predicted delay in seconds, 0 when the field is empty or malformed."""
    raw = prediction.predicted_delay_in_seconds
    if raw is None:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def is_delayed(prediction: Prediction) -> bool:
    """True if the vehicle is running early or late."""
    return delay_seconds(prediction) != 0


def friendly_delay(prediction: Prediction) -> timedelta:
    """Predicted delay as a duration truncated to whole seconds."""
    return truncate_to_seconds(timedelta(seconds=delay_seconds(prediction)))


def sort_by_departure(
    predictions: Iterable[Prediction],
    now: datetime | None = None,
) -> list[Prediction]:
    """Sort predictions by time until departure, soonest first.

    The sort is stable. Predictions whose departure time can't be parsed go
    last, in their original relative order.

    Args:
        predictions: Predictions to sort.
        now: Reference time, sampled once for the whole batch.

    Returns:
        New sorted list.
    """
    if now is None:
        now = _now()

    def sort_key(prediction: Prediction) -> tuple[bool, timedelta]:
        try:
            return (False, time_until_departure(prediction, now))
        except TransitTimeParseError:
            logger.debug(
                f"Unparsable departure {prediction.predicted_departure!r} "
                f"for trip {prediction.trip_id}, sorting last"
            )
            return (True, timedelta(0))

    return sorted(predictions, key=sort_key)


def deduplicate(predictions: Iterable[Prediction]) -> list[Prediction]:
    """Drop predictions for the same route at the same departure time.

    Vehicle and trip IDs are ignored: two buses on route 80 predicted for the
    same minute are interchangeable to a rider. The first one seen is kept.

    Returns:
        New list with first occurrences in their original order.
    """
    seen: set[tuple[str, str]] = set()
    unique: list[Prediction] = []

    for prediction in predictions:
        key = (prediction.route_name, prediction.predicted_departure)
        if key in seen:
            continue
        seen.add(key)
        unique.append(prediction)

    return unique


def build_prediction_result(prediction: Prediction, now: datetime | None = None) -> PredictionResult:
    """Convert a Prediction into a PredictionResult with derived fields.

    An unparsable departure leaves the time-until fields as None instead of
    failing the whole response.
    """
    seconds_until: int | None = None
    minutes_until: int | None = None

    try:
        until = time_until_departure(prediction, now)
    except TransitTimeParseError:
        pass  # keep None
    else:
        seconds_until = int(until.total_seconds())
        minutes_until = seconds_until // 60

    delay = delay_seconds(prediction)

    return PredictionResult(
        stop_id=prediction.stop_id,
        trip_id=prediction.trip_id,
        vehicle_id=prediction.vehicle_id,
        route_name=prediction.route_name,
        predicted_departure=prediction.predicted_departure,
        prediction_date_time=prediction.prediction_date_time,
        delay_seconds=delay,
        is_delayed=delay != 0,
        friendly_delay_seconds=int(friendly_delay(prediction).total_seconds()),
        seconds_until_departure=seconds_until,
        minutes_until_departure=minutes_until,
    )
