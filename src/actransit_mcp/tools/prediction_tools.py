"""MCP tools for real-time departure predictions."""

import asyncio
import logging
from datetime import datetime

from mcp.server.fastmcp.exceptions import ToolError

from actransit_mcp.app import mcp
from actransit_mcp.data.config import get_config
from actransit_mcp.data.errors import ACTransitError
from actransit_mcp.models.responses import (
    GetPredictionsResponse,
    GetUsefulStopPredictionsResponse,
)
from actransit_mcp.services.prediction_service import (
    build_prediction_result,
    deduplicate as _deduplicate,
)
from actransit_mcp.services.transit_service import get_predictions_for_stop as _get_predictions_for_stop
from actransit_mcp.services.transit_time import TRANSIT_TIMEZONE, format_transit_time

logger = logging.getLogger(__name__)


async def build_predictions_response(stop_id: str, dedupe: bool = False) -> GetPredictionsResponse:
    """Fetch predictions for a stop and derive the timing fields.

    Args:
        stop_id: Stop ID (must start with digits).
        dedupe: Collapse predictions sharing route and departure time.

    Raises:
        ACTransitError: If the predictions could not be retrieved.
    """
    predictions = await _get_predictions_for_stop(stop_id)
    if dedupe:
        predictions = _deduplicate(predictions)

    now = datetime.now(TRANSIT_TIMEZONE)
    results = [build_prediction_result(p, now) for p in predictions]

    return GetPredictionsResponse(
        stop_id=stop_id,
        predictions=results,
        count=len(results),
        deduplicated=dedupe,
        query_time=format_transit_time(now),
        message=None if results else "No predictions found",
    )


@mcp.tool()
async def get_predictions_for_stop(stop_id: str, deduplicate: bool = False) -> GetPredictionsResponse:
    """Get upcoming departures at an AC Transit stop.

    Predictions are sorted soonest first. Each one includes the delay (positive
    = late, negative = early) and the time left until departure.

    Args:
        stop_id: The stop ID to get predictions for (e.g., "55765").
        deduplicate: Collapse predictions for the same route at the same
            departure time into one (default: False).

    Returns:
        GetPredictionsResponse with sorted predictions.
    """
    try:
        return await build_predictions_response(stop_id, dedupe=deduplicate)
    except ACTransitError as e:
        logger.warning(f"Failed to fetch predictions for stop {stop_id}: {e}")
        raise ToolError(
            f"Something went wrong while trying to retrieve AC Transit predictions: {e}"
        ) from e


@mcp.tool()
async def get_useful_stop_predictions(deduplicate: bool = False) -> GetUsefulStopPredictionsResponse:
    """Get upcoming departures for the configured list of useful stops.

    Args:
        deduplicate: Collapse same-route, same-departure predictions (default: False).

    Returns:
        GetUsefulStopPredictionsResponse with one entry per stop.
    """
    stop_ids = get_config().useful_stops

    # the first failure cancels the remaining fetches
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(build_predictions_response(stop_id, dedupe=deduplicate))
                for stop_id in stop_ids
            ]
    except ExceptionGroup as eg:
        transit_errors, rest = eg.split(ACTransitError)
        if rest is not None:
            raise
        e = transit_errors.exceptions[0]
        logger.warning(f"Failed to fetch predictions for useful stops: {e}")
        raise ToolError(
            f"Something went wrong while trying to retrieve AC Transit predictions: {e}"
        ) from e

    responses = [task.result() for task in tasks]
    return GetUsefulStopPredictionsResponse(stops=responses, count=len(responses))
