"""MCP tools for listing stops."""

import logging

from mcp.server.fastmcp.exceptions import ToolError

from actransit_mcp.app import mcp
from actransit_mcp.data.errors import ACTransitError
from actransit_mcp.models.responses import GetAllStopsResponse, StopResult
from actransit_mcp.models.transit import Stop
from actransit_mcp.services.transit_service import get_all_stops as _get_all_stops

logger = logging.getLogger(__name__)


def stop_to_result(stop: Stop) -> StopResult:
    return StopResult(
        stop_id=stop.stop_id,
        name=stop.name,
        latitude=stop.latitude_value,
        longitude=stop.longitude_value,
        scheduled_time=stop.scheduled_time,
    )


async def build_all_stops_response() -> GetAllStopsResponse:
    """Fetch all stops and wrap them in a response model.

    Raises:
        ACTransitError: If the stops could not be retrieved.
    """
    stops = await _get_all_stops()
    results = [stop_to_result(stop) for stop in stops]
    return GetAllStopsResponse(stops=results, count=len(results))


@mcp.tool()
async def get_all_stops() -> GetAllStopsResponse:
    """List every AC Transit stop.

    Returns:
        GetAllStopsResponse with stop IDs, names and coordinates.
    """
    try:
        return await build_all_stops_response()
    except ACTransitError as e:
        logger.warning(f"Failed to fetch stops: {e}")
        raise ToolError(f"Something went wrong while trying to retrieve AC Transit stops: {e}") from e
