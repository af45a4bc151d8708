"""Stop and prediction queries against the AC Transit API.

Errors from the client propagate unchanged; there is no retry and no cache.
"""

import logging

from actransit_mcp.data.actransit_client import ACTransitClient
from actransit_mcp.data.config import ACTransitConfig, get_config
from actransit_mcp.models.transit import Prediction, Stop
from actransit_mcp.services.prediction_service import sort_by_departure

logger = logging.getLogger(__name__)


async def get_all_stops(
    url_override: str | None = None,
    config: ACTransitConfig | None = None,
) -> list[Stop]:
    """Fetch every AC Transit stop.

    Args:
        url_override: Optional stops endpoint override.
        config: Optional config (default: environment / .env).

    Returns:
        Stops as returned upstream.
    """
    if config is None:
        config = get_config()

    async with ACTransitClient(config) as client:
        return await client.fetch_stops(url_override)


async def get_predictions_for_stop(
    stop_id: str,
    url_override: str | None = None,
    config: ACTransitConfig | None = None,
) -> list[Prediction]:
    """Fetch predictions for a stop, sorted soonest first.

    Duplicates are NOT removed here; call deduplicate() on the result for that.

    Args:
        stop_id: Stop ID (must start with digits).
        url_override: Optional predictions endpoint override.
        config: Optional config (default: environment / .env).

    Returns:
        Predictions sorted by time until departure.
    """
    if config is None:
        config = get_config()

    async with ACTransitClient(config) as client:
        predictions = await client.fetch_predictions(stop_id, url_override)

    logger.debug(f"Sorting {len(predictions)} predictions for stop {stop_id}")
    return sort_by_departure(predictions)
