import logging
import re

import httpx
from pydantic import TypeAdapter, ValidationError

from actransit_mcp.data.config import ACTransitConfig
from actransit_mcp.data.errors import (
    DecodeError,
    InvalidStopIDError,
    InvalidURLError,
    RequestFailedError,
    TransportError,
)
from actransit_mcp.models.transit import Prediction, Stop

logger = logging.getLogger(__name__)

STOP_ID_PATTERN = re.compile(r"^[0-9]+")

_stops_adapter = TypeAdapter(list[Stop])
_predictions_adapter = TypeAdapter(list[Prediction])


def validate_stop_id(stop_id: str) -> str:
    """Check that a stop ID starts with at least one digit.

    Raises:
        InvalidStopIDError: If it doesn't.
    """
    if not isinstance(stop_id, str) or not STOP_ID_PATTERN.match(stop_id):
        raise InvalidStopIDError(stop_id)
    return stop_id


def build_authenticated_url(base_url: str, token: str) -> httpx.URL:
    """Append the API token to a base URL as ?token=<token>.

    Args:
        base_url: Absolute URL of the endpoint.
        token: AC Transit API token.

    Returns:
        httpx.URL with the token query parameter.

    Raises:
        InvalidURLError: If base_url is not an absolute URL.
    """
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise InvalidURLError(base_url) from e

    if not url.scheme or not url.host:
        raise InvalidURLError(base_url)

    return url.copy_merge_params({"token": token})


def _redact(url: httpx.URL) -> str:
    """Render a URL for logs without its token."""
    if "token" not in url.params:
        return str(url)
    return str(url.copy_set_param("token", "***"))


class ACTransitClient:
    """Async HTTP client for the AC Transit stops and predictions endpoints.

    Usage:
        async with ACTransitClient(config) as client:
            predictions = await client.fetch_predictions("55765")
    """

    def __init__(self, config: ACTransitConfig):
        """Initialize the client.

        Args:
            config: Configuration with API token, URLs and timeout.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ACTransitClient":
        """Enter async context - create HTTP client."""
        self._client = httpx.AsyncClient(
            timeout=self._config.request_timeout_seconds,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def perform_request(self, url: httpx.URL) -> bytes:
        """GET a URL and return the raw response body.

        Raises:
            RuntimeError: If client not initialized.
            RequestFailedError: If the status code is 400 or above.
            TransportError: If the request could not be completed.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        logger.debug(f"GET {_redact(url)}")
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            raise TransportError(f"Request to {_redact(url)} failed: {e}") from e

        if response.status_code >= 400:
            raise RequestFailedError(response.status_code, response.text)

        return response.content

    async def fetch_stops(self, base_url: str | None = None) -> list[Stop]:
        """Fetch all AC Transit stops.

        Args:
            base_url: Optional endpoint override (defaults to the stops listing).

        Returns:
            List of Stop records in upstream order.

        Raises:
            InvalidURLError, TransportError, RequestFailedError, DecodeError
        """
        url = build_authenticated_url(base_url or self._config.stops_url, self._config.token)
        body = await self.perform_request(url)

        try:
            stops = _stops_adapter.validate_json(body)
        except ValidationError as e:
            raise DecodeError(f"Could not decode stops: {e}") from e

        logger.debug(f"Fetched {len(stops)} stops")
        return stops

    async def fetch_predictions(self, stop_id: str, base_url: str | None = None) -> list[Prediction]:
        """Fetch predicted departures for a stop.

        The stop ID is validated before any network activity.

        Args:
            stop_id: Stop ID, must start with digits (e.g. "55765").
            base_url: Optional endpoint override.

        Returns:
            List of Prediction records in upstream order.

        Raises:
            InvalidStopIDError, InvalidURLError, TransportError,
            RequestFailedError, DecodeError
        """
        validate_stop_id(stop_id)

        if not base_url:
            base_url = self._config.predictions_url_template.format(stop_id=stop_id)

        url = build_authenticated_url(base_url, self._config.token)
        body = await self.perform_request(url)

        try:
            predictions = _predictions_adapter.validate_json(body)
        except ValidationError as e:
            raise DecodeError(f"Could not decode predictions for stop {stop_id}: {e}") from e

        logger.debug(f"Fetched {len(predictions)} predictions for stop {stop_id}")
        return predictions
