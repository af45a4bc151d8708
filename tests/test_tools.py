"""Tests for the MCP stop and prediction tools."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from actransit_mcp.data.config import ACTransitConfig
from actransit_mcp.data.errors import InvalidStopIDError, RequestFailedError, TransportError
from actransit_mcp.models.transit import Prediction, Stop
from actransit_mcp.services.transit_time import TRANSIT_TIMEZONE, format_transit_time
from actransit_mcp.tools import prediction_tools, stop_tools


def _prediction(minutes: int, vehicle: str, route: str = "80", delay: str = "-240") -> Prediction:
    now = datetime.now(TRANSIT_TIMEZONE)
    return Prediction(
        StopId="55765",
        TripId=f"trip-{vehicle}",
        VehicleId=vehicle,
        RouteName=route,
        PredictedDelayInSeconds=delay,
        PredictedDeparture=format_transit_time(now + timedelta(minutes=minutes)),
        PredictionDateTime=format_transit_time(now),
    )


class TestGetPredictionsForStop:
    """Tests for the get_predictions_for_stop tool."""

    @pytest.mark.asyncio
    async def test_returns_derived_fields(self) -> None:
        predictions = [_prediction(10, "5019"), _prediction(20, "5117", delay="0")]

        with patch.object(
            prediction_tools, "_get_predictions_for_stop", AsyncMock(return_value=predictions)
        ):
            response = await prediction_tools.get_predictions_for_stop("55765")

        assert response.stop_id == "55765"
        assert response.count == 2
        assert response.deduplicated is False
        assert response.message is None

        first = response.predictions[0]
        assert first.vehicle_id == "5019"
        assert first.is_delayed is True
        assert first.delay_seconds == -240
        assert 9 <= first.minutes_until_departure <= 10
        assert response.predictions[1].is_delayed is False

    @pytest.mark.asyncio
    async def test_deduplicate_is_opt_in(self) -> None:
        predictions = [_prediction(10, "5019"), _prediction(10, "5117")]

        with patch.object(
            prediction_tools, "_get_predictions_for_stop", AsyncMock(return_value=predictions)
        ):
            plain = await prediction_tools.get_predictions_for_stop("55765")
            deduped = await prediction_tools.get_predictions_for_stop("55765", deduplicate=True)

        assert plain.count == 2
        assert deduped.count == 1
        assert deduped.deduplicated is True
        assert deduped.predictions[0].vehicle_id == "5019"

    @pytest.mark.asyncio
    async def test_empty_result_has_message(self) -> None:
        with patch.object(prediction_tools, "_get_predictions_for_stop", AsyncMock(return_value=[])):
            response = await prediction_tools.get_predictions_for_stop("55765")

        assert response.count == 0
        assert response.message == "No predictions found"

    @pytest.mark.asyncio
    async def test_errors_become_tool_errors(self) -> None:
        error = RequestFailedError(401, "A valid API token is required to use the AC Transit API.")

        with patch.object(prediction_tools, "_get_predictions_for_stop", AsyncMock(side_effect=error)):
            with pytest.raises(ToolError) as exc_info:
                await prediction_tools.get_predictions_for_stop("55765")

        assert str(exc_info.value) == (
            "Something went wrong while trying to retrieve AC Transit predictions: "
            "Request failed, status code 401: A valid API token is required to use the AC Transit API."
        )

    @pytest.mark.asyncio
    async def test_invalid_stop_id(self) -> None:
        with pytest.raises(ToolError, match="Invalid stop ID: nope"):
            await prediction_tools.get_predictions_for_stop("nope")


class TestGetUsefulStopPredictions:
    """Tests for the get_useful_stop_predictions tool."""

    @pytest.mark.asyncio
    async def test_queries_each_configured_stop(self) -> None:
        config = ACTransitConfig(ACTRANSIT_TOKEN="t", useful_stops=["58123", "52246"])
        fetch = AsyncMock(return_value=[_prediction(5, "5019")])

        with (
            patch.object(prediction_tools, "get_config", return_value=config),
            patch.object(prediction_tools, "_get_predictions_for_stop", fetch),
        ):
            response = await prediction_tools.get_useful_stop_predictions()

        assert response.count == 2
        assert [s.stop_id for s in response.stops] == ["58123", "52246"]
        assert {call.args[0] for call in fetch.call_args_list} == {"58123", "52246"}

    @pytest.mark.asyncio
    async def test_any_failure_fails_the_tool(self) -> None:
        config = ACTransitConfig(ACTRANSIT_TOKEN="t", useful_stops=["58123"])

        with (
            patch.object(prediction_tools, "get_config", return_value=config),
            patch.object(
                prediction_tools,
                "_get_predictions_for_stop",
                AsyncMock(side_effect=TransportError("Connection refused")),
            ),
        ):
            with pytest.raises(ToolError, match="Connection refused"):
                await prediction_tools.get_useful_stop_predictions()

    @pytest.mark.asyncio
    async def test_failure_cancels_other_stops(self) -> None:
        """A failing stop cancels fetches still in flight for the other stops."""
        config = ACTransitConfig(ACTRANSIT_TOKEN="t", useful_stops=["52246", "58123"])
        cancelled = asyncio.Event()

        async def fetch(stop_id: str) -> list[Prediction]:
            if stop_id == "58123":
                raise TransportError("Connection refused")
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return []

        with (
            patch.object(prediction_tools, "get_config", return_value=config),
            patch.object(prediction_tools, "_get_predictions_for_stop", AsyncMock(side_effect=fetch)),
        ):
            with pytest.raises(ToolError, match="Connection refused"):
                await prediction_tools.get_useful_stop_predictions()

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_not_masked(self) -> None:
        config = ACTransitConfig(ACTRANSIT_TOKEN="t", useful_stops=["58123"])

        with (
            patch.object(prediction_tools, "get_config", return_value=config),
            patch.object(
                prediction_tools,
                "_get_predictions_for_stop",
                AsyncMock(side_effect=RuntimeError("bug")),
            ),
        ):
            with pytest.raises(ExceptionGroup) as exc_info:
                await prediction_tools.get_useful_stop_predictions()

        assert isinstance(exc_info.value.exceptions[0], RuntimeError)


class TestGetAllStops:
    """Tests for the get_all_stops tool."""

    @pytest.mark.asyncio
    async def test_converts_coordinates(self) -> None:
        stops = [
            Stop(StopId="58123", Name="3rd St:Santa Clara Av", Latitude="37.7732681", Longitude="-122.2882275"),
            Stop(StopId="52246", Name="8th St:Portola Av", Latitude="", ScheduledTime="null"),
        ]

        with patch.object(stop_tools, "_get_all_stops", AsyncMock(return_value=stops)):
            response = await stop_tools.get_all_stops()

        assert response.count == 2
        assert response.stops[0].latitude == pytest.approx(37.7732681)
        assert response.stops[0].longitude == pytest.approx(-122.2882275)
        assert response.stops[1].latitude is None
        assert response.stops[1].longitude is None
        assert response.stops[1].scheduled_time == "null"

    @pytest.mark.asyncio
    async def test_errors_become_tool_errors(self) -> None:
        with patch.object(
            stop_tools, "_get_all_stops", AsyncMock(side_effect=InvalidStopIDError("x"))
        ):
            with pytest.raises(ToolError, match="retrieve AC Transit stops"):
                await stop_tools.get_all_stops()
