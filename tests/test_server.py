"""Tests for the MCP server and health tool."""

from unittest.mock import AsyncMock, patch

import pytest

from actransit_mcp import __version__
from actransit_mcp.data.errors import InvalidStopIDError
from actransit_mcp.models.responses import GetPredictionsResponse
from actransit_mcp.server import health, main


def test_health_returns_ok_status():
    """Health check should return status ok."""
    response = health()
    assert response.status == "ok"


def test_health_returns_version():
    """Health check should return the current version."""
    response = health()
    assert response.version == __version__


def test_health_returns_timestamp():
    """Health check should return a valid ISO timestamp."""
    response = health()
    assert response.timestamp is not None
    # Should be parseable as ISO format
    assert "T" in response.timestamp


def test_predictions_command_prints_json(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture):
    response = GetPredictionsResponse(
        stop_id="55765", predictions=[], count=0, query_time="2017-04-17T22:15:00"
    )
    build = AsyncMock(return_value=response)
    monkeypatch.setattr("sys.argv", ["actransit-mcp", "predictions", "55765", "--dedupe"])

    with patch("actransit_mcp.tools.prediction_tools.build_predictions_response", build):
        main()

    build.assert_awaited_once_with("55765", dedupe=True)
    assert '"stop_id": "55765"' in capsys.readouterr().out


def test_cli_exits_on_transit_error(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("sys.argv", ["actransit-mcp", "predictions", "nope"])

    with patch(
        "actransit_mcp.tools.prediction_tools.build_predictions_response",
        AsyncMock(side_effect=InvalidStopIDError("nope")),
    ):
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 1
