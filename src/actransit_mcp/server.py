import argparse
import asyncio
import logging
from datetime import UTC, datetime

from actransit_mcp.app import mcp
from actransit_mcp.data.config import get_config
from actransit_mcp.data.errors import ACTransitError
from actransit_mcp.models.responses import HealthResponse

# registers the tools on `mcp`
from actransit_mcp.tools import prediction_tools, stop_tools  # noqa: F401

logger = logging.getLogger(__name__)


@mcp.tool()
def health() -> HealthResponse:
    """Check if the AC Transit MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from actransit_mcp import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


async def run_stops() -> None:
    """Print all stops as JSON."""
    response = await stop_tools.build_all_stops_response()
    print(response.model_dump_json(indent=2))


async def run_predictions(stop_id: str, dedupe: bool) -> None:
    """Print sorted predictions for a stop as JSON."""
    response = await prediction_tools.build_predictions_response(stop_id, dedupe=dedupe)
    print(response.model_dump_json(indent=2))


def _add_verbose(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="actransit-mcp",
        description="AC Transit MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")

    # serve command (default)
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the MCP server (default)",
    )
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="MCP transport (default: stdio). HTTP transports listen on PORT.",
    )
    _add_verbose(serve_parser)

    # stops command
    stops_parser = subparsers.add_parser(
        "stops",
        help="Print all AC Transit stops as JSON",
    )
    _add_verbose(stops_parser)

    # predictions command
    predictions_parser = subparsers.add_parser(
        "predictions",
        help="Print predictions for a stop as JSON",
    )
    predictions_parser.add_argument(
        "stop_id",
        help="Stop ID (e.g. 55765)",
    )
    predictions_parser.add_argument(
        "--dedupe",
        action="store_true",
        help="Collapse predictions for the same route and departure time",
    )
    _add_verbose(predictions_parser)

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.command == "stops":
            asyncio.run(run_stops())
        elif args.command == "predictions":
            asyncio.run(run_predictions(args.stop_id, args.dedupe))
        else:
            transport = getattr(args, "transport", "stdio")
            if transport != "stdio":
                mcp.settings.port = get_config().port
            mcp.run(transport=transport)
    except ACTransitError as e:
        logger.error(str(e))
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
