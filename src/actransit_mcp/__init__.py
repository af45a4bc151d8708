"""AC Transit real-time stops and predictions over MCP."""

__version__ = "0.1.0"
