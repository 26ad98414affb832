"""MCP server factory.

Builds the read-only data-plane server; no write tool is ever registered.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from .tools import register_data_plane_tools

SERVER_NAME = "marketplace-search"


def create_server() -> FastMCP:
    """Build and return a configured FastMCP server with the search tools registered."""
    server = FastMCP(SERVER_NAME)
    register_data_plane_tools(server)
    return server


if __name__ == "__main__":
    create_server().run(transport="stdio")
