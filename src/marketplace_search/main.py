"""Main entry point for the marketplace search MCP server."""

from .config.runtime import get_settings
from .mcp.auth import require_data_scope
from .mcp.observability import configure_logging, get_logger
from .mcp.server import SERVER_NAME, create_server


def main():
    """Configure logging, check the data scope and serve over stdio."""
    settings = get_settings()
    configure_logging(settings.log_level)
    require_data_scope()
    get_logger().info("server_start", extra={"server": SERVER_NAME, "store_backend": settings.store_backend.value})
    create_server().run(transport="stdio")


if __name__ == "__main__":
    main()
