"""FastMCP server factory and main entry point."""

import logging

import httpx
from fastmcp import FastMCP

from .cache import SchemaCache
from .client import AnkiClient
from .config import Settings, get_settings, setup_logging
from .dispatcher import ToolDispatcher
from .middleware import ConnectionCheckMiddleware
from .resources import register_resources
from .tools import register_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "anki-mcp-bridge"


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastMCP:
    """Build a server with its own client, schema cache and dispatcher.

    Args:
        settings: Settings to use (loaded from the environment if not provided)
        transport: Optional httpx transport for the AnkiConnect client

    Returns:
        Configured FastMCP application
    """
    settings = settings or get_settings()

    client = AnkiClient(settings.remote_config(), transport=transport)
    cache = SchemaCache(client, ttl=settings.schema_cache_ttl)
    dispatcher = ToolDispatcher(client, cache)

    app = FastMCP(SERVER_NAME)
    app.add_middleware(ConnectionCheckMiddleware(dispatcher))
    register_tools(app, dispatcher)
    register_resources(app, dispatcher)

    return app


def main() -> None:
    """Main entry point for the MCP server."""
    settings = get_settings()
    setup_logging(settings.log_level)

    app = create_app(settings)
    logger.info("Anki MCP server running on stdio (AnkiConnect at %s)", settings.anki_connect_url)
    app.run()


if __name__ == "__main__":
    main()
