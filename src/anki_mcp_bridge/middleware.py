"""FastMCP middleware: per-request Anki probe and dynamic note tools."""

import logging

from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, ErrorData, TextContent

from .dispatcher import MODEL_NOTE_TOOL, ToolDispatcher
from .errors import AnkiError
from .tools.common import run_tool

logger = logging.getLogger(__name__)


class ConnectionCheckMiddleware(Middleware):
    """Probe AnkiConnect before every tool and resource request.

    Connectivity is checked on each request instead of being cached, so a
    closed Anki is reported on the very next call. Also serves the
    ``create_<note type>_note`` tools, which are not registered individually.
    """

    def __init__(self, dispatcher: ToolDispatcher):
        self.dispatcher = dispatcher

    async def _check_connection(self) -> None:
        try:
            await self.dispatcher.client.check_connection()
        except Exception as e:
            detail = e.message if isinstance(e, AnkiError) else str(e)
            logger.error("Anki connection check failed: %s", detail)
            raise McpError(
                ErrorData(code=INTERNAL_ERROR, message=f"Failed to connect to Anki. {detail}")
            ) from e

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        await self._check_connection()

        name = context.message.name
        if MODEL_NOTE_TOOL.match(name):
            text = await run_tool(self.dispatcher.dispatch(name, context.message.arguments))
            return ToolResult(content=[TextContent(type="text", text=text)])

        return await call_next(context)

    async def on_list_tools(self, context: MiddlewareContext, call_next):
        await self._check_connection()
        return await call_next(context)

    async def on_read_resource(self, context: MiddlewareContext, call_next):
        await self._check_connection()
        return await call_next(context)

    async def on_list_resources(self, context: MiddlewareContext, call_next):
        await self._check_connection()
        return await call_next(context)

    async def on_list_resource_templates(self, context: MiddlewareContext, call_next):
        await self._check_connection()
        return await call_next(context)
