"""Shared result handling for MCP tools."""

import json
import logging
from collections.abc import Awaitable

from fastmcp.exceptions import ToolError

from ..errors import AnkiError

logger = logging.getLogger(__name__)


async def run_tool(operation: Awaitable[dict]) -> str:
    """Await a dispatcher call and render its result for the MCP client.

    Args:
        operation: Pending ToolDispatcher call

    Returns:
        Result as indented JSON text

    Raises:
        ToolError: With the actionable message of an AnkiError, or a generic
            "Anki error" message for anything unclassified
    """
    try:
        result = await operation
    except AnkiError as e:
        logger.info("Tool failed (%s): %s", e.kind.value, e.message)
        raise ToolError(e.message) from e
    except Exception as e:
        logger.exception("Unexpected tool failure")
        raise ToolError(f"Anki error: {e}") from e

    return json.dumps(result, indent=2, ensure_ascii=False)
