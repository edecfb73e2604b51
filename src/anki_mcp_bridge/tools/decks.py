"""MCP tools for managing Anki decks."""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from ..dispatcher import ToolDispatcher
from .common import run_tool


def register(app: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register deck tools on the server."""

    @app.tool()
    async def list_decks() -> str:
        """List all available Anki decks.

        Returns all deck names from your Anki collection, including hierarchical decks
        (displayed with :: separators, e.g., "Biology::Cells").

        Returns:
            JSON with the deck names and their count
        """
        return await run_tool(dispatcher.list_decks())

    @app.tool()
    async def create_deck(
        name: Annotated[str, Field(description="Name of the deck to create")],
    ) -> str:
        """Create a new Anki deck.

        Supports hierarchical deck structure using :: separators (e.g., "Biology::Cells"
        creates a "Cells" subdeck under "Biology"). Missing parent decks are created
        automatically.

        Args:
            name: Deck name. Use :: for hierarchy (e.g., "Subject::Topic::Subtopic")

        Returns:
            JSON with the new deck ID and name
        """
        return await run_tool(dispatcher.create_deck(name))
