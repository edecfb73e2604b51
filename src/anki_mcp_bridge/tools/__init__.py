"""MCP tools for Anki flashcard management."""

from fastmcp import FastMCP

from ..dispatcher import ToolDispatcher
from . import decks, note_types, notes


def register_tools(app: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register every tool group on the server."""
    decks.register(app, dispatcher)
    note_types.register(app, dispatcher)
    notes.register(app, dispatcher)


__all__ = ["decks", "note_types", "notes", "register_tools"]
