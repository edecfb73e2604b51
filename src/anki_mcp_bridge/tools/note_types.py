"""MCP tools for inspecting and creating note types."""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from ..dispatcher import ToolDispatcher
from ..models import CardTemplate
from .common import run_tool


def register(app: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register note type tools on the server."""

    @app.tool()
    async def list_note_types() -> str:
        """List all available note types.

        Returns:
            JSON with the note type names and their count
        """
        return await run_tool(dispatcher.list_note_types())

    @app.tool()
    async def get_note_type_info(
        model_name: Annotated[str, Field(description="Name of the note type/model")],
    ) -> str:
        """Get detailed structure of a note type.

        Call this before create_note to learn which fields the note type expects.
        Results are cached for a few minutes.

        Args:
            model_name: Note type name, e.g. "Basic" or "Cloze"

        Returns:
            JSON with fields (in order), card templates and CSS
        """
        return await run_tool(dispatcher.get_note_type_info(model_name))

    @app.tool()
    async def create_note_type(
        name: Annotated[str, Field(description="Name of the new note type")],
        fields: Annotated[list[str], Field(description="Field names for the note type")],
        templates: Annotated[list[CardTemplate], Field(description="Card templates")],
        css: Annotated[str, Field(description="CSS styling for the note type")] = "",
    ) -> str:
        """Create a new note type.

        Args:
            name: Note type name (must not exist yet)
            fields: Field names in order
            templates: Card templates with name, front and back markup
            css: Optional styling

        Returns:
            JSON summary of the created note type

        Example:
            >>> create_note_type(
            ...     name="Vocabulary",
            ...     fields=["Word", "Meaning"],
            ...     templates=[{"name": "Card 1", "front": "{{Word}}",
            ...                 "back": "{{FrontSide}}<hr id=answer>{{Meaning}}"}],
            ... )
        """
        return await run_tool(
            dispatcher.create_note_type(name, fields, [t.model_dump() for t in templates], css)
        )

    @app.tool()
    async def clear_note_type_cache() -> str:
        """Forget cached note type structures.

        Use after changing note types directly in Anki so the next lookup refetches them.
        """
        return await run_tool(dispatcher.clear_note_type_cache())
