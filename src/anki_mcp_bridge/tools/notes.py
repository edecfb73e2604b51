"""MCP tools for creating, finding, editing and reviewing notes."""

from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from ..dispatcher import ToolDispatcher
from ..models import CardAnswer
from .common import run_tool


def register(app: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register note tools on the server."""

    @app.tool()
    async def create_note(
        note_type: Annotated[str, Field(description="Note type")],
        deck: Annotated[str, Field(description="Deck name")],
        fields: Annotated[
            dict[str, str],
            Field(description="Custom fields for the note (get note type info first)"),
        ],
        tags: Annotated[list[str] | None, Field(description="Tags for the note")] = None,
    ) -> str:
        """Create a new note (LLM should get note type info first).

        Every field of the note type needs a value. Field names may be given exactly
        or in lower case. The deck is created if it does not exist.

        Args:
            note_type: Note type name, e.g. "Basic"
            deck: Target deck
            fields: Field name to value
            tags: Optional tags

        Returns:
            JSON with the new note ID

        Example:
            >>> create_note(
            ...     note_type="Basic",
            ...     deck="Geography::Europe",
            ...     fields={"Front": "Capital of France?", "Back": "Paris"},
            ...     tags=["capitals"],
            ... )
        """
        return await run_tool(dispatcher.create_note(note_type, deck, fields, tags))

    @app.tool()
    async def batch_create_notes(
        notes: Annotated[
            list[dict[str, Any]],
            Field(description="Notes, each with type, deck, fields and optional tags"),
        ],
        stop_on_error: Annotated[
            bool, Field(description="Whether to stop on first error")
        ] = True,
    ) -> str:
        """Create multiple notes at once.

        Notes are created in order and each gets its own success or error entry.

        Args:
            notes: List of {"type", "deck", "fields", "tags"} objects
            stop_on_error: Stop at the first failing note (default True)

        Returns:
            JSON with per-note results and success/failure counts
        """
        return await run_tool(dispatcher.batch_create_notes(notes, stop_on_error))

    @app.tool()
    async def search_notes(
        query: Annotated[str, Field(description="Anki search query")],
    ) -> str:
        """Search for notes using Anki query syntax.

        Details are returned for at most 50 matches; the total count is always reported.

        Args:
            query: Anki search, e.g. 'deck:"Biology" tag:cells'

        Returns:
            JSON with the total match count and note details
        """
        return await run_tool(dispatcher.search_notes(query))

    @app.tool()
    async def get_note_info(
        note_id: Annotated[int, Field(description="Note ID")],
    ) -> str:
        """Get detailed information about a note."""
        return await run_tool(dispatcher.get_note_info(note_id))

    @app.tool()
    async def update_note(
        note_id: Annotated[int, Field(description="Note ID")],
        fields: Annotated[dict[str, str], Field(description="Fields to update")],
        tags: Annotated[
            list[str] | None, Field(description="New tags for the note (replaces existing)")
        ] = None,
    ) -> str:
        """Update an existing note.

        Only the given fields change. When tags are given they replace the note's tags.
        """
        return await run_tool(dispatcher.update_note(note_id, fields, tags))

    @app.tool()
    async def delete_note(
        note_id: Annotated[int, Field(description="Note ID to delete")],
    ) -> str:
        """Delete a note."""
        return await run_tool(dispatcher.delete_note(note_id))

    @app.tool()
    async def answer_cards(
        card_answers: Annotated[
            list[CardAnswer],
            Field(description="Card IDs with an ease rating from 1 (Again) to 4 (Easy)"),
        ],
    ) -> str:
        """Answer cards with Anki, as if they were reviewed."""
        return await run_tool(
            dispatcher.answer_cards([answer.model_dump() for answer in card_answers])
        )
