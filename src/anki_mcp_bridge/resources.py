"""MCP resources for read-only access to decks and note type schemas."""

import json
from urllib.parse import unquote

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError

from .dispatcher import ToolDispatcher, model_note_tool_name
from .errors import AnkiError, ErrorKind

JSON_MIME = "application/json"


def _dump(payload: dict) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def register_resources(app: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register deck and note type resources on the server."""
    client = dispatcher.client
    cache = dispatcher.cache

    @app.resource(
        "anki://decks/all",
        name="All Decks",
        description="List of all available decks in Anki",
        mime_type=JSON_MIME,
    )
    async def all_decks() -> str:
        """All deck names with their count."""
        decks = await client.get_deck_names()
        return _dump({"decks": decks, "count": len(decks)})

    @app.resource(
        "anki://note-types/all",
        name="All Note Types",
        description="List of all available note types",
        mime_type=JSON_MIME,
    )
    async def all_note_types() -> str:
        """All note type names with their count."""
        model_names = await client.get_model_names()
        return _dump({"noteTypes": model_names, "count": len(model_names)})

    @app.resource(
        "anki://note-types/all-with-schemas",
        name="All Note Types with Schemas",
        description="Detailed structure information for all note types",
        mime_type=JSON_MIME,
    )
    async def all_note_type_schemas() -> str:
        """Fields, templates and CSS of every note type (cached)."""
        schemas = await cache.get_all_schemas()
        return _dump(
            {"noteTypes": [schema.to_wire() for schema in schemas], "count": len(schemas)}
        )

    @app.resource(
        "anki://note-types/{model_name}",
        name="Note Type Schema",
        description="Detailed structure information for a specific note type",
        mime_type=JSON_MIME,
    )
    async def note_type_schema(model_name: str) -> str:
        """Fields, templates and CSS of one note type (cached).

        Also names the ``create_<note type>_note`` tool for this note type.
        """
        model_name = unquote(model_name)
        try:
            schema = await cache.get_schema(model_name)
        except AnkiError as e:
            if e.kind is ErrorKind.VALIDATION:
                raise ResourceError(f"Note type '{model_name}' does not exist") from e
            raise ResourceError(e.message) from e

        return _dump({**schema.to_wire(), "createTool": model_note_tool_name(model_name)})
