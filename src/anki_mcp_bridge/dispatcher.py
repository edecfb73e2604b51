"""Tool dispatch: argument checks and the calls behind each MCP tool."""

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from .cache import SchemaCache
from .client import AnkiClient
from .errors import AnkiError
from .models import CardAnswer, CardTemplate, NoteInput

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 50

MODEL_NOTE_TOOL = re.compile(r"^create_(.+)_note$")


def model_note_tool_name(model_name: str) -> str:
    """Name of the dynamic note creation tool for a note type."""
    return "create_" + re.sub(r"\s+", "_", model_name) + "_note"


def _require(value: Any, message: str) -> None:
    if not value:
        raise AnkiError.validation(message)


def _pick_field(values: dict[str, Any], field: str) -> Any:
    # Accept either the model's exact field name or its lower-case form
    return values.get(field) or values.get(field.lower())


def _check_note_args(note_type: Any, deck: Any, fields: Any, tags: Any = None) -> str:
    """Validate note arguments before any remote call.

    Returns:
        The deck name without surrounding whitespace
    """
    _require(isinstance(note_type, str) and note_type, "Note type is required")
    _require(isinstance(deck, str) and deck.strip(), "Deck name is required")
    _require(isinstance(fields, dict) and fields, "Fields are required")
    if tags is not None and not (
        isinstance(tags, list) and all(isinstance(tag, str) for tag in tags)
    ):
        raise AnkiError.validation("Tags must be a list of strings")
    return deck.strip()


class ToolDispatcher:
    """Maps tool names to validated calls against the client and schema cache."""

    def __init__(self, client: AnkiClient, cache: SchemaCache):
        self.client = client
        self.cache = cache

    async def dispatch(self, name: str, arguments: dict[str, Any] | None = None) -> dict:
        """Run a tool by name.

        Args:
            name: Tool name, including the dynamic ``create_<model>_note`` form
            arguments: Raw tool arguments

        Returns:
            JSON-serializable tool result

        Raises:
            AnkiError: VALIDATION for unknown tools or bad arguments, otherwise
                whatever the client raised
        """
        args = arguments or {}

        handlers: dict[str, Callable[[], Awaitable[dict]]] = {
            # Deck tools
            "list_decks": lambda: self.list_decks(),
            "create_deck": lambda: self.create_deck(args.get("name", "")),
            # Note type tools
            "list_note_types": lambda: self.list_note_types(),
            "create_note_type": lambda: self.create_note_type(
                args.get("name", ""),
                args.get("fields") or [],
                args.get("templates") or [],
                args.get("css") or "",
            ),
            "get_note_type_info": lambda: self.get_note_type_info(args.get("model_name", "")),
            # Note tools
            "create_note": lambda: self.create_note(
                args.get("note_type", ""),
                args.get("deck", ""),
                args.get("fields") or {},
                args.get("tags"),
            ),
            "batch_create_notes": lambda: self.batch_create_notes(
                args.get("notes") or [], args.get("stop_on_error", True)
            ),
            "search_notes": lambda: self.search_notes(args.get("query", "")),
            "get_note_info": lambda: self.get_note_info(args.get("note_id")),
            "update_note": lambda: self.update_note(
                args.get("note_id"), args.get("fields") or {}, args.get("tags")
            ),
            "delete_note": lambda: self.delete_note(args.get("note_id")),
            "answer_cards": lambda: self.answer_cards(args.get("card_answers") or []),
            "clear_note_type_cache": lambda: self.clear_note_type_cache(),
        }

        handler = handlers.get(name)
        if handler is not None:
            return await handler()

        model_match = MODEL_NOTE_TOOL.match(name)
        if model_match:
            return await self.create_model_note(model_match.group(1).replace("_", " "), args)

        raise AnkiError.validation(f"Unknown tool: {name}")

    # Deck tools
    async def list_decks(self) -> dict:
        """List all deck names.

        Returns:
            Dict with deck names and their count
        """
        decks = await self.client.get_deck_names()
        return {"decks": decks, "count": len(decks)}

    async def create_deck(self, name: str) -> dict:
        """Create a deck, including missing parents of a ``::`` path.

        Args:
            name: Deck name, surrounding whitespace is ignored

        Returns:
            Dict with the deck ID and the stripped name
        """
        _require(isinstance(name, str) and name.strip(), "Deck name is required")
        name = name.strip()
        deck_id = await self.client.create_deck(name)
        return {"deckId": deck_id, "name": name}

    async def _ensure_deck(self, deck: str) -> None:
        decks = await self.client.get_deck_names()
        if deck not in decks:
            logger.info("Creating missing deck: %s", deck)
            await self.client.create_deck(deck)

    # Note type tools
    async def list_note_types(self) -> dict:
        """List all note type names with their count."""
        note_types = await self.client.get_model_names()
        return {"noteTypes": note_types, "count": len(note_types)}

    async def create_note_type(
        self,
        name: str,
        fields: list[str],
        templates: list[dict[str, str]],
        css: str = "",
    ) -> dict:
        """Create a note type and invalidate cached schemas.

        Args:
            name: New note type name
            fields: Field names in order
            templates: Dicts with name, front and back
            css: Styling for the templates

        Returns:
            Summary of the created note type
        """
        _require(name, "Note type name is required")
        _require(fields, "Fields are required")
        _require(templates, "Templates are required")

        try:
            card_templates = [CardTemplate.model_validate(t) for t in templates]
        except ValidationError as e:
            raise AnkiError.validation(f"Invalid template: {e.errors()[0]['msg']}") from e

        existing_models = await self.client.get_model_names()
        if name in existing_models:
            raise AnkiError.validation(f"Note type already exists: {name}")

        await self.client.create_model(name, list(fields), card_templates, css)
        self.cache.clear()

        return {
            "success": True,
            "modelName": name,
            "fields": list(fields),
            "templates": len(card_templates),
        }

    async def get_note_type_info(self, model_name: str) -> dict:
        """Get fields, templates and CSS of a note type from the schema cache."""
        _require(model_name, "Model name is required")
        schema = await self.cache.get_schema(model_name)
        return schema.to_wire()

    # Note tools
    async def _build_note(
        self, model_name: str, deck: str, values: dict[str, Any], tags: list[str] | None
    ) -> NoteInput:
        """Check the note type, map values onto its fields, then make sure the deck exists.

        Every model field must have a value under its exact or lower-case name.
        """
        schema = await self.cache.get_schema(model_name)
        for field in schema.fields:
            if not _pick_field(values, field):
                raise AnkiError.validation(f"Missing required field: {field}")

        await self._ensure_deck(deck)

        fields = {field: str(_pick_field(values, field)) for field in schema.fields}
        return NoteInput(deck=deck, model=model_name, fields=fields, tags=tags or [])

    async def create_note(
        self,
        note_type: str,
        deck: str,
        fields: dict[str, Any],
        tags: list[str] | None = None,
    ) -> dict:
        """Create one note after checking it against its note type.

        The deck is created when it does not exist yet.

        Args:
            note_type: Note type name
            deck: Target deck
            fields: Field name (exact or lower-case) to value
            tags: Optional tags

        Returns:
            Dict with the new note ID, deck and note type
        """
        deck = _check_note_args(note_type, deck, fields, tags)

        note = await self._build_note(note_type, deck, fields, tags)
        note_id = await self.client.add_note(note)
        return {"noteId": note_id, "deck": deck, "modelName": note_type}

    async def create_model_note(self, model_name: str, args: dict[str, Any]) -> dict:
        """Create a note of a fixed type from flat tool arguments.

        Field values come from top-level arguments; absent fields are left
        empty. The configured default deck is used when no deck is given.
        """
        deck = args.get("deck") or self.client.config.default_deck
        _require(isinstance(deck, str) and deck.strip(), "Deck name is required")
        deck = deck.strip()

        schema = await self.cache.get_schema(model_name)
        await self._ensure_deck(deck)

        fields = {field: str(_pick_field(args, field) or "") for field in schema.fields}
        tags = args.get("tags")
        note = NoteInput(
            deck=deck,
            model=model_name,
            fields=fields,
            tags=tags if isinstance(tags, list) else [],
        )
        note_id = await self.client.add_note(note)
        return {"noteId": note_id, "deck": deck, "modelName": model_name}

    async def batch_create_notes(
        self, notes: list[dict[str, Any]], stop_on_error: bool = True
    ) -> dict:
        """Create notes one by one, recording a result per note.

        A failing note never aborts the notes already created: every error,
        classified or not, becomes that note's result entry.

        Args:
            notes: Dicts with type, deck, fields and optional tags
            stop_on_error: Stop at the first failing note

        Returns:
            Per-note results with success and failure counts
        """
        _require(isinstance(notes, list) and notes, "Notes array is required")

        results: list[dict[str, Any]] = []
        for index, raw in enumerate(notes):
            try:
                _require(isinstance(raw, dict), "Each note must be an object")
                deck = _check_note_args(
                    raw.get("type"), raw.get("deck"), raw.get("fields"), raw.get("tags")
                )
                note = await self._build_note(raw["type"], deck, raw["fields"], raw.get("tags"))
                note_id = await self.client.add_note(note)
                results.append({"success": True, "noteId": note_id, "index": index})
            except AnkiError as e:
                results.append({"success": False, "error": e.message, "index": index})
            except Exception as e:  # noqa: BLE001
                logger.warning("Batch note %d failed: %s", index, e)
                results.append({"success": False, "error": str(e), "index": index})

            if stop_on_error and not results[-1]["success"]:
                break

        successful = sum(1 for r in results if r["success"])
        return {
            "results": results,
            "total": len(notes),
            "successful": successful,
            "failed": len(results) - successful,
        }

    async def search_notes(self, query: str) -> dict:
        """Find notes with Anki search syntax.

        Args:
            query: Anki search query

        Returns:
            Dict with the total match count, details of the first matches and
            whether the detail limit was applied
        """
        _require(isinstance(query, str) and query, "Search query is required")

        note_ids = await self.client.find_notes(query)
        notes: list[dict] = []
        if note_ids:
            notes = await self.client.notes_info(note_ids[:SEARCH_RESULT_LIMIT])

        return {
            "query": query,
            "total": len(note_ids),
            "notes": notes,
            "limitApplied": len(note_ids) > SEARCH_RESULT_LIMIT,
        }

    async def _get_note(self, note_id: int) -> dict:
        notes = await self.client.notes_info([note_id])
        # AnkiConnect returns an empty object for unknown ids
        if not notes or not notes[0]:
            raise AnkiError.validation(f"Note not found: {note_id}")
        return notes[0]

    async def get_note_info(self, note_id: int | None) -> dict:
        """Get fields, tags and note type of one note.

        Args:
            note_id: Note ID

        Returns:
            AnkiConnect note info

        Raises:
            AnkiError: VALIDATION if the note does not exist
        """
        _require(note_id, "Note ID is required")
        return await self._get_note(note_id)

    async def update_note(
        self, note_id: int | None, fields: dict[str, str], tags: list[str] | None = None
    ) -> dict:
        """Update fields of an existing note and, when given, replace its tags.

        Args:
            note_id: Note ID
            fields: Field name to new value, other fields are kept
            tags: New tags, or None to keep the current ones

        Returns:
            Dict with success flag and note ID
        """
        _require(note_id, "Note ID is required")
        _require(fields, "Fields are required")

        await self._get_note(note_id)
        await self.client.update_note_fields(note_id, fields)
        if tags is not None:
            await self.client.update_note_tags(note_id, tags)

        return {"success": True, "noteId": note_id}

    async def delete_note(self, note_id: int | None) -> dict:
        """Delete one note and its cards.

        Args:
            note_id: Note ID

        Returns:
            Dict with success flag and note ID
        """
        _require(note_id, "Note ID is required")
        await self.client.delete_notes([note_id])
        return {"success": True, "noteId": note_id}

    async def answer_cards(self, card_answers: list[dict[str, Any]]) -> dict:
        """Review cards with the given ease ratings.

        Args:
            card_answers: Dicts with cardId (or card_id) and ease from 1 to 4

        Returns:
            Dict with success flag and one result per answer
        """
        _require(card_answers, "Card answers are required")
        try:
            answers = [CardAnswer.model_validate(a) for a in card_answers]
        except ValidationError as e:
            raise AnkiError.validation(f"Invalid card answer: {e.errors()[0]['msg']}") from e

        results = await self.client.answer_cards(answers)
        return {"success": True, "results": results}

    async def clear_note_type_cache(self) -> dict:
        """Drop every cached note type schema."""
        self.cache.clear()
        return {"success": True}
