"""AnkiConnect HTTP client with retry and error normalization."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from ..config import RemoteConfig
from ..errors import AnkiError, normalize_error
from ..models import CardAnswer, CardTemplate, NoteInput

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class AnkiClient:
    """Async HTTP client for AnkiConnect API.

    Each public operation sends one AnkiConnect action through a bounded retry
    loop. Failures surface as classified AnkiError values (see
    ``errors.normalize_error``). The client holds no mutable state, so calls
    may run concurrently.
    """

    def __init__(
        self,
        config: RemoteConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize AnkiConnect client.

        Args:
            config: Endpoint, version, timeouts and retry budget
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Coroutine used for backoff delays
        """
        self.config = config or RemoteConfig()
        self._transport = transport
        self._sleep = sleep

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def version(self) -> int:
        return self.config.version

    async def invoke(self, action: str, params: dict[str, Any] | None = None) -> Any:
        """Call AnkiConnect API action once, without retrying.

        Args:
            action: API action name
            params: Action parameters

        Returns:
            API response result

        Raises:
            httpx.HTTPError: Transport failure or non-2xx status
            AnkiError: API returned an error
        """
        payload = {"action": action, "version": self.version, "params": params or {}}
        logger.debug("AnkiConnect request: %s", action)

        async with httpx.AsyncClient(
            transport=self._transport, timeout=self.config.timeout
        ) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            result = response.json()

        if result.get("error"):
            raise AnkiError.api(str(result["error"]))

        return result.get("result")

    async def _execute_with_retry(
        self, operation: Callable[[], Awaitable[T]], max_retries: int | None = None
    ) -> T:
        """Run an operation, retrying any failure with exponential backoff.

        The delay after attempt ``i`` is ``min(2**i, retry_timeout)`` seconds.
        No delay follows the final attempt.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            max_retries: Retries after the first attempt (config default if None)

        Returns:
            Result of the first successful attempt

        Raises:
            AnkiError: Classified failure of the last attempt
            Exception: Unclassified failure of the last attempt
        """
        retries = self.config.max_retries if max_retries is None else max_retries
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            try:
                return await operation()
            except Exception as e:  # noqa: BLE001
                last_error = normalize_error(e)
                logger.warning(
                    "AnkiConnect attempt %d/%d failed: %s", attempt + 1, retries + 1, last_error
                )

                if attempt < retries:
                    delay = min(1.0 * 2**attempt, self.config.retry_timeout)
                    await self._sleep(delay)

        if last_error is None:
            raise AnkiError.connection("Unknown error occurred")
        raise last_error

    async def request(self, action: str, params: dict[str, Any] | None = None) -> Any:
        """Call an AnkiConnect action through the retry loop."""
        return await self._execute_with_retry(lambda: self.invoke(action, params))

    async def check_connection(self) -> bool:
        """Check that AnkiConnect is reachable and responsive.

        Returns:
            True when the version action answered

        Raises:
            AnkiError: Anki is not running, timed out or rejected the call
        """
        await self.request("version")
        return True

    # Deck operations
    async def get_deck_names(self) -> list[str]:
        """Get all deck names.

        Returns:
            List of deck names
        """
        return await self.request("deckNames")

    async def create_deck(self, name: str) -> int:
        """Create a new deck.

        Args:
            name: Deck name (supports hierarchy with ::)

        Returns:
            Deck ID, or 0 if AnkiConnect did not return one
        """
        result = await self.request("createDeck", {"deck": name})
        return result if isinstance(result, int) and not isinstance(result, bool) else 0

    # Model (note type) operations
    async def get_model_names(self) -> list[str]:
        """Get all model (note type) names."""
        return await self.request("modelNames")

    async def get_model_field_names(self, model_name: str) -> list[str]:
        """Get field names for a model, in model order.

        Args:
            model_name: Model name

        Returns:
            List of field names
        """
        return await self.request("modelFieldNames", {"modelName": model_name})

    async def get_model_templates(self, model_name: str) -> dict[str, dict[str, str]]:
        """Get card templates for a model.

        Args:
            model_name: Model name

        Returns:
            Mapping of template name to {"Front": ..., "Back": ...}
        """
        return await self.request("modelTemplates", {"modelName": model_name})

    async def get_model_styling(self, model_name: str) -> dict[str, str]:
        """Get styling for a model.

        Args:
            model_name: Model name

        Returns:
            Dictionary with a "css" key
        """
        return await self.request("modelStyling", {"modelName": model_name})

    async def create_model(
        self,
        model_name: str,
        fields: list[str],
        templates: list[CardTemplate],
        css: str = "",
    ) -> None:
        """Create a new model (note type).

        Args:
            model_name: Name of the new model
            fields: Field names in order
            templates: Card templates
            css: Styling shared by the templates
        """
        await self.request(
            "createModel",
            {
                "modelName": model_name,
                "inOrderFields": fields,
                "css": css,
                "cardTemplates": [
                    {"Name": t.name, "Front": t.front, "Back": t.back} for t in templates
                ],
            },
        )

    # Note operations
    async def add_note(self, note: NoteInput) -> int | None:
        """Add a single note. Duplicates within the deck are rejected.

        Args:
            note: Note to add

        Returns:
            Note ID
        """
        return await self.request("addNote", {"note": note.to_anki()})

    async def add_notes(self, notes: list[NoteInput]) -> list[int | None]:
        """Add multiple notes.

        Args:
            notes: Notes to add

        Returns:
            List of note IDs (None for failures)
        """
        return await self.request("addNotes", {"notes": [note.to_anki() for note in notes]})

    async def find_notes(self, query: str) -> list[int]:
        """Find note IDs matching query.

        Args:
            query: Anki search query

        Returns:
            List of note IDs
        """
        result = await self.request("findNotes", {"query": query})
        if not isinstance(result, list):
            return []
        return [i for i in result if isinstance(i, int) and not isinstance(i, bool)]

    async def notes_info(self, note_ids: list[int]) -> list[dict]:
        """Get information about notes.

        Args:
            note_ids: List of note IDs

        Returns:
            List of note info dictionaries (noteId, modelName, tags, fields)
        """
        result = await self.request("notesInfo", {"notes": note_ids})
        return result if isinstance(result, list) else []

    async def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        """Update fields of an existing note.

        Args:
            note_id: Note ID to update
            fields: Dictionary of field names to values
        """
        await self.request("updateNoteFields", {"note": {"id": note_id, "fields": fields}})

    async def update_note_tags(self, note_id: int, tags: list[str]) -> None:
        """Replace all tags of a note.

        Args:
            note_id: Note ID to update
            tags: New tag list
        """
        await self.request("updateNoteTags", {"note": note_id, "tags": tags})

    async def delete_notes(self, note_ids: list[int]) -> None:
        """Delete notes from Anki.

        Args:
            note_ids: List of note IDs to delete
        """
        await self.request("deleteNotes", {"notes": note_ids})

    # Review operations
    async def answer_cards(self, answers: list[CardAnswer]) -> list[bool]:
        """Answer cards as if reviewed.

        Args:
            answers: Card IDs with ease ratings

        Returns:
            One flag per answer, False if the card was not found
        """
        return await self.request(
            "answerCards",
            {"answers": [{"cardId": a.card_id, "ease": a.ease} for a in answers]},
        )
