"""Time-bounded cache of note type schemas."""

import asyncio
import logging
import time
from collections.abc import Callable

from ..client import AnkiClient
from ..errors import AnkiError
from ..models import ModelSchema, TemplateMarkup

logger = logging.getLogger(__name__)

DEFAULT_TTL = 5 * 60.0


class SchemaCache:
    """Caches note type structure (fields, templates, css) per model name.

    Freshness is cache-wide: a single ``last_update`` stamp covers both the
    per-name entries and the all-schemas snapshot. Once ``now - last_update``
    reaches the TTL every entry is refetched on its next read. Writing either
    kind of entry refreshes the stamp for all of them.

    Callers always receive deep copies of cached schemas.
    """

    def __init__(
        self,
        client: AnkiClient,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize schema cache.

        Args:
            client: Client used to fetch note type metadata
            ttl: Freshness window in seconds
            clock: Monotonic time source in seconds
        """
        self.client = client
        self.ttl = ttl
        self._clock = clock
        self._schemas: dict[str, ModelSchema] = {}
        self._all_schemas: list[ModelSchema] | None = None
        self._last_update: float | None = None

    def _is_fresh(self) -> bool:
        if self._last_update is None:
            return False
        return self._clock() - self._last_update < self.ttl

    def _touch(self) -> None:
        self._last_update = self._clock()

    async def get_schema(self, model_name: str) -> ModelSchema:
        """Get the structure of one note type.

        Args:
            model_name: Note type name

        Returns:
            Copy of the note type schema

        Raises:
            AnkiError: VALIDATION if the name is empty or the note type does not
                exist; any client error from the metadata fetches
        """
        if not model_name:
            raise AnkiError.validation("Model name is required")

        cached = self._schemas.get(model_name)
        if cached is not None and self._is_fresh():
            logger.debug("Schema cache hit: %s", model_name)
            return cached.model_copy(deep=True)

        logger.debug("Schema cache miss: %s", model_name)
        existing_models = await self.client.get_model_names()
        if model_name not in existing_models:
            raise AnkiError.validation(f"Note type not found: {model_name}")

        fields, templates, styling = await asyncio.gather(
            self.client.get_model_field_names(model_name),
            self.client.get_model_templates(model_name),
            self.client.get_model_styling(model_name),
        )

        schema = ModelSchema(
            model_name=model_name,
            fields=list(fields),
            templates={
                name: TemplateMarkup.model_validate(sides) for name, sides in templates.items()
            },
            css=(styling or {}).get("css", ""),
        )

        self._schemas[model_name] = schema
        self._touch()

        return schema.model_copy(deep=True)

    async def get_all_schemas(self) -> list[ModelSchema]:
        """Get the structure of every note type.

        Any failing note type fails the whole call; no partial list is cached.

        Returns:
            Copies of all note type schemas, in model name order from Anki
        """
        if self._all_schemas is not None and self._is_fresh():
            logger.debug("Schema cache hit: all note types")
            return [schema.model_copy(deep=True) for schema in self._all_schemas]

        model_names = await self.client.get_model_names()
        schemas = await asyncio.gather(*(self.get_schema(name) for name in model_names))

        self._all_schemas = list(schemas)
        self._touch()

        return [schema.model_copy(deep=True) for schema in self._all_schemas]

    def clear(self) -> None:
        """Drop every cached schema and force the next read to refetch."""
        self._schemas.clear()
        self._all_schemas = None
        self._last_update = None
