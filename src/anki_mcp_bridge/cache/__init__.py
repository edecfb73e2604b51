"""Note type schema cache."""

from .schema_cache import DEFAULT_TTL, SchemaCache

__all__ = ["DEFAULT_TTL", "SchemaCache"]
