"""AnkiConnect client module."""

from .anki_client import AnkiClient

__all__ = ["AnkiClient"]
