"""MCP server bridging LLM agents to Anki through AnkiConnect."""

__version__ = "0.1.0"
