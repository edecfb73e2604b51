"""Pydantic models for note types, notes and card answers."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TemplateMarkup(BaseModel):
    """Front and back markup of one card template."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    front: str = Field(alias="Front", description="Question side template")
    back: str = Field(alias="Back", description="Answer side template")


class ModelSchema(BaseModel):
    """Structure of one note type (Anki "model")."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    model_name: str = Field(alias="modelName", description="Note type name")
    fields: list[str] = Field(description="Field names in model order")
    templates: dict[str, TemplateMarkup] = Field(
        description="Card templates keyed by template name"
    )
    css: str = Field(default="", description="Styling shared by all templates")

    def to_wire(self) -> dict:
        """Serialize with AnkiConnect key names (modelName, Front, Back)."""
        return self.model_dump(by_alias=True)


class CardTemplate(BaseModel):
    """Card template used when creating a note type."""

    name: str = Field(min_length=1, description="Template name, e.g. 'Card 1'")
    front: str = Field(description="Front side markup")
    back: str = Field(description="Back side markup")


class NoteInput(BaseModel):
    """A note ready to be sent to AnkiConnect."""

    deck: str = Field(min_length=1, description="Target deck name")
    model: str = Field(min_length=1, description="Note type name")
    fields: dict[str, str] = Field(description="Field name to value")
    tags: list[str] = Field(default_factory=list, description="Tags for the note")

    @field_validator("deck", "model")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip leading/trailing whitespace."""
        return v.strip()

    def to_anki(self) -> dict:
        """Build the AnkiConnect ``note`` payload."""
        return {
            "deckName": self.deck,
            "modelName": self.model,
            "fields": self.fields,
            "tags": self.tags,
            "options": {"allowDuplicate": False, "duplicateScope": "deck"},
        }


class CardAnswer(BaseModel):
    """Review answer for one card."""

    model_config = ConfigDict(populate_by_name=True)

    card_id: int = Field(alias="cardId", description="Card being answered")
    ease: int = Field(ge=1, le=4, description="1 (Again) to 4 (Easy)")
