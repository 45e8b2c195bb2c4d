"""Pydantic schemas for API request models."""

from pydantic import BaseModel, Field

from vocab2anki_core.exporters.formats import ExportFormat
from vocab2anki_core.schemas.cards import FlashcardRecord


class ExportRequest(BaseModel):
    """Payload for exporting a list of generated flashcards."""

    cards: list[FlashcardRecord] = Field(default_factory=list)
    deck_name: str | None = None
    format: ExportFormat | None = None
