"""Flashcard and export row schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    """Difficulty label attached to a generated word card."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class FlashcardRecord(BaseModel):
    """A generated vocabulary flashcard, as supplied by the content generator.

    Media handles are either ``data:`` URLs carrying the payload inline or
    http(s) URLs that are fetched at export time.
    """

    model_config = ConfigDict(frozen=True)

    word: str = Field(..., description="Headword shown on the front")
    definition: str | None = Field(None, description="Short definition")
    examples: list[str] = Field(default_factory=list, description="Usage examples")
    synonyms: list[str] = Field(default_factory=list, description="Synonyms")
    difficulty: Difficulty | None = Field(None, description="Difficulty label")
    image_url: str | None = Field(None, description="Image data URL or locator")
    audio_url: str | None = Field(None, description="Audio data URL or locator")
    tags: list[str] = Field(default_factory=list, description="Note tags")


class MediaAsset(BaseModel):
    """A media file registered for one export run."""

    name: str = Field(..., description="Unique filename within the export")
    data: bytes = Field(..., description="Raw file content")
    extension: str = Field(..., description="Extension inferred from MIME or URL")
    mime_type: str = Field(
        "application/octet-stream", description="MIME type reported by the source"
    )


class ExportRow(BaseModel):
    """Front/back content for one card, ready for serialization."""

    front: str = Field(..., description="Front text, may carry a sound marker")
    back: str = Field(..., description="Back HTML fragment")
    image_filename: str | None = Field(None, description="Registered image name")
    audio_filename: str | None = Field(None, description="Registered audio name")
    tags: list[str] = Field(default_factory=list, description="Note tags")


class RowBuildResult(BaseModel):
    """Rows built for an export plus the media they reference.

    ``media`` is kept in registration order; a file's position in the list is
    its ordinal in the native package media index.
    """

    rows: list[ExportRow] = Field(default_factory=list)
    media: list[MediaAsset] = Field(default_factory=list)
