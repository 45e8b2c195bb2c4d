"""Export formats and the artifact an export produces."""

from enum import Enum

from pydantic import BaseModel, Field


class ExportFormat(str, Enum):
    """Output formats, ordered from richest to plainest."""

    APKG = "apkg"
    ZIP = "zip"
    TSV = "tsv"


MEDIA_TYPES: dict[ExportFormat, str] = {
    ExportFormat.APKG: "application/apkg",
    ExportFormat.ZIP: "application/zip",
    ExportFormat.TSV: "text/tab-separated-values; charset=utf-8",
}

# Degradation order: a failed stage hands over to the next one
FALLBACK_CHAIN: tuple[ExportFormat, ...] = (
    ExportFormat.APKG,
    ExportFormat.ZIP,
    ExportFormat.TSV,
)


class ExportArtifact(BaseModel):
    """A finished export, ready to be downloaded."""

    filename: str = Field(..., description="Suggested download filename")
    content: bytes = Field(..., description="File content")
    format: ExportFormat = Field(..., description="Format actually produced")
    card_count: int = Field(0, description="Number of cards in the artifact")

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]
