"""Data schemas for the export engine.

Flashcard records come in from the content generator; export rows and media
assets are produced while building an export.
"""

from vocab2anki_core.schemas.cards import (
    Difficulty,
    ExportRow,
    FlashcardRecord,
    MediaAsset,
    RowBuildResult,
)

__all__ = [
    # Input
    "Difficulty",
    "FlashcardRecord",
    # Export
    "ExportRow",
    "MediaAsset",
    "RowBuildResult",
]
