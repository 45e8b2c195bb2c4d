"""vocab2anki-core: export generated vocabulary flashcards to Anki.

Cards can be exported in three formats, tried in order until one succeeds:

Native package (.apkg):
    A zipped SQLite collection with a generated note type and deck, plus the
    media files the cards reference.

Zip archive:
    ``deck.tsv`` with media referenced by filename, plus the media files.

Plain TSV:
    Front/back table with images inlined as data URIs.

    >>> from vocab2anki_core import ExportConfig, FlashcardRecord, export_flashcards
    >>> cards = [FlashcardRecord(word="alacrity", definition="speed and eagerness")]
    >>> artifact = await export_flashcards(cards, ExportConfig(deck_name="GRE"))
    >>> artifact.format, artifact.filename
    (<ExportFormat.APKG: 'apkg'>, 'GRE.apkg')
"""

from vocab2anki_core.exporters import (
    DirectoryDownloadTarget,
    ExportArtifact,
    ExportConfig,
    ExportFormat,
    ExportOrchestrator,
    export_flashcards,
)
from vocab2anki_core.schemas.cards import Difficulty, FlashcardRecord

__version__ = "0.1.0"

__all__ = [
    # Export
    "export_flashcards",
    "ExportOrchestrator",
    "ExportConfig",
    "ExportFormat",
    "ExportArtifact",
    "DirectoryDownloadTarget",
    # Schemas
    "FlashcardRecord",
    "Difficulty",
]
