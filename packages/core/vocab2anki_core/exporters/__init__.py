"""Export formats for flashcards."""

from vocab2anki_core.exporters.apkg import PackageBuilder, export_apkg
from vocab2anki_core.exporters.archive import build_zip
from vocab2anki_core.exporters.config import ExportConfig
from vocab2anki_core.exporters.download import DirectoryDownloadTarget, DownloadTarget
from vocab2anki_core.exporters.errors import (
    ExportError,
    ExportIOError,
    MediaResolutionError,
    SchemaInitializationError,
    SerializationError,
)
from vocab2anki_core.exporters.formats import ExportArtifact, ExportFormat
from vocab2anki_core.exporters.media import MediaResolver
from vocab2anki_core.exporters.orchestrator import ExportOrchestrator, export_flashcards
from vocab2anki_core.exporters.rows import build_rows, slugify
from vocab2anki_core.exporters.sanitize import sanitize
from vocab2anki_core.exporters.tsv import export_tsv

__all__ = [
    # Orchestration
    "ExportOrchestrator",
    "export_flashcards",
    "ExportConfig",
    "ExportFormat",
    "ExportArtifact",
    "DownloadTarget",
    "DirectoryDownloadTarget",
    # Stages
    "build_rows",
    "export_tsv",
    "build_zip",
    "export_apkg",
    "PackageBuilder",
    # Helpers
    "MediaResolver",
    "sanitize",
    "slugify",
    # Errors
    "ExportError",
    "ExportIOError",
    "MediaResolutionError",
    "SchemaInitializationError",
    "SerializationError",
]
