"""Download targets that receive finished artifacts."""

from pathlib import Path
from typing import Protocol

from vocab2anki_core.exporters.errors import ExportIOError
from vocab2anki_core.exporters.formats import ExportArtifact
from vocab2anki_core.utils.logging import get_logger

logger = get_logger(__name__)


class DownloadTarget(Protocol):
    """Anything that can deliver an artifact to the user."""

    def deliver(self, artifact: ExportArtifact) -> Path | None:
        ...


class DirectoryDownloadTarget:
    """Writes artifacts into a downloads directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def deliver(self, artifact: ExportArtifact) -> Path:
        """Write the artifact as ``<directory>/<artifact.filename>``.

        Raises:
            ExportIOError: If the file cannot be written
        """
        path = self.directory / artifact.filename
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(artifact.content)
        except OSError as e:
            raise ExportIOError(f"Cannot write {path}: {e}") from e

        logger.info(f"Saved {artifact.format.value} export to {path} ({len(artifact.content)} bytes)")
        return path
