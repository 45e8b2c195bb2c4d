"""Zip export: ``deck.tsv`` plus the media files it references."""

import zipfile
from io import BytesIO

from vocab2anki_core.exporters.errors import SerializationError
from vocab2anki_core.exporters.tsv import export_tsv
from vocab2anki_core.schemas.cards import RowBuildResult
from vocab2anki_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)

TSV_ENTRY_NAME = "deck.tsv"


@log_exceptions(logger, "zip packaging")
def build_zip(result: RowBuildResult) -> bytes:
    """Package rows and media into a zip archive.

    The archive holds ``deck.tsv`` (media referenced by filename) and one
    entry per registered media file, stored under its registered name. In
    Anki Desktop: extract, then File -> Import -> ``deck.tsv``.

    Args:
        result: Rows and media built in file-reference mode

    Returns:
        Zip archive bytes

    Raises:
        SerializationError: If the archive cannot be written
    """
    buffer = BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(TSV_ENTRY_NAME, export_tsv(result.rows))
            for asset in result.media:
                archive.writestr(asset.name, asset.data)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise SerializationError(f"Failed to build zip archive: {e}") from e

    logger.info(
        f"Packaged zip with {len(result.rows)} rows and {len(result.media)} media files"
    )
    return buffer.getvalue()
