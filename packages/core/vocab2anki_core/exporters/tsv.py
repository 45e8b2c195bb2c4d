"""TSV export for Anki import."""

from pathlib import Path

from vocab2anki_core.exporters.errors import ExportIOError
from vocab2anki_core.exporters.sanitize import sanitize
from vocab2anki_core.schemas.cards import ExportRow


def format_row(row: ExportRow) -> str:
    """Format one row as ``front<TAB>back``."""
    return f"{sanitize(row.front)}\t{sanitize(row.back)}"


def export_tsv(
    rows: list[ExportRow],
    output: str | Path | None = None,
) -> str:
    """Export rows to TSV format for Anki import.

    Column 1 is the front, column 2 the back HTML. Lines are joined with
    ``\\n`` and there is no header or trailing newline.

    Args:
        rows: Export rows
        output: Optional output path (if None, only returns the string)

    Returns:
        TSV content as string

    Raises:
        ExportIOError: If the output file cannot be written
    """
    content = "\n".join(format_row(row) for row in rows)

    # Write to file if path provided
    if output:
        path = Path(output)
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ExportIOError(f"Cannot write TSV to {path}: {e}") from e

    return content
