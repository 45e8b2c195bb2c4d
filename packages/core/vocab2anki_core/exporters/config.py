"""Export configuration.

``ExportConfig`` carries the options a caller can set for one export run.
Card templates default to the plain Front/Back layout of the generated note
type.
"""

from __future__ import annotations

from dataclasses import dataclass

from vocab2anki_core.exporters.apkg_schema import (
    DEFAULT_ANSWER_FORMAT,
    DEFAULT_CSS,
    DEFAULT_QUESTION_FORMAT,
)
from vocab2anki_core.exporters.formats import ExportFormat


@dataclass(frozen=True)
class ExportConfig:
    """Configuration values for one export."""

    # Deck name, also used for the downloaded filename
    deck_name: str = "vocab"

    # Where the degradation chain starts (apkg -> zip -> tsv)
    requested_format: ExportFormat = ExportFormat.APKG

    # Remote media fetching
    media_fetch_timeout: float = 30.0  # seconds, per request
    media_fetch_attempts: int = 3  # on transport errors only

    # Note type templates for native packages
    question_format: str = DEFAULT_QUESTION_FORMAT
    answer_format: str = DEFAULT_ANSWER_FORMAT
    css: str = DEFAULT_CSS
