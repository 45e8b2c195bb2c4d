"""Export orchestration with format degradation.

An export starts at the requested format and walks ``apkg -> zip -> tsv``
until a stage succeeds. Each stage builds its rows from scratch; a failed
stage is logged and never retried. The plain TSV stage is terminal: if it
fails, the error is raised as ``ExportIOError``.
"""

import re
import time
from collections.abc import Callable
from datetime import datetime, timezone

from vocab2anki_core.exporters.apkg import EngineFactory, create_collection_engine, export_apkg
from vocab2anki_core.exporters.archive import build_zip
from vocab2anki_core.exporters.config import ExportConfig
from vocab2anki_core.exporters.download import DownloadTarget
from vocab2anki_core.exporters.errors import ExportIOError
from vocab2anki_core.exporters.formats import FALLBACK_CHAIN, ExportArtifact, ExportFormat
from vocab2anki_core.exporters.media import MediaResolver
from vocab2anki_core.exporters.rows import build_rows
from vocab2anki_core.exporters.tsv import export_tsv
from vocab2anki_core.schemas.cards import FlashcardRecord, RowBuildResult
from vocab2anki_core.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FILENAME_STEM = "vocab"

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')

ZipBuilder = Callable[[RowBuildResult], bytes]


def safe_filename_stem(deck_name: str) -> str:
    """Make a deck name usable as a download filename stem."""
    stem = _UNSAFE_FILENAME_RE.sub("_", deck_name or "").strip(" .")
    return stem or DEFAULT_FILENAME_STEM


class ExportOrchestrator:
    """Runs an export through the degradation chain and delivers the result."""

    def __init__(
        self,
        config: ExportConfig | None = None,
        target: DownloadTarget | None = None,
        engine_factory: EngineFactory = create_collection_engine,
        zip_builder: ZipBuilder = build_zip,
        resolver: MediaResolver | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the orchestrator.

        Args:
            config: Export options (defaults to ``ExportConfig()``)
            target: Where finished artifacts are delivered; None to only return them
            engine_factory: Database engine factory for native packages
            zip_builder: Builds the zip archive from rows and media
            resolver: Shared media resolver (not closed by the orchestrator);
                one is created per export when omitted
            clock: Returns the current time in seconds
        """
        self.config = config or ExportConfig()
        self.target = target
        self.engine_factory = engine_factory
        self.zip_builder = zip_builder
        self.resolver = resolver
        self.clock = clock

    async def export(
        self,
        cards: list[FlashcardRecord],
        requested: ExportFormat | None = None,
    ) -> ExportArtifact:
        """Export cards, degrading the format on failure.

        Args:
            cards: Flashcard records to export
            requested: Format to try first (defaults to the configured one)

        Returns:
            The artifact that was produced (and delivered, if a target is set)

        Raises:
            ExportIOError: If the terminal TSV stage or the delivery fails
        """
        requested = ExportFormat(requested or self.config.requested_format)
        stages = FALLBACK_CHAIN[FALLBACK_CHAIN.index(requested):]
        logger.info(
            f"Starting export of {len(cards)} cards for '{self.config.deck_name}' "
            f"(requested={requested.value})"
        )

        resolver = self.resolver or MediaResolver(
            timeout=self.config.media_fetch_timeout,
            max_attempts=self.config.media_fetch_attempts,
        )
        try:
            artifact = await self._run_stages(stages, cards, resolver)
        finally:
            if self.resolver is None:
                await resolver.close()

        if artifact.format is not requested:
            logger.warning(
                f"Export degraded from {requested.value} to {artifact.format.value}"
            )

        self._deliver(artifact)
        return artifact

    async def _run_stages(
        self,
        stages: tuple[ExportFormat, ...],
        cards: list[FlashcardRecord],
        resolver: MediaResolver,
    ) -> ExportArtifact:
        for export_format in stages[:-1]:
            try:
                return await self._attempt(export_format, cards, resolver)
            except Exception as e:
                logger.warning(
                    f"{export_format.value} export failed, falling back: "
                    f"{type(e).__name__}: {e}"
                )

        try:
            return await self._attempt(stages[-1], cards, resolver)
        except ExportIOError:
            raise
        except Exception as e:
            raise ExportIOError(f"{stages[-1].value} export failed: {e}") from e

    async def _attempt(
        self,
        export_format: ExportFormat,
        cards: list[FlashcardRecord],
        resolver: MediaResolver,
    ) -> ExportArtifact:
        stem = safe_filename_stem(self.config.deck_name)

        if export_format is ExportFormat.APKG:
            result = await build_rows(cards, resolver)
            content = export_apkg(
                result,
                self.config.deck_name,
                engine_factory=self.engine_factory,
                clock=self.clock,
                question_format=self.config.question_format,
                answer_format=self.config.answer_format,
                css=self.config.css,
            )
            filename = f"{stem}.apkg"
        elif export_format is ExportFormat.ZIP:
            result = await build_rows(cards, resolver)
            content = self.zip_builder(result)
            stamp = datetime.fromtimestamp(self.clock(), tz=timezone.utc).date().isoformat()
            filename = f"{stem}-{stamp}.zip"
        else:
            result = await build_rows(cards, resolver, inline_media=True)
            content = export_tsv(result.rows).encode("utf-8")
            filename = f"{stem}.tsv"

        return ExportArtifact(
            filename=filename,
            content=content,
            format=export_format,
            card_count=len(result.rows),
        )

    def _deliver(self, artifact: ExportArtifact) -> None:
        if self.target is None:
            return
        try:
            self.target.deliver(artifact)
        except ExportIOError:
            raise
        except OSError as e:
            raise ExportIOError(f"Cannot deliver {artifact.filename}: {e}") from e


async def export_flashcards(
    cards: list[FlashcardRecord],
    config: ExportConfig | None = None,
    target: DownloadTarget | None = None,
) -> ExportArtifact:
    """Export cards with default collaborators.

    Args:
        cards: Flashcard records to export
        config: Export options
        target: Optional download target

    Returns:
        The produced artifact
    """
    return await ExportOrchestrator(config=config, target=target).export(cards)
