"""APKG export for Anki decks.

Builds a native package by hand: an in-memory SQLite collection (schema in
``apkg_schema``) is filled with one note and one card per export row, then
copied out to a ``collection.anki2`` file and zipped together with the media
index and media files.
"""

import json
import sqlite3
import tempfile
import time
import zipfile
from collections.abc import Callable
from io import BytesIO
from pathlib import Path
from types import TracebackType

from sqlalchemy import Engine, Table, create_engine, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from vocab2anki_core.exporters.apkg_schema import (
    DEFAULT_ANSWER_FORMAT,
    DEFAULT_CSS,
    DEFAULT_QUESTION_FORMAT,
    FIELD_SEPARATOR,
    CollectionTemplate,
    build_collection_template,
    cards,
    col,
    metadata,
    notes,
)
from vocab2anki_core.exporters.errors import (
    ExportIOError,
    SchemaInitializationError,
    SerializationError,
)
from vocab2anki_core.schemas.cards import RowBuildResult
from vocab2anki_core.utils.hashing import checksum, digest
from vocab2anki_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)

COLLECTION_ENTRY_NAME = "collection.anki2"
MEDIA_INDEX_ENTRY_NAME = "media"

EngineFactory = Callable[[], Engine]


def create_collection_engine() -> Engine:
    """Create an engine over a private in-memory SQLite database.

    ``StaticPool`` keeps a single connection so the database lives as long
    as the engine.
    """
    return create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def tags_to_str(tags: list[str] | None) -> str:
    """Render tags the way Anki stores them: space-joined and space-padded."""
    if not tags:
        return ""
    return " " + " ".join(tag.replace(" ", "_") for tag in tags) + " "


class IdAllocator:
    """Monotonic id counters, one per table, seeded once per export.

    The first id handed out for a table is the seed, or one past the table's
    maximum id at seeding time if that is larger. Names without a backing
    table (``"decks"``, ``"models"``) start at the seed.
    """

    def __init__(self, seed: int, existing_max: dict[str, int | None] | None = None):
        self.seed = seed
        self._next: dict[str, int] = {}
        for name, current in (existing_max or {}).items():
            if current is not None:
                self._next[name] = max(seed, int(current) + 1)

    def next_id(self, table: Table | str) -> int:
        name = table if isinstance(table, str) else table.name
        allocated = self._next.get(name, self.seed)
        self._next[name] = allocated + 1
        return allocated


class PackageBuilder:
    """Owns one collection database for the duration of one export."""

    def __init__(
        self,
        deck_name: str,
        engine_factory: EngineFactory = create_collection_engine,
        clock: Callable[[], float] = time.time,
        question_format: str = DEFAULT_QUESTION_FORMAT,
        answer_format: str = DEFAULT_ANSWER_FORMAT,
        css: str = DEFAULT_CSS,
    ):
        """Create and seed the collection database.

        Args:
            deck_name: Name of the exported deck
            engine_factory: Returns a ready SQLAlchemy engine
            clock: Returns the current time in seconds
            question_format: Card front template
            answer_format: Card back template
            css: Card styling

        Raises:
            SchemaInitializationError: If the engine or schema cannot be set up
        """
        self.deck_name = deck_name
        self.created_ms = int(clock() * 1000)
        self._media: list[tuple[str, bytes]] = []
        self._due = 0

        try:
            self._engine = engine_factory()
        except Exception as e:
            raise SchemaInitializationError(f"Cannot create database engine: {e}") from e

        try:
            metadata.create_all(self._engine)
            with self._engine.connect() as conn:
                existing_max = {
                    table.name: conn.execute(select(func.max(table.c.id))).scalar()
                    for table in (notes, cards)
                }
        except Exception as e:
            self._engine.dispose()
            raise SchemaInitializationError(f"Cannot initialize collection database: {e}") from e

        self.ids = IdAllocator(self.created_ms, existing_max)
        self.template: CollectionTemplate = build_collection_template(
            deck_name,
            deck_id=self.ids.next_id("decks"),
            model_id=self.ids.next_id("models"),
            created_ms=self.created_ms,
            question_format=question_format,
            answer_format=answer_format,
            css=css,
        )

        try:
            with self._engine.begin() as conn:
                conn.execute(insert(col).values(**self.template.to_row()))
        except SQLAlchemyError as e:
            self._engine.dispose()
            raise SchemaInitializationError(f"Cannot seed collection row: {e}") from e

        logger.debug(
            f"Initialized collection for '{deck_name}' "
            f"(deck_id={self.deck_id}, model_id={self.model_id})"
        )

    @property
    def deck_id(self) -> int:
        return self.template.deck_id

    @property
    def model_id(self) -> int:
        return self.template.model_id

    @property
    def media(self) -> list[tuple[str, bytes]]:
        return list(self._media)

    def add_media(self, filename: str, data: bytes) -> int:
        """Register a media file; returns its ordinal in the media index."""
        self._media.append((filename, data))
        return len(self._media) - 1

    def add_card(self, front: str, back: str, tags: list[str] | None = None) -> int:
        """Insert a note and its single card.

        Every call adds a new note and card, so the package holds one of each
        per export row. Identical front/back pairs share a GUID.

        Args:
            front: Front field
            back: Back field
            tags: Optional note tags

        Returns:
            The note id

        Raises:
            SerializationError: If the rows cannot be written
        """
        guid = digest(f"{self.deck_id}{front}{back}")
        fields = front + FIELD_SEPARATOR + back
        modified = self.created_ms // 1000

        try:
            with self._engine.begin() as conn:
                note_id = self.ids.next_id(notes)
                card_id = self.ids.next_id(cards)
                self._due += 1

                conn.execute(
                    insert(notes).values(
                        id=note_id,
                        guid=guid,
                        mid=self.model_id,
                        mod=modified,
                        usn=-1,
                        tags=tags_to_str(tags),
                        flds=fields,
                        sfld=front,
                        csum=checksum(fields),
                        flags=0,
                        data="",
                    )
                )
                conn.execute(
                    insert(cards).values(
                        id=card_id,
                        nid=note_id,
                        did=self.deck_id,
                        ord=0,
                        mod=modified,
                        usn=-1,
                        type=0,
                        queue=0,
                        due=self._due,
                        ivl=0,
                        factor=0,
                        reps=0,
                        lapses=0,
                        left=0,
                        odue=0,
                        odid=0,
                        flags=0,
                        data="",
                    )
                )
        except SQLAlchemyError as e:
            raise SerializationError(f"Failed to insert note for '{front}': {e}") from e

        return note_id

    def serialize_database(self) -> bytes:
        """Copy the live database into SQLite file bytes."""
        with tempfile.TemporaryDirectory(prefix="anki_collection_") as temp_dir:
            path = Path(temp_dir) / COLLECTION_ENTRY_NAME
            raw = self._engine.raw_connection()
            try:
                target = sqlite3.connect(path)
                try:
                    raw.driver_connection.backup(target)
                finally:
                    target.close()
            finally:
                raw.close()
            return path.read_bytes()

    @log_exceptions(logger, "package serialization")
    def build(self) -> bytes:
        """Serialize the collection and media into package bytes.

        Returns:
            Zip archive with ``collection.anki2``, ``media`` and the media
            files stored under their ordinals

        Raises:
            SerializationError: If the database or archive cannot be written
        """
        try:
            database = self.serialize_database()
            media_index = {str(i): name for i, (name, _) in enumerate(self._media)}

            buffer = BytesIO()
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(COLLECTION_ENTRY_NAME, database)
                archive.writestr(MEDIA_INDEX_ENTRY_NAME, json.dumps(media_index))
                for i, (_, data) in enumerate(self._media):
                    archive.writestr(str(i), data)
        except (SQLAlchemyError, sqlite3.Error, OSError) as e:
            raise SerializationError(f"Failed to serialize package: {e}") from e

        return buffer.getvalue()

    def close(self) -> None:
        """Release the database."""
        self._engine.dispose()

    def __enter__(self) -> "PackageBuilder":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def export_apkg(
    result: RowBuildResult,
    deck_name: str,
    output: str | Path | None = None,
    engine_factory: EngineFactory = create_collection_engine,
    clock: Callable[[], float] = time.time,
    question_format: str = DEFAULT_QUESTION_FORMAT,
    answer_format: str = DEFAULT_ANSWER_FORMAT,
    css: str = DEFAULT_CSS,
) -> bytes:
    """Export rows and media to APKG format (Anki deck package).

    Args:
        result: Rows and media built in file-reference mode
        deck_name: Name for the Anki deck
        output: Optional output path (if None, only returns the bytes)
        engine_factory: Returns a ready SQLAlchemy engine
        clock: Returns the current time in seconds
        question_format: Card front template
        answer_format: Card back template
        css: Card styling

    Returns:
        Package bytes

    Raises:
        SchemaInitializationError: If the collection database cannot be set up
        SerializationError: If rows or the package cannot be written
        ExportIOError: If the output file cannot be written
    """
    logger.info(
        f"Exporting APKG: {deck_name} ({len(result.rows)} cards, {len(result.media)} media files)"
    )

    with PackageBuilder(
        deck_name,
        engine_factory=engine_factory,
        clock=clock,
        question_format=question_format,
        answer_format=answer_format,
        css=css,
    ) as builder:
        for row in result.rows:
            builder.add_card(row.front, row.back, row.tags)
        for asset in result.media:
            builder.add_media(asset.name, asset.data)
        data = builder.build()

    if output:
        path = Path(output)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise ExportIOError(f"Cannot write APKG to {path}: {e}") from e
        logger.info(f"Created APKG at {path}")

    return data
