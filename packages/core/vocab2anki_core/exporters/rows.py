"""Build per-card front/back content and collect media for an export."""

import html
import re
import unicodedata

from vocab2anki_core.exporters.errors import MediaResolutionError
from vocab2anki_core.exporters.media import MediaResolver, ResolvedMedia, to_data_url
from vocab2anki_core.exporters.sanitize import sanitize
from vocab2anki_core.schemas.cards import (
    ExportRow,
    FlashcardRecord,
    MediaAsset,
    RowBuildResult,
)
from vocab2anki_core.utils.logging import get_logger

logger = get_logger(__name__)

SLUG_PLACEHOLDER = "item"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str | None) -> str:
    """Derive a filesystem-safe slug from a word.

    Accents are folded to ASCII, runs of anything else become a single ``-``
    and leading/trailing separators are trimmed.

    >>> slugify("Café au lait")
    'cafe-au-lait'
    """
    folded = unicodedata.normalize("NFKD", text or "")
    ascii_text = folded.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM_RE.sub("-", ascii_text).strip("-")
    return slug or SLUG_PLACEHOLDER


class MediaRegistry:
    """Registers media under names that are unique within one export."""

    def __init__(self) -> None:
        self._assets: list[MediaAsset] = []
        self._names: set[str] = set()

    def register(self, slug: str, media: ResolvedMedia) -> MediaAsset:
        """Register media as ``<slug>.<ext>``, suffixing ``-2``, ``-3``... on clashes."""
        name = f"{slug}.{media.extension}"
        counter = 2
        while name in self._names:
            name = f"{slug}-{counter}.{media.extension}"
            counter += 1

        asset = MediaAsset(
            name=name,
            data=media.data,
            extension=media.extension,
            mime_type=media.mime_type,
        )
        self._names.add(name)
        self._assets.append(asset)
        return asset

    @property
    def assets(self) -> list[MediaAsset]:
        return list(self._assets)


async def _resolve_slot(
    resolver: MediaResolver, reference: str | None, word: str, slot: str
) -> ResolvedMedia | None:
    """Resolve one media slot, treating failures as an empty slot."""
    if not reference:
        return None
    try:
        return await resolver.resolve(reference)
    except MediaResolutionError as e:
        logger.warning(f"Dropping {slot} for '{word}': {e}")
        return None


def render_back(
    card: FlashcardRecord,
    image_src: str | None = None,
) -> str:
    """Render the back-side HTML fragment.

    Order: image, definition, examples, synonyms, difficulty. Missing parts
    contribute nothing.
    """
    parts: list[str] = []
    if image_src:
        parts.append(f'<div><img src="{html.escape(image_src, quote=True)}" /></div>')
    if card.definition:
        parts.append(f"<p><b>Definition:</b> {sanitize(card.definition)}</p>")
    if card.examples:
        items = "".join(f"<li>{sanitize(example)}</li>" for example in card.examples)
        parts.append(f"<div><b>Examples:</b><ul>{items}</ul></div>")
    if card.synonyms:
        parts.append(f"<p><b>Synonyms:</b> {sanitize(', '.join(card.synonyms))}</p>")
    if card.difficulty:
        parts.append(f"<p><b>Difficulty:</b> {sanitize(card.difficulty.value)}</p>")
    return "".join(parts)


async def build_rows(
    cards: list[FlashcardRecord],
    resolver: MediaResolver,
    inline_media: bool = False,
) -> RowBuildResult:
    """Build export rows and collect media, one card at a time in input order.

    Args:
        cards: Flashcard records to export
        resolver: Media resolver shared for the export run
        inline_media: Embed images as data URIs and skip audio (plain table
            export); otherwise reference registered media by filename

    Returns:
        One row per card plus media in registration order
    """
    registry = MediaRegistry()
    rows: list[ExportRow] = []

    for card in cards:
        slug = slugify(card.word)
        front = sanitize(card.word)
        image_src: str | None = None
        image_name: str | None = None
        audio_name: str | None = None

        image = await _resolve_slot(resolver, card.image_url, card.word, "image")
        if image is not None:
            if inline_media:
                image_src = to_data_url(image.data, image.mime_type)
            else:
                image_name = registry.register(slug, image).name
                image_src = image_name

        if not inline_media:
            audio = await _resolve_slot(resolver, card.audio_url, card.word, "audio")
            if audio is not None:
                audio_name = registry.register(slug, audio).name
                front = f"{front} [sound:{audio_name}]"

        rows.append(
            ExportRow(
                front=front,
                back=render_back(card, image_src),
                image_filename=image_name,
                audio_filename=audio_name,
                tags=list(card.tags),
            )
        )

    media = registry.assets
    logger.info(f"Built {len(rows)} rows with {len(media)} media files")
    return RowBuildResult(rows=rows, media=media)
