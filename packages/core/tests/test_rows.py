"""Tests for row building and media registration."""

import base64

import pytest

from vocab2anki_core.exporters.media import MediaResolver, ResolvedMedia
from vocab2anki_core.exporters.rows import MediaRegistry, build_rows, render_back, slugify
from vocab2anki_core.schemas.cards import Difficulty, FlashcardRecord

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-body"
MP3_BYTES = b"ID3fake-mp3-body"


def data_url(mime: str, data: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


@pytest.fixture
def resolver() -> MediaResolver:
    """Resolver that only ever sees data URLs in these tests."""
    return MediaResolver()


class TestSlugify:
    """Tests for slugify."""

    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("alacrity", "alacrity"),
            ("Café", "cafe"),
            ("cafe", "cafe"),
            ("naïve", "naive"),
            ("  Hello, World! ", "hello-world"),
            ("self--aware", "self-aware"),
            ("!!!", "item"),
            ("", "item"),
            (None, "item"),
        ],
    )
    def test_slugify(self, word: str | None, expected: str) -> None:
        """Test slug derivation rules."""
        assert slugify(word) == expected


class TestMediaRegistry:
    """Tests for unique media naming."""

    def test_collisions_get_suffixes(self) -> None:
        """Test that a clashing name never overwrites the first asset."""
        registry = MediaRegistry()
        media = ResolvedMedia(data=b"1", extension="png", mime_type="image/png")

        first = registry.register("cafe", media)
        second = registry.register("cafe", ResolvedMedia(b"2", "png", "image/png"))
        third = registry.register("cafe", ResolvedMedia(b"3", "png", "image/png"))

        assert [first.name, second.name, third.name] == ["cafe.png", "cafe-2.png", "cafe-3.png"]
        assert [a.data for a in registry.assets] == [b"1", b"2", b"3"]

    def test_different_extensions_do_not_clash(self) -> None:
        """Test that image and audio of one word keep the plain slug."""
        registry = MediaRegistry()

        image = registry.register("zeal", ResolvedMedia(b"i", "png", "image/png"))
        audio = registry.register("zeal", ResolvedMedia(b"a", "mp3", "audio/mpeg"))

        assert image.name == "zeal.png"
        assert audio.name == "zeal.mp3"


class TestRenderBack:
    """Tests for back-side HTML."""

    def test_field_order(self) -> None:
        """Test image, definition, examples, synonyms, difficulty order."""
        card = FlashcardRecord(
            word="zeal",
            definition="great energy",
            examples=["She worked with zeal."],
            synonyms=["passion", "fervor"],
            difficulty=Difficulty.MEDIUM,
        )

        back = render_back(card, image_src="zeal.png")

        assert back == (
            '<div><img src="zeal.png" /></div>'
            "<p><b>Definition:</b> great energy</p>"
            "<div><b>Examples:</b><ul><li>She worked with zeal.</li></ul></div>"
            "<p><b>Synonyms:</b> passion, fervor</p>"
            "<p><b>Difficulty:</b> medium</p>"
        )

    def test_missing_fields_add_nothing(self) -> None:
        """Test that a bare word yields an empty back."""
        assert render_back(FlashcardRecord(word="zeal")) == ""

    def test_fields_are_sanitized(self) -> None:
        """Test that tabs and newlines in fields are neutralized."""
        card = FlashcardRecord(word="zeal", definition="line one\nline\ttwo")

        assert render_back(card) == "<p><b>Definition:</b> line one<br/>line two</p>"

    def test_image_source_is_attribute_escaped(self) -> None:
        """Test that quotes in the image source cannot close the attribute."""
        back = render_back(FlashcardRecord(word="zeal"), image_src='a"b<c.png')

        assert back == '<div><img src="a&quot;b&lt;c.png" /></div>'


class TestBuildRows:
    """Tests for build_rows."""

    @pytest.mark.asyncio
    async def test_media_referenced_by_filename(self, resolver: MediaResolver) -> None:
        """Test image and audio registration in file-reference mode."""
        card = FlashcardRecord(
            word="Zeal",
            definition="great energy",
            image_url=data_url("image/png", PNG_BYTES),
            audio_url=data_url("audio/mpeg", MP3_BYTES),
        )

        result = await build_rows([card], resolver)

        row = result.rows[0]
        assert row.front == "Zeal [sound:zeal.mp3]"
        assert row.back.startswith('<div><img src="zeal.png" /></div>')
        assert row.image_filename == "zeal.png"
        assert row.audio_filename == "zeal.mp3"
        assert [(m.name, m.data) for m in result.media] == [
            ("zeal.png", PNG_BYTES),
            ("zeal.mp3", MP3_BYTES),
        ]

    @pytest.mark.asyncio
    async def test_same_slug_does_not_overwrite(self, resolver: MediaResolver) -> None:
        """Test that words slugifying alike get distinct media names."""
        cards = [
            FlashcardRecord(word="Café", image_url=data_url("image/png", b"first")),
            FlashcardRecord(word="cafe", image_url=data_url("image/png", b"second")),
        ]

        result = await build_rows(cards, resolver)

        assert [m.name for m in result.media] == ["cafe.png", "cafe-2.png"]
        assert [m.data for m in result.media] == [b"first", b"second"]
        assert 'src="cafe.png"' in result.rows[0].back
        assert 'src="cafe-2.png"' in result.rows[1].back

    @pytest.mark.asyncio
    async def test_media_failure_keeps_card(self, resolver: MediaResolver) -> None:
        """Test that a broken media reference drops the slot, not the card."""
        cards = [
            FlashcardRecord(
                word="zeal",
                definition="great energy",
                image_url="data:image/png;base64,%%%broken",
                audio_url="ftp://nowhere/zeal.mp3",
            ),
            FlashcardRecord(word="alacrity"),
        ]

        result = await build_rows(cards, resolver)

        assert len(result.rows) == len(cards)
        assert result.media == []
        assert result.rows[0].front == "zeal"
        assert result.rows[0].back == "<p><b>Definition:</b> great energy</p>"
        assert result.rows[0].image_filename is None

    @pytest.mark.asyncio
    async def test_unparseable_locator_keeps_card(self, resolver: MediaResolver) -> None:
        """Test that a locator urllib cannot split only empties its slot."""
        cards = [
            FlashcardRecord(
                word="zeal",
                definition="great energy",
                image_url="http://[broken/zeal.png",
                audio_url="https://[::1/zeal.mp3",
            ),
            FlashcardRecord(word="alacrity", image_url=data_url("image/png", PNG_BYTES)),
        ]

        result = await build_rows(cards, resolver)

        assert [row.front for row in result.rows] == ["zeal", "alacrity"]
        assert result.rows[0].back == "<p><b>Definition:</b> great energy</p>"
        assert [m.name for m in result.media] == ["alacrity.png"]

    @pytest.mark.asyncio
    async def test_inline_mode(self, resolver: MediaResolver) -> None:
        """Test that inline mode embeds images and skips audio."""
        image = data_url("image/png", PNG_BYTES)
        card = FlashcardRecord(
            word="zeal",
            image_url=image,
            audio_url=data_url("audio/mpeg", MP3_BYTES),
        )

        result = await build_rows([card], resolver, inline_media=True)

        row = result.rows[0]
        assert row.front == "zeal"
        assert row.back == f'<div><img src="{image}" /></div>'
        assert result.media == []

    @pytest.mark.asyncio
    async def test_order_and_tags_preserved(self, resolver: MediaResolver) -> None:
        """Test that rows follow input order and carry tags."""
        cards = [
            FlashcardRecord(word=word, tags=["gre"]) for word in ["b", "a", "c"]
        ]

        result = await build_rows(cards, resolver)

        assert [row.front for row in result.rows] == ["b", "a", "c"]
        assert all(row.tags == ["gre"] for row in result.rows)
