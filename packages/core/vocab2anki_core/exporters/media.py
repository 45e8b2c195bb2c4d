"""Resolve media references into raw bytes and a file extension."""

import base64
import binascii
import re
from dataclasses import dataclass
from types import TracebackType
from urllib.parse import unquote_to_bytes, urlsplit

import httpx

from vocab2anki_core.exporters.errors import MediaResolutionError
from vocab2anki_core.utils.logging import get_logger
from vocab2anki_core.utils.retry import with_retry

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_EXTENSION = "bin"

# Checked in order against the lowercased MIME type
MIME_EXTENSIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("png",), "png"),
    (("jpeg", "jpg"), "jpg"),
    (("webp",), "webp"),
    (("gif",), "gif"),
    (("mp3", "mpeg"), "mp3"),
    (("wav",), "wav"),
    (("ogg",), "ogg"),
)

_DATA_URL_RE = re.compile(r"^data:([^;,]+)?(;base64)?,(.*)$", re.IGNORECASE | re.DOTALL)
_URL_EXTENSION_RE = re.compile(r"\.([a-z0-9]{2,4})$", re.IGNORECASE)
_MIME_TOKEN_RE = re.compile(r"^[a-z0-9][a-z0-9!#$&^_.+-]*/[a-z0-9][a-z0-9!#$&^_.+-]*$", re.IGNORECASE)

# Default timeout for remote fetches (seconds)
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ResolvedMedia:
    """Decoded media payload."""

    data: bytes
    extension: str
    mime_type: str


def extension_for(mime_type: str | None, url: str | None = None) -> str:
    """Pick a file extension for a MIME type.

    Falls back to a trailing ``.ext`` in the URL path when the MIME type is
    unknown, then to ``bin``.

    Args:
        mime_type: MIME type (may be None or empty)
        url: Optional locator to inspect when the MIME type is not recognized

    Returns:
        Extension without the leading dot
    """
    mime = (mime_type or "").lower()
    for needles, extension in MIME_EXTENSIONS:
        if any(needle in mime for needle in needles):
            return extension

    if url:
        try:
            path = urlsplit(url).path
        except ValueError:
            path = ""
        match = _URL_EXTENSION_RE.search(path)
        if match:
            return match.group(1).lower()

    return DEFAULT_EXTENSION


def parse_data_url(url: str) -> ResolvedMedia:
    """Decode a ``data:`` URL.

    Args:
        url: ``data:[<mime>][;base64],<payload>``

    Returns:
        Decoded media

    Raises:
        MediaResolutionError: If the URL is malformed or the payload does not decode
    """
    match = _DATA_URL_RE.match(url)
    if not match:
        raise MediaResolutionError("Malformed data URL")

    mime_type = match.group(1) or DEFAULT_MIME_TYPE
    payload = match.group(3)

    try:
        if match.group(2):
            data = base64.b64decode(payload, validate=True)
        else:
            data = unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise MediaResolutionError(f"Undecodable data URL payload: {e}") from e

    return ResolvedMedia(data=data, extension=extension_for(mime_type), mime_type=mime_type)


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode bytes as a base64 ``data:`` URL.

    Anything other than a bare ``type/subtype`` token is replaced by
    ``application/octet-stream``.
    """
    mime_type = (mime_type or "").strip()
    if not _MIME_TOKEN_RE.match(mime_type):
        mime_type = DEFAULT_MIME_TYPE
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class MediaResolver:
    """Turns media references into bytes.

    Embedded ``data:`` URLs are decoded in place; http(s) locators are fetched
    with a lazily created ``httpx.AsyncClient`` owned by the resolver. Every
    failure surfaces as ``MediaResolutionError``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = 3,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the resolver.

        Args:
            timeout: Network timeout for remote fetches in seconds
            max_attempts: Attempts per remote fetch on transport errors
            client: Optional pre-built ``httpx.AsyncClient`` (not closed by us)
        """
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def resolve(self, reference: str) -> ResolvedMedia:
        """Resolve a media reference.

        Args:
            reference: ``data:`` URL or http(s) locator

        Returns:
            Decoded media

        Raises:
            MediaResolutionError: If decoding or fetching fails
        """
        reference = (reference or "").strip()
        if not reference:
            raise MediaResolutionError("Empty media reference")

        if reference[:5].lower() == "data:":
            return parse_data_url(reference)

        try:
            scheme = urlsplit(reference).scheme.lower()
        except ValueError as e:
            raise MediaResolutionError(f"Malformed media locator: {e}") from e
        if scheme not in ("http", "https"):
            raise MediaResolutionError(f"Unsupported media locator scheme: {scheme or '(none)'}")

        return await self._fetch(reference)

    async def _fetch(self, url: str) -> ResolvedMedia:
        """Fetch a remote locator."""

        async def _make_request() -> httpx.Response:
            response = await self.client.get(url)
            response.raise_for_status()
            return response

        try:
            response = await with_retry(
                _make_request,
                max_attempts=self.max_attempts,
                operation_name=f"fetch {url}",
            )
        except Exception as e:
            raise MediaResolutionError(f"Failed to fetch {url}: {e}") from e

        mime_type = response.headers.get("content-type", "").split(";")[0].strip()
        data = response.content
        logger.debug(f"Fetched {len(data)} bytes from {url} ({mime_type or 'no type'})")
        return ResolvedMedia(
            data=data,
            extension=extension_for(mime_type, url),
            mime_type=mime_type or DEFAULT_MIME_TYPE,
        )

    async def close(self) -> None:
        """Close the HTTP client if the resolver created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MediaResolver":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
