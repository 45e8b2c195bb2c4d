"""Text sanitizing for tab-separated fields and HTML fragments."""

import re

_NEWLINE_RE = re.compile(r"\r?\n")

LINE_BREAK = "<br/>"


def sanitize(text: str | None) -> str:
    """Make text safe to embed in a TSV field or HTML fragment.

    Tabs become a single space and newlines (``\\n`` or ``\\r\\n``) become
    ``<br/>``. Nothing else is touched, so the function is idempotent.

    Args:
        text: Arbitrary text, or None

    Returns:
        Sanitized text (empty string for None/empty input)
    """
    if not text:
        return ""
    return _NEWLINE_RE.sub(LINE_BREAK, text.replace("\t", " "))
