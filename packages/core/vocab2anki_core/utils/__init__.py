"""Utility functions."""

from vocab2anki_core.utils.hashing import checksum, digest
from vocab2anki_core.utils.logging import get_logger, log_exceptions
from vocab2anki_core.utils.retry import with_retry

__all__ = [
    "checksum",
    "digest",
    "get_logger",
    "log_exceptions",
    "with_retry",
]
