"""Digest and checksum primitives for native package identifiers.

The target application identifies notes by a SHA-1 hex digest and indexes
duplicates by a 32-bit checksum cut from that digest, so both values must be
byte-identical to what the application computes itself.
"""

import hashlib
from typing import Union


def digest(message: Union[str, bytes]) -> str:
    """Compute the SHA-1 digest of a message.

    Args:
        message: Text (encoded as UTF-8) or raw bytes

    Returns:
        40 lowercase hex characters
    """
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hashlib.sha1(message).hexdigest()


def checksum(message: Union[str, bytes]) -> int:
    """Compute the duplicate-detection checksum of a message.

    The checksum is the first 8 hex characters of the digest read as an
    unsigned base-16 integer.

    Args:
        message: Text (encoded as UTF-8) or raw bytes

    Returns:
        Integer in the range [0, 2**32)
    """
    return int(digest(message)[:8], 16)
