"""Hash utilities for Plumb."""

import hashlib
import string

DIGEST_SIZE = 20
HEX_DIGEST_SIZE = 40

# Digests of "blob 0\0" and "tree 0\0"
EMPTY_BLOB_HASH = 'e69de29bb2d1d6434b8b29ae775ad8c2e48c5391'
EMPTY_TREE_HASH = '4b825dc642cb6eb9a060e54bf8d69288fbee4904'

_HEX_DIGITS = frozenset(string.hexdigits)


def hash_object(data: bytes) -> str:
    """
    Compute SHA-1 hash of data.

    Callers pass the canonical encoding of an object (header included),
    so kind and length take part in the identity.

    Args:
        data: Bytes to hash

    Returns:
        40-character hex string
    """
    return hashlib.sha1(data).hexdigest()


def hash_file(filepath: str) -> str:
    """
    Compute the blob hash of a file, as ``hash-object`` would report it.

    Args:
        filepath: Path to file

    Returns:
        40-character hex string
    """
    from .objects import Blob

    return Blob.from_file(filepath).hash


def is_valid_hash(value) -> bool:
    """Check that value is a full 40-character hex digest."""
    return (
        isinstance(value, str)
        and len(value) == HEX_DIGEST_SIZE
        and all(c in _HEX_DIGITS for c in value)
    )
