"""Canonical object encoding.

Every object is stored as ``<type> <size>\\0<payload>`` where size is the
decimal byte length of the payload.
"""

from typing import Tuple

from .errors import MalformedError, TruncatedError, UnknownKindError
from .objects import OBJECT_TYPES, PlumbObject


def encode(obj: PlumbObject) -> bytes:
    """Return the canonical encoding of obj."""
    return obj.encode()


def parse_header(data: bytes) -> Tuple[str, int, int]:
    """
    Parse the object header.

    Args:
        data: Canonical encoding (decompressed)

    Returns:
        Tuple of (type, declared size, payload offset)

    Raises:
        TruncatedError: If there is no header terminator
        MalformedError: If the header is not ``<type> <size>``
        UnknownKindError: If the type is not blob, tree or commit
    """
    null_idx = data.find(b'\0')
    if null_idx == -1:
        raise TruncatedError("Object header is not terminated")

    header = data[:null_idx]
    obj_type, sep, size_str = header.partition(b' ')
    if not sep or not size_str.isdigit():
        raise MalformedError(f"Invalid object header: {header[:32]!r}")

    obj_type = obj_type.decode('ascii', 'replace')
    if obj_type not in OBJECT_TYPES:
        raise UnknownKindError(f"Unknown object type: {obj_type}")

    return obj_type, int(size_str), null_idx + 1


def decode(data: bytes) -> PlumbObject:
    """
    Decode a canonical encoding into a Blob, Tree or Commit.

    Raises:
        DecodeError: TruncatedError, UnknownKindError or MalformedError
    """
    obj_type, size, offset = parse_header(data)
    payload = data[offset:]

    if len(payload) != size:
        raise TruncatedError(
            f"Object size mismatch: expected {size}, got {len(payload)}"
        )

    obj = OBJECT_TYPES[obj_type]()
    obj.deserialize(payload)
    return obj
