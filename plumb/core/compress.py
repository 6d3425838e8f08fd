"""zlib compression for stored objects."""

import zlib

from .errors import CorruptionError


def compress(data: bytes, level: int = zlib.Z_DEFAULT_COMPRESSION) -> bytes:
    """Compress data into a zlib stream."""
    return zlib.compress(data, level)


def decompress(data: bytes) -> bytes:
    """
    Decompress a zlib stream.

    Raises:
        CorruptionError: If the stream is malformed, truncated or followed
            by trailing bytes
    """
    decompressor = zlib.decompressobj()
    try:
        result = decompressor.decompress(data)
        result += decompressor.flush()
    except zlib.error as e:
        raise CorruptionError(str(e)) from e

    if not decompressor.eof:
        raise CorruptionError("incomplete or truncated stream")
    if decompressor.unused_data:
        raise CorruptionError(
            f"{len(decompressor.unused_data)} bytes of trailing data"
        )
    return result
