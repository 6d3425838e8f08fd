"""Error types for Plumb.

Every failure in the object store is raised as one of these. I/O errors from
the filesystem are not wrapped and reach the caller as ``OSError``.
"""

from typing import Optional, Sequence


class PlumbError(Exception):
    """Base exception for all Plumb errors."""
    pass


class NotFoundError(PlumbError):
    """Raised when a requested object or reference does not exist."""

    def __init__(self, object_hash: str, what: str = 'Object'):
        self.object_hash = object_hash
        super().__init__(f"{what} not found: {object_hash}")


class DecodeError(PlumbError):
    """Raised when stored bytes are not a valid canonical encoding."""

    def __init__(self, reason: str, object_hash: Optional[str] = None):
        self.reason = reason
        self.object_hash = object_hash
        msg = reason
        if object_hash:
            msg += f" (object {object_hash})"
        super().__init__(msg)


class TruncatedError(DecodeError):
    """Payload is shorter or longer than its header declares."""


class UnknownKindError(DecodeError):
    """Header names a kind other than blob, tree or commit."""


class MalformedError(DecodeError):
    """Header or payload does not follow the encoding rules."""


class CorruptionError(PlumbError):
    """Raised when stored bytes cannot be decompressed or fail verification."""

    def __init__(self, reason: str, object_hash: Optional[str] = None):
        self.reason = reason
        self.object_hash = object_hash
        msg = f"Corrupt object data: {reason}"
        if object_hash:
            msg += f" (object {object_hash})"
        super().__init__(msg)


class WrongKindError(PlumbError):
    """Raised when a digest resolves to an object of an unexpected kind."""

    def __init__(self, object_hash: str, expected: str, actual: str):
        self.object_hash = object_hash
        self.expected = expected
        self.actual = actual
        super().__init__(f"Object {object_hash} is a {actual}, expected {expected}")


class AmbiguousHashError(PlumbError):
    """Raised when a short hash matches more than one object."""

    def __init__(self, prefix: str, candidates: Sequence[str]):
        self.prefix = prefix
        self.candidates = list(candidates)
        super().__init__(
            f"Short hash {prefix} is ambiguous ({len(self.candidates)} candidates)"
        )


class RepositoryExistsError(PlumbError):
    """Raised when initializing over an existing repository."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Repository already exists at {path}")


class NotARepositoryError(PlumbError):
    """Raised when no repository can be found."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Not a plumb repository: {path}")
