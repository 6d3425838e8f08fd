"""Plumb - a content-addressable object store in the style of git's plumbing."""

__version__ = '0.1.0'

from plumb.core.repository import Repository
from plumb.core.objects import PlumbObject, Blob, Tree, TreeEntry, Commit
from plumb.core.errors import (
    PlumbError, NotFoundError, DecodeError, CorruptionError, WrongKindError,
)

__all__ = [
    'Repository',
    'PlumbObject',
    'Blob',
    'Tree',
    'TreeEntry',
    'Commit',
    'PlumbError',
    'NotFoundError',
    'DecodeError',
    'CorruptionError',
    'WrongKindError',
]
