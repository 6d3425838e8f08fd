"""Read and render stored objects."""

from typing import Iterator, List, Tuple

from .errors import WrongKindError
from .objects import Blob, Commit, PlumbObject, Tree, TreeEntry


def cat_object(repo, hash: str) -> PlumbObject:
    """Fetch and decode an object of any kind."""
    return repo.read_object(hash)


def _read_kind(repo, hash: str, expected: str) -> PlumbObject:
    obj = repo.read_object(hash)
    if obj.type != expected:
        raise WrongKindError(hash, expected, obj.type)
    return obj


def read_blob(repo, hash: str) -> bytes:
    """
    Return the contents of a blob.

    Raises:
        WrongKindError: If hash names a tree or commit
    """
    return _read_kind(repo, hash, 'blob').data


def read_commit(repo, hash: str) -> Commit:
    """Return the commit stored under hash."""
    return _read_kind(repo, hash, 'commit')


def list_tree(repo, hash: str) -> List[TreeEntry]:
    """
    Return the immediate entries of a tree, in stored order.

    Raises:
        WrongKindError: If hash names a blob or commit
    """
    return list(_read_kind(repo, hash, 'tree').entries)


def walk_tree(repo, hash: str, prefix: str = '') -> Iterator[Tuple[str, TreeEntry]]:
    """
    Yield (path, entry) for every entry below a tree, depth first.

    Subtrees are yielded before their contents.
    """
    for entry in list_tree(repo, hash):
        path = f"{prefix}{entry.name}"
        yield path, entry
        if entry.type == 'tree':
            yield from walk_tree(repo, entry.hash, path + '/')


def render_object(obj: PlumbObject) -> str:
    """Render any object as text, the way ``cat-file -p`` shows it."""
    if isinstance(obj, Blob):
        return obj.data.decode('utf-8', 'replace')
    if isinstance(obj, Tree):
        return ''.join(
            f"{entry.mode.rjust(6, '0')} {entry.type} {entry.hash}\t{entry.name}\n"
            for entry in obj.entries
        )
    if isinstance(obj, Commit):
        return obj.serialize().decode('utf-8')
    raise TypeError(f"Cannot render {type(obj).__name__}")
