"""Object model for Plumb: blobs, trees and commits."""

import re
from abc import ABC, abstractmethod
from typing import Optional

from .errors import MalformedError
from .hash import DIGEST_SIZE, hash_object, is_valid_hash

MODE_FILE = '100644'
MODE_EXECUTABLE = '100755'
MODE_SYMLINK = '120000'
MODE_TREE = '40000'

_TIMEZONE_RE = re.compile(r'^[+-]\d{4}$')
_LOWER_HEX_RE = re.compile(r'^[0-9a-f]{40}$')


class PlumbObject(ABC):
    """Base class for all Plumb objects."""

    def __init__(self):
        self._hash: Optional[str] = None

    @abstractmethod
    def serialize(self) -> bytes:
        """
        Serialize the object payload (without header).

        Returns:
            bytes: Payload bytes
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> None:
        """
        Load the object from payload bytes.

        Args:
            data: Payload bytes (without header)

        Raises:
            MalformedError: If the payload does not follow the format
        """
        pass

    @property
    def type(self) -> str:
        """
        Return object type name.

        Returns:
            str: Object type (blob, tree, commit)
        """
        return self.__class__.__name__.lower()

    def encode(self) -> bytes:
        """
        Return the canonical encoding: ``<type> <size>\\0<payload>``.
        """
        data = self.serialize()
        header = f"{self.type} {len(data)}\0".encode()
        return header + data

    def compute_hash(self) -> str:
        """
        Compute and cache object hash over the canonical encoding.

        Returns:
            str: 40-character SHA-1 hash
        """
        if self._hash is None:
            self._hash = hash_object(self.encode())
        return self._hash

    @property
    def hash(self) -> str:
        """40-character SHA-1 hash of the object."""
        return self.compute_hash()

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlumbObject):
            return NotImplemented
        return self.type == other.type and self.serialize() == other.serialize()

    __hash__ = None


class Blob(PlumbObject):
    """
    Represents file content.

    A blob stores the raw content of a file without any metadata
    like filename or permissions.
    """

    def __init__(self, data: Optional[bytes] = None):
        super().__init__()
        self.data = bytes(data or b'')

    def serialize(self) -> bytes:
        return self.data

    def deserialize(self, data: bytes) -> None:
        self.data = bytes(data)
        self._hash = None

    @classmethod
    def from_file(cls, filepath) -> 'Blob':
        """
        Create blob from file.

        Args:
            filepath: Path to file

        Returns:
            Blob: New blob containing file content
        """
        with open(filepath, 'rb') as f:
            return cls(f.read())

    def __repr__(self) -> str:
        return f"Blob(hash={self.hash[:7]}, size={len(self.data)})"


class TreeEntry:
    """
    Represents a single entry in a tree.

    Each entry contains:
    - mode: '100644' file, '100755' executable, '120000' symlink, '40000' directory
    - type: Object type ('blob' or 'tree'), derived from mode
    - hash: SHA-1 hash of the referenced object
    - name: Path segment, never containing '/' or NUL
    """

    def __init__(self, mode: str, obj_hash: str, name: str):
        if not name or '/' in name or '\0' in name:
            raise ValueError(f"Invalid tree entry name: {name!r}")
        if not is_valid_hash(obj_hash):
            raise ValueError(f"Invalid object hash for {name!r}: {obj_hash!r}")
        self.mode = mode
        self.hash = obj_hash.lower()
        self.name = name

    @property
    def type(self) -> str:
        return 'tree' if self.mode == MODE_TREE else 'blob'

    def sort_key(self) -> bytes:
        """
        Key for tree order.

        Directory names compare as if they ended with '/', so 'foo' (dir)
        sorts after 'foo.txt' and before 'foo0'.
        """
        key = self.name.encode('utf-8', 'surrogateescape')
        if self.mode == MODE_TREE:
            key += b'/'
        return key

    def __lt__(self, other: 'TreeEntry') -> bool:
        return self.sort_key() < other.sort_key()

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return (self.mode, self.hash, self.name) == (other.mode, other.hash, other.name)

    __hash__ = None

    def __repr__(self) -> str:
        return f"TreeEntry({self.mode} {self.type} {self.hash[:7]} {self.name})"


class Tree(PlumbObject):
    """
    Represents a directory snapshot.

    Entries point to blobs (files) and other trees (subdirectories) and are
    kept in tree order, so equal directory contents always encode equally.
    """

    def __init__(self):
        super().__init__()
        self.entries: list[TreeEntry] = []

    def add_entry(self, mode: str, obj_hash: str, name: str) -> TreeEntry:
        """
        Add entry to tree, keeping tree order.

        Raises:
            ValueError: If the name is invalid or already present
        """
        if self.get(name) is not None:
            raise ValueError(f"Duplicate tree entry: {name!r}")
        entry = TreeEntry(mode, obj_hash, name)
        key = entry.sort_key()
        pos = len(self.entries)
        while pos > 0 and self.entries[pos - 1].sort_key() > key:
            pos -= 1
        self.entries.insert(pos, entry)
        self._hash = None
        return entry

    @classmethod
    def from_entries(cls, entries) -> 'Tree':
        """
        Build a tree from entries in any order, sorting them once.

        Raises:
            ValueError: If two entries share a name
        """
        entries = list(entries)
        names = set()
        for entry in entries:
            if entry.name in names:
                raise ValueError(f"Duplicate tree entry: {entry.name!r}")
            names.add(entry.name)

        tree = cls()
        tree.entries = sorted(entries, key=TreeEntry.sort_key)
        return tree

    def serialize(self) -> bytes:
        """
        Serialize tree entries.

        Each entry is ``<mode> <name>\\0<20-byte raw hash>``.
        """
        parts = []
        for entry in self.entries:
            mode_name = f"{entry.mode} {entry.name}".encode('utf-8', 'surrogateescape')
            parts.append(mode_name + b'\0' + bytes.fromhex(entry.hash))
        return b''.join(parts)

    def deserialize(self, data: bytes) -> None:
        """
        Parse tree entries, keeping the stored order.

        Raises:
            MalformedError: On a missing delimiter, empty name or short digest
        """
        entries = []
        pos = 0

        while pos < len(data):
            space_pos = data.find(b' ', pos)
            if space_pos == -1:
                raise MalformedError(f"Tree entry at offset {pos} has no mode delimiter")
            mode = data[pos:space_pos].decode('ascii', 'replace')

            null_pos = data.find(b'\0', space_pos)
            if null_pos == -1:
                raise MalformedError(f"Tree entry at offset {pos} has no name terminator")
            name = data[space_pos + 1:null_pos].decode('utf-8', 'surrogateescape')

            hash_bytes = data[null_pos + 1:null_pos + 1 + DIGEST_SIZE]
            if len(hash_bytes) != DIGEST_SIZE:
                raise MalformedError(
                    f"Tree entry {name!r} has a {len(hash_bytes)}-byte digest, "
                    f"expected {DIGEST_SIZE}"
                )

            try:
                entries.append(TreeEntry(mode, hash_bytes.hex(), name))
            except ValueError as e:
                raise MalformedError(str(e)) from e

            pos = null_pos + 1 + DIGEST_SIZE

        self.entries = entries
        self._hash = None

    def get(self, name: str) -> Optional[TreeEntry]:
        """Return the entry with the given name, if any."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def __repr__(self) -> str:
        return f"Tree(entries={len(self.entries)})"


def format_timezone(offset_seconds: int) -> str:
    """Render a UTC offset in seconds as ``+hhmm``/``-hhmm``."""
    sign = '-' if offset_seconds < 0 else '+'
    minutes = abs(offset_seconds) // 60
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def _parse_signature(value: str, field: str) -> tuple:
    parts = value.rsplit(' ', 2)
    if len(parts) != 3 or not _TIMEZONE_RE.match(parts[2]):
        raise MalformedError(f"Invalid {field} line: {value!r}")
    try:
        timestamp = int(parts[1])
    except ValueError:
        raise MalformedError(f"Invalid {field} timestamp: {parts[1]!r}")
    return parts[0], timestamp, parts[2]


class Commit(PlumbObject):
    """
    Represents a commit with metadata.

    A commit captures:
    - Snapshot of project (tree hash)
    - At most one parent commit
    - Author (and optionally committer) identity with timestamp
    - Commit message
    """

    def __init__(self):
        super().__init__()
        self.tree: str = ''
        self.parent: Optional[str] = None
        self.author: str = ''
        self.author_time: int = 0
        self.author_timezone: str = '+0000'
        self.committer: Optional[str] = None
        self.committer_time: int = 0
        self.committer_timezone: str = '+0000'
        self.message: str = ''

    def serialize(self) -> bytes:
        """
        Serialize commit.

        Format:
        tree <tree-hash>
        parent <parent-hash>  (optional)
        author Name <email> <timestamp> <timezone>
        committer Name <email> <timestamp> <timezone>  (optional)

        <commit message>
        """
        lines = [f'tree {self.tree}']

        if self.parent:
            lines.append(f'parent {self.parent}')

        lines.append(f'author {self.author} {self.author_time} {self.author_timezone}')
        if self.committer is not None:
            lines.append(
                f'committer {self.committer} {self.committer_time} {self.committer_timezone}'
            )

        lines.append('')
        lines.append(self.message)

        return '\n'.join(lines).encode('utf-8')

    def deserialize(self, data: bytes) -> None:
        try:
            content = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedError(f"Commit is not valid UTF-8: {e}") from e

        headers, sep, message = content.partition('\n\n')
        if not sep:
            raise MalformedError("Commit has no blank line before the message")

        tree = None
        parent = None
        author = None
        committer = None

        for line in headers.split('\n'):
            key, _, value = line.partition(' ')
            if key == 'tree' and tree is None:
                if not _LOWER_HEX_RE.match(value):
                    raise MalformedError(f"Invalid tree hash in commit: {value!r}")
                tree = value
            elif key == 'parent':
                if parent is not None:
                    raise MalformedError("Commit has more than one parent")
                if not _LOWER_HEX_RE.match(value):
                    raise MalformedError(f"Invalid parent hash in commit: {value!r}")
                parent = value
            elif key == 'author' and author is None:
                author = _parse_signature(value, 'author')
            elif key == 'committer' and committer is None:
                committer = _parse_signature(value, 'committer')
            else:
                raise MalformedError(f"Unexpected commit header: {line!r}")

        if tree is None:
            raise MalformedError("Commit has no tree")
        if author is None:
            raise MalformedError("Commit has no author")

        self.tree = tree
        self.parent = parent
        self.author, self.author_time, self.author_timezone = author
        if committer is None:
            self.committer = None
            self.committer_time = 0
            self.committer_timezone = '+0000'
        else:
            self.committer, self.committer_time, self.committer_timezone = committer
        self.message = message
        self._hash = None

    @classmethod
    def create(
        cls,
        tree_hash: str,
        parent_hash: Optional[str],
        author: str,
        message: str,
        timestamp: int,
        timezone: str = '+0000',
        committer: Optional[str] = None,
    ) -> 'Commit':
        """
        Create a new commit.

        Args:
            tree_hash: Hash of tree object
            parent_hash: Hash of the parent commit, or None for a root commit
            author: Author name and email (e.g., "Name <email>")
            message: Commit message
            timestamp: Unix timestamp, already taken from the caller's clock
            timezone: Timezone offset (e.g., "+0000", "-0500")
            committer: Committer name and email (defaults to author)

        Returns:
            Commit: New commit object
        """
        if not is_valid_hash(tree_hash):
            raise ValueError(f"Invalid tree hash: {tree_hash!r}")
        if parent_hash is not None and not is_valid_hash(parent_hash):
            raise ValueError(f"Invalid parent hash: {parent_hash!r}")
        if not _TIMEZONE_RE.match(timezone):
            raise ValueError(f"Invalid timezone: {timezone!r}")
        if '\n' in author or '<' not in author:
            raise ValueError(f"Invalid author: {author!r}")

        commit = cls()
        commit.tree = tree_hash.lower()
        commit.parent = parent_hash.lower() if parent_hash else None
        commit.author = author
        commit.author_time = int(timestamp)
        commit.author_timezone = timezone
        commit.committer = committer or author
        commit.committer_time = int(timestamp)
        commit.committer_timezone = timezone
        commit.message = message
        return commit

    def __repr__(self) -> str:
        parent_info = f", parent={self.parent[:7]}" if self.parent else ""
        msg_preview = self.message.split('\n')[0][:50]
        return f"Commit(hash={self.hash[:7]}{parent_info}, msg='{msg_preview}')"


OBJECT_TYPES = {
    'blob': Blob,
    'tree': Tree,
    'commit': Commit,
}
