"""Repository and object store for Plumb."""

import logging
import os
import tempfile
import time
import zlib
from pathlib import Path
from typing import Callable, Iterator, Optional

from .codec import decode, encode
from .compress import compress, decompress
from .errors import (
    AmbiguousHashError, CorruptionError, NotFoundError, NotARepositoryError,
    RepositoryExistsError, WrongKindError,
)
from .hash import HEX_DIGEST_SIZE, hash_object, is_valid_hash
from .objects import Commit, PlumbObject, format_timezone

logger = logging.getLogger(__name__)

META_DIR = '.git'
MIN_PREFIX_LENGTH = 4


class Repository:
    """
    Represents a Plumb repository.

    The repository owns the metadata directory and its loose-object store.
    Objects are written once, compressed, under a path derived from their
    hash, and never modified or deleted.
    """

    def __init__(self, path='.'):
        """
        Initialize repository.

        Args:
            path: Path to repository root (the directory holding .git)
        """
        self.work_tree = Path(path).resolve()
        self.git_dir = self.work_tree / META_DIR
        self.objects_dir = self.git_dir / 'objects'
        self.refs_dir = self.git_dir / 'refs'
        self.heads_dir = self.refs_dir / 'heads'
        self.tags_dir = self.refs_dir / 'tags'
        self.head_file = self.git_dir / 'HEAD'
        self.config_file = self.git_dir / 'config'

        self._ref_manager = None
        self._config = None

    @property
    def refs(self):
        """Get RefManager instance."""
        if self._ref_manager is None:
            from .refs import RefManager
            self._ref_manager = RefManager(self)
        return self._ref_manager

    @property
    def config(self):
        """Get Config instance for this repository."""
        if self._config is None:
            from .config import get_config
            self._config = get_config(self)
        return self._config

    @property
    def compression_level(self) -> int:
        level = self.config.get_int('core', 'compression', zlib.Z_DEFAULT_COMPRESSION)
        if not -1 <= level <= 9:
            raise ValueError(f"core.compression must be between -1 and 9, got {level}")
        return level

    def init(self) -> 'Repository':
        """
        Initialize a new repository.

        Creates the .git directory structure:
        .git/
        ├── objects/       # Object database
        ├── refs/
        │   ├── heads/     # Branch references
        │   └── tags/      # Tag references
        ├── HEAD           # Current branch pointer
        └── config         # Repository configuration

        Raises:
            RepositoryExistsError: If the metadata directory already exists
        """
        if self.git_dir.exists():
            raise RepositoryExistsError(self.git_dir)

        self.git_dir.mkdir(parents=True)
        self.objects_dir.mkdir()
        self.refs_dir.mkdir()
        self.heads_dir.mkdir()
        self.tags_dir.mkdir()

        with open(self.head_file, 'w') as f:
            f.write('ref: refs/heads/main\n')

        with open(self.config_file, 'w') as f:
            f.write('[core]\n\trepositoryformatversion = 0\n')

        logger.debug("Initialized repository at %s", self.git_dir)
        return self

    @classmethod
    def find_repository(cls, path='.') -> Optional['Repository']:
        """
        Find repository by searching up the directory tree.

        Returns:
            Repository if found, None otherwise
        """
        current = Path(path).resolve()

        while True:
            if (current / META_DIR).is_dir():
                return cls(current)

            if current == current.parent:
                return None

            current = current.parent

    @classmethod
    def open(cls, path='.') -> 'Repository':
        """
        Like find_repository, but raise when nothing is found.

        Raises:
            NotARepositoryError: If no repository contains path
        """
        repo = cls.find_repository(path)
        if repo is None:
            raise NotARepositoryError(Path(path).resolve())
        return repo

    def object_path(self, hash: str) -> Path:
        """
        Get filesystem path for an object.

        Objects are stored in subdirectories named by the first 2 characters
        of the hash, with the remaining 38 characters as the filename.
        """
        return self.objects_dir / hash[:2] / hash[2:]

    def write_object(self, obj: PlumbObject) -> str:
        """
        Write object to the store.

        The file content is the zlib-compressed canonical encoding. Writing
        an object that is already stored does nothing.

        Returns:
            str: SHA-1 hash of the object
        """
        content = encode(obj)
        hash = hash_object(content)
        path = self.object_path(hash)

        if path.exists():
            logger.debug("Object %s already stored", hash[:7])
            return hash

        path.parent.mkdir(parents=True, exist_ok=True)
        self._write_atomic(path, compress(content, self.compression_level))
        logger.debug("Stored %s %s (%d bytes)", obj.type, hash[:7], len(content))
        return hash

    def _write_atomic(self, path: Path, data: bytes) -> None:
        fd, temp_path = tempfile.mkstemp(dir=str(path.parent), prefix='tmp_obj_')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def read_raw(self, hash: str) -> bytes:
        """
        Read the decompressed canonical encoding of an object.

        Raises:
            NotFoundError: If no object is stored under hash
            CorruptionError: If the stored bytes are not a zlib stream
        """
        if not is_valid_hash(hash):
            raise NotFoundError(hash)
        hash = hash.lower()

        try:
            with open(self.object_path(hash), 'rb') as f:
                compressed = f.read()
        except FileNotFoundError:
            raise NotFoundError(hash)

        try:
            return decompress(compressed)
        except CorruptionError as e:
            raise CorruptionError(e.reason, hash) from e

    def read_object(self, hash: str, verify: bool = False) -> PlumbObject:
        """
        Read object from the store.

        Args:
            hash: 40-character SHA-1 hash
            verify: Re-hash the stored bytes and compare with hash

        Returns:
            PlumbObject: Decoded Blob, Tree or Commit

        Raises:
            NotFoundError: If the object does not exist
            CorruptionError: If decompression or verification fails
            DecodeError: If the stored bytes are not a valid encoding
        """
        content = self.read_raw(hash)

        if verify:
            actual = hash_object(content)
            if actual != hash.lower():
                raise CorruptionError(f"content hashes to {actual}", hash)

        return decode(content)

    def object_exists(self, hash: str) -> bool:
        """Check if object exists in the store."""
        return is_valid_hash(hash) and self.object_path(hash.lower()).is_file()

    def iter_objects(self) -> Iterator[str]:
        """Yield the hash of every stored object."""
        if not self.objects_dir.is_dir():
            return
        for subdir in sorted(self.objects_dir.iterdir()):
            if not subdir.is_dir() or len(subdir.name) != 2:
                continue
            for obj_file in sorted(subdir.iterdir()):
                full_hash = subdir.name + obj_file.name
                if is_valid_hash(full_hash):
                    yield full_hash

    def resolve_prefix(self, prefix: str) -> str:
        """
        Resolve a short hash to the full hash of a stored object.

        Raises:
            NotFoundError: If no object matches
            AmbiguousHashError: If more than one object matches
        """
        prefix = prefix.lower()
        if len(prefix) == HEX_DIGEST_SIZE:
            if not self.object_exists(prefix):
                raise NotFoundError(prefix)
            return prefix

        if len(prefix) < MIN_PREFIX_LENGTH or not all(c in '0123456789abcdef' for c in prefix):
            raise NotFoundError(prefix)

        subdir = self.objects_dir / prefix[:2]
        matches = []
        if subdir.is_dir():
            for obj_file in subdir.iterdir():
                full_hash = prefix[:2] + obj_file.name
                if full_hash.startswith(prefix) and is_valid_hash(full_hash):
                    matches.append(full_hash)

        if not matches:
            raise NotFoundError(prefix)
        if len(matches) > 1:
            raise AmbiguousHashError(prefix, sorted(matches))
        return matches[0]

    def _expect_kind(self, hash: str, expected: str) -> PlumbObject:
        obj = self.read_object(hash)
        if obj.type != expected:
            raise WrongKindError(hash, expected, obj.type)
        return obj

    def write_tree(self, directory=None, ignore=None) -> str:
        """
        Snapshot a directory (the work tree by default) and return its tree hash.

        Args:
            directory: Directory to store
            ignore: IgnoreSet; defaults to the rules configured for directory
        """
        from .tree_builder import TreeBuilder
        from ..utils.ignore import IgnoreSet

        directory = Path(directory) if directory is not None else self.work_tree
        if ignore is None:
            ignore = IgnoreSet.for_directory(directory, self.config)
        return TreeBuilder(self, ignore).build(directory)

    def default_author(self) -> str:
        """
        Return the configured identity as ``Name <email>``.

        Raises:
            ValueError: If user.name or user.email is not configured
        """
        name, email = self.config.get_user_identity()
        if not name or not email:
            raise ValueError(
                "Author identity unknown: set user.name and user.email "
                "or PLUMB_USER_NAME and PLUMB_USER_EMAIL"
            )
        return f"{name} <{email}>"

    def commit_tree(
        self,
        tree_hash: str,
        message: str,
        parent: Optional[str] = None,
        author: Optional[str] = None,
        clock: Callable[[], float] = time.time,
        timezone: Optional[str] = None,
    ) -> str:
        """
        Create and store a commit for an existing tree.

        Args:
            tree_hash: Hash of a stored tree
            message: Commit message, stored verbatim
            parent: Hash of a stored parent commit, if any
            author: "Name <email>"; defaults to the configured identity
            clock: Called once to obtain the commit timestamp
            timezone: "+hhmm" offset; defaults to the local offset

        Returns:
            str: Hash of the new commit

        Raises:
            NotFoundError: If the tree or parent is missing
            WrongKindError: If the tree or parent has the wrong kind
        """
        self._expect_kind(tree_hash, 'tree')
        if parent is not None:
            self._expect_kind(parent, 'commit')

        timestamp = int(clock())
        if timezone is None:
            timezone = format_timezone(time.localtime(timestamp).tm_gmtoff)

        commit = Commit.create(
            tree_hash=tree_hash,
            parent_hash=parent,
            author=author or self.default_author(),
            message=message,
            timestamp=timestamp,
            timezone=timezone,
        )
        return self.write_object(commit)

    def commit(
        self,
        message: str,
        directory=None,
        author: Optional[str] = None,
        clock: Callable[[], float] = time.time,
        timezone: Optional[str] = None,
    ) -> str:
        """
        Snapshot the work tree, commit it on top of HEAD and advance HEAD.

        Returns:
            str: Hash of the new commit
        """
        tree_hash = self.write_tree(directory)
        parent = self.refs.resolve_head()
        commit_hash = self.commit_tree(
            tree_hash, message, parent=parent, author=author,
            clock=clock, timezone=timezone,
        )
        ref = self.refs.update_head(commit_hash)
        logger.debug("Advanced %s to %s", ref, commit_hash[:7])
        return commit_hash

    def __repr__(self) -> str:
        return f"Repository(path={self.work_tree})"
