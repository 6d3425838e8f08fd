"""Build tree objects from a directory on disk."""

import logging
import os
import stat
from typing import Optional

from .objects import (
    Blob, Tree, TreeEntry, MODE_EXECUTABLE, MODE_FILE, MODE_SYMLINK, MODE_TREE,
)
from ..utils.ignore import IgnoreSet

logger = logging.getLogger(__name__)


class TreeBuilder:
    """
    Snapshot a directory into the object store.

    Blobs are written first, then each tree once all of its children are
    stored, so a tree is never persisted while one of its entries is missing.
    Any error aborts the whole build. The repository's own metadata
    directory is never stored, whatever the ignore set says.
    """

    def __init__(self, repo, ignore=None):
        """
        Args:
            repo: Repository whose object store receives the objects
            ignore: IgnoreSet (or any container of names) to skip;
                defaults to IgnoreSet()
        """
        self.repo = repo
        self.ignore = ignore if ignore is not None else IgnoreSet()
        self._git_dir = os.path.realpath(repo.git_dir)

    def build(self, directory) -> str:
        """
        Store the directory recursively and return the root tree hash.

        Args:
            directory: Directory to snapshot
        """
        tree_hash = self._build(os.path.realpath(directory), '')
        logger.debug("Built tree %s from %s", tree_hash[:7], directory)
        return tree_hash

    def _is_ignored(self, name: str, rel_path: str) -> bool:
        matches = getattr(self.ignore, 'matches', None)
        if matches is not None:
            return matches(name, rel_path)
        return name in self.ignore

    def _build(self, directory: str, rel_dir: str) -> str:
        entries = []

        with os.scandir(directory) as it:
            dir_entries = sorted(it, key=lambda e: e.name)

        for dir_entry in dir_entries:
            rel_path = f"{rel_dir}/{dir_entry.name}" if rel_dir else dir_entry.name
            if dir_entry.path == self._git_dir:
                continue
            if self._is_ignored(dir_entry.name, rel_path):
                logger.debug("Ignoring %s", rel_path)
                continue

            entry = self._store_entry(dir_entry, rel_path)
            if entry is not None:
                mode, obj_hash = entry
                entries.append(TreeEntry(mode, obj_hash, dir_entry.name))

        return self.repo.write_object(Tree.from_entries(entries))

    def _store_entry(self, dir_entry: os.DirEntry, rel_path: str) -> Optional[tuple]:
        if dir_entry.is_symlink():
            target = os.readlink(dir_entry.path)
            blob = Blob(os.fsencode(target))
            return MODE_SYMLINK, self.repo.write_object(blob)

        if dir_entry.is_dir(follow_symlinks=False):
            return MODE_TREE, self._build(dir_entry.path, rel_path)

        if dir_entry.is_file(follow_symlinks=False):
            blob = Blob.from_file(dir_entry.path)
            st_mode = dir_entry.stat(follow_symlinks=False).st_mode
            mode = MODE_EXECUTABLE if st_mode & stat.S_IXUSR else MODE_FILE
            return mode, self.repo.write_object(blob)

        logger.debug("Skipping special file %s", rel_path)
        return None


def build_tree(repo, directory, ignore=None) -> str:
    """Store directory in repo and return its tree hash."""
    return TreeBuilder(repo, ignore).build(directory)
