"""Ignore rules for building trees from a directory snapshot."""

import fnmatch
from pathlib import Path
from typing import Iterable, List

IGNORE_FILE = '.plumbignore'

DEFAULT_PATTERNS = (
    '.git',
    '__pycache__',
    '*.egg-info',
    'node_modules',
    '.pytest_cache',
)


class IgnoreSet:
    """
    Set of names and glob patterns excluded from tree building.

    A pattern without '/' is matched against the entry name alone, so it
    applies at every depth. A pattern containing '/' is matched against the
    path relative to the snapshot root; a leading '/' is dropped.
    """

    def __init__(self, patterns: Iterable[str] = DEFAULT_PATTERNS):
        self.name_patterns: List[str] = []
        self.path_patterns: List[str] = []
        for pattern in patterns:
            self.add(pattern)

    def add(self, pattern: str) -> None:
        """Add a pattern. Blank patterns and '#' comments are ignored."""
        pattern = pattern.strip()
        if not pattern or pattern.startswith('#'):
            return
        pattern = pattern.rstrip('/')
        if '/' in pattern:
            pattern = pattern.lstrip('/')
            if pattern not in self.path_patterns:
                self.path_patterns.append(pattern)
        elif pattern not in self.name_patterns:
            self.name_patterns.append(pattern)

    def matches(self, name: str, rel_path: str = '') -> bool:
        """
        Check whether an entry is ignored.

        Args:
            name: Entry name
            rel_path: Entry path relative to the snapshot root, '/'-separated
        """
        if any(fnmatch.fnmatchcase(name, p) for p in self.name_patterns):
            return True
        rel_path = rel_path or name
        return any(fnmatch.fnmatchcase(rel_path, p) for p in self.path_patterns)

    def __contains__(self, name: str) -> bool:
        return self.matches(name)

    def load_file(self, path) -> None:
        """Add patterns from an ignore file, one per line."""
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                self.add(line)

    @classmethod
    def for_directory(cls, directory, config=None, extra: Iterable[str] = ()) -> 'IgnoreSet':
        """
        Build the ignore set for a snapshot root.

        Merges the default patterns, the ``core.ignore`` config value, the
        root's ``.plumbignore`` file and any extra patterns.
        """
        ignore = cls()
        if config is not None:
            for pattern in config.get_list('core', 'ignore'):
                ignore.add(pattern)
        ignore_file = Path(directory) / IGNORE_FILE
        if ignore_file.is_file():
            ignore.load_file(ignore_file)
        for pattern in extra:
            ignore.add(pattern)
        return ignore

    def __repr__(self) -> str:
        return f"IgnoreSet(names={self.name_patterns}, paths={self.path_patterns})"
