"""Pull objects from another object store.

A source only has to hand out compressed loose objects and its HEAD. The
fetcher walks from a commit through its parents and trees, copying every
object the local store lacks.
"""

import logging
from pathlib import Path
from typing import List, Optional

import requests

from plumb.core.codec import decode
from plumb.core.compress import decompress
from plumb.core.errors import CorruptionError, NotFoundError
from plumb.core.hash import hash_object, is_valid_hash
from plumb.core.objects import Commit, PlumbObject, Tree
from plumb.core.refs import SYMREF_PREFIX
from plumb.core.repository import Repository

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class LocalSource:
    """Object source backed by another repository on the local filesystem."""

    def __init__(self, path):
        path = Path(path)
        if path.name == '.git':
            path = path.parent
        self.repo = Repository(path)
        if not self.repo.git_dir.is_dir():
            raise NotFoundError(str(path), what='Repository')

    def read_compressed(self, hash: str) -> bytes:
        try:
            with open(self.repo.object_path(hash), 'rb') as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(hash)

    def read_text(self, name: str) -> str:
        try:
            with open(self.repo.git_dir / name, 'r') as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(name, what='Reference')

    def __repr__(self) -> str:
        return f"LocalSource({self.repo.work_tree})"


class HttpSource:
    """
    Object source served over HTTP from a metadata directory.

    Objects are requested as ``<url>/objects/xx/yyyy`` and refs as
    ``<url>/HEAD`` and ``<url>/refs/...``.
    """

    def __init__(self, url: str, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.url = url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, what: str) -> requests.Response:
        response = self.session.get(f"{self.url}/{path}", timeout=self.timeout)
        if response.status_code == 404:
            raise NotFoundError(path, what=what)
        response.raise_for_status()
        return response

    def read_compressed(self, hash: str) -> bytes:
        return self._get(f"objects/{hash[:2]}/{hash[2:]}", 'Object').content

    def read_text(self, name: str) -> str:
        return self._get(name, 'Reference').text

    def __repr__(self) -> str:
        return f"HttpSource({self.url})"


def open_source(location: str):
    """Return an HttpSource for http(s) URLs, otherwise a LocalSource."""
    if location.startswith(('http://', 'https://')):
        return HttpSource(location)
    if location.startswith('file://'):
        location = location[len('file://'):]
    return LocalSource(location)


def _references(obj: PlumbObject) -> List[str]:
    if isinstance(obj, Commit):
        return [obj.tree] + ([obj.parent] if obj.parent else [])
    if isinstance(obj, Tree):
        return [entry.hash for entry in obj.entries]
    return []


class FetchResult:
    """Outcome of a fetch."""

    def __init__(self, head: str, fetched: List[str]):
        self.head = head
        self.fetched = fetched

    def __repr__(self) -> str:
        return f"FetchResult(head={self.head[:7]}, fetched={len(self.fetched)})"


class Fetcher:
    """Copies the history reachable from one commit into a repository."""

    def __init__(self, repo: Repository, source):
        self.repo = repo
        self.source = source

    def resolve_remote_head(self) -> str:
        """
        Resolve the source's HEAD to a commit hash.

        Raises:
            NotFoundError: If HEAD or the branch it names is missing
        """
        value = self.source.read_text('HEAD').strip()
        if value.startswith(SYMREF_PREFIX):
            ref = value[len(SYMREF_PREFIX):].strip()
            value = self.source.read_text(ref).strip()
        if not is_valid_hash(value):
            raise NotFoundError(value or 'HEAD', what='Reference')
        return value.lower()

    def download(self, hash: str) -> PlumbObject:
        """
        Download and decode one object, checking its hash.

        Raises:
            CorruptionError: If the downloaded content doesn't hash to hash
        """
        content = decompress(self.source.read_compressed(hash))
        actual = hash_object(content)
        if actual != hash:
            raise CorruptionError(f"fetched content hashes to {actual}", hash)
        return decode(content)

    def _collect_missing(self, want: str) -> List[PlumbObject]:
        """Download every missing object reachable from want, children first."""
        downloaded = {}
        ordered = []
        stack = [(want, False)]

        while stack:
            hash, children_done = stack.pop()
            if children_done:
                ordered.append(downloaded[hash])
                continue
            if hash in downloaded or self.repo.object_exists(hash):
                continue

            obj = self.download(hash)
            downloaded[hash] = obj
            logger.debug("Downloaded %s %s", obj.type, hash[:7])

            stack.append((hash, True))
            stack.extend((child, False) for child in _references(obj))

        return ordered

    def fetch(self, want: Optional[str] = None) -> FetchResult:
        """
        Fetch want (the source's HEAD by default) and everything it reaches.

        Objects already in the local store are assumed to be complete along
        with everything they reference, and are not walked again. Nothing is
        written until every missing object has been downloaded, and objects
        are then written children first, so a failed fetch never leaves an
        object whose references are missing.

        Returns:
            FetchResult with the fetched commit and the hashes copied
        """
        if want is None:
            want = self.resolve_remote_head()
        elif not is_valid_hash(want):
            raise NotFoundError(want)
        want = want.lower()

        objects = self._collect_missing(want)
        fetched = [self.repo.write_object(obj) for obj in objects]
        logger.debug("Fetched %d objects from %r", len(fetched), self.source)
        return FetchResult(want, fetched)


def fetch(repo: Repository, location: str, want: Optional[str] = None) -> FetchResult:
    """Fetch from a path or URL into repo."""
    return Fetcher(repo, open_source(location)).fetch(want)
