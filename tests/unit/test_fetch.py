"""Tests for fetching objects from another store."""

import pytest
import requests
from click.testing import CliRunner

from plumb.cli.commands.fetch import fetch_cmd
from plumb.core.compress import compress
from plumb.core.errors import CorruptionError, NotFoundError
from plumb.core.objects import Blob, Commit, Tree
from plumb.core.repository import Repository
from plumb.remote.fetch import (
    Fetcher, HttpSource, LocalSource, fetch, open_source,
)

AUTHOR = "Remote User <remote@example.com>"


def _clock():
    return 1700000000


def _make_remote(path, commits=2):
    """Create a repository at path with a linear history."""
    path.mkdir()
    remote = Repository(path).init()
    for i in range(commits):
        (path / 'shared.txt').write_text('same in every commit\n')
        (path / 'docs').mkdir(exist_ok=True)
        (path / 'docs' / f'note{i}.txt').write_text(f'note {i}\n')
        remote.commit(f'commit {i}\n', author=AUTHOR, clock=_clock)
    return remote


class FakeResponse:
    def __init__(self, status_code, content=b''):
        self.status_code = status_code
        self.content = content

    @property
    def text(self):
        return self.content.decode('utf-8')

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Serves a repository's metadata directory like a dumb HTTP server."""

    def __init__(self, git_dir, status_code=None):
        self.git_dir = git_dir
        self.status_code = status_code
        self.requested = []

    def get(self, url, timeout=None):
        path = url.split('/repo.git/', 1)[1]
        self.requested.append(path)
        if self.status_code is not None:
            return FakeResponse(self.status_code)
        file_path = self.git_dir / path
        if not file_path.is_file():
            return FakeResponse(404)
        return FakeResponse(200, file_path.read_bytes())


class TestLocalFetch:
    """Fetching from a repository on the local filesystem."""

    def test_fetch_copies_history(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote')
        head = remote.refs.resolve_head()

        result = fetch(repo, str(remote.work_tree))

        assert result.head == head
        assert set(repo.iter_objects()) == set(remote.iter_objects())
        assert len(result.fetched) == len(set(remote.iter_objects()))

    def test_second_fetch_is_empty(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote')
        fetch(repo, str(remote.work_tree))

        result = fetch(repo, str(remote.work_tree))
        assert result.fetched == []

    def test_fetch_does_not_move_local_head(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote')
        fetch(repo, str(remote.git_dir))
        assert repo.refs.resolve_head() is None

    def test_fetch_specific_commit(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote')
        root_commit = remote.read_object(remote.refs.resolve_head()).parent

        result = fetch(repo, 'file://' + str(remote.work_tree), want=root_commit)

        assert result.head == root_commit
        assert repo.read_object(root_commit).parent is None
        assert not repo.object_exists(remote.refs.resolve_head())

    def test_children_written_before_parents(self, repo, tmp_path, monkeypatch):
        remote = _make_remote(tmp_path / 'remote', commits=3)
        original = repo.write_object
        written = []

        def recording_write(obj):
            hash = original(obj)
            if isinstance(obj, Commit):
                assert repo.object_exists(obj.tree)
                assert obj.parent is None or repo.object_exists(obj.parent)
            elif isinstance(obj, Tree):
                assert all(repo.object_exists(e.hash) for e in obj.entries)
            written.append(hash)
            return hash

        monkeypatch.setattr(repo, 'write_object', recording_write)
        result = Fetcher(repo, LocalSource(remote.work_tree)).fetch()

        assert written == result.fetched
        assert written[-1] == result.head

    def test_missing_remote_repository(self, repo, tmp_path):
        with pytest.raises(NotFoundError):
            fetch(repo, str(tmp_path / 'nowhere'))

    def test_remote_without_commits(self, repo, tmp_path):
        empty = Repository(tmp_path / 'empty')
        empty.work_tree.mkdir()
        empty.init()
        with pytest.raises(NotFoundError):
            fetch(repo, str(empty.work_tree))

    def test_missing_wanted_object(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote', commits=1)
        with pytest.raises(NotFoundError):
            fetch(repo, str(remote.work_tree), want='0' * 40)


class TestHttpFetch:
    """Fetching over HTTP with a stubbed session."""

    def test_fetch_over_http(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote')
        session = FakeSession(remote.git_dir)
        source = HttpSource('http://example.com/repo.git/', session=session)

        result = Fetcher(repo, source).fetch()

        assert result.head == remote.refs.resolve_head()
        assert session.requested[:2] == ['HEAD', 'refs/heads/main']
        assert set(repo.iter_objects()) == set(remote.iter_objects())

    def test_not_found(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote', commits=1)
        source = HttpSource('http://example.com/repo.git',
                            session=FakeSession(remote.git_dir, status_code=404))
        with pytest.raises(NotFoundError):
            Fetcher(repo, source).fetch()

    def test_server_error(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote', commits=1)
        source = HttpSource('http://example.com/repo.git',
                            session=FakeSession(remote.git_dir, status_code=500))
        with pytest.raises(requests.HTTPError):
            Fetcher(repo, source).fetch()

    def test_corrupted_object_writes_nothing(self, repo, tmp_path):
        remote = _make_remote(tmp_path / 'remote', commits=1)
        commit = remote.read_object(remote.refs.resolve_head())

        # Replace the tree's content with a blob that hashes differently
        tree_path = remote.object_path(commit.tree)
        tree_path.chmod(0o644)
        tree_path.write_bytes(compress(Blob(b'imposter').encode()))

        source = HttpSource('http://example.com/repo.git',
                            session=FakeSession(remote.git_dir))
        with pytest.raises(CorruptionError):
            Fetcher(repo, source).fetch()
        assert list(repo.iter_objects()) == []


def test_open_source():
    assert isinstance(open_source('https://example.com/repo.git'), HttpSource)


def test_open_source_local(tmp_path):
    Repository(tmp_path).init()
    source = open_source(str(tmp_path / '.git'))
    assert isinstance(source, LocalSource)
    assert source.repo.work_tree == tmp_path


class TestFetchCommand:
    """Tests for the fetch CLI command."""

    def test_fetch_command(self, repo, tmp_path, monkeypatch):
        remote = _make_remote(tmp_path / 'remote')
        monkeypatch.chdir(repo.work_tree)

        result = CliRunner().invoke(fetch_cmd, [str(remote.work_tree)])

        assert result.exit_code == 0
        assert 'Fetched' in result.output
        assert remote.refs.resolve_head() in result.output

        result = CliRunner().invoke(fetch_cmd, [str(remote.work_tree)])
        assert 'Already up to date' in result.output

    def test_fetch_command_bad_source(self, repo, tmp_path, monkeypatch):
        monkeypatch.chdir(repo.work_tree)
        result = CliRunner().invoke(fetch_cmd, [str(tmp_path / 'missing')])
        assert result.exit_code != 0
        assert 'not found' in result.output
