"""Shared pytest fixtures for Plumb tests."""

import os
import pytest
import tempfile
import shutil
from pathlib import Path
from plumb.core.config import Config
from plumb.core.repository import Repository
from plumb.core.objects import Blob, Tree, Commit, MODE_FILE

AUTHOR = "Test User <test@example.com>"
TIMESTAMP = 1700000000


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory):
    """Keep the user's global config and PLUMB_* variables out of tests."""
    for key in list(os.environ):
        if key.startswith('PLUMB_'):
            monkeypatch.delenv(key)
    global_path = tmp_path_factory.mktemp('home') / '.plumbconfig'
    monkeypatch.setattr(Config, 'GLOBAL_CONFIG_PATH', global_path)
    return global_path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def repo(temp_dir):
    """Create an initialized repository."""
    return Repository(temp_dir).init()


@pytest.fixture
def repo_with_config(repo):
    """Create a repository with user identity configured."""
    repo.config_file.write_text("""[core]
\trepositoryformatversion = 0
[user]
\tname = Test User
\temail = test@example.com
""")
    return repo


@pytest.fixture
def clock():
    """A clock frozen at TIMESTAMP."""
    return lambda: TIMESTAMP


@pytest.fixture
def sample_blob():
    """Create a sample blob object."""
    return Blob(b"Hello, World!\n")


@pytest.fixture
def sample_tree(repo, sample_blob):
    """Create a sample tree with one stored blob."""
    blob_hash = repo.write_object(sample_blob)
    tree = Tree()
    tree.add_entry(MODE_FILE, blob_hash, 'test.txt')
    return tree


@pytest.fixture
def sample_commit(sample_tree, repo):
    """Sample root commit for sample_tree."""
    tree_hash = repo.write_object(sample_tree)
    return Commit.create(
        tree_hash=tree_hash,
        parent_hash=None,
        author=AUTHOR,
        message="Test commit\n",
        timestamp=TIMESTAMP,
    )


@pytest.fixture
def working_files(repo):
    """Create sample file structure in the repository root."""
    file1 = repo.work_tree / "test1.txt"
    file2 = repo.work_tree / "test2.txt"

    (repo.work_tree / "subdir").mkdir()
    file3 = repo.work_tree / "subdir" / "test3.txt"

    file1.write_text("Content 1")
    file2.write_text("Content 2")
    file3.write_text("Content 3")

    return {
        'file1': file1,
        'file2': file2,
        'file3': file3
    }
