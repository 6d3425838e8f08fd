"""Tree builder tests."""

import os
import pytest
from plumb.core.hash import EMPTY_TREE_HASH
from plumb.core.objects import (
    Blob, Tree, MODE_EXECUTABLE, MODE_FILE, MODE_SYMLINK, MODE_TREE,
)
from plumb.core.reader import list_tree, read_blob
from plumb.core import tree_builder
from plumb.core.tree_builder import TreeBuilder, build_tree
from plumb.utils.ignore import IgnoreSet


def _make_files(root, names_and_content):
    for name, content in names_and_content:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


def test_empty_directory(repo):
    """Test the metadata directory is skipped, leaving the empty tree."""
    tree_hash = build_tree(repo, repo.work_tree, IgnoreSet())

    assert tree_hash == EMPTY_TREE_HASH
    assert repo.object_exists(tree_hash)
    assert list_tree(repo, tree_hash) == []


def test_flat_directory(repo, tmp_path):
    _make_files(tmp_path, [('b.txt', b'bee\n'), ('a.txt', b'ay\n')])

    tree_hash = TreeBuilder(repo).build(tmp_path)
    entries = list_tree(repo, tree_hash)

    assert [e.name for e in entries] == ['a.txt', 'b.txt']
    assert all(e.mode == MODE_FILE for e in entries)
    assert read_blob(repo, entries[0].hash) == b'ay\n'
    assert entries[1].hash == Blob(b'bee\n').hash


def test_nested_directories(repo, tmp_path):
    _make_files(tmp_path, [
        ('README', b'readme'),
        ('src/main.py', b'print(1)\n'),
        ('src/pkg/mod.py', b'x = 1\n'),
    ])

    tree_hash = TreeBuilder(repo).build(tmp_path)
    root = list_tree(repo, tree_hash)
    assert [(e.name, e.type) for e in root] == [('README', 'blob'), ('src', 'tree')]
    assert root[1].mode == MODE_TREE

    src = list_tree(repo, root[1].hash)
    assert [e.name for e in src] == ['main.py', 'pkg']
    pkg = list_tree(repo, src[1].hash)
    assert read_blob(repo, pkg[0].hash) == b'x = 1\n'


def test_empty_subdirectory_is_kept(repo, tmp_path):
    (tmp_path / 'empty').mkdir()
    entries = list_tree(repo, TreeBuilder(repo).build(tmp_path))

    assert len(entries) == 1
    assert entries[0].hash == EMPTY_TREE_HASH


class _Listing:
    """Context manager standing in for an os.scandir iterator."""

    def __init__(self, entries):
        self.entries = entries

    def __enter__(self):
        return iter(self.entries)

    def __exit__(self, *exc):
        return False


def test_enumeration_order_does_not_matter(repo, tmp_path, monkeypatch):
    """Test the root digest is the same whatever order entries are listed in."""
    _make_files(tmp_path, [
        ('foo.txt', b'file'), ('foo/inner', b'nested'), ('foo0', b'zero'),
        ('a', b'a'), ('Z', b'upper'),
    ])
    real_scandir = os.scandir

    def listing(reverse):
        def scandir(path):
            with real_scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name, reverse=reverse)
            return _Listing(entries)
        return scandir

    monkeypatch.setattr(tree_builder.os, 'scandir', listing(False))
    forward = TreeBuilder(repo, ()).build(tmp_path)
    monkeypatch.setattr(tree_builder.os, 'scandir', listing(True))
    backward = TreeBuilder(repo, ()).build(tmp_path)

    assert forward == backward
    names = [e.name for e in list_tree(repo, forward)]
    assert names == ['Z', 'a', 'foo.txt', 'foo', 'foo0']


def test_build_is_repeatable(repo, working_files):
    first = repo.write_tree()
    objects = set(repo.iter_objects())
    assert repo.write_tree() == first
    assert set(repo.iter_objects()) == objects


def test_executable_mode(repo, tmp_path):
    script = tmp_path / 'run.sh'
    script.write_text('#!/bin/sh\n')
    script.chmod(0o755)

    entries = list_tree(repo, TreeBuilder(repo).build(tmp_path))
    assert entries[0].mode == MODE_EXECUTABLE


@pytest.mark.skipif(not hasattr(os, 'symlink'), reason='symlinks unsupported')
def test_symlink_stored_as_link_target(repo, tmp_path):
    (tmp_path / 'target.txt').write_text('content')
    os.symlink('target.txt', tmp_path / 'link')

    entries = list_tree(repo, TreeBuilder(repo).build(tmp_path))
    link = next(e for e in entries if e.name == 'link')

    assert link.mode == MODE_SYMLINK
    assert read_blob(repo, link.hash) == b'target.txt'


def test_ignore_names_and_paths(repo, tmp_path):
    _make_files(tmp_path, [
        ('keep.txt', b'k'),
        ('debug.log', b'l'),
        ('build/out/a.o', b'o'),
        ('build/keep.txt', b'k2'),
        ('pkg.egg-info/PKG-INFO', b'p'),
    ])
    ignore = IgnoreSet()
    ignore.add('*.log')
    ignore.add('build/out')

    root = list_tree(repo, TreeBuilder(repo, ignore).build(tmp_path))
    assert [e.name for e in root] == ['build', 'keep.txt']
    build = list_tree(repo, root[0].hash)
    assert [e.name for e in build] == ['keep.txt']


def test_plain_set_as_ignore(repo, tmp_path):
    _make_files(tmp_path, [('skip', b's'), ('keep', b'k')])
    entries = list_tree(repo, TreeBuilder(repo, {'skip'}).build(tmp_path))
    assert [e.name for e in entries] == ['keep']


def test_failure_aborts_without_writing_trees(repo, tmp_path, monkeypatch):
    """Test a failing child write leaves no tree object behind."""
    _make_files(tmp_path, [('a.txt', b'fine'), ('sub/b.txt', b'fine too'),
                           ('sub/z.txt', b'boom')])
    original = repo.write_object

    def failing_write(obj):
        if isinstance(obj, Blob) and obj.data == b'boom':
            raise OSError("disk full")
        return original(obj)

    monkeypatch.setattr(repo, 'write_object', failing_write)

    with pytest.raises(OSError, match="disk full"):
        TreeBuilder(repo).build(tmp_path)

    stored = [repo.read_object(h) for h in repo.iter_objects()]
    assert stored
    assert not any(isinstance(obj, Tree) for obj in stored)


def test_missing_directory(repo, tmp_path):
    with pytest.raises(FileNotFoundError):
        TreeBuilder(repo).build(tmp_path / 'nope')


def test_default_ignore_skips_metadata_directory(repo):
    """Test building the repository root without an ignore set is repeatable."""
    (repo.work_tree / 'a.txt').write_text('a')

    first = build_tree(repo, repo.work_tree)
    second = TreeBuilder(repo).build(repo.work_tree)

    assert first == second
    assert [e.name for e in list_tree(repo, first)] == ['a.txt']


def test_metadata_directory_skipped_with_custom_ignore(repo):
    (repo.work_tree / 'a.txt').write_text('a')

    tree_hash = TreeBuilder(repo, {'unrelated'}).build(repo.work_tree)
    assert [e.name for e in list_tree(repo, tree_hash)] == ['a.txt']


def test_other_git_directories_follow_ignore_set(repo, tmp_path):
    """Test only this repository's metadata directory is always skipped."""
    _make_files(tmp_path, [('.git/HEAD', b'ref: refs/heads/main\n'), ('x', b'x')])
    entries = list_tree(repo, TreeBuilder(repo, ()).build(tmp_path))
    assert [e.name for e in entries] == ['.git', 'x']
