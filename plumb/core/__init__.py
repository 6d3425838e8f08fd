"""Core functionality for Plumb.

This module contains the object store:
- Objects (Blob, Tree, Commit) and their canonical encoding
- Compression and hashing
- Repository (object storage and retrieval)
- Tree building and object reading
- HEAD and configuration management

For fetching objects from another store, see plumb.remote
For ignore rules, see plumb.utils
"""

from plumb.core.objects import PlumbObject, Blob, Tree, TreeEntry, Commit
from plumb.core.codec import encode, decode
from plumb.core.compress import compress, decompress
from plumb.core.repository import Repository
from plumb.core.hash import hash_object, hash_file, EMPTY_BLOB_HASH, EMPTY_TREE_HASH
from plumb.core.tree_builder import TreeBuilder, build_tree
from plumb.core.reader import cat_object, list_tree, read_blob, read_commit, render_object
from plumb.core.refs import RefManager
from plumb.core.config import Config, get_config

__all__ = [
    'PlumbObject',
    'Blob',
    'Tree',
    'TreeEntry',
    'Commit',
    'encode',
    'decode',
    'compress',
    'decompress',
    'Repository',
    'hash_object',
    'hash_file',
    'EMPTY_BLOB_HASH',
    'EMPTY_TREE_HASH',
    'TreeBuilder',
    'build_tree',
    'cat_object',
    'list_tree',
    'read_blob',
    'read_commit',
    'render_object',
    'RefManager',
    'Config',
    'get_config',
]
