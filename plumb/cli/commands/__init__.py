"""CLI commands for Plumb."""

from plumb.cli.commands.init import init_cmd
from plumb.cli.commands.hash_object import hash_object_cmd
from plumb.cli.commands.ls_tree import ls_tree_cmd, cat_file_cmd, count_objects_cmd
from plumb.cli.commands.write_tree import write_tree_cmd
from plumb.cli.commands.commit import commit_tree_cmd, commit_cmd
from plumb.cli.commands.fetch import fetch_cmd
from plumb.cli.commands.config import config_cmd

__all__ = ['init_cmd', 'hash_object_cmd', 'ls_tree_cmd', 'cat_file_cmd',
           'count_objects_cmd', 'write_tree_cmd', 'commit_tree_cmd', 'commit_cmd',
           'fetch_cmd', 'config_cmd']
