"""Snapshot a directory into tree objects."""

import click
from plumb.core.errors import PlumbError
from plumb.utils.ignore import IgnoreSet
from plumb.cli.output import error
from plumb.cli.commands.ls_tree import open_repository


@click.command('write-tree')
@click.option('--ignore', 'ignore_patterns', multiple=True,
              help='Extra name or path pattern to leave out (repeatable)')
@click.argument('directory', required=False,
                type=click.Path(exists=True, file_okay=False))
def write_tree_cmd(ignore_patterns, directory):
    """
    Store DIRECTORY (the repository root by default) and print its tree hash.

    The metadata directory, __pycache__, *.egg-info, node_modules and
    patterns from core.ignore and .plumbignore are left out.

    Examples:
        plumb write-tree
        plumb write-tree --ignore '*.log' src
    """
    repo = open_repository()

    target = directory or repo.work_tree
    try:
        ignore = IgnoreSet.for_directory(target, repo.config, extra=ignore_patterns)
        tree_hash = repo.write_tree(target, ignore)
    except (PlumbError, OSError, ValueError) as e:
        click.echo(error(f"write-tree failed: {e}"))
        raise click.Abort()

    click.echo(tree_hash)
