"""Inspect stored objects: ls-tree, cat-file and count-objects."""

import click
from colorama import Fore, Style
from plumb.core.codec import parse_header
from plumb.core.errors import NotFoundError, PlumbError
from plumb.core.objects import Blob, Commit, Tree
from plumb.core.reader import cat_object, list_tree, render_object, walk_tree
from plumb.core.repository import Repository
from plumb.cli.output import error, short_hash


def resolve_object(repo, name: str) -> str:
    """
    Resolve HEAD or a (short) hash to a full object hash.

    Raises:
        NotFoundError: If nothing matches
        AmbiguousHashError: If a short hash matches several objects
    """
    if name == 'HEAD':
        head = repo.refs.resolve_head()
        if not head:
            raise NotFoundError('HEAD', what='Reference')
        return head
    return repo.resolve_prefix(name)


def open_repository() -> Repository:
    repo = Repository.find_repository()
    if not repo:
        click.echo(error("Not a plumb repository"))
        raise click.Abort()
    return repo


def format_entry(entry, path: str, abbrev: int) -> str:
    mode = entry.mode.rjust(6, '0')
    if entry.type == 'tree':
        return f"{mode} tree {short_hash(entry.hash, abbrev)}\t{Fore.BLUE}{path}/{Style.RESET_ALL}"
    return f"{mode} blob {short_hash(entry.hash, abbrev)}\t{path}"


@click.command('ls-tree')
@click.option('-r', '--recursive', is_flag=True, help='Recurse into sub-trees')
@click.option('--name-only', is_flag=True, help='Show only file names')
@click.option('--abbrev', type=int, default=0, help='Abbreviate hash to N characters (default: full)')
@click.argument('treeish', required=False, default='HEAD')
def ls_tree_cmd(recursive, name_only, abbrev, treeish):
    """
    List contents of a tree object.

    TREEISH can be a tree hash, a commit hash or HEAD (the default).

    Examples:
        plumb ls-tree                  # Show tree for HEAD
        plumb ls-tree -r 4b825dc       # Recursively list a tree
        plumb ls-tree --name-only HEAD # Only show file names
    """
    repo = open_repository()

    try:
        obj_hash = resolve_object(repo, treeish)
        obj = cat_object(repo, obj_hash)
        if isinstance(obj, Commit):
            obj_hash = obj.tree
        elif not isinstance(obj, Tree):
            click.echo(error(f"Not a valid tree-ish: {treeish}"))
            raise click.Abort()

        if recursive:
            listing = ((path, entry) for path, entry in walk_tree(repo, obj_hash)
                       if entry.type != 'tree')
        else:
            listing = ((entry.name, entry) for entry in list_tree(repo, obj_hash))

        for path, entry in listing:
            if name_only:
                click.echo(path)
            else:
                click.echo(format_entry(entry, path, abbrev))

    except PlumbError as e:
        click.echo(error(f"ls-tree failed: {e}"))
        raise click.Abort()


@click.command('cat-file')
@click.option('-t', '--type', 'show_type', is_flag=True, help='Show object type')
@click.option('-s', '--size', 'show_size', is_flag=True, help='Show object size')
@click.option('-p', '--pretty', is_flag=True, help='Pretty-print object content')
@click.argument('object_hash')
def cat_file_cmd(show_type, show_size, pretty, object_hash):
    """
    Show object content, type, or size.

    Works for blobs, trees and commits alike.

    Examples:
        plumb cat-file -t ce01362     # Show object type
        plumb cat-file -s ce01362     # Show payload size
        plumb cat-file -p HEAD        # Pretty-print object content
    """
    repo = open_repository()

    try:
        full_hash = resolve_object(repo, object_hash)

        if show_type or show_size:
            obj_type, size, _ = parse_header(repo.read_raw(full_hash))
            click.echo(obj_type if show_type else size)
            return

        obj = cat_object(repo, full_hash)
        if isinstance(obj, Blob):
            click.echo(obj.data, nl=False)
        else:
            click.echo(render_object(obj), nl=False)

    except PlumbError as e:
        click.echo(error(f"cat-file failed: {e}"))
        raise click.Abort()


@click.command('count-objects')
@click.option('-v', '--verbose', is_flag=True, help='Show detailed information')
def count_objects_cmd(verbose):
    """
    Count objects in the repository.

    Examples:
        plumb count-objects          # Show object counts
        plumb count-objects -v       # Show detailed breakdown
    """
    repo = open_repository()

    total_objects = 0
    total_size = 0
    type_counts = {'commit': 0, 'tree': 0, 'blob': 0, 'unreadable': 0}

    for obj_hash in repo.iter_objects():
        total_objects += 1
        total_size += repo.object_path(obj_hash).stat().st_size

        if verbose:
            try:
                obj_type, _, _ = parse_header(repo.read_raw(obj_hash))
                type_counts[obj_type] += 1
            except PlumbError:
                type_counts['unreadable'] += 1

    if verbose:
        click.echo(f"{Fore.CYAN}Object Statistics:{Style.RESET_ALL}")
        click.echo(f"  Commits: {Fore.YELLOW}{type_counts['commit']}{Style.RESET_ALL}")
        click.echo(f"  Trees:   {Fore.YELLOW}{type_counts['tree']}{Style.RESET_ALL}")
        click.echo(f"  Blobs:   {Fore.YELLOW}{type_counts['blob']}{Style.RESET_ALL}")
        if type_counts['unreadable'] > 0:
            click.echo(f"  Unreadable: {type_counts['unreadable']}")
        click.echo()

    size_kb = total_size / 1024
    click.echo(f"{total_objects} objects, {size_kb:.2f} KB")
