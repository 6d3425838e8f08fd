"""Create commit objects."""

import click
from plumb.core.errors import PlumbError
from plumb.cli.output import error, success, short_hash
from plumb.cli.commands.ls_tree import open_repository, resolve_object


def _author_from(name, email):
    if name and email:
        return f"{name} <{email}>"
    return None


def _with_newline(message: str) -> str:
    return message if message.endswith('\n') else message + '\n'


@click.command('commit-tree')
@click.argument('tree')
@click.option('-p', '--parent', help='Parent commit')
@click.option('-m', '--message', required=True, help='Commit message')
@click.option('--author-name', envvar='PLUMB_AUTHOR_NAME', help='Author name')
@click.option('--author-email', envvar='PLUMB_AUTHOR_EMAIL', help='Author email')
def commit_tree_cmd(tree, parent, message, author_name, author_email):
    """
    Create a commit for TREE and print its hash.

    The author comes from --author-name/--author-email, then user.name and
    user.email in the configuration.

    Examples:
        plumb commit-tree 4b825dc -m "Initial commit"
        plumb commit-tree $(plumb write-tree) -p HEAD -m "Next"
    """
    repo = open_repository()

    try:
        tree_hash = resolve_object(repo, tree)
        parent_hash = resolve_object(repo, parent) if parent else None
        commit_hash = repo.commit_tree(
            tree_hash,
            _with_newline(message),
            parent=parent_hash,
            author=_author_from(author_name, author_email),
        )
    except (PlumbError, OSError, ValueError) as e:
        click.echo(error(f"commit-tree failed: {e}"))
        raise click.Abort()

    click.echo(commit_hash)


@click.command('commit')
@click.option('-m', '--message', required=True, help='Commit message')
@click.option('--author-name', envvar='PLUMB_AUTHOR_NAME', help='Author name')
@click.option('--author-email', envvar='PLUMB_AUTHOR_EMAIL', help='Author email')
def commit_cmd(message, author_name, author_email):
    """
    Snapshot the repository root and commit it on top of HEAD.

    Examples:
        plumb commit -m "Add README"
    """
    repo = open_repository()

    try:
        commit_hash = repo.commit(
            _with_newline(message),
            author=_author_from(author_name, author_email),
        )
    except (PlumbError, OSError, ValueError) as e:
        click.echo(error(f"commit failed: {e}"))
        raise click.Abort()

    ref = repo.refs.head_ref() or 'HEAD'
    summary = message.strip().split('\n')[0]
    click.echo(success(f"[{ref}] {short_hash(commit_hash)} {summary}"))
