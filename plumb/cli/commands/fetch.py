"""Fetch objects from another repository."""

import click
import requests
from plumb.core.errors import PlumbError
from plumb.remote.fetch import fetch
from plumb.cli.output import error, info, success, short_hash
from plumb.cli.commands.ls_tree import open_repository


@click.command('fetch')
@click.argument('source')
@click.option('--want', help='Commit to fetch (default: the source HEAD)')
def fetch_cmd(source, want):
    """
    Copy the history of a commit from SOURCE into this repository.

    SOURCE is a repository path, a file:// URL or an http(s) URL serving
    a metadata directory.

    Examples:
        plumb fetch ../other-repo
        plumb fetch https://example.com/repo.git
    """
    repo = open_repository()

    try:
        result = fetch(repo, source, want)
    except (PlumbError, requests.RequestException) as e:
        click.echo(error(f"fetch failed: {e}"))
        raise click.Abort()

    if result.fetched:
        click.echo(success(f"Fetched {len(result.fetched)} objects"))
    else:
        click.echo(info("Already up to date"))
    click.echo(f"{short_hash(result.head, 0)}")
