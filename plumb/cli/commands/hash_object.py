"""Compute object hashes for files, optionally storing them."""

import click
from plumb.core.objects import Blob
from plumb.cli.output import error
from plumb.cli.commands.ls_tree import open_repository


@click.command('hash-object')
@click.option('-w', '--write', is_flag=True, help='Write the blob into the object store')
@click.option('--stdin', 'from_stdin', is_flag=True, help='Read content from standard input')
@click.argument('files', nargs=-1, type=click.Path(exists=True, dir_okay=False))
def hash_object_cmd(write, from_stdin, files):
    """
    Compute the blob hash of each FILE.

    Examples:
        plumb hash-object hello.txt        # Print the hash only
        plumb hash-object -w hello.txt     # Store the blob and print its hash
        echo hi | plumb hash-object --stdin
    """
    if not files and not from_stdin:
        click.echo(error("Nothing to hash: give FILE arguments or --stdin"))
        raise click.Abort()

    repo = open_repository() if write else None

    blobs = []
    try:
        if from_stdin:
            blobs.append(Blob(click.get_binary_stream('stdin').read()))
        for path in files:
            blobs.append(Blob.from_file(path))

        for blob in blobs:
            obj_hash = repo.write_object(blob) if repo else blob.hash
            click.echo(obj_hash)
    except OSError as e:
        click.echo(error(f"hash-object failed: {e}"))
        raise click.Abort()
