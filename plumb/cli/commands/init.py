"""Initialize a new Plumb repository."""

import click
from pathlib import Path
from plumb.core.errors import RepositoryExistsError
from plumb.core.repository import Repository
from plumb.cli.output import success, error, info


@click.command('init')
@click.argument('path', default='.')
@click.option('-q', '--quiet', is_flag=True, help='Only print errors')
def init_cmd(path, quiet):
    """
    Initialize a new repository.

    Creates a .git directory holding HEAD, objects/ and refs/.

    Examples:
        plumb init                  # Initialize in current directory
        plumb init my-project       # Initialize in my-project directory
    """
    repo_path = Path(path).resolve()

    try:
        if not repo_path.exists():
            repo_path.mkdir(parents=True)
            if not quiet:
                click.echo(info(f"Created directory {repo_path}"))

        repo = Repository(repo_path)
        repo.init()
    except RepositoryExistsError as e:
        click.echo(error(str(e)))
        click.echo(info("Use an empty directory or different path"))
        raise click.Abort()
    except PermissionError:
        click.echo(error(f"Permission denied: Cannot create repository at {path}"))
        raise click.Abort()
    except OSError as e:
        click.echo(error(f"Failed to initialize repository: {e}"))
        raise click.Abort()

    if not quiet:
        click.echo(success(f"Initialized empty repository in {repo.git_dir}"))
