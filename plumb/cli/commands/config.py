"""Config command - read and write configuration values."""

import click
from plumb.core.config import Config
from plumb.core.repository import Repository
from plumb.cli.output import success, error


def _split_key(key: str):
    section, _, option = key.partition('.')
    if not option:
        return 'core', section
    return section, option


def _config_for(is_global: bool) -> Config:
    if is_global:
        return Config()
    repo = Repository.find_repository()
    if not repo:
        click.echo(error("Not a plumb repository (use --global for global config)"))
        raise click.Abort()
    return repo.config


@click.group('config')
def config_cmd():
    """Get and set repository or global options."""
    pass


@config_cmd.command('set')
@click.argument('key')
@click.argument('value')
@click.option('--global', 'is_global', is_flag=True, help='Write the global config')
def config_set(key, value, is_global):
    """
    Set a config value.

    Examples:
        plumb config set user.name "Your Name"
        plumb config set --global user.email "you@example.com"
        plumb config set core.compression 9
    """
    section, option = _split_key(key)
    _config_for(is_global).set(section, option, value, global_config=is_global)

    scope = "global" if is_global else "repository"
    click.echo(success(f"Set {scope} config: {section}.{option} = {value}"))


@config_cmd.command('get')
@click.argument('key')
def config_get(key):
    """
    Print a config value.

    Environment variables, the repository config and the global config are
    consulted in that order.

    Examples:
        plumb config get user.name
    """
    section, option = _split_key(key)
    repo = Repository.find_repository()
    config = repo.config if repo else Config()

    value = config.get(section, option)
    if value is None:
        click.echo(error(f"Config key not found: {section}.{option}"))
        raise click.Abort()
    click.echo(value)
