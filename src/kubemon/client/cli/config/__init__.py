"""Config command group for Kubemon CLI."""

import click

from kubemon.client.cli.config.set import set_config
from kubemon.client.cli.config.show import show


@click.group()
def config() -> None:
    r"""Configuration management.

    \b
    Commands for viewing and updating Kubemon configuration.

    \b
    Examples:
      kubemon config show
      kubemon config set kube.pending_timeout 300
    """


# Register config subcommands
config.add_command(show)
config.add_command(set_config, name="set")
