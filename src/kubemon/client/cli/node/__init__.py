"""Node command group for Kubemon CLI."""

import click

from kubemon.client.cli.node.list import list_nodes


@click.group()
def node() -> None:
    r"""Node operations.

    \b
    Examples:
      kubemon node list
    """


node.add_command(list_nodes, name="list")
