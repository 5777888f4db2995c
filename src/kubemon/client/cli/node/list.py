"""Node list command."""

import json

import click


@click.command("list")
@click.option(
    "-o",
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format.",
)
def list_nodes(output: str) -> None:
    r"""List the nodes of the cluster.

    \b
    Examples:
      kubemon node list
      kubemon node list -o json
    """
    from tabulate import tabulate

    from kubemon.client.commands.node import list_nodes as list_nodes_cmd
    from kubemon.client.commands.node import node_rows

    nodes = list_nodes_cmd()

    if output == "json":
        click.echo(json.dumps([n.to_wire() for n in nodes], indent=2))
    else:
        click.echo(tabulate(node_rows(nodes), headers="keys", tablefmt="psql"))
