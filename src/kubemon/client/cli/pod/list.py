"""Pod list command."""

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
def list_pods(output: str) -> None:
    r"""List pods in the configured namespace.

    \b
    Examples:
      kubemon pod list
      kubemon pod list -o json
    """
    from tabulate import tabulate

    from kubemon.client.commands.pod import list_pods as list_pods_cmd
    from kubemon.client.commands.pod import pod_rows

    pods = list_pods_cmd()

    if output == "json":
        click.echo(json.dumps([p.to_wire() for p in pods], indent=2))
    elif not pods:
        click.echo("No pods found.")
    else:
        click.echo(tabulate(pod_rows(pods), headers="keys", tablefmt="psql"))
