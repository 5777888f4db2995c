"""Pod status command."""

import json

import click


@click.command()
@click.argument("name", type=str)
@click.option(
    "-o",
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format.",
)
def status(name: str, output: str) -> None:
    r"""Show the current status of a pod.

    \b
    Examples:
      kubemon pod status my-pod
      kubemon pod status my-pod -o json
    """
    from tabulate import tabulate

    from kubemon.client.commands.pod import pod_status

    pod_status_ = pod_status(name)

    if output == "json":
        click.echo(json.dumps(pod_status_.to_wire(), indent=2))
        return

    rows = [
        ["Phase", pod_status_.phase or ""],
        ["Reason", pod_status_.reason or ""],
        ["Message", pod_status_.message or ""],
        ["Host IP", pod_status_.host_ip or ""],
        ["Pod IP", pod_status_.pod_ip or ""],
        ["Started", pod_status_.start_time or ""],
    ]
    click.echo(tabulate(rows, tablefmt="psql"))
