"""Pod run command."""

import asyncio
import json
from typing import Optional

import click


@click.command()
@click.option(
    "-f",
    "--filename",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Pod manifest (YAML or JSON).",
)
@click.option(
    "-t",
    "--timeout",
    type=float,
    default=None,
    help="Seconds to wait for the pod to leave Pending (default: kube.pending_timeout).",
)
@click.option(
    "-o",
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format.",
)
def run(filename: str, timeout: Optional[float], output: str) -> None:
    r"""Create a pod and wait until it leaves Pending.

    If the pod is still pending when the timeout expires it is deleted again
    and the command fails.

    \b
    Examples:
      # Run a pod with the configured timeout
      kubemon pod run -f pod.yaml

      # Give the scheduler five minutes
      kubemon pod run -f pod.yaml --timeout 300
    """
    from tabulate import tabulate

    from kubemon.client.commands.pod import load_pod, pod_rows, run_pod

    spec = load_pod(filename)
    result = asyncio.run(run_pod(spec, timeout=timeout))

    if output == "json":
        click.echo(json.dumps(result.to_wire(), indent=2))
    else:
        click.echo(tabulate(pod_rows([result]), headers="keys", tablefmt="psql"))
