"""Pod command group for Kubemon CLI."""

import click

from kubemon.client.cli.pod.delete import delete
from kubemon.client.cli.pod.list import list_pods
from kubemon.client.cli.pod.logs import logs
from kubemon.client.cli.pod.run import run
from kubemon.client.cli.pod.status import status
from kubemon.client.cli.pod.watch import watch


@click.group()
def pod() -> None:
    r"""Pod operations.

    \b
    Commands for running pods and inspecting their state.

    \b
    Examples:
      kubemon pod run -f pod.yaml --timeout 300
      kubemon pod status my-pod
      kubemon pod logs my-pod
      kubemon pod watch my-pod
    """


# Register pod subcommands
pod.add_command(run)
pod.add_command(status)
pod.add_command(list_pods, name="list")
pod.add_command(logs)
pod.add_command(delete)
pod.add_command(watch)
