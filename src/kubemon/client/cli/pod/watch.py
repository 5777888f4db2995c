"""Pod watch command."""

import asyncio
import json
from typing import Optional

import click


@click.command()
@click.argument("name", type=str)
@click.option(
    "-r",
    "--resource-version",
    type=str,
    default=None,
    help="Start from this resource version (default: the pod's current one).",
)
@click.option(
    "-t",
    "--timeout",
    type=float,
    default=None,
    help="Stop watching after this many seconds.",
)
@click.option(
    "-o",
    "--output",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
def watch(
    name: str, resource_version: Optional[str], timeout: Optional[float], output: str
) -> None:
    r"""Follow the status changes of a pod.

    Prints one line per change until the server ends the watch or the
    timeout expires.

    \b
    Examples:
      kubemon pod watch my-pod
      kubemon pod watch my-pod --timeout 60 -o json
    """
    from kubemon.client.api import PodStatusEvent
    from kubemon.client.commands.pod import watch_pod

    def on_event(event: PodStatusEvent) -> None:
        if output == "json":
            click.echo(json.dumps({"type": event.type, "object": event.pod.to_wire()}))
        else:
            click.echo(f"{event.type}\t{event.pod.name}\t{event.pod.phase or ''}")

    asyncio.run(
        watch_pod(
            name, on_event, resource_version=resource_version, timeout=timeout
        )
    )
