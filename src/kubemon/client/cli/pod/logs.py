"""Pod logs command."""

import click


@click.command()
@click.argument("name", type=str)
def logs(name: str) -> None:
    r"""Print the log of a pod's first container.

    \b
    Examples:
      kubemon pod logs my-pod
    """
    from kubemon.client.commands.pod import pod_logs

    click.echo(pod_logs(name), nl=False)
