"""Pod delete command."""

import click


@click.command()
@click.argument("name", type=str)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
def delete(name: str, yes: bool) -> None:
    r"""Delete a pod.

    \b
    Examples:
      kubemon pod delete my-pod
      kubemon pod delete my-pod -y
    """
    from kubemon.client.commands.pod import delete_pod

    if not yes:
        click.confirm(f"Delete pod {name}?", abort=True)

    delete_pod(name)
    click.echo(f"pod {name} deleted")
