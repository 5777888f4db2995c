"""Main CLI entry point for Kubemon."""

import sys
from typing import Optional

import click

from kubemon.client.cli.config import config
from kubemon.client.cli.node import node
from kubemon.client.cli.pod import pod


def configure_client_logging(debug: bool = False) -> None:
    """Configure logging for the client CLI.

    Level and renderer come from the ``logging`` config section unless
    ``debug`` forces DEBUG.
    """
    from kubemon.core.config.structlog_config import configure_logging

    configure_logging(level="DEBUG" if debug else None, component_name="cli")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    r"""Kubemon pod management CLI.

    Kubemon runs pods on a Kubernetes cluster and follows them until they
    leave the Pending phase.

    \b
    Examples:
      kubemon pod run -f pod.yaml
      kubemon pod list -o json
      kubemon node list
      kubemon config set kube.namespace batch

    For more information on a specific command group:
      kubemon <group> --help
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    configure_client_logging(debug=debug)


# Register command groups
cli.add_command(pod)
cli.add_command(node)
cli.add_command(config)


@cli.command()
def version() -> None:
    """Show version information."""
    from kubemon.client import __version__

    click.echo(f"kubemon {__version__}")


def main(args: Optional[list] = None) -> None:
    """Main entry point for the CLI."""
    try:
        cli(args)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
