"""Config set command."""

from typing import Optional

import click


@click.command("set")
@click.argument("key", type=str)
@click.argument("value", type=str)
@click.option(
    "--config-file",
    type=click.Path(exists=False),
    default=None,
    help="Specific config file to update (defaults to the active config).",
)
def set_config(key: str, value: str, config_file: Optional[str]) -> None:
    r"""Update a configuration value.

    Updates a configuration value in the config file using dot notation.

    \b
    Arguments:
      KEY    Configuration key in dot notation (e.g., 'http.service_url')
      VALUE  New value to set

    \b
    Examples:
      # Point at another API server
      kubemon config set http.service_url https://10.0.0.1:6443

      # Wait longer for pods to be scheduled
      kubemon config set kube.pending_timeout 300

      # Update specific config file
      kubemon config set kube.namespace batch --config-file ~/kubemon.yaml
    """
    from kubemon.client.commands.config import update_config_value

    try:
        result = update_config_value(
            key=key,
            value=value,
            config_file=config_file,
        )
        click.echo(result)
    except ValueError as e:
        raise click.ClickException(str(e))
