"""Config show command."""

from typing import Optional

import click


@click.command()
@click.option(
    "--section",
    type=str,
    default=None,
    help="Show only a specific section of the configuration.",
)
@click.option(
    "--key",
    type=str,
    default=None,
    help="Show only a specific key (requires --section).",
)
@click.option(
    "-o",
    "--output",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    show_default=True,
    help="Output format.",
)
def show(section: Optional[str], key: Optional[str], output: str) -> None:
    r"""Display current configuration.

    Shows the configuration Kubemon would use, including environment
    overrides of the form KUBEMON__SECTION__KEY.

    \b
    Examples:
      # Show all configuration
      kubemon config show

      # Show specific section
      kubemon config show --section http

      # Show specific value
      kubemon config show --section kube --key namespace

      # Output as JSON
      kubemon config show -o json
    """
    import json

    import yaml

    from kubemon.core.configuration import KubemonConfig
    from kubemon.core.exceptions import ConfigError

    if key and not section:
        raise click.UsageError("--key requires --section to be specified.")

    config = KubemonConfig()

    if section and key:
        try:
            value = config.get(section, key)
        except ConfigError as e:
            raise click.ClickException(f"Key not found: {e}")
        if output == "json":
            click.echo(json.dumps({section: {key: value}}, indent=2))
        else:
            click.echo(f"{section}.{key}: {value}")
    elif section:
        section_data = config.get_section(section)
        if not section_data:
            raise click.ClickException(f"Section not found: {section}")
        if output == "json":
            click.echo(json.dumps({section: section_data}, indent=2))
        else:
            click.echo(yaml.safe_dump({section: section_data}, default_flow_style=False))
    else:
        data = {name: config.get_section(name) for name in config._config}
        if output == "json":
            click.echo(json.dumps(data, indent=2))
        else:
            click.echo(yaml.safe_dump(data, default_flow_style=False))

    click.echo(f"\n(Config file: {config._filepath})", err=True)
