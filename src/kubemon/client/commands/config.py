"""Configuration management commands.

Commands for viewing and updating Kubemon configuration:
- Update configuration values
"""

from typing import Any, Optional

import yaml

from kubemon.core.configuration import KubemonConfig


def _coerce_value(value: str) -> Any:
    """Interpret a command line value the way the YAML file would."""
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def update_config_value(
    key: str,
    value: str,
    config_file: Optional[str] = None,
) -> str:
    """Update a configuration value in the config file using dot notation.

    Args:
        key: Dot-notated key (e.g., 'http.retries_attempts', 'kube.namespace')
        value: New value to set
        config_file: Optional path to specific config file to update

    Returns:
        Success message indicating what was updated

    Raises:
        ValueError: If the key doesn't exist in the current configuration
    """
    config = KubemonConfig(filepath=config_file or "")

    key_parts = key.split(".")
    if len(key_parts) != 2:
        raise ValueError(
            f"Key '{key}' must be in dot notation format (e.g., 'section.key'). "
            f"Valid sections are: {list(config._config.keys())}"
        )
    section, final_key = key_parts

    if section not in config._config:
        raise ValueError(
            f"Section '{section}' not found in configuration. "
            f"Available sections: {list(config._config.keys())}"
        )

    section_dict = config._config[section] or {}
    if final_key not in section_dict:
        raise ValueError(
            f"Key '{final_key}' not found in '{section}'. "
            f"Available keys: {list(section_dict.keys())}"
        )

    old_value = section_dict[final_key]
    coerced_value = _coerce_value(value)
    config.set(section, final_key, coerced_value)
    config.write()

    return (
        f"Successfully updated '{key}' from '{old_value}' to '{coerced_value}' "
        f"in {config._filepath}"
    )
