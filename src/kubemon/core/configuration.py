"""Parse configuration options and set them to be used throughout Kubemon."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from kubemon.core.exceptions import ConfigError


DEFAULTS_FILE_NAME = "defaults.yaml"
DEFAULTS_FILE = Path(__file__).parent / DEFAULTS_FILE_NAME
ENV_VAR_PREFIX = "KUBEMON__"


class KubemonConfig:
    """Default config setup using YAML."""

    def __init__(self, filepath: str = "", dict_config: Optional[Dict] = None) -> None:
        """Kubemon config class.

        Args:
            filepath: where to read values from.
            dict_config: dictionary of values to override

        Config file priority:
            1. user specified file passed in
            2. environment variable KUBEMON__CONFIG_FILE
            3. default config file in core
        """
        self._filepath: Union[str, Path] = filepath or os.getenv(
            "KUBEMON__CONFIG_FILE", ""
        )
        if not self._filepath:
            self._filepath = DEFAULTS_FILE

        with open(self._filepath, "r", encoding="utf-8") as f:
            self._config = yaml.safe_load(f) or {}

        self._dict_config = dict_config

    def _get_env_var_name(self, section: str, key: str) -> str:
        return f"{ENV_VAR_PREFIX}{section.upper()}__{key.upper()}"

    def _get_environment_variable(self, section: str, key: str) -> Optional[str]:
        # must have format KUBEMON__{SECTION}__{KEY} (note double underscore)
        env_var = self._get_env_var_name(section, key)
        return os.environ.get(env_var)

    def _interpolate_env_vars(self, value: Any) -> Any:
        if isinstance(value, str):
            return os.path.expandvars(value)
        return value

    def _get_yaml_variable(self, section: str, key: str) -> Optional[Any]:
        return (self._config.get(section) or {}).get(key)

    def _get_dict_config_variable(self, section: str, key: str) -> Optional[Any]:
        if self._dict_config:
            return self._dict_config.get(section, {}).get(key)
        return None

    def get(self, section: str, key: str) -> Any:
        """Get the configuration value for the section and key. Raise if key not found.

        The order of precedence: dict_config > Environment Variable > YAML File.

        Args:
            section: the section of the yaml to search.
            key: the key within the section to retrieve

        Raises: ConfigError
        """
        val = self._get_dict_config_variable(section, key)
        if val is not None:
            return self._interpolate_env_vars(val)

        val = self._get_environment_variable(section, key)
        if val is not None:
            return val

        val = self._get_yaml_variable(section, key)
        if val is not None:
            return self._interpolate_env_vars(val)

        raise ConfigError(
            f'"{key}" key not found in "{section}" section of {self._filepath}. Fallback '
            f'option using environment var "{self._get_env_var_name(section, key)}" was not '
            "found."
        )

    def get_section(self, section: str) -> Dict[str, Any]:
        """Returns a dictionary of all key-value pairs in the given section."""
        section_dict = dict(self._config.get(section) or {})

        if self._dict_config:
            section_dict.update(self._dict_config.get(section, {}))

        prefix = f"{ENV_VAR_PREFIX}{section.upper()}__"
        for env_key in os.environ.keys():
            if env_key.startswith(prefix):
                key = env_key[len(prefix) :].lower()
                section_dict[key] = os.environ[env_key]

        return section_dict

    def get_boolean(self, section: str, key: str) -> bool:
        """Get the configuration value for the section and key as bool.

        Raise if key not found.
        """
        val = str(self.get(section, key)).lower().strip()
        if val in ("t", "true", "1", "yes"):
            return True
        elif val in ("f", "false", "0", "no"):
            return False
        else:
            raise ConfigError(
                f'Failed to convert value to bool. Please check "{key}" key in "{section}" '
                f'section or environment var "{self._get_env_var_name(section, key)}". '
                f'Current value: "{val}".'
            )

    def get_int(self, section: str, key: str) -> int:
        """Get the configuration value for the section and key as int.

        Raise if key not found.
        """
        val = self.get(section, key)
        try:
            return int(val)
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f'Failed to convert value to int. Please check "{key}" key in "{section}" '
                f'section or environment var "{self._get_env_var_name(section, key)}". '
                f'Current value: "{val}".'
            ) from exc

    def get_float(self, section: str, key: str) -> float:
        """Get the configuration value for the section/key as float. Raise if key not found."""
        val = self.get(section, key)
        try:
            return float(val)
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f'Failed to convert value to float. Please check "{key}" key in "{section}" '
                f'section or environment var "{self._get_env_var_name(section, key)}". '
                f'Current value: "{val}".'
            ) from exc

    def set(self, section: str, key: str, val: Any) -> None:
        """Set the configuration value for the section/key."""
        if section not in self._config:
            self._config[section] = {}
        self._config[section][key] = val

    def write(self, filepath: Union[str, Path] = "") -> None:
        """Persist the current config to disk."""
        if not filepath:
            filepath = self._filepath
        with open(filepath, "w") as f:
            yaml.safe_dump(self._config, f)
