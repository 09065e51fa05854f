"""Layered configuration files.

Project settings live in ``.packforge/config.yaml`` next to the project and
user-wide settings in ``~/.packforge/config.yaml``. Project values win.
"""

from pathlib import Path
from typing import Any

import yaml

from packforge.config.schema import DEFAULT_CONFIG, PackforgeConfig
from packforge.errors import ConfigError

CONFIG_FILENAME = "config.yaml"
CONFIG_DIRNAME = ".packforge"


def get_home_config_path() -> Path:
    """Path of the user-wide config file."""
    return Path.home() / CONFIG_DIRNAME / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Path of the project config file in the working directory."""
    return Path.cwd() / CONFIG_DIRNAME / CONFIG_FILENAME


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Read one config file.

    A missing or empty file reads as an empty mapping.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of settings")
    return data


def load_config() -> PackforgeConfig:
    """Merge built-in defaults, the home config and the project config.

    Raises:
        ConfigError: If either config file is malformed.
    """
    config = DEFAULT_CONFIG
    for path in (get_home_config_path(), get_local_config_path()):
        data = load_yaml_config(path)
        if data:
            config = config.merge(PackforgeConfig.from_dict(data))
    return config


def save_config(config: PackforgeConfig, path: Path) -> None:
    """Write the values set in ``config`` to ``path``, creating its directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def resolve_project_name(config: PackforgeConfig) -> str:
    """Return the configured project name, defaulting to the current directory name."""
    return config.name or Path.cwd().name
