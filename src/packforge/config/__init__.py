"""Configuration and preflight checks."""

from packforge.config.loader import (
    load_config,
    resolve_project_name,
    save_config,
)
from packforge.config.schema import (
    DEFAULT_CONFIG,
    PackforgeConfig,
    ProjectMetadata,
)

__all__ = [
    "DEFAULT_CONFIG",
    "PackforgeConfig",
    "ProjectMetadata",
    "load_config",
    "resolve_project_name",
    "save_config",
]
