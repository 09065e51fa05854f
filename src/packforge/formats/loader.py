"""Custom packaging format loading and discovery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from packforge.errors import ConfigError
from packforge.formats.assets import DirectoryAssetSource
from packforge.formats.builtin import BUILTIN_FORMATS
from packforge.packaging.registry import FormatRegistry
from packforge.packaging.task import Dependency, PackagingTask

logger = logging.getLogger(__name__)

# Constants
FORMAT_DIRNAME = "formats"
FORMAT_YAML = "format.yaml"


def get_global_formats_path() -> Path:
    """Get path to global user formats: ~/.packforge/formats/."""
    return Path.home() / ".packforge" / FORMAT_DIRNAME


def get_local_formats_path() -> Path:
    """Get path to project-specific formats: ./.packforge/formats/."""
    return Path.cwd() / ".packforge" / FORMAT_DIRNAME


def discover_format_dirs(base_path: Path) -> dict[str, Path]:
    """Discover format directories within a base path.

    Returns dict mapping directory name -> format directory path.
    Only includes directories containing format.yaml.
    """
    formats: dict[str, Path] = {}
    if not base_path.exists():
        return formats

    for item in base_path.iterdir():
        if item.is_dir():
            format_yaml = item / FORMAT_YAML
            if format_yaml.exists():
                formats[item.name] = item

    return formats


def _string_tuple(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, list):
        return tuple(str(item) for item in raw)
    return ()


def _dependencies(raw: Any) -> tuple[Dependency, ...]:
    if not isinstance(raw, list):
        return ()
    dependencies: list[Dependency] = []
    for entry in raw:
        if isinstance(entry, dict) and "format" in entry:
            dependencies.append(
                Dependency(str(entry["format"]), str(entry.get("destination", ".")))
            )
        else:
            raise ConfigError(f"Invalid depends_on entry: {entry!r}")
    return tuple(dependencies)


def task_from_dict(data: dict[str, Any], format_dir: Path) -> PackagingTask:
    """Create a PackagingTask from a parsed format.yaml.

    Template sources are resolved relative to ``format_dir``.

    Raises:
        ConfigError: If a required key is missing or a value is invalid.
    """
    format_name = str(data.get("format", format_dir.name))
    script = data.get("packaging_script")
    extension = data.get("output_file_extension")
    if not script or not extension:
        raise ConfigError(
            f"{format_dir / FORMAT_YAML}: packaging_script and "
            "output_file_extension are required"
        )

    template_files_raw = data.get("template_files") or {}
    if not isinstance(template_files_raw, dict):
        raise ConfigError(f"{format_dir / FORMAT_YAML}: template_files must be a mapping")
    template_files = {str(k): str(v) for k, v in template_files_raw.items()}

    docker_image = data.get("docker_image")

    return PackagingTask(
        format_name=format_name,
        description=str(data.get("description", "")),
        depends_on=_dependencies(data.get("depends_on")),
        template_files=template_files,
        executable_files=_string_tuple(data.get("executable_files")),
        linux_desktop_file_executable_path=str(
            data.get("linux_desktop_file_executable_path", "")
        ),
        linux_desktop_file_icon_path=str(data.get("linux_desktop_file_icon_path", "")),
        build_output_directory=str(data.get("build_output_directory", "")),
        packaging_script_template=str(script),
        output_file_extension=str(extension),
        output_file_contains_version=bool(data.get("output_file_contains_version", True)),
        output_file_uses_application_name=bool(
            data.get("output_file_uses_application_name", False)
        ),
        skip_assert_initialized=bool(data.get("skip_assert_initialized", False)),
        required_tools=_string_tuple(data.get("required_tools")),
        docker_image=str(docker_image) if docker_image else None,
        asset_source=DirectoryAssetSource(format_dir),
    )


def load_format_from_dir(format_dir: Path) -> PackagingTask | None:
    """Load a PackagingTask from a format directory.

    Returns None if format.yaml is missing or invalid.
    """
    format_yaml = format_dir / FORMAT_YAML
    if not format_yaml.exists():
        return None

    try:
        with format_yaml.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
            if not isinstance(data, dict):
                return None
    except yaml.YAMLError:
        logger.warning("Skipping %s: invalid YAML", format_yaml)
        return None

    try:
        return task_from_dict(data, format_dir)
    except ConfigError as e:
        logger.warning("Skipping %s: %s", format_yaml, e)
        return None


def get_custom_formats() -> dict[str, PackagingTask]:
    """Discover and load all custom formats from filesystem locations.

    Resolution order (later wins for same name):
    1. Global (~/.packforge/formats/)
    2. Project (./.packforge/formats/)

    Returns dict mapping format name -> PackagingTask.
    """
    formats: dict[str, PackagingTask] = {}

    for base_path in (get_global_formats_path(), get_local_formats_path()):
        for format_dir in discover_format_dirs(base_path).values():
            task = load_format_from_dir(format_dir)
            if task:
                formats[task.format_name] = task

    return formats


def build_registry(include_custom: bool = True) -> FormatRegistry:
    """Build the registry of built-in formats plus custom formats.

    A custom format with the same name as a built-in one replaces it.

    Raises:
        UnknownFormatError: If a format depends on an unregistered format.
        DependencyCycleError: If the formats depend on each other in a cycle.
    """
    formats: dict[str, PackagingTask] = {
        task.format_name: task for task in BUILTIN_FORMATS
    }
    if include_custom:
        formats.update(get_custom_formats())
    return FormatRegistry(formats.values())
