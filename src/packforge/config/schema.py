"""Configuration schema for packforge."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Literal, cast

import click

ExecutorType = Literal["shell", "docker"]

DEFAULT_LICENSE = "NOASSERTION"
DEFAULT_ORGANIZATION = "com.example"


def _parse_bool(raw: Any) -> bool | None:
    """Parse a YAML value the way the CLI parses boolean options.

    Quoted strings such as "false" or "no" are accepted. Anything
    unparseable is treated as unset.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        try:
            return click.BOOL.convert(raw, None, None)
        except click.BadParameter:
            return None
    return bool(raw)


@dataclass(frozen=True)
class ProjectMetadata:
    """Read-only project metadata used to fill templates."""

    application_name: str
    executable_name: str
    package_name: str
    license: str
    author: str
    description: str
    organization_name: str


def default_executable_name(project_name: str) -> str:
    """Project name with all whitespace removed."""
    return re.sub(r"\s+", "", project_name)


def default_package_name(project_name: str) -> str:
    """Lowercased project name with whitespace runs replaced by '-'."""
    return re.sub(r"\s+", "-", project_name.strip()).lower()


@dataclass
class PackforgeConfig:
    """Packforge configuration schema.

    None values indicate "not set" and will use defaults or be inherited.
    """

    # Project metadata
    name: str | None = None
    version: str | None = None
    application_name: str | None = None
    executable_name: str | None = None
    package_name: str | None = None
    license: str | None = None
    author: str | None = None
    description: str | None = None
    organization_name: str | None = None

    # Layout
    root: str | None = None

    # Execution
    executor: ExecutorType | None = None
    docker_image: str | None = None
    keep_temp: bool | None = None

    def merge(self, other: PackforgeConfig) -> PackforgeConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new PackforgeConfig instance.
        """
        merged: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(other, f.name)
            merged[f.name] = value if value is not None else getattr(self, f.name)
        return PackforgeConfig(**merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackforgeConfig:
        """Create a PackforgeConfig from a dictionary.

        Unknown keys are ignored. Scalars are coerced to strings, so a YAML
        version such as ``1.2`` becomes ``"1.2"``.
        """
        string_fields = (
            "name",
            "version",
            "application_name",
            "executable_name",
            "package_name",
            "license",
            "author",
            "description",
            "organization_name",
            "root",
            "docker_image",
        )
        values: dict[str, Any] = {}
        for key in string_fields:
            raw = data.get(key)
            values[key] = str(raw) if raw is not None else None

        executor_raw = data.get("executor")
        executor: ExecutorType | None = None
        if executor_raw in ("shell", "docker"):
            executor = cast(ExecutorType, executor_raw)

        keep_temp = _parse_bool(data.get("keep_temp"))

        return cls(executor=executor, keep_temp=keep_temp, **values)

    def project_metadata(self, project_name: str) -> ProjectMetadata:
        """Resolve project metadata, deriving unset names from ``project_name``."""
        return ProjectMetadata(
            application_name=self.application_name or project_name,
            executable_name=self.executable_name
            or default_executable_name(project_name),
            package_name=self.package_name or default_package_name(project_name),
            license=self.license or DEFAULT_LICENSE,
            author=self.author or "",
            description=self.description or "",
            organization_name=self.organization_name or DEFAULT_ORGANIZATION,
        )


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = PackforgeConfig(
    root=".packforge",
    executor="shell",
    keep_temp=False,
)
