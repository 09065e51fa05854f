"""The key-value context shared by all templates of one packaging run."""

from __future__ import annotations

import platform
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from packforge.templates.renderer import render_template_string

if TYPE_CHECKING:
    from packforge.config.schema import ProjectMetadata

TEMPLATE_KEYS: tuple[str, ...] = (
    "projectName",
    "version",
    "release",
    "arch",
    "description",
    "organizationName",
    "author",
    "applicationName",
    "executableName",
    "packageName",
    "license",
    "iconPath",
    "executablePath",
)

# Machine names reported by the OS mapped to the names packaging tools expect.
_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


def normalize_arch(machine: str | None = None) -> str:
    """Return the host architecture as amd64, arm64, 386 or arm.

    Unknown machine names are returned lowercased and unchanged.
    """
    raw = (machine if machine is not None else platform.machine()).lower()
    return _ARCH_ALIASES.get(raw, raw)


class TemplateContext(Mapping[str, str]):
    """Immutable mapping of template keys to their values."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TemplateContext({dict(self._values)!r})"

    def with_desktop_paths(
        self, icon_path_template: str, executable_path_template: str
    ) -> TemplateContext:
        """Return a copy with iconPath and executablePath resolved.

        Both values are themselves templates, rendered against this context.
        """
        values = dict(self._values)
        values["iconPath"] = render_template_string(icon_path_template, self)
        values["executablePath"] = render_template_string(
            executable_path_template, self
        )
        return TemplateContext(values)


def build_template_context(
    project_name: str,
    build_version: str,
    metadata: ProjectMetadata,
    arch: str | None = None,
    icon_path_template: str = "",
    executable_path_template: str = "",
) -> TemplateContext:
    """Build the template context for a project and version.

    ``release`` is the first dot-separated segment of the version. The icon
    and executable paths are resolved in a second pass against the rest of
    the context.
    """
    base = TemplateContext(
        {
            "projectName": project_name,
            "version": build_version,
            "release": build_version.split(".")[0],
            "arch": arch or normalize_arch(),
            "description": metadata.description,
            "organizationName": metadata.organization_name,
            "author": metadata.author,
            "applicationName": metadata.application_name,
            "executableName": metadata.executable_name,
            "packageName": metadata.package_name,
            "license": metadata.license,
        }
    )
    return base.with_desktop_paths(icon_path_template, executable_path_template)
