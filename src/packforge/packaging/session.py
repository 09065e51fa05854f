"""Per-invocation state shared by all packaging tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from packforge.executors import Executor, ShellExecutor
from packforge.templates.context import TemplateContext, build_template_context

if TYPE_CHECKING:
    from packforge.config.schema import ProjectMetadata
    from packforge.formats.assets import AssetSource
    from packforge.packaging.environment import BuildLayout
    from packforge.packaging.registry import FormatRegistry


@dataclass
class PackagingSession:
    """Everything a packaging task needs from its caller.

    One session covers one invocation for one project. The template
    context is computed on first use and reused for the rest of the
    session, so a session must not be used for more than one version.
    """

    project_name: str
    layout: BuildLayout
    assets: AssetSource
    metadata: ProjectMetadata
    registry: FormatRegistry
    executor: Executor = field(default_factory=ShellExecutor)
    keep_temp_on_failure: bool = False
    arch: str | None = None
    packed: dict[str, Path] = field(default_factory=dict, init=False)
    _template_context: TemplateContext | None = field(
        default=None, init=False, repr=False
    )

    def get_template_context(self, build_version: str) -> TemplateContext:
        """Return the shared template context, building it on the first call.

        Later calls return the first result regardless of ``build_version``.
        """
        if self._template_context is None:
            self._template_context = build_template_context(
                self.project_name, build_version, self.metadata, arch=self.arch
            )
        return self._template_context
