"""Packaging tasks: how one packaging format is initialized and packed."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from packforge.console import console
from packforge.errors import (
    AlreadyInitializedError,
    ConfigError,
    FilesystemError,
    NotInitializedError,
)
from packforge.executors import run_packaging_script
from packforge.packaging.environment import (
    copy_tree,
    make_executable,
    remove_tree,
    stage_artifact,
    temporary_build_directory,
)
from packforge.templates.context import TemplateContext
from packforge.templates.renderer import render_path, render_template_string
from packforge.templates.tree import copy_template_dir

if TYPE_CHECKING:
    from packforge.formats.assets import AssetSource
    from packforge.packaging.session import PackagingSession

logger = logging.getLogger(__name__)

# Called with (package name, temporary build directory) after the
# configuration directory has been copied in.
BuildFileGenerator = Callable[[str, Path], None]


@dataclass(frozen=True)
class Dependency:
    """A packaging format whose packaged output is copied into ``destination``.

    ``destination`` is relative to the dependent task's temporary build
    directory.
    """

    format_name: str
    destination: str


@dataclass(frozen=True, eq=False)
class PackagingTask:
    """Definition of one packaging format.

    Tasks are static configuration. The only state they observe is the
    filesystem: whether their configuration directory exists and what the
    build output directories contain.
    """

    format_name: str  # <platform>-<variant>, e.g. linux-deb
    packaging_script_template: str  # Shell command run inside the temp directory
    output_file_extension: str
    depends_on: tuple[Dependency, ...] = ()  # Packed first, in order
    template_files: Mapping[str, str] = field(default_factory=dict)  # asset -> dest
    executable_files: tuple[str, ...] = ()  # Templated paths to chmod +x
    linux_desktop_file_executable_path: str = ""
    linux_desktop_file_icon_path: str = ""
    generate_build_files: BuildFileGenerator | None = None
    build_output_directory: str = ""  # Empty means the build is not copied
    output_file_contains_version: bool = True
    output_file_uses_application_name: bool = False
    skip_assert_initialized: bool = False
    description: str = ""
    required_tools: tuple[str, ...] = ()
    docker_image: str | None = None
    asset_source: AssetSource | None = None  # Overrides the session's assets

    def __post_init__(self) -> None:
        platform, _, variant = self.format_name.partition("-")
        if not platform or not variant:
            raise ConfigError(
                f"Invalid packaging format name '{self.format_name}': "
                "expected <platform>-<variant>"
            )

    @property
    def platform(self) -> str:
        """Platform prefix selecting the build output, e.g. ``linux``."""
        return self.format_name.split("-", 1)[0]

    @property
    def name(self) -> str:
        """Variant part of the format name, e.g. ``deb``."""
        return self.format_name.split("-", 1)[1]

    def template_context(
        self, session: PackagingSession, build_version: str
    ) -> TemplateContext:
        """Session context with this task's desktop file paths resolved."""
        return session.get_template_context(build_version).with_desktop_paths(
            self.linux_desktop_file_icon_path,
            self.linux_desktop_file_executable_path,
        )

    def output_file_name(
        self, application_name: str, package_name: str, version: str
    ) -> str:
        """Compute the file name of the final artifact.

        ``"<applicationName> <version>.<ext>"`` when the application name is
        used, ``"<packageName>-<version>.<ext>"`` otherwise.
        """
        if self.output_file_uses_application_name:
            file_name = application_name
            separator = " "
        else:
            file_name = package_name
            separator = "-"
        if self.output_file_contains_version:
            file_name += separator + version
        return f"{file_name}.{self.output_file_extension}"

    def is_initialized(self, session: PackagingSession) -> bool:
        """Check whether the configuration directory exists."""
        return session.layout.packaging_format_path(self.format_name).exists()

    def assert_initialized(self, session: PackagingSession) -> None:
        """Raise NotInitializedError unless the task is initialized or exempt."""
        if self.skip_assert_initialized:
            return
        if not self.is_initialized(session):
            raise NotInitializedError(self.format_name)

    def init(self, session: PackagingSession) -> None:
        """Scaffold the configuration directory of this format.

        Dependencies are initialized first; those that already are
        initialized are left alone.

        Raises:
            AlreadyInitializedError: If this format is already initialized.
            FilesystemError: If creating the directory or copying an asset
                fails. Files created before the failure are left on disk.
        """
        self._init(session, ignore_already_exists=False)

    def _init(self, session: PackagingSession, ignore_already_exists: bool) -> None:
        for dependency in self.depends_on:
            session.registry.get(dependency.format_name)._init(
                session, ignore_already_exists=True
            )

        if self.is_initialized(session):
            if ignore_already_exists:
                logger.debug("%s is already initialized", self.format_name)
                return
            raise AlreadyInitializedError(self.format_name)

        directory = session.layout.packaging_format_path(self.format_name)
        try:
            directory.mkdir(parents=True)
        except FileExistsError as e:
            raise AlreadyInitializedError(self.format_name) from e
        except OSError as e:
            raise FilesystemError(
                f"Failed to create {self.format_name} directory {directory}: {e}",
                directory,
            ) from e

        assets = self.asset_source or session.assets
        for source_file, destination_file in self.template_files.items():
            destination = directory / destination_file
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    f"Failed to create directory {destination.parent}: {e}",
                    destination.parent,
                ) from e
            assets.copy_asset(source_file, destination)

        console.print(
            f"[green]{directory} has been created.[/green] "
            "You can modify the configuration files and add them to version control."
        )
        console.print(
            f"You can now package the {self.platform} app using "
            f"[magenta]packforge pack {self.format_name}[/magenta]"
        )

    def pack(self, session: PackagingSession, build_version: str) -> Path:
        """Package this format, packing its dependencies first.

        Returns:
            Path of the artifact in this format's output directory.

        Raises:
            PackagingScriptError: If the packaging script exits non-zero.
            TemplateError: If a template fails to render.
            FilesystemError: If a copy, chmod or removal fails.
        """
        if self.format_name in session.packed:
            return session.packed[self.format_name]

        for dependency in self.depends_on:
            session.registry.get(dependency.format_name).pack(session, build_version)

        context = self.template_context(session, build_version)
        layout = session.layout

        with temporary_build_directory(
            session.project_name, self.format_name, session.keep_temp_on_failure
        ) as tmp_path:
            console.print(f"Packaging {self.name} in [blue]{tmp_path}[/blue]")

            if self.build_output_directory:
                copy_tree(
                    layout.output_directory_path(self.platform),
                    tmp_path / render_path(self.build_output_directory, context),
                )

            for dependency in self.depends_on:
                copy_tree(
                    layout.output_directory_path(dependency.format_name),
                    tmp_path / dependency.destination,
                )

            config_dir = layout.packaging_format_path(self.format_name)
            if config_dir.exists() or not self.skip_assert_initialized:
                copy_template_dir(config_dir, tmp_path, context)

            if self.generate_build_files is not None:
                console.print("[dim]Generating dynamic build files[/dim]")
                self.generate_build_files(session.metadata.package_name, tmp_path)

            for executable_file in self.executable_files:
                make_executable(tmp_path / render_path(executable_file, context))

            output_dir = layout.output_directory_path(self.format_name)
            logger.debug("Cleaning the output directory %s", output_dir)
            remove_tree(output_dir)

            packaging_script = render_template_string(
                self.packaging_script_template, context
            )
            run_packaging_script(
                session.executor,
                self.format_name,
                tmp_path,
                packaging_script,
                image=self.docker_image,
                keep_on_failure=session.keep_temp_on_failure,
            )

            output_file_name = render_template_string(
                self.output_file_name(
                    session.metadata.application_name,
                    session.metadata.package_name,
                    build_version,
                ),
                context,
            )
            artifact = stage_artifact(
                tmp_path / output_file_name, output_dir / output_file_name
            )

        session.packed[self.format_name] = artifact
        console.print(f"[green]Packaged {self.format_name}:[/green] {artifact}")
        return artifact
