"""Exceptions raised by packaging operations.

Library code raises these and never exits the process; the CLI decides how
to report them.
"""

from pathlib import Path


class PackagingError(Exception):
    """Base exception for packforge."""


class ConfigError(PackagingError):
    """Raised when configuration is missing or invalid."""


class TemplateError(PackagingError):
    """Raised when a template cannot be parsed or references a missing key."""

    def __init__(self, message: str, template: str | None = None) -> None:
        super().__init__(message)
        self.template = template


class FilesystemError(PackagingError):
    """Raised when a create, copy, remove or chmod operation fails."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class AssetNotFoundError(FilesystemError):
    """Raised when a template asset does not exist in its asset source."""


class AlreadyInitializedError(PackagingError):
    """Raised when init is called for a format that is already initialized."""

    def __init__(self, format_name: str) -> None:
        super().__init__(f"{format_name} is already initialized for packaging.")
        self.format_name = format_name


class NotInitializedError(PackagingError):
    """Raised when packing a format whose configuration directory is missing."""

    def __init__(self, format_name: str) -> None:
        super().__init__(
            f"{format_name} is not initialized for packaging. "
            f"Please run `packforge init-packaging {format_name}` first."
        )
        self.format_name = format_name


class UnknownFormatError(PackagingError):
    """Raised when a packaging format name is not registered."""

    def __init__(self, format_name: str, referenced_by: str | None = None) -> None:
        if referenced_by:
            message = f"Unknown packaging format '{format_name}' (required by {referenced_by})"
        else:
            message = f"Unknown packaging format '{format_name}'"
        super().__init__(message)
        self.format_name = format_name
        self.referenced_by = referenced_by


class DependencyCycleError(PackagingError):
    """Raised when packaging formats depend on each other in a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__("Packaging formats form a dependency cycle: " + " -> ".join(cycle))
        self.cycle = cycle


class ExecutorError(PackagingError):
    """Raised when an executor cannot run a packaging script at all."""


class PackagingScriptError(PackagingError):
    """Raised when the packaging script exits with a non-zero status."""

    def __init__(
        self,
        format_name: str,
        command: str,
        path: Path,
        exit_code: int,
        kept: bool = False,
    ) -> None:
        super().__init__(
            f"Packaging script for {format_name} failed with exit code {exit_code}"
        )
        self.format_name = format_name
        self.command = command
        self.path = path
        self.exit_code = exit_code
        self.kept = kept
