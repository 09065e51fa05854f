"""Packaging tasks, their dependency graph and build environments."""

from packforge.packaging.environment import BuildLayout, temporary_build_directory
from packforge.packaging.registry import FormatRegistry
from packforge.packaging.session import PackagingSession
from packforge.packaging.task import BuildFileGenerator, Dependency, PackagingTask

__all__ = [
    "BuildFileGenerator",
    "BuildLayout",
    "Dependency",
    "FormatRegistry",
    "PackagingSession",
    "PackagingTask",
    "temporary_build_directory",
]
