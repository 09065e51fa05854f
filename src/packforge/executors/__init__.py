"""Executor registry and utilities."""

from __future__ import annotations

from pathlib import Path

from packforge.errors import PackagingScriptError
from packforge.executors.base import Executor
from packforge.executors.docker import DockerExecutor
from packforge.executors.shell import ShellExecutor

EXECUTORS: dict[str, type[Executor]] = {
    "docker": DockerExecutor,
    "shell": ShellExecutor,
}

DEFAULT_EXECUTOR = "shell"


def get_executor(
    name: str | None = None,
    image: str | None = None,
    quiet: bool = False,
) -> Executor:
    """Get an executor instance by name. Defaults to shell.

    Args:
        name: Executor name ("shell" or "docker"). Defaults to shell.
        image: Docker image override (only for docker executor).
        quiet: Suppress packaging script output when True.
    """
    executor_name = name or DEFAULT_EXECUTOR
    if executor_name not in EXECUTORS:
        raise ValueError(f"Unknown executor: {executor_name}")

    if executor_name == "docker":
        return DockerExecutor(image_override=image, quiet=quiet)

    return ShellExecutor(quiet=quiet)


def run_packaging_script(
    executor: Executor,
    format_name: str,
    path: Path,
    command: str,
    image: str | None = None,
    keep_on_failure: bool = False,
) -> None:
    """Run a rendered packaging script in ``path``.

    The exit code is the only success signal.

    Raises:
        PackagingScriptError: If the script exits non-zero.
        ExecutorError: If the executor cannot run the script at all.
    """
    try:
        executor.setup(command, path, image)
        executor.run()
    finally:
        executor.teardown()

    exit_code = executor.exit_code
    if exit_code != 0:
        raise PackagingScriptError(
            format_name=format_name,
            command=executor.describe(),
            path=path,
            exit_code=exit_code if exit_code is not None else -1,
            kept=keep_on_failure,
        )


__all__ = [
    "DEFAULT_EXECUTOR",
    "EXECUTORS",
    "DockerExecutor",
    "Executor",
    "ShellExecutor",
    "get_executor",
    "run_packaging_script",
]
