"""Preflight checks to validate the packaging environment."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from typing import TYPE_CHECKING

import docker
from docker.errors import DockerException

from packforge.console import console

if TYPE_CHECKING:
    from packforge.packaging.task import PackagingTask


def check_shell() -> bool:
    """Validate bash is available to run packaging scripts."""
    if shutil.which("bash") is None:
        console.print("[red]✗[/red] bash not found on PATH")
        return False
    console.print("[green]✓[/green] bash is available")
    return True


def check_docker() -> bool:
    """Validate Docker daemon is running and accessible."""
    try:
        client = docker.from_env()
        client.ping()
        console.print("[green]✓[/green] Docker daemon is running")
    except DockerException as e:
        console.print(f"[red]✗[/red] Cannot connect to Docker: {e}")
        return False

    try:
        version = client.version()
        console.print(f"[green]✓[/green] Docker version: {version['Version']}")
    except DockerException as e:
        console.print(f"[red]✗[/red] Cannot get Docker version: {e}")
        return False

    return True


def check_tools(tasks: Iterable[PackagingTask]) -> bool:
    """Check that the packaging tools of each format are on PATH."""
    console.print("\n[bold]Packaging tools:[/bold]")

    all_found = True
    for task in tasks:
        for tool in task.required_tools:
            if shutil.which(tool):
                console.print(
                    f"  [green]✓[/green] {task.format_name}: [cyan]{tool}[/cyan]"
                )
            else:
                console.print(f"  [red]✗[/red] {task.format_name}: {tool} not found")
                all_found = False
    return all_found


def run_all_checks(tasks: Iterable[PackagingTask], use_docker: bool = False) -> bool:
    """Run all preflight checks.

    Tool checks are skipped with the docker executor, since the tools live
    in the container image rather than on the host.
    """
    console.print("[bold]Running preflight checks...[/bold]\n")

    results = [check_shell()]
    if use_docker:
        results.append(check_docker())
    else:
        results.append(check_tools(tasks))
    all_passed = all(results)

    if all_passed:
        console.print("\n[bold green]All preflight checks passed![/bold green]")
    else:
        console.print("\n[bold red]Some preflight checks failed.[/bold red]")

    return all_passed
