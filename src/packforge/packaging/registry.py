"""The set of known packaging formats and their dependency graph."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from graphlib import CycleError, TopologicalSorter

from packforge.errors import ConfigError, DependencyCycleError, UnknownFormatError
from packforge.packaging.task import PackagingTask


class FormatRegistry:
    """Packaging tasks by format name.

    The dependency graph is validated on construction: every dependency
    must be registered and the graph must be acyclic, so no task runs
    against a broken graph.
    """

    def __init__(self, tasks: Iterable[PackagingTask]) -> None:
        self._tasks: dict[str, PackagingTask] = {}
        for task in tasks:
            if task.format_name in self._tasks:
                raise ConfigError(f"Duplicate packaging format '{task.format_name}'")
            self._tasks[task.format_name] = task
        self._validate()

    def _validate(self) -> None:
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for task in self._tasks.values():
            for dependency in task.depends_on:
                if dependency.format_name not in self._tasks:
                    raise UnknownFormatError(
                        dependency.format_name, referenced_by=task.format_name
                    )
            sorter.add(task.format_name, *(d.format_name for d in task.depends_on))
        try:
            sorter.prepare()
        except CycleError as e:
            raise DependencyCycleError(list(e.args[1])) from e

    def __contains__(self, format_name: object) -> bool:
        return format_name in self._tasks

    def __iter__(self) -> Iterator[PackagingTask]:
        return iter(self._tasks[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, format_name: str) -> PackagingTask:
        """Get a task by format name, raising UnknownFormatError if missing."""
        try:
            return self._tasks[format_name]
        except KeyError:
            raise UnknownFormatError(format_name) from None

    def names(self) -> list[str]:
        """Sorted list of registered format names."""
        return sorted(self._tasks)

    def formats_for_platform(self, platform: str) -> list[PackagingTask]:
        """All tasks whose format name starts with ``<platform>-``."""
        return [task for task in self if task.platform == platform]

    def pack_order(self, format_names: Iterable[str]) -> list[str]:
        """Order in which packing ``format_names`` runs tasks.

        Dependencies come before their dependents, in declaration order,
        and each format appears once.
        """
        order: list[str] = []

        def visit(name: str) -> None:
            if name in order:
                return
            for dependency in self.get(name).depends_on:
                visit(dependency.format_name)
            order.append(name)

        for name in format_names:
            visit(name)
        return order
