"""Base executor class."""

from abc import ABC, abstractmethod
from pathlib import Path


class Executor(ABC):
    """Base class for environments that run packaging scripts.

    Lifecycle: ``setup()`` once, ``run()`` once, then ``teardown()``
    (always, even when ``run()`` raised).
    """

    name: str
    quiet: bool = False

    @abstractmethod
    def setup(self, command: str, cwd: Path, image: str | None = None) -> None:
        """Prepare to run ``command`` with ``cwd`` as its working directory.

        ``image`` is the format's preferred container image; executors that
        do not use containers ignore it.
        """
        ...

    @abstractmethod
    def run(self) -> None:
        """Run the command, passing its output through to this process."""
        ...

    @abstractmethod
    def teardown(self) -> None:
        """Clean up the execution environment."""
        ...

    @property
    @abstractmethod
    def exit_code(self) -> int | None:
        """Return the exit code after run() completes, or None if still running."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Return a command line that reproduces the run by hand."""
        ...
