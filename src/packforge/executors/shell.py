"""Shell executor implementation."""

import logging
import shlex
import subprocess
from pathlib import Path

from packforge.errors import ExecutorError
from packforge.executors.base import Executor

logger = logging.getLogger(__name__)


class ShellExecutor(Executor):
    """Executor that runs packaging scripts with bash on the host."""

    name = "shell"

    def __init__(self, shell: str = "bash", quiet: bool = False) -> None:
        self._shell = shell
        self.quiet = quiet
        self._command: str | None = None
        self._cwd: Path | None = None
        self._exit_code: int | None = None

    def setup(self, command: str, cwd: Path, image: str | None = None) -> None:
        """Remember the command and working directory for run()."""
        self._command = command
        self._cwd = cwd
        self._exit_code = None

    def run(self) -> None:
        """Run the command, inheriting stdout and stderr."""
        if self._command is None or self._cwd is None:
            raise RuntimeError("setup() must be called before run()")

        logger.debug("Running %s -c %r in %s", self._shell, self._command, self._cwd)
        stdout = subprocess.DEVNULL if self.quiet else None
        try:
            result = subprocess.run(
                [self._shell, "-c", self._command],
                cwd=self._cwd,
                stdout=stdout,
            )
        except OSError as e:
            raise ExecutorError(f"Failed to start {self._shell}: {e}") from e
        self._exit_code = result.returncode

    def teardown(self) -> None:
        """Nothing to clean up for host processes."""

    @property
    def exit_code(self) -> int | None:
        """Return the exit code after run() completes, or None if still running."""
        return self._exit_code

    def describe(self) -> str:
        """Return the bash invocation of the last setup() command."""
        return f"{self._shell} -c {shlex.quote(self._command or '')}"
