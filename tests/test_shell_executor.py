"""Tests for the shell executor and executor selection."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from packforge.errors import ExecutorError, PackagingScriptError
from packforge.executors import (
    DockerExecutor,
    ShellExecutor,
    get_executor,
    run_packaging_script,
)


class TestShellExecutor:
    """Tests for ShellExecutor."""

    def test_runs_in_working_directory(self, tmp_path: Path) -> None:
        """The command runs with the given directory as cwd."""
        executor = ShellExecutor(quiet=True)
        executor.setup("pwd > where.txt", tmp_path)

        executor.run()

        assert executor.exit_code == 0
        assert Path((tmp_path / "where.txt").read_text().strip()).resolve() == tmp_path.resolve()

    def test_records_exit_code(self, tmp_path: Path) -> None:
        """A failing command reports its exit status."""
        executor = ShellExecutor(quiet=True)
        executor.setup("exit 7", tmp_path)

        executor.run()

        assert executor.exit_code == 7

    def test_run_before_setup_raises(self) -> None:
        """run requires setup."""
        with pytest.raises(RuntimeError, match="setup"):
            ShellExecutor().run()

    def test_missing_shell_raises(self, tmp_path: Path) -> None:
        """A shell that cannot be started is an executor error."""
        executor = ShellExecutor(shell=str(tmp_path / "no-such-shell"))
        executor.setup("true", tmp_path)

        with pytest.raises(ExecutorError, match="Failed to start"):
            executor.run()

    def test_describe_quotes_command(self, tmp_path: Path) -> None:
        """describe returns a pasteable bash invocation."""
        executor = ShellExecutor()
        executor.setup("dpkg-deb --build . my_app-1.0.deb", tmp_path)
        executor.teardown()

        assert executor.describe() == "bash -c 'dpkg-deb --build . my_app-1.0.deb'"


class TestGetExecutor:
    """Tests for get_executor."""

    def test_defaults_to_shell(self) -> None:
        """No name selects the shell executor."""
        assert isinstance(get_executor(), ShellExecutor)

    def test_docker_with_image(self) -> None:
        """The docker executor receives the image override."""
        executor = get_executor("docker", image="custom:1", quiet=True)
        assert isinstance(executor, DockerExecutor)
        assert executor.quiet is True
        assert executor._resolve_image(None) == "custom:1"

    def test_unknown_executor_raises(self) -> None:
        """Unknown executor names are rejected."""
        with pytest.raises(ValueError, match="Unknown executor"):
            get_executor("podman")


class TestRunPackagingScript:
    """Tests for run_packaging_script."""

    def test_success(self, tmp_path: Path) -> None:
        """A zero exit code returns normally."""
        run_packaging_script(ShellExecutor(quiet=True), "linux-deb", tmp_path, "true")

    def test_failure_raises(self, tmp_path: Path) -> None:
        """A non-zero exit raises with the reproduction command and directory."""
        with pytest.raises(PackagingScriptError) as exc_info:
            run_packaging_script(
                ShellExecutor(quiet=True),
                "linux-deb",
                tmp_path,
                "exit 1",
                keep_on_failure=True,
            )

        error = exc_info.value
        assert str(error) == "Packaging script for linux-deb failed with exit code 1"
        assert error.command == "bash -c 'exit 1'"
        assert error.path == tmp_path
        assert error.kept is True

    def test_teardown_runs_when_run_raises(self, tmp_path: Path) -> None:
        """teardown is called even when the executor fails to run."""
        executor = MagicMock()
        executor.run.side_effect = ExecutorError("broken")

        with pytest.raises(ExecutorError):
            run_packaging_script(executor, "linux-deb", tmp_path, "true", image="img")

        executor.setup.assert_called_once_with("true", tmp_path, "img")
        executor.teardown.assert_called_once()

    def test_teardown_runs_when_setup_raises(self, tmp_path: Path) -> None:
        """teardown releases resources of a half-finished setup."""
        executor = MagicMock()
        executor.setup.side_effect = ExecutorError("cannot create")

        with pytest.raises(ExecutorError, match="cannot create"):
            run_packaging_script(executor, "linux-deb", tmp_path, "true")

        executor.run.assert_not_called()
        executor.teardown.assert_called_once()
