"""Shared fixtures for packaging tests."""

import tempfile
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from packforge.config.schema import ProjectMetadata
from packforge.executors import Executor, ShellExecutor
from packforge.formats.assets import DirectoryAssetSource
from packforge.packaging import BuildLayout, FormatRegistry, PackagingSession
from packforge.packaging.task import PackagingTask


class RecordingExecutor(Executor):
    """Executor that records scripts instead of running them.

    ``on_run`` is called with (command, cwd) and returns the exit code.
    """

    name = "recording"

    def __init__(
        self, on_run: Callable[[str, Path], int] | None = None
    ) -> None:
        self.calls: list[tuple[str, Path, str | None]] = []
        self.torn_down = 0
        self._on_run = on_run
        self._command: str | None = None
        self._cwd: Path | None = None
        self._exit_code: int | None = None

    def setup(self, command: str, cwd: Path, image: str | None = None) -> None:
        self._command = command
        self._cwd = cwd
        self.calls.append((command, cwd, image))

    def run(self) -> None:
        assert self._command is not None and self._cwd is not None
        self._exit_code = self._on_run(self._command, self._cwd) if self._on_run else 0

    def teardown(self) -> None:
        self.torn_down += 1

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    def describe(self) -> str:
        return f"record {self._command}"


@pytest.fixture
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect temporary build directories into the test's tmp_path."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def metadata() -> ProjectMetadata:
    """Project metadata for a small example app."""
    return ProjectMetadata(
        application_name="MyApp",
        executable_name="myapp",
        package_name="my_app",
        license="MIT",
        author="Jane Doe <jane@example.com>",
        description="An example app",
        organization_name="com.example",
    )


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    """Directory of template assets used by test formats."""
    root = tmp_path / "assets"
    (root / "test").mkdir(parents=True)
    (root / "test" / "control").write_text(
        "Package: {{ packageName }}\nVersion: {{ version }}\n"
    )
    launcher = root / "test" / "launcher"
    launcher.write_text('#!/bin/sh\nexec "{{ executablePath }}" "$@"\n')
    launcher.chmod(0o755)
    return root


@pytest.fixture
def layout(tmp_path: Path) -> BuildLayout:
    """Build layout rooted in the test's tmp_path."""
    return BuildLayout(tmp_path / "project" / ".packforge")


@pytest.fixture
def linux_build(layout: BuildLayout) -> Path:
    """A fake application build for the linux platform."""
    build = layout.output_directory_path("linux")
    (build / "assets").mkdir(parents=True)
    (build / "myapp").write_text("binary")
    (build / "assets" / "icon.png").write_bytes(b"\x89PNG\r\n")
    return build


@pytest.fixture
def make_session(
    layout: BuildLayout, asset_root: Path, metadata: ProjectMetadata, temp_root: Path
) -> Callable[..., PackagingSession]:
    """Factory for sessions over a given set of tasks."""

    def _make(
        tasks: Iterable[PackagingTask],
        executor: Executor | None = None,
        keep_temp: bool = False,
    ) -> PackagingSession:
        return PackagingSession(
            project_name="my_app",
            layout=layout,
            assets=DirectoryAssetSource(asset_root),
            metadata=metadata,
            registry=FormatRegistry(tasks),
            executor=executor or ShellExecutor(quiet=True),
            keep_temp_on_failure=keep_temp,
            arch="amd64",
        )

    return _make


@pytest.fixture
def recording_executor() -> type[RecordingExecutor]:
    """The RecordingExecutor class, for tests that script exit codes."""
    return RecordingExecutor
