"""Filesystem layout and isolated temporary build directories."""

from __future__ import annotations

import logging
import re
import shutil
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from packforge.errors import FilesystemError

logger = logging.getLogger(__name__)

PACKAGING_DIRNAME = "packaging"
OUTPUTS_DIRNAME = "outputs"


@dataclass(frozen=True)
class BuildLayout:
    """Where configuration directories and build outputs live on disk.

    ``<root>/packaging/<format>`` holds the per-format configuration
    directory created by init. ``<root>/build/outputs/<name>`` holds the
    application build for a platform (``linux``) or the packaged artifact
    of a format (``linux-deb``).
    """

    root: Path

    @property
    def packaging_path(self) -> Path:
        return self.root.absolute() / PACKAGING_DIRNAME

    @property
    def outputs_path(self) -> Path:
        return self.root.absolute() / "build" / OUTPUTS_DIRNAME

    def packaging_format_path(self, format_name: str) -> Path:
        """Get the configuration directory of a packaging format."""
        return self.packaging_path / format_name

    def output_directory_path(self, name: str) -> Path:
        """Get the output directory of a platform build or a packaging format."""
        return self.outputs_path / name


def _safe_fragment(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", value)


@contextmanager
def temporary_build_directory(
    project_name: str, format_name: str, keep_on_failure: bool = False
) -> Iterator[Path]:
    """Allocate a fresh temporary directory for one packaging run.

    The directory is removed when the block exits. With ``keep_on_failure``
    it is left on disk when the block raises, so the failed run can be
    inspected and reproduced by hand.
    """
    prefix = f"packforge-build-{_safe_fragment(project_name)}-{_safe_fragment(format_name)}-"
    try:
        tmp_path = Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as e:
        raise FilesystemError(f"Couldn't get temporary build directory: {e}") from e

    logger.debug("Allocated temporary build directory %s", tmp_path)
    try:
        yield tmp_path
    except BaseException:
        if keep_on_failure:
            logger.warning("Keeping temporary build directory %s", tmp_path)
        else:
            try:
                remove_tree(tmp_path)
            except FilesystemError as cleanup_error:
                logger.warning("%s", cleanup_error)
        raise
    remove_tree(tmp_path)


def remove_tree(path: Path) -> None:
    """Remove a file or directory tree if it exists."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        raise FilesystemError(f"Could not remove {path}: {e}", path) from e


def copy_tree(source: Path, destination: Path) -> None:
    """Copy a file or directory to ``destination``, merging into existing directories.

    Symlinks are preserved, as are file mode bits.
    """
    if not source.exists():
        raise FilesystemError(f"Source does not exist: {source}", source)
    try:
        if source.is_dir():
            shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
        else:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
    except OSError as e:
        raise FilesystemError(
            f"Could not copy {source} to {destination}: {e}", source
        ) from e


def make_executable(path: Path) -> None:
    """Set the executable bits of ``path`` for user, group and others."""
    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        raise FilesystemError(
            f"Failed to change file permissions for {path}: {e}", path
        ) from e


def stage_artifact(source: Path, destination: Path) -> Path:
    """Copy the finished artifact out of the temporary directory.

    Artifacts may be single files or directories (application bundles).
    """
    if not source.exists():
        raise FilesystemError(
            f"Packaging script did not produce {source.name}", source
        )
    copy_tree(source, destination)
    return destination
