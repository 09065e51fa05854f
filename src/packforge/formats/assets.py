"""Template asset sources used when initializing a packaging format."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from packforge.errors import AssetNotFoundError, FilesystemError


class AssetSource(Protocol):
    """Anything that can copy a named template asset to a destination file."""

    def copy_asset(self, name: str, destination: Path) -> None: ...


def get_package_assets_path() -> Path:
    """Get path to the package-bundled packaging templates."""
    return Path(__file__).parent / "assets"


class DirectoryAssetSource:
    """Asset source backed by a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def __repr__(self) -> str:
        return f"DirectoryAssetSource({self.root!r})"

    def copy_asset(self, name: str, destination: Path) -> None:
        """Copy ``root/name`` to ``destination``, preserving mode bits.

        Raises:
            AssetNotFoundError: If the asset does not exist.
            FilesystemError: If the copy fails.
        """
        source = self.root / name
        if not source.is_file():
            raise AssetNotFoundError(f"Template asset not found: {name}", source)
        try:
            shutil.copy2(source, destination)
        except OSError as e:
            raise FilesystemError(
                f"Failed to copy asset {name} to {destination}: {e}", destination
            ) from e


def package_asset_source() -> DirectoryAssetSource:
    """Asset source for the templates bundled with packforge."""
    return DirectoryAssetSource(get_package_assets_path())
