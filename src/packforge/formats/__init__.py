"""Packaging format definitions and discovery."""

from packforge.formats.assets import (
    AssetSource,
    DirectoryAssetSource,
    get_package_assets_path,
    package_asset_source,
)
from packforge.formats.builtin import BUILTIN_FORMATS
from packforge.formats.loader import (
    build_registry,
    get_custom_formats,
    get_global_formats_path,
    get_local_formats_path,
)

__all__ = [
    "AssetSource",
    "BUILTIN_FORMATS",
    "DirectoryAssetSource",
    "build_registry",
    "get_custom_formats",
    "get_global_formats_path",
    "get_local_formats_path",
    "get_package_assets_path",
    "package_asset_source",
]

# Default format names for reference
DEFAULT_FORMATS: tuple[str, ...] = tuple(task.format_name for task in BUILTIN_FORMATS)
