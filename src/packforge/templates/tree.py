"""Copy a directory tree while rendering names and contents as templates."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from pathlib import Path

from packforge.errors import FilesystemError
from packforge.templates.renderer import render_template_string

logger = logging.getLogger(__name__)


def copy_template_dir(
    source: Path, destination: Path, context: Mapping[str, str]
) -> list[Path]:
    """Copy ``source`` into ``destination`` rendering every name and text file.

    Files that are not valid UTF-8 are copied byte for byte. File mode bits
    are preserved so executables stay executable.

    Returns:
        The rendered destination paths of every copied file.

    Raises:
        FilesystemError: If the source is missing or a copy fails.
        TemplateError: If a name or file content fails to render.
    """
    if not source.is_dir():
        raise FilesystemError(f"Template directory does not exist: {source}", source)

    copied: list[Path] = []
    try:
        destination.mkdir(parents=True, exist_ok=True)
        for item in sorted(source.iterdir()):
            target = destination / render_template_string(item.name, context)
            if item.is_dir():
                copied.extend(copy_template_dir(item, target, context))
            else:
                _copy_template_file(item, target, context)
                copied.append(target)
    except OSError as e:
        raise FilesystemError(
            f"Failed to copy template directory {source}: {e}", source
        ) from e
    return copied


def _copy_template_file(
    source: Path, target: Path, context: Mapping[str, str]
) -> None:
    raw = source.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Copying binary file %s verbatim", source)
        shutil.copyfile(source, target)
    else:
        target.write_text(
            render_template_string(text, context), encoding="utf-8", newline=""
        )
    shutil.copymode(source, target)
