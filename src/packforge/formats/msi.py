"""WiX include files describing the staged build folder of an MSI package.

WiX needs every installed file listed as a component, which depends on the
build output, so these fragments are generated per run instead of being
templates.
"""

from __future__ import annotations

import hashlib
import uuid
from pathlib import Path, PurePosixPath
from xml.sax.saxutils import quoteattr

ROOT_DIRECTORY_ID = "APPLICATIONROOTDIRECTORY"
BUILD_DIRNAME = "build"


def _identifier(prefix: str, relative: PurePosixPath) -> str:
    digest = hashlib.sha1(relative.as_posix().encode("utf-8")).hexdigest()[:20]
    return f"{prefix}_{digest}"


def _directory_id(relative: PurePosixPath) -> str:
    if relative == PurePosixPath("."):
        return ROOT_DIRECTORY_ID
    return _identifier("dir", relative)


def _write_include(path: Path, lines: list[str]) -> None:
    body = "\n".join(f"  {line}" for line in lines)
    content = '<?xml version="1.0" encoding="utf-8"?>\n<Include>\n'
    if body:
        content += body + "\n"
    content += "</Include>\n"
    path.write_text(content, encoding="utf-8")


def _directory_lines(build_dir: Path, relative: PurePosixPath, depth: int) -> list[str]:
    lines: list[str] = []
    for item in sorted((build_dir / relative).iterdir()):
        if not item.is_dir():
            continue
        child = relative / item.name
        indent = "  " * depth
        lines.append(
            f"{indent}<Directory Id={quoteattr(_directory_id(child))} "
            f"Name={quoteattr(item.name)}>"
        )
        lines.extend(_directory_lines(build_dir, child, depth + 1))
        lines.append(f"{indent}</Directory>")
    return lines


def generate_msi_build_files(package_name: str, path: Path) -> None:
    """Write the WiX include files for the build folder under ``path``.

    Writes ``directories.wxi``, ``directory-refs.wxi``,
    ``component-refs.wxi`` and ``upgrade-code.wxi`` next to the ``.wxs``
    file. Component GUIDs and the upgrade code are derived from the package
    name and file paths, so they are stable across builds.
    """
    path = Path(path)
    build_dir = path / BUILD_DIRNAME
    namespace = uuid.uuid5(uuid.NAMESPACE_URL, f"packforge:{package_name}")

    files_by_directory: dict[PurePosixPath, list[PurePosixPath]] = {}
    if build_dir.is_dir():
        for file_path in sorted(build_dir.rglob("*")):
            if file_path.is_file():
                relative = PurePosixPath(file_path.relative_to(build_dir).as_posix())
                files_by_directory.setdefault(relative.parent, []).append(relative)

    directory_refs: list[str] = []
    component_refs: list[str] = []
    for directory, files in sorted(files_by_directory.items()):
        directory_refs.append(f"<DirectoryRef Id={quoteattr(_directory_id(directory))}>")
        for relative in files:
            component_id = _identifier("cmp", relative)
            guid = str(uuid.uuid5(namespace, relative.as_posix())).upper()
            source = "\\".join((BUILD_DIRNAME, *relative.parts))
            directory_refs.append(
                f"  <Component Id={quoteattr(component_id)} Guid={quoteattr(guid)}>"
            )
            directory_refs.append(
                f"    <File Id={quoteattr(_identifier('file', relative))} "
                f"Source={quoteattr(source)} KeyPath=\"yes\"/>"
            )
            directory_refs.append("  </Component>")
            component_refs.append(f"<ComponentRef Id={quoteattr(component_id)}/>")
        directory_refs.append("</DirectoryRef>")

    directories: list[str] = []
    if build_dir.is_dir():
        directories = _directory_lines(build_dir, PurePosixPath("."), 0)

    upgrade_code = str(uuid.uuid5(namespace, "upgrade-code")).upper()

    _write_include(path / "directories.wxi", directories)
    _write_include(path / "directory-refs.wxi", directory_refs)
    _write_include(path / "component-refs.wxi", component_refs)
    _write_include(path / "upgrade-code.wxi", [f'<?define UpgradeCode = "{upgrade_code}" ?>'])
