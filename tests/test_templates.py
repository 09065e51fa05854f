"""Tests for template rendering, the template context and templated tree copies."""

import stat
from pathlib import Path

import pytest

from packforge.config.schema import ProjectMetadata
from packforge.errors import FilesystemError, TemplateError
from packforge.templates import (
    TEMPLATE_KEYS,
    build_template_context,
    copy_template_dir,
    normalize_arch,
    render_path,
    render_template_string,
)


class TestRenderTemplateString:
    """Tests for render_template_string."""

    def test_substitutes_keys(self) -> None:
        """Template expressions are replaced by context values."""
        result = render_template_string(
            "{{ packageName }}-{{ version }}.deb",
            {"packageName": "my_app", "version": "1.2.3"},
        )
        assert result == "my_app-1.2.3.deb"

    def test_plain_text_is_unchanged(self) -> None:
        """Text without expressions renders to itself."""
        assert render_template_string("dpkg-deb --build .", {}) == "dpkg-deb --build ."

    def test_missing_key_raises(self) -> None:
        """A reference to an absent key fails instead of rendering empty."""
        with pytest.raises(TemplateError, match="Failed to render"):
            render_template_string("{{ packageName }}-{{ nope }}", {"packageName": "x"})

    def test_malformed_template_raises(self) -> None:
        """A template that does not parse fails with a parse error."""
        with pytest.raises(TemplateError, match="Failed to parse") as exc_info:
            render_template_string("{{ packageName ", {"packageName": "x"})
        assert exc_info.value.template == "{{ packageName "

    def test_trailing_newline_is_kept(self) -> None:
        """Rendered files keep their final newline."""
        assert render_template_string("Version: {{ v }}\n", {"v": "1"}) == "Version: 1\n"

    def test_shell_variables_pass_through(self) -> None:
        """Shell syntax such as $(pwd), ${HOME} and ${#ARGS[@]} is not template syntax."""
        template = (
            'cd "$(pwd)" && echo ${HOME%/}\n'
            "if [ ${#ARGS[@]} -gt 0 ] || [ ${#} -eq 0 ]; then echo {{ packageName }}; fi\n"
        )
        result = render_template_string(template, {"packageName": "my_app"})
        assert result == (
            'cd "$(pwd)" && echo ${HOME%/}\n'
            "if [ ${#ARGS[@]} -gt 0 ] || [ ${#} -eq 0 ]; then echo my_app; fi\n"
        )

    def test_block_and_comment_tags_use_double_braces(self) -> None:
        """Blocks and comments are written {{% ... %}} and {{# ... #}}."""
        template = "{{# note #}}{{% if license %}}License: {{ license }}{{% endif %}}"
        assert render_template_string(template, {"license": "MIT"}) == "License: MIT"


class TestRenderPath:
    """Tests for render_path."""

    def test_renders_every_component(self) -> None:
        """Each path component may contain expressions."""
        result = render_path(
            "usr/lib/{{ packageName }}/{{ executableName }}",
            {"packageName": "my_app", "executableName": "myapp"},
        )
        assert result == Path("usr/lib/my_app/myapp")


class TestNormalizeArch:
    """Tests for host architecture normalization."""

    @pytest.mark.parametrize(
        ("machine", "expected"),
        [
            ("x86_64", "amd64"),
            ("AMD64", "amd64"),
            ("aarch64", "arm64"),
            ("arm64", "arm64"),
            ("i686", "386"),
            ("armv7l", "arm"),
            ("riscv64", "riscv64"),
        ],
    )
    def test_aliases(self, machine: str, expected: str) -> None:
        """OS machine names map to packaging architecture names."""
        assert normalize_arch(machine) == expected


class TestBuildTemplateContext:
    """Tests for build_template_context."""

    def test_contains_all_keys(self, metadata: ProjectMetadata) -> None:
        """The context defines exactly the documented keys."""
        context = build_template_context("my_app", "1.2.3", metadata, arch="amd64")
        assert set(context) == set(TEMPLATE_KEYS)

    def test_values_come_from_metadata(self, metadata: ProjectMetadata) -> None:
        """Metadata fields populate their template keys."""
        context = build_template_context("my_app", "1.2.3", metadata, arch="arm64")
        assert context["projectName"] == "my_app"
        assert context["version"] == "1.2.3"
        assert context["arch"] == "arm64"
        assert context["applicationName"] == "MyApp"
        assert context["executableName"] == "myapp"
        assert context["packageName"] == "my_app"
        assert context["license"] == "MIT"
        assert context["author"] == "Jane Doe <jane@example.com>"
        assert context["organizationName"] == "com.example"
        assert context["description"] == "An example app"

    @pytest.mark.parametrize(
        ("version", "release"),
        [("2.5.1", "2"), ("10.0", "10"), ("3", "3"), ("1.0.0-beta", "1")],
    )
    def test_release_is_first_version_segment(
        self, metadata: ProjectMetadata, version: str, release: str
    ) -> None:
        """release is the part of the version before the first dot."""
        context = build_template_context("my_app", version, metadata, arch="amd64")
        assert context["release"] == release

    def test_desktop_paths_are_rendered(self, metadata: ProjectMetadata) -> None:
        """Icon and executable paths are templates resolved against the context."""
        context = build_template_context(
            "my_app",
            "1.0",
            metadata,
            arch="amd64",
            icon_path_template="/usr/lib/{{ packageName }}/assets/icon.png",
            executable_path_template="/usr/lib/{{ packageName }}/{{ executableName }}",
        )
        assert context["iconPath"] == "/usr/lib/my_app/assets/icon.png"
        assert context["executablePath"] == "/usr/lib/my_app/myapp"

    def test_desktop_paths_default_to_empty(self, metadata: ProjectMetadata) -> None:
        """Without desktop path templates both keys are empty strings."""
        context = build_template_context("my_app", "1.0", metadata, arch="amd64")
        assert context["iconPath"] == ""
        assert context["executablePath"] == ""

    def test_context_is_immutable(self, metadata: ProjectMetadata) -> None:
        """The context cannot be modified after construction."""
        context = build_template_context("my_app", "1.0", metadata, arch="amd64")
        with pytest.raises(TypeError):
            context["version"] = "2.0"  # type: ignore[index]

    def test_with_desktop_paths_returns_copy(self, metadata: ProjectMetadata) -> None:
        """Overlaying desktop paths leaves the original context untouched."""
        context = build_template_context("my_app", "1.0", metadata, arch="amd64")
        overlay = context.with_desktop_paths("{{ packageName }}", "{{ executableName }}")
        assert overlay["iconPath"] == "my_app"
        assert overlay["executablePath"] == "myapp"
        assert context["iconPath"] == ""

    def test_defaults_to_host_arch(self, metadata: ProjectMetadata) -> None:
        """Without an explicit arch the host architecture is used."""
        context = build_template_context("my_app", "1.0", metadata)
        assert context["arch"] == normalize_arch()


class TestCopyTemplateDir:
    """Tests for copy_template_dir."""

    @pytest.fixture
    def context(self, metadata: ProjectMetadata):
        return build_template_context("my_app", "1.2.3", metadata, arch="amd64")

    def test_renders_names_and_contents(self, tmp_path: Path, context) -> None:
        """Directory names, file names and text contents are rendered."""
        source = tmp_path / "source"
        (source / "usr" / "share" / "{{ packageName }}").mkdir(parents=True)
        (source / "usr" / "share" / "{{ packageName }}" / "{{ executableName }}.txt").write_text(
            "{{ applicationName }} {{ version }}\n"
        )
        destination = tmp_path / "destination"

        copied = copy_template_dir(source, destination, context)

        target = destination / "usr" / "share" / "my_app" / "myapp.txt"
        assert copied == [target]
        assert target.read_text() == "MyApp 1.2.3\n"

    def test_merges_into_existing_destination(self, tmp_path: Path, context) -> None:
        """Existing destination files outside the template are kept."""
        source = tmp_path / "source"
        source.mkdir()
        (source / "control").write_text("Package: {{ packageName }}\n")
        destination = tmp_path / "destination"
        destination.mkdir()
        (destination / "existing").write_text("keep me")

        copy_template_dir(source, destination, context)

        assert (destination / "existing").read_text() == "keep me"
        assert (destination / "control").read_text() == "Package: my_app\n"

    def test_preserves_file_mode(self, tmp_path: Path, context) -> None:
        """Executable templates stay executable."""
        source = tmp_path / "source"
        source.mkdir()
        script = source / "postinstall"
        script.write_text("#!/bin/sh\necho {{ packageName }}\n")
        script.chmod(0o755)
        destination = tmp_path / "destination"

        copy_template_dir(source, destination, context)

        assert (destination / "postinstall").stat().st_mode & stat.S_IXUSR

    def test_binary_files_are_copied_verbatim(self, tmp_path: Path, context) -> None:
        """Files that are not UTF-8 text are not rendered."""
        source = tmp_path / "source"
        source.mkdir()
        payload = b"\x89PNG\r\n\x1a\n\xff\xfe{{ packageName }}"
        (source / "icon.png").write_bytes(payload)
        destination = tmp_path / "destination"

        copy_template_dir(source, destination, context)

        assert (destination / "icon.png").read_bytes() == payload

    def test_missing_source_raises(self, tmp_path: Path, context) -> None:
        """A missing template directory is a filesystem error."""
        with pytest.raises(FilesystemError, match="does not exist"):
            copy_template_dir(tmp_path / "missing", tmp_path / "destination", context)

    def test_unknown_key_in_content_raises(self, tmp_path: Path, context) -> None:
        """An unknown key in a file aborts the copy."""
        source = tmp_path / "source"
        source.mkdir()
        (source / "control").write_text("Maintainer: {{ maintainer }}\n")

        with pytest.raises(TemplateError):
            copy_template_dir(source, tmp_path / "destination", context)

    def test_shell_script_is_copied_unchanged(self, tmp_path: Path, context) -> None:
        """Shell parameter expansions in copied scripts survive rendering."""
        source = tmp_path / "source"
        source.mkdir()
        (source / "AppRun").write_text(
            '#!/bin/sh\n[ ${#} -eq 0 ] && exec "$APPDIR/usr/bin/{{ executableName }}"\n'
        )
        destination = tmp_path / "destination"

        copy_template_dir(source, destination, context)

        assert (destination / "AppRun").read_text() == (
            '#!/bin/sh\n[ ${#} -eq 0 ] && exec "$APPDIR/usr/bin/myapp"\n'
        )
