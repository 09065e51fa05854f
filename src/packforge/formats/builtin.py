"""Packaging formats shipped with packforge."""

from packforge.formats.msi import generate_msi_build_files
from packforge.packaging.task import Dependency, PackagingTask

LINUX_DEB = PackagingTask(
    format_name="linux-deb",
    description="Debian package (.deb) built with dpkg-deb",
    depends_on=(),
    template_files={
        "linux-deb/control": "DEBIAN/control",
        "linux/bin": "usr/bin/{{ executableName }}",
        "linux/app.desktop": "usr/share/applications/{{ executableName }}.desktop",
    },
    executable_files=(
        "usr/bin/{{ executableName }}",
        "usr/lib/{{ packageName }}/{{ executableName }}",
    ),
    linux_desktop_file_executable_path="/usr/lib/{{ packageName }}/{{ executableName }}",
    linux_desktop_file_icon_path="/usr/lib/{{ packageName }}/assets/icon.png",
    build_output_directory="usr/lib/{{ packageName }}",
    packaging_script_template="dpkg-deb --build . {{ packageName }}-{{ version }}.deb",
    output_file_extension="deb",
    output_file_contains_version=True,
    output_file_uses_application_name=False,
    required_tools=("dpkg-deb",),
    docker_image="debian:bookworm-slim",
)

LINUX_RPM = PackagingTask(
    format_name="linux-rpm",
    description="RPM package built with rpmbuild",
    template_files={
        "linux-rpm/app.spec": "SPECS/{{ packageName }}.spec",
        "linux/bin": "root/usr/bin/{{ executableName }}",
        "linux/app.desktop": "root/usr/share/applications/{{ executableName }}.desktop",
    },
    executable_files=(
        "root/usr/bin/{{ executableName }}",
        "root/usr/lib/{{ packageName }}/{{ executableName }}",
    ),
    linux_desktop_file_executable_path="/usr/lib/{{ packageName }}/{{ executableName }}",
    linux_desktop_file_icon_path="/usr/lib/{{ packageName }}/assets/icon.png",
    build_output_directory="root/usr/lib/{{ packageName }}",
    packaging_script_template=(
        'rpmbuild --define "_topdir $(pwd)" -bb SPECS/{{ packageName }}.spec'
        " && mv RPMS/*/*.rpm {{ packageName }}-{{ version }}.rpm"
    ),
    output_file_extension="rpm",
    required_tools=("rpmbuild",),
)

LINUX_APPIMAGE = PackagingTask(
    format_name="linux-appimage",
    description="AppImage built with appimagetool",
    template_files={
        "linux-appimage/AppRun": "AppRun",
        "linux/app.desktop": "{{ packageName }}.desktop",
    },
    executable_files=("AppRun", "build/{{ executableName }}"),
    linux_desktop_file_executable_path="{{ executableName }}",
    linux_desktop_file_icon_path="{{ packageName }}",
    build_output_directory="build",
    packaging_script_template=(
        "cp build/assets/icon.png {{ packageName }}.png"
        " && appimagetool . {{ packageName }}-{{ version }}.AppImage"
    ),
    output_file_extension="AppImage",
    required_tools=("appimagetool",),
)

DARWIN_BUNDLE = PackagingTask(
    format_name="darwin-bundle",
    description="macOS application bundle (.app)",
    template_files={
        "darwin-bundle/Info.plist": "{{ applicationName }}.app/Contents/Info.plist",
    },
    executable_files=("{{ applicationName }}.app/Contents/MacOS/{{ executableName }}",),
    build_output_directory="{{ applicationName }}.app/Contents/MacOS",
    packaging_script_template=(
        'mkdir -p "{{ applicationName }}.app/Contents/Resources"'
        ' && if [ -f "{{ applicationName }}.app/Contents/MacOS/assets/icon.png" ]; then'
        ' cp "{{ applicationName }}.app/Contents/MacOS/assets/icon.png"'
        ' "{{ applicationName }}.app/Contents/Resources/icon.png"; fi'
    ),
    output_file_extension="app",
    output_file_contains_version=False,
    output_file_uses_application_name=True,
)

DARWIN_DMG = PackagingTask(
    format_name="darwin-dmg",
    description="macOS disk image (.dmg) wrapping the application bundle",
    depends_on=(Dependency("darwin-bundle", "dmgdir"),),
    packaging_script_template=(
        "ln -sf /Applications dmgdir/Applications"
        ' && hdiutil create -volname "{{ applicationName }}" -srcfolder dmgdir'
        ' -ov -format UDZO "{{ applicationName }} {{ version }}.dmg"'
    ),
    output_file_extension="dmg",
    output_file_contains_version=True,
    output_file_uses_application_name=True,
    skip_assert_initialized=True,
    required_tools=("hdiutil",),
)

DARWIN_PKG = PackagingTask(
    format_name="darwin-pkg",
    description="macOS installer package (.pkg) built with pkgbuild",
    depends_on=(Dependency("darwin-bundle", "root/Applications"),),
    template_files={"darwin-pkg/postinstall": "scripts/postinstall"},
    executable_files=("scripts/postinstall",),
    packaging_script_template=(
        "pkgbuild --root root --scripts scripts"
        " --identifier {{ organizationName }}.{{ packageName }}"
        ' --version {{ version }} --install-location /'
        ' "{{ applicationName }} {{ version }}.pkg"'
    ),
    output_file_extension="pkg",
    output_file_contains_version=True,
    output_file_uses_application_name=True,
    required_tools=("pkgbuild",),
)

WINDOWS_MSI = PackagingTask(
    format_name="windows-msi",
    description="Windows installer (.msi) built with wixl",
    template_files={"windows-msi/app.wxs": "{{ packageName }}.wxs"},
    generate_build_files=generate_msi_build_files,
    build_output_directory="build",
    packaging_script_template=(
        "wixl -v {{ packageName }}.wxs"
        ' && mv {{ packageName }}.msi "{{ applicationName }} {{ version }}.msi"'
    ),
    output_file_extension="msi",
    output_file_contains_version=True,
    output_file_uses_application_name=True,
    required_tools=("wixl",),
)

BUILTIN_FORMATS: tuple[PackagingTask, ...] = (
    LINUX_DEB,
    LINUX_RPM,
    LINUX_APPIMAGE,
    DARWIN_BUNDLE,
    DARWIN_DMG,
    DARWIN_PKG,
    WINDOWS_MSI,
)
