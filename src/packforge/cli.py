"""Command-line interface for packforge."""

import logging
from pathlib import Path

import click
from rich.logging import RichHandler
from rich.markup import escape

from packforge import __version__
from packforge.config.loader import (
    get_home_config_path,
    get_local_config_path,
    load_config,
    load_yaml_config,
    resolve_project_name,
    save_config,
)
from packforge.config.preflight import run_all_checks
from packforge.config.schema import PackforgeConfig
from packforge.console import console
from packforge.errors import (
    ConfigError,
    PackagingError,
    PackagingScriptError,
    UnknownFormatError,
)
from packforge.executors import DEFAULT_EXECUTOR, EXECUTORS, get_executor
from packforge.formats import build_registry, package_asset_source
from packforge.packaging import BuildLayout, FormatRegistry, PackagingSession

logger = logging.getLogger(__name__)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"packforge [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _report_error(error: PackagingError) -> None:
    """Print a packaging error with any remediation guidance."""
    console.print(f"[red]{escape(str(error))}[/red]")
    if isinstance(error, PackagingScriptError):
        console.print(
            "[yellow]Packaging tools are often only reliable on their native OS.[/yellow]"
        )
        if error.kept:
            console.print(
                f"The build directory was kept for inspection:\n  [blue]{error.path}[/blue]"
            )
            console.print("You can reproduce the failure without packforge by running:")
            console.print(f"  [magenta]cd {error.path}[/magenta]")
            console.print(f"  [magenta]{escape(error.command)}[/magenta]")
        else:
            console.print(f"  executed command: [magenta]{escape(error.command)}[/magenta]")
            console.print(
                "[dim]Re-run with --keep-temp to keep the build directory "
                "for inspection.[/dim]"
            )


def _build_session(
    config: PackforgeConfig,
    registry: FormatRegistry,
    executor_name: str | None = None,
    image: str | None = None,
    keep_temp: bool | None = None,
    quiet: bool = False,
) -> PackagingSession:
    """Create the packaging session for this invocation."""
    project_name = resolve_project_name(config)
    return PackagingSession(
        project_name=project_name,
        layout=BuildLayout(Path(config.root or ".packforge")),
        assets=package_asset_source(),
        metadata=config.project_metadata(project_name),
        registry=registry,
        executor=get_executor(
            executor_name or config.executor,
            image=image or config.docker_image,
            quiet=quiet,
        ),
        keep_temp_on_failure=keep_temp if keep_temp is not None else bool(config.keep_temp),
    )


def _select_formats(
    registry: FormatRegistry, session: PackagingSession, targets: tuple[str, ...]
) -> list[str]:
    """Expand targets into format names.

    A bare platform name (``linux``) selects every initialized format of
    that platform.
    """
    selected: list[str] = []
    for target in targets:
        if target in registry:
            selected.append(target)
            continue
        platform_formats = [
            task.format_name
            for task in registry.formats_for_platform(target)
            if task.is_initialized(session)
        ]
        if not platform_formats:
            raise UnknownFormatError(target)
        selected.extend(platform_formats)
    return list(dict.fromkeys(selected))


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """packforge - package compiled applications into OS-native artifacts."""
    _configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print("[bold]packforge[/bold] - OS-native packaging for your app")
        console.print("\nRun [cyan]packforge --help[/cyan] for available commands.")


@main.group(invoke_without_command=True)
@click.pass_context
def formats(ctx: click.Context) -> None:
    """List and inspect packaging formats.

    Use subcommands: packforge formats list
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@formats.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show format details.")
def formats_list(verbose: bool) -> None:
    """List available packaging formats."""
    try:
        config = load_config()
        registry = build_registry()
        session = _build_session(config, registry)
    except PackagingError as e:
        _report_error(e)
        raise SystemExit(1) from e

    console.print("[bold]Packaging Formats:[/bold]\n")
    for task in registry:
        if task.is_initialized(session):
            state = "[green](initialized)[/green]"
        elif task.skip_assert_initialized:
            state = "[dim](no init required)[/dim]"
        else:
            state = "[dim](not initialized)[/dim]"
        console.print(f"  [cyan]{task.format_name}[/cyan] {state}")
        if verbose:
            if task.description:
                console.print(f"    {task.description}")
            if task.depends_on:
                deps = ", ".join(d.format_name for d in task.depends_on)
                console.print(f"    [dim]Depends on: {deps}[/dim]")
            if task.required_tools:
                console.print(f"    [dim]Tools: {', '.join(task.required_tools)}[/dim]")
            console.print()


@main.command("init-packaging")
@click.argument("format_names", nargs=-1, required=True)
def init_packaging(format_names: tuple[str, ...]) -> None:
    """Create the configuration directory of one or more packaging formats.

    The created files are templates; edit them and add them to version
    control before packaging.
    """
    try:
        config = load_config()
        registry = build_registry()
        session = _build_session(config, registry)
        for format_name in format_names:
            registry.get(format_name).init(session)
    except PackagingError as e:
        _report_error(e)
        raise SystemExit(1) from e


@main.command()
@click.argument("targets", nargs=-1, required=True)
@click.option(
    "--build-version",
    "-b",
    help="Version of the packaged build (default: version from config).",
)
@click.option(
    "--executor",
    "-x",
    type=click.Choice(list(EXECUTORS.keys())),
    default=None,
    help=f"Executor for packaging scripts (default: {DEFAULT_EXECUTOR}).",
)
@click.option(
    "--image",
    "-i",
    help="Docker image to use (overrides format default). Only for docker executor.",
)
@click.option(
    "--keep-temp/--no-keep-temp",
    default=None,
    help="Keep the temporary build directory when packaging fails.",
)
@click.option("--quiet", "-q", is_flag=True, help="Hide packaging script output.")
def pack(
    targets: tuple[str, ...],
    build_version: str | None,
    executor: str | None,
    image: str | None,
    keep_temp: bool | None,
    quiet: bool,
) -> None:
    """Package the app into one or more formats.

    TARGETS are format names (linux-deb) or platforms (linux). A platform
    selects all of its initialized formats. Dependencies are packed first.
    """
    try:
        config = load_config()
        version = build_version or config.version
        if not version:
            raise ConfigError(
                "No build version given. Pass --build-version or set version "
                "in .packforge/config.yaml."
            )
        registry = build_registry()
        session = _build_session(config, registry, executor, image, keep_temp, quiet)
        selected = _select_formats(registry, session, targets)
        for format_name in registry.pack_order(selected):
            registry.get(format_name).assert_initialized(session)

        console.print(
            f"[bold green]Packaging {session.project_name} {version}[/bold green]"
        )
        console.print(f"[dim]Formats: {', '.join(selected)}[/dim]")
        for format_name in selected:
            registry.get(format_name).pack(session, version)
    except PackagingError as e:
        _report_error(e)
        raise SystemExit(1) from e


@main.command()
@click.argument("targets", nargs=-1)
@click.option(
    "--executor",
    "-x",
    type=click.Choice(list(EXECUTORS.keys())),
    default=None,
    help="Executor whose requirements to check.",
)
def preflight(targets: tuple[str, ...], executor: str | None) -> None:
    """Validate the environment can package the given formats (default: all)."""
    try:
        config = load_config()
        registry = build_registry()
        names = list(targets) if targets else registry.names()
        tasks = [registry.get(name) for name in registry.pack_order(names)]
    except PackagingError as e:
        _report_error(e)
        raise SystemExit(1) from e

    use_docker = (executor or config.executor) == "docker"
    if not run_all_checks(tasks, use_docker=use_docker):
        raise SystemExit(1)


@main.group(invoke_without_command=True)
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show and edit packforge configuration.

    Use subcommands: packforge config show, packforge config set
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@config.command("show")
def config_show() -> None:
    """Show the effective configuration and project metadata."""
    try:
        effective = load_config()
    except PackagingError as e:
        _report_error(e)
        raise SystemExit(1) from e
    project_name = resolve_project_name(effective)
    metadata = effective.project_metadata(project_name)

    console.print("[bold]Current Effective Configuration[/bold]\n")
    for key, value in effective.to_dict().items():
        console.print(f"  [cyan]{key}[/cyan]: {value}")

    console.print("\n[bold]Project Metadata[/bold]\n")
    console.print(f"  [cyan]project name[/cyan]: {project_name}")
    for key, value in vars(metadata).items():
        console.print(f"  [cyan]{key.replace('_', ' ')}[/cyan]: {value}")


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.option(
    "--global",
    "-g",
    "global_config",
    is_flag=True,
    help="Write to the global config (~/.packforge/config.yaml).",
)
def config_set(key: str, value: str, global_config: bool) -> None:
    """Set a configuration value in the local (default) or global config."""
    if key not in PackforgeConfig.__dataclass_fields__:
        console.print(f"[red]Unknown config key: {key}[/red]")
        raise SystemExit(1)

    path = get_home_config_path() if global_config else get_local_config_path()
    try:
        data = load_yaml_config(path)
    except PackagingError as e:
        _report_error(e)
        raise SystemExit(1) from e
    data[key] = click.BOOL.convert(value, None, None) if key == "keep_temp" else value
    save_config(PackforgeConfig.from_dict(data), path)
    console.print(f"[green]Set {key} in {path}[/green]")
