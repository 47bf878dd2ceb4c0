"""
grapplebuild CLI - Main entry point.

Provides commands for building the script, system and scene assemblies of
a game from directories of source fragments and scene files.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from grapplebuild import __version__
from grapplebuild.config.loader import (
    ConfigurationError,
    create_config_from_args,
    generate_default_config,
    load_config_from_yaml,
)
from grapplebuild.config.models import BuildConfig, BuildKind, CompileResult, Severity
from grapplebuild.engine.builder import (
    AssemblyBuilder,
    SceneAssemblyBuilder,
    ScriptAssemblyBuilder,
    SystemAssemblyBuilder,
)
from grapplebuild.gateway.compiler import CompileGatewayError, CscCompileGateway
from grapplebuild.scenes.serializers import SerializationError
from grapplebuild.sources.discovery import (
    MissingInputDirectory,
    UnreadableInputFile,
    collect_fragments,
    collect_scenes,
)

app = typer.Typer(
    name="grapplebuild",
    help="Merge game scripts and scenes into loadable assemblies",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)

# Build order: scripts first, then systems, then scenes.
BUILD_ORDER = (BuildKind.SCRIPTS, BuildKind.SYSTEMS, BuildKind.SCENES)

_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


# =============================================================================
# Helper Functions
# =============================================================================


def print_banner():
    """Print grapplebuild banner."""
    console.print(
        Panel.fit(
            f"[bold cyan]grapplebuild[/bold cyan] {__version__}\n"
            "Script & scene assembly builder",
            border_style="cyan",
        )
    )


def configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")


def resolve_config(
    config: Optional[str],
    **overrides,
) -> BuildConfig:
    """Load the YAML config (if any) and layer CLI overrides on top."""
    base = load_config_from_yaml(Path(config)) if config else None
    return create_config_from_args(base=base, **overrides)


def make_builder(kind: BuildKind, cfg: BuildConfig) -> AssemblyBuilder:
    """Create and fill the builder for one asset kind from disk."""
    kind_cfg = cfg.kind(kind)
    settings = cfg.settings_for(kind)

    if kind == BuildKind.SCENES:
        builder = SceneAssemblyBuilder(settings, embed_settings=cfg.embed)
        scenes = collect_scenes(
            kind_cfg.directory, kind_cfg.patterns, cfg.recursive, cfg.exclude_patterns
        )
        console.print(
            f"Building the following scenes: {', '.join(name for name, _ in scenes) or '(none)'}"
        )
        builder.add_scenes(scenes)
        return builder

    fragments = collect_fragments(
        kind_cfg.directory, kind_cfg.patterns, cfg.recursive, cfg.exclude_patterns
    )
    console.print(
        f"Building the following {kind.value}: "
        f"{', '.join(f.source_name for f in fragments) or '(none)'}"
    )
    builder_cls = ScriptAssemblyBuilder if kind == BuildKind.SCRIPTS else SystemAssemblyBuilder
    return builder_cls(settings, fragments)


def display_diagnostics(result: CompileResult) -> None:
    """Show compiler diagnostics in a table."""
    if not result.diagnostics:
        console.print("  [dim]No diagnostics[/dim]")
        return

    table = Table(title="Diagnostic results", show_lines=False)
    table.add_column("Severity")
    table.add_column("Code")
    table.add_column("Location")
    table.add_column("Message")

    for diagnostic in result.diagnostics:
        style = _SEVERITY_STYLES[diagnostic.severity]
        table.add_row(
            f"[{style}]{diagnostic.severity.value}[/{style}]",
            diagnostic.code or "",
            escape(diagnostic.location or ""),
            escape(diagnostic.message),
        )
    console.print(table)


def run_build(kind: BuildKind, cfg: BuildConfig, gateway: CscCompileGateway) -> bool | None:
    """Build one asset kind.

    Returns:
        True on success, False on failure, None when the kind is skipped
    """
    kind_cfg = cfg.kind(kind)
    if not kind_cfg.enabled:
        logger.debug(f"Skipping disabled kind {kind.value}")
        return None

    console.print(f"\n[bold cyan]Building {kind.value}[/bold cyan]")
    try:
        builder = make_builder(kind, cfg)
    except MissingInputDirectory as e:
        console.print(f"[yellow]⚠ {escape(str(e))}; skipping {kind.value}[/yellow]")
        return None
    except (SerializationError, UnreadableInputFile) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        console.print(f"[bold red]✗ Building {kind.value} failed![/bold red]")
        return False

    try:
        result = builder.compile_into_assembly(kind_cfg.output, gateway)
    except CompileGatewayError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return False

    if result.succeeded:
        console.print(f"[green]✓[/green] Output .dll to file path: {kind_cfg.output.resolve()}")
    else:
        console.print(f"[bold red]✗ Building {kind.value} failed![/bold red]")
    display_diagnostics(result)
    return result.succeeded


# =============================================================================
# Commands
# =============================================================================


@app.command()
def build(
    script_directory: Optional[str] = typer.Option(None, "--script-directory", help="Directory with script files"),
    script_output: Optional[str] = typer.Option(None, "--script-output", help="Output path of the script assembly"),
    scene_directory: Optional[str] = typer.Option(None, "--scene-directory", help="Directory with scene files"),
    scene_output: Optional[str] = typer.Option(None, "--scene-output", help="Output path of the scene assembly"),
    system_directory: Optional[str] = typer.Option(None, "--system-directory", help="Directory with system files"),
    system_output: Optional[str] = typer.Option(None, "--system-output", help="Output path of the system assembly"),
    recursive: Optional[bool] = typer.Option(None, "--recursive/--no-recursive", help="Recurse into sub-directories"),
    reference: Optional[List[str]] = typer.Option(None, "--reference", help="Assembly reference (repeatable)"),
    compiler: Optional[str] = typer.Option(None, "--compiler", help="Compiler executable (default: csc)"),
    timeout: Optional[int] = typer.Option(None, "--timeout", min=1, help="Compiler timeout in seconds"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    strict: Optional[bool] = typer.Option(None, "--strict/--no-strict", help="Exit non-zero if any build fails"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Build the script, system and scene assemblies.

    Failed builds print their diagnostics and the next kind is still built.

    Examples:
        grapplebuild build --script-directory Scripts --scene-directory Scenes
        grapplebuild build -c grapplebuild.yaml --recursive --strict
    """
    print_banner()
    configure_logging(verbose)

    try:
        cfg = resolve_config(
            config,
            script_directory=Path(script_directory) if script_directory else None,
            script_output=Path(script_output) if script_output else None,
            scene_directory=Path(scene_directory) if scene_directory else None,
            scene_output=Path(scene_output) if scene_output else None,
            system_directory=Path(system_directory) if system_directory else None,
            system_output=Path(system_output) if system_output else None,
            recursive=recursive,
            references=[Path(r) for r in reference] if reference else None,
            compiler=[compiler] if compiler else None,
            timeout=timeout,
            strict=strict,
        )
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        raise typer.Exit(1)

    gateway = CscCompileGateway(cfg.compiler)
    outcomes = {kind: run_build(kind, cfg, gateway) for kind in BUILD_ORDER}

    failed = [kind.value for kind, ok in outcomes.items() if ok is False]
    if failed:
        console.print(f"\n[bold red]Failed builds:[/bold red] {', '.join(failed)}")
        if cfg.strict:
            raise typer.Exit(1)
    else:
        console.print("\n[bold green]✓ All builds complete[/bold green]")


@app.command()
def preview(
    kind: BuildKind = typer.Argument(BuildKind.SCRIPTS, help="Which assembly to preview"),
    directory: Optional[str] = typer.Option(None, "--directory", "-d", help="Input directory override"),
    recursive: Optional[bool] = typer.Option(None, "--recursive/--no-recursive", help="Recurse into sub-directories"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the source here instead of printing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Print the assembled source of one kind without compiling it.
    """
    configure_logging(verbose)
    directory_args = {
        BuildKind.SCRIPTS: "script_directory",
        BuildKind.SCENES: "scene_directory",
        BuildKind.SYSTEMS: "system_directory",
    }

    try:
        overrides = {"recursive": recursive}
        if directory:
            overrides[directory_args[kind]] = Path(directory)
        cfg = resolve_config(config, **overrides)
        builder = make_builder(kind, cfg)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        raise typer.Exit(1)
    except (MissingInputDirectory, SerializationError, UnreadableInputFile) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    source = builder.generate_finalized_source()
    if output:
        Path(output).write_text(source, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {output}")
    else:
        console.print(Syntax(source, "csharp", line_numbers=True))


@app.command()
def init(
    output: str = typer.Option("grapplebuild.yaml", "--output", "-o", help="Output config file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing file"),
):
    """
    Generate a default configuration file.
    """
    output_path = Path(output)

    if output_path.exists() and not force:
        console.print(f"[yellow]File {output} already exists. Use --force to overwrite.[/yellow]")
        raise typer.Exit(1)

    generate_default_config(output_path)
    console.print(f"[green]✓[/green] Generated default configuration: {output}")


@app.command()
def version():
    """Show version information."""
    console.print(f"grapplebuild version {__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
