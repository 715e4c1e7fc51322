"""CLI entry point for tmuxlaunch."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from tmuxlaunch import __version__
from tmuxlaunch.config import (
    Config,
    LayoutType,
    display_config_warnings,
    load_config,
    parse_layout_name,
    save_config,
)
from tmuxlaunch.layouts import LAYOUT_DESCRIPTIONS, REQUIRED_PANES, LaunchOptions
from tmuxlaunch.profile import Profile, ProfileError, load_profile
from tmuxlaunch.titles import IdentityTitles, MappingTitles, TitleTranslator
from tmuxlaunch.tmux_manager import build_command, is_inside_tmux, run_tmux
from tmuxlaunch.xdg_paths import ensure_directories, get_config_file_path, get_profile_file_path

app = typer.Typer(
    name="tmuxlaunch",
    help="Lay out tmux sessions, windows and panes from a YAML profile.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

ProfileOption = Annotated[
    Path | None,
    typer.Option("--profile", "-p", help="Profile file (default: ~/.config/tmuxlaunch/profile.yaml)."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-C", help="Config file path."),
]
StrictOption = Annotated[
    bool,
    typer.Option("--strict", help="Exit with error on config validation warnings."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"tmuxlaunch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    """Lay out tmux sessions, windows and panes from a YAML profile."""


def _load_settings(config_path: Path | None, strict: bool) -> Config:
    config, warnings = load_config(config_path, project_dir=Path.cwd(), strict=strict)
    if warnings:
        display_config_warnings(warnings, err_console)
        if strict:
            raise typer.Exit(1)
    return config


def _load_profile_or_exit(profile_path: Path | None, config: Config) -> tuple[Path, Profile]:
    path = profile_path or (Path(config.profile_path).expanduser() if config.profile_path else get_profile_file_path())
    try:
        return path, load_profile(path)
    except ProfileError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1) from None


def _titles(config: Config) -> TitleTranslator:
    if config.window_titles:
        return MappingTitles(config.window_titles)
    return IdentityTitles()


def _debug(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/]")


@app.command()
def launch(
    targets: Annotated[
        list[str] | None,
        typer.Argument(help="Targets to launch: 'session', 'session.' or 'session.window'."),
    ] = None,
    profile: ProfileOption = None,
    config_path: ConfigOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Print the tmux command without executing it."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-D", help="Enable debug output."),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
    strict: StrictOption = False,
) -> None:
    """Launch the requested sessions and windows."""
    if not targets:
        err_console.print("[red]Error:[/] No targets given.")
        err_console.print("[dim]Use 'tmuxlaunch list' to see the sessions and windows in your profile.[/]")
        raise typer.Exit(1)

    config = _load_settings(config_path, strict)
    profile_path, loaded = _load_profile_or_exit(profile, config)
    inside_tmux = is_inside_tmux()

    options = LaunchOptions(
        home_dir=config.home_dir or str(Path.home()),
        titles=_titles(config),
        default_layout=config.default_layout,
        debug=_debug if debug or verbose > 0 else None,
    )
    options.log(f"Config file: {config_path or get_config_file_path()}")
    options.log(f"Profile: {profile_path}")
    options.log(f"Inside tmux: {inside_tmux}")

    try:
        command = build_command(loaded, targets, options, inside_tmux=inside_tmux)
    except ProfileError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1) from None

    argv, status = run_tmux(command, dry_run=dry_run, tmux_binary=config.tmux_binary)
    if dry_run:
        console.print("[yellow]Command that would be executed:[/]")
        console.print(f"{config.tmux_binary} {command}", markup=False, highlight=False, soft_wrap=True)
        return

    options.log(f"Executed {len(argv)} arguments, exit status {status}")
    if status != 0:
        err_console.print(f"[red]Error:[/] tmux exited with status {status}")
        raise typer.Exit(status)


@app.command("list")
def list_targets(
    profile: ProfileOption = None,
    config_path: ConfigOption = None,
    strict: StrictOption = False,
) -> None:
    """List the sessions and windows in the profile."""
    from rich.table import Table

    config = _load_settings(config_path, strict)
    profile_path, loaded = _load_profile_or_exit(profile, config)

    if not loaded.sessions:
        console.print(f"[yellow]No sessions in {profile_path}[/]")
        return

    table = Table(title=f"Sessions in {profile_path}")
    table.add_column("Target", style="cyan")
    table.add_column("Layout")
    table.add_column("Panes", justify="right")

    for session in loaded.sessions.values():
        table.add_row(f"{session.name}.", "", f"{len(session.windows)} windows", style="bold")
        for window in session.windows:
            layout = parse_layout_name(window.layout)
            if layout is None:
                layout_display = f"[dim]{config.default_layout}[/]"
                if window.layout:
                    layout_display += f" [yellow](unknown: {escape(window.layout)})[/]"
            else:
                layout_display = str(layout)
            panes = "[red]missing[/]" if window.panes is None else str(len(window.panes))
            table.add_row(f"{session.name}.{window.name}", layout_display, panes)

    console.print(table)


@app.command()
def layouts() -> None:
    """List the available window layouts."""
    from rich.table import Table

    table = Table(title="Available Layouts")
    table.add_column("Name", style="cyan")
    table.add_column("Panes", justify="right")
    table.add_column("Description")

    for lt in LayoutType:
        table.add_row(lt.value, str(REQUIRED_PANES[lt]), LAYOUT_DESCRIPTIONS[lt])

    console.print(table)


@app.command()
def init_config() -> None:
    """Create default configuration file."""
    ensure_directories()
    config_file = get_config_file_path()

    if config_file.exists():
        err_console.print(f"[yellow]Config file already exists:[/] {config_file}")
        raise typer.Exit(1)

    save_config(Config(), config_file)
    console.print(f"[green]✓[/] Created config file: {config_file}")


if __name__ == "__main__":
    app()
