"""Tmux command assembly and invocation for tmuxlaunch."""

import os
import shlex
import subprocess
from collections.abc import Iterable

from tmuxlaunch.layouts import SEPARATOR, LaunchOptions, build_window, chain
from tmuxlaunch.profile import NothingToLaunchError, Profile, Window, select_targets


def is_inside_tmux() -> bool:
    """Check if we're running inside a tmux session."""
    return os.environ.get("TMUX") is not None


def build_session(
    session_name: str,
    windows: list[Window],
    options: LaunchOptions,
    inside_tmux: bool = False,
) -> str:
    """Build the command chain for one session's requested windows.

    Outside tmux the chain starts a new session; inside tmux the first window
    opens as a new window of the current session instead. Every later window
    is opened with ``new-window``.

    Args:
        session_name: The session name.
        windows: Windows to launch, in order.
        options: Launch options.
        inside_tmux: Whether we are already inside a tmux session.

    Returns:
        The session's directives, ending with the separator.

    Raises:
        ProfileError: If a window declares no panes list.
    """
    opener = "new-window" if inside_tmux else f"new-session -s {shlex.quote(session_name)}"
    fragments: list[str] = []
    for index, window in enumerate(windows):
        fragments.append(chain([opener if index == 0 else "new-window"]))
        fragments.append(build_window(session_name, window, options))
    return "".join(fragments)


def strip_separator(command: str) -> str:
    """Remove the separator left dangling after the last directive."""
    if command.endswith(SEPARATOR):
        return command[: -len(SEPARATOR)]
    return command


def build_command(
    profile: Profile,
    targets: Iterable[str],
    options: LaunchOptions,
    inside_tmux: bool = False,
) -> str:
    """Build the single tmux command that launches every requested target.

    Args:
        profile: The loaded profile.
        targets: Requested ``session``, ``session.`` or ``session.window`` names.
        options: Launch options.
        inside_tmux: Whether we are already inside a tmux session.

    Returns:
        The composite command, without the trailing separator.

    Raises:
        ProfileError: If a requested window declares no panes list.
        NothingToLaunchError: If no requested target matched the profile.
    """
    selection = select_targets(targets)
    commands: list[str] = []
    for session, windows in profile.iter_requested(selection):
        options.log(f"Session {session.name}: {', '.join(window.name for window in windows)}")
        commands.append(build_session(session.name, windows, options, inside_tmux))

    if not commands:
        requested = ", ".join(selection) or "(none)"
        raise NothingToLaunchError(f"nothing to launch; no windows matched the requested targets: {requested}")
    return strip_separator("".join(commands))


def run_tmux(command: str, dry_run: bool = False, tmux_binary: str = "tmux") -> tuple[list[str], int]:
    """Run a composite command with the tmux binary.

    Args:
        command: The composite command from build_command.
        dry_run: If True, return the argv without executing.
        tmux_binary: The tmux executable to run.

    Returns:
        Tuple of (argv that was or would be executed, exit status). The exit
        status is 0 in dry run.
    """
    argv = [tmux_binary, *shlex.split(command)]
    if dry_run:
        return argv, 0
    result = subprocess.run(argv, check=False)
    return argv, result.returncode
