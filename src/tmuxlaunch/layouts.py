"""Window layouts for tmuxlaunch.

A window is laid out by typing into its panes one at a time: pane 0 is the
window's initial pane, and every later pane is created by the split/select
directives its layout maps to its index before keys are sent into it. An
index with no directives sends its keys to whichever pane is active.

Layouts (tmux naming: ``split-window -h`` puts panes side by side):

    vsplit          hsplit          three           hthree          four
    -------------   -------------   -------------   -------------   -------------
    |     |     |   |     0     |   |     0     |   |  0  |  3  |   |     0     |
    |  0  |  1  |   |-----------|   |-----------|   |-----------|   |-----------|
    |     |     |   |     1     |   |     1     |   |    1, 2   |   |     1     |
    |     |     |   |           |   |-----------|   |           |   |-----------|
    |     |     |   |           |   |     2     |   |           |   |     2     |
    |     |     |   |           |   |           |   |           |   |-----------|
    |     |     |   |           |   |           |   |           |   |     3     |
    -------------   -------------   -------------   -------------   -------------

``hthree`` splits once for its first two panes; pane 2 shares pane 1's slot,
and a fourth pane splits the top pane side by side. In the stacked
``three``/``four`` column ``select-pane -L`` keeps the bottom pane active, so
the fourth pane is split from it.
"""

import shlex
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from tmuxlaunch.config import LayoutType, parse_layout_name
from tmuxlaunch.profile import Pane, Window
from tmuxlaunch.titles import IdentityTitles, TitleTranslator, title_for

# tmux's command separator; every chained directive is followed by it
SEPARATOR = " \\; "

SPLIT_SIDE_BY_SIDE = "split-window -h"
SPLIT_STACKED = "split-window -v"
SELECT_LEFT = "select-pane -L"
SELECT_UP = "select-pane -U"

# Panes a window is padded to before it is laid out
REQUIRED_PANES: dict[LayoutType, int] = {
    LayoutType.SINGLE: 1,
    LayoutType.VSPLIT: 2,
    LayoutType.HSPLIT: 2,
    LayoutType.THREE: 3,
    LayoutType.HTHREE: 3,
    LayoutType.FOUR: 4,
}

_STACKED_SPLITS: dict[int, tuple[str, ...]] = {
    1: (SPLIT_STACKED,),
    2: (SPLIT_STACKED,),
    3: (SELECT_LEFT, SPLIT_STACKED),
}

# Directives run before keys are sent to pane N; indices not listed get none
PRE_PANE_DIRECTIVES: dict[LayoutType, dict[int, tuple[str, ...]]] = {
    LayoutType.SINGLE: {},
    LayoutType.VSPLIT: {index: (SPLIT_SIDE_BY_SIDE,) for index in (1, 2, 3)},
    LayoutType.HSPLIT: {index: (SPLIT_STACKED,) for index in (1, 2, 3)},
    LayoutType.THREE: _STACKED_SPLITS,
    LayoutType.FOUR: _STACKED_SPLITS,
    LayoutType.HTHREE: {
        1: (SPLIT_STACKED,),
        3: (SELECT_UP, SPLIT_SIDE_BY_SIDE),
    },
}

# Layout descriptions for the layouts command
LAYOUT_DESCRIPTIONS: dict[LayoutType, str] = {
    LayoutType.SINGLE: "One pane, no splits",
    LayoutType.VSPLIT: "Panes side by side",
    LayoutType.HSPLIT: "Panes stacked top to bottom",
    LayoutType.THREE: "Three panes stacked top to bottom",
    LayoutType.HTHREE: "Top pane over a shared bottom pane",
    LayoutType.FOUR: "Four panes stacked top to bottom",
}


@dataclass(frozen=True)
class ResolvedPane:
    """A pane after host/cwd inheritance; cwd is always set."""

    cwd: str
    host: str | None = None
    cmd: str | None = None
    synthetic: bool = False


@dataclass
class LaunchOptions:
    """Everything the builder needs from outside the profile."""

    home_dir: str = field(default_factory=lambda: str(Path.home()))
    titles: TitleTranslator = field(default_factory=IdentityTitles)
    default_layout: LayoutType = LayoutType.VSPLIT
    debug: Callable[[str], None] | None = None

    def log(self, message: str) -> None:
        """Send a message to the debug sink, if one is configured."""
        if self.debug is not None:
            self.debug(message)


def chain(directives: Iterable[str]) -> str:
    """Join directives into one tmux command chain, separator after each."""
    return "".join(f"{directive}{SEPARATOR}" for directive in directives)


def resolve_layout(window: Window, options: LaunchOptions) -> LayoutType:
    """Pick the layout for a window, falling back to the default.

    Args:
        window: The window whose layout name to resolve.
        options: Launch options holding the default layout.

    Returns:
        The window's layout, or the default when unset or unknown.
    """
    layout = parse_layout_name(window.layout)
    if layout is not None:
        return layout
    if window.layout:
        options.log(f"Unknown layout {window.layout!r} for window {window.name!r}, using {options.default_layout}")
    return options.default_layout


def _expand_home(cwd: str, home_dir: str) -> str:
    if cwd == "~":
        return home_dir
    if cwd.startswith("~/"):
        return home_dir.rstrip("/") + cwd[1:]
    return cwd


def resolve_panes(panes: list[Pane], home_dir: str) -> list[ResolvedPane]:
    """Fill in each pane's unset host/cwd from the pane before it.

    The first pane inherits from a seed that has no host and ``home_dir`` as
    its cwd; inheritance only ever flows forward.

    Args:
        panes: Declared panes of one window.
        home_dir: Fallback working directory.

    Returns:
        One resolved pane per declared pane, in order.
    """
    resolved: list[ResolvedPane] = []
    prev = ResolvedPane(cwd=home_dir)
    for pane in panes:
        prev = ResolvedPane(
            host=pane.host or prev.host,
            cwd=_expand_home(pane.cwd, home_dir) if pane.cwd else prev.cwd,
            cmd=pane.cmd or None,
        )
        resolved.append(prev)
    return resolved


def pad_panes(panes: list[ResolvedPane], layout: LayoutType, home_dir: str) -> list[ResolvedPane]:
    """Append blank panes until the layout has the panes it needs.

    Added panes only ``cd`` into the last resolved directory; they carry no
    host and no command. They skip host inheritance on purpose: each is a
    fresh local shell, so it never opens an ssh session. Extra panes are
    never removed.

    Args:
        panes: Resolved panes of one window.
        layout: The window's layout.
        home_dir: Directory used when the window declared no panes at all.

    Returns:
        A new list at least as long as the layout requires.
    """
    cwd = panes[-1].cwd if panes else home_dir
    missing = REQUIRED_PANES[layout] - len(panes)
    return panes + [ResolvedPane(cwd=cwd, synthetic=True) for _ in range(missing)]


def _send_keys(text: str) -> str:
    return f"send-keys {shlex.quote(text)} Enter"


def pane_directives(pane: ResolvedPane) -> list[str]:
    """Build the keystrokes for one pane: ssh, cd + clear, then its command."""
    directives: list[str] = []
    if pane.host:
        directives.append(_send_keys(f"ssh {pane.host}"))
    directives.append(_send_keys(f"cd {shlex.quote(pane.cwd)} && clear"))
    if pane.cmd:
        directives.append(_send_keys(pane.cmd))
    return directives


def build_window(session_name: str, window: Window, options: LaunchOptions) -> str:
    """Build the command chain that titles and lays out one window.

    Args:
        session_name: The session the window belongs to.
        window: The window to lay out.
        options: Launch options.

    Returns:
        The window's directives, each followed by the separator.

    Raises:
        ProfileError: If the window declares no panes list.
    """
    panes = window.require_panes(session_name)
    layout = resolve_layout(window, options)
    title = title_for(options.titles, window.name)
    resolved = pad_panes(resolve_panes(panes, options.home_dir), layout, options.home_dir)

    padded = len(resolved) - len(panes)
    options.log(
        f"{session_name}.{window.name}: layout={layout} title={title!r} panes={len(resolved)}"
        + (f" (padded {padded})" if padded else "")
    )

    directives = [f"rename-window {shlex.quote(title)}"]
    for index, pane in enumerate(resolved):
        directives.extend(PRE_PANE_DIRECTIVES[layout].get(index, ()))
        directives.extend(pane_directives(pane))
    return chain(directives)
