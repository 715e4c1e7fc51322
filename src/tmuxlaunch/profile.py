"""Profile model for tmuxlaunch: sessions, windows and panes."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

INDENT_HINT = "check that 'layout:' and 'panes:' are indented under the window name"


class ProfileError(ValueError):
    """A fatal problem with the profile, pointing at the session/window at fault."""

    def __init__(self, message: str, session: str | None = None, window: str | None = None) -> None:
        self.session = session
        self.window = window
        location = ".".join(part for part in (session, window) if part)
        super().__init__(f"{location}: {message}" if location else message)


class NothingToLaunchError(ProfileError):
    """None of the requested targets matched a window in the profile."""


class Pane(BaseModel):
    """A single pane; unset host/cwd are inherited from the previous pane."""

    model_config = ConfigDict(extra="forbid")

    host: str | None = None
    cwd: str | None = None
    cmd: str | None = Field(default=None, validation_alias=AliasChoices("cmd", "command"))


class Window(BaseModel):
    """A window with an optional layout name and its panes.

    ``panes`` is None when the window was declared without a body (or without
    a ``panes`` key); that only becomes an error once the window is launched.
    """

    name: str
    layout: str | None = None
    panes: list[Pane] | None = None

    @field_validator("panes", mode="before")
    @classmethod
    def _expand_pane_shorthand(cls, value: object) -> object:
        # "- htop" is shorthand for "- cmd: htop"; "- " is an empty pane
        if not isinstance(value, list):
            return value
        return [{} if item is None else {"cmd": item} if isinstance(item, str) else item for item in value]

    def require_panes(self, session_name: str) -> list[Pane]:
        """Return the pane list, failing if the window has none declared.

        Args:
            session_name: The owning session, for the error message.

        Returns:
            The declared panes (possibly empty).

        Raises:
            ProfileError: If the window has no panes list.
        """
        if self.panes is None:
            raise ProfileError(f"window has no panes; {INDENT_HINT}", session=session_name, window=self.name)
        return self.panes


class Session(BaseModel):
    """An ordered list of windows; order is the tmux window index order."""

    name: str
    windows: list[Window] = []


@dataclass
class TargetSelection:
    """Which windows of one session were requested on the command line."""

    all_windows: bool = False
    windows: list[str] = field(default_factory=list)

    def includes(self, window_name: str) -> bool:
        """Check whether a window of the session should be launched."""
        return self.all_windows or window_name in self.windows


def select_targets(targets: Iterable[str]) -> dict[str, TargetSelection]:
    """Group requested targets by session.

    ``web`` and ``web.`` select every window of session ``web``;
    ``web.editor`` selects only window ``editor``. Everything after the first
    dot is the window name.

    Args:
        targets: Target strings as given on the command line.

    Returns:
        Ordered mapping of session name to its selection.
    """
    selection: dict[str, TargetSelection] = {}
    for target in targets:
        session_name, _, window_name = target.strip().partition(".")
        if not session_name:
            continue
        entry = selection.setdefault(session_name, TargetSelection())
        if not window_name:
            entry.all_windows = True
        elif window_name not in entry.windows:
            entry.windows.append(window_name)
    return selection


class Profile(BaseModel):
    """All sessions declared in a profile, in file order."""

    sessions: dict[str, Session] = {}

    def iter_requested(self, selection: dict[str, TargetSelection]) -> Iterator[tuple[Session, list[Window]]]:
        """Yield each requested session with the windows to launch.

        Sessions or windows that were requested but are not in the profile
        are skipped silently, as are sessions left with no windows.

        Args:
            selection: Output of select_targets.

        Yields:
            Tuples of (session, windows to launch) in profile order.
        """
        for name, session in self.sessions.items():
            wanted = selection.get(name)
            if wanted is None:
                continue
            windows = [window for window in session.windows if wanted.includes(window.name)]
            if windows:
                yield session, windows


def _parse_window(session_name: str, entry: object) -> Window:
    if not isinstance(entry, dict) or len(entry) != 1:
        raise ProfileError(
            f"each window must be a single 'name: {{...}}' mapping, got {entry!r}; {INDENT_HINT}",
            session=session_name,
        )
    ((raw_name, body),) = entry.items()
    window_name = str(raw_name)

    if body is None:
        return Window(name=window_name)
    if not isinstance(body, dict):
        raise ProfileError(f"expected a mapping, got {body!r}", session=session_name, window=window_name)

    try:
        return Window.model_validate({**body, "name": window_name})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in item['loc'])}: {item['msg']}" for item in e.errors()
        )
        raise ProfileError(problems, session=session_name, window=window_name) from None


def parse_profile(raw: object) -> Profile:
    """Build a Profile from the loosely-typed structure of a profile file.

    Args:
        raw: Parsed YAML: a mapping of session name to a list of
            single-key ``{window_name: {layout, panes}}`` mappings.

    Returns:
        The parsed profile.

    Raises:
        ProfileError: If the structure does not match the profile shape.
    """
    if raw is None:
        return Profile()
    if not isinstance(raw, dict):
        raise ProfileError(f"profile must map session names to window lists, got {type(raw).__name__}")

    sessions: dict[str, Session] = {}
    for raw_name, windows in raw.items():
        session_name = str(raw_name)
        if windows is None:
            windows = []
        if not isinstance(windows, list):
            raise ProfileError(f"expected a list of windows, got {type(windows).__name__}", session=session_name)
        sessions[session_name] = Session(
            name=session_name,
            windows=[_parse_window(session_name, entry) for entry in windows],
        )
    return Profile(sessions=sessions)


def load_profile(path: Path) -> Profile:
    """Load and parse a YAML profile file.

    Args:
        path: Path to the profile.

    Returns:
        The parsed profile.

    Raises:
        ProfileError: If the file is missing, unreadable, or malformed.
    """
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        raise ProfileError(f"profile not found: {path}") from None
    except OSError as e:
        raise ProfileError(f"cannot read profile {path}: {e}") from None
    except yaml.YAMLError as e:
        raise ProfileError(f"YAML parse error in {path}: {e}") from None
    return parse_profile(raw)
