"""Configuration management for tmuxlaunch."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import cast

import yaml
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from tmuxlaunch.xdg_paths import PROJECT_CONFIG_NAME, get_config_file_path


class LayoutType(StrEnum):
    """Available window layouts."""

    SINGLE = "single"  # One pane, no splits
    VSPLIT = "vsplit"  # Side by side
    HSPLIT = "hsplit"  # Stacked
    THREE = "three"  # Three stacked
    HTHREE = "hthree"  # Top pane over a shared bottom pane
    FOUR = "four"  # Four stacked


def parse_layout_name(name: str | None) -> LayoutType | None:
    """Resolve a profile layout name to a LayoutType.

    Matching is exact after trimming and lowercasing; names that merely
    contain a layout name (e.g. "three-ish") do not match.

    Args:
        name: The raw layout name from the profile.

    Returns:
        The matching LayoutType, or None if the name is empty or unknown.
    """
    if not name:
        return None
    try:
        return LayoutType(name.strip().lower())
    except ValueError:
        return None


@dataclass
class ConfigWarning:
    """A config validation warning."""

    file: str
    field_name: str
    message: str
    value: object = field(default=None, repr=False)


class Config(BaseModel):
    """Configuration settings for tmuxlaunch."""

    # Profile used when --profile is not given (defaults to the XDG profile.yaml)
    profile_path: str | None = None
    # Layout for windows that omit one or name an unknown one
    default_layout: LayoutType = LayoutType.VSPLIT
    # Fallback cwd for the first pane of a window (defaults to $HOME)
    home_dir: str | None = None
    # Window name -> title shown in tmux
    window_titles: dict[str, str] = {}
    tmux_binary: str = "tmux"


def _deep_merge(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    """Recursively merge override dict into base dict.

    Args:
        base: The base dictionary.
        override: The dictionary with overriding values.

    Returns:
        A new merged dictionary.
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> tuple[dict[str, object], list[ConfigWarning]]:
    """Load a YAML settings file, turning failures into warnings.

    Args:
        path: Path to the YAML file.

    Returns:
        Tuple of (parsed dict, list of warnings). Empty dict on missing/invalid.
    """
    if not path.exists():
        return {}, []
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return {}, [ConfigWarning(file=str(path), field_name="(file)", message=f"YAML parse error: {e}")]
    except OSError as e:
        return {}, [ConfigWarning(file=str(path), field_name="(file)", message=f"File read error: {e}")]

    if raw is None:
        return {}, []
    if not isinstance(raw, dict):
        return {}, [
            ConfigWarning(
                file=str(path),
                field_name="(file)",
                message="expected a mapping at the top level",
                value=type(raw).__name__,
            )
        ]
    return cast(dict[str, object], raw), []


def _validation_warnings(error: ValidationError) -> list[ConfigWarning]:
    return [
        ConfigWarning(
            file="merged config",
            field_name=".".join(str(loc) for loc in item["loc"]),
            message=item["msg"],
            value=item.get("input"),
        )
        for item in error.errors()
    ]


def load_config(
    config_path: Path | None = None,
    project_dir: Path | None = None,
    strict: bool = False,
) -> tuple[Config, list[ConfigWarning]]:
    """Load settings, letting a project file override the user file.

    Loading order (last value wins via deep merge):
    1. User config (~/.config/tmuxlaunch/config.yaml)
    2. Project config (.tmuxlaunch.yaml in project_dir)

    Args:
        config_path: Optional path to user config file. Uses default if None.
        project_dir: Optional directory containing a .tmuxlaunch.yaml file.
        strict: If True, do not attempt partial recovery on validation errors.

    Returns:
        Tuple of (loaded Config, list of ConfigWarnings).
    """
    merged, warnings = _load_yaml_file(config_path or get_config_file_path())

    if project_dir:
        project_config, project_warnings = _load_yaml_file(project_dir / PROJECT_CONFIG_NAME)
        warnings.extend(project_warnings)
        merged = _deep_merge(merged, project_config)

    try:
        return Config.model_validate(merged), warnings
    except ValidationError as e:
        warnings.extend(_validation_warnings(e))
        if strict:
            return Config(), warnings

        # Drop the offending top-level keys and keep whatever else validates
        for item in e.errors():
            if item["loc"]:
                merged.pop(str(item["loc"][0]), None)
        try:
            return Config.model_validate(merged), warnings
        except ValidationError:
            return Config(), warnings


def display_config_warnings(warnings: list[ConfigWarning], console: Console) -> None:
    """Display config warnings using Rich formatting.

    Args:
        warnings: List of warnings to display.
        console: Rich console to output to.
    """
    if not warnings:
        return

    text = Text()
    for i, warning in enumerate(warnings):
        if i > 0:
            text.append("\n")
        text.append(f"  {warning.file}", style="dim")
        text.append(": ", style="dim")
        text.append(warning.field_name, style="bold")
        text.append(f": {warning.message}", style="yellow")
        if warning.value is not None:
            text.append(f" (got: {warning.value!r})", style="dim")

    console.print(Panel(text, title="[yellow]Config Warnings[/]", border_style="yellow"))


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Save configuration to a YAML file.

    Args:
        config: The configuration to save.
        config_path: Optional path to config file. Uses default if None.

    Returns:
        The path that was written.
    """
    path = config_path or get_config_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")
    with path.open("w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False)
    return path
