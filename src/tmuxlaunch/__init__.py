"""Launch tmux sessions, windows and panes from a declarative YAML profile."""

__version__ = "0.1.0"
