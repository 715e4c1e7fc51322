"""Window title translation for tmuxlaunch."""

from collections.abc import Mapping
from typing import Protocol


class TitleTranslator(Protocol):
    """Turns a profile window name into the title shown in tmux."""

    def translate(self, name: str) -> str | None:
        """Return the title for a window, or None to keep the raw name."""
        ...


class IdentityTitles:
    """Use window names as titles unchanged."""

    def translate(self, name: str) -> str | None:
        return name


class MappingTitles:
    """Look titles up in a fixed name -> title mapping."""

    def __init__(self, titles: Mapping[str, str]) -> None:
        self._titles = dict(titles)

    def translate(self, name: str) -> str | None:
        return self._titles.get(name)


def title_for(translator: TitleTranslator, name: str) -> str:
    """Translate a window name, falling back to the name itself."""
    return translator.translate(name) or name
