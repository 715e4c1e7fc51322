"""Tests for tmuxlaunch.layouts module."""

import shlex

import pytest

from tmuxlaunch.config import LayoutType
from tmuxlaunch.layouts import (
    PRE_PANE_DIRECTIVES,
    REQUIRED_PANES,
    SELECT_LEFT,
    SELECT_UP,
    SEPARATOR,
    SPLIT_SIDE_BY_SIDE,
    SPLIT_STACKED,
    LaunchOptions,
    ResolvedPane,
    build_window,
    chain,
    pad_panes,
    pane_directives,
    resolve_layout,
    resolve_panes,
)
from tmuxlaunch.profile import Pane, ProfileError, Window
from tmuxlaunch.titles import MappingTitles

HOME = "/home/tester"


def _options(**kwargs: object) -> LaunchOptions:
    return LaunchOptions(home_dir=HOME, **kwargs)  # type: ignore[arg-type]


def _directives(fragment: str) -> list[str]:
    assert fragment.endswith(SEPARATOR)
    return fragment[: -len(SEPARATOR)].split(SEPARATOR)


def _window(layout: str | None, *panes: Pane, name: str = "editor") -> Window:
    return Window(name=name, layout=layout, panes=list(panes))


def _splits(directives: list[str]) -> list[str]:
    return [d for d in directives if d.startswith("split-window")]


class TestChain:
    """Tests for chain function."""

    def test_separator_after_each(self) -> None:
        """Should follow every directive with the separator."""
        assert chain(["a", "b"]) == "a \\; b \\; "

    def test_empty(self) -> None:
        """Should produce nothing for no directives."""
        assert chain([]) == ""

    def test_separator_is_four_characters(self) -> None:
        """Should use tmux's escaped semicolon with surrounding spaces."""
        assert len(SEPARATOR) == 4


class TestTables:
    """Tests for the layout tables."""

    def test_required_panes(self) -> None:
        """Should require the documented pane count per layout."""
        assert REQUIRED_PANES == {
            LayoutType.SINGLE: 1,
            LayoutType.VSPLIT: 2,
            LayoutType.HSPLIT: 2,
            LayoutType.THREE: 3,
            LayoutType.HTHREE: 3,
            LayoutType.FOUR: 4,
        }

    def test_every_layout_has_directives(self) -> None:
        """Should define a directive table for every layout."""
        assert set(PRE_PANE_DIRECTIVES) == set(LayoutType)

    def test_index_zero_never_splits(self) -> None:
        """Should never emit anything before the window's initial pane."""
        for table in PRE_PANE_DIRECTIVES.values():
            assert 0 not in table

    def test_split_count_matches_pane_count(self) -> None:
        """Should create one pane per split for every layout but hthree."""
        for layout, count in REQUIRED_PANES.items():
            if layout is LayoutType.HTHREE:
                continue
            table = PRE_PANE_DIRECTIVES[layout]
            splits = [d for index in range(count) for d in table.get(index, ()) if d.startswith("split-window")]
            assert len(splits) == count - 1, layout

    def test_three_family_stacks_like_hsplit(self) -> None:
        """Should stack the first two extra panes for three and four."""
        for layout in (LayoutType.THREE, LayoutType.FOUR):
            table = PRE_PANE_DIRECTIVES[layout]
            assert table[1] == PRE_PANE_DIRECTIVES[LayoutType.HSPLIT][1]
            assert table[2] == (SPLIT_STACKED,)
            assert table[3] == (SELECT_LEFT, SPLIT_STACKED)

    def test_hthree_table(self) -> None:
        """Should split once for hthree's second pane and leave its third unsplit."""
        assert PRE_PANE_DIRECTIVES[LayoutType.HTHREE] == {
            1: (SPLIT_STACKED,),
            3: (SELECT_UP, SPLIT_SIDE_BY_SIDE),
        }
        assert 2 not in PRE_PANE_DIRECTIVES[LayoutType.HTHREE]


class TestResolveLayout:
    """Tests for resolve_layout function."""

    def test_known_layout(self) -> None:
        """Should use the window's layout when it is known."""
        assert resolve_layout(_window("hthree"), _options()) is LayoutType.HTHREE

    def test_missing_layout_uses_default(self) -> None:
        """Should fall back to vsplit when no layout is given."""
        assert resolve_layout(_window(None), _options()) is LayoutType.VSPLIT

    def test_configured_default(self) -> None:
        """Should honor a configured default layout."""
        options = _options(default_layout=LayoutType.HSPLIT)
        assert resolve_layout(_window(None), options) is LayoutType.HSPLIT

    def test_unknown_layout_logged(self) -> None:
        """Should fall back and report names that are not exact layout names."""
        messages: list[str] = []
        options = _options(debug=messages.append)
        assert resolve_layout(_window("three-column"), options) is LayoutType.VSPLIT
        assert len(messages) == 1
        assert "three-column" in messages[0]


class TestResolvePanes:
    """Tests for resolve_panes function."""

    def test_first_pane_defaults_to_home(self) -> None:
        """Should give the first pane the home directory when it has no cwd."""
        assert resolve_panes([Pane(cmd="ls")], HOME) == [ResolvedPane(cwd=HOME, cmd="ls")]

    def test_inherits_from_previous(self) -> None:
        """Should fill unset host/cwd from the pane before."""
        resolved = resolve_panes([Pane(host="a", cwd="/x"), Pane(cmd="top")], HOME)
        assert resolved[1] == ResolvedPane(host="a", cwd="/x", cmd="top")

    def test_inheritance_is_transitive(self) -> None:
        """Should inherit from the immediately preceding resolved pane."""
        resolved = resolve_panes([Pane(host="h1"), Pane(cwd="/x"), Pane(), Pane(host="h2")], HOME)
        assert [(p.host, p.cwd) for p in resolved] == [
            ("h1", HOME),
            ("h1", "/x"),
            ("h1", "/x"),
            ("h2", "/x"),
        ]

    def test_commands_not_inherited(self) -> None:
        """Should never copy a command into the next pane."""
        resolved = resolve_panes([Pane(cmd="top"), Pane()], HOME)
        assert resolved[1].cmd is None

    def test_tilde_expanded_against_home(self) -> None:
        """Should expand ~ using the configured home directory."""
        resolved = resolve_panes([Pane(cwd="~/src"), Pane(cwd="~")], HOME)
        assert [p.cwd for p in resolved] == ["/home/tester/src", HOME]


class TestPadPanes:
    """Tests for pad_panes function."""

    def test_vsplit_padded_with_first_cwd(self) -> None:
        """Should add one blank pane carrying the first pane's cwd."""
        resolved = resolve_panes([Pane(host="a", cwd="/x", cmd="vim")], HOME)
        padded = pad_panes(resolved, LayoutType.VSPLIT, HOME)
        assert len(padded) == 2
        assert padded[1] == ResolvedPane(cwd="/x", synthetic=True)
        assert padded[1].host is None
        assert padded[1].cmd is None

    def test_three_padded_from_last_declared(self) -> None:
        """Should pad from the last resolved pane, not the first."""
        resolved = resolve_panes([Pane(cwd="/a"), Pane(cwd="/b")], HOME)
        padded = pad_panes(resolved, LayoutType.THREE, HOME)
        assert padded[2:] == [ResolvedPane(cwd="/b", synthetic=True)]

    def test_empty_window_padded_with_home(self) -> None:
        """Should pad a window without panes from the home directory."""
        assert pad_panes([], LayoutType.FOUR, HOME) == [ResolvedPane(cwd=HOME, synthetic=True)] * 4

    def test_extra_panes_kept(self) -> None:
        """Should never remove panes beyond the required count."""
        resolved = resolve_panes([Pane(), Pane(), Pane()], HOME)
        assert pad_panes(resolved, LayoutType.SINGLE, HOME) == resolved


class TestPaneDirectives:
    """Tests for pane_directives function."""

    def test_cd_only(self) -> None:
        """Should only cd and clear for a blank pane."""
        assert pane_directives(ResolvedPane(cwd="/x")) == ["send-keys 'cd /x && clear' Enter"]

    def test_host_and_command(self) -> None:
        """Should ssh first, then cd, then run the command."""
        assert pane_directives(ResolvedPane(cwd="/x", host="db1", cmd="psql")) == [
            "send-keys 'ssh db1' Enter",
            "send-keys 'cd /x && clear' Enter",
            "send-keys psql Enter",
        ]

    def test_paths_with_spaces_quoted(self) -> None:
        """Should quote the directory for the shell and the keys for tmux."""
        directive = pane_directives(ResolvedPane(cwd="/my docs"))[0]
        assert shlex.split(directive) == ["send-keys", "cd '/my docs' && clear", "Enter"]


class TestBuildWindow:
    """Tests for build_window function."""

    def test_single_scenario(self) -> None:
        """Should cd to home and run ls with no splits and no ssh."""
        fragment = build_window("web", _window("single", Pane(cmd="ls")), _options())
        assert _directives(fragment) == [
            "rename-window editor",
            f"send-keys 'cd {HOME} && clear' Enter",
            "send-keys ls Enter",
        ]

    def test_single_has_one_pane_and_no_splits(self) -> None:
        """Should emit exactly one pane's directives for single windows."""
        directives = _directives(build_window("s", _window("single", Pane(cwd="/x")), _options()))
        assert _splits(directives) == []
        assert sum("cd /x" in d for d in directives) == 1

    def test_vsplit_scenario(self) -> None:
        """Should split once before the second pane, which inherits host and cwd."""
        window = _window("vsplit", Pane(host="a", cwd="/x"), Pane(cmd="top"))
        assert _directives(build_window("s", window, _options())) == [
            "rename-window editor",
            "send-keys 'ssh a' Enter",
            "send-keys 'cd /x && clear' Enter",
            SPLIT_SIDE_BY_SIDE,
            "send-keys 'ssh a' Enter",
            "send-keys 'cd /x && clear' Enter",
            "send-keys top Enter",
        ]

    @pytest.mark.parametrize("layout", ["vsplit", "hsplit"])
    def test_two_pane_layouts_padded(self, layout: str) -> None:
        """Should pad a one-pane split window to two panes."""
        window = _window(layout, Pane(host="a", cwd="/x", cmd="vim"))
        directives = _directives(build_window("s", window, _options()))
        assert len(_splits(directives)) == 1
        assert directives[-1] == "send-keys 'cd /x && clear' Enter"
        assert sum("ssh" in d for d in directives) == 1

    def test_padded_pane_skips_host(self) -> None:
        """Should open padded panes as local shells even after a remote pane."""
        window = _window("three", Pane(cwd="/a"), Pane(host="db1", cwd="/b"))
        directives = _directives(build_window("s", window, _options()))
        assert directives.count("send-keys 'ssh db1' Enter") == 1
        assert directives[-2:] == [SPLIT_STACKED, "send-keys 'cd /b && clear' Enter"]

    def test_hsplit_stacks(self) -> None:
        """Should use stacked splits for hsplit."""
        directives = _directives(build_window("s", _window("hsplit", Pane(), Pane()), _options()))
        assert _splits(directives) == [SPLIT_STACKED]

    def test_three_scenario(self) -> None:
        """Should append one pane that cds into the last declared directory."""
        window = _window("three", Pane(cwd="/a"), Pane(cwd="/b"))
        assert _directives(build_window("s", window, _options())) == [
            "rename-window editor",
            "send-keys 'cd /a && clear' Enter",
            SPLIT_STACKED,
            "send-keys 'cd /b && clear' Enter",
            SPLIT_STACKED,
            "send-keys 'cd /b && clear' Enter",
        ]

    def test_four_stacked(self) -> None:
        """Should stack twice, then select and stack again for the fourth pane."""
        directives = _directives(build_window("s", _window("four", Pane(cwd="/a")), _options()))
        assert [d for d in directives if not d.startswith("send-keys")] == [
            "rename-window editor",
            SPLIT_STACKED,
            SPLIT_STACKED,
            SELECT_LEFT,
            SPLIT_STACKED,
        ]

    def test_hthree_third_pane_not_split(self) -> None:
        """Should send the third pane's keys into the second pane's slot."""
        window = _window("hthree", Pane(cwd="/a"), Pane(cwd="/b"), Pane(cmd="top"))
        assert _directives(build_window("s", window, _options())) == [
            "rename-window editor",
            "send-keys 'cd /a && clear' Enter",
            SPLIT_STACKED,
            "send-keys 'cd /b && clear' Enter",
            "send-keys 'cd /b && clear' Enter",
            "send-keys top Enter",
        ]

    def test_hthree_with_fourth_pane(self) -> None:
        """Should select the top pane before splitting it for a fourth pane."""
        window = _window("hthree", Pane(), Pane(), Pane(), Pane(cmd="htop"))
        directives = _directives(build_window("s", window, _options()))
        assert [d for d in directives if not d.startswith("send-keys")] == [
            "rename-window editor",
            SPLIT_STACKED,
            SELECT_UP,
            SPLIT_SIDE_BY_SIDE,
        ]
        assert directives[-1] == "send-keys htop Enter"

    def test_panes_beyond_table_not_split(self) -> None:
        """Should not split for panes past the last defined index."""
        window = _window("four", *[Pane(cmd=f"echo {i}") for i in range(6)])
        directives = _directives(build_window("s", window, _options()))
        assert len(_splits(directives)) == 3
        assert directives[-1] == "send-keys 'echo 5' Enter"

    def test_unknown_layout_behaves_like_vsplit(self) -> None:
        """Should lay out unknown layout names as vsplit."""
        unknown = build_window("s", _window("threeway", Pane()), _options())
        vsplit = build_window("s", _window("vsplit", Pane()), _options())
        assert unknown == vsplit

    def test_title_translated(self) -> None:
        """Should title the window through the translator."""
        options = _options(titles=MappingTitles({"editor": "Code Editor"}))
        fragment = build_window("s", _window("single", Pane()), options)
        assert _directives(fragment)[0] == "rename-window 'Code Editor'"

    def test_untranslated_title_falls_back(self) -> None:
        """Should keep the raw name when the translator has no title."""
        options = _options(titles=MappingTitles({}))
        fragment = build_window("s", _window("single", Pane(), name="logs"), options)
        assert _directives(fragment)[0] == "rename-window logs"

    def test_missing_panes_fatal(self) -> None:
        """Should raise ProfileError when the window has no panes list."""
        with pytest.raises(ProfileError) as exc_info:
            build_window("web", Window(name="editor", layout="single"), _options())
        assert exc_info.value.window == "editor"

    def test_idempotent(self) -> None:
        """Should produce byte-identical output for the same input."""
        window = _window("hthree", Pane(host="h", cwd="/a"), Pane(cmd="top"))
        assert build_window("s", window, _options()) == build_window("s", window, _options())

    def test_debug_reports_padding(self) -> None:
        """Should describe the resolved window on the debug sink."""
        messages: list[str] = []
        build_window("web", _window("four", Pane()), _options(debug=messages.append))
        assert messages == ["web.editor: layout=four title='editor' panes=4 (padded 3)"]
