"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import io
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest
from rich.console import Console
from scopectl.cli.commands import check, restore, scan
from scopectl.utils.formatting import THEME

# Symlink-heavy tests rely on POSIX semantics.
if sys.platform == "win32":
    collect_ignore_glob = ["*"]


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and state at a temporary directory."""
    xdg = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(xdg / "state"))
    return xdg


@pytest.fixture
def cli_console(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Send command output to a wide in-memory console so tables are not truncated."""
    buffer = io.StringIO()
    wide = Console(theme=THEME, file=buffer, width=240, color_system=None)
    for module in (check, restore, scan):
        monkeypatch.setattr(module, "console", wide)
    return buffer


@dataclass(frozen=True)
class SymlinkTree:
    """A temporary tree with symlinks pointing in and out of ``foodir``.

    Attributes:
        root: Canonical path of the tree directory.
        scope: Canonical path of ``root/foodir``.
        symlinks: Relative symlink path -> whether a backup must include it.
    """

    root: Path
    scope: Path
    symlinks: dict[str, bool]

    def path(self, relative: str) -> str:
        """Absolute path of an entry given relative to the tree root."""
        return str(self.root / relative)


@pytest.fixture
def symlink_tree(tmp_path: Path) -> SymlinkTree:
    """Build the foodir/bardir tree with inside and outside symlinks."""
    root = tmp_path.resolve() / "tree"

    for relative in (
        "42",
        "foodir/foo",
        "foodir/foosub/underfoo",
        "bardir/bar",
        "bardir/barsub/underbar",
    ):
        file_path = root / relative
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(relative)

    # (link path, target, included) - some targets must stay relative.
    links = [
        ("123", f"{root}/foodir/foo", True),
        ("1234", "..", False),
        ("12345", "../..", False),
        ("foodir/insidefoo", f"{root}/foodir/foosub/underfoo", True),
        ("foodir/outsidefoo2", f"{root}/foodir/..", False),
        ("foodir/outsidefoo3", "..", False),
        ("foodir/outsidefoo4", str(root), False),
        ("bardir/insidefoo", f"{root}/foodir/foo", True),
        ("bardir/insidebar", f"{root}/bardir", False),
        ("bardir/outsidebar", f"{root}/bardir/../foodir/insidefoo", True),
    ]
    for link, target, _ in links:
        os.symlink(target, root / link)

    return SymlinkTree(
        root=root,
        scope=(root / "foodir").resolve(),
        symlinks={link: included for link, _, included in links},
    )
