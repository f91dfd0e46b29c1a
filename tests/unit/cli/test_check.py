"""Unit tests for the check commands."""

import io
from pathlib import Path
from typing import Any

from scopectl.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestCheckBackup:
    """Tests for scopectl check backup."""

    def test_allowed(self, symlink_tree: Any) -> None:
        """A link into the scope is allowed."""
        result = runner.invoke(
            app, ["check", "backup", symlink_tree.path("123"), "--scope", str(symlink_tree.scope)]
        )

        assert result.exit_code == 0, result.output
        assert "allowed" in result.output

    def test_rejected(self, symlink_tree: Any) -> None:
        """A link to an ancestor of the scope is rejected with a reason."""
        result = runner.invoke(
            app, ["check", "backup", symlink_tree.path("1234"), "--scope", str(symlink_tree.scope)]
        )

        assert result.exit_code == 1
        assert "rejected" in result.output

    def test_rejection_table_names_reason(
        self, symlink_tree: Any, cli_console: io.StringIO
    ) -> None:
        """The rejection table shows the reason and the scope boundary."""
        result = runner.invoke(
            app, ["check", "backup", symlink_tree.path("1234"), "--scope", str(symlink_tree.scope)]
        )

        output = cli_console.getvalue()
        assert result.exit_code == 1
        assert "Rejection" in output
        assert "outside_scope" in output
        assert str(symlink_tree.scope) in output

    def test_missing_scope(self, tmp_path: Path) -> None:
        """A missing scope is a usage error."""
        result = runner.invoke(
            app, ["check", "backup", str(tmp_path), "--scope", str(tmp_path / "missing")]
        )

        assert result.exit_code == 2


class TestCheckRestore:
    """Tests for scopectl check restore."""

    def test_symlink_escape_rejected(self, tmp_path: Path) -> None:
        """A relative link climbing out is rejected."""
        scope = tmp_path / "scope"
        scope.mkdir()

        result = runner.invoke(
            app,
            [
                "check",
                "restore",
                str(scope / "link"),
                "--scope",
                str(scope),
                "--kind",
                "symlink",
                "--link-target",
                "./..",
            ],
        )

        assert result.exit_code == 1
        assert "rejected" in result.output

    def test_regular_file_inside_allowed(self, tmp_path: Path) -> None:
        """Regular files inside the scope are allowed."""
        scope = tmp_path / "scope"

        result = runner.invoke(
            app, ["check", "restore", str(scope / "file"), "--scope", str(scope)]
        )

        assert result.exit_code == 0, result.output
        assert "allowed" in result.output

    def test_link_target_requires_symlink_kind(self, tmp_path: Path) -> None:
        """A link target on a non-symlink entry is a usage error."""
        result = runner.invoke(
            app,
            [
                "check",
                "restore",
                str(tmp_path / "file"),
                "--scope",
                str(tmp_path),
                "--link-target",
                "x",
            ],
        )

        assert result.exit_code == 2
        assert "Only symlinks carry a link target" in result.output

    def test_rejection_table_names_reason(self, tmp_path: Path, cli_console: io.StringIO) -> None:
        """An escaping link target is reported as outside the scope."""
        scope = tmp_path / "scope"
        scope.mkdir()

        result = runner.invoke(
            app,
            [
                "check",
                "restore",
                str(scope / "link"),
                "--scope",
                str(scope),
                "--kind",
                "symlink",
                "--link-target",
                "./..",
            ],
        )

        output = cli_console.getvalue()
        assert result.exit_code == 1
        assert "Rejection" in output
        assert "outside_scope" in output
