"""Tests for the restore-side symlink scope filter."""

import os
from pathlib import Path

import pytest
from scopectl.scope.diagnostics import Rejection, RejectionCollector, RejectionReason
from scopectl.scope.models import CandidateEntry, FileKind
from scopectl.scope.restore import symlink_scope_node_filter


def _link(path: str, target: str) -> CandidateEntry:
    return CandidateEntry(path=path, kind=FileKind.SYMLINK, link_target=target)


def _file(path: str) -> CandidateEntry:
    return CandidateEntry(path=path, kind=FileKind.REGULAR)


def _dir(path: str) -> CandidateEntry:
    return CandidateEntry(path=path, kind=FileKind.DIRECTORY)


@pytest.fixture
def base(tmp_path: Path) -> Path:
    """Canonical restore target with an empty scope directory."""
    resolved = tmp_path.resolve()
    (resolved / "data" / "scope").mkdir(parents=True)
    return resolved


class TestSymlinkNodes:
    """Symlink targets must stay at or below the scope root."""

    def test_relative_escape_rejected(self, base: Path) -> None:
        """A relative link climbing out of the scope is rejected."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "scope" / "link")

        assert allow(item, _link(item, "./..")) is False

    def test_absolute_root_rejected(self, base: Path) -> None:
        """A link to the filesystem root is rejected."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "scope" / "link")

        assert allow(item, _link(item, "/")) is False

    def test_target_equal_to_scope_allowed(self, base: Path) -> None:
        """A link pointing exactly at the scope root is allowed."""
        scope = base / "data" / "scope"
        allow = symlink_scope_node_filter(scope)
        item = str(base / "data" / "link")

        assert allow(item, _link(item, str(scope))) is True

    def test_relative_inside_allowed(self, base: Path) -> None:
        """A relative link staying inside the scope is allowed."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "scope" / "link")

        assert allow(item, _link(item, "sub/../file")) is True

    def test_dotted_relative_escape_rejected(self, base: Path) -> None:
        """Normalization exposes a target that climbs out after a detour."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "scope" / "link")

        assert allow(item, _link(item, "./var/../../target")) is False

    def test_link_outside_pointing_inside_allowed(self, base: Path) -> None:
        """Where a link lives does not matter, only its target."""
        scope = base / "data" / "scope"
        allow = symlink_scope_node_filter(scope)
        item = str(base / "elsewhere")

        assert allow(item, _link(item, str(scope / "file"))) is True

    def test_similar_prefix_rejected(self, base: Path) -> None:
        """A sibling whose name extends the scope name is outside."""
        scope = base / "data" / "scope"
        allow = symlink_scope_node_filter(scope)
        item = str(scope / "link")

        assert allow(item, _link(item, f"{scope}2/file")) is False

    def test_ancestor_target_rejected(self, base: Path) -> None:
        """Links may not point at an ancestor of the scope."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "scope" / "link")

        assert allow(item, _link(item, str(base / "data"))) is False


class TestOtherNodes:
    """Non-symlink entries only need to be on the scope's branch."""

    def test_file_inside_allowed(self, base: Path) -> None:
        """A regular file below the scope is allowed."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "scope" / "file")

        assert allow(item, _file(item)) is True

    def test_ancestor_directory_allowed(self, base: Path) -> None:
        """Ancestors of the scope are allowed so the scope can be created."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data")

        assert allow(item, _dir(item)) is True

    def test_scope_itself_allowed(self, base: Path) -> None:
        """The scope directory itself is allowed."""
        scope = base / "data" / "scope"
        allow = symlink_scope_node_filter(scope)

        assert allow(str(scope), _dir(str(scope))) is True

    def test_file_outside_rejected(self, base: Path) -> None:
        """A file on an unrelated branch is rejected."""
        allow = symlink_scope_node_filter(base / "data" / "scope")
        item = str(base / "data" / "other.txt")

        assert allow(item, _file(item)) is False

    def test_similar_prefix_directory_rejected(self, base: Path) -> None:
        """/data/sub2 is not on the branch of /data/sub."""
        allow = symlink_scope_node_filter(base / "data" / "sub")
        item = str(base / "data" / "sub2")

        assert allow(item, _dir(item)) is False

    def test_scope_created_later(self, tmp_path: Path) -> None:
        """The scope does not have to exist when the filter is built."""
        base = tmp_path.resolve()
        allow = symlink_scope_node_filter(base / "later" / "scope")
        item = str(base / "later" / "scope" / "file")

        assert allow(item, _file(item)) is True


class TestSymlinkedAncestors:
    """Parent directories that already exist are resolved first."""

    def test_ancestor_redirecting_outside_rejected(self, base: Path) -> None:
        """A planted link sending the parent outside the scope is caught."""
        scope = base / "data" / "scope"
        (base / "outside").mkdir()
        os.symlink(base / "outside", scope / "planted")
        seen: list[Rejection] = []
        allow = symlink_scope_node_filter(scope, sink=seen.append)
        item = str(scope / "planted" / "file")

        assert allow(item, _file(item)) is False
        assert seen[0].reason == RejectionReason.ANCESTOR_OUTSIDE_SCOPE
        assert seen[0].target == str(base / "outside")

    def test_ancestor_alias_inside_adopted(self, base: Path) -> None:
        """A parent link that stays inside is followed to its real location."""
        scope = base / "data" / "scope"
        (scope / "real").mkdir()
        os.symlink(scope / "real", scope / "alias")
        allow = symlink_scope_node_filter(scope)
        item = str(scope / "alias" / "link")

        assert allow(item, _link(item, "../file")) is True
        assert allow(item, _link(item, "../../x")) is False

    def test_dangling_ancestor_rejected(self, base: Path) -> None:
        """A parent that exists but cannot be resolved fails closed."""
        scope = base / "data" / "scope"
        os.symlink(base / "missing", scope / "dangling")
        seen: list[Rejection] = []
        allow = symlink_scope_node_filter(scope, sink=seen.append)
        item = str(scope / "dangling" / "file")

        assert allow(item, _file(item)) is False
        assert seen[0].reason == RejectionReason.UNRESOLVABLE
        assert seen[0].detail

    def test_missing_parent_checked_syntactically(self, base: Path) -> None:
        """Parents not yet created are judged by their path alone."""
        scope = base / "data" / "scope"
        allow = symlink_scope_node_filter(scope)
        item = str(scope / "new" / "deeper" / "file")

        assert allow(item, _file(item)) is True


class TestDiagnostics:
    """Rejections are reported with the computed target."""

    def test_symlink_rejection_reported(self, base: Path) -> None:
        """The sink sees the normalized absolute target and the scope."""
        scope = base / "data" / "scope"
        seen: list[Rejection] = []
        allow = symlink_scope_node_filter(scope, sink=seen.append)
        item = str(scope / "link")

        allow(item, _link(item, "./.."))

        assert len(seen) == 1
        assert seen[0].guard == "restore-scope"
        assert seen[0].reason == RejectionReason.OUTSIDE_SCOPE
        assert seen[0].target == str(base / "data")
        assert seen[0].boundary == str(scope)

    def test_empty_collector_receives_rejections(self, base: Path) -> None:
        """A fresh collector is used as the sink even though it is empty."""
        scope = base / "data" / "scope"
        collector = RejectionCollector()
        allow = symlink_scope_node_filter(scope, sink=collector)
        item = str(scope / "link")

        allow(item, _link(item, "./.."))

        assert len(collector) == 1

    def test_allowed_nodes_not_reported(self, base: Path) -> None:
        """Nothing is reported for allowed nodes."""
        seen: list[Rejection] = []
        allow = symlink_scope_node_filter(base / "data" / "scope", sink=seen.append)
        item = str(base / "data" / "scope" / "file")

        allow(item, _file(item))

        assert seen == []
