"""Tests for snapshot models and persistence."""

from pathlib import Path

import pytest
from pydantic import ValidationError
from scopectl.scope.models import FileKind
from scopectl.walk.snapshot import (
    Snapshot,
    SnapshotNode,
    SnapshotNotFoundError,
    SnapshotParseError,
    load_snapshot,
    save_snapshot,
)


class TestSnapshotNode:
    """Tests for SnapshotNode validation."""

    def test_valid_node(self) -> None:
        """A relative path with a known kind is accepted."""
        node = SnapshotNode(path="src/link", kind=FileKind.SYMLINK, link_target="../x")
        assert node.path == "src/link"

    def test_absolute_path_rejected(self) -> None:
        """Absolute node paths are rejected."""
        with pytest.raises(ValidationError, match="must be relative"):
            SnapshotNode(path="/etc/passwd", kind=FileKind.REGULAR)

    def test_parent_segments_rejected(self) -> None:
        """Paths climbing out with '..' are rejected."""
        with pytest.raises(ValidationError, match="must not contain"):
            SnapshotNode(path="src/../../etc", kind=FileKind.REGULAR)

    def test_negative_size_rejected(self) -> None:
        """Sizes cannot be negative."""
        with pytest.raises(ValidationError):
            SnapshotNode(path="src/f", kind=FileKind.REGULAR, size=-1)

    def test_extra_fields_rejected(self) -> None:
        """Unknown fields are not allowed."""
        with pytest.raises(ValidationError):
            SnapshotNode.model_validate({"path": "a", "kind": "regular", "owner": "root"})


class TestSnapshotIO:
    """Tests for load_snapshot and save_snapshot."""

    def test_save_and_load(self, tmp_path: Path) -> None:
        """A saved snapshot loads back with the same nodes."""
        snapshot = Snapshot(
            source="/srv/src",
            nodes=[
                SnapshotNode(path="src", kind=FileKind.DIRECTORY, mode=0o755),
                SnapshotNode(path="src/f", kind=FileKind.REGULAR, size=3, mode=0o644),
            ],
        )
        target = tmp_path / "out" / "snapshot.json"

        saved = save_snapshot(snapshot, target)
        loaded = load_snapshot(saved)

        assert loaded.nodes == snapshot.nodes
        assert loaded.source_parent == Path("/srv")
        assert not list(target.parent.glob("*.tmp"))

    def test_load_missing(self, tmp_path: Path) -> None:
        """A missing file raises SnapshotNotFoundError."""
        with pytest.raises(SnapshotNotFoundError):
            load_snapshot(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        """Garbage content raises SnapshotParseError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(SnapshotParseError):
            load_snapshot(path)

    def test_load_rejects_escaping_node(self, tmp_path: Path) -> None:
        """A snapshot with a '..' node path is refused at load time."""
        path = tmp_path / "evil.json"
        path.write_text(
            '{"source": "/srv/src", "created": "2024-01-01T00:00:00Z",'
            ' "nodes": [{"path": "../etc/passwd", "kind": "regular"}]}'
        )

        with pytest.raises(SnapshotParseError):
            load_snapshot(path)
