"""Snapshot listing models and JSON persistence.

A snapshot here is only the list of tree entries a backup scan
accepted. It records layout (kinds, link targets, sizes) and is the
input to a restore walk.
"""

import os
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from tempfile import NamedTemporaryFile
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scopectl.scope.models import FileKind


class SnapshotError(Exception):
    """Base exception for snapshot errors."""


class SnapshotNotFoundError(SnapshotError):
    """Raised when a snapshot file does not exist."""


class SnapshotParseError(SnapshotError):
    """Raised when a snapshot file cannot be parsed."""


class SnapshotNode(BaseModel):
    """A single entry recorded by a backup scan.

    Attributes:
        path: POSIX path relative to the parent of the scanned root,
            so the first component is the root's own name.
        kind: Kind of the entry.
        link_target: Raw symlink target (symlinks only).
        size: Size in bytes for regular files.
        mode: Permission bits.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Annotated[str, Field(min_length=1, description="Relative POSIX path")]
    kind: Annotated[FileKind, Field(description="Kind of the entry")]
    link_target: Annotated[str | None, Field(description="Symlink target")] = None
    size: Annotated[int | None, Field(ge=0, description="Size in bytes")] = None
    mode: Annotated[int | None, Field(ge=0, description="Permission bits")] = None

    @field_validator("path")
    @classmethod
    def validate_relative(cls, value: str) -> str:
        """Reject absolute paths and paths climbing out with ``..``."""
        pure = PurePosixPath(value)
        if pure.is_absolute():
            msg = f"Snapshot path must be relative: {value}"
            raise ValueError(msg)
        if ".." in pure.parts:
            msg = f"Snapshot path must not contain '..': {value}"
            raise ValueError(msg)
        return str(pure)


class Snapshot(BaseModel):
    """A list of accepted tree entries from one backup scan.

    Attributes:
        source: Absolute path of the scanned root.
        created: Timestamp when the scan finished.
        nodes: Entries in top-down walk order.
    """

    model_config = ConfigDict(extra="forbid")

    source: Annotated[str, Field(min_length=1, description="Scanned root")]
    created: Annotated[
        datetime,
        Field(default_factory=lambda: datetime.now(UTC), description="Timestamp of the scan"),
    ]
    nodes: Annotated[
        list[SnapshotNode],
        Field(default_factory=list, description="Entries in walk order"),
    ]

    @property
    def source_parent(self) -> Path:
        """Directory that node paths are relative to."""
        return Path(self.source).parent


def load_snapshot(path: Path) -> Snapshot:
    """Load a snapshot from a JSON file.

    Raises:
        SnapshotNotFoundError: If the file doesn't exist.
        SnapshotParseError: If the content is not a valid snapshot.
        SnapshotError: If the file cannot be read.
    """
    if not path.exists():
        raise SnapshotNotFoundError(f"Snapshot not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Failed to read snapshot: {e}") from e

    try:
        return Snapshot.model_validate_json(raw)
    except ValidationError as e:
        raise SnapshotParseError(f"Invalid snapshot content: {e}") from e


def save_snapshot(snapshot: Snapshot, path: Path) -> Path:
    """Write a snapshot to a JSON file atomically.

    Raises:
        SnapshotError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(snapshot.model_dump_json(indent=2))
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SnapshotError(f"Failed to write snapshot: {e}") from e

    return path
