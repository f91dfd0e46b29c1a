"""Shared value types for the scope guards.

This module defines the entry types handed to the guards by a tree
walker, and the call signatures the guards expose to it.
"""

import os
import stat
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class FileKind(str, Enum):
    """Kind of filesystem entry seen by a walker.

    Attributes:
        REGULAR: Regular file.
        DIRECTORY: Directory.
        SYMLINK: Symbolic link (never followed when classifying).
        OTHER: Device node, socket, FIFO or anything else.
    """

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> "FileKind":
        """Classify an ``st_mode`` value as returned by ``os.lstat``."""
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.REGULAR
        return cls.OTHER


@dataclass(frozen=True, slots=True)
class CandidateEntry:
    """A filesystem entry offered to a guard for a decision.

    Supplied fresh per call; guards keep no reference to it.

    Attributes:
        path: Absolute filesystem path of the entry.
        kind: Kind of the entry.
        link_target: Raw symlink target, only meaningful for symlinks.
    """

    path: str
    kind: FileKind
    link_target: str | None = None

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.link_target is not None and self.kind != FileKind.SYMLINK:
            msg = f"Only symlinks carry a link target, got kind {self.kind.value}"
            raise ValueError(msg)


class NodeInfo(Protocol):
    """What the restore filter needs to know about an archived node."""

    @property
    def kind(self) -> FileKind: ...

    @property
    def link_target(self) -> str | None: ...


# Backup-side predicate: returns True when the entry must be excluded.
RejectFn = Callable[[str, os.stat_result | None], bool]

# Restore-side predicate: returns True when the node may be created.
NodeFilterFn = Callable[[str, NodeInfo], bool]
