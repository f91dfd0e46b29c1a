"""Reference backup and restore walkers.

This module provides the tree walkers that consult the scope guards the
way a backup pipeline is expected to, plus the snapshot listing they
exchange.
"""

from scopectl.walk.restorer import Restorer, RestoreResult, RestoreStatus
from scopectl.walk.scanner import BackupScanner, ScannedEntry
from scopectl.walk.snapshot import (
    Snapshot,
    SnapshotError,
    SnapshotNode,
    SnapshotNotFoundError,
    SnapshotParseError,
    load_snapshot,
    save_snapshot,
)

__all__ = [
    "BackupScanner",
    "RestoreResult",
    "RestoreStatus",
    "Restorer",
    "ScannedEntry",
    "Snapshot",
    "SnapshotError",
    "SnapshotNode",
    "SnapshotNotFoundError",
    "SnapshotParseError",
    "load_snapshot",
    "save_snapshot",
]
