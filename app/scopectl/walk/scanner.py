"""Backup walker honoring the scope and device guards.

Walks a source tree top-down, offers every entry to the configured
rejection functions before recording it, and skips the whole subtree of
an excluded directory. Symlinks are recorded, never followed.
"""

import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from scopectl.scope.models import FileKind, RejectFn
from scopectl.walk.snapshot import Snapshot, SnapshotNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScannedEntry:
    """An entry visited during a backup scan.

    Attributes:
        path: Absolute path of the entry.
        kind: Kind of the entry.
        link_target: Raw symlink target (symlinks only).
        excluded: Whether a rejection function excluded it.
        size: Size in bytes for regular files.
        mode: Permission bits.
    """

    path: str
    kind: FileKind
    link_target: str | None
    excluded: bool
    size: int | None = None
    mode: int | None = None


class BackupScanner:
    """Walks a source tree and applies rejection functions per entry.

    Args:
        root: Directory to scan. Made absolute, not resolved.
        rejects: Rejection functions; an entry is excluded as soon as
            one of them returns True.
    """

    def __init__(self, root: str | os.PathLike[str], rejects: Sequence[RejectFn] = ()) -> None:
        self._root = os.path.abspath(os.fspath(root))
        self._rejects = tuple(rejects)

    @property
    def root(self) -> str:
        """Absolute path of the scanned root."""
        return self._root

    def scan(self) -> Iterator[ScannedEntry]:
        """Walk the tree and yield every visited entry.

        Entries are yielded parents first, siblings in sorted order.
        Excluded directories are yielded but not descended into.
        Entries that vanish or cannot be stat'ed are logged and skipped.

        Yields:
            ScannedEntry for each visited path.
        """
        yield from self._visit(self._root)

    def _visit(self, path: str) -> Iterator[ScannedEntry]:
        try:
            info = os.lstat(path)
        except OSError as e:
            logger.warning("Cannot stat %s: %s", path, e)
            return

        entry = self._classify(path, info)
        yield entry

        if entry.excluded or entry.kind != FileKind.DIRECTORY:
            return

        try:
            names = sorted(os.listdir(path))
        except OSError as e:
            logger.warning("Cannot read directory %s: %s", path, e)
            return

        for name in names:
            yield from self._visit(os.path.join(path, name))

    def _classify(self, path: str, info: os.stat_result) -> ScannedEntry:
        kind = FileKind.from_mode(info.st_mode)

        link_target: str | None = None
        if kind == FileKind.SYMLINK:
            try:
                link_target = os.readlink(path)
            except OSError as e:
                logger.warning("Cannot read symlink %s: %s", path, e)

        excluded = any(reject(path, info) for reject in self._rejects)
        if excluded:
            logger.debug("Excluded %s", path)

        return ScannedEntry(
            path=path,
            kind=kind,
            link_target=link_target,
            excluded=excluded,
            size=info.st_size if kind == FileKind.REGULAR else None,
            mode=info.st_mode & 0o7777,
        )

    def build_snapshot(self, entries: Sequence[ScannedEntry] | None = None) -> Snapshot:
        """Build a snapshot from the included entries of a scan.

        Args:
            entries: Entries from a previous :meth:`scan`. If None, a
                new scan is run.

        Returns:
            Snapshot listing every included entry.
        """
        if entries is None:
            entries = list(self.scan())

        parent = Path(self._root).parent
        nodes = [
            SnapshotNode(
                path=str(PurePosixPath(*Path(entry.path).relative_to(parent).parts)),
                kind=entry.kind,
                link_target=entry.link_target,
                size=entry.size,
                mode=entry.mode,
            )
            for entry in entries
            if not entry.excluded
        ]
        return Snapshot(source=self._root, nodes=nodes)
