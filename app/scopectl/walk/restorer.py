"""Restore walker honoring the restore node filters.

Materializes snapshot nodes under a target directory in top-down order.
Every node filter is consulted before an entry is created; a rejected
entry is not created and the walk continues with its siblings. Nothing
is created below a directory that was rejected or could not be made.
"""

import logging
import os
import shutil
import stat
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from scopectl.scope.models import FileKind, NodeFilterFn
from scopectl.walk.snapshot import Snapshot, SnapshotNode

logger = logging.getLogger(__name__)


class RestoreStatus(str, Enum):
    """Outcome of restoring a single node."""

    RESTORED = "restored"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass(frozen=True, slots=True)
class RestoreResult:
    """Result of restoring a single snapshot node.

    Attributes:
        path: Absolute destination path of the node.
        kind: Kind of the node.
        status: What happened to it.
        error: Error or skip reason, None on success.
    """

    path: str
    kind: FileKind
    status: RestoreStatus
    error: str | None = None

    @property
    def success(self) -> bool:
        """False only when creating the entry failed."""
        return self.status != RestoreStatus.FAILED


class Restorer:
    """Recreates a snapshot's tree under a target directory.

    Args:
        target: Directory the snapshot is restored into.
        filters: Node filters; a node is created only when all allow it.
        dry_run: If True, consult the filters but create nothing.
    """

    def __init__(
        self,
        target: str | os.PathLike[str],
        filters: Sequence[NodeFilterFn] = (),
        *,
        dry_run: bool = False,
    ) -> None:
        self._target = Path(os.path.abspath(os.fspath(target)))
        self._filters = tuple(filters)
        self._dry_run = dry_run

    def restore(self, snapshot: Snapshot) -> list[RestoreResult]:
        """Restore every node of ``snapshot`` and report per-node results.

        Regular file content is copied from the snapshot source when the
        source file still exists, otherwise the file is created empty.
        Directory permissions are applied after all nodes are written.

        Args:
            snapshot: Snapshot to restore, nodes in top-down order.

        Returns:
            One RestoreResult per snapshot node.
        """
        if not self._dry_run:
            self._target.mkdir(parents=True, exist_ok=True)

        results: list[RestoreResult] = []
        blocked: set[PurePosixPath] = set()
        dir_modes: list[tuple[Path, int]] = []

        for node in snapshot.nodes:
            relative = PurePosixPath(node.path)
            dest = self._target.joinpath(*relative.parts)

            if any(parent in blocked for parent in relative.parents):
                if node.kind == FileKind.DIRECTORY:
                    blocked.add(relative)
                results.append(
                    RestoreResult(
                        path=str(dest),
                        kind=node.kind,
                        status=RestoreStatus.SKIPPED,
                        error="Parent directory was not restored",
                    )
                )
                continue

            if not all(allow(str(dest), node) for allow in self._filters):
                logger.info("Not restoring %s: rejected by node filter", dest)
                if node.kind == FileKind.DIRECTORY:
                    blocked.add(relative)
                results.append(
                    RestoreResult(path=str(dest), kind=node.kind, status=RestoreStatus.REJECTED)
                )
                continue

            if self._dry_run:
                results.append(
                    RestoreResult(path=str(dest), kind=node.kind, status=RestoreStatus.DRY_RUN)
                )
                continue

            result = self._restore_node(snapshot, node, relative, dest)
            if result.status != RestoreStatus.RESTORED and node.kind == FileKind.DIRECTORY:
                blocked.add(relative)
            elif node.kind == FileKind.DIRECTORY and node.mode is not None:
                dir_modes.append((dest, node.mode))
            results.append(result)

        # Deepest first, so a read-only parent does not block its children.
        for path, mode in reversed(dir_modes):
            try:
                os.chmod(path, mode)
            except OSError as e:
                logger.warning("Cannot set mode of %s: %s", path, e)

        return results

    def _restore_node(
        self,
        snapshot: Snapshot,
        node: SnapshotNode,
        relative: PurePosixPath,
        dest: Path,
    ) -> RestoreResult:
        try:
            if node.kind == FileKind.DIRECTORY:
                if dest.is_symlink():
                    dest.unlink()
                dest.mkdir(exist_ok=True)
            elif node.kind == FileKind.SYMLINK:
                self._remove_existing(dest)
                os.symlink(node.link_target or "", dest)
            elif node.kind == FileKind.REGULAR:
                self._remove_existing(dest)
                self._write_file(snapshot.source_parent.joinpath(*relative.parts), dest)
                if node.mode is not None:
                    os.chmod(dest, node.mode)
            else:
                return RestoreResult(
                    path=str(dest),
                    kind=node.kind,
                    status=RestoreStatus.SKIPPED,
                    error="Special files are not restored",
                )
        except OSError as e:
            logger.warning("Failed to restore %s: %s", dest, e)
            return RestoreResult(
                path=str(dest), kind=node.kind, status=RestoreStatus.FAILED, error=str(e)
            )

        logger.debug("Restored %s %s", node.kind.value, dest)
        return RestoreResult(path=str(dest), kind=node.kind, status=RestoreStatus.RESTORED)

    @staticmethod
    def _remove_existing(dest: Path) -> None:
        """Unlink a previous file or symlink so it is never written through."""
        if dest.is_symlink() or dest.is_file():
            dest.unlink()

    @staticmethod
    def _write_file(source: Path, dest: Path) -> None:
        try:
            source_mode = os.lstat(source).st_mode
        except FileNotFoundError:
            source_mode = None

        if source_mode is not None and stat.S_ISREG(source_mode):
            shutil.copyfile(source, dest, follow_symlinks=False)
        else:
            # Exclusive create: never follow a link placed at dest meanwhile.
            with open(dest, "xb"):
                pass
