"""Restore-side symlink scope filter.

Builds the node filter a restore walker consults before it creates each
entry on disk. Restores run top-down, so by the time a node is checked
its parent directory may already exist, and that directory may itself
be a symlink planted by an earlier node. The filter resolves the parent
first and judges the node against where it would really land.

Symlink targets are checked syntactically, since the link does not exist
yet. A link target must equal the scope root or lie below it. Other
entries only need to be on the same branch as the scope, which lets the
scope root and its ancestors be created.
"""

import errno
import logging
import os

from scopectl.scope.diagnostics import DiagnosticsSink, Rejection, RejectionReason, log_rejection
from scopectl.scope.models import FileKind, NodeFilterFn, NodeInfo
from scopectl.scope.paths import ScopeRoot, resolve_path

logger = logging.getLogger(__name__)

GUARD_NAME = "restore-scope"


def _exists_on_disk(path: str) -> bool:
    """True unless ``lstat`` reports the path as missing.

    Any other error (e.g. permission denied) counts as present, so the
    caller goes on to resolve the path and fails closed there.
    """
    try:
        os.lstat(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        return e.errno != errno.ENOENT
    return True


def symlink_scope_node_filter(
    scope: ScopeRoot | str | os.PathLike[str],
    *,
    sink: DiagnosticsSink | None = None,
) -> NodeFilterFn:
    """Create a filter allowing only nodes that stay inside ``scope``.

    Args:
        scope: Scope root. Plain paths are canonicalized without
            requiring them to exist, since the restore creates them.
        sink: Diagnostics sink called once per rejection. Defaults to
            :func:`log_rejection`.

    Returns:
        A function ``(item_path, node) -> bool`` returning True when the
        node may be created at ``item_path``.

    Raises:
        ScopeRootError: If ``scope`` cannot be canonicalized.
    """
    if isinstance(scope, ScopeRoot):
        root = scope
    else:
        root = ScopeRoot.canonicalize(scope, must_exist=False)
    report = sink if sink is not None else log_rejection
    logger.debug("Restore scope filter active for %s", root.path)

    def reject(
        item: str,
        target: str | None,
        reason: RejectionReason,
        detail: str | None = None,
    ) -> bool:
        report(
            Rejection(
                guard=GUARD_NAME,
                item=item,
                target=target,
                boundary=root.path,
                reason=reason,
                detail=detail,
            )
        )
        return False

    def allow(item_path: str, node: NodeInfo) -> bool:
        dest_dir = os.path.dirname(os.path.normpath(item_path))

        if _exists_on_disk(dest_dir):
            resolution = resolve_path(dest_dir)
            if resolution.is_indeterminate or resolution.path is None:
                return reject(
                    item_path, None, RejectionReason.UNRESOLVABLE, resolution.error
                )

            if resolution.path != dest_dir and not root.is_compatible(resolution.path):
                return reject(item_path, resolution.path, RejectionReason.ANCESTOR_OUTSIDE_SCOPE)

            dest_dir = resolution.path

        if node.kind == FileKind.SYMLINK:
            # Relative targets may still climb out after normalization,
            # e.g. ./var/../../target -> ../target.
            target = os.path.normpath(node.link_target or "")
            if not os.path.isabs(target):
                target = os.path.normpath(os.path.join(dest_dir, target))

            if not root.is_ancestor_of(target):
                return reject(item_path, target, RejectionReason.OUTSIDE_SCOPE)
        else:
            target = os.path.join(dest_dir, os.path.basename(os.path.normpath(item_path)))
            if not root.is_compatible(target):
                return reject(item_path, target, RejectionReason.OUTSIDE_SCOPE)

        return True

    return allow
