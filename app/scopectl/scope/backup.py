"""Backup-side symlink scope guard.

Builds the rejection function a backup walker consults for every entry
it finds on the live filesystem. Each path is fully resolved, so the
check covers both a symlink pointing out of scope and an entry reached
through a symlinked ancestor directory. The resolved path must equal the
scope root or lie below it; resolving to an ancestor of the root is an
escape like any other.
"""

import logging
import os

from scopectl.scope.diagnostics import DiagnosticsSink, Rejection, RejectionReason, log_rejection
from scopectl.scope.models import RejectFn
from scopectl.scope.paths import ScopeRoot, resolve_path

logger = logging.getLogger(__name__)

GUARD_NAME = "backup-scope"


def reject_symlinks_outside_scope(
    scope: ScopeRoot | str | os.PathLike[str],
    *,
    sink: DiagnosticsSink | None = None,
) -> RejectFn:
    """Create a rejection function for entries resolving outside ``scope``.

    Args:
        scope: Scope root. Plain paths are canonicalized and must exist.
        sink: Diagnostics sink called once per exclusion. Defaults to
            :func:`log_rejection`.

    Returns:
        A function ``(path, info) -> bool`` returning True when the
        entry must be excluded. ``info`` is accepted for walker
        compatibility and not used.

    Raises:
        ScopeRootError: If ``scope`` cannot be canonicalized.
    """
    root = scope if isinstance(scope, ScopeRoot) else ScopeRoot.canonicalize(scope)
    report = sink if sink is not None else log_rejection
    logger.debug("Backup scope guard active for %s", root.path)

    def reject(path: str, info: os.stat_result | None = None) -> bool:
        resolution = resolve_path(path)
        if resolution.is_indeterminate or resolution.path is None:
            report(
                Rejection(
                    guard=GUARD_NAME,
                    item=path,
                    target=None,
                    boundary=root.path,
                    reason=RejectionReason.UNRESOLVABLE,
                    detail=resolution.error,
                )
            )
            return True

        if not root.is_ancestor_of(resolution.path):
            report(
                Rejection(
                    guard=GUARD_NAME,
                    item=path,
                    target=resolution.path,
                    boundary=root.path,
                    reason=RejectionReason.OUTSIDE_SCOPE,
                )
            )
            return True

        return False

    return reject
