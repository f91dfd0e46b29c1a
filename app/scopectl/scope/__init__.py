"""Scope and device boundary guards.

This package provides the predicates a backup or restore walker consults
per entry: the symlink scope guards for both directions, the device
boundary registry, and the shared containment helpers they rely on.
"""

from scopectl.scope.backup import reject_symlinks_outside_scope
from scopectl.scope.devices import DeviceBoundaryMap, reject_by_device
from scopectl.scope.diagnostics import (
    DiagnosticsSink,
    Rejection,
    RejectionCollector,
    RejectionReason,
    log_rejection,
)
from scopectl.scope.errors import DeviceMapError, ScopeError, ScopeRootError
from scopectl.scope.models import CandidateEntry, FileKind, NodeFilterFn, NodeInfo, RejectFn
from scopectl.scope.paths import (
    Resolution,
    ScopeRoot,
    contains,
    is_prefix_compatible,
    is_within,
    resolve_path,
    split_components,
)
from scopectl.scope.restore import symlink_scope_node_filter

__all__ = [
    "CandidateEntry",
    "DeviceBoundaryMap",
    "DeviceMapError",
    "DiagnosticsSink",
    "FileKind",
    "NodeFilterFn",
    "NodeInfo",
    "RejectFn",
    "Rejection",
    "RejectionCollector",
    "RejectionReason",
    "Resolution",
    "ScopeError",
    "ScopeRoot",
    "ScopeRootError",
    "contains",
    "is_prefix_compatible",
    "is_within",
    "log_rejection",
    "reject_by_device",
    "reject_symlinks_outside_scope",
    "resolve_path",
    "split_components",
    "symlink_scope_node_filter",
]
