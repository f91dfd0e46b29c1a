"""Exceptions raised while setting up scope and device guards.

Resolution failures during a walk are never raised: they are mapped to
rejection by the guards. Only construction problems surface here.
"""


class ScopeError(Exception):
    """Base exception for scope guard errors."""


class ScopeRootError(ScopeError):
    """Raised when a scope root cannot be canonicalized."""


class DeviceMapError(ScopeError):
    """Raised for a malformed device registry or an unknown boundary."""
