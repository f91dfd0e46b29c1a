"""Path canonicalization and scope containment.

Containment is decided on path components, never on raw string
prefixes: ``/srv/data`` contains ``/srv/data/x`` but not ``/srv/data2``.
Every symlink that can be resolved on disk is resolved before a path
is compared, so a string that merely looks inside a scope is not
trusted on its own.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from scopectl.scope.errors import ScopeRootError


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving every symlink component of a path.

    Exactly one of ``path`` and ``error`` is set. An indeterminate
    resolution must be treated as a rejection by every caller.

    Attributes:
        path: Fully resolved absolute path, when resolution succeeded.
        error: Why the path could not be resolved, otherwise.
    """

    path: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate that exactly one outcome is set."""
        if (self.path is None) == (self.error is None):
            msg = "Resolution needs exactly one of path or error"
            raise ValueError(msg)

    @classmethod
    def resolved(cls, path: str) -> "Resolution":
        """Create a successful resolution."""
        return cls(path=path)

    @classmethod
    def indeterminate(cls, reason: str) -> "Resolution":
        """Create a resolution whose target could not be determined."""
        return cls(error=reason)

    @property
    def is_indeterminate(self) -> bool:
        """True when the effective location is unknown."""
        return self.path is None


def resolve_path(path: str | os.PathLike[str]) -> Resolution:
    """Resolve every symlink in ``path`` to its effective on-disk location.

    Broken links, missing intermediate directories, permission errors
    and symlink loops all yield an indeterminate resolution. Results
    are not cached.

    Args:
        path: Path to resolve. Relative paths are taken from the cwd.

    Returns:
        Resolution with either the canonical path or an error reason.
    """
    try:
        resolved = Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        return Resolution.indeterminate(str(e) or type(e).__name__)
    return Resolution.resolved(str(resolved))


def split_components(path: str | os.PathLike[str]) -> tuple[str, ...]:
    """Split a path into normalized components.

    ``.`` and ``..`` segments are collapsed syntactically first, so
    ``/a/b/../c`` yields ``("/", "a", "c")``.
    """
    return PurePath(os.path.normpath(os.fspath(path))).parts


def _is_prefix(prefix: tuple[str, ...], parts: tuple[str, ...]) -> bool:
    return len(prefix) <= len(parts) and parts[: len(prefix)] == prefix


def is_within(root: str | os.PathLike[str], candidate: str | os.PathLike[str]) -> bool:
    """Check that ``candidate`` equals ``root`` or lies below it.

    Purely syntactic: neither path is resolved.
    """
    return _is_prefix(split_components(root), split_components(candidate))


def is_prefix_compatible(a: str | os.PathLike[str], b: str | os.PathLike[str]) -> bool:
    """Check that one path is an ancestor of (or equal to) the other.

    Purely syntactic: neither path is resolved.
    """
    parts_a = split_components(a)
    parts_b = split_components(b)
    return _is_prefix(parts_a, parts_b) or _is_prefix(parts_b, parts_a)


def contains(root: str | os.PathLike[str], candidate: str | os.PathLike[str]) -> bool:
    """Resolve ``candidate`` and test it for compatibility with ``root``.

    ``root`` is expected to be canonical already. A candidate that
    cannot be resolved is never contained.

    Args:
        root: Canonical scope directory.
        candidate: Path to resolve and test.

    Returns:
        True if the resolved candidate and root are prefix-compatible.
    """
    resolution = resolve_path(candidate)
    if resolution.is_indeterminate or resolution.path is None:
        return False
    return is_prefix_compatible(root, resolution.path)


@dataclass(frozen=True, slots=True)
class ScopeRoot:
    """Canonical directory outside of which nothing may resolve.

    Only create instances through :meth:`canonicalize`; the stored path
    is never re-resolved afterwards.

    Attributes:
        path: Absolute, symlink-resolved directory path.
        parts: Components of ``path``.
    """

    path: str
    parts: tuple[str, ...] = field(repr=False)

    @classmethod
    def canonicalize(
        cls,
        path: str | os.PathLike[str],
        *,
        must_exist: bool = True,
    ) -> "ScopeRoot":
        """Build a scope root from a possibly relative, possibly symlinked path.

        Args:
            path: Scope directory. Relative paths are made absolute
                against the current working directory.
            must_exist: If True, the whole path must resolve on disk.
                If False, the longest existing prefix is resolved and
                the rest is appended, which suits restore targets that
                are created later.

        Returns:
            A ScopeRoot holding the canonical path.

        Raises:
            ScopeRootError: If the path is empty or cannot be resolved.
        """
        raw = os.fspath(path)
        if not raw:
            msg = "Scope root cannot be empty"
            raise ScopeRootError(msg)

        try:
            resolved = Path(os.path.abspath(raw)).resolve(strict=must_exist)
        except (OSError, RuntimeError) as e:
            msg = f"Cannot resolve scope root {raw}: {e}"
            raise ScopeRootError(msg) from e

        if must_exist and not resolved.is_dir():
            msg = f"Scope root is not a directory: {resolved}"
            raise ScopeRootError(msg)

        canonical = str(resolved)
        return cls(path=canonical, parts=split_components(canonical))

    def is_compatible(self, path: str | os.PathLike[str]) -> bool:
        """Bidirectional prefix test of an already canonical path."""
        parts = split_components(path)
        return _is_prefix(self.parts, parts) or _is_prefix(parts, self.parts)

    def is_ancestor_of(self, path: str | os.PathLike[str]) -> bool:
        """One-directional test: ``path`` equals the root or lies below it."""
        return _is_prefix(self.parts, split_components(path))

    def contains(self, candidate: str | os.PathLike[str]) -> bool:
        """Resolve ``candidate`` on disk and test compatibility with this root."""
        return contains(self.path, candidate)

    def __str__(self) -> str:
        return self.path
