"""Device boundary registry.

Records which device each explicitly registered root lives on and
answers whether a walker may descend into an entry on a given device.
A path inherits the device expected at its nearest registered ancestor,
so any device change below a boundary is caught without registering the
exact subpath.
"""

import bisect
import logging
import os
import stat
from collections.abc import Iterable, Iterator

from scopectl.scope.diagnostics import DiagnosticsSink, Rejection, RejectionReason, log_rejection
from scopectl.scope.errors import DeviceMapError
from scopectl.scope.models import RejectFn
from scopectl.scope.paths import split_components

logger = logging.getLogger(__name__)

GUARD_NAME = "device-boundary"


class DeviceBoundaryMap:
    """Immutable registry of ``path -> device id`` checkpoints.

    Entries are kept as a sorted tuple of component sequences so that
    each candidate ancestor of a queried path is found by binary search.
    The map is never mutated after construction and may be shared
    between concurrent walkers.
    """

    __slots__ = ("_keys", "_device_ids")

    def __init__(self, entries: Iterable[tuple[tuple[str, ...], int]] = ()) -> None:
        ordered = sorted(entries)
        self._keys: tuple[tuple[str, ...], ...] = tuple(key for key, _ in ordered)
        self._device_ids: tuple[int, ...] = tuple(device_id for _, device_id in ordered)

    @classmethod
    def build(cls, pairs: Iterable[tuple[str | os.PathLike[str], int]]) -> "DeviceBoundaryMap":
        """Build a registry from ``(path, device id)`` pairs.

        Args:
            pairs: Absolute paths and the device ids they live on.

        Returns:
            The populated registry.

        Raises:
            DeviceMapError: If a path is relative, a device id is not a
                non-negative integer, or a path is registered twice with
                different ids.
        """
        registry: dict[tuple[str, ...], int] = {}
        for raw_path, device_id in pairs:
            path = os.fspath(raw_path)
            if not os.path.isabs(path):
                msg = f"Device boundary must be an absolute path: {path!r}"
                raise DeviceMapError(msg)
            if isinstance(device_id, bool) or not isinstance(device_id, int) or device_id < 0:
                msg = f"Invalid device id for {path}: {device_id!r}"
                raise DeviceMapError(msg)

            key = split_components(path)
            existing = registry.get(key)
            if existing is not None and existing != device_id:
                msg = f"Conflicting device ids for {path}: {existing} and {device_id}"
                raise DeviceMapError(msg)
            registry[key] = device_id

        return cls(registry.items())

    @classmethod
    def from_paths(cls, paths: Iterable[str | os.PathLike[str]]) -> "DeviceBoundaryMap":
        """Build a registry by stat'ing each allowed root.

        Relative paths are made absolute against the working directory.

        Raises:
            DeviceMapError: If a root cannot be stat'ed.
        """
        pairs: list[tuple[str, int]] = []
        for raw_path in paths:
            path = os.path.abspath(os.fspath(raw_path))
            try:
                device_id = os.lstat(path).st_dev
            except OSError as e:
                msg = f"Cannot determine device of {path}: {e}"
                raise DeviceMapError(msg) from e
            logger.debug("Registered device boundary %s (device %d)", path, device_id)
            pairs.append((path, device_id))
        return cls.build(pairs)

    def _lookup(self, parts: tuple[str, ...]) -> int | None:
        for depth in range(len(parts), 0, -1):
            prefix = parts[:depth]
            index = bisect.bisect_left(self._keys, prefix)
            if index < len(self._keys) and self._keys[index] == prefix:
                return self._device_ids[index]
        return None

    def expected_device(self, item_path: str | os.PathLike[str]) -> int:
        """Return the device id recorded at the nearest registered ancestor.

        Raises:
            DeviceMapError: If no registered boundary is an ancestor of
                the path.
        """
        device_id = self._lookup(split_components(item_path))
        if device_id is None:
            msg = f"No device boundary registered above {os.fspath(item_path)}"
            raise DeviceMapError(msg)
        return device_id

    def is_allowed(self, item_path: str | os.PathLike[str], device_id: int) -> bool:
        """Check whether an entry on ``device_id`` may be descended into.

        Raises:
            DeviceMapError: If the path is not below any registered boundary.
        """
        return self.expected_device(item_path) == device_id

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        key = split_components(path)
        index = bisect.bisect_left(self._keys, key)
        return index < len(self._keys) and self._keys[index] == key

    def __iter__(self) -> Iterator[tuple[str, int]]:
        for key, device_id in zip(self._keys, self._device_ids, strict=True):
            yield os.path.join(*key), device_id

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{path!r}: {device_id}" for path, device_id in self)
        return f"DeviceBoundaryMap({{{pairs}}})"


def reject_by_device(
    device_map: DeviceBoundaryMap,
    *,
    sink: DiagnosticsSink | None = None,
) -> RejectFn:
    """Create a rejection function that keeps a walk on its allowed devices.

    Entries on an unexpected device are excluded, with one exception: a
    directory whose parent is on an allowed device is a mount point and
    is kept, so the archive still records the (empty) mount directory.

    Args:
        device_map: Registry of allowed boundaries.
        sink: Diagnostics sink called once per exclusion.

    Returns:
        A function ``(path, info) -> bool`` returning True when the
        entry must be excluded. When ``info`` is None the path is
        ``lstat``'ed; a failing ``lstat`` excludes the entry.
    """
    report = sink if sink is not None else log_rejection

    def reject(path: str, info: os.stat_result | None = None) -> bool:
        item = os.path.normpath(path)
        if info is None:
            try:
                info = os.lstat(item)
            except OSError as e:
                report(
                    Rejection(
                        guard=GUARD_NAME,
                        item=path,
                        target=None,
                        boundary="unknown",
                        reason=RejectionReason.UNRESOLVABLE,
                        detail=str(e),
                    )
                )
                return True

        expected = device_map.expected_device(item)
        if info.st_dev == expected:
            return False

        detail: str | None = None
        if stat.S_ISDIR(info.st_mode):
            parent = os.path.dirname(item)
            try:
                parent_info = os.lstat(parent)
            except OSError as e:
                detail = f"cannot stat parent {parent}: {e}"
            else:
                if parent != item and device_map.is_allowed(parent, parent_info.st_dev):
                    logger.debug("Keeping mount point %s (device %d)", item, info.st_dev)
                    return False

        report(
            Rejection(
                guard=GUARD_NAME,
                item=path,
                target=f"device {info.st_dev}",
                boundary=f"device {expected}",
                reason=RejectionReason.DEVICE_MISMATCH,
                detail=detail,
            )
        )
        return True

    return reject
