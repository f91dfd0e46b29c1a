"""Rejection diagnostics.

Guards report every rejection to a sink so operators can see which
target escaped which boundary. Sinks are observational only and never
change a decision.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    """Why a guard rejected an entry.

    Attributes:
        UNRESOLVABLE: The symlink chain could not be resolved.
        OUTSIDE_SCOPE: The effective target lies outside the scope root.
        ANCESTOR_OUTSIDE_SCOPE: A parent directory redirects outside the scope.
        DEVICE_MISMATCH: The entry lives on a device that was not allowed.
    """

    UNRESOLVABLE = "unresolvable"
    OUTSIDE_SCOPE = "outside_scope"
    ANCESTOR_OUTSIDE_SCOPE = "ancestor_outside_scope"
    DEVICE_MISMATCH = "device_mismatch"


@dataclass(frozen=True, slots=True)
class Rejection:
    """A single rejection decision.

    Attributes:
        guard: Name of the guard that rejected (e.g. "backup-scope").
        item: Path of the entry as given by the walker.
        target: Resolved or computed target, when one is known.
        boundary: Active scope root, or the expected device id.
        reason: Rejection classification.
        detail: Why a resolution or stat failed, when one did.
    """

    guard: str
    item: str
    target: str | None
    boundary: str
    reason: RejectionReason
    detail: str | None = None

    def as_line(self) -> str:
        """Render the rejection as one structured log line."""
        line = (
            f"guard={self.guard} reason={self.reason.value} item={self.item!r} "
            f"target={self.target!r} boundary={self.boundary!r}"
        )
        if self.detail is not None:
            line += f" detail={self.detail!r}"
        return line


DiagnosticsSink = Callable[[Rejection], None]


def log_rejection(rejection: Rejection) -> None:
    """Default sink: emit one debug log record per rejection."""
    logger.debug("rejected %s", rejection.as_line())


class RejectionCollector:
    """Sink that keeps rejections in memory for later reporting.

    Each rejection is also forwarded to :func:`log_rejection`. Safe to
    share between concurrent walker threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rejections: list[Rejection] = []

    def __call__(self, rejection: Rejection) -> None:
        log_rejection(rejection)
        with self._lock:
            self._rejections.append(rejection)

    @property
    def rejections(self) -> list[Rejection]:
        """Snapshot of the rejections collected so far."""
        with self._lock:
            return list(self._rejections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rejections)
