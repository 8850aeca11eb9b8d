"""Explicit engine state shared by the watcher, scheduler and sync engine.

One EngineState belongs to one workspace controller. Nothing in the sync
subsystem keeps module-level state; every operation receives the state it
works on.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from ..credentials import SyncCredentials

if TYPE_CHECKING:
    from .scheduler import RecurringTimer

logger = logging.getLogger(__name__)


@dataclass
class EngineState:
    """Mutable state of one workspace engine."""

    root: Optional[str] = None
    """Absolute path of the open workspace, None until one is opened"""

    credentials: SyncCredentials = field(default_factory=SyncCredentials)

    watches: dict[str, Any] = field(default_factory=dict)
    """Watched directory path -> watch handle"""

    timer: Optional["RecurringTimer"] = None
    """Active auto-sync timer"""

    _syncing: set[str] = field(default_factory=set, repr=False)
    _cond: threading.Condition = field(default_factory=threading.Condition, repr=False)

    def begin_sync(self, root: str, wait: bool = False) -> bool:
        """Mark a mirror of ``root`` as in flight.

        Args:
            root: Workspace root being mirrored
            wait: Block until a running mirror of the same root finishes

        Returns:
            True if the caller now owns the mirror, False if one is running
            and ``wait`` is False
        """
        with self._cond:
            if root in self._syncing:
                if not wait:
                    return False
                logger.debug(f"Waiting for running sync of {root}")
                while root in self._syncing:
                    self._cond.wait()
            self._syncing.add(root)
            return True

    def end_sync(self, root: str) -> None:
        with self._cond:
            self._syncing.discard(root)
            self._cond.notify_all()

    def is_syncing(self, root: Optional[str] = None) -> bool:
        with self._cond:
            if root is None:
                return bool(self._syncing)
            return root in self._syncing
