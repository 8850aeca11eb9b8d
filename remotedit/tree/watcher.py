"""Directory watching that keeps the workspace snapshot current.

Each directory of the workspace gets its own non-recursive watchdog watch.
Filesystem events are queued and handled by a single dispatcher thread,
which rebuilds the snapshot, hands it to the subscribers and arms watches on
directories that appeared.
"""

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..sync.state import EngineState
from .snapshot import TreeNode, build_tree

logger = logging.getLogger(__name__)

MUTATION_EVENTS = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}
)

SnapshotListener = Callable[[TreeNode], None]


@dataclass(frozen=True)
class TreeChangeEvent:
    """A filesystem mutation reported for a watched directory."""

    kind: str
    path: str
    is_directory: bool = False
    dest_path: Optional[str] = None

    @property
    def target(self) -> str:
        """Path the event leaves behind (destination for moves)."""
        return self.dest_path or self.path


class _QueueingHandler(FileSystemEventHandler):
    """Forwards watchdog events to the watcher's queue."""

    def __init__(self, events: "queue.Queue[Optional[TreeChangeEvent]]"):
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in MUTATION_EVENTS:
            return
        dest = getattr(event, "dest_path", None) or None
        self._events.put(
            TreeChangeEvent(
                kind=event.event_type,
                path=os.fsdecode(event.src_path),
                is_directory=event.is_directory,
                dest_path=os.fsdecode(dest) if dest else None,
            )
        )


def _is_within(path: str, root: str) -> bool:
    root = os.path.normpath(root)
    path = os.path.normpath(path)
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


class ChangeWatcher:
    """Watches every directory of the workspace in ``state.root``.

    The set of active watches lives in ``state.watches``. Watch failures are
    never raised: a directory that cannot be watched simply stops producing
    refreshes until the next manual refresh.

    Examples:
        >>> watcher = ChangeWatcher(state, on_snapshot=print)
        >>> watcher.start()
        >>> watcher.arm_recursive(state.root)
    """

    def __init__(
        self,
        state: EngineState,
        observer: Optional[Any] = None,
        on_snapshot: Optional[SnapshotListener] = None,
    ):
        """Initialize the watcher.

        Args:
            state: Engine state providing the root and holding the watch set
            observer: watchdog observer (a new Observer if not provided)
            on_snapshot: Optional first snapshot subscriber
        """
        self.state = state
        self.observer = observer if observer is not None else Observer()
        self._events: "queue.Queue[Optional[TreeChangeEvent]]" = queue.Queue()
        self._handler = _QueueingHandler(self._events)
        self._listeners: list[SnapshotListener] = []
        self._lock = threading.RLock()
        self._dispatcher: Optional[threading.Thread] = None
        if on_snapshot is not None:
            self.subscribe(on_snapshot)

    def subscribe(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    # =========================
    # Watch set
    # =========================

    def arm(self, path: str) -> bool:
        """Start watching one directory (non-recursive).

        Returns:
            True if a new watch was scheduled, False if the directory was
            already watched or could not be watched
        """
        with self._lock:
            if path in self.state.watches:
                return False
            try:
                watch = self.observer.schedule(self._handler, path, recursive=False)
            except OSError as e:
                logger.debug(f"Cannot watch {path}: {e}")
                return False
            self.state.watches[path] = watch
            logger.debug(f"Watching {path}")
            return True

    def _arm_tree(self, path: str) -> None:
        self.arm(path)
        try:
            with os.scandir(path) as it:
                subdirs = [entry.path for entry in it if entry.is_dir()]
        except OSError as e:
            logger.debug(f"Cannot list {path}: {e}")
            return
        for subdir in subdirs:
            self._arm_tree(subdir)

    def _disarm(self, path: str) -> None:
        watch = self.state.watches.pop(path, None)
        if watch is None:
            return
        try:
            self.observer.unschedule(watch)
        except (KeyError, OSError) as e:
            logger.debug(f"Failed to unschedule watch for {path}: {e}")

    def arm_recursive(self, root: str) -> None:
        """Re-arm ``root`` and every directory below it.

        Watches at or below ``root`` are cancelled first so that stale
        directories do not keep their watches.
        """
        with self._lock:
            for path in list(self.state.watches):
                if _is_within(path, root):
                    self._disarm(path)
            self._arm_tree(root)

    def reset(self) -> None:
        """Cancel every watch in the watch set."""
        with self._lock:
            for path in list(self.state.watches):
                self._disarm(path)

    # =========================
    # Event dispatch
    # =========================

    def handle_event(self, event: TreeChangeEvent) -> Optional[TreeNode]:
        """Rebuild the snapshot for one event and notify subscribers.

        Returns:
            The rebuilt snapshot, or None if no workspace is open
        """
        root = self.state.root
        if root is None:
            return None

        tree = build_tree(root)
        if tree is not None:
            for listener in list(self._listeners):
                try:
                    listener(tree)
                except Exception as e:
                    logger.warning(f"Snapshot listener failed: {e}")

        if event.is_directory and event.kind in (EVENT_TYPE_DELETED, EVENT_TYPE_MOVED):
            with self._lock:
                for path in list(self.state.watches):
                    if path != root and _is_within(path, event.path):
                        self._disarm(path)

        if event.kind in (EVENT_TYPE_CREATED, EVENT_TYPE_MOVED):
            target = event.target
            if _is_within(target, root) and os.path.isdir(target):
                self._arm_tree(target)

        return tree

    def process_pending(self) -> int:
        """Handle every queued event on the calling thread.

        Returns:
            Number of events handled
        """
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return handled
            if event is None:
                continue
            self.handle_event(event)
            handled += 1

    def _dispatch_loop(self) -> None:
        while True:
            event = self._events.get()
            if event is None:
                return
            self.handle_event(event)

    def start(self) -> None:
        """Start the observer and the dispatcher thread."""
        if self._dispatcher is not None:
            return
        if not self.observer.is_alive():
            try:
                self.observer.start()
            except OSError as e:
                # A scheduled directory vanished before its emitter started
                logger.debug(f"Failed to start observer: {e}")
        self._dispatcher = threading.Thread(
            target=self._dispatch_loop, name="remotedit-watch", daemon=True
        )
        self._dispatcher.start()

    def close(self) -> None:
        """Cancel all watches and stop the dispatcher and the observer."""
        self.reset()
        if self._dispatcher is not None:
            self._events.put(None)
            self._dispatcher.join(timeout=5)
            self._dispatcher = None
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout=5)
