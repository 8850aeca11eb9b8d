"""Workspace controller tying the tree, watcher and sync engine together."""

import logging
import os
import shutil
from typing import Any, Callable, Optional

from .api import RemoteClient
from .credentials import CredentialStore, SyncCredentials
from .editor import Tab, TabManager
from .exceptions import WorkspaceError
from .explorer import ExplorerState
from .models import RunResult
from .output import SyncLog
from .rclone import CommandRunner, run_command
from .sync import (
    AutoSyncScheduler,
    EngineState,
    OutcomeKind,
    RemoteRunOrchestrator,
    SyncEngine,
    SyncOutcome,
)
from .sync.engine import ClientFactory
from .tree import ChangeWatcher, TreeNode, build_tree

logger = logging.getLogger(__name__)


class WorkspaceController:
    """Owns the engine state of one open workspace.

    Opening a folder builds its snapshot, arms the change watcher on every
    directory, runs an initial mirror and arms auto-sync. All mirrors go
    through the same SyncEngine so that they never overlap.

    Examples:
        >>> controller = WorkspaceController(CredentialStore())
        >>> tree = controller.open("/home/me/project")
        >>> result = controller.run("/home/me/project/main.py", "print('hi')")
        >>> controller.close()
    """

    def __init__(
        self,
        store: CredentialStore,
        client_factory: ClientFactory = RemoteClient,
        runner: CommandRunner = run_command,
        observer: Optional[Any] = None,
        log: Optional[SyncLog] = None,
        on_snapshot: Optional[Callable[[TreeNode], None]] = None,
    ):
        """Initialize the controller.

        Args:
            store: Credential store to load settings from and save them to
            client_factory: Creates remote clients for a host
            runner: Runs rclone command lines
            observer: watchdog observer for the change watcher
            log: Running output log
            on_snapshot: Called with every snapshot rebuilt after a change
        """
        self.store = store
        self.log = log if log is not None else SyncLog()
        self.state = EngineState(credentials=store.credentials)
        self.engine = SyncEngine(client_factory=client_factory, runner=runner, log=self.log)
        self.orchestrator = RemoteRunOrchestrator(self.engine)
        self.watcher = ChangeWatcher(self.state, observer=observer, on_snapshot=on_snapshot)
        self.scheduler = AutoSyncScheduler(self.state, self._auto_sync_tick)
        self.tree: Optional[TreeNode] = None
        self.explorer = ExplorerState()
        self.tabs = TabManager()
        self.watcher.subscribe(self._remember_tree)

    @property
    def root(self) -> Optional[str]:
        return self.state.root

    def _remember_tree(self, tree: TreeNode) -> None:
        if self.explorer.refresh(tree.path, tree):
            self.tree = tree

    def _auto_sync_tick(self) -> None:
        outcome = self.engine.sync_workspace(self.state, wait=False)
        if outcome.kind == OutcomeKind.IN_PROGRESS:
            logger.debug("Auto-sync tick skipped: sync in progress")

    # =========================
    # Workspace lifecycle
    # =========================

    def open(self, path: str, sync: bool = True, watch: bool = True) -> TreeNode:
        """Open ``path`` as the workspace, replacing any previous one.

        Args:
            path: Directory to open
            sync: Run an initial mirror and arm auto-sync
            watch: Arm the change watcher

        Returns:
            Snapshot of the opened directory

        Raises:
            WorkspaceError: If ``path`` is not a readable directory
        """
        root = os.path.abspath(path)
        tree = build_tree(root)
        if tree is None:
            raise WorkspaceError(f"Not a directory: {path}")

        self.watcher.reset()
        self.state.root = root
        self.tree = tree
        self.explorer.apply_workspace(root, tree)
        self.log.append(f"Opened workspace {root}")

        if watch:
            self.watcher.start()
            self.watcher.arm_recursive(root)

        if sync:
            self.engine.sync_workspace(self.state, wait=True)
            self.scheduler.arm(self.state.credentials.interval_seconds, immediate=False)
        return tree

    def refresh(self) -> Optional[TreeNode]:
        """Rebuild the snapshot of the open workspace."""
        if self.state.root is None:
            return None
        tree = build_tree(self.state.root)
        if self.explorer.refresh(self.state.root, tree):
            self.tree = tree
        return tree

    def close(self) -> None:
        self.scheduler.cancel()
        self.watcher.close()

    def __enter__(self) -> "WorkspaceController":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================
    # Settings, sync and run
    # =========================

    def apply_settings(self, credentials: SyncCredentials) -> bool:
        """Save new settings, re-arm auto-sync and mirror once.

        Returns:
            True if the rclone profile was provisioned
        """
        provisioned = self.store.save(credentials)
        if not provisioned:
            self.log.append("Could not create the rclone profile, see the next sync for details")
        self.state.credentials = credentials
        self.log.append(f"Server settings saved for {credentials.user}@{credentials.host}")
        if self.state.root is not None:
            self.engine.sync_workspace(self.state, wait=True)
            self.scheduler.arm(credentials.interval_seconds, immediate=False)
        return provisioned

    def sync(self, wait: bool = False) -> SyncOutcome:
        return self.engine.sync_workspace(self.state, wait=wait)

    def run(self, path: str, content: Optional[str] = None) -> RunResult:
        """Mirror the workspace and run ``path`` remotely.

        Args:
            path: File to run
            content: Editor content (the open tab's content, else the file
                on disk, if not provided)
        """
        path = os.path.abspath(path)
        if content is None:
            tab = self.tabs.get(path)
            content = tab.content if tab is not None else self.read_file(path)
        return self.orchestrator.run_remote(self.state, path, content)

    # =========================
    # Editor tabs
    # =========================

    def open_tab(self, path: str) -> Tab:
        """Open a workspace file in a tab, or activate its existing tab."""
        return self.tabs.open(os.path.abspath(path), self.read_file)

    def save_active_tab(self) -> Optional[Tab]:
        return self.tabs.save_active(self.save_file)

    def run_active_tab(self) -> RunResult:
        """Run the active tab's unsaved content remotely."""
        tab = self.tabs.active
        if tab is None:
            return RunResult.failed("No file open")
        return self.run(tab.path, tab.content)

    @property
    def title(self) -> str:
        return self.tabs.title(self.state.root)

    # =========================
    # File operations
    # =========================

    def read_file(self, path: str) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    def save_file(self, path: str, content: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)

    def create_file(self, parent_dir: str, name: str) -> str:
        full = os.path.join(parent_dir, name)
        with open(full, "w", encoding="utf-8"):
            pass
        return full

    def create_folder(self, parent_dir: str, name: str) -> str:
        full = os.path.join(parent_dir, name)
        os.makedirs(full, exist_ok=True)
        return full

    def rename_entry(self, old_path: str, new_name: str) -> str:
        """Rename a file or folder within its directory.

        Raises:
            WorkspaceError: If the target name already exists
        """
        new_path = os.path.join(os.path.dirname(old_path), new_name)
        if os.path.exists(new_path):
            raise WorkspaceError(f"Already exists: {new_path}")
        os.rename(old_path, new_path)
        return new_path

    def delete_entry(self, path: str) -> bool:
        """Delete a file or a folder with everything in it.

        Returns:
            False if nothing existed at ``path``
        """
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
            return True
        if os.path.lexists(path):
            os.unlink(path)
            return True
        return False
