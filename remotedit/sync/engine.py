"""Core sync engine mirroring a workspace to the remote server."""

import logging
import re
import time
from typing import Callable, Optional

from ..api import RemoteClient
from ..config import config
from ..exceptions import NoResponseError, RemoteAPIError
from ..output import SyncLog
from ..rclone import CommandRunner, build_sync_command, resolve_tool_path, run_command
from .outcome import (
    TOOL_NOT_FOUND_HELP,
    TRANSFER_ERROR_HELP,
    OutcomeKind,
    SyncOutcome,
    classify_error,
    filter_progress_output,
)
from .state import EngineState

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], RemoteClient]


def remote_folder_name(root: str) -> str:
    """Derive the remote folder name from the last segment of the workspace root."""
    return re.split(r"[\\/]", root.rstrip("\\/"))[-1]


class SyncEngine:
    """Mirrors a local workspace to its folder on the remote server.

    Every mirror runs the same steps: check the configuration, make sure the
    remote folder exists, run ``rclone sync`` and classify the result. The
    engine never raises for a failed mirror; it returns a SyncOutcome and
    writes what happened to the running log.
    """

    def __init__(
        self,
        client_factory: ClientFactory = RemoteClient,
        runner: CommandRunner = run_command,
        log: Optional[SyncLog] = None,
        profile_name: Optional[str] = None,
        remote_base_path: Optional[str] = None,
    ):
        """Initialize sync engine.

        Args:
            client_factory: Creates a remote client for a host
            runner: Runs the rclone command line
            log: Running output log shown to the user
            profile_name: rclone profile name (uses config if not provided)
            remote_base_path: Remote base directory (uses config if not provided)
        """
        self.client_factory = client_factory
        self.runner = runner
        self.log = log if log is not None else SyncLog()
        self.profile_name = profile_name or config.profile_name
        self.remote_base_path = remote_base_path or config.remote_base_path

    def _report(self, outcome: SyncOutcome) -> SyncOutcome:
        kind = outcome.kind
        if kind == OutcomeKind.SUCCESS:
            self.log.append("Sync complete")
            if outcome.advisory:
                self.log.append(f"rclone output:\n{outcome.advisory}")
        elif kind == OutcomeKind.TOOL_NOT_FOUND:
            self.log.append(f"Sync failed: {outcome.message}")
            self.log.append(TOOL_NOT_FOUND_HELP)
        elif kind == OutcomeKind.TRANSFER_ERROR:
            self.log.append(f"Sync failed: {outcome.message}")
            self.log.append(TRANSFER_ERROR_HELP)
        elif kind == OutcomeKind.DISCARDED:
            logger.debug(outcome.message)
        else:
            self.log.append(outcome.message)
        return outcome

    def sync_workspace(self, state: EngineState, wait: bool = False) -> SyncOutcome:
        """Mirror the open workspace to the remote server.

        Safe to call repeatedly: each call only mirrors the current local
        state. At most one mirror per workspace root runs at a time.

        Args:
            state: Engine state with the workspace root and credentials
            wait: If a mirror of the same root is running, wait for it to
                  finish instead of returning IN_PROGRESS

        Returns:
            SyncOutcome describing the attempt

        Examples:
            >>> engine = SyncEngine()
            >>> outcome = engine.sync_workspace(state)
            >>> if not outcome.ok:
            ...     print(outcome.message)
        """
        root = state.root
        credentials = state.credentials

        # Step 1: Preconditions, nothing is contacted when they fail
        if not root:
            return self._report(
                SyncOutcome(OutcomeKind.CONFIGURATION_ERROR, "No folder opened")
            )
        if not credentials.is_complete:
            return self._report(
                SyncOutcome(
                    OutcomeKind.CONFIGURATION_ERROR,
                    "Server settings incomplete: host and user are required",
                )
            )

        if not state.begin_sync(root, wait=wait):
            logger.debug(f"Sync of {root} already running")
            return SyncOutcome(OutcomeKind.IN_PROGRESS, "Sync already in progress")

        try:
            outcome = self._mirror(root, state)
        finally:
            state.end_sync(root)

        # The workspace may have been replaced while rclone was running
        if state.root != root:
            return self._report(
                SyncOutcome(
                    OutcomeKind.DISCARDED,
                    f"Discarded sync result for {root}: workspace changed",
                )
            )
        return self._report(outcome)

    def _mirror(self, root: str, state: EngineState) -> SyncOutcome:
        credentials = state.credentials
        start_time = time.time()

        # Step 2: Remote folder name
        folder_name = remote_folder_name(root)
        self.log.append(f"Syncing {root} to {credentials.host} ({folder_name})")

        # Step 3: Make sure the remote folder exists
        client = self.client_factory(credentials.host)
        try:
            response = client.check_folder(folder_name)
        except NoResponseError as e:
            return SyncOutcome(OutcomeKind.NO_RESPONSE, f"No response from server: {e}")
        except RemoteAPIError as e:
            return SyncOutcome(OutcomeKind.REMOTE_FOLDER_ERROR, f"Server error: {e}")
        finally:
            client.close()

        if not response.get("success"):
            error = str(response.get("error") or "unknown error")
            return SyncOutcome(
                OutcomeKind.REMOTE_FOLDER_ERROR, f"Remote folder error: {error}"
            )
        self.log.append(f"Remote folder ready: {response.get('folderPath', folder_name)}")

        # Step 4: Resolve the rclone executable
        executable = resolve_tool_path(credentials.sync_tool_path)

        # Step 5: One-way mirror
        command = build_sync_command(
            executable, root, self.profile_name, self.remote_base_path, folder_name
        )
        self.log.append("Running rclone sync...")
        result = self.runner(command)
        logger.debug(
            f"rclone finished with status {result.returncode} "
            f"after {time.time() - start_time:.2f}s"
        )

        # Step 6: Classify
        if result.error:
            return SyncOutcome(classify_error(result.error), result.error.strip())
        return SyncOutcome(
            OutcomeKind.SUCCESS,
            "Sync complete",
            advisory=filter_progress_output(result.stderr),
        )
