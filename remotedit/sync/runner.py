"""Running a workspace file on the remote server."""

import logging
from typing import Optional

from ..exceptions import NoResponseError, RemoteAPIError
from ..models import RunRequest, RunResult
from .engine import ClientFactory, SyncEngine, remote_folder_name
from .outcome import OutcomeKind
from .state import EngineState

logger = logging.getLogger(__name__)


def relative_file_path(root: str, path: str) -> str:
    """Path of ``path`` relative to ``root`` with forward slashes.

    Examples:
        >>> relative_file_path("/home/me/proj", "/home/me/proj/src/main.py")
        'src/main.py'
        >>> relative_file_path("C:\\\\proj", "C:\\\\proj\\\\main.py")
        'main.py'
    """
    relative = path[len(root):] if path.startswith(root) else path
    return relative.lstrip("\\/").replace("\\", "/")


class RemoteRunOrchestrator:
    """Mirrors the workspace, then asks the server to run one file.

    The server never runs against a stale tree: if the mirror does not
    succeed, no run request is sent.
    """

    def __init__(
        self,
        engine: SyncEngine,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.engine = engine
        self.client_factory = client_factory or engine.client_factory

    @property
    def log(self):
        return self.engine.log

    def build_request(self, root: str, path: str, content: str) -> RunRequest:
        return RunRequest(
            folder_name=remote_folder_name(root),
            file_path=relative_file_path(root, path),
            content=content,
        )

    def run_remote(self, state: EngineState, path: str, content: str) -> RunResult:
        """Sync the workspace and run ``path`` remotely.

        Args:
            state: Engine state of the workspace
            path: Absolute path of the file to run
            content: Current editor content of the file

        Returns:
            RunResult with output, diagnostics and exit code
        """
        root = state.root
        outcome = self.engine.sync_workspace(state, wait=False)
        if not outcome.ok:
            self.log.append(f"Run aborted: {outcome.message}")
            return RunResult.failed(
                outcome.message, no_response=outcome.kind == OutcomeKind.NO_RESPONSE
            )

        # The mirrored tree must still be the open workspace
        if root is None or state.root != root:
            message = "Workspace changed during sync, run cancelled"
            self.log.append(f"Run aborted: {message}")
            return RunResult.failed(message)

        request = self.build_request(root, path, content)
        logger.debug(f"Run request: {request.folder_name}/{request.file_path}")
        self.log.append(f"Running {request.file_path} on {state.credentials.host}")

        client = self.client_factory(state.credentials.host)
        try:
            response = client.run_code(
                request.folder_name, request.file_path, request.content
            )
        except NoResponseError as e:
            self.log.append(f"No response from server: {e}")
            return RunResult.failed(f"No response from server: {e}", no_response=True)
        except RemoteAPIError as e:
            self.log.append(f"Run failed: {e}")
            return RunResult.failed(f"Run failed: {e}")
        finally:
            client.close()

        if not response:
            self.log.append("No response from server")
            return RunResult.failed("No response from server", no_response=True)

        result = RunResult.from_response(response)
        if result.success:
            self.log.append(f"Run finished with exit code {result.exit_code}")
        else:
            self.log.append(f"Run failed with exit code {result.exit_code}")
        return result
