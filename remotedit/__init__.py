"""remotedit - Edit a local workspace, mirror it with rclone and run files remotely."""

from .api import RemoteClient
from .credentials import CredentialStore, SyncCredentials
from .editor import Tab, TabManager, detect_language
from .exceptions import (
    NoResponseError,
    RemoteAPIError,
    RemoteConfigError,
    RemoteEditError,
    RemoteInvalidResponseError,
    RemoteNetworkError,
    WorkspaceError,
)
from .explorer import ExplorerState
from .models import RunRequest, RunResult
from .rclone import resolve_tool_path
from .workspace import WorkspaceController

__all__ = [
    "RemoteClient",
    "CredentialStore",
    "SyncCredentials",
    "NoResponseError",
    "RemoteAPIError",
    "RemoteConfigError",
    "RemoteEditError",
    "RemoteInvalidResponseError",
    "RemoteNetworkError",
    "WorkspaceError",
    "RunRequest",
    "RunResult",
    "resolve_tool_path",
    "WorkspaceController",
    "ExplorerState",
    "Tab",
    "TabManager",
    "detect_language",
]
