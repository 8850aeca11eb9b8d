"""Sync engine for remotedit - workspace mirroring, auto-sync and remote runs."""

from .engine import SyncEngine, remote_folder_name
from .outcome import (
    TOOL_ERROR_PATTERNS,
    OutcomeKind,
    SyncOutcome,
    classify_error,
    filter_progress_output,
)
from .runner import RemoteRunOrchestrator, relative_file_path
from .scheduler import AutoSyncScheduler, RecurringTimer
from .state import EngineState

__all__ = [
    "SyncEngine",
    "SyncOutcome",
    "OutcomeKind",
    "TOOL_ERROR_PATTERNS",
    "classify_error",
    "filter_progress_output",
    "remote_folder_name",
    "AutoSyncScheduler",
    "RecurringTimer",
    "RemoteRunOrchestrator",
    "relative_file_path",
    "EngineState",
]
