"""Shared fixtures for remotedit tests."""

import tempfile
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from remotedit.credentials import SyncCredentials
from remotedit.rclone import CommandResult
from remotedit.sync import EngineState


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def credentials():
    """Complete credentials with auto-sync disabled."""
    return SyncCredentials(
        host="10.0.0.5",
        user="dev",
        secret="secret",
        sync_tool_path="rclone",
        interval_seconds=0,
    )


@pytest.fixture
def mock_client():
    """Remote client answering checkFolder and runCode successfully."""
    client = MagicMock()
    client.check_folder.return_value = {
        "success": True,
        "folderPath": "/home/remotedit/workspaces/project",
    }
    client.run_code.return_value = {
        "success": True,
        "output": "hello\n",
        "error": "",
        "returncode": 0,
    }
    return client


@pytest.fixture
def client_factory(mock_client):
    """Factory returning the mock client for any host."""
    return MagicMock(return_value=mock_client)


@pytest.fixture
def runner():
    """Command runner reporting a clean rclone run."""
    return MagicMock(return_value=CommandResult(returncode=0, stdout="", stderr=""))


@pytest.fixture
def workspace(temp_dir):
    """A small workspace folder named 'project'."""
    root = temp_dir / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.py").write_text("print('hi')\n")
    (root / "README.md").write_text("# project\n")
    return root


@pytest.fixture
def state(workspace, credentials):
    """Engine state with the workspace opened."""
    return EngineState(root=str(workspace), credentials=credentials)


class BlockingRunner:
    """Command runner that holds each rclone call until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = []

    def __call__(self, command):
        self.calls.append(command)
        self.started.set()
        self.release.wait(5)
        return CommandResult(returncode=0)


@pytest.fixture
def blocking_runner():
    runner = BlockingRunner()
    yield runner
    runner.release.set()
