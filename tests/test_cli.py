"""Unit tests for the remotedit CLI commands."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from remotedit.cli import main
from remotedit.credentials import SyncCredentials
from remotedit.exceptions import WorkspaceError
from remotedit.models import RunResult
from remotedit.sync import OutcomeKind, SyncOutcome


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_store():
    """Mock the credential store used by the CLI."""
    with patch("remotedit.cli.CredentialStore") as mock_class:
        store = Mock()
        store.settings_path = Path("/tmp/remotedit/server_settings.json")
        store.save.return_value = True
        mock_class.return_value = store
        yield store


@pytest.fixture
def mock_controller(mock_store):
    """Mock the workspace controller used by the CLI."""
    with patch("remotedit.cli.WorkspaceController") as mock_class:
        controller = Mock()
        mock_class.return_value = controller
        yield controller


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "remotedit" in result.output
        for command in ["init", "status", "tree", "sync", "run", "watch"]:
            assert command in result.output


class TestInitCommand:
    """Tests for the init command."""

    def test_init_saves_settings(self, runner, mock_store):
        """Test init stores the settings and provisions the profile."""
        result = runner.invoke(
            main,
            [
                "init",
                "--host", "10.0.0.5",
                "--user", "dev",
                "--password", "pw",
                "--rclone-path", "/usr/local/bin/",
                "--interval", "30",
            ],
        )

        assert result.exit_code == 0
        assert "Configuration saved successfully" in result.output
        saved = mock_store.save.call_args[0][0]
        assert saved == SyncCredentials(
            host="10.0.0.5",
            user="dev",
            secret="pw",
            sync_tool_path="/usr/local/bin/",
            interval_seconds=30,
        )

    def test_init_prompts(self, runner, mock_store):
        """Test init asks for missing values interactively."""
        result = runner.invoke(main, ["init"], input="10.0.0.5\ndev\n\n\n\n")

        assert result.exit_code == 0
        saved = mock_store.save.call_args[0][0]
        assert saved.host == "10.0.0.5"
        assert saved.secret == ""
        assert saved.sync_tool_path == "rclone"
        assert saved.interval_seconds == 60

    def test_init_negative_interval(self, runner, mock_store):
        """Test a negative interval is rejected."""
        result = runner.invoke(
            main,
            ["init", "--host", "h", "--user", "u", "--password", "",
             "--rclone-path", "rclone", "--interval", "-1"],
        )

        assert result.exit_code == 1
        mock_store.save.assert_not_called()

    def test_init_provisioning_failure_warns(self, runner, mock_store):
        """Test settings are kept when the rclone profile fails."""
        mock_store.save.return_value = False

        result = runner.invoke(
            main,
            ["init", "--host", "h", "--user", "u", "--password", "",
             "--rclone-path", "rclone", "--interval", "60"],
        )

        assert result.exit_code == 0
        assert "could not be created" in result.output

    def test_init_write_failure(self, runner, mock_store):
        """Test an unwritable config directory fails the command."""
        mock_store.save.side_effect = OSError("read-only file system")

        result = runner.invoke(
            main,
            ["init", "--host", "h", "--user", "u", "--password", "",
             "--rclone-path", "rclone", "--interval", "60"],
        )

        assert result.exit_code == 1


class TestStatusCommand:
    """Tests for the status command."""

    def test_status_json_masks_password(self, runner, mock_store):
        """Test the password never appears in JSON output."""
        mock_store.load.return_value = SyncCredentials(
            host="10.0.0.5", user="dev", secret="pw", interval_seconds=60
        )

        result = runner.invoke(main, ["--json", "status"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ip"] == "10.0.0.5"
        assert data["pass"] == "***"

    def test_status_incomplete_warns(self, runner, mock_store):
        """Test missing settings point the user at init."""
        mock_store.load.return_value = SyncCredentials()

        result = runner.invoke(main, ["status"])

        assert result.exit_code == 0
        assert "remotedit init" in result.output


class TestTreeCommand:
    """Tests for the tree command."""

    def test_tree_json(self, runner, workspace):
        """Test the snapshot is printed as JSON."""
        result = runner.invoke(main, ["--json", "tree", str(workspace)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["name"] == "project"
        assert sorted(c["name"] for c in data["children"]) == ["README.md", "src"]

    def test_tree_rich(self, runner, workspace):
        """Test the rich rendering lists the entries."""
        result = runner.invoke(main, ["tree", str(workspace)])

        assert result.exit_code == 0
        assert "README.md" in result.output
        assert "main.py" in result.output


class TestSyncCommand:
    """Tests for the sync command."""

    def test_sync_success(self, runner, mock_controller, workspace):
        """Test a successful one-off mirror."""
        mock_controller.sync.return_value = SyncOutcome(OutcomeKind.SUCCESS, "Sync complete")

        result = runner.invoke(main, ["sync", str(workspace), "--no-progress"])

        assert result.exit_code == 0
        assert "Sync complete" in result.output
        mock_controller.open.assert_called_once_with(str(workspace), sync=False, watch=False)
        mock_controller.sync.assert_called_once_with(wait=True)
        mock_controller.close.assert_called_once()

    def test_sync_failure(self, runner, mock_controller, workspace):
        """Test a failed mirror exits non-zero."""
        mock_controller.sync.return_value = SyncOutcome(
            OutcomeKind.TOOL_NOT_FOUND, "bash: rclone: command not found"
        )

        result = runner.invoke(main, ["sync", str(workspace), "--no-progress"])

        assert result.exit_code == 1

    def test_sync_json(self, runner, mock_controller, workspace):
        """Test the outcome is printed as JSON."""
        mock_controller.sync.return_value = SyncOutcome(OutcomeKind.SUCCESS, "Sync complete")

        result = runner.invoke(main, ["--json", "sync", str(workspace)])

        assert result.exit_code == 0
        assert json.loads(result.output)["kind"] == "success"

    def test_sync_open_error(self, runner, mock_controller, workspace):
        """Test workspace errors are reported."""
        mock_controller.open.side_effect = WorkspaceError("Not a directory")

        result = runner.invoke(main, ["sync", str(workspace), "--no-progress"])

        assert result.exit_code == 1
        mock_controller.close.assert_called_once()


class TestRunCommand:
    """Tests for the run command."""

    def test_run_prints_output(self, runner, mock_controller, workspace):
        """Test remote stdout is printed and the exit code is 0."""
        mock_controller.run.return_value = RunResult(
            success=True, stdout="hello\n", exit_code=0
        )
        target = workspace / "src" / "main.py"

        result = runner.invoke(main, ["run", str(target), "-w", str(workspace)])

        assert result.exit_code == 0
        assert "hello" in result.output
        mock_controller.open.assert_called_once_with(
            str(workspace.resolve()), sync=False, watch=False
        )
        mock_controller.run.assert_called_once_with(str(target.resolve()))

    def test_run_propagates_exit_code(self, runner, mock_controller, workspace):
        """Test a failing remote run exits with its exit code."""
        mock_controller.run.return_value = RunResult(
            success=False, stderr="NameError\n", exit_code=2
        )

        result = runner.invoke(
            main, ["run", str(workspace / "src" / "main.py"), "-w", str(workspace)]
        )

        assert result.exit_code == 2

    def test_run_no_response(self, runner, mock_controller, workspace):
        """Test a missing server answer exits with 1."""
        mock_controller.run.return_value = RunResult.failed(
            "No response from server", no_response=True
        )

        result = runner.invoke(main, ["run", str(workspace / "README.md")])

        assert result.exit_code == 1

    def test_run_outside_workspace(self, runner, mock_controller, workspace, temp_dir):
        """Test files outside the workspace are refused."""
        outside = temp_dir / "outside.py"
        outside.write_text("x")

        result = runner.invoke(main, ["run", str(outside), "-w", str(workspace)])

        assert result.exit_code == 1
        mock_controller.run.assert_not_called()
