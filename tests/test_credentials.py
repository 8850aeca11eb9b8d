"""Tests for the credential store."""

import json
from unittest.mock import Mock

import pytest

from remotedit.credentials import CredentialStore, SyncCredentials
from remotedit.rclone import CommandResult


@pytest.fixture
def default_file(temp_dir):
    path = temp_dir / "default_settings.json"
    path.write_text(
        json.dumps(
            {"ip": "", "user": "", "pass": "", "rclonePath": "rclone", "syncInterval": 60}
        )
    )
    return path


@pytest.fixture
def settings_file(temp_dir):
    return temp_dir / "config" / "server_settings.json"


@pytest.fixture
def ok_runner():
    return Mock(return_value=CommandResult(returncode=0))


@pytest.fixture
def store(settings_file, default_file, ok_runner):
    return CredentialStore(
        settings_path=settings_file,
        default_path=default_file,
        runner=ok_runner,
        profile_name="remotedit",
    )


class TestSyncCredentials:
    """Tests for the SyncCredentials record."""

    def test_to_dict_uses_on_disk_names(self, credentials):
        """Test the flat record keys."""
        assert credentials.to_dict() == {
            "ip": "10.0.0.5",
            "user": "dev",
            "pass": "secret",
            "rclonePath": "rclone",
            "syncInterval": 0,
        }

    def test_from_dict(self):
        """Test reading the flat record."""
        creds = SyncCredentials.from_dict(
            {"ip": "h", "user": "u", "pass": "p", "rclonePath": "/opt/", "syncInterval": 30}
        )

        assert creds.host == "h"
        assert creds.user == "u"
        assert creds.secret == "p"
        assert creds.sync_tool_path == "/opt/"
        assert creds.interval_seconds == 30

    @pytest.mark.parametrize(
        "value,expected", [(None, 60), ("abc", 60), ("45", 45), (-5, 0), (0, 0)]
    )
    def test_from_dict_interval(self, value, expected):
        """Test malformed intervals fall back to the default, negatives clamp."""
        assert SyncCredentials.from_dict({"syncInterval": value}).interval_seconds == expected

    def test_missing_tool_path_defaults(self):
        """Test an empty rclone path becomes the command name."""
        assert SyncCredentials.from_dict({"rclonePath": ""}).sync_tool_path == "rclone"

    @pytest.mark.parametrize(
        "host,user,complete",
        [("h", "u", True), ("", "u", False), ("h", "", False), ("  ", "u", False)],
    )
    def test_is_complete(self, host, user, complete):
        """Test host and user are both required."""
        assert SyncCredentials(host=host, user=user).is_complete is complete


class TestCredentialStoreLoad:
    """Tests for loading settings."""

    def test_first_load_seeds_from_default(self, store, settings_file):
        """Test a missing settings file is copied from the bundled default."""
        creds = store.load()

        assert settings_file.exists()
        assert creds.host == ""
        assert creds.interval_seconds == 60

    def test_missing_default_writes_empty_record(self, settings_file, temp_dir, ok_runner):
        """Test seeding works without the bundled default file."""
        store = CredentialStore(
            settings_path=settings_file,
            default_path=temp_dir / "nope.json",
            runner=ok_runner,
        )

        creds = store.load()

        assert settings_file.exists()
        assert creds == SyncCredentials()

    def test_load_existing(self, store, settings_file, credentials):
        """Test an existing file is read as-is."""
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text(json.dumps(credentials.to_dict()))

        assert store.load() == credentials

    def test_corrupt_file_falls_back_to_defaults(self, store, settings_file):
        """Test unparseable JSON does not raise."""
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{not json")

        assert store.load() == SyncCredentials()

    def test_non_object_falls_back_to_defaults(self, store, settings_file):
        """Test a JSON list is rejected."""
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("[1, 2]")

        assert store.load() == SyncCredentials()

    def test_credentials_property_loads_lazily(self, store, settings_file):
        """Test the in-memory copy is loaded on first access."""
        assert not settings_file.exists()
        assert store.credentials.host == ""
        assert settings_file.exists()


class TestCredentialStoreSave:
    """Tests for saving settings and provisioning."""

    def test_save_writes_record(self, store, settings_file, credentials):
        """Test the saved file holds the flat record."""
        store.save(credentials)

        assert json.loads(settings_file.read_text()) == credentials.to_dict()
        assert store.credentials is credentials

    def test_save_leaves_no_temp_files(self, store, settings_file, credentials):
        """Test the atomic write cleans up after itself."""
        store.save(credentials)

        assert [p.name for p in settings_file.parent.iterdir()] == ["server_settings.json"]

    def test_save_provisions_profile(self, store, ok_runner, credentials):
        """Test saving runs the rclone config command."""
        assert store.save(credentials) is True

        command = ok_runner.call_args[0][0]
        assert "config create remotedit sftp" in command
        assert 'host="10.0.0.5"' in command
        assert 'user="dev"' in command
        assert 'pass="secret"' in command

    def test_save_without_host_skips_provisioning(self, store, ok_runner):
        """Test nothing is run when no host is configured."""
        assert store.save(SyncCredentials(user="dev")) is False
        ok_runner.assert_not_called()

    def test_provisioning_failure_is_not_raised(self, store, ok_runner, settings_file, credentials):
        """Test a failing rclone keeps the saved settings."""
        ok_runner.return_value = CommandResult(
            returncode=127, error="bash: rclone: command not found"
        )

        assert store.save(credentials) is False
        assert json.loads(settings_file.read_text())["ip"] == "10.0.0.5"
