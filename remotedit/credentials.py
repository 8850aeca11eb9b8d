"""Persisted server settings and provisioning of the rclone profile.

The settings record is the single source of truth for the remote identity.
It is stored as a flat JSON object in the user's config directory and seeded
from a default file shipped with the package on first run.
"""

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .config import DEFAULT_SYNC_INTERVAL, config
from .rclone import (
    TOOL_NAME,
    CommandRunner,
    build_config_command,
    resolve_tool_path,
    run_command,
)

logger = logging.getLogger(__name__)


@dataclass
class SyncCredentials:
    """Remote endpoint and sync tool settings."""

    host: str = ""
    """Hostname or IP address of the remote server"""

    user: str = ""
    """Login user on the remote server"""

    secret: str = ""
    """Password for the sftp profile (may be empty for key-based logins)"""

    sync_tool_path: str = TOOL_NAME
    """Configured rclone location: command name, executable or directory"""

    interval_seconds: int = DEFAULT_SYNC_INTERVAL
    """Auto-sync period in seconds, 0 disables auto-sync"""

    @property
    def is_complete(self) -> bool:
        return bool(self.host.strip() and self.user.strip())

    def to_dict(self) -> dict:
        """Convert to the flat record used on disk."""
        return {
            "ip": self.host,
            "user": self.user,
            "pass": self.secret,
            "rclonePath": self.sync_tool_path,
            "syncInterval": self.interval_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SyncCredentials":
        """Create SyncCredentials from the flat on-disk record."""
        return cls(
            host=str(data.get("ip") or ""),
            user=str(data.get("user") or ""),
            secret=str(data.get("pass") or ""),
            sync_tool_path=str(data.get("rclonePath") or TOOL_NAME),
            interval_seconds=_parse_interval(data.get("syncInterval")),
        )


def _parse_interval(value: Any) -> int:
    try:
        interval = int(value)
    except (TypeError, ValueError):
        return DEFAULT_SYNC_INTERVAL
    return max(interval, 0)


class CredentialStore:
    """Loads and saves SyncCredentials and keeps the rclone profile in step.

    Examples:
        >>> store = CredentialStore()
        >>> creds = store.load()
        >>> creds.host = "10.0.0.5"
        >>> provisioned = store.save(creds)
    """

    def __init__(
        self,
        settings_path: Optional[Path] = None,
        default_path: Optional[Path] = None,
        runner: CommandRunner = run_command,
        profile_name: Optional[str] = None,
    ):
        """Initialize the store.

        Args:
            settings_path: Persisted settings file (defaults to the config dir)
            default_path: Bundled default settings file
            runner: Command runner used for profile provisioning
            profile_name: rclone profile to provision
        """
        self.settings_path = settings_path or config.get_config_path()
        self.default_path = default_path or config.get_default_settings_path()
        self.runner = runner
        self.profile_name = profile_name or config.profile_name
        self._credentials: Optional[SyncCredentials] = None

    @property
    def credentials(self) -> SyncCredentials:
        """Credentials held in memory, loading them on first access."""
        if self._credentials is None:
            return self.load()
        return self._credentials

    def _seed_from_default(self) -> None:
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        if self.default_path.exists():
            shutil.copyfile(self.default_path, self.settings_path)
            logger.debug(f"Seeded settings from {self.default_path}")
        else:
            self._write_atomic(SyncCredentials().to_dict())
            logger.debug("Bundled default settings missing, wrote empty settings")

    def load(self) -> SyncCredentials:
        """Load credentials from disk, seeding the file from defaults if absent.

        Returns:
            Loaded credentials (defaults if the file cannot be parsed)
        """
        if not self.settings_path.exists():
            self._seed_from_default()

        try:
            with open(self.settings_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings record is not an object")
            credentials = SyncCredentials.from_dict(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load settings from {self.settings_path}: {e}")
            credentials = SyncCredentials()

        self._credentials = credentials
        return credentials

    def _write_atomic(self, data: dict) -> None:
        directory = self.settings_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=".settings-", suffix=".tmp", dir=str(directory)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.settings_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def save(self, credentials: SyncCredentials) -> bool:
        """Persist credentials and re-provision the rclone profile.

        The settings count as saved even when provisioning fails; the next
        mirror attempt reports the real error.

        Args:
            credentials: Credentials to store

        Returns:
            True if the rclone profile was provisioned, False otherwise
        """
        self._write_atomic(credentials.to_dict())
        self._credentials = credentials
        logger.debug(f"Saved settings to {self.settings_path}")
        return self.provision(credentials)

    def provision(self, credentials: SyncCredentials) -> bool:
        """Create or replace the rclone sftp profile for these credentials."""
        if not credentials.host:
            logger.debug("No host configured, skipping profile provisioning")
            return False

        executable = resolve_tool_path(credentials.sync_tool_path)
        command = build_config_command(
            executable,
            self.profile_name,
            credentials.host,
            credentials.user,
            credentials.secret or None,
        )
        result = self.runner(command)
        if not result.ok:
            logger.warning(
                f"Failed to provision rclone profile '{self.profile_name}': "
                f"{result.error}"
            )
            return False
        logger.debug(f"Provisioned rclone profile '{self.profile_name}'")
        return True
