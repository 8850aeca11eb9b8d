"""Configuration paths and constants for remotedit."""

import os
from pathlib import Path
from typing import Optional

# Port the remote run server listens on
DEFAULT_REMOTE_PORT: int = 5000

# Base directory on the remote host that holds one folder per workspace
DEFAULT_REMOTE_BASE_PATH: str = "/home/remotedit/workspaces"

# Name of the rclone remote profile created for the server
DEFAULT_PROFILE_NAME: str = "remotedit"

# Default auto-sync interval in seconds
DEFAULT_SYNC_INTERVAL: int = 60

SETTINGS_FILE_NAME = "server_settings.json"


class Config:
    """Resolves where remotedit keeps its files and which remote it talks to.

    Every value can be overridden through an environment variable so that
    tests and packaged builds can relocate the settings file.
    """

    def __init__(self) -> None:
        self.config_dir = self._get_config_dir()
        self.settings_path = self.config_dir / SETTINGS_FILE_NAME

    @staticmethod
    def _get_config_dir() -> Path:
        env_dir = os.environ.get("REMOTEDIT_CONFIG_DIR")
        if env_dir:
            return Path(env_dir)
        return Path.home() / ".config" / "remotedit"

    def get_config_path(self) -> Path:
        """Get the path of the persisted settings file."""
        return self.settings_path

    def get_default_settings_path(self) -> Path:
        """Get the path of the bundled default settings file."""
        return Path(__file__).parent / "data" / "default_settings.json"

    @property
    def remote_port(self) -> int:
        value = os.environ.get("REMOTEDIT_PORT")
        if value and value.isdigit():
            return int(value)
        return DEFAULT_REMOTE_PORT

    @property
    def remote_base_path(self) -> str:
        value: Optional[str] = os.environ.get("REMOTEDIT_REMOTE_BASE")
        return (value or DEFAULT_REMOTE_BASE_PATH).rstrip("/")

    @property
    def profile_name(self) -> str:
        return os.environ.get("REMOTEDIT_PROFILE") or DEFAULT_PROFILE_NAME


config = Config()
