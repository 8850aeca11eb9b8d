"""Command lines for the rclone sync tool and the process runner that executes them."""

import logging
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TOOL_NAME = "rclone"


@dataclass
class CommandResult:
    """Captured result of one external command."""

    returncode: int
    """Exit status of the process (127 when it could not be started)"""

    stdout: str = ""

    stderr: str = ""

    error: Optional[str] = None
    """Error message when the process failed, None on exit status 0"""

    @property
    def ok(self) -> bool:
        return self.error is None


CommandRunner = Callable[[str], CommandResult]


def _is_windows(platform: Optional[str]) -> bool:
    return (platform or sys.platform).startswith("win")


def resolve_tool_path(configured: Optional[str], platform: Optional[str] = None) -> str:
    """Resolve the configured rclone location to something executable.

    The setting may be a bare command name, the full executable path or the
    directory that contains the executable.

    Args:
        configured: Value from the settings record
        platform: Platform name as in ``sys.platform`` (defaults to the current one)

    Returns:
        Executable path or command name

    Examples:
        >>> resolve_tool_path("C:\\\\tools\\\\", platform="win32")
        'C:\\\\tools\\\\rclone.exe'
        >>> resolve_tool_path("C:\\\\tools\\\\rclone", platform="win32")
        'C:\\\\tools\\\\rclone.exe'
        >>> resolve_tool_path("rclone", platform="win32")
        'rclone'
    """
    windows = _is_windows(platform)
    separators = "\\/" if windows else "/"
    extension = ".exe" if windows else ""

    value = (configured or "").strip()
    if not value:
        return TOOL_NAME

    if value[-1] in separators:
        return value + TOOL_NAME + extension

    if any(sep in value for sep in separators):
        last_segment = re.split(f"[{re.escape(separators)}]", value)[-1]
        if last_segment.lower() == TOOL_NAME:
            return value + extension

    return value


def build_sync_command(
    executable: str, local_root: str, profile: str, base_path: str, folder_name: str
) -> str:
    """Build the one-way mirror command line (local root to remote folder)."""
    destination = f"{profile}:{base_path}/{folder_name}"
    return f'"{executable}" sync "{local_root}" "{destination}" --progress'


def build_config_command(
    executable: str, profile: str, host: str, user: str, secret: Optional[str] = None
) -> str:
    """Build the non-interactive command that (re)creates the sftp profile."""
    command = (
        f'"{executable}" config create {profile} sftp '
        f'host="{host}" user="{user}" port=22'
    )
    if secret:
        command += f' pass="{secret}"'
    return command + " --non-interactive"


def run_command(command: str, timeout: Optional[float] = None) -> CommandResult:
    """Run a command line through the shell and capture its output.

    Never raises for a failing process; the failure is reported through
    ``CommandResult.error`` so that callers can classify it.

    Args:
        command: Full command line
        timeout: Optional timeout in seconds

    Returns:
        CommandResult with exit status, stdout, stderr and error message
    """
    logger.debug(f"Running: {command}")
    try:
        proc = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        return CommandResult(
            returncode=-1,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            error=f"Command timed out after {timeout}s",
        )
    except OSError as e:
        return CommandResult(returncode=127, error=str(e))

    error = None
    if proc.returncode != 0:
        error = proc.stderr.strip() or f"Command exited with status {proc.returncode}"
    return CommandResult(
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        error=error,
    )


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
