"""Data models for remote run requests and results."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class RunRequest:
    """One request to execute a workspace file on the remote server."""

    folder_name: str
    """Remote workspace folder name"""

    file_path: str
    """Path relative to the workspace root, forward slashes, no leading separator"""

    content: str
    """Editor content of the file at the time of the request"""


@dataclass
class RunResult:
    """Outcome of a remote run as reported to the user."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None
    no_response: bool = False
    """True when the server did not answer, as opposed to a failed execution"""

    message: str = ""
    """Local explanation when the run never reached the server"""

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "RunResult":
        """Create a RunResult from a ``runCode`` response."""
        returncode = data.get("returncode")
        return cls(
            success=bool(data.get("success")),
            stdout=str(data.get("output") or ""),
            stderr=str(data.get("error") or ""),
            exit_code=returncode if isinstance(returncode, int) else None,
        )

    @classmethod
    def failed(cls, message: str, no_response: bool = False) -> "RunResult":
        return cls(success=False, message=message, no_response=no_response)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "no_response": self.no_response,
            "message": self.message,
        }
