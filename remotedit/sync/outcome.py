"""Classification of mirror attempts into sync outcomes.

rclone does not report failures in a structured way, so a failed run is
classified by matching its error text against ``TOOL_ERROR_PATTERNS``. The
table is best-effort: shell and OS messages depend on the platform and its
locale. Text that matches nothing is a plain transfer error.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    CONFIGURATION_ERROR = "configuration_error"
    REMOTE_FOLDER_ERROR = "remote_folder_error"
    TOOL_NOT_FOUND = "tool_not_found"
    TRANSFER_ERROR = "transfer_error"
    NO_RESPONSE = "no_response"
    IN_PROGRESS = "in_progress"
    DISCARDED = "discarded"


@dataclass
class SyncOutcome:
    """Result of one mirror attempt."""

    kind: OutcomeKind
    message: str = ""
    """Error text or short description"""

    advisory: str = ""
    """Non-fatal diagnostic output left after filtering progress lines"""

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "advisory": self.advisory}


# Ordered: the first matching pattern decides. The config-section message
# comes from an installed rclone with a missing profile, so it must win over
# the generic "cannot find" phrases below.
TOOL_ERROR_PATTERNS: list[tuple[re.Pattern, OutcomeKind]] = [
    (re.compile(r"didn't find section in config file", re.I), OutcomeKind.TRANSFER_ERROR),
    (re.compile(r"command not found", re.I), OutcomeKind.TOOL_NOT_FOUND),
    (re.compile(r"^(/bin/)?sh: \d+: .+: not found", re.I | re.M), OutcomeKind.TOOL_NOT_FOUND),
    (re.compile(r"is not recognized as an internal or external command", re.I), OutcomeKind.TOOL_NOT_FOUND),
    (re.compile(r"system cannot find the (specified )?file", re.I), OutcomeKind.TOOL_NOT_FOUND),
    (re.compile(r"系统找不到指定的文件"), OutcomeKind.TOOL_NOT_FOUND),
    (re.compile(r"不是内部或外部命令"), OutcomeKind.TOOL_NOT_FOUND),
]

PROGRESS_PREFIXES = (
    "Transferred:",
    "Transferring:",
    "Elapsed time:",
    "Checking:",
    "Checks:",
    "Deleted:",
    "Renamed:",
    "*",
)

TOOL_NOT_FOUND_HELP = (
    "rclone was not found. Set the rclone path in the server settings to the "
    "executable or its folder (for example C:\\tools\\rclone\\rclone.exe or "
    "/usr/local/bin/rclone). Download rclone from https://rclone.org/downloads/"
)

TRANSFER_ERROR_HELP = (
    "Sync failed. Check that the server is reachable, that the user and "
    "password are correct, that SSH/SFTP is available on port 22 and that "
    "the remote base folder exists."
)


def classify_error(message: Optional[str]) -> OutcomeKind:
    """Classify the error text of a failed rclone run.

    Args:
        message: Error text from the process runner

    Returns:
        Matching OutcomeKind, TRANSFER_ERROR when nothing matches
    """
    if not message:
        return OutcomeKind.TRANSFER_ERROR
    for pattern, kind in TOOL_ERROR_PATTERNS:
        if pattern.search(message):
            return kind
    return OutcomeKind.TRANSFER_ERROR


def filter_progress_output(text: Optional[str]) -> str:
    """Drop rclone progress lines from diagnostic output.

    Examples:
        >>> filter_progress_output("Transferred: 3 files\\nElapsed time: 2s\\npermission denied: /x")
        'permission denied: /x'
    """
    if not text:
        return ""
    kept = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(PROGRESS_PREFIXES):
            continue
        kept.append(stripped)
    return "\n".join(kept)
