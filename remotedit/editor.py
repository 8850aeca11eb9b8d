"""Open editor tabs and language detection."""

import os
from dataclasses import dataclass
from typing import Callable, Optional

EXTENSION_LANGUAGES = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".py": "python",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".c": "c",
    ".java": "java",
    ".json": "json",
    ".md": "markdown",
    ".html": "html",
    ".css": "css",
    ".sh": "shell",
}


def detect_language(filename: str, content: Optional[str] = None) -> str:
    """Guess the editor language from the file extension, then the shebang.

    Examples:
        >>> detect_language("main.py")
        'python'
        >>> detect_language("run", "#!/usr/bin/env node")
        'javascript'
    """
    _, ext = os.path.splitext(filename.lower())
    if ext in EXTENSION_LANGUAGES:
        return EXTENSION_LANGUAGES[ext]
    if content and content.startswith("#!"):
        shebang = content.splitlines()[0]
        if "python" in shebang:
            return "python"
        if "node" in shebang:
            return "javascript"
        if "bash" in shebang or "sh" in shebang:
            return "shell"
    return "plaintext"


@dataclass
class Tab:
    path: str
    name: str
    content: str
    language: str
    dirty: bool = False


class TabManager:
    """Ordered set of open tabs with one active tab."""

    def __init__(self) -> None:
        self.tabs: list[Tab] = []
        self.active_path: Optional[str] = None

    def get(self, path: str) -> Optional[Tab]:
        for tab in self.tabs:
            if tab.path == path:
                return tab
        return None

    @property
    def active(self) -> Optional[Tab]:
        if self.active_path is None:
            return None
        return self.get(self.active_path)

    def open(self, path: str, reader: Callable[[str], str]) -> Tab:
        """Open a file in a tab, or activate its existing tab.

        Args:
            path: File path
            reader: Reads the file content
        """
        existing = self.get(path)
        if existing is not None:
            self.active_path = path
            return existing

        content = reader(path)
        name = os.path.basename(path)
        tab = Tab(path=path, name=name, content=content, language=detect_language(name, content))
        self.tabs.append(tab)
        self.active_path = path
        return tab

    def activate(self, path: str) -> bool:
        if self.get(path) is None:
            return False
        self.active_path = path
        return True

    def edit(self, path: str, content: str) -> None:
        tab = self.get(path)
        if tab is None:
            return
        if tab.content != content:
            tab.content = content
            tab.dirty = True

    def close(self, path: str, confirm: Optional[Callable[[Tab], bool]] = None) -> bool:
        """Close a tab, asking ``confirm`` first if it has unsaved changes.

        When the active tab closes, its right neighbour (or else left) becomes
        active.

        Returns:
            True if the tab was closed
        """
        for idx, tab in enumerate(self.tabs):
            if tab.path == path:
                break
        else:
            return False

        if tab.dirty and confirm is not None and not confirm(tab):
            return False

        del self.tabs[idx]
        if self.active_path == path:
            if idx < len(self.tabs):
                self.active_path = self.tabs[idx].path
            elif self.tabs:
                self.active_path = self.tabs[idx - 1].path
            else:
                self.active_path = None
        return True

    def save_active(self, writer: Callable[[str, str], None]) -> Optional[Tab]:
        """Write the active tab to disk and clear its dirty flag."""
        tab = self.active
        if tab is None:
            return None
        writer(tab.path, tab.content)
        tab.dirty = False
        return tab

    def title(self, root: Optional[str]) -> str:
        base = root or "No folder opened"
        tab = self.active
        if tab is None:
            return base
        return f"{base} - {tab.path}{' *' if tab.dirty else ''}"
