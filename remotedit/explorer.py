"""Explorer state for the file tree view."""

from typing import Optional

from .tree import TreeNode

# Folders that stay collapsed even when the user expands them
ALWAYS_COLLAPSED = frozenset({"node_modules", ".git", ".venv", "venv", "__pycache__"})

NO_FOLDER_LABEL = "No folder opened"


class ExplorerState:
    """Which folders are expanded and which tree is shown.

    Snapshots are replaced wholesale; expansion is kept by path so that a
    refresh after a filesystem change does not collapse the view.
    """

    def __init__(self) -> None:
        self.root: Optional[str] = None
        self.tree: Optional[TreeNode] = None
        self.expanded: set[str] = set()

    @property
    def label(self) -> str:
        return self.root or NO_FOLDER_LABEL

    def apply_workspace(self, root: str, tree: TreeNode) -> None:
        """Show a newly opened workspace with only its root expanded."""
        self.root = root
        self.tree = tree
        self.expanded = {root}

    def refresh(self, root: str, tree: Optional[TreeNode]) -> bool:
        """Replace the shown tree if it belongs to the open workspace.

        Returns:
            True if the tree was replaced
        """
        if root != self.root or tree is None:
            return False
        self.tree = tree
        return True

    def is_expanded(self, node: TreeNode) -> bool:
        if not node.is_folder or node.name in ALWAYS_COLLAPSED:
            return False
        return node.path in self.expanded

    def toggle(self, path: str) -> bool:
        """Expand or collapse a folder.

        Returns:
            True if the folder is expanded afterwards
        """
        if path in self.expanded:
            self.expanded.discard(path)
            return False
        self.expanded.add(path)
        return True

    def visible_rows(self) -> list[tuple[int, TreeNode, bool]]:
        """Flatten the shown tree into ``(depth, node, expanded)`` rows."""
        rows: list[tuple[int, TreeNode, bool]] = []
        if self.tree is None:
            return rows

        def walk(node: TreeNode, depth: int) -> None:
            expanded = self.is_expanded(node)
            rows.append((depth, node, expanded))
            if expanded:
                for child in node.children:
                    walk(child, depth + 1)

        walk(self.tree, 0)
        return rows
