"""Immutable snapshots of a workspace directory tree."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class TreeNode:
    """One file or folder of a snapshot.

    ``path`` is absolute and unique within a snapshot. Folders carry their
    children in directory-listing order; files have no children.
    """

    name: str
    path: str
    kind: NodeKind
    children: tuple["TreeNode", ...] = ()

    @property
    def is_folder(self) -> bool:
        return self.kind == NodeKind.FOLDER

    def find(self, path: str) -> Optional["TreeNode"]:
        """Return the node with the given absolute path, if it is in this tree."""
        if self.path == path:
            return self
        for child in self.children:
            if child.is_folder and not path.startswith(child.path):
                continue
            found = child.find(path)
            if found is not None:
                return found
        return None

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "path": self.path, "type": self.kind.value}
        if self.is_folder:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def _list_children(dir_path: str) -> tuple[TreeNode, ...]:
    try:
        with os.scandir(dir_path) as it:
            entries = list(it)
    except OSError as e:
        logger.debug(f"Cannot list {dir_path}: {e}")
        return ()

    children: list[TreeNode] = []
    for entry in entries:
        full = os.path.join(dir_path, entry.name)
        try:
            if entry.is_dir():
                children.append(
                    TreeNode(
                        name=entry.name,
                        path=full,
                        kind=NodeKind.FOLDER,
                        children=_list_children(full),
                    )
                )
            elif entry.is_file():
                children.append(TreeNode(name=entry.name, path=full, kind=NodeKind.FILE))
        except OSError as e:
            # Entry vanished between listing and stat
            logger.debug(f"Skipping {full}: {e}")
    return tuple(children)


def build_tree(dir_path: str) -> Optional[TreeNode]:
    """Walk a directory recursively and build a snapshot of it.

    Args:
        dir_path: Directory to snapshot

    Returns:
        Root TreeNode, or None if ``dir_path`` is not a readable directory
    """
    if not os.path.isdir(dir_path):
        return None
    return TreeNode(
        name=os.path.basename(os.path.normpath(dir_path)),
        path=dir_path,
        kind=NodeKind.FOLDER,
        children=_list_children(dir_path),
    )
